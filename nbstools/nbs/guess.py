from pathlib import Path

from nbstools.song import NbsFormat

from .primitives import Int8, Int16


def guess_format(path: Path) -> NbsFormat:
    """Tell legacy and extended files apart by looking at the first bytes
    only, the rest of the file is not checked"""
    with path.open(mode="rb") as f:
        leading_bytes = f.read(3)

    if len(leading_bytes) < 2:
        raise ValueError("File is too short to be an NBS file")

    if Int16.parse(leading_bytes[:2]) != 0:
        return NbsFormat.legacy()

    if len(leading_bytes) < 3:
        raise ValueError("File ends right before its version number")

    return NbsFormat.extended(Int8.parse(leading_bytes[2:]))
