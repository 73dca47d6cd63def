from pathlib import Path

from nbstools import song

from .dump import encode
from .load import decode


def load_nbs(path: Path) -> song.Song:
    with path.open(mode="rb") as f:
        return decode(f)


def dump_nbs(song_: song.Song, path: Path) -> None:
    with path.open(mode="wb") as f:
        encode(song_, f)
