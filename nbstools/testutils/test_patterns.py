import tempfile
from contextlib import contextmanager
from io import BytesIO
from pathlib import Path
from typing import Callable, ContextManager, Iterator

from hypothesis import note

from nbstools import song
from nbstools.nbs import decode, dump_nbs, encode, guess_format, load_nbs


@contextmanager
def open_temp_dir() -> Iterator[Path]:
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def encode_to_bytes(song_: song.Song) -> bytes:
    stream = BytesIO()
    encode(song_, stream)
    return stream.getvalue()


def decode_from_bytes(bytes_: bytes) -> song.Song:
    return decode(BytesIO(bytes_))


def dump_and_load_then_compare(
    song_: song.Song,
    temp_path: Callable[[], ContextManager[Path]] = open_temp_dir,
) -> None:
    with temp_path() as folder_path:
        file_path = folder_path / "song.nbs"
        dump_nbs(song_, file_path)
        note(f"Wrote to {file_path} :\n{file_path.read_bytes().hex(' ')}")
        assert guess_format(file_path) == song_.format
        recovered_song = load_nbs(file_path)
        assert recovered_song == song_
