"""
Read and write Note Block Studio songs
"""
from .errors import InvalidFormat, InvalidString, MissingField, NbsError, StreamFailure
from .nbs import decode, dump_nbs, encode, guess_format, load_nbs
from .song import (
    CustomInstrument,
    CustomInstrumentEntry,
    Header,
    Layer,
    NbsFormat,
    Note,
    NoteBlocks,
    Song,
    VanillaInstrument,
    VanillaKind,
)
from .version import __version__
