"""The NBS format described using construct.
see https://construct.readthedocs.io/en/latest/index.html

Structures that depend on the format version read it from the ``version``
context parameter, pass it to ``parse_stream`` / ``build_stream`` as a
keyword argument. The legacy format uses version 0."""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

import construct as c
import construct_typed as ct

from .primitives import Bool, Byte, Int8, Int16, Int32, String

is_extended = c.this.legacy_song_length == 0


Condition = Callable[[c.Container], bool]


def has_header_version(minimum: int) -> Condition:
    """For fields that follow the version byte in the header"""
    return lambda ctx: ctx.version is not None and ctx.version >= minimum


def has_version(minimum: int) -> Condition:
    """For fields outside the header, the version comes as a parameter"""
    return lambda ctx: ctx._params.version >= minimum


@dataclass
class Header(ct.DataclassMixin):
    legacy_song_length: int = ct.csfield(Int16)
    version: Optional[int] = ct.csfield(c.If(is_extended, Int8))
    vanilla_instrument_count: Optional[int] = ct.csfield(c.If(is_extended, Byte))
    song_length: Optional[int] = ct.csfield(c.If(has_header_version(3), Int16))
    layer_count: int = ct.csfield(Int16)
    song_name: str = ct.csfield(String)
    song_author: str = ct.csfield(String)
    original_song_author: str = ct.csfield(String)
    song_description: str = ct.csfield(String)
    tempo: int = ct.csfield(Int16)
    auto_saving: bool = ct.csfield(Bool)
    auto_saving_duration: int = ct.csfield(Byte)
    time_signature: int = ct.csfield(Byte)
    minutes_spent: int = ct.csfield(Int32)
    left_clicks: int = ct.csfield(Int32)
    right_clicks: int = ct.csfield(Int32)
    note_blocks_added: int = ct.csfield(Int32)
    note_blocks_removed: int = ct.csfield(Int32)
    imported_file_name: str = ct.csfield(String)
    loop: Optional[bool] = ct.csfield(c.If(is_extended, Bool))
    max_loop_count: Optional[int] = ct.csfield(c.If(is_extended, Byte))
    loop_start_tick: Optional[int] = ct.csfield(c.If(is_extended, Int16))


header = ct.DataclassStruct(Header)


@dataclass
class Note(ct.DataclassMixin):
    instrument: int = ct.csfield(Byte)
    key: int = ct.csfield(Byte)
    velocity: Optional[int] = ct.csfield(c.If(has_version(4), Byte))
    panning: Optional[int] = ct.csfield(c.If(has_version(4), Byte))
    pitch: Optional[int] = ct.csfield(c.If(has_version(4), Int16))


# The note grid is a list of rows, one per tick that has notes in it. Each
# row starts with the distance from the previous row's tick and lists its
# notes, each preceded by the distance from the previous note's layer. A
# jump of 0 ends a row, a row that starts with a jump of 0 ends the grid.


@dataclass
class LayerJump(ct.DataclassMixin):
    jump: int = ct.csfield(Int16)
    note: Optional[Note] = ct.csfield(
        c.If(c.this.jump != 0, ct.DataclassStruct(Note))
    )


def is_terminator(obj: Any, lst: list, ctx: c.Container) -> bool:
    return obj.jump == 0


@dataclass
class TickJump(ct.DataclassMixin):
    jump: int = ct.csfield(Int16)
    layers: Optional[List[LayerJump]] = ct.csfield(
        c.If(
            c.this.jump != 0,
            c.RepeatUntil(is_terminator, ct.DataclassStruct(LayerJump)),
        )
    )


note_grid = c.RepeatUntil(is_terminator, ct.DataclassStruct(TickJump))


@dataclass
class Layer(ct.DataclassMixin):
    name: str = ct.csfield(String)
    locked: Optional[bool] = ct.csfield(c.If(has_version(4), Bool))
    volume: int = ct.csfield(Byte)
    stereo: Optional[int] = ct.csfield(c.If(has_version(2), Byte))


layer = ct.DataclassStruct(Layer)


@dataclass
class CustomInstrument(ct.DataclassMixin):
    name: str = ct.csfield(String)
    file_name: str = ct.csfield(String)
    pitch: int = ct.csfield(Byte)
    press_key: bool = ct.csfield(Bool)


custom_instruments = c.PrefixedArray(Byte, ct.DataclassStruct(CustomInstrument))
