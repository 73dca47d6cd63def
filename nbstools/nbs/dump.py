import warnings
from typing import BinaryIO, List, Optional, TypeVar

from nbstools import song
from nbstools.errors import InvalidFormat, MissingField
from nbstools.utils import wrap_int16

from . import construct
from .primitives import translate_errors

T = TypeVar("T")

# Ticks and layer indices are reached through signed 16-bit jumps
MAX_COORDINATE = 2 ** 15 - 1


def encode(song_: song.Song, stream: BinaryIO) -> None:
    """Write a whole NBS file to a binary stream, using the song's format.
    Header fields are written as they are, call Song.update() beforehand to
    bring them in line with the notes and layers"""
    format_ = song_.format
    dump_header(song_.header, format_, stream)
    dump_note_blocks(song_.note_blocks, format_, stream)
    layer_count = len(song_.note_blocks.layers)
    if song_.header.layer_count != layer_count:
        warnings.warn(
            f"The header says there are {song_.header.layer_count} layers but "
            f"{layer_count} are being written, call Song.update() to fix the "
            "header"
        )
    dump_layer_table(song_.note_blocks.layers, format_, stream)
    dump_custom_instruments(song_.custom_instruments, stream)


def require(value: Optional[T], field_name: str, format_: song.NbsFormat) -> T:
    if value is None:
        raise MissingField(field_name, format_)

    return value


def dump_header(
    header: song.Header, format_: song.NbsFormat, stream: BinaryIO
) -> None:
    raw = make_raw_header(header, format_)
    with translate_errors():
        construct.header.build_stream(raw, stream)


def make_raw_header(header: song.Header, format_: song.NbsFormat) -> construct.Header:
    if format_.is_extended:
        legacy_song_length = 0
        version: Optional[int] = require(
            header.version_number, "version_number", format_
        )
        if version != format_.version:
            raise InvalidFormat(
                f"The header says version {version} but the song is being "
                f"written as {format_}, call Song.update() to fix the header"
            )
        vanilla_instrument_count: Optional[int] = require(
            header.vanilla_instrument_count, "vanilla_instrument_count", format_
        )
        loop: Optional[bool] = require(header.loop, "loop", format_)
        max_loop_count: Optional[int] = require(
            header.max_loop_count, "max_loop_count", format_
        )
        loop_start_tick: Optional[int] = require(
            header.loop_start_tick, "loop_start_tick", format_
        )
    else:
        legacy_song_length = require(
            header.legacy_song_length, "legacy_song_length", format_
        )
        if legacy_song_length == 0:
            raise InvalidFormat(
                "A legacy song length of 0 would make the file read as the "
                "extended format"
            )
        version = None
        vanilla_instrument_count = None
        loop = None
        max_loop_count = None
        loop_start_tick = None

    if format_.is_extended and format_.has_version(3):
        song_length: Optional[int] = require(
            header.song_length, "song_length", format_
        )
    else:
        song_length = None

    return construct.Header(
        legacy_song_length=legacy_song_length,
        version=version,
        vanilla_instrument_count=vanilla_instrument_count,
        song_length=song_length,
        layer_count=header.layer_count,
        song_name=header.song_name,
        song_author=header.song_author,
        original_song_author=header.original_song_author,
        song_description=header.song_description,
        tempo=header.tempo,
        auto_saving=header.auto_saving,
        auto_saving_duration=header.auto_saving_duration,
        time_signature=header.time_signature,
        minutes_spent=header.minutes_spent,
        left_clicks=header.left_clicks,
        right_clicks=header.right_clicks,
        note_blocks_added=header.note_blocks_added,
        note_blocks_removed=header.note_blocks_removed,
        imported_file_name=header.imported_file_name,
        loop=loop,
        max_loop_count=max_loop_count,
        loop_start_tick=loop_start_tick,
    )


def dump_note_blocks(
    note_blocks: song.NoteBlocks, format_: song.NbsFormat, stream: BinaryIO
) -> None:
    rows = make_note_grid(note_blocks, format_)
    with translate_errors():
        construct.note_grid.build_stream(
            rows, stream, version=format_.effective_version
        )


def make_note_grid(
    note_blocks: song.NoteBlocks, format_: song.NbsFormat
) -> List[construct.TickJump]:
    """Scan every tick from 0 to the last one, and every layer in order
    within each tick. Ticks without notes leave no trace, the next row's
    jump skips over them"""
    for index, layer in enumerate(note_blocks.layers):
        if not layer.notes:
            continue

        if index > MAX_COORDINATE:
            raise InvalidFormat(
                f"Layer {index} has notes but layers past {MAX_COORDINATE} "
                "can't be reached"
            )

        first_tick = next(iter(layer.notes))
        if first_tick < 0:
            raise InvalidFormat(
                f"Note on layer {index} is at a negative tick ({first_tick})"
            )

        last_tick = layer.last_tick
        if last_tick is not None and last_tick > MAX_COORDINATE:
            raise InvalidFormat(
                f"Note on layer {index} is at tick {last_tick}, past the "
                f"last tick a file can hold ({MAX_COORDINATE})"
            )

    rows = []
    tick_cursor = -1
    for tick in range(note_blocks.calculate_length() + 1):
        layer_jumps = []
        layer_cursor = -1
        for index, layer in enumerate(note_blocks.layers):
            note = layer.notes.get(tick)
            if note is None:
                continue

            layer_jumps.append(
                construct.LayerJump(
                    jump=wrap_int16(index - layer_cursor),
                    note=make_raw_note(note, format_),
                )
            )
            layer_cursor = index

        if layer_jumps:
            layer_jumps.append(construct.LayerJump(jump=0, note=None))
            rows.append(
                construct.TickJump(
                    jump=wrap_int16(tick - tick_cursor), layers=layer_jumps
                )
            )
            tick_cursor = tick

    rows.append(construct.TickJump(jump=0, layers=None))
    return rows


def make_raw_note(note: song.Note, format_: song.NbsFormat) -> construct.Note:
    if format_.has_version(4):
        velocity: Optional[int] = require(note.velocity, "velocity", format_)
        panning: Optional[int] = require(note.panning, "panning", format_)
        pitch: Optional[int] = require(note.pitch, "pitch", format_)
    else:
        velocity = panning = pitch = None

    return construct.Note(
        instrument=note.instrument.id,
        key=note.key,
        velocity=velocity,
        panning=panning,
        pitch=pitch,
    )


def dump_layer_table(
    layers: List[song.Layer], format_: song.NbsFormat, stream: BinaryIO
) -> None:
    for layer in layers:
        raw = make_raw_layer(layer, format_)
        with translate_errors():
            construct.layer.build_stream(
                raw, stream, version=format_.effective_version
            )


def make_raw_layer(layer: song.Layer, format_: song.NbsFormat) -> construct.Layer:
    return construct.Layer(
        name=layer.name,
        locked=(
            require(layer.locked, "locked", format_)
            if format_.has_version(4)
            else None
        ),
        volume=require(layer.volume, "volume", format_),
        stereo=(
            require(layer.stereo, "stereo", format_)
            if format_.has_version(2)
            else None
        ),
    )


def dump_custom_instruments(
    instruments: List[song.CustomInstrumentEntry], stream: BinaryIO
) -> None:
    raw_instruments = [
        construct.CustomInstrument(
            name=i.name,
            file_name=i.file_name,
            pitch=i.pitch,
            press_key=i.press_key,
        )
        for i in instruments
    ]
    with translate_errors():
        construct.custom_instruments.build_stream(raw_instruments, stream)
