import warnings
from itertools import takewhile
from typing import BinaryIO, List

from nbstools import song
from nbstools.errors import InvalidFormat
from nbstools.utils import wrap_int16

from . import construct
from .primitives import translate_errors


def decode(stream: BinaryIO) -> song.Song:
    """Read a whole NBS file from a binary stream"""
    header = load_header(stream)
    vanilla_instrument_count = header.vanilla_instrument_count_for_format()
    note_blocks = load_note_blocks(
        stream,
        format_=header.format,
        layer_count=header.layer_count,
        vanilla_instrument_count=vanilla_instrument_count,
    )
    load_layer_table(stream, note_blocks.layers, header.format)
    custom_instruments = load_custom_instruments(stream, vanilla_instrument_count)
    return song.Song(
        header=header,
        note_blocks=note_blocks,
        custom_instruments=custom_instruments,
    )


def load_header(stream: BinaryIO) -> song.Header:
    with translate_errors():
        raw = construct.header.parse_stream(stream)

    format_ = song.NbsFormat(version=raw.version)
    if format_.effective_version > song.LATEST_VERSION:
        warnings.warn(
            f"{format_} is newer than the latest known version "
            f"({song.LATEST_VERSION}), decoding it as if it were the latest"
        )

    return song.Header(
        format=format_,
        legacy_song_length=None if format_.is_extended else raw.legacy_song_length,
        version_number=raw.version,
        vanilla_instrument_count=raw.vanilla_instrument_count,
        song_length=raw.song_length,
        layer_count=raw.layer_count,
        song_name=raw.song_name,
        song_author=raw.song_author,
        original_song_author=raw.original_song_author,
        song_description=raw.song_description,
        tempo=raw.tempo,
        auto_saving=raw.auto_saving,
        auto_saving_duration=raw.auto_saving_duration,
        time_signature=raw.time_signature,
        minutes_spent=raw.minutes_spent,
        left_clicks=raw.left_clicks,
        right_clicks=raw.right_clicks,
        note_blocks_added=raw.note_blocks_added,
        note_blocks_removed=raw.note_blocks_removed,
        imported_file_name=raw.imported_file_name,
        loop=raw.loop,
        max_loop_count=raw.max_loop_count,
        loop_start_tick=raw.loop_start_tick,
    )


def load_note_blocks(
    stream: BinaryIO,
    format_: song.NbsFormat,
    layer_count: int,
    vanilla_instrument_count: int,
) -> song.NoteBlocks:
    """Decode the note grid into exactly ``layer_count`` layers, the layer
    table that follows it is left to load_layer_table"""
    if layer_count < 0:
        raise InvalidFormat(f"Negative layer count : {layer_count}")

    with translate_errors():
        rows = construct.note_grid.parse_stream(
            stream, version=format_.effective_version
        )

    note_blocks = song.NoteBlocks.with_layers(layer_count, format_)
    tick = -1
    for row in takewhile(lambda r: r.jump != 0, rows):
        tick = wrap_int16(tick + row.jump)
        layer = -1
        for layer_jump in takewhile(lambda j: j.jump != 0, row.layers):
            layer = wrap_int16(layer + layer_jump.jump)
            if not 0 <= layer < layer_count:
                raise InvalidFormat(
                    f"Found a note on layer {layer} at tick {tick} but the file "
                    f"only has {layer_count} layers"
                )
            note = load_note(layer_jump.note, vanilla_instrument_count)
            note_blocks.layers[layer].notes[tick] = note

    return note_blocks


def load_note(raw: construct.Note, vanilla_instrument_count: int) -> song.Note:
    return song.Note(
        instrument=song.instrument_from_id(raw.instrument, vanilla_instrument_count),
        key=raw.key,
        velocity=raw.velocity,
        panning=raw.panning,
        pitch=raw.pitch,
    )


def load_layer_table(
    stream: BinaryIO, layers: List[song.Layer], format_: song.NbsFormat
) -> None:
    """Fill in the metadata of layers already allocated by the note grid"""
    for layer in layers:
        with translate_errors():
            raw = construct.layer.parse_stream(
                stream, version=format_.effective_version
            )
        layer.name = raw.name
        layer.locked = raw.locked
        layer.volume = raw.volume
        layer.stereo = raw.stereo


def load_custom_instruments(
    stream: BinaryIO, vanilla_instrument_count: int
) -> List[song.CustomInstrumentEntry]:
    with translate_errors():
        raw_instruments = construct.custom_instruments.parse_stream(stream)

    return [
        song.CustomInstrumentEntry(
            name=raw.name,
            file_name=raw.file_name,
            pitch=raw.pitch,
            press_key=raw.press_key,
            instrument=song.CustomInstrument(index + vanilla_instrument_count),
        )
        for index, raw in enumerate(raw_instruments)
    ]
