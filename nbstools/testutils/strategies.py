"""
Hypothesis strategies to generate notes, layers and songs
"""

from typing import Optional

import hypothesis.strategies as st

from nbstools.song import (
    DEFAULT_VANILLA_INSTRUMENT_COUNT,
    LATEST_VERSION,
    LEGACY_VANILLA_INSTRUMENT_COUNT,
    CustomInstrument,
    CustomInstrumentEntry,
    Header,
    Instrument,
    Layer,
    NbsFormat,
    Note,
    NoteBlocks,
    Song,
    VanillaInstrument,
)

bytes_ = st.integers(min_value=0, max_value=255)
shorts = st.integers(min_value=-(2 ** 15), max_value=2 ** 15 - 1)
ints = st.integers(min_value=-(2 ** 31), max_value=2 ** 31 - 1)
short_text = st.text(max_size=20)


@st.composite
def nbs_format(draw: st.DrawFn) -> NbsFormat:
    version: Optional[int] = draw(
        st.one_of(st.none(), st.integers(min_value=1, max_value=LATEST_VERSION))
    )
    return NbsFormat(version)


@st.composite
def header(
    draw: st.DrawFn, format_strat: st.SearchStrategy[NbsFormat] = nbs_format()
) -> Header:
    """Length and layer count are left for Song.update() to fill in"""
    format_ = draw(format_strat)
    h = Header.for_format(format_)
    h.song_name = draw(short_text)
    h.song_author = draw(short_text)
    h.original_song_author = draw(short_text)
    h.song_description = draw(st.text(max_size=100))
    h.tempo = draw(st.integers(min_value=1, max_value=2 ** 15 - 1))
    h.auto_saving = draw(st.booleans())
    h.auto_saving_duration = draw(st.integers(min_value=1, max_value=60))
    h.time_signature = draw(st.integers(min_value=2, max_value=8))
    h.minutes_spent = draw(ints)
    h.left_clicks = draw(ints)
    h.right_clicks = draw(ints)
    h.note_blocks_added = draw(ints)
    h.note_blocks_removed = draw(ints)
    h.imported_file_name = draw(short_text)
    if format_.is_extended:
        h.vanilla_instrument_count = draw(
            st.integers(
                min_value=LEGACY_VANILLA_INSTRUMENT_COUNT,
                max_value=DEFAULT_VANILLA_INSTRUMENT_COUNT,
            )
        )
        h.loop = draw(st.booleans())
        h.max_loop_count = draw(bytes_)
        h.loop_start_tick = draw(shorts)
    return h


@st.composite
def instrument(draw: st.DrawFn, vanilla_instrument_count: int) -> Instrument:
    vanilla = st.integers(min_value=0, max_value=vanilla_instrument_count - 1)
    custom = st.integers(min_value=vanilla_instrument_count, max_value=255)
    i: Instrument = draw(
        st.one_of(vanilla.map(VanillaInstrument), custom.map(CustomInstrument))
    )
    return i


@st.composite
def note(
    draw: st.DrawFn, format_: NbsFormat, vanilla_instrument_count: int
) -> Note:
    instrument_ = draw(instrument(vanilla_instrument_count))
    key = draw(st.integers(min_value=0, max_value=87))
    if not format_.has_version(4):
        return Note(instrument_, key)

    return Note(
        instrument_,
        key,
        velocity=draw(st.integers(min_value=0, max_value=100)),
        panning=draw(st.integers(min_value=0, max_value=200)),
        pitch=draw(st.integers(min_value=-1200, max_value=1200)),
    )


@st.composite
def layer(draw: st.DrawFn, format_: NbsFormat) -> Layer:
    return Layer(
        name=draw(short_text),
        locked=draw(st.booleans()) if format_.has_version(4) else None,
        volume=draw(st.integers(min_value=0, max_value=100)),
        stereo=(
            draw(st.integers(min_value=0, max_value=200))
            if format_.has_version(2)
            else None
        ),
    )


@st.composite
def note_blocks(
    draw: st.DrawFn,
    format_: NbsFormat,
    vanilla_instrument_count: int,
    max_layers: int = 8,
    max_tick: int = 200,
    min_notes: int = 0,
) -> NoteBlocks:
    layers = draw(
        st.lists(layer(format_), min_size=int(min_notes > 0), max_size=max_layers)
    )
    result = NoteBlocks(layers=layers)
    if not layers:
        return result

    positions = st.tuples(
        st.integers(min_value=0, max_value=max_tick),
        st.integers(min_value=0, max_value=len(layers) - 1),
    )
    notes = draw(
        st.dictionaries(
            keys=positions,
            values=note(format_, vanilla_instrument_count),
            min_size=min_notes,
            max_size=30,
        )
    )
    for (tick, layer_index), n in notes.items():
        result.add_note(tick, layer_index, n)

    return result


@st.composite
def custom_instrument_entry(draw: st.DrawFn) -> CustomInstrumentEntry:
    return CustomInstrumentEntry(
        name=draw(short_text),
        file_name=draw(short_text),
        pitch=draw(st.integers(min_value=0, max_value=87)),
        press_key=draw(st.booleans()),
    )


@st.composite
def song(
    draw: st.DrawFn, format_strat: st.SearchStrategy[NbsFormat] = nbs_format()
) -> Song:
    """Songs that are valid for their own format, with an up-to-date header"""
    header_ = draw(header(format_strat))
    format_ = header_.format
    grid = draw(
        note_blocks(
            format_,
            header_.vanilla_instrument_count_for_format(),
            # the legacy format can't store a song length of 0
            min_notes=0 if format_.is_extended else 1,
        )
    )
    if not format_.is_extended and grid.calculate_length() == 0:
        # every note landed on tick 0, copy one a tick further
        _, layer_index, first_note = next(grid.iter_notes())
        grid.add_note(1, layer_index, first_note)

    result = Song(
        header=header_,
        note_blocks=grid,
        custom_instruments=draw(st.lists(custom_instrument_entry(), max_size=5)),
    )
    result.update()
    return result
