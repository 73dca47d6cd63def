from fractions import Fraction

import pytest
from hypothesis import given

from nbstools import song
from nbstools.errors import InvalidFormat, MissingField
from nbstools.testutils import strategies as nbst


def test_that_an_empty_grid_has_length_zero() -> None:
    grid = song.NoteBlocks.with_layers(3, song.NbsFormat.extended())
    assert grid.calculate_length() == 0


def test_that_length_is_the_last_tick_of_any_layer() -> None:
    grid = song.NoteBlocks.with_layers(3, song.NbsFormat.extended(2))
    grid.add_note(12, 0, song.Note(song.PIANO, 33))
    grid.add_note(40, 2, song.Note(song.BELL, 45))
    grid.add_note(7, 1, song.Note(song.GUITAR, 40))
    assert grid.calculate_length() == 40


def test_that_adding_a_note_to_a_missing_layer_fails() -> None:
    grid = song.NoteBlocks.with_layers(1, song.NbsFormat.legacy())
    with pytest.raises(IndexError):
        grid.add_note(0, 1, song.Note(song.PIANO, 33))


def test_that_adding_a_note_twice_keeps_the_last_one() -> None:
    grid = song.NoteBlocks.with_layers(1, song.NbsFormat.legacy())
    grid.add_note(4, 0, song.Note(song.PIANO, 33))
    grid.add_note(4, 0, song.Note(song.FLUTE, 50))
    assert dict(grid.layers[0].notes) == {4: song.Note(song.FLUTE, 50)}


@given(nbst.note_blocks(song.NbsFormat.extended(), 16))
def test_that_notes_are_iterated_by_tick_then_layer(grid: song.NoteBlocks) -> None:
    positions = [(tick, layer) for tick, layer, _ in grid.iter_notes()]
    assert positions == sorted(positions)
    assert len(positions) == sum(len(l.notes) for l in grid.layers)


@pytest.mark.parametrize(
    "version,expected",
    [(None, False), (1, False), (2, True), (3, True), (4, True), (9, True)],
)
def test_that_has_version_compares_to_the_effective_version(
    version: int, expected: bool
) -> None:
    assert song.NbsFormat(version).has_version(2) is expected


def test_that_notes_for_version_4_get_neutral_values() -> None:
    note = song.Note.for_format(song.NbsFormat.extended(4), song.PLING, 45)
    assert (note.velocity, note.panning, note.pitch) == (100, 100, 0)


def test_that_notes_for_older_versions_have_no_version_4_fields() -> None:
    note = song.Note.for_format(song.NbsFormat.extended(3), song.PLING, 45)
    assert (note.velocity, note.panning, note.pitch) == (None, None, None)


def test_that_legacy_headers_leave_extended_fields_empty() -> None:
    header = song.Header.for_format(song.NbsFormat.legacy())
    assert header.legacy_song_length == 1
    assert header.version_number is None
    assert header.vanilla_instrument_count is None
    assert header.song_length is None
    assert header.loop is None
    assert header.max_loop_count is None
    assert header.loop_start_tick is None
    assert header.vanilla_instrument_count_for_format() == 10


def test_that_version_2_headers_have_no_song_length() -> None:
    header = song.Header.for_format(song.NbsFormat.extended(2))
    assert header.song_length is None
    assert header.song_ticks() is None
    assert header.vanilla_instrument_count_for_format() == 16


def test_that_a_missing_vanilla_instrument_count_is_reported() -> None:
    header = song.Header.for_format(song.NbsFormat.extended())
    header.vanilla_instrument_count = None
    with pytest.raises(MissingField) as exc_info:
        header.vanilla_instrument_count_for_format()

    assert exc_info.value.field_name == "vanilla_instrument_count"


def test_that_update_fills_in_the_header() -> None:
    s = song.Song.new(song.NbsFormat.extended(3))
    s.note_blocks = song.NoteBlocks.with_layers(4, s.format)
    s.note_blocks.add_note(25, 3, song.Note(song.BIT, 60))
    s.header.version_number = 1
    s.update()
    assert s.header.version_number == 3
    assert s.header.song_length == 25
    assert s.header.layer_count == 4
    assert s.header.song_ticks() == 25


def test_that_update_on_legacy_songs_sets_the_leading_length() -> None:
    s = song.Song.new(song.NbsFormat.legacy())
    s.note_blocks = song.NoteBlocks.with_layers(1, s.format)
    s.note_blocks.add_note(9, 0, song.Note(song.BIT, 60))
    s.update()
    assert s.header.legacy_song_length == 9
    assert s.header.song_length is None


def test_that_duration_uses_the_tempo() -> None:
    s = song.Song.new(song.NbsFormat.extended())
    s.note_blocks = song.NoteBlocks.with_layers(1, s.format)
    s.note_blocks.add_note(30, 0, song.Note.for_format(s.format, song.PIANO, 33))
    s.header.tempo = 2000
    assert s.song_duration() == Fraction(3, 2)


def test_that_a_null_tempo_is_rejected() -> None:
    s = song.Song.new(song.NbsFormat.extended())
    s.header.tempo = 0
    with pytest.raises(InvalidFormat):
        s.song_duration()


def test_that_custom_instrument_ids_are_ignored_when_comparing() -> None:
    a = song.CustomInstrumentEntry("Meow", "cat.ogg")
    b = song.CustomInstrumentEntry(
        "Meow", "cat.ogg", instrument=song.CustomInstrument(16)
    )
    assert a == b


def test_that_instrument_ids_split_on_the_vanilla_count() -> None:
    assert song.instrument_from_id(9, 10) == song.XYLOPHONE
    assert song.instrument_from_id(10, 10) == song.CustomInstrument(10)
    assert song.instrument_from_id(10, 16) == song.IRON_XYLOPHONE
    assert song.IRON_XYLOPHONE.kind is song.VanillaKind.IRON_XYLOPHONE


def test_that_unknown_vanilla_instruments_have_no_kind() -> None:
    instrument = song.instrument_from_id(16, 20)
    assert instrument == song.VanillaInstrument(16)
    assert isinstance(instrument, song.VanillaInstrument)
    assert instrument.kind is None
