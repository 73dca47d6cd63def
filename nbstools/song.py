"""Provides the Song class, the central model for Note Block Studio files
Every NBS file is decoded to a Song instance
Every NBS file is encoded from a Song instance

Fields that only exist in some versions of the format are Optional and hold
None when the format does not have them, a zero is always a real zero"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from fractions import Fraction
from typing import Iterator, List, Optional, Tuple, Union

from sortedcontainers import SortedDict

from nbstools.errors import InvalidFormat, MissingField
from nbstools.utils import none_or

LATEST_VERSION = 4
LEGACY_VANILLA_INSTRUMENT_COUNT = 10
DEFAULT_VANILLA_INSTRUMENT_COUNT = 16

SecondsTime = Fraction


@dataclass(frozen=True)
class NbsFormat:
    """Either the original Note Block Studio layout (version is None) or the
    versioned layout introduced by Open Note Block Studio.

    The version byte is kept as-is, unknown future versions compare greater
    than every known one and so get every known optional field"""

    version: Optional[int] = None

    @classmethod
    def legacy(cls) -> NbsFormat:
        return cls(version=None)

    @classmethod
    def extended(cls, version: int = LATEST_VERSION) -> NbsFormat:
        return cls(version=version)

    @property
    def is_extended(self) -> bool:
        return self.version is not None

    @property
    def effective_version(self) -> int:
        """The legacy format behaves like version 0"""
        return 0 if self.version is None else self.version

    def has_version(self, minimum: int) -> bool:
        return self.effective_version >= minimum

    def __str__(self) -> str:
        if self.version is None:
            return "legacy NBS"
        else:
            return f"NBS version {self.version}"


class VanillaKind(IntEnum):
    """Built-in instruments, in the order the editor numbers them"""

    PIANO = 0
    DOUBLE_BASS = 1
    BASS_DRUM = 2
    SNARE_DRUM = 3
    CLICK = 4
    GUITAR = 5
    FLUTE = 6
    BELL = 7
    CHIME = 8
    XYLOPHONE = 9
    IRON_XYLOPHONE = 10
    COW_BELL = 11
    DIDGERIDOO = 12
    BIT = 13
    BANJO = 14
    PLING = 15


@dataclass(frozen=True, order=True)
class VanillaInstrument:
    id: int

    @property
    def kind(self) -> Optional[VanillaKind]:
        """None for vanilla instruments added after the 16 known ones"""
        try:
            return VanillaKind(self.id)
        except ValueError:
            return None


@dataclass(frozen=True, order=True)
class CustomInstrument:
    """Custom instrument ids start right after the last vanilla instrument
    of the file they come from"""

    id: int


Instrument = Union[VanillaInstrument, CustomInstrument]

PIANO = VanillaInstrument(VanillaKind.PIANO)
DOUBLE_BASS = VanillaInstrument(VanillaKind.DOUBLE_BASS)
BASS_DRUM = VanillaInstrument(VanillaKind.BASS_DRUM)
SNARE_DRUM = VanillaInstrument(VanillaKind.SNARE_DRUM)
CLICK = VanillaInstrument(VanillaKind.CLICK)
GUITAR = VanillaInstrument(VanillaKind.GUITAR)
FLUTE = VanillaInstrument(VanillaKind.FLUTE)
BELL = VanillaInstrument(VanillaKind.BELL)
CHIME = VanillaInstrument(VanillaKind.CHIME)
XYLOPHONE = VanillaInstrument(VanillaKind.XYLOPHONE)
IRON_XYLOPHONE = VanillaInstrument(VanillaKind.IRON_XYLOPHONE)
COW_BELL = VanillaInstrument(VanillaKind.COW_BELL)
DIDGERIDOO = VanillaInstrument(VanillaKind.DIDGERIDOO)
BIT = VanillaInstrument(VanillaKind.BIT)
BANJO = VanillaInstrument(VanillaKind.BANJO)
PLING = VanillaInstrument(VanillaKind.PLING)


def instrument_from_id(id_: int, vanilla_instrument_count: int) -> Instrument:
    if id_ >= vanilla_instrument_count:
        return CustomInstrument(id_)
    else:
        return VanillaInstrument(id_)


@dataclass(frozen=True)
class Note:
    """A single note block. Its tick is the key it's stored under in its
    layer, its layer is the index of that layer"""

    instrument: Instrument
    # 0 is A0 and 87 is C8, 33 to 57 is the 2-octave range of the game
    key: int
    # 0 to 100 %
    velocity: Optional[int] = None
    # 0 to 200, 100 is center
    panning: Optional[int] = None
    # fine pitch in cents, the editor limits it to ±1200
    pitch: Optional[int] = None

    @classmethod
    def for_format(
        cls, format_: NbsFormat, instrument: Instrument, key: int
    ) -> Note:
        """Create a note with neutral values for every field the format has"""
        if format_.has_version(4):
            return cls(instrument, key, velocity=100, panning=100, pitch=0)
        else:
            return cls(instrument, key)


@dataclass
class Layer:
    name: str = ""
    locked: Optional[bool] = None
    # Always stored in the file, can be left out only while building a song
    volume: Optional[int] = 100
    stereo: Optional[int] = None
    notes: SortedDict = field(default_factory=SortedDict)

    @classmethod
    def from_format(cls, format_: NbsFormat) -> Layer:
        return cls(
            locked=False if format_.has_version(4) else None,
            volume=100,
            stereo=100 if format_.has_version(2) else None,
        )

    @property
    def last_tick(self) -> Optional[int]:
        if not self.notes:
            return None

        tick, _ = self.notes.peekitem(-1)
        return tick


@dataclass
class NoteBlocks:
    """The note grid : a sparse tick × layer matrix of notes"""

    layers: List[Layer] = field(default_factory=list)

    @classmethod
    def with_layers(cls, count: int, format_: NbsFormat) -> NoteBlocks:
        return cls(layers=[Layer.from_format(format_) for _ in range(count)])

    def calculate_length(self) -> int:
        """Tick of the last note, 0 for an empty grid"""
        return max(
            (l.last_tick for l in self.layers if l.last_tick is not None),
            default=0,
        )

    def add_note(self, tick: int, layer: int, note: Note) -> None:
        """Place a note, replacing whatever was at that spot"""
        if not 0 <= layer < len(self.layers):
            raise IndexError(
                f"Layer {layer} does not exist, there are {len(self.layers)} layers"
            )

        self.layers[layer].notes[tick] = note

    def iter_notes(self) -> Iterator[Tuple[int, int, Note]]:
        """Yield (tick, layer, note) triplets, ordered by tick then layer"""
        triplets = (
            (tick, index, note)
            for index, layer in enumerate(self.layers)
            for tick, note in layer.notes.items()
        )
        yield from sorted(triplets, key=lambda t: (t[0], t[1]))


@dataclass
class CustomInstrumentEntry:
    name: str
    # name of the sound file, relative to the editor's Sounds folder
    file_name: str
    # key the sound file is played at, 45 (F#4) means "as is"
    pitch: int = 45
    press_key: bool = False
    # Assigned when decoding, not stored in the file
    instrument: Optional[CustomInstrument] = field(default=None, compare=False)


@dataclass
class Header:
    format: NbsFormat
    # The first two bytes of the file. In the legacy format it's the song
    # length, which can never be zero. A zero there means the extended format
    # follows.
    legacy_song_length: Optional[int] = None
    version_number: Optional[int] = None
    # Number of vanilla instruments when the song was saved, custom
    # instrument ids start at this value
    vanilla_instrument_count: Optional[int] = None
    # Extended format only, from version 3 onwards
    song_length: Optional[int] = None
    layer_count: int = 0
    song_name: str = ""
    song_author: str = ""
    original_song_author: str = ""
    song_description: str = ""
    # Ticks per second multiplied by 100
    tempo: int = 1000
    auto_saving: bool = False
    # minutes between auto-saves
    auto_saving_duration: int = 10
    # 3 means 3/4
    time_signature: int = 4
    minutes_spent: int = 0
    left_clicks: int = 0
    right_clicks: int = 0
    note_blocks_added: int = 0
    note_blocks_removed: int = 0
    imported_file_name: str = ""
    loop: Optional[bool] = None
    # 0 means loop forever
    max_loop_count: Optional[int] = None
    loop_start_tick: Optional[int] = None

    @classmethod
    def for_format(cls, format_: NbsFormat) -> Header:
        """Create a header that has a value for every field the format
        requires and None everywhere else"""
        if not format_.is_extended:
            return cls(format=format_, legacy_song_length=1)

        return cls(
            format=format_,
            version_number=format_.version,
            vanilla_instrument_count=DEFAULT_VANILLA_INSTRUMENT_COUNT,
            song_length=0 if format_.has_version(3) else None,
            loop=False,
            max_loop_count=0,
            loop_start_tick=0,
        )

    def vanilla_instrument_count_for_format(self) -> int:
        if not self.format.is_extended:
            return LEGACY_VANILLA_INSTRUMENT_COUNT

        if self.vanilla_instrument_count is None:
            raise MissingField("vanilla_instrument_count", self.format)

        return self.vanilla_instrument_count

    def song_ticks(self) -> Optional[int]:
        """Song length in ticks as stored in the header. Versions 1 and 2 of
        the extended format never stored it, so this returns None for them"""
        if not self.format.is_extended:
            if self.legacy_song_length is None:
                raise MissingField("legacy_song_length", self.format)
            return self.legacy_song_length
        elif self.format.has_version(3):
            if self.song_length is None:
                raise MissingField("song_length", self.format)
            return self.song_length
        else:
            return None

    def song_duration(self) -> Optional[SecondsTime]:
        return none_or(self.ticks_to_seconds, self.song_ticks())

    def ticks_to_seconds(self, ticks: int) -> SecondsTime:
        if self.tempo <= 0:
            raise InvalidFormat(f"Tempo must be strictly positive : {self.tempo}")
        return SecondsTime(ticks * 100, self.tempo)


@dataclass
class Song:
    """The in-memory representation of an NBS file"""

    header: Header
    note_blocks: NoteBlocks = field(default_factory=NoteBlocks)
    custom_instruments: List[CustomInstrumentEntry] = field(default_factory=list)

    @classmethod
    def new(cls, format_: NbsFormat) -> Song:
        return cls(header=Header.for_format(format_))

    @property
    def format(self) -> NbsFormat:
        return self.header.format

    def update(self) -> None:
        """Recompute the header fields that describe the rest of the file.
        Never called implicitly, do it yourself after editing the song"""
        length = self.note_blocks.calculate_length()
        if self.format.is_extended:
            self.header.version_number = self.format.version
            if self.format.has_version(3):
                self.header.song_length = length
        else:
            self.header.legacy_song_length = length

        self.header.layer_count = len(self.note_blocks.layers)

    def song_ticks(self) -> int:
        return self.note_blocks.calculate_length()

    def song_duration(self) -> SecondsTime:
        return self.header.ticks_to_seconds(self.song_ticks())
