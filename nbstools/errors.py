"""Everything that can go wrong while reading or writing an NBS file.

Format-related errors subclass ValueError so code that already guards a
conversion with ``except ValueError`` keeps working"""

from typing import Any


class NbsError(Exception):
    """Base class of every error raised by the codec"""


class InvalidFormat(NbsError, ValueError):
    """The data cannot be read as, or written to, the target format"""


class MissingField(InvalidFormat):
    def __init__(self, field_name: str, format_: Any):
        self.field_name = field_name
        self.format = format_
        super().__init__(
            f"The {field_name} field is required by {format_} but it is missing"
        )


class InvalidString(NbsError, ValueError):
    """A length-prefixed string could not be decoded as UTF-8"""


class StreamFailure(NbsError):
    """The underlying stream ended early or refused a read or a write"""
