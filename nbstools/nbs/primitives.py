"""Field types every part of an NBS file is made of.

All integers are little-endian, strings are UTF-8 prefixed with their length
in bytes as a signed 32-bit integer"""

from contextlib import contextmanager
from typing import Iterator

import construct as c

from nbstools.errors import InvalidFormat, InvalidString, StreamFailure

Byte = c.Int8ul
Int8 = c.Int8sl
Int16 = c.Int16sl
Int32 = c.Int32sl
# Only 1 reads as True, True is written as 1
Bool = c.ExprAdapter(
    Byte,
    decoder=lambda obj, ctx: obj == 1,
    encoder=lambda obj, ctx: 1 if obj else 0,
)
String = c.PascalString(Int32, "utf8")


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise what construct (or the stream under it) throws as one of
    nbstools' own errors"""
    try:
        yield
    except UnicodeError as e:
        raise InvalidString(f"Failed to decode string : {e}") from e
    except c.StringError as e:
        raise InvalidString(f"Failed to decode string : {e}") from e
    except c.StreamError as e:
        raise StreamFailure(str(e)) from e
    except c.ConstructError as e:
        raise InvalidFormat(str(e)) from e
