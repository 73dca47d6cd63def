"""General utility functions"""

from typing import Callable, Optional, TypeVar

A = TypeVar("A")
B = TypeVar("B")

# Monadic stuff !
def none_or(c: Callable[[A], B], e: Optional[A]) -> Optional[B]:
    if e is None:
        return None
    else:
        return c(e)


def wrap_int16(value: int) -> int:
    """Bring an integer back into signed 16-bit range the way a short
    overflows"""
    return ((value + 0x8000) & 0xFFFF) - 0x8000
