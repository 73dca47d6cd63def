"""
Note Block Studio song files (.nbs)

Covers the original Note Block Studio layout and versions 1 to 4 of the one
introduced by Open Note Block Studio.

https://opennbs.org/nbs
"""

from .dump import encode
from .files import dump_nbs, load_nbs
from .guess import guess_format
from .load import decode
