from __future__ import annotations
from enum import IntEnum

# :noindex:


class Size(IntEnum):
    """
    Explicit bytes of memory consumed
    """

    address = 20
    hash32 = 32
