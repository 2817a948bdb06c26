from __future__ import annotations
import re
from anvil_web3.core import Size
from typing import Type, TypeVar, Optional

__all__ = ["Address", "Hash32"]

T = TypeVar("T", bound="_FixedBytesBase")

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


class _FixedBytesBase:
    _BYTE_LEN = 0

    def __init__(self, data: Optional[bytes | bytearray] = None) -> None:
        """

        Args:
            data: raw bytes in big-endian (wire) order.

        Raises:
            ValueError: if the length of `data` does not match the type.
        """
        num_bytes = int(self._BYTE_LEN)

        if data is None:
            self._data = bytes(num_bytes)
        else:
            if len(data) != num_bytes:
                raise ValueError(
                    f"Invalid {type(self).__name__}: data length {len(data)} != specified num_bytes {num_bytes}"
                )
            self._data = bytes(data)

    def __len__(self) -> int:
        """Count of data bytes."""
        return len(self._data)

    def __eq__(self, other) -> bool:
        if other is None:
            return False

        if type(other) is not type(self):
            return False

        if other is self:
            return True

        return self._data == other._data

    def __hash__(self):
        return hash((type(self).__name__, self._data))

    def __str__(self):
        """Convert the data to the 0x prefixed lowercase hex form used on the wire."""
        return "0x" + self._data.hex()

    def __repr__(self):
        return f"<{self.__class__.__name__} at {hex(id(self))}> {str(self)}"

    def _compare_to(self, other) -> int:
        if not isinstance(other, type(self)):
            raise TypeError(
                f"Cannot compare {type(self).__name__} to type {type(other).__name__}"
            )

        if self._data > other._data:
            return 1
        if self._data < other._data:
            return -1
        return 0

    def __lt__(self, other):
        return self._compare_to(other) < 0

    def __gt__(self, other):
        return self._compare_to(other) > 0

    def __le__(self, other):
        return self._compare_to(other) <= 0

    def __ge__(self, other):
        return self._compare_to(other) >= 0

    def to_array(self) -> bytes:
        """
        Return an array of bytes representing the value.
        """
        return self._data

    def to_json(self) -> str:
        return str(self)

    @classmethod
    def from_string(cls: Type[T], value: str) -> T:
        """
        Strictly parse a hex string into an instance.

        Args:
            value: hex string with or without the `0x` prefix.

        Raises:
            ValueError: if the length of the supplied string does not match or it contains non-hex characters.
        """
        if value.startswith("0x"):
            value = value[2:]
        if len(value) != cls._BYTE_LEN * 2:
            raise ValueError(
                f"Invalid {cls.__name__} Format: {len(value)} chars != {cls._BYTE_LEN * 2} chars"
            )
        if not _HEX_DIGITS.fullmatch(value):
            raise ValueError(f"Invalid {cls.__name__} Format: non-hex characters in {value}")
        return cls(data=bytes.fromhex(value))

    @classmethod
    def from_hex(cls: Type[T], value: str) -> T:
        """
        Leniently convert a hex string into an instance. Never raises.

        The `0x` or `0X` prefix is optional and an odd number of digits gets a leading zero. If the decoded data is
        longer than the type only the trailing bytes are kept, shorter data is left padded with zeros.

        Note:
            Strings that do not decode as hex yield :py:meth:`zero`.
        """
        if value[:2] in ("0x", "0X"):
            value = value[2:]
        if len(value) % 2 == 1:
            value = "0" + value
        if not _HEX_DIGITS.fullmatch(value):
            return cls.zero()
        data = bytes.fromhex(value)
        data = data[-cls._BYTE_LEN :]
        return cls(data=data.rjust(cls._BYTE_LEN, b"\x00"))

    @classmethod
    def zero(cls: Type[T]) -> T:
        """
        Returns:
            An instance initialized to zero.
        """
        return cls(data=bytes(cls._BYTE_LEN))


class Address(_FixedBytesBase):
    """
    A 20 byte account identifier.
    """

    _BYTE_LEN = Size.address


class Hash32(_FixedBytesBase):
    """
    A 32 byte hash, e.g. a transaction hash.
    """

    _BYTE_LEN = Size.hash32
