"""128 bit GUID value with SyS-T brace notation."""

from __future__ import annotations

import functools
import string
from dataclasses import dataclass

__all__ = ["Guid"]

_TEMPLATE_LEN = len("{00000000-0000-0000-0000-000000000000}")
_HEX = set(string.hexdigits)


def _parse_hex_pair(pair: str) -> int | None:
    text = pair.lstrip()
    digits = ""
    for ch in text:
        if ch not in _HEX:
            break
        digits += ch
    return int(digits, 16) & 0xFF if digits else None


@functools.total_ordering
@dataclass(frozen=True)
class Guid:
    """A 16 byte GUID stored in the byte order of its textual notation."""

    data: bytes = bytes(16)

    def __post_init__(self) -> None:
        if len(self.data) != 16:
            raise ValueError("a guid holds exactly 16 bytes")
        object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def parse(cls, text: str) -> "Guid":
        """Parse "{xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx}" notation."""
        error = ValueError(
            f"invalid guid format {text} expected "
            "{xxxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx} notation."
        )
        if (
            len(text) != _TEMPLATE_LEN
            or text[0] != "{"
            or text[37] != "}"
            or any(text[i] != "-" for i in (9, 14, 19, 24))
        ):
            raise error

        values = []
        pos = 1
        for index in range(16):
            if index in (4, 6, 8, 10):
                pos += 1
            value = _parse_hex_pair(text[pos:pos + 2])
            if value is None:
                raise error
            values.append(value)
            pos += 2
        return cls(bytes(values))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Guid":
        """Build a guid from the first 16 bytes of data."""
        if len(data) < 16:
            raise ValueError("a guid needs 16 bytes")
        return cls(bytes(data[:16]))

    def to_bytes(self) -> bytes:
        """Return the 16 raw bytes."""
        return self.data

    @property
    def _words(self) -> tuple[int, int]:
        return (
            int.from_bytes(self.data[:8], "little"),
            int.from_bytes(self.data[8:], "little"),
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Guid):
            return NotImplemented
        return self._words < other._words

    def __and__(self, mask: "Guid") -> "Guid":
        if not isinstance(mask, Guid):
            return NotImplemented
        return Guid(bytes(a & b for a, b in zip(self.data, mask.data)))

    def __str__(self) -> str:
        parts = []
        for index, byte in enumerate(self.data):
            parts.append(f"{byte:02x}")
            if index in (3, 5, 7, 9):
                parts.append("-")
        return "{" + "".join(parts) + "}"