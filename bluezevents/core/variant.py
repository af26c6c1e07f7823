"""Tagged D-Bus property values with checked downcasts."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

INT16_MIN = -(2**15)
INT16_MAX = 2**15 - 1

# Value range per D-Bus integer type code.
INTEGER_RANGES: dict[str, tuple[int, int]] = {
    "y": (0, 2**8 - 1),
    "n": (INT16_MIN, INT16_MAX),
    "q": (0, 2**16 - 1),
    "i": (-(2**31), 2**31 - 1),
    "u": (0, 2**32 - 1),
    "x": (-(2**63), 2**63 - 1),
    "t": (0, 2**64 - 1),
}


@dataclass(frozen=True)
class PropertyValue:
    """A property value tagged with its D-Bus type signature.

    Mirrors the `sv` part of an `a{sv}` dictionary. The downcast helpers
    return `None` on any mismatch so callers can move on to the next
    candidate instead of handling an exception.
    """

    signature: str
    value: Any

    @classmethod
    def wrap(cls, obj: Any) -> PropertyValue | None:
        if isinstance(obj, PropertyValue):
            return obj
        signature = getattr(obj, "signature", None)
        if not isinstance(signature, str) or not hasattr(obj, "value"):
            return None
        return cls(signature=signature, value=obj.value)

    def as_bool(self) -> bool | None:
        if self.signature != "b" or not isinstance(self.value, bool):
            return None
        return self.value

    def as_bytes(self) -> bytes | None:
        if self.signature != "ay":
            return None
        if isinstance(self.value, (bytes, bytearray)):
            return bytes(self.value)
        if isinstance(self.value, Sequence) and not isinstance(self.value, str):
            if all(_is_int(b) and 0 <= b <= 0xFF for b in self.value):
                return bytes(self.value)
        return None

    def as_int16(self) -> int | None:
        if self.signature != "n" or not _is_int(self.value):
            return None
        if not INT16_MIN <= self.value <= INT16_MAX:
            return None
        return int(self.value)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
