# byte_salvage/sboolean.py
"""
Single-byte booleans that keep out-of-range values as evidence.

Wire protocols such as SSH (RFC 4251, section 5) store a boolean as one byte:
0 is FALSE, 1 is TRUE, and every other value MUST be read as TRUE but MUST NOT
be sent. A parser that only checks truthiness lets the other 254 values through
as a covert channel. ``SBoolean`` reads such a byte as a boolean and keeps any
value other than 0 or 1 in ``garbage``.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def classify(byte: int) -> tuple[bool, int | None]:
    if not 0 <= byte <= 0xFF:
        raise ValueError(f"not a byte value: {byte}")
    return byte != 0, (None if byte in (0, 1) else byte)


class SBoolean(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    byte: int = Field(ge=0, le=0xFF)

    @classmethod
    def from_wire(cls, buf: bytes | bytearray | memoryview, offset: int = 0) -> SBoolean:
        return cls(byte=buf[offset])

    @property
    def value(self) -> bool:
        return classify(self.byte)[0]

    @property
    def garbage(self) -> int | None:
        return classify(self.byte)[1]

    @property
    def has_garbage(self) -> bool:
        return self.garbage is not None

    def __bool__(self) -> bool:
        return self.value

    def __str__(self) -> str:
        return "true" if self.value else "false"

    def describe(self) -> str:
        text = f"ssh-boolean: {self}"
        if self.garbage is not None:
            text += f"\r\ngarbage: 0x{self.garbage:02x}"
        return text


__all__ = ["SBoolean", "classify"]
