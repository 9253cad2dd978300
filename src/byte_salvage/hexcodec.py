# byte_salvage/hexcodec.py
from __future__ import annotations

from byte_salvage.errors import HexParseError

_HEX_DIGITS = frozenset("0123456789abcdef")


def to_hex(data: bytes | bytearray | memoryview) -> str:
    """Render bytes as ``0x`` followed by two lowercase hex digits per byte."""
    return "0x" + bytes(data).hex()


def from_hex(text: str) -> bytes:
    """
    Parse hex text produced by ``to_hex`` (or typed by a human).

    Accepts an optional ``0x``/``x`` prefix and either case. Odd-length input is
    left-padded with a single zero, so ``"0xf"`` decodes to ``b"\\x0f"``.
    """
    if not text:
        raise HexParseError("empty hexadecimal string")

    digits = text.lower()
    if digits.startswith("0x"):
        digits = digits[2:]
    elif digits.startswith("x"):
        digits = digits[1:]

    for pos, char in enumerate(digits, start=1):
        if char not in _HEX_DIGITS:
            raise HexParseError(
                f"invalid hexadecimal character at pos {pos}: {char}",
                position=pos,
                character=char,
            )

    if len(digits) % 2:
        digits = "0" + digits
    return bytes.fromhex(digits)


__all__ = ["from_hex", "to_hex"]
