from __future__ import annotations

import pytest
from pydantic import ValidationError

from byte_salvage.sboolean import SBoolean, classify


@pytest.mark.parametrize(
    ("byte", "expected"),
    [
        (0, (False, None)),
        (1, (True, None)),
        (2, (True, 2)),
        (0xF4, (True, 0xF4)),
        (0xFF, (True, 0xFF)),
    ],
)
def test_classify_keeps_out_of_range_values_as_garbage(byte: int, expected: tuple[bool, int | None]) -> None:
    assert classify(byte) == expected


@pytest.mark.parametrize("byte", [-1, 256, 1024])
def test_classify_rejects_non_byte_values(byte: int) -> None:
    with pytest.raises(ValueError, match="not a byte value"):
        classify(byte)


def test_sboolean_reads_non_canonical_true_and_keeps_the_byte() -> None:
    flag = SBoolean(byte=0xF4)

    assert flag.value is True
    assert bool(flag) is True
    assert flag.has_garbage
    assert flag.garbage == 0xF4
    assert str(flag) == "true"
    assert flag.describe() == "ssh-boolean: true\r\ngarbage: 0xf4"


def test_sboolean_canonical_values_describe_without_garbage() -> None:
    assert SBoolean(byte=0).describe() == "ssh-boolean: false"
    assert SBoolean(byte=1).describe() == "ssh-boolean: true"
    assert not SBoolean(byte=0)
    assert not SBoolean(byte=1).has_garbage


def test_sboolean_from_wire_reads_the_byte_at_offset() -> None:
    packet = b"\x00\x05\x01"

    assert SBoolean.from_wire(packet).value is False
    assert SBoolean.from_wire(packet, 1).garbage == 5
    assert SBoolean.from_wire(memoryview(packet), 2).garbage is None


def test_sboolean_rejects_out_of_range_byte_and_is_immutable() -> None:
    with pytest.raises(ValidationError):
        SBoolean(byte=256)

    flag = SBoolean(byte=1)
    with pytest.raises(ValidationError):
        flag.byte = 0  # type: ignore[misc]
