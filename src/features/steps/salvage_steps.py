# features/steps/salvage_steps.py
from __future__ import annotations

from typing import Any

from sanitation.bdd_compat import given, then, when
from sanitation.step_state import get_boolean_step_state, get_salvage_step_state

from byte_salvage.decoder import ByteEvidence
from byte_salvage.errors import UnsafeStringError, VerdictError
from byte_salvage.hexcodec import from_hex, to_hex
from byte_salvage.sboolean import classify


@given('the bytes "{hex_text}"')
def step_given_bytes(context: Any, hex_text: str) -> None:
    get_salvage_step_state(context).chunks = [from_hex(hex_text)]


@given('the chunks "{first}" and "{second}"')
def step_given_chunks(context: Any, first: str, second: str) -> None:
    get_salvage_step_state(context).chunks = [from_hex(first), from_hex(second)]


@when("the bytes are salvaged in one buffer")
def step_salvage_whole(context: Any) -> None:
    state = get_salvage_step_state(context)
    state.evidence = ByteEvidence.new(b"".join(state.chunks))


@when("the chunks are salvaged incrementally")
def step_salvage_chunks(context: Any) -> None:
    state = get_salvage_step_state(context)
    evidence = ByteEvidence.empty()
    for chunk in state.chunks:
        evidence.extend(chunk)
    evidence.finish()
    state.evidence = evidence


def _evidence(context: Any) -> ByteEvidence:
    evidence = get_salvage_step_state(context).evidence
    assert evidence is not None, "no bytes were salvaged"
    return evidence


@then('the safe text is "{text}"')
def step_safe_text(context: Any, text: str) -> None:
    assert _evidence(context).unchecked_safe() == text


@then("no garbage is recorded")
def step_no_garbage(context: Any) -> None:
    evidence = _evidence(context)
    assert evidence.garbage == b""
    assert evidence.spans == ()


@then('the garbage is "{hex_text}"')
def step_garbage(context: Any, hex_text: str) -> None:
    assert to_hex(_evidence(context).garbage) == hex_text


@then("{count:d} spans are recorded")
def step_span_count(context: Any, count: int) -> None:
    assert len(_evidence(context).spans) == count


@then("the strict conversion succeeds")
def step_strict_ok(context: Any) -> None:
    state = get_salvage_step_state(context)
    state.strict_text = _evidence(context).safe()


@then("the strict conversion fails as an unsafe string")
def step_strict_unsafe(context: Any) -> None:
    state = get_salvage_step_state(context)
    try:
        state.strict_text = _evidence(context).safe()
    except VerdictError as exc:
        state.strict_error = exc
    assert isinstance(state.strict_error, UnsafeStringError)


@given("the boolean byte {byte:d}")
def step_given_boolean_byte(context: Any, byte: int) -> None:
    get_boolean_step_state(context).byte = byte


@when("the byte is classified")
def step_classify(context: Any) -> None:
    state = get_boolean_step_state(context)
    assert state.byte is not None
    state.classified = classify(state.byte)


@then("the boolean value is {value}")
def step_boolean_value(context: Any, value: str) -> None:
    classified = get_boolean_step_state(context).classified
    assert classified is not None
    assert classified[0] is (value == "true")


@then("the boolean garbage is {garbage}")
def step_boolean_garbage(context: Any, garbage: str) -> None:
    classified = get_boolean_step_state(context).classified
    assert classified is not None
    expected = None if garbage == "none" else int(garbage)
    assert classified[1] == expected
