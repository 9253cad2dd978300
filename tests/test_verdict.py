from __future__ import annotations

import errno
import logging

import pytest

from byte_salvage.contracts import VerdictStatus
from byte_salvage.decoder import ByteEvidence
from byte_salvage.errors import (
    EvidenceCorruptionError,
    InvalidUtf8Error,
    SalvageError,
    UnsafeStringError,
    VerdictError,
)
from byte_salvage.verdict import best_effort, classify_verdict, summarize, verdict


def test_valid_input_converts_strictly() -> None:
    evidence = ByteEvidence.new("héllo wörld".encode("utf-8"))

    assert verdict(evidence) == "héllo wörld"
    assert classify_verdict(evidence) is VerdictStatus.SAFE


def test_garbage_makes_the_verdict_an_unsafe_string(mixed_bytes: bytes) -> None:
    evidence = ByteEvidence.new(mixed_bytes)

    with pytest.raises(UnsafeStringError) as excinfo:
        verdict(evidence)

    err = excinfo.value
    assert err.safe_bytes == b"r1G1"
    assert err.garbage_bytes == b"\xff" * 6 + b"\xfe"
    assert str(err) == (
        "unsafe conversion of byte-sequence '0x72314731' to string: contains garbage '0xfffffffffffffe'"
    )
    assert isinstance(err.__cause__, UnicodeDecodeError)
    assert isinstance(err, VerdictError)
    assert isinstance(err, SalvageError)
    assert classify_verdict(evidence) is VerdictStatus.UNSAFE_STRING


def test_unsafe_string_errors_compare_by_their_bytes() -> None:
    assert UnsafeStringError(b"a", b"\xff") == UnsafeStringError(b"a", b"\xff")
    assert UnsafeStringError(b"a", b"\xff") != UnsafeStringError(b"b", b"\xff")
    with pytest.raises(TypeError):
        hash(UnsafeStringError(b"a", b"\xff"))


def test_unflushed_tail_is_invalid_utf8_not_unsafe(caplog: pytest.LogCaptureFixture) -> None:
    evidence = ByteEvidence.empty()
    evidence.extend(b"ok\xe2\x82")

    with caplog.at_level(logging.WARNING, logger="byte_salvage.verdict"):
        with pytest.raises(InvalidUtf8Error) as excinfo:
            evidence.safe()

    err = excinfo.value
    assert err.cause.reason == "unexpected end of data"
    assert err.cause.start == 2
    assert err.garbage == b""
    assert err.spans == ()
    assert err.ingested == b"ok\xe2\x82"
    assert err.safe == b"ok"
    assert str(err) == "unsafe byte array conversion to string `unexpected end of data' at byte 2: garbage 0x at locations {}"
    assert "no garbage was recorded" in caplog.text

    evidence.finish()
    with pytest.raises(UnsafeStringError):
        evidence.safe()


def test_per_chunk_final_scans_can_disagree_with_whole_buffer_validation() -> None:
    evidence = ByteEvidence.empty()
    evidence.extend(b"\xe2\x82", final=True)
    evidence.extend(b"\xac", final=True)

    # the ingested buffer is a valid euro sign, the bookkeeping says garbage
    assert evidence.garbage == b"\xe2\x82\xac"
    assert evidence.safe() == "€"
    assert evidence.status() is VerdictStatus.SAFE

    outcomes = {outcome.code: outcome for outcome in evidence.audit()}
    assert "verdict_bookkeeping_divergence" in outcomes
    assert outcomes["verdict_bookkeeping_divergence"].validity.value == "degraded"


@pytest.mark.parametrize(
    ("raw", "error_type"),
    [
        (b"\xff", UnsafeStringError),
        (b"ab\xffcd", InvalidUtf8Error),
    ],
)
def test_verdict_errors_adapt_to_eilseq_io_errors(raw: bytes, error_type: type[VerdictError]) -> None:
    hook = None if error_type is UnsafeStringError else (lambda remaining, error: "?")
    evidence = ByteEvidence.new(raw, hook)

    with pytest.raises(error_type) as excinfo:
        evidence.safe()

    io_error = excinfo.value.to_io_error()
    assert isinstance(io_error, OSError)
    assert io_error.errno == errno.EILSEQ
    assert io_error.strerror == str(excinfo.value)


def test_best_effort_never_fails_on_salvaged_input(mixed_bytes: bytes) -> None:
    assert best_effort(ByteEvidence.new(mixed_bytes)) == "r1G1"
    assert best_effort(ByteEvidence.new(b"\xff\xfe")) == ""


def test_best_effort_reports_corrupted_safe_bytes_as_a_defect() -> None:
    evidence = ByteEvidence.new(b"ok")
    evidence._safe += b"\xff"

    with pytest.raises(EvidenceCorruptionError, match="not valid UTF-8 at byte 2"):
        best_effort(evidence)
    assert issubclass(EvidenceCorruptionError, AssertionError)


def test_summarize_freezes_the_outcome(mixed_bytes: bytes) -> None:
    report = summarize(ByteEvidence.new(mixed_bytes))

    assert report.verdict is VerdictStatus.UNSAFE_STRING
    assert report.message is not None and report.message.startswith("unsafe conversion")
    assert report.safe_text == "r1G1"
    assert report.garbage_hex == "0xfffffffffffffe"
    assert report.ingested == mixed_bytes
    assert len(report.spans) == 7
    assert report.passed_invariants
    assert [check["invariant_id"] for check in report.invariant_checks] == [
        "byte_partition.v1",
        "safe_bytes_utf8.v1",
        "span_garbage_coverage.v1",
        "verdict_agreement.v1",
    ]


def test_summarize_safe_input_has_no_message() -> None:
    report = ByteEvidence.new(b"fine").report()

    assert report.verdict is VerdictStatus.SAFE
    assert report.message is None
    assert report.evidence_id.startswith("evd_")
