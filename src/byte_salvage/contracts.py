# byte_salvage/contracts.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_core import ErrorDetails

from byte_salvage._compat import Self, StrEnum
from byte_salvage.errors import HexParseError
from byte_salvage.hexcodec import from_hex, to_hex


class ReportPayloadValidationError(ValueError):
    """Raised when a persisted report cannot be normalized into an EvidenceReport."""


# ------------------------------------------------------------------------------
# Shared BaseModel config helpers
# ------------------------------------------------------------------------------

_CONTRACT_CONFIG = ConfigDict(
    extra="forbid",
    validate_assignment=True,
    use_enum_values=False,  # keep enums as enums in Python
)

_IMMUTABLE_CONTRACT_CONFIG = ConfigDict(
    extra="forbid",
    use_enum_values=False,
    frozen=True,
)


def _validate_hex_field(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError("hex fields must be strings")
    try:
        from_hex(value)
    except HexParseError as exc:
        raise ValueError(str(exc)) from exc
    return value


# ------------------------------------------------------------------------------
# Evidence records
# ------------------------------------------------------------------------------


class GarbageSpan(BaseModel):
    """
    One invalid UTF-8 run.

    ``start``/``end`` are half-open offsets into the scanned window (a chunk,
    plus any tail carried over from the previous chunk). ``base`` is where that
    window begins inside the full ingested buffer.
    """

    model_config = _IMMUTABLE_CONTRACT_CONFIG

    start: int = Field(ge=0)
    end: int = Field(gt=0)
    base: int = Field(default=0, ge=0)
    raw_hex: str

    @field_validator("raw_hex", mode="before")
    @classmethod
    def _normalize_raw_hex(cls, value: object) -> str:
        return _validate_hex_field(value)

    @model_validator(mode="after")
    def _check_bounds(self) -> Self:
        if self.end <= self.start:
            raise ValueError("span end must be greater than start")
        if len(from_hex(self.raw_hex)) != self.end - self.start:
            raise ValueError("span raw bytes do not match span length")
        return self

    @classmethod
    def from_run(cls, *, start: int, end: int, base: int, raw: bytes) -> GarbageSpan:
        return cls(start=start, end=end, base=base, raw_hex=to_hex(raw))

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def absolute_start(self) -> int:
        return self.base + self.start

    @property
    def absolute_end(self) -> int:
        return self.base + self.end

    @property
    def raw(self) -> bytes:
        return from_hex(self.raw_hex)

    def as_tuple(self) -> tuple[int, int]:
        return (self.start, self.end)


class RecoveredRun(BaseModel):
    """Bytes a recovery hook replaced with substitute text."""

    model_config = _IMMUTABLE_CONTRACT_CONFIG

    start: int = Field(ge=0)
    end: int = Field(ge=0)
    base: int = Field(default=0, ge=0)
    raw_hex: str
    text: str

    @field_validator("raw_hex", mode="before")
    @classmethod
    def _normalize_raw_hex(cls, value: object) -> str:
        return _validate_hex_field(value)

    @property
    def raw(self) -> bytes:
        return from_hex(self.raw_hex)

    @property
    def text_bytes(self) -> bytes:
        return self.text.encode("utf-8")


# ------------------------------------------------------------------------------
# Verdict / report
# ------------------------------------------------------------------------------


class VerdictStatus(StrEnum):
    SAFE = "safe"
    UNSAFE_STRING = "unsafe_string"
    INVALID_UTF8 = "invalid_utf8"


class EvidenceReport(BaseModel):
    model_config = _CONTRACT_CONFIG

    REQUIRED_PAYLOAD_FIELDS: ClassVar[tuple[str, ...]] = (
        "evidence_id",
        "verdict",
        "message",
        "safe_text",
        "ingested_hex",
        "safe_hex",
        "garbage_hex",
        "pending_hex",
        "spans",
        "recovered",
        "invariant_checks",
    )

    evidence_id: str = Field(min_length=1)
    verdict: VerdictStatus
    message: str | None = None
    safe_text: str
    ingested_hex: str
    safe_hex: str
    garbage_hex: str
    pending_hex: str = "0x"
    spans: list[GarbageSpan] = Field(default_factory=list)
    recovered: list[RecoveredRun] = Field(default_factory=list)
    invariant_checks: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("ingested_hex", "safe_hex", "garbage_hex", "pending_hex", mode="before")
    @classmethod
    def _normalize_hex(cls, value: object) -> str:
        return _validate_hex_field(value)

    @model_validator(mode="after")
    def _check_verdict_message(self) -> Self:
        if self.verdict is not VerdictStatus.SAFE and not self.message:
            raise ValueError("non-safe verdicts must carry a diagnostic message")
        return self

    @classmethod
    def required_payload_fields(cls) -> tuple[str, ...]:
        return cls.REQUIRED_PAYLOAD_FIELDS

    @property
    def ingested(self) -> bytes:
        return from_hex(self.ingested_hex)

    @property
    def safe_bytes(self) -> bytes:
        return from_hex(self.safe_hex)

    @property
    def garbage(self) -> bytes:
        return from_hex(self.garbage_hex)

    @property
    def passed_invariants(self) -> bool:
        return all(bool(check.get("passed")) for check in self.invariant_checks)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> EvidenceReport:
        raw = dict(payload)
        candidate = {field: raw[field] for field in cls.required_payload_fields() if field in raw}

        try:
            return cls.model_validate(candidate)
        except ValidationError as exc:
            errors = exc.errors()

            def _loc0(err: ErrorDetails) -> str | None:
                loc = err.get("loc")
                if not isinstance(loc, (list, tuple)) or not loc:
                    return None
                head = loc[0]
                return head if isinstance(head, str) else None

            loc0s = sorted({loc for loc in (_loc0(e) for e in errors) if loc is not None})
            where = ", ".join(loc0s) or "payload"
            raise ReportPayloadValidationError(f"evidence report is malformed or incomplete: {where}") from exc

    def to_canonical_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json")
        return {field: payload[field] for field in self.required_payload_fields()}


__all__ = [
    "EvidenceReport",
    "GarbageSpan",
    "RecoveredRun",
    "ReportPayloadValidationError",
    "VerdictStatus",
]
