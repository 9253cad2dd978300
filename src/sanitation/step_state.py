from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from byte_salvage.decoder import ByteEvidence


@dataclass
class SalvageStepState:
    chunks: list[bytes] = field(default_factory=list)
    evidence: ByteEvidence | None = None
    strict_text: str | None = None
    strict_error: Exception | None = None


@dataclass
class BooleanStepState:
    byte: int | None = None
    classified: tuple[bool, int | None] | None = None


def get_salvage_step_state(context: Any) -> SalvageStepState:
    state = getattr(context, "_salvage_step_state", None)
    if not isinstance(state, SalvageStepState):
        state = SalvageStepState()
        setattr(context, "_salvage_step_state", state)
    return state


def get_boolean_step_state(context: Any) -> BooleanStepState:
    state = getattr(context, "_boolean_step_state", None)
    if not isinstance(state, BooleanStepState):
        state = BooleanStepState()
        setattr(context, "_boolean_step_state", state)
    return state
