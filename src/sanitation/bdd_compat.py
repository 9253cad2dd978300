"""Gherkin step decorators that fall back to pass-throughs without behave."""
from __future__ import annotations

import importlib
import importlib.util
from typing import Any, Callable, TypeVar, cast

StepFunc = TypeVar("StepFunc", bound=Callable[..., Any])
StepDecorator = Callable[[str], Callable[[StepFunc], StepFunc]]

BEHAVE_AVAILABLE = importlib.util.find_spec("behave") is not None


def passthrough_step(_: str) -> Callable[[StepFunc], StepFunc]:
    def _decorator(func: StepFunc) -> StepFunc:
        return func

    return _decorator


def _step_decorators() -> tuple[StepDecorator, StepDecorator, StepDecorator]:
    if not BEHAVE_AVAILABLE:
        return passthrough_step, passthrough_step, passthrough_step
    behave = importlib.import_module("behave")
    return (
        cast(StepDecorator, behave.given),
        cast(StepDecorator, behave.when),
        cast(StepDecorator, behave.then),
    )


given, when, then = _step_decorators()

__all__ = ["BEHAVE_AVAILABLE", "given", "passthrough_step", "then", "when"]
