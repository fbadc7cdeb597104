"""Utilities for sequential dispatch stage pipelines."""

from __future__ import annotations

import inspect
from typing import Awaitable, Callable, Iterable

from carryall.protocol.envelope import ResponseEnvelope

StageResult = ResponseEnvelope | None
DispatchStage = Callable[[], Awaitable[StageResult] | StageResult]


async def run_stage_pipeline(stages: Iterable[DispatchStage]) -> StageResult:
    """Run stages in order and return the first envelope produced."""
    for stage in stages:
        outcome = stage()
        result = await outcome if inspect.isawaitable(outcome) else outcome
        if result is not None:
            return result
    return None
