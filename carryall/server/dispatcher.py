"""Server-side dispatch of one bridge call.

Stages: validate the callable against the registry, invoke it, then either return
deferred code verbatim or project the result. Each stage may short-circuit with an
envelope; faults become ``errortext``. Request decoding happens before the stages and
raises ``DecodeFault`` to the caller (the HTTP layer answers 400). A result the codec
cannot encode is reported as ``errortext`` as well.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Mapping

from loguru import logger

from carryall.protocol.envelope import RequestEnvelope, ResponseEnvelope
from carryall.server.deferred import DeferredCode
from carryall.server.error_boundary import (
    carryall_error_result,
    not_allowed_result,
    unhandled_exception_result,
)
from carryall.server.pipeline import run_stage_pipeline
from carryall.server.projection import project
from carryall.server.registry import CallableRegistry
from carryall.utils.exceptions import CarryallError


@dataclass(slots=True)
class _DispatchState:
    request: RequestEnvelope
    result: Any = None


class Dispatcher:
    """Validates, invokes and shapes bridge calls against one registry."""

    def __init__(self, registry: CallableRegistry | None = None, *, force_object: bool = True):
        self.registry = registry if registry is not None else CallableRegistry()
        self.force_object = force_object

    async def dispatch_form(self, form: Mapping[str, Any]) -> ResponseEnvelope:
        """Decode the four form fields and dispatch; raises ``DecodeFault`` on malformed JSON."""
        return await self.dispatch(RequestEnvelope.from_form(form))

    async def respond_form(self, form: Mapping[str, Any]) -> str:
        """Decode, dispatch and encode one call; raises ``DecodeFault`` on malformed JSON."""
        request = RequestEnvelope.from_form(form)
        return self.render(await self.dispatch(request), callable_name=request.callable_name)

    async def dispatch(self, request: RequestEnvelope) -> ResponseEnvelope:
        state = _DispatchState(request=request)
        name = request.callable_name
        try:
            response = await run_stage_pipeline(
                (
                    lambda: self._validate(state),
                    lambda: self._invoke(state),
                )
            )
            return response if response is not None else self._shape(state)
        except CarryallError as exc:
            return carryall_error_result(callable_name=name, exc=exc, log_warning=logger.warning)
        except Exception as exc:
            return unhandled_exception_result(callable_name=name, exc=exc, log_exception=logger.exception)

    def render(self, response: ResponseEnvelope, *, callable_name: str = "") -> str:
        """Encode an envelope for the wire; a result the codec rejects becomes an execution fault."""
        try:
            return response.to_json(force_object=self.force_object)
        except (TypeError, ValueError) as exc:
            fault = unhandled_exception_result(callable_name=callable_name, exc=exc, log_exception=logger.exception)
            return fault.to_json(force_object=self.force_object)

    def _validate(self, state: _DispatchState) -> ResponseEnvelope | None:
        name = state.request.callable_name
        if not self.registry.is_allowed(name):
            return not_allowed_result(callable_name=name, log_denied=logger.warning)
        return None

    async def _invoke(self, state: _DispatchState) -> ResponseEnvelope | None:
        request = state.request
        target = self.registry.resolve(request.callable_name)
        logger.debug("Bridge call {} with {} params", request.callable_name, len(request.params))
        outcome = target(*request.params)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        if isinstance(outcome, DeferredCode):
            return ResponseEnvelope.for_code(outcome.code)
        state.result = outcome
        return None

    def _shape(self, state: _DispatchState) -> ResponseEnvelope:
        request = state.request
        return ResponseEnvelope.for_result(project(state.result, request.fields, request.getters))
