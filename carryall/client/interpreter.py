"""Interpretation of a dispatcher response on the client."""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from carryall.client.executor import CodeExecutor, PythonCodeExecutor
from carryall.client.transport import TransportResponse
from carryall.protocol import codec
from carryall.protocol.envelope import ResponseEnvelope
from carryall.utils.exceptions import DecodeFault, RemoteCodeFault, RemoteError, TransportFault

ResultCallback = Callable[[Any], Any]


class ResponseInterpreter:
    """Turns a raw transport response into a result, an executed fragment or a fault."""

    def __init__(self, *, executor: CodeExecutor | None = None, strict_status: bool = True):
        self.executor = executor or PythonCodeExecutor()
        self.strict_status = strict_status

    def parse(self, response: TransportResponse) -> ResponseEnvelope:
        if response.status_code != 200:
            if self.strict_status:
                raise TransportFault(
                    f"Dispatcher answered with HTTP {response.status_code}",
                    code="HTTP_STATUS",
                    status_code=response.status_code,
                    body=response.text,
                )
            logger.debug("Ignoring HTTP {} body from dispatcher", response.status_code)
            return ResponseEnvelope.for_result({})

        try:
            data = codec.decode(response.text)
        except ValueError as exc:
            raise DecodeFault(f"Malformed response, {exc}, payload: {response.text}", payload=response.text) from exc
        if not isinstance(data, dict):
            raise DecodeFault(
                f"Malformed response, expected a JSON object, payload: {response.text}",
                payload=response.text,
            )
        return ResponseEnvelope.from_dict(data)

    def interpret(self, response: TransportResponse, on_result: ResultCallback | None = None) -> Any:
        """
        Act on one response.

        Returns the result after passing it to ``on_result``. A ``jscode`` branch is executed
        instead and yields ``None`` without invoking ``on_result``.
        """
        envelope = self.parse(response)
        if envelope.kind == "errortext":
            raise RemoteError(envelope.value)
        if envelope.kind == "jscode":
            self.run_code(envelope.value)
            return None
        if on_result is not None:
            on_result(envelope.value)
        return envelope.value

    def run_code(self, source: str) -> None:
        try:
            self.executor.execute(source)
        except Exception as exc:
            raise RemoteCodeFault(f"Response execution failed, {exc}, payload: {source}", source) from exc
