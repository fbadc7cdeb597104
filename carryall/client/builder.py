"""Client-side call construction.

A ``CallBuilder`` accumulates projection directives (fields and getters) and sends one
call per ``call``/``acall``. The directives persist across calls on the same builder.
"""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from carryall.client.interpreter import ResponseInterpreter, ResultCallback
from carryall.client.transport import AsyncHttpTransport, HttpTransport, RequestData, TransportResponse
from carryall.config.access import get_config
from carryall.config.schema import ClientConfig
from carryall.protocol.envelope import GetterSpec, RequestEnvelope, normalize_params
from carryall.utils.exceptions import ValidationError

TextCallback = Callable[[str, TransportResponse], Any]

_default_dispatcher: str | None = None


def set_default_dispatcher(url: str | None) -> None:
    """Set the process-wide dispatcher used by builders without their own endpoint."""
    global _default_dispatcher
    _default_dispatcher = url or None


def get_default_dispatcher() -> str | None:
    return _default_dispatcher


class CallBuilder:
    """Builds and sends bridge calls to one dispatcher endpoint."""

    def __init__(
        self,
        dispatcher: str | None = None,
        *,
        config: ClientConfig | None = None,
        transport: HttpTransport | None = None,
        async_transport: AsyncHttpTransport | None = None,
        interpreter: ResponseInterpreter | None = None,
    ):
        self._dispatcher = dispatcher
        self._config = config
        self._transport = transport
        self._async_transport = async_transport
        self._interpreter = interpreter
        self._fields: list[str] = []
        self._getters: list[GetterSpec] = []

    @property
    def config(self) -> ClientConfig:
        if self._config is None:
            self._config = get_config().client
        return self._config

    @property
    def dispatcher(self) -> str:
        """Endpoint for the next call: own endpoint, process default, then configured URL."""
        return self._dispatcher or _default_dispatcher or self.config.dispatcher_url

    @property
    def transport(self) -> HttpTransport:
        if self._transport is None:
            self._transport = HttpTransport(timeout=self.config.timeout_s)
        return self._transport

    @property
    def async_transport(self) -> AsyncHttpTransport:
        if self._async_transport is None:
            self._async_transport = AsyncHttpTransport(timeout=self.config.timeout_s)
        return self._async_transport

    @property
    def interpreter(self) -> ResponseInterpreter:
        if self._interpreter is None:
            self._interpreter = ResponseInterpreter(strict_status=self.config.strict_status)
        return self._interpreter

    @property
    def fields(self) -> list[str]:
        return list(self._fields)

    @property
    def getters(self) -> list[GetterSpec]:
        return list(self._getters)

    def set_dispatcher(self, url: str) -> CallBuilder:
        self._dispatcher = url
        return self

    def add_field(self, key: str) -> CallBuilder:
        """Request attribute ``key`` of every projected object."""
        if not isinstance(key, str) or not key:
            raise ValidationError("Field name must be a non-empty string", field="fields")
        self._fields.append(key)
        return self

    def add_getter(self, name: str, params: Any = None, key: str | None = None) -> CallBuilder:
        """Request the value of ``name(*params)`` on every projected object, stored under ``key``."""
        if not isinstance(name, str) or not name:
            raise ValidationError("Getter name must be a non-empty string", field="getters")
        self._getters.append(GetterSpec(name=name, params=normalize_params(params), key=key))
        return self

    def build_request(self, callable_name: str, params: Any = None) -> RequestEnvelope:
        if not isinstance(callable_name, str) or not callable_name:
            raise ValidationError("Callable name must be a non-empty string", field="callable")
        return RequestEnvelope(
            callable_name=callable_name,
            params=normalize_params(params),
            fields=list(self._fields),
            getters=list(self._getters),
        )

    def call(self, callable_name: str, params: Any = None, on_result: ResultCallback | None = None) -> Any:
        """Invoke ``callable_name`` remotely and block until its result is available."""
        request = self.build_request(callable_name, params)
        url = self.dispatcher
        logger.debug("Bridge call {} -> {}", callable_name, url)
        response = self.transport.send(url, "POST", request.to_form())
        return self.interpreter.interpret(response, on_result)

    async def acall(self, callable_name: str, params: Any = None, on_result: ResultCallback | None = None) -> Any:
        request = self.build_request(callable_name, params)
        url = self.dispatcher
        logger.debug("Bridge call {} -> {}", callable_name, url)
        response = await self.async_transport.send(url, "POST", request.to_form())
        return self.interpreter.interpret(response, on_result)

    def get(self, url: str, params: RequestData = None, on_text: TextCallback | None = None) -> TransportResponse:
        """Plain GET outside the bridge protocol; the body is not interpreted."""
        return self._request(url, "GET", params, on_text)

    def post(self, url: str, params: RequestData = None, on_text: TextCallback | None = None) -> TransportResponse:
        """Plain POST outside the bridge protocol; the body is not interpreted."""
        return self._request(url, "POST", params, on_text)

    def _request(self, url: str, method: str, params: RequestData, on_text: TextCallback | None) -> TransportResponse:
        response = self.transport.send(url, method, params)
        if on_text is not None:
            on_text(response.text, response)
        return response


def call(
    callable_name: str,
    params: Any = None,
    on_result: ResultCallback | None = None,
    *,
    dispatcher: str | None = None,
) -> Any:
    """One-shot call through a fresh builder."""
    return CallBuilder(dispatcher).call(callable_name, params, on_result)


def get(url: str, params: RequestData = None, on_text: TextCallback | None = None) -> TransportResponse:
    return CallBuilder().get(url, params, on_text)


def post(url: str, params: RequestData = None, on_text: TextCallback | None = None) -> TransportResponse:
    return CallBuilder().post(url, params, on_text)
