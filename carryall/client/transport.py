"""HTTP transport adapters for the call builder.

``send`` performs exactly one exchange and returns the raw status and body; interpreting
the body is left to ``ResponseInterpreter``. Network failures surface as ``TransportFault``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from carryall.protocol.envelope import FORM_MEDIA_TYPE
from carryall.utils.exceptions import TransportFault

RequestData = Mapping[str, Any] | str | None


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Status and raw text of one HTTP exchange."""

    status_code: int
    text: str

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> TransportResponse:
        return cls(status_code=response.status_code, text=response.text)


def _append_query(url: str, query: str) -> str:
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def _build_request_kwargs(url: str, method: str, data: RequestData) -> tuple[str, dict[str, Any]]:
    """Map ``data`` onto httpx arguments: a mapping is a query or form body, a string a raw body."""
    method = method.upper()
    kwargs: dict[str, Any] = {}
    if data is None:
        return url, kwargs
    if isinstance(data, str):
        if method == "GET":
            return _append_query(url, data), kwargs
        kwargs["content"] = data.encode("utf-8")
        kwargs["headers"] = {"Content-Type": FORM_MEDIA_TYPE}
        return url, kwargs
    payload = {str(key): "" if value is None else str(value) for key, value in data.items()}
    if method == "GET":
        kwargs["params"] = payload
    else:
        kwargs["data"] = payload
    return url, kwargs


def _timeout_fault(method: str, url: str) -> TransportFault:
    return TransportFault(f"Bridge request timed out: {method} {url}", code="TRANSPORT_TIMEOUT")


def _network_fault(method: str, url: str, exc: Exception) -> TransportFault:
    return TransportFault(f"Bridge request failed: {method} {url}: {exc}", code="TRANSPORT_ERROR")


class HttpTransport:
    """Blocking transport over ``httpx.Client``."""

    def __init__(self, *, timeout: float = 10.0, client: httpx.Client | None = None):
        self.timeout = timeout
        self._client = client

    def send(self, url: str, method: str = "POST", data: RequestData = None) -> TransportResponse:
        method = method.upper()
        target, kwargs = _build_request_kwargs(url, method, data)
        try:
            if self._client is not None:
                response = self._client.request(method, target, **kwargs)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.request(method, target, **kwargs)
        except httpx.TimeoutException as exc:
            raise _timeout_fault(method, url) from exc
        except httpx.RequestError as exc:
            raise _network_fault(method, url, exc) from exc
        return TransportResponse.from_httpx(response)


class AsyncHttpTransport:
    """Non-blocking transport over ``httpx.AsyncClient``."""

    def __init__(self, *, timeout: float = 10.0, client: httpx.AsyncClient | None = None):
        self.timeout = timeout
        self._client = client

    async def send(self, url: str, method: str = "POST", data: RequestData = None) -> TransportResponse:
        method = method.upper()
        target, kwargs = _build_request_kwargs(url, method, data)
        try:
            if self._client is not None:
                response = await self._client.request(method, target, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, target, **kwargs)
        except httpx.TimeoutException as exc:
            raise _timeout_fault(method, url) from exc
        except httpx.RequestError as exc:
            raise _network_fault(method, url, exc) from exc
        return TransportResponse.from_httpx(response)
