"""Client half of the bridge: call construction, transport and response interpretation."""

from carryall.client.builder import (
    CallBuilder,
    call,
    get,
    get_default_dispatcher,
    post,
    set_default_dispatcher,
)
from carryall.client.executor import CodeExecutor, PythonCodeExecutor
from carryall.client.interpreter import ResponseInterpreter
from carryall.client.transport import AsyncHttpTransport, HttpTransport, TransportResponse

__all__ = [
    "AsyncHttpTransport",
    "CallBuilder",
    "CodeExecutor",
    "HttpTransport",
    "PythonCodeExecutor",
    "ResponseInterpreter",
    "TransportResponse",
    "call",
    "get",
    "get_default_dispatcher",
    "post",
    "set_default_dispatcher",
]
