import pytest

from carryall.client.executor import PythonCodeExecutor
from carryall.client.interpreter import ResponseInterpreter
from carryall.client.transport import TransportResponse
from carryall.utils.exceptions import DecodeFault, RemoteCodeFault, RemoteError, TransportFault


def test_result_is_returned_and_passed_to_continuation():
    seen = []
    result = ResponseInterpreter().interpret(TransportResponse(200, '{"result":{"0":5}}'), seen.append)
    assert result == {"0": 5}
    assert seen == [{"0": 5}]


def test_missing_result_yields_empty_object():
    assert ResponseInterpreter().interpret(TransportResponse(200, "{}")) == {}


def test_errortext_raises_remote_error():
    seen = []
    with pytest.raises(RemoteError) as exc_info:
        ResponseInterpreter().interpret(TransportResponse(200, '{"errortext":"nope"}'), seen.append)
    assert exc_info.value.message == "nope"
    assert seen == []


@pytest.mark.parametrize("body", ["<html>oops</html>", "[1,2]"])
def test_malformed_body_raises_decode_fault_with_payload(body):
    seen = []
    with pytest.raises(DecodeFault) as exc_info:
        ResponseInterpreter().interpret(TransportResponse(200, body), seen.append)
    assert exc_info.value.payload == body
    assert exc_info.value.message.startswith("Malformed response, ")
    assert seen == []


def test_jscode_is_executed_without_continuation():
    seen = []
    executor = PythonCodeExecutor({"box": {}})
    interpreter = ResponseInterpreter(executor=executor)
    result = interpreter.interpret(TransportResponse(200, '{"jscode":"answer=42;box.update(ok=true)"}'), seen.append)
    assert result is None
    assert seen == []
    assert executor.namespace["answer"] == 42
    assert executor.namespace["box"] == {"ok": True}


def test_failing_jscode_raises_remote_code_fault():
    with pytest.raises(RemoteCodeFault) as exc_info:
        ResponseInterpreter().interpret(TransportResponse(200, '{"jscode":"missing()"}'))
    assert exc_info.value.source == "missing()"
    assert exc_info.value.message.startswith("Response execution failed, ")


def test_non_200_raises_in_strict_mode():
    with pytest.raises(TransportFault) as exc_info:
        ResponseInterpreter().interpret(TransportResponse(503, "busy"))
    assert exc_info.value.code == "HTTP_STATUS"
    assert exc_info.value.status_code == 503
    assert exc_info.value.body == "busy"


def test_non_200_yields_empty_result_in_legacy_mode():
    seen = []
    interpreter = ResponseInterpreter(strict_status=False)
    assert interpreter.interpret(TransportResponse(400, '{"errortext":"bad"}'), seen.append) == {}
    assert seen == [{}]
