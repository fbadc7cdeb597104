import json
from urllib.parse import parse_qs

import httpx
import pytest

from carryall.client import builder as builder_module
from carryall.client.builder import CallBuilder, get_default_dispatcher, set_default_dispatcher
from carryall.client.transport import AsyncHttpTransport, HttpTransport
from carryall.config.schema import ClientConfig
from carryall.protocol.envelope import GetterSpec
from carryall.utils.exceptions import RemoteError, ValidationError


def _mock(seen, text='{"result":{}}', status=200):
    def handler(request):
        seen.append(request)
        return httpx.Response(status, text=text)

    return httpx.MockTransport(handler)


def _form(request):
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def _builder(seen, text='{"result":{}}', dispatcher=None, **config):
    transport = HttpTransport(client=httpx.Client(transport=_mock(seen, text)))
    return CallBuilder(dispatcher, config=ClientConfig(**config), transport=transport)


def test_call_posts_four_form_fields():
    seen = []
    b = _builder(seen, dispatcher="http://bridge.test/rpc")
    b.add_field("name").add_getter("getTotal").add_getter("getLabel", "#", key="tag")
    b.call("Inventory::items", 5)
    form = _form(seen[0])
    assert str(seen[0].url) == "http://bridge.test/rpc"
    assert form["callable"] == "Inventory::items"
    assert json.loads(form["params"]) == [5]
    assert json.loads(form["fields"]) == ["name"]
    assert json.loads(form["getters"]) == [
        {"name": "getTotal", "params": []},
        {"name": "getLabel", "params": ["#"], "key": "tag"},
    ]


def test_call_returns_result_and_invokes_continuation():
    seen, results = [], []
    b = _builder(seen, text='{"result":{"0":1,"1":2}}')
    assert b.call("time", on_result=results.append) == {"0": 1, "1": 2}
    assert results == [{"0": 1, "1": 2}]


def test_call_raises_remote_error():
    with pytest.raises(RemoteError):
        _builder([], text='{"errortext":"Callable \\"x\\" is not allowed"}').call("x")


@pytest.mark.parametrize("name", ["", None, 5])
def test_empty_or_non_string_callable_is_rejected_before_sending(name):
    seen = []
    with pytest.raises(ValidationError):
        _builder(seen).call(name)
    assert seen == []


def test_add_getter_normalizes_params_and_fields_persist():
    seen = []
    b = _builder(seen)
    b.add_field("name").add_field("name").add_getter("getLabel", ("a", "b"))
    assert b.fields == ["name", "name"]
    assert b.getters == [GetterSpec("getLabel", ["a", "b"], None)]
    b.call("time")
    b.call("time")
    assert [json.loads(_form(r)["fields"]) for r in seen] == [["name", "name"], ["name", "name"]]


def test_add_getter_rejects_empty_name():
    with pytest.raises(ValidationError):
        CallBuilder(config=ClientConfig()).add_getter("")


def test_dispatcher_resolution_order():
    b = CallBuilder(config=ClientConfig(dispatcher_url="http://config.test/"))
    assert b.dispatcher == "http://config.test/"
    set_default_dispatcher("http://default.test/")
    assert get_default_dispatcher() == "http://default.test/"
    assert b.dispatcher == "http://default.test/"
    assert b.set_dispatcher("http://own.test/") is b
    assert b.dispatcher == "http://own.test/"


def test_config_drives_default_transport_and_interpreter():
    b = CallBuilder(config=ClientConfig(timeout_s=2.5, strict_status=False))
    assert b.transport.timeout == 2.5
    assert b.async_transport.timeout == 2.5
    assert b.interpreter.strict_status is False


def test_get_and_post_return_raw_response():
    seen, texts = [], []
    b = _builder(seen, text="plain text")
    resp = b.get("http://bridge.test/page", {"q": "x"}, on_text=lambda text, r: texts.append((text, r.status_code)))
    assert resp.text == "plain text"
    assert texts == [("plain text", 200)]
    b.post("http://bridge.test/page", {"q": "y"})
    assert seen[0].url.params["q"] == "x"
    assert seen[1].content == b"q=y"


def test_module_level_call_uses_default_dispatcher(monkeypatch):
    seen = []
    set_default_dispatcher("http://default.test/")
    original = builder_module.HttpTransport

    def _transport(*, timeout):
        return original(timeout=timeout, client=httpx.Client(transport=_mock(seen, '{"result":7}')))

    monkeypatch.setattr(builder_module, "HttpTransport", _transport)
    assert builder_module.call("time") == 7
    assert str(seen[0].url) == "http://default.test/"


@pytest.mark.asyncio
async def test_acall_uses_async_transport():
    seen = []
    client = httpx.AsyncClient(transport=_mock(seen, '{"result":{"0":"a"}}'))
    b = CallBuilder(
        "http://bridge.test/",
        config=ClientConfig(),
        async_transport=AsyncHttpTransport(client=client),
    )
    results = []
    assert await b.acall("date", ["Y"], on_result=results.append) == {"0": "a"}
    await client.aclose()
    assert results == [{"0": "a"}]
    assert json.loads(_form(seen[0])["params"]) == ["Y"]
