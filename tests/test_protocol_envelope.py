import json

import pytest

from carryall.protocol.envelope import (
    GetterSpec,
    RequestEnvelope,
    ResponseEnvelope,
    derive_getter_key,
    normalize_params,
)
from carryall.utils.exceptions import DecodeFault


def test_normalize_params():
    assert normalize_params(None) == []
    assert normalize_params(5) == [5]
    assert normalize_params("x") == ["x"]
    assert normalize_params((1, 2)) == [1, 2]
    original = [1]
    assert normalize_params(original) is not original


def test_derive_getter_key():
    assert derive_getter_key("getTotal") == "total"
    assert derive_getter_key("count") == "count"
    assert derive_getter_key("GetTotal") == "gettotal"
    assert derive_getter_key("get") == ""


def test_getter_spec_key_resolution():
    assert GetterSpec("getTotal").resolved_key == "total"
    assert GetterSpec("getTotal", key="sum").resolved_key == "sum"
    assert GetterSpec.from_wire({"name": "getLabel", "params": "x"}) == GetterSpec("getLabel", ["x"], "label")
    assert GetterSpec.from_wire({"name": "getLabel", "key": "tag"}).key == "tag"


def test_getter_spec_to_wire_omits_missing_key():
    assert GetterSpec("getTotal").to_wire() == {"name": "getTotal", "params": []}
    assert GetterSpec("getTotal", [1], "sum").to_wire() == {"name": "getTotal", "params": [1], "key": "sum"}


@pytest.mark.parametrize("raw", [None, "getTotal", {"params": []}, {"name": ""}])
def test_getter_spec_rejects_malformed(raw):
    with pytest.raises(DecodeFault):
        GetterSpec.from_wire(raw)


def test_request_to_form_encodes_each_field_independently():
    request = RequestEnvelope("Inventory::items", [1, "a"], ["name"], [GetterSpec("getTotal")])
    form = request.to_form()
    assert form["callable"] == "Inventory::items"
    assert json.loads(form["params"]) == [1, "a"]
    assert json.loads(form["fields"]) == ["name"]
    assert json.loads(form["getters"]) == [{"name": "getTotal", "params": []}]


def test_request_from_form_defaults_missing_fields():
    request = RequestEnvelope.from_form({"callable": "time", "params": "", "fields": "null"})
    assert request == RequestEnvelope("time", [], [], [])


def test_request_from_form_resolves_getter_keys():
    form = {
        "callable": "x",
        "getters": '[{"name":"getTotal","params":[2]},{"name":"getLabel","key":"tag"}]',
    }
    request = RequestEnvelope.from_form(form)
    assert [g.resolved_key for g in request.getters] == ["total", "tag"]
    assert request.getters[0].params == [2]


@pytest.mark.parametrize(
    "form",
    [
        {"callable": "x", "params": "[1,"},
        {"callable": "x", "params": '{"a":1}'},
        {"callable": "x", "fields": "[1]"},
        {"callable": "x", "getters": '["getTotal"]'},
    ],
)
def test_request_from_form_rejects_malformed_fields(form):
    with pytest.raises(DecodeFault) as exc_info:
        RequestEnvelope.from_form(form)
    assert exc_info.value.code == "DECODE_FAULT"


def test_request_from_form_keeps_payload_on_fault():
    with pytest.raises(DecodeFault) as exc_info:
        RequestEnvelope.from_form({"callable": "x", "params": "nope"})
    assert exc_info.value.payload == "nope"
    assert exc_info.value.field == "params"


def test_response_from_dict_picks_first_populated_branch():
    assert ResponseEnvelope.from_dict({"errortext": "bad", "result": 1}) == ResponseEnvelope.for_error("bad")
    assert ResponseEnvelope.from_dict({"jscode": "a=1;"}) == ResponseEnvelope.for_code("a=1;")
    assert ResponseEnvelope.from_dict({"errortext": "", "result": [1]}) == ResponseEnvelope.for_result([1])
    assert ResponseEnvelope.from_dict({}) == ResponseEnvelope.for_result({})


def test_response_to_json_forces_objects_for_results_only():
    assert ResponseEnvelope.for_result([1, 2]).to_json() == '{"result":{"0":1,"1":2}}'
    assert ResponseEnvelope.for_result([1, 2]).to_json(force_object=False) == '{"result":[1,2]}'
    assert ResponseEnvelope.for_error("nope").to_json() == '{"errortext":"nope"}'
    assert ResponseEnvelope.for_code("a=5;").to_dict() == {"jscode": "a=5;"}
