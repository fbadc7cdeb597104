"""Request and response envelopes exchanged by the bridge.

A request travels as four form fields. ``callable`` is a plain string while ``params``,
``fields`` and ``getters`` are each an independently encoded JSON string. A response is a
JSON object carrying exactly one of ``errortext``, ``jscode`` or ``result``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from carryall.protocol import codec
from carryall.utils.exceptions import DecodeFault

FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"
JSON_MEDIA_TYPE = "application/json; charset=utf-8"

ResponseKind = Literal["errortext", "jscode", "result"]
RESPONSE_KINDS: tuple[ResponseKind, ...] = ("errortext", "jscode", "result")


def normalize_params(params: Any) -> list[Any]:
    """Wrap a bare value into a one-element list; lists and tuples are copied as lists."""
    if params is None:
        return []
    if isinstance(params, (list, tuple)):
        return list(params)
    return [params]


def derive_getter_key(name: str) -> str:
    """Default result key for a getter: the lowercased name without a leading ``get``."""
    return (name[3:] if name.startswith("get") else name).lower()


@dataclass(slots=True)
class GetterSpec:
    """A named accessor to invoke on each projected object."""

    name: str
    params: list[Any] = field(default_factory=list)
    key: str | None = None

    @property
    def resolved_key(self) -> str:
        return self.key if self.key else derive_getter_key(self.name)

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "params": list(self.params)}
        if self.key is not None:
            data["key"] = self.key
        return data

    @classmethod
    def from_wire(cls, raw: Any) -> GetterSpec:
        """Build a spec from its decoded JSON form, resolving the result key."""
        if not isinstance(raw, Mapping) or not isinstance(raw.get("name"), str) or not raw["name"]:
            raise DecodeFault(
                "Malformed getter spec, expected an object with a non-empty name",
                payload=codec.encode(raw),
                field="getters",
            )
        name = raw["name"]
        key = raw.get("key")
        return cls(
            name=name,
            params=normalize_params(raw.get("params")),
            key=str(key) if key not in (None, "") else derive_getter_key(name),
        )


def _decode_field(form: Mapping[str, Any], name: str) -> list[Any]:
    raw = form.get(name)
    if raw is None or raw == "":
        return []
    if not isinstance(raw, str):
        raise DecodeFault(f"Request field {name!r} must be a JSON string", field=name)
    try:
        value = codec.decode(raw)
    except ValueError as exc:
        raise DecodeFault(f"Malformed request field {name!r}: {exc}", payload=raw, field=name) from exc
    if value is None:
        return []
    if not isinstance(value, list):
        raise DecodeFault(f"Request field {name!r} must be a JSON array", payload=raw, field=name)
    return value


@dataclass(slots=True)
class RequestEnvelope:
    """One bridge call: target callable, positional params and projection directives."""

    callable_name: str
    params: list[Any] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)
    getters: list[GetterSpec] = field(default_factory=list)

    def to_form(self) -> dict[str, str]:
        return {
            "callable": self.callable_name,
            "params": codec.encode(list(self.params)),
            "fields": codec.encode(list(self.fields)),
            "getters": codec.encode([getter.to_wire() for getter in self.getters]),
        }

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> RequestEnvelope:
        """Decode the four form fields; raises ``DecodeFault`` on malformed JSON."""
        callable_name = form.get("callable")
        params = _decode_field(form, "params")
        fields = _decode_field(form, "fields")
        if not all(isinstance(key, str) for key in fields):
            raise DecodeFault("Request field 'fields' must only hold strings", payload=form.get("fields"), field="fields")
        getters = [GetterSpec.from_wire(raw) for raw in _decode_field(form, "getters")]
        return cls(
            callable_name=callable_name if isinstance(callable_name, str) else "",
            params=params,
            fields=fields,
            getters=getters,
        )


@dataclass(frozen=True, slots=True)
class ResponseEnvelope:
    """The single populated branch of a response."""

    kind: ResponseKind
    value: Any = None

    @classmethod
    def for_error(cls, message: str) -> ResponseEnvelope:
        return cls("errortext", message)

    @classmethod
    def for_code(cls, source: str) -> ResponseEnvelope:
        return cls("jscode", source)

    @classmethod
    def for_result(cls, value: Any) -> ResponseEnvelope:
        return cls("result", value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResponseEnvelope:
        """Pick the branch a client acts on: errortext, then jscode, then result."""
        if data.get("errortext"):
            return cls.for_error(str(data["errortext"]))
        if data.get("jscode"):
            return cls.for_code(str(data["jscode"]))
        return cls.for_result(data["result"] if "result" in data else {})

    def to_dict(self, *, force_object: bool = True) -> dict[str, Any]:
        if self.kind == "result" and force_object:
            return {"result": codec.force_object(self.value)}
        return {self.kind: self.value}

    def to_json(self, *, force_object: bool = True) -> str:
        return codec.encode(self.to_dict(force_object=force_object))
