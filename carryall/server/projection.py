"""Result projection: reduce a callable's return value to the requested named values."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Sequence

from carryall.protocol.codec import has_attribute_state, public_attributes
from carryall.protocol.envelope import GetterSpec
from carryall.utils.exceptions import LookupFault


def project(value: Any, fields: Sequence[str] = (), getters: Sequence[GetterSpec] = ()) -> Any:
    """
    Project ``value`` into new containers.

    Lists, tuples and mappings are projected element by element. A structured object
    becomes a dict of its public attributes when neither fields nor getters are
    requested; otherwise of exactly the requested fields followed by the getter results,
    so a getter key overrides a field of the same name. Anything else is returned as is.
    """
    if isinstance(value, Mapping):
        return {key: project(item, fields, getters) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [project(item, fields, getters) for item in value]
    if has_attribute_state(value):
        return project_object(value, fields, getters)
    return value


def project_object(obj: Any, fields: Sequence[str], getters: Sequence[GetterSpec]) -> dict[str, Any]:
    if not fields and not getters:
        return public_attributes(obj)

    projected: dict[str, Any] = {}
    type_name = type(obj).__name__
    for key in fields:
        if key.startswith("_") or not hasattr(obj, key):
            raise LookupFault(f'Field "{key}" not found on {type_name}', name=key)
        projected[key] = getattr(obj, key)
    for getter in getters:
        method = None if getter.name.startswith("_") else getattr(obj, getter.name, None)
        if not callable(method):
            raise LookupFault(f'Getter "{getter.name}" not found on {type_name}', name=getter.name)
        projected[getter.resolved_key] = method(*getter.params)
    return projected
