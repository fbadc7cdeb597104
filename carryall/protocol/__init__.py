"""Wire protocol: JSON codec and request/response envelopes."""

from carryall.protocol.envelope import (
    FORM_MEDIA_TYPE,
    JSON_MEDIA_TYPE,
    GetterSpec,
    RequestEnvelope,
    ResponseEnvelope,
    derive_getter_key,
    normalize_params,
)

__all__ = [
    "FORM_MEDIA_TYPE",
    "JSON_MEDIA_TYPE",
    "GetterSpec",
    "RequestEnvelope",
    "ResponseEnvelope",
    "derive_getter_key",
    "normalize_params",
]
