"""Parsing of command-line values into bridge params."""

from __future__ import annotations

import json
from typing import Any


def parse_value(raw: str) -> Any:
    """Parse a CLI value as JSON if possible; fall back to the plain string."""
    text = raw.strip()
    if text == "":
        return ""
    try:
        return json.loads(text)
    except ValueError:
        lowered = text.lower()
        if lowered in {"true", "false"}:
            return lowered == "true"
        return text


def parse_getter(raw: str) -> tuple[str, str | None]:
    """Split ``name=key`` into the getter name and optional result key."""
    name, _, key = raw.partition("=")
    return name.strip(), key.strip() or None
