"""Default bridge callables: time, date, formatting and encoding primitives.

These back the names every registry allows out of the box. Date helpers work in the
server's local time zone and follow the behaviour of the classic PHP functions they are
named after, so existing browser clients keep working against a Python dispatcher.
"""

from __future__ import annotations

import base64
import binascii
import calendar
import html
import re
import struct
import time
from datetime import date, datetime, timedelta
from email.utils import format_datetime
from html.entities import codepoint2name
from typing import Any, Callable, Iterable


def unix_time() -> int:
    """Current Unix timestamp in whole seconds."""
    return int(time.time())


def _moment(timestamp: float | None) -> datetime:
    return datetime.fromtimestamp(time.time() if timestamp is None else float(timestamp))


def _twelve_hour(moment: datetime) -> int:
    return moment.hour % 12 or 12


_DATE_TOKENS: dict[str, Callable[[datetime], str]] = {
    "d": lambda m: f"{m.day:02d}",
    "D": lambda m: m.strftime("%a"),
    "j": lambda m: str(m.day),
    "l": lambda m: m.strftime("%A"),
    "N": lambda m: str(m.isoweekday()),
    "w": lambda m: str(m.isoweekday() % 7),
    "z": lambda m: str(m.timetuple().tm_yday - 1),
    "W": lambda m: f"{m.isocalendar()[1]:02d}",
    "F": lambda m: m.strftime("%B"),
    "m": lambda m: f"{m.month:02d}",
    "M": lambda m: m.strftime("%b"),
    "n": lambda m: str(m.month),
    "t": lambda m: str(calendar.monthrange(m.year, m.month)[1]),
    "L": lambda m: "1" if calendar.isleap(m.year) else "0",
    "Y": lambda m: str(m.year),
    "y": lambda m: f"{m.year % 100:02d}",
    "a": lambda m: "am" if m.hour < 12 else "pm",
    "A": lambda m: "AM" if m.hour < 12 else "PM",
    "g": lambda m: str(_twelve_hour(m)),
    "G": lambda m: str(m.hour),
    "h": lambda m: f"{_twelve_hour(m):02d}",
    "H": lambda m: f"{m.hour:02d}",
    "i": lambda m: f"{m.minute:02d}",
    "s": lambda m: f"{m.second:02d}",
    "U": lambda m: str(int(m.timestamp())),
    "c": lambda m: m.astimezone().isoformat(timespec="seconds"),
    "r": lambda m: format_datetime(m.astimezone()),
}


def format_date(fmt: str, timestamp: float | None = None) -> str:
    """Format a timestamp with PHP ``date()`` letters; a backslash escapes the next character."""
    moment = _moment(timestamp)
    out: list[str] = []
    escaped = False
    for char in fmt:
        if escaped:
            out.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        else:
            token = _DATE_TOKENS.get(char)
            out.append(token(moment) if token else char)
    return "".join(out)


def format_time(fmt: str, timestamp: float | None = None) -> str:
    """Format a timestamp with ``%``-style directives."""
    return time.strftime(fmt, time.localtime(time.time() if timestamp is None else float(timestamp)))


def make_time(
    hour: int | None = None,
    minute: int | None = None,
    second: int | None = None,
    month: int | None = None,
    day: int | None = None,
    year: int | None = None,
) -> int:
    """Timestamp for a local date/time; omitted parts default to now, overflow rolls over."""
    now = time.localtime()
    parts = (
        now.tm_year if year is None else int(year),
        now.tm_mon if month is None else int(month),
        now.tm_mday if day is None else int(day),
        now.tm_hour if hour is None else int(hour),
        now.tm_min if minute is None else int(minute),
        now.tm_sec if second is None else int(second),
        0,
        0,
        -1,
    )
    return int(time.mktime(parts))


_RELATIVE_RE = re.compile(r"^([+-]?\d+)\s*(second|sec|minute|min|hour|day|week)s?$")
_RELATIVE_UNITS = {
    "second": "seconds",
    "sec": "seconds",
    "minute": "minutes",
    "min": "minutes",
    "hour": "hours",
    "day": "days",
    "week": "weeks",
}


def parse_time(text: str, now: float | None = None) -> int | None:
    """Parse a date/time description into a timestamp; ``None`` when it cannot be understood.

    Understands ``now``, ``today``/``midnight``, ``tomorrow``, ``yesterday``, ``@<timestamp>``,
    relative offsets such as ``+1 day`` or ``-2 weeks``, and ISO 8601 text.
    """
    base = _moment(now)
    lowered = str(text).strip().lower()
    midnight = base.replace(hour=0, minute=0, second=0, microsecond=0)
    keywords = {
        "now": base,
        "today": midnight,
        "midnight": midnight,
        "tomorrow": midnight + timedelta(days=1),
        "yesterday": midnight - timedelta(days=1),
    }
    if lowered in keywords:
        return int(keywords[lowered].timestamp())
    if lowered.startswith("@"):
        try:
            return int(float(lowered[1:]))
        except ValueError:
            return None
    match = _RELATIVE_RE.match(lowered)
    if match:
        offset = timedelta(**{_RELATIVE_UNITS[match.group(2)]: int(match.group(1))})
        return int((base + offset).timestamp())
    try:
        return int(datetime.fromisoformat(str(text).strip()).timestamp())
    except ValueError:
        return None


def _easter_sunday(year: int) -> date:
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def easter_days(year: int | None = None) -> int:
    """Days between March 21 and Easter Sunday (Gregorian)."""
    year = date.today().year if year is None else int(year)
    return (_easter_sunday(year) - date(year, 3, 21)).days


def easter_date(year: int | None = None) -> int:
    """Timestamp of local midnight on Easter Sunday."""
    year = date.today().year if year is None else int(year)
    sunday = _easter_sunday(year)
    return int(datetime(sunday.year, sunday.month, sunday.day).timestamp())


_SPECIAL_CHARS = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#039;"}


def escape_special_chars(text: str) -> str:
    """Escape ``& < > " '`` as HTML entities."""
    return "".join(_SPECIAL_CHARS.get(char, char) for char in str(text))


def unescape_special_chars(text: str) -> str:
    """Reverse ``escape_special_chars``; other entities are left untouched."""
    result = str(text)
    for entity, char in (("&lt;", "<"), ("&gt;", ">"), ("&quot;", '"'), ("&#039;", "'"), ("&#39;", "'")):
        result = result.replace(entity, char)
    return result.replace("&amp;", "&")


def escape_entities(text: str) -> str:
    """Escape every character that has a named HTML entity."""
    out: list[str] = []
    for char in str(text):
        if char == "'":
            out.append("&#039;")
        elif ord(char) in codepoint2name:
            out.append(f"&{codepoint2name[ord(char)]};")
        else:
            out.append(char)
    return "".join(out)


def unescape_entities(text: str) -> str:
    """Decode all named and numeric HTML entities."""
    return html.unescape(str(text))


_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_RE = re.compile(r"</?([a-zA-Z][a-zA-Z0-9-]*)\b[^>]*>|<\?.*?\?>", re.DOTALL)
_ALLOWED_TAG_RE = re.compile(r"<\s*([a-zA-Z][a-zA-Z0-9-]*)\s*>")


def strip_tags(text: str, allowed_tags: str | Iterable[str] | None = None) -> str:
    """Remove HTML comments and tags, keeping those listed in ``allowed_tags`` (``"<b><i>"`` or names)."""
    if allowed_tags is None:
        allowed: set[str] = set()
    elif isinstance(allowed_tags, str):
        allowed = {name.lower() for name in _ALLOWED_TAG_RE.findall(allowed_tags)}
    else:
        allowed = {str(name).strip("<>/ ").lower() for name in allowed_tags}

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name and name.lower() in allowed:
            return match.group(0)
        return ""

    return _TAG_RE.sub(_replace, _COMMENT_RE.sub("", str(text)))


def encode_base64(text: str) -> str:
    """Base64-encode the UTF-8 bytes of ``text``."""
    return base64.b64encode(str(text).encode("utf-8")).decode("ascii")


def decode_base64(data: str, strict: bool = False) -> str | None:
    """Decode base64 into text; with ``strict`` invalid input yields ``None`` instead of best effort."""
    raw = str(data).encode("ascii", errors="ignore")
    if not strict:
        raw = re.sub(rb"[^A-Za-z0-9+/]", b"", raw)
        raw += b"=" * (-len(raw) % 4)
    try:
        return base64.b64decode(raw, validate=strict).decode("utf-8", errors="replace")
    except binascii.Error:
        return None


def pack(fmt: str, *values: Any) -> str:
    """Pack values with a ``struct`` format; the binary result travels as hex."""
    return struct.pack(fmt, *values).hex()


def unpack(fmt: str, data: str) -> list[Any]:
    """Unpack hex-encoded binary data with a ``struct`` format."""
    return list(struct.unpack(fmt, bytes.fromhex(data)))


DEFAULT_CALLABLES: dict[str, Callable[..., Any]] = {
    "time": unix_time,
    "date": format_date,
    "mktime": make_time,
    "strftime": format_time,
    "strtotime": parse_time,
    "easter_date": easter_date,
    "easter_days": easter_days,
    "htmlspecialchars": escape_special_chars,
    "htmlspecialchars_decode": unescape_special_chars,
    "htmlentities": escape_entities,
    "html_entity_decode": unescape_entities,
    "strip_tags": strip_tags,
    "base64_decode": decode_base64,
    "base64_encode": encode_base64,
    "pack": pack,
    "unpack": unpack,
}
