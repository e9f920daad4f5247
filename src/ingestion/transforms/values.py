"""Scalar normalizers shared by every domain: text, dates, vote values, ids."""

import hashlib
import re
from datetime import datetime, timezone

from dateutil import parser as date_parser

_WS_RE = re.compile(r"\s+")
_DMY_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
# Two defaults differing in year, month and day
_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def sha1_hex(value: str) -> str:
    """Content-addressed id: SHA-1 hex digest of the UTF-8 encoded key."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def normalize_text(value) -> str:
    """Trim and collapse whitespace runs to one space; ``None`` becomes ``""``."""
    if value is None:
        return ""
    return _WS_RE.sub(" ", str(value)).strip()


def parse_date(value) -> str | None:
    """Return an ISO ``YYYY-MM-DD`` date or ``None``.

    ``DD/MM/YYYY`` (the portal's format) is converted explicitly. Anything
    else goes through generic parsing, which must find a year, month and day
    (``"03/2021"`` or ``"10:00"`` give ``None``); timezone-aware timestamps
    are moved to UTC before the date is taken.
    """
    if value is None:
        return None
    cleaned = str(value).strip()
    if not cleaned:
        return None

    match = _DMY_RE.match(cleaned)
    if match:
        return f"{match.group(3)}-{match.group(2)}-{match.group(1)}"

    try:
        parsed = date_parser.isoparse(cleaned)
    except (ValueError, OverflowError):
        parsed = _parse_complete_date(cleaned)
        if parsed is None:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def _parse_complete_date(text: str) -> datetime | None:
    """Day-first parse that requires year, month and day in ``text``.

    dateutil fills missing parts from ``default`` (today, if not given), so a
    partial value would shift with the run date. Parsing against two distinct
    defaults and requiring the same result rejects those values.
    """
    results = []
    for default in _PARSE_DEFAULTS:
        try:
            results.append(date_parser.parse(text, dayfirst=True, default=default))
        except (ValueError, OverflowError):
            return None
    first, second = results
    if first.date() != second.date():
        return None
    return first


def normalize_vote_value(value) -> str:
    """Classify a cast vote.

    Substring checks run in a fixed order (sí/si, no, abst, aus, pres), so a
    value containing several tokens is decided by the first check it hits.
    Unmatched text is kept as a lowercase slug (``"Pareado"`` -> ``"pareado"``).
    """
    if value is None:
        return "desconocido"
    raw = str(value).strip().lower()
    if not raw:
        return "desconocido"
    if "sí" in raw or "si" in raw:
        return "si"
    if "no" in raw:
        return "no"
    if "abst" in raw:
        return "abstencion"
    if "aus" in raw:
        return "ausente"
    if "pres" in raw:
        return "presente"
    return _WS_RE.sub("_", raw)
