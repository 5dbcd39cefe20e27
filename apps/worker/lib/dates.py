"""
Day-precision date parsing and comparison helpers.

Records carry dates as native values, epoch numbers, ISO strings or
DD/MM/YYYY strings. Everything is reduced to a calendar ``date``;
unparseable input yields ``None`` and never satisfies a date criterion.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Numeric epochs below this are seconds, at or above are milliseconds.
EPOCH_MS_THRESHOLD = 10_000_000_000

_ISO_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_DMY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_YEAR_RE = re.compile(r"\d{4}")
_SENTINEL_DATES = {"1900-01-01", "0000-00-00"}
# Missing month or day in a free-form string falls back to January 1st.
_PARSE_DEFAULT = datetime(1900, 1, 1)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[date]:
    """Parse a heterogeneous date representation into a calendar date."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, (int, float)):
        if not value:
            return None
        ms = value * 1000 if value < EPOCH_MS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(ms / 1000).date()
        except (OverflowError, OSError, ValueError):
            return None

    s = str(value).strip()
    if not s or s.startswith("0000"):
        return None

    m = _ISO_PREFIX_RE.match(s)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _DMY_RE.match(s)
    if m:
        return _safe_date(int(m.group(3)), int(m.group(2)), int(m.group(1)))

    # Generic parsing only for strings that at least carry a full year.
    if not _YEAR_RE.search(s):
        return None
    try:
        return date_parser.parse(s, dayfirst=True, default=_PARSE_DEFAULT).date()
    except (ValueError, OverflowError) as e:
        logger.debug(f"Unparseable date {s!r}: {e}")
        return None


def start_of_day(d: date | datetime) -> date:
    if isinstance(d, datetime):
        return d.date()
    return d


def add_days(d: date, n: int) -> date:
    return start_of_day(d) + timedelta(days=n)


def in_range(d: date, start: Optional[date] = None, end: Optional[date] = None) -> bool:
    """Inclusive bounds; a missing bound is open-ended."""
    day = start_of_day(d)
    if start is not None and day < start_of_day(start):
        return False
    if end is not None and day > start_of_day(end):
        return False
    return True


def today() -> date:
    return date.today()


def format_date_es(value: Any) -> str:
    """DD/MM/YYYY for display; sentinels render empty, unparseable values pass through."""
    if value is None or value == "":
        return ""
    s = str(value).strip()
    if s[:10] in _SENTINEL_DATES:
        return ""
    d = parse_date(value)
    if d is None:
        return s
    return d.strftime("%d/%m/%Y")
