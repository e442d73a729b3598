"""Normalization of loosely-typed record fields coming from the remote store.

The store is fed by spreadsheets and hand-edited JSON, so list-shaped fields
arrive as arrays, keyed objects (``{"0": "a", "1": "b"}``), JSON-encoded
strings or separator-joined text. Nothing in this module raises on bad input;
every failure degrades to an empty or neutral result.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime
from typing import Any, NamedTuple

from staffdir.models.employee import Freshness, RelativeAge

logger = logging.getLogger(__name__)

LIST_SEPARATORS: tuple[str, ...] = (",", ";", "\n")

FRESH_MAX_DAYS = 7
AGING_MAX_DAYS = 15


class Parsed(NamedTuple):
    items: list[str]


class Unparsed(NamedTuple):
    reason: str


ParseResult = Parsed | Unparsed


def _clean(values: Sequence[Any]) -> list[str]:
    cleaned: list[str] = []
    for value in values:
        if not value:
            continue
        text = value.strip() if isinstance(value, str) else str(value).strip()
        if text:
            cleaned.append(text)
    return cleaned


def _parse_json_array(text: str) -> ParseResult:
    try:
        decoded = json.loads(text)
    except (ValueError, RecursionError):
        return Unparsed("not json")
    if not isinstance(decoded, list):
        return Unparsed("json is not an array")
    return Parsed(_clean(decoded))


def _parse_separated(text: str) -> ParseResult:
    for separator in LIST_SEPARATORS:
        if separator in text:
            return Parsed(_clean(text.split(separator)))
    return Unparsed("no separator")


def _parse_literal(text: str) -> ParseResult:
    stripped = text.strip()
    return Parsed([stripped] if stripped else [])


STRING_STRATEGIES: tuple[Callable[[str], ParseResult], ...] = (
    _parse_json_array,
    _parse_separated,
    _parse_literal,
)


def parse_list_string(text: str) -> ParseResult:
    """Run the string strategies in order, returning the first ``Parsed``."""
    result: ParseResult = Unparsed("empty")
    for strategy in STRING_STRATEGIES:
        result = strategy(text)
        if isinstance(result, Parsed):
            return result
    return result


def normalize_list(value: Any) -> list[str]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        result = parse_list_string(value)
        return result.items if isinstance(result, Parsed) else []
    if isinstance(value, Mapping):
        flattened: list[Any] = []
        for item in value.values():
            if isinstance(item, (list, tuple)):
                flattened.extend(item)
            else:
                flattened.append(item)
        return _clean(flattened)
    if isinstance(value, (list, tuple)):
        return _clean(value)
    return []


def date_part(raw: str) -> str:
    """Strip any time component from an ISO-like date-time string."""
    return raw.split("T")[0].split(" ")[0]


def normalize_date_display(raw: Any) -> str:
    if not raw:
        return ""
    if isinstance(raw, date):
        return raw.strftime("%d-%m-%Y")
    if not isinstance(raw, str):
        return str(raw)
    parts = date_part(raw.strip()).split("-")
    if len(parts) == 3 and all(parts):
        year, month, day = parts
        return f"{day}-{month}-{year}"
    return raw


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a flexible timestamp into a naive local datetime.

    Numbers are epoch milliseconds. Strings may separate date and time with a
    space or ``T``; offset-aware values are converted to local time.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable timestamp %r", value)
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def relative_age(timestamp: Any, now: datetime | None = None) -> RelativeAge:
    moment = parse_timestamp(timestamp)
    if moment is None:
        return RelativeAge()

    current = now or datetime.now()
    elapsed = current - moment
    if elapsed.total_seconds() < 0:
        return RelativeAge()

    days = elapsed.days
    hours = int(elapsed.total_seconds() // 3600)
    minutes = int(elapsed.total_seconds() // 60)

    if days >= 1:
        label = f"Updated {_plural(days, 'day')} ago"
    elif hours >= 1:
        label = f"Updated {_plural(hours, 'hr')} ago"
    elif minutes >= 1:
        label = f"Updated {_plural(minutes, 'min')} ago"
    else:
        label = "Updated just now"

    if days <= FRESH_MAX_DAYS:
        severity = Freshness.FRESH
    elif days <= AGING_MAX_DAYS:
        severity = Freshness.AGING
    else:
        severity = Freshness.STALE

    return RelativeAge(label=label, severity=severity)
