"""Generic filtering, sorting, and search over already-fetched records.

Every screen fetches its full list from the remote API and narrows it in
memory. Records may be Pydantic models or plain dicts; field names may be
dotted paths (``"worker.department.name"``).
"""

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")


# ── Sorting ─────────────────────────────────────────────────────────

def apply_sorting(records: Iterable[T], sort: Optional[str]) -> list[T]:
    """
    Parse a sort string like ``"-start_date"`` and order *records*.

    * Leading ``-`` → DESC; otherwise ASC.
    * Records missing the field (``None``) always sort last.
    """
    items = list(records)
    if not sort:
        return items

    descending = sort.startswith("-")
    field = sort.lstrip("-")

    present = [r for r in items if _get_value(r, field) is not None]
    missing = [r for r in items if _get_value(r, field) is None]
    present.sort(key=lambda r: _sort_key(_get_value(r, field)), reverse=descending)
    return present + missing


# ── Generic filtering ──────────────────────────────────────────────

def apply_filters(records: Iterable[T], filters: dict[str, Any]) -> list[T]:
    """
    Keep the records matching every entry of *filters*.

    Key suffixes determine the operator:

    ==============  ==================================
    Suffix          Operator
    ==============  ==================================
    (none)          ``==``
    ``__ilike``     case-insensitive substring
    ``__from``      ``>=`` (dates compared as dates)
    ``__to``        ``<=`` (dates compared as dates)
    ``__in``        membership
    ``__prefix``    string starts with
    ==============  ==================================

    ``None`` values are silently skipped.
    """
    conditions = [(k, v) for k, v in filters.items() if v is not None]
    return [r for r in records if all(_matches(r, k, v) for k, v in conditions)]


# ── Free-text search ────────────────────────────────────────────────

def apply_search(
    records: Iterable[T],
    search: Optional[str],
    fields: Sequence[str],
) -> list[T]:
    """Case-insensitive substring match of *search* against any of *fields*."""
    items = list(records)
    if not search or not search.strip():
        return items

    needle = search.strip().lower()
    return [
        r for r in items
        if any(needle in _as_text(_get_value(r, f)).lower() for f in fields)
    ]


def distinct_values(records: Iterable[Any], field: str) -> list[str]:
    """Sorted distinct non-empty text values of *field*."""
    values = {_as_text(_get_value(r, field)) for r in records}
    return sorted(v for v in values if v)


# ── Internal helpers ────────────────────────────────────────────────

def _matches(record: Any, key: str, value: Any) -> bool:
    if key.endswith("__ilike"):
        actual = _get_value(record, key.removesuffix("__ilike"))
        return str(value).lower() in _as_text(actual).lower()

    if key.endswith("__from"):
        actual = _as_comparable(_get_value(record, key.removesuffix("__from")), value)
        return actual is not None and actual >= _as_comparable(value, value)

    if key.endswith("__to"):
        actual = _as_comparable(_get_value(record, key.removesuffix("__to")), value)
        return actual is not None and actual <= _as_comparable(value, value)

    if key.endswith("__in"):
        return _get_value(record, key.removesuffix("__in")) in value

    if key.endswith("__prefix"):
        actual = _get_value(record, key.removesuffix("__prefix"))
        return _as_text(actual).startswith(str(value))

    actual = _get_value(record, key)
    if hasattr(actual, "value") and not hasattr(value, "value"):
        actual = actual.value
    return actual == value


def _get_value(record: Any, path: str) -> Any:
    """Resolve a dotted path through dicts and attributes; ``None`` when absent."""
    current = record
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, dict):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return str(value.value)
    if hasattr(value, "name") and not isinstance(value, (str, bytes)):
        # Embedded records (e.g. a department object) match on their name
        return _as_text(getattr(value, "name"))
    if isinstance(value, dict):
        return _as_text(value.get("name"))
    return str(value)


def _as_comparable(value: Any, like: Any) -> Any:
    """Coerce *value* to a date when the filter operand is a date."""
    if value is None:
        return None
    if isinstance(like, (date, datetime)) or isinstance(value, (date, datetime)):
        return _to_date(value)
    return value


def _to_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _sort_key(value: Any) -> Any:
    if isinstance(value, str):
        return value.lower()
    if isinstance(value, datetime):
        return value.timestamp()
    return value
