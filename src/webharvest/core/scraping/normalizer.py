"""Turn heterogeneous JSON records into a uniform DataFrame.

Records rarely share the same keys: the column set is the union of keys in
first-seen order and absent keys become null. Per-column coercions are
applied to non-null values only; a failure is raised, never swallowed.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from webharvest.core.errors import InvalidInputError, ParseError, TypeCoercionError

Coercion = Callable[[Any], Any]


def _is_null(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # lists/dicts make isna return an array
        return False


def as_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("booleans are not integers")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} has a fractional part")
        return int(value)
    return int(str(value).strip().replace(",", ""))


def as_date(fmt: str = "%Y-%m-%d") -> Coercion:
    """Parse strings with `fmt`; date/datetime values pass through as dates."""

    def _coerce(value: Any) -> date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return datetime.strptime(str(value).strip(), fmt).date()

    return _coerce


def month_year_date(default_day: int = 1) -> Coercion:
    """Parse "January 2015" style labels, filling in `default_day`."""
    parse = as_date("%d %B %Y")

    def _coerce(value: Any) -> date:
        if isinstance(value, (date, datetime)):
            return parse(value)
        return parse(f"{default_day:02d} {str(value).strip()}")

    return _coerce


def records_from_payload(payload: Any, key: Optional[str] = None) -> List[Mapping]:
    """Unwrap a parsed JSON payload into a list of record mappings.

    Accepts a list of mappings, `{key: [...]}` when `key` is given, or a
    mapping of mappings (as returned by the facet endpoints), whose values
    become the records.
    """
    data = payload
    if key is not None and isinstance(data, Mapping):
        if key not in data:
            raise ParseError(f"payload has no '{key}' field")
        data = data[key] or []
    if isinstance(data, Mapping):
        if not data:
            return []
        if all(isinstance(v, Mapping) for v in data.values()):
            return list(data.values())
        return [data]
    if isinstance(data, list):
        return data
    raise ParseError(f"expected a list of records, got {type(data).__name__}")


def normalize(
    records: Iterable[Mapping[str, Any]],
    coercions: Optional[Mapping[str, Coercion]] = None,
) -> pd.DataFrame:
    """Return a DataFrame with one column per key seen in `records`.

    Raises `TypeCoercionError` naming the row index and column when a
    coercion fails, and `ParseError` if a record is not a mapping.
    """
    rows = list(records)
    if not rows:
        return pd.DataFrame()

    columns: Dict[str, None] = {}
    for i, rec in enumerate(rows):
        if not isinstance(rec, Mapping):
            raise ParseError(f"record {i} is a {type(rec).__name__}, not a mapping")
        for k in rec:
            columns.setdefault(k, None)

    coercions = coercions or {}
    table: List[Dict[str, Any]] = []
    for i, rec in enumerate(rows):
        row = {}
        for col in columns:
            value = rec.get(col)
            if _is_null(value):
                value = None
            elif col in coercions:
                try:
                    value = coercions[col](value)
                except (TypeError, ValueError) as exc:
                    raise TypeCoercionError(i, col, value, str(exc)) from exc
            row[col] = value
        table.append(row)

    return pd.DataFrame(table, columns=list(columns))


def coercion_from_name(name: str) -> Coercion:
    """Resolve a config-friendly coercion name.

    Supported: "integer", "month_year" (day 01), "month_year:<day>",
    "date" (ISO) and "date:<strptime format>".
    """
    kind, _, arg = name.partition(":")
    if kind == "integer":
        return as_integer
    if kind == "month_year":
        return month_year_date(int(arg) if arg else 1)
    if kind == "date":
        return as_date(arg or "%Y-%m-%d")
    raise InvalidInputError(f"unknown coercion '{name}'")
