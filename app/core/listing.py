"""In-memory filter / sort / paginate helpers applied to rows fetched from Supabase."""

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

Row = Dict[str, Any]

GROUP_SIZE_BUCKETS = {
    "small": lambda n: n <= 10,
    "medium": lambda n: 10 < n <= 50,
    "large": lambda n: n > 50,
}


def _lookup(row: Row, field: str) -> Any:
    """Dotted lookup into nested dicts, e.g. "organizer.full_name"."""
    value: Any = row
    for part in field.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def search(rows: Iterable[Row], query: Optional[str], fields: Sequence[str]) -> List[Row]:
    """Case-insensitive substring match on any of fields."""
    rows = list(rows)
    if not query or not query.strip():
        return rows
    needle = query.strip().lower()
    matched = []
    for row in rows:
        for field in fields:
            value = _lookup(row, field)
            if value is not None and needle in str(value).lower():
                matched.append(row)
                break
    return matched


def filter_equals(rows: Iterable[Row], field: str, value: Optional[Any]) -> List[Row]:
    if value is None or value == "all":
        return list(rows)
    return [r for r in rows if _lookup(r, field) == value]


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_datetime(value: Any) -> Optional[datetime]:
    """Parse a timestamp into a naive UTC datetime; naive inputs are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).replace("Z", "+00:00")
    try:
        return _naive_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def filter_date_range(
    rows: Iterable[Row],
    field: str,
    start: Optional[Any] = None,
    end: Optional[Any] = None,
) -> List[Row]:
    """Keep rows whose field falls within [start, end]; rows without a parsable date are dropped once a bound is set."""
    start_dt, end_dt = as_datetime(start), as_datetime(end)
    if start_dt is None and end_dt is None:
        return list(rows)
    kept = []
    for row in rows:
        value = as_datetime(_lookup(row, field))
        if value is None:
            continue
        if start_dt is not None and value < start_dt:
            continue
        if end_dt is not None and value > end_dt:
            continue
        kept.append(row)
    return kept


def filter_group_size(rows: Iterable[Row], bucket: Optional[str], field: str = "no_members") -> List[Row]:
    if not bucket or bucket == "all":
        return list(rows)
    predicate = GROUP_SIZE_BUCKETS.get(bucket)
    if predicate is None:
        raise ValueError(f"Unknown group size bucket: {bucket}")
    return [r for r in rows if predicate(_lookup(r, field) or 0)]


def sort_rows(rows: Iterable[Row], field: str, descending: bool = True) -> List[Row]:
    """Sort by a date or numeric field; rows missing the field always sort last."""
    rows = list(rows)
    present = [r for r in rows if _lookup(r, field) is not None]
    missing = [r for r in rows if _lookup(r, field) is None]

    def key(row: Row):
        value = _lookup(row, field)
        if isinstance(value, (int, float)):
            return value
        parsed = as_datetime(value)
        return parsed if parsed is not None else str(value)

    present.sort(key=key, reverse=descending)
    return present + missing


def paginate(rows: Sequence[Row], limit: int, offset: int = 0) -> List[Row]:
    offset = max(offset, 0)
    if limit <= 0:
        return []
    return list(rows[offset:offset + limit])

