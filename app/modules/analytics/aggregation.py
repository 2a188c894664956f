"""
In-memory aggregations behind the leaderboard and the analytics dashboards.

Periods: all-time, year, month, week, today. Each period has a window start
(None for all-time) and a bucket granularity used for time series.
"""

from collections import Counter, OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from app.core.listing import as_datetime

PERIODS = ("all-time", "year", "month", "week", "today")

# strftime pattern of one bucket per period
BUCKET_FORMATS = {
    "all-time": "%Y-%m",
    "year": "%Y-%m",
    "month": "%Y-%m-%d",
    "week": "%Y-%m-%d",
    "today": "%H:00",
}


def period_start(period: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Start of the current calendar period (naive UTC); None for all-time."""
    if period not in PERIODS:
        raise ValueError(f"Unknown period: {period}")
    now = as_datetime(now) if now is not None else datetime.now(timezone.utc).replace(tzinfo=None)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "today":
        return midnight
    if period == "week":
        return midnight - timedelta(days=midnight.weekday())
    if period == "month":
        return midnight.replace(day=1)
    if period == "year":
        return midnight.replace(month=1, day=1)
    return None


def in_period(rows: Iterable[Dict[str, Any]], field: str, period: str, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    start = period_start(period, now)
    if start is None:
        return list(rows)
    kept = []
    for row in rows:
        value = as_datetime(row.get(field))
        if value is not None and value >= start:
            kept.append(row)
    return kept


def bucket_series(
    rows: Iterable[Dict[str, Any]],
    field: str,
    period: str,
    value_field: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Group rows into time buckets, oldest first.
    Counts rows, or sums value_field when given (missing values count as 0).
    """
    fmt = BUCKET_FORMATS[period]
    dated = []
    for row in rows:
        value = as_datetime(row.get(field))
        if value is not None:
            dated.append((value, row))
    dated.sort(key=lambda item: item[0])

    buckets: "OrderedDict[str, float]" = OrderedDict()
    for value, row in dated:
        key = value.strftime(fmt)
        amount = 1 if value_field is None else float(row.get(value_field) or 0)
        buckets[key] = buckets.get(key, 0) + amount
    return [{"time": key, "value": total} for key, total in buckets.items()]


def distribution(rows: Iterable[Dict[str, Any]], field: str) -> List[Dict[str, Any]]:
    """Count per distinct value, most frequent first, then by name."""
    counts = Counter(row.get(field) for row in rows if row.get(field) is not None)
    return [
        {"name": name, "value": count}
        for name, count in sorted(counts.items(), key=lambda item: (-item[1], str(item[0])))
    ]


def build_leaderboard(
    attendee_rows: Iterable[Dict[str, Any]],
    cards: Dict[str, Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Count laags attended per profile from active attendee rows.
    A profile attending the same laag through several rows counts once.
    Sorted by count descending, ties by name ascending. Profiles without a card are skipped.
    """
    seen = set()
    counts: Counter = Counter()
    for row in attendee_rows:
        if row.get("is_removed"):
            continue
        key = (row.get("laag_id"), row.get("attendee_id"))
        if key in seen:
            continue
        seen.add(key)
        counts[row.get("attendee_id")] += 1

    board = []
    for profile_id, count in counts.items():
        card = cards.get(profile_id)
        if card is None:
            continue
        board.append({
            "profile_id": profile_id,
            "full_name": card.get("full_name"),
            "avatar_url": card.get("avatar_url"),
            "laag_count": count,
        })
    board.sort(key=lambda entry: (-entry["laag_count"], (entry["full_name"] or "").lower()))
    return board
