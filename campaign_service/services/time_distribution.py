# campaign_service/services/time_distribution.py
"""
Time distribution for bulk scheduling.

All functions are pure: they take timezone-aware datetimes and return
timezone-aware UTC instants. Spacing is measured in absolute hours, so a
DST change never shortens the gap between two posts.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from campaign_service.core.exceptions import InsufficientOptimalTimesError, ValidationError

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


@dataclass(frozen=True)
class RankedSlot:
    """A (day of week, hour) recommendation; day_of_week 0 is Sunday."""

    day_of_week: int
    hour_of_day: int
    platform: Optional[str] = None
    rank: Optional[int] = None


def resolve_timezone(name: str, field: str = "config.timezone") -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError.single(field, f"Unknown timezone '{name}'") from e


def to_utc(value: datetime, tz: ZoneInfo) -> datetime:
    """Interpret a naive value as wall-clock time in `tz`; aware values keep their offset."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value.astimezone(timezone.utc)


def sunday_based_weekday(value: datetime) -> int:
    return (value.weekday() + 1) % 7


def start_of_tomorrow(now: datetime, tz: ZoneInfo) -> datetime:
    local = now.astimezone(tz)
    return datetime.combine(local.date() + timedelta(days=1), time(0), tzinfo=tz)


def next_occurrence(day_of_week: int, hour_of_day: int, origin: datetime, tz: ZoneInfo) -> datetime:
    """
    First wall-clock time on `day_of_week` at `hour_of_day` in `tz` that is at
    or after `origin`. Returned in UTC.
    """
    local_origin = origin.astimezone(tz)
    days_ahead = (day_of_week - sunday_based_weekday(local_origin)) % 7
    candidate_date = local_origin.date() + timedelta(days=days_ahead)
    candidate = datetime.combine(candidate_date, time(hour_of_day), tzinfo=tz)
    if candidate < local_origin:
        candidate = datetime.combine(candidate_date + timedelta(days=7), time(hour_of_day), tzinfo=tz)
    return candidate.astimezone(timezone.utc)


def spread_evenly(
    start: datetime, end: datetime, count: int, min_hours_between: float
) -> List[datetime]:
    """
    `count` equally spaced instants over [start, end], bounds included.
    When the window is too tight for `min_hours_between`, the end bound is
    pushed out so every gap equals the minimum.
    """
    start = start.astimezone(timezone.utc)
    end = end.astimezone(timezone.utc)
    if count <= 0:
        return []
    if count == 1:
        return [start]

    step = (end - start) / (count - 1)
    min_step = timedelta(hours=min_hours_between)
    if step < min_step:
        step = min_step
    return [start + step * i for i in range(count)]


def _conflicts(candidate: datetime, taken: Sequence[datetime], min_gap: timedelta) -> bool:
    # Identical instants conflict even when no spacing is required
    return any(candidate == other or abs(candidate - other) < min_gap for other in taken)


def pick_optimal(
    slots: Sequence[RankedSlot],
    count: int,
    min_hours_between: float,
    origin: datetime,
    tz: ZoneInfo,
) -> List[datetime]:
    """
    Assign `count` instants from ranked slots, best rank first.

    Each slot first offers its next occurrence at or after `origin`. Slots
    whose occurrence lands closer than `min_hours_between` to one already
    taken are then retried one week later, and so on, walking forward in
    calendar time. A taken instant blocks at most three weekly occurrences
    of any slot (two, or three across a DST change), so `3 * count + 1`
    weeks always leave room for every post.
    The result is sorted chronologically.

    Raises:
        InsufficientOptimalTimesError: fewer ranked slots than `count`
    """
    if count <= 0:
        return []
    if len(slots) < count:
        raise InsufficientOptimalTimesError(needed=count, available=len(slots))

    min_gap = timedelta(hours=min_hours_between)
    taken: List[datetime] = []
    deferred: List[datetime] = []
    for slot in slots:
        candidate = next_occurrence(slot.day_of_week, slot.hour_of_day, origin, tz)
        if _conflicts(candidate, taken, min_gap):
            deferred.append(candidate)
            continue
        taken.append(candidate)
        if len(taken) == count:
            return sorted(taken)

    for first in deferred:
        for week in range(1, 3 * count + 2):
            candidate = _weeks_later(first, week, tz)
            if not _conflicts(candidate, taken, min_gap):
                taken.append(candidate)
                break
        if len(taken) == count:
            return sorted(taken)

    raise InsufficientOptimalTimesError(needed=count, available=len(taken))


def _weeks_later(instant: datetime, weeks: int, tz: ZoneInfo) -> datetime:
    # Same local wall-clock time, so a DST change keeps the slot's hour
    local = instant.astimezone(tz).replace(tzinfo=None) + timedelta(weeks=weeks)
    return local.replace(tzinfo=tz).astimezone(timezone.utc)


def check_manual(
    times: Sequence[Optional[datetime]], min_hours_between: float, now: datetime
) -> List[Dict[str, str]]:
    """Validate caller-supplied instants; returns field errors instead of raising."""
    errors = []
    for i, value in enumerate(times):
        if value is None:
            errors.append({"field": f"posts[{i}].scheduledFor", "message": "Required for MANUAL strategy"})
        elif value <= now:
            errors.append({"field": f"posts[{i}].scheduledFor", "message": "Must be in the future"})
    if errors:
        return errors

    min_gap = timedelta(hours=min_hours_between)
    ordered = sorted(enumerate(times), key=lambda pair: pair[1])
    for (prev_i, prev), (cur_i, cur) in zip(ordered, ordered[1:]):
        if cur == prev:
            errors.append(
                {"field": f"posts[{cur_i}].scheduledFor", "message": f"Duplicates posts[{prev_i}].scheduledFor"}
            )
        elif cur - prev < min_gap:
            errors.append(
                {
                    "field": f"posts[{cur_i}].scheduledFor",
                    "message": (
                        f"Must be at least {min_hours_between:g} hours after posts[{prev_i}].scheduledFor"
                    ),
                }
            )
    return errors
