"""
Install crew capacity for the scheduler calendar.

Capacity is the sum of daily hours of the active install staff. A day's load
is the install hours already booked on it (posts plus panels).
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

from django.utils import timezone

from .filters import ALL_STAFF
from .transitions import WORK_PANELS, WORK_POSTS, work_fields

DEFAULT_DAILY_HOURS = 8


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _as_date(value: Any) -> Optional[date]:
    """Calendar day of a booking, in the local timezone for aware datetimes."""
    if value is None or value == '':
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, date):
        return value
    return None


def daily_install_capacity(staff: Iterable[Any]) -> int:
    total = 0
    for member in staff:
        if _get(member, 'id') == ALL_STAFF:
            continue
        if _get(member, 'role') != 'install' or not _get(member, 'active', True):
            continue
        total += _get(member, 'daily_capacity_hours', DEFAULT_DAILY_HOURS) or 0
    return total


def _duration(job: Any, work_type: str) -> int:
    name = 'post_install_duration' if work_type == WORK_POSTS else 'panel_install_duration'
    return _get(job, name) or 0


def booked_hours(jobs: Iterable[Any], day: date, *, include_tentative: bool = False) -> int:
    hours = 0
    for job in jobs:
        for work_type in (WORK_POSTS, WORK_PANELS):
            fields = work_fields(work_type)
            if _as_date(_get(job, fields['date'])) == day:
                hours += _duration(job, work_type)
            elif include_tentative and _as_date(_get(job, fields['tentative_date'])) == day:
                hours += _duration(job, work_type)
    return hours


def day_load(jobs: Iterable[Any], day: date, capacity: int, *, include_tentative: bool = False) -> Dict[str, Any]:
    booked = booked_hours(jobs, day, include_tentative=include_tentative)
    percent = round(booked / capacity * 100) if capacity else (100 if booked else 0)
    return {
        'date': day.isoformat(),
        'booked_hours': booked,
        'capacity_hours': capacity,
        'percent': percent,
        'over_capacity': booked > capacity,
    }


def capacity_calendar(jobs: Iterable[Any], staff: Iterable[Any], start: date, days: int = 14) -> List[Dict[str, Any]]:
    job_list = list(jobs)
    capacity = daily_install_capacity(staff)
    return [day_load(job_list, start + timedelta(days=offset), capacity) for offset in range(days)]


def would_overbook(jobs: Iterable[Any], day: date, job: Any, work_type: str, capacity: int) -> bool:
    """True if booking ``work_type`` for ``job`` on ``day`` pushes the day past capacity."""
    booked = booked_hours(jobs, day)
    # moving an existing booking within the same day must not count it twice
    if _as_date(_get(job, work_fields(work_type)['date'])) == day:
        booked -= _duration(job, work_type)
    return booked + _duration(job, work_type) > capacity
