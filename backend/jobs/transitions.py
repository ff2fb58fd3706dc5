"""
Job state transitions shared by the in-memory board and the REST API.

Every function returns the dict of fields that change; callers merge it into
a job mapping (board) or onto a model instance (API). Nothing here checks
whether a transition is legal: any status may be moved to any other.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Dict, Mapping, Optional

WORK_POSTS = 'posts'
WORK_PANELS = 'panels'
WORK_TYPES = (WORK_POSTS, WORK_PANELS)

_WORK_FIELDS = {
    WORK_POSTS: {
        'date': 'post_install_date',
        'tentative_date': 'tentative_post_date',
        'pending': 'pending_posts',
        'tentative': 'tentative_posts',
        'scheduled': 'posts_scheduled',
    },
    WORK_PANELS: {
        'date': 'panel_install_date',
        'tentative_date': 'tentative_panel_date',
        'pending': 'pending_panels',
        'tentative': 'tentative_panels',
        'scheduled': 'panels_scheduled',
    },
}


def work_fields(work_type: str) -> Dict[str, str]:
    try:
        return _WORK_FIELDS[work_type]
    except KeyError:
        raise ValueError(f"Unknown work type: {work_type!r} (expected one of {', '.join(WORK_TYPES)})") from None


def move_changes(new_status: str) -> Dict[str, Any]:
    return {'status': new_status}


def scheduler_stage_changes(stage: str) -> Dict[str, Any]:
    return {'scheduler_stage': stage}


def schedule_changes(work_type: str, when: Any) -> Dict[str, Any]:
    """Confirmed booking: set the install date and advance the install stage."""
    fields = work_fields(work_type)
    return {fields['date']: when, 'install_stage': fields['scheduled']}


def unschedule_changes(work_type: str) -> Dict[str, Any]:
    fields = work_fields(work_type)
    return {fields['date']: None, 'install_stage': fields['pending']}


def tentative_changes(work_type: str, when: Any, notes: Optional[str] = None) -> Dict[str, Any]:
    fields = work_fields(work_type)
    changes: Dict[str, Any] = {fields['tentative_date']: when, 'install_stage': fields['tentative']}
    if notes is not None:
        changes['tentative_notes'] = notes
    return changes


def unschedule_tentative_changes(work_type: str, current_stage: Optional[str]) -> Dict[str, Any]:
    """
    Drop a tentative booking. The install stage only falls back to pending
    when the job is still sitting in the tentative stage for this work type.
    """
    fields = work_fields(work_type)
    changes: Dict[str, Any] = {fields['tentative_date']: None}
    if current_stage == fields['tentative']:
        changes['install_stage'] = fields['pending']
    return changes


def confirm_tentative_changes(work_type: str, tentative_date: Any) -> Dict[str, Any]:
    fields = work_fields(work_type)
    if tentative_date is None:
        raise ValueError(f"Job has no tentative {work_type} date to confirm")
    changes = schedule_changes(work_type, tentative_date)
    changes[fields['tentative_date']] = None
    return changes


def apply_changes(job: Mapping[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a new job mapping with ``changes`` merged in; ``job`` is not touched."""
    return {**job, **changes}


def within_schedule_window(when: date | datetime, *, today: date, window_days: int) -> bool:
    """Confirmed installs may only be booked ``window_days`` ahead (past dates are allowed)."""
    day = when.date() if isinstance(when, datetime) else when
    return day <= today + timedelta(days=window_days)
