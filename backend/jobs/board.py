"""
Command center state container.

Holds the canonical job and staff lists for a dashboard session and derives
the filtered view on demand. Every mutation swaps in a new tuple built from
new records; records that are not touched are carried over as the very same
objects, and no record is ever modified in place.

Updates for unknown ids are silent no-ops, matching how the board reacts to a
drag that lands on a job which has since disappeared.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from . import transitions
from .capacity import capacity_calendar, daily_install_capacity
from .filters import ALL_STAFF, filter_jobs
from .pipelines import board_configuration

Record = Mapping[str, Any]


class CommandCenter:
    def __init__(self, jobs: Iterable[Record] = (), staff: Iterable[Record] = ()):
        self.jobs: Tuple[Record, ...] = tuple(jobs)
        self.staff: Tuple[Record, ...] = tuple(staff)
        self.selected_staff: str = ALL_STAFF
        self.search_query: str = ''

    @classmethod
    def from_database(cls, job_queryset=None, staff_queryset=None) -> 'CommandCenter':
        """Build a board from persisted rows, serialised the same way the API returns them."""
        from jobs.models import Job
        from jobs.serializers import JobSerializer
        from staff.models import Staff
        from staff.serializers import StaffSerializer

        if job_queryset is None:
            job_queryset = Job.objects.all()
        if staff_queryset is None:
            staff_queryset = Staff.objects.listable()
        return cls(
            jobs=JobSerializer(job_queryset, many=True).data,
            staff=StaffSerializer(staff_queryset, many=True).data,
        )

    # -----------------------------
    # Derived state
    # -----------------------------

    @property
    def filtered_jobs(self) -> List[Record]:
        return filter_jobs(self.jobs, self.selected_staff, self.search_query)

    def get_job(self, job_id: Any) -> Optional[Record]:
        for job in self.jobs:
            if job.get('id') == job_id:
                return job
        return None

    def set_filters(self, *, staff_id: Optional[str] = None, search: Optional[str] = None) -> None:
        if staff_id is not None:
            self.selected_staff = staff_id or ALL_STAFF
        if search is not None:
            self.search_query = search

    # -----------------------------
    # Job transitions
    # -----------------------------

    def _update_job(self, job_id: Any, build_changes: Callable[[Record], Dict[str, Any]]) -> None:
        self.jobs = tuple(
            transitions.apply_changes(job, build_changes(job)) if job.get('id') == job_id else job
            for job in self.jobs
        )

    def move_job(self, job_id: Any, new_status: str) -> None:
        self._update_job(job_id, lambda job: transitions.move_changes(new_status))

    def schedule_job(self, job_id: Any, work_type: str, when: Any) -> None:
        changes = transitions.schedule_changes(work_type, when)
        self._update_job(job_id, lambda job: changes)

    def unschedule_job(self, job_id: Any, work_type: str) -> None:
        changes = transitions.unschedule_changes(work_type)
        self._update_job(job_id, lambda job: changes)

    def schedule_tentative(self, job_id: Any, work_type: str, when: Any, notes: Optional[str] = None) -> None:
        changes = transitions.tentative_changes(work_type, when, notes)
        self._update_job(job_id, lambda job: changes)

    def unschedule_tentative(self, job_id: Any, work_type: str) -> None:
        transitions.work_fields(work_type)
        self._update_job(
            job_id,
            lambda job: transitions.unschedule_tentative_changes(work_type, job.get('install_stage')),
        )

    def confirm_tentative(self, job_id: Any, work_type: str) -> None:
        fields = transitions.work_fields(work_type)
        job = self.get_job(job_id)
        if job is None or job.get(fields['tentative_date']) is None:
            return
        changes = transitions.confirm_tentative_changes(work_type, job[fields['tentative_date']])
        self._update_job(job_id, lambda job: changes)

    def change_scheduler_stage(self, job_id: Any, stage: str) -> None:
        self._update_job(job_id, lambda job: transitions.scheduler_stage_changes(stage))

    # -----------------------------
    # Staff roster
    # -----------------------------

    def update_staff(self, member: Record) -> None:
        self.staff = tuple(dict(member) if s.get('id') == member.get('id') else s for s in self.staff)

    def add_staff(self, member: Record) -> None:
        self.staff = self.staff + (dict(member),)

    def delete_staff(self, staff_id: str) -> None:
        self.staff = tuple(s for s in self.staff if s.get('id') != staff_id)

    def staff_editor(self):
        from staff.editor import StaffEditor

        # the editor reads the live roster so it sees every committed change
        return StaffEditor(
            lambda: self.staff,
            on_update=self.update_staff,
            on_add=self.add_staff,
            on_delete=self.delete_staff,
        )

    # -----------------------------
    # Snapshot
    # -----------------------------

    def snapshot(self, *, today: Optional[date] = None, calendar_days: int = 14) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'selected_staff': self.selected_staff,
            'search': self.search_query,
            'jobs': list(self.filtered_jobs),
            'total_jobs': len(self.jobs),
            'staff': list(self.staff),
            'daily_install_capacity': daily_install_capacity(self.staff),
        }
        payload.update(board_configuration())
        if today is not None:
            payload['capacity'] = capacity_calendar(self.jobs, self.staff, today, calendar_days)
        return payload
