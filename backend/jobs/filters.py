"""
Staff and free-text search filtering for the job board.

A job passes when
  (selected staff is ``all`` or the job's assigned staff equals it) AND
  (the lower-cased query is a substring of customer name, job id or address).
The same predicate is available over plain mappings (board state) and as a
queryset filter (API).
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

import django_filters
from django.db.models import Q, QuerySet

from .models import Job

ALL_STAFF = 'all'
SEARCH_FIELDS = ('customer_name', 'job_id', 'address')


def _field(job: Any, name: str) -> Any:
    if isinstance(job, Mapping):
        return job.get(name)
    return getattr(job, name, None)


def matches_staff(job: Any, staff_id: Optional[str]) -> bool:
    if not staff_id or staff_id == ALL_STAFF:
        return True
    return _field(job, 'assigned_staff') == staff_id


def matches_search(job: Any, query: Optional[str]) -> bool:
    needle = (query or '').lower()
    if not needle:
        return True
    return any(needle in str(_field(job, name) or '').lower() for name in SEARCH_FIELDS)


def filter_jobs(jobs: Iterable[Any], staff_id: Optional[str] = ALL_STAFF, search: Optional[str] = '') -> List[Any]:
    """Order-preserving filter over job mappings or objects."""
    return [job for job in jobs if matches_staff(job, staff_id) and matches_search(job, search)]


def filter_job_queryset(queryset: QuerySet, staff_id: Optional[str] = ALL_STAFF, search: Optional[str] = '') -> QuerySet:
    if staff_id and staff_id != ALL_STAFF:
        queryset = queryset.filter(assigned_staff=staff_id)
    if search:
        condition = Q()
        for name in SEARCH_FIELDS:
            condition |= Q(**{f'{name}__icontains': search})
        queryset = queryset.filter(condition)
    return queryset


class JobFilter(django_filters.FilterSet):
    """Query-string filters for the job endpoints: ?staff=&search=&status=..."""
    staff = django_filters.CharFilter(method='filter_staff')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Job
        fields = ['status', 'lifecycle_phase', 'scheduler_stage', 'sales_stage', 'install_stage', 'urgency']

    def filter_staff(self, queryset, name, value):
        return filter_job_queryset(queryset, staff_id=value)

    def filter_search(self, queryset, name, value):
        return filter_job_queryset(queryset, search=value)
