import logging
from datetime import date, datetime

from django.conf import settings
from django.db.models import Q
from django.http import HttpResponse
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.response import Response

from staff.models import Staff
from . import transitions
from .board import CommandCenter
from .capacity import capacity_calendar, daily_install_capacity, would_overbook
from .exports import XLSX_CONTENT_TYPE, jobs_workbook_bytes
from .filters import JobFilter, filter_job_queryset
from .models import Job
from .pagination import StandardResultsSetPagination
from .pipelines import board_configuration
from .serializers import (
    ConfirmTentativeSerializer,
    JobMoveSerializer,
    JobScheduleSerializer,
    JobSerializer,
    JobUnscheduleSerializer,
    SchedulerStageSerializer,
)

logger = logging.getLogger(__name__)


def _parse_day(value, default):
    if not value:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class JobViewSet(mixins.ListModelMixin,
                 mixins.RetrieveModelMixin,
                 mixins.UpdateModelMixin,
                 viewsets.GenericViewSet):
    """
    Jobs are created by the ServiceM8 sync; the dashboard reads them and
    moves them around the pipelines and the install calendar.
    """
    queryset = Job.objects.all()
    serializer_class = JobSerializer
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = JobFilter
    ordering_fields = ['created_at', 'updated_at', 'quote_value', 'days_since_last_contact', 'post_install_date', 'panel_install_date']
    ordering = ['-created_at']
    http_method_names = ['get', 'post', 'patch', 'head', 'options']

    def _apply(self, job, changes):
        for field, value in changes.items():
            setattr(job, field, value)
        job.save(update_fields=list(changes.keys()) + ['updated_at'])
        logger.info("Job %s updated: %s", job.job_id, ", ".join(sorted(changes)))
        return Response(JobSerializer(job, context=self.get_serializer_context()).data)

    @action(detail=True, methods=['post'])
    def move(self, request, pk=None):
        """Drop a job into another pipeline column. Any status is accepted."""
        job = self.get_object()
        serializer = JobMoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._apply(job, transitions.move_changes(serializer.validated_data['status']))

    @action(detail=True, methods=['post'], url_path='scheduler-stage')
    def scheduler_stage(self, request, pk=None):
        job = self.get_object()
        serializer = SchedulerStageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._apply(job, transitions.scheduler_stage_changes(serializer.validated_data['scheduler_stage']))

    @action(detail=True, methods=['post'])
    def schedule(self, request, pk=None):
        """
        Book posts or panels for a job.

        Confirmed bookings must fall inside the scheduling window; tentative
        bookings may be placed any distance ahead. The response carries an
        ``over_capacity`` flag but never refuses a booking for capacity.
        """
        job = self.get_object()
        serializer = JobScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        work_type = serializer.validated_data['type']
        when = serializer.validated_data['date']

        if serializer.validated_data['tentative']:
            changes = transitions.tentative_changes(work_type, when, serializer.validated_data.get('notes'))
        else:
            window = getattr(settings, 'SCHEDULE_WINDOW_DAYS', 14)
            today = timezone.localdate()
            if not transitions.within_schedule_window(when, today=today, window_days=window):
                return Response(
                    {'error': f'Installs can only be confirmed up to {window} days ahead. Book it tentatively instead.'},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            changes = transitions.schedule_changes(work_type, when)

        day = when.date()
        booked_jobs = Job.objects.filter(Q(post_install_date__date=day) | Q(panel_install_date__date=day))
        over_capacity = not serializer.validated_data['tentative'] and would_overbook(
            booked_jobs, day, job, work_type, daily_install_capacity(Staff.objects.listable())
        )

        response = self._apply(job, changes)
        response.data['over_capacity'] = over_capacity
        return response

    @action(detail=True, methods=['post'])
    def unschedule(self, request, pk=None):
        job = self.get_object()
        serializer = JobUnscheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        work_type = serializer.validated_data['type']
        if serializer.validated_data['tentative']:
            changes = transitions.unschedule_tentative_changes(work_type, job.install_stage)
        else:
            changes = transitions.unschedule_changes(work_type)
        return self._apply(job, changes)

    @action(detail=True, methods=['post'], url_path='confirm-tentative')
    def confirm_tentative(self, request, pk=None):
        job = self.get_object()
        serializer = ConfirmTentativeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        work_type = serializer.validated_data['type']
        tentative_date = getattr(job, transitions.work_fields(work_type)['tentative_date'])
        if tentative_date is None:
            return Response(
                {'error': f'Job has no tentative {work_type} date to confirm'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        window = getattr(settings, 'SCHEDULE_WINDOW_DAYS', 14)
        if not transitions.within_schedule_window(tentative_date, today=timezone.localdate(), window_days=window):
            return Response(
                {'error': f'Tentative date is more than {window} days away and cannot be confirmed yet.'},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return self._apply(job, transitions.confirm_tentative_changes(work_type, tentative_date))

    @action(detail=False, methods=['get'])
    def board(self, request):
        """Filtered job board plus roster, pipelines and the next two weeks of capacity."""
        center = CommandCenter.from_database(self.get_queryset(), Staff.objects.listable())
        center.set_filters(
            staff_id=request.query_params.get('staff') or None,
            search=request.query_params.get('search') or '',
        )
        return Response(center.snapshot(today=timezone.localdate()))

    @action(detail=False, methods=['get'])
    def pipelines(self, request):
        return Response(board_configuration())

    @action(detail=False, methods=['get'])
    def capacity(self, request):
        start = _parse_day(request.query_params.get('start'), timezone.localdate())
        if start is None:
            return Response({'error': 'start must be an ISO date (YYYY-MM-DD)'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            days = int(request.query_params.get('days', 14))
        except ValueError:
            return Response({'error': 'days must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
        days = max(1, min(days, 62))

        jobs = filter_job_queryset(self.get_queryset(), staff_id=request.query_params.get('staff'))
        staff = Staff.objects.listable()
        return Response({
            'daily_install_capacity': daily_install_capacity(staff),
            'days': capacity_calendar(jobs, staff, start, days),
        })

    @action(detail=False, methods=['get'])
    def export(self, request):
        """Filtered job list as an Excel workbook."""
        jobs = self.filter_queryset(self.get_queryset())
        filename = f"jobs_{datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
        resp = HttpResponse(jobs_workbook_bytes(jobs), content_type=XLSX_CONTENT_TYPE)
        resp['Content-Disposition'] = f'attachment; filename="{filename}"'
        return resp
