"""
API views for the ServiceM8 integration.
"""
import logging
from rest_framework import status as http_status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .history import build_communication_history
from .models import SyncLog
from .permissions import IsSyncAdmin
from .serializers import SyncLogSerializer
from .services import ServiceM8AuthError, ServiceM8Client, ServiceM8Error, ServiceM8NotConfigured
from .sync_engine import run_servicem8_sync
from .tasks import sync_servicem8_jobs_manual_task

logger = logging.getLogger(__name__)

NOT_CONNECTED = 'Not connected to ServiceM8. Please connect first.'
MAX_LOGS = 100


def _proxy(fetch, job_uuid, what):
    """
    Run one per-job ServiceM8 lookup, turning client errors into the
    JSON error responses the job card expects.
    """
    client = ServiceM8Client()
    if not client.is_configured:
        return None, Response({'error': NOT_CONNECTED}, status=http_status.HTTP_401_UNAUTHORIZED)
    try:
        return fetch(client, job_uuid), None
    except ServiceM8NotConfigured:
        return None, Response({'error': NOT_CONNECTED}, status=http_status.HTTP_401_UNAUTHORIZED)
    except ServiceM8AuthError as e:
        return None, Response({'error': str(e)}, status=http_status.HTTP_401_UNAUTHORIZED)
    except ServiceM8Error as e:
        logger.error(f"Error fetching {what} for job {job_uuid}: {e}", exc_info=True)
        return None, Response(
            {
                'error': f'Failed to fetch {what}',
                'message': str(e),
            },
            status=http_status.HTTP_502_BAD_GATEWAY
        )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSyncAdmin])
def manual_sync_jobs(request):
    """
    Manually trigger a ServiceM8 sync.
    This is the same as the scheduled sync but runs on demand.
    With {"background": true} it is queued on Celery and answers 202.
    """
    if not ServiceM8Client().is_configured:
        return Response(
            {
                'detail': 'ServiceM8 API key not configured.',
                'error': 'Configuration missing'
            },
            status=http_status.HTTP_400_BAD_REQUEST
        )

    sync_type = request.data.get('sync_type') or SyncLog.TYPE_FULL
    if sync_type not in dict(SyncLog.SYNC_TYPE_CHOICES):
        return Response({'error': f'Unknown sync type: {sync_type}'}, status=http_status.HTTP_400_BAD_REQUEST)

    if request.data.get('background'):
        result = sync_servicem8_jobs_manual_task.delay(sync_type)
        logger.info(f"Queued manual ServiceM8 sync {result.id} ({sync_type})")
        return Response(
            {
                'success': True,
                'taskId': result.id,
                'message': 'ServiceM8 sync queued',
            },
            status=http_status.HTTP_202_ACCEPTED
        )

    try:
        stats = run_servicem8_sync(sync_type=sync_type, trigger=SyncLog.TRIGGER_MANUAL)
    except Exception as e:
        logger.error(f"Manual ServiceM8 sync failed: {e}", exc_info=True)
        return Response(
            {
                'detail': f'Sync failed: {str(e)}',
                'error': str(e)
            },
            status=http_status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return Response({
        'success': True,
        'jobsProcessed': stats['jobs_processed'],
        'status': stats['status'],
        'message': f"Successfully synced {stats['jobs_processed']} jobs from ServiceM8",
        'stats': stats,
    }, status=http_status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sync_status(request):
    """Most recent sync run."""
    latest = SyncLog.objects.first()
    if latest is None:
        return Response({'message': 'No sync history'}, status=http_status.HTTP_200_OK)
    return Response(SyncLogSerializer(latest).data, status=http_status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_sync_logs(request):
    """
    Recent sync runs, newest first.
    Supports ?status= and ?limit= (max 100).
    """
    logs = SyncLog.objects.all()
    status_filter = request.query_params.get('status')
    if status_filter:
        logs = logs.filter(status=status_filter)

    try:
        limit = int(request.query_params.get('limit', 20))
    except (TypeError, ValueError):
        return Response({'error': 'limit must be an integer'}, status=http_status.HTTP_400_BAD_REQUEST)
    limit = max(1, min(limit, MAX_LOGS))

    serializer = SyncLogSerializer(logs[:limit], many=True)
    return Response({
        'results': serializer.data,
        'count': logs.count()
    }, status=http_status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_job_notes(request, job_uuid):
    notes, error = _proxy(lambda client, uuid: client.fetch_job_notes(uuid), job_uuid, 'notes')
    if error is not None:
        return error
    return Response(notes, status=http_status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_job_activity(request, job_uuid):
    activities, error = _proxy(lambda client, uuid: client.fetch_job_activities(uuid), job_uuid, 'job activities')
    if error is not None:
        return error
    return Response(activities, status=http_status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_job_history(request, job_uuid):
    """
    Notes and scheduled activities for one job, plus the merged,
    classified timeline (newest first) the job card renders.
    """
    history, error = _proxy(lambda client, uuid: client.fetch_job_history(uuid), job_uuid, 'job history')
    if error is not None:
        return error
    history['items'] = [item.to_dict() for item in build_communication_history(history)]
    return Response(history, status=http_status.HTTP_200_OK)
