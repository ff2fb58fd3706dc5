import logging

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from jobs.capacity import daily_install_capacity
from .editor import form_options
from .models import Staff
from .permissions import CanManageStaff
from .serializers import StaffSerializer

logger = logging.getLogger(__name__)


class StaffViewSet(viewsets.ModelViewSet):
    """Roster CRUD. The ``all`` filter sentinel is never listed or addressable."""
    serializer_class = StaffSerializer
    permission_classes = [CanManageStaff]
    pagination_class = None
    filterset_fields = ['role', 'active']
    ordering_fields = ['name', 'created_at']
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return Staff.objects.listable()

    def perform_create(self, serializer):
        member = serializer.save()
        logger.info("Staff member %s added by %s", member.id, self.request.user)

    def perform_update(self, serializer):
        member = serializer.save()
        logger.info("Staff member %s updated by %s", member.id, self.request.user)

    def perform_destroy(self, instance):
        logger.info("Staff member %s removed by %s", instance.id, self.request.user)
        instance.delete()

    @action(detail=False, methods=['get'])
    def capacity(self, request):
        """Total daily hours of the active install crews."""
        installers = Staff.objects.installers()
        return Response({
            'daily_install_capacity': daily_install_capacity(installers),
            'installers': StaffSerializer(installers, many=True).data,
        })

    @action(detail=False, methods=['get'], url_path='form-options')
    def form_options(self, request):
        return Response(form_options())
