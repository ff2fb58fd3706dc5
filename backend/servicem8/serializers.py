from rest_framework import serializers

from .models import SyncLog


class SyncLogSerializer(serializers.ModelSerializer):
    """Serializer for a ServiceM8 sync run."""
    trigger = serializers.SerializerMethodField()

    class Meta:
        model = SyncLog
        fields = [
            'id', 'sync_type', 'status', 'trigger', 'jobs_processed',
            'error_message', 'metadata', 'started_at', 'completed_at'
        ]
        read_only_fields = fields

    def get_trigger(self, obj):
        return (obj.metadata or {}).get('trigger')
