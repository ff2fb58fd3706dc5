from rest_framework import serializers

from .display import lifecycle_color, servicem8_job_url, urgency_indicator, urgency_ring
from .models import Job
from .pipelines import SCHEDULER_STAGE_IDS
from .transitions import WORK_TYPES


class ProductionTaskSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    completed = serializers.BooleanField(default=False)
    assigned_to = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class JobSerializer(serializers.ModelSerializer):
    """Job payload including the derived card presentation fields."""
    card_color = serializers.SerializerMethodField()
    urgency_ring = serializers.SerializerMethodField()
    urgency_indicator = serializers.SerializerMethodField()
    servicem8_url = serializers.SerializerMethodField()

    class Meta:
        model = Job
        fields = '__all__'
        read_only_fields = ['id', 'service_m8_uuid', 'created_at', 'updated_at', 'synced_at']

    def get_card_color(self, obj):
        return lifecycle_color(obj.status, obj.lifecycle_phase, obj.scheduler_stage)

    def get_urgency_ring(self, obj):
        return urgency_ring(obj.urgency)

    def get_urgency_indicator(self, obj):
        return urgency_indicator(obj.urgency)

    def get_servicem8_url(self, obj):
        return servicem8_job_url(obj.service_m8_uuid)

    def validate_production_tasks(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of production tasks.")
        tasks = ProductionTaskSerializer(data=value, many=True)
        tasks.is_valid(raise_exception=True)
        return [dict(task) for task in tasks.validated_data]


class JobMoveSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=50)


class SchedulerStageSerializer(serializers.Serializer):
    scheduler_stage = serializers.CharField(max_length=50)

    def validate_scheduler_stage(self, value):
        if value not in SCHEDULER_STAGE_IDS:
            raise serializers.ValidationError(f"Unknown scheduler stage: {value}")
        return value


class JobScheduleSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=WORK_TYPES)
    date = serializers.DateTimeField()
    tentative = serializers.BooleanField(default=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class JobUnscheduleSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=WORK_TYPES)
    tentative = serializers.BooleanField(default=False)


class ConfirmTentativeSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=WORK_TYPES)
