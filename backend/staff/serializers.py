from rest_framework import serializers

from .models import ALL_STAFF_ID, SKILLS, Staff
from .utils import generate_staff_id


class StaffSerializer(serializers.ModelSerializer):
    """Staff member; ``id`` is derived from the name when the client omits it."""
    id = serializers.CharField(max_length=100, required=False)
    skills = serializers.ListField(child=serializers.ChoiceField(choices=SKILLS), required=False)

    class Meta:
        model = Staff
        fields = '__all__'
        read_only_fields = ['created_at']

    def validate_id(self, value):
        if self.instance is not None and value != self.instance.id:
            raise serializers.ValidationError("Staff id cannot be changed.")
        if value == ALL_STAFF_ID:
            raise serializers.ValidationError(f'"{ALL_STAFF_ID}" is reserved for the staff filter.')
        if self.instance is None and Staff.objects.filter(id=value).exists():
            raise serializers.ValidationError("A staff member with this id already exists.")
        return value

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Name is required.")
        return value.strip()

    def validate_daily_capacity_hours(self, value):
        if value < 0 or value > 24:
            raise serializers.ValidationError("Daily capacity must be between 0 and 24 hours.")
        return value

    def create(self, validated_data):
        if not validated_data.get('id'):
            validated_data['id'] = generate_staff_id(
                validated_data['name'],
                Staff.objects.values_list('id', flat=True),
            )
        return super().create(validated_data)
