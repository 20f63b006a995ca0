from rest_framework import serializers


class StatusLogSerializer(serializers.Serializer):
    """Read-only shape shared by every *Log model."""
    id = serializers.IntegerField(read_only=True)
    event_type = serializers.CharField(read_only=True)
    old_status = serializers.CharField(read_only=True, allow_null=True)
    new_status = serializers.CharField(read_only=True, allow_null=True)
    changed_by = serializers.SlugRelatedField(slug_field="username", read_only=True)
    notes = serializers.CharField(read_only=True)
    metadata = serializers.JSONField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(min_length=10, trim_whitespace=True)


def validated_payload(serializer_class, request, **kwargs):
    ser = serializer_class(data=request.data, **kwargs)
    ser.is_valid(raise_exception=True)
    return ser.validated_data
