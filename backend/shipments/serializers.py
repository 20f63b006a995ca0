from rest_framework import serializers

from .models import Shipment, ShipmentStatus, TrackingEvent


class TrackingEventSerializer(serializers.ModelSerializer):
    recorded_by = serializers.SlugRelatedField(slug_field="username", read_only=True)

    class Meta:
        model = TrackingEvent
        fields = ["id", "status", "location", "latitude", "longitude", "description", "internal_notes", "recorded_by", "timestamp"]
        read_only_fields = fields


class RecordEventSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c in ShipmentStatus.choices if c[0] != ShipmentStatus.DRAFT])
    location = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    internal_notes = serializers.CharField(required=False, allow_blank=True, default="")
    latitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = serializers.DecimalField(max_digits=9, decimal_places=6, required=False, allow_null=True, min_value=-180, max_value=180)
    timestamp = serializers.DateTimeField(required=False, allow_null=True)


class ShipmentSerializer(serializers.ModelSerializer):
    """Internal view for staff, costs included."""
    quote_number = serializers.CharField(source="quote.quote_number", read_only=True, default=None)
    client_name = serializers.CharField(source="client.name", read_only=True, default=None)
    events = TrackingEventSerializer(many=True, read_only=True)

    class Meta:
        model = Shipment
        fields = [
            "id",
            "tracking_number",
            "quote_number",
            "client",
            "client_name",
            "status",
            "origin_country",
            "origin_city",
            "destination_country",
            "destination_city",
            "cargo_type",
            "cargo_description",
            "weight",
            "package_count",
            "transport_modes",
            "estimated_cost",
            "actual_cost",
            "currency",
            "internal_notes",
            "requested_pickup_date",
            "actual_pickup_date",
            "estimated_delivery_date",
            "actual_delivery_date",
            "events",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
