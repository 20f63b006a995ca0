from rest_framework import serializers

from .models import PickupRequest, PickupTimeSlot

INPUT_FIELDS = [
    "contact_name",
    "contact_email",
    "contact_phone",
    "company_name",
    "pickup_address",
    "pickup_city",
    "pickup_postal_code",
    "pickup_country",
    "on_site_contact",
    "on_site_phone",
    "requested_date",
    "time_slot",
    "cargo_description",
    "estimated_weight",
    "estimated_volume",
    "package_count",
    "special_instructions",
    "access_instructions",
]


class PickupRequestInputSerializer(serializers.ModelSerializer):
    pickup_country = serializers.CharField(min_length=2, max_length=2)
    package_count = serializers.IntegerField(min_value=1, default=1)
    estimated_weight = serializers.DecimalField(
        max_digits=12, decimal_places=3, min_value=0, required=False, allow_null=True
    )

    class Meta:
        model = PickupRequest
        fields = INPUT_FIELDS

    def validate_pickup_country(self, value):
        return value.strip().upper()


class GuestPickupRequestSerializer(PickupRequestInputSerializer):
    contact_email = serializers.EmailField()
    contact_phone = serializers.CharField(min_length=8, max_length=32)


class PickupRequestSerializer(serializers.ModelSerializer):
    """Pickup as seen by its owner; internal notes only reach staff."""
    created_by = serializers.SlugRelatedField(slug_field="username", read_only=True)
    client_name = serializers.CharField(source="client.name", read_only=True, default=None)

    class Meta:
        model = PickupRequest
        fields = ["id", "tracking_number", "status", "client", "client_name", "created_by", "is_attached_to_account"] + INPUT_FIELDS + [
            "scheduled_date",
            "driver_name",
            "driver_phone",
            "actual_pickup_date",
            "completion_notes",
            "cancellation_reason",
            "internal_notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not self.context.get("staff"):
            data.pop("internal_notes", None)
        return data


class PublicPickupSerializer(serializers.ModelSerializer):
    """What a guest sees through their tracking link."""
    status_label = serializers.CharField(source="get_status_display", read_only=True)
    history = serializers.SerializerMethodField()

    class Meta:
        model = PickupRequest
        fields = [
            "tracking_number",
            "status",
            "status_label",
            "pickup_city",
            "pickup_country",
            "requested_date",
            "time_slot",
            "scheduled_date",
            "package_count",
            "cargo_description",
            "actual_pickup_date",
            "token_expires_at",
            "history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_history(self, obj):
        return [
            {"event_type": log.event_type, "status": log.new_status, "created_at": log.created_at}
            for log in obj.logs.order_by("created_at", "id")
        ]


class SchedulePickupSerializer(serializers.Serializer):
    scheduled_date = serializers.DateField()
    time_slot = serializers.ChoiceField(choices=PickupTimeSlot.choices, default=PickupTimeSlot.FLEXIBLE)
    driver_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=120)
    driver_phone = serializers.CharField(required=False, allow_blank=True, default="", max_length=32)


class CompletePickupSerializer(serializers.Serializer):
    completion_notes = serializers.CharField(required=False, allow_blank=True, default="")
