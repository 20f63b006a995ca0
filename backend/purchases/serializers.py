from rest_framework import serializers

from .models import PurchaseRequest

INPUT_FIELDS = [
    "contact_name",
    "contact_email",
    "contact_phone",
    "product_name",
    "product_url",
    "quantity",
    "product_specs",
    "estimated_price",
    "max_budget",
    "delivery_address",
    "delivery_city",
    "delivery_postal_code",
    "delivery_country",
    "delivery_mode",
    "requested_delivery_date",
]

COST_FIELDS = ["actual_product_cost", "delivery_cost", "service_fee", "total_cost", "currency"]


def _amount(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False, allow_null=True, **kwargs)


class PurchaseRequestInputSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(min_length=3, max_length=200)
    quantity = serializers.IntegerField(min_value=1, default=1)
    delivery_country = serializers.CharField(min_length=2, max_length=2)
    estimated_price = _amount()
    max_budget = _amount()

    class Meta:
        model = PurchaseRequest
        fields = INPUT_FIELDS

    def validate_delivery_country(self, value):
        return value.strip().upper()


class GuestPurchaseRequestSerializer(PurchaseRequestInputSerializer):
    contact_email = serializers.EmailField()
    contact_phone = serializers.CharField(min_length=8, max_length=32)


class PurchaseRequestSerializer(serializers.ModelSerializer):
    created_by = serializers.SlugRelatedField(slug_field="username", read_only=True)
    client_name = serializers.CharField(source="client.name", read_only=True, default=None)

    class Meta:
        model = PurchaseRequest
        fields = (
            ["id", "tracking_number", "status", "client", "client_name", "created_by", "is_attached_to_account"]
            + INPUT_FIELDS
            + COST_FIELDS
            + [
                "actual_delivery_date",
                "completion_notes",
                "cancellation_reason",
                "internal_notes",
                "created_at",
                "updated_at",
            ]
        )
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not self.context.get("staff"):
            data.pop("internal_notes", None)
        return data


class PublicPurchaseSerializer(serializers.ModelSerializer):
    """Guest tracking view: the amounts the client will pay, nothing internal."""
    status_label = serializers.CharField(source="get_status_display", read_only=True)
    history = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseRequest
        fields = [
            "tracking_number",
            "status",
            "status_label",
            "product_name",
            "quantity",
            "delivery_city",
            "delivery_country",
            "delivery_mode",
            "requested_delivery_date",
            "actual_delivery_date",
            "service_fee",
            "total_cost",
            "currency",
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


class DeliverPurchaseSerializer(serializers.Serializer):
    actual_product_cost = _amount()
    delivery_cost = _amount()
    service_fee = _amount()
    completion_notes = serializers.CharField(required=False, allow_blank=True, default="")


class PurchaseCostsSerializer(serializers.Serializer):
    actual_product_cost = _amount()
    delivery_cost = _amount()
    service_fee = _amount()

    def validate(self, attrs):
        if not any(attrs.get(name) is not None for name in ("actual_product_cost", "delivery_cost", "service_fee")):
            raise serializers.ValidationError("Provide at least one cost.")
        return attrs
