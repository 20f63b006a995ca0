from __future__ import annotations

from rest_framework import serializers

from core.models import Company
from pricing.serializers import EstimateRequestSerializer

from .models import PaymentMethod, Quote


class QuoteCreateSerializer(EstimateRequestSerializer):
    client = serializers.PrimaryKeyRelatedField(queryset=Company.objects.all(), required=False, allow_null=True)


class QuoteSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.name", read_only=True, default=None)
    created_by = serializers.SlugRelatedField(slug_field="username", read_only=True)
    agent = serializers.SlugRelatedField(slug_field="username", read_only=True)
    tracking_number = serializers.SerializerMethodField()
    invoice_available = serializers.BooleanField(read_only=True)

    class Meta:
        model = Quote
        fields = [
            "id",
            "quote_number",
            "status",
            "client",
            "client_name",
            "created_by",
            "origin_country",
            "origin_city",
            "destination_country",
            "destination_city",
            "transport_modes",
            "priority",
            "cargo_type",
            "total_weight",
            "package_count",
            "packages",
            "estimate_snapshot",
            "estimated_cost",
            "currency",
            "valid_until",
            "payment_method",
            "agent",
            "rejection_reason",
            "cancellation_reason",
            "sent_at",
            "accepted_at",
            "rejected_at",
            "treatment_started_at",
            "validated_at",
            "cancelled_at",
            "expired_at",
            "payment_received_at",
            "invoice_available",
            "tracking_number",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_tracking_number(self, obj):
        shipment = getattr(obj, "shipment", None) if obj.status == "VALIDATED" else None
        return shipment.tracking_number if shipment else None


class PaymentMethodSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)


class StartTreatmentSerializer(serializers.Serializer):
    comment = serializers.CharField(required=False, allow_blank=True, default="")


class ValidateQuoteSerializer(serializers.Serializer):
    package_count = serializers.IntegerField(min_value=1)
    cargo_description = serializers.CharField(required=False, allow_blank=True, default="")
    comment = serializers.CharField(required=False, allow_blank=True, default="")
