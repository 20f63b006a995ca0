from __future__ import annotations

from rest_framework import serializers

from .models import CargoType, PricingConfig, Priority, TransportMode, TransportRate


class PackageLineSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    quantity = serializers.IntegerField(min_value=1)
    cargo_type = serializers.ChoiceField(choices=CargoType.choices, default=CargoType.GENERAL)
    weight = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=0)
    length = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    width = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    height = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)

    def validate_weight(self, value):
        if value <= 0:
            raise serializers.ValidationError("Must be greater than 0.")
        return value


class RouteSerializer(serializers.Serializer):
    origin_country = serializers.CharField(max_length=2, min_length=2)
    destination_country = serializers.CharField(max_length=2, min_length=2)
    origin_city = serializers.CharField(required=False, allow_blank=True, default="", max_length=120)
    destination_city = serializers.CharField(required=False, allow_blank=True, default="", max_length=120)

    def validate_origin_country(self, value: str) -> str:
        return value.strip().upper()

    def validate_destination_country(self, value: str) -> str:
        return value.strip().upper()


class EstimateRequestSerializer(RouteSerializer):
    transport_modes = serializers.ListField(
        child=serializers.ChoiceField(choices=TransportMode.choices), allow_empty=False
    )
    priority = serializers.ChoiceField(choices=Priority.choices, default=Priority.STANDARD)
    packages = PackageLineSerializer(many=True, allow_empty=False)


class PricingConfigSerializer(serializers.ModelSerializer):
    updated_by = serializers.SlugRelatedField(slug_field="username", read_only=True)

    class Meta:
        model = PricingConfig
        fields = [
            "default_rate_per_kg",
            "default_rate_per_m3",
            "volumetric_weight_ratios",
            "use_volumetric_weight_per_mode",
            "transport_multipliers",
            "cargo_type_surcharges",
            "priority_surcharges",
            "delivery_speeds_per_mode",
            "version",
            "updated_by",
            "updated_at",
        ]
        read_only_fields = fields


class TransportRateSerializer(serializers.ModelSerializer):
    class Meta:
        model = TransportRate
        fields = [
            "id",
            "origin_country",
            "destination_country",
            "transport_mode",
            "rate_per_kg",
            "rate_per_m3",
            "notes",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def _country(self, value: str) -> str:
        value = (value or "").strip().upper()
        if len(value) != 2 or not value.isalpha():
            raise serializers.ValidationError("Use a two-letter ISO country code.")
        return value

    def validate_origin_country(self, value):
        return self._country(value)

    def validate_destination_country(self, value):
        return self._country(value)

    def validate_rate_per_kg(self, value):
        if value < 0:
            raise serializers.ValidationError("Must not be negative.")
        return value
