from __future__ import annotations

import logging

from rest_framework import status, views, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from accounts.permissions import CanManagePricing
from core.throttling import EstimateThrottle

from .dataclasses import Route
from .models import TransportRate
from .serializers import EstimateRequestSerializer, PricingConfigSerializer, TransportRateSerializer
from .services.config_service import get_active_config, load_snapshot, update_pricing_config
from .services.pricing_service import estimate_multi_package

logger = logging.getLogger(__name__)


def route_from(data) -> Route:
    return Route(
        origin_country=data["origin_country"],
        destination_country=data["destination_country"],
        origin_city=data.get("origin_city", ""),
        destination_city=data.get("destination_city", ""),
    )


class EstimateView(views.APIView):
    """Public price estimate for a multi-package order."""
    permission_classes = [AllowAny]
    throttle_classes = [EstimateThrottle]

    def post(self, request):
        ser = EstimateRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        route = route_from(data)
        snapshot = load_snapshot(route.origin_country, route.destination_country)
        result = estimate_multi_package(
            route, data["packages"], data["transport_modes"], data["priority"], snapshot
        )
        return Response(result.to_dict(), status=status.HTTP_200_OK)


class PricingConfigView(views.APIView):
    permission_classes = [CanManagePricing]

    def get(self, request):
        return Response(PricingConfigSerializer(get_active_config()).data)

    def put(self, request):
        config = update_pricing_config(dict(request.data), request.user)
        return Response(PricingConfigSerializer(config).data, status=status.HTTP_200_OK)


class TransportRateViewSet(viewsets.ModelViewSet):
    queryset = TransportRate.objects.all()
    serializer_class = TransportRateSerializer
    permission_classes = [CanManagePricing]

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params
        if params.get("origin_country"):
            qs = qs.filter(origin_country=params["origin_country"].upper())
        if params.get("destination_country"):
            qs = qs.filter(destination_country=params["destination_country"].upper())
        if params.get("transport_mode"):
            qs = qs.filter(transport_mode=params["transport_mode"].upper())
        if params.get("is_active") in ("true", "false"):
            qs = qs.filter(is_active=params["is_active"] == "true")
        return qs

    def perform_create(self, serializer):
        rate = serializer.save()
        logger.info(f"Transport rate {rate} created by {self.request.user.username}")

    def perform_update(self, serializer):
        rate = serializer.save()
        logger.info(f"Transport rate {rate} updated by {self.request.user.username}")

    def perform_destroy(self, instance):
        logger.info(f"Transport rate {instance} deleted by {self.request.user.username}")
        instance.delete()

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        rate = self.get_object()
        rate.is_active = not rate.is_active
        rate.save(update_fields=["is_active", "updated_at"])
        logger.info(f"Transport rate {rate} is_active={rate.is_active} by {request.user.username}")
        return Response(self.get_serializer(rate).data)
