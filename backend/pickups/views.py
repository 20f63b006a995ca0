from rest_framework import mixins, status, views, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.models import STAFF_ROLES
from accounts.permissions import visible_to
from core.serializers import ReasonSerializer, StatusLogSerializer, validated_payload
from core.throttling import GuestRequestThrottle, PublicTrackingThrottle

from . import services
from .models import PickupRequest
from .serializers import (
    CompletePickupSerializer,
    GuestPickupRequestSerializer,
    PickupRequestInputSerializer,
    PickupRequestSerializer,
    PublicPickupSerializer,
    SchedulePickupSerializer,
)


class PickupRequestViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = PickupRequestSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = visible_to(PickupRequest.objects.select_related("client", "created_by"), self.request.user)
        status_filter = self.request.query_params.get("status")
        return qs.filter(status=status_filter.upper()) if status_filter else qs

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["staff"] = getattr(self.request.user, "role", None) in STAFF_ROLES
        return context

    def _respond(self, pickup, code=status.HTTP_200_OK):
        return Response(self.get_serializer(pickup).data, status=code)

    def create(self, request):
        data = validated_payload(PickupRequestInputSerializer, request)
        return self._respond(services.create_pickup_request(data, request.user), status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def schedule(self, request, pk=None):
        data = validated_payload(SchedulePickupSerializer, request)
        return self._respond(services.schedule_pickup(self.get_object().pk, request.user, **data))

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        return self._respond(services.start_pickup(self.get_object().pk, request.user))

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        data = validated_payload(CompletePickupSerializer, request)
        return self._respond(services.complete_pickup(self.get_object().pk, request.user, data["completion_notes"]))

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        data = validated_payload(ReasonSerializer, request)
        return self._respond(services.cancel_pickup(self.get_object().pk, request.user, data["reason"]))

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        logs = self.get_object().logs.select_related("changed_by").order_by("created_at", "id")
        return Response(StatusLogSerializer(logs, many=True).data)


class GuestPickupRequestView(views.APIView):
    """Public pickup form. Responds with the tracking link token."""
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [GuestRequestThrottle]

    def post(self, request):
        data = validated_payload(GuestPickupRequestSerializer, request)
        pickup = services.create_pickup_request(data)
        body = PublicPickupSerializer(pickup).data
        body["tracking_token"] = pickup.tracking_token
        return Response(body, status=status.HTTP_201_CREATED)


class PickupTrackingView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicTrackingThrottle]

    def get(self, request, token):
        return Response(PublicPickupSerializer(services.get_pickup_by_token(token)).data)
