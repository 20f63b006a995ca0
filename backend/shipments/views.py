from django.http import Http404
from rest_framework import mixins, status, views, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from accounts.permissions import IsStaffRole
from core.throttling import PublicTrackingThrottle

from .models import Shipment
from .serializers import RecordEventSerializer, ShipmentSerializer, TrackingEventSerializer
from .services import record_tracking_event
from .tracking import get_public_tracking

NOT_FOUND_DETAIL = "No shipment found for this tracking number."


class PublicTrackingView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicTrackingThrottle]

    def get(self, request, tracking_number):
        view = get_public_tracking(tracking_number)
        if view is None:
            raise Http404(NOT_FOUND_DETAIL)
        return Response(view)


class ShipmentViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = Shipment.objects.select_related("quote", "client").prefetch_related("events")
    serializer_class = ShipmentSerializer
    permission_classes = [IsStaffRole]

    def get_queryset(self):
        qs = super().get_queryset()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter.upper())
        return qs

    @action(detail=True, methods=["get", "post"])
    def events(self, request, pk=None):
        shipment = self.get_object()
        if request.method == "GET":
            return Response(TrackingEventSerializer(shipment.events.all(), many=True).data)

        ser = RecordEventSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        event = record_tracking_event(shipment.pk, request.user, **ser.validated_data)
        return Response(TrackingEventSerializer(event).data, status=status.HTTP_201_CREATED)
