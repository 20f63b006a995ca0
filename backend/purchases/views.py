from rest_framework import mixins, status, views, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from accounts.models import STAFF_ROLES
from accounts.permissions import visible_to
from core.serializers import ReasonSerializer, StatusLogSerializer, validated_payload
from core.throttling import GuestRequestThrottle, PublicTrackingThrottle

from . import services
from .models import PurchaseRequest
from .serializers import (
    DeliverPurchaseSerializer,
    GuestPurchaseRequestSerializer,
    PublicPurchaseSerializer,
    PurchaseCostsSerializer,
    PurchaseRequestInputSerializer,
    PurchaseRequestSerializer,
)


class PurchaseRequestViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = PurchaseRequestSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = visible_to(PurchaseRequest.objects.select_related("client", "created_by"), self.request.user)
        status_filter = self.request.query_params.get("status")
        return qs.filter(status=status_filter.upper()) if status_filter else qs

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["staff"] = getattr(self.request.user, "role", None) in STAFF_ROLES
        return context

    def _respond(self, purchase, code=status.HTTP_200_OK):
        return Response(self.get_serializer(purchase).data, status=code)

    def create(self, request):
        data = validated_payload(PurchaseRequestInputSerializer, request)
        return self._respond(services.create_purchase_request(data, request.user), status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        return self._respond(services.start_purchase_treatment(self.get_object().pk, request.user))

    @action(detail=True, methods=["post"])
    def deliver(self, request, pk=None):
        data = validated_payload(DeliverPurchaseSerializer, request)
        return self._respond(services.deliver_purchase(self.get_object().pk, request.user, **data))

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        data = validated_payload(ReasonSerializer, request)
        return self._respond(services.cancel_purchase(self.get_object().pk, request.user, data["reason"]))

    @action(detail=True, methods=["post"])
    def costs(self, request, pk=None):
        data = validated_payload(PurchaseCostsSerializer, request)
        costs = {name: value for name, value in data.items() if value is not None}
        return self._respond(services.update_purchase_costs(self.get_object().pk, request.user, **costs))

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        logs = self.get_object().logs.select_related("changed_by").order_by("created_at", "id")
        return Response(StatusLogSerializer(logs, many=True).data)


class GuestPurchaseRequestView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [GuestRequestThrottle]

    def post(self, request):
        data = validated_payload(GuestPurchaseRequestSerializer, request)
        purchase = services.create_purchase_request(data)
        body = PublicPurchaseSerializer(purchase).data
        body["tracking_token"] = purchase.tracking_token
        return Response(body, status=status.HTTP_201_CREATED)


class PurchaseTrackingView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicTrackingThrottle]

    def get(self, request, token):
        return Response(PublicPurchaseSerializer(services.get_purchase_by_token(token)).data)
