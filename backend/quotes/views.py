# quotes/views.py
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import visible_to
from core.serializers import ReasonSerializer, StatusLogSerializer, validated_payload
from pricing.views import route_from

from . import services
from .models import Quote
from .serializers import (
    PaymentMethodSerializer,
    QuoteCreateSerializer,
    QuoteSerializer,
    StartTreatmentSerializer,
    ValidateQuoteSerializer,
)


class QuoteViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """
    Quotes and their lifecycle actions.

    Staff see every quote; clients see those created by them or billed to
    their company. Who may run each action is decided by the transition
    policy, not here.
    """
    serializer_class = QuoteSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = visible_to(Quote.objects.select_related("client", "created_by", "agent", "shipment"), self.request.user)
        status_filter = self.request.query_params.get("status")
        return qs.filter(status=status_filter.upper()) if status_filter else qs

    def _respond(self, quote, code=status.HTTP_200_OK):
        return Response(QuoteSerializer(quote).data, status=code)

    def _visible(self):
        # 404 for quotes outside the caller's scope
        return self.get_object()

    def create(self, request):
        data = validated_payload(QuoteCreateSerializer, request)
        quote = services.create_quote(
            request.user,
            route_from(data),
            data["packages"],
            data["transport_modes"],
            data["priority"],
            client=data.get("client"),
        )
        return self._respond(quote, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def send(self, request, pk=None):
        return self._respond(services.send_quote(self._visible().pk, request.user))

    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):
        data = validated_payload(PaymentMethodSerializer, request)
        return self._respond(services.accept_quote(self._visible().pk, request.user, data["payment_method"]))

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        data = validated_payload(ReasonSerializer, request)
        return self._respond(services.reject_quote(self._visible().pk, request.user, data["reason"]))

    @action(detail=True, methods=["post"], url_path="start-treatment")
    def start_treatment(self, request, pk=None):
        data = validated_payload(StartTreatmentSerializer, request)
        return self._respond(services.start_treatment(self._visible().pk, request.user, data["comment"]))

    @action(detail=True, methods=["post"])
    def validate(self, request, pk=None):
        data = validated_payload(ValidateQuoteSerializer, request)
        quote = services.validate_quote(
            self._visible().pk,
            request.user,
            data["package_count"],
            data["cargo_description"],
            data["comment"],
        )
        return self._respond(quote)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        data = validated_payload(ReasonSerializer, request)
        return self._respond(services.cancel_quote(self._visible().pk, request.user, data["reason"]))

    @action(detail=True, methods=["post"])
    def expire(self, request, pk=None):
        return self._respond(services.expire_quote(self._visible().pk, request.user))

    @action(detail=True, methods=["post"], url_path="payment-method")
    def payment_method(self, request, pk=None):
        data = validated_payload(PaymentMethodSerializer, request)
        return self._respond(services.set_payment_method(self._visible().pk, request.user, data["payment_method"]))

    @action(detail=True, methods=["post"], url_path="payment-received")
    def payment_received(self, request, pk=None):
        return self._respond(services.mark_payment_received(self._visible().pk, request.user))

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        quote = self._visible()
        logs = quote.logs.select_related("changed_by").order_by("created_at", "id")
        return Response(StatusLogSerializer(logs, many=True).data)
