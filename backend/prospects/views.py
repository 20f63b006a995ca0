from django.http import Http404
from rest_framework import views
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core.throttling import PublicTrackingThrottle

from .serializers import InvitationSerializer
from .services import get_prospect_by_token


class InvitationView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicTrackingThrottle]

    def get(self, request, token):
        prospect = get_prospect_by_token(token)
        if prospect is None:
            raise Http404("No invitation found.")
        return Response(InvitationSerializer(prospect).data)
