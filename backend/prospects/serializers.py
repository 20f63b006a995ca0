from rest_framework import serializers

from .models import Prospect


class InvitationSerializer(serializers.ModelSerializer):
    """Contact details used to pre-fill the registration form."""
    pickup_count = serializers.IntegerField(source="pickuprequests.count", read_only=True)
    purchase_count = serializers.IntegerField(source="purchaserequests.count", read_only=True)

    class Meta:
        model = Prospect
        fields = ["email", "phone", "name", "company_name", "status", "invitation_expires_at", "pickup_count", "purchase_count"]
        read_only_fields = fields
