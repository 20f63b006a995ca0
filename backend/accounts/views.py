from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from prospects.services import attach_guest_requests


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def attach_guest_requests_view(request):
    """
    Attach pickups and purchases filed as a guest to the current account.

    Matches on the account's email and phone. Safe to call repeatedly:
    requests that are already attached are left alone.
    """
    result = attach_guest_requests(request.user)
    return Response({
        'pickups': result['pickups'],
        'purchases': result['purchases'],
        'prospects_converted': result['prospects_converted'],
        'attached': len(result['pickups']) + len(result['purchases']),
    })
