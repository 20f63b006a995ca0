from rest_framework.throttling import AnonRateThrottle


class PublicTrackingThrottle(AnonRateThrottle):
    scope = "public_tracking"


class GuestRequestThrottle(AnonRateThrottle):
    scope = "guest_requests"


class EstimateThrottle(AnonRateThrottle):
    scope = "estimate"
