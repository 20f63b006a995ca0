from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import PublicTrackingView, ShipmentViewSet

router = DefaultRouter()
router.register(r'shipments', ShipmentViewSet, basename='shipments')

urlpatterns = [
    path('tracking/<str:tracking_number>', PublicTrackingView.as_view(), name='public-tracking'),
]
urlpatterns += router.urls
