from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import EstimateView, PricingConfigView, TransportRateViewSet

router = DefaultRouter()
router.register(r'transport-rates', TransportRateViewSet, basename='transport-rates')

urlpatterns = [
    path('estimate', EstimateView.as_view(), name='pricing-estimate'),
    path('config', PricingConfigView.as_view(), name='pricing-config'),
]
urlpatterns += router.urls
