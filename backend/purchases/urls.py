from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import GuestPurchaseRequestView, PurchaseRequestViewSet, PurchaseTrackingView

router = DefaultRouter()
router.register(r'purchases', PurchaseRequestViewSet, basename='purchases')

urlpatterns = [
    path('purchases/guest', GuestPurchaseRequestView.as_view(), name='purchase-guest'),
    path('purchases/track/<str:token>', PurchaseTrackingView.as_view(), name='purchase-track'),
]
urlpatterns += router.urls
