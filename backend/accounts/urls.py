from django.urls import path
from . import views

urlpatterns = [
    path('attach-guest-requests/', views.attach_guest_requests_view, name='attach-guest-requests'),
]
