from django.urls import path

from .views import InvitationView

urlpatterns = [
    path('prospects/invitation/<str:token>', InvitationView.as_view(), name='prospect-invitation'),
]
