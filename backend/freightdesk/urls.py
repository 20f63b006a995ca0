from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/accounts/", include("accounts.urls")),
    path("api/pricing/", include("pricing.urls")),
    path("api/", include("quotes.urls")),
    path("api/", include("shipments.urls")),
    path("api/", include("pickups.urls")),
    path("api/", include("purchases.urls")),
    path("api/", include("prospects.urls")),
]
