from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include
from django.urls import path

urlpatterns = [
    # Admin URLs...
    path(settings.ADMIN_URL, admin.site.urls),
    # API base url
    path("api/v1/", include("config.api_router")),
    *static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT),
]
