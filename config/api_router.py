"""
Public API router.

Exhibit collections are nested under the exhibit they belong to:
``/api/v1/exhibits/<exhibit_slug>/searches/`` and so on. The search
configuration and appearance settings are single objects per exhibit, so
they are mapped explicitly instead of through the router.
"""

from django.conf import settings
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from showcase.exhibits.api_views import AppearanceViewSet
from showcase.exhibits.api_views import BrowseViewSet
from showcase.exhibits.api_views import ExhibitRoleViewSet
from showcase.exhibits.api_views import ExhibitViewSet
from showcase.exhibits.api_views import PageViewSet
from showcase.exhibits.api_views import SearchConfigurationViewSet
from showcase.exhibits.api_views import SearchViewSet
from showcase.users.api.views import UserViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

EXHIBIT_PREFIX = r"exhibits/(?P<exhibit_slug>[^/.]+)"

router.register("users", UserViewSet)
router.register("exhibits", ExhibitViewSet, basename="exhibit")
router.register(f"{EXHIBIT_PREFIX}/searches", SearchViewSet, basename="exhibit-search")
router.register(f"{EXHIBIT_PREFIX}/pages", PageViewSet, basename="exhibit-page")
router.register(f"{EXHIBIT_PREFIX}/browse", BrowseViewSet, basename="exhibit-browse")
router.register(f"{EXHIBIT_PREFIX}/roles", ExhibitRoleViewSet, basename="exhibit-role")

configuration = SearchConfigurationViewSet.as_view(
    {"get": "retrieve", "patch": "partial_update"},
)
metadata_fields = SearchConfigurationViewSet.as_view({"get": "metadata_fields"})
search_views = SearchConfigurationViewSet.as_view({"get": "search_views"})
appearance = AppearanceViewSet.as_view({"get": "retrieve", "patch": "partial_update"})

app_name = "api"
urlpatterns = [
    path(
        "exhibits/<str:exhibit_slug>/configuration/",
        configuration,
        name="exhibit-configuration",
    ),
    path(
        "exhibits/<str:exhibit_slug>/configuration/metadata-fields/",
        metadata_fields,
        name="exhibit-configuration-metadata-fields",
    ),
    path(
        "exhibits/<str:exhibit_slug>/configuration/search-views/",
        search_views,
        name="exhibit-configuration-search-views",
    ),
    path(
        "exhibits/<str:exhibit_slug>/appearance/",
        appearance,
        name="exhibit-appearance",
    ),
    *router.urls,
]
