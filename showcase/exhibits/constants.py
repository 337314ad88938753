from django.db import models
from django.utils.translation import gettext_lazy as _

DEFAULT_EXHIBIT_TITLE = "Default exhibit"

DEFAULT_BROWSE_SLUG = "all-exhibit-items"
DEFAULT_BROWSE_CATEGORY = {
    "title": "All Exhibit Items",
    "slug": DEFAULT_BROWSE_SLUG,
    "short_description": "Search results for all items in this exhibit",
    "long_description": "All items in this exhibit.",
    "published": True,
}

HOME_PAGE_TITLE = "Exhibit Home"
HOME_PAGE_SLUG = "home"

TAGGING_CONTEXT = "tags"
DEFAULT_TAGGABLE_TYPE = "SolrDocument"


class PageType(models.TextChoices):
    ABOUT = "about", _("About page")
    FEATURE = "feature", _("Feature page")
    HOME = "home", _("Home page")


class NavType(models.TextChoices):
    CURATED_FEATURES = "curated_features", _("Curated Features")
    BROWSE = "browse", _("Browse")
    ABOUT = "about", _("About")


# Order in which navigation entries are created for a new exhibit.
DEFAULT_MAIN_NAVIGATION = (
    NavType.CURATED_FEATURES,
    NavType.BROWSE,
    NavType.ABOUT,
)


class ResourceKind(models.TextChoices):
    """
    Closed set of resource subtypes.

    The stored ``type`` discriminator and the ``type`` key of exported
    resources always hold one of these values. ``RESOURCE`` is the base kind.
    """

    RESOURCE = "resource", _("Resource")
    UPLOAD = "upload", _("Uploaded item")
    IIIF = "iiif", _("IIIF manifest")
    URL = "url", _("Web page")


class CustomFieldType(models.TextChoices):
    TEXT = "text", _("Free text")
    VOCAB = "vocab", _("Controlled vocabulary")


def parse_resource_kind(value) -> ResourceKind:
    """
    Parse a resource ``type`` value into a ``ResourceKind``.

    ``None`` means the type was omitted and resolves to the base kind. Any
    other value must name a known kind exactly; unknown strings raise
    ``ValueError`` instead of being coerced.
    """
    if value is None:
        return ResourceKind.RESOURCE
    if not isinstance(value, str):
        msg = f"Resource type must be a string, got {type(value).__name__}."
        raise ValueError(msg)
    try:
        return ResourceKind(value)
    except ValueError:
        known = ", ".join(ResourceKind.values)
        msg = f"Unknown resource type {value!r}. Expected one of: {known}."
        raise ValueError(msg) from None
