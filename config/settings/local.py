from .base import *  # noqa: F403
from .base import env

# GENERAL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#debug
DEBUG = True
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="kq3JbXfFQ9m1T0tqVd6d8Hc2oQm7xZyRrLw4sN5uPaGiE0vB1jKlC3nMhS8eYtUz",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#allowed-hosts
ALLOWED_HOSTS = ["localhost", "0.0.0.0", "127.0.0.1"]  # noqa: S104

# CACHES
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#caches
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "",
    },
}

# EMAIL
# ------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#email-backend
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"

# LOGGING
# ------------------------------------------------------------------------------
LOGGING["loggers"] = {  # noqa: F405
    "showcase": {"level": "DEBUG", "handlers": ["console"], "propagate": False},
}

# django-rest-framework
# ------------------------------------------------------------------------------
REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = (  # noqa: F405
    "rest_framework.renderers.JSONRenderer",
    "rest_framework.renderers.BrowsableAPIRenderer",
)

# Search index
# ------------------------------------------------------------------------------
# Without a local Solr, browse against the in-memory index instead.
SEARCH_INDEX_BACKEND = env("SEARCH_INDEX_BACKEND", default="solr")
if SEARCH_INDEX_BACKEND == "memory":
    SEARCH_INDEX_OPTIONS = {}
