import pytest

from showcase.catalog.conf import clear_catalog_settings_cache
from showcase.catalog.images import get_derivative_table
from showcase.catalog.registry import clear_search_client_cache
from showcase.users.models import User
from showcase.users.tests.factories import UserFactory


@pytest.fixture(autouse=True)
def _media_storage(settings, tmpdir) -> None:
    settings.MEDIA_ROOT = tmpdir.strpath


@pytest.fixture(autouse=True)
def _reset_catalog_caches():
    """
    Settings-derived catalog objects are cached per process; drop them so
    tests overriding settings see their own values.
    """
    clear_search_client_cache()
    clear_catalog_settings_cache()
    get_derivative_table.cache_clear()
    yield
    clear_search_client_cache()
    clear_catalog_settings_cache()
    get_derivative_table.cache_clear()


@pytest.fixture
def user(db) -> User:
    return UserFactory()
