import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.db import transaction

from showcase.exhibits.constants import DEFAULT_BROWSE_SLUG
from showcase.exhibits.constants import HOME_PAGE_SLUG
from showcase.exhibits.constants import NavType
from showcase.exhibits.constants import PageType
from showcase.exhibits.constants import ResourceKind
from showcase.exhibits.constants import parse_resource_kind
from showcase.exhibits.models import Exhibit
from showcase.exhibits.models import HomePage
from showcase.exhibits.models import Page
from showcase.exhibits.models import Search
from showcase.exhibits.models import SearchConfiguration
from showcase.exhibits.models import find_by_slug
from showcase.exhibits.models import normalize_field_settings
from showcase.exhibits.tests.factories import AboutPageFactory
from showcase.exhibits.tests.factories import CustomFieldFactory
from showcase.exhibits.tests.factories import ExhibitFactory
from showcase.exhibits.tests.factories import FeaturePageFactory
from showcase.exhibits.tests.factories import SearchFactory

pytestmark = pytest.mark.django_db


class TestExhibitDefaults:
    def test_new_exhibit_gets_home_page_configuration_and_browse_category(self):
        exhibit = ExhibitFactory(title="Maps of the World")

        assert exhibit.slug == "maps-of-the-world"
        assert exhibit.home_page is not None
        assert exhibit.home_page.slug == HOME_PAGE_SLUG
        assert SearchConfiguration.objects.filter(exhibit=exhibit).exists()
        assert list(exhibit.searches.values_list("slug", "published")) == [
            (DEFAULT_BROWSE_SLUG, True),
        ]
        assert list(
            exhibit.main_navigations.values_list("nav_type", "weight"),
        ) == [
            (NavType.CURATED_FEATURES, 0),
            (NavType.BROWSE, 1),
            (NavType.ABOUT, 2),
        ]

    def test_slugs_are_unique(self):
        first = ExhibitFactory(title="Atlas")
        second = ExhibitFactory(title="Atlas")

        assert first.slug == "atlas"
        assert second.slug == "atlas-2"

    def test_description_is_stripped_of_markup(self):
        exhibit = ExhibitFactory(description="<script>x()</script><b>Bold</b> maps")

        assert "<" not in exhibit.description
        assert "Bold maps" in exhibit.description

    def test_title_is_required(self):
        with pytest.raises(ValidationError):
            Exhibit(title="  ").full_clean()

    def test_only_one_default_exhibit(self):
        default = Exhibit.get_default()

        assert Exhibit.get_default() == default
        with pytest.raises(IntegrityError), transaction.atomic():
            Exhibit.objects.filter(pk=ExhibitFactory().pk).update(is_default=True)

    def test_deleting_an_exhibit_cascades_and_touches_default(self):
        default = Exhibit.get_default()
        before = default.modified
        exhibit = ExhibitFactory()
        SearchFactory(exhibit=exhibit)

        exhibit.delete()

        assert not Search.objects.filter(exhibit_id=exhibit.pk).exists()
        assert not Page.objects.filter(exhibit_id=exhibit.pk).exists()
        default.refresh_from_db()
        assert default.modified > before

    def test_index_field_names(self, settings):
        settings.SHOWCASE_INDEX_FIELDS = {"prefix": "sc_", "boolean_suffix": "_bsi"}
        exhibit = ExhibitFactory(title="Maps")

        assert exhibit.index_data() == {"sc_exhibit_maps_bsi": True}
        assert exhibit.public_field_name == "sc_exhibit_maps_public_bsi"

    def test_browse_category_and_about_page_helpers(self):
        exhibit = ExhibitFactory()
        assert exhibit.has_browse_categories()
        assert exhibit.main_about_page is None

        exhibit.searches.update(published=False)
        about = AboutPageFactory(exhibit=exhibit)

        assert not exhibit.has_browse_categories()
        assert exhibit.main_about_page == about


class TestSlugHistory:
    def test_renamed_search_still_resolves_by_old_slug(self):
        search = SearchFactory(title="Old maps")
        assert search.slug == "old-maps"

        search.slug = "historic-maps"
        search.save()

        queryset = Search.objects.filter(exhibit=search.exhibit)
        assert find_by_slug(queryset, "historic-maps") == search
        assert find_by_slug(queryset, "old-maps") == search

    def test_missing_slug_raises_does_not_exist(self):
        exhibit = ExhibitFactory()

        with pytest.raises(Search.DoesNotExist):
            find_by_slug(exhibit.searches.all(), "nope")


class TestPages:
    def test_proxies_filter_by_page_type(self):
        exhibit = ExhibitFactory()
        about = AboutPageFactory(exhibit=exhibit)
        feature = FeaturePageFactory(exhibit=exhibit)

        assert about.page_type == PageType.ABOUT
        assert feature.page_type == PageType.FEATURE
        assert list(exhibit.about_pages) == [about]
        assert list(exhibit.feature_pages) == [feature]

    def test_slug_unique_within_exhibit_and_type(self):
        exhibit = ExhibitFactory()
        about = AboutPageFactory(exhibit=exhibit, title="Intro")
        feature = FeaturePageFactory(exhibit=exhibit, title="Intro")
        another = AboutPageFactory(exhibit=exhibit, title="Intro")

        assert about.slug == feature.slug == "intro"
        assert another.slug == "intro-2"

    def test_one_home_page_per_exhibit(self):
        exhibit = ExhibitFactory()

        with pytest.raises(IntegrityError), transaction.atomic():
            HomePage.objects.create(exhibit=exhibit, title="Second home", slug="home-2")

    def test_only_feature_pages_nest(self):
        exhibit = ExhibitFactory()
        parent = FeaturePageFactory(exhibit=exhibit)
        about = AboutPageFactory(exhibit=exhibit, parent=parent)

        with pytest.raises(ValidationError):
            about.clean()

    def test_feature_page_cannot_nest_under_its_descendant(self):
        exhibit = ExhibitFactory()
        top = FeaturePageFactory(exhibit=exhibit)
        middle = FeaturePageFactory(exhibit=exhibit, parent=top)
        bottom = FeaturePageFactory(exhibit=exhibit, parent=middle)

        assert top.nests_under_itself(bottom)
        assert not bottom.nests_under_itself(top)

        top.parent = bottom
        with pytest.raises(ValidationError) as excinfo:
            top.clean()

        assert "parent" in excinfo.value.message_dict

    def test_top_level_feature_pages(self):
        exhibit = ExhibitFactory()
        parent = FeaturePageFactory(exhibit=exhibit)
        FeaturePageFactory(exhibit=exhibit, parent=parent)

        assert list(exhibit.top_level_feature_pages) == [parent]
        assert parent.child_pages.count() == 1


def test_custom_field_generates_index_field(db, settings):
    settings.SHOWCASE_INDEX_FIELDS = {"prefix": "", "boolean_suffix": "_bsi"}
    field = CustomFieldFactory(label="Map scale", exhibit=ExhibitFactory(title="Maps"))

    field.refresh_from_db()
    assert field.slug == "map-scale"
    assert field.field == "exhibit_maps_map-scale_tesim"


class TestNormalizeFieldSettings:
    def test_form_flags_become_booleans(self):
        normalized = normalize_field_settings(
            {
                "genre_ssim": {"enabled": "1", "label": "Genre"},
                "language_ssim": {"enabled": "0"},
                "title_tesim": {"enabled": True},
            },
        )

        assert normalized == {
            "genre_ssim": {"enabled": True, "label": "Genre"},
            "language_ssim": {"enabled": False},
            "title_tesim": {"enabled": True},
        }

    def test_rejects_non_objects(self):
        with pytest.raises(ValidationError):
            normalize_field_settings(["genre_ssim"])
        with pytest.raises(ValidationError):
            normalize_field_settings({"genre_ssim": "yes"})


class TestParseResourceKind:
    def test_known_values(self):
        assert parse_resource_kind("iiif") is ResourceKind.IIIF
        assert parse_resource_kind(None) is ResourceKind.RESOURCE

    def test_unknown_values_are_rejected(self):
        with pytest.raises(ValueError, match="Unknown resource type"):
            parse_resource_kind("Spotlight::Resources::Bogus")
        with pytest.raises(ValueError, match="must be a string"):
            parse_resource_kind(7)
