import pytest
from django.http import QueryDict

from showcase.catalog.browse import SearchBuilder
from showcase.catalog.browse import list_categories
from showcase.catalog.browse import merge_query_params
from showcase.catalog.browse import query_params_from_request
from showcase.catalog.browse import run_search
from showcase.catalog.memory import InMemorySearchClient
from showcase.exhibits.tests.factories import ExhibitFactory
from showcase.exhibits.tests.factories import SearchFactory


class TestQueryParamsFromRequest:
    def test_dotted_and_bracketed_facets(self):
        query = QueryDict("q=maps&f.genre_ssim=Atlas&f[genre_ssim][]=Chart&f[language_ssim][]=Dutch")

        assert query_params_from_request(query) == {
            "q": "maps",
            "f": {"genre_ssim": ["Atlas", "Chart"], "language_ssim": ["Dutch"]},
        }

    def test_last_scalar_value_wins_and_unknown_keys_drop(self):
        query = QueryDict("sort=title&sort=date&utm_source=mail&per_page=20")

        assert query_params_from_request(query) == {"sort": "date", "per_page": "20"}

    def test_plain_mapping(self):
        assert query_params_from_request({"q": "cook", "f.era": ["1700s"]}) == {
            "q": "cook",
            "f": {"era": ["1700s"]},
        }


def test_merge_is_shallow():
    stored = {"q": "maps", "f": {"genre_ssim": ["Atlas"]}}

    merged = merge_query_params(stored, {"f": {"language_ssim": ["Dutch"]}})

    assert merged == {"q": "maps", "f": {"language_ssim": ["Dutch"]}}
    assert stored == {"q": "maps", "f": {"genre_ssim": ["Atlas"]}}


@pytest.mark.django_db
class TestSearchBuilder:
    @pytest.fixture
    def exhibit(self):
        return ExhibitFactory(title="Maps")

    def test_defaults(self, exhibit):
        params = SearchBuilder(exhibit).build({})

        assert params["q"] == "*:*"
        assert params["fq"] == ["exhibit_maps_bsi:true", "-exhibit_maps_public_bsi:false"]
        assert params["rows"] == "10"
        assert params["start"] == "0"
        assert "sort" not in params
        assert params["facet"] == "true"
        assert "genre_ssim" in params["facet.field"]

    def test_private_documents_can_be_included(self, exhibit):
        params = SearchBuilder(exhibit, include_private=True).build({})

        assert params["fq"] == ["exhibit_maps_bsi:true"]

    def test_facet_filters_are_quoted(self, exhibit):
        params = SearchBuilder(exhibit).build({"f": {"genre_ssim": ['Atlas "folio"']}})

        assert params["fq"][-1] == 'genre_ssim:"Atlas \\"folio\\""'

    def test_facet_names_must_be_plain_field_names(self, exhibit):
        params = SearchBuilder(exhibit).build(
            {
                "f": {
                    "genre_ssim": ["Atlas"],
                    "*:* OR id": ["x"],
                    "genre_ssim\n": ["y"],
                },
            },
        )

        assert params["fq"][2:] == ['genre_ssim:"Atlas"']

    def test_sort_key_and_expression(self, exhibit):
        builder = SearchBuilder(exhibit)

        assert builder.resolve_sort("title") == "sort_title_ssi asc"
        assert builder.resolve_sort("sort_date_ssi asc") == "sort_date_ssi asc"
        assert builder.resolve_sort("id desc; drop") is None

    def test_paging_is_capped(self, exhibit):
        params = SearchBuilder(exhibit).build({"per_page": "500", "page": "3"})

        assert params["rows"] == "100"
        assert params["start"] == "200"

    def test_invalid_paging_falls_back(self, exhibit):
        params = SearchBuilder(exhibit).build({"per_page": "many", "page": "-1"})

        assert params["rows"] == "10"
        assert params["start"] == "0"

    def test_exhibit_settings_apply(self, exhibit):
        configuration = exhibit.search_configuration
        configuration.default_per_page = 20
        configuration.facet_fields = {
            "genre_ssim": {"enabled": True},
            "language_ssim": {"enabled": False},
        }
        configuration.save()

        params = SearchBuilder(exhibit).build({})

        assert params["rows"] == "20"
        assert params["facet.field"] == ["genre_ssim"]


@pytest.mark.django_db
def test_list_categories_orders_published_by_weight():
    exhibit = ExhibitFactory()
    exhibit.searches.all().delete()
    second = SearchFactory(exhibit=exhibit, weight=2)
    first = SearchFactory(exhibit=exhibit, weight=1)
    SearchFactory(exhibit=exhibit, weight=0, published=False)

    assert list(list_categories(exhibit)) == [first, second]


@pytest.mark.django_db
def test_run_search_merges_request_over_stored_params():
    exhibit = ExhibitFactory(title="Maps")
    search = SearchFactory(
        exhibit=exhibit,
        query_params={"q": "pacific", "sort": "title"},
    )
    client = InMemorySearchClient(
        [
            {
                "id": "1",
                "sort_title_ssi": "b",
                "title_ssi": "Pacific chart",
                "exhibit_maps_bsi": True,
                "full_image_url_ssm": ["1.jpg"],
            },
            {"id": "2", "sort_title_ssi": "a", "title_ssi": "Pacific atlas", "exhibit_maps_bsi": True},
            {
                "id": "3",
                "sort_title_ssi": "c",
                "title_ssi": "Pacific coast",
                "exhibit_maps_bsi": True,
                "exhibit_maps_public_bsi": False,
            },
            {"id": "4", "title_ssi": "Pacific rim", "exhibit_other_bsi": True},
        ],
    )

    result = run_search(exhibit, search, {"per_page": "1", "page": "2"}, client=client)

    assert result.query_params == {"q": "pacific", "sort": "title", "per_page": "1", "page": "2"}
    assert result.response.total == 2
    assert [document.id for document in result.documents] == ["1"]
    assert result.documents[0].image_versions["full"] == ["1.jpg"]
