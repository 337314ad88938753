from showcase.catalog.memory import InMemorySearchClient

DOCUMENTS = [
    {"id": "1", "title_ssi": "Cook's chart", "genre_ssim": ["Chart"], "in_bsi": True},
    {"id": "2", "title_ssi": "Atlas of the Pacific", "genre_ssim": ["Atlas"], "in_bsi": True},
    {"id": "3", "title_ssi": "Bligh's atlas", "genre_ssim": ["Atlas"], "in_bsi": False},
]


def ids(response):
    return [doc["id"] for doc in response.documents]


def test_match_all_and_substring_query():
    client = InMemorySearchClient(DOCUMENTS)

    assert ids(client.search({"q": "*:*"})) == ["1", "2", "3"]
    assert ids(client.search({"q": "ATLAS"})) == ["2", "3"]


def test_filters_and_negation():
    client = InMemorySearchClient(DOCUMENTS)

    response = client.search({"fq": ["in_bsi:true", 'genre_ssim:"Atlas"']})
    negated = client.search({"fq": ["-in_bsi:false"]})

    assert ids(response) == ["2"]
    assert ids(negated) == ["1", "2"]


def test_sort_and_paging():
    client = InMemorySearchClient(DOCUMENTS)

    response = client.search({"sort": "score desc, title_ssi asc", "rows": "2", "start": "1"})

    assert response.total == 3
    assert response.start == 1
    assert ids(response) == ["3", "1"]


def test_add_and_clear():
    client = InMemorySearchClient()
    client.add({"id": "x"})
    assert client.search({}).total == 1

    client.clear()
    assert client.search({}).total == 0
