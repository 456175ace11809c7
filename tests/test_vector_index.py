import asyncio
from typing import Any, Dict, List

from conftest import FakeEmbedder

from src.vectorstore.data_store import MAX_TOP_K, CompanyVectorIndex
from src.vectorstore.schemas import VectorMatch, VectorRecord, format_match


class RecordingMilvusClient:
    """Just enough of MilvusClient for CompanyVectorIndex."""

    def __init__(self, hits: List[Dict[str, Any]] | None = None, exists: bool = True) -> None:
        self.hits = hits or []
        self.exists = exists
        self.calls: List[tuple] = []

    def has_collection(self, name: str) -> bool:
        self.calls.append(("has_collection", name))
        return self.exists

    def upsert(self, collection_name: str, data: List[Dict[str, Any]]) -> None:
        self.calls.append(("upsert", collection_name, data))

    def search(self, collection_name: str, data, limit: int, output_fields, **kwargs):
        self.calls.append(("search", collection_name, data, limit, output_fields, kwargs))
        return [self.hits]


def _index(client: RecordingMilvusClient) -> CompanyVectorIndex:
    return CompanyVectorIndex(client=client, collection="companies_test", embedder=FakeEmbedder(dim=3))


def test_upsert_rows() -> None:
    client = RecordingMilvusClient()
    asyncio.run(
        _index(client).upsert([VectorRecord(id="1", values=[0.1, 0.2, 0.3], metadata={"name": "Acme"})])
    )
    assert client.calls[-1] == (
        "upsert",
        "companies_test",
        [{"id": "1", "vector": [0.1, 0.2, 0.3], "metadata": {"name": "Acme"}}],
    )


def test_empty_upsert_is_a_no_op() -> None:
    client = RecordingMilvusClient()
    asyncio.run(_index(client).upsert([]))
    assert [c[0] for c in client.calls] == ["has_collection"]


def test_query_translates_filter_and_parses_hits() -> None:
    client = RecordingMilvusClient(
        hits=[
            {"id": "1", "distance": 0.93, "entity": {"metadata": {"name": "Acme"}}},
            {"id": 2, "distance": "0.5", "entity": {}},
        ]
    )
    matches = asyncio.run(
        _index(client).query([0.1, 0.2, 0.3], 50, filter={"batch": {"$eq": "W24"}})
    )

    _, name, data, limit, output_fields, kwargs = client.calls[-1]
    assert (name, data, limit, output_fields) == ("companies_test", [[0.1, 0.2, 0.3]], 50, ["metadata"])
    assert kwargs["filter"] == '(metadata["batch"] == "W24")'
    assert matches == [
        VectorMatch(id="1", score=0.93, metadata={"name": "Acme"}),
        VectorMatch(id="2", score=0.5, metadata={}),
    ]


def test_query_without_filter_or_metadata() -> None:
    client = RecordingMilvusClient(hits=[{"id": "1", "distance": 0.9}])
    matches = asyncio.run(_index(client).query([0.1, 0.2, 0.3], 10**6, include_metadata=False))

    _, _, _, limit, output_fields, kwargs = client.calls[-1]
    assert limit == MAX_TOP_K
    assert output_fields == []
    assert "filter" not in kwargs
    assert matches == [VectorMatch(id="1", score=0.9, metadata=None)]


def test_format_match() -> None:
    assert format_match(VectorMatch(id="1", score=0.12345, metadata={"name": "Acme"})) == "id=1; score=0.1235; name=Acme"
    assert format_match(VectorMatch(id="9")) == "id=9; score=?; name=9"
