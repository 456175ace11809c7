from __future__ import annotations

import asyncio
import hashlib
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Must be set before src.config is imported by any test module.
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + str(Path(tempfile.gettempdir()) / "yc-search-tests.db"),
)
os.environ["SEARCH_USE_INTERPRETER"] = "false"

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from src.companies.database import init_db, make_engine  # noqa: E402
from src.search.interpreter import VectorQuery  # noqa: E402
from src.vectorstore.schemas import VectorMatch, VectorRecord  # noqa: E402


class FakeEmbedder:
    """Deterministic embedder; records every text it is asked to embed."""

    def __init__(self, dim: int = 8, fail_on: Optional[str] = None) -> None:
        self.dim = dim
        self.calls: List[str] = []
        self.fail_on = fail_on

    def vector_for(self, text: str) -> List[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [0.1 + digest[i] / 255.0 for i in range(self.dim)]

    async def aembed_query(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.fail_on is not None and self.fail_on in text:
            raise RuntimeError("embedding service unavailable")
        return self.vector_for(text)

    async def aembed_documents(self, texts: List[str]) -> List[List[float]]:
        return [await self.aembed_query(t) for t in texts]


class FakeVectorIndex:
    """Records upserts and queries; answers queries with a canned match list."""

    def __init__(self, matches: Optional[List[VectorMatch]] = None, error: Optional[Exception] = None) -> None:
        self.matches = matches or []
        self.error = error
        self.upserts: List[List[VectorRecord]] = []
        self.queries: List[Dict[str, Any]] = []

    async def upsert(self, records: List[VectorRecord]) -> None:
        self.upserts.append(list(records))

    async def query(self, vector, top_k=100, *, include_metadata=True, filter=None) -> List[VectorMatch]:
        self.queries.append(
            {"vector": list(vector), "top_k": top_k, "include_metadata": include_metadata, "filter": filter}
        )
        if self.error is not None:
            raise self.error
        return self.matches[:top_k]

    @property
    def upserted_records(self) -> List[VectorRecord]:
        return [r for batch in self.upserts for r in batch]


class StubInterpreter:
    def __init__(self, result: VectorQuery) -> None:
        self.result = result
        self.calls: List[str] = []

    async def interpret(self, query: str) -> VectorQuery:
        self.calls.append(query)
        return self.result


class FakeYCApi:
    def __init__(self, companies: List[Dict[str, Any]]) -> None:
        self.companies = companies

    async def fetch_companies(self) -> List[Dict[str, Any]]:
        return [dict(c) for c in self.companies]


def make_matches(n: int) -> List[VectorMatch]:
    return [
        VectorMatch(
            id=str(i),
            score=1.0 - i / 1000,
            metadata={"name": f"Company {i}", "batch": "W24", "industry": "Fintech"},
        )
        for i in range(n)
    ]


ACME = {
    "id": "1",
    "name": "Acme",
    "batch": "W24",
    "industry": "Fintech",
    "long_description": "...",
    "website": "acme.com",
}


@pytest.fixture
def sessionmaker(tmp_path: Path) -> async_sessionmaker:
    engine = make_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'companies.db'}", use_ssl=False, poolclass=NullPool
    )
    asyncio.run(init_db(engine))
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def vector_index() -> FakeVectorIndex:
    return FakeVectorIndex()
