from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src import config
from src.companies import CompanyRepository, CompanyService, CompanySyncService, YCApiClient
from src.companies.database import get_session
from src.search import QueryInterpreter, SearchService
from src.vectorstore.data_store import CompanyVectorIndex
from src.vectorstore.embeddings import Embedder


@lru_cache(maxsize=1)
def get_embedder() -> Embedder:
    return Embedder()


@lru_cache(maxsize=1)
def get_vector_index() -> CompanyVectorIndex:
    # Share the embedder so the collection dim matches the query vectors.
    return CompanyVectorIndex(embedder=get_embedder())


@lru_cache(maxsize=1)
def get_query_interpreter() -> Optional[QueryInterpreter]:
    if not config.SEARCH_USE_INTERPRETER:
        return None
    return QueryInterpreter()


@lru_cache(maxsize=1)
def get_yc_api() -> YCApiClient:
    return YCApiClient()


def get_search_service(
    embedder: Embedder = Depends(get_embedder),
    index: CompanyVectorIndex = Depends(get_vector_index),
    interpreter: Optional[QueryInterpreter] = Depends(get_query_interpreter),
) -> SearchService:
    return SearchService(embedder, index, interpreter)


def get_company_service(
    session: AsyncSession = Depends(get_session),
    embedder: Embedder = Depends(get_embedder),
    index: CompanyVectorIndex = Depends(get_vector_index),
) -> CompanyService:
    return CompanyService(CompanyRepository(session), embedder, index)


def get_sync_service(
    session: AsyncSession = Depends(get_session),
    embedder: Embedder = Depends(get_embedder),
    index: CompanyVectorIndex = Depends(get_vector_index),
    yc_api: YCApiClient = Depends(get_yc_api),
) -> CompanySyncService:
    return CompanySyncService(CompanyRepository(session), embedder, index, yc_api)
