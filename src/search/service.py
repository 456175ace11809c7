from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from src import config
from src.vectorstore.data_store import CompanyVectorIndex
from src.vectorstore.embeddings import Embedder
from src.vectorstore.filters import metadata_subset
from src.vectorstore.schemas import VectorMatch, format_match

from .interpreter import QueryInterpreter, VectorQuery

logger = logging.getLogger(__name__)

# Metadata keys copied into each search result, in response order.
RESULT_FIELDS: List[str] = [
    "name",
    "website",
    "batch",
    "industry",
    "one_liner",
    "description",
    "location",
    "regions",
    "stage",
    "team_size",
    "tags",
    "isHiring",
]


def paginate(items: List[Any], page: int, limit: int) -> List[Any]:
    """Slice ``items`` to page ``page`` (1-based) of size ``limit``."""
    if page < 1 or limit < 1:
        raise ValueError(f"page and limit must be >= 1, got page={page} limit={limit}")
    offset = (page - 1) * limit
    return items[offset : offset + limit]


class SearchService:
    """Semantic company search.

    Pipeline: interpret query -> embed cleaned text -> filtered vector query
    -> in-memory pagination -> response shaping.

    Pagination slices a single vector query of ``top_k`` matches, so no page
    ever reaches past the first ``top_k`` results. ``search`` reports failures
    in its payload instead of raising.
    """

    def __init__(
        self,
        embedder: Embedder,
        index: CompanyVectorIndex,
        interpreter: Optional[QueryInterpreter] = None,
        *,
        default_top_k: Optional[int] = None,
    ) -> None:
        self.embedder = embedder
        self.index = index
        self.interpreter = interpreter
        self.default_top_k = default_top_k or config.SEARCH_TOP_K

    async def interpret(self, query: str) -> VectorQuery:
        if self.interpreter is None:
            return VectorQuery(query_text=query)
        return await self.interpreter.interpret(query)

    async def search(self, query: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        try:
            vector_query = await self.interpret(query)
            vector = await self.embedder.aembed_query(vector_query.query_text)
            top_k = vector_query.top_k or self.default_top_k

            matches = await self.index.query(
                vector,
                top_k,
                include_metadata=True,
                filter=vector_query.filter,
            )
            page_matches = paginate(matches, page, limit)

            if page_matches:
                logger.info(
                    "Search %r (top_k=%d): %d matches, page %d:\n%s",
                    vector_query.query_text,
                    top_k,
                    len(matches),
                    page,
                    "\n".join(format_match(m) for m in page_matches),
                )
            return {
                "success": True,
                "page": page,
                "limit": limit,
                "total": len(matches),
                "matches": [self._to_result(m) for m in page_matches],
            }
        except Exception as exc:
            logger.exception("Search failed for %r", query)
            return {"success": False, "error": str(exc)}

    def _to_result(self, match: VectorMatch) -> Dict[str, Any]:
        return {
            "id": match.id,
            "score": match.score,
            **metadata_subset(match.metadata or {}, RESULT_FIELDS),
        }
