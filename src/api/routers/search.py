from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_search_service
from src.api.schemas import SearchRequest
from src.search import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


async def run_search(request: SearchRequest, service: SearchService) -> Dict[str, Any]:
    """Validate the query and hand it to the search service.

    Rejects blank queries before any embedding or vector index call.
    """
    if not isinstance(request.query, str) or not request.query.strip():
        raise HTTPException(status_code=400, detail="Query is required")

    try:
        return await service.search(request.query.strip(), page=request.page, limit=request.limit)
    except Exception as exc:
        logger.exception("Search Error")
        raise HTTPException(status_code=500, detail=f"Search failed: {exc}") from exc


@router.post("/search", summary="Semantic company search")
async def search(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> Dict[str, Any]:
    """Search YC companies with a natural-language query.

    Returns ``{success, page, limit, total, matches}``; on an upstream failure
    ``{success: false, error}``.
    """
    return await run_search(request, service)
