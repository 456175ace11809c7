from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_company_service, get_search_service, get_sync_service
from src.api.routers.search import run_search
from src.api.schemas import (
    CompanyCreate,
    CompanyListResponse,
    CompanyOut,
    CompanyResponse,
    ImportResponse,
    SearchRequest,
)
from src.companies import CompanyService, CompanySyncService
from src.search import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("", summary="List companies", response_model=CompanyListResponse)
async def list_companies(
    service: CompanyService = Depends(get_company_service),
) -> CompanyListResponse:
    try:
        companies = await service.list_companies()
    except Exception as exc:
        logger.exception("Failed to list companies")
        raise HTTPException(status_code=500, detail="Server error") from exc
    return CompanyListResponse(data=[CompanyOut.model_validate(c) for c in companies])


@router.post(
    "",
    summary="Create a company and index its embedding",
    response_model=CompanyResponse,
    status_code=201,
)
async def create_company(
    payload: CompanyCreate,
    service: CompanyService = Depends(get_company_service),
) -> CompanyResponse:
    try:
        company = await service.create(payload.model_dump())
    except Exception as exc:
        logger.exception("Failed to create company %r", payload.name)
        raise HTTPException(status_code=500, detail="Server error") from exc
    return CompanyResponse(data=CompanyOut.model_validate(company))


@router.post("/search", summary="Semantic company search")
async def search_companies(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> Dict[str, Any]:
    return await run_search(request, service)


@router.get(
    "/import-yc",
    summary="Bulk import the YC directory into the vector index",
    response_model=ImportResponse,
)
async def import_yc_companies(
    service: CompanySyncService = Depends(get_sync_service),
) -> ImportResponse:
    """Chunked import straight into the vector index; the companies table is untouched."""
    try:
        result = await service.bulk_import()
    except Exception as exc:
        logger.exception("YC import failed")
        raise HTTPException(status_code=500, detail=f"Import failed: {exc}") from exc
    return ImportResponse(**result)
