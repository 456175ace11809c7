"""Pydantic request / response models for the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Company name.")
    batch: str = Field(..., min_length=1, description="YC batch, e.g. 'W24'.")
    industry: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None


class CompanyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    batch: str
    industry: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompanyResponse(BaseModel):
    success: bool = True
    data: CompanyOut


class CompanyListResponse(BaseModel):
    success: bool = True
    data: List[CompanyOut] = Field(default_factory=list)


class SearchRequest(BaseModel):
    # missing or non-string queries are answered with 400 by the route, not 422
    query: Any = Field(None, description="Natural-language search query.")
    page: int = Field(1, ge=1, description="1-based page number.")
    limit: int = Field(10, ge=1, description="Results per page.")


class SyncResponse(BaseModel):
    message: str
    count: int


class ImportResponse(BaseModel):
    success: bool
    count: int
