from __future__ import annotations

import logging
from typing import Any, Dict, List

from src.utils.text_cleaning import join_text
from src.vectorstore.data_store import CompanyVectorIndex
from src.vectorstore.embeddings import Embedder
from src.vectorstore.schemas import VectorRecord

from .models import Company
from .repository import CompanyRepository

logger = logging.getLogger(__name__)


class CompanyService:
    """Create and list companies, keeping the vector index in step on create."""

    def __init__(
        self,
        repository: CompanyRepository,
        embedder: Embedder,
        index: CompanyVectorIndex,
    ) -> None:
        self.repository = repository
        self.embedder = embedder
        self.index = index

    async def list_companies(self) -> List[Company]:
        return await self.repository.list_all()

    async def create(self, fields: Dict[str, Any]) -> Company:
        text = join_text(
            [fields.get("name"), fields.get("industry"), fields.get("batch"), fields.get("description")],
            sep=" ",
        )
        vector = await self.embedder.aembed_query(text)

        company = self.repository.create(fields)
        company.set_embedding(vector)
        company = await self.repository.save(company)
        logger.info("Created company id=%s name=%r", company.id, company.name)

        await self.index.upsert(
            [
                VectorRecord(
                    id=str(company.id),
                    values=vector,
                    metadata={
                        "name": company.name,
                        "batch": company.batch,
                        "industry": company.industry or "",
                        "website": company.website or "",
                        "description": company.description or "",
                    },
                )
            ]
        )
        return company
