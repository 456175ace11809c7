"""Reconcile the public YC company directory with local storage and the vector index.

Two entry points:

- ``CompanySyncService.sync`` walks the directory one company at a time:
  relational upsert by name, embedding, then a vector upsert keyed by the
  relational id. It stops at the first failure and reports nothing partial.
- ``CompanySyncService.bulk_import`` skips the relational table and pushes
  the directory straight into the vector index in fixed-size chunks, embedding
  each chunk concurrently. Vectors are keyed by the upstream YC id
  under the ``yc:`` prefix, so they never collide with relational ids.

Neither path retries or resumes. The relational row and its vector are
written independently, so a failure between the two leaves them out of step
until the next sync.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from src import config
from src.utils.text_cleaning import clean_list, join_text
from src.vectorstore.embeddings import Embedder
from src.vectorstore.data_store import CompanyVectorIndex
from src.vectorstore.schemas import VectorRecord

from .repository import CompanyRepository
from .yc_api import YCApiClient

logger = logging.getLogger(__name__)

# Bulk-imported vectors live beside relational-id vectors in one collection.
IMPORT_ID_PREFIX = "yc:"


def map_company(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Map an upstream company object onto the relational columns."""
    return {
        "name": raw.get("name"),
        "batch": raw.get("batch") or "",
        "industry": raw.get("industry"),
        "description": raw.get("long_description"),
        "website": raw.get("website"),
    }


def import_metadata(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Full vector metadata for bulk import; every key present, no nulls."""
    try:
        team_size = int(raw.get("team_size") or 0)
    except (TypeError, ValueError):
        team_size = 0
    return {
        "name": raw.get("name") or "",
        "website": raw.get("website") or "",
        "batch": raw.get("batch") or "",
        "industry": raw.get("industry") or "",
        "one_liner": raw.get("one_liner") or "",
        "description": raw.get("long_description") or "",
        "location": raw.get("all_locations") or "",
        "regions": clean_list(raw.get("regions")) if isinstance(raw.get("regions"), list) else [],
        "stage": raw.get("stage") or "",
        "team_size": team_size,
        "tags": clean_list(raw.get("tags")) if isinstance(raw.get("tags"), list) else [],
        "isHiring": bool(raw.get("isHiring")),
    }


class CompanySyncService:
    def __init__(
        self,
        repository: CompanyRepository,
        embedder: Embedder,
        index: CompanyVectorIndex,
        yc_api: Optional[YCApiClient] = None,
    ) -> None:
        self.repository = repository
        self.embedder = embedder
        self.index = index
        self.yc_api = yc_api or YCApiClient()

    async def sync(self) -> Dict[str, Any]:
        companies = await self.yc_api.fetch_companies()
        logger.info("Syncing %d companies", len(companies))

        for n, raw in enumerate(companies, start=1):
            mapped = map_company(raw)
            company = await self.repository.upsert_by_name(mapped)

            vector = await self.embedder.aembed_query(
                join_text([mapped["name"], mapped["description"]])
            )
            company.set_embedding(vector)
            await self.repository.save(company)

            await self.index.upsert(
                [
                    VectorRecord(
                        id=str(company.id),
                        values=vector,
                        metadata={
                            "name": company.name,
                            "batch": company.batch,
                            "industry": company.industry or "",
                        },
                    )
                ]
            )
            if n % 100 == 0:
                logger.info("  Synced %d/%d companies", n, len(companies))

        logger.info("Sync completed: %d companies", len(companies))
        return {"message": "Sync completed", "count": len(companies)}

    async def bulk_import(self, chunk_size: Optional[int] = None) -> Dict[str, Any]:
        chunk_size = config.IMPORT_CHUNK_SIZE if chunk_size is None else chunk_size
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

        companies = await self.yc_api.fetch_companies()
        logger.info("Total companies fetched: %d", len(companies))

        total_inserted = 0
        for start in range(0, len(companies), chunk_size):
            chunk = [c for c in companies[start : start + chunk_size] if c.get("id") is not None]
            if not chunk:
                continue

            embeddings: List[List[float]] = await asyncio.gather(
                *(
                    self.embedder.aembed_query(
                        join_text([c.get("name"), c.get("one_liner"), c.get("long_description")])
                    )
                    for c in chunk
                )
            )
            records = [
                VectorRecord(id=f"{IMPORT_ID_PREFIX}{c['id']}", values=vec, metadata=import_metadata(c))
                for c, vec in zip(chunk, embeddings)
            ]
            await self.index.upsert(records)

            total_inserted += len(records)
            logger.info("Inserted so far: %d", total_inserted)

        logger.info("Import completed: %d", total_inserted)
        return {"success": True, "count": total_inserted}
