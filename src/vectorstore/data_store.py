import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pymilvus import DataType, MilvusClient

from src import config

from .embeddings import Embedder
from .filters import build_filter_expression
from .milvus_client import get_milvus_client
from .schemas import VectorMatch, VectorRecord


logger = logging.getLogger(__name__)

# Milvus caps topK at 16384 per search request.
MAX_TOP_K = 16384


class CollectionManager:
    """Manages Milvus collection lifecycle and schema for company vectors."""

    def __init__(
        self, client: MilvusClient, name: str = "yc_companies", *, embedder: Embedder
    ) -> None:
        self.client = client
        self.name = name
        self.embedder = embedder

    def ensure_collection(self) -> None:
        if self.client.has_collection(self.name):
            return

        logger.info("Creating collection '%s' (dim=%d).", self.name, self.embedder.dim)
        schema = MilvusClient.create_schema(auto_id=False, enable_dynamic_field=False)
        # Relational ids and upstream YC ids are both stored as strings
        schema.add_field(
            field_name="id", datatype=DataType.VARCHAR, max_length=64, is_primary=True
        )
        schema.add_field(
            field_name="vector",
            datatype=DataType.FLOAT_VECTOR,
            dim=self.embedder.dim,
        )
        schema.add_field(field_name="metadata", datatype=DataType.JSON)

        index_params = self.client.prepare_index_params()
        index_params.add_index(
            field_name="vector",
            index_name="vector_index",
            index_type="AUTOINDEX",
            metric_type="COSINE",
        )

        # Strong consistency: a search right after a sync must see the upserts
        self.client.create_collection(
            collection_name=self.name,
            schema=schema,
            index_params=index_params,
            consistency_level="Strong",
        )


class CompanyVectorIndex:
    """Upsert and similarity query over the company collection.

    Blocking pymilvus calls run in a worker thread so the async API never
    stalls the event loop. Errors from Milvus propagate unchanged.
    """

    def __init__(
        self,
        client: Optional[MilvusClient] = None,
        collection: Optional[str] = None,
        manager: Optional[CollectionManager] = None,
        embedder: Optional[Embedder] = None,
    ) -> None:
        self.client = client or get_milvus_client()
        self.collection = collection or config.MILVUS_COLLECTION
        self.embedder = embedder or Embedder()
        self.manager = manager or CollectionManager(
            self.client, name=self.collection, embedder=self.embedder
        )
        self.manager.ensure_collection()

    def _check_dim(self, vector: Sequence[float], label: str) -> None:
        expected_dim = self.embedder.dim
        if len(vector) != expected_dim:
            raise ValueError(
                f"{label} has dim {len(vector)} but collection expects {expected_dim}"
            )

    def upsert_sync(self, records: Sequence[VectorRecord]) -> None:
        if not records:
            return
        rows = []
        for i, record in enumerate(records):
            self._check_dim(record.values, f"records[{i}].values")
            rows.append(
                {
                    "id": str(record.id),
                    "vector": list(record.values),
                    "metadata": dict(record.metadata or {}),
                }
            )
        self.client.upsert(collection_name=self.collection, data=rows)
        logger.debug("Upserted %d vectors into '%s'.", len(rows), self.collection)

    async def upsert(self, records: Sequence[VectorRecord]) -> None:
        await asyncio.to_thread(self.upsert_sync, list(records))

    def query_sync(
        self,
        vector: Sequence[float],
        top_k: int = 100,
        *,
        include_metadata: bool = True,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> List[VectorMatch]:
        self._check_dim(vector, "query vector")
        if top_k < 1:
            raise ValueError(f"top_k must be >= 1, got {top_k}")
        limit = min(int(top_k), MAX_TOP_K)

        kwargs: Dict[str, Any] = {}
        expression = build_filter_expression(filter)
        if expression:
            kwargs["filter"] = expression
            logger.debug("Vector query filter: %s", expression)

        results = self.client.search(
            collection_name=self.collection,
            data=[list(vector)],
            limit=limit,
            output_fields=["metadata"] if include_metadata else [],
            search_params={"metric_type": "COSINE"},
            **kwargs,
        )
        return self._results_to_matches(results, include_metadata=include_metadata)

    async def query(
        self,
        vector: Sequence[float],
        top_k: int = 100,
        *,
        include_metadata: bool = True,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> List[VectorMatch]:
        return await asyncio.to_thread(
            self.query_sync,
            vector,
            top_k,
            include_metadata=include_metadata,
            filter=filter,
        )

    @staticmethod
    def _results_to_matches(results, *, include_metadata: bool) -> List[VectorMatch]:
        """Convert a single-vector Milvus search result into ranked matches."""
        if not results:
            return []
        matches: List[VectorMatch] = []
        for hit in results[0]:
            get = hit.get if hasattr(hit, "get") else lambda k, d=None: getattr(hit, k, d)
            distance = get("distance")
            try:
                score = float(distance) if distance is not None else None
            except (TypeError, ValueError):
                score = None
            metadata = None
            if include_metadata:
                entity = get("entity") or {}
                raw = entity.get("metadata") if isinstance(entity, dict) else None
                metadata = raw if isinstance(raw, dict) else {}
            matches.append(VectorMatch(id=str(get("id")), score=score, metadata=metadata))
        return matches
