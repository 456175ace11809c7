import logging
import time
from typing import Optional

from pymilvus import MilvusClient

from src import config

logger = logging.getLogger(__name__)


def get_milvus_client(
    uri: Optional[str] = None,
    token: Optional[str] = None,
    *,
    wait_ready: bool = True,
    attempts: int = 5,
    backoff_sec: float = 1.0,
) -> MilvusClient:
    """Connect to Milvus (or Zilliz Cloud) and optionally block until it answers.

    ``uri`` and ``token`` default to MILVUS_URI / MILVUS_TOKEN. A local ``*.db``
    path as uri selects Milvus Lite, which ignores the token.
    """
    uri = uri or config.MILVUS_URI
    token = token or config.MILVUS_TOKEN
    client = MilvusClient(uri=uri, token=token)
    if not wait_ready:
        return client

    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            client.list_collections()
            return client
        except Exception as e:  # pragma: no cover - needs a flaky server
            if attempt == attempts:
                raise
            logger.warning(
                "Milvus at %s not ready (attempt %d/%d): %s", uri, attempt, attempts, e
            )
            time.sleep(backoff_sec * attempt)
    return client
