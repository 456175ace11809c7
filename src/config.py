"""Process-wide settings read from the environment.

A `.env` file in the working directory is loaded once on import. Model
settings (embedding provider, chat model, dimensions) live in
``src/vectorstore/config.yaml`` instead; see ``src.vectorstore.embeddings``.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv(override=True)


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from e


DATABASE_URL: str = os.getenv("DATABASE_URL", "")
DB_SSL: bool = env_flag("DB_SSL")

MILVUS_URI: str = os.getenv("MILVUS_URI", "http://localhost:19530")
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "root:Milvus")
MILVUS_COLLECTION: str = os.getenv("MILVUS_COLLECTION", "yc_companies")

YC_COMPANIES_URL: str = os.getenv(
    "YC_COMPANIES_URL", "https://yc-oss.github.io/api/companies/all.json"
)

SEARCH_TOP_K: int = env_int("SEARCH_TOP_K", 100)
SEARCH_USE_INTERPRETER: bool = env_flag("SEARCH_USE_INTERPRETER", default=True)
IMPORT_CHUNK_SIZE: int = env_int("IMPORT_CHUNK_SIZE", 50)

PORT: int = env_int("PORT", 5000)
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
