from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import os
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.middleware.cors import CORSMiddleware

from src import config
from src.companies.database import init_db
from .routers.companies import router as companies_router
from .routers.search import router as search_router
from .routers.yc import router as yc_router


# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Vector index and model clients are created lazily on first request.
    await init_db()
    logger.info("Database schema ready")
    yield


"""
FastAPI application

Note on OpenAPI/Swagger docs:
Some FastAPI/Starlette combinations serve the OpenAPI schema with the vendor
media type "application/vnd.oai.openapi+json", which strict Accept headers
answer with 406. The auto-registered docs routes are disabled and replaced by
explicit JSONResponse-based endpoints below.
"""

# Optional base path for deployments under a subpath (e.g. https://example.com/yc-search/...).
# Used as the ASGI root_path and advertised via OpenAPI "servers".
_env_base_path = os.getenv("API_BASE_PATH", "").strip()
if _env_base_path and not _env_base_path.startswith("/"):
    _env_base_path = "/" + _env_base_path
if _env_base_path.endswith("/") and _env_base_path != "/":
    _env_base_path = _env_base_path.rstrip("/")

app = FastAPI(
    title="YC Company Search API",
    description="Sync Y Combinator companies and search them semantically",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    root_path=_env_base_path or "",
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(companies_router)
app.include_router(search_router)
app.include_router(yc_router)


@app.get("/health", tags=["ops"], summary="Health check")
async def health():
    return {"status": "ok"}


def _with_servers(base_path: str | None):
    """Return OpenAPI schema optionally annotated with servers -> [{url: base_path}]."""
    schema = app.openapi()
    if base_path and base_path != "/":
        # FastAPI caches app.openapi(); copy before adding servers
        schema = {**schema, "servers": [{"url": base_path}]}
    return schema


@app.get("/openapi.json", include_in_schema=False)
def openapi_json():
    return JSONResponse(_with_servers(_env_base_path or None))


# Relative openapi_url so the UI works behind a subpath
@app.get("/docs", include_in_schema=False)
def swagger_ui():
    return get_swagger_ui_html(openapi_url="openapi.json", title="YC Company Search API Docs")
