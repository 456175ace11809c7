from typing import Iterable, List, Optional, Dict, Any
from pathlib import Path
from functools import cached_property
import asyncio
import logging

import yaml
from langchain.embeddings import init_embeddings


def load_config(config_path: Path | str) -> Dict[str, Any]:
    """Load model configuration from a given YAML file path.

    Args:
        config_path: Explicit path to the configuration file.

    Returns:
        Parsed configuration dictionary.

    Raises:
        FileNotFoundError: If the configuration file is not found.
        ValueError: If there is an error parsing the YAML file.
    """
    path = Path(config_path)

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise FileNotFoundError(f"Configuration file not found: {path}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file '{path}': {e}") from e

    return data or {}


CONFIG_FILE_PATH = Path(__file__).parent / "config.yaml"

logger = logging.getLogger(__name__)


def load_model_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return ``config`` as a fresh dict, or the bundled config.yaml when None."""
    if config is not None:
        return dict(config)
    try:
        return load_config(CONFIG_FILE_PATH)
    except FileNotFoundError:
        return {}


class Embedder:
    """Embedding wrapper backed by LangChain's init_embeddings.

    Credentials are read from the environment by the provider package
    (OPENAI_API_KEY for the default ``openai:text-embedding-3-small``).
    Upstream errors are not caught here.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        provider: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> None:
        cfg = load_model_config(config)
        embedding_cfg = dict(cfg.get("embedding_model") or {})

        if provider is not None:
            embedding_cfg["provider"] = provider
        if model is not None:
            embedding_cfg["model"] = model

        if not embedding_cfg.get("provider") or not embedding_cfg.get("model"):
            raise ValueError(
                "Embedding configuration missing 'provider' and/or 'model'. "
                "Set them in src/vectorstore/config.yaml under 'embedding_model', or pass them to Embedder()."
            )
        self._cfg = cfg
        self.model_name = f"{embedding_cfg['provider']}:{embedding_cfg['model']}"

        logger.info(
            "Initializing embeddings via init_embeddings provider=%s model=%s",
            embedding_cfg.get("provider"),
            embedding_cfg.get("model"),
        )
        self._emb = init_embeddings(**embedding_cfg)

    def _cache_dim(self, new_dim: int, source: str) -> None:
        """Cache embedding dimension once; warn on mismatches across calls."""
        cached = self.__dict__.get("dim")
        if cached is None:
            self.__dict__["dim"] = new_dim
            logger.info("Cached embedding dimension from %s: %d", source, new_dim)
        elif cached != new_dim:
            logger.warning(
                "Embedding dimension mismatch detected: cached=%s, new=%s.", cached, new_dim
            )

    async def aembed_documents(self, texts: Iterable[str]) -> List[List[float]]:
        """Embed a batch of texts; runs the sync provider call in a thread if needed."""
        items = list(texts)
        if not items:
            return []

        emb = self._emb
        if hasattr(emb, "aembed_documents"):
            vecs: List[List[float]] = await emb.aembed_documents(items)
        else:
            logger.debug("Using sync embed_documents in async aembed_documents()")
            vecs = await asyncio.to_thread(emb.embed_documents, items)

        if vecs and vecs[0]:
            self._cache_dim(len(vecs[0]), "aembed_documents()")
        return vecs

    async def aembed_query(self, text: str) -> List[float]:
        """Async single-text embedding; prefers provider aembed_query if available."""
        emb = self._emb

        if hasattr(emb, "aembed_query"):
            vec: List[float] = await emb.aembed_query(text)
        elif hasattr(emb, "embed_query"):
            logger.debug("Using sync embed_query in async aembed_query()")
            vec = await asyncio.to_thread(emb.embed_query, text)
        else:
            res = await self.aembed_documents([text])
            vec = res[0] if res else []

        if vec:
            self._cache_dim(len(vec), "aembed_query()")
        return vec

    @cached_property
    def dim(self) -> int:
        """Embedding vector dimension: configured ``dim`` if set, else probed once."""
        cfg_dim = self._cfg.get("dim") or self._cfg.get("dimensions")
        if cfg_dim:
            try:
                val = int(float(cfg_dim))
            except (TypeError, ValueError):
                val = 0
            if val > 0:
                logger.info("Using configured embedding dimension: %d", val)
                return val
            logger.warning("Ignoring invalid configured embedding dimension %r", cfg_dim)

        vec = self._emb.embed_query("Hello World!")
        if not vec:
            raise RuntimeError("Embedding model returned empty vector when probing dimension.")
        logger.info("Probed embedding dimension: %d", len(vec))
        return len(vec)
