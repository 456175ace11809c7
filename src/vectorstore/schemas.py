from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class VectorRecord:
    """One row of the company collection: id, embedding and metadata payload."""

    id: str
    values: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VectorMatch:
    id: str
    score: Optional[float] = None
    metadata: Optional[Dict[str, Any]] = None

    def label(self, max_len: int = 80) -> str:
        """Company name if present, otherwise the id, cut to max_len."""
        name = (self.metadata or {}).get("name") or self.id
        name = str(name)
        if len(name) <= max_len:
            return name
        return name[: max(0, max_len - 3)] + "..."


def format_match(match: "VectorMatch", max_len: int = 80) -> str:
    """Compact one-line representation for logs.

    Example: "id=42; score=0.8123; name=Acme"
    """
    score_str = f"{match.score:.4f}" if match.score is not None else "?"
    return f"id={match.id}; score={score_str}; name={match.label(max_len)}"
