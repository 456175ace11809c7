"""SQLAlchemy ORM model for YC companies."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from .database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    batch = Column(String(64), nullable=False, default="")
    industry = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    website = Column(String(512), nullable=True)
    # JSON-encoded list of floats, same vector as in the vector index
    embedding = Column(Text, nullable=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def set_embedding(self, vector: List[float]) -> None:
        self.embedding = json.dumps(vector)

    def get_embedding(self) -> Optional[List[float]]:
        if not self.embedding:
            return None
        return json.loads(self.embedding)

    def merge(self, fields: Dict[str, Any]) -> None:
        """Copy mapped fields onto this row, like an ORM merge of a partial entity."""
        for key, value in fields.items():
            if key in ("id", "embedding", "created_at", "updated_at"):
                continue
            setattr(self, key, value)

    def __repr__(self) -> str:
        return f"<Company id={self.id} name={self.name!r} batch={self.batch!r}>"
