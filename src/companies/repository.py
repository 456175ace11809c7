from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Company


class CompanyRepository:
    """CRUD over the companies table for one AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_all(self) -> List[Company]:
        stmt = select(Company).order_by(Company.id)
        return list((await self.session.execute(stmt)).scalars().all())

    async def find_by_name(self, name: str) -> Optional[Company]:
        # names are not unique in the schema; take the oldest row
        stmt = select(Company).where(Company.name == name).order_by(Company.id).limit(1)
        return (await self.session.execute(stmt)).scalars().first()

    def create(self, fields: Dict[str, Any]) -> Company:
        company = Company()
        company.merge(fields)
        return company

    async def save(self, company: Company) -> Company:
        self.session.add(company)
        await self.session.commit()
        await self.session.refresh(company)
        return company

    async def upsert_by_name(self, fields: Dict[str, Any]) -> Company:
        """Create the company or merge ``fields`` into the existing row with the same name."""
        company = await self.find_by_name(fields["name"])
        if company is None:
            company = self.create(fields)
        else:
            company.merge(fields)
        return await self.save(company)
