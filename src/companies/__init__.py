"""Company records: relational storage, upstream YC directory client and sync."""

from .models import Company
from .repository import CompanyRepository
from .service import CompanyService
from .sync import CompanySyncService
from .yc_api import YCApiClient

__all__ = [
    "Company",
    "CompanyRepository",
    "CompanyService",
    "CompanySyncService",
    "YCApiClient",
]
