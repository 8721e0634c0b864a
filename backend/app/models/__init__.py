"""Model exports for SQLAlchemy/SQLModel metadata discovery."""

from app.models.administrators import Administrator
from app.models.app_settings import AppSettings
from app.models.assignments import TerritoryAssignment
from app.models.audit_entries import AuditEntry
from app.models.public_access import PublicTerritoryAccess
from app.models.publishers import Publisher, PublisherRole
from app.models.territories import Territory
from app.models.zones import Zone

__all__ = [
    "Administrator",
    "AppSettings",
    "AuditEntry",
    "PublicTerritoryAccess",
    "Publisher",
    "PublisherRole",
    "Territory",
    "TerritoryAssignment",
    "Zone",
]
