"""Public schema exports shared across API route modules."""

from app.schemas.administrators import AdministratorRead
from app.schemas.app_settings import AppSettingsRead, AppSettingsUpdate
from app.schemas.assignments import AssignmentCreate, AssignmentRead
from app.schemas.audit import AuditEntryRead
from app.schemas.public_access import OtherTerritoryLink, PublicTerritoryRead
from app.schemas.publishers import (
    PublisherCreate,
    PublisherRead,
    PublisherRoleCreate,
    PublisherRoleRead,
    PublisherRoleUpdate,
    PublisherUpdate,
)
from app.schemas.territories import TerritoryCreate, TerritoryDetail, TerritoryRead, TerritoryUpdate
from app.schemas.zones import ZoneCreate, ZoneRead, ZoneUpdate

__all__ = [
    "AdministratorRead",
    "AppSettingsRead",
    "AppSettingsUpdate",
    "AssignmentCreate",
    "AssignmentRead",
    "AuditEntryRead",
    "OtherTerritoryLink",
    "PublicTerritoryRead",
    "PublisherCreate",
    "PublisherRead",
    "PublisherRoleCreate",
    "PublisherRoleRead",
    "PublisherRoleUpdate",
    "PublisherUpdate",
    "TerritoryCreate",
    "TerritoryDetail",
    "TerritoryRead",
    "TerritoryUpdate",
    "ZoneCreate",
    "ZoneRead",
    "ZoneUpdate",
]
