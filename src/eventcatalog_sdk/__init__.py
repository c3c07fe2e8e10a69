from eventcatalog_sdk.config import CatalogConfig
from eventcatalog_sdk.errors import (
    AttachmentMissing,
    CatalogError,
    InvalidDirection,
    LocatorFailure,
    LockTimeout,
    ResourceAlreadyExists,
    ResourceNotFound,
    UnknownResourceType,
    VersionNotGreater,
)
from eventcatalog_sdk.eventcatalog import EventCatalog
from eventcatalog_sdk.models import (
    Badge,
    Command,
    Domain,
    Event,
    Query,
    ResourcePointer,
    Service,
    Team,
    User,
)
from eventcatalog_sdk.relationships import RelationshipResolver
from eventcatalog_sdk.storage import (
    DocumentLocator,
    DocumentLock,
    ResourceStore,
    VersionResolver,
)

__all__ = [
    # Main class
    "EventCatalog",
    # Config
    "CatalogConfig",
    # Models
    "Badge",
    "Command",
    "Domain",
    "Event",
    "Query",
    "ResourcePointer",
    "Service",
    "Team",
    "User",
    # Storage
    "DocumentLocator",
    "DocumentLock",
    "ResourceStore",
    "VersionResolver",
    "RelationshipResolver",
    # Errors
    "AttachmentMissing",
    "CatalogError",
    "InvalidDirection",
    "LocatorFailure",
    "LockTimeout",
    "ResourceAlreadyExists",
    "ResourceNotFound",
    "UnknownResourceType",
    "VersionNotGreater",
]
