from eventcatalog_sdk.models.edges import ResourcePointer, unique_pointers
from eventcatalog_sdk.models.resources import (
    DIRECTORY_TYPES,
    MESSAGE_TYPES,
    RESOURCE_DIRECTORIES,
    AnyResource,
    Badge,
    CatalogModel,
    Command,
    Domain,
    Event,
    Message,
    Query,
    ResourceBase,
    ResourceType,
    Service,
    Team,
    User,
    VersionedResource,
)

__all__ = [
    "AnyResource",
    "Badge",
    "CatalogModel",
    "Command",
    "DIRECTORY_TYPES",
    "Domain",
    "Event",
    "MESSAGE_TYPES",
    "Message",
    "Query",
    "RESOURCE_DIRECTORIES",
    "ResourceBase",
    "ResourcePointer",
    "ResourceType",
    "Service",
    "Team",
    "User",
    "VersionedResource",
    "unique_pointers",
]
