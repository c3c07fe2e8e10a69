from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from eventcatalog_sdk.models.edges import ResourcePointer, coerce_scalar, unique_pointers

ResourceType = Literal["event", "command", "query", "service", "domain", "team", "user"]

# Canonical directory name of each resource type under the catalog root
RESOURCE_DIRECTORIES: dict[str, str] = {
    "event": "events",
    "command": "commands",
    "query": "queries",
    "service": "services",
    "domain": "domains",
    "team": "teams",
    "user": "users",
}

DIRECTORY_TYPES: dict[str, str] = {v: k for k, v in RESOURCE_DIRECTORIES.items()}

MESSAGE_TYPES: tuple[str, ...] = ("event", "command", "query")
VERSIONED_TYPES: tuple[str, ...] = ("event", "command", "query", "service", "domain")
FLAT_TYPES: tuple[str, ...] = ("team", "user")


class Badge(BaseModel):
    """Coloured label rendered next to a resource."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    content: str
    background_color: str = Field(alias="backgroundColor")
    text_color: str = Field(alias="textColor")


class CatalogModel(BaseModel):
    """Properties shared by everything stored in the catalog.

    Metadata keys without a declared field are kept as extras so documents
    written by other tools survive a read/write cycle.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str | None = None
    summary: str | None = None
    # Free-form text following the metadata block
    body: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return coerce_scalar(value)


class ResourceBase(CatalogModel):
    """Base for the versioned resource types."""

    version: str
    owners: list[str] | None = None
    badges: list[Badge] | None = None
    schema_path: str | None = Field(default=None, alias="schemaPath")

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> Any:
        return coerce_scalar(value)


class Event(ResourceBase):
    type: Literal["event"] = "event"


class Command(ResourceBase):
    type: Literal["command"] = "command"


class Query(ResourceBase):
    type: Literal["query"] = "query"


class Service(ResourceBase):
    """Service node - its edges point at the messages it sends and receives."""

    type: Literal["service"] = "service"
    sends: list[ResourcePointer] | None = None
    receives: list[ResourcePointer] | None = None

    @field_validator("sends", "receives", mode="after")
    @classmethod
    def _dedupe(cls, value: list[ResourcePointer] | None) -> list[ResourcePointer] | None:
        return unique_pointers(value) if value is not None else None


class Domain(ResourceBase):
    """Domain node - groups services by membership."""

    type: Literal["domain"] = "domain"
    services: list[ResourcePointer] | None = None

    @field_validator("services", mode="after")
    @classmethod
    def _dedupe(cls, value: list[ResourcePointer] | None) -> list[ResourcePointer] | None:
        return unique_pointers(value) if value is not None else None


class User(CatalogModel):
    """A person; stored as a single unversioned file."""

    type: Literal["user"] = "user"
    avatar_url: str | None = Field(default=None, alias="avatarUrl")
    role: str | None = None
    email: str | None = None
    hidden: bool | None = None
    slack_direct_message_url: str | None = Field(default=None, alias="slackDirectMessageUrl")
    associated_teams: list[str] | None = Field(default=None, alias="associatedTeams")


class Team(CatalogModel):
    """A group of users; stored as a single unversioned file."""

    type: Literal["team"] = "team"
    email: str | None = None
    hidden: bool | None = None
    slack_direct_message_url: str | None = Field(default=None, alias="slackDirectMessageUrl")
    members: list[str] | None = None


Message = Event | Command | Query
VersionedResource = Event | Command | Query | Service | Domain

AnyResource = Annotated[
    Union[Event, Command, Query, Service, Domain, Team, User],
    Field(discriminator="type"),
]

resource_adapter: TypeAdapter[Any] = TypeAdapter(AnyResource)
