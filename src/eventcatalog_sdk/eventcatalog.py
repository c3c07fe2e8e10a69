"""EventCatalog SDK - read and write an EventCatalog directory from Python.

Usage:
    ```python
    from eventcatalog_sdk import EventCatalog, Event

    catalog = EventCatalog(root="/path/to/catalog")

    await catalog.events.write(
        Event(id="OrderPlaced", version="0.0.1", name="Order placed", body="# Order placed")
    )
    event = await catalog.events.get("OrderPlaced")

    # Snapshot 0.0.1 into events/OrderPlaced/versioned/0.0.1 and write 1.0.0
    await catalog.events.write(
        Event(id="OrderPlaced", version="1.0.0", body="# v1"),
        version_existing_content=True,
    )
    ```
"""

from pathlib import Path

from eventcatalog_sdk.collection import (
    DomainCollection,
    FlatCollection,
    MessageCollection,
    ServiceCollection,
)
from eventcatalog_sdk.config import CatalogConfig
from eventcatalog_sdk.models.resources import (
    Command,
    Domain,
    Event,
    Query,
    Service,
    Team,
    User,
)
from eventcatalog_sdk.relationships import RelationshipResolver
from eventcatalog_sdk.storage.store import ResourceStore


class EventCatalog:
    """Entry point bundling the store, the relationship resolver and typed collections.

    Collections:

    - ``events``, ``commands``, ``queries``: messages, versioned.
    - ``services``: versioned, with ``sends``/``receives`` edge helpers.
    - ``domains``: versioned, with ``services`` membership helpers.
    - ``teams``, ``users``: single unversioned files.
    """

    def __init__(
        self,
        config: CatalogConfig | None = None,
        root: str | Path | None = None,
    ) -> None:
        """Initialize the SDK.

        Args:
            config: Configuration settings. Uses defaults (and EVENTCATALOG_
                environment variables) if not provided.
            root: Catalog directory. Overrides ``config.root`` when given.
        """
        config = config or CatalogConfig()
        if root is not None:
            config = config.model_copy(update={"root": Path(root)})
        self._config = config

        self.store = ResourceStore(config)
        self.relationships = RelationshipResolver(self.store)

        self.events = MessageCollection(self.store, self.relationships, "event", Event)
        self.commands = MessageCollection(self.store, self.relationships, "command", Command)
        self.queries = MessageCollection(self.store, self.relationships, "query", Query)
        self.services = ServiceCollection(self.store, self.relationships, "service", Service)
        self.domains = DomainCollection(self.store, self.relationships, "domain", Domain)
        self.teams = FlatCollection(self.store, "team", Team)
        self.users = FlatCollection(self.store, "user", User)

    @property
    def root(self) -> Path:
        return self.store.root

    @property
    def config(self) -> CatalogConfig:
        return self._config

    def collection(self, resource_type: str) -> MessageCollection | ServiceCollection | DomainCollection:
        """Look up the versioned collection for a resource type name."""
        collections = {
            "event": self.events,
            "command": self.commands,
            "query": self.queries,
            "service": self.services,
            "domain": self.domains,
        }
        try:
            return collections[resource_type]
        except KeyError:
            raise ValueError(f"Unknown versioned resource type: {resource_type}") from None

    async def resolve_owning_domains(self, id: str, version: str) -> list[Domain] | None:
        """Domains owning the message ``id`` at ``version``, or None if unresolved."""
        return await self.relationships.owning_domains(id, version)
