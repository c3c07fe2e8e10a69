from pathlib import Path

import pytest

from eventcatalog_sdk.codec import encode
from eventcatalog_sdk.config import CatalogConfig
from eventcatalog_sdk.eventcatalog import EventCatalog
from eventcatalog_sdk.models.edges import ResourcePointer
from eventcatalog_sdk.models.resources import (
    CatalogModel,
    Command,
    Domain,
    Event,
    Service,
)
from eventcatalog_sdk.storage.store import ResourceStore


def put(directory: Path, resource: CatalogModel, filename: str = "index.mdx") -> Path:
    """Write a resource document straight to disk, bypassing the store."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_text(encode(resource), encoding="utf-8")
    return path


def pointers(*pairs: tuple[str, str | None]) -> list[ResourcePointer]:
    return [ResourcePointer(id=id, version=version) for id, version in pairs]


@pytest.fixture
def config(tmp_path: Path) -> CatalogConfig:
    """Configuration rooted at a fresh catalog directory with fast lock retries."""
    return CatalogConfig(root=tmp_path / "catalog", lock_retry_interval=0.01)


@pytest.fixture
def catalog(config: CatalogConfig) -> EventCatalog:
    return EventCatalog(config=config)


@pytest.fixture
def store(catalog: EventCatalog) -> ResourceStore:
    return catalog.store


@pytest.fixture
def nested_catalog(tmp_path: Path) -> EventCatalog:
    """Catalog where ownership is encoded by nesting resources under domains."""
    root = tmp_path / "nested"
    domain_a = root / "domains" / "domain-a"
    domain_b = root / "domains" / "domain-b"
    service_a = domain_a / "services" / "service-a"
    service_b = domain_b / "services" / "service-b"

    put(domain_a, Domain(id="domain-a", version="1.0.0", services=pointers(("service-a", "1.0.0"))))
    put(domain_b, Domain(id="domain-b", version="1.0.0"))
    put(service_a, Service(id="service-a", version="1.0.0", sends=pointers(("event-a", "1.0.0"))))
    put(service_a / "versioned" / "0.0.1", Service(id="service-a", version="0.0.1"))
    put(service_b, Service(id="service-b", version="1.0.0"))

    put(domain_a / "events" / "event-a", Event(id="event-a", version="1.0.0"))
    put(service_b / "events" / "event-b", Event(id="event-b", version="1.0.0"))
    put(service_b / "events" / "event-b" / "versioned" / "0.0.1", Event(id="event-b", version="0.0.1"))
    put(domain_a / "commands" / "command-a", Command(id="command-a", version="1.0.0"))
    put(service_a / "commands" / "command-aa", Command(id="command-aa", version="1.0.0"))

    return EventCatalog(root=root)


@pytest.fixture
def flat_catalog(tmp_path: Path) -> EventCatalog:
    """Catalog where every type lives in its own top-level directory.

    Ownership has to be inferred from domain membership and ``receives`` edges.
    """
    root = tmp_path / "flat"
    domains = root / "domains"
    services = root / "services"
    events = root / "events"
    commands = root / "commands"

    put(
        domains / "domain-a",
        Domain(
            id="domain-a",
            version="2.0.0",
            services=pointers(("service-a", "1.0.0"), ("service-b", "1.0.0")),
        ),
    )
    put(
        domains / "domain-a" / "versioned" / "1.0.0",
        Domain(id="domain-a", version="1.0.0", services=pointers(("service-a", "1.0.0"))),
    )

    put(
        services / "service-a",
        Service(
            id="service-a",
            version="1.0.0",
            receives=pointers(("command-a", "1.0.0"), ("event-a", "1.0.0"), ("event-f", None)),
        ),
    )
    put(
        services / "service-b",
        Service(
            id="service-b",
            version="1.0.0",
            sends=pointers(("event-s", "1.0.0")),
            receives=pointers(("command-b", "1.0.0")),
        ),
    )
    put(
        services / "service-c",
        Service(id="service-c", version="1.0.0", receives=pointers(("command-c", "1.0.0"))),
    )

    for id in ("command-a", "command-b", "command-c", "command-d"):
        put(commands / id, Command(id=id, version="1.0.0"))
    put(events / "event-a", Event(id="event-a", version="1.0.0"))
    put(events / "event-s", Event(id="event-s", version="1.0.0"))
    put(events / "event-f", Event(id="event-f", version="2.0.0"))
    put(events / "event-f" / "versioned" / "1.0.0", Event(id="event-f", version="1.0.0"))

    return EventCatalog(root=root)
