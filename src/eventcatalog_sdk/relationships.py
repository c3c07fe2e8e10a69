"""Domain ownership inference for messages and services.

Ownership is read from the directory layout first: anything stored under
``domains/<Domain>/...`` belongs to that domain. Otherwise ownership is
inferred from the service graph:

- a message belongs to the domains of the services that *receive* it
  (its contract owners). Services that only send it are ignored.
- a service belongs to the domains whose ``services`` list references it.
"""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from eventcatalog_sdk.codec import decode
from eventcatalog_sdk.models.resources import MESSAGE_TYPES, RESOURCE_DIRECTORIES, Domain
from eventcatalog_sdk.storage.locator import VERSIONED_DIR, relative_parts
from eventcatalog_sdk.storage.store import ResourceStore
from eventcatalog_sdk.versions import highest

logger = logging.getLogger(__name__)

DOMAINS_DIR = RESOURCE_DIRECTORIES["domain"]


def latest_by_id(domains: Iterable[Domain]) -> list[Domain]:
    """Keep one domain per id, the one with the highest version."""
    grouped: dict[str, list[Domain]] = {}
    for domain in domains:
        grouped.setdefault(domain.id, []).append(domain)

    unique = []
    for candidates in grouped.values():
        best = highest(d.version for d in candidates)
        unique.append(next(d for d in candidates if d.version == best))
    return unique


class RelationshipResolver:
    """Resolves which domains own a message or service."""

    def __init__(self, store: ResourceStore) -> None:
        self._store = store

    def _domain_directories(self, document: Path) -> list[Path]:
        """Domain directories that ``document`` is nested in."""
        root = self._store.root
        parts = relative_parts(root, document)[:-1]
        directories = []
        for index in range(len(parts) - 1):
            if parts[index] != DOMAINS_DIR:
                continue
            end = index + 2
            if parts[end : end + 1] == (VERSIONED_DIR,) and len(parts) > end + 1:
                end += 2
            directory = root.joinpath(*parts[:end])
            if directory != document.parent:
                directories.append(directory)
        return directories

    def _domains_from_path(self, document: Path) -> list[Domain]:
        domains = []
        for directory in self._domain_directories(document):
            for name in self._store.config.document_filenames:
                candidate = directory / name
                if candidate.is_file():
                    text = self._store.locator.read(candidate)
                    domains.append(decode(text, "domain", self._store.config.default_version))
                    break
        return domains

    async def _current_version(self, id: str, resource_type: str) -> str | None:
        current = await self._store.get(id, resource_type=resource_type)
        return current.version if current is not None else None

    async def domains_for_service(self, id: str, version: str) -> list[Domain] | None:
        """Return the domains owning service ``id`` at ``version``, or None."""
        document = await self._store.find(id, version, resource_type="service")
        if document is None:
            return None

        nested = await asyncio.to_thread(self._domains_from_path, document)
        if nested:
            return latest_by_id(nested)

        current_version = await self._current_version(id, "service")
        domains = await self._store.list("domain")
        members = [
            d
            for d in domains
            if any(p.matches(id, version, current_version) for p in d.services or [])
        ]
        logger.debug("domains_for_service id=%s version=%s members=%d", id, version, len(members))
        return latest_by_id(members) or None

    async def owning_domains(self, id: str, version: str) -> list[Domain] | None:
        """Return the domains owning message ``id`` at ``version``, or None.

        Nesting under a domain wins. Otherwise the domains of every service
        whose ``receives`` list references the message are merged, keeping
        the latest version of each domain.
        """
        document = await self._store.find(id, version, resource_type=MESSAGE_TYPES)
        if document is None:
            return None

        nested = await asyncio.to_thread(self._domains_from_path, document)
        if nested:
            return latest_by_id(nested)

        message_type = self._store.resource_type_for(document) or "event"
        current_version = await self._current_version(id, message_type)
        services = await self._store.list("service")
        receivers = [
            s
            for s in services
            if any(p.matches(id, version, current_version) for p in s.receives or [])
        ]
        if not receivers:
            logger.debug("owning_domains id=%s version=%s no receivers", id, version)
            return None

        domains: list[Domain] = []
        for receiver in receivers:
            domains.extend(await self.domains_for_service(receiver.id, receiver.version) or [])
        return latest_by_id(domains) or None
