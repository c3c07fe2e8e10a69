"""Per-type views over the resource store.

Each collection binds a resource type (and its model) and forwards to
:class:`~eventcatalog_sdk.storage.store.ResourceStore`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel

from eventcatalog_sdk.codec import decode, encode
from eventcatalog_sdk.errors import (
    InvalidDirection,
    ResourceAlreadyExists,
    ResourceNotFound,
    describe,
)
from eventcatalog_sdk.models.edges import ResourcePointer
from eventcatalog_sdk.models.resources import CatalogModel, Domain, Service
from eventcatalog_sdk.relationships import RelationshipResolver
from eventcatalog_sdk.storage.store import ResourceStore, atomic_write_text

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=CatalogModel)

Direction = Literal["sends", "receives"]
DIRECTIONS: tuple[str, ...] = ("sends", "receives")


def _pointer(value: ResourcePointer | dict[str, Any]) -> ResourcePointer:
    if isinstance(value, ResourcePointer):
        return value
    return ResourcePointer.model_validate(value)


class VersionedCollection(Generic[T]):
    """Events, commands, queries, services or domains."""

    def __init__(
        self,
        store: ResourceStore,
        relationships: RelationshipResolver,
        resource_type: str,
        model: type[T],
    ) -> None:
        self._store = store
        self._relationships = relationships
        self._resource_type = resource_type
        self._model = model

    @property
    def resource_type(self) -> str:
        return self._resource_type

    @property
    def directory(self) -> Path:
        return self._store.type_root(self._resource_type)

    def _coerce(self, resource: T | dict[str, Any]) -> T:
        if isinstance(resource, BaseModel):
            if not isinstance(resource, self._model):
                raise TypeError(
                    f"Expected {self._model.__name__}, got {type(resource).__name__}"
                )
            return resource
        return self._model.model_validate(resource)

    async def get(self, id: str, version: str | None = None) -> T | None:
        return await self._store.get(id, version, resource_type=self._resource_type)

    async def list(
        self,
        *,
        latest_only: bool = False,
        exclude: Iterable[str] = (),
    ) -> list[T]:
        return await self._store.list(
            self._resource_type, latest_only=latest_only, exclude=exclude
        )

    async def write(
        self,
        resource: T | dict[str, Any],
        *,
        path: str | None = None,
        override: bool = False,
        version_existing_content: bool = False,
    ) -> Path:
        """Write a resource under this collection's type directory.

        ``path`` is relative to the type directory, e.g. ``/Inventory/Adjusted``.
        """
        return await self._store.write(
            self._coerce(resource),
            path=path,
            override=override,
            version_existing_content=version_existing_content,
        )

    async def write_to_service(
        self,
        resource: T | dict[str, Any],
        service: ResourcePointer | dict[str, Any],
        *,
        override: bool = False,
    ) -> Path:
        """Write a resource nested inside a service's directory.

        The document lands at ``<service dir>/<type dir>/<id>/``.
        """
        resource = self._coerce(resource)
        pointer = _pointer(service)
        document = await self._store.find(
            pointer.id, pointer.version, resource_type="service"
        )
        if document is None:
            raise ResourceNotFound(
                f"No {describe(pointer.id, pointer.version, 'service')} found",
                id=pointer.id,
                version=pointer.version,
                resource_type="service",
            )
        directory = document.parent / self.directory.name / resource.id
        return await self._store.write(resource, directory=directory, override=override)

    async def rm(self, path: str) -> None:
        """Delete a resource directory by its path relative to the type directory."""
        target = self.directory / path.strip("/")
        await asyncio.to_thread(shutil.rmtree, target)

    async def remove(
        self,
        id: str,
        version: str | None = None,
        *,
        persist_files: bool = False,
    ) -> list[Path]:
        return await self._store.remove(
            id, version, persist_files=persist_files, resource_type=self._resource_type
        )

    async def version(self, id: str) -> Path:
        """Move the current resource into its ``versioned/<version>`` directory."""
        return await self._store.promote(id, resource_type=self._resource_type)

    async def has_version(self, id: str, version: str) -> bool:
        return await self._store.exists(id, version, resource_type=self._resource_type)

    async def add_file(
        self,
        id: str,
        content: str,
        file_name: str,
        version: str | None = None,
    ) -> Path:
        return await self._store.add_attachment(
            id, content, file_name, version, resource_type=self._resource_type
        )

    async def read_file(self, id: str, file_name: str, version: str | None = None) -> str:
        return await self._store.read_attachment(
            id, file_name, version, resource_type=self._resource_type
        )

    async def add_schema(
        self,
        id: str,
        schema: str | dict[str, Any],
        file_name: str,
        version: str | None = None,
    ) -> Path:
        """Store a schema file next to the resource. Dicts are written as JSON."""
        content = schema if isinstance(schema, str) else json.dumps(schema, indent=2)
        return await self.add_file(id, content, file_name, version)


class MessageCollection(VersionedCollection[T]):
    """Events, commands and queries."""

    async def owning_domains(self, id: str, version: str) -> list[Domain] | None:
        return await self._relationships.owning_domains(id, version)


class ServiceCollection(VersionedCollection[Service]):
    async def owning_domains(self, id: str, version: str) -> list[Domain] | None:
        return await self._relationships.domains_for_service(id, version)

    async def add_message(
        self,
        id: str,
        direction: str,
        message: ResourcePointer | dict[str, Any],
        version: str | None = None,
    ) -> Service:
        """Add a message to a service's ``sends`` or ``receives`` list.

        The service document is rewritten where it is, including when it is
        a historical snapshot selected with ``version``.

        Raises:
            InvalidDirection: ``direction`` is not ``sends`` or ``receives``.
            ResourceNotFound: The service does not exist.
        """
        if direction not in DIRECTIONS:
            raise InvalidDirection(
                f"Direction {direction!r} is invalid, only 'receives' and 'sends' are supported",
                id=id,
                version=version,
                resource_type="service",
            )

        document = await self._store.find(id, version, resource_type="service")
        service = await self.get(id, version)
        if document is None or service is None:
            raise ResourceNotFound(
                f"No {describe(id, version, 'service')} found",
                id=id,
                version=version,
                resource_type="service",
            )

        data = service.model_dump(by_alias=True)
        data[direction] = [*(getattr(service, direction) or []), _pointer(message)]
        updated = Service.model_validate(data)
        await self._store.write(updated, directory=document.parent, override=True)
        return updated


class DomainCollection(VersionedCollection[Domain]):
    async def add_service(
        self,
        id: str,
        service: ResourcePointer | dict[str, Any],
        version: str | None = None,
    ) -> Domain:
        """Add a service to a domain's ``services`` list if not already there."""
        document = await self._store.find(id, version, resource_type="domain")
        domain = await self.get(id, version)
        if document is None or domain is None:
            raise ResourceNotFound(
                f"No {describe(id, version, 'domain')} found",
                id=id,
                version=version,
                resource_type="domain",
            )

        pointer = _pointer(service)
        members = list(domain.services or [])
        if pointer in members:
            return domain

        updated = Domain.model_validate(
            {**domain.model_dump(by_alias=True), "services": [*members, pointer]}
        )
        await self._store.write(updated, directory=document.parent, override=True)
        return updated


class FlatCollection(Generic[T]):
    """Teams and users: one unversioned file per resource, ``<type dir>/<id>.mdx``."""

    def __init__(self, store: ResourceStore, resource_type: str, model: type[T]) -> None:
        self._store = store
        self._resource_type = resource_type
        self._model = model

    @property
    def directory(self) -> Path:
        return self._store.type_root(self._resource_type)

    def _files(self, id: str) -> list[Path]:
        config = self._store.config
        return [self.directory / f"{id}{ext}" for ext in config.read_extensions]

    def _read(self, path: Path) -> T:
        return decode(self._store.locator.read(path), self._resource_type)

    def _get(self, id: str) -> T | None:
        for path in self._files(id):
            if path.is_file():
                return self._read(path)
        return None

    async def get(self, id: str) -> T | None:
        return await asyncio.to_thread(self._get, id)

    def _list(self) -> list[T]:
        if not self.directory.is_dir():
            return []
        extensions = set(self._store.config.read_extensions)
        return [
            self._read(path)
            for path in sorted(self.directory.iterdir())
            if path.is_file() and path.suffix in extensions
        ]

    async def list(self) -> list[T]:
        return await asyncio.to_thread(self._list)

    async def write(self, resource: T | dict[str, Any], *, override: bool = False) -> Path:
        """Write the resource file; refuses to replace an existing one unless ``override``."""
        if not isinstance(resource, BaseModel):
            resource = self._model.model_validate(resource)
        target = self.directory / f"{resource.id}{self._store.config.write_extension}"

        async with self._store.lock(
            target, id=resource.id, resource_type=self._resource_type
        ):
            if not override and await self.get(resource.id) is not None:
                raise ResourceAlreadyExists(
                    f"Failed to write {describe(resource.id, resource_type=self._resource_type)} "
                    "as it already exists",
                    id=resource.id,
                    resource_type=self._resource_type,
                )
            await asyncio.to_thread(atomic_write_text, target, encode(resource))
            for path in self._files(resource.id):
                if path != target:
                    path.unlink(missing_ok=True)

        logger.debug("write %s id=%s path=%s", self._resource_type, resource.id, target)
        return target

    async def remove(self, id: str) -> None:
        files = [p for p in self._files(id) if p.is_file()]
        if not files:
            raise ResourceNotFound(
                f"No {describe(id, resource_type=self._resource_type)} found",
                id=id,
                resource_type=self._resource_type,
            )
        for path in files:
            path.unlink()
