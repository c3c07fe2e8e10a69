"""Versioned resource store over a plain directory tree.

Layout of a versioned resource::

    <root>/<type dir>/.../<id>/index.mdx                      current
    <root>/<type dir>/.../<id>/<attachment>
    <root>/<type dir>/.../<id>/versioned/<version>/index.mdx  snapshot
    <root>/<type dir>/.../<id>/versioned/<version>/<attachment>

Writes are serialized per target document with a file lock. Promotion
and removal are not locked and not atomic: a crash part way through can
leave a resource split between its current directory and a partially
copied snapshot, or a partially deleted directory.
"""

from __future__ import annotations

import asyncio
import fnmatch
import logging
import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from eventcatalog_sdk.codec import decode, encode, parse_document, render, with_version
from eventcatalog_sdk.config import CatalogConfig
from eventcatalog_sdk.errors import (
    AttachmentMissing,
    LocatorFailure,
    ResourceAlreadyExists,
    ResourceNotFound,
    UnknownResourceType,
    VersionNotGreater,
    describe,
)
from eventcatalog_sdk.models.resources import (
    FLAT_TYPES,
    RESOURCE_DIRECTORIES,
    VersionedResource,
)
from eventcatalog_sdk.storage.locator import (
    VERSIONED_DIR,
    DocumentLocator,
    is_historical,
    relative_parts,
    resource_type_for,
)
from eventcatalog_sdk.storage.locking import DocumentLock, lock_key
from eventcatalog_sdk.storage.resolver import VersionResolver
from eventcatalog_sdk.versions import is_greater

logger = logging.getLogger(__name__)


def _types(resource_type: str | Iterable[str] | None) -> tuple[str, ...] | None:
    if resource_type is None:
        return None
    if isinstance(resource_type, str):
        return (resource_type,)
    return tuple(resource_type)


def atomic_write_text(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` through a temp file and ``os.replace``.

    Readers see either the old document or the new one, never a mix.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise


class ResourceStore:
    """Get, list, write, remove and version catalog resources.

    The catalog root is fixed at construction; every operation works
    relative to it. All public operations are coroutines and push
    filesystem work onto worker threads.
    """

    def __init__(self, config: CatalogConfig | None = None) -> None:
        self._config = config or CatalogConfig()
        self._root = self._config.get_root()
        self._locator = DocumentLocator(self._root, self._config)
        self._resolver = VersionResolver(self._locator, self._config.default_version)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config(self) -> CatalogConfig:
        return self._config

    @property
    def locator(self) -> DocumentLocator:
        return self._locator

    def type_root(self, resource_type: str) -> Path:
        """Canonical directory of a resource type, e.g. ``<root>/events``."""
        return self._root / RESOURCE_DIRECTORIES[resource_type]

    def resource_type_for(self, path: Path) -> str | None:
        return resource_type_for(self._root, path)

    def lock(
        self,
        document: Path,
        *,
        id: str | None = None,
        version: str | None = None,
        resource_type: str | None = None,
    ) -> DocumentLock:
        """Build the write lock for a document path (not yet acquired)."""
        return DocumentLock(
            self._config.get_lock_path() / lock_key(self._root, document),
            retries=self._config.lock_retries,
            retry_interval=self._config.lock_retry_interval,
            id=id,
            version=version,
            resource_type=resource_type,
        )

    # =========================================================================
    # Lookup
    # =========================================================================

    async def _candidates(
        self,
        id: str,
        version: str | None,
        types: tuple[str, ...] | None,
    ) -> list[Path]:
        try:
            paths = await self._locator.locate(id, version)
        except LocatorFailure as e:
            raise LocatorFailure(
                str(e),
                id=id,
                version=version,
                resource_type=types[0] if types and len(types) == 1 else None,
            ) from e
        if types is None:
            return paths
        return [p for p in paths if self.resource_type_for(p) in types]

    async def find(
        self,
        id: str,
        version: str | None = None,
        *,
        resource_type: str | Iterable[str] | None = None,
    ) -> Path | None:
        """Resolve the document answering ``id`` at ``version``.

        Without a version the current document is returned. With a version,
        a ``versioned/<version>`` snapshot wins; failing that, the current
        document is returned if its own version equals the requested one.
        """
        candidates = await self._candidates(id, None, _types(resource_type))
        return await asyncio.to_thread(self._resolver.select, candidates, version)

    async def exists(
        self,
        id: str,
        version: str,
        *,
        resource_type: str | Iterable[str] | None = None,
    ) -> bool:
        """True if ``id`` at exactly ``version`` is in the catalog."""
        return await self.find(id, version, resource_type=resource_type) is not None

    def _load(self, path: Path) -> Any:
        resource_type = self.resource_type_for(path)
        if resource_type is None:
            raise UnknownResourceType(f"Cannot tell the resource type of {path}")
        return decode(self._locator.read(path), resource_type, self._config.default_version)

    async def get(
        self,
        id: str,
        version: str | None = None,
        *,
        resource_type: str | None = None,
    ) -> Any:
        """Return the resource for ``id`` at ``version``, or None if absent."""
        path = await self.find(id, version, resource_type=resource_type)
        if path is None:
            logger.debug("get id=%s version=%s not found", id, version)
            return None
        return await asyncio.to_thread(self._load, path)

    def _list(
        self,
        resource_type: str,
        latest_only: bool,
        exclude: tuple[str, ...],
    ) -> list[Any]:
        resources = []
        for path in self._locator.iter_documents():
            if self.resource_type_for(path) != resource_type:
                continue
            if latest_only and is_historical(self._root, path):
                continue
            relative = "/".join(relative_parts(self._root, path))
            if any(fnmatch.fnmatch(relative, pattern) for pattern in exclude):
                continue
            resources.append(self._load(path))
        return resources

    async def list(
        self,
        resource_type: str,
        *,
        latest_only: bool = False,
        exclude: Iterable[str] = (),
    ) -> list[Any]:
        """Return every resource of a type, wherever it is nested.

        Args:
            resource_type: Type to list (``"event"``, ``"service"``, ...).
            latest_only: Skip documents inside ``versioned/`` snapshots.
            exclude: Glob patterns matched against root-relative paths.
        """
        try:
            resources = await asyncio.to_thread(
                self._list, resource_type, latest_only, tuple(exclude)
            )
        except LocatorFailure as e:
            raise LocatorFailure(str(e), resource_type=resource_type) from e
        logger.debug("list type=%s results=%d", resource_type, len(resources))
        return resources

    # =========================================================================
    # Mutation
    # =========================================================================

    def _target_directory(
        self,
        resource: VersionedResource,
        path: str | None,
        directory: Path | None,
    ) -> Path:
        if directory is not None:
            return directory
        relative = (path or resource.id).strip("/")
        return self.type_root(resource.type) / relative

    def _write_document(self, document: Path, content: str) -> None:
        atomic_write_text(document, content)
        # One document per directory: drop copies written with another extension
        for name in self._config.document_filenames:
            sibling = document.with_name(name)
            if sibling != document:
                sibling.unlink(missing_ok=True)

    async def write(
        self,
        resource: VersionedResource,
        *,
        path: str | None = None,
        directory: Path | None = None,
        override: bool = False,
        version_existing_content: bool = False,
    ) -> Path:
        """Write a resource document.

        Args:
            resource: Resource to write; its type picks the type directory.
            path: Location relative to the type directory (default ``/<id>``).
            directory: Absolute directory to write into, bypassing ``path``.
            override: Overwrite an existing document with the same id and
                version in place. Without ``path`` or ``directory`` the
                existing document is rewritten where it is, even inside a
                ``versioned/`` snapshot.
            version_existing_content: Snapshot the current document into
                ``versioned/`` first. The new version must be greater.

        Returns:
            Path of the written document.

        Raises:
            ResourceAlreadyExists: Same id and version on disk, no override.
            VersionNotGreater: Versioning requested with a version that is
                not greater than the current one.
            LockTimeout: Another writer holds the document lock.
        """
        if resource.type in FLAT_TYPES:
            raise ValueError(f"{resource.type} resources are not versioned")

        target = self._target_directory(resource, path, directory)
        if override and path is None and directory is None:
            existing = await self.find(
                resource.id, resource.version, resource_type=resource.type
            )
            if existing is not None:
                target = existing.parent
        document = target / self._config.write_filename
        label = describe(resource.id, resource.version, resource.type)

        async with self.lock(
            document,
            id=resource.id,
            version=resource.version,
            resource_type=resource.type,
        ):
            exists = await self.exists(
                resource.id, resource.version, resource_type=resource.type
            )
            if exists and not override:
                raise ResourceAlreadyExists(
                    f"Failed to write {label} as the version {resource.version} already exists",
                    id=resource.id,
                    version=resource.version,
                    resource_type=resource.type,
                )

            if version_existing_content and not exists:
                current = await self.get(resource.id, resource_type=resource.type)
                if current is not None:
                    if not is_greater(resource.version, current.version):
                        raise VersionNotGreater(
                            f"New version {resource.version} is not greater than "
                            f"current version {current.version}",
                            id=resource.id,
                            version=resource.version,
                            resource_type=resource.type,
                        )
                    await self.promote(resource.id, resource_type=resource.type)

            await asyncio.to_thread(self._write_document, document, encode(resource))

        logger.debug("write %s path=%s", label, document)
        return document

    def _remove_paths(self, documents: list[Path], persist_files: bool) -> None:
        if persist_files:
            for document in documents:
                document.unlink(missing_ok=True)
            return

        removed: list[Path] = []
        for directory in sorted({d.parent for d in documents}, key=lambda p: len(p.parts)):
            if any(directory.is_relative_to(parent) for parent in removed):
                continue
            shutil.rmtree(directory, ignore_errors=False)
            removed.append(directory)

    async def remove(
        self,
        id: str,
        version: str | None = None,
        *,
        persist_files: bool = False,
        resource_type: str | Iterable[str] | None = None,
    ) -> list[Path]:
        """Remove every document for ``id`` (optionally only at ``version``).

        Without ``persist_files`` the directory holding each document is
        deleted together with its attachments. Not atomic.

        Returns:
            The documents that matched.

        Raises:
            ResourceNotFound: Nothing matched.
        """
        types = _types(resource_type)
        documents = await self._candidates(id, version, types)
        if not documents:
            label = describe(id, version, types[0] if types and len(types) == 1 else None)
            raise ResourceNotFound(
                f"No {label} found",
                id=id,
                version=version,
                resource_type=types[0] if types and len(types) == 1 else None,
            )

        await asyncio.to_thread(self._remove_paths, documents, persist_files)
        logger.info(
            "removed id=%s version=%s documents=%d persist_files=%s",
            id,
            version,
            len(documents),
            persist_files,
        )
        return documents

    def _snapshot(self, source: Path, target: Path) -> None:
        skip = shutil.ignore_patterns(VERSIONED_DIR)
        # Copying a directory into its own descendant is unsafe, so go via staging
        with tempfile.TemporaryDirectory(prefix="eventcatalog-staging-") as staging:
            staged = Path(staging) / source.name
            shutil.copytree(source, staged, ignore=skip)
            target.mkdir(parents=True, exist_ok=True)
            shutil.copytree(staged, target, dirs_exist_ok=True)

        for entry in source.iterdir():
            if entry.name == VERSIONED_DIR:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()

    def _stamp_version(self, document: Path, version: str) -> None:
        """Write ``version`` into a snapshot document that has none."""
        metadata, body = parse_document(self._locator.read(document))
        if metadata.get("version") is not None:
            return
        atomic_write_text(document, render(with_version(metadata, version), body))

    async def promote(
        self,
        id: str,
        *,
        resource_type: str | Iterable[str] | None = None,
    ) -> Path:
        """Move the current resource into ``versioned/<version>/``.

        The whole resource directory (document and attachments, but not
        existing snapshots) is copied, then removed from the current
        location. Not locked and not atomic.

        Returns:
            The snapshot directory.

        Raises:
            ResourceNotFound: There is no current document for ``id``.
        """
        document = await self.find(id, resource_type=resource_type)
        if document is None:
            raise ResourceNotFound(f"No {describe(id)} found to version", id=id)

        version = await asyncio.to_thread(self._resolver.current_version, document)
        version = version or self._config.default_version
        source = document.parent
        target = source / VERSIONED_DIR / version

        await asyncio.to_thread(self._snapshot, source, target)
        await asyncio.to_thread(self._stamp_version, target / document.name, version)
        logger.info("versioned id=%s version=%s target=%s", id, version, target)
        return target

    # =========================================================================
    # Attachments
    # =========================================================================

    async def add_attachment(
        self,
        id: str,
        content: str,
        file_name: str,
        version: str | None = None,
        *,
        resource_type: str | Iterable[str] | None = None,
    ) -> Path:
        """Write a file next to the resource's document."""
        document = await self.find(id, version, resource_type=resource_type)
        if document is None:
            raise ResourceNotFound(
                f"Cannot find directory of {describe(id, version)} to write file to",
                id=id,
                version=version,
            )
        target = document.parent / file_name
        await asyncio.to_thread(atomic_write_text, target, content)
        logger.debug("add_attachment id=%s version=%s file=%s", id, version, file_name)
        return target

    async def read_attachment(
        self,
        id: str,
        file_name: str,
        version: str | None = None,
        *,
        resource_type: str | Iterable[str] | None = None,
    ) -> str:
        """Read a file stored next to the resource's document."""
        document = await self.find(id, version, resource_type=resource_type)
        if document is None:
            raise ResourceNotFound(
                f"Cannot find directory of {describe(id, version)}",
                id=id,
                version=version,
            )
        target = document.parent / file_name
        if not target.is_file():
            raise AttachmentMissing(
                f"File {file_name} does not exist in {describe(id, version)}",
                id=id,
                version=version,
            )
        return await asyncio.to_thread(target.read_text, encoding="utf-8")
