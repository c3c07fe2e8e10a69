"""Index-free document lookup.

Every call walks the catalog tree again; nothing is cached between calls.
"""

import asyncio
import logging
import os
import re
from collections.abc import Iterator
from pathlib import Path

from eventcatalog_sdk.codec import metadata_block
from eventcatalog_sdk.config import CatalogConfig
from eventcatalog_sdk.errors import LocatorFailure
from eventcatalog_sdk.models.resources import DIRECTORY_TYPES

logger = logging.getLogger(__name__)

VERSIONED_DIR = "versioned"


def _line_pattern(key: str, value: str) -> re.Pattern[str]:
    return re.compile(rf"^{key}:\s*['\"]?{re.escape(value)}['\"]?\s*$", re.MULTILINE)


def relative_parts(root: Path, path: Path) -> tuple[str, ...]:
    """Path segments of ``path`` below ``root``."""
    try:
        return path.relative_to(root).parts
    except ValueError:
        return path.parts


def is_historical(root: Path, path: Path) -> bool:
    """True if the document sits inside a ``versioned/`` snapshot."""
    return VERSIONED_DIR in relative_parts(root, path)[:-1]


def in_snapshot(root: Path, path: Path, version: str) -> bool:
    """True if ``versioned/<version>`` appears as consecutive directory segments."""
    parts = relative_parts(root, path)[:-1]
    return any(
        parts[i] == VERSIONED_DIR and parts[i + 1] == version
        for i in range(len(parts) - 1)
    )


def resource_type_for(root: Path, path: Path) -> str | None:
    """Derive a document's resource type from its nearest type directory.

    ``domains/Orders/services/Payments/index.mdx`` is a service, while
    ``domains/Orders/index.mdx`` is a domain. Version directory names under
    ``versioned/`` are never taken for type directories.
    """
    parts = relative_parts(root, path)[:-1]
    for index in range(len(parts) - 1, -1, -1):
        if index > 0 and parts[index - 1] == VERSIONED_DIR:
            continue
        resource_type = DIRECTORY_TYPES.get(parts[index])
        if resource_type:
            return resource_type
    return None


class DocumentLocator:
    """Finds catalog documents by the id written in their metadata block.

    Matching is line-anchored exact text: ``id: OrderPlaced``, with optional
    single or double quotes around the value. Nested keys (``- id: ...``)
    never match.
    """

    def __init__(self, root: Path, config: CatalogConfig) -> None:
        self._root = root
        self._filenames = set(config.document_filenames)
        self._ignore_dirs = set(config.ignore_dirs)

    @property
    def root(self) -> Path:
        return self._root

    def iter_documents(self, base: Path | None = None) -> Iterator[Path]:
        """Yield every document below ``base`` (default: the catalog root).

        Raises:
            LocatorFailure: If part of the tree cannot be listed.
        """
        start = base or self._root
        if not start.is_dir():
            return

        def _fail(error: OSError) -> None:
            raise LocatorFailure(f"Error finding files under {start}: {error}") from error

        for dirpath, dirnames, filenames in os.walk(start, onerror=_fail):
            # Prune in-place so os.walk skips these subtrees entirely
            dirnames[:] = sorted(d for d in dirnames if d not in self._ignore_dirs)
            for fname in sorted(filenames):
                if fname in self._filenames:
                    yield Path(dirpath) / fname

    def read(self, path: Path) -> str:
        """Read a document's text, wrapping I/O errors."""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LocatorFailure(f"Error reading {path}: {e}") from e

    def find(self, id: str, version: str | None = None) -> list[Path]:
        """Return every document whose metadata declares ``id`` (and ``version``)."""
        id_pattern = _line_pattern("id", id)
        version_pattern = _line_pattern("version", version) if version else None

        matches = []
        try:
            for path in self.iter_documents():
                block = metadata_block(self.read(path))
                if not id_pattern.search(block):
                    continue
                if version_pattern and not version_pattern.search(block):
                    continue
                matches.append(path)
        except LocatorFailure as e:
            raise LocatorFailure(str(e), id=id, version=version) from e

        logger.debug("find id=%s version=%s matches=%d", id, version, len(matches))
        return matches

    async def locate(self, id: str, version: str | None = None) -> list[Path]:
        """Async wrapper around :meth:`find`; the scan runs in a worker thread."""
        return await asyncio.to_thread(self.find, id, version)
