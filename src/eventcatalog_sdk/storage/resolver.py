import logging
from pathlib import Path

from eventcatalog_sdk.codec import parse_document
from eventcatalog_sdk.storage.locator import DocumentLocator, in_snapshot, is_historical

logger = logging.getLogger(__name__)


class VersionResolver:
    """Picks the one document that answers a read for ``id`` at ``version``.

    Versions are compared as exact strings. Ranges such as ``1.x`` and the
    literal ``latest`` are not interpreted; omit the version to get the
    current document.
    """

    def __init__(self, locator: DocumentLocator, default_version: str | None = None) -> None:
        self._locator = locator
        self._default_version = default_version

    def partition(self, candidates: list[Path]) -> tuple[list[Path], list[Path]]:
        """Split candidates into (current, historical) documents."""
        root = self._locator.root
        current = [p for p in candidates if not is_historical(root, p)]
        historical = [p for p in candidates if is_historical(root, p)]
        return current, historical

    def current_version(self, path: Path) -> str | None:
        """Read the ``version`` field of a document's metadata block.

        Falls back to the default version when the field is missing.
        """
        metadata, _ = parse_document(self._locator.read(path))
        version = metadata.get("version")
        return self._default_version if version is None else str(version)

    def select(self, candidates: list[Path], version: str | None = None) -> Path | None:
        """Resolve the candidates for one id to a single document, or None."""
        current, historical = self.partition(candidates)
        if len(current) > 1:
            logger.warning(
                "Found %d current documents for the same id, using %s",
                len(current),
                current[0],
            )
        latest = current[0] if current else None

        if version is None:
            return latest

        for path in historical:
            if in_snapshot(self._locator.root, path, version):
                return path

        if latest is not None and self.current_version(latest) == version:
            return latest

        return None
