from pathlib import Path

import pytest

from eventcatalog_sdk.config import CatalogConfig
from eventcatalog_sdk.errors import LocatorFailure
from eventcatalog_sdk.storage.locator import (
    DocumentLocator,
    in_snapshot,
    is_historical,
    resource_type_for,
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def root(tmp_path: Path) -> Path:
    return tmp_path / "catalog"


@pytest.fixture
def locator(root: Path) -> DocumentLocator:
    return DocumentLocator(root, CatalogConfig(root=root))


# =============================================================================
# Path helpers
# =============================================================================


class TestPathHelpers:
    """Test type and snapshot detection from paths."""

    def test_nearest_type_directory_wins(self, root: Path) -> None:
        """A service nested under a domain is a service."""
        assert resource_type_for(root, root / "domains/Orders/index.mdx") == "domain"
        assert (
            resource_type_for(root, root / "domains/Orders/services/Payments/index.mdx")
            == "service"
        )
        assert (
            resource_type_for(root, root / "services/Payments/events/Paid/index.mdx")
            == "event"
        )

    def test_version_names_are_not_types(self, root: Path) -> None:
        """``versioned/events`` does not make a document an event."""
        path = root / "services/Payments/versioned/events/index.mdx"
        assert resource_type_for(root, path) == "service"

    def test_unknown_location(self, root: Path) -> None:
        """Documents outside any type directory have no type."""
        assert resource_type_for(root, root / "pages/index.mdx") is None

    def test_historical(self, root: Path) -> None:
        """Only documents inside ``versioned/`` are historical."""
        assert is_historical(root, root / "events/E/versioned/0.0.1/index.mdx")
        assert not is_historical(root, root / "events/E/index.mdx")

    def test_in_snapshot(self, root: Path) -> None:
        """The version must directly follow ``versioned``."""
        path = root / "events/E/versioned/0.0.1/index.mdx"
        assert in_snapshot(root, path, "0.0.1")
        assert not in_snapshot(root, path, "0.0.2")
        assert not in_snapshot(root, root / "events/0.0.1/index.mdx", "0.0.1")


# =============================================================================
# Enumeration
# =============================================================================


class TestIterDocuments:
    """Test walking the catalog tree."""

    def test_missing_root_yields_nothing(self, locator: DocumentLocator) -> None:
        """An absent catalog is an empty catalog."""
        assert list(locator.iter_documents()) == []

    def test_accepts_md_and_mdx(self, root: Path, locator: DocumentLocator) -> None:
        """Both document extensions are found; other files are not."""
        a = _write(root / "events/A/index.mdx", "---\nid: A\n---\n")
        b = _write(root / "events/B/index.md", "---\nid: B\n---\n")
        _write(root / "events/B/schema.json", "{}")

        assert list(locator.iter_documents()) == [a, b]

    def test_prunes_ignored_directories(self, root: Path, locator: DocumentLocator) -> None:
        """node_modules and the lock directory are never descended into."""
        kept = _write(root / "events/A/index.mdx", "---\nid: A\n---\n")
        _write(root / "node_modules/pkg/events/A/index.mdx", "---\nid: A\n---\n")
        _write(root / ".locks/index.mdx", "---\nid: A\n---\n")

        assert list(locator.iter_documents()) == [kept]

    def test_walk_error_is_wrapped(self, root: Path, locator: DocumentLocator, mocker) -> None:
        """OS errors during the walk surface as LocatorFailure."""
        root.mkdir(parents=True)

        def fake_walk(top, onerror=None):
            onerror(PermissionError(13, "Permission denied", str(top)))
            yield from ()

        mocker.patch("eventcatalog_sdk.storage.locator.os.walk", side_effect=fake_walk)

        with pytest.raises(LocatorFailure) as exc_info:
            list(locator.iter_documents())
        assert isinstance(exc_info.value.__cause__, PermissionError)

        with pytest.raises(LocatorFailure) as exc_info:
            locator.find("OrderPlaced", "1.0.0")
        assert exc_info.value.id == "OrderPlaced"
        assert exc_info.value.version == "1.0.0"

    def test_read_error_is_wrapped(self, root: Path, locator: DocumentLocator) -> None:
        """Undecodable documents surface as LocatorFailure."""
        path = root / "events/A/index.mdx"
        path.parent.mkdir(parents=True)
        path.write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(LocatorFailure):
            locator.read(path)


# =============================================================================
# Identity matching
# =============================================================================


class TestFind:
    """Test content-based lookup by id and version."""

    def test_quoted_and_unquoted_ids(self, root: Path, locator: DocumentLocator) -> None:
        """Quotes around the id are optional."""
        a = _write(root / "events/A/index.mdx", "---\nid: OrderPlaced\n---\n")
        b = _write(root / "events/B/index.mdx", "---\nid: 'OrderPlaced'\n---\n")
        c = _write(root / "events/C/index.mdx", '---\nid: "OrderPlaced"\n---\n')

        assert locator.find("OrderPlaced") == [a, b, c]

    def test_exact_match_only(self, root: Path, locator: DocumentLocator) -> None:
        """Prefixes and suffixes of the id do not match."""
        _write(root / "events/A/index.mdx", "---\nid: OrderPlacedV2\n---\n")
        _write(root / "events/B/index.mdx", "---\nid: MyOrderPlaced\n---\n")

        assert locator.find("OrderPlaced") == []

    def test_regex_characters_are_literal(self, root: Path, locator: DocumentLocator) -> None:
        """Ids are matched as text, not as patterns."""
        _write(root / "events/A/index.mdx", "---\nid: OrderXPlaced\n---\n")
        dotted = _write(root / "events/B/index.mdx", "---\nid: Order.Placed\n---\n")

        assert locator.find("Order.Placed") == [dotted]

    def test_nested_and_body_ids_ignored(self, root: Path, locator: DocumentLocator) -> None:
        """Edge entries and body text never count as identity."""
        _write(
            root / "services/S/index.mdx",
            "---\nid: S\nsends:\n- id: OrderPlaced\n---\nid: OrderPlaced\n",
        )

        assert locator.find("OrderPlaced") == []

    def test_version_filter(self, root: Path, locator: DocumentLocator) -> None:
        """With a version, the document must also declare that version."""
        current = _write(root / "events/E/index.mdx", "---\nid: E\nversion: 1.0.0\n---\n")
        old = _write(
            root / "events/E/versioned/0.0.1/index.mdx",
            "---\nid: E\nversion: '0.0.1'\n---\n",
        )

        assert locator.find("E") == [current, old]
        assert locator.find("E", "0.0.1") == [old]
        assert locator.find("E", "1.0.0") == [current]
        assert locator.find("E", "2.0.0") == []

    async def test_locate(self, root: Path, locator: DocumentLocator) -> None:
        """The async variant returns the same matches."""
        path = _write(root / "events/E/index.mdx", "---\nid: E\n---\n")
        assert await locator.locate("E") == [path]
