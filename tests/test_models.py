import pytest
from pydantic import ValidationError

from eventcatalog_sdk.models.edges import ResourcePointer, unique_pointers
from eventcatalog_sdk.models.resources import (
    Domain,
    Event,
    Service,
    Team,
    User,
    resource_adapter,
)


class TestResourcePointer:
    """Test edge records."""

    def test_equality_and_hash(self) -> None:
        """Pointers compare and hash by id and version."""
        a = ResourcePointer(id="X", version="1")
        b = ResourcePointer(id="X", version="1")

        assert a == b
        assert hash(a) == hash(b)
        assert a != ResourcePointer(id="X")
        assert len({a, b}) == 1

    def test_numeric_version_coerced(self) -> None:
        """YAML numbers become strings."""
        pointer = ResourcePointer.model_validate({"id": "X", "version": 1.0})
        assert pointer.version == "1.0"

    def test_is_frozen(self) -> None:
        """Pointers are immutable."""
        pointer = ResourcePointer(id="X")
        with pytest.raises(ValidationError):
            pointer.id = "Y"  # type: ignore[misc]

    def test_matches_pinned_version(self) -> None:
        """A pinned pointer matches only its own version."""
        pointer = ResourcePointer(id="X", version="1.0.0")
        assert pointer.matches("X", "1.0.0", current_version="2.0.0")
        assert not pointer.matches("X", "2.0.0", current_version="2.0.0")
        assert not pointer.matches("Y", "1.0.0", current_version="1.0.0")

    def test_matches_floating_version(self) -> None:
        """A floating pointer matches only the current version."""
        pointer = ResourcePointer(id="X")
        assert pointer.matches("X", "2.0.0", current_version="2.0.0")
        assert not pointer.matches("X", "1.0.0", current_version="2.0.0")
        assert not pointer.matches("X", "1.0.0", current_version=None)

    def test_unique_pointers_keeps_first_in_order(self) -> None:
        """Duplicates are dropped, first occurrence wins."""
        result = unique_pointers(
            [
                ResourcePointer(id="B", version="1"),
                ResourcePointer(id="A", version="1"),
                ResourcePointer(id="B", version="1"),
                ResourcePointer(id="B", version="2"),
            ]
        )
        assert [p.key for p in result] == [("B", "1"), ("A", "1"), ("B", "2")]


class TestResourceModels:
    """Test resource variants."""

    def test_service_dedupes_edges(self) -> None:
        """Repeated sends entries collapse, order preserved."""
        service = Service(
            id="S",
            version="1.0.0",
            sends=[
                {"id": "X", "version": "1"},
                {"id": "Y", "version": "1"},
                {"id": "X", "version": "1"},
            ],
        )

        assert service.sends == [
            ResourcePointer(id="X", version="1"),
            ResourcePointer(id="Y", version="1"),
        ]
        assert service.receives is None

    def test_domain_dedupes_services(self) -> None:
        """Repeated memberships collapse."""
        domain = Domain(
            id="D",
            version="1.0.0",
            services=[{"id": "S", "version": "1"}, {"id": "S", "version": "1"}],
        )
        assert len(domain.services or []) == 1

    def test_version_coerced_to_string(self) -> None:
        """``version: 1.0`` in YAML loads as a float but is a string version."""
        event = Event.model_validate({"id": 42, "version": 1.0})
        assert event.id == "42"
        assert event.version == "1.0"

    def test_unknown_metadata_is_kept(self) -> None:
        """Undeclared keys survive as extras."""
        event = Event(id="E", version="1", sidebar={"badge": "POST"})
        assert event.model_dump()["sidebar"] == {"badge": "POST"}

    def test_aliases(self) -> None:
        """camelCase keys map to snake_case fields and back."""
        event = Event.model_validate({"id": "E", "version": "1", "schemaPath": "schema.json"})
        assert event.schema_path == "schema.json"
        assert event.model_dump(by_alias=True)["schemaPath"] == "schema.json"

        user = User.model_validate({"id": "u", "avatarUrl": "https://example.com/a.png"})
        assert user.avatar_url == "https://example.com/a.png"

    def test_version_required_for_versioned_types(self) -> None:
        """Versioned resources need a version, teams do not."""
        with pytest.raises(ValidationError):
            Event(id="E")  # type: ignore[call-arg]
        assert Team(id="core").id == "core"

    def test_discriminated_union(self) -> None:
        """The type tag picks the model."""
        resource = resource_adapter.validate_python(
            {"type": "service", "id": "S", "version": "1", "receives": [{"id": "E"}]}
        )
        assert isinstance(resource, Service)
        assert resource.receives == [ResourcePointer(id="E")]
