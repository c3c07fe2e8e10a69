from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


def coerce_scalar(value: Any) -> Any:
    """Turn YAML numbers (``version: 1.0``) back into the strings they were meant to be."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ResourcePointer(BaseModel):
    """Reference from one resource to another by id and optional version.

    A pointer without a version follows whatever version is current when
    the catalog is read. Pointers compare and hash by ``(id, version)``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    version: str | None = None

    @field_validator("id", "version", mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Any:
        return coerce_scalar(value)

    @property
    def key(self) -> tuple[str, str | None]:
        return (self.id, self.version)

    def matches(self, id: str, version: str, current_version: str | None) -> bool:
        """Check whether this pointer refers to ``id`` at ``version``.

        A floating pointer (no version) only matches when ``version`` is the
        target's current version.
        """
        if self.id != id:
            return False
        if self.version is None:
            return current_version is not None and version == current_version
        return self.version == version


def unique_pointers(pointers: Iterable[ResourcePointer]) -> list[ResourcePointer]:
    """Drop repeated ``(id, version)`` pairs, keeping the first occurrence in order."""
    seen: set[tuple[str, str | None]] = set()
    unique = []
    for pointer in pointers:
        if pointer.key in seen:
            continue
        seen.add(pointer.key)
        unique.append(pointer)
    return unique
