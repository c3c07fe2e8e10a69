"""Errors raised by the catalog store and its collaborators."""


class CatalogError(Exception):
    """Base class for every error raised by the SDK.

    Attributes:
        id: Resource id involved, if any.
        version: Resource version involved, if any.
        resource_type: Resource type involved, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        id: str | None = None,
        version: str | None = None,
        resource_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.id = id
        self.version = version
        self.resource_type = resource_type


class ResourceNotFound(CatalogError):
    """No document matches the requested id (and version)."""


class ResourceAlreadyExists(CatalogError):
    """A write targets an id and version that is already in the catalog."""


class VersionNotGreater(CatalogError):
    """A versioning write used a version not greater than the current one."""


class InvalidDirection(CatalogError, ValueError):
    """An edge mutation used a direction other than sends or receives."""


class AttachmentMissing(CatalogError):
    """A file expected next to a resource document is not on disk."""


class LocatorFailure(CatalogError):
    """The catalog tree could not be enumerated or read."""


class LockTimeout(CatalogError):
    """A write lock could not be acquired within the retry budget."""


class UnknownResourceType(CatalogError):
    """A document's resource type cannot be derived from its location."""


def describe(id: str | None, version: str | None = None, resource_type: str | None = None) -> str:
    """Render an id/version/type triple for error messages."""
    label = resource_type or "resource"
    if version:
        return f"{label} {id!r} (v{version})"
    return f"{label} {id!r}"
