"""Document codec.

A catalog document is a YAML metadata block between ``---`` fences
followed by free-form body text::

    ---
    id: OrderPlaced
    version: 1.0.0
    ---
    # Order placed

The ``body`` field of a resource never appears in the metadata block; it
is the text after the closing fence. The ``type`` field is not stored
either, it is implied by where the document lives.
"""

from typing import Any

import yaml

from eventcatalog_sdk.models.resources import VERSIONED_TYPES, CatalogModel, resource_adapter

FENCE = "---"
RESERVED_KEYS = {"body", "type"}


def _split(text: str) -> tuple[str | None, str]:
    """Split raw text into (metadata block text, body text)."""
    text = text.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != FENCE:
        return None, text
    for index in range(1, len(lines)):
        if lines[index].rstrip() == FENCE:
            return "".join(lines[1:index]), "".join(lines[index + 1 :])
    return None, text


def metadata_block(text: str) -> str:
    """Return the raw metadata block of a document, or an empty string."""
    block, _ = _split(text)
    return block or ""


def parse_document(text: str) -> tuple[dict[str, Any], str]:
    """Parse a document into its metadata mapping and stripped body."""
    block, body = _split(text)
    if block is None:
        return {}, body.strip()
    data = yaml.safe_load(block)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Metadata block must be a mapping, got {type(data).__name__}")
    return data, body.strip()


def with_version(metadata: dict[str, Any], version: str) -> dict[str, Any]:
    """Copy of ``metadata`` with ``version`` set right after ``id`` if missing."""
    if metadata.get("version") is not None:
        return dict(metadata)
    stamped: dict[str, Any] = {}
    for key, value in metadata.items():
        if key == "version":
            continue
        stamped[key] = value
        if key == "id":
            stamped["version"] = version
    stamped.setdefault("version", version)
    return stamped


def decode(text: str, resource_type: str, default_version: str | None = None) -> Any:
    """Build the typed resource for a document of the given type.

    Versioned documents without a ``version`` field get ``default_version``
    when one is given.
    """
    metadata, body = parse_document(text)
    if default_version is not None and resource_type in VERSIONED_TYPES:
        metadata = with_version(metadata, default_version)
    data = {k: v for k, v in metadata.items() if k not in RESERVED_KEYS}
    data["body"] = body
    data["type"] = resource_type
    return resource_adapter.validate_python(data)


def render(metadata: dict[str, Any], body: str) -> str:
    """Render a metadata mapping and body as document text."""
    block = yaml.safe_dump(
        metadata,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"{FENCE}\n{block}{FENCE}\n{body.strip()}\n"


def encode(resource: CatalogModel) -> str:
    """Render a resource as document text."""
    metadata = resource.model_dump(
        by_alias=True,
        exclude_none=True,
        exclude=RESERVED_KEYS,
    )
    return render(metadata, resource.body)
