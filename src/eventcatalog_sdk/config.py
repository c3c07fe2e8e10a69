from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogConfig(BaseSettings):
    """Configuration for an EventCatalog SDK instance.

    Settings can be provided via environment variables with EVENTCATALOG_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="EVENTCATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Catalog root directory
    # Default: current working directory
    root: Path | None = None

    # Document filename convention: <document_name><extension>
    document_name: str = "index"
    write_extension: str = ".mdx"
    read_extensions: tuple[str, ...] = (".mdx", ".md")

    # Directory names never descended into while scanning the catalog
    ignore_dirs: tuple[str, ...] = (
        "node_modules",
        ".git",
        ".eventcatalog-core",
        "dist",
        ".locks",
    )

    # Write lock tuning
    lock_dir: str = ".locks"
    lock_retries: int = Field(default=20, ge=0)
    lock_retry_interval: float = Field(default=0.05, gt=0)

    # Version assumed for documents without a version field
    default_version: str = "0.0.1"

    def get_root(self) -> Path:
        """Get the catalog root directory."""
        return (self.root or Path.cwd()).resolve()

    def get_lock_path(self) -> Path:
        """Get the directory holding write lock files."""
        return self.get_root() / self.lock_dir

    @property
    def write_filename(self) -> str:
        """Filename used for every document written by the SDK."""
        return f"{self.document_name}{self.write_extension}"

    @property
    def document_filenames(self) -> tuple[str, ...]:
        """Filenames accepted as documents when reading."""
        return tuple(f"{self.document_name}{ext}" for ext in self.read_extensions)
