from pathlib import Path

import pytest

from eventcatalog_sdk.config import CatalogConfig


class TestCatalogConfig:
    """Test settings and environment overrides."""

    def test_defaults(self, monkeypatch, tmp_path: Path) -> None:
        """Without a root the current directory is the catalog."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("EVENTCATALOG_ROOT", raising=False)
        config = CatalogConfig()

        assert config.get_root() == tmp_path.resolve()
        assert config.get_lock_path() == tmp_path.resolve() / ".locks"
        assert config.write_filename == "index.mdx"
        assert config.document_filenames == ("index.mdx", "index.md")

    def test_env_prefix(self, monkeypatch, tmp_path: Path) -> None:
        """EVENTCATALOG_ variables configure the SDK."""
        monkeypatch.setenv("EVENTCATALOG_ROOT", str(tmp_path))
        monkeypatch.setenv("EVENTCATALOG_LOCK_RETRIES", "3")
        monkeypatch.setenv("EVENTCATALOG_DEFAULT_VERSION", "1.0.0")

        config = CatalogConfig()

        assert config.root == tmp_path
        assert config.lock_retries == 3
        assert config.default_version == "1.0.0"

    def test_invalid_lock_tuning(self) -> None:
        """Retry settings are validated."""
        with pytest.raises(ValueError):
            CatalogConfig(lock_retries=-1)
        with pytest.raises(ValueError):
            CatalogConfig(lock_retry_interval=0)
