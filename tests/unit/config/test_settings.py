"""Tests for settings loading from env, TOML files and overrides."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from reskit.config.settings import ConfigurationError, Settings, get_settings


pytestmark = pytest.mark.unit


class TestDefaults:
    def test_default_values(self) -> None:
        settings = Settings()

        assert settings.cookies.secret is None
        assert settings.files.chunk_size == 64 * 1024
        assert settings.redirect.default_status == 302
        assert settings.logging.level == "INFO"
        assert settings.logging.json_logs is False


class TestEnvironment:
    def test_nested_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COOKIES__SECRET", "keyboard cat")
        monkeypatch.setenv("FILES__CHUNK_SIZE", "1024")

        settings = Settings()

        assert settings.cookies.secret is not None
        assert settings.cookies.secret.get_secret_value() == "keyboard cat"
        assert settings.files.chunk_size == 1024

    def test_secret_is_masked(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COOKIES__SECRET", "keyboard cat")
        assert "keyboard cat" not in repr(Settings())

    def test_invalid_redirect_status(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REDIRECT__DEFAULT_STATUS", "200")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_chunk_size(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FILES__CHUNK_SIZE", "0")
        with pytest.raises(ValidationError):
            Settings()


class TestTomlConfig:
    def test_loads_values(self, tmp_path: Path) -> None:
        config = tmp_path / "reskit.toml"
        config.write_text("[redirect]\ndefault_status = 301\n")

        settings = Settings.from_config(config)

        assert settings.redirect.default_status == 301

    def test_env_takes_precedence(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config = tmp_path / "reskit.toml"
        config.write_text("[redirect]\ndefault_status = 301\n")
        monkeypatch.setenv("REDIRECT__DEFAULT_STATUS", "307")

        settings = Settings.from_config(str(config))

        assert settings.redirect.default_status == 307

    def test_path_from_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config = tmp_path / "reskit.toml"
        config.write_text("[files]\nchunk_size = 4096\n")
        monkeypatch.setenv("RESKIT_CONFIG_FILE", str(config))

        assert get_settings().files.chunk_size == 4096

    def test_missing_file_is_ignored(self, tmp_path: Path) -> None:
        settings = Settings.from_config(tmp_path / "absent.toml")
        assert settings.redirect.default_status == 302

    def test_invalid_toml(self, tmp_path: Path) -> None:
        config = tmp_path / "reskit.toml"
        config.write_text("[redirect\n")

        with pytest.raises(ConfigurationError, match="Invalid TOML syntax"):
            Settings.from_config(config)


class TestOverrides:
    def test_nested_overrides(self) -> None:
        settings = Settings.from_config(files={"chunk_size": 10})
        assert settings.files.chunk_size == 10
        assert settings.redirect.default_status == 302


class TestGetSettings:
    def test_is_cached(self) -> None:
        assert get_settings() is get_settings()
