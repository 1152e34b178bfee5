"""Тесты для config_reader модуля."""

from collections.abc import Generator
from pathlib import Path

import pytest

from dotypos.config_reader import (
    DEFAULT_BASE_URL,
    DotyposConfig,
    get_config,
    get_dotypos_config,
    parse_config_file,
)

# Маркируем все тесты в этом модуле как unit-тесты
pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def clear_config_cache() -> Generator[None, None, None]:
    """Сбросить lru_cache до и после теста."""
    parse_config_file.cache_clear()
    get_config.cache_clear()
    yield
    parse_config_file.cache_clear()
    get_config.cache_clear()


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(content, encoding="utf-8")
    return path


class TestParseConfigFile:
    """Тесты parse_config_file."""

    def test_missing_env_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DOTYPOS_CONFIG", raising=False)

        with pytest.raises(ValueError, match="DOTYPOS_CONFIG"):
            parse_config_file()

    def test_missing_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DOTYPOS_CONFIG", str(tmp_path / "absent.yml"))

        with pytest.raises(FileNotFoundError):
            parse_config_file()

    def test_not_a_mapping(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Конфигурация-список отклоняется."""
        path = write_config(tmp_path, "- one\n- two\n")
        monkeypatch.setenv("DOTYPOS_CONFIG", str(path))

        with pytest.raises(ValueError, match="словарём"):
            parse_config_file()


class TestGetDotyposConfig:
    """Тесты get_dotypos_config."""

    def test_reads_section(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = write_config(
            tmp_path,
            "dotypos:\n"
            "  cloud_id: '123456'\n"
            "  refresh_token: secret-refresh\n"
            "  timeout: 10\n",
        )
        monkeypatch.setenv("DOTYPOS_CONFIG", str(path))

        config = get_dotypos_config()

        assert isinstance(config, DotyposConfig)
        assert config.cloud_id == "123456"
        assert config.refresh_token.get_secret_value() == "secret-refresh"
        assert config.access_token is None
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == 10.0

    def test_secrets_are_hidden_in_repr(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = write_config(
            tmp_path,
            "dotypos:\n"
            "  cloud_id: '1'\n"
            "  refresh_token: secret-refresh\n"
            "  access_token: secret-access\n",
        )
        monkeypatch.setenv("DOTYPOS_CONFIG", str(path))

        text = repr(get_dotypos_config())

        assert "secret-refresh" not in text
        assert "secret-access" not in text

    def test_missing_root_key(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = write_config(tmp_path, "other:\n  value: 1\n")
        monkeypatch.setenv("DOTYPOS_CONFIG", str(path))

        with pytest.raises(ValueError, match="dotypos"):
            get_dotypos_config()
