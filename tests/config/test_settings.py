from __future__ import annotations

from pathlib import Path

import pytest

from noticewatch.config import (
    ConfigurationError,
    ForwardProxyConfig,
    get_forward_proxy_config,
    get_relay_config,
    get_storage_config,
)
from noticewatch.domain.eviction import DEFAULT_TABLE_CAPACITY


def test_relay_config_defaults() -> None:
    config = get_relay_config()

    assert config.send_interval_seconds == 1.0
    assert config.detail_interval_seconds == 0.5
    assert config.table_capacity == DEFAULT_TABLE_CAPACITY


def test_relay_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOTICEWATCH_SEND_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("NOTICEWATCH_DETAIL_INTERVAL_SECONDS", "0")

    config = get_relay_config()

    assert config.send_interval_seconds == 2.5
    assert config.detail_interval_seconds == 0.0


def test_relay_config_rejects_negative_interval(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NOTICEWATCH_SEND_INTERVAL_SECONDS", "-1")

    with pytest.raises(ConfigurationError):
        get_relay_config()


def test_storage_config_uses_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("NOTICEWATCH_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    config = get_storage_config()

    expected = tmp_path.resolve() / "data" / "noticewatch.db"
    assert config.database_uri == f"sqlite+pysqlite:///{expected}"
    assert (tmp_path / "data").is_dir()


def test_storage_config_prefers_database_uri(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://relay@db/relay")

    assert get_storage_config().database_uri == "postgresql+psycopg://relay@db/relay"


def test_storage_config_default_dir_follows_xdg(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("NOTICEWATCH_DATA_DIR")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_storage_config().data_dir == Path(tmp_path / "noticewatch").resolve()


def test_forward_proxy_needs_url_and_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_PROXY_URL", "https://proxy.example/")
    monkeypatch.delenv("EXAMPLE_BASIC_AUTH", raising=False)

    assert get_forward_proxy_config("EXAMPLE") is None

    monkeypatch.setenv("EXAMPLE_BASIC_AUTH", "user:secret")
    proxy = get_forward_proxy_config("EXAMPLE")

    assert proxy == ForwardProxyConfig("https://proxy.example/", "user:secret")
    assert proxy.wrap("https://target.example/list") == (
        "https://proxy.example/https://target.example/list"
    )
    assert proxy.headers() == {"Authorization": "Basic dXNlcjpzZWNyZXQ="}
