from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003

import pytest

from seatledger.config import (
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    get_database_config,
    get_pos_config,
    get_storage_config,
    get_sync_config,
    optional_env_int,
    require_env_vars,
)
from seatledger.config.pos import DEFAULT_TICKETVAULT_BASE_URL, DEFAULT_TICKETVAULT_COMPANY_ID


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.setenv("MISSING_A", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)
    assert exc.value.names == ("MISSING_A", "MISSING_B")


def test_optional_env_int(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SOME_INT", raising=False)
    assert optional_env_int("SOME_INT", 7) == 7

    monkeypatch.setenv("SOME_INT", "12")
    assert optional_env_int("SOME_INT", 7) == 12

    monkeypatch.setenv("SOME_INT", "twelve")
    with pytest.raises(ConfigurationError) as exc:
        optional_env_int("SOME_INT", 7)
    assert exc.value.name == "SOME_INT"


def test_pos_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TICKETVAULT_USERNAME", raising=False)
    monkeypatch.delenv("TICKETVAULT_PASSWORD", raising=False)

    with pytest.raises(MissingConfigurationError):
        get_pos_config()


def test_pos_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TICKETVAULT_USERNAME", "seller")
    monkeypatch.setenv("TICKETVAULT_PASSWORD", "secret")
    for name in ("TICKETVAULT_BASE_URL", "TICKETVAULT_COMPANY_ID", "TICKETVAULT_UI_TIMEZONE"):
        monkeypatch.delenv(name, raising=False)

    config = get_pos_config()

    assert config.company_id == DEFAULT_TICKETVAULT_COMPANY_ID
    assert config.resilience.base_url == DEFAULT_TICKETVAULT_BASE_URL
    assert config.resilience.ratelimit is not None
    assert config.ui_timezone == "America/New_York"


def test_pos_config_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TICKETVAULT_USERNAME", "seller")
    monkeypatch.setenv("TICKETVAULT_PASSWORD", "secret")
    monkeypatch.setenv("TICKETVAULT_BASE_URL", "https://pos.test")
    monkeypatch.setenv("TICKETVAULT_COMPANY_ID", "12")
    monkeypatch.setenv("TICKETVAULT_UI_TIMEZONE", "Europe/Berlin")

    config = get_pos_config()

    assert config.company_id == 12
    assert config.resilience.base_url == "https://pos.test"
    assert config.ui_timezone == "Europe/Berlin"


def test_sync_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEATLEDGER_SALES_BATCH_SIZE", "25")
    monkeypatch.setenv("SEATLEDGER_LISTING_PAGE_SIZE", "10")
    monkeypatch.delenv("SEATLEDGER_LISTING_BATCH_SIZE", raising=False)

    config = get_sync_config()

    assert config.sales_batch_size == 25
    assert config.listing_page_size == 10
    assert config.listing_batch_size == 500


def test_database_uri_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://db/seatledger")

    assert get_database_config().uri == "postgresql+psycopg://db/seatledger"


def test_database_uri_defaults_to_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("SEATLEDGER_DATA_DIR", str(tmp_path / "data"))

    uri = get_database_config().uri

    assert get_storage_config().data_dir == tmp_path / "data"
    assert uri == f"sqlite+pysqlite:///{(tmp_path / 'data' / 'seatledger.db').resolve()}"
    assert (tmp_path / "data").is_dir()


def test_sql_echo_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")
    monkeypatch.setenv("SEATLEDGER_SQL_ECHO", "yes")

    config = get_database_config()

    assert config.echo is True
    assert config.is_sqlite is True


def test_configure_logging_reads_level_and_quiets_http(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEATLEDGER_LOG_LEVEL", "debug")
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", list(root.handlers))
    monkeypatch.setattr(root, "level", root.level)
    httpx_logger = logging.getLogger("httpx")
    monkeypatch.setattr(httpx_logger, "level", httpx_logger.level)

    configure_logging(force=True)

    assert root.level == logging.DEBUG
    assert httpx_logger.level == logging.WARNING
