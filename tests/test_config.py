"""Configuration tests."""

from __future__ import annotations

from cycleledger.config import BaseConfig, DevConfig


def test_defaults_use_sqlite_in_data_dir(isolated_env):
    config = BaseConfig()

    assert config.DATA_DIR == isolated_env.resolve()
    assert config.DATA_DIR.exists()
    assert config.DATABASE_URL == f"sqlite:///{isolated_env.resolve() / 'cycleledger.db'}"
    assert config.CURRENCY_SYMBOL == "₱"
    assert config.COMPANY_NAME == "Company"
    assert config.DEV_MODE is True
    assert config.sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CYCLELEDGER_DATABASE_URL", "postgresql://localhost/ledger")
    monkeypatch.setenv("CYCLELEDGER_CURRENCY_SYMBOL", "$")
    monkeypatch.setenv("CYCLELEDGER_COMPANY_NAME", "Acme Corp")
    monkeypatch.setenv("CYCLELEDGER_DEV_MODE", "off")

    config = DevConfig()

    assert config.DATABASE_URL == "postgresql://localhost/ledger"
    assert config.sqlalchemy_engine_options() == {}
    assert config.CURRENCY_SYMBOL == "$"
    assert config.COMPANY_NAME == "Acme Corp"
    assert config.DEV_MODE is False
    assert config.DEBUG is True
