"""Tests for environment-driven settings."""

import pytest

from furnledger.config import Settings, load_settings


def test_defaults():
    settings = load_settings({})

    assert settings == Settings()
    assert settings.database_path is None
    assert settings.rule_cache_ttl == 30.0
    assert settings.payment_max_attempts == 3
    assert settings.log_level == "WARNING"


def test_reads_all_variables():
    settings = load_settings(
        {
            "FURNLEDGER_DB_PATH": "/tmp/ledger.db",
            "FURNLEDGER_RULE_CACHE_TTL": "2.5",
            "FURNLEDGER_PAYMENT_MAX_ATTEMPTS": "5",
            "FURNLEDGER_LOG_LEVEL": "debug",
        }
    )

    assert settings.database_path == "/tmp/ledger.db"
    assert settings.rule_cache_ttl == 2.5
    assert settings.payment_max_attempts == 5
    assert settings.log_level == "DEBUG"


def test_blank_values_fall_back_to_defaults():
    settings = load_settings({"FURNLEDGER_RULE_CACHE_TTL": " ", "FURNLEDGER_DB_PATH": ""})

    assert settings.rule_cache_ttl == 30.0
    assert settings.database_path is None


@pytest.mark.parametrize(
    "name,value",
    [
        ("FURNLEDGER_RULE_CACHE_TTL", "soon"),
        ("FURNLEDGER_RULE_CACHE_TTL", "-1"),
        ("FURNLEDGER_RULE_CACHE_TTL", "nan"),
        ("FURNLEDGER_RULE_CACHE_TTL", "inf"),
        ("FURNLEDGER_PAYMENT_MAX_ATTEMPTS", "three"),
        ("FURNLEDGER_PAYMENT_MAX_ATTEMPTS", "0"),
    ],
)
def test_invalid_values_name_the_variable(name, value):
    with pytest.raises(ValueError, match=name):
        load_settings({name: value})


def test_reads_os_environ_by_default(monkeypatch):
    monkeypatch.setenv("FURNLEDGER_PAYMENT_MAX_ATTEMPTS", "7")
    assert load_settings().payment_max_attempts == 7
