"""Tests for settings and the command line."""

import json
from datetime import timedelta
from decimal import Decimal

import pytest

from orderdesk.cli import main
from orderdesk.config import Settings
from orderdesk.discount import DiscountPolicy


def test_defaults_without_environment():
    settings = Settings.from_env({})

    assert settings == Settings()
    assert settings.cache_ttl == timedelta(minutes=5)
    assert settings.discount == DiscountPolicy()


def test_environment_overrides():
    settings = Settings.from_env(
        {
            "ORDERDESK_DATABASE_URL": "sqlite+aiosqlite:///:memory:",
            "ORDERDESK_CACHE_TTL": "60",
            "ORDERDESK_CACHE_MAX_SIZE": "10",
            "ORDERDESK_LOG_LEVEL": "debug",
            "ORDERDESK_CATEGORY_MIN_ITEMS": "3",
            "ORDERDESK_TOTAL_RATE": "0.05",
        }
    )

    assert settings.database_url == "sqlite+aiosqlite:///:memory:"
    assert settings.cache_ttl == timedelta(seconds=60)
    assert settings.cache_max_size == 10
    assert settings.log_level == "DEBUG"
    assert settings.discount == DiscountPolicy(category_min_items=3, total_rate=Decimal("0.05"))


def test_empty_values_keep_defaults():
    settings = Settings.from_env({"ORDERDESK_CACHE_TTL": "", "ORDERDESK_CATEGORY_RATE": ""})

    assert settings == Settings()


def test_malformed_value_fails_fast():
    with pytest.raises(ValueError):
        Settings.from_env({"ORDERDESK_CACHE_MAX_SIZE": "lots"})


def test_cli_seeds_and_prints_discount(tmp_path, monkeypatch, capsys):
    monkeypatch.delenv("ORDERDESK_DATABASE_URL", raising=False)
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"

    assert main(["--database-url", url, "init-db", "--seed"]) == 0
    assert "seeded orders: [1, 2, 3]" in capsys.readouterr().out

    assert main(["--database-url", url, "discount", "3"]) == 0
    breakdown = json.loads(capsys.readouterr().out)
    assert breakdown["total"] == "1020.14"

    assert main(["--database-url", url, "discount", "404"]) == 1
