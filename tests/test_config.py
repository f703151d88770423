# tests/test_config.py
import pytest
from pydantic import ValidationError

from credit_console.config import ConsoleConfig


def test_defaults():
    cfg = ConsoleConfig()
    assert cfg.timeout_ms == 15000
    assert cfg.timeout_secs == 15.0
    assert cfg.url("/transactions") == "http://127.0.0.1:8000/transactions"


def test_aliases_and_trailing_slash():
    cfg = ConsoleConfig(baseUrl="https://scoring.example/api/", timeoutMs=2500)
    assert cfg.base_url == "https://scoring.example/api"
    assert cfg.url("analytics") == "https://scoring.example/api/analytics"
    assert cfg.timeout_secs == 2.5


def test_unknown_option_rejected():
    with pytest.raises(ValidationError):
        ConsoleConfig(retries=3)


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        ConsoleConfig(timeout_ms=0)


def test_from_env(monkeypatch):
    monkeypatch.setenv("CONSOLE_BASE_URL", "http://backend:9000")
    monkeypatch.setenv("CONSOLE_TIMEOUT_MS", "3000")
    cfg = ConsoleConfig.from_env()
    assert cfg.base_url == "http://backend:9000"
    assert cfg.timeout_ms == 3000
