"""Tests for environment configuration parsing."""

import logging

import pytest

from src.utils.config import _env_bool, _env_float, _env_int, _env_list


@pytest.mark.unit
def test_env_int_reads_value(monkeypatch):
    monkeypatch.setenv("RUN_POLL_MAX_ATTEMPTS", " 12 ")

    assert _env_int("RUN_POLL_MAX_ATTEMPTS", 60) == 12


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["abc", "1.5", "ten"])
def test_env_int_malformed_falls_back(monkeypatch, caplog, raw):
    monkeypatch.setenv("RUN_POLL_MAX_ATTEMPTS", raw)

    with caplog.at_level(logging.WARNING, logger="src.utils.config"):
        assert _env_int("RUN_POLL_MAX_ATTEMPTS", 60) == 60

    assert "RUN_POLL_MAX_ATTEMPTS" in caplog.text


@pytest.mark.unit
def test_env_int_blank_uses_default(monkeypatch):
    monkeypatch.setenv("RUN_POLL_MAX_ATTEMPTS", "  ")

    assert _env_int("RUN_POLL_MAX_ATTEMPTS", 60) == 60


@pytest.mark.unit
def test_env_float(monkeypatch):
    monkeypatch.setenv("RUN_POLL_INTERVAL_SECONDS", "0.25")
    assert _env_float("RUN_POLL_INTERVAL_SECONDS", 1.0) == 0.25

    monkeypatch.setenv("RUN_POLL_INTERVAL_SECONDS", "fast")
    assert _env_float("RUN_POLL_INTERVAL_SECONDS", 1.0) == 1.0


@pytest.mark.unit
def test_env_bool_and_list(monkeypatch):
    monkeypatch.setenv("INVITE_TEST_CODES_ENABLED", " TRUE ")
    monkeypatch.setenv("INVITE_TEST_CODES", "test1234, ,demo5678")

    assert _env_bool("INVITE_TEST_CODES_ENABLED") is True
    assert _env_list("INVITE_TEST_CODES") == ["TEST1234", "DEMO5678"]
