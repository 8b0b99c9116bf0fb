"""Tests for environment-driven configuration: thresholds and numeric limits."""

import pytest

from termlens.infra import config
from termlens.infra.errors import ConfigurationError


def test_threshold_default_when_unset(monkeypatch):
    monkeypatch.delenv("FUZZY_HIGH_CONFIDENCE", raising=False)
    assert config._env_threshold("FUZZY_HIGH_CONFIDENCE", 0.75) == 0.75


def test_threshold_blank_uses_default(monkeypatch):
    monkeypatch.setenv("FUZZY_HIGH_CONFIDENCE", "  ")
    assert config._env_threshold("FUZZY_HIGH_CONFIDENCE", 0.75) == 0.75


def test_threshold_override(monkeypatch):
    monkeypatch.setenv("FUZZY_HIGH_CONFIDENCE", "0.82")
    assert config._env_threshold("FUZZY_HIGH_CONFIDENCE", 0.75) == 0.82


@pytest.mark.parametrize("raw", ["high", "1.5", "-0.1"])
def test_invalid_threshold_fails_fast(monkeypatch, raw):
    monkeypatch.setenv("FUZZY_HIGH_CONFIDENCE", raw)
    with pytest.raises(ConfigurationError, match="FUZZY_HIGH_CONFIDENCE"):
        config._env_threshold("FUZZY_HIGH_CONFIDENCE", 0.75)


def test_number_defaults_and_overrides(monkeypatch):
    monkeypatch.delenv("MAX_BATCH_TERMS", raising=False)
    assert config._env_number("MAX_BATCH_TERMS", 50, cast=int) == 50
    monkeypatch.setenv("MAX_BATCH_TERMS", " 20 ")
    assert config._env_number("MAX_BATCH_TERMS", 50, cast=int) == 20
    monkeypatch.setenv("CANDIDATE_CACHE_TTL_SECONDS", "0")
    assert config._env_number("CANDIDATE_CACHE_TTL_SECONDS", 120.0, allow_zero=True) == 0.0


@pytest.mark.parametrize(
    "name, raw, kwargs",
    [
        ("CANDIDATE_CACHE_TTL_SECONDS", "abc", {"allow_zero": True}),
        ("CANDIDATE_CACHE_TTL_SECONDS", "-1", {"allow_zero": True}),
        ("CANDIDATE_FETCH_TIMEOUT_SECONDS", "0", {}),
        ("CANDIDATE_FETCH_TIMEOUT_SECONDS", "nan", {}),
        ("MAX_BATCH_TERMS", "2.5", {"cast": int}),
        ("MAX_BATCH_TERMS", "-5", {"cast": int}),
    ],
)
def test_invalid_number_fails_fast(monkeypatch, name, raw, kwargs):
    monkeypatch.setenv(name, raw)
    with pytest.raises(ConfigurationError, match=name):
        config._env_number(name, 1, **kwargs)


def test_thresholds_snapshot():
    snapshot = config.thresholds()
    assert set(snapshot) == {
        "fuzzy_high", "fuzzy_medium", "fuzzy_low",
        "phonetic_high", "phonetic_low", "categorization",
    }
    assert snapshot["fuzzy_medium"] == config.FUZZY_MEDIUM_CONFIDENCE
