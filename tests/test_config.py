from __future__ import annotations

import pytest

from pybatchload.config import BatchLoaderConfig
from pybatchload.exceptions import BatchLoaderConfigError


def test_defaults() -> None:
    config = BatchLoaderConfig()

    assert config.debounce_ms == 0
    assert config.keep_cache is False
    assert config.load_without_items is False


def test_negative_debounce_rejected() -> None:
    with pytest.raises(BatchLoaderConfigError):
        BatchLoaderConfig(debounce_ms=-5)


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHLOAD_DEBOUNCE_MS", " 150 ")
    monkeypatch.setenv("BATCHLOAD_KEEP_CACHE", "yes")
    monkeypatch.setenv("BATCHLOAD_LOAD_WITHOUT_ITEMS", "off")

    config = BatchLoaderConfig.from_env()

    assert config == BatchLoaderConfig(debounce_ms=150, keep_cache=True, load_without_items=False)


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHLOAD_DEBOUNCE_MS", "not-a-number")
    monkeypatch.setenv("BATCHLOAD_KEEP_CACHE", "1")

    config = BatchLoaderConfig.from_env(debounce_ms=20, keep_cache=False)

    assert config.debounce_ms == 20
    assert config.keep_cache is False


def test_from_env_unknown_bool_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BATCHLOAD_DEBOUNCE_MS", raising=False)
    monkeypatch.setenv("BATCHLOAD_LOAD_WITHOUT_ITEMS", "maybe")

    assert BatchLoaderConfig.from_env().load_without_items is False


def test_from_env_invalid_debounce(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BATCHLOAD_DEBOUNCE_MS", "1.5")

    with pytest.raises(BatchLoaderConfigError):
        BatchLoaderConfig.from_env()
