from __future__ import annotations

import dataclasses
import pytest

from autofill.config import DEFAULT_DENYLIST, Settings


def test_defaults_contain_self_and_system_ui() -> None:
    settings = Settings()
    assert settings.is_denylisted("org.sufficientlysecure.keychain")
    assert settings.is_denylisted("com.android.systemui")
    assert not settings.is_denylisted("com.example.app")


def test_from_env_reads_lists_without_case_folding(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTOFILL_DENYLIST", " Com.Example.Vault , ,com.android.systemui")
    monkeypatch.setenv("AUTOFILL_BROWSERS", "org.example.browser")
    monkeypatch.setenv("AUTOFILL_MAX_TREE_DEPTH", "12")
    monkeypatch.setenv("AUTOFILL_MAX_TREE_NODES", "34")

    settings = Settings.from_env()

    assert settings.denylisted_origins == ("Com.Example.Vault", "com.android.systemui")
    assert settings.is_denylisted("Com.Example.Vault")
    assert not settings.is_denylisted("com.example.vault")
    assert settings.browser_packages == ("org.example.browser",)
    assert settings.max_tree_depth == 12
    assert settings.max_tree_nodes == 34


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("AUTOFILL_DENYLIST", raising=False)
    assert Settings.from_env().denylisted_origins == DEFAULT_DENYLIST


def test_settings_are_immutable() -> None:
    settings = Settings()
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.max_tree_depth = 1  # type: ignore[misc]


def test_with_denylist_returns_new_instance() -> None:
    settings = Settings()
    updated = settings.with_denylist(["com.example.vault", " "])
    assert updated.denylisted_origins == ("com.example.vault",)
    assert settings.denylisted_origins == DEFAULT_DENYLIST
    assert settings.with_denylist([" "]) is settings


def test_single_origin_browsers(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = Settings()
    assert settings.is_single_origin_browser("com.android.chrome")
    assert not settings.is_single_origin_browser("org.mozilla.firefox")
    assert not settings.is_single_origin_browser("com.example.app")

    monkeypatch.setenv("AUTOFILL_MULTI_ORIGIN_BROWSERS", "com.android.chrome")
    assert not Settings.from_env().is_single_origin_browser("com.android.chrome")
