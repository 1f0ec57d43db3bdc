"""Tests for vaadin_skills.config."""

import os

import pytest

from vaadin_skills import config
from vaadin_skills.config import PROJECT_ROOT, Settings, get_settings


def test_defaults():
    settings = Settings()

    assert settings.skills_dir == str(PROJECT_ROOT / "skills")
    assert settings.docs_dir == str(PROJECT_ROOT / "docs")
    assert settings.default_version == "25"
    assert settings.default_ui_language == "java"
    assert settings.latest_version == ""
    assert settings.semantic_search is False
    assert settings.mcp_transport == "stdio"
    assert settings.mcp_port == 8000
    assert settings.auto_reload is True
    assert settings.external_skill_paths == []
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("VAADIN_DEFAULT_UI_LANGUAGE", "React")
    monkeypatch.setenv("VAADIN_SEMANTIC_SEARCH", "yes")
    monkeypatch.setenv("VAADIN_MCP_TRANSPORT", "sse")
    monkeypatch.setenv("VAADIN_MCP_PORT", "9100")
    monkeypatch.setenv("VAADIN_AUTO_RELOAD", "off")
    monkeypatch.setenv("VAADIN_LOG_LEVEL", "debug")
    monkeypatch.setenv(
        "VAADIN_EXTERNAL_SKILL_PATHS",
        os.pathsep.join([str(tmp_path / "a"), "", str(tmp_path / "b")]),
    )

    settings = Settings()

    assert settings.default_ui_language == "react"
    assert settings.semantic_search is True
    assert settings.mcp_transport == "sse"
    assert settings.mcp_port == 9100
    assert settings.auto_reload is False
    assert settings.log_level == "DEBUG"
    assert settings.external_skill_paths == [str(tmp_path / "a"), str(tmp_path / "b")]


def test_invalid_ui_language(monkeypatch):
    monkeypatch.setenv("VAADIN_DEFAULT_UI_LANGUAGE", "angular")
    with pytest.raises(ValueError, match="VAADIN_DEFAULT_UI_LANGUAGE"):
        Settings()


def test_invalid_transport(monkeypatch):
    monkeypatch.setenv("VAADIN_MCP_TRANSPORT", "websocket")
    with pytest.raises(ValueError, match="VAADIN_MCP_TRANSPORT"):
        Settings()


def test_as_dict_hides_private_fields():
    data = Settings().as_dict()
    assert data["default_version"] == "25"
    assert not any(key.startswith("_") for key in data)


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("VAADIN_DEFAULT_VERSION", "24")
    assert get_settings() is first
    assert get_settings(reload=True).default_version == "24"


def test_get_settings_loads_dotenv(monkeypatch):
    calls = []
    monkeypatch.setattr(config, "load_dotenv", lambda *a, **kw: calls.append(1))
    get_settings()
    get_settings()
    assert calls == [1]
