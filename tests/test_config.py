import pytest

from discovery_flow.config import DEFAULT_ALLOWED_ORIGINS, DEFAULT_MODEL, get_settings


def test_defaults_without_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LLM_MODEL", "LLM_TEMPERATURE", "MAX_TOOL_ROUNDS", "RUNNER_CACHE_SIZE", "ALLOWED_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(f"PROJECT_ASSIST_{name}", raising=False)

    settings = get_settings()

    assert settings.openai_api_key is None
    assert settings.llm_enabled is False
    assert settings.llm_model == DEFAULT_MODEL
    assert settings.llm_temperature == 0.7
    assert settings.max_tool_rounds == 6
    assert settings.runner_cache_size == 0
    assert settings.allowed_origins == DEFAULT_ALLOWED_ORIGINS
    assert settings.log_level == "INFO"


def test_openai_key_enables_llm(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai")
    monkeypatch.setenv("PROJECT_ASSIST_LLM_MODEL", "gpt-4o")

    settings = get_settings()

    assert settings.llm_enabled is True
    assert settings.openai_api_key == "test-openai"
    assert settings.llm_model == "gpt-4o"


def test_invalid_numbers_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROJECT_ASSIST_LLM_TEMPERATURE", "warm")
    monkeypatch.setenv("PROJECT_ASSIST_MAX_TOOL_ROUNDS", "0")
    monkeypatch.setenv("PROJECT_ASSIST_RUNNER_CACHE_SIZE", "-4")

    settings = get_settings()

    assert settings.llm_temperature == 0.7
    assert settings.max_tool_rounds == 1
    assert settings.runner_cache_size == 0


def test_origins_and_log_level_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROJECT_ASSIST_ALLOWED_ORIGINS", "https://app.example.com, ,http://localhost:5173")
    monkeypatch.setenv("PROJECT_ASSIST_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.allowed_origins == ["https://app.example.com", "http://localhost:5173"]
    assert settings.log_level == "DEBUG"


def test_settings_are_cached() -> None:
    assert get_settings() is get_settings()
