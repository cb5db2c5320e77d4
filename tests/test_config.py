"""環境変数からの設定読み込みと正規化を検証するテスト群。"""

import pytest

from tierdict.config import LLMApiStyle, PromptStyle, Settings


def test_cors_origins_are_trimmed_and_deduplicated(monkeypatch: pytest.MonkeyPatch):
    """`CORS_ALLOWED_ORIGINS` はカンマ区切りで読み、空要素と重複を除く。"""

    monkeypatch.setenv(
        "CORS_ALLOWED_ORIGINS",
        " http://localhost:5173 ,http://127.0.0.1:5173,http://localhost:5173,, ",
    )

    config = Settings(_env_file=None)

    assert config.allowed_cors_origins == ("http://localhost:5173", "http://127.0.0.1:5173")


def test_cors_defaults_to_wildcard(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("CORS_ALLOWED_ORIGINS", raising=False)
    monkeypatch.delenv("ALLOWED_CORS_ORIGINS", raising=False)
    assert Settings(_env_file=None).allowed_cors_origins == ("*",)


def test_ollama_base_url_alias_and_trailing_slash(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("LLM_BASE_URL", raising=False)
    monkeypatch.setenv("OLLAMA_BASE_URL", " http://gpu-box:11434/ ")

    config = Settings(_env_file=None)

    assert config.llm_base_url == "http://gpu-box:11434"


def test_llm_and_prompt_enums_are_parsed(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LLM_API_STYLE", "chat")
    monkeypatch.setenv("PROMPT_STYLE", "tri_mode")

    config = Settings(_env_file=None)

    assert config.llm_api_style is LLMApiStyle.chat
    assert config.prompt_style is PromptStyle.tri_mode


def test_invalid_api_style_is_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LLM_API_STYLE", "openai")
    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_db_path_accepts_prefixed_alias(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("DB_PATH", raising=False)
    monkeypatch.setenv("TIERDICT_DB_PATH", "/tmp/custom.sqlite3")
    assert Settings(_env_file=None).db_path == "/tmp/custom.sqlite3"


def test_defaults(monkeypatch: pytest.MonkeyPatch):
    for name in ("LLM_MODEL", "LLM_TIMEOUT_MS", "LLM_MAX_RETRIES", "HEURISTIC_BOUNDED_PAIRS", "LLM_API_STYLE"):
        monkeypatch.delenv(name, raising=False)

    config = Settings(_env_file=None)

    assert config.llm_model == "qwen3:8b"
    assert config.llm_api_style is LLMApiStyle.completion
    assert config.llm_timeout_ms == 120000
    assert config.llm_max_retries == 1
    assert config.heuristic_bounded_pairs is True
    assert config.default_dictionary_name == "默认词典"
