from enum import Enum
from typing import Annotated

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources.types import NoDecode


DEFAULT_DB_PATH = ".data/tierdict.sqlite3"


class LLMApiStyle(str, Enum):
    """Ollama endpoint flavour. URL やレスポンス形状からは推測しない。"""

    chat = "chat"
    completion = "completion"


class PromptStyle(str, Enum):
    json = "json"
    fenced_json = "fenced_json"
    tri_mode = "tri_mode"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数から読み込まれるアプリ設定クラス。
    - llm_*: ローカル LLM（Ollama 互換 API）への接続設定
    - prompt_style: 語彙エントリ生成プロンプトの形式
    - db_path: 辞書データを保存する SQLite のパス
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )

    # --- LLM 接続 ---
    llm_provider: str = Field(
        default="ollama",
        description="LLM service provider (ollama|local) / 利用するLLMプロバイダ",
    )
    llm_base_url: str = Field(
        default="http://localhost:11434",
        validation_alias=AliasChoices("llm_base_url", "ollama_base_url"),
        description="Base URL of the Ollama API / Ollama API のベースURL",
    )
    llm_model: str = Field(
        default="qwen3:8b",
        description="LLM model name / 利用するLLMモデル名",
    )
    llm_api_style: LLMApiStyle = Field(
        default=LLMApiStyle.completion,
        description="chat=/api/chat, completion=/api/generate / 呼び出すエンドポイント種別",
    )

    # --- LLM 呼出しのタイムアウト/リトライ ---
    llm_timeout_ms: int = Field(
        default=120000,
        description="Per-attempt timeout for LLM calls (ms) / LLM呼出しの試行毎タイムアウト(ms)",
    )
    llm_connect_timeout_ms: int = Field(
        default=8000,
        description="Timeout for the connection test request (ms) / 接続テストのタイムアウト(ms)",
    )
    llm_max_retries: int = Field(
        default=1,
        description="Max attempts for LLM calls / LLM呼出しの最大試行回数",
    )
    llm_request_delay_ms: int = Field(
        default=500,
        description=(
            "Delay between sequential per-word requests (ms) / "
            "単語ごとの逐次リクエスト間の待機時間(ms)"
        ),
    )

    # --- 生成・解析 ---
    prompt_style: PromptStyle = Field(
        default=PromptStyle.json,
        description="Prompt format for entry generation / エントリ生成プロンプトの形式",
    )
    heuristic_bounded_pairs: bool = Field(
        default=True,
        description=(
            "Bound synonym/antonym/collocation scans to their own section / "
            "同義語・反義語・搭配の抽出を各セクション内に限定する"
        ),
    )
    candidate_refine_limit: int = Field(
        default=100,
        description="Top-N candidates sent to the LLM for refinement / LLM 精選に渡す上位語数",
    )
    candidate_fallback_limit: int = Field(
        default=30,
        description="Candidates kept when refinement fails / 精選失敗時に返す上位語数",
    )

    # --- 永続化 ---
    db_path: str = Field(
        default=DEFAULT_DB_PATH,
        validation_alias=AliasChoices("db_path", "tierdict_db_path"),
        description="Path to the dictionary SQLite database / 辞書用SQLite DBパス",
    )
    default_dictionary_name: str = Field(
        default="默认词典",
        description="Dictionary created on first start / 初回起動時に作成する辞書名",
    )

    allowed_cors_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("*",),
        validation_alias=AliasChoices("allowed_cors_origins", "cors_allowed_origins"),
        description="Comma separated CORS origins / CORS で許可するオリジン（カンマ区切り）",
    )

    # --- Strict mode ---
    strict_mode: bool = Field(
        default=True,
        description="Fail fast on missing/invalid configuration (disable only for tests)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("allowed_cors_origins", mode="before")
    @classmethod
    def _normalise_allowed_cors_origins(
        cls, raw_origins: object
    ) -> tuple[str, ...] | object:  # pragma: no cover - pydantic handles typing
        """Normalise CORS origins to a trimmed, deduplicated tuple.

        カンマ区切りの環境変数をそのまま渡すと空白や重複が残るため、
        CORSMiddleware に渡す前に整形する。
        """

        if raw_origins is None:
            candidates: list[str] = []
        elif isinstance(raw_origins, str):
            candidates = raw_origins.split(",")
        else:
            try:
                candidates = list(raw_origins)
            except TypeError:
                return raw_origins

        normalised: list[str] = []
        seen: set[str] = set()
        for candidate in candidates:
            if not isinstance(candidate, str):
                continue
            trimmed = candidate.strip()
            if not trimmed or trimmed in seen:
                continue
            seen.add(trimmed)
            normalised.append(trimmed)

        return tuple(normalised)

    @field_validator("llm_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")


settings = Settings()
