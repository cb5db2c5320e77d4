from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import anyio
import httpx

from ..config import LLMApiStyle, settings
from ..logging import logger


# LLM インスタンス（シングルトン）
_LLM_INSTANCE: Any | None = None

_CONNECTION_TEST_PROMPT = "Hello"


class LLMQueryError(RuntimeError):
    """Raised when a prompt could not be answered by the LLM.

    reason_code で失敗種別を表し、HTTP 層はこれを 502/504 に写像する。
    - CONNECTION: 接続不可・接続テスト失敗
    - TIMEOUT: 応答待ちのタイムアウト
    - HTTP_STATUS: 2xx 以外のステータス
    - EMPTY_RESPONSE: 応答本文が空
    - UNSUPPORTED_PROVIDER: strict モードで未対応のプロバイダ
    """

    def __init__(
        self,
        message: str,
        *,
        reason_code: str,
        diagnostics: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.reason_code = reason_code
        self.diagnostics = diagnostics or {}


class ConnectionStatus(str, Enum):
    untested = "untested"
    connected = "connected"
    failed = "failed"


@dataclass(frozen=True)
class ConnectionState:
    """Connection test outcome owned by the client.

    untested → connected/failed の遷移のみ。エンドポイントかモデルが
    変わったら untested に戻す。
    """

    status: ConnectionStatus = ConnectionStatus.untested
    error: Optional[str] = None
    checked_at: Optional[str] = None

    def succeed(self) -> "ConnectionState":
        return replace(self, status=ConnectionStatus.connected, error=None, checked_at=_now_iso())

    def fail(self, error: str) -> "ConnectionState":
        return replace(self, status=ConnectionStatus.failed, error=error, checked_at=_now_iso())

    @property
    def is_connected(self) -> bool:
        return self.status is ConnectionStatus.connected


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class _LLMBase:
    provider = "base"

    async def query(self, prompt: str) -> str:  # pragma: no cover - interface only
        raise NotImplementedError

    def describe(self) -> Dict[str, Any]:
        return {"provider": self.provider}


class OllamaLLM(_LLMBase):
    """Client for an Ollama-compatible HTTP API.

    api_style で叩くエンドポイントを明示的に切り替える（応答の形から推測しない）。
    - completion: POST {base}/api/generate, 本文は `response`
    - chat: POST {base}/api/chat, 本文は `message.content`
    テストでは ``transport`` に ``httpx.MockTransport`` を渡す。
    """

    provider = "ollama"

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        api_style: LLMApiStyle | str = LLMApiStyle.completion,
        timeout_ms: int = 120000,
        connect_timeout_ms: int = 8000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_style = LLMApiStyle(api_style)
        self.timeout_ms = timeout_ms
        self.connect_timeout_ms = connect_timeout_ms
        self._transport = transport
        self.state = ConnectionState()

    def configure(
        self,
        *,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        api_style: LLMApiStyle | str | None = None,
    ) -> ConnectionState:
        """Update endpoint settings. 何か変わったら接続状態を untested に戻す。"""
        changed = False
        if base_url is not None and base_url.rstrip("/") != self.base_url:
            self.base_url = base_url.rstrip("/")
            changed = True
        if model is not None and model != self.model:
            self.model = model
            changed = True
        if api_style is not None and LLMApiStyle(api_style) is not self.api_style:
            self.api_style = LLMApiStyle(api_style)
            changed = True
        if changed:
            self.state = ConnectionState()
            logger.info("llm_configured", **self.describe())
        return self.state

    def describe(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "base_url": self.base_url,
            "model": self.model,
            "api_style": self.api_style.value,
            "connection": self.state.status.value,
        }

    def _client(self, timeout_ms: int) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_ms / 1000.0,
            transport=self._transport,
        )

    def _request(self, prompt: str) -> Tuple[str, Dict[str, Any]]:
        if self.api_style is LLMApiStyle.chat:
            return "/api/chat", {
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "stream": False,
            }
        return "/api/generate", {"model": self.model, "prompt": prompt, "stream": False}

    def _extract_text(self, body: Any) -> str:
        if not isinstance(body, dict):
            return ""
        if self.api_style is LLMApiStyle.chat:
            message = body.get("message") or {}
            content = message.get("content") if isinstance(message, dict) else None
        else:
            content = body.get("response")
        return content if isinstance(content, str) else ""

    def _diagnostics(self, **extra: Any) -> Dict[str, Any]:
        diag: Dict[str, Any] = {
            "provider": self.provider,
            "model": self.model,
            "api_style": self.api_style.value,
        }
        diag.update({k: v for k, v in extra.items() if v is not None})
        return diag

    async def test_connection(self) -> ConnectionState:
        """Probe the server and the model. 例外は投げず、結果を状態として返す。

        1. ベース URL への GET（サーバの生存確認）
        2. 短いプロンプトでの生成リクエスト（モデルの存在確認）
        """
        path, payload = self._request(_CONNECTION_TEST_PROMPT)
        try:
            async with self._client(self.connect_timeout_ms) as client:
                ping = await client.get("/")
                ping.raise_for_status()
                probe = await client.post(path, json=payload)
                probe.raise_for_status()
        except httpx.HTTPError as exc:
            self.state = self.state.fail(f"{type(exc).__name__}: {exc}")
            logger.info("llm_connection_test_failed", error=self.state.error, **self.describe())
            return self.state
        self.state = self.state.succeed()
        logger.info("llm_connection_test_ok", **self.describe())
        return self.state

    async def query(self, prompt: str) -> str:
        if not self.state.is_connected:
            state = await self.test_connection()
            if not state.is_connected:
                raise LLMQueryError(
                    "LLM connection test failed",
                    reason_code="CONNECTION",
                    diagnostics=self._diagnostics(error=state.error),
                )
        path, payload = self._request(prompt)
        logger.info("llm_query_call", prompt_chars=len(prompt), **self.describe())
        try:
            async with self._client(self.timeout_ms) as client:
                resp = await client.post(path, json=payload)
                resp.raise_for_status()
                body = resp.json()
        except httpx.TimeoutException as exc:
            raise LLMQueryError(
                "LLM request timed out",
                reason_code="TIMEOUT",
                diagnostics=self._diagnostics(error_type=type(exc).__name__),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise LLMQueryError(
                f"LLM returned HTTP {exc.response.status_code}",
                reason_code="HTTP_STATUS",
                diagnostics=self._diagnostics(
                    status_code=exc.response.status_code,
                    body_preview=exc.response.text[:200],
                ),
            ) from exc
        except httpx.HTTPError as exc:
            self.state = self.state.fail(f"{type(exc).__name__}: {exc}")
            raise LLMQueryError(
                "LLM request failed",
                reason_code="CONNECTION",
                diagnostics=self._diagnostics(error_type=type(exc).__name__, error=str(exc)),
            ) from exc
        except ValueError as exc:
            # JSON でない本文
            raise LLMQueryError(
                "LLM returned a non-JSON body",
                reason_code="EMPTY_RESPONSE",
                diagnostics=self._diagnostics(error=str(exc)),
            ) from exc

        text = self._extract_text(body)
        logger.info("llm_query_result", content_chars=len(text), **self.describe())
        if not text.strip():
            raise LLMQueryError(
                "LLM returned an empty response",
                reason_code="EMPTY_RESPONSE",
                diagnostics=self._diagnostics(),
            )
        return text


class _LocalEchoLLM(_LLMBase):
    provider = "local"

    async def query(self, prompt: str) -> str:
        # ネットワーク不要のフォールバック。常に空文字。
        logger.info("llm_query_call", provider="local", model="echo", prompt_chars=len(prompt))
        return ""

    def describe(self) -> Dict[str, Any]:
        return {"provider": self.provider, "model": "echo", "connection": ConnectionStatus.connected.value}


class _PolicyLLM(_LLMBase):
    """Timeout/retry/backoff around another client. 他の属性は内側へ委譲する。"""

    def __init__(self, inner: _LLMBase, *, timeout_ms: int, max_retries: int) -> None:
        self.inner = inner
        self.provider = inner.provider
        self.timeout_ms = timeout_ms
        self.max_retries = max(1, max_retries)

    def __getattr__(self, name: str) -> Any:
        return getattr(self.inner, name)

    def describe(self) -> Dict[str, Any]:
        return self.inner.describe()

    async def query(self, prompt: str) -> str:
        last_exc: LLMQueryError | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                with anyio.fail_after(self.timeout_ms / 1000.0):
                    return await self.inner.query(prompt)
            except TimeoutError as exc:
                last_exc = LLMQueryError(
                    "LLM timeout",
                    reason_code="TIMEOUT",
                    diagnostics={**self.inner.describe(), "timeout_ms": self.timeout_ms},
                )
                last_exc.__cause__ = exc
            except LLMQueryError as exc:
                last_exc = exc
            logger.info(
                "llm_query_error",
                attempt=attempt,
                retries=self.max_retries,
                reason_code=last_exc.reason_code,
                error=str(last_exc),
            )
            if attempt >= self.max_retries:
                break
            await anyio.sleep(0.1 * attempt)
        logger.info("llm_query_failed_all_retries", reason_code=last_exc.reason_code if last_exc else None)
        assert last_exc is not None
        raise last_exc


def _llm_with_policy(llm: _LLMBase) -> _LLMBase:
    return _PolicyLLM(llm, timeout_ms=settings.llm_timeout_ms, max_retries=settings.llm_max_retries)


def _get_llm_instance() -> Any | None:
    return _LLM_INSTANCE


def _set_llm_instance(instance: Any | None) -> None:
    global _LLM_INSTANCE
    _LLM_INSTANCE = instance


def get_llm_provider() -> Any:
    """Return the process-wide LLM client based on the configured provider.

    設定値 ``settings.llm_provider`` に応じてクライアントを返す。
    - ollama: Ollama 互換 HTTP API
    - local: ネットワーク不要のフォールバック（空応答）
    strict モードでは local/未知のプロバイダを拒否し、非 strict では local に落とす。
    """
    instance = _get_llm_instance()
    if instance is not None:
        return instance
    provider = (settings.llm_provider or "").lower()
    if provider == "ollama":
        logger.info(
            "llm_provider_select",
            provider="ollama",
            model=settings.llm_model,
            api_style=settings.llm_api_style.value,
        )
        instance = _llm_with_policy(
            OllamaLLM(
                base_url=settings.llm_base_url,
                model=settings.llm_model,
                api_style=settings.llm_api_style,
                timeout_ms=settings.llm_timeout_ms,
                connect_timeout_ms=settings.llm_connect_timeout_ms,
            )
        )
        _set_llm_instance(instance)
        return instance
    if settings.strict_mode:
        raise LLMQueryError(
            f"Unsupported LLM provider in strict mode: {provider or '(empty)'}",
            reason_code="UNSUPPORTED_PROVIDER",
            diagnostics={"provider": provider},
        )
    logger.info("llm_provider_select", provider="local", requested=provider)
    instance = _llm_with_policy(_LocalEchoLLM())
    _set_llm_instance(instance)
    return instance


def reset_llm_provider() -> None:
    """Drop the cached client so the next call re-reads settings."""
    _set_llm_instance(None)
