from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..config import LLMApiStyle, settings
from ..logging import logger
from ..providers.llm import LLMQueryError, get_llm_provider
from .errors import llm_http_error

router = APIRouter(tags=["config"])


class LLMConfigUpdate(BaseModel):
    base_url: Optional[str] = Field(default=None, min_length=1)
    model: Optional[str] = Field(default=None, min_length=1)
    api_style: Optional[LLMApiStyle] = None


def _llm():
    try:
        return get_llm_provider()
    except LLMQueryError as exc:
        raise llm_http_error(exc) from exc


@router.get("/config")
def get_config() -> Dict[str, Any]:
    """Runtime configuration for the front-end.

    LLM の接続先・モデル・接続状態と、生成に関わる設定値を返す。
    """
    return {
        "environment": settings.environment,
        "strict_mode": settings.strict_mode,
        "prompt_style": settings.prompt_style.value,
        "request_delay_ms": settings.llm_request_delay_ms,
        "timeout_ms": settings.llm_timeout_ms,
        "llm": _llm().describe(),
    }


@router.put("/config")
def update_config(req: LLMConfigUpdate) -> Dict[str, Any]:
    """Change the LLM endpoint/model/api style at runtime. 変更があれば接続状態は untested に戻る。"""
    llm = _llm()
    configure = getattr(llm, "configure", None)
    if configure is None:
        raise HTTPException(status_code=400, detail="LLM provider does not support runtime configuration")
    configure(base_url=req.base_url, model=req.model, api_style=req.api_style)
    logger.info("llm_config_updated", **llm.describe())
    return {"llm": llm.describe()}


@router.post("/config/connection-test")
async def connection_test() -> Dict[str, Any]:
    """Probe the LLM server and model. 失敗しても 200 で状態を返す。"""
    llm = _llm()
    probe = getattr(llm, "test_connection", None)
    if probe is None:
        return {"status": "connected", "error": None, "checked_at": None, "llm": llm.describe()}
    state = await probe()
    return {
        "status": state.status.value,
        "error": state.error,
        "checked_at": state.checked_at,
        "llm": llm.describe(),
    }
