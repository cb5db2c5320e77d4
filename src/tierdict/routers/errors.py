from fastapi import HTTPException

from ..logging import logger
from ..models.common import ErrorDetail
from ..providers.llm import LLMQueryError


def llm_http_error(exc: LLMQueryError, **context: object) -> HTTPException:
    """Map an `LLMQueryError` to an HTTP error. タイムアウトは 504、それ以外は 502。"""
    status = 504 if exc.reason_code == "TIMEOUT" else 502
    logger.warning("llm_http_error", status=status, reason_code=exc.reason_code, error=str(exc), **context)
    detail = ErrorDetail(message=str(exc), reason_code=exc.reason_code, diagnostics=exc.diagnostics or None)
    return HTTPException(status_code=status, detail=detail.model_dump())
