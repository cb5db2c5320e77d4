from __future__ import annotations

import uuid
from typing import Awaitable, Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from structlog import contextvars as structlog_contextvars


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign a request ID and bind it to the structlog context.

    - 受信ヘッダ `X-Request-ID` があればそれを使い、無ければ採番する
    - `request.state.request_id` に保持し、応答ヘッダにも付与する
    - リクエスト中のログには request_id が自動で付く（merge_contextvars）
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        structlog_contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog_contextvars.unbind_contextvars("request_id")
        response.headers["X-Request-ID"] = request_id
        return response
