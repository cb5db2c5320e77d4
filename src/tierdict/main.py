import time

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware

from .config import settings
from .dictionaries import service
from .logging import configure_logging, logger
from .metrics import registry
from .middleware import RequestIDMiddleware
from .routers import config as cfg, dictionary, health, text, word

configure_logging()
app = FastAPI(title="tierdict API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_cors_origins),
    allow_credentials="*" not in settings.allowed_cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def access_log_and_metrics(request: Request, call_next):
    start = time.time()
    path = request.url.path
    method = request.method
    is_error = False
    is_timeout = False
    status_code = None
    try:
        response = await call_next(request)
        status_code = response.status_code
        is_error = status_code >= 500
        is_timeout = status_code == 504
        return response
    except Exception:
        is_error = True
        raise
    finally:
        latency_ms = (time.time() - start) * 1000
        registry.record(path, latency_ms, is_error=is_error, is_timeout=is_timeout)
        logger.info(
            "request_complete",
            path=path,
            method=method,
            status_code=status_code,
            latency_ms=round(latency_ms, 2),
            is_error=is_error,
            is_timeout=is_timeout,
        )


# 最後に追加したものが最外層。request_id を access log より先に束縛する
app.add_middleware(RequestIDMiddleware)

app.include_router(health.router)  # ヘルスチェック / メトリクス
app.include_router(cfg.router, prefix="/api")  # 実行時設定・接続テスト
app.include_router(text.router, prefix="/api/text")  # 候補抽出・一括生成
app.include_router(word.router, prefix="/api/word")  # 1語の解析・描画・生成
app.include_router(dictionary.router, prefix="/api/dictionaries")  # 辞書管理


@app.on_event("startup")
async def _on_startup() -> None:
    # 既定辞書の作成と現在の辞書ポインタの補正
    service.initialize()
