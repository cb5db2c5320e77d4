from fastapi import APIRouter

from ..metrics import registry

router = APIRouter(tags=["health"])


@router.get("/healthz")
def health_check() -> dict[str, str]:
    """Liveness check. コンテナや監視ツールからの疎通確認用。"""
    return {"status": "ok"}


@router.get("/metrics")
def metrics() -> dict[str, object]:
    """In-process request latency (p95), error/timeout counts and parse strategy counts."""
    return registry.snapshot()
