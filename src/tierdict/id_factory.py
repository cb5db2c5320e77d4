"""ID 生成ユーティリティ。

描画ドキュメントのタブ/ペイン ID が同一ページ内（モーダル等）で衝突しないよう、
呼び出しごとに短いランダム hex の scope を払い出す。表示専用で永続化はしない。
"""

from __future__ import annotations

import uuid


def generate_scope_id() -> str:
    return uuid.uuid4().hex[:8]


def tab_id(prefix: str, scope_id: str) -> str:
    return f"{prefix}-tab-{scope_id}"


def pane_id(prefix: str, scope_id: str) -> str:
    return f"{prefix}-{scope_id}"
