"""Recover a JSON object from free-form LLM output.

LLM の応答は JSON そのもの、コードフェンス付き、前後に説明文付き、
末尾カンマや制御文字が混入した「ほぼ JSON」など形がまちまちなので、
候補文字列を切り出す isolator を順番に試し、最初に成立したものを採用する。
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from ..models.entry import RecoveryStrategy


_FENCED_BLOCK = re.compile(r"```(?:json)?([\s\S]*?)```", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f]")


@dataclass(frozen=True)
class JsonRecovery:
    """Successful recovery: the strategy that isolated the object and the object itself."""

    strategy: RecoveryStrategy
    data: Dict[str, Any]
    repaired: bool = False


def _isolate_whole(text: str) -> Optional[str]:
    t = text.strip()
    if t.startswith("{") and t.endswith("}"):
        return t
    return None


def _isolate_fenced(text: str) -> Optional[str]:
    m = _FENCED_BLOCK.search(text)
    if m is None:
        return None
    return m.group(1).strip()


def _isolate_bracket(text: str) -> Optional[str]:
    """最初の `{` から最後の `}` まで。最後に現れる波括弧が `{` なら不成立。"""
    end = text.rfind("}")
    if end < 0 or text.rfind("{") > end:
        return None
    start = text.find("{")
    if start < 0:
        return None
    return text[start : end + 1]


ISOLATORS: Tuple[Tuple[RecoveryStrategy, Callable[[str], Optional[str]]], ...] = (
    (RecoveryStrategy.whole, _isolate_whole),
    (RecoveryStrategy.fenced, _isolate_fenced),
    (RecoveryStrategy.bracket, _isolate_bracket),
)


def repair_json_text(candidate: str) -> str:
    """Apply the textual repairs for common LLM JSON glitches.

    - リテラルの `\\n` を実改行に、`\\\\` を `/` に置換
    - CR を除去、タブを半角スペースに
    - `}` / `]` 直前の末尾カンマを除去
    """
    t = candidate.replace("\\n", "\n").replace("\\\\", "/")
    t = t.replace("\r", "").replace("\t", " ")
    return _TRAILING_COMMA.sub(r"\1", t)


def strip_control_chars(candidate: str) -> str:
    return _CONTROL_CHARS.sub("", candidate)


def _loads_object(candidate: str, *, strict: bool = True) -> Optional[Dict[str, Any]]:
    try:
        obj = json.loads(candidate, strict=strict)
    except (ValueError, RecursionError):
        return None
    if isinstance(obj, dict):
        return obj
    return None


def _has_modes(obj: Optional[Dict[str, Any]]) -> bool:
    return obj is not None and isinstance(obj.get("modes"), dict)


def load_candidate(candidate: str) -> Tuple[Optional[Dict[str, Any]], bool]:
    """Parse one isolated candidate, repairing it when the raw text does not parse.

    戻り値は (オブジェクト or None, 修復を適用したか)。成立条件は
    「object であり modes を持つ」こと。修復後は文字列内の生改行を許容して
    読み、それでも駄目なら制御文字をすべて除去して最後にもう一度試す。
    """
    obj = _loads_object(candidate)
    if _has_modes(obj):
        return obj, False
    repaired = repair_json_text(candidate)
    obj = _loads_object(repaired, strict=False)
    if _has_modes(obj):
        return obj, True
    obj = _loads_object(strip_control_chars(repaired))
    if _has_modes(obj):
        return obj, True
    return None, False


def recover_json(
    text: str,
    isolators: Sequence[Tuple[RecoveryStrategy, Callable[[str], Optional[str]]]] = ISOLATORS,
) -> Optional[JsonRecovery]:
    """Try each isolator in order and return the first successful recovery.

    どの isolator でも成立しなければ None（呼び出し側でヒューリスティック解析へ）。
    """
    for strategy, isolate in isolators:
        candidate = isolate(text)
        if not candidate:
            continue
        data, repaired = load_candidate(candidate)
        if data is not None:
            return JsonRecovery(strategy=strategy, data=data, repaired=repaired)
    return None
