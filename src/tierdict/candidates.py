"""Pick study-worthy vocabulary candidates out of free text.

手順:
1. 単語文字・空白・ハイフン・アポストロフィ以外を空白に置換して小文字化
2. 空白で分割し、1文字以下を除外
3. 頻出機能語（ストップリスト）を除外
4. 何も除外されず 50 語未満なら「単語リスト入力」とみなし、出現順で重複除去して返す
5. それ以外は頻度降順。10 語を超えれば上位を LLM に精選させ、失敗時は上位 N 語を返す
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Any, List, Optional, Sequence

from .config import settings
from .logging import logger
from .prompts import refine_prompt


STOPWORDS = frozenset(
    """
    the and a to of in is it that you was for on are with as have be this at
    from or had by but not what all were when we there can an your which their said if do
    will each about how up out them then she many some so these would other into has more her two
    like him see time could no make than first been its who now people my made over did down only
    way find use may water long little very after words called just where most know get through back much go
    good new write our me man too any day same right look think also around another came come work three
    must because does part even place well such here take why help put different away again off went old number
    great tell men say small every found still between name should home big give air line set own under read
    last never us left end along while might next sound below saw something thought both few those having near ask
    """.split()
)

# 単語文字・空白・ハイフン・アポストロフィ以外
_NON_WORD = re.compile(r"[^\w\s\-']")
_REFINED_TOKEN = re.compile(r"[a-z\-']+")
_WORD_LIST_MAX = 50
_REFINE_THRESHOLD = 10


def tokenize(text: str) -> List[str]:
    cleaned = _NON_WORD.sub(" ", text or "").lower()
    return [t for t in cleaned.split() if len(t) > 1]


def _dedupe(tokens: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(tokens))


def rank_by_frequency(tokens: Sequence[str]) -> List[str]:
    """Distinct tokens by descending count; 同数は初出順（Counter は挿入順を保持）。"""
    counts = Counter(tokens)
    return sorted(counts, key=lambda t: -counts[t])


def parse_refined(answer: str) -> List[str]:
    picked: List[str] = []
    for raw in (answer or "").split(","):
        token = raw.strip().lower()
        if len(token) > 1 and _REFINED_TOKEN.fullmatch(token):
            picked.append(token)
    return _dedupe(picked)


async def refine_candidates(words: Sequence[str], llm: Any) -> List[str]:
    """Let the LLM keep only academic words. 失敗・空応答・有効語ゼロは上位 N 語に戻す。"""
    fallback = list(words[: settings.candidate_fallback_limit])
    try:
        answer = await llm.query(refine_prompt(words))
    except Exception as exc:
        logger.info(
            "candidates_refine_failed",
            reason_code=getattr(exc, "reason_code", type(exc).__name__),
            error=str(exc),
        )
        return fallback
    picked = parse_refined(answer)
    if not picked:
        logger.info("candidates_refine_empty", answer_chars=len(answer or ""))
        return fallback
    logger.info("candidates_refined", offered=len(words), picked=len(picked))
    return picked


async def extract_candidates(text: Optional[str], llm: Any = None) -> List[str]:
    """Extract ranked, deduplicated candidate words from ``text``.

    llm が None の場合は精選を行わず、頻度上位 N 語を返す。空入力は空リスト。
    """
    tokens = tokenize(text or "")
    kept = [t for t in tokens if t not in STOPWORDS]

    if len(kept) == len(tokens) and len(tokens) < _WORD_LIST_MAX:
        return _dedupe(tokens)

    ranked = rank_by_frequency(kept)
    if len(ranked) <= _REFINE_THRESHOLD:
        return ranked
    if llm is None:
        return ranked[: settings.candidate_fallback_limit]
    return await refine_candidates(ranked[: settings.candidate_refine_limit], llm)
