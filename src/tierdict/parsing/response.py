"""Turn the raw text an LLM returned for one word into a `VocabularyEntry`.

解析は次の順で試し、最初に成立したものを採用する。
1. 応答全体が JSON object（whole）
2. ```json フェンス内（fenced）
3. 最初の `{` から末尾側の `}` まで（bracket）
4. 絵文字/ラベル見出しのヒューリスティック抽出（heuristic, 常に成功）

1-3 は `modes` を持つ object であることが成立条件。どの段でも例外は外に出さない。
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..config import settings
from ..logging import logger
from ..models.entry import (
    ElementaryTier,
    EntryTiers,
    GlossedTerm,
    IntermediateTier,
    ProfessionalTier,
    RecoveryStrategy,
    TermExplanation,
    VocabularyEntry,
)
from .json_recovery import recover_json
from .sections import (
    extract_elementary,
    extract_intermediate,
    extract_professional,
    glossed_term,
    split_modes,
    split_terms,
)


_PREVIEW_CHARS = 80


# --- 型のゆるい正規化 ---
def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        return ", ".join(_text(v) for v in value if _text(v))
    if isinstance(value, dict):
        return ", ".join(f"{k}: {_text(v)}" for k, v in value.items())
    return str(value)


def _strings(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, dict):
        value = list(value.values())
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [s for s in (_text(v) for v in value) if s]


def _pairs(value: Any) -> List[TermExplanation]:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    out: List[TermExplanation] = []
    for item in value:
        if isinstance(item, dict):
            term = _text(item.get("word") or item.get("term") or item.get("en"))
            explanation = _text(item.get("explanation") or item.get("zh"))
        else:
            term, explanation = _text(item), ""
        if term:
            out.append(TermExplanation(term=term, explanation=explanation))
    return out


def _collocations(value: Any) -> Dict[str, str]:
    if isinstance(value, dict):
        return {str(k).strip(): _text(v) for k, v in value.items() if str(k).strip()}
    out: Dict[str, str] = {}
    for item in _strings(value):
        label, sep, phrase = item.partition(":")
        if not sep:
            label, sep, phrase = item.partition("：")
        if sep and label.strip():
            out[label.strip()] = phrase.strip()
        else:
            out[item] = ""
    return out


def _terms(value: Any) -> List[str]:
    """関連語彙。カンマ区切りの文字列は見出し解析と同じく語ごとに分ける。"""
    return [term for item in _strings(value) for term in split_terms(item)]


def _glossed(value: Any) -> List[GlossedTerm]:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    out: List[GlossedTerm] = []
    for item in value:
        if isinstance(item, dict):
            en = _text(item.get("en") or item.get("word"))
            zh = _text(item.get("zh") or item.get("explanation"))
            if en:
                out.append(GlossedTerm(en=en, zh=zh))
        else:
            out.extend(glossed_term(term) for term in split_terms(_text(item)))
    return out


def _section(modes: Dict[str, Any], name: str) -> Optional[Dict[str, Any]]:
    raw = modes.get(name)
    return raw if isinstance(raw, dict) else None


def _title(src: Dict[str, Any], word: str) -> str:
    return _text(src.get("title")) or word


def _professional(src: Optional[Dict[str, Any]], word: str) -> ProfessionalTier:
    if src is None:
        return ProfessionalTier.empty(word)
    return ProfessionalTier(
        title=_title(src, word),
        definition=_text(src.get("definition")),
        pronunciation=_text(src.get("pronunciation")),
        academic_usage=_strings(src.get("academicUsage")),
        everyday_use=_strings(src.get("everydayUse")),
        associated_vocabulary=_terms(src.get("associatedVocabulary")),
        grammar=_strings(src.get("grammar")),
        collocations=_collocations(src.get("collocations")),
        synonyms=_pairs(src.get("synonyms")),
        antonyms=_pairs(src.get("antonyms")),
    )


def _intermediate(src: Optional[Dict[str, Any]], word: str) -> IntermediateTier:
    if src is None:
        return IntermediateTier.empty(word)
    return IntermediateTier(
        title=_title(src, word),
        definition=_text(src.get("definition")),
        pronunciation=_text(src.get("pronunciation")),
        academic_usage=_strings(src.get("academicUsage")),
        everyday_use=_strings(src.get("everydayUse")),
        associated_vocabulary=_glossed(src.get("associatedVocabulary")),
        grammar=_strings(src.get("grammar")),
        collocations=_collocations(src.get("collocations")),
        synonyms=_pairs(src.get("synonyms")),
    )


def _elementary(src: Optional[Dict[str, Any]], word: str) -> ElementaryTier:
    if src is None:
        return ElementaryTier.empty(word)
    return ElementaryTier(
        title=_title(src, word),
        definition=_text(src.get("definition")),
        pronunciation=_text(src.get("pronunciation")),
        usage=_strings(src.get("usage")),
        related_words=_text(src.get("relatedWords")),
        tips=_text(src.get("tips")),
        similar_words=_pairs(src.get("similarWords")),
    )


def normalize_modes(data: Dict[str, Any], word: str) -> EntryTiers:
    """Build all three tiers from a recovered `{"modes": {...}}` object.

    欠けた tier は title のみの空 tier、欠けたフィールドは空値、
    型違いは可能な範囲で寄せる（例: 文字列のリスト→連結文字列）。
    """
    modes = data["modes"]
    return EntryTiers(
        professional=_professional(_section(modes, "professional"), word),
        intermediate=_intermediate(_section(modes, "intermediate"), word),
        elementary=_elementary(_section(modes, "elementary"), word),
    )


def parse_sections(content: str, word: str, *, bounded: Optional[bool] = None) -> EntryTiers:
    """Heuristic extraction over emoji-delimited prose. 常に3 tier を返す。"""
    if bounded is None:
        bounded = settings.heuristic_bounded_pairs
    professional, intermediate, elementary = split_modes(content, word)
    return EntryTiers(
        professional=extract_professional(professional, word, bounded=bounded),
        intermediate=extract_intermediate(intermediate, word, bounded=bounded),
        elementary=extract_elementary(elementary, word, bounded=bounded),
    )


def parse(raw_text: Optional[str], word: str) -> VocabularyEntry:
    """Recover a three-tier entry from one LLM response. Never raises.

    JSON として復元できれば正規化した結果を、できなければ見出しベースの
    抽出結果を返す。正規化中の想定外の失敗もヒューリスティックに落とす。
    """
    text = raw_text if isinstance(raw_text, str) else ""
    recovery = recover_json(text)
    if recovery is not None:
        try:
            tiers = normalize_modes(recovery.data, word)
        except Exception as exc:  # 想定外の形でも heuristic で救う
            logger.info(
                "entry_normalize_failed",
                word=word,
                strategy=recovery.strategy.value,
                error=str(exc),
            )
        else:
            logger.info(
                "entry_parse_strategy",
                word=word,
                strategy=recovery.strategy.value,
                repaired=recovery.repaired,
            )
            return VocabularyEntry(word=word, tiers=tiers, source=recovery.strategy)

    logger.info(
        "entry_parse_strategy",
        word=word,
        strategy=RecoveryStrategy.heuristic.value,
        output_chars=len(text),
        preview=text[:_PREVIEW_CHARS],
    )
    try:
        tiers = parse_sections(text, word)
    except Exception as exc:
        logger.warning("entry_heuristic_failed", word=word, error=str(exc))
        tiers = EntryTiers.empty(word)
    return VocabularyEntry(word=word, tiers=tiers, source=RecoveryStrategy.heuristic)
