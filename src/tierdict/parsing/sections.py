"""Heuristic extraction of entry fields from emoji-delimited prose.

JSON として復元できなかった応答を、見出し（ラベル文字列または絵文字）と
`•` 箇条書きを手掛かりに位置ベースで走査して各フィールドを拾う。
応答が `###MODE_SEPARATOR` で3モードに分かれていればそれぞれの区間を、
分かれていなければ全文を各 tier の抽出に使う。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..models.entry import (
    ElementaryTier,
    GlossedTerm,
    IntermediateTier,
    ProfessionalTier,
    TermExplanation,
)


MODE_SEPARATOR = "###MODE_SEPARATOR"

# 絵文字見出しの判定用。箇条書きの `•`(U+2022) は含めない
_EMOJI = "[\u2300-\u23ff\u2600-\u27bf\u2b00-\u2bff\U0001f000-\U0001faff]\ufe0f?"
_NEXT_HEADER = re.compile(_EMOJI + r"[^:：\n]*[:：]")
_BULLET_LINE = re.compile(r"^[ \t]*•[ \t]*(\S[^\n]*)$", re.MULTILINE)
_PAIR_LINE = re.compile(
    r"^[ \t]*•[ \t]*([^(（\n]+?)[ \t]*[(（]([^)）\n]+)[)）]", re.MULTILINE
)
_COLLOCATION_LINE = re.compile(
    r"^[ \t]*•[ \t]*([^:：\n]+?)[ \t]*[:：][ \t]*(\S[^\n]*)$", re.MULTILINE
)
_LIST_SPLIT = re.compile(r"[,，、]")
_GLOSSED = re.compile(r"^([^(（]+)[(（]([^)）]+)[)）]")


@dataclass(frozen=True)
class FieldMarker:
    """A field header: label variants plus the emoji that may stand in for them."""

    labels: Tuple[str, ...]
    emoji: str


def _label_alternation(labels: Tuple[str, ...]) -> str:
    return "|".join(re.escape(label) for label in labels)


def extract_scalar(content: str, marker: FieldMarker) -> str:
    """Rest of the header line; label match first, emoji match second."""
    if marker.labels:
        m = re.search(
            r"(?:" + _label_alternation(marker.labels) + r")[ \t]*[:：]([^\n]*)",
            content,
            re.IGNORECASE,
        )
        if m is not None:
            return m.group(1).strip()
    if marker.emoji:
        m = re.search(re.escape(marker.emoji) + r"([^\n]*)", content)
        if m is not None:
            return m.group(1).strip()
    return ""


def section_body(content: str, marker: FieldMarker) -> Optional[str]:
    """Text between a field header and the next emoji header (or the end).

    見出しが見つからなければ None。
    """
    alternatives: List[str] = []
    if marker.labels:
        alternatives.append(r"(?:" + _label_alternation(marker.labels) + r")[ \t]*[:：][^\n]*")
    if marker.emoji:
        alternatives.append(re.escape(marker.emoji) + r"[^\n]*")
    if not alternatives:
        return None
    header = re.search("|".join(alternatives), content, re.IGNORECASE)
    if header is None:
        return None
    rest = content[header.end():]
    nxt = _NEXT_HEADER.search(rest)
    end = nxt.start() if nxt is not None else len(rest)
    return rest[:end].strip()


def bullet_items(text: str) -> List[str]:
    return [m.group(1).strip() for m in _BULLET_LINE.finditer(text)]


def extract_list(content: str, marker: FieldMarker) -> List[str]:
    body = section_body(content, marker)
    if body is None:
        return []
    return bullet_items(body)


def _scope(content: str, marker: FieldMarker, bounded: bool) -> Optional[str]:
    """Region scanned for paired bullets.

    bounded=True なら当該セクションのみ。False なら見出しがどこかにあれば
    モード区間全体を走査する（隣接セクションの箇条書きも拾いうる）。
    """
    if bounded:
        return section_body(content, marker)
    if section_body(content, marker) is None:
        return None
    return content


def extract_pairs(content: str, marker: FieldMarker, *, bounded: bool = True) -> List[TermExplanation]:
    """`• term (explanation)` bullets."""
    region = _scope(content, marker, bounded)
    if region is None:
        return []
    return [
        TermExplanation(term=m.group(1).strip(), explanation=m.group(2).strip())
        for m in _PAIR_LINE.finditer(region)
    ]


def extract_collocations(content: str, marker: FieldMarker, *, bounded: bool = True) -> Dict[str, str]:
    """`• label: phrase` bullets. 同じラベルは後勝ち。"""
    region = _scope(content, marker, bounded)
    if region is None:
        return {}
    out: Dict[str, str] = {}
    for m in _COLLOCATION_LINE.finditer(region):
        out[m.group(1).strip()] = m.group(2).strip()
    return out


def extract_terms(content: str, marker: FieldMarker) -> List[str]:
    """Comma separated terms on the header line, or in the section body when the line is empty."""
    raw = extract_scalar(content, marker)
    if not raw:
        body = section_body(content, marker) or ""
        lines = [ln.strip().lstrip("•").strip() for ln in body.splitlines()]
        raw = ",".join(ln for ln in lines if ln)
    return split_terms(raw)


def split_terms(raw: str) -> List[str]:
    """Split on ASCII or full-width commas and the ideographic comma."""
    return [t.strip() for t in _LIST_SPLIT.split(raw) if t.strip()]


def split_modes(content: str, word: str) -> List[str]:
    """Split a tri-mode response into professional/intermediate/elementary segments.

    区切りが無ければ全文を3つの tier で共有する。区切りがあって3区間に
    満たない場合は見出し行だけの区間で補い、添字アクセスを常に安全にする。
    """
    if MODE_SEPARATOR not in content:
        return [content, content, content]
    segments = [part.strip() for part in content.split(MODE_SEPARATOR)]
    while len(segments) < 3:
        label = "Word" if not segments else "词汇"
        segments.append(f"📘 {label}: {word}")
    return segments[:3]


# --- tier ごとの見出し ---
PROFESSIONAL_MARKERS: Dict[str, FieldMarker] = {
    "definition": FieldMarker(("Definition",), "🧠"),
    "pronunciation": FieldMarker(("Pronunciation",), "🔊"),
    "academic_usage": FieldMarker(("Academic Usage",), "🎯"),
    "everyday_use": FieldMarker(("Everyday Use",), "💬"),
    "associated_vocabulary": FieldMarker(("Associated Academic Vocabulary", "Associated Vocabulary"), "🔗"),
    "grammar": FieldMarker(("Grammar & Usage", "Grammar"), "🧭"),
    "collocations": FieldMarker(("Collocations",), "🔄"),
    "synonyms": FieldMarker(("Synonyms",), "📝"),
    "antonyms": FieldMarker(("Antonyms",), "🚫"),
}

INTERMEDIATE_MARKERS: Dict[str, FieldMarker] = {
    "definition": FieldMarker(("定义",), "🧠"),
    "pronunciation": FieldMarker(("发音",), "🔊"),
    "academic_usage": FieldMarker(("学术用法",), "🎯"),
    "everyday_use": FieldMarker(("日常用法",), "💬"),
    "associated_vocabulary": FieldMarker(("相关学术词汇",), "🔗"),
    "grammar": FieldMarker(("语法与用法",), "🧭"),
    "collocations": FieldMarker(("常见搭配",), "🔄"),
    "synonyms": FieldMarker(("同义词",), "📝"),
}

ELEMENTARY_MARKERS: Dict[str, FieldMarker] = {
    "definition": FieldMarker(("意思",), "🧠"),
    "pronunciation": FieldMarker(("怎么读",), "🔊"),
    "usage": FieldMarker(("怎么用",), "🎯"),
    "related_words": FieldMarker(("相关词汇",), "🔗"),
    "tips": FieldMarker(("小贴士",), "🧭"),
    "similar_words": FieldMarker(("类似的词",), "📝"),
}


def extract_professional(segment: str, word: str, *, bounded: bool = True) -> ProfessionalTier:
    mk = PROFESSIONAL_MARKERS
    return ProfessionalTier(
        title=word,
        definition=extract_scalar(segment, mk["definition"]),
        pronunciation=extract_scalar(segment, mk["pronunciation"]),
        academic_usage=extract_list(segment, mk["academic_usage"]),
        everyday_use=extract_list(segment, mk["everyday_use"]),
        associated_vocabulary=extract_terms(segment, mk["associated_vocabulary"]),
        grammar=extract_list(segment, mk["grammar"]),
        collocations=extract_collocations(segment, mk["collocations"], bounded=bounded),
        synonyms=extract_pairs(segment, mk["synonyms"], bounded=bounded),
        antonyms=extract_pairs(segment, mk["antonyms"], bounded=bounded),
    )


def glossed_term(item: str) -> GlossedTerm:
    """`term (译文)` を英中ペアに分ける。括弧が無ければ訳は空。"""
    m = _GLOSSED.match(item)
    if m is None:
        return GlossedTerm(en=item, zh="")
    return GlossedTerm(en=m.group(1).strip(), zh=m.group(2).strip())


def extract_intermediate(segment: str, word: str, *, bounded: bool = True) -> IntermediateTier:
    mk = INTERMEDIATE_MARKERS
    return IntermediateTier(
        title=word,
        definition=extract_scalar(segment, mk["definition"]),
        pronunciation=extract_scalar(segment, mk["pronunciation"]),
        academic_usage=extract_list(segment, mk["academic_usage"]),
        everyday_use=extract_list(segment, mk["everyday_use"]),
        associated_vocabulary=[
            glossed_term(item) for item in extract_terms(segment, mk["associated_vocabulary"])
        ],
        grammar=extract_list(segment, mk["grammar"]),
        collocations=extract_collocations(segment, mk["collocations"], bounded=bounded),
        synonyms=extract_pairs(segment, mk["synonyms"], bounded=bounded),
    )


def extract_elementary(segment: str, word: str, *, bounded: bool = True) -> ElementaryTier:
    mk = ELEMENTARY_MARKERS
    return ElementaryTier(
        title=word,
        definition=extract_scalar(segment, mk["definition"]),
        pronunciation=extract_scalar(segment, mk["pronunciation"]),
        usage=extract_list(segment, mk["usage"]),
        related_words=extract_scalar(segment, mk["related_words"]),
        tips=extract_scalar(segment, mk["tips"]),
        similar_words=extract_pairs(segment, mk["similar_words"], bounded=bounded),
    )
