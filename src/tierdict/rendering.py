"""Render a `VocabularyEntry` into a tabbed, presentation-ready document.

3タブ（专业英文 / 中文解说 / 儿童启蒙）それぞれに、元の見出し文字列の順で
セクションを並べる。テキスト系セクションは常に文字列、リスト系は常にリスト。
`render` は scope_id を除き純関数で、`render_html` はブラウザ向けに
エスケープ済み HTML を組み立てる。
"""

from __future__ import annotations

from enum import Enum
from html import escape
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .id_factory import generate_scope_id, pane_id, tab_id
from .models.entry import (
    ElementaryTier,
    GlossedTerm,
    IntermediateTier,
    ProfessionalTier,
    TermExplanation,
    Tier,
    VocabularyEntry,
)


NO_DEFINITION = "无定义"


class SectionKind(str, Enum):
    text = "text"
    list = "list"


class RenderedSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    heading: str
    kind: SectionKind
    text: str = ""
    items: List[str] = Field(default_factory=list)


class RenderedTab(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier: Tier
    label: str
    tab_id: str
    pane_id: str
    active: bool = False
    sections: List[RenderedSection] = Field(default_factory=list)


class RenderedDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    word: str
    scope_id: str
    tabs: List[RenderedTab]


# tier → (タブ表示名, id 接頭辞)
TAB_LABELS: Dict[Tier, tuple[str, str]] = {
    Tier.professional: ("专业英文", "prof"),
    Tier.intermediate: ("中文解说", "inter"),
    Tier.elementary: ("儿童启蒙", "elem"),
}


def _text(heading: str, value: str) -> RenderedSection:
    return RenderedSection(heading=heading, kind=SectionKind.text, text=value)


def _list(heading: str, items: Sequence[str]) -> RenderedSection:
    return RenderedSection(heading=heading, kind=SectionKind.list, items=list(items))


def _pair(item: TermExplanation) -> str:
    return f"{item.term} ({item.explanation})" if item.explanation else item.term


def _glossed(item: GlossedTerm) -> str:
    return f"{item.en} ({item.zh})" if item.zh else item.en


def _collocations(mapping: Dict[str, str]) -> List[str]:
    return [f"{label}: {phrase}" if phrase else label for label, phrase in mapping.items()]


def professional_sections(tier: ProfessionalTier, word: str) -> List[RenderedSection]:
    return [
        _text("📘 Word", tier.title or word),
        _text("🧠 Definition", tier.definition or NO_DEFINITION),
        _text("🔊 Pronunciation", tier.pronunciation),
        _list("🎯 Academic Usage", tier.academic_usage),
        _list("💬 Everyday Use", tier.everyday_use),
        _text("🔗 Associated Academic Vocabulary", ", ".join(tier.associated_vocabulary)),
        _list("🧭 Grammar & Usage", tier.grammar),
        _list("🔄 Collocations", _collocations(tier.collocations)),
        _list("📝 Synonyms", [_pair(s) for s in tier.synonyms]),
        _list("🚫 Antonyms", [_pair(a) for a in tier.antonyms]),
    ]


def intermediate_sections(tier: IntermediateTier, word: str) -> List[RenderedSection]:
    return [
        _text("📘 词汇", tier.title or word),
        _text("🧠 定义", tier.definition or NO_DEFINITION),
        _text("🔊 发音", tier.pronunciation),
        _list("🎯 学术用法", tier.academic_usage),
        _list("💬 日常用法", tier.everyday_use),
        _text("🔗 相关学术词汇", ", ".join(_glossed(g) for g in tier.associated_vocabulary)),
        _list("🧭 语法与用法", tier.grammar),
        _list("🔄 常见搭配", _collocations(tier.collocations)),
        _list("📝 同义词", [_pair(s) for s in tier.synonyms]),
    ]


def elementary_sections(tier: ElementaryTier, word: str) -> List[RenderedSection]:
    return [
        _text("📘 词汇", tier.title or word),
        _text("🧠 意思", tier.definition or NO_DEFINITION),
        _text("🔊 怎么读", tier.pronunciation),
        _list("🎯 怎么用", tier.usage),
        _text("🔗 相关词汇", tier.related_words),
        _text("🧭 小贴士", tier.tips),
        _list("📝 类似的词", [_pair(s) for s in tier.similar_words]),
    ]


def render(entry: VocabularyEntry, *, scope_id: Optional[str] = None) -> RenderedDocument:
    """Build the tabbed document for one entry. 先頭タブ（专业英文）が active。"""
    scope = scope_id or generate_scope_id()
    word = entry.word
    bodies = {
        Tier.professional: professional_sections(entry.tiers.professional, word),
        Tier.intermediate: intermediate_sections(entry.tiers.intermediate, word),
        Tier.elementary: elementary_sections(entry.tiers.elementary, word),
    }
    tabs: List[RenderedTab] = []
    for index, (tier, sections) in enumerate(bodies.items()):
        label, prefix = TAB_LABELS[tier]
        tabs.append(
            RenderedTab(
                tier=tier,
                label=label,
                tab_id=tab_id(prefix, scope),
                pane_id=pane_id(prefix, scope),
                active=index == 0,
                sections=sections,
            )
        )
    return RenderedDocument(word=word, scope_id=scope, tabs=tabs)


def _section_html(section: RenderedSection) -> str:
    heading = escape(section.heading)
    if section.kind is SectionKind.list:
        items = "".join(f"<li>{escape(item)}</li>" for item in section.items)
        return f'<div class="section-title">{heading}:</div><ul>{items}</ul>'
    return f'<div class="section-title">{heading}:</div><p>{escape(section.text)}</p>'


def render_html(document: RenderedDocument) -> str:
    """Bootstrap 互換のタブ構造。値はすべて HTML エスケープする。"""
    nav: List[str] = []
    panes: List[str] = []
    for tab in document.tabs:
        active = " active" if tab.active else ""
        nav.append(
            '<li class="nav-item" role="presentation">'
            f'<button class="nav-link{active}" id="{tab.tab_id}" data-bs-toggle="tab" '
            f'data-bs-target="#{tab.pane_id}" type="button" role="tab">{escape(tab.label)}</button>'
            "</li>"
        )
        body = "".join(_section_html(s) for s in tab.sections)
        show = " show active" if tab.active else ""
        panes.append(
            f'<div class="tab-pane fade{show}" id="{tab.pane_id}" role="tabpanel">'
            f'<div class="content-section">{body}</div></div>'
        )
    return (
        '<div class="word-tabs">'
        f'<ul class="nav nav-tabs" role="tablist">{"".join(nav)}</ul>'
        f'<div class="tab-content">{"".join(panes)}</div>'
        "</div>"
    )
