from tierdict.models.entry import (
    EntryTiers,
    GlossedTerm,
    IntermediateTier,
    ProfessionalTier,
    TermExplanation,
    Tier,
    VocabularyEntry,
)
from tierdict.rendering import (
    NO_DEFINITION,
    SectionKind,
    render,
    render_html,
)


def _entry() -> VocabularyEntry:
    tiers = EntryTiers.empty("nexus").model_copy(
        update={
            "professional": ProfessionalTier(
                title="nexus",
                definition="A connection.",
                associated_vocabulary=["link", "hub"],
                collocations={"adj + noun": "causal nexus"},
                synonyms=[
                    TermExplanation(term="link", explanation="connection"),
                    TermExplanation(term="tie"),
                ],
            ),
            "intermediate": IntermediateTier(
                title="nexus",
                associated_vocabulary=[GlossedTerm(en="link", zh="联系"), GlossedTerm(en="hub")],
            ),
        }
    )
    return VocabularyEntry(word="nexus", tiers=tiers)


def _section(tab, heading):
    return next(s for s in tab.sections if s.heading == heading)


def test_three_tabs_in_fixed_order_with_first_active():
    doc = render(_entry(), scope_id="abcd1234")
    assert [t.tier for t in doc.tabs] == [Tier.professional, Tier.intermediate, Tier.elementary]
    assert [t.label for t in doc.tabs] == ["专业英文", "中文解说", "儿童启蒙"]
    assert [t.active for t in doc.tabs] == [True, False, False]
    assert doc.tabs[0].tab_id == "prof-tab-abcd1234"
    assert doc.tabs[0].pane_id == "prof-abcd1234"
    assert doc.tabs[2].pane_id == "elem-abcd1234"


def test_each_render_gets_its_own_scope():
    entry = _entry()
    first, second = render(entry), render(entry)
    assert first.scope_id != second.scope_id
    assert first.tabs[1].tab_id != second.tabs[1].tab_id


def test_section_values_are_formatted_per_kind():
    prof, inter, elem = render(_entry()).tabs
    assert _section(prof, "🧠 Definition").text == "A connection."
    assert _section(prof, "🔗 Associated Academic Vocabulary").text == "link, hub"
    assert _section(prof, "🔄 Collocations").items == ["adj + noun: causal nexus"]
    assert _section(prof, "📝 Synonyms").items == ["link (connection)", "tie"]
    assert _section(prof, "🚫 Antonyms").kind is SectionKind.list
    assert _section(prof, "🚫 Antonyms").items == []
    assert _section(inter, "🔗 相关学术词汇").text == "link (联系), hub"
    assert _section(elem, "📘 词汇").text == "nexus"


def test_missing_definition_uses_placeholder():
    doc = render(VocabularyEntry.empty("void"))
    for tab in doc.tabs:
        definition = tab.sections[1]
        assert definition.kind is SectionKind.text
        assert definition.text == NO_DEFINITION


def test_html_escapes_values_and_marks_active_pane():
    entry = VocabularyEntry(
        word="x",
        tiers=EntryTiers.empty("x").model_copy(
            update={"professional": ProfessionalTier(title="x", definition="<script>alert(1)</script>")}
        ),
    )
    html = render_html(render(entry, scope_id="s1"))
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert 'id="prof-tab-s1"' in html
    assert 'class="tab-pane fade show active" id="prof-s1"' in html
    assert 'class="tab-pane fade" id="inter-s1"' in html
