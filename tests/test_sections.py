from tierdict.parsing.sections import (
    MODE_SEPARATOR,
    PROFESSIONAL_MARKERS,
    FieldMarker,
    extract_collocations,
    extract_list,
    extract_pairs,
    extract_scalar,
    extract_terms,
    section_body,
    split_modes,
)


SEGMENT = """📘 Word: nexus
🧠 Definition: A connection or series of connections.
🎯 Academic Usage:
• The nexus between policy and practice.
  • indented bullets count too
💬 Everyday Use:
• The café is the nexus of the village.
🔗 Associated Academic Vocabulary:
• linkage
• junction、hub
🔄 Collocations:
• adj + noun: causal nexus
• adj + noun: central nexus
• dangling label:
📝 Synonyms:
• link （connection）
• hub(centre)
🚫 Antonyms:
• separation (division)
"""


def test_split_modes_without_separator_shares_the_text():
    assert split_modes("plain", "w") == ["plain", "plain", "plain"]


def test_split_modes_pads_missing_segments():
    segments = split_modes(f"one{MODE_SEPARATOR}two", "w")
    assert segments == ["one", "two", "📘 词汇: w"]


def test_split_modes_drops_extra_segments():
    raw = MODE_SEPARATOR.join(["a", "b", "c", "d"])
    assert split_modes(raw, "w") == ["a", "b", "c"]


def test_scalar_prefers_label_and_falls_back_to_emoji():
    assert extract_scalar(SEGMENT, PROFESSIONAL_MARKERS["definition"]) == "A connection or series of connections."
    marker = FieldMarker(("Nonexistent",), "🧠")
    assert extract_scalar(SEGMENT, marker) == "Definition: A connection or series of connections."
    assert extract_scalar(SEGMENT, FieldMarker((), "")) == ""


def test_label_match_is_case_insensitive():
    assert extract_scalar("definition: lower", PROFESSIONAL_MARKERS["definition"]) == "lower"


def test_section_body_stops_at_next_emoji_header():
    body = section_body(SEGMENT, PROFESSIONAL_MARKERS["everyday_use"])
    assert body == "• The café is the nexus of the village."
    assert section_body(SEGMENT, FieldMarker(("Missing",), "")) is None


def test_bullet_lists_keep_order():
    items = extract_list(SEGMENT, PROFESSIONAL_MARKERS["academic_usage"])
    assert items == ["The nexus between policy and practice.", "indented bullets count too"]
    assert extract_list(SEGMENT, FieldMarker(("Missing",), "")) == []


def test_terms_fall_back_to_body_lines():
    terms = extract_terms(SEGMENT, PROFESSIONAL_MARKERS["associated_vocabulary"])
    assert terms == ["linkage", "junction", "hub"]


def test_collocations_need_a_value_and_later_labels_win():
    result = extract_collocations(SEGMENT, PROFESSIONAL_MARKERS["collocations"])
    assert result == {"adj + noun": "central nexus"}


def test_pairs_accept_full_width_parentheses():
    pairs = extract_pairs(SEGMENT, PROFESSIONAL_MARKERS["synonyms"])
    assert [(p.term, p.explanation) for p in pairs] == [("link", "connection"), ("hub", "centre")]


def test_bounded_pairs_ignore_neighbouring_sections():
    bounded = extract_pairs(SEGMENT, PROFESSIONAL_MARKERS["antonyms"])
    unbounded = extract_pairs(SEGMENT, PROFESSIONAL_MARKERS["antonyms"], bounded=False)
    assert [p.term for p in bounded] == ["separation"]
    assert [p.term for p in unbounded] == ["link", "hub", "separation"]


def test_pairs_require_the_header_even_when_unbounded():
    text = "• orphan (no header above)"
    assert extract_pairs(text, PROFESSIONAL_MARKERS["synonyms"], bounded=False) == []
