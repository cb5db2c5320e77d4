import json
import time

from tierdict.models.entry import RecoveryStrategy
from tierdict.parsing.json_recovery import (
    load_candidate,
    recover_json,
    repair_json_text,
)


_PAYLOAD = {"modes": {"professional": {"definition": "to meet"}}}


def test_whole_response_is_recovered_without_repair():
    result = recover_json("  " + json.dumps(_PAYLOAD) + "\n")
    assert result is not None
    assert result.strategy is RecoveryStrategy.whole
    assert result.repaired is False
    assert result.data == _PAYLOAD


def test_fenced_block_wins_over_surrounding_noise():
    text = (
        "Here is the entry you asked for:\n"
        "```json\n" + json.dumps(_PAYLOAD, ensure_ascii=False) + "\n```\n"
        "Let me know if you need {anything} else."
    )
    result = recover_json(text)
    assert result is not None
    assert result.strategy is RecoveryStrategy.fenced
    assert result.data == _PAYLOAD


def test_untagged_fence_is_accepted():
    text = "```\n" + json.dumps(_PAYLOAD) + "\n```"
    result = recover_json(text)
    assert result is not None
    assert result.strategy is RecoveryStrategy.fenced


def test_bracket_scan_isolates_object_inside_prose():
    text = "Sure! " + json.dumps(_PAYLOAD) + " Hope this helps."
    result = recover_json(text)
    assert result is not None
    assert result.strategy is RecoveryStrategy.bracket
    assert result.data == _PAYLOAD


def test_trailing_commas_are_repaired():
    text = '{"modes": {"professional": {"definition": "d", "grammar": ["a", "b",],},}}'
    result = recover_json(text)
    assert result is not None
    assert result.strategy is RecoveryStrategy.whole
    assert result.repaired is True
    assert result.data["modes"]["professional"]["grammar"] == ["a", "b"]


def test_stray_control_character_inside_string_is_tolerated():
    text = '{"modes": {"professional": {"definition": "d\x0b1"}}}'
    result = recover_json(text)
    assert result is not None
    assert result.repaired is True
    assert result.data["modes"]["professional"]["definition"].startswith("d")


def test_control_character_outside_strings_is_stripped():
    obj, repaired = load_candidate('{"modes":\x01 {"elementary": {"tips": "t"}}}')
    assert repaired is True
    assert obj == {"modes": {"elementary": {"tips": "t"}}}


def test_object_without_modes_is_rejected():
    assert recover_json('{"word": "converge", "definition": "x"}') is None
    assert recover_json('{"modes": ["not", "an", "object"]}') is None


def test_non_object_json_is_rejected():
    assert recover_json("[1, 2, 3]") is None
    assert recover_json('"just a string"') is None


def test_brace_free_and_empty_text_yield_nothing():
    assert recover_json("") is None
    assert recover_json("🧠 Definition: no braces here") is None


def test_deeply_nested_input_does_not_raise():
    depth = 50_000
    text = '{"modes": ' + "[" * depth + "]" * depth + "}"
    assert recover_json(text) is None
    assert recover_json("{" * 2000) is None


def test_repair_rewrites_literal_escapes():
    repaired = repair_json_text('{"a": "x\\\\y",\r\n\t"b": [1,]}')
    assert "\r" not in repaired
    assert "\t" not in repaired
    assert "x/y" in repaired
    assert json.loads(repaired) == {"a": "x/y", "b": [1]}


def test_bracket_scan_spans_first_open_to_last_close():
    text = "note } " + json.dumps(_PAYLOAD) + " end }"
    assert recover_json(text) is None
    text = "prefix " + json.dumps(_PAYLOAD) + " suffix"
    assert recover_json(text).data == _PAYLOAD


def test_bracket_scan_requires_the_last_brace_to_close():
    assert recover_json("Sure! " + json.dumps(_PAYLOAD) + " and {") is None


def test_unbalanced_brace_runs_are_scanned_in_linear_time():
    text = "{}" * 20000 + "{"
    started = time.perf_counter()
    assert recover_json(text) is None
    assert time.perf_counter() - started < 1.0
