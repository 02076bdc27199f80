import json

import pytest

from repairkit.config import JSONRulesConfig
from repairkit.models import ErrorKind, FixOptions
from repairkit.services.json_service import JSONRepairEngine


def test_trailing_comma_is_removed(json_engine):
    result = json_engine.fix('{"a": "b", "c": 1,}')

    assert result.success
    assert result.fixed_text == '{"a": "b", "c": 1}'
    assert result.parsed_value == {"a": "b", "c": 1}
    assert "Removed trailing commas" in result.applied_fixes
    assert result.method == "rules"


def test_validate_reports_trailing_comma_on_line_one(json_engine):
    report = json_engine.validate('{"a": 1,}')

    assert not report.valid
    trailing = [issue for issue in report.issues if issue.issue_type == "trailing_comma"]
    assert len(trailing) == 1
    assert trailing[0].line == 1
    assert any(issue.issue_type == ErrorKind.PARSE_ERROR.value for issue in report.issues)


def test_validate_valid_json(json_engine):
    report = json_engine.validate('{"a": [1, 2]}')

    assert report.valid
    assert report.issues == []
    assert report.parsed_value == {"a": [1, 2]}


def test_validate_ignores_comment_markers_inside_strings(json_engine):
    report = json_engine.validate('{"url": "https://example.com", "note": "it\'s"}')

    assert report.valid
    assert report.issues == []


def test_url_is_preserved(json_engine):
    text = '{"url": "https://example.com/path?q=1"}'
    result = json_engine.fix(text)

    assert result.success
    assert result.fixed_text == text
    assert result.applied_fixes == []


def test_valid_payload_with_escapes_is_not_corrupted(json_engine):
    text = '{"path": "C:\\\\b\\\\new", "tab": "a\\tb", "quote": "say \\"hi\\""}'
    result = json_engine.fix(text)

    assert result.success
    assert result.fixed_text == text
    assert result.parsed_value == json.loads(text)


def test_strictly_valid_input_round_trips(json_engine):
    value = {"name": "x", "items": [1, 2.5, None, True], "nested": {"k": "v"}}
    text = json.dumps(value)
    result = json_engine.fix(text)

    assert result.success
    assert result.parsed_value == value
    assert result.applied_fixes == []


def test_single_quotes_and_unquoted_keys(json_engine):
    result = json_engine.fix("{'name': 'Bob', age: 30}")

    assert result.success
    assert result.parsed_value == {"name": "Bob", "age": 30}
    assert "Converted single quotes to double quotes" in result.applied_fixes
    assert "Quoted unquoted keys" in result.applied_fixes


def test_apostrophe_inside_double_quoted_string_is_kept(json_engine):
    result = json_engine.fix('{"msg": "it\'s fine", "n": 1,}')

    assert result.success
    assert result.parsed_value == {"msg": "it's fine", "n": 1}


def test_comments_are_removed_outside_strings(json_engine):
    text = '{\n  // the id\n  "id": 1, /* inline */ "url": "http://a.b/c"\n}'
    result = json_engine.fix(text)

    assert result.success
    assert result.parsed_value == {"id": 1, "url": "http://a.b/c"}
    assert "Removed comments" in result.applied_fixes


def test_unclosed_string_at_line_end(json_engine):
    result = json_engine.fix('{\n  "a": "hello\n}')

    assert result.success
    assert result.parsed_value == {"a": "hello"}
    assert "Closed unterminated strings" in result.applied_fixes


def test_unclosed_string_at_end_of_input(json_engine):
    result = json_engine.fix('{"a": "hello')

    assert result.success
    assert result.parsed_value == {"a": "hello"}
    assert "Closed unterminated strings" in result.applied_fixes
    assert "Added 1 missing closing brace(s)" in result.applied_fixes


def test_long_unclosed_string_closes_before_structural_character():
    engine = JSONRepairEngine(rules_config=JSONRulesConfig(unclosed_string_threshold=5))
    result = engine.fix('{"a": "abcdefgh,\n"b": 1}')

    # Heuristic: past the threshold the string is cut at the first comma
    assert result.success
    assert result.parsed_value == {"a": "abcdefgh", "b": 1}


def test_short_unclosed_string_closes_at_line_end(json_engine):
    result = json_engine.fix('{"a": "abcdefgh,\n"b": 1}')

    assert result.success
    assert result.parsed_value == {"a": "abcdefgh,", "b": 1}


def test_missing_commas_between_values(json_engine):
    result = json_engine.fix('{"a": 1 "b": true "c": [1 2] "d": {"e": null} "f": "g"}')

    assert "Added missing commas" in result.applied_fixes
    assert '"a": 1, "b": true, "c"' in result.fixed_text
    assert '{"e": null}, "f"' in result.fixed_text


def test_missing_comma_between_objects_in_array(json_engine):
    result = json_engine.fix('[{"a": 1} {"b": 2}]')

    assert result.success
    assert result.parsed_value == [{"a": 1}, {"b": 2}]


def test_missing_closers_are_appended_in_stack_order(json_engine):
    result = json_engine.fix('{"a": [1, 2, {"b": 3}')

    assert result.success
    assert result.fixed_text == '{"a": [1, 2, {"b": 3}]}'
    assert "Added 1 missing closing brace(s)" in result.applied_fixes
    assert "Added 1 missing closing bracket(s)" in result.applied_fixes


def test_dangling_comma_before_appended_closer(json_engine):
    result = json_engine.fix('{"a": 1,')

    assert result.success
    assert result.parsed_value == {"a": 1}


def test_repeated_dangling_commas_before_appended_closer(json_engine):
    result = json_engine.fix("[1, 2,,")

    assert result.success
    assert result.fixed_text == "[1, 2]"
    assert result.applied_fixes == ["Added 1 missing closing bracket(s)"]


def test_single_quotes_after_unterminated_string_are_converted(json_engine):
    result = json_engine.fix('{"a": "hello\n, \'b\': 1}')

    assert result.success
    assert result.fixed_text == '{"a": "hello"\n, "b": 1}'
    assert result.parsed_value == {"a": "hello", "b": 1}
    assert "Converted single quotes to double quotes" in result.applied_fixes
    assert "Closed unterminated strings" in result.applied_fixes


def test_missing_opening_brace(json_engine):
    result = json_engine.fix('"a": 1, "b": 2}')

    assert result.success
    assert result.parsed_value == {"a": 1, "b": 2}
    assert "Added missing opening brace" in result.applied_fixes


def test_leading_zeros(json_engine):
    result = json_engine.fix('{"a": 007, "b": [01, -02], "c": 0.5}')

    assert result.success
    assert result.parsed_value == {"a": 7, "b": [1, -2], "c": 0.5}
    assert "Removed leading zeros from numbers" in result.applied_fixes


def test_invalid_backslashes_are_escaped(json_engine):
    result = json_engine.fix('{"path": "C:\\data\\n"}')

    assert result.success
    assert result.parsed_value == {"path": "C:\\data\n"}
    assert "Escaped invalid backslashes" in result.applied_fixes


def test_non_json_literals_become_null(json_engine):
    result = json_engine.fix('{"a": NaN, "b": -Infinity, "c": undefined, "d": "NaN"}')

    assert result.success
    assert result.parsed_value == {"a": None, "b": None, "c": None, "d": "NaN"}
    assert "Replaced non-JSON literals with null" in result.applied_fixes


def test_strict_parse_rejects_nan(json_engine):
    result = json_engine.parse('{"a": NaN}')

    assert not result.success
    assert result.errors[0].kind == ErrorKind.PARSE_ERROR


@pytest.mark.parametrize(
    "text",
    [
        '{"a": "b", "c": 1,}',
        "{'name': 'Bob', age: 30, // note\n}",
        '{"a": [1, 2, {"b": 3}',
        '{"a": 007, "b": NaN}',
        '{"a": "hello\n, \'b\': 1}',
        "[1, 2,,",
    ],
)
def test_fix_is_idempotent(json_engine, text):
    first = json_engine.fix(text)
    second = json_engine.fix(first.fixed_text)

    assert first.success
    assert second.fixed_text == first.fixed_text
    assert second.applied_fixes == []


def test_unrepairable_input_reports_fallback_possible(json_engine):
    result = json_engine.fix('{"a": 1 2}')

    assert not result.success
    assert result.can_try_ai
    assert result.errors[0].kind == ErrorKind.PARSE_ERROR
    assert result.errors[0].position is not None


def test_use_ai_without_generator_keeps_rule_result(json_engine):
    result = json_engine.fix('{"a": 1 2}', FixOptions(use_ai=True))

    assert not result.success
    assert result.method == "rules"


def test_parse_reports_position_and_line(json_engine):
    result = json_engine.parse('{\n"a": }')

    assert not result.success
    assert result.errors[0].line == 2
    assert result.errors[0].position == 7


def test_error_context(json_engine):
    context = json_engine.get_error_context("0123456789", 5, context_size=3)

    assert context.before == "234"
    assert context.error == "5"
    assert context.after == "67"
    assert json_engine.get_error_context("abc", None) is None


def test_prettify(json_engine):
    assert json_engine.prettify('{"a":1,"b":[true]}') == '{\n  "a": 1,\n  "b": [\n    true\n  ]\n}'


def test_prettify_repairs_first(json_engine):
    assert json_engine.prettify("{'a': 'é',}", indent=4) == '{\n    "a": "é"\n}'


def test_prettify_raises_when_unrepairable(json_engine):
    with pytest.raises(json.JSONDecodeError):
        json_engine.prettify('{"a": 1 2}')
