from xml.parsers.expat import ExpatError

import pytest

from repairkit.config import XMLRulesConfig
from repairkit.models import ErrorKind
from repairkit.services.xml_service import XMLRepairEngine

DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'


def test_unclosed_tag_is_closed_before_parent_closer(xml_engine):
    result = xml_engine.fix("<root><item>v</root>")

    assert result.success
    assert "<item>v</item></root>" in result.fixed_text
    unclosed = [fix for fix in result.applied_fixes if "unclosed tag" in fix]
    assert unclosed == ["Fixed 1 unclosed tag(s): item"]


def test_typo_in_closing_tag_is_corrected(xml_engine):
    result = xml_engine.fix("<product>v</product1>")

    assert result.success
    assert "</product>" in result.fixed_text
    assert "</product1>" not in result.fixed_text
    mismatched = [fix for fix in result.applied_fixes if fix.startswith("Fixed mismatched tag")]
    assert mismatched == ["Fixed mismatched tag: </product1> -> </product>"]


def test_multiple_roots_are_rejected_without_synthetic_root(xml_engine):
    text = "<item>1</item><item>2</item>"
    result = xml_engine.fix(text)

    assert not result.success
    assert result.can_try_ai
    assert result.fixed_text == text
    assert result.errors[0].kind == ErrorKind.MULTIPLE_ROOTS


def test_plural_closing_tag_is_not_merged(xml_engine):
    result = xml_engine.fix("<items><item>a</items>")

    assert result.success
    assert "<item>a</item></items>" in result.fixed_text
    assert not any(fix.startswith("Fixed mismatched tag") for fix in result.applied_fixes)


def test_declaration_is_added_once(xml_engine):
    result = xml_engine.fix("<root/>")

    assert result.success
    assert result.fixed_text == DECLARATION + "\n<root/>"
    assert result.applied_fixes == ["Added XML declaration"]


def test_stylesheet_instruction_is_not_a_declaration(xml_engine):
    text = '<?xml-stylesheet href="s.xsl"?><root/>'
    result = xml_engine.fix(text)

    assert result.success
    assert result.fixed_text == DECLARATION + "\n" + text
    assert result.applied_fixes == ["Added XML declaration"]


def test_validate_flags_stylesheet_only_prolog(xml_engine):
    report = xml_engine.validate('<?xml-stylesheet href="s.xsl"?><root/>')

    assert "missing_declaration" in [issue.issue_type for issue in report.issues]


def test_whitespace_before_declaration_is_removed(xml_engine):
    result = xml_engine.fix("  \n" + DECLARATION + "<root/>")

    assert result.success
    assert result.fixed_text == DECLARATION + "<root/>"
    assert result.applied_fixes == ["Removed whitespace before XML declaration"]


def test_custom_declaration():
    engine = XMLRepairEngine(rules_config=XMLRulesConfig(declaration='<?xml version="1.0"?>'))
    result = engine.fix("<root/>")

    assert result.fixed_text.startswith('<?xml version="1.0"?>\n')


def test_valid_document_is_untouched(xml_engine):
    text = DECLARATION + '\n<root a="1"><!-- <fake> --><![CDATA[<b> & </c>]]><child>x &amp; y</child></root>'
    result = xml_engine.fix(text)

    assert result.success
    assert result.fixed_text == text
    assert result.applied_fixes == []


def test_cdata_and_comments_are_not_scanned_as_tags(xml_engine):
    result = xml_engine.fix("<root><!-- <open> --><![CDATA[</root><x>]]></root>")

    assert result.success
    assert "<![CDATA[</root><x>]]>" in result.fixed_text
    assert not any("unclosed" in fix or "mismatched" in fix for fix in result.applied_fixes)


def test_unclosed_tags_at_end_are_closed_innermost_first(xml_engine):
    result = xml_engine.fix("<a><b><c>text")

    assert result.success
    assert result.fixed_text.endswith("<a><b><c>text</c></b></a>")
    assert "Fixed 3 unclosed tag(s): c, b, a" in result.applied_fixes


def test_unquoted_attributes(xml_engine):
    result = xml_engine.fix("<root><item id=5 name=x/></root>")

    assert result.success
    assert '<item id="5" name="x"/>' in result.fixed_text
    assert "Added quotes to unquoted attributes" in result.applied_fixes


def test_unclosed_attribute_quote(xml_engine):
    result = xml_engine.fix('<root><item id="5>x</item></root>')

    assert result.success
    assert '<item id="5">x</item>' in result.fixed_text
    assert "Fixed unclosed attribute quotes" in result.applied_fixes


def test_missing_equals_in_attribute(xml_engine):
    result = xml_engine.fix('<root><item id "5">x</item></root>')

    assert result.success
    assert '<item id="5">' in result.fixed_text
    assert "Fixed missing equals in attributes" in result.applied_fixes


def test_special_characters_in_text_are_escaped(xml_engine):
    result = xml_engine.fix("<root><a>Tom & Jerry</a><b>1 < 2 &amp; 3 > 0</b></root>")

    assert result.success
    assert "<a>Tom &amp; Jerry</a>" in result.fixed_text
    assert "<b>1 &lt; 2 &amp; 3 &gt; 0</b>" in result.fixed_text
    assert "Escaped special characters in text content" in result.applied_fixes
    assert result.parsed_value["root"]["a"] == "Tom & Jerry"


def test_invalid_tag_names_get_prefix(xml_engine):
    result = xml_engine.fix("<root><1st>x</1st></root>")

    assert result.success
    assert "<tag1st>x</tag1st>" in result.fixed_text
    assert "Fixed invalid tag names" in result.applied_fixes


def test_unmatched_closing_tag_is_removed(xml_engine):
    result = xml_engine.fix("<root>x</root></extra>")

    assert result.success
    assert "</extra>" not in result.fixed_text
    assert "Removed unmatched closing tag </extra>" in result.applied_fixes


def test_tag_name_with_space_is_rejected(xml_engine):
    result = xml_engine.fix("<my tag>x</my>")

    assert not result.success
    assert result.can_try_ai
    assert result.errors[0].kind == ErrorKind.INVALID_TAG_NAME


def test_text_before_root_is_rejected(xml_engine):
    result = xml_engine.fix("hello <root/>")

    assert not result.success
    assert ErrorKind.TEXT_BEFORE_ROOT in [error.kind for error in result.errors]


def test_comment_before_root_is_allowed(xml_engine):
    result = xml_engine.fix("<!-- header --><root/>")

    assert result.success


def test_missing_opening_tag_is_rejected(xml_engine):
    result = xml_engine.fix("</root>")

    assert not result.success
    assert ErrorKind.MISSING_OPENING_TAG in [error.kind for error in result.errors]


def test_unresolvable_structure_fails(xml_engine):
    result = xml_engine.fix("<root><alpha></beta></root>")

    assert not result.success
    assert result.can_try_ai
    assert any(fix.startswith("Unresolved mismatched tags") for fix in result.applied_fixes)


@pytest.mark.parametrize(
    "text",
    [
        "<root><item>v</root>",
        "<product>v</product1>",
        "<root><item id=5>a & b</item>",
    ],
)
def test_fix_is_idempotent(xml_engine, text):
    first = xml_engine.fix(text)
    second = xml_engine.fix(first.fixed_text)

    assert first.success
    assert second.fixed_text == first.fixed_text
    assert second.applied_fixes == []


def test_parse_reports_line(xml_engine):
    result = xml_engine.parse("<root>\n<a></b>\n</root>")

    assert not result.success
    assert result.errors[0].kind == ErrorKind.PARSE_ERROR
    assert result.errors[0].line == 2
    assert result.errors[0].position is not None


def test_parse_returns_mapping(xml_engine):
    result = xml_engine.parse('<root><item id="1">x</item></root>')

    assert result.success
    assert result.parsed_value == {"root": {"item": {"@id": "1", "#text": "x"}}}


def test_validate_reports_issues(xml_engine):
    report = xml_engine.validate("<root>\n<item id=5>a & b\n</root>")

    assert not report.valid
    issue_types = [issue.issue_type for issue in report.issues]
    assert "missing_declaration" in issue_types
    assert "unescaped_ampersand" in issue_types
    assert "unquoted_attribute" in issue_types
    assert "mismatched_tags" in issue_types
    assert "parse_error" in issue_types
    ampersand = next(issue for issue in report.issues if issue.issue_type == "unescaped_ampersand")
    assert ampersand.line == 2


def test_validate_ignores_ampersand_in_cdata(xml_engine):
    report = xml_engine.validate(DECLARATION + "<root><![CDATA[a & b]]></root>")

    assert report.valid
    assert report.issues == []


def test_prettify(xml_engine):
    text = DECLARATION + '<root><item id="1">v</item><empty/><group><!-- note --><x></x></group></root>'

    assert xml_engine.prettify(text) == "\n".join(
        [
            DECLARATION,
            "<root>",
            '  <item id="1">v</item>',
            "  <empty/>",
            "  <group>",
            "    <!-- note -->",
            "    <x></x>",
            "  </group>",
            "</root>",
        ]
    )


def test_prettify_repairs_first(xml_engine):
    assert xml_engine.prettify("<root><item>v</root>", indent=4) == "\n".join(
        [DECLARATION, "<root>", "    <item>v</item>", "</root>"]
    )


def test_prettify_raises_when_unrepairable(xml_engine):
    with pytest.raises(ExpatError):
        xml_engine.prettify("<item>1</item><item>2</item>")
