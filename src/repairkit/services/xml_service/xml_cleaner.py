import re
from typing import Dict, List, Optional, Tuple
from .xml_tag_scanner import Tag, XMLTagScanner
from ...utils.text_edits import TextEdit, apply_edits


class XMLCleaner:
    """Handles attribute, entity and tag-name repairs that do not change nesting."""

    QUOTED_SPLIT_PATTERN = re.compile(r"\"[^\"]*\"|'[^']*'|[^\"']+|[\"']")
    MISSING_EQUALS_PATTERN = re.compile(r"(?<=\s)([A-Za-z_][\w:.\-]*)\s+$")
    UNQUOTED_VALUE_PATTERN = re.compile(r"(=\s*)([^\s\"'=<>]+)")
    AMPERSAND_PATTERN = re.compile(r"&(?!(?:amp|lt|gt|quot|apos|#[0-9]+|#x[0-9a-fA-F]+);)")
    DECLARATION_PATTERN = re.compile(r"<\?xml\s")
    PLACEHOLDER_PATTERN = "__XMLREPAIR_PROTECTED_{}__"

    def __init__(self, scanner: Optional[XMLTagScanner] = None, invalid_tag_prefix: str = "tag"):
        self.scanner = scanner or XMLTagScanner()
        self.invalid_tag_prefix = invalid_tag_prefix

    def has_declaration(self, xml_text: str) -> bool:
        """True when the document opens with ``<?xml ...?>`` (not ``<?xml-stylesheet``)."""
        return self.DECLARATION_PATTERN.match(xml_text.lstrip()) is not None

    def strip_before_declaration(self, xml_text: str) -> str:
        """The declaration is only legal at the very start of the document."""
        if self.has_declaration(xml_text):
            return xml_text.lstrip()
        return xml_text

    def add_declaration(self, xml_text: str, declaration: str) -> str:
        """Add an XML declaration when the document has none."""
        if self.has_declaration(xml_text):
            return xml_text
        return f"{declaration}\n{xml_text}"

    def fix_unclosed_attribute_quotes(self, xml_text: str) -> str:
        """``<item id="5>`` becomes ``<item id="5">``."""
        edits = []
        for tag in self._opening_tags(xml_text):
            quote = self._find_unclosed_quote(tag.attributes)
            if quote is None:
                continue
            position = tag.end - 2 if tag.raw.endswith("/>") else tag.end - 1
            edits.append(TextEdit(position, position, quote))
        return apply_edits(xml_text, edits)

    def fix_missing_equals(self, xml_text: str) -> str:
        """``<item id "5">`` becomes ``<item id="5">``."""
        def rewrite(tokens: List[Tuple[str, bool]]) -> List[Tuple[str, bool]]:
            result = []
            for index, (token, quoted) in enumerate(tokens):
                followed_by_value = index + 1 < len(tokens) and tokens[index + 1][1]
                if not quoted and followed_by_value:
                    token = self.MISSING_EQUALS_PATTERN.sub(r"\1=", token)
                result.append((token, quoted))
            return result

        return self._rewrite_attributes(xml_text, rewrite)

    def fix_unquoted_attributes(self, xml_text: str) -> str:
        """``<item id=5>`` becomes ``<item id="5">``."""
        def rewrite(tokens: List[Tuple[str, bool]]) -> List[Tuple[str, bool]]:
            return [
                (token if quoted else self.UNQUOTED_VALUE_PATTERN.sub(r'\1"\2"', token), quoted)
                for token, quoted in tokens
            ]

        return self._rewrite_attributes(xml_text, rewrite)

    def fix_invalid_tag_names(self, xml_text: str) -> str:
        """Prefix tag names that start with a digit: ``<1root>`` becomes ``<tag1root>``."""
        edits = []
        for tag in self.scanner.scan_tags(xml_text):
            if tag.name[0].isdigit():
                name_start = tag.start + (2 if tag.is_closing else 1)
                edits.append(TextEdit(name_start, name_start, self.invalid_tag_prefix))
        return apply_edits(xml_text, edits)

    def escape_special_chars(self, xml_text: str) -> str:
        """Escape bare ``&``, ``<`` and ``>`` in text content only.

        CDATA sections, comments and processing instructions are swapped for
        placeholders during the pass and restored afterwards.
        """
        replacements: Dict[str, str] = {}
        protected = self.scanner.SPECIAL_PATTERN.sub(
            lambda m: self._replace_special(m, replacements), xml_text
        )

        pieces = []
        for node in self.scanner.split_nodes(protected):
            if node.kind == "text":
                pieces.append(self._escape_text(node.text))
            else:
                pieces.append(node.text)
        escaped = "".join(pieces)

        for placeholder, content in replacements.items():
            escaped = escaped.replace(placeholder, content, 1)
        return escaped

    def _replace_special(self, match: re.Match, replacements: Dict[str, str]) -> str:
        """Replace a CDATA section, comment or PI with a placeholder."""
        placeholder = self.PLACEHOLDER_PATTERN.format(len(replacements))
        replacements[placeholder] = match.group(0)
        return placeholder

    def _escape_text(self, text: str) -> str:
        text = self.AMPERSAND_PATTERN.sub("&amp;", text)
        return text.replace("<", "&lt;").replace(">", "&gt;")

    def _opening_tags(self, xml_text: str) -> List[Tag]:
        return [tag for tag in self.scanner.scan_tags(xml_text) if not tag.is_closing]

    def _find_unclosed_quote(self, attributes: str) -> Optional[str]:
        """Return the quote character of an attribute value that never closes."""
        position = 0
        while position < len(attributes):
            char = attributes[position]
            if char in "\"'":
                end = attributes.find(char, position + 1)
                if end == -1:
                    before = attributes[:position].rstrip()
                    return char if before.endswith("=") else None
                position = end + 1
                continue
            position += 1
        return None

    def _split_attributes(self, attributes: str) -> List[Tuple[str, bool]]:
        """Split an attribute section into (token, is_quoted) runs."""
        return [
            (token, len(token) > 1 and token[0] in "\"'" and token[-1] == token[0])
            for token in self.QUOTED_SPLIT_PATTERN.findall(attributes)
        ]

    def _rewrite_attributes(self, xml_text: str, rewrite) -> str:
        edits = []
        for tag in self._opening_tags(xml_text):
            body = tag.attributes
            suffix = ""
            if tag.is_self_closing and body.endswith("/"):
                body, suffix = body[:-1], "/"

            tokens = self._split_attributes(body)
            rewritten = "".join(token for token, _ in rewrite(tokens)) + suffix
            if rewritten != tag.attributes:
                start = tag.attributes_start
                edits.append(TextEdit(start, start + len(tag.attributes), rewritten))
        return apply_edits(xml_text, edits)
