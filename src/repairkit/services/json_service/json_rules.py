"""
JSON repair rules.

Each rule is a pure ``str -> str`` rewrite. The pipeline order is fixed:
later rules rely on string boundaries established by earlier ones, so single
quotes are normalized and unterminated strings are closed before comments are
stripped (``//`` inside a URL must stay a string, not a comment).
"""

import re
from typing import Callable, List, Optional, Tuple

from loguru import logger

from ...config.settings import JSONRulesConfig
from ...utils.text_edits import TextEdit, apply_edits
from .json_scanner import JSONScanner

VALID_ESCAPES = '"\\/bfnrt'
STRUCTURAL_CHARS = ",}]"
# Last characters of a scalar value: numbers, true, false, null
SCALAR_END_CHARS = set("0123456789el")
CLOSERS = {"{": "}", "[": "]"}


class JSONRules:
    """Ordered JSON rule pipeline."""

    TRAILING_COMMA_PATTERN = re.compile(r",(?:\s*,)*(\s*[}\]])")
    UNQUOTED_KEY_PATTERN = re.compile(r"(^|[{,}\]\n])(\s*)([A-Za-z_$][\w$]*)(\s*:)")
    MISSING_OPENING_BRACE_PATTERN = re.compile(r'^"[^"]+"\s*:[\s\S]*\}$')
    LEADING_ZERO_PATTERN = re.compile(r"([:\[,]\s*-?)0+(?=\d)")
    BACKSLASH_PATTERN = re.compile(r'\\(["\\/bfnrt]|u[0-9a-fA-F]{4})|\\')
    LITERAL_PATTERN = re.compile(r"([:\[,]\s*)(?:NaN|-?Infinity|undefined)\b")
    DANGLING_COMMA_PATTERN = re.compile(r"(?:,\s*)+$")

    def __init__(self, rules_config: Optional[JSONRulesConfig] = None):
        self.rules_config = rules_config or JSONRulesConfig()
        self.scanner = JSONScanner()

    def apply(self, text: str) -> Tuple[str, List[str]]:
        """Run every rule in order and return the result with fix labels."""
        fixes: List[str] = []
        fixed = text

        steps: List[Tuple[str, Callable[[str], str]]] = [
            ("Converted single quotes to double quotes", self.convert_single_quotes),
            ("Closed unterminated strings", self.close_unterminated_strings),
            ("Removed comments", self.remove_comments),
            ("Removed trailing commas", self.remove_trailing_commas),
            ("Quoted unquoted keys", self.quote_unquoted_keys),
            ("Added missing commas", self.insert_missing_commas),
        ]
        for label, rule in steps:
            fixed = self._run(rule, label, fixed, fixes)

        fixed, balance_fixes = self.balance_brackets(fixed)
        for label in balance_fixes:
            logger.debug(f"JSON rule applied: {label}")
        fixes.extend(balance_fixes)

        steps = [
            ("Added missing opening brace", self.add_missing_opening_brace),
            ("Removed leading zeros from numbers", self.remove_leading_zeros),
            ("Escaped invalid backslashes", self.escape_backslashes),
            ("Replaced non-JSON literals with null", self.normalize_literals),
        ]
        for label, rule in steps:
            fixed = self._run(rule, label, fixed, fixes)

        return fixed, fixes

    def _run(self, rule: Callable[[str], str], label: str, text: str, fixes: List[str]) -> str:
        result = rule(text)
        if result != text:
            logger.debug(f"JSON rule applied: {label}")
            fixes.append(label)
        return result

    # Rule 1
    def convert_single_quotes(self, text: str) -> str:
        """Turn single-quoted strings outside double-quoted strings into double-quoted ones."""
        pieces = []
        position = 0
        length = len(text)
        in_string = False
        escaped = False

        while position < length:
            char = text[position]
            if in_string:
                pieces.append(char)
                if char == "\n":
                    # A line break ends an unterminated string, as in close_unterminated_strings
                    in_string = False
                elif escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                position += 1
                continue

            if char == '"':
                in_string = True
                escaped = False
            elif char == "'":
                end = self._find_single_quote_end(text, position + 1)
                if end != -1:
                    pieces.append('"' + self._requote(text[position + 1:end]) + '"')
                    position = end + 1
                    continue
            pieces.append(char)
            position += 1

        return "".join(pieces)

    def _find_single_quote_end(self, text: str, start: int) -> int:
        position = start
        while position < len(text):
            char = text[position]
            if char == "\\":
                position += 2
                continue
            if char == "'":
                return position
            if char == "\n":
                return -1
            position += 1
        return -1

    def _requote(self, inner: str) -> str:
        pieces = []
        position = 0
        while position < len(inner):
            char = inner[position]
            if char == "\\" and position + 1 < len(inner):
                following = inner[position + 1]
                pieces.append("'" if following == "'" else char + following)
                position += 2
                continue
            pieces.append('\\"' if char == '"' else char)
            position += 1
        return "".join(pieces)

    # Rule 2
    def close_unterminated_strings(self, text: str) -> str:
        """Close strings that run into a line break or the end of the text."""
        edits: List[TextEdit] = []
        position = 0
        length = len(text)
        in_string = False
        escaped = False
        string_start = 0

        while position < length:
            char = text[position]
            if not in_string:
                if char == '"':
                    in_string = True
                    escaped = False
                    string_start = position
                position += 1
                continue

            if char == "\n":
                edit = self._closing_quote_edit(text, string_start, position)
                edits.append(edit)
                in_string = False
                # Resume scanning from the synthesized quote
                position = edit.start if edit.start < position else position + 1
                continue

            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            position += 1

        if in_string:
            edits.append(self._closing_quote_edit(text, string_start, length))

        return apply_edits(text, edits)

    def _closing_quote_edit(self, text: str, string_start: int, end: int) -> TextEdit:
        content_start = string_start + 1
        span = text[content_start:end]

        if len(span) > self.rules_config.unclosed_string_threshold:
            match = re.search(r"[,}\]]", span)
            if match:
                return TextEdit(content_start + match.start(), content_start + match.start(), '"')

        position = end
        while position > content_start and text[position - 1] in " \t\r":
            position -= 1

        # A trailing odd run of backslashes would escape the new quote
        backslashes = 0
        while position - backslashes > content_start and text[position - backslashes - 1] == "\\":
            backslashes += 1
        quote = '\\"' if backslashes % 2 else '"'
        return TextEdit(position, position, quote)

    # Rule 3
    def remove_comments(self, text: str) -> str:
        """Strip // and /* */ comments outside string literals."""
        pieces = []
        position = 0
        length = len(text)
        in_string = False
        escaped = False

        while position < length:
            char = text[position]
            if in_string:
                pieces.append(char)
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                position += 1
                continue

            following = text[position + 1] if position + 1 < length else ""
            if char == "/" and following == "/":
                newline = text.find("\n", position)
                position = length if newline == -1 else newline
                continue
            if char == "/" and following == "*":
                end = text.find("*/", position + 2)
                position = length if end == -1 else end + 2
                continue

            if char == '"':
                in_string = True
            pieces.append(char)
            position += 1

        return "".join(pieces)

    # Rule 4
    def remove_trailing_commas(self, text: str) -> str:
        return self.scanner.map_code(text, lambda code: self.TRAILING_COMMA_PATTERN.sub(r"\1", code))

    # Rule 5
    def quote_unquoted_keys(self, text: str) -> str:
        return self.scanner.map_code(
            text, lambda code: self.UNQUOTED_KEY_PATTERN.sub(r'\1\2"\3"\4', code)
        )

    # Rule 6
    def insert_missing_commas(self, text: str) -> str:
        """Insert a comma where a value starts right after another value ends."""
        edits: List[TextEdit] = []
        in_string = False
        escaped = False
        last_token = None
        last_token_end = 0

        for position, char in enumerate(text):
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                    last_token = '"'
                    last_token_end = position + 1
                continue

            if char.isspace():
                continue

            if char in '"{[' and last_token is not None and (
                last_token in '}]"' or last_token in SCALAR_END_CHARS
            ):
                edits.append(TextEdit(last_token_end, last_token_end, ","))

            if char == '"':
                in_string = True
                continue

            last_token = char
            last_token_end = position + 1

        return apply_edits(text, edits)

    # Rule 7
    def balance_brackets(self, text: str) -> Tuple[str, List[str]]:
        """Append closers for every unclosed brace and bracket, innermost first."""
        open_stack: List[str] = []
        for segment in self.scanner.split_segments(text):
            if segment.is_string:
                continue
            for char in segment.text:
                if char in CLOSERS:
                    open_stack.append(char)
                elif char in "}]":
                    opener = "{" if char == "}" else "["
                    for index in range(len(open_stack) - 1, -1, -1):
                        if open_stack[index] == opener:
                            del open_stack[index]
                            break

        if not open_stack:
            return text, []

        missing_braces = open_stack.count("{")
        missing_brackets = open_stack.count("[")
        fixed = self.DANGLING_COMMA_PATTERN.sub("", text)
        fixed += "".join(CLOSERS[opener] for opener in reversed(open_stack))

        fixes = []
        if missing_braces:
            fixes.append(f"Added {missing_braces} missing closing brace(s)")
        if missing_brackets:
            fixes.append(f"Added {missing_brackets} missing closing bracket(s)")
        return fixed, fixes

    # Rule 8
    def add_missing_opening_brace(self, text: str) -> str:
        stripped = text.strip()
        if not self.MISSING_OPENING_BRACE_PATTERN.match(stripped):
            return text

        masked = self.scanner.mask_strings(text)
        if masked.count("}") <= masked.count("{"):
            return text

        leading = len(text) - len(text.lstrip())
        return text[:leading] + "{" + text[leading:]

    # Rule 9
    def remove_leading_zeros(self, text: str) -> str:
        return self.scanner.map_code(text, lambda code: self.LEADING_ZERO_PATTERN.sub(r"\1", code))

    # Rule 10
    def escape_backslashes(self, text: str) -> str:
        """Double backslashes inside strings that do not start a valid escape."""
        return self.scanner.map_strings(text, lambda inner: self.BACKSLASH_PATTERN.sub(self._escape_backslash, inner))

    def _escape_backslash(self, match: re.Match) -> str:
        if match.group(1):
            return match.group(0)
        return "\\\\"

    # Rule 11
    def normalize_literals(self, text: str) -> str:
        return self.scanner.map_code(text, lambda code: self.LITERAL_PATTERN.sub(r"\1null", code))
