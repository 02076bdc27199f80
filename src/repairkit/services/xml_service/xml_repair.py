from loguru import logger
from typing import List, Optional, Tuple
from .xml_similarity import is_similar_tag
from .xml_tag_scanner import Tag, XMLTagScanner
from ...utils.text_edits import TextEdit, apply_edits


class XMLTagRepair:
    """Tag-balance repairs: typo'd closing tags, unclosed tags, stray closing tags."""

    def __init__(self, scanner: Optional[XMLTagScanner] = None, max_edit_distance: int = 1):
        self.scanner = scanner or XMLTagScanner()
        self.max_edit_distance = max_edit_distance

    def fix_mismatched_tags(self, xml_text: str) -> Tuple[str, List[str]]:
        """Rewrite closing tags that look like typos of the open tag.

        ``<product>...</product1>`` becomes ``<product>...</product>``. Only the
        top of the stack is compared; anything not similar is left alone for
        the unclosed-tag pass.
        """
        stack: List[Tag] = []
        edits: List[TextEdit] = []
        fixes: List[str] = []

        for tag in self.scanner.scan_tags(xml_text):
            if tag.is_closing:
                if not stack:
                    continue
                expected = stack[-1]
                if expected.name == tag.name:
                    stack.pop()
                elif is_similar_tag(expected.name, tag.name, self.max_edit_distance):
                    edits.append(TextEdit(tag.start, tag.end, f"</{expected.name}>"))
                    stack.pop()
                    fixes.append(f"Fixed mismatched tag: </{tag.name}> -> </{expected.name}>")
                    logger.debug(f"Corrected closing tag </{tag.name}> to </{expected.name}>")
            elif not tag.is_self_closing:
                stack.append(tag)

        return apply_edits(xml_text, edits), fixes

    def fix_unclosed_tags(self, xml_text: str) -> Tuple[str, List[str]]:
        """Insert missing closing tags where the enclosing element closes.

        For ``<root><item>v</root>`` the ``</item>`` goes right before
        ``</root>``, not at the end of the document. Tags still open at the end
        are closed there, innermost first.
        """
        stack: List[Tag] = []
        edits: List[TextEdit] = []
        unclosed: List[str] = []

        for tag in self.scanner.scan_tags(xml_text):
            if tag.is_closing:
                if not stack:
                    continue
                if stack[-1].name == tag.name:
                    stack.pop()
                    continue

                open_names = [open_tag.name for open_tag in stack]
                if tag.name not in open_names:
                    continue
                match_index = len(open_names) - 1 - open_names[::-1].index(tag.name)
                while len(stack) > match_index + 1:
                    open_tag = stack.pop()
                    edits.append(TextEdit(tag.start, tag.start, f"</{open_tag.name}>"))
                    unclosed.append(open_tag.name)
                stack.pop()
            elif not tag.is_self_closing:
                stack.append(tag)

        end = len(xml_text)
        for open_tag in reversed(stack):
            edits.append(TextEdit(end, end, f"</{open_tag.name}>"))
            unclosed.append(open_tag.name)

        if not unclosed:
            return xml_text, []

        logger.debug(f"Closing unclosed tags: {unclosed}")
        fix = f"Fixed {len(unclosed)} unclosed tag(s): {', '.join(unclosed)}"
        return apply_edits(xml_text, edits), [fix]

    def balance_tags(self, xml_text: str) -> Tuple[str, List[str]]:
        """Remove closing tags with nothing open and report remaining mismatches."""
        stack: List[str] = []
        edits: List[TextEdit] = []
        fixes: List[str] = []

        for tag in self.scanner.scan_tags(xml_text):
            if tag.is_closing:
                if not stack:
                    edits.append(TextEdit(tag.start, tag.end, ""))
                    fixes.append(f"Removed unmatched closing tag </{tag.name}>")
                    continue
                last_opened = stack.pop()
                if last_opened != tag.name:
                    fixes.append(
                        f"Unresolved mismatched tags: expected </{last_opened}>, found </{tag.name}>"
                    )
            elif not tag.is_self_closing:
                stack.append(tag.name)

        return apply_edits(xml_text, edits), fixes
