from typing import List, NamedTuple, Optional, Tuple
import re


class Tag(NamedTuple):
    """Immutable record of one element tag found in a document."""

    name: str
    start: int
    end: int
    is_closing: bool
    is_self_closing: bool
    raw: str
    attributes: str

    @property
    def attributes_start(self) -> int:
        return self.end - 1 - len(self.attributes)


class XMLNode(NamedTuple):
    """A lexical piece of a document: tag, text or special (PI, comment, CDATA, doctype)."""

    kind: str
    text: str
    start: int
    tag: Optional[Tag] = None


class XMLTagScanner:
    """Regex-driven tag scanner that never looks inside PIs, comments or CDATA."""

    SPECIAL_PATTERN = re.compile(
        r"<\?.*?\?>"
        r"|<!--.*?-->"
        r"|<!\[CDATA\[.*?\]\]>"
        r"|<!DOCTYPE(?:[^\[>]|\[[^\]]*\])*>",
        re.DOTALL | re.IGNORECASE,
    )
    # Quote-aware attribute section first, plain fallback for unclosed quotes
    TAG_PATTERN = re.compile(
        r"""<(/?)([A-Za-z0-9_][\w:.\-]*)((?:"[^"]*"|'[^']*'|[^'"<>])*|[^<>]*)>"""
    )

    def find_skip_ranges(self, text: str) -> List[Tuple[int, int]]:
        """Offsets of processing instructions, comments, CDATA sections and doctypes."""
        return [(match.start(), match.end()) for match in self.SPECIAL_PATTERN.finditer(text)]

    def mask_special(self, text: str, fill: str = " ") -> str:
        """Blank out skip ranges, keeping offsets and line breaks intact."""
        return self.SPECIAL_PATTERN.sub(
            lambda m: "".join("\n" if c == "\n" else fill for c in m.group(0)), text
        )

    def scan_tags(self, text: str) -> List[Tag]:
        """Return element tags in document order, excluding anything inside skip ranges."""
        masked = self.mask_special(text)
        tags = []

        for match in self.TAG_PATTERN.finditer(masked):
            closing, name, _ = match.groups()
            raw = text[match.start():match.end()]
            attributes = raw[len(closing) + len(name) + 1:-1]
            tags.append(
                Tag(
                    name=name,
                    start=match.start(),
                    end=match.end(),
                    is_closing=bool(closing),
                    is_self_closing=not closing and raw.endswith("/>"),
                    raw=raw,
                    attributes=attributes,
                )
            )

        return tags

    def split_nodes(self, text: str) -> List[XMLNode]:
        """Split a document into tag, special and text nodes in order."""
        pieces = [
            XMLNode("special", text[start:end], start)
            for start, end in self.find_skip_ranges(text)
        ]
        pieces.extend(XMLNode("tag", tag.raw, tag.start, tag) for tag in self.scan_tags(text))
        pieces.sort(key=lambda node: node.start)

        nodes = []
        cursor = 0
        for node in pieces:
            if node.start < cursor:
                continue
            if node.start > cursor:
                nodes.append(XMLNode("text", text[cursor:node.start], cursor))
            nodes.append(node)
            cursor = node.start + len(node.text)
        if cursor < len(text):
            nodes.append(XMLNode("text", text[cursor:], cursor))
        return nodes
