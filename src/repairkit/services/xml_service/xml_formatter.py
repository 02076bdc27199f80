from typing import List, Optional
from .xml_tag_scanner import XMLNode, XMLTagScanner


class XMLFormatter:
    """Tag-aware pretty printer.

    One node per line, indented by depth. Elements holding only text stay on
    one line; comments, CDATA and processing instructions are kept verbatim.
    """

    def __init__(self, scanner: Optional[XMLTagScanner] = None):
        self.scanner = scanner or XMLTagScanner()

    def format(self, xml_text: str, indent: int = 2) -> str:
        nodes = [
            node for node in self.scanner.split_nodes(xml_text)
            if node.kind != "text" or node.text.strip()
        ]
        lines: List[str] = []
        depth = 0
        index = 0

        while index < len(nodes):
            node = nodes[index]
            pad = " " * (indent * depth)

            if node.kind != "tag":
                lines.append(pad + node.text.strip())
                index += 1
                continue

            tag = node.tag
            if tag.is_closing:
                depth = max(depth - 1, 0)
                lines.append(" " * (indent * depth) + node.text)
                index += 1
                continue

            if tag.is_self_closing:
                lines.append(pad + node.text)
                index += 1
                continue

            inline = self._inline_element(nodes, index)
            if inline is not None:
                text, consumed = inline
                lines.append(pad + text)
                index += consumed
                continue

            lines.append(pad + node.text)
            depth += 1
            index += 1

        return "\n".join(lines)

    def _inline_element(self, nodes: List[XMLNode], index: int):
        """``<a>text</a>`` or ``<a></a>`` as one line, with the node count consumed."""
        opening = nodes[index]

        def closes(position: int) -> bool:
            return (
                position < len(nodes)
                and nodes[position].kind == "tag"
                and nodes[position].tag.is_closing
                and nodes[position].tag.name == opening.tag.name
            )

        if closes(index + 1):
            return opening.text + nodes[index + 1].text, 2
        if index + 1 < len(nodes) and nodes[index + 1].kind == "text" and closes(index + 2):
            text = nodes[index + 1].text.strip()
            return opening.text + text + nodes[index + 2].text, 3
        return None
