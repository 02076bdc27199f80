from typing import Callable, List, NamedTuple


class Segment(NamedTuple):
    """A run of JSON text that is either code or one double-quoted string."""

    text: str
    is_string: bool
    closed: bool = True


class JSONScanner:
    """String-aware segmentation of JSON-like text."""

    def split_segments(self, text: str) -> List[Segment]:
        """Split text into alternating code and string-literal segments.

        A string segment keeps its quotes. An unterminated string runs to the
        end of the text and is marked ``closed=False``.
        """
        segments = []
        start = 0
        position = 0
        length = len(text)

        while position < length:
            if text[position] != '"':
                position += 1
                continue

            if position > start:
                segments.append(Segment(text[start:position], False))

            end = position + 1
            escaped = False
            closed = False
            while end < length:
                char = text[end]
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    closed = True
                    break
                end += 1

            end = end + 1 if closed else length
            segments.append(Segment(text[position:end], True, closed))
            start = position = end

        if start < length:
            segments.append(Segment(text[start:], False))
        return segments

    def map_code(self, text: str, transform: Callable[[str], str]) -> str:
        """Apply ``transform`` to code segments only, leaving strings untouched."""
        return "".join(
            segment.text if segment.is_string else transform(segment.text)
            for segment in self.split_segments(text)
        )

    def map_strings(self, text: str, transform: Callable[[str], str]) -> str:
        """Apply ``transform`` to the inside of every string literal."""
        pieces = []
        for segment in self.split_segments(text):
            if not segment.is_string:
                pieces.append(segment.text)
                continue
            closing = '"' if segment.closed else ""
            inner = segment.text[1:-1] if segment.closed else segment.text[1:]
            pieces.append('"' + transform(inner) + closing)
        return "".join(pieces)

    def mask_strings(self, text: str, fill: str = "x") -> str:
        """Replace string contents with ``fill`` so heuristics only see code.

        Offsets and line breaks are preserved.
        """
        return self.map_strings(
            text, lambda inner: "".join("\n" if c == "\n" else fill for c in inner)
        )
