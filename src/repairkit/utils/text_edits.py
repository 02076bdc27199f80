from typing import Iterable, List, NamedTuple


class TextEdit(NamedTuple):
    """Replace ``text[start:end]`` with ``replacement`` (an insertion when start == end)."""

    start: int
    end: int
    replacement: str


def apply_edits(text: str, edits: Iterable[TextEdit]) -> str:
    """Apply non-overlapping edits in a single rebuild of the buffer.

    Offsets always refer to the original text. Edits sharing a start offset
    are applied in the order they were given.
    """
    ordered: List[TextEdit] = sorted(edits, key=lambda edit: edit.start)
    if not ordered:
        return text

    pieces = []
    cursor = 0
    for edit in ordered:
        if edit.start < cursor:
            # Overlaps an edit already applied
            continue
        pieces.append(text[cursor:edit.start])
        pieces.append(edit.replacement)
        cursor = edit.end
    pieces.append(text[cursor:])
    return "".join(pieces)
