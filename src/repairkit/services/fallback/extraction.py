import re
from typing import Optional

XML_CANDIDATE_PATTERN = re.compile(r"<\?xml[\s\S]*|<[a-zA-Z][\s\S]*")


def extract_json_candidate(generated: str) -> Optional[str]:
    """Return the first balanced ``{...}`` or ``[...]`` span in generated text."""
    start = -1
    for index, char in enumerate(generated):
        if char in "{[":
            start = index
            break
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(generated)):
        char = generated[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
            if depth == 0:
                return generated[start:index + 1]

    return None


def extract_xml_candidate(generated: str) -> Optional[str]:
    """Return generated text from the XML declaration or first tag onwards."""
    match = XML_CANDIDATE_PATTERN.search(generated)
    if not match:
        return None
    return match.group(0).strip()
