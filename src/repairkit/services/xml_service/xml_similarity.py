import re


def levenshtein_distance(first: str, second: str) -> int:
    """Edit distance with unit cost insertions, deletions and substitutions."""
    previous = list(range(len(second) + 1))
    for i, first_char in enumerate(first, 1):
        current = [i]
        for j, second_char in enumerate(second, 1):
            if first_char == second_char:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j], current[j - 1], previous[j - 1]))
        previous = current
    return previous[-1]


def is_plural_pair(first: str, second: str) -> bool:
    return first + "s" == second or first == second + "s"


def has_numeric_suffix(base: str, candidate: str) -> bool:
    """True for ``product`` / ``product1``: candidate is base plus digits only."""
    return candidate.startswith(base) and re.fullmatch(r"[0-9]+", candidate[len(base):]) is not None


def is_similar_tag(expected: str, actual: str, max_distance: int = 1) -> bool:
    """Check if two tag names are likely typos of each other.

    Plural/singular pairs such as ``item``/``items`` are never similar: a
    closing ``</items>`` for an open ``<item>`` is a structural error, not a
    typo.
    """
    if expected == actual:
        return True

    if is_plural_pair(expected, actual):
        return False

    if has_numeric_suffix(expected, actual) or has_numeric_suffix(actual, expected):
        return True

    return levenshtein_distance(expected, actual) <= max_distance
