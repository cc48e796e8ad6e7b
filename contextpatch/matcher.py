from typing import List

# Punctuation a model tends to "type" instead of copying verbatim.
_PUNCTUATION_TABLE = str.maketrans(
    {
        "–": "-",  # en dash
        "—": "-",  # em dash
        "‑": "-",  # non-breaking hyphen
        "‘": "'",  # curly single quotes
        "’": "'",
        "“": '"',  # curly double quotes
        "”": '"',
    }
)


def normalize_punctuation(s: str) -> str:
    """Maps Unicode dashes and curly quotes to their ASCII equivalents."""
    return s.translate(_PUNCTUATION_TABLE)


def lines_match(a: str, b: str) -> bool:
    """Exact equality, falling back to equality after punctuation normalization."""
    if a == b:
        return True
    return normalize_punctuation(a) == normalize_punctuation(b)


def seek_sequence(content_lines: List[str], pattern: List[str], start_index: int) -> int:
    """
    Returns the first index >= start_index where `pattern` occurs in
    `content_lines` line by line, or -1 if it does not occur.

    An empty pattern matches at start_index. Whitespace and case are compared
    exactly.
    """
    if not pattern:
        return start_index

    for i in range(start_index, len(content_lines) - len(pattern) + 1):
        if all(
            lines_match(content_lines[i + j], expected)
            for j, expected in enumerate(pattern)
        ):
            return i

    return -1
