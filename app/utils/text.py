"""Text utilities for chat messages and directory search."""
import re
from typing import Iterable, Optional


def sanitize_text(text: Optional[str]) -> str:
    """Clean a chat message before it enters state.

    Removes control characters (keeping newlines and tabs), collapses runs of
    spaces and trims each line.

    Examples:
        >>> sanitize_text("  namaste   ji \\x07")
        'namaste ji'
        >>> sanitize_text(None)
        ''
    """
    if text is None:
        return ""

    text = re.sub(r'[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F-\x9F]', '', str(text))
    text = re.sub(r'[ \t]+', ' ', text)
    text = re.sub(r'\n{3,}', '\n\n', text)
    return '\n'.join(line.strip() for line in text.split('\n')).strip()


def contains_ci(haystack: Optional[str], needle: str) -> bool:
    """Case-insensitive substring test; a missing haystack never matches."""
    if not haystack:
        return False
    return needle.casefold() in haystack.casefold()


def any_contains_ci(haystacks: Iterable[Optional[str]], needle: str) -> bool:
    return any(contains_ci(h, needle) for h in haystacks)


def unique_in_order(values: Iterable[str]) -> list[str]:
    """Distinct values, first occurrence wins."""
    return list(dict.fromkeys(values))
