"""Knuth-Morris-Pratt substring search, full-text and tag search over items."""

from __future__ import annotations

from typing import Iterable, Sequence

from gtn.models import FAMILY_NOTE, Item, Note


def kmp_table(pattern: str) -> list[int]:
    """Longest proper prefix that is also a suffix, for each prefix of *pattern*."""
    lps = [0] * len(pattern)
    length = 0
    i = 1
    while i < len(pattern):
        if pattern[i] == pattern[length]:
            length += 1
            lps[i] = length
            i += 1
        elif length:
            length = lps[length - 1]
        else:
            lps[i] = 0
            i += 1
    return lps


def kmp_search(text: str, pattern: str) -> bool:
    """True if *pattern* occurs in *text*. The empty pattern matches nothing."""
    if not pattern:
        return False
    lps = kmp_table(pattern)
    m = len(pattern)
    i = j = 0
    while i < len(text):
        if text[i] == pattern[j]:
            i += 1
            j += 1
            if j == m:
                return True
        elif j:
            j = lps[j - 1]
        else:
            i += 1
    return False


def haystack(item: Item) -> str:
    """Searchable text of an item: title, description and, for notes, tags."""
    parts = [item.title, item.description]
    if item.family == FAMILY_NOTE:
        parts.extend(item.tags)  # type: ignore[attr-defined]
    return " ".join(parts)


def full_text_search(pattern: str, items: Iterable[Item]) -> list[Item]:
    """Items whose haystack contains *pattern*, ignoring case.

    An empty list means nothing matched.
    """
    folded = pattern.casefold()
    if not folded:
        return []
    return [it for it in items if kmp_search(haystack(it).casefold(), folded)]


def search_by_tag(tag: str, notes: Sequence[Note]) -> list[Note]:
    """Notes carrying exactly *tag* (case-sensitive)."""
    return [n for n in notes if tag in n.tags]
