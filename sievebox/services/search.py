"""Name search for the filter list."""
from typing import List, Optional

from sievebox.models.filter import Filter


def fuzzy_match(text: str, query: str) -> bool:
    """True if query's characters appear in text in order (case-insensitive)."""
    text = text.lower()
    query = query.lower()
    i = 0
    for ch in text:
        if i == len(query):
            break
        if ch == query[i]:
            i += 1
    return i == len(query)


def search_filters(filters: List[Filter], query: Optional[str]) -> List[Filter]:
    if not query or not query.strip():
        return list(filters)
    return [f for f in filters if fuzzy_match(f.name, query)]


def sort_recent(filters: List[Filter]) -> List[Filter]:
    """Most recently updated first. ISO-8601 timestamps sort as strings."""
    return sorted(filters, key=lambda f: f.updated_at or '', reverse=True)
