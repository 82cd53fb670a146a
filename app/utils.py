import logging
from difflib import SequenceMatcher
from datetime import datetime
from typing import List

logger = logging.getLogger(__name__)

SEARCH_MIN_RATIO = 0.6
DEFAULT_SEARCH_LIMIT = 10

def now_utc():
    # naive UTC, same as the DateTime column defaults
    return datetime.utcnow()

def normalize_name(name: str) -> str:
    return " ".join(name.split())

def _score(query: str, candidate: str) -> float:
    q, c = query.lower(), candidate.lower()
    if q in c:
        # substring hits rank above fuzzy ones, earlier hits first
        return 2.0 - c.index(q) / (len(c) + 1)
    best = SequenceMatcher(None, q, c).ratio()
    for word in c.split():
        best = max(best, SequenceMatcher(None, q, word).ratio())
    return best

def _rank(query: str, customers: List[str], limit: int) -> List[str]:
    scored = [(_score(query, name), i, name) for i, name in enumerate(customers)]
    hits = [s for s in scored if s[0] >= SEARCH_MIN_RATIO]
    hits.sort(key=lambda s: (-s[0], s[1]))
    return [name for _, _, name in hits[:limit]]

def search_customers(query: str, customers: List[str], limit: int = DEFAULT_SEARCH_LIMIT) -> List[str]:
    """Fuzzy customer search. Blank queries and failures fall back to the head of the list."""
    query = (query or "").strip()
    if limit < 1:
        return []
    if not query:
        return customers[:limit]
    try:
        return _rank(query, customers, limit)
    except Exception:
        logger.exception("customer search failed for %r, returning unfiltered list", query)
        return customers[:limit]
