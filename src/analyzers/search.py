from collections.abc import Iterable

from src.models.crypto import Quote

MAX_RESULTS = 10


def search_quotes(quotes: Iterable[Quote], term: str, limit: int = MAX_RESULTS) -> list[Quote]:
    """Case-insensitive substring match on name or symbol, in market order.

    A blank term matches nothing.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return []
    matches = [q for q in quotes if needle in q.name.lower() or needle in q.symbol.lower()]
    return matches[:limit]
