from collections.abc import Iterable


def is_watched(coin_id: str, watchlist: Iterable[str]) -> bool:
    return coin_id in watchlist


def toggle(coin_id: str, watchlist: Iterable[str]) -> frozenset[str]:
    """Add the coin if absent, remove it if present. The input is left untouched."""
    current = frozenset(watchlist)
    if coin_id in current:
        return current - {coin_id}
    return current | {coin_id}
