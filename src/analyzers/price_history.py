import pandas as pd

from src.models.crypto import PriceHistorySummary
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


def summarize_price_history(
    coin_id: str, history: pd.DataFrame, days: int
) -> PriceHistorySummary | None:
    """Reduce a price series to first/last/high/low and the change over the window.

    Expects a DataFrame with a ``price`` column, as returned by
    ``coingecko.get_price_history``. Returns None when there is nothing to summarize.
    """
    if history.empty or "price" not in history:
        return None

    prices = history["price"].dropna()
    if prices.empty:
        logger.warning("Price history for %s has no usable points", coin_id)
        return None

    first = float(prices.iloc[0])
    last = float(prices.iloc[-1])
    change_pct = (last - first) / first * 100 if first > 0 else 0.0

    return PriceHistorySummary(
        coin_id=coin_id,
        days=days,
        first=round(first, 8),
        last=round(last, 8),
        high=round(float(prices.max()), 8),
        low=round(float(prices.min()), 8),
        change_pct=round(change_pct, 2),
    )
