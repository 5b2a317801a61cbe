"""Portfolio valuation against live quotes.

Holdings whose coin has no quote are skipped for every aggregate, value and
change alike. Nothing here raises on missing or stale market data.
"""

from src.models.crypto import Quote
from src.models.portfolio import Holding, HoldingValuation, PortfolioSnapshot
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


def is_positive(change_percent: float) -> bool:
    """Zero counts as positive."""
    return change_percent >= 0


def percent_change(change: float, value: float) -> float:
    """Change as a percent of value; 0.0 when there is no value to compare against."""
    if value > 0:
        return change / value * 100
    return 0.0


def value_holding(holding: Holding, quotes_by_id: dict[str, Quote]) -> HoldingValuation:
    """Value a single holding. An unpriced holding reports zeros and priced=False."""
    quote = quotes_by_id.get(holding.coin_id)
    if quote is None:
        return HoldingValuation(holding=holding)

    value = quote.current_price * holding.amount
    change = value * (quote.price_change_percentage_24h / 100)
    return HoldingValuation(
        holding=holding,
        quote=quote,
        value=value,
        change=change,
        change_percent=quote.price_change_percentage_24h,
        is_positive=is_positive(quote.price_change_percentage_24h),
        priced=True,
    )


def value_portfolio(
    holdings: list[Holding],
    quotes_by_id: dict[str, Quote],
    currency: str,
) -> PortfolioSnapshot:
    """Compute per-holding values and whole-portfolio totals for today's change."""
    valuations = [value_holding(h, quotes_by_id) for h in holdings]

    total_value = 0.0
    total_change = 0.0
    missing: list[str] = []
    for v in valuations:
        if not v.priced:
            missing.append(v.holding.coin_id)
            continue
        total_value += v.value
        total_change += v.change

    if missing:
        logger.debug("No quote for %d holding(s): %s", len(missing), ", ".join(missing))

    pct = percent_change(total_change, total_value)
    return PortfolioSnapshot(
        currency=currency,
        holdings=valuations,
        total_value=total_value,
        total_change=total_change,
        change_percent=pct,
        is_positive=is_positive(pct),
        missing_coin_ids=missing,
    )
