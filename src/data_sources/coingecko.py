import time

import pandas as pd
import requests
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.models.crypto import Quote
from src.utils.errors import MarketDataError
from src.utils.logger import setup_logger

logger = setup_logger(__name__)

BASE_URL = "https://api.coingecko.com/api/v3"

# Simple rate limiter: track last request time
_last_request_time = 0.0
_min_interval = 2.1  # seconds between requests (30 calls/min = 2s each)


def _rate_limit() -> None:
    """Enforce rate limiting between requests."""
    global _last_request_time
    now = time.monotonic()
    elapsed = now - _last_request_time
    if elapsed < _min_interval:
        time.sleep(_min_interval - elapsed)
    _last_request_time = time.monotonic()


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=2, min=3, max=30),
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    reraise=True,
)
def _get(endpoint: str, params: dict | None = None) -> dict | list:
    """Make a rate-limited GET request to CoinGecko."""
    _rate_limit()
    url = f"{BASE_URL}/{endpoint}"
    resp = requests.get(url, params=params, timeout=15)
    resp.raise_for_status()
    return resp.json()


def parse_quotes(data: list) -> list[Quote]:
    """Validate raw market items. Malformed items are logged and dropped."""
    quotes = []
    for item in data:
        if not isinstance(item, dict):
            logger.error("Skipping non-object market item: %r", item)
            continue
        try:
            quotes.append(Quote.from_api(item))
        except ValidationError as e:
            logger.error("Failed to parse quote for %s: %s", item.get("id", "?"), e)
    return quotes


def get_markets(
    currency: str = "usd",
    per_page: int = 50,
    order: str = "market_cap_desc",
    page: int = 1,
) -> list[Quote]:
    """Fetch one page of market quotes in the target currency."""
    data = _get(
        "coins/markets",
        params={
            "vs_currency": currency.lower(),
            "order": order,
            "per_page": per_page,
            "page": page,
            "sparkline": "false",
            "price_change_percentage": "24h",
        },
    )
    if not isinstance(data, list):
        raise MarketDataError("Invalid data format received")

    quotes = parse_quotes(data)
    logger.info("Fetched %d/%d quotes in %s", len(quotes), len(data), currency.lower())
    return quotes


def get_price_history(coin_id: str, currency: str = "usd", days: int = 7) -> pd.DataFrame:
    """Fetch the price series for a coin. Returns DataFrame indexed by timestamp with a price column."""
    try:
        data = _get(
            f"coins/{coin_id}/market_chart",
            params={"vs_currency": currency.lower(), "days": days},
        )
        prices = data.get("prices", []) if isinstance(data, dict) else []
        if not prices:
            return pd.DataFrame()

        df = pd.DataFrame(prices, columns=["timestamp", "price"])
        df["timestamp"] = pd.to_datetime(df["timestamp"], unit="ms")
        df.set_index("timestamp", inplace=True)
        return df
    except Exception as e:
        logger.error("Failed to fetch price history for %s: %s", coin_id, e)
        return pd.DataFrame()
