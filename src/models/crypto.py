from pydantic import BaseModel, ConfigDict, Field


class Quote(BaseModel):
    """Market snapshot for one coin at poll time."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)  # CoinGecko ID e.g. "bitcoin"
    symbol: str = Field(min_length=1)  # e.g. "btc"
    name: str = Field(min_length=1)  # e.g. "Bitcoin"
    current_price: float = Field(ge=0)
    price_change_percentage_24h: float = 0.0
    market_cap: float = Field(default=0.0, ge=0)
    total_volume: float = Field(default=0.0, ge=0)
    image: str = ""
    market_cap_rank: int | None = None

    @classmethod
    def from_api(cls, item: dict) -> "Quote":
        """Build a Quote from a raw /coins/markets item. Null numbers become 0."""
        return cls(
            id=item.get("id") or "",
            symbol=item.get("symbol") or "",
            name=item.get("name") or "",
            current_price=item.get("current_price") or 0,
            price_change_percentage_24h=item.get("price_change_percentage_24h") or 0,
            market_cap=item.get("market_cap") or 0,
            total_volume=item.get("total_volume") or 0,
            image=item.get("image") or "",
            market_cap_rank=item.get("market_cap_rank"),
        )


class PriceHistorySummary(BaseModel):
    coin_id: str
    days: int
    first: float
    last: float
    high: float
    low: float
    change_pct: float


def index_quotes(quotes: list[Quote]) -> dict[str, Quote]:
    """Key quotes by coin id. Later duplicates replace earlier ones."""
    return {q.id: q for q in quotes}
