from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.crypto import Quote


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertCondition(str, Enum):
    ABOVE = "above"
    BELOW = "below"


class AlertStatus(str, Enum):
    TRIGGERED = "triggered"
    WAITING = "waiting"
    UNKNOWN = "unknown"  # no quote for the coin


class TransactionType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class User(BaseModel):
    id: str
    email: str
    name: str
    avatar_url: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class HoldingCreate(BaseModel):
    """User-supplied input for "add to portfolio". Rejects non-positive values."""

    user_id: str
    coin_id: str = Field(min_length=1)
    name: str
    symbol: str
    amount: float = Field(gt=0, allow_inf_nan=False)
    purchase_price: float = Field(gt=0, allow_inf_nan=False)
    purchase_date: datetime = Field(default_factory=utcnow)
    image_url: str | None = None


class Holding(HoldingCreate):
    id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class WatchlistItem(BaseModel):
    id: str
    user_id: str
    coin_id: str
    name: str
    symbol: str
    image_url: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class AlertCreate(BaseModel):
    user_id: str
    coin_id: str = Field(min_length=1)
    name: str
    symbol: str
    target_price: float = Field(gt=0, allow_inf_nan=False)
    condition: AlertCondition


class AlertRule(AlertCreate):
    model_config = ConfigDict(frozen=True)

    id: str
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AlertEvaluation(BaseModel):
    rule: AlertRule
    status: AlertStatus
    current_price: float | None = None


class Transaction(BaseModel):
    id: str
    user_id: str
    coin_id: str
    name: str
    symbol: str
    type: TransactionType
    amount: float = Field(gt=0, allow_inf_nan=False)
    price: float = Field(ge=0, allow_inf_nan=False)
    total_value: float
    created_at: datetime = Field(default_factory=utcnow)


class HoldingValuation(BaseModel):
    holding: Holding
    quote: Quote | None = None
    value: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    is_positive: bool = True
    priced: bool = False


class PortfolioSnapshot(BaseModel):
    currency: str
    holdings: list[HoldingValuation] = []
    total_value: float = 0.0
    total_change: float = 0.0
    change_percent: float = 0.0
    is_positive: bool = True
    missing_coin_ids: list[str] = []
