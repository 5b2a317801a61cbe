from datetime import datetime, timezone

import pytest

from src.models.crypto import Quote
from src.models.portfolio import AlertCondition, AlertRule, Holding
from src.storage.store import Store

NOW = datetime(2026, 2, 6, 16, 23, 0, tzinfo=timezone.utc)


def make_quote(coin_id="bitcoin", price=30000.0, change=5.0, **kw) -> Quote:
    return Quote(
        id=coin_id,
        symbol=kw.pop("symbol", coin_id[:3]),
        name=kw.pop("name", coin_id.title()),
        current_price=price,
        price_change_percentage_24h=change,
        **kw,
    )


def make_holding(coin_id="bitcoin", amount=2.0, purchase_price=20000.0, **kw) -> Holding:
    return Holding(
        id=kw.pop("id", f"h-{coin_id}"),
        user_id=kw.pop("user_id", "user-1"),
        coin_id=coin_id,
        name=coin_id.title(),
        symbol=coin_id[:3],
        amount=amount,
        purchase_price=purchase_price,
        purchase_date=NOW,
        **kw,
    )


def make_alert(coin_id="bitcoin", target=100.0, condition="above", **kw) -> AlertRule:
    return AlertRule(
        id=kw.pop("id", f"a-{coin_id}-{condition}"),
        user_id="user-1",
        coin_id=coin_id,
        name=coin_id.title(),
        symbol=coin_id[:3],
        target_price=target,
        condition=AlertCondition(condition),
        **kw,
    )


@pytest.fixture
def quotes():
    return [
        make_quote("bitcoin", 30000.0, 5.0, symbol="btc", name="Bitcoin", market_cap=6e11, market_cap_rank=1),
        make_quote("ethereum", 2000.0, -2.5, symbol="eth", name="Ethereum", market_cap=2.4e11, market_cap_rank=2),
    ]


@pytest.fixture
def store(tmp_path):
    with Store(tmp_path / "data") as s:
        yield s
