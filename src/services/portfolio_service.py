import math
from datetime import datetime

from src.models.crypto import Quote
from src.models.portfolio import (
    Holding,
    HoldingCreate,
    Transaction,
    TransactionType,
    utcnow,
)
from src.services.validation import validate_input
from src.storage.store import Store
from src.utils.errors import InvalidInputError, NotFoundError
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


def _check_price(price: float | None) -> None:
    """Ledger prices are optional but must be finite and non-negative when given."""
    if price is not None and (not math.isfinite(price) or price < 0):
        raise InvalidInputError(f"Invalid price: {price!r}", ["price"])


class PortfolioService:
    """Holdings CRUD plus the buy/sell ledger that goes with it."""

    def __init__(self, store: Store):
        self.holdings = store.collection("portfolios")
        self.transactions = store.collection("transactions")

    def list_holdings(self, user_id: str) -> list[Holding]:
        return [Holding(**r) for r in self.holdings.list({"user_id": user_id})]

    def get_holding(self, holding_id: str) -> Holding | None:
        record = self.holdings.get_by_id(holding_id)
        return Holding(**record) if record else None

    def add_holding(
        self,
        user_id: str,
        quote: Quote,
        amount: float,
        purchase_price: float,
        purchase_date: datetime | None = None,
    ) -> Holding:
        """Record a new position. Non-positive amount or price is rejected, not stored."""
        data = dict(
            user_id=user_id,
            coin_id=quote.id,
            name=quote.name,
            symbol=quote.symbol,
            amount=amount,
            purchase_price=purchase_price,
            image_url=quote.image or None,
        )
        if purchase_date is not None:
            data["purchase_date"] = purchase_date
        created = validate_input(HoldingCreate, **data)

        now = utcnow()
        record = {
            **created.model_dump(mode="json"),
            "created_at": now.isoformat(),
            "updated_at": now.isoformat(),
        }
        holding_id = self.holdings.insert(record)
        holding = Holding(id=holding_id, **record)
        logger.info("Added %s %s to portfolio of %s", holding.amount, holding.coin_id, user_id)

        self._record(holding, TransactionType.BUY, holding.amount, holding.purchase_price)
        return holding

    def set_amount(
        self, holding_id: str, amount: float, price: float | None = None
    ) -> Holding | None:
        """Change the held amount. Zero or less removes the holding and returns None.

        ``price`` is what the ledger entry for the difference is booked at;
        defaults to the holding's purchase price.
        """
        holding = self.get_holding(holding_id)
        if holding is None:
            raise NotFoundError("portfolios", holding_id)
        if amount is None or not math.isfinite(amount):
            raise InvalidInputError(f"Invalid amount: {amount!r}", ["amount"])
        _check_price(price)

        if amount <= 0:
            self.remove_holding(holding_id, price=price)
            return None

        record = self.holdings.update(
            holding_id, {"amount": amount, "updated_at": utcnow().isoformat()}
        )
        updated = Holding(**record)

        diff = amount - holding.amount
        if diff:
            kind = TransactionType.BUY if diff > 0 else TransactionType.SELL
            self._record(updated, kind, abs(diff), price if price is not None else holding.purchase_price)
        return updated

    def remove_holding(self, holding_id: str, price: float | None = None) -> bool:
        _check_price(price)
        holding = self.get_holding(holding_id)
        if holding is None:
            return False
        deleted = self.holdings.delete(holding_id)
        if deleted:
            logger.info("Removed holding %s (%s)", holding_id, holding.coin_id)
            self._record(
                holding,
                TransactionType.SELL,
                holding.amount,
                price if price is not None else holding.purchase_price,
            )
        return deleted

    def list_transactions(self, user_id: str) -> list[Transaction]:
        return [Transaction(**r) for r in self.transactions.list({"user_id": user_id})]

    def _record(
        self, holding: Holding, kind: TransactionType, amount: float, price: float
    ) -> None:
        record = {
            "user_id": holding.user_id,
            "coin_id": holding.coin_id,
            "name": holding.name,
            "symbol": holding.symbol,
            "type": kind.value,
            "amount": amount,
            "price": price,
            "total_value": amount * price,
            "created_at": utcnow().isoformat(),
        }
        self.transactions.insert(record)
