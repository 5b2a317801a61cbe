from src.analyzers.alerts import toggle_alert
from src.models.crypto import Quote
from src.models.portfolio import AlertCondition, AlertCreate, AlertRule, utcnow
from src.services.validation import validate_input
from src.storage.store import Store
from src.utils.errors import NotFoundError
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


class AlertService:
    def __init__(self, store: Store):
        self.alerts = store.collection("alerts")

    def list(self, user_id: str) -> list[AlertRule]:
        return [AlertRule(**r) for r in self.alerts.list({"user_id": user_id})]

    def get(self, alert_id: str) -> AlertRule | None:
        record = self.alerts.get_by_id(alert_id)
        return AlertRule(**record) if record else None

    def create(
        self,
        user_id: str,
        quote: Quote,
        target_price: float,
        condition: AlertCondition | str,
    ) -> AlertRule:
        """New rules start active."""
        created = validate_input(
            AlertCreate,
            user_id=user_id,
            coin_id=quote.id,
            name=quote.name,
            symbol=quote.symbol,
            target_price=target_price,
            condition=condition,
        )
        now = utcnow().isoformat()
        record = {
            **created.model_dump(mode="json"),
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        alert_id = self.alerts.insert(record)
        logger.info(
            "Created alert %s: %s %s %s", alert_id, quote.id, created.condition.value, target_price
        )
        return AlertRule(id=alert_id, **record)

    def update(
        self,
        alert_id: str,
        target_price: float | None = None,
        condition: AlertCondition | str | None = None,
    ) -> AlertRule:
        rule = self.get(alert_id)
        if rule is None:
            raise NotFoundError("alerts", alert_id)

        changes = validate_input(
            AlertCreate,
            **{
                **rule.model_dump(include=set(AlertCreate.model_fields)),
                **({"target_price": target_price} if target_price is not None else {}),
                **({"condition": condition} if condition is not None else {}),
            },
        )
        record = self.alerts.update(
            alert_id,
            {
                "target_price": changes.target_price,
                "condition": changes.condition.value,
                "updated_at": utcnow().isoformat(),
            },
        )
        return AlertRule(**record)

    def toggle(self, alert_id: str) -> AlertRule:
        rule = self.get(alert_id)
        if rule is None:
            raise NotFoundError("alerts", alert_id)

        flipped = toggle_alert(rule)
        self.alerts.update(
            alert_id,
            {"is_active": flipped.is_active, "updated_at": flipped.updated_at.isoformat()},
        )
        logger.info("Alert %s is now %s", alert_id, "active" if flipped.is_active else "inactive")
        return flipped

    def delete(self, alert_id: str) -> bool:
        return self.alerts.delete(alert_id)
