from src.models.crypto import Quote
from src.models.portfolio import (
    AlertCondition,
    AlertEvaluation,
    AlertRule,
    AlertStatus,
    utcnow,
)


def is_triggered(condition: AlertCondition, current_price: float, target_price: float) -> bool:
    """Both boundaries are inclusive."""
    if condition == AlertCondition.ABOVE:
        return current_price >= target_price
    return current_price <= target_price


def evaluate_alert(rule: AlertRule, quotes_by_id: dict[str, Quote]) -> AlertEvaluation:
    """Derive the trigger state of a rule from the latest quotes.

    The rule's ``is_active`` flag is not consulted; callers decide what to do
    with inactive rules.
    """
    quote = quotes_by_id.get(rule.coin_id)
    if quote is None:
        return AlertEvaluation(rule=rule, status=AlertStatus.UNKNOWN)

    status = (
        AlertStatus.TRIGGERED
        if is_triggered(rule.condition, quote.current_price, rule.target_price)
        else AlertStatus.WAITING
    )
    return AlertEvaluation(rule=rule, status=status, current_price=quote.current_price)


def evaluate_alerts(
    rules: list[AlertRule], quotes_by_id: dict[str, Quote]
) -> list[AlertEvaluation]:
    return [evaluate_alert(r, quotes_by_id) for r in rules]


def toggle_alert(rule: AlertRule) -> AlertRule:
    """Return a copy of the rule with is_active flipped."""
    return rule.model_copy(update={"is_active": not rule.is_active, "updated_at": utcnow()})
