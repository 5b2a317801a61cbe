"""Dashboard agent: polls market data, values the portfolio, pushes triggered alerts."""

import asyncio
from datetime import datetime, timezone

from pydantic import BaseModel

from src.analyzers.alerts import evaluate_alerts
from src.analyzers.valuation import value_portfolio
from src.data_sources import coingecko
from src.formatters.dashboard_message import format_alert_triggered, format_dashboard
from src.models.crypto import Quote, index_quotes
from src.models.portfolio import AlertEvaluation, AlertStatus, PortfolioSnapshot
from src.notifiers.telegram import TelegramNotifier, strip_html
from src.services.alert_service import AlertService
from src.services.auth_service import AuthService
from src.services.portfolio_service import PortfolioService
from src.services.watchlist_service import WatchlistService
from src.storage.store import Store
from src.utils.config import AppConfig, load_config
from src.utils.logger import setup_logger

logger = setup_logger("dashboard_agent")


class DashboardState(BaseModel):
    timestamp: datetime
    currency: str
    quotes: list[Quote] = []
    quotes_by_id: dict[str, Quote] = {}
    snapshot: PortfolioSnapshot
    watched: frozenset[str] = frozenset()
    alerts: list[AlertEvaluation] = []
    errors: list[str] = []
    fetch_error: str | None = None


class AlertTracker:
    """Remembers which alerts were already reported as triggered.

    An alert is reported again only after it has left the triggered state.
    An alert with no quote (market data outage) keeps its previous standing.
    """

    def __init__(self):
        self._notified: set[str] = set()

    def newly_triggered(self, evaluations: list[AlertEvaluation]) -> list[AlertEvaluation]:
        fresh = []
        triggered_now = set()
        for ev in evaluations:
            if not ev.rule.is_active:
                continue
            if ev.status == AlertStatus.UNKNOWN and ev.rule.id in self._notified:
                triggered_now.add(ev.rule.id)
                continue
            if ev.status != AlertStatus.TRIGGERED:
                continue
            triggered_now.add(ev.rule.id)
            if ev.rule.id not in self._notified:
                fresh.append(ev)
        self._notified = triggered_now
        return fresh


def fetch_quotes(config: AppConfig) -> tuple[list[Quote], str | None]:
    """Fetch quotes for the configured currency. A failure means no quotes, not a crash."""
    market = config.market
    try:
        quotes = coingecko.get_markets(
            currency=market.currency, per_page=market.per_page, order=market.order
        )
        return quotes, None
    except Exception as e:
        logger.error("Failed to fetch market data: %s", e)
        return [], f"Market data unavailable: {e}"


def refresh(config: AppConfig, store: Store, user_id: str) -> DashboardState:
    """Run one refresh cycle against a single consistent set of quotes."""
    currency = config.market.currency
    quotes, error = fetch_quotes(config)
    quotes_by_id = index_quotes(quotes)

    holdings = PortfolioService(store).list_holdings(user_id)
    watched = WatchlistService(store).coin_ids(user_id)
    rules = AlertService(store).list(user_id)

    snapshot = value_portfolio(holdings, quotes_by_id, currency)
    evaluations = evaluate_alerts(rules, quotes_by_id)

    logger.info(
        "Refreshed: %d quotes, %d holdings, value %.2f %s (%.2f%%)",
        len(quotes),
        len(holdings),
        snapshot.total_value,
        currency,
        snapshot.change_percent,
    )

    return DashboardState(
        timestamp=datetime.now(timezone.utc),
        currency=currency,
        quotes=quotes,
        quotes_by_id=quotes_by_id,
        snapshot=snapshot,
        watched=watched,
        alerts=evaluations,
        errors=[error] if error else [],
        fetch_error=error,
    )


def render(state: DashboardState, config: AppConfig) -> str:
    sections = config.sections
    return format_dashboard(
        snapshot=state.snapshot if sections.portfolio else None,
        watched=state.watched if sections.watchlist else None,
        evaluations=state.alerts if sections.alerts else None,
        quotes=state.quotes,
        quotes_by_id=state.quotes_by_id,
        currency=state.currency,
        top_coins=config.market.top_coins if sections.top_coins else 0,
        errors=state.errors,
    )


async def run(dry_run: bool = False, once: bool = False, config_path: str | None = None) -> None:
    """Poll until cancelled (or for a single cycle with once=True)."""
    config = load_config(config_path, require_telegram=not dry_run)
    notifier = None
    if not dry_run:
        notifier = TelegramNotifier(config.telegram.bot_token, config.telegram.chat_id)

    tracker = AlertTracker()
    with Store(config.storage.resolved_dir()) as store:
        user = AuthService(store).login(config.user.email, config.user.name)
        first = True
        fetch_failing = False

        while True:
            state = refresh(config, store, user.id)
            fresh = tracker.newly_triggered(state.alerts)
            alert_messages = [format_alert_triggered(ev, state.currency) for ev in fresh]

            if dry_run:
                print("\n" + "=" * 60)
                print(strip_html(render(state, config)))
                for msg in alert_messages:
                    print("-" * 60)
                    print(strip_html(msg))
                print("=" * 60)
            else:
                if state.fetch_error and not fetch_failing:
                    await notifier.send_error(state.fetch_error)
                if first:
                    ok = await notifier.send_message(render(state, config))
                    if not ok:
                        logger.error("Failed to send dashboard message")
                if alert_messages:
                    sent = await notifier.send_alerts(alert_messages)
                    logger.info("Sent %d/%d alert notifications", sent, len(alert_messages))

            first = False
            fetch_failing = state.fetch_error is not None
            if once:
                return
            await asyncio.sleep(config.market.refresh_interval)


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
