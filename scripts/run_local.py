#!/usr/bin/env python3
"""Run the dashboard locally and manage portfolio records from the command line."""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.agents import dashboard_agent  # noqa: E402
from src.analyzers.price_history import summarize_price_history  # noqa: E402
from src.analyzers.search import search_quotes  # noqa: E402
from src.data_sources import coingecko  # noqa: E402
from src.formatters.currency import format_currency  # noqa: E402
from src.formatters.dashboard_message import format_price_history  # noqa: E402
from src.models.crypto import index_quotes  # noqa: E402
from src.notifiers.telegram import strip_html  # noqa: E402
from src.services.alert_service import AlertService  # noqa: E402
from src.services.auth_service import AuthService  # noqa: E402
from src.services.portfolio_service import PortfolioService  # noqa: E402
from src.services.watchlist_service import WatchlistService  # noqa: E402
from src.storage.store import Store  # noqa: E402
from src.utils.config import load_config  # noqa: E402
from src.utils.errors import DashboardError  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crypto portfolio dashboard")
    parser.add_argument("--config", help="Path to YAML config")
    sub = parser.add_subparsers(dest="command", required=True)

    dash = sub.add_parser("dashboard", help="Poll market data and show the dashboard")
    dash.add_argument("--dry-run", action="store_true", help="Print instead of sending to Telegram")
    dash.add_argument("--once", action="store_true", help="Run a single refresh cycle")

    add = sub.add_parser("add-holding", help="Add a coin to the portfolio")
    add.add_argument("coin_id")
    add.add_argument("amount", type=float)
    add.add_argument("purchase_price", type=float)

    setp = sub.add_parser("set-amount", help="Change a holding's amount (0 removes it)")
    setp.add_argument("holding_id")
    setp.add_argument("amount", type=float)

    rm = sub.add_parser("remove-holding", help="Delete a holding")
    rm.add_argument("holding_id")

    watch = sub.add_parser("watch", help="Toggle a coin on the watchlist")
    watch.add_argument("coin_id")

    alert = sub.add_parser("alert-add", help="Create a price alert")
    alert.add_argument("coin_id")
    alert.add_argument("condition", choices=["above", "below"])
    alert.add_argument("target_price", type=float)

    toggle = sub.add_parser("alert-toggle", help="Turn an alert on or off")
    toggle.add_argument("alert_id")

    search = sub.add_parser("search", help="Find coins by name or symbol")
    search.add_argument("term")

    chart = sub.add_parser("chart", help="Summarize a coin's recent price history")
    chart.add_argument("coin_id")
    chart.add_argument("--days", type=int, default=7, choices=[1, 7, 30, 90, 365])

    return parser


def _market(config):
    return coingecko.get_markets(
        currency=config.market.currency,
        per_page=config.market.per_page,
        order=config.market.order,
    )


def _find_quote(config, coin_id: str):
    """Exact coin id first, then a name/symbol search that must be unambiguous."""
    quotes = _market(config)
    quote = index_quotes(quotes).get(coin_id)
    if quote is not None:
        return quote
    matches = search_quotes(quotes, coin_id)
    if len(matches) == 1:
        return matches[0]
    if matches:
        ids = ", ".join(q.id for q in matches)
        raise DashboardError(f"Ambiguous coin \"{coin_id}\", matches: {ids}")
    raise DashboardError(f"Coin not found in current market list: {coin_id}")


def run_command(args) -> None:
    config = load_config(args.config, require_telegram=False)
    currency = config.market.currency

    if args.command == "chart":
        history = coingecko.get_price_history(args.coin_id, currency, args.days)
        summary = summarize_price_history(args.coin_id, history, args.days)
        if summary is None:
            print(f"No price history for {args.coin_id}")
            return
        print(strip_html(format_price_history(summary, currency)))
        return

    if args.command == "search":
        matches = search_quotes(_market(config), args.term)
        if not matches:
            print(f"No coins match \"{args.term}\"")
        for q in matches:
            print(f"{q.id:<20} {q.symbol.upper():<8} {format_currency(q.current_price, currency)}")
        return

    with Store(config.storage.resolved_dir()) as store:
        user = AuthService(store).login(config.user.email, config.user.name)

        if args.command == "add-holding":
            quote = _find_quote(config, args.coin_id)
            holding = PortfolioService(store).add_holding(
                user.id, quote, args.amount, args.purchase_price
            )
            print(
                f"Added {holding.amount:g} {holding.symbol.upper()} at "
                f"{format_currency(holding.purchase_price, currency)} (id {holding.id})"
            )
        elif args.command == "set-amount":
            holding = PortfolioService(store).set_amount(args.holding_id, args.amount)
            print("Holding removed" if holding is None else f"Amount set to {holding.amount:g}")
        elif args.command == "remove-holding":
            removed = PortfolioService(store).remove_holding(args.holding_id)
            print("Holding removed" if removed else "No such holding")
        elif args.command == "watch":
            quote = _find_quote(config, args.coin_id)
            watched = WatchlistService(store).toggle(user.id, quote)
            print(f"{quote.name} {'added to' if watched else 'removed from'} watchlist")
        elif args.command == "alert-add":
            quote = _find_quote(config, args.coin_id)
            rule = AlertService(store).create(user.id, quote, args.target_price, args.condition)
            print(f"Alert {rule.id}: {quote.name} {rule.condition.value} "
                  f"{format_currency(rule.target_price, currency)}")
        elif args.command == "alert-toggle":
            rule = AlertService(store).toggle(args.alert_id)
            print(f"Alert {rule.id} is now {'on' if rule.is_active else 'off'}")


def main():
    args = build_parser().parse_args()

    if args.command == "dashboard":
        try:
            asyncio.run(dashboard_agent.run(dry_run=args.dry_run, once=args.once, config_path=args.config))
        except KeyboardInterrupt:
            pass
        return

    try:
        run_command(args)
    except DashboardError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
