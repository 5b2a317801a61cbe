from datetime import datetime, timezone

from src.formatters.currency import format_currency, format_percentage
from src.models.crypto import PriceHistorySummary, Quote
from src.models.portfolio import AlertEvaluation, AlertStatus, PortfolioSnapshot
from src.notifiers.telegram import escape_html

_STATUS_LABELS = {
    AlertStatus.TRIGGERED: "TRIGGERED",
    AlertStatus.WAITING: "Waiting",
    AlertStatus.UNKNOWN: "No data",
}


def _direction(is_positive: bool) -> str:
    return "▲" if is_positive else "▼"


def _change(pct: float, is_positive: bool) -> str:
    """Direction marker plus absolute percent, e.g. "▼ 3.46%"."""
    return f"{_direction(is_positive)} {format_percentage(abs(pct))}"


def format_portfolio(snapshot: PortfolioSnapshot) -> str:
    cur = snapshot.currency
    sign = "+" if snapshot.is_positive else ""
    lines = ["<b>PORTFOLIO</b>"]
    lines.append(f"Value: <b>{format_currency(snapshot.total_value, cur)}</b>")
    lines.append(
        f"Today: {sign}{format_currency(snapshot.total_change, cur)} "
        f"({_change(snapshot.change_percent, snapshot.is_positive)})"
    )

    if not snapshot.holdings:
        lines.append("")
        lines.append("No holdings yet.")
        return "\n".join(lines)

    for v in snapshot.holdings:
        h = v.holding
        if not v.priced:
            continue
        lines.append("")
        lines.append(
            f"<b>{escape_html(h.symbol.upper())}</b> - {escape_html(h.name)} | {h.amount:g}"
        )
        lines.append(
            f"{format_currency(v.value, cur)} ({_change(v.change_percent, v.is_positive)})"
        )

    if snapshot.missing_coin_ids:
        missing = ", ".join(escape_html(c) for c in snapshot.missing_coin_ids)
        lines.append("")
        lines.append(f"<i>No price data for: {missing}</i>")

    return "\n".join(lines)


def format_watchlist(coin_ids: frozenset[str], quotes_by_id: dict[str, Quote], currency: str) -> str:
    lines = ["<b>WATCHLIST</b>"]
    if not coin_ids:
        lines.append("Nothing watched yet.")
        return "\n".join(lines)

    for coin_id in sorted(coin_ids):
        q = quotes_by_id.get(coin_id)
        if q is None:
            lines.append(f"- {escape_html(coin_id)}: no data")
            continue
        pct = q.price_change_percentage_24h
        lines.append(
            f"- <b>{escape_html(q.symbol.upper())}</b> {format_currency(q.current_price, currency)} "
            f"({_change(pct, pct >= 0)})"
        )
    return "\n".join(lines)


def format_alerts(evaluations: list[AlertEvaluation], currency: str) -> str:
    lines = ["<b>PRICE ALERTS</b>"]
    if not evaluations:
        lines.append("No alerts set.")
        return "\n".join(lines)

    for ev in evaluations:
        r = ev.rule
        state = _STATUS_LABELS[ev.status]
        if not r.is_active:
            state += " (off)"
        lines.append(
            f"- {escape_html(r.symbol.upper())} {r.condition.value} "
            f"{format_currency(r.target_price, currency)}: {state}"
        )
    return "\n".join(lines)


def format_top_coins(quotes: list[Quote], currency: str, limit: int = 10) -> str:
    lines = [f"<b>TOP {limit} BY MARKET CAP</b>"]
    for i, q in enumerate(quotes[:limit], start=1):
        rank = q.market_cap_rank or i
        pct = q.price_change_percentage_24h
        lines.append(
            f"{rank}. <b>{escape_html(q.symbol.upper())}</b> "
            f"{format_currency(q.current_price, currency)} ({_change(pct, pct >= 0)}) "
            f"MCap {format_currency(q.market_cap, currency, compact=True)}"
        )
    return "\n".join(lines)


def format_dashboard(
    snapshot: PortfolioSnapshot | None,
    watched: frozenset[str] | None,
    evaluations: list[AlertEvaluation] | None,
    quotes: list[Quote],
    quotes_by_id: dict[str, Quote],
    currency: str,
    top_coins: int = 10,
    errors: list[str] | None = None,
) -> str:
    """Build the full HTML dashboard message. None skips a section."""
    now = datetime.now(timezone.utc)
    parts: list[str] = [
        f"<b>Crypto Portfolio Dashboard</b>\n"
        f"<i>{now.strftime('%A, %b %d, %Y - %H:%M UTC')}</i>\n"
        f"{len(quotes)} quotes in {currency.upper()}"
    ]

    if snapshot is not None:
        parts.append(format_portfolio(snapshot))
    if watched is not None:
        parts.append(format_watchlist(watched, quotes_by_id, currency))
    if evaluations is not None:
        parts.append(format_alerts(evaluations, currency))
    if quotes and top_coins:
        parts.append(format_top_coins(quotes, currency, top_coins))

    if errors:
        lines = ["<b>WARNINGS</b>"]
        for err in errors:
            lines.append(f"- {escape_html(err)}")
        parts.append("\n".join(lines))

    return "\n\n".join(parts)


def format_alert_triggered(evaluation: AlertEvaluation, currency: str) -> str:
    r = evaluation.rule
    return (
        f"<b>Price alert: {escape_html(r.name)} ({escape_html(r.symbol.upper())})</b>\n"
        f"Now {format_currency(evaluation.current_price, currency)}, "
        f"{r.condition.value} target {format_currency(r.target_price, currency)}"
    )


def format_price_history(summary: PriceHistorySummary, currency: str) -> str:
    return "\n".join(
        [
            f"<b>{escape_html(summary.coin_id)}</b> - last {summary.days}d",
            f"Now: {format_currency(summary.last, currency)} "
            f"({_change(summary.change_pct, summary.change_pct >= 0)})",
            f"High: {format_currency(summary.high, currency)}",
            f"Low: {format_currency(summary.low, currency)}",
        ]
    )
