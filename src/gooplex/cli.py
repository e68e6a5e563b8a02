"""Typer-based CLI for querying the exchange through the canonical adapter."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from .exchanges.gooplex import GooplexAdapter


# Import with local function to avoid circular imports
def _load_settings(config_path: Optional[Path] = None):
    from .config import load_settings
    return load_settings(config_path)

def _create_adapter(settings, exchange: Optional[str] = None):
    from .exchanges.factory import create_exchange_adapter
    return create_exchange_adapter(exchange, settings)

def _configure_logging(log_dir: Path | None = None, level: str | None = None):
    from .logging import configure_logging
    return configure_logging(log_dir, level)

app = typer.Typer(help="Gooplex exchange adapter CLI")
console = Console()
logger = logging.getLogger(__name__)

_log_options: dict[str, Any] = {"log_dir": None, "level": None}


@app.callback()
def main(
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also write a rotating log file here"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
) -> None:
    """Gooplex exchange adapter CLI."""
    _log_options.update(log_dir=log_dir, level=log_level)


def run_cli(argv: list[str] | None = None) -> None:
    """Run CLI with optional argv parameter."""
    app(argv)


def _fmt(value: Any) -> str:
    return "-" if value is None else str(value)


def _run(
    config: Optional[Path],
    exchange: Optional[str],
    action: Callable[["GooplexAdapter"], Awaitable[None]],
) -> None:
    """Build an adapter, run ``action`` against it and always close it."""
    _configure_logging(_log_options["log_dir"], _log_options["level"])

    async def _main() -> None:
        settings = _load_settings(config)
        adapter = _create_adapter(settings, exchange)
        try:
            await action(adapter)
        finally:
            await adapter.close()

    try:
        asyncio.run(_main())
    except Exception as e:
        logger.error("Command failed: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def markets(
    exchange: Optional[str] = typer.Option(None, help="Exchange name (gooplex or binance)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """List markets in canonical form."""

    async def action(adapter) -> None:
        table = Table(title="Markets")
        table.add_column("Symbol", style="cyan")
        table.add_column("Id")
        table.add_column("Type")
        table.add_column("Active")
        table.add_column("Price prec.", justify="right")
        table.add_column("Amount prec.", justify="right")
        for market in await adapter.fetch_markets():
            table.add_row(
                market.symbol,
                market.id,
                market.type,
                _fmt(market.active),
                _fmt(market.precision.price),
                _fmt(market.precision.amount),
            )
        console.print(table)

    _run(config, exchange, action)


@app.command()
def ticker(
    symbol: str = typer.Argument(..., help="Canonical symbol, e.g. BTC/USDT"),
    exchange: Optional[str] = typer.Option(None, help="Exchange name (gooplex or binance)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the 24h ticker for a symbol."""

    async def action(adapter) -> None:
        t = await adapter.fetch_ticker(symbol)
        console.print(Panel.fit(
            f"Last: {_fmt(t.last)}\n"
            f"Bid: {_fmt(t.bid)} ({_fmt(t.bid_volume)})\n"
            f"Ask: {_fmt(t.ask)} ({_fmt(t.ask_volume)})\n"
            f"High/Low: {_fmt(t.high)} / {_fmt(t.low)}\n"
            f"Change: {_fmt(t.percentage)}%\n"
            f"Volume: {_fmt(t.base_volume)}\n"
            f"Time: {_fmt(t.datetime)}",
            title=f"Ticker {t.symbol}",
        ))

    _run(config, exchange, action)


@app.command()
def orderbook(
    symbol: str = typer.Argument(..., help="Canonical symbol, e.g. BTC/USDT"),
    limit: int = typer.Option(10, help="Depth (5, 10, 20, 50, 100 or 500)"),
    exchange: Optional[str] = typer.Option(None, help="Exchange name (gooplex or binance)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the order book for a symbol."""

    async def action(adapter) -> None:
        book = await adapter.fetch_order_book(symbol, limit)
        table = Table(title=f"Order book {book.symbol}")
        table.add_column("Bid amount", justify="right", style="green")
        table.add_column("Bid", justify="right", style="green")
        table.add_column("Ask", justify="right", style="red")
        table.add_column("Ask amount", justify="right", style="red")
        for i in range(max(len(book.bids), len(book.asks))):
            bid = book.bids[i] if i < len(book.bids) else (None, None)
            ask = book.asks[i] if i < len(book.asks) else (None, None)
            table.add_row(_fmt(bid[1]), _fmt(bid[0]), _fmt(ask[0]), _fmt(ask[1]))
        console.print(table)

    _run(config, exchange, action)


@app.command()
def trades(
    symbol: str = typer.Argument(..., help="Canonical symbol, e.g. BTC/USDT"),
    limit: int = typer.Option(20, help="Number of trades"),
    exchange: Optional[str] = typer.Option(None, help="Exchange name (gooplex or binance)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show recent public trades."""

    async def action(adapter) -> None:
        table = Table(title=f"Trades {symbol}")
        table.add_column("Id")
        table.add_column("Time")
        table.add_column("Side")
        table.add_column("Price", justify="right")
        table.add_column("Amount", justify="right")
        table.add_column("Taker/Maker")
        for trade in await adapter.fetch_trades(symbol, limit=limit):
            table.add_row(
                _fmt(trade.id),
                _fmt(trade.datetime),
                _fmt(trade.side),
                _fmt(trade.price),
                _fmt(trade.amount),
                _fmt(trade.taker_or_maker),
            )
        console.print(table)

    _run(config, exchange, action)


@app.command()
def balance(
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show account balances (requires credentials)."""

    async def action(adapter) -> None:
        snapshot = await adapter.fetch_balance()
        table = Table(title="Balances")
        table.add_column("Currency", style="cyan")
        table.add_column("Free", justify="right")
        table.add_column("Used", justify="right")
        table.add_column("Total", justify="right")
        for code, b in sorted(snapshot.balances.items()):
            table.add_row(code, str(b.free), str(b.used), str(b.total))
        console.print(table)

    _run(config, "gooplex", action)


@app.command()
def status(
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show exchange status (synthesized locally, not a liveness probe)."""

    async def action(adapter) -> None:
        st = await adapter.fetch_status()
        note = " [yellow](synthesized)[/yellow]" if st.synthesized else ""
        console.print(f"Status: [green]{st.status}[/green]{note} updated={st.updated}")

    _run(config, "gooplex", action)


@app.command()
def fees(
    symbol: Optional[str] = typer.Argument(None, help="Canonical symbol; all markets when omitted"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show trading fees (static configuration, not a live quote)."""

    async def action(adapter) -> None:
        if symbol:
            rows = [await adapter.fetch_trading_fee(symbol)]
        else:
            rows = list((await adapter.fetch_trading_fees()).values())
        table = Table(title="Trading fees (static)")
        table.add_column("Symbol", style="cyan")
        table.add_column("Maker", justify="right")
        table.add_column("Taker", justify="right")
        for fee in rows:
            table.add_row(fee.symbol, _fmt(fee.maker), _fmt(fee.taker))
        console.print(table)

    _run(config, "gooplex", action)


if __name__ == "__main__":
    run_cli()
