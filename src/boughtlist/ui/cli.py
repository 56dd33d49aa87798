from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path
import sys

from dotenv import load_dotenv
from loguru import logger
from rich.console import Console
from rich.table import Table
import typer

from boughtlist.adapters.export.csv_exporter import (
    orders_to_csv,
    read_orders_csv,
    write_orders_csv,
)
from boughtlist.adapters.providers.json_file import JsonFileBatchProvider
from boughtlist.config import BoughtlistConfig, load_config_from_env
from boughtlist.core.entities import CanonicalOrder
from boughtlist.core.normalizer import OrderNormalizer, ZeroPolicy
from boughtlist.core.query import (
    filter_by_date_range,
    filter_by_price_range,
    filter_by_seller,
    filter_by_status,
    search_orders,
    summarize,
)
from boughtlist.core.session import IngestStatus, OrderSession
from boughtlist.errors import BoughtlistError
from boughtlist.services.collector import OrderCollector

# Load environment variables from .env
load_dotenv()

app = typer.Typer(
    help="boughtlist: normalize, deduplicate and export purchased-order pages.",
    no_args_is_help=True,
)

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} [{level}] {name}: {message}"


def configure_logging(level: str) -> None:
    """Send loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, format=_LOG_FORMAT, level=level)


def _load_config() -> BoughtlistConfig:
    try:
        return load_config_from_env()
    except ValueError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(1) from None


def _fail(error: BoughtlistError) -> typer.Exit:
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(1)


@app.callback()
def main_callback() -> None:
    """Configure logging from the environment before any command runs."""
    configure_logging(_load_config().log_level)


@app.command("collect")
def collect(
    pages: list[Path] = typer.Argument(  # noqa: B008
        ..., help="Saved page data JSON files, in page order"
    ),
    out_dir: Path | None = typer.Option(  # noqa: B008
        None, help="Directory for CSV exports (default: BOUGHTLIST_EXPORT_DIR)"
    ),
    legacy_falsy: bool = typer.Option(
        False,
        "--legacy-falsy",
        help="Treat numeric zero quantities/prices as missing.",
    ),
) -> None:
    """
    Ingest saved pages one by one and export the accumulated orders.

    After every page that contributes new orders, a CSV holding everything
    collected so far is written. Pages identical to the previous one are
    reported as stale and skipped.
    """
    config = _load_config()
    zero_policy = ZeroPolicy.LEGACY_FALSY if legacy_falsy else config.zero_policy
    session = OrderSession(
        OrderNormalizer(zero_policy=zero_policy, currency=config.default_currency)
    )
    collector = OrderCollector(session, out_dir or config.export_dir)

    try:
        report = collector.collect(JsonFileBatchProvider(pages))
    except BoughtlistError as e:
        raise _fail(e) from None

    for page_path, outcome in zip(pages, report.pages, strict=True):
        result = outcome.result
        if result.status is IngestStatus.STALE:
            typer.echo(f"{page_path}: same data as previous page, skipped")
        elif result.status is IngestStatus.NO_NEW_ORDERS:
            typer.echo(f"{page_path}: no new orders")
        else:
            typer.echo(
                f"{page_path}: page {result.page}, {len(result.added)} new orders "
                f"({result.total} total) -> {outcome.export_path}"
            )
    typer.echo(f"Collected {len(report.orders)} orders")


def _load_orders(csv_path: Path) -> list[CanonicalOrder]:
    try:
        return read_orders_csv(csv_path)
    except OSError as e:
        typer.echo(f"Cannot read {csv_path}: {e}", err=True)
        raise typer.Exit(1) from None
    except BoughtlistError as e:
        raise _fail(e) from None


def _breakdown_table(title: str, column: str, counts: dict[str, int]) -> Table:
    table = Table(title=title)
    table.add_column(column)
    table.add_column("Orders", justify="right")
    for key, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
        table.add_row(key, str(count))
    return table


@app.command("summary")
def summary(csv_path: Path) -> None:
    """Print order count, price totals and breakdowns for an exported CSV."""
    stats = summarize(_load_orders(csv_path))

    typer.echo(f"Orders: {stats.count}")
    typer.echo(f"Total price: {stats.total_price}")
    typer.echo(f"Average price: {stats.average_price}")

    console = Console()
    if stats.status_breakdown:
        console.print(_breakdown_table("By status", "Status", stats.status_breakdown))
    if stats.seller_breakdown:
        console.print(_breakdown_table("By seller", "Seller", stats.seller_breakdown))


@app.command("search")
def search(
    csv_path: Path,
    keyword: str | None = typer.Option(
        None, help="Match order id, seller, shop or product"
    ),
    status: str | None = typer.Option(None, help="Status substring"),
    seller: str | None = typer.Option(None, help="Seller substring, any case"),
    since: str | None = typer.Option(None, help="Earliest order date (YYYY-MM-DD)"),
    until: str | None = typer.Option(None, help="Latest order date (YYYY-MM-DD)"),
    min_price: str | None = typer.Option(None, help="Lowest price"),
    max_price: str | None = typer.Option(None, help="Highest price"),
    out: Path | None = typer.Option(  # noqa: B008
        None, help="Write matches to this CSV instead of stdout"
    ),
) -> None:
    """Filter an exported CSV; all given filters must match."""
    orders = _load_orders(csv_path)

    if keyword:
        orders = search_orders(orders, keyword)
    if status:
        orders = filter_by_status(orders, status)
    if seller:
        orders = filter_by_seller(orders, seller)
    if since or until:
        orders = filter_by_date_range(
            orders, since or date.min, until or date.max
        )
    if min_price is not None or max_price is not None:
        orders = filter_by_price_range(
            orders,
            min_price if min_price is not None else Decimal("-Infinity"),
            max_price if max_price is not None else Decimal("Infinity"),
        )

    if out is None:
        typer.echo(orders_to_csv(orders), nl=False)
        return
    rows = write_orders_csv(orders, out)
    typer.echo(f"Wrote {rows} orders to {out}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
