"""CSV export and re-import of canonical orders.

The file layout matches the legacy download: a fixed nine-column header,
every field quoted, embedded quotes doubled, UTF-8 with a byte-order mark so
spreadsheet applications pick up the encoding.
"""

from __future__ import annotations

from collections.abc import Iterable
import csv
import io
from pathlib import Path
from typing import TextIO

from pydantic import ValidationError

from boughtlist.core.entities import CanonicalOrder
from boughtlist.errors import CsvFormatError

CSV_HEADER = (
    "Order ID",
    "Date",
    "Seller",
    "Shop Name",
    "Product",
    "Quantity",
    "Price",
    "Status",
    "Currency",
)

# Column header -> CanonicalOrder field, in column order.
_COLUMN_FIELDS = dict(
    zip(
        CSV_HEADER,
        (
            "order_id",
            "date",
            "seller",
            "shop_name",
            "product",
            "quantity",
            "price",
            "status",
            "currency",
        ),
        strict=True,
    )
)

CSV_ENCODING = "utf-8-sig"


def order_to_row(order: CanonicalOrder) -> list[str]:
    """Render an order as CSV cells in header order."""
    return [str(getattr(order, field)) for field in _COLUMN_FIELDS.values()]


def _write_rows(orders: Iterable[CanonicalOrder], stream: TextIO) -> int:
    writer = csv.writer(stream, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    count = 0
    for order in orders:
        writer.writerow(order_to_row(order))
        count += 1
    return count


def orders_to_csv(orders: Iterable[CanonicalOrder]) -> str:
    """Render orders as CSV text (without the byte-order mark)."""
    buffer = io.StringIO()
    _write_rows(orders, buffer)
    return buffer.getvalue()


def write_orders_csv(orders: Iterable[CanonicalOrder], csv_path: Path) -> int:
    """Write orders to ``csv_path``, creating parent directories.

    Returns:
        Number of data rows written.
    """
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    with open(csv_path, "w", encoding=CSV_ENCODING, newline="") as f:
        return _write_rows(orders, f)


def read_orders_csv(csv_path: Path) -> list[CanonicalOrder]:
    """Load orders back from an exported CSV.

    Raises:
        CsvFormatError: the file is not UTF-8 text or its rows do not match
            the export layout.
    """
    with open(csv_path, encoding=CSV_ENCODING, newline="") as f:
        try:
            text = f.read()
        except UnicodeDecodeError as e:
            raise CsvFormatError(f"{csv_path} is not UTF-8 text: {e}") from e
    return parse_orders_csv(text)


def parse_orders_csv(text: str) -> list[CanonicalOrder]:
    """Parse exported CSV text into orders."""
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    header = next(reader, None)
    if header is None or tuple(header) != CSV_HEADER:
        raise CsvFormatError(f"Unexpected CSV header: {header}")

    orders: list[CanonicalOrder] = []
    for row in reader:
        if not row:
            continue
        if len(row) != len(CSV_HEADER):
            raise CsvFormatError(
                f"Expected {len(CSV_HEADER)} columns, got {len(row)}: {row}"
            )
        values = dict(zip(_COLUMN_FIELDS.values(), row, strict=True))
        try:
            orders.append(CanonicalOrder(**values))
        except ValidationError as e:
            raise CsvFormatError(f"Invalid order row {row}: {e}") from e
    return orders


def export_filename(page: int, total: int) -> str:
    """File name for the accumulated export after ``page``."""
    return f"orders_page_{page}_total_{total}.csv"
