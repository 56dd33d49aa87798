"""CSV export of canonical orders."""

from boughtlist.adapters.export.csv_exporter import (
    CSV_HEADER,
    export_filename,
    orders_to_csv,
    parse_orders_csv,
    read_orders_csv,
    write_orders_csv,
)

__all__ = [
    "CSV_HEADER",
    "export_filename",
    "orders_to_csv",
    "parse_orders_csv",
    "read_orders_csv",
    "write_orders_csv",
]
