"""Order normalization, accumulation and queries."""

from boughtlist.core.entities import (
    DEFAULT_CURRENCY,
    DEFAULT_QUANTITY,
    SENTINEL,
    CanonicalOrder,
    RawBatch,
    RawOrder,
)
from boughtlist.core.normalizer import (
    FieldPath,
    FieldRule,
    OrderNormalizer,
    ZeroPolicy,
    default_field_rules,
    normalize,
    orders_from_batch,
    path,
)
from boughtlist.core.query import (
    OrderSummary,
    filter_by_date_range,
    filter_by_price_range,
    filter_by_seller,
    filter_by_status,
    find_order,
    search_orders,
    summarize,
)
from boughtlist.core.session import (
    BatchFingerprint,
    IngestResult,
    IngestStatus,
    MergeResult,
    OrderSession,
    OrderSet,
    fingerprint_batch,
    merge,
)

__all__ = [
    "DEFAULT_CURRENCY",
    "DEFAULT_QUANTITY",
    "SENTINEL",
    "BatchFingerprint",
    "CanonicalOrder",
    "FieldPath",
    "FieldRule",
    "IngestResult",
    "IngestStatus",
    "MergeResult",
    "OrderNormalizer",
    "OrderSession",
    "OrderSet",
    "OrderSummary",
    "RawBatch",
    "RawOrder",
    "ZeroPolicy",
    "default_field_rules",
    "filter_by_date_range",
    "filter_by_price_range",
    "filter_by_seller",
    "filter_by_status",
    "find_order",
    "fingerprint_batch",
    "merge",
    "normalize",
    "orders_from_batch",
    "path",
    "search_orders",
    "summarize",
]
