"""Read-only filters and summary statistics over canonical orders.

All helpers accept any iterable of CanonicalOrder (an OrderSet included) and
return new lists. Unparseable dates and prices are left out of the results
instead of raising.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import re

from boughtlist.core.entities import SENTINEL, CanonicalOrder

_CENTS = Decimal("0.01")
# Prices from 10**15 up are rejected; cent totals must fit the decimal context.
_MAX_PRICE_EXPONENT = 15
_PRICE_NOISE = re.compile(r"[\s,¥￥$]|RMB|CNY", re.IGNORECASE)
_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
)


def parse_order_date(value: str | date | None) -> date | None:
    """Parse an order date into a calendar day.

    Accepts ISO dates and datetimes, ``YYYY-MM-DD HH:MM[:SS]`` and
    ``YYYY/MM/DD``. Returns None for the sentinel and anything malformed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if not text or text == SENTINEL:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_price(value: str | int | float | None) -> Decimal | None:
    """Parse a price into a Decimal, ignoring currency symbols and separators."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        text = str(value)
    else:
        text = _PRICE_NOISE.sub("", value)
    if not text or text == SENTINEL:
        return None
    try:
        price = Decimal(text)
    except InvalidOperation:
        return None
    if not price.is_finite() or price.adjusted() >= _MAX_PRICE_EXPONENT:
        return None
    return price


def _price_bound(value: Decimal | float | str) -> Decimal | None:
    if isinstance(value, Decimal):
        return None if value.is_nan() else value
    return parse_price(value)


def filter_by_status(
    orders: Iterable[CanonicalOrder], status: str
) -> list[CanonicalOrder]:
    """Orders whose status equals or contains ``status``."""
    return [order for order in orders if status in order.status]


def filter_by_date_range(
    orders: Iterable[CanonicalOrder],
    start: str | date,
    end: str | date,
) -> list[CanonicalOrder]:
    """Orders dated between ``start`` and ``end``, both days inclusive.

    An unparseable bound matches nothing.
    """
    start_day = parse_order_date(start)
    end_day = parse_order_date(end)
    if start_day is None or end_day is None:
        return []

    matched: list[CanonicalOrder] = []
    for order in orders:
        order_day = parse_order_date(order.date)
        if order_day is not None and start_day <= order_day <= end_day:
            matched.append(order)
    return matched


def filter_by_seller(
    orders: Iterable[CanonicalOrder], seller: str
) -> list[CanonicalOrder]:
    """Orders whose seller contains ``seller``, ignoring case."""
    needle = seller.casefold()
    return [order for order in orders if needle in order.seller.casefold()]


def filter_by_price_range(
    orders: Iterable[CanonicalOrder],
    min_price: Decimal | float | str,
    max_price: Decimal | float | str,
) -> list[CanonicalOrder]:
    """Orders priced between ``min_price`` and ``max_price`` inclusive.

    An unparseable bound matches nothing.
    """
    low = _price_bound(min_price)
    high = _price_bound(max_price)
    if low is None or high is None:
        return []

    matched: list[CanonicalOrder] = []
    for order in orders:
        price = parse_price(order.price)
        if price is not None and low <= price <= high:
            matched.append(order)
    return matched


def search_orders(
    orders: Iterable[CanonicalOrder], keyword: str
) -> list[CanonicalOrder]:
    """Orders whose id, seller, shop name or product contains ``keyword``."""
    needle = keyword.casefold()
    return [
        order
        for order in orders
        if any(
            needle in text.casefold()
            for text in (order.order_id, order.seller, order.shop_name, order.product)
        )
    ]


def find_order(
    orders: Iterable[CanonicalOrder], order_id: str
) -> CanonicalOrder | None:
    """First order with the given id, or None."""
    return next((order for order in orders if order.order_id == order_id), None)


@dataclass(frozen=True, slots=True)
class OrderSummary:
    """Aggregate statistics over a set of orders."""

    count: int
    total_price: Decimal
    average_price: Decimal
    status_breakdown: dict[str, int] = field(default_factory=dict)
    seller_breakdown: dict[str, int] = field(default_factory=dict)


def summarize(orders: Iterable[CanonicalOrder]) -> OrderSummary:
    """Count, total and average price, plus per-status and per-seller counts.

    Unparseable prices contribute nothing to the total but still count toward
    the average's denominator. Sentinel sellers are left out of the seller
    breakdown.
    """
    count = 0
    total = Decimal("0")
    statuses: Counter[str] = Counter()
    sellers: Counter[str] = Counter()

    for order in orders:
        count += 1
        price = parse_price(order.price)
        if price is not None:
            total += price
        statuses[order.status] += 1
        if order.seller != SENTINEL:
            sellers[order.seller] += 1

    average = total / count if count else Decimal("0")
    return OrderSummary(
        count=count,
        total_price=total.quantize(_CENTS, rounding=ROUND_HALF_UP),
        average_price=average.quantize(_CENTS, rounding=ROUND_HALF_UP),
        status_breakdown=dict(statuses),
        seller_breakdown=dict(sellers),
    )
