"""Map heterogeneous raw page orders onto CanonicalOrder.

Each canonical field is resolved through an explicit fallback chain: an
ordered tuple of accessors tried one after another until one yields a present
value. What "present" means for numbers is governed by ``ZeroPolicy``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
import math
from typing import Any

from boughtlist.core.entities import (
    DEFAULT_CURRENCY,
    DEFAULT_QUANTITY,
    SENTINEL,
    CanonicalOrder,
    RawBatch,
    RawOrder,
)
from boughtlist.core.logger import NormalizerLogger
from boughtlist.errors import MissingInputError

ORDER_LIST_KEY = "mainOrders"


class ZeroPolicy(Enum):
    """How a numeric zero found on the page is treated."""

    # 0 is a real value and wins over later candidates and the default.
    PRESERVE = "preserve"
    # Any falsy value (0, "", NaN) falls through, like a chain of ``||``.
    LEGACY_FALSY = "legacy_falsy"


@dataclass(frozen=True, slots=True)
class FieldPath:
    """Accessor walking nested mappings and list indexes of a raw order.

    Returns ``None`` as soon as a key is missing, an index is out of range,
    or an intermediate value has the wrong shape.
    """

    keys: tuple[str | int, ...]

    def __call__(self, raw: RawOrder) -> Any:
        current: Any = raw
        for key in self.keys:
            if isinstance(key, int):
                if (
                    not isinstance(current, Sequence)
                    or isinstance(current, str)
                    or key >= len(current)
                ):
                    return None
            elif not isinstance(current, Mapping) or key not in current:
                return None
            current = current[key]
        return current

    def __str__(self) -> str:
        parts: list[str] = []
        for key in self.keys:
            if isinstance(key, int):
                parts.append(f"[{key}]")
            else:
                parts.append(f".{key}" if parts else key)
        return "".join(parts)


def path(*keys: str | int) -> FieldPath:
    """Shorthand for building a FieldPath accessor."""
    return FieldPath(keys)


Accessor = Callable[[RawOrder], Any]
Coercer = Callable[[Any, ZeroPolicy], Any]


def _is_legacy_falsy(value: Any) -> bool:
    if isinstance(value, float) and math.isnan(value):
        return True
    return value == 0 or value == ""


def as_text(value: Any, policy: ZeroPolicy) -> str | None:
    """Coerce a candidate to non-blank text, or None when absent."""
    if value is None or isinstance(value, bool | Mapping | list | tuple):
        return None
    if policy is ZeroPolicy.LEGACY_FALSY and _is_legacy_falsy(value):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # Render 1.0 as "1", the way the page prints it.
        value = int(value)
    text = str(value).strip()
    return text or None


def as_quantity(value: Any, policy: ZeroPolicy) -> int | None:
    """Coerce a candidate to a non-negative integer quantity."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        quantity = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not (stripped.isascii() and stripped.isdigit()):
            return None
        quantity = int(stripped)
    else:
        return None
    if quantity < 0:
        return None
    if quantity == 0 and policy is ZeroPolicy.LEGACY_FALSY:
        # "0" is truthy in the legacy chains; only a numeric 0 falls through.
        if not isinstance(value, str):
            return None
    return quantity


def as_price(value: Any, policy: ZeroPolicy) -> str | int | float | None:
    """Keep a price in the representation the page used."""
    if value is None or isinstance(value, bool | Mapping | list | tuple):
        return None
    if isinstance(value, int | float):
        if isinstance(value, float) and math.isnan(value):
            return None
        if value == 0 and policy is ZeroPolicy.LEGACY_FALSY:
            return None
        return value
    text = str(value).strip()
    return text or None


@dataclass(frozen=True, slots=True)
class FieldRule:
    """Fallback chain for one canonical field."""

    name: str
    candidates: tuple[Accessor, ...]
    coerce: Coercer
    default: Any = SENTINEL

    def resolve(self, raw: RawOrder, policy: ZeroPolicy) -> Any | None:
        """Return the first present candidate value, or None."""
        for candidate in self.candidates:
            value = self.coerce(candidate(raw), policy)
            if value is not None:
                return value
        return None


def _plain_string(accessor: Accessor) -> Accessor:
    """Accept the accessor's value only when it is a plain string."""

    def _get(raw: RawOrder) -> Any:
        value = accessor(raw)
        return value if isinstance(value, str) else None

    return _get


ORDER_ID_RULE = FieldRule("order_id", (path("id"), path("orderId")), as_text)


def default_field_rules(currency: str = DEFAULT_CURRENCY) -> tuple[FieldRule, ...]:
    """Fallback chains for every canonical field, in resolution order."""
    return (
        ORDER_ID_RULE,
        FieldRule(
            "date",
            (
                path("orderInfo", "createTime"),
                path("createTime"),
                path("date"),
                path("orderInfo", "createDay"),
            ),
            as_text,
        ),
        FieldRule(
            "seller",
            (
                path("seller", "nick"),
                path("sellerNick"),
                # Some pages put the nick directly under "seller".
                _plain_string(path("seller")),
            ),
            as_text,
        ),
        FieldRule("shop_name", (path("seller", "shopName"),), as_text),
        FieldRule(
            "product",
            (
                path("subOrders", 0, "itemInfo", "title"),
                path("title"),
                path("productName"),
            ),
            as_text,
        ),
        FieldRule(
            "quantity",
            (path("subOrders", 0, "quantity"), path("quantity")),
            as_quantity,
            default=DEFAULT_QUANTITY,
        ),
        FieldRule(
            "price",
            (
                path("payInfo", "actualFee"),
                path("price"),
                path("totalPrice"),
                path("subOrders", 0, "priceInfo", "original"),
            ),
            as_price,
        ),
        FieldRule(
            "status",
            (
                path("statusInfo", "text"),
                path("statusText"),
                path("status"),
                path("extra", "tradeStatus"),
            ),
            as_text,
        ),
        FieldRule(
            "currency",
            (path("extra", "currency"), path("currency")),
            as_text,
            default=currency,
        ),
    )


class OrderNormalizer:
    """Resolve raw orders into CanonicalOrder records.

    Never raises for malformed orders: each field that cannot be resolved
    takes its default and is logged at DEBUG level. The input is not mutated.
    """

    def __init__(
        self,
        rules: Sequence[FieldRule] | None = None,
        *,
        zero_policy: ZeroPolicy = ZeroPolicy.PRESERVE,
        currency: str = DEFAULT_CURRENCY,
        logger: NormalizerLogger | None = None,
    ) -> None:
        if rules is None:
            rules = default_field_rules(currency)
        self._rules = tuple(rules)
        self._zero_policy = zero_policy
        self._logger = logger or NormalizerLogger()

    @property
    def zero_policy(self) -> ZeroPolicy:
        return self._zero_policy

    @property
    def rules(self) -> tuple[FieldRule, ...]:
        return self._rules

    def normalize(self, raw_orders: Iterable[Any]) -> list[CanonicalOrder]:
        """Normalize every raw order of a batch, preserving order."""
        orders = [
            self.normalize_one(raw, index) for index, raw in enumerate(raw_orders)
        ]
        self._logger.batch_normalized(len(orders))
        return orders

    def normalize_one(self, raw: Any, index: int = 0) -> CanonicalOrder:
        if not isinstance(raw, Mapping):
            self._logger.non_mapping_order(index, type(raw).__name__)
            raw = {}

        values: dict[str, Any] = {}
        for rule in self._rules:
            value = rule.resolve(raw, self._zero_policy)
            if value is None:
                self._logger.field_gap(rule.name, values.get("order_id", SENTINEL))
                value = rule.default
            values[rule.name] = value
        return CanonicalOrder(**values)

    def order_id_of(self, raw: Any) -> str:
        """Resolve only the order id of a raw order, without logging gaps."""
        if not isinstance(raw, Mapping):
            return SENTINEL
        rule = next((r for r in self._rules if r.name == "order_id"), ORDER_ID_RULE)
        value = rule.resolve(raw, self._zero_policy)
        return SENTINEL if value is None else str(value)


def orders_from_batch(raw_batch: RawBatch | None) -> list[Any]:
    """Return the order list of a raw page batch.

    Raises:
        MissingInputError: the batch is absent, not a mapping, or has no
            order list. An empty list is valid and means zero orders.
    """
    if raw_batch is None:
        raise MissingInputError("no batch was supplied")
    if not isinstance(raw_batch, Mapping):
        raise MissingInputError(
            f"batch must be a mapping, got {type(raw_batch).__name__}"
        )
    raw_orders = raw_batch.get(ORDER_LIST_KEY)
    if raw_orders is None:
        raise MissingInputError(f"batch has no '{ORDER_LIST_KEY}' list")
    if not isinstance(raw_orders, list | tuple):
        raise MissingInputError(
            f"'{ORDER_LIST_KEY}' must be a list, got {type(raw_orders).__name__}"
        )
    return list(raw_orders)


def normalize(
    raw_orders: Iterable[Any],
    *,
    zero_policy: ZeroPolicy = ZeroPolicy.PRESERVE,
    currency: str = DEFAULT_CURRENCY,
) -> list[CanonicalOrder]:
    """Normalize raw orders with the default fallback chains."""
    normalizer = OrderNormalizer(zero_policy=zero_policy, currency=currency)
    return normalizer.normalize(raw_orders)
