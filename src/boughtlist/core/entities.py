"""Canonical order record and the raw shapes it is built from."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, field_validator

SENTINEL = "N/A"
DEFAULT_QUANTITY = 1
DEFAULT_CURRENCY = "CNY"

# Untrusted page data; no invariants hold on either shape.
RawOrder = Mapping[str, Any]
RawBatch = Mapping[str, Any]


class CanonicalOrder(BaseModel):
    """A single order flattened into the nine exported fields.

    Every field is always populated. Data missing from the page resolves to
    ``SENTINEL`` (or the quantity/currency default), never to ``None``.
    """

    model_config = {"frozen": True}

    order_id: str = SENTINEL
    date: str = SENTINEL
    seller: str = SENTINEL
    shop_name: str = SENTINEL
    product: str = SENTINEL
    quantity: int = DEFAULT_QUANTITY
    price: str | int | float = SENTINEL
    status: str = SENTINEL
    currency: str = DEFAULT_CURRENCY

    @field_validator(
        "order_id", "date", "seller", "shop_name", "product", "status", "currency"
    )
    @classmethod
    def reject_blank_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("quantity")
    @classmethod
    def reject_negative_quantity(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @field_validator("price", mode="before")
    @classmethod
    def reject_bad_price(cls, value: Any) -> Any:
        if isinstance(value, bool) or value is None:
            raise ValueError("must be a string or a number")
        if isinstance(value, str) and not value.strip():
            raise ValueError("must not be blank")
        return value

    @classmethod
    def sentinel(cls, currency: str = DEFAULT_CURRENCY) -> CanonicalOrder:
        """Build the record produced when no field could be resolved."""
        return cls(currency=currency)

    @property
    def has_order_id(self) -> bool:
        """Whether the order id came from the page rather than the sentinel."""
        return self.order_id != SENTINEL
