"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from loguru import logger
import pytest


def make_raw_order(order_id: str, title: str = "Item", price: Any = "1.00") -> dict:
    """Raw order in the full page shape."""
    return {
        "id": order_id,
        "orderInfo": {"createTime": "2025-08-15 10:20:30", "createDay": "2025-08-15"},
        "seller": {"nick": "seller_a", "shopName": "Shop A"},
        "payInfo": {"actualFee": price, "currencySymbol": "¥"},
        "subOrders": [
            {
                "itemInfo": {"title": title},
                "quantity": 1,
                "priceInfo": {"original": price},
            }
        ],
        "statusInfo": {"text": "交易成功"},
        "extra": {"tradeStatus": "TRADE_FINISHED", "currency": "CNY"},
    }


@pytest.fixture
def raw_order() -> Callable[..., dict]:
    """Factory for raw orders in the full page shape."""
    return make_raw_order


@pytest.fixture
def log_records() -> Iterator[list[dict[str, Any]]]:
    """Capture loguru records emitted during a test."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(
        lambda message: records.append(message.record), level="DEBUG"
    )
    yield records
    logger.remove(handler_id)
