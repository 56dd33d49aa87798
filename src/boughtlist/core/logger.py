"""Logging for normalization and session accumulation.

Keeps loguru calls out of the normalizer and session logic.
"""

from __future__ import annotations

import loguru
from loguru import logger


class NormalizerLogger:
    """Handles all logging for OrderNormalizer."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def field_gap(self, field_name: str, order_id: str) -> None:
        """Log a field that fell back to its sentinel/default."""
        self._logger.bind(field=field_name, order_id=order_id).debug(
            "No value for {} on order {}, using default", field_name, order_id
        )

    def non_mapping_order(self, index: int, type_name: str) -> None:
        """Log a raw order entry that is not a mapping."""
        self._logger.bind(index=index, type=type_name).debug(
            "Raw order #{} is a {}, treating all fields as missing",
            index,
            type_name,
        )

    def batch_normalized(self, order_count: int) -> None:
        self._logger.bind(orders=order_count).debug(
            "Normalized {} raw orders", order_count
        )


class SessionLogger:
    """Handles all logging for OrderSession."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def stale_batch(self, page: int, fingerprint: str) -> None:
        """Log a batch identical to the previous one."""
        self._logger.bind(page=page, fingerprint=fingerprint).warning(
            "Page {} data is identical to the previous batch, skipping", page
        )

    def no_new_orders(self, page: int, batch_size: int) -> None:
        """Log a batch whose orders were all seen before."""
        self._logger.bind(page=page, batch_size=batch_size).warning(
            "Page {}: none of the {} orders are new", page, batch_size
        )

    def orders_added(self, page: int, added: int, total: int) -> None:
        """Log new orders merged into the session."""
        self._logger.bind(page=page, added=added, total=total).info(
            "Page {}: found {} new orders ({} collected)", page, added, total
        )
