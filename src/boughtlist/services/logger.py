"""Logging for page collection runs."""

from __future__ import annotations

from pathlib import Path

import loguru
from loguru import logger


class CollectorLogger:
    """Handles all logging for OrderCollector."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def collection_start(self, provider_name: str) -> None:
        self._logger.bind(provider=provider_name).info(
            "Collecting orders from {} provider", provider_name
        )

    def export_written(self, page: int, rows: int, export_path: Path) -> None:
        """Log the accumulated CSV written after a page."""
        self._logger.bind(page=page, rows=rows, path=str(export_path)).info(
            "Page {} exported: {} orders -> {}", page, rows, export_path
        )

    def collection_complete(self, pages: int, stale: int, total: int) -> None:
        self._logger.bind(pages=pages, stale=stale, total=total).info(
            "Collection complete: {} pages read ({} stale), {} orders",
            pages,
            stale,
            total,
        )
