"""Drive a provider through an OrderSession, exporting after each new page."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from boughtlist.adapters.export.csv_exporter import export_filename, write_orders_csv
from boughtlist.adapters.providers.base import RawBatchProvider
from boughtlist.core.entities import RawBatch
from boughtlist.core.session import IngestResult, IngestStatus, OrderSession, OrderSet
from boughtlist.services.logger import CollectorLogger


@dataclass(frozen=True, slots=True)
class PageOutcome:
    """One page's ingest result and the export written for it, if any."""

    result: IngestResult
    export_path: Path | None = None


@dataclass
class CollectionReport:
    """Outcome of collecting every page a provider yields."""

    orders: OrderSet
    pages: list[PageOutcome] = field(default_factory=list)

    @property
    def stale_count(self) -> int:
        return sum(1 for page in self.pages if page.result.is_stale)

    @property
    def added_count(self) -> int:
        return sum(len(page.result.added) for page in self.pages)

    @property
    def last_export(self) -> Path | None:
        """Most recent export, which holds every collected order."""
        paths = [page.export_path for page in self.pages if page.export_path]
        return paths[-1] if paths else None


class OrderCollector:
    """Ingests raw pages into a session and writes the accumulated CSV.

    Like the page-by-page download of the purchases page, each page that
    contributes new orders produces a CSV of everything collected so far.
    Stale pages and pages without new orders write nothing.
    """

    def __init__(
        self,
        session: OrderSession,
        export_dir: Path,
        logger: CollectorLogger | None = None,
    ) -> None:
        self._session = session
        self._export_dir = export_dir
        self._logger = logger or CollectorLogger()

    @property
    def session(self) -> OrderSession:
        return self._session

    def collect_page(self, raw_batch: RawBatch | None) -> PageOutcome:
        """Ingest one page and export if it added orders.

        Raises:
            MissingInputError: the page has no order list.
        """
        result = self._session.ingest(raw_batch)
        if result.status is not IngestStatus.ADDED:
            return PageOutcome(result)

        export_path = self._export_dir / export_filename(result.page, result.total)
        rows = write_orders_csv(self._session.orders, export_path)
        self._logger.export_written(result.page, rows, export_path)
        return PageOutcome(result, export_path)

    def collect(self, provider: RawBatchProvider) -> CollectionReport:
        """Collect every page the provider yields, in order."""
        self._logger.collection_start(provider.provider_name)
        pages = [self.collect_page(raw_batch) for raw_batch in provider.batches()]
        report = CollectionReport(orders=self._session.orders, pages=pages)
        self._logger.collection_complete(
            len(pages), report.stale_count, len(report.orders)
        )
        return report
