"""Accumulate canonical orders across page loads.

``merge`` is the pure deduplicating step; ``OrderSession`` owns the running
``OrderSet`` for one collection session together with the page counter and
the change-detection gate that recognizes a page that has not advanced.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
import hashlib
import json
from typing import Any, NamedTuple

from boughtlist.core.entities import CanonicalOrder, RawBatch
from boughtlist.core.logger import SessionLogger
from boughtlist.core.normalizer import OrderNormalizer, orders_from_batch


class OrderSet:
    """Immutable, insertion-ordered collection of orders unique by order id."""

    __slots__ = ("_orders", "_by_id")

    def __init__(self, orders: Iterable[CanonicalOrder] = ()) -> None:
        by_id: dict[str, CanonicalOrder] = {}
        for order in orders:
            if order.order_id in by_id:
                raise ValueError(f"Duplicate order id in OrderSet: {order.order_id}")
            by_id[order.order_id] = order
        self._by_id = by_id
        self._orders = tuple(by_id.values())

    def __len__(self) -> int:
        return len(self._orders)

    def __iter__(self) -> Iterator[CanonicalOrder]:
        return iter(self._orders)

    def __contains__(self, order_id: object) -> bool:
        if isinstance(order_id, CanonicalOrder):
            order_id = order_id.order_id
        return order_id in self._by_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderSet):
            return NotImplemented
        return self._orders == other._orders

    def __hash__(self) -> int:
        return hash(self._orders)

    def __repr__(self) -> str:
        return f"OrderSet({len(self._orders)} orders)"

    @property
    def orders(self) -> tuple[CanonicalOrder, ...]:
        return self._orders

    @property
    def order_ids(self) -> tuple[str, ...]:
        return tuple(self._by_id)

    def get(self, order_id: str) -> CanonicalOrder | None:
        """Look up an order by id."""
        return self._by_id.get(order_id)


class MergeResult(NamedTuple):
    """Outcome of merging a batch into an OrderSet."""

    updated: OrderSet
    added: list[CanonicalOrder]


def merge(existing: OrderSet, incoming: Iterable[CanonicalOrder]) -> MergeResult:
    """Append the orders of ``incoming`` whose ids are not yet in ``existing``.

    Membership is by ``order_id`` alone and the first record seen for an id
    wins: a later record with the same id is dropped even if its other fields
    differ. Duplicate ids inside ``incoming`` keep only their first occurrence.
    When nothing is new, ``existing`` itself is returned.
    """
    seen = set(existing.order_ids)
    added: list[CanonicalOrder] = []
    for order in incoming:
        if order.order_id in seen:
            continue
        seen.add(order.order_id)
        added.append(order)

    if not added:
        return MergeResult(existing, [])
    return MergeResult(OrderSet([*existing, *added]), added)


@dataclass(frozen=True, slots=True)
class BatchFingerprint:
    """Order-sensitive digest of a batch's raw order ids."""

    digest: str
    order_ids: tuple[str, ...]

    @property
    def short(self) -> str:
        return self.digest[:12]


def fingerprint_batch(
    raw_orders: Sequence[Any], normalizer: OrderNormalizer | None = None
) -> BatchFingerprint:
    """Fingerprint a batch by the full ordered list of its order ids.

    Only identifiers contribute, so churn in other fields does not change the
    fingerprint, while reordering or replacing any id does.
    """
    resolver = normalizer or OrderNormalizer()
    order_ids = tuple(resolver.order_id_of(raw) for raw in raw_orders)
    stable = json.dumps(list(order_ids), ensure_ascii=False, separators=(",", ":"))
    digest = hashlib.sha256(stable.encode("utf-8")).hexdigest()
    return BatchFingerprint(digest=digest, order_ids=order_ids)


class IngestStatus(Enum):
    """What happened to a batch handed to OrderSession.ingest."""

    ADDED = "added"
    STALE = "stale"
    NO_NEW_ORDERS = "no_new_orders"


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Result of ingesting one raw page batch."""

    status: IngestStatus
    page: int
    added: tuple[CanonicalOrder, ...]
    total: int
    fingerprint: BatchFingerprint

    @property
    def is_stale(self) -> bool:
        return self.status is IngestStatus.STALE


class OrderSession:
    """Running collection of orders for one scraping session.

    Create one per session and discard it when done; nothing is persisted.
    The page counter only advances when a batch contributes new orders.
    """

    def __init__(
        self,
        normalizer: OrderNormalizer | None = None,
        logger: SessionLogger | None = None,
    ) -> None:
        self._normalizer = normalizer or OrderNormalizer()
        self._logger = logger or SessionLogger()
        self._orders = OrderSet()
        self._page = 1
        self._last_fingerprint: BatchFingerprint | None = None

    @property
    def orders(self) -> OrderSet:
        return self._orders

    @property
    def page(self) -> int:
        """Number the next batch with new orders will be recorded as."""
        return self._page

    @property
    def last_fingerprint(self) -> BatchFingerprint | None:
        return self._last_fingerprint

    def is_stale(self, raw_batch: RawBatch | None) -> bool:
        """Check a batch against the previous one without ingesting it."""
        fingerprint = fingerprint_batch(orders_from_batch(raw_batch), self._normalizer)
        return fingerprint == self._last_fingerprint

    def ingest(self, raw_batch: RawBatch | None) -> IngestResult:
        """Gate, normalize and merge one raw page batch.

        Raises:
            MissingInputError: the batch is absent or has no order list.
        """
        raw_orders = orders_from_batch(raw_batch)
        fingerprint = fingerprint_batch(raw_orders, self._normalizer)
        page = self._page

        if fingerprint == self._last_fingerprint:
            self._logger.stale_batch(page, fingerprint.short)
            return IngestResult(
                IngestStatus.STALE, page, (), len(self._orders), fingerprint
            )
        self._last_fingerprint = fingerprint

        canonical = self._normalizer.normalize(raw_orders)
        self._orders, added = merge(self._orders, canonical)
        if not added:
            self._logger.no_new_orders(page, len(canonical))
            return IngestResult(
                IngestStatus.NO_NEW_ORDERS, page, (), len(self._orders), fingerprint
            )

        self._page += 1
        self._logger.orders_added(page, len(added), len(self._orders))
        return IngestResult(
            IngestStatus.ADDED, page, tuple(added), len(self._orders), fingerprint
        )
