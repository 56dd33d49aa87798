"""Tests for order accumulation, deduplication and stale detection."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from boughtlist.core.entities import CanonicalOrder
from boughtlist.core.normalizer import normalize
from boughtlist.core.session import (
    IngestStatus,
    OrderSession,
    OrderSet,
    fingerprint_batch,
    merge,
)
from boughtlist.errors import MissingInputError


def _order(order_id: str, product: str = "Item") -> CanonicalOrder:
    return CanonicalOrder(order_id=order_id, product=product)


class TestOrderSet:
    def test_starts_empty(self) -> None:
        assert len(OrderSet()) == 0
        assert list(OrderSet()) == []

    def test_membership_and_lookup(self) -> None:
        order_set = OrderSet([_order("1"), _order("2")])

        assert "1" in order_set
        assert _order("2") in order_set
        assert "3" not in order_set
        assert order_set.get("2") == _order("2")
        assert order_set.get("3") is None
        assert order_set.order_ids == ("1", "2")

    def test_rejects_duplicate_ids(self) -> None:
        with pytest.raises(ValueError, match="Duplicate order id"):
            OrderSet([_order("1"), _order("1", product="other")])


class TestMerge:
    def test_merge_empty_is_identity(self) -> None:
        existing = OrderSet([_order("1")])

        updated, added = merge(existing, [])

        assert updated is existing
        assert added == []

    def test_appends_unseen_orders_in_order(self) -> None:
        existing = OrderSet([_order("1")])

        updated, added = merge(existing, [_order("3"), _order("2")])

        assert added == [_order("3"), _order("2")]
        assert updated.order_ids == ("1", "3", "2")

    def test_first_seen_wins(self) -> None:
        existing = OrderSet([_order("1", product="Shoes")])

        updated, added = merge(existing, [_order("1", product="Boots")])

        assert added == []
        assert updated.get("1").product == "Shoes"

    def test_internal_duplicates_collapse_to_first(self) -> None:
        updated, added = merge(
            OrderSet(), [_order("1", "a"), _order("2"), _order("1", "b")]
        )

        assert [o.order_id for o in added] == ["1", "2"]
        assert updated.get("1").product == "a"
        assert len(updated) == 2

    def test_existing_is_unchanged(self) -> None:
        existing = OrderSet([_order("1")])

        merge(existing, [_order("2")])

        assert existing.order_ids == ("1",)

    def test_dedup_closure_over_batches(self) -> None:
        batches = [
            [_order("1"), _order("2")],
            [_order("2"), _order("3")],
            [_order("3"), _order("1"), _order("4"), _order("4")],
        ]

        order_set = OrderSet()
        for batch in batches:
            order_set, _ = merge(order_set, batch)

        distinct = {o.order_id for batch in batches for o in batch}
        assert len(order_set) == len(distinct)
        assert order_set.order_ids == ("1", "2", "3", "4")

    def test_page_scenario(self) -> None:
        batch_a = normalize([{"id": "1", "title": "Shoes", "price": "9.99"}])
        batch_b = normalize(
            [
                {"id": "1", "title": "Running shoes", "price": "19.99"},
                {"id": "2", "title": "Hat", "price": "5.00"},
            ]
        )

        order_set, _ = merge(OrderSet(), batch_a)
        order_set, added = merge(order_set, batch_b)

        assert len(order_set) == 2
        assert order_set.get("1").product == "Shoes"
        assert [o.order_id for o in added] == ["2"]
        assert added[0].product == "Hat"
        assert added[0].price == "5.00"


class TestFingerprint:
    def test_identical_id_lists_match(self) -> None:
        first = fingerprint_batch([{"id": "1"}, {"id": "2"}])
        second = fingerprint_batch([{"id": "1"}, {"id": "2"}])

        assert first == second

    def test_order_sensitive(self) -> None:
        first = fingerprint_batch([{"id": "1"}, {"id": "2"}])
        second = fingerprint_batch([{"id": "2"}, {"id": "1"}])

        assert first != second

    def test_ignores_non_id_fields(self) -> None:
        first = fingerprint_batch([{"id": "1", "title": "a", "price": "1"}])
        second = fingerprint_batch([{"id": "1", "title": "b", "price": "2"}])

        assert first == second

    def test_long_batches_are_not_truncated(self) -> None:
        ids = [f"2025081512345678{n:04d}" for n in range(50)]
        changed = [*ids[:-1], "different-last-id"]

        first = fingerprint_batch([{"id": i} for i in ids])
        second = fingerprint_batch([{"id": i} for i in changed])

        assert first != second
        assert len(first.order_ids) == 50


class TestOrderSession:
    def test_ingest_adds_orders_and_advances_page(
        self, raw_order: Callable[..., dict]
    ) -> None:
        session = OrderSession()

        result = session.ingest({"mainOrders": [raw_order("1"), raw_order("2")]})

        assert result.status is IngestStatus.ADDED
        assert result.page == 1
        assert [o.order_id for o in result.added] == ["1", "2"]
        assert result.total == 2
        assert session.page == 2
        assert session.orders.order_ids == ("1", "2")

    def test_identical_batch_is_stale(self, raw_order: Callable[..., dict]) -> None:
        session = OrderSession()
        batch = {"mainOrders": [raw_order("1"), raw_order("2")]}
        session.ingest(batch)

        result = session.ingest(batch)

        assert result.status is IngestStatus.STALE
        assert result.is_stale
        assert result.added == ()
        assert result.total == 2
        assert session.page == 2

    def test_stale_check_ignores_field_churn(
        self, raw_order: Callable[..., dict]
    ) -> None:
        session = OrderSession()
        session.ingest({"mainOrders": [raw_order("1", price="1.00")]})

        assert session.is_stale({"mainOrders": [raw_order("1", price="2.00")]})

    def test_reordered_batch_is_not_stale(
        self, raw_order: Callable[..., dict]
    ) -> None:
        session = OrderSession()
        session.ingest({"mainOrders": [raw_order("1"), raw_order("2")]})

        result = session.ingest({"mainOrders": [raw_order("2"), raw_order("1")]})

        assert result.status is IngestStatus.NO_NEW_ORDERS
        assert session.page == 2

    def test_partially_new_batch(self, raw_order: Callable[..., dict]) -> None:
        session = OrderSession()
        session.ingest({"mainOrders": [raw_order("1"), raw_order("2")]})

        result = session.ingest({"mainOrders": [raw_order("2"), raw_order("3")]})

        assert result.status is IngestStatus.ADDED
        assert result.page == 2
        assert [o.order_id for o in result.added] == ["3"]
        assert session.orders.order_ids == ("1", "2", "3")

    def test_stale_only_compares_with_previous_batch(
        self, raw_order: Callable[..., dict]
    ) -> None:
        session = OrderSession()
        page_one = {"mainOrders": [raw_order("1")]}
        session.ingest(page_one)
        session.ingest({"mainOrders": [raw_order("2")]})

        result = session.ingest(page_one)

        assert result.status is IngestStatus.NO_NEW_ORDERS

    def test_empty_batch_has_no_new_orders(self) -> None:
        session = OrderSession()

        result = session.ingest({"mainOrders": []})

        assert result.status is IngestStatus.NO_NEW_ORDERS
        assert len(session.orders) == 0

    @pytest.mark.parametrize("batch", [None, {}, {"mainOrders": "nope"}])
    def test_missing_input_raises(self, batch: Any) -> None:
        session = OrderSession()

        with pytest.raises(MissingInputError):
            session.ingest(batch)

        assert session.last_fingerprint is None

    def test_stale_batch_logged_as_warning(
        self, raw_order: Callable[..., dict], log_records: list[dict[str, Any]]
    ) -> None:
        session = OrderSession()
        batch = {"mainOrders": [raw_order("1")]}
        session.ingest(batch)

        session.ingest(batch)

        warnings = [r for r in log_records if r["level"].name == "WARNING"]
        assert len(warnings) == 1
        assert "identical" in warnings[0]["message"]
