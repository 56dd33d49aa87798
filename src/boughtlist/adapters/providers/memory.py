"""Provider serving batches already held in memory."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from boughtlist.core.entities import RawBatch


class InMemoryBatchProvider:
    """Yields the given batches in order."""

    provider_name = "memory"

    def __init__(self, batches: Iterable[RawBatch | None]) -> None:
        self._batches = list(batches)

    def batches(self) -> Iterator[RawBatch | None]:
        yield from self._batches
