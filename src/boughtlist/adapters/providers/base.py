"""Base protocol for raw batch providers."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from boughtlist.core.entities import RawBatch


class RawBatchProvider(Protocol):
    """Protocol for sources of raw page batches.

    A provider yields one batch per page load, in page order. How the page
    data was captured is up to the provider; the session only sees batches.
    """

    provider_name: str

    def batches(self) -> Iterator[RawBatch | None]:
        """Yield raw page batches in page order.

        A provider may yield ``None`` for a page it could not capture; the
        session reports that as missing input.
        """
        ...
