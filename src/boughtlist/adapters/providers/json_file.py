"""Provider reading page data saved as JSON files."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import json
from pathlib import Path
from typing import Any

from boughtlist.core.entities import RawBatch
from boughtlist.core.normalizer import ORDER_LIST_KEY
from boughtlist.errors import BatchFileError


class JsonFileBatchProvider:
    """Reads one page batch per JSON file.

    Each file holds the page's data object (with its ``mainOrders`` list), or
    a bare list of orders which is wrapped as ``mainOrders``.
    """

    provider_name = "json_file"

    def __init__(self, paths: Iterable[Path]) -> None:
        self._paths = [Path(p) for p in paths]

    @classmethod
    def from_directory(
        cls, page_dir: Path, pattern: str = "*.json"
    ) -> JsonFileBatchProvider:
        """Build a provider over the files in ``page_dir``, sorted by name."""
        return cls(sorted(page_dir.glob(pattern)))

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    def batches(self) -> Iterator[RawBatch | None]:
        for page_path in self._paths:
            yield self.load(page_path)

    @staticmethod
    def load(page_path: Path) -> RawBatch | None:
        """Load a single page file.

        Raises:
            BatchFileError: the file cannot be read or decoded, or is not valid
                JSON.
        """
        try:
            # utf-8-sig tolerates files saved with a byte-order mark.
            text = page_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise BatchFileError(page_path, str(e)) from e
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise BatchFileError(page_path, f"invalid JSON: {e}") from e

        if isinstance(data, list):
            return {ORDER_LIST_KEY: data}
        return data
