"""Raw batch providers."""

from boughtlist.adapters.providers.base import RawBatchProvider
from boughtlist.adapters.providers.json_file import JsonFileBatchProvider
from boughtlist.adapters.providers.memory import InMemoryBatchProvider

__all__ = ["InMemoryBatchProvider", "JsonFileBatchProvider", "RawBatchProvider"]
