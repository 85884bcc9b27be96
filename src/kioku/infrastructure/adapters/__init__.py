# Infrastructure Adapters Package
from .http_sync import HttpRemoteSync
from .json_store import InMemoryMasteryStore, JsonFileMasteryStore

__all__ = ["HttpRemoteSync", "InMemoryMasteryStore", "JsonFileMasteryStore"]
