# Domain Mastery Package
from .models import (
    DifficultyRating,
    ItemId,
    MasteryRecord,
    SRSResult,
    WordStatistics,
    parse_item_id,
)
from .ports import MasteryStore, RemoteSync, StoreError, SyncError, SyncUnauthorizedError

__all__ = [
    "DifficultyRating",
    "ItemId",
    "MasteryRecord",
    "SRSResult",
    "WordStatistics",
    "parse_item_id",
    "MasteryStore",
    "RemoteSync",
    "StoreError",
    "SyncError",
    "SyncUnauthorizedError",
]
