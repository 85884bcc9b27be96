"""
Adapter Factory
Centralizes the logic for selecting the store and remote sync implementations.
"""

from kioku.application.config import AppConfig
from kioku.application.srs.service import ReviewService
from kioku.domain.mastery.ports import MasteryStore, RemoteSync
from kioku.infrastructure.adapters.http_sync import HttpRemoteSync
from kioku.infrastructure.adapters.json_store import JsonFileMasteryStore


def get_mastery_store(config: AppConfig) -> MasteryStore:
    return JsonFileMasteryStore(config.store_path)


def get_remote_sync(config: AppConfig) -> RemoteSync | None:
    """
    Returns HttpRemoteSync when a backend is configured and sync is enabled,
    otherwise None (reviews are then kept local only).
    """
    if not config.remote_sync_active:
        return None

    return HttpRemoteSync(
        base_url=config.api_base_url,
        endpoint=config.progress_endpoint,
        token=config.api_token,
        user_id=config.user_id,
        timeout=config.request_timeout,
    )


def get_review_service(config: AppConfig) -> ReviewService:
    return ReviewService(store=get_mastery_store(config), sync=get_remote_sync(config))
