import logging
from datetime import datetime, timezone

import httpx

from kioku.domain.constants import (
    DEFAULT_PROGRESS_ENDPOINT,
    REQUEST_TIMEOUT,
    SECONDS_PER_DAY,
)
from kioku.domain.mastery.models import MasteryRecord, SRSResult
from kioku.domain.mastery.ports import RemoteSync, SyncError, SyncUnauthorizedError


class HttpRemoteSync(RemoteSync):
    """Adapter that forwards updated records to the progress API (form-encoded POST)."""

    def __init__(
        self,
        base_url: str,
        endpoint: str = DEFAULT_PROGRESS_ENDPOINT,
        token: str | None = None,
        user_id: int | None = None,
        timeout: float = REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.url = base_url.rstrip("/") + "/" + endpoint.lstrip("/")
        self.token = token
        self.user_id = user_id
        self.timeout = timeout
        self._client = client

    async def push(self, record: MasteryRecord, result: SRSResult, reviewed_at: int) -> None:
        next_review = datetime.fromtimestamp(
            reviewed_at + result.next_interval_seconds, tz=timezone.utc
        )
        form = {
            "action": "update_word_knowledge",
            "word_id": str(record.item_id),
            "knowledge_level": str(result.new_knowledge_level),
            "ease_factor": f"{result.new_ease_factor:.2f}",
            "interval_days": str(int(result.next_interval_seconds / SECONDS_PER_DAY)),
            "next_review_date": next_review.isoformat(timespec="seconds"),
        }
        if self.user_id is not None:
            form["user_id"] = str(self.user_id)

        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            if self._client is not None:
                resp = await self._client.post(self.url, data=form, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.post(self.url, data=form, headers=headers)
        except httpx.HTTPError as e:
            raise SyncError(f"Network error talking to {self.url}: {e}") from e

        if resp.status_code == 401:
            raise SyncUnauthorizedError("Session expired or invalid token")
        if resp.status_code < 200 or resp.status_code >= 300:
            raise SyncError(f"Server returned HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError:
            # Some endpoints answer with an empty 200
            self.logger.debug(f"Non-JSON response from {self.url}; treating as success")
            return

        if isinstance(body, dict) and body.get("success") is False:
            raise SyncError(body.get("message") or "Unknown error")
