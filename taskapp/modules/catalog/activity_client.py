"""Client for the random-activity HTTP API used when the Tasks catalog is empty."""

import httpx
from taskapp.config import settings
from taskapp.modules.catalog.schemas import CatalogTask
from fastapi import HTTPException
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class ActivityClient:
    def __init__(self, http_client: Optional[httpx.Client] = None, url: Optional[str] = None):
        self.http_client = http_client
        self.url = url or settings.activity_api_url

    def _get(self) -> httpx.Response:
        if self.http_client is not None:
            return self.http_client.get(self.url, timeout=settings.activity_api_timeout)
        with httpx.Client() as client:
            return client.get(self.url, timeout=settings.activity_api_timeout)

    def random_activity(self) -> CatalogTask:
        """Map the provider's {activity, type} to a catalog task"""
        try:
            response = self._get()
        except httpx.HTTPError as e:
            logger.error(f"Activity provider unreachable: {e}")
            raise HTTPException(status_code=500, detail=f"Error fetching from activity provider: {e}")

        if response.status_code != 200:
            raise HTTPException(
                status_code=response.status_code,
                detail=f"Activity provider returned status: {response.status_code}",
            )
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not payload.get("activity"):
            raise HTTPException(status_code=500, detail="Activity provider returned no activity")
        return CatalogTask(
            description=payload["activity"],
            category=payload.get("type"),
            source="activity",
        )
