import random
from supabase import Client
from taskapp.core.errors import persistence_error
from taskapp.modules.catalog.activity_client import ActivityClient
from taskapp.modules.catalog.schemas import CatalogTask, CatalogTaskCreate
from typing import Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(
        self,
        supabase: Client,
        activity_client: Optional[ActivityClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self.supabase = supabase
        self.activity_client = activity_client or ActivityClient()
        self.rng = rng or random.Random()

    def random_task(self) -> CatalogTask:
        """Pick a random catalog task, or ask the activity provider when the catalog has none"""
        try:
            result = self.supabase.table("Tasks").select("*").execute()
            rows = result.data or []
        except Exception as e:
            logger.warning(f"Tasks catalog unavailable, using activity provider: {e}")
            rows = []
        if rows:
            return CatalogTask(**self.rng.choice(rows))
        return self.activity_client.random_activity()

    def add_task(self, task_data: CatalogTaskCreate) -> CatalogTask:
        try:
            result = self.supabase.table("Tasks").insert({
                "description": task_data.description,
                "category": task_data.category,
            }).execute()
        except Exception as e:
            raise persistence_error(e, "Adding catalog task")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to add task")
        return CatalogTask(**result.data[0])
