"""
Seed Tasks Script
Populates the Tasks catalog from the built-in list.
Existing descriptions are left untouched, so the script can be re-run safely.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from taskapp.modules.catalog.data import STATIC_TASKS
from taskapp.database.supabase_client import get_service_supabase
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def seed_tasks(supabase: Client, tasks=None) -> int:
    """Insert catalog tasks whose description is not already present"""
    tasks = STATIC_TASKS if tasks is None else tasks
    logger.info("Seeding tasks catalog...")

    created_count = 0
    skipped_count = 0
    for task in tasks:
        try:
            existing = supabase.table("Tasks")\
                .select("id")\
                .eq("description", task["description"])\
                .execute()

            if existing.data:
                skipped_count += 1
                logger.debug(f"Task already present: {task['description']}")
                continue

            supabase.table("Tasks").insert({
                "description": task["description"],
                "category": task.get("category"),
                "difficulty": task.get("difficulty", "medium"),
            }).execute()
            created_count += 1
        except Exception as e:
            logger.error(f"Error processing task {task['description']}: {e}")

    logger.info(f"Tasks seeded: {created_count} created, {skipped_count} skipped")
    return created_count


def main():
    try:
        supabase = get_service_supabase()
        seed_tasks(supabase)
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
