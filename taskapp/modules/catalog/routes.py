from fastapi import APIRouter, Depends
from taskapp.database.supabase_client import get_supabase
from taskapp.modules.catalog.schemas import CatalogTask, CatalogTaskCreate
from taskapp.modules.catalog.service import CatalogService
from supabase import Client

router = APIRouter(tags=["catalog"])


def get_catalog_service(supabase: Client = Depends(get_supabase)) -> CatalogService:
    return CatalogService(supabase)


@router.get("/task", response_model=CatalogTask)
async def random_task(service: CatalogService = Depends(get_catalog_service)):
    """One random task to accept or pass on to a friend"""
    return service.random_task()


@router.post("/tasks/new", response_model=CatalogTask, status_code=201)
async def add_task(
    task_data: CatalogTaskCreate,
    service: CatalogService = Depends(get_catalog_service)
):
    """Add a task to the catalog"""
    return service.add_task(task_data)
