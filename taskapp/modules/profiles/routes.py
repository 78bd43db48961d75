from fastapi import APIRouter, Depends, File, UploadFile
from taskapp.database.supabase_client import get_supabase
from taskapp.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from taskapp.modules.profiles.service import ProfileService
from taskapp.modules.storage.service import StorageService
from taskapp.modules.tasks.schemas import UserTasksResponse
from taskapp.modules.tasks.service import AssignmentService, GeneratedTaskService
from taskapp.core.dependencies import SessionContext, get_session_context, get_storage, invalidate_session
from taskapp.modules.tasks.routes import get_assignment_service, get_generated_task_service
from supabase import Client

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    session: SessionContext = Depends(get_session_context),
    service: ProfileService = Depends(get_profile_service)
):
    """Current user's profile with fresh score"""
    return service.get_profile(session.user_id)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    session: SessionContext = Depends(get_session_context),
    service: ProfileService = Depends(get_profile_service)
):
    """Set the username (completes the profile)"""
    profile = service.update_username(session.user_id, profile_data.username)
    invalidate_session(session.user_id)
    return profile


@router.post("/me/avatar", response_model=ProfileResponse)
async def upload_my_avatar(
    file: UploadFile = File(...),
    session: SessionContext = Depends(get_session_context),
    service: ProfileService = Depends(get_profile_service),
    storage: StorageService = Depends(get_storage)
):
    """Upload a profile picture"""
    content = await file.read()
    profile = service.upload_avatar(
        session.user_id,
        storage,
        file.filename or "avatar",
        content,
        file.content_type or "application/octet-stream",
    )
    invalidate_session(session.user_id)
    return profile


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    session: SessionContext = Depends(get_session_context),
    service: ProfileService = Depends(get_profile_service)
):
    """Public profile of another player"""
    return service.get_profile(user_id)


@router.get("/{user_id}/tasks", response_model=UserTasksResponse)
async def get_profile_tasks(
    user_id: str,
    session: SessionContext = Depends(get_session_context),
    assignments: AssignmentService = Depends(get_assignment_service),
    generated: GeneratedTaskService = Depends(get_generated_task_service)
):
    """Challenges assigned to a player and the generated tasks they hold"""
    return UserTasksResponse(
        assignments=assignments.list_for_user(user_id),
        generated_tasks=generated.list_for_user(user_id),
    )
