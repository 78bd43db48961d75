from fastapi import APIRouter, Depends, File, Form, UploadFile
from taskapp.database.supabase_client import get_supabase, get_service_supabase
from taskapp.modules.notifications.service import NotificationService
from taskapp.modules.profiles.service import ProfileService
from taskapp.modules.storage.service import StorageService
from taskapp.modules.tasks.schemas import (
    AssignmentCreate, AssignmentResponse, GeneratedTaskAssign, GeneratedTaskCreate,
    GeneratedTaskResponse, MyTasksResponse, ReviewDecision
)
from taskapp.modules.tasks.service import (
    AssignmentService, GeneratedTaskService, ProofUpload, list_my_tasks
)
from taskapp.core.dependencies import (
    SessionContext, get_session_context, get_storage, require_complete_profile
)
from supabase import Client
from typing import List, Optional

router = APIRouter(tags=["tasks"])


def get_assignment_service(
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase),
    storage: StorageService = Depends(get_storage)
) -> AssignmentService:
    # Crediting the assignee is a cross-user write, so profiles go through the service client
    return AssignmentService(
        supabase,
        profiles=ProfileService(service_supabase),
        notifications=NotificationService(supabase),
        storage=storage,
    )


def get_generated_task_service(
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase),
    storage: StorageService = Depends(get_storage)
) -> GeneratedTaskService:
    return GeneratedTaskService(
        supabase,
        profiles=ProfileService(service_supabase),
        notifications=NotificationService(supabase),
        storage=storage,
    )


async def _read_proof(proof: Optional[UploadFile]) -> Optional[ProofUpload]:
    if proof is None or not proof.filename:
        return None
    return ProofUpload(
        filename=proof.filename,
        content=await proof.read(),
        content_type=proof.content_type or "application/octet-stream",
    )


@router.get("/my-tasks", response_model=MyTasksResponse)
async def my_tasks(
    session: SessionContext = Depends(get_session_context),
    assignments: AssignmentService = Depends(get_assignment_service),
    generated: GeneratedTaskService = Depends(get_generated_task_service)
):
    """Assignments and generated tasks of the current user, newest first"""
    return MyTasksResponse(tasks=list_my_tasks(assignments, generated, session.user_id))


@router.post("/assignments", response_model=AssignmentResponse, status_code=201)
async def create_assignment(
    assignment_data: AssignmentCreate,
    session: SessionContext = Depends(require_complete_profile),
    service: AssignmentService = Depends(get_assignment_service)
):
    """Challenge another player"""
    return service.create_assignment(session.user_id, assignment_data)


@router.get("/assignments/review-queue", response_model=List[AssignmentResponse])
async def review_queue(
    session: SessionContext = Depends(get_session_context),
    service: AssignmentService = Depends(get_assignment_service)
):
    """Submissions awaiting the current user's review"""
    return service.review_queue(session.user_id)


@router.get("/assignments/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: int,
    session: SessionContext = Depends(get_session_context),
    service: AssignmentService = Depends(get_assignment_service)
):
    return service.get_assignment(assignment_id)


@router.post("/assignments/{assignment_id}/submit", response_model=AssignmentResponse)
async def submit_assignment(
    assignment_id: int,
    comment: Optional[str] = Form(None),
    resubmission_reason: Optional[str] = Form(None),
    proof: Optional[UploadFile] = File(None),
    session: SessionContext = Depends(get_session_context),
    service: AssignmentService = Depends(get_assignment_service)
):
    """Submit or resubmit an assignment, optionally with a proof file"""
    return service.submit(
        assignment_id,
        session.user_id,
        comment=comment,
        resubmission_reason=resubmission_reason,
        proof=await _read_proof(proof),
    )


@router.post("/assignments/{assignment_id}/approve", response_model=AssignmentResponse)
async def approve_assignment(
    assignment_id: int,
    decision: Optional[ReviewDecision] = None,
    session: SessionContext = Depends(get_session_context),
    service: AssignmentService = Depends(get_assignment_service)
):
    review_comment = decision.review_comment if decision else None
    return service.approve(assignment_id, session.user_id, review_comment)


@router.post("/assignments/{assignment_id}/decline", response_model=AssignmentResponse)
async def decline_assignment(
    assignment_id: int,
    decision: Optional[ReviewDecision] = None,
    session: SessionContext = Depends(get_session_context),
    service: AssignmentService = Depends(get_assignment_service)
):
    review_comment = decision.review_comment if decision else None
    return service.decline(assignment_id, session.user_id, review_comment)


@router.post("/generated-tasks", response_model=GeneratedTaskResponse, status_code=201)
async def accept_generated_task(
    task_data: GeneratedTaskCreate,
    session: SessionContext = Depends(get_session_context),
    service: GeneratedTaskService = Depends(get_generated_task_service)
):
    """Accept a catalog task for yourself"""
    return service.accept_for_self(session.user_id, task_data)


@router.post("/generated-tasks/assign", response_model=GeneratedTaskResponse, status_code=201)
async def assign_generated_task(
    task_data: GeneratedTaskAssign,
    session: SessionContext = Depends(require_complete_profile),
    service: GeneratedTaskService = Depends(get_generated_task_service)
):
    """Give a catalog task to a friend"""
    return service.assign_to_friend(session.user_id, task_data)


@router.get("/generated-tasks/{task_id}", response_model=GeneratedTaskResponse)
async def get_generated_task(
    task_id: int,
    session: SessionContext = Depends(get_session_context),
    service: GeneratedTaskService = Depends(get_generated_task_service)
):
    return service.get_task(task_id)


@router.post("/generated-tasks/{task_id}/complete", response_model=GeneratedTaskResponse)
async def complete_generated_task(
    task_id: int,
    comment: Optional[str] = Form(None),
    proof: Optional[UploadFile] = File(None),
    session: SessionContext = Depends(get_session_context),
    service: GeneratedTaskService = Depends(get_generated_task_service)
):
    """Complete (or resubmit) a generated task"""
    return service.complete(task_id, session.user_id, comment=comment, proof=await _read_proof(proof))


@router.delete("/generated-tasks/{task_id}", status_code=204)
async def delete_generated_task(
    task_id: int,
    session: SessionContext = Depends(get_session_context),
    service: GeneratedTaskService = Depends(get_generated_task_service)
):
    service.delete(task_id, session.user_id)
    return None
