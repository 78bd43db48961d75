"""
Task lifecycle engine.

Assignments:     pending -> submitted -> completed | declined, and
                 declined | completed -> submitted again (resubmission).
GeneratedTasks:  pending -> completed; completing again re-applies the same update.

Every transition is a single status-guarded update. When a completion also
credits a profile, a failed credit rolls the task row back to what was read
before raising, so a task never stays completed without its points.
Notifications go out only after the transition is stored and never fail it.
"""

from dataclasses import dataclass
from supabase import Client
from taskapp.config import settings
from taskapp.core.errors import persistence_error, transition_conflict
from taskapp.modules.notifications.service import NotificationService
from taskapp.modules.profiles.service import ProfileService
from taskapp.modules.storage.service import StorageService
from taskapp.modules.tasks.points import (
    APPROVAL_BONUS, PROOF_BONUS, format_duration, points_for_difficulty, utc_now
)
from taskapp.modules.tasks.schemas import (
    AssignmentCreate, AssignmentResponse, GeneratedTaskAssign, GeneratedTaskCreate,
    GeneratedTaskResponse, TaskBase
)
from typing import Callable, List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

PENDING = "pending"
SUBMITTED = "submitted"
DECLINED = "declined"
COMPLETED = "completed"

SUBMITTABLE_STATUSES = {PENDING, DECLINED, COMPLETED}
APPLICATION_ASSIGNER = "application"

ASSIGNMENTS_TABLE = "assignments"
GENERATED_TABLE = "GeneratedTasks"


@dataclass
class ProofUpload:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


def compose_comment(comment: Optional[str], resubmission_reason: Optional[str], previous: Optional[str]) -> Optional[str]:
    """Resubmission reasons are prepended as "<reason>. <comment>"; no new text keeps the old comment."""
    if resubmission_reason:
        return f"{resubmission_reason}. {comment or ''}".strip()
    return comment or previous


class _LifecycleBase:
    table: str = ""
    entity: str = "Task"

    def __init__(
        self,
        supabase: Client,
        profiles: Optional[ProfileService] = None,
        notifications: Optional[NotificationService] = None,
        storage: Optional[StorageService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.supabase = supabase
        self.profiles = profiles or ProfileService(supabase)
        self.notifications = notifications or NotificationService(supabase)
        self.storage = storage
        self.clock = clock or utc_now

    def _fetch_row(self, task_id: int) -> dict:
        try:
            result = self.supabase.table(self.table)\
                .select("*")\
                .eq("id", task_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise persistence_error(e, f"Loading {self.entity.lower()}")
        if not result or not result.data:
            raise HTTPException(status_code=404, detail=f"{self.entity} not found")
        return result.data

    def _insert(self, payload: dict) -> dict:
        try:
            result = self.supabase.table(self.table).insert(payload).execute()
        except Exception as e:
            raise persistence_error(e, f"Creating {self.entity.lower()}")
        if not result.data:
            raise HTTPException(status_code=500, detail=f"Failed to create {self.entity.lower()}")
        return result.data[0]

    def _guarded_update(self, task_id: int, update_data: dict, expected_status: str) -> dict:
        """Apply the update only if the row is still in expected_status"""
        try:
            result = self.supabase.table(self.table)\
                .update(update_data)\
                .eq("id", task_id)\
                .eq("status", expected_status)\
                .execute()
        except Exception as e:
            raise persistence_error(e, f"Updating {self.entity.lower()}")
        if not result.data:
            raise HTTPException(
                status_code=409,
                detail=f"{self.entity} {task_id} is no longer '{expected_status}'; reload and retry",
            )
        return result.data[0]

    def _rollback(self, task_id: int, previous: dict, applied_status: str) -> None:
        try:
            self.supabase.table(self.table)\
                .update(previous)\
                .eq("id", task_id)\
                .eq("status", applied_status)\
                .execute()
            logger.error(f"Rolled back {self.entity.lower()} {task_id} to '{previous.get('status')}' after failed credit")
        except Exception as e:
            logger.error(f"Rollback of {self.entity.lower()} {task_id} failed, needs manual repair: {e}")

    def _credit_or_rollback(self, task_id: int, user_id: str, points: int, previous: dict) -> None:
        try:
            self.profiles.credit_completion(user_id, points)
        except HTTPException:
            self._rollback(task_id, previous, COMPLETED)
            raise
        except Exception as e:
            self._rollback(task_id, previous, COMPLETED)
            raise persistence_error(e, "Crediting profile")

    def _upload_proof(self, owner_id: str, proof: Optional[ProofUpload]) -> Optional[str]:
        if proof is None:
            return None
        if self.storage is None:
            raise HTTPException(status_code=500, detail="File storage is not configured")
        return self.storage.upload(
            settings.proof_bucket, owner_id, proof.filename, proof.content, proof.content_type
        )

    def _list(self, column: str, value: str, status: Optional[str] = None) -> List[dict]:
        try:
            query = self.supabase.table(self.table).select("*").eq(column, value)
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
        except Exception as e:
            raise persistence_error(e, f"Listing {self.entity.lower()}s")
        return result.data or []


class AssignmentService(_LifecycleBase):
    table = ASSIGNMENTS_TABLE
    entity = "Assignment"

    def create_assignment(self, assigner_id: str, assignment_data: AssignmentCreate) -> AssignmentResponse:
        """Challenge another player; points are fixed from the difficulty"""
        if assignment_data.assigned_to == assigner_id:
            raise HTTPException(status_code=400, detail="You cannot assign a challenge to yourself")
        self.profiles.get_profile(assignment_data.assigned_to)

        points = points_for_difficulty(assignment_data.difficulty)
        row = self._insert({
            "task_description": assignment_data.task_description,
            "difficulty": assignment_data.difficulty,
            "status": PENDING,
            "assigned_to": assignment_data.assigned_to,
            "assigned_by": assigner_id,
            "points": points,
        })
        self.notifications.dispatch(
            assignment_data.assigned_to,
            assigner_id,
            f"You have been assigned a new challenge worth {points} points!",
        )
        return AssignmentResponse(**row)

    def get_assignment(self, assignment_id: int) -> AssignmentResponse:
        """Assignment with the reviewer's card attached"""
        assignment = AssignmentResponse(**self._fetch_row(assignment_id))
        cards = self.profiles.get_profile_cards([assignment.assigned_by])
        assignment.reviewer = cards.get(assignment.assigned_by)
        return assignment

    def list_for_user(self, user_id: str) -> List[AssignmentResponse]:
        assignments = [AssignmentResponse(**row) for row in self._list("assigned_to", user_id)]
        cards = self.profiles.get_profile_cards(a.assigned_by for a in assignments)
        for assignment in assignments:
            assignment.reviewer = cards.get(assignment.assigned_by)
        return assignments

    def review_queue(self, reviewer_id: str) -> List[AssignmentResponse]:
        """Submissions waiting on this reviewer, newest first"""
        assignments = [
            AssignmentResponse(**row)
            for row in self._list("assigned_by", reviewer_id, status=SUBMITTED)
        ]
        cards = self.profiles.get_profile_cards(a.assigned_to for a in assignments)
        for assignment in assignments:
            assignment.submitter = cards.get(assignment.assigned_to)
        return assignments

    def submit(
        self,
        assignment_id: int,
        user_id: str,
        comment: Optional[str] = None,
        resubmission_reason: Optional[str] = None,
        proof: Optional[ProofUpload] = None,
    ) -> AssignmentResponse:
        """
        Hand in (or resubmit) an assignment for review.

        A proof file is uploaded before anything is written and earns PROOF_BONUS.
        The previous review comment is cleared and the assigner is notified.
        """
        assignment = AssignmentResponse(**self._fetch_row(assignment_id))
        if assignment.assigned_to != user_id:
            raise HTTPException(status_code=403, detail="Only the assignee can submit this assignment")
        if assignment.status not in SUBMITTABLE_STATUSES:
            raise transition_conflict(self.entity, assignment_id, assignment.status)

        proof_url = self._upload_proof(user_id, proof)
        extra_points = PROOF_BONUS if proof_url else 0

        row = self._guarded_update(assignment_id, {
            "proof_url": proof_url or assignment.proof_url,
            "comment": compose_comment(comment, resubmission_reason, assignment.comment),
            "status": SUBMITTED,
            "points": (assignment.points or 0) + extra_points,
            "duration": format_duration(assignment.created_at, self.clock()),
            "review_comment": None,
        }, expected_status=assignment.status)

        self.notifications.dispatch(
            assignment.assigned_by,
            user_id,
            f'Your assigned task "{assignment.task_description}" has a new submission awaiting review.',
            assignment_id=assignment.id,
        )
        return AssignmentResponse(**row)

    def _get_for_review(self, assignment_id: int, reviewer_id: str) -> AssignmentResponse:
        assignment = AssignmentResponse(**self._fetch_row(assignment_id))
        if assignment.assigned_by != reviewer_id:
            raise HTTPException(status_code=403, detail="Only the assigner can review this assignment")
        if assignment.status != SUBMITTED:
            raise transition_conflict(self.entity, assignment_id, assignment.status)
        return assignment

    def approve(self, assignment_id: int, reviewer_id: str, review_comment: Optional[str] = None) -> AssignmentResponse:
        """Approve a submission: +APPROVAL_BONUS, then credit the assignee with the final total"""
        assignment = self._get_for_review(assignment_id, reviewer_id)
        final_points = (assignment.points or 0) + APPROVAL_BONUS

        row = self._guarded_update(assignment_id, {
            "status": COMPLETED,
            "points": final_points,
            "review_comment": review_comment or "",
        }, expected_status=SUBMITTED)
        self._credit_or_rollback(assignment_id, assignment.assigned_to, final_points, previous={
            "status": SUBMITTED,
            "points": assignment.points,
            "review_comment": assignment.review_comment,
        })

        self.notifications.dispatch(
            assignment.assigned_to,
            reviewer_id,
            f'Your submission for "{assignment.task_description}" has been approved.',
        )
        return AssignmentResponse(**row)

    def decline(self, assignment_id: int, reviewer_id: str, review_comment: Optional[str] = None) -> AssignmentResponse:
        """Decline a submission; points and profile stay untouched"""
        assignment = self._get_for_review(assignment_id, reviewer_id)
        row = self._guarded_update(assignment_id, {
            "status": DECLINED,
            "review_comment": review_comment or "",
        }, expected_status=SUBMITTED)

        self.notifications.dispatch(
            assignment.assigned_to,
            reviewer_id,
            f'Your submission for "{assignment.task_description}" was declined.',
        )
        return AssignmentResponse(**row)


class GeneratedTaskService(_LifecycleBase):
    table = GENERATED_TABLE
    entity = "Generated task"

    def _new_task(self, owner_id: str, assigned_by: str, task_data: GeneratedTaskCreate) -> dict:
        return self._insert({
            "user_id": owner_id,
            "task_description": task_data.task_description,
            "category": task_data.category,
            "duration": "",
            "proof_url": None,
            "comment": "",
            "status": PENDING,
            "difficulty": task_data.difficulty,
            "assigned_by": assigned_by,
            "points": points_for_difficulty(task_data.difficulty),
        })

    def accept_for_self(self, user_id: str, task_data: GeneratedTaskCreate) -> GeneratedTaskResponse:
        """Take a catalog task for yourself"""
        return GeneratedTaskResponse(**self._new_task(user_id, APPLICATION_ASSIGNER, task_data))

    def assign_to_friend(self, assigner_id: str, task_data: GeneratedTaskAssign) -> GeneratedTaskResponse:
        """Hand a catalog task to a friend, who owns it from then on"""
        if task_data.friend_id == assigner_id:
            raise HTTPException(status_code=400, detail="Pick a friend, not yourself")
        self.profiles.get_profile(task_data.friend_id)

        row = self._new_task(task_data.friend_id, assigner_id, task_data)
        self.notifications.dispatch(
            task_data.friend_id,
            assigner_id,
            f'You have been assigned a new generated task: "{task_data.task_description}" by your friend.',
        )
        return GeneratedTaskResponse(**row)

    def get_task(self, task_id: int) -> GeneratedTaskResponse:
        return GeneratedTaskResponse(**self._fetch_row(task_id))

    def list_for_user(self, user_id: str) -> List[GeneratedTaskResponse]:
        return [GeneratedTaskResponse(**row) for row in self._list("user_id", user_id)]

    def _get_owned(self, task_id: int, user_id: str) -> GeneratedTaskResponse:
        task = self.get_task(task_id)
        if task.user_id != user_id:
            raise HTTPException(status_code=403, detail="Only the task owner can do that")
        return task

    def complete(
        self,
        task_id: int,
        user_id: str,
        comment: Optional[str] = None,
        proof: Optional[ProofUpload] = None,
    ) -> GeneratedTaskResponse:
        """
        Complete a generated task, recording how long it took.

        Completing an already-completed task runs the same update again (new
        duration, comment and proof) and leaves it completed; only the first
        completion credits the owner's profile.
        """
        task = self._get_owned(task_id, user_id)
        if task.status not in (PENDING, COMPLETED):
            raise transition_conflict(self.entity, task_id, task.status)

        proof_url = self._upload_proof(user_id, proof)
        points = task.points if task.points is not None else points_for_difficulty(task.difficulty)

        row = self._guarded_update(task_id, {
            "duration": format_duration(task.created_at, self.clock()),
            "comment": comment or "",
            "proof_url": proof_url or task.proof_url,
            "status": COMPLETED,
            "points": points,
        }, expected_status=task.status)

        if task.status == PENDING:
            self._credit_or_rollback(task_id, user_id, points, previous={
                "status": PENDING,
                "duration": task.duration,
                "comment": task.comment,
                "proof_url": task.proof_url,
                "points": task.points,
            })
        else:
            logger.info(f"Generated task {task_id} resubmitted; status stays completed, no new credit")
        return GeneratedTaskResponse(**row)

    def delete(self, task_id: int, user_id: str) -> bool:
        """Drop a pending task you no longer want"""
        task = self._get_owned(task_id, user_id)
        if task.status != PENDING:
            raise transition_conflict(self.entity, task_id, task.status)
        try:
            result = self.supabase.table(self.table)\
                .delete()\
                .eq("id", task_id)\
                .eq("status", PENDING)\
                .execute()
        except Exception as e:
            raise persistence_error(e, "Deleting generated task")
        return len(result.data or []) > 0


def list_my_tasks(
    assignments: AssignmentService,
    generated: GeneratedTaskService,
    user_id: str,
) -> List[TaskBase]:
    """Both task families for one user, newest first"""
    tasks: List[TaskBase] = []
    tasks.extend(assignments.list_for_user(user_id))
    tasks.extend(generated.list_for_user(user_id))
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)
