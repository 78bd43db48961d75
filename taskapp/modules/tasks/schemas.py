from pydantic import AfterValidator, BaseModel, BeforeValidator, Field
from typing import Annotated, List, Literal, Optional, Union
from datetime import datetime
from taskapp.modules.profiles.schemas import ProfileCard


def _normalize_difficulty(value):
    """Lower-cased and trimmed; values outside the points table are kept and score 0"""
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _strip_description(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Task description cannot be empty")
    return value


DifficultyField = Annotated[str, BeforeValidator(_normalize_difficulty)]
Description = Annotated[str, AfterValidator(_strip_description)]


class TaskBase(BaseModel):
    """Fields shared by both task families"""
    id: int
    created_at: datetime
    task_description: str
    difficulty: str
    status: str
    points: Optional[int] = None
    duration: Optional[str] = None
    proof_url: Optional[str] = None
    comment: Optional[str] = None

    class Config:
        from_attributes = True


class AssignmentResponse(TaskBase):
    kind: Literal["assignment"] = "assignment"
    assigned_to: str
    assigned_by: str
    review_comment: Optional[str] = None
    reviewer: Optional[ProfileCard] = None
    submitter: Optional[ProfileCard] = None


class GeneratedTaskResponse(TaskBase):
    kind: Literal["generated"] = "generated"
    category: Optional[str] = None
    user_id: str
    assigned_by: str


TaskItem = Annotated[Union[AssignmentResponse, GeneratedTaskResponse], Field(discriminator="kind")]


class MyTasksResponse(BaseModel):
    tasks: List[TaskItem]


class UserTasksResponse(BaseModel):
    assignments: List[AssignmentResponse]
    generated_tasks: List[GeneratedTaskResponse]


class AssignmentCreate(BaseModel):
    assigned_to: str
    task_description: Description
    difficulty: DifficultyField


class ReviewDecision(BaseModel):
    review_comment: Optional[str] = None


class GeneratedTaskCreate(BaseModel):
    task_description: Description
    category: Optional[str] = None
    difficulty: DifficultyField = "medium"


class GeneratedTaskAssign(GeneratedTaskCreate):
    friend_id: str
