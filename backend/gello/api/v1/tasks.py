"""Tasks API endpoints."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from gello.api.v1.auth import CurrentUser, require_role
from gello.db.session import DB
from gello.models.task import Task
from gello.models.user import User
from gello.services.tasks import TaskService
from gello.utils.permissions import can_manage_task

router = APIRouter()
logger = structlog.get_logger()

TaskManager = Annotated[User, Depends(require_role(can_manage_task))]


# Request/Response Models
class TaskCreate(BaseModel):
    """Create a new task."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    story_points: int = Field(default=1, ge=0, le=100)
    assigned_to: UUID | None = None
    position: int = Field(default=0, ge=0)
    due_date: datetime | None = None


class TaskReplace(TaskCreate):
    """Full update of a task's editable fields."""

    list_id: UUID | None = None


class TaskUpdate(BaseModel):
    """Partial update of a task."""

    list_id: UUID | None = None
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    story_points: int | None = Field(None, ge=0, le=100)
    assigned_to: UUID | None = None
    position: int | None = Field(None, ge=0)
    due_date: datetime | None = None


class TaskMove(BaseModel):
    list_id: UUID
    position: int = Field(..., ge=0)


class TaskAssign(BaseModel):
    """``assigned_to: null`` clears the assignment."""

    assigned_to: UUID | None


class TaskCompletionResponse(Task):
    """Completed task plus the outcome of the point award."""

    points_awarded: int
    total_points: int | None


# Fields that may be cleared by sending an explicit null
NULLABLE_FIELDS = {"description", "assigned_to", "due_date"}


@router.get("/lists/{list_id}/tasks", response_model=list[Task])
async def list_tasks(list_id: UUID, current_user: CurrentUser, db: DB) -> list[Task]:
    return await TaskService(db).list_tasks(list_id)


@router.post("/lists/{list_id}/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(list_id: UUID, payload: TaskCreate, current_user: TaskManager, db: DB) -> Task:
    return await TaskService(db).create_task(list_id, payload.model_dump())


@router.get("/mine", response_model=list[Task])
async def my_tasks(current_user: CurrentUser, db: DB) -> list[Task]:
    """Tasks assigned to the caller, newest first."""
    return await TaskService(db).list_assigned(current_user.id)


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: UUID, current_user: CurrentUser, db: DB) -> Task:
    return await TaskService(db).require_task(task_id)


@router.put("/{task_id}", response_model=Task)
async def replace_task(task_id: UUID, payload: TaskReplace, current_user: TaskManager, db: DB) -> Task:
    values = payload.model_dump()
    if values["list_id"] is None:
        values.pop("list_id")
    return await TaskService(db).update_task(task_id, values)


@router.patch("/{task_id}", response_model=Task)
async def update_task(task_id: UUID, payload: TaskUpdate, current_user: TaskManager, db: DB) -> Task:
    values = {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    return await TaskService(db).update_task(task_id, values)


@router.patch("/{task_id}/move", response_model=Task)
async def move_task(task_id: UUID, payload: TaskMove, current_user: TaskManager, db: DB) -> Task:
    return await TaskService(db).move_task(task_id, payload.list_id, payload.position)


@router.patch("/{task_id}/assign", response_model=Task)
async def assign_task(task_id: UUID, payload: TaskAssign, current_user: TaskManager, db: DB) -> Task:
    return await TaskService(db).assign_task(task_id, payload.assigned_to)


@router.patch("/{task_id}/complete", response_model=TaskCompletionResponse)
async def complete_task(task_id: UUID, current_user: CurrentUser, db: DB) -> TaskCompletionResponse:
    """Complete a task assigned to the caller and award its story points once."""
    result = await TaskService(db).complete_task(task_id, current_user)
    return TaskCompletionResponse(
        **result.task.model_dump(),
        points_awarded=result.points_awarded,
        total_points=result.total_points,
    )


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: UUID, current_user: TaskManager, db: DB) -> Response:
    await TaskService(db).delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
