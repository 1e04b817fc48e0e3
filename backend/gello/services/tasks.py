"""Task service, including the completion-and-award flow."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog

from gello.config import get_settings
from gello.db.supabase import Database
from gello.exceptions import DataServiceError, ForbiddenError, ResourceNotFoundError, ValidationError
from gello.models.task import Task
from gello.models.user import User
from gello.utils.points import calculate_task_points

logger = structlog.get_logger()


@dataclass
class CompletionResult:
    """Outcome of a completion request."""

    task: Task
    points_awarded: int
    total_points: int | None


class TaskService:
    """CRUD over ``tasks`` plus completion."""

    def __init__(self, db: Database):
        self.db = db

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_task(self, task_id: UUID) -> Task | None:
        row = await self.db.select_one("tasks", id=task_id)
        return Task.model_validate(row) if row else None

    async def require_task(self, task_id: UUID) -> Task:
        task = await self.get_task(task_id)
        if task is None:
            raise ResourceNotFoundError("Task not found")
        return task

    async def list_tasks(self, list_id: UUID) -> list[Task]:
        rows = await self.db.select(
            "tasks",
            match={"list_id": list_id},
            order_by=[("position", False)],
        )
        return [Task.model_validate(row) for row in rows]

    async def list_assigned(self, user_id: UUID) -> list[Task]:
        rows = await self.db.select(
            "tasks",
            match={"assigned_to": user_id},
            order_by=[("created_at", True)],
        )
        return [Task.model_validate(row) for row in rows]

    # =========================================================================
    # Writes
    # =========================================================================

    async def create_task(self, list_id: UUID, values: dict[str, Any]) -> Task:
        if await self.db.select_one("lists", columns="id", id=list_id) is None:
            raise ResourceNotFoundError("List not found")
        if values.get("assigned_to") is not None:
            await self._require_assignee(values["assigned_to"])

        row = await self.db.insert(
            "tasks",
            {
                "list_id": list_id,
                "title": values["title"],
                "description": values.get("description"),
                "story_points": values.get("story_points", get_settings().default_story_points),
                "assigned_to": values.get("assigned_to"),
                "position": values.get("position", 0),
                "due_date": values.get("due_date"),
            },
        )
        task = Task.model_validate(row)
        logger.info("Task created", task_id=str(task.id), list_id=str(list_id))
        return task

    async def update_task(self, task_id: UUID, values: dict[str, Any]) -> Task:
        """Apply a partial update. ``completed_at`` is never writable here."""
        values = {k: v for k, v in values.items() if k != "completed_at"}
        if not values:
            return await self.require_task(task_id)
        if "list_id" in values and await self.db.select_one("lists", columns="id", id=values["list_id"]) is None:
            raise ResourceNotFoundError("List not found")
        if values.get("assigned_to") is not None:
            await self._require_assignee(values["assigned_to"])

        rows = await self.db.update("tasks", values, match={"id": task_id})
        if not rows:
            raise ResourceNotFoundError("Task not found")
        return Task.model_validate(rows[0])

    async def move_task(self, task_id: UUID, list_id: UUID, position: int) -> Task:
        return await self.update_task(task_id, {"list_id": list_id, "position": position})

    async def assign_task(self, task_id: UUID, assigned_to: UUID | None) -> Task:
        """Assign to a user, or clear the assignment with ``None``."""
        if assigned_to is not None:
            await self._require_assignee(assigned_to)
        rows = await self.db.update("tasks", {"assigned_to": assigned_to}, match={"id": task_id})
        if not rows:
            raise ResourceNotFoundError("Task not found")
        logger.info(
            "Task assigned",
            task_id=str(task_id),
            assigned_to=str(assigned_to) if assigned_to else None,
        )
        return Task.model_validate(rows[0])

    async def delete_task(self, task_id: UUID) -> None:
        rows = await self.db.delete("tasks", match={"id": task_id})
        if not rows:
            raise ResourceNotFoundError("Task not found")
        logger.info("Task deleted", task_id=str(task_id))

    async def _require_assignee(self, user_id: UUID) -> None:
        if await self.db.select_one("users", columns="id", id=user_id) is None:
            raise ResourceNotFoundError("Assignee not found")

    # =========================================================================
    # Completion
    # =========================================================================

    async def complete_task(self, task_id: UUID, caller: User) -> CompletionResult:
        """Complete a task and credit its story points to the assignee.

        Only the assignee may complete a task; managers and admins included get
        ``ForbiddenError`` for somebody else's task. Completing an already
        completed task returns it unchanged and awards nothing. The transition
        and the award happen in one stored procedure guarded on
        ``completed_at IS NULL``, so concurrent or retried calls award at most
        once.
        """
        task = await self.require_task(task_id)

        if task.assigned_to is None:
            raise ValidationError("Task is not assigned to anyone")
        if task.assigned_to != caller.id:
            logger.warning(
                "Task completion forbidden",
                task_id=str(task_id),
                user_id=str(caller.id),
                assigned_to=str(task.assigned_to),
            )
            raise ForbiddenError("Only the assignee can complete this task")

        if task.is_completed:
            return CompletionResult(task=task, points_awarded=0, total_points=caller.total_points)

        try:
            calculate_task_points(task.story_points)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        result = await self.db.rpc(
            "complete_task_with_points",
            {"p_task_id": task_id, "p_awarded_by": caller.id},
        )
        if not isinstance(result, dict) or "task" not in result:
            raise DataServiceError("Unexpected response from complete_task_with_points")

        completed = Task.model_validate(result["task"])
        if not completed.is_completed:
            # Reassigned or unassigned between the read above and the procedure.
            logger.warning(
                "Task completion lost to reassignment",
                task_id=str(task_id),
                user_id=str(caller.id),
                assigned_to=str(completed.assigned_to) if completed.assigned_to else None,
            )
            if completed.assigned_to is None:
                raise ValidationError("Task is not assigned to anyone")
            raise ForbiddenError("Only the assignee can complete this task")

        awarded = int(result.get("points_awarded") or 0)
        total = result.get("total_points")
        logger.info(
            "Task completed",
            task_id=str(task_id),
            user_id=str(caller.id),
            points_awarded=awarded,
            total_points=total,
        )
        return CompletionResult(task=completed, points_awarded=awarded, total_points=total)
