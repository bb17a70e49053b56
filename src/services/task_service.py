"""
Task service module for the Task Tracker API
Handles owner-scoped create, read, update and delete of tasks
"""
from typing import List

from sqlalchemy import update
from sqlmodel import Session, select, col

from ..models.task import Task, TaskCreate, TaskUpdate, TaskStatus
from ..utils.dates import utc_now
from ..utils.errors import TaskNotFoundException, ValidationFailedError
from ..utils.logging import log_error


class TaskService:
    """
    Service class for task operations.

    Every statement is predicated on the owner's user_id, so a task owned by
    someone else behaves exactly like a task that does not exist.
    """

    @staticmethod
    def create_task(db: Session, task_data: TaskCreate, user_id: str) -> Task:
        """
        Create a new task owned by the given user.

        Args:
            db: Database session
            task_data: Validated task fields
            user_id: Owner of the new task

        Returns:
            Created Task object
        """
        try:
            now = utc_now()
            task = Task(
                user_id=user_id,
                title=task_data.title,
                description=task_data.description or "",
                status=task_data.status,
                priority=task_data.priority,
                due_date=task_data.due_date,
                created_at=now,
                updated_at=now,
            )

            db.add(task)
            db.commit()
            db.refresh(task)

            return task
        except Exception as e:
            log_error(e, "TaskService.create_task", user_id)
            db.rollback()
            raise

    @staticmethod
    def get_task_by_id(db: Session, task_id: str, user_id: str) -> Task:
        """
        Get a specific task by ID for a specific user.

        Raises:
            TaskNotFoundException: If the task does not exist or belongs to another user
        """
        statement = select(Task).where(Task.id == task_id, Task.user_id == user_id)
        task = db.exec(statement).first()

        if not task:
            raise TaskNotFoundException(task_id)

        return task

    @staticmethod
    def update_task(db: Session, task_id: str, task_data: TaskUpdate, user_id: str) -> Task:
        """
        Apply a partial update to a task.

        Only fields explicitly present in task_data are written; an explicit
        null due_date clears the date.

        Raises:
            ValidationFailedError: If task_data carries no fields
            TaskNotFoundException: If the task does not exist or belongs to another user
        """
        changes = task_data.changes()
        if not changes:
            raise ValidationFailedError("No valid fields to update")

        try:
            task = TaskService.get_task_by_id(db, task_id, user_id)

            for field, value in changes.items():
                setattr(task, field, value)
            task.updated_at = utc_now()

            db.add(task)
            db.commit()
            db.refresh(task)

            return task
        except TaskNotFoundException:
            raise
        except Exception as e:
            log_error(e, f"TaskService.update_task (id={task_id})", user_id)
            db.rollback()
            raise

    @staticmethod
    def delete_task(db: Session, task_id: str, user_id: str) -> bool:
        """
        Permanently delete a task.

        Raises:
            TaskNotFoundException: If the task does not exist or belongs to another user
        """
        try:
            task = TaskService.get_task_by_id(db, task_id, user_id)
            db.delete(task)
            db.commit()
            return True
        except TaskNotFoundException:
            raise
        except Exception as e:
            log_error(e, f"TaskService.delete_task (id={task_id})", user_id)
            db.rollback()
            raise

    @staticmethod
    def bulk_set_status(db: Session, task_ids: List[str], status: TaskStatus, user_id: str) -> int:
        """
        Set the status of several tasks in one statement.

        Ids that belong to other users, do not exist, or already have the
        target status are left untouched.

        Returns:
            Number of tasks whose status actually changed
        """
        try:
            statement = (
                update(Task)
                .where(
                    col(Task.user_id) == user_id,
                    col(Task.id).in_(task_ids),
                    col(Task.status) != status,
                )
                .values(status=status, updated_at=utc_now())
            )
            result = db.execute(statement)
            db.commit()
            return result.rowcount
        except Exception as e:
            log_error(e, "TaskService.bulk_set_status", user_id)
            db.rollback()
            raise


__all__ = [
    "TaskService",
]
