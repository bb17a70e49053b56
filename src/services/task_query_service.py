"""
Task query service for the Task Tracker API
Builds the filtered, sorted, paginated task list together with owner-wide statistics
"""
import asyncio
import math
from dataclasses import dataclass
from functools import partial
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy import case, func, or_
from sqlalchemy.engine import Engine
from sqlmodel import Session, select, col

from ..models.task import Task, TaskStatus, Priority
from ..utils.logging import log_error


DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Largest page whose offset still fits a signed 64-bit SQL integer
MAX_PAGE = (2**63 - 1) // MAX_LIMIT
DEFAULT_SORT_FIELD = "created_at"

# Accepted sort_by values mapped onto task columns
SORT_FIELDS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "dueDate": "due_date",
    "due_date": "due_date",
    "priority": "priority",
    "title": "title",
}


class TaskQuery(BaseModel):
    """Filter, sort and page parameters for listing tasks"""
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    search: Optional[str] = None
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = "desc"
    page: int = Field(default=DEFAULT_PAGE, ge=1, le=MAX_PAGE)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)

    @property
    def sort_field(self) -> str:
        """Column to sort on; unknown values fall back to created_at."""
        return SORT_FIELDS.get(self.sort_by, DEFAULT_SORT_FIELD)

    @property
    def ascending(self) -> bool:
        return self.sort_order.lower() == "asc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TaskStats(BaseModel):
    """Counts over all of an owner's tasks, regardless of the list filter"""
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    high_priority: int = 0


@dataclass
class TaskListResult:
    tasks: List[Task]
    pagination: Pagination
    stats: TaskStats


def build_filters(user_id: str, query: TaskQuery) -> list:
    """
    WHERE clauses for the list view.

    The page fetch and the filtered count both use this, so they always agree.
    """
    filters = [col(Task.user_id) == user_id]

    if query.status is not None:
        filters.append(col(Task.status) == query.status)
    if query.priority is not None:
        filters.append(col(Task.priority) == query.priority)

    search = (query.search or "").strip()
    if search:
        filters.append(
            or_(
                col(Task.title).icontains(search, autoescape=True),
                col(Task.description).icontains(search, autoescape=True),
            )
        )

    return filters


def _priority_rank():
    # Enum columns store member names, so compare against members instead of raw strings
    return case(
        (col(Task.priority) == Priority.LOW, 1),
        (col(Task.priority) == Priority.MEDIUM, 2),
        (col(Task.priority) == Priority.HIGH, 3),
        else_=0,
    )


def build_ordering(query: TaskQuery) -> list:
    field = query.sort_field
    sort_key = _priority_rank() if field == "priority" else getattr(Task, field)
    primary = sort_key.asc() if query.ascending else sort_key.desc()
    # id as tie-breaker keeps page boundaries stable
    return [primary, col(Task.id).asc()]


class TaskQueryService:
    """Service class for the task list view"""

    @staticmethod
    def fetch_page(db: Session, user_id: str, query: TaskQuery) -> List[Task]:
        statement = (
            select(Task)
            .where(*build_filters(user_id, query))
            .order_by(*build_ordering(query))
            .offset(query.offset)
            .limit(query.limit)
        )
        return list(db.exec(statement).all())

    @staticmethod
    def count_matching(db: Session, user_id: str, query: TaskQuery) -> int:
        statement = select(func.count()).select_from(Task).where(*build_filters(user_id, query))
        return db.exec(statement).one()

    @staticmethod
    def compute_stats(db: Session, user_id: str) -> TaskStats:
        """Aggregate counts over every task the user owns."""

        def count_where(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        statement = select(
            func.count(),
            count_where(col(Task.status) == TaskStatus.PENDING),
            count_where(col(Task.status) == TaskStatus.IN_PROGRESS),
            count_where(col(Task.status) == TaskStatus.COMPLETED),
            count_where(col(Task.priority) == Priority.HIGH),
        ).select_from(Task).where(col(Task.user_id) == user_id)

        total, pending, in_progress, completed, high_priority = db.exec(statement).one()
        return TaskStats(
            total=total,
            pending=pending,
            in_progress=in_progress,
            completed=completed,
            high_priority=high_priority,
        )

    @staticmethod
    def _in_session(engine: Engine, fn, *args):
        with Session(engine) as db:
            return fn(db, *args)

    @staticmethod
    async def list_tasks(engine: Engine, user_id: str, query: TaskQuery) -> TaskListResult:
        """
        Build the task list view for a user.

        The page fetch, the filtered count and the unfiltered statistics are
        independent reads. Each runs on its own session in the default
        executor and the results are joined before returning.

        Args:
            engine: Engine to open sessions on
            user_id: Owner whose tasks are listed
            query: Filters, sort and pagination

        Returns:
            TaskListResult with tasks, pagination and stats
        """
        loop = asyncio.get_running_loop()
        run = TaskQueryService._in_session

        try:
            tasks, total, stats = await asyncio.gather(
                loop.run_in_executor(None, partial(run, engine, TaskQueryService.fetch_page, user_id, query)),
                loop.run_in_executor(None, partial(run, engine, TaskQueryService.count_matching, user_id, query)),
                loop.run_in_executor(None, partial(run, engine, TaskQueryService.compute_stats, user_id)),
            )
        except Exception as e:
            log_error(e, "TaskQueryService.list_tasks", user_id)
            raise

        return TaskListResult(
            tasks=tasks,
            pagination=Pagination(
                page=query.page,
                limit=query.limit,
                total=total,
                total_pages=math.ceil(total / query.limit),
            ),
            stats=stats,
        )


__all__ = [
    "TaskQuery",
    "TaskQueryService",
    "TaskListResult",
    "TaskStats",
    "Pagination",
    "build_filters",
    "SORT_FIELDS",
    "MAX_LIMIT",
    "MAX_PAGE",
]
