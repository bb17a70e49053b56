"""
Task API routes for the Task Tracker API
Owner-scoped task CRUD, bulk status updates and the filtered list view

Mounted behind get_current_user, so every handler runs for an authenticated owner.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.engine import Engine
from sqlmodel import Session

from ...database.database import get_engine, get_session
from ...models.task import Task, TaskCreate, TaskUpdate, TaskPublic, BulkStatusUpdate, Priority, TaskStatus
from ...services.task_query_service import MAX_LIMIT, MAX_PAGE, TaskQuery, TaskQueryService
from ...services.task_service import TaskService
from ...api.deps import AuthenticatedUser, get_current_user
from ...utils.errors import AppError, InternalServerError
from ...utils.logging import log_error
from ...utils.responses import success_response


router = APIRouter()


def to_public(task: Task) -> dict:
    return TaskPublic.model_validate(task).model_dump(mode="json")


@router.get("")
async def list_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    current_user: AuthenticatedUser = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    """
    List the user's tasks with filters, sorting and pagination.

    ``pagination.total`` counts tasks matching the filters; ``stats`` always
    covers all of the user's tasks.
    """
    query = TaskQuery(
        status=status_filter,
        priority=priority,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )

    try:
        result = await TaskQueryService.list_tasks(engine, current_user.id, query)
    except AppError:
        raise
    except Exception as e:
        log_error(e, "GET /api/tasks", current_user.id)
        raise InternalServerError("Error fetching tasks")

    return success_response(
        data={
            "tasks": [to_public(task) for task in result.tasks],
            "pagination": result.pagination.model_dump(),
            "stats": result.stats.model_dump(),
        }
    )


@router.patch("/bulk/status")
async def bulk_update_status(
    request: BulkStatusUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Set one status on several tasks; ids the user does not own are ignored."""
    try:
        modified = TaskService.bulk_set_status(session, request.task_ids, request.status, current_user.id)
    except AppError:
        raise
    except Exception as e:
        log_error(e, "PATCH /api/tasks/bulk/status", current_user.id)
        raise InternalServerError("Error updating tasks")

    return success_response(
        data={"modified_count": modified},
        message=f"{modified} tasks updated successfully",
    )


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    try:
        task = TaskService.get_task_by_id(session, task_id, current_user.id)
    except AppError:
        raise
    except Exception as e:
        log_error(e, f"GET /api/tasks/{task_id}", current_user.id)
        raise InternalServerError("Error fetching task")

    return success_response(data=to_public(task))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    request: TaskCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    try:
        task = TaskService.create_task(session, request, current_user.id)
    except AppError:
        raise
    except Exception as e:
        log_error(e, "POST /api/tasks", current_user.id)
        raise InternalServerError("Error creating task")

    return success_response(
        data=to_public(task),
        message="Task created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.put("/{task_id}")
async def update_task(
    task_id: str,
    request: TaskUpdate,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Apply the fields present in the body; absent fields are left as they are."""
    try:
        task = TaskService.update_task(session, task_id, request, current_user.id)
    except AppError:
        raise
    except Exception as e:
        log_error(e, f"PUT /api/tasks/{task_id}", current_user.id)
        raise InternalServerError("Error updating task")

    return success_response(data=to_public(task), message="Task updated successfully")


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    try:
        TaskService.delete_task(session, task_id, current_user.id)
    except AppError:
        raise
    except Exception as e:
        log_error(e, f"DELETE /api/tasks/{task_id}", current_user.id)
        raise InternalServerError("Error deleting task")

    return success_response(message="Task deleted successfully")
