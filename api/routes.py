"""
REST API routes — tasks, dashboard summary, health.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import db_session
from api.errors import Internal, NotFoundOrForbidden, envelope
from auth.dependencies import get_current_user
from auth.jwt import TokenClaims
from database import tasks as task_store
from database.models import TaskCategory, TaskPriority, TaskStatus
from database.users import count_users
from utils.schemas import CreateTaskRequest, TaskOut, TaskStats, UpdateTaskRequest, dump

logger = logging.getLogger(__name__)

router = APIRouter()

TASK_NOT_FOUND = "Task not found"


def _task(task) -> Dict[str, Any]:
    return dump(TaskOut.model_validate(task))


@router.get("/tasks", tags=["tasks"])
async def list_tasks(
    status: Optional[TaskStatus] = Query(None),
    priority: Optional[TaskPriority] = Query(None),
    category: Optional[TaskCategory] = Query(None),
    claims: TokenClaims = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    """The caller's tasks, newest first, optionally filtered."""
    tasks = await task_store.list_tasks(
        session,
        claims.user_id,
        status=status,
        priority=priority,
        category=category,
    )
    logger.debug("Found %d tasks for user %s", len(tasks), claims.user_id)
    return envelope([_task(t) for t in tasks], message="Tasks fetched successfully")


@router.post("/tasks", tags=["tasks"])
async def create_task(
    req: CreateTaskRequest,
    claims: TokenClaims = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    task = await task_store.create_task(session, claims.user_id, req.model_dump())
    return envelope(_task(task), message="Task created successfully")


@router.get("/tasks/stats", tags=["tasks"])
async def task_stats(
    claims: TokenClaims = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    """Dashboard counters for the caller."""
    summary = await task_store.summarize_tasks(session, claims.user_id)
    return envelope(dump(TaskStats(**summary)))


@router.get("/tasks/{task_id}", tags=["tasks"])
async def get_task(
    task_id: str,
    claims: TokenClaims = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    task = await task_store.get_task(session, claims.user_id, task_id)
    if task is None:
        raise NotFoundOrForbidden(TASK_NOT_FOUND)
    return envelope(_task(task), message="Task fetched successfully")


@router.patch("/tasks/{task_id}", tags=["tasks"])
async def update_task(
    task_id: str,
    req: UpdateTaskRequest,
    claims: TokenClaims = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    task = await task_store.update_task(session, claims.user_id, task_id, req.changes())
    if task is None:
        raise NotFoundOrForbidden(TASK_NOT_FOUND)
    return envelope(_task(task), message="Task updated successfully")


@router.delete("/tasks/{task_id}", tags=["tasks"])
async def delete_task(
    task_id: str,
    claims: TokenClaims = Depends(get_current_user),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    task = await task_store.delete_task(session, claims.user_id, task_id)
    if task is None:
        raise NotFoundOrForbidden(TASK_NOT_FOUND)
    return envelope(_task(task), message="Task deleted successfully")


@router.get("/health", tags=["health"])
async def health_check(session: AsyncSession = Depends(db_session)) -> Dict[str, Any]:
    """Round-trip to the database and report row counts."""
    try:
        user_count = await count_users(session)
        task_count = await task_store.count_tasks(session)
    except SQLAlchemyError as exc:
        logger.error("Health check failed: %s", exc)
        raise Internal("Database connection failed") from exc
    return envelope(
        {
            "status": "ok",
            "userCount": user_count,
            "taskCount": task_count,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        message="Database connection successful",
    )
