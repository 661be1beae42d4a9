"""
Task store.

Every read and write is owner-scoped: the statement always filters on
``Task.id == task_id AND Task.user_id == owner``.  A task that belongs to
somebody else is therefore indistinguishable from one that does not exist;
both come back as ``None``.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Task, TaskCategory, TaskPriority, TaskStatus, utcnow
from database.users import to_uuid
from utils.validators import as_utc

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = ("title", "description", "status", "priority", "category", "due_date")


def _owned(owner: uuid.UUID, task_id: uuid.UUID):
    return select(Task).where(Task.id == task_id, Task.user_id == owner)


async def create_task(
    session: AsyncSession,
    owner: str | uuid.UUID,
    data: Dict[str, Any],
) -> Task:
    """Insert a task for ``owner``; status defaults to pending."""
    fields = {
        "description": None,
        "due_date": None,
        "status": TaskStatus.PENDING,
        "priority": TaskPriority.MEDIUM,
        "category": TaskCategory.OTHER,
    }
    fields.update((k, v) for k, v in data.items() if k in MUTABLE_FIELDS and v is not None)
    task = Task(id=uuid.uuid4(), user_id=to_uuid(owner))
    # status goes through the ORM validator so completed_at is derived
    for key, value in fields.items():
        setattr(task, key, value)
    session.add(task)
    await session.flush()
    logger.info("Created task %s for user %s", task.id, task.user_id)
    return task


async def get_task(
    session: AsyncSession,
    owner: str | uuid.UUID,
    task_id: str | uuid.UUID,
) -> Optional[Task]:
    uid, tid = to_uuid(owner), to_uuid(task_id)
    if uid is None or tid is None:
        return None
    result = await session.execute(_owned(uid, tid))
    return result.scalar_one_or_none()


async def update_task(
    session: AsyncSession,
    owner: str | uuid.UUID,
    task_id: str | uuid.UUID,
    changes: Dict[str, Any],
) -> Optional[Task]:
    """Apply a partial update; returns ``None`` when not found or not owned."""
    task = await get_task(session, owner, task_id)
    if task is None:
        return None
    for key, value in changes.items():
        if key in MUTABLE_FIELDS:
            setattr(task, key, value)
    task.updated_at = utcnow()
    await session.flush()
    logger.info("Updated task %s (%s)", task.id, ", ".join(sorted(changes)) or "no fields")
    return task


async def delete_task(
    session: AsyncSession,
    owner: str | uuid.UUID,
    task_id: str | uuid.UUID,
) -> Optional[Task]:
    """Delete and return the task; ``None`` when not found or not owned."""
    task = await get_task(session, owner, task_id)
    if task is None:
        return None
    await session.delete(task)
    await session.flush()
    logger.info("Deleted task %s", task.id)
    return task


async def list_tasks(
    session: AsyncSession,
    owner: str | uuid.UUID,
    *,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Task]:
    """The owner's tasks, newest first, narrowed by any filters given."""
    uid = to_uuid(owner)
    if uid is None:
        return []
    stmt = select(Task).where(Task.user_id == uid)
    if status is not None:
        stmt = stmt.where(Task.status == TaskStatus(status).value)
    if priority is not None:
        stmt = stmt.where(Task.priority == TaskPriority(priority).value)
    if category is not None:
        stmt = stmt.where(Task.category == TaskCategory(category).value)
    result = await session.execute(stmt.order_by(Task.created_at.desc()))
    return list(result.scalars().all())


async def summarize_tasks(
    session: AsyncSession,
    owner: str | uuid.UUID,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Dashboard counters for the owner's tasks."""
    now = now or datetime.now(timezone.utc)
    tasks = await list_tasks(session, owner)

    by_status = Counter(t.status for t in tasks)
    by_category = Counter(t.category for t in tasks)
    by_priority = Counter(t.priority for t in tasks)
    overdue = sum(
        1
        for t in tasks
        if t.due_date is not None
        and t.status != TaskStatus.COMPLETED.value
        and as_utc(t.due_date) < now
    )

    return {
        "total_tasks": len(tasks),
        "completed_tasks": by_status[TaskStatus.COMPLETED.value],
        "pending_tasks": by_status[TaskStatus.PENDING.value],
        "in_progress_tasks": by_status[TaskStatus.IN_PROGRESS.value],
        "overdue_tasks": overdue,
        "tasks_by_category": {c.value: by_category[c.value] for c in TaskCategory},
        "tasks_by_priority": {p.value: by_priority[p.value] for p in TaskPriority},
    }


async def count_tasks(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(Task))
    return int(result.scalar_one())
