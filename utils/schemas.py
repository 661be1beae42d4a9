"""
Pydantic schemas for the task tracker API.

Request models accept camelCase keys (``confirmPassword``, ``dueDate``) and
raise ``ValueError`` messages that become the ``fieldErrors`` map of a 400.
Response models are built from ORM rows and dumped by alias.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from database.models import TaskCategory, TaskPriority, TaskStatus
from utils.validators import (
    as_utc,
    check_length,
    check_not_past,
    normalize_email,
    parse_due_date,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Auth — requests
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(CamelModel):
    name: str
    email: EmailStr
    password: str
    confirm_password: str

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return check_length(
            value.strip(),
            minimum=2,
            maximum=50,
            too_short="Name must be at least 2 characters",
            too_long="Name must be less than 50 characters",
        )

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Any:
        return normalize_email(value)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        return check_length(
            value,
            minimum=6,
            maximum=100,
            too_short="Password must be at least 6 characters",
            too_long="Password is too long",
        )

    @field_validator("confirm_password")
    @classmethod
    def _passwords_match(cls, value: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("Passwords don't match")
        return value


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().lower() if value is not None else None


# ═══════════════════════════════════════════════════════════════════════════════
# Tasks — requests
# ═══════════════════════════════════════════════════════════════════════════════


def _check_title(value: str) -> str:
    return check_length(
        value.strip(),
        minimum=1,
        maximum=200,
        too_short="Task title is required",
        too_long="Title must be less than 200 characters",
    )


def _check_description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = check_length(
        value.strip(),
        maximum=1000,
        too_short="",
        too_long="Description must be less than 1000 characters",
    )
    return value or None


class CreateTaskRequest(CamelModel):
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = Field(None, validate_default=True)
    category: TaskCategory = Field(None, validate_default=True)
    due_date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        return _check_title(value)

    @field_validator("priority", "category", mode="before")
    @classmethod
    def _choice_required(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise ValueError(f"Please select a valid {info.field_name}")
        return value

    @field_validator("description")
    @classmethod
    def _description(cls, value: Optional[str]) -> Optional[str]:
        return _check_description(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _due_date(cls, value: Any) -> Optional[datetime]:
        return check_not_past(parse_due_date(value))


class UpdateTaskRequest(CamelModel):
    """Partial update; only the keys present in the body are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    category: Optional[TaskCategory] = None
    due_date: Optional[datetime] = None

    @field_validator("title", "status", "priority", "category", mode="before")
    @classmethod
    def _not_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise ValueError(f"{to_camel(info.field_name)} cannot be empty")
        return value

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        return _check_title(value)

    @field_validator("description")
    @classmethod
    def _description(cls, value: Optional[str]) -> Optional[str]:
        return _check_description(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _due_date(cls, value: Any) -> Optional[datetime]:
        return check_not_past(parse_due_date(value))

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class UserOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class TaskOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    category: TaskCategory
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    user_id: uuid.UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("due_date", "completed_at", "created_at", "updated_at")
    @classmethod
    def _utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)


class TaskStats(CamelModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    overdue_tasks: int = 0
    tasks_by_category: Dict[str, int] = Field(default_factory=dict)
    tasks_by_priority: Dict[str, int] = Field(default_factory=dict)


def dump(model: BaseModel) -> Dict[str, Any]:
    """JSON-ready dict with camelCase keys."""
    return model.model_dump(by_alias=True, mode="json")
