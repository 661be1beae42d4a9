"""
Tests for request validation and the field-level error map.
"""

import time
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from api.errors import format_validation_errors
from database.models import TaskCategory, TaskPriority, TaskStatus
from utils.schemas import CreateTaskRequest, RegisterRequest, UpdateTaskRequest


def _field_errors(exc: ValidationError) -> dict:
    return format_validation_errors(exc.errors())


def _task(**fields) -> dict:
    return {"title": "t", "priority": "medium", "category": "other", **fields}


class TestRegisterRequest:
    def test_valid_and_normalized(self):
        req = RegisterRequest.model_validate(
            {
                "name": "  Dana  ",
                "email": " Dana@Example.COM ",
                "password": "secret123",
                "confirmPassword": "secret123",
            }
        )
        assert req.name == "Dana"
        assert req.email == "dana@example.com"

    def test_password_mismatch_reported_on_confirm(self):
        with pytest.raises(ValidationError) as info:
            RegisterRequest.model_validate(
                {
                    "name": "Dana",
                    "email": "dana@example.com",
                    "password": "secret123",
                    "confirmPassword": "secret124",
                }
            )
        assert _field_errors(info.value) == {"confirmPassword": "Passwords don't match"}

    def test_several_fields(self):
        with pytest.raises(ValidationError) as info:
            RegisterRequest.model_validate(
                {"name": "D", "email": "nope", "password": "123", "confirmPassword": "123"}
            )
        errors = _field_errors(info.value)
        assert errors["name"] == "Name must be at least 2 characters"
        assert errors["email"] == "Please enter a valid email address"
        assert errors["password"] == "Password must be at least 6 characters"
        assert "confirmPassword" not in errors

    def test_email_forms(self):
        base = {"name": "Dana", "password": "secret123", "confirmPassword": "secret123"}
        req = RegisterRequest.model_validate({**base, "email": "Dana.Lee+tasks@Example.com"})
        assert req.email == "dana.lee+tasks@example.com"

        for bad in ("dana@", "@example.com", "dana example.com"):
            with pytest.raises(ValidationError) as info:
                RegisterRequest.model_validate({**base, "email": bad})
            assert _field_errors(info.value)["email"] == "Please enter a valid email address"

    def test_long_invalid_email_rejected_quickly(self):
        base = {"name": "Dana", "password": "secret123", "confirmPassword": "secret123"}
        started = time.perf_counter()
        with pytest.raises(ValidationError) as info:
            RegisterRequest.model_validate({**base, "email": "a" * 64 + "!"})
        assert time.perf_counter() - started < 0.5
        assert _field_errors(info.value) == {"email": "Please enter a valid email address"}


class TestCreateTaskRequest:
    def test_status_defaults_to_pending(self):
        req = CreateTaskRequest.model_validate(_task(title="Buy milk", priority="high"))
        assert req.status is TaskStatus.PENDING
        assert req.priority is TaskPriority.HIGH
        assert req.category is TaskCategory.OTHER
        assert req.description is None

    def test_priority_and_category_required(self):
        with pytest.raises(ValidationError) as info:
            CreateTaskRequest.model_validate({"title": "Buy milk"})
        assert _field_errors(info.value) == {
            "priority": "Please select a valid priority",
            "category": "Please select a valid category",
        }

        with pytest.raises(ValidationError) as info:
            CreateTaskRequest.model_validate({"title": "Buy milk", "priority": None, "category": "work"})
        assert _field_errors(info.value) == {"priority": "Please select a valid priority"}

    def test_title_boundary(self):
        assert CreateTaskRequest.model_validate(_task(title="x" * 200)).title == "x" * 200
        with pytest.raises(ValidationError) as info:
            CreateTaskRequest.model_validate(_task(title="x" * 201))
        assert _field_errors(info.value) == {"title": "Title must be less than 200 characters"}

    def test_blank_title(self):
        with pytest.raises(ValidationError) as info:
            CreateTaskRequest.model_validate(_task(title="   "))
        assert _field_errors(info.value) == {"title": "Task title is required"}

    def test_description_limit_and_blank(self):
        assert CreateTaskRequest.model_validate(_task(title="t", description="")).description is None
        with pytest.raises(ValidationError) as info:
            CreateTaskRequest.model_validate(_task(title="t", description="d" * 1001))
        assert "description" in _field_errors(info.value)

    def test_enum_membership(self):
        with pytest.raises(ValidationError) as info:
            CreateTaskRequest.model_validate(_task(title="t", priority="critical", category="hobby"))
        assert _field_errors(info.value) == {
            "priority": "Please select a valid priority",
            "category": "Please select a valid category",
        }

    def test_due_date(self):
        tomorrow = (datetime.now(timezone.utc) + timedelta(days=1)).date().isoformat()
        req = CreateTaskRequest.model_validate(_task(title="t", dueDate=tomorrow))
        assert req.due_date.tzinfo is not None
        assert CreateTaskRequest.model_validate(_task(title="t", dueDate="")).due_date is None

        with pytest.raises(ValidationError) as info:
            CreateTaskRequest.model_validate(_task(title="t", dueDate="2001-01-01"))
        assert _field_errors(info.value) == {"dueDate": "Due date cannot be in the past"}

        with pytest.raises(ValidationError) as info:
            CreateTaskRequest.model_validate(_task(title="t", dueDate="next week"))
        assert _field_errors(info.value) == {"dueDate": "Please enter a valid due date"}


class TestUpdateTaskRequest:
    def test_only_sent_fields_change(self):
        req = UpdateTaskRequest.model_validate({"status": "completed"})
        assert req.changes() == {"status": TaskStatus.COMPLETED}

    def test_clearing_description_and_due_date(self):
        req = UpdateTaskRequest.model_validate({"description": "", "dueDate": None})
        assert req.changes() == {"description": None, "due_date": None}

    def test_null_title_rejected(self):
        with pytest.raises(ValidationError) as info:
            UpdateTaskRequest.model_validate({"title": None})
        assert _field_errors(info.value) == {"title": "title cannot be empty"}
