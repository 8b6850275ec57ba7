"""
Pydantic schemas for input validation across the dashboard.

Required fields are checked here before anything reaches the wizard, the sprint
composer or the store. Strings are stripped and cleaned of markup.
"""

from __future__ import annotations

import re
from datetime import date
from html import unescape
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .catalog import PILLAR_NAMES, PROGRAM_IDS
from .models import TaskPriority


def sanitize_text(value: str) -> str:
    """Strip markup and control characters from free text."""
    cleaned = unescape(value.strip())
    cleaned = re.sub(
        r"<\s*script[^>]*>.*?<\s*/\s*script\s*>",
        "",
        cleaned,
        flags=re.IGNORECASE | re.DOTALL,
    )
    cleaned = re.sub(r"<[^>]+>", "", cleaned)
    cleaned = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]", "", cleaned)
    return cleaned


class BaseValidationSchema(BaseModel):
    """Base schema with common validation utilities."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    @field_validator("*", mode="before")
    @classmethod
    def sanitize_strings(cls, v: Any) -> Any:
        if isinstance(v, str):
            return sanitize_text(v)
        return v


def _check_program(v: str) -> str:
    if v not in PROGRAM_IDS:
        raise ValueError(f"Unknown program id. Expected one of {sorted(PROGRAM_IDS)}")
    return v


class MenteeCreationInput(BaseValidationSchema):
    """Validation schema for creating a mentee at the end of a diagnosis."""

    name: str = Field(..., min_length=1, max_length=255)
    program_id: str = Field("prog-start")
    avatar_url: str | None = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Mentee name cannot be empty")
        return v.strip()

    @field_validator("program_id")
    @classmethod
    def validate_program(cls, v: str) -> str:
        return _check_program(v)

    @field_validator("avatar_url")
    @classmethod
    def blank_avatar_is_absent(cls, v: str | None) -> str | None:
        return v or None


class ProgramChangeInput(BaseValidationSchema):
    program_id: str

    @field_validator("program_id")
    @classmethod
    def validate_program(cls, v: str) -> str:
        return _check_program(v)


class TaskInput(BaseValidationSchema):
    """A task added to a sprint draft."""

    title: str = Field(..., min_length=1, max_length=500)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None


class SprintInput(BaseValidationSchema):
    """Validation schema for a sprint submission."""

    pillar_name: str = Field(..., min_length=1, max_length=255)
    sprint_name: str = Field(..., min_length=1, max_length=255)
    sprint_goal: str = Field(..., min_length=1, max_length=2000)
    tasks: list[TaskInput] = Field(..., min_length=1, max_length=100)

    @field_validator("pillar_name")
    @classmethod
    def validate_pillar(cls, v: str) -> str:
        if v not in PILLAR_NAMES:
            raise ValueError(f"Unknown pillar '{v}'")
        return v


class ValidationErrorDetail(BaseModel):
    """Schema for validation error details."""

    field: str
    message: str
    value: Any = None


class ValidationResponse(BaseModel):
    """Schema for validation responses."""

    success: bool
    errors: list[ValidationErrorDetail] = []
    data: dict[str, Any] | None = None


def validate_input(schema_class: type[BaseModel], data: dict[str, Any]) -> ValidationResponse:
    """
    Validate ``data`` against ``schema_class`` and collect every error.

    Example:
        >>> result = validate_input(MenteeCreationInput, {"name": "  "})
        >>> result.success
        False
    """
    try:
        validated = schema_class(**data)
    except Exception as e:
        errors = []
        if hasattr(e, "errors"):
            for error in e.errors():
                errors.append(
                    ValidationErrorDetail(
                        field=".".join(str(x) for x in error["loc"]) or "general",
                        message=error["msg"],
                        value=error.get("input"),
                    )
                )
        else:
            errors.append(ValidationErrorDetail(field="general", message=str(e)))
        return ValidationResponse(success=False, errors=errors)
    return ValidationResponse(success=True, data=validated.model_dump())
