"""UI component API schemas."""

import re
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from roome.schemas.component_config import ComponentType, format_config_errors, normalize_config

NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{0,99}$")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_name(v: str) -> str:
    v = v.strip().lower()
    if not NAME_PATTERN.match(v):
        raise ValueError(
            "name must be 1-100 characters of lowercase letters, digits, '-' or '_'"
        )
    return v


class ComponentCreate(CamelModel):
    """Request to create a component descriptor."""

    name: str
    display_name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    category: str = Field(..., min_length=1, max_length=50)
    component_type: ComponentType
    config: dict[str, Any] = Field(default_factory=dict)
    template: str | None = None
    styles: dict[str, Any] | None = None
    interactions: dict[str, Any] | None = None
    responsive: dict[str, Any] | None = None
    is_active: bool = True
    is_public: bool = True

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_name(v)

    @model_validator(mode="after")
    def check_config(self) -> "ComponentCreate":
        """Validate config against the model for component_type."""
        try:
            self.config = normalize_config(self.component_type, self.config)
        except ValidationError as e:
            raise ValueError(format_config_errors(e.errors())) from None
        return self


class ComponentUpdate(CamelModel):
    """Partial update. Config is checked against the resulting type by the service."""

    name: str | None = None
    display_name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category: str | None = Field(default=None, min_length=1, max_length=50)
    component_type: ComponentType | None = None
    config: dict[str, Any] | None = None
    template: str | None = None
    styles: dict[str, Any] | None = None
    interactions: dict[str, Any] | None = None
    responsive: dict[str, Any] | None = None
    is_active: bool | None = None
    is_public: bool | None = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str | None) -> str | None:
        return _check_name(v) if v is not None else None


class ComponentResponse(CamelModel):
    """Component descriptor as persisted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    name: str
    display_name: str
    description: str | None
    category: str
    component_type: str
    config: dict[str, Any]
    template: str | None
    styles: dict[str, Any] | None
    interactions: dict[str, Any] | None
    responsive: dict[str, Any] | None
    is_active: bool
    is_public: bool
    usage_count: int
    version: int
    created_by: UUID | None
    updated_by: UUID | None
    created_at: datetime
    updated_at: datetime


class PerformanceMetrics(CamelModel):
    load_time: float | None = Field(default=None, ge=0)
    render_time: float | None = Field(default=None, ge=0)


class UsageCreate(CamelModel):
    """Usage event posted by a renderer."""

    component_id: UUID
    user_id: UUID | None = None
    page: str = Field(default="unknown", min_length=1, max_length=500)
    context: dict[str, Any] = Field(default_factory=dict)
    performance_metrics: PerformanceMetrics | None = None
    user_agent: str | None = Field(default=None, max_length=1000)


class UsageResponse(CamelModel):
    """Recorded usage event."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    component_id: UUID
    user_id: UUID | None
    page: str
    context: dict[str, Any] | None
    performance_metrics: dict[str, Any] | None
    user_agent: str | None
    created_at: datetime


class ComponentAnalytics(CamelModel):
    """Aggregate usage statistics for one component."""

    component_id: UUID
    total_usage: int = 0
    unique_users: int = 0
    avg_load_time: float = 0.0
    top_pages: list[str] = Field(default_factory=list)
    recent_usage: int = 0
    # Cached counter on the descriptor; may drift from total_usage
    usage_count: int = 0


class RenderRequest(CamelModel):
    """Server-side render of a descriptor against a data context."""

    name: str | None = None
    id: UUID | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    page: str = Field(default="unknown", min_length=1, max_length=500)
    context: dict[str, Any] = Field(default_factory=dict)
    track_usage: bool = True
    class_name: str | None = None

    @model_validator(mode="after")
    def check_reference(self) -> "RenderRequest":
        if not self.name and self.id is None:
            raise ValueError("either name or id is required")
        return self
