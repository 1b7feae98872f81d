"""
Task model definitions.

A task is either a leaf (schedulable unit of work) or a container (a project
parent whose work lives in its sub-units). The union is discriminated on
``kind`` so a container can never reach the placement code.
"""

from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from zmanit.models.enums import TaskPriority
from zmanit.utils.time_utils import MINUTES_PER_DAY, parse_hhmm


def _coerce_priority(value: Any) -> Any:
    # Unknown or empty priorities fall back to normal.
    if value is None or value == "":
        return TaskPriority.NORMAL
    if isinstance(value, TaskPriority):
        return value
    try:
        return TaskPriority(str(value).lower())
    except ValueError:
        return TaskPriority.NORMAL


def _coerce_clock(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        minutes = parse_hhmm(value)
        if minutes is None:
            raise ValueError(f"fixed time must be HH:MM, got {value!r}")
        return minutes
    return value


class TaskBase(BaseModel):
    """Fields shared by leaf and container tasks."""

    id: str = Field(..., min_length=1)
    title: str = Field("", max_length=500)
    category: str = Field("other", description="Drives the energy profile lookup")
    priority: TaskPriority = Field(TaskPriority.NORMAL)
    estimated_minutes: Optional[int] = Field(
        None, description="Duration estimate; not validated so bad input can be reported"
    )
    minutes_worked: int = Field(0, description="Over-runs past the estimate are legal")
    fixed_time: Optional[int] = Field(
        None,
        ge=0,
        lt=MINUTES_PER_DAY,
        description="Pinned start as minute-of-day; pinned tasks are never moved",
    )
    invalid_fixed_time: bool = Field(
        False, description="A pinned start was given but could not be read; reported, never placed"
    )
    due_date: Optional[date] = None
    start_date: Optional[date] = Field(None, description="Not to be started before this date")
    is_completed: bool = False
    parent_id: Optional[str] = None
    order_in_parent: Optional[int] = None
    timer_running: bool = False
    is_external: bool = Field(
        False, description="Calendar event: fixed and never shifted by conflict fixes"
    )
    created_at: Optional[datetime] = None

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Any:
        return _coerce_priority(value)

    @field_validator("fixed_time", mode="before")
    @classmethod
    def _fixed_time(cls, value: Any) -> Any:
        return _coerce_clock(value)

    @property
    def is_fixed(self) -> bool:
        return self.fixed_time is not None or self.invalid_fixed_time

    @property
    def is_urgent(self) -> bool:
        return self.priority == TaskPriority.URGENT


class LeafTask(TaskBase):
    """A schedulable unit of work."""

    kind: Literal["leaf"] = "leaf"


class ContainerTask(TaskBase):
    """A project parent; only its sub-units are counted or placed."""

    kind: Literal["container"] = "container"


Task = Annotated[Union[LeafTask, ContainerTask], Field(discriminator="kind")]


class TaskRecord(BaseModel):
    """Raw task as read from the task store (camelCase contract)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    title: str = ""
    category: Optional[str] = None
    priority: TaskPriority = TaskPriority.NORMAL
    estimated_minutes: Optional[int] = Field(None, alias="estimatedMinutes")
    minutes_worked: Optional[int] = Field(0, alias="minutesWorked")
    fixed_time: Optional[str] = Field(None, alias="fixedTime")
    due_date: Optional[date] = Field(None, alias="dueDate")
    start_date: Optional[date] = Field(None, alias="startDate")
    is_completed: bool = Field(False, alias="isCompleted")
    is_project_parent: bool = Field(False, alias="isProjectParent")
    parent_id: Optional[str] = Field(None, alias="parentId")
    order_in_parent: Optional[int] = Field(None, alias="orderInParent")
    timer_running: bool = Field(False, alias="timerRunning")
    is_external: bool = Field(False, alias="isExternal")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Any:
        return _coerce_priority(value)
