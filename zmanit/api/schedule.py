"""
Schedule API endpoints.

Every request carries the full snapshot (tasks, hours, overrides, manual
order); the response is the derived plan. Nothing is stored.
"""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from zmanit.api.deps import AppSettings, Capacity, DaySchedulerDep, Deadlines, Rebalancer, WeekSchedulerDep
from zmanit.core.config import Settings
from zmanit.core.exceptions import ZmanitError
from zmanit.core.logger import setup_logger
from zmanit.models.energy import EnergyProfile
from zmanit.models.enums import ScheduleKind
from zmanit.models.rebalance import FeasibilityResult, RebalanceResult, TaskMove
from zmanit.models.schedule import CapacityInfo, ConflictWarning, DaySchedule, WeekPlan
from zmanit.models.schedule_settings import (
    DayOverride,
    ScheduleConfigInput,
    ScheduleContext,
    default_schedule_config,
)
from zmanit.models.task import Task, TaskRecord
from zmanit.services.conflict_service import resolve_conflict
from zmanit.services.energy_service import default_energy_profile
from zmanit.services.task_utils import apply_moves, normalize_tasks
from zmanit.utils.datetime_utils import (
    ensure_local,
    get_user_today,
    minute_of_day,
    now_local,
    week_start_for,
)
from zmanit.utils.time_utils import hhmm_to_minutes

logger = setup_logger(__name__)

router = APIRouter()


class SnapshotRequest(BaseModel):
    """Task list plus the scheduling context, as sent by the client."""

    model_config = ConfigDict(populate_by_name=True)

    tasks: list[TaskRecord] = Field(default_factory=list)
    today: Optional[date] = Field(None, description="Defaults to today in the configured timezone")
    schedule: Optional[ScheduleConfigInput] = Field(None, description="Defaults to the configured hours")
    overrides: list[DayOverride] = Field(default_factory=list)
    manual_order: dict[date, list[str]] = Field(default_factory=dict, alias="manualOrder")
    energy_profile: Optional[EnergyProfile] = Field(None, alias="energyProfile")


class DayRequest(SnapshotRequest):
    day: Optional[date] = Field(None, alias="date", description="Defaults to today")
    kind: ScheduleKind = ScheduleKind.WORK


class WeekRequest(SnapshotRequest):
    week_start: Optional[date] = Field(None, alias="weekStart", description="Defaults to this week's Sunday")
    kind: ScheduleKind = ScheduleKind.WORK


class RebalanceRequest(SnapshotRequest):
    now: Optional[datetime] = None
    now_time: Optional[str] = Field(None, alias="nowTime", description="HH:MM; wins over now")
    kind: Optional[ScheduleKind] = None


class ApplyMovesRequest(BaseModel):
    tasks: list[TaskRecord] = Field(default_factory=list)
    moves: list[TaskMove] = Field(default_factory=list)


class FeasibilityRequest(SnapshotRequest):
    task_id: Optional[str] = Field(None, alias="taskId", description="Check one task instead of all")


class ResolveConflictRequest(BaseModel):
    tasks: list[TaskRecord] = Field(default_factory=list)
    warning: ConflictWarning


def build_context(payload: SnapshotRequest, settings: Settings) -> ScheduleContext:
    """
    Assemble the ScheduleContext for one request.

    Raises:
        ConfigurationError: If the weekly hours cannot be normalized
    """
    config = payload.schedule.to_config() if payload.schedule else default_schedule_config()
    profile = payload.energy_profile if payload.energy_profile is not None else default_energy_profile()
    return ScheduleContext(
        config=config,
        today=payload.today or get_user_today(settings.TIMEZONE),
        overrides=payload.overrides,
        manual_order=payload.manual_order,
        energy_profile=profile,
    )


def resolve_now_minute(payload: RebalanceRequest, settings: Settings) -> int:
    if payload.now_time:
        return hhmm_to_minutes(payload.now_time)
    if payload.now:
        return minute_of_day(ensure_local(payload.now, settings.TIMEZONE))
    return minute_of_day(now_local(settings.TIMEZONE))


def _unprocessable(exc: ZmanitError) -> HTTPException:
    logger.warning(f"Rejected request: {exc.message}")
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=exc.message,
    )


@router.post("/day", response_model=DaySchedule)
async def schedule_day(
    payload: DayRequest,
    settings: AppSettings,
    scheduler: DaySchedulerDep,
):
    """Plan one day: pinned tasks, then flexible work in priority order."""
    try:
        context = build_context(payload, settings)
    except ZmanitError as exc:
        raise _unprocessable(exc) from exc
    tasks = normalize_tasks(payload.tasks)
    return scheduler.schedule_day(tasks, payload.day or context.today, context, payload.kind)


@router.post("/week", response_model=WeekPlan)
async def schedule_week(
    payload: WeekRequest,
    settings: AppSettings,
    scheduler: WeekSchedulerDep,
):
    """
    Plan seven days from the week start.

    Recommendations are advisory; the client decides what to move.
    """
    try:
        context = build_context(payload, settings)
    except ZmanitError as exc:
        raise _unprocessable(exc) from exc
    tasks = normalize_tasks(payload.tasks)
    week_start = payload.week_start or week_start_for(context.today)
    return scheduler.schedule_week(tasks, week_start, context, payload.kind)


@router.post("/capacity", response_model=list[CapacityInfo])
async def week_capacity(
    payload: WeekRequest,
    settings: AppSettings,
    capacity_service: Capacity,
):
    try:
        context = build_context(payload, settings)
    except ZmanitError as exc:
        raise _unprocessable(exc) from exc
    week_start = payload.week_start or week_start_for(context.today)
    return capacity_service.week_capacity(context, week_start, payload.kind)


@router.post("/rebalance", response_model=RebalanceResult)
async def rebalance_today(
    payload: RebalanceRequest,
    settings: AppSettings,
    rebalancer: Rebalancer,
):
    """
    Propose moves between today and the next working day.

    The result is not applied; send it to /rebalance/apply to get the
    updated task values.
    """
    try:
        context = build_context(payload, settings)
        now_minute = resolve_now_minute(payload, settings)
    except ZmanitError as exc:
        raise _unprocessable(exc) from exc
    tasks = normalize_tasks(payload.tasks)
    return rebalancer.rebalance(tasks, context, now_minute, payload.kind)


@router.post("/rebalance/apply", response_model=list[Task])
async def apply_rebalance(payload: ApplyMovesRequest):
    """Apply moves idempotently; a task no longer on its move's source date is left alone."""
    return apply_moves(normalize_tasks(payload.tasks), payload.moves)


@router.post("/feasibility", response_model=list[FeasibilityResult])
async def check_feasibility(
    payload: FeasibilityRequest,
    settings: AppSettings,
    deadlines: Deadlines,
):
    try:
        context = build_context(payload, settings)
    except ZmanitError as exc:
        raise _unprocessable(exc) from exc
    tasks = normalize_tasks(payload.tasks)

    if payload.task_id is None:
        return deadlines.check_all(tasks, context)

    for task in tasks:
        if task.id == payload.task_id:
            return [deadlines.check(task, context)]
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Task {payload.task_id} not found",
    )


@router.post("/conflicts/resolve", response_model=list[Task])
async def resolve_fixed_conflict(payload: ResolveConflictRequest):
    """Apply a conflict warning's suggested shift, on explicit request only."""
    try:
        return resolve_conflict(normalize_tasks(payload.tasks), payload.warning)
    except ZmanitError as exc:
        raise _unprocessable(exc) from exc
