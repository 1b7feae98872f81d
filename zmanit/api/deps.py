"""
Dependency injection for API endpoints.

Services hold no per-request state, so one instance of each is shared.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from zmanit.core.config import Settings, get_settings
from zmanit.services.capacity_service import CapacityService
from zmanit.services.day_scheduler import DayScheduler
from zmanit.services.deadline_service import DeadlineService
from zmanit.services.rebalance_service import RebalanceService
from zmanit.services.week_scheduler import WeekScheduler


# ===========================================
# Service Dependencies
# ===========================================


@lru_cache()
def get_capacity_service() -> CapacityService:
    """Get capacity service instance."""
    return CapacityService()


@lru_cache()
def get_day_scheduler() -> DayScheduler:
    """Get day scheduler instance."""
    return DayScheduler(capacity_service=get_capacity_service())


@lru_cache()
def get_week_scheduler() -> WeekScheduler:
    """Get week scheduler instance."""
    return WeekScheduler(day_scheduler=get_day_scheduler())


@lru_cache()
def get_deadline_service() -> DeadlineService:
    """Get deadline service instance."""
    return DeadlineService(capacity_service=get_capacity_service())


@lru_cache()
def get_rebalance_service() -> RebalanceService:
    """Get rebalance service instance."""
    return RebalanceService(capacity_service=get_capacity_service())


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

AppSettings = Annotated[Settings, Depends(get_settings)]
Capacity = Annotated[CapacityService, Depends(get_capacity_service)]
DaySchedulerDep = Annotated[DayScheduler, Depends(get_day_scheduler)]
WeekSchedulerDep = Annotated[WeekScheduler, Depends(get_week_scheduler)]
Deadlines = Annotated[DeadlineService, Depends(get_deadline_service)]
Rebalancer = Annotated[RebalanceService, Depends(get_rebalance_service)]
