"""
Unit tests for DayScheduler.
"""

import random
from datetime import date, timedelta

from zmanit.models.enums import BlockSource, DayState, DayStatus, ScheduleKind, TaskPriority, UnscheduledReason
from zmanit.models.schedule_settings import ScheduleContext, default_schedule_config
from zmanit.models.task import ContainerTask, LeafTask
from zmanit.services.day_scheduler import DayScheduler
from zmanit.services.energy_service import default_energy_profile

SUNDAY = date(2026, 10, 18)
FRIDAY = date(2026, 10, 23)
SATURDAY = date(2026, 10, 24)


def make_task(
    task_id: str,
    minutes: int | None = 30,
    due_date: date | None = SUNDAY,
    priority: TaskPriority = TaskPriority.NORMAL,
    category: str = "other",
    **kwargs,
) -> LeafTask:
    return LeafTask(
        id=task_id,
        title=task_id,
        estimated_minutes=minutes,
        due_date=due_date,
        priority=priority,
        category=category,
        **kwargs,
    )


def make_context(**kwargs) -> ScheduleContext:
    return ScheduleContext(config=default_schedule_config(), today=SUNDAY, **kwargs)


def spans(schedule) -> list[tuple[str, int, int]]:
    return [(block.task_id, block.start, block.end) for block in schedule.blocks]


def test_over_capacity_day_is_overloaded():
    scheduler = DayScheduler()
    tasks = [make_task("a", 200), make_task("b", 100), make_task("c", 80)]

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    assert schedule.state == DayState.SCHEDULED
    assert schedule.status == DayStatus.OVERLOADED
    assert spans(schedule) == [("a", 510, 710), ("b", 715, 815)]
    assert [(u.task_id, u.reason) for u in schedule.unscheduled_tasks] == [
        ("c", UnscheduledReason.OVER_CAPACITY)
    ]
    assert schedule.unscheduled_tasks[0].required_minutes == 80
    assert schedule.flexible_minutes == 300
    assert schedule.utilization_percent == 86
    assert schedule.free_slots == [(820, 975)]


def test_flexible_blocks_keep_breathing_around_fixed_task():
    scheduler = DayScheduler()
    tasks = [
        make_task("meeting", 30, fixed_time="09:00"),
        make_task("x", 60),
        make_task("y", 60),
    ]

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    assert spans(schedule) == [("meeting", 540, 570), ("x", 575, 635), ("y", 640, 700)]
    assert schedule.blocks[0].is_fixed
    assert schedule.blocks[0].source == BlockSource.FIXED
    assert schedule.blocks[1].source == BlockSource.DEADLINE_DRIVEN
    assert schedule.fixed_minutes == 30


def test_blocks_never_overlap_and_stay_in_window():
    scheduler = DayScheduler()
    tasks = [make_task(f"t{i}", 25 + i * 5) for i in range(8)]
    tasks.append(make_task("fixed", 45, fixed_time="11:00"))

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    blocks = schedule.blocks
    for previous, current in zip(blocks, blocks[1:]):
        assert previous.end <= current.start
    assert all(510 <= block.start and block.end <= 975 for block in blocks if not block.is_fixed)


def test_flexible_minutes_never_exceed_net_capacity():
    scheduler = DayScheduler()
    tasks = [make_task(f"t{i}", 45) for i in range(12)]

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    assert schedule.flexible_minutes <= 348
    assert schedule.status == DayStatus.OVERLOADED


def test_same_input_gives_identical_output():
    scheduler = DayScheduler()
    tasks = [
        make_task("a", 90, priority=TaskPriority.HIGH),
        make_task("b", 40),
        make_task("c", 60, due_date=None),
        make_task("d", 30, fixed_time="12:00"),
        make_task("e", 120, due_date=SUNDAY + timedelta(days=3)),
    ]
    shuffled = tasks[:]
    random.Random(7).shuffle(shuffled)

    first = scheduler.schedule_day(tasks, SUNDAY, make_context())
    second = scheduler.schedule_day(shuffled, SUNDAY, make_context())

    assert first.model_dump_json() == second.model_dump_json()


def test_higher_priority_is_placed_first():
    scheduler = DayScheduler()
    tasks = [make_task("normal", 300), make_task("urgent", 300, priority=TaskPriority.URGENT)]

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    assert spans(schedule) == [("urgent", 510, 810)]
    assert schedule.unscheduled_tasks[0].task_id == "normal"


def test_manual_order_overrides_category_tie_break():
    scheduler = DayScheduler()
    tasks = [make_task("a", 30), make_task("b", 30)]
    context = make_context(manual_order={SUNDAY: ["b", "a"]})

    schedule = scheduler.schedule_day(tasks, SUNDAY, context)

    assert [block.task_id for block in schedule.blocks] == ["b", "a"]


def test_disabled_day_lists_required_tasks():
    scheduler = DayScheduler()
    tasks = [make_task("friday", 60, due_date=FRIDAY), make_task("undated", 30, due_date=None)]

    schedule = scheduler.schedule_day(tasks, FRIDAY, make_context())

    assert schedule.state == DayState.DISABLED
    assert schedule.status == DayStatus.EMPTY
    assert [(u.task_id, u.reason) for u in schedule.unscheduled_tasks] == [
        ("friday", UnscheduledReason.DAY_DISABLED)
    ]


def test_past_day_is_not_planned():
    scheduler = DayScheduler()
    yesterday = SUNDAY - timedelta(days=1)

    schedule = scheduler.schedule_day([make_task("a", due_date=yesterday)], yesterday, make_context())

    assert schedule.state == DayState.PAST
    assert schedule.blocks == []


def test_containers_are_not_scheduled():
    scheduler = DayScheduler()
    project = ContainerTask(id="project", title="Project", estimated_minutes=600, due_date=SUNDAY)

    schedule = scheduler.schedule_day([project], SUNDAY, make_context())

    assert schedule.state == DayState.NO_TASKS
    assert schedule.status == DayStatus.EMPTY


def test_completed_tasks_are_skipped():
    scheduler = DayScheduler()
    schedule = scheduler.schedule_day([make_task("done", is_completed=True)], SUNDAY, make_context())
    assert schedule.state == DayState.NO_TASKS


def test_invalid_duration_is_reported():
    scheduler = DayScheduler()
    tasks = [make_task("bad", -10), make_task("good", 30)]

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    assert spans(schedule) == [("good", 510, 540)]
    assert [(u.task_id, u.reason) for u in schedule.unscheduled_tasks] == [
        ("bad", UnscheduledReason.INVALID_DURATION)
    ]
    assert schedule.status == DayStatus.OK


def test_remaining_minutes_are_planned():
    scheduler = DayScheduler()
    tasks = [make_task("half", 120, minutes_worked=90), make_task("overrun", 60, minutes_worked=75)]

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    assert spans(schedule) == [("half", 510, 540)]


def test_future_start_date_is_respected():
    scheduler = DayScheduler()
    monday = SUNDAY + timedelta(days=1)
    task = make_task("later", due_date=SUNDAY + timedelta(days=3), start_date=monday)

    assert scheduler.schedule_day([task], SUNDAY, make_context()).state == DayState.NO_TASKS
    monday_schedule = scheduler.schedule_day([task], monday, make_context())
    assert monday_schedule.blocks[0].source == BlockSource.PROACTIVE_FILL


def test_overdue_task_is_rolled_over_onto_today():
    scheduler = DayScheduler()
    task = make_task("late", due_date=SUNDAY - timedelta(days=2))

    schedule = scheduler.schedule_day([task], SUNDAY, make_context())

    assert schedule.blocks[0].source == BlockSource.ROLLED_OVER
    monday = scheduler.schedule_day([task], SUNDAY + timedelta(days=1), make_context())
    assert monday.state == DayState.NO_TASKS


def test_carried_task_is_required():
    scheduler = DayScheduler()
    monday = SUNDAY + timedelta(days=1)

    schedule = scheduler.schedule_day([make_task("carry", 60)], monday, make_context(), carried_ids={"carry"})

    assert schedule.blocks[0].source == BlockSource.ROLLED_OVER


def test_tight_status_near_capacity():
    scheduler = DayScheduler()
    schedule = scheduler.schedule_day([make_task("big", 320)], SUNDAY, make_context())

    assert schedule.utilization_percent == 91
    assert schedule.status == DayStatus.TIGHT


def test_energy_windows_steer_placement():
    scheduler = DayScheduler()
    context = make_context(energy_profile=default_energy_profile())
    tasks = [make_task("typing", 60, category="transcription"), make_task("inbox", 30, category="email")]

    schedule = scheduler.schedule_day(tasks, SUNDAY, context)

    blocks = {block.task_id: block for block in schedule.blocks}
    assert (blocks["typing"].start, blocks["typing"].energy_window) == (510, "early_morning")
    assert blocks["typing"].is_optimal
    assert (blocks["inbox"].start, blocks["inbox"].energy_window) == (840, "late_afternoon")
    assert blocks["inbox"].is_optimal


def test_long_task_falls_back_outside_preferred_windows():
    scheduler = DayScheduler()
    context = make_context(energy_profile=default_energy_profile())

    schedule = scheduler.schedule_day([make_task("proof", 200, category="proofreading")], SUNDAY, context)

    block = schedule.blocks[0]
    assert block.start == 510
    assert not block.is_optimal
    assert block.energy_window == "early_morning"


def test_flexible_home_day_places_due_work_and_defers_the_rest():
    scheduler = DayScheduler()
    context = make_context(energy_profile=default_energy_profile())
    tasks = [
        make_task("dinner", 60, due_date=SATURDAY, category="family"),
        make_task("garden", 90, due_date=None, category="home"),
        make_task("report", 60, due_date=SATURDAY, category="admin"),
    ]

    schedule = scheduler.schedule_day(tasks, SATURDAY, context, kind=ScheduleKind.HOME)

    assert schedule.capacity.flexible
    assert spans(schedule) == [("dinner", 540, 600)]
    assert schedule.deferred_task_ids == ["garden"]
    assert schedule.utilization_percent == 8


def test_excluded_tasks_are_skipped():
    scheduler = DayScheduler()
    schedule = scheduler.schedule_day([make_task("a")], SUNDAY, make_context(), excluded_ids={"a"})
    assert schedule.state == DayState.NO_TASKS


def test_urgent_task_due_later_is_not_starved_by_todays_normal_work():
    scheduler = DayScheduler()
    tasks = [
        make_task("a", 100, due_date=SUNDAY + timedelta(days=1), priority=TaskPriority.URGENT),
        make_task("b", 300),
    ]

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    assert spans(schedule) == [("a", 510, 610)]
    assert schedule.blocks[0].source == BlockSource.PROACTIVE_FILL
    assert [(u.task_id, u.reason) for u in schedule.unscheduled_tasks] == [
        ("b", UnscheduledReason.OVER_CAPACITY)
    ]
    assert schedule.status == DayStatus.OVERLOADED


def test_proactive_work_that_does_not_fit_is_deferred():
    scheduler = DayScheduler()
    tasks = [make_task("today", 300), make_task("later", 100, due_date=SUNDAY + timedelta(days=2))]

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    assert spans(schedule) == [("today", 510, 810)]
    assert schedule.deferred_task_ids == ["later"]
    assert schedule.unscheduled_tasks == []
    assert schedule.status == DayStatus.OK


def test_window_edge_keeps_breathing_before_fixed_task():
    scheduler = DayScheduler()
    context = make_context(energy_profile=default_energy_profile())
    tasks = [
        make_task("standup", 30, fixed_time="10:00"),
        make_task("typing", 90, category="transcription"),
    ]

    schedule = scheduler.schedule_day(tasks, SUNDAY, context)

    blocks = {block.task_id: block for block in schedule.blocks}
    assert (blocks["typing"].start, blocks["typing"].end) == (720, 810)
    assert blocks["typing"].energy_window == "early_afternoon"
    assert blocks["typing"].is_optimal


def test_unreadable_fixed_time_is_reported_on_its_date():
    scheduler = DayScheduler()
    tasks = [make_task("call", 30, invalid_fixed_time=True), make_task("work", 60)]

    schedule = scheduler.schedule_day(tasks, SUNDAY, make_context())

    assert spans(schedule) == [("work", 510, 570)]
    assert [(u.task_id, u.reason) for u in schedule.unscheduled_tasks] == [
        ("call", UnscheduledReason.INVALID_FIXED_TIME)
    ]
    monday = scheduler.schedule_day(tasks[:1], SUNDAY + timedelta(days=1), make_context())
    assert monday.state == DayState.NO_TASKS
