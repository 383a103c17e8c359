"""Tests for the personal-schedule service and its event handlers."""

from __future__ import annotations

import pytest

from confschedule.domain.bus import EventBus
from confschedule.domain.errors import AlreadyScheduledError, TalkNotFoundError
from confschedule.domain.events import ScheduleConflictDetected, TalkScheduled
from confschedule.domain.handlers import HandlerRegistry
from confschedule.domain.models import ActivityType
from confschedule.repos.memory import ActivityRepository, ScheduleRepository, create_catalog
from confschedule.services.schedule import (
    add_to_schedule,
    check_conflicts,
    get_user_schedule,
    is_in_schedule,
    remove_from_schedule,
)

USER = "user-1"


@pytest.fixture()
def env():
    """Fresh bus + repos + registry for each test."""
    bus = EventBus()
    catalog = create_catalog()
    schedule_repo = ScheduleRepository()
    activity_repo = ActivityRepository()
    registry = HandlerRegistry(
        bus=bus,
        catalog=catalog,
        schedule_repo=schedule_repo,
        activity_repo=activity_repo,
    )

    class Env:
        pass

    e = Env()
    e.bus = bus
    e.catalog = catalog
    e.schedule_repo = schedule_repo
    e.activity_repo = activity_repo
    e.registry = registry
    return e


def _add(env, talk_id: str, user_id: str = USER):
    return add_to_schedule(user_id, talk_id, env.catalog, env.schedule_repo, env.bus)


# ---------------------------------------------------------------------------
# Add / remove
# ---------------------------------------------------------------------------


def test_add_to_schedule(env):
    entry = _add(env, "turbo-yet")
    assert entry.talk_id == "turbo-yet"
    assert is_in_schedule(USER, "turbo-yet", env.schedule_repo)
    assert not is_in_schedule("someone-else", "turbo-yet", env.schedule_repo)


def test_add_unknown_talk(env):
    with pytest.raises(TalkNotFoundError):
        _add(env, "no-such-talk")


def test_add_twice_is_rejected(env):
    _add(env, "turbo-yet")
    with pytest.raises(AlreadyScheduledError, match="Talk already in your schedule"):
        _add(env, "turbo-yet")


def test_remove_is_idempotent(env):
    _add(env, "turbo-yet")
    assert remove_from_schedule(USER, "turbo-yet", env.schedule_repo, env.bus) is True
    assert remove_from_schedule(USER, "turbo-yet", env.schedule_repo, env.bus) is False
    assert not is_in_schedule(USER, "turbo-yet", env.schedule_repo)


# ---------------------------------------------------------------------------
# Schedule view
# ---------------------------------------------------------------------------


def test_user_schedule_is_sorted_and_flags_conflicts(env):
    # Added out of order on purpose
    for talk_id in ("turbo-yet", "nextjs16-migration", "dx-ai-age", "coding-future"):
        _add(env, talk_id)

    schedule = get_user_schedule(USER, env.catalog, env.schedule_repo)

    assert [s.talk.id for s in schedule.talks] == [
        "coding-future",
        "dx-ai-age",
        "nextjs16-migration",
        "turbo-yet",
    ]
    by_id = {s.talk.id: s for s in schedule.talks}
    assert by_id["coding-future"].conflicts_with == []
    assert by_id["dx-ai-age"].conflicts_with == ["nextjs16-migration"]
    assert by_id["nextjs16-migration"].conflicts_with == ["dx-ai-age", "turbo-yet"]
    assert by_id["turbo-yet"].has_conflict
    assert schedule.has_conflicts is True


def test_user_schedule_back_to_back_talks(env):
    """The workshop ends exactly when the next main-stage talk starts."""
    _add(env, "aws-ai-workshop")
    _add(env, "reactive-state")

    schedule = get_user_schedule(USER, env.catalog, env.schedule_repo)
    assert schedule.has_conflicts is False


def test_empty_schedule(env):
    schedule = get_user_schedule(USER, env.catalog, env.schedule_repo)
    assert schedule.talks == []
    assert schedule.has_conflicts is False


# ---------------------------------------------------------------------------
# Conflict check over arbitrary ids
# ---------------------------------------------------------------------------


def test_check_conflicts_reports_pairs(env):
    result = check_conflicts(["course-platform", "aws-ai-workshop", "reactive-state"], env.catalog)
    assert result.has_conflicts
    assert [(c.talk1, c.talk2) for c in result.conflicts] == [("course-platform", "aws-ai-workshop")]
    assert {t.id for t in result.talks} == {"course-platform", "aws-ai-workshop", "reactive-state"}


def test_check_conflicts_ignores_unknown_and_repeated_ids(env):
    result = check_conflicts(["dx-ai-age", "dx-ai-age", "ghost", "bun-speed"], env.catalog)
    assert result.conflicts == []
    assert [t.id for t in result.talks] == ["dx-ai-age", "bun-speed"]


def test_check_conflicts_empty(env):
    result = check_conflicts([], env.catalog)
    assert result.conflicts == []
    assert result.talks == []
    assert result.has_conflicts is False


def test_list_by_ids_collapses_repeats(env):
    talks = env.catalog.talks.list_by_ids(["turbo-yet", "open-web", "turbo-yet", "ghost"])
    assert [t.id for t in talks] == ["turbo-yet", "open-web"]


def test_check_conflicts_with_repeated_conflicting_ids(env):
    result = check_conflicts(
        ["nextjs16-migration", "dx-ai-age", "nextjs16-migration", "dx-ai-age"], env.catalog
    )
    assert [(c.talk1, c.talk2) for c in result.conflicts] == [("dx-ai-age", "nextjs16-migration")]
    assert len(result.talks) == 2


# ---------------------------------------------------------------------------
# Event handlers
# ---------------------------------------------------------------------------


def test_adding_records_activity(env):
    _add(env, "turbo-yet")

    entries = env.activity_repo.list_for_user(USER)
    assert [e.type for e in entries] == [ActivityType.TALK_ADDED]
    assert entries[0].payload == {"talk_id": "turbo-yet"}


def test_adding_overlapping_talk_publishes_conflict(env):
    seen: list[ScheduleConflictDetected] = []
    env.bus.subscribe(ScheduleConflictDetected, seen.append)

    _add(env, "dx-ai-age")
    _add(env, "turbo-yet")
    assert seen == []

    _add(env, "nextjs16-migration")
    assert len(seen) == 1
    assert seen[0].talk_id == "nextjs16-migration"
    assert sorted(seen[0].conflicting_talk_ids) == ["dx-ai-age", "turbo-yet"]

    types = [e.type for e in env.activity_repo.list_for_user(USER)]
    assert types.count(ActivityType.CONFLICT_DETECTED) == 1


def test_conflicts_are_per_user(env):
    _add(env, "dx-ai-age", user_id="other-user")
    _add(env, "nextjs16-migration")

    types = [e.type for e in env.activity_repo.list_for_user(USER)]
    assert ActivityType.CONFLICT_DETECTED not in types


def test_removing_records_activity(env):
    _add(env, "turbo-yet")
    remove_from_schedule(USER, "turbo-yet", env.schedule_repo, env.bus)

    types = [e.type for e in env.activity_repo.list_for_user(USER)]
    assert types == [ActivityType.TALK_ADDED, ActivityType.TALK_REMOVED]


def test_scheduled_event_for_unknown_talk_is_ignored(env):
    env.bus.publish(TalkScheduled(user_id=USER, talk_id="ghost"))
    assert env.activity_repo.list_for_user(USER) == []


def test_bus_dispatches_in_registration_order():
    bus = EventBus()
    calls: list[str] = []
    bus.subscribe(TalkScheduled, lambda e: calls.append("first"))
    bus.subscribe(TalkScheduled, lambda e: calls.append("second"))

    bus.publish(TalkScheduled(user_id=USER, talk_id="x"))

    assert calls == ["first", "second"]
    assert len(bus.handlers_for(TalkScheduled)) == 2
    assert bus.handlers_for(ScheduleConflictDetected) == []
