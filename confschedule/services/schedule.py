"""Service for a user's personal schedule of saved talks."""

from __future__ import annotations

import time

from confschedule.domain.bus import EventBus
from confschedule.domain.errors import AlreadyScheduledError, TalkNotFoundError
from confschedule.domain.events import TalkScheduled, TalkUnscheduled
from confschedule.domain.models import (
    ConflictCheckResponse,
    ScheduledTalk,
    ScheduleEntry,
    Talk,
    TalkPair,
    TalkTimes,
    UserSchedule,
)
from confschedule.repos.memory import Catalog, ScheduleRepository
from confschedule.services.catalog import to_view
from confschedule.services.conflicts import ConflictRelation, find_conflicts
from confschedule.utils.logger import elapsed_ms, get_logger, log_action

logger = get_logger(__name__)


def talk_conflicts(talks: list[Talk]) -> ConflictRelation:
    return find_conflicts(t.to_schedule_item() for t in talks)


def add_to_schedule(
    user_id: str,
    talk_id: str,
    catalog: Catalog,
    schedule_repo: ScheduleRepository,
    bus: EventBus,
) -> ScheduleEntry:
    """Save *talk_id* to the user's schedule.

    Raises ``TalkNotFoundError`` for an unknown talk and
    ``AlreadyScheduledError`` if it is already saved.
    """
    started = time.perf_counter()
    if catalog.talks.get(talk_id) is None:
        raise TalkNotFoundError(talk_id)

    if schedule_repo.contains(user_id, talk_id):
        log_action(
            logger,
            "Schedule add attempted - already exists",
            action="schedule.add",
            user_id=user_id,
            talk_id=talk_id,
            result="duplicate",
            duration_ms=elapsed_ms(started),
        )
        raise AlreadyScheduledError(talk_id)

    entry = ScheduleEntry(user_id=user_id, talk_id=talk_id)
    schedule_repo.add(entry)
    bus.publish(TalkScheduled(user_id=user_id, talk_id=talk_id))

    log_action(
        logger,
        "Schedule item added",
        action="schedule.add",
        user_id=user_id,
        talk_id=talk_id,
        result="success",
        duration_ms=elapsed_ms(started),
    )
    return entry


def remove_from_schedule(
    user_id: str,
    talk_id: str,
    schedule_repo: ScheduleRepository,
    bus: EventBus,
) -> bool:
    """Remove *talk_id* from the schedule; a no-op if it was not saved."""
    started = time.perf_counter()
    removed = schedule_repo.remove(user_id, talk_id)
    if removed:
        bus.publish(TalkUnscheduled(user_id=user_id, talk_id=talk_id))

    log_action(
        logger,
        "Schedule item removed",
        action="schedule.remove",
        user_id=user_id,
        talk_id=talk_id,
        result="success" if removed else "not_found",
        duration_ms=elapsed_ms(started),
    )
    return removed


def is_in_schedule(user_id: str, talk_id: str, schedule_repo: ScheduleRepository) -> bool:
    return schedule_repo.contains(user_id, talk_id)


def scheduled_talks(user_id: str, catalog: Catalog, schedule_repo: ScheduleRepository) -> list[Talk]:
    ids = [e.talk_id for e in schedule_repo.list_for_user(user_id)]
    return catalog.talks.list_by_ids(ids)


def get_user_schedule(
    user_id: str,
    catalog: Catalog,
    schedule_repo: ScheduleRepository,
) -> UserSchedule:
    """Return the user's saved talks in start order, each with its conflicts."""
    added_at = {e.talk_id: e.added_at for e in schedule_repo.list_for_user(user_id)}
    talks = catalog.talks.list_by_ids(list(added_at))
    relation = talk_conflicts(talks)

    items = [
        ScheduledTalk(
            talk=to_view(catalog, talk),
            added_at=added_at[talk.id],
            conflicts_with=sorted(relation.conflicts_for(talk.id)),
        )
        for talk in talks
    ]
    return UserSchedule(talks=items, has_conflicts=relation.has_conflicts)


def check_conflicts(talk_ids: list[str], catalog: Catalog) -> ConflictCheckResponse:
    """Check an arbitrary set of talks for time conflicts.

    Repeated ids are collapsed and unknown ids are ignored.
    """
    if not talk_ids:
        return ConflictCheckResponse()

    talks = catalog.talks.list_by_ids(talk_ids)
    relation = talk_conflicts(talks)
    return ConflictCheckResponse(
        conflicts=[TalkPair(talk1=p.first, talk2=p.second) for p in relation.pairs],
        talks=[
            TalkTimes(id=t.id, title=t.title, start_time=t.start_time, end_time=t.end_time)
            for t in talks
        ],
        has_conflicts=relation.has_conflicts,
    )
