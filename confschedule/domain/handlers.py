"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from confschedule.domain.bus import EventBus
from confschedule.domain.events import (
    ScheduleConflictDetected,
    TalkScheduled,
    TalkUnscheduled,
)
from confschedule.domain.models import ActivityEntry, ActivityType
from confschedule.repos.memory import ActivityRepository, Catalog, ScheduleRepository
from confschedule.services.conflicts import find_conflicts_with
from confschedule.services.schedule import scheduled_talks
from confschedule.utils.logger import get_logger, log_action

logger = get_logger(__name__)


class HandlerRegistry:
    """Wires schedule-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        catalog: Catalog,
        schedule_repo: ScheduleRepository,
        activity_repo: ActivityRepository,
    ) -> None:
        self.bus = bus
        self.catalog = catalog
        self.schedule_repo = schedule_repo
        self.activity_repo = activity_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(TalkScheduled, self.on_talk_scheduled)
        self.bus.subscribe(TalkUnscheduled, self.on_talk_unscheduled)
        self.bus.subscribe(ScheduleConflictDetected, self.on_conflict_detected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_talk_scheduled(self, event: TalkScheduled) -> None:
        talk = self.catalog.talks.get(event.talk_id)
        if talk is None:
            return

        self.activity_repo.add(
            ActivityEntry(
                user_id=event.user_id,
                type=ActivityType.TALK_ADDED,
                payload={"talk_id": event.talk_id},
            )
        )

        # Check the new talk against everything else already saved
        others = [
            t.to_schedule_item()
            for t in scheduled_talks(event.user_id, self.catalog, self.schedule_repo)
            if t.id != talk.id
        ]
        item = talk.to_schedule_item()
        overlapping = find_conflicts_with(item.start_time, item.end_time, others)
        if overlapping:
            self.bus.publish(
                ScheduleConflictDetected(
                    user_id=event.user_id,
                    talk_id=event.talk_id,
                    conflicting_talk_ids=[o.id for o in overlapping],
                )
            )

    def on_talk_unscheduled(self, event: TalkUnscheduled) -> None:
        self.activity_repo.add(
            ActivityEntry(
                user_id=event.user_id,
                type=ActivityType.TALK_REMOVED,
                payload={"talk_id": event.talk_id},
            )
        )

    def on_conflict_detected(self, event: ScheduleConflictDetected) -> None:
        self.activity_repo.add(
            ActivityEntry(
                user_id=event.user_id,
                type=ActivityType.CONFLICT_DETECTED,
                payload={
                    "talk_id": event.talk_id,
                    "conflicting_talk_ids": event.conflicting_talk_ids,
                },
            )
        )
        log_action(
            logger,
            "Schedule conflict detected",
            level=logging.WARNING,
            action="schedule.conflict",
            user_id=event.user_id,
            talk_id=event.talk_id,
            conflicts=",".join(event.conflicting_talk_ids),
        )
