"""Domain events emitted when a personal schedule changes."""

from __future__ import annotations

from pydantic import BaseModel


class TalkScheduled(BaseModel):
    """Fired after a talk is saved to a user's schedule."""

    user_id: str
    talk_id: str


class TalkUnscheduled(BaseModel):
    """Fired after a talk is removed from a user's schedule."""

    user_id: str
    talk_id: str


class ScheduleConflictDetected(BaseModel):
    """Fired when a newly saved talk overlaps others already in the schedule."""

    user_id: str
    talk_id: str
    conflicting_talk_ids: list[str]
