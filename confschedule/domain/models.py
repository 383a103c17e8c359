"""Domain models for the conference schedule service."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, model_validator

from confschedule.services.conflicts import ScheduleItem

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class TalkLevel(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TalkFormat(StrEnum):
    TALK = "talk"
    WORKSHOP = "workshop"
    KEYNOTE = "keynote"
    PANEL = "panel"


class ActivityType(StrEnum):
    TALK_ADDED = "talk_added"
    TALK_REMOVED = "talk_removed"
    CONFLICT_DETECTED = "conflict_detected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Speaker(BaseModel):
    id: str
    name: str
    bio: str
    avatar: str
    company: str
    role: str
    twitter: str | None = None


class Track(BaseModel):
    id: str
    name: str
    color: str = Field(pattern=r"^#[0-9a-fA-F]{6}$")
    description: str


class Room(BaseModel):
    id: str
    name: str
    capacity: int = Field(gt=0)


class Talk(BaseModel):
    id: str
    title: str
    description: str
    speaker_id: str
    track_id: str
    room_id: str
    start_time: datetime
    end_time: datetime
    level: TalkLevel
    format: TalkFormat

    @model_validator(mode="after")
    def _end_after_start(self) -> Talk:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    def to_schedule_item(self) -> ScheduleItem:
        return ScheduleItem(
            id=self.id,
            start_time=int(self.start_time.timestamp()),
            end_time=int(self.end_time.timestamp()),
        )


# ---------------------------------------------------------------------------
# Users, sessions and personal schedules
# ---------------------------------------------------------------------------


class User(BaseModel):
    id: str = Field(default_factory=_new_id)
    email: str
    name: str
    password_hash: str
    created_at: datetime = Field(default_factory=_utcnow)


class Session(BaseModel):
    token: str
    user_id: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class ScheduleEntry(BaseModel):
    user_id: str
    talk_id: str
    added_at: datetime = Field(default_factory=_utcnow)


class ActivityEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: ActivityType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Read views
# ---------------------------------------------------------------------------


class SpeakerSummary(BaseModel):
    id: str
    name: str
    avatar: str
    company: str


class TrackSummary(BaseModel):
    id: str
    name: str
    color: str


class RoomSummary(BaseModel):
    id: str
    name: str


class TalkView(BaseModel):
    """A talk joined with summaries of its speaker, track and room."""

    id: str
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    level: TalkLevel
    format: TalkFormat
    speaker: SpeakerSummary
    track: TrackSummary
    room: RoomSummary


class TalkDetail(BaseModel):
    id: str
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    level: TalkLevel
    format: TalkFormat
    speaker: Speaker
    track: Track
    room: Room


class SpeakerTalk(BaseModel):
    id: str
    title: str
    description: str
    start_time: datetime
    end_time: datetime
    level: TalkLevel
    format: TalkFormat
    track: TrackSummary
    room: RoomSummary


class SpeakerWithTalks(Speaker):
    talks: list[SpeakerTalk] = Field(default_factory=list)


class TimeSlot(BaseModel):
    start_time: datetime
    label: str
    talks: list[TalkView]


class ScheduledTalk(BaseModel):
    talk: TalkView
    added_at: datetime
    conflicts_with: list[str] = Field(default_factory=list)

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicts_with)


class UserSchedule(BaseModel):
    talks: list[ScheduledTalk] = Field(default_factory=list)
    has_conflicts: bool = False


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    name: str = Field(min_length=2)
    email: str = Field(pattern=_EMAIL_PATTERN)
    password: str = Field(min_length=8)


class LoginRequest(BaseModel):
    email: str = Field(pattern=_EMAIL_PATTERN)
    password: str = Field(min_length=1)


class UserPublic(BaseModel):
    id: str
    email: str
    name: str


class ConflictCheckRequest(BaseModel):
    talk_ids: list[str]


class TalkRef(BaseModel):
    id: str
    title: str


class TalkTimes(BaseModel):
    id: str
    title: str
    start_time: datetime
    end_time: datetime


class TalkPair(BaseModel):
    talk1: str
    talk2: str


class ConflictCheckResponse(BaseModel):
    conflicts: list[TalkPair] = Field(default_factory=list)
    talks: list[TalkTimes] = Field(default_factory=list)
    has_conflicts: bool = False


class ChatMessage(BaseModel):
    role: str = Field(pattern=r"^(user|assistant)$")
    content: str


class ChatRequest(BaseModel):
    messages: list[ChatMessage]


class ChatResponse(BaseModel):
    agent: str
    reply: str
    tool_calls: list[str] = Field(default_factory=list)
