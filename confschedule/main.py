"""FastAPI application: entry point for the conference schedule service."""

from __future__ import annotations

from fastapi import Cookie, Depends, FastAPI, HTTPException, Response

from confschedule.config import settings
from confschedule.domain.bus import EventBus
from confschedule.domain.errors import (
    AlreadyScheduledError,
    EmailTakenError,
    InvalidCredentialsError,
    TalkNotFoundError,
)
from confschedule.domain.handlers import HandlerRegistry
from confschedule.domain.models import (
    ActivityEntry,
    ChatRequest,
    ChatResponse,
    ConflictCheckRequest,
    ConflictCheckResponse,
    LoginRequest,
    Session,
    SignupRequest,
    Speaker,
    SpeakerWithTalks,
    TalkDetail,
    TalkFormat,
    TalkLevel,
    TalkView,
    TimeSlot,
    Track,
    UserPublic,
    UserSchedule,
)
from confschedule.repos.memory import (
    ActivityRepository,
    ScheduleRepository,
    SessionRepository,
    UserRepository,
    create_catalog,
)
from confschedule.services import auth, catalog as catalog_service, schedule as schedule_service
from confschedule.services.assistant import run_pipeline
from confschedule.services.tools import ToolContext

app = FastAPI(title="Conference Schedule Service")

# ── Singletons (created at import time) ──────────────────────────────
event_bus = EventBus()
catalog = create_catalog()
user_repo = UserRepository()
session_repo = SessionRepository()
schedule_repo = ScheduleRepository()
activity_repo = ActivityRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    catalog=catalog,
    schedule_repo=schedule_repo,
    activity_repo=activity_repo,
)


# ── Auth helpers ──────────────────────────────────────────────────────


def _set_session_cookie(response: Response, session: Session) -> None:
    response.set_cookie(
        key=auth.SESSION_COOKIE,
        value=session.token,
        expires=session.expires_at,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
        path="/",
    )


def current_user_id(session: str | None = Cookie(default=None)) -> str:
    """Resolve the session cookie to a user id or reject with 401."""
    user_id = auth.resolve_session(session, session_repo)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user_id


# ── Routes: auth ──────────────────────────────────────────────────────


@app.post("/auth/signup", response_model=UserPublic, status_code=201)
def signup(payload: SignupRequest, response: Response) -> UserPublic:
    """Create an account and start a session."""
    try:
        user, session = auth.signup(payload, user_repo, session_repo)
    except EmailTakenError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    _set_session_cookie(response, session)
    return UserPublic(id=user.id, email=user.email, name=user.name)


@app.post("/auth/login", response_model=UserPublic)
def login(payload: LoginRequest, response: Response) -> UserPublic:
    try:
        user, session = auth.login(payload, user_repo, session_repo)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
    _set_session_cookie(response, session)
    return UserPublic(id=user.id, email=user.email, name=user.name)


@app.post("/auth/logout")
def logout(response: Response, session: str | None = Cookie(default=None)) -> dict:
    auth.logout(session, session_repo)
    response.delete_cookie(auth.SESSION_COOKIE, path="/")
    return {"status": "logged_out"}


@app.get("/auth/me", response_model=UserPublic)
def me(user_id: str = Depends(current_user_id)) -> UserPublic:
    user = user_repo.get(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return UserPublic(id=user.id, email=user.email, name=user.name)


# ── Routes: catalog ───────────────────────────────────────────────────


@app.get("/talks", response_model=list[TalkView])
def list_talks(
    q: str | None = None,
    track: str | None = None,
    level: TalkLevel | None = None,
    format: TalkFormat | None = None,
) -> list[TalkView]:
    """Return talks in start order, narrowed by any given filters."""
    return catalog_service.search_talks(
        catalog, query=q, track_id=track, level=level, format=format
    )


@app.get("/talks/slots", response_model=list[TimeSlot])
def list_time_slots(
    track: str | None = None,
    level: TalkLevel | None = None,
    format: TalkFormat | None = None,
) -> list[TimeSlot]:
    """Return talks grouped by start time for the schedule grid."""
    talks = catalog_service.search_talks(catalog, track_id=track, level=level, format=format)
    return catalog_service.group_by_start_time(talks)


@app.get("/talks/{talk_id}", response_model=TalkDetail)
def get_talk(talk_id: str) -> TalkDetail:
    detail = catalog_service.get_talk(catalog, talk_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Talk not found")
    return detail


@app.get("/tracks", response_model=list[Track])
def list_tracks() -> list[Track]:
    return catalog_service.list_tracks(catalog)


@app.get("/speakers", response_model=list[Speaker])
def list_speakers() -> list[Speaker]:
    return catalog_service.list_speakers(catalog)


@app.get("/speakers/{speaker_id}", response_model=SpeakerWithTalks)
def get_speaker(speaker_id: str) -> SpeakerWithTalks:
    speaker = catalog_service.get_speaker(catalog, speaker_id)
    if speaker is None:
        raise HTTPException(status_code=404, detail="Speaker not found")
    return speaker


# ── Routes: personal schedule ─────────────────────────────────────────


@app.get("/schedule", response_model=UserSchedule)
def get_schedule(user_id: str = Depends(current_user_id)) -> UserSchedule:
    """Return the caller's saved talks with per-talk conflict flags."""
    return schedule_service.get_user_schedule(user_id, catalog, schedule_repo)


@app.get("/schedule/activity", response_model=list[ActivityEntry])
def get_activity(user_id: str = Depends(current_user_id)) -> list[ActivityEntry]:
    return activity_repo.list_for_user(user_id)


@app.post(
    "/schedule/conflicts",
    response_model=ConflictCheckResponse,
    dependencies=[Depends(current_user_id)],
)
def check_conflicts(payload: ConflictCheckRequest) -> ConflictCheckResponse:
    """Check an arbitrary list of talk ids for overlapping times."""
    return schedule_service.check_conflicts(payload.talk_ids, catalog)


@app.get("/schedule/{talk_id}")
def is_in_schedule(talk_id: str, user_id: str = Depends(current_user_id)) -> dict:
    return {"in_schedule": schedule_service.is_in_schedule(user_id, talk_id, schedule_repo)}


@app.post("/schedule/{talk_id}", status_code=201)
def add_to_schedule(talk_id: str, user_id: str = Depends(current_user_id)) -> dict:
    try:
        entry = schedule_service.add_to_schedule(
            user_id, talk_id, catalog, schedule_repo, event_bus
        )
    except TalkNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except AlreadyScheduledError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return {"status": "added", "talk_id": entry.talk_id, "added_at": entry.added_at.isoformat()}


@app.delete("/schedule/{talk_id}")
def remove_from_schedule(talk_id: str, user_id: str = Depends(current_user_id)) -> dict:
    schedule_service.remove_from_schedule(user_id, talk_id, schedule_repo, event_bus)
    return {"status": "removed"}


# ── Routes: assistant ─────────────────────────────────────────────────


@app.post("/ai/chat", response_model=ChatResponse)
def chat(payload: ChatRequest, user_id: str = Depends(current_user_id)) -> ChatResponse:
    """Answer a chat turn using the routed schedule assistant."""
    ctx = ToolContext(catalog=catalog, schedule_repo=schedule_repo, user_id=user_id)
    try:
        return run_pipeline(payload.messages, ctx)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
