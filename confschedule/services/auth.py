"""Service for account signup, login and cookie sessions."""

from __future__ import annotations

import logging
import secrets
import time
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext

from confschedule.config import settings
from confschedule.domain.errors import EmailTakenError, InvalidCredentialsError
from confschedule.domain.models import LoginRequest, Session, SignupRequest, User
from confschedule.repos.memory import SessionRepository, UserRepository
from confschedule.utils.logger import elapsed_ms, get_logger, log_action

logger = get_logger(__name__)

SESSION_COOKIE = "session"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_session(
    user_id: str,
    session_repo: SessionRepository,
    now: datetime | None = None,
) -> Session:
    """Issue a new opaque session token for *user_id*."""
    issued = now or datetime.now(timezone.utc)
    session = Session(
        token=secrets.token_urlsafe(32),
        user_id=user_id,
        expires_at=issued + timedelta(hours=settings.session_ttl_hours),
    )
    session_repo.add(session)
    return session


def resolve_session(
    token: str | None,
    session_repo: SessionRepository,
    now: datetime | None = None,
) -> str | None:
    """Return the user id behind *token*, or None if missing or expired."""
    if not token:
        return None
    session = session_repo.get(token)
    if session is None:
        return None
    if session.is_expired(now or datetime.now(timezone.utc)):
        session_repo.delete(token)
        return None
    return session.user_id


def signup(
    req: SignupRequest,
    user_repo: UserRepository,
    session_repo: SessionRepository,
) -> tuple[User, Session]:
    """Create an account and open a session for it.

    Raises ``EmailTakenError`` when the email is already registered.
    """
    started = time.perf_counter()
    if user_repo.get_by_email(req.email) is not None:
        log_action(
            logger,
            "Signup attempted with existing email",
            action="auth.signup",
            result="duplicate_email",
            duration_ms=elapsed_ms(started),
        )
        raise EmailTakenError()

    user = User(email=req.email, name=req.name, password_hash=hash_password(req.password))
    user_repo.add(user)
    session = create_session(user.id, session_repo)

    log_action(
        logger,
        "User signed up",
        action="auth.signup",
        user_id=user.id,
        result="success",
        duration_ms=elapsed_ms(started),
    )
    return user, session


def login(
    req: LoginRequest,
    user_repo: UserRepository,
    session_repo: SessionRepository,
) -> tuple[User, Session]:
    """Check credentials and open a session.

    Unknown email and wrong password both raise ``InvalidCredentialsError``.
    """
    started = time.perf_counter()
    user = user_repo.get_by_email(req.email)
    if user is None:
        log_action(
            logger,
            "Login failed - user not found",
            action="auth.login",
            result="user_not_found",
            duration_ms=elapsed_ms(started),
        )
        raise InvalidCredentialsError()

    if not verify_password(req.password, user.password_hash):
        log_action(
            logger,
            "Login failed - invalid password",
            level=logging.WARNING,
            action="auth.login",
            user_id=user.id,
            result="invalid_password",
            duration_ms=elapsed_ms(started),
        )
        raise InvalidCredentialsError()

    session_repo.purge_expired(datetime.now(timezone.utc))
    session = create_session(user.id, session_repo)
    log_action(
        logger,
        "User logged in",
        action="auth.login",
        user_id=user.id,
        result="success",
        duration_ms=elapsed_ms(started),
    )
    return user, session


def logout(token: str | None, session_repo: SessionRepository) -> None:
    if token:
        session_repo.delete(token)
    log_action(logger, "User logged out", action="auth.logout")
