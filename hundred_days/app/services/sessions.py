"""Login sessions stored in Redis.

Each session is a JSON blob under ``auth:session:<id>``; a per-user set keeps
the ids so a user can list and revoke their devices.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from redis.asyncio import Redis

from ..core.config import settings

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "auth:session:"
USER_SESSIONS_PREFIX = "auth:user-sessions:"
REFRESH_PREFIX = "auth:refresh:"


def _session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def _user_sessions_key(user_id: str) -> str:
    return f"{USER_SESSIONS_PREFIX}{user_id}"


def refresh_key(jti: str) -> str:
    return f"{REFRESH_PREFIX}{jti}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def session_ttl() -> int:
    """Sessions live as long as the longest-lived token, at least an hour."""
    return max(
        settings.refresh_token_expire_minutes * 60,
        settings.access_token_expire_minutes * 60,
        3600,
    )


async def _save(redis: Redis, session: dict[str, Any]) -> dict[str, Any]:
    ttl = session_ttl()
    user_key = _user_sessions_key(session["user_id"])
    await redis.set(_session_key(session["session_id"]), json.dumps(session), ex=ttl)
    await redis.sadd(user_key, session["session_id"])
    await redis.expire(user_key, ttl)
    return session


async def create_session(
    redis: Redis,
    *,
    session_id: str,
    user_id: str,
    access_jti: str,
    refresh_jti: str,
    user_agent: str | None = None,
    ip: str | None = None,
) -> dict[str, Any]:
    now = _now_iso()
    session = {
        "session_id": session_id,
        "user_id": user_id,
        "status": "active",
        "created_at": now,
        "updated_at": now,
        "last_seen": now,
        "access_jti": access_jti,
        "refresh_jti": refresh_jti,
        "ip": ip,
        "user_agent": user_agent,
    }
    await redis.set(refresh_key(refresh_jti), user_id, ex=settings.refresh_token_expire_minutes * 60)
    logger.info(f"Session {session_id} opened for user {user_id}")
    return await _save(redis, session)


async def get_session(redis: Redis, session_id: str) -> dict[str, Any] | None:
    raw = await redis.get(_session_key(session_id))
    if raw is None:
        return None
    try:
        session = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Discarding unreadable session {session_id}")
        return None
    return session if isinstance(session, dict) else None


async def update_session(redis: Redis, session_id: str, **fields: Any) -> dict[str, Any] | None:
    session = await get_session(redis, session_id)
    if session is None:
        return None
    session.update(fields)
    session["updated_at"] = _now_iso()
    return await _save(redis, session)


async def rotate_tokens(redis: Redis, session: dict[str, Any], access_jti: str, refresh_jti: str) -> dict[str, Any] | None:
    """Swap in a new token pair, invalidating the previous refresh token."""
    old_refresh = session.get("refresh_jti")
    if old_refresh:
        await redis.delete(refresh_key(old_refresh))
    await redis.set(refresh_key(refresh_jti), session["user_id"], ex=settings.refresh_token_expire_minutes * 60)
    return await update_session(redis, session["session_id"], access_jti=access_jti, refresh_jti=refresh_jti)


async def touch_session(
    redis: Redis,
    session_id: str,
    *,
    ip: str | None = None,
    user_agent: str | None = None,
) -> dict[str, Any] | None:
    updates: dict[str, Any] = {"last_seen": _now_iso()}
    if ip is not None:
        updates["ip"] = ip
    if user_agent is not None:
        updates["user_agent"] = user_agent
    return await update_session(redis, session_id, **updates)


async def revoke_session(
    redis: Redis,
    session_id: str,
    *,
    reason: str | None = None,
) -> dict[str, Any] | None:
    session = await get_session(redis, session_id)
    if session is None:
        return None
    refresh_jti = session.get("refresh_jti")
    if refresh_jti:
        await redis.delete(refresh_key(refresh_jti))
    session["status"] = "revoked"
    session["revoked_at"] = _now_iso()
    if reason:
        session["revoked_reason"] = reason
    logger.info(f"Session {session_id} revoked ({reason or 'no reason'})")
    return await _save(redis, session)


async def list_sessions(redis: Redis, user_id: str) -> list[dict[str, Any]]:
    key = _user_sessions_key(user_id)
    sessions: list[dict[str, Any]] = []
    for session_id in await redis.smembers(key):
        session = await get_session(redis, session_id)
        if session is None:
            # expired; drop the dangling id
            await redis.srem(key, session_id)
            continue
        sessions.append(session)
    return sorted(sessions, key=lambda s: s.get("last_seen", ""), reverse=True)


async def revoke_other_sessions(redis: Redis, user_id: str, keep_session_id: str, *, reason: str) -> int:
    """Revoke every active session of ``user_id`` except ``keep_session_id``."""
    revoked = 0
    for session in await list_sessions(redis, user_id):
        if session["session_id"] == keep_session_id or session.get("status") != "active":
            continue
        await revoke_session(redis, session["session_id"], reason=reason)
        revoked += 1
    return revoked
