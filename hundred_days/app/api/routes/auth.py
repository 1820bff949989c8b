from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from motor.motor_asyncio import AsyncIOMotorDatabase
from redis.asyncio import Redis

from ...core.auth import get_current_token, get_current_user, http_bearer
from ...core.config import settings
from ...core.security import TokenError, decode_token, issue_session_tokens
from ...dependencies import get_mongo_db, get_redis
from ...schemas import (
    LoginResponse,
    LogoutResponse,
    RefreshResponse,
    SessionInfo,
    SignupResponse,
    UserPublic,
)
from ...schemas.user import UserCreate, UserLogin
from ...services import sessions as session_service
from ...services import users as user_service

REFRESH_COOKIE = "refresh_token"

router = APIRouter()


def _client_info(request: Request) -> tuple[str | None, str | None]:
    client_ip = request.client.host if request.client else None
    return client_ip, request.headers.get("user-agent")


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=token,
        httponly=True,
        secure=False,
        samesite="strict",
        max_age=settings.refresh_token_expire_minutes * 60,
        path=f"{settings.api_prefix}/auth",
    )


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(payload: UserCreate, db: AsyncIOMotorDatabase = Depends(get_mongo_db)) -> SignupResponse:
    user = await user_service.create_user(db, payload)
    return SignupResponse(user=user)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: UserLogin,
    request: Request,
    response: Response,
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
    redis: Redis = Depends(get_redis),
) -> LoginResponse:
    user_doc = await user_service.authenticate_user(db, payload)
    user = user_service.document_to_user(user_doc)

    tokens = issue_session_tokens(user.id)

    client_ip, user_agent = _client_info(request)
    await session_service.create_session(
        redis,
        session_id=tokens.session_id,
        user_id=user.id,
        access_jti=tokens.access_jti,
        refresh_jti=tokens.refresh_jti,
        ip=client_ip,
        user_agent=user_agent,
    )
    _set_refresh_cookie(response, tokens.refresh_token)
    return LoginResponse(access_token=tokens.access_token, user=user)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    request: Request,
    response: Response,
    refresh_token: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    redis: Redis = Depends(get_redis),
) -> RefreshResponse:
    if not refresh_token:
        raise TokenError(detail="Missing refresh token.")

    payload = decode_token(refresh_token, expected_type="refresh")
    session_id = payload["sid"]

    jti = payload.get("jti")
    if not jti or not await redis.exists(session_service.refresh_key(jti)):
        raise TokenError(detail="Refresh token expired or revoked.")

    session = await session_service.get_session(redis, session_id)
    if session is None or session.get("status") != "active":
        raise TokenError(detail="Session expired or signed out.")
    if session.get("refresh_jti") != jti:
        raise TokenError(detail="Token has been replaced. Please sign in again.")

    tokens = issue_session_tokens(payload["sub"], session_id)
    await session_service.rotate_tokens(redis, session, tokens.access_jti, tokens.refresh_jti)

    client_ip, user_agent = _client_info(request)
    await session_service.touch_session(redis, session_id, ip=client_ip, user_agent=user_agent)

    _set_refresh_cookie(response, tokens.refresh_token)
    return RefreshResponse(access_token=tokens.access_token)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    request: Request,
    response: Response,
    refresh_token: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    redis: Redis = Depends(get_redis),
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
) -> LogoutResponse:
    session_id: str | None = None
    for token, expected_type in ((refresh_token, "refresh"), (credentials.credentials if credentials else None, "access")):
        if session_id or not token:
            continue
        try:
            session_id = decode_token(token, expected_type=expected_type)["sid"]
        except TokenError:
            continue

    response.delete_cookie(key=REFRESH_COOKIE, path=f"{settings.api_prefix}/auth")
    if session_id:
        client_ip, user_agent = _client_info(request)
        await session_service.touch_session(redis, session_id, ip=client_ip, user_agent=user_agent)
        await session_service.revoke_session(redis, session_id, reason="logout")
    return LogoutResponse()


@router.get("/sessions", response_model=list[SessionInfo])
async def list_sessions(
    token_payload: dict = Depends(get_current_token),
    redis: Redis = Depends(get_redis),
) -> list[SessionInfo]:
    current_session_id = token_payload["sid"]
    sessions = await session_service.list_sessions(redis, token_payload["sub"])
    return [
        SessionInfo(
            session_id=session["session_id"],
            status=session.get("status", "unknown"),
            created_at=session.get("created_at"),
            last_seen=session.get("last_seen"),
            ip=session.get("ip"),
            user_agent=session.get("user_agent"),
            is_current=session["session_id"] == current_session_id,
        )
        for session in sessions
    ]


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_session(
    session_id: str,
    token_payload: dict = Depends(get_current_token),
    redis: Redis = Depends(get_redis),
) -> Response:
    session = await session_service.get_session(redis, session_id)
    if session is None or session.get("user_id") != token_payload["sub"]:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found.")
    await session_service.revoke_session(redis, session_id, reason="user_revoked")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserPublic)
async def me(current_user: UserPublic = Depends(get_current_user)) -> UserPublic:
    return current_user
