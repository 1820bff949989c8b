from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorDatabase
from redis.asyncio import Redis

from ..dependencies import get_mongo_db, get_redis
from ..schemas.user import UserPublic
from ..services import sessions as session_service
from ..services.users import document_to_user, get_user_by_id
from .config import settings
from .security import TokenError, decode_token

http_bearer = HTTPBearer(auto_error=False)


async def get_current_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    redis: Redis = Depends(get_redis),
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="You must be signed in.")

    payload = decode_token(credentials.credentials, expected_type="access")
    session_id = payload["sid"]
    session = await session_service.get_session(redis, session_id)
    if session is None or session.get("status") != "active":
        raise TokenError(detail="Session expired or signed out.")
    if session.get("access_jti") != payload.get("jti"):
        raise TokenError(detail="Token has been replaced.")
    client_ip = request.client.host if request and request.client else None
    user_agent = request.headers.get("user-agent") if request else None
    await session_service.touch_session(redis, session_id, ip=client_ip, user_agent=user_agent)
    return payload


async def get_current_user(
    payload: dict = Depends(get_current_token),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> UserPublic:
    user_id = payload.get("sub")
    if not user_id:
        raise TokenError(detail="Token has no user.")

    doc = await get_user_by_id(db, user_id)
    if not doc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found.")

    return document_to_user(doc)


def require_admin(current_user: UserPublic = Depends(get_current_user)) -> UserPublic:
    admin_email = settings.admin_email.strip()
    if not admin_email or current_user.email != admin_email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required.")
    return current_user
