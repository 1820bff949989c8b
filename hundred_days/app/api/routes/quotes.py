from fastapi import APIRouter, Depends
from redis.asyncio import Redis

from ...dependencies import get_redis
from ...schemas import QuoteOut
from ...services.quotes import get_random_quote

router = APIRouter()


@router.get("/random", response_model=QuoteOut)
async def random_quote(exclude_id: str | None = None, redis: Redis = Depends(get_redis)) -> QuoteOut:
    return await get_random_quote(redis, exclude_id=exclude_id)
