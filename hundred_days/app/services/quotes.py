"""Motivational quotes (external quote APIs with a Redis-backed cache)."""
from __future__ import annotations

import json
import logging
import random
import uuid
from typing import Any

import httpx
from redis.asyncio import Redis

from ..core.config import settings
from ..schemas.quotes import QuoteOut

logger = logging.getLogger(__name__)

QUOTE_CACHE_KEY = "quotes:cache"
QUOTE_CACHE_STAMP_KEY = "quotes:cache:fresh"

_QUOTE_NAMESPACE = uuid.UUID("6f1c1b7e-5a57-4a43-9d8e-100da75c0de5")


def make_quote(text: str, author: str) -> QuoteOut:
    quote_id = uuid.uuid5(_QUOTE_NAMESPACE, f"{text}|{author}").hex
    return QuoteOut(id=quote_id, text=text, author=author)


STATIC_QUOTES: tuple[QuoteOut, ...] = tuple(
    make_quote(text, author)
    for text, author in (
        ("The secret of getting ahead is getting started.", "Mark Twain"),
        ("Small daily improvements over time lead to stunning results.", "Robin Sharma"),
        ("Consistency is the key to achieving and maintaining momentum.", "Brian Tracy"),
        ("Success is the sum of small efforts, repeated day in and day out.", "Robert Collier"),
        ("The only way to do great work is to love what you do.", "Steve Jobs"),
        ("Don't count the days, make the days count.", "Muhammad Ali"),
        ("Habits are the compound interest of self-improvement.", "James Clear"),
        ("Every day may not be good, but there's something good in every day.", "Alice Morse Earle"),
        ("It always seems impossible until it's done.", "Nelson Mandela"),
        ("Quality is not an act, it is a habit.", "Aristotle"),
        ("Start where you are. Use what you have. Do what you can.", "Arthur Ashe"),
        ("Don't watch the clock; do what it does. Keep going.", "Sam Levenson"),
        ("The journey of a thousand miles begins with one step.", "Lao Tzu"),
        ("We may encounter many defeats but we must not be defeated.", "Maya Angelou"),
        ("Comfort is the enemy of achievement.", "Farrah Gray"),
    )
)

_STATIC_BY_ID = {quote.id: quote for quote in STATIC_QUOTES}


def get_quote_by_id(quote_id: str) -> QuoteOut | None:
    return _STATIC_BY_ID.get(quote_id)


def pick_quote(quotes: list[QuoteOut], exclude_id: str | None = None, rng: random.Random | None = None) -> QuoteOut:
    rng = rng or random
    candidates = [q for q in quotes if q.id != exclude_id] or quotes or list(STATIC_QUOTES)
    return rng.choice(candidates)


def parse_primary_response(data: Any) -> QuoteOut:
    # quotable: {"content": ..., "author": ...}
    if isinstance(data, list):
        data = data[0] if data else {}
    return make_quote(data["content"], data["author"])


def parse_fallback_response(data: Any) -> QuoteOut:
    # zenquotes: [{"q": ..., "a": ..., "h": ...}]
    item = data[0] if isinstance(data, list) and data else data
    return make_quote(item["q"], item["a"])


async def _fetch(client: httpx.AsyncClient, url: str) -> Any:
    response = await client.get(url)
    response.raise_for_status()
    return response.json()


async def fetch_remote_quote(client: httpx.AsyncClient) -> QuoteOut:
    try:
        return parse_primary_response(await _fetch(client, settings.quote_primary_url))
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
        logger.warning(f"Primary quote API failed: {exc}")
    return parse_fallback_response(await _fetch(client, settings.quote_fallback_url))


async def read_cache(redis: Redis | None) -> list[QuoteOut]:
    if redis is None:
        return []
    try:
        raw = await redis.get(QUOTE_CACHE_KEY)
    except Exception as e:
        logger.warning(f"Quote cache read failed: {e}")
        return []
    if not raw:
        return []
    try:
        return [QuoteOut(**item) for item in json.loads(raw)]
    except (json.JSONDecodeError, TypeError, ValueError):
        return []


async def is_cache_fresh(redis: Redis | None) -> bool:
    if redis is None:
        return False
    try:
        return bool(await redis.exists(QUOTE_CACHE_STAMP_KEY))
    except Exception as e:
        logger.warning(f"Quote cache check failed: {e}")
        return False


async def add_to_cache(redis: Redis | None, quotes: list[QuoteOut], new_quotes: list[QuoteOut]) -> list[QuoteOut]:
    """Append unseen quotes, keep the newest ``quote_cache_max_size`` and mark the cache fresh."""
    merged = list(quotes)
    for quote in new_quotes:
        if not any(q.text == quote.text and q.author == quote.author for q in merged):
            merged.append(quote)
    merged = merged[-settings.quote_cache_max_size :]
    if redis is None:
        return merged
    try:
        await redis.set(QUOTE_CACHE_KEY, json.dumps([q.model_dump() for q in merged]))
        await redis.set(QUOTE_CACHE_STAMP_KEY, "1", ex=settings.quote_cache_ttl_seconds)
    except Exception as e:
        logger.warning(f"Quote cache write failed: {e}")
    return merged


async def get_random_quote(
    redis: Redis | None,
    exclude_id: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> QuoteOut:
    cached = await read_cache(redis)
    if cached and await is_cache_fresh(redis):
        return pick_quote(cached, exclude_id)

    try:
        if client is not None:
            quote = await fetch_remote_quote(client)
        else:
            async with httpx.AsyncClient(timeout=settings.quote_request_timeout) as own_client:
                quote = await fetch_remote_quote(own_client)
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
        logger.warning(f"Quote APIs unavailable, serving a built-in quote: {exc}")
        await add_to_cache(redis, cached, list(STATIC_QUOTES))
        return pick_quote(list(STATIC_QUOTES), exclude_id)

    await add_to_cache(redis, cached, [quote])
    if quote.id == exclude_id:
        return pick_quote(cached + [quote], exclude_id)
    return quote
