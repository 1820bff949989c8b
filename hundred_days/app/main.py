from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .core.config import settings
from .db import init
from .db.mongo import MongoConnectionManager
from .db.redis import RedisConnectionManager

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # open connections up front and make sure the unique indexes exist
    try:
        MongoConnectionManager.get_client()
        RedisConnectionManager.get_client()
        await init.ensure_indexes(MongoConnectionManager.get_database())
        logger.info("Database and Redis connections ready")
    except Exception as exc:  # pragma: no cover - startup connection failure
        logger.warning("Connection setup failed at startup: %s", exc)
    yield
    await RedisConnectionManager.close()
    await MongoConnectionManager.close()


app = FastAPI(title=settings.project_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_prefix)
