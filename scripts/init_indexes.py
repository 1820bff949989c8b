"""Create the MongoDB indexes the check-in ledger relies on.

The API also does this on startup; run it by hand before the first deploy or
after restoring a dump.
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from hundred_days.app.core.config import settings
from hundred_days.app.db.init import ensure_indexes
from hundred_days.app.db.mongo import MongoConnectionManager


async def main() -> None:
    db = MongoConnectionManager.get_database()
    try:
        await ensure_indexes(db)
        print(f"Indexes ready on {settings.mongodb_db}")
    finally:
        await MongoConnectionManager.close()


if __name__ == "__main__":
    asyncio.run(main())
