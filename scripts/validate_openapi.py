from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from hundred_days.app.main import app

REQUIRED_PATHS = [
    "/api/health",
    "/api/auth/login",
    "/api/users/me/password",
    "/api/challenges/",
    "/api/challenges/{challenge_id}/check-ins",
    "/api/check-ins/sync",
    "/api/milestones/{day}",
    "/api/progress",
    "/api/quotes/random",
]


def main() -> int:
    paths = app.openapi().get("paths", {})
    missing = [path for path in REQUIRED_PATHS if path not in paths]
    if missing:
        for path in missing:
            print(f"[error] OpenAPI schema is missing {path}", file=sys.stderr)
        return 1

    print(f"OpenAPI schema has all {len(REQUIRED_PATHS)} required paths")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
