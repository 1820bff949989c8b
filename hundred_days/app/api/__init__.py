from fastapi import APIRouter

from .routes import admin, auth, challenges, checkins, health, milestones, progress, quotes, users

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(challenges.router, prefix="/challenges", tags=["challenges"])
api_router.include_router(checkins.router, tags=["check-ins"])
api_router.include_router(milestones.router, tags=["milestones"])
api_router.include_router(progress.router, tags=["progress"])
api_router.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
