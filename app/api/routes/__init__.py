from __future__ import annotations

from app.api.routes.follow import router as follow_router
from app.api.routes.health import router as health_router
from app.api.routes.leaderboard import router as leaderboard_router
from app.api.routes.profile import router as profile_router
from app.api.routes.reviews import router as reviews_router

__all__ = [
    "follow_router",
    "health_router",
    "leaderboard_router",
    "profile_router",
    "reviews_router",
]
