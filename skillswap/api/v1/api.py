from fastapi import APIRouter
from ...core.config import get_settings
from .endpoints import users, skills, swaps, notifications, ratings, admin

router = APIRouter(prefix=get_settings().api_v1_prefix)

# Include all endpoint routers
router.include_router(users.router, prefix="/users")
router.include_router(skills.router, prefix="/skills")
router.include_router(swaps.router, prefix="/swaps")
router.include_router(notifications.router, prefix="/notifications")
router.include_router(ratings.router, prefix="/ratings")
router.include_router(admin.router, prefix="/admin")
router.include_router(admin.messages_router, prefix="/messages")
