from fastapi import APIRouter
from . import root
from . import auth
from . import user
from . import profile
from . import category
from . import skill
from . import swap
from . import rating
from . import message
from . import notification
from . import admin
router = APIRouter()

def init_router_root(app):
    app.include_router(root.router, tags=["Main"])

# Include Routers
router.include_router(auth.router, prefix="/auth", tags=["Auth"])
router.include_router(user.router, prefix="/users", tags=["Users"])
router.include_router(profile.router, prefix="/profile", tags=["Profiles"])
router.include_router(category.router, prefix="/categories", tags=["Categories"])
router.include_router(skill.router, prefix="/skills", tags=["Skills"])
router.include_router(swap.router, prefix="/swaps", tags=["Swaps"])
router.include_router(rating.router, prefix="/ratings", tags=["Ratings"])
router.include_router(message.router, prefix="/messages", tags=["Messages"])
router.include_router(notification.router, prefix="/notifications", tags=["Notifications"])
router.include_router(admin.router, prefix="/admin", tags=["Admin"])


def get_router():
    return router
