"""API router package."""

from fastapi import APIRouter

from gello.api.v1 import auth, boards, csrf, health, lists, points, shop, tasks, teams, users

router = APIRouter()

# Include all API routers
router.include_router(health.router, tags=["Health"])
router.include_router(csrf.router, tags=["CSRF"])
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(teams.router, prefix="/teams", tags=["Teams"])
router.include_router(boards.router, prefix="/boards", tags=["Boards"])
router.include_router(lists.router, prefix="/lists", tags=["Lists"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(points.router, prefix="/points", tags=["Points"])

# Mounted at the application root, outside the API prefix
shop_router = APIRouter()
shop_router.include_router(shop.router, prefix="/points-shop", tags=["Points Shop"])
