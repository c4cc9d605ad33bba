from fastapi import APIRouter

from hotelhub.api.endpoints.health import router as health_router
from hotelhub.api.endpoints.accounts import router as accounts_router
from hotelhub.api.endpoints.me import router as me_router
from hotelhub.api.endpoints.hotels import router as hotels_router
from hotelhub.api.endpoints.admin_hotels import router as admin_hotels_router


router = APIRouter(prefix="/api")
router.include_router(health_router, tags=["health"])
router.include_router(accounts_router, tags=["accounts"])
router.include_router(me_router, tags=["me"])
router.include_router(hotels_router, tags=["hotels"])
router.include_router(admin_hotels_router, tags=["admin"])
