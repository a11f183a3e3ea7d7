from fastapi import APIRouter

from platecost.api.cost import router as cost_router
from platecost.api.health import router as health_router
from platecost.api.location import router as location_router
from platecost.api.providers import router as providers_router

router = APIRouter(prefix="/api")
router.include_router(health_router)
router.include_router(cost_router)
router.include_router(providers_router)
router.include_router(location_router)
