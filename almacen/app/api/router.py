from fastapi import APIRouter

from almacen.app.api.endpoints.alerts import router as alerts_router
from almacen.app.api.endpoints.antibiograms import router as antibiograms_router
from almacen.app.api.endpoints.antibiotics import router as antibiotics_router
from almacen.app.api.endpoints.dispatches import router as dispatches_router
from almacen.app.api.endpoints.health import api_router as diagnostics_router

router = APIRouter()
router.include_router(antibiograms_router, tags=["antibiogramas"])
router.include_router(antibiotics_router, tags=["antibioticos"])
router.include_router(dispatches_router, tags=["salidas"])
router.include_router(alerts_router, tags=["alertas"])
router.include_router(diagnostics_router, tags=["diagnostics"])
