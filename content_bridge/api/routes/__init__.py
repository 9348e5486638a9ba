"""
Route aggregation for API v1.
"""

from fastapi import APIRouter

from content_bridge.api.routes.ingest import router as ingest_router
from content_bridge.api.routes.mapping import router as mapping_router

router = APIRouter()
router.include_router(ingest_router)
router.include_router(mapping_router)
