"""
Ingest endpoint — run every configured source and return the documents.
"""

from fastapi import APIRouter, Depends

from content_bridge.api.dependencies import get_ingest_service
from content_bridge.config import Settings, get_settings, load_bridge_config
from content_bridge.schemas.ingest_schema import IngestRequest, IngestResponse
from content_bridge.services.ingest_service import IngestService, InMemorySink

router = APIRouter(prefix="/ingest", tags=["Ingest"])


@router.post(
    "/",
    response_model=IngestResponse,
    summary="Fetch every source and map its records to content documents",
    description=(
        "Pages through each configured source API, maps every record through "
        "its front matter / content / sourcePath mapping and returns the "
        "resulting documents. Without an inline config the bridge config "
        "file from the settings is used."
    ),
)
async def ingest(
    req: IngestRequest,
    service: IngestService = Depends(get_ingest_service),
    settings: Settings = Depends(get_settings),
) -> IngestResponse:
    config = req.config
    if config is None:
        config = load_bridge_config(settings.bridge_config_path, settings.bridge_config_key)

    sink = InMemorySink()
    report = await service.ingest_all(config, sink, fail_fast=req.fail_fast)

    return IngestResponse(
        status="partial" if report.failed else "ok",
        total_count=report.total_count,
        sources=report.sources,
        documents=sink.documents,
    )
