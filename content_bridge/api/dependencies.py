"""
Shared FastAPI dependencies — injected into route handlers.
"""

from fastapi import Depends, Request

from content_bridge.config import Settings, get_settings
from content_bridge.mappers.evaluator import ExpressionEvaluator, get_evaluator
from content_bridge.services.ingest_service import IngestService
from content_bridge.services.source_client import SourceClient


def get_source_client(request: Request) -> SourceClient:
    """Provide a SourceClient backed by the shared httpx client."""
    return SourceClient(http_client=request.app.state.http_client)


def get_expression_evaluator() -> ExpressionEvaluator:
    return get_evaluator()


def get_ingest_service(
    source_client: SourceClient = Depends(get_source_client),
    evaluator: ExpressionEvaluator = Depends(get_expression_evaluator),
    settings: Settings = Depends(get_settings),
) -> IngestService:
    """Provide an IngestService with its dependencies wired up."""
    return IngestService(
        source_client=source_client,
        evaluator=evaluator,
        default_timeout_ms=settings.default_timeout_ms,
    )
