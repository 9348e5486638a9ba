"""
Mapping preview endpoint — resolve a mapping against one sample record.

Meant for authoring mappings: the header is returned as resolved, without
the required-field check that ingestion applies.
"""

from fastapi import APIRouter, Depends

from content_bridge.api.dependencies import get_expression_evaluator
from content_bridge.mappers.evaluator import ExpressionEvaluator
from content_bridge.mappers.resolver import build_front_matter, resolve_content
from content_bridge.schemas.ingest_schema import MappingPreviewRequest, MappingPreviewResponse
from content_bridge.utils.helpers import MISSING

router = APIRouter(prefix="/mapping", tags=["Mapping"])


@router.post(
    "/preview",
    response_model=MappingPreviewResponse,
    response_model_by_alias=True,
    summary="Preview a mapping against a sample record",
)
async def preview_mapping(
    req: MappingPreviewRequest,
    evaluator: ExpressionEvaluator = Depends(get_expression_evaluator),
) -> MappingPreviewResponse:
    source_path = None
    if isinstance(req.source_path, str):
        value = evaluator.evaluate(req.record, req.source_path)
        source_path = None if value is MISSING else value

    return MappingPreviewResponse(
        header=build_front_matter(req.front_matter, req.record, evaluator),
        content=resolve_content(req.content, req.record, evaluator),
        source_path=source_path,
    )
