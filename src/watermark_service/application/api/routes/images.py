"""
Image Routes

Thin HTTP adapter over ImageOrchestrator:

    GET    /images/{image_id}?weight=&dimensions=   watermarked rendition
    DELETE /images/{image_id}/cache                 drop every rendition
    POST   /images/warmup                           precompute in background

Domain exceptions are not caught here; the handlers registered in
``application.app`` turn them into JSON error responses.
"""

from typing import Annotated

from fastapi import APIRouter, Path, Query, Response, status

from watermark_service.application.api.dependencies import OrchestratorDep
from watermark_service.application.api.models.images import (
    IMAGE_ID_PATTERN,
    InvalidateResponse,
    WarmupRequest,
    WarmupResponse,
)
from watermark_service.config.constants import CACHE_CONTROL_PUBLIC, HEADER_CACHE_KEY
from watermark_service.imaging.cache_key import build_cache_key
from watermark_service.imaging.models import WatermarkParams
from watermark_service.imaging.processors.watermark import detect_content_type

router = APIRouter(prefix="/images", tags=["Images"])

ImageIdPath = Annotated[
    str, Path(min_length=1, pattern=IMAGE_ID_PATTERN, description="Original image identifier")
]


@router.post(
    "/warmup",
    response_model=WarmupResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def warmup_images(body: WarmupRequest, orchestrator: OrchestratorDep):
    """
    Precompute renditions in the background.

    Returns once every item is scheduled. Per-item failures only show up
    in the logs.
    """
    orchestrator.warmup([item.to_process_request() for item in body.items])
    return WarmupResponse(dispatched=len(body.items))


@router.get(
    "/{image_id}",
    response_class=Response,
    responses={200: {"content": {"image/jpeg": {}, "image/png": {}}}},
)
async def get_image(
    image_id: ImageIdPath,
    orchestrator: OrchestratorDep,
    weight: Annotated[float, Query(ge=0, description="Weight in kilograms")],
    dimensions: Annotated[str, Query(min_length=1, description="Dimensions, e.g. 30x20x15")],
):
    """Return the watermarked image, computing and caching it on a miss."""
    params = WatermarkParams(weight=weight, dimensions=dimensions)
    data = await orchestrator.process(image_id, params)

    return Response(
        content=data,
        media_type=detect_content_type(data),
        headers={
            "Cache-Control": CACHE_CONTROL_PUBLIC,
            HEADER_CACHE_KEY: build_cache_key(image_id, params),
        },
    )


@router.delete("/{image_id}/cache", response_model=InvalidateResponse)
async def invalidate_image(image_id: ImageIdPath, orchestrator: OrchestratorDep):
    """Remove every cached rendition of one image."""
    deleted = await orchestrator.invalidate(image_id)
    return InvalidateResponse(image_id=image_id, deleted=deleted)
