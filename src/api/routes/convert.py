"""
Convert Routes
==============

FastAPI route for HTML to image conversion.
"""

from fastapi import APIRouter, Depends, Response

from src.api.dependencies import get_converter
from src.core.rendering.converter import HTMLImageConverter
from src.models.schemas import ConvertRequest, ErrorResponse

router = APIRouter(tags=["Conversion"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.post(
    "/convert",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}, "image/jpeg": {}}, "description": "Rendered image"},
        400: {"model": ErrorResponse},
        408: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def convert_html(
    payload: ConvertRequest,
    converter: HTMLImageConverter = Depends(get_converter),
) -> Response:
    """
    Render HTML to a PNG or JPEG image.

    Returns the encoded image as the response body. Failures are raised as
    ConversionError and rendered by the application's exception handler.
    """
    result = await converter.convert(payload)

    return Response(
        content=result.data,
        media_type=result.content_type,
        headers={
            "Content-Length": str(result.size),
            **NO_CACHE_HEADERS,
        },
    )
