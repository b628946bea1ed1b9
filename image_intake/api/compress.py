"""
Image compression API route.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.datastructures import FormData, UploadFile
from dependency_injector.wiring import Provide, inject

from ..containers import Container
from ..exceptions import MissingFileError
from ..schemas.response import CompressResponse, ErrorResponse
from ..services.compressor import ImageCompressor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["compress"])

IMAGE_FIELD = "image"
QUALITY_FIELD = "quality"


async def _read_form(request: Request) -> Optional[FormData]:
    """Parse the multipart body, logging the file fields it carries.

    A body that cannot be parsed is logged and reported as no form at all.
    """
    try:
        form = await request.form()
    except (HTTPException, MultiPartException) as e:
        logger.warning(f"MultipartForm parse error: {getattr(e, 'detail', e)}")
        return None

    counts = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            counts[key] = counts.get(key, 0) + 1
    for key, count in counts.items():
        logger.info(f"Got field: {key} with {count} file(s)")
    return form


@router.post(
    "/compress",
    response_model=CompressResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@inject
async def compress(
    request: Request,
    compressor: ImageCompressor = Depends(Provide[Container.compressor]),
):
    """
    Resize an uploaded image to 800px wide and return it as base64 JPEG.

    Expects multipart/form-data with an ``image`` file and an optional
    ``quality`` (1-100) field.
    """
    form = await _read_form(request)
    if form is None:
        raise MissingFileError(IMAGE_FIELD)

    upload = form.get(IMAGE_FIELD)
    if not isinstance(upload, UploadFile):
        raise MissingFileError(IMAGE_FIELD)

    return await compressor.compress(
        upload,
        raw_quality=form.get(QUALITY_FIELD),
        is_disconnected=request.is_disconnected,
    )
