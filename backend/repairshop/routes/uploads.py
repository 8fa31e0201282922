"""
Repair Shop Backend — Uploaded Image Serving
=============================================

What:  GET /uploads/{path} returns a stored product image, the URL form
       that ``products.product_image`` holds. The products router exposes
       the same handler under /api/products/uploads/{path}.

Security:
    - The path is resolved against the upload root and rejected if it
      leaves it (e.g. ../../etc/passwd)
    - Only regular files are served
"""

import logging

from fastapi import APIRouter
from fastapi.responses import FileResponse

from repairshop.exceptions import NotFoundError
from repairshop.schemas.common import ErrorResponse
from repairshop.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])

RESPONSES = {
    200: {"description": "Image file"},
    400: {"description": "Path escapes the upload directory", "model": ErrorResponse},
    404: {"description": "File not found", "model": ErrorResponse},
}


@router.get("/uploads/{file_path:path}", responses=RESPONSES, summary="Serve an uploaded image")
async def serve_upload(file_path: str) -> FileResponse:
    full_path = file_service.resolve(file_path)
    if not full_path.is_file():
        raise NotFoundError(resource="File", resource_id=file_path)

    # media type is guessed from the extension
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
