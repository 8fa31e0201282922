"""
Repair Shop Backend — Product Route Handlers
=============================================

What:  /api/products endpoints.
How:   Create and update are multipart forms with an optional
       ``productImage`` file part; the handlers turn the form into a plain
       dict of the fields that were sent and read the file into memory
       before calling ProductService.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.database import get_db_session
from repairshop.routes.uploads import RESPONSES as UPLOAD_RESPONSES
from repairshop.routes.uploads import serve_upload
from repairshop.schemas.common import ErrorResponse, MessageResponse
from repairshop.schemas.product import ProductCreatedResponse, ProductResponse
from repairshop.services.product_service import ImageUpload, product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])

ERRORS = {
    400: {"description": "Validation failed or invalid image", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


def _sent_fields(**form: Optional[str]) -> Dict[str, Any]:
    return {key: value for key, value in form.items() if value is not None}


async def _read_image(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    # A file part without a filename means no file was chosen
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return upload.filename, content


@router.post(
    "/add",
    status_code=201,
    response_model=ProductCreatedResponse,
    responses=ERRORS,
    summary="Add a product, optionally with an image",
)
async def add_product(
    productName: Optional[str] = Form(None),
    model: Optional[str] = Form(None),
    modelNo: Optional[str] = Form(None),
    productImage: Optional[UploadFile] = File(None, description="PNG, JPG or JPEG image"),
    db: AsyncSession = Depends(get_db_session),
) -> ProductCreatedResponse:
    fields = _sent_fields(productName=productName, model=model, modelNo=modelNo)
    return await product_service.create(db, fields, await _read_image(productImage))


@router.get("/all", response_model=List[ProductResponse], summary="List products")
async def list_products(db: AsyncSession = Depends(get_db_session)) -> List[ProductResponse]:
    return await product_service.list_products(db)


router.add_api_route(
    "/uploads/{file_path:path}",
    serve_upload,
    methods=["GET"],
    responses=UPLOAD_RESPONSES,
    summary="Serve an uploaded product image",
)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Get a product",
)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db_session)) -> ProductResponse:
    return await product_service.get_product(db, product_id)


@router.put(
    "/{product_id}",
    response_model=MessageResponse,
    responses={**ERRORS, 404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Update the non-empty product fields and/or the image",
)
async def update_product(
    product_id: int,
    productName: Optional[str] = Form(None),
    model: Optional[str] = Form(None),
    modelNo: Optional[str] = Form(None),
    productImage: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    fields = _sent_fields(productName=productName, model=model, modelNo=modelNo)
    await product_service.update(db, product_id, fields, await _read_image(productImage))
    return MessageResponse(message="Product updated successfully!")


@router.delete("/{product_id}", response_model=MessageResponse, summary="Delete a product")
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    await product_service.delete(db, product_id)
    return MessageResponse(message="Product deleted successfully!")
