"""
Repair Shop Backend — Product Service
======================================

What:  Business logic for /api/products: create with an optional image,
       partial-by-truthiness update, delete and reads.
How:   Form fields are checked with the product rule sets. An uploaded image
       is validated and written by FileService before the row write; if the
       row write or its commit fails the new file is removed again.
Who:   Called by repairshop.routes.products.

Update semantics:
    Only non-empty fields are written, plus the new image path when a file
    was uploaded. An empty string leaves the column unchanged. A request
    with nothing to write is rejected with "No valid fields provided for
    update".
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.exceptions import DatabaseError, NotFoundError, RepairShopError, ValidationError
from repairshop.models.product import Product
from repairshop.schemas.product import ProductCreatedResponse, ProductResponse
from repairshop.services.file_service import file_service
from repairshop.validation.rulesets import PRODUCT_CREATE_RULES, PRODUCT_UPDATE_RULES

logger = logging.getLogger(__name__)

# Form field → model attribute
PRODUCT_FIELDS = {
    "productName": "product_name",
    "model": "model",
    "modelNo": "model_no",
}

# (original filename, bytes)
ImageUpload = Tuple[str, bytes]


def to_response(product: Product) -> ProductResponse:
    return ProductResponse(
        product_id=product.id,
        product_name=product.product_name,
        model=product.model,
        model_no=product.model_no,
        product_image=product.product_image,
    )


class ProductService:
    """Product operations; writes commit before returning, like the other services."""

    async def create(
        self,
        db: AsyncSession,
        fields: Mapping[str, Any],
        image: Optional[ImageUpload] = None,
    ) -> ProductCreatedResponse:
        """
        Validate, store the image (if any), insert the row.

        Raises:
            ValidationError:  Field rules or image checks failed
            FileStorageError: The image could not be written
            DatabaseError:    Insert or commit failed; the stored image is removed
        """
        PRODUCT_CREATE_RULES.enforce(fields)

        image_path: Optional[str] = None
        if image is not None:
            image_path = await file_service.validate_and_store(*image)

        try:
            product = Product(
                product_name=fields["productName"],
                model=fields["model"],
                model_no=fields["modelNo"],
                product_image=image_path,
            )
            db.add(product)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            if image_path:
                await file_service.cleanup_file(image_path)
            logger.error("Database error creating product: %s", str(e))
            raise DatabaseError(context={"operation": "create_product"})

        logger.info("Product %s created (image=%s)", product.id, image_path or "none")
        return ProductCreatedResponse(productId=product.id)

    async def update(
        self,
        db: AsyncSession,
        product_id: int,
        fields: Mapping[str, Any],
        image: Optional[ImageUpload] = None,
    ) -> None:
        """
        Write the non-empty fields and the new image path, if any.

        A missing product is reported as not found before anything else is
        looked at, so an empty form on an unknown id still gives 404.
        """
        image_path: Optional[str] = None
        try:
            result = await db.execute(select(Product.id).where(Product.id == product_id))
            if result.first() is None:
                raise NotFoundError(resource="Product", resource_id=str(product_id))

            PRODUCT_UPDATE_RULES.enforce(fields)
            values: Dict[str, Any] = {
                attribute: fields[key]
                for key, attribute in PRODUCT_FIELDS.items()
                if fields.get(key)
            }
            if not values and image is None:
                raise ValidationError(message="No valid fields provided for update")

            if image is not None:
                image_path = await file_service.validate_and_store(*image)
                values["product_image"] = image_path

            await db.execute(update(Product).where(Product.id == product_id).values(**values))
            await db.commit()
            logger.info("Product %s updated: %s", product_id, ", ".join(sorted(values)))

        except RepairShopError:
            raise
        except SQLAlchemyError as e:
            if image_path:
                await file_service.cleanup_file(image_path)
            logger.error("Database error updating product %s: %s", product_id, str(e))
            raise DatabaseError(context={"operation": "update_product", "product_id": product_id})

    async def delete(self, db: AsyncSession, product_id: int) -> None:
        try:
            await db.execute(delete(Product).where(Product.id == product_id))
            await db.commit()
            logger.info("Product %s deleted", product_id)
        except SQLAlchemyError as e:
            logger.error("Database error deleting product %s: %s", product_id, str(e))
            raise DatabaseError(context={"operation": "delete_product", "product_id": product_id})

    async def list_products(self, db: AsyncSession) -> List[ProductResponse]:
        try:
            result = await db.execute(select(Product).order_by(Product.id))
        except SQLAlchemyError as e:
            logger.error("Database error listing products: %s", str(e))
            raise DatabaseError(context={"operation": "list_products"})
        return [to_response(product) for product in result.scalars().all()]

    async def get_product(self, db: AsyncSession, product_id: int) -> ProductResponse:
        try:
            result = await db.execute(select(Product).where(Product.id == product_id))
            product = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError(context={"operation": "get_product", "product_id": product_id})
        if product is None:
            raise NotFoundError(resource="Product", resource_id=str(product_id))
        return to_response(product)


product_service = ProductService()
