"""
Repair Shop Backend — Product Service Tests
============================================

What:  Tests for product create/update/delete/read, including the image
       path written to the row and cleanup when the insert or its commit fails.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from repairshop.exceptions import DatabaseError, NotFoundError, ValidationError
from repairshop.services.product_service import ProductService

PRODUCT = {"productName": "Blender", "model": "BX", "modelNo": "BX200"}


class TestProductCreate:
    def setup_method(self):
        self.service = ProductService()

    @pytest.mark.asyncio
    async def test_create_without_image(self, db_session):
        result = await self.service.create(db_session, PRODUCT)

        assert result.message == "Product added successfully!"
        product = await self.service.get_product(db_session, result.productId)
        assert product.product_name == "Blender"
        assert product.product_image is None

    @pytest.mark.asyncio
    async def test_create_with_image_stores_public_path(self, db_session):
        with patch("repairshop.services.product_service.file_service") as mock_files:
            mock_files.validate_and_store = AsyncMock(return_value="/uploads/productImage_abc.png")
            result = await self.service.create(db_session, PRODUCT, ("front.png", b"img"))

        mock_files.validate_and_store.assert_awaited_once_with("front.png", b"img")
        product = await self.service.get_product(db_session, result.productId)
        assert product.product_image == "/uploads/productImage_abc.png"

    @pytest.mark.asyncio
    async def test_invalid_fields_skip_image_storage(self, db_session):
        with patch("repairshop.services.product_service.file_service") as mock_files:
            mock_files.validate_and_store = AsyncMock()
            with pytest.raises(ValidationError) as exc_info:
                await self.service.create(db_session, {"model": "BX"}, ("front.png", b"img"))

        mock_files.validate_and_store.assert_not_awaited()
        assert [e["message"] for e in exc_info.value.errors] == [
            "Product name is required",
            "Model number is required",
        ]

    @pytest.mark.asyncio
    async def test_insert_failure_removes_stored_image(self, mock_db_session):
        mock_db_session.flush = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("boom")))

        with patch("repairshop.services.product_service.file_service") as mock_files:
            mock_files.validate_and_store = AsyncMock(return_value="/uploads/productImage_abc.png")
            mock_files.cleanup_file = AsyncMock()
            with pytest.raises(DatabaseError):
                await self.service.create(mock_db_session, PRODUCT, ("front.png", b"img"))

        mock_files.cleanup_file.assert_awaited_once_with("/uploads/productImage_abc.png")

    @pytest.mark.asyncio
    async def test_commit_failure_removes_stored_image(self, mock_db_session):
        mock_db_session.commit = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("gone")))

        with patch("repairshop.services.product_service.file_service") as mock_files:
            mock_files.validate_and_store = AsyncMock(return_value="/uploads/productImage_abc.png")
            mock_files.cleanup_file = AsyncMock()
            with pytest.raises(DatabaseError):
                await self.service.create(mock_db_session, PRODUCT, ("front.png", b"img"))

        mock_files.cleanup_file.assert_awaited_once_with("/uploads/productImage_abc.png")


class TestProductUpdate:
    def setup_method(self):
        self.service = ProductService()

    async def create(self, db):
        return (await self.service.create(db, PRODUCT)).productId

    @pytest.mark.asyncio
    async def test_only_non_empty_fields_written(self, db_session):
        product_id = await self.create(db_session)

        await self.service.update(db_session, product_id, {"productName": "Mixer", "model": ""})

        product = await self.service.get_product(db_session, product_id)
        assert product.product_name == "Mixer"
        assert product.model == "BX"
        assert product.model_no == "BX200"

    @pytest.mark.asyncio
    async def test_image_only_update(self, db_session):
        product_id = await self.create(db_session)

        with patch("repairshop.services.product_service.file_service") as mock_files:
            mock_files.validate_and_store = AsyncMock(return_value="/uploads/productImage_new.jpg")
            await self.service.update(db_session, product_id, {}, ("new.jpg", b"img"))

        product = await self.service.get_product(db_session, product_id)
        assert product.product_image == "/uploads/productImage_new.jpg"

    @pytest.mark.asyncio
    async def test_nothing_to_write(self, db_session):
        product_id = await self.create(db_session)

        with pytest.raises(ValidationError, match="No valid fields provided for update"):
            await self.service.update(db_session, product_id, {"model": ""})

    @pytest.mark.asyncio
    async def test_model_no_must_be_alphanumeric(self, db_session):
        product_id = await self.create(db_session)

        with pytest.raises(ValidationError) as exc_info:
            await self.service.update(db_session, product_id, {"modelNo": "BX-200"})
        assert exc_info.value.errors == [
            {"field": "modelNo", "message": "Model number should only contain letters and digits"}
        ]

    @pytest.mark.asyncio
    async def test_update_missing_product(self, db_session):
        with pytest.raises(NotFoundError, match="Product not found"):
            await self.service.update(db_session, 999, {"productName": "Mixer"})

    @pytest.mark.asyncio
    async def test_missing_product_reported_before_empty_form(self, db_session):
        with pytest.raises(NotFoundError, match="Product not found"):
            await self.service.update(db_session, 999, {})

    @pytest.mark.asyncio
    async def test_commit_failure_removes_new_image(self, mock_db_session):
        mock_db_session.execute = AsyncMock(return_value=MagicMock(first=MagicMock(return_value=(1,))))
        mock_db_session.commit = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("gone")))

        with patch("repairshop.services.product_service.file_service") as mock_files:
            mock_files.validate_and_store = AsyncMock(return_value="/uploads/productImage_new.jpg")
            mock_files.cleanup_file = AsyncMock()
            with pytest.raises(DatabaseError):
                await self.service.update(mock_db_session, 1, {}, ("new.jpg", b"img"))

        mock_files.cleanup_file.assert_awaited_once_with("/uploads/productImage_new.jpg")


class TestProductDeleteAndReads:
    def setup_method(self):
        self.service = ProductService()

    @pytest.mark.asyncio
    async def test_list_in_id_order(self, db_session):
        await self.service.create(db_session, PRODUCT)
        await self.service.create(db_session, {**PRODUCT, "productName": "Kettle"})

        products = await self.service.list_products(db_session)

        assert [p.product_name for p in products] == ["Blender", "Kettle"]

    @pytest.mark.asyncio
    async def test_delete(self, db_session):
        product_id = (await self.service.create(db_session, PRODUCT)).productId

        await self.service.delete(db_session, product_id)

        with pytest.raises(NotFoundError, match="Product not found"):
            await self.service.get_product(db_session, product_id)
