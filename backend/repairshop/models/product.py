"""
Repair Shop Backend — Product SQLAlchemy Model
===============================================

What:  ORM model representing the `products` table.
Who:   Used by ProductService and by Alembic.

`product_image` stores the public path of the uploaded image
(e.g. ``/uploads/productImage_<uuid>.png``), not the file bytes.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from repairshop.database import Base


class Product(Base):
    """A product (device model) the shop services."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(
        "product_id", Integer, primary_key=True, autoincrement=True
    )
    product_name: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(50), nullable=False)
    model_no: Mapped[str] = mapped_column(String(30), nullable=False)
    product_image: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.product_name}', model_no='{self.model_no}')>"
