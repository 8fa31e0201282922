"""
Repair Shop Backend — Product Response Schemas
===============================================

Product writes arrive as multipart forms (they may carry an image), so
there are no JSON request models here; the form fields are declared on the
route handlers.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductResponse(BaseModel):
    # model_no would otherwise clash with pydantic's "model_" namespace
    model_config = ConfigDict(protected_namespaces=())

    product_id: int
    product_name: Optional[str] = None
    model: Optional[str] = None
    model_no: Optional[str] = None
    product_image: Optional[str] = Field(
        default=None,
        description="Public path of the uploaded image, e.g. /uploads/productImage_<id>.png",
    )


class ProductCreatedResponse(BaseModel):
    message: str = Field(default="Product added successfully!")
    productId: int = Field(description="Identity of the new product")
