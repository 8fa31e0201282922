"""
Repair Shop Backend — Customer Request/Response Schemas
========================================================

What:  API contract for /api/customers.

Request models type every field as ``Any``: shape and format checks belong
to the declarative rule sets, which report every violation at once instead
of stopping at the first type error. Services read
``model_dump(exclude_unset=True)`` so an absent key stays distinguishable
from an explicit null.

Response field names follow the stored column names (customer_id,
firstName, lastName, email, type) that the admin UI already consumes.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerRegisterRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    firstName: Any = Field(default=None, examples=["Amal"])
    lastName: Any = Field(default=None, examples=["Perera"])
    email: Any = Field(default=None, examples=["amal@x.com"])
    customerType: Any = Field(default=None, examples=["Regular"])
    phoneNumbers: Any = Field(default=None, examples=[["0711111111"]])


class CustomerUpdateRequest(CustomerRegisterRequest):
    """PUT body: any subset of the registration fields."""


class CustomerPatchRequest(BaseModel):
    """PATCH body: only allow-listed keys are applied; the rest are ignored."""
    model_config = ConfigDict(extra="ignore")

    firstName: Any = Field(default=None)
    lastName: Any = Field(default=None)
    email: Any = Field(default=None)
    customerType: Any = Field(default=None)


class CustomerResponse(BaseModel):
    customer_id: int = Field(description="Generated customer identity")
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    type: Optional[str] = Field(default=None, description="Customer type")
    phoneNumbers: List[str] = Field(default_factory=list, description="Phone numbers, never null")


class CustomerRegisteredResponse(BaseModel):
    message: str = Field(default="Customer registered successfully!")
    customerId: int = Field(description="Identity of the new customer")
