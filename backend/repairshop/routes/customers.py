"""
Repair Shop Backend — Customer Route Handlers
==============================================

What:  /api/customers endpoints.
Who:   Called by the admin UI's customer pages.

Route order matters: ``/all`` and ``/phone/{phoneNumber}`` are declared
before ``/{customer_id}`` so they are not swallowed by the id route.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.database import get_db_session
from repairshop.schemas.common import ErrorResponse, MessageResponse
from repairshop.schemas.customer import (
    CustomerPatchRequest,
    CustomerRegisteredResponse,
    CustomerRegisterRequest,
    CustomerResponse,
    CustomerUpdateRequest,
)
from repairshop.services.customer_service import customer_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["Customers"])

ERRORS = {
    400: {"description": "Validation failed or duplicate value", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post(
    "/register",
    status_code=201,
    response_model=CustomerRegisteredResponse,
    responses=ERRORS,
    summary="Register a customer with phone numbers",
)
async def register_customer(
    body: CustomerRegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> CustomerRegisteredResponse:
    """
    Validates every field, rejects a taken email or phone number, then
    writes the customer row and one phone row per number in one transaction.
    """
    return await customer_service.register(db, body.model_dump(exclude_unset=True))


@router.get("/all", response_model=List[CustomerResponse], summary="List customers")
async def list_customers(db: AsyncSession = Depends(get_db_session)) -> List[CustomerResponse]:
    return await customer_service.list_customers(db)


@router.get(
    "/phone/{phoneNumber}",
    response_model=CustomerResponse,
    responses={404: {"description": "No customer owns this number", "model": ErrorResponse}},
    summary="Find the customer owning a phone number",
)
async def get_customer_by_phone(
    phoneNumber: str,
    db: AsyncSession = Depends(get_db_session),
) -> CustomerResponse:
    return await customer_service.get_by_phone(db, phoneNumber)


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    responses={404: {"description": "Customer not found", "model": ErrorResponse}},
    summary="Get a customer with phone numbers",
)
async def get_customer(customer_id: int, db: AsyncSession = Depends(get_db_session)) -> CustomerResponse:
    return await customer_service.get_customer(db, customer_id)


@router.put(
    "/{customer_id}",
    response_model=MessageResponse,
    responses={**ERRORS, 404: {"description": "Customer not found", "model": ErrorResponse}},
    summary="Replace a customer's fields and phone numbers",
)
async def update_customer(
    customer_id: int,
    body: CustomerUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """
    Full update. Fields left out of the body are cleared, and the stored
    phone numbers are replaced by ``phoneNumbers`` (none if absent).
    """
    await customer_service.update(db, customer_id, body.model_dump(exclude_unset=True))
    return MessageResponse(message="Customer updated successfully!")


@router.patch(
    "/{customer_id}",
    response_model=MessageResponse,
    responses=ERRORS,
    summary="Change selected customer fields",
)
async def patch_customer(
    customer_id: int,
    body: CustomerPatchRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await customer_service.patch(db, customer_id, body.model_dump(exclude_unset=True))
    return MessageResponse(message="Customer updated successfully!")


@router.delete("/{customer_id}", response_model=MessageResponse, summary="Delete a customer")
async def delete_customer(customer_id: int, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    await customer_service.delete(db, customer_id)
    return MessageResponse(message="Customer deleted successfully!")
