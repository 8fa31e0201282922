"""
Repair Shop Backend — Employee Route Handlers
==============================================

What:  /api/employees endpoints. Responses never carry the password hash.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.database import get_db_session
from repairshop.schemas.common import ErrorResponse, MessageResponse
from repairshop.schemas.employee import (
    EmployeeRegisteredResponse,
    EmployeeRegisterRequest,
    EmployeeResponse,
    EmployeeUpdateRequest,
)
from repairshop.services.employee_service import employee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/employees", tags=["Employees"])

ERRORS = {
    400: {"description": "Validation failed or duplicate value", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.post(
    "/register",
    status_code=201,
    response_model=EmployeeRegisteredResponse,
    responses=ERRORS,
    summary="Register an employee with phone numbers",
)
async def register_employee(
    body: EmployeeRegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> EmployeeRegisteredResponse:
    return await employee_service.register(db, body.model_dump(exclude_unset=True))


@router.get("/all", response_model=List[EmployeeResponse], summary="List employees")
async def list_employees(db: AsyncSession = Depends(get_db_session)) -> List[EmployeeResponse]:
    return await employee_service.list_employees(db)


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    responses={404: {"description": "Employee not found", "model": ErrorResponse}},
    summary="Get an employee with phone numbers",
)
async def get_employee(employee_id: int, db: AsyncSession = Depends(get_db_session)) -> EmployeeResponse:
    return await employee_service.get_employee(db, employee_id)


@router.put(
    "/{employee_id}",
    response_model=MessageResponse,
    responses={**ERRORS, 404: {"description": "Employee not found", "model": ErrorResponse}},
    summary="Replace an employee's fields and phone numbers",
)
async def update_employee(
    employee_id: int,
    body: EmployeeUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await employee_service.update(db, employee_id, body.model_dump(exclude_unset=True))
    return MessageResponse(message="Employee updated successfully!")


@router.delete("/{employee_id}", response_model=MessageResponse, summary="Delete an employee")
async def delete_employee(employee_id: int, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    await employee_service.delete(db, employee_id)
    return MessageResponse(message="Employee deleted successfully!")
