"""
Repair Shop Backend — Employee Service
=======================================

What:  Business logic for /api/employees.
How:   Same parent/child phone protocol as customers, with a username
       uniqueness check on registration. Phones travel as ``mobileno``.
Who:   Called by repairshop.routes.employees.

Passwords are hashed before the INSERT and the hash is never part of a
read response. nic, username and password cannot be changed by the
update endpoint.
"""

import logging
from typing import Any, List, Mapping

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.exceptions import ConflictError, DatabaseError, NotFoundError, RepairShopError
from repairshop.models.employee import Employee, EmployeePhone
from repairshop.schemas.employee import EmployeeRegisteredResponse, EmployeeResponse
from repairshop.security import hash_password
from repairshop.services.phone_owner import PhoneOwnerService, as_optional_text
from repairshop.validation.rules import parse_date
from repairshop.validation.rulesets import EMPLOYEE_REGISTER_RULES, EMPLOYEE_UPDATE_RULES

logger = logging.getLogger(__name__)


def to_response(employee: Employee, phones: List[str]) -> EmployeeResponse:
    return EmployeeResponse(
        employee_id=employee.id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        nic=employee.nic,
        role=employee.role,
        username=employee.username,
        dob=employee.dob,
        phoneNumbers=phones,
    )


class EmployeeService(PhoneOwnerService):
    parent_model = Employee
    phone_model = EmployeePhone
    owner_key = "employee_id"
    phone_field = "mobileno"

    async def _username_taken(self, db: AsyncSession, username: str) -> bool:
        result = await db.execute(
            select(Employee.id).where(func.lower(Employee.username) == username.lower()).limit(1)
        )
        return result.first() is not None

    async def register(self, db: AsyncSession, data: Mapping[str, Any]) -> EmployeeRegisteredResponse:
        """
        Create an employee and its phone rows.

        Check order: email, username, then phones in input order. The first
        collision aborts the request before anything is written.
        """
        EMPLOYEE_REGISTER_RULES.enforce(data)
        phones: List[str] = data.get("mobileno") or []

        try:
            if await self._email_taken(db, data["email"]):
                raise ConflictError("Email already exists", field="email", value=data["email"])
            username = as_optional_text(data["username"])
            if await self._username_taken(db, username):
                raise ConflictError("Username already exists", field="username", value=username)
            await self._ensure_phones_available(db, phones)

            employee = Employee(
                first_name=as_optional_text(data.get("firstName")),
                last_name=as_optional_text(data.get("lastName")),
                email=as_optional_text(data.get("email")),
                nic=as_optional_text(data.get("nic")),
                role=as_optional_text(data.get("role")),
                username=username,
                password=hash_password(as_optional_text(data["password"])),
                dob=parse_date(data.get("dob")),
            )
            db.add(employee)
            await db.flush()
            await self._insert_phones(db, employee.id, phones)
            await db.commit()

            logger.info("Employee %s registered (role=%s)", employee.id, employee.role)
            return EmployeeRegisteredResponse(employeeId=employee.id)

        except RepairShopError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error registering employee: %s", str(e))
            raise DatabaseError(context={"operation": "register_employee"})

    async def update(self, db: AsyncSession, employee_id: int, data: Mapping[str, Any]) -> None:
        """Overwrite first_name, last_name, email, role and dob; replace phones."""
        EMPLOYEE_UPDATE_RULES.enforce(data)
        email = data.get("email")

        try:
            if not await self._exists(db, employee_id):
                raise NotFoundError(resource="Employee", resource_id=str(employee_id))
            if email is not None and await self._email_taken(db, email, exclude_id=employee_id):
                raise ConflictError("Email already exists", field="email", value=email)

            phones: List[str] = data.get("mobileno") or []
            self._reject_repeated_phones(phones)

            await db.execute(
                update(Employee)
                .where(Employee.id == employee_id)
                .values(
                    first_name=as_optional_text(data.get("firstName")),
                    last_name=as_optional_text(data.get("lastName")),
                    email=as_optional_text(email),
                    role=as_optional_text(data.get("role")),
                    dob=parse_date(data.get("dob")),
                )
            )
            await self._replace_phones(db, employee_id, phones)
            await db.commit()
            logger.info("Employee %s updated, %d phone(s) stored", employee_id, len(phones))

        except RepairShopError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating employee %s: %s", employee_id, str(e))
            raise DatabaseError(context={"operation": "update_employee", "employee_id": employee_id})

    async def delete(self, db: AsyncSession, employee_id: int) -> None:
        try:
            await self._delete_with_phones(db, employee_id)
            await db.commit()
            logger.info("Employee %s deleted", employee_id)
        except SQLAlchemyError as e:
            logger.error("Database error deleting employee %s: %s", employee_id, str(e))
            raise DatabaseError(context={"operation": "delete_employee", "employee_id": employee_id})

    async def list_employees(self, db: AsyncSession) -> List[EmployeeResponse]:
        try:
            rows = await self._fetch_all_with_phones(db)
        except SQLAlchemyError as e:
            logger.error("Database error listing employees: %s", str(e))
            raise DatabaseError(context={"operation": "list_employees"})
        return [to_response(employee, phones) for employee, phones in rows]

    async def get_employee(self, db: AsyncSession, employee_id: int) -> EmployeeResponse:
        try:
            found = await self._fetch_one_with_phones(db, employee_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching employee %s: %s", employee_id, str(e))
            raise DatabaseError(context={"operation": "get_employee", "employee_id": employee_id})
        if found is None:
            raise NotFoundError(resource="Employee", resource_id=str(employee_id))
        return to_response(*found)


employee_service = EmployeeService()
