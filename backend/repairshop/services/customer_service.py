"""
Repair Shop Backend — Customer Service
=======================================

What:  Business logic for /api/customers: registration, full and partial
       update, deletion and the three read paths.
How:   Runs the customer rule sets, then the parent/child phone protocol
       from PhoneOwnerService against ``customers`` and
       ``customer_telephones``.
Who:   Called by repairshop.routes.customers.

Column mapping (body key → stored column):
    firstName    → firstName
    lastName     → lastName
    email        → email
    customerType → type
    phoneNumbers → customer_telephones.phone_number (one row each)
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    RepairShopError,
    ValidationError,
)
from repairshop.models.customer import Customer, CustomerTelephone
from repairshop.schemas.customer import CustomerRegisteredResponse, CustomerResponse
from repairshop.services.phone_owner import PhoneOwnerService, as_optional_text
from repairshop.validation.rulesets import CUSTOMER_REGISTER_RULES, CUSTOMER_UPDATE_RULES

logger = logging.getLogger(__name__)

# PATCH allow-list: body key → (model attribute, coercion)
PATCHABLE_FIELDS: Dict[str, Tuple[str, Callable[[Any], Optional[str]]]] = {
    "firstName": ("first_name", as_optional_text),
    "lastName": ("last_name", as_optional_text),
    "email": ("email", as_optional_text),
    "customerType": ("customer_type", as_optional_text),
}


def to_response(customer: Customer, phones: List[str]) -> CustomerResponse:
    return CustomerResponse(
        customer_id=customer.id,
        firstName=customer.first_name,
        lastName=customer.last_name,
        email=customer.email,
        type=customer.customer_type,
        phoneNumbers=phones,
    )


class CustomerService(PhoneOwnerService):
    """
    Customer operations. Stateless; every method receives the request's
    session. Write operations commit as their last step, so the route only
    answers once the data is stored; a failed step leaves the rollback to
    the session dependency.
    """

    parent_model = Customer
    phone_model = CustomerTelephone
    owner_key = "customer_id"
    phone_field = "phoneNumbers"

    async def register(self, db: AsyncSession, data: Mapping[str, Any]) -> CustomerRegisteredResponse:
        """
        Create a customer and its phone rows.

        Raises:
            ValidationError: Field rules failed (all violations listed)
            ConflictError:   Email or a phone number is already stored
            DatabaseError:   Store failure; nothing is persisted
        """
        CUSTOMER_REGISTER_RULES.enforce(data)
        phones: List[str] = data.get("phoneNumbers") or []

        try:
            if await self._email_taken(db, data["email"]):
                raise ConflictError("Email already exists", field="email", value=data["email"])
            await self._ensure_phones_available(db, phones)

            customer = Customer(
                first_name=as_optional_text(data.get("firstName")),
                last_name=as_optional_text(data.get("lastName")),
                email=as_optional_text(data.get("email")),
                customer_type=as_optional_text(data.get("customerType")),
            )
            db.add(customer)
            await db.flush()
            await self._insert_phones(db, customer.id, phones)
            await db.commit()

            logger.info("Customer %s registered with %d phone(s)", customer.id, len(phones))
            return CustomerRegisteredResponse(customerId=customer.id)

        except RepairShopError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error registering customer: %s", str(e))
            raise DatabaseError(context={"operation": "register_customer"})

    async def update(self, db: AsyncSession, customer_id: int, data: Mapping[str, Any]) -> None:
        """
        Full update: overwrite every mutable column (absent keys become NULL)
        and replace the phone set.
        """
        CUSTOMER_UPDATE_RULES.enforce(data)
        email = data.get("email")

        try:
            if not await self._exists(db, customer_id):
                raise NotFoundError(resource="Customer", resource_id=str(customer_id))
            if email is not None and await self._email_taken(db, email, exclude_id=customer_id):
                raise ConflictError("Email already exists", field="email", value=email)

            phones: List[str] = data.get("phoneNumbers") or []
            self._reject_repeated_phones(phones)

            await db.execute(
                update(Customer)
                .where(Customer.id == customer_id)
                .values(
                    first_name=as_optional_text(data.get("firstName")),
                    last_name=as_optional_text(data.get("lastName")),
                    email=as_optional_text(email),
                    customer_type=as_optional_text(data.get("customerType")),
                )
            )
            await self._replace_phones(db, customer_id, phones)
            await db.commit()
            logger.info("Customer %s updated, %d phone(s) stored", customer_id, len(phones))

        except RepairShopError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating customer %s: %s", customer_id, str(e))
            raise DatabaseError(context={"operation": "update_customer", "customer_id": customer_id})

    async def patch(self, db: AsyncSession, customer_id: int, updates: Mapping[str, Any]) -> None:
        """Apply the allow-listed keys of ``updates`` in a single UPDATE."""
        values = {
            attribute: coerce(updates[key])
            for key, (attribute, coerce) in PATCHABLE_FIELDS.items()
            if key in updates
        }
        if not values:
            raise ValidationError(message="No valid fields provided for update")

        try:
            await db.execute(update(Customer).where(Customer.id == customer_id).values(**values))
            await db.commit()
            logger.info("Customer %s patched: %s", customer_id, ", ".join(sorted(values)))
        except SQLAlchemyError as e:
            logger.error("Database error patching customer %s: %s", customer_id, str(e))
            raise DatabaseError(context={"operation": "patch_customer", "customer_id": customer_id})

    async def delete(self, db: AsyncSession, customer_id: int) -> None:
        """Remove the customer's phone rows and then the customer row."""
        try:
            await self._delete_with_phones(db, customer_id)
            await db.commit()
            logger.info("Customer %s deleted", customer_id)
        except SQLAlchemyError as e:
            logger.error("Database error deleting customer %s: %s", customer_id, str(e))
            raise DatabaseError(context={"operation": "delete_customer", "customer_id": customer_id})

    async def list_customers(self, db: AsyncSession) -> List[CustomerResponse]:
        try:
            rows = await self._fetch_all_with_phones(db)
        except SQLAlchemyError as e:
            logger.error("Database error listing customers: %s", str(e))
            raise DatabaseError(context={"operation": "list_customers"})
        return [to_response(customer, phones) for customer, phones in rows]

    async def get_customer(self, db: AsyncSession, customer_id: int) -> CustomerResponse:
        try:
            found = await self._fetch_one_with_phones(db, customer_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching customer %s: %s", customer_id, str(e))
            raise DatabaseError(context={"operation": "get_customer", "customer_id": customer_id})
        if found is None:
            raise NotFoundError(resource="Customer", resource_id=str(customer_id))
        return to_response(*found)

    async def get_by_phone(self, db: AsyncSession, phone_number: str) -> CustomerResponse:
        """First customer owning ``phone_number``, with all of its phones."""
        try:
            result = await db.execute(
                select(CustomerTelephone.customer_id)
                .where(CustomerTelephone.phone_number == phone_number)
                .order_by(CustomerTelephone.customer_id)
                .limit(1)
            )
            customer_id = result.scalar_one_or_none()
            found = None
            if customer_id is not None:
                found = await self._fetch_one_with_phones(db, customer_id)
        except SQLAlchemyError as e:
            logger.error("Database error looking up phone %s: %s", phone_number, str(e))
            raise DatabaseError(context={"operation": "get_customer_by_phone"})
        if found is None:
            raise NotFoundError(resource="Customer", resource_id=phone_number)
        return to_response(*found)


# ── Singleton Instance ────────────────────────────────────────────────────
customer_service = CustomerService()
