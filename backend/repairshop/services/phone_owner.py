"""
Repair Shop Backend — Parent/Child Phone Protocol
==================================================

What:  Shared persistence steps for entities that own phone numbers
       (customers and employees): natural-key checks, bulk phone writes,
       replace-all on update, and reads that fold phones into a list.
How:   PhoneOwnerService is configured by class attributes naming the parent
       model, the phone model and the owner column; CustomerService and
       EmployeeService subclass it and add their own field mapping.
Who:   Subclassed by the customer and employee services only.

Protocol (registration):
    1. email taken?                → ConflictError "Email already exists"
    2. (subclass extra checks)     → e.g. username
    3. each phone in input order   → ConflictError on the first one found
    4. INSERT parent, flush        → generated identity
    5. bulk INSERT phone rows      → only when the list is non-empty
    6. COMMIT

Protocol (full update):
    1. parent exists?              → NotFoundError
    2. email taken by another row? → ConflictError
    3. UPDATE parent columns       → absent fields become NULL
    4. DELETE all phone rows
    5. bulk INSERT the new list    → only when supplied and non-empty
    6. COMMIT

These helpers only flush. The public operations of each subclass commit
once as their last step; when a step raises, the request-scoped session
(see repairshop.database.get_db_session) rolls the whole sequence back.

Email (and, for employees, username) comparisons ignore letter case:
"AMAL@x.com" collides with a stored "amal@x.com".

Uniqueness is read-then-write with no lock; two concurrent registrations
with the same email or phone can both pass step 1-3.
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Type

from sqlalchemy import Select, delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from repairshop.database import Base
from repairshop.exceptions import ConflictError

logger = logging.getLogger(__name__)


def as_optional_text(value: Any) -> Optional[str]:
    """Column coercion for free-text fields: keeps NULL, stringifies the rest."""
    return None if value is None else str(value)


def split_phone_numbers(aggregated: Optional[str]) -> List[str]:
    """Turn the aggregated ``a,b,c`` column back into a list; NULL → []."""
    return aggregated.split(",") if aggregated else []


class PhoneOwnerService:
    """Base class for services whose entity owns a phone table."""

    parent_model: Type[Base]
    phone_model: Type[Base]
    # Attribute on phone_model referencing the parent's primary key
    owner_key: str
    # Request body field that carries the phone list
    phone_field: str

    @property
    def _owner_column(self):
        return getattr(self.phone_model, self.owner_key)

    # ── Natural-key checks ────────────────────────────────────────────────

    async def _email_taken(
        self, db: AsyncSession, email: str, exclude_id: Optional[int] = None
    ) -> bool:
        stmt = select(self.parent_model.id).where(
            func.lower(self.parent_model.email) == str(email).lower()
        )
        if exclude_id is not None:
            stmt = stmt.where(self.parent_model.id != exclude_id)
        result = await db.execute(stmt.limit(1))
        return result.first() is not None

    def _reject_repeated_phones(self, phones: Iterable[str]) -> None:
        """A phone listed twice in one body cannot be stored twice for one owner."""
        seen = set()
        for phone in phones:
            if phone in seen:
                raise ConflictError(
                    f"Phone number {phone} is duplicated in the request",
                    field=self.phone_field,
                    value=phone,
                )
            seen.add(phone)

    async def _ensure_phones_available(self, db: AsyncSession, phones: Sequence[str]) -> None:
        """
        Check phones in input order and stop at the first one already stored
        in this entity's phone table. Phones of other entity types are not
        consulted.
        """
        self._reject_repeated_phones(phones)
        for phone in phones:
            result = await db.execute(
                select(self.phone_model.phone_number)
                .where(self.phone_model.phone_number == phone)
                .limit(1)
            )
            if result.first() is not None:
                raise ConflictError(
                    f"Phone number {phone} already exists",
                    field=self.phone_field,
                    value=phone,
                )

    async def _exists(self, db: AsyncSession, owner_id: int) -> bool:
        result = await db.execute(
            select(self.parent_model.id).where(self.parent_model.id == owner_id)
        )
        return result.first() is not None

    # ── Child writes ──────────────────────────────────────────────────────

    async def _insert_phones(self, db: AsyncSession, owner_id: int, phones: Sequence[str]) -> None:
        if not phones:
            return
        await db.execute(
            insert(self.phone_model),
            [{self.owner_key: owner_id, "phone_number": phone} for phone in phones],
        )
        logger.debug("Inserted %d phone rows for %s %s", len(phones), self.parent_model.__name__, owner_id)

    async def _replace_phones(
        self, db: AsyncSession, owner_id: int, phones: Optional[Sequence[str]]
    ) -> None:
        """Clear all phones, then insert ``phones`` if any were given."""
        await db.execute(delete(self.phone_model).where(self._owner_column == owner_id))
        await self._insert_phones(db, owner_id, phones or [])

    async def _delete_with_phones(self, db: AsyncSession, owner_id: int) -> None:
        # Children first: the phone table's foreign key has no cascade
        await db.execute(delete(self.phone_model).where(self._owner_column == owner_id))
        await db.execute(delete(self.parent_model).where(self.parent_model.id == owner_id))

    # ── Reads ─────────────────────────────────────────────────────────────

    def _select_with_phones(self) -> Select:
        """
        Parent rows left-joined to their phones, one row per parent.

        aggregate_strings compiles to GROUP_CONCAT on MySQL/SQLite and
        string_agg on PostgreSQL.
        """
        phones = func.aggregate_strings(self.phone_model.phone_number, ",").label("phone_numbers")
        return (
            select(self.parent_model, phones)
            .outerjoin(self.phone_model, self._owner_column == self.parent_model.id)
            .group_by(self.parent_model.id)
            .order_by(self.parent_model.id)
        )

    async def _fetch_all_with_phones(self, db: AsyncSession) -> List[Tuple[Any, List[str]]]:
        result = await db.execute(self._select_with_phones())
        return [(row[0], split_phone_numbers(row[1])) for row in result.all()]

    async def _fetch_one_with_phones(
        self, db: AsyncSession, owner_id: int
    ) -> Optional[Tuple[Any, List[str]]]:
        result = await db.execute(
            self._select_with_phones().where(self.parent_model.id == owner_id)
        )
        row = result.first()
        if row is None:
            return None
        return row[0], split_phone_numbers(row[1])
