"""
Repair Shop Backend — Customer SQLAlchemy Models
=================================================

What:  ORM models for the `customers` and `customer_telephones` tables.
Who:   Used by CustomerService and by Alembic for schema management.

Table Design:
    - customers keeps the historical camelCase column names (firstName,
      lastName) and a `type` column for the customer type; Python attributes
      use snake_case and map onto them explicitly.
    - customer_telephones holds one row per phone number, keyed by
      (customer_id, phone_number). The foreign key has no ON DELETE CASCADE:
      phone rows are always removed explicitly by the service.
    - Descriptive columns are nullable because a full update writes NULL for
      every field the caller leaves out.
"""

from sqlalchemy import ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from repairshop.database import Base


class Customer(Base):
    """A repair-shop customer; owns zero or more CustomerTelephone rows."""

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(
        "customer_id", Integer, primary_key=True, autoincrement=True
    )
    first_name: Mapped[str | None] = mapped_column("firstName", String(10), nullable=True)
    last_name: Mapped[str | None] = mapped_column("lastName", String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_type: Mapped[str | None] = mapped_column("type", String(20), nullable=True)

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, email='{self.email}', type='{self.customer_type}')>"


# Email lookups on every registration and full update compare lower-cased
Index("idx_customers_email_lower", func.lower(Customer.email))


class CustomerTelephone(Base):
    """One phone number belonging to a customer."""

    __tablename__ = "customer_telephones"

    customer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("customers.customer_id"), primary_key=True
    )
    phone_number: Mapped[str] = mapped_column(String(10), primary_key=True)

    __table_args__ = (
        Index("idx_customer_telephones_phone_number", "phone_number"),
    )

    def __repr__(self) -> str:
        return f"<CustomerTelephone(customer_id={self.customer_id}, phone='{self.phone_number}')>"
