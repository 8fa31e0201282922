"""
Repair Shop Backend — Employee SQLAlchemy Models
=================================================

What:  ORM models for the `employees` and `employee_phones` tables.
Who:   Used by EmployeeService and by Alembic for schema management.

Notes:
    - `password` holds a passlib hash string, never the clear-text value.
    - `dob` is a DATE; the age rule is enforced by the validation layer.
    - employee_phones mirrors customer_telephones: composite primary key,
      no cascading delete.
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from repairshop.database import Base


class Employee(Base):
    """A shop owner or employee account; owns zero or more EmployeePhone rows."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(
        "employee_id", Integer, primary_key=True, autoincrement=True
    )
    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(100), nullable=True)
    nic: Mapped[str | None] = mapped_column(String(12), nullable=True)
    role: Mapped[str | None] = mapped_column(String(20), nullable=True)
    username: Mapped[str | None] = mapped_column(String(50), nullable=True)
    password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, username='{self.username}', role='{self.role}')>"


# Email and username are unique regardless of letter case
Index("idx_employees_email_lower", func.lower(Employee.email))
Index("idx_employees_username_lower", func.lower(Employee.username))


class EmployeePhone(Base):
    """One phone number belonging to an employee."""

    __tablename__ = "employee_phones"

    employee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("employees.employee_id"), primary_key=True
    )
    phone_number: Mapped[str] = mapped_column(String(10), primary_key=True)

    __table_args__ = (
        Index("idx_employee_phones_phone_number", "phone_number"),
    )

    def __repr__(self) -> str:
        return f"<EmployeePhone(employee_id={self.employee_id}, phone='{self.phone_number}')>"
