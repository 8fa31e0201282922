"""Create customer, employee and product tables

Revision ID: 001
Revises: None
Create Date: 2025-03-01 00:00:00.000000+00:00

What:  Creates customers, customer_telephones, employees, employee_phones
       and products.
How:   Phone tables use a composite primary key (owner id, phone number)
       and a plain foreign key to the owner, without ON DELETE CASCADE.

Rollback: downgrade() drops all five tables (children first).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("customer_id", sa.Integer(), autoincrement=True, nullable=False),
        # camelCase names are kept for the admin UI's existing queries
        sa.Column("firstName", sa.String(length=10), nullable=True),
        sa.Column("lastName", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=100), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint("customer_id", name="pk_customers"),
    )
    op.create_index("idx_customers_email_lower", "customers", [sa.text("lower(email)")])

    op.create_table(
        "customer_telephones",
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("phone_number", sa.String(length=10), nullable=False),
        sa.ForeignKeyConstraint(
            ["customer_id"], ["customers.customer_id"], name="fk_customer_telephones_customer"
        ),
        sa.PrimaryKeyConstraint("customer_id", "phone_number", name="pk_customer_telephones"),
    )
    op.create_index(
        "idx_customer_telephones_phone_number", "customer_telephones", ["phone_number"]
    )

    op.create_table(
        "employees",
        sa.Column("employee_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=True),
        sa.Column("last_name", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=100), nullable=True),
        sa.Column("nic", sa.String(length=12), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=True),
        sa.Column("username", sa.String(length=50), nullable=True),
        # pbkdf2_sha256 hashes are ~87 characters
        sa.Column("password", sa.String(length=255), nullable=True),
        sa.Column("dob", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("employee_id", name="pk_employees"),
    )
    op.create_index("idx_employees_email_lower", "employees", [sa.text("lower(email)")])
    op.create_index("idx_employees_username_lower", "employees", [sa.text("lower(username)")])

    op.create_table(
        "employee_phones",
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("phone_number", sa.String(length=10), nullable=False),
        sa.ForeignKeyConstraint(
            ["employee_id"], ["employees.employee_id"], name="fk_employee_phones_employee"
        ),
        sa.PrimaryKeyConstraint("employee_id", "phone_number", name="pk_employee_phones"),
    )
    op.create_index("idx_employee_phones_phone_number", "employee_phones", ["phone_number"])

    op.create_table(
        "products",
        sa.Column("product_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("product_name", sa.String(length=100), nullable=False),
        sa.Column("model", sa.String(length=50), nullable=False),
        sa.Column("model_no", sa.String(length=30), nullable=False),
        sa.Column("product_image", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("product_id", name="pk_products"),
    )


def downgrade() -> None:
    op.drop_table("products")
    op.drop_index("idx_employee_phones_phone_number", table_name="employee_phones")
    op.drop_table("employee_phones")
    op.drop_index("idx_employees_username_lower", table_name="employees")
    op.drop_index("idx_employees_email_lower", table_name="employees")
    op.drop_table("employees")
    op.drop_index("idx_customer_telephones_phone_number", table_name="customer_telephones")
    op.drop_table("customer_telephones")
    op.drop_index("idx_customers_email_lower", table_name="customers")
    op.drop_table("customers")
