"""
Repair Shop Backend — Request Rule Sets
========================================

What:  The field rules for every write endpoint, one RuleSet per endpoint.
Who:   Enforced by CustomerService, EmployeeService and ProductService.

Customer type enumerations are parameters of the builders because
registration and full update accept different sets; the module-level rule
sets are built from the configured values.
"""

import re
from datetime import date
from typing import Any, Optional, Sequence

from repairshop.config import settings
from repairshop.validation.rules import (
    Custom,
    FieldRules,
    IsAlphanumeric,
    IsArray,
    IsDate,
    IsEmail,
    Length,
    Matches,
    OneOf,
    Required,
    RuleSet,
    parse_date,
)

NAME_PATTERN = re.compile(r"[a-zA-Z']+")
PHONE_PATTERN = re.compile(r"07[0-9]{8}")
# 9 digits followed by V/v (old format) or 12 digits (new format)
NIC_PATTERN = re.compile(r"[0-9]{9}[Vv]|[0-9]{12}")

EMPLOYEE_ROLES = ("owner", "employee")
MINIMUM_EMPLOYEE_AGE = 18

PHONE_FORMAT_MESSAGE = "Telephone number should contain 10 digits and start with 07"


def is_phone_list(value: Any) -> bool:
    """True when ``value`` is a list of well-formed phone number strings."""
    if not isinstance(value, list):
        return False
    return all(isinstance(phone, str) and PHONE_PATTERN.fullmatch(phone) for phone in value)


def age_on(born: date, today: date) -> int:
    """Completed years between ``born`` and ``today``."""
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def is_adult_birth_date(value: Any, today: Optional[date] = None) -> bool:
    """
    Date-of-birth predicate: not in the future and at least 18 years ago.

    Unparseable values pass here; the IsDate rule reports them.
    """
    born = parse_date(value)
    if born is None:
        return True
    today = today or date.today()
    if born > today:
        raise ValueError("Date of birth cannot be a future date")
    if age_on(born, today) < MINIMUM_EMPLOYEE_AGE:
        raise ValueError("Employee must be at least 18 years old")
    return True


def _either(label: str, choices: Sequence[str]) -> str:
    return f"{label} should be either " + " or ".join(f"'{c}'" for c in choices)


# ══════════════════════════════════════════════════════════════════════════
# Customers
# ══════════════════════════════════════════════════════════════════════════


def build_customer_register_rules(customer_types: Sequence[str]) -> RuleSet:
    return RuleSet(
        FieldRules(
            "firstName",
            Required("First name is mandatory"),
            Matches(NAME_PATTERN, "First name should only contain letters and ' symbol"),
            Length(max=10, message="First name should not exceed 10 characters"),
        ),
        FieldRules(
            "lastName",
            Required("Last name is mandatory"),
            Matches(NAME_PATTERN, "Last name should only contain letters and ' symbol"),
            Length(max=20, message="Last name should not exceed 20 characters"),
        ),
        FieldRules(
            "email",
            Required("Email is mandatory"),
            IsEmail("Invalid email format"),
            Length(max=100, message="Email should not exceed 100 characters"),
        ),
        FieldRules(
            "customerType",
            Required("Customer type is mandatory"),
            OneOf(customer_types, _either("Customer type", customer_types)),
        ),
        FieldRules(
            "phoneNumbers",
            IsArray("Phone numbers should be an array"),
            Custom(is_phone_list, PHONE_FORMAT_MESSAGE),
        ),
    )


def build_customer_update_rules(customer_types: Sequence[str]) -> RuleSet:
    return RuleSet(
        FieldRules(
            "firstName",
            Length(max=10, message="First name should not exceed 10 characters"),
            optional=True,
        ),
        FieldRules(
            "lastName",
            Length(max=20, message="Last name should not exceed 20 characters"),
            optional=True,
        ),
        FieldRules("email", IsEmail("Invalid email format"), optional=True),
        FieldRules(
            "customerType",
            OneOf(customer_types, _either("Customer type", customer_types)),
            optional=True,
        ),
        FieldRules(
            "phoneNumbers",
            IsArray("Phone numbers should be an array"),
            Custom(is_phone_list, PHONE_FORMAT_MESSAGE),
            optional=True,
        ),
    )


# ══════════════════════════════════════════════════════════════════════════
# Employees
# ══════════════════════════════════════════════════════════════════════════

EMPLOYEE_REGISTER_RULES = RuleSet(
    FieldRules(
        "firstName",
        Required("First name is mandatory"),
        Matches(NAME_PATTERN, "First name should only contain letters and ' symbol"),
        Length(max=50, message="First name should not exceed 50 characters"),
    ),
    FieldRules(
        "lastName",
        Required("Last name is mandatory"),
        Matches(NAME_PATTERN, "Last name should only contain letters and ' symbol"),
        Length(max=50, message="Last name should not exceed 50 characters"),
    ),
    FieldRules(
        "email",
        Required("Email is mandatory"),
        IsEmail("Invalid email format"),
        Length(max=100, message="Email should not exceed 100 characters"),
    ),
    FieldRules(
        "mobileno",
        IsArray("Phone numbers should be an array"),
        Custom(is_phone_list, PHONE_FORMAT_MESSAGE),
    ),
    FieldRules(
        "nic",
        Required("NIC is mandatory"),
        Matches(NIC_PATTERN, "Invalid NIC format. Should be 9 digits followed by V or 12 digits."),
    ),
    FieldRules(
        "role",
        Required("Role is mandatory"),
        OneOf(EMPLOYEE_ROLES, _either("Role", EMPLOYEE_ROLES)),
    ),
    FieldRules(
        "username",
        Required("Username is mandatory"),
        Length(min=5, max=50, message="Username should be between 5 to 50 characters"),
    ),
    FieldRules(
        "password",
        Required("Password is mandatory"),
        Length(min=6, message="Password should be at least 6 characters long"),
    ),
    FieldRules(
        "dob",
        Required("Date of birth is mandatory"),
        IsDate("Invalid date format"),
        Custom(is_adult_birth_date),
    ),
)

# Messages left at the "Invalid value" default where the update endpoint
# never defined its own
EMPLOYEE_UPDATE_RULES = RuleSet(
    FieldRules("firstName", Length(max=50), optional=True),
    FieldRules("lastName", Length(max=50), optional=True),
    FieldRules("email", IsEmail(), optional=True),
    FieldRules("role", OneOf(EMPLOYEE_ROLES), optional=True),
    FieldRules(
        "mobileno",
        IsArray(),
        Custom(is_phone_list, "Mobile number should contain 10 digits and start with 07"),
        optional=True,
    ),
    FieldRules("dob", IsDate("Invalid date of birth format"), optional=True),
)


# ══════════════════════════════════════════════════════════════════════════
# Products
# ══════════════════════════════════════════════════════════════════════════

PRODUCT_CREATE_RULES = RuleSet(
    FieldRules(
        "productName",
        Required("Product name is required"),
        Length(max=100, message="Product name cannot exceed 100 characters"),
    ),
    FieldRules(
        "model",
        Required("Model is required"),
        Length(max=50, message="Model cannot exceed 50 characters"),
    ),
    FieldRules(
        "modelNo",
        Required("Model number is required"),
        Length(max=30, message="Model number cannot exceed 30 characters"),
    ),
)

PRODUCT_UPDATE_RULES = RuleSet(
    FieldRules(
        "productName",
        Length(max=100, message="Product name cannot exceed 100 characters"),
        optional=True,
    ),
    FieldRules(
        "model",
        Length(max=50, message="Model cannot exceed 50 characters"),
        optional=True,
    ),
    FieldRules(
        "modelNo",
        IsAlphanumeric("Model number should only contain letters and digits"),
        Length(max=30, message="Model number cannot exceed 30 characters"),
        optional=True,
    ),
)


CUSTOMER_REGISTER_RULES = build_customer_register_rules(settings.customer_types_on_register_list)
CUSTOMER_UPDATE_RULES = build_customer_update_rules(settings.customer_types_on_update_list)
