"""
Repair Shop Backend — Declarative Field Rules
==============================================

What:  A small rule engine for validating request bodies field by field.
How:   A RuleSet holds one FieldRules entry per body field; each FieldRules
       holds an ordered tuple of Rule objects. ``RuleSet.collect()`` runs
       every rule of every field and returns all violations in declaration
       order. ``RuleSet.enforce()`` raises ValidationError with that list.
Who:   Rule sets are declared in ``repairshop.validation.rulesets`` and
       enforced by the services before any query runs.

Semantics:
    - Rules never stop at the first failure: a missing first name reports
      both "mandatory" and the pattern message.
    - An optional field is skipped entirely when its key is absent. A key
      that is present with a null value is still validated.
    - Scalar rules look at the value as text: null → "", booleans → "true"
      / "false", numbers → their decimal form.
    - A Custom rule produces exactly one message. Its predicate may raise
      ValueError to choose which message that is.

Example:
    rules = RuleSet(
        FieldRules("email", Required("Email is mandatory"), IsEmail("Invalid email format")),
        FieldRules("nickname", Length(max=20), optional=True),
    )
    rules.enforce({"email": "nope"})
    # ValidationError(errors=[{"field": "email", "message": "Invalid email format"}])
"""

import re
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import email_validator
from email_validator import EmailNotValidError, validate_email

from repairshop.exceptions import ValidationError

DEFAULT_MESSAGE = "Invalid value"

# YYYY-MM-DD or YYYY/MM/DD, one delimiter throughout
_DATE_RE = re.compile(r"([0-9]{4})([-/])([0-9]{1,2})\2([0-9]{1,2})")
_ALPHANUMERIC_RE = re.compile(r"[0-9A-Za-z]+")


def as_text(value: Any) -> str:
    """Render a body value the way scalar rules compare it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def parse_date(value: Any) -> Optional[date]:
    """Parse a calendar date from a body value; None if it is not one."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    match = _DATE_RE.fullmatch(value.strip())
    if match is None:
        return None
    year, _, month, day = match.groups()
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


# ══════════════════════════════════════════════════════════════════════════
# Rules
# ══════════════════════════════════════════════════════════════════════════


class Rule(ABC):
    """One check applied to one field value."""

    def __init__(self, message: Optional[str] = None):
        self.message = message or DEFAULT_MESSAGE

    def __call__(self, value: Any) -> Optional[str]:
        """Return the violation message, or None when the value passes."""
        return None if self.is_valid(value) else self.message

    @abstractmethod
    def is_valid(self, value: Any) -> bool:
        ...


class Required(Rule):
    def is_valid(self, value: Any) -> bool:
        return as_text(value) != ""


class Matches(Rule):
    """The whole text must match ``pattern``."""

    def __init__(self, pattern: str | re.Pattern[str], message: Optional[str] = None):
        super().__init__(message)
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

    def is_valid(self, value: Any) -> bool:
        return self.pattern.fullmatch(as_text(value)) is not None


class Length(Rule):
    def __init__(
        self,
        min: int = 0,
        max: Optional[int] = None,
        message: Optional[str] = None,
    ):
        super().__init__(message)
        self.min = min
        self.max = max

    def is_valid(self, value: Any) -> bool:
        size = len(as_text(value))
        if size < self.min:
            return False
        return self.max is None or size <= self.max


class OneOf(Rule):
    def __init__(self, choices: Iterable[str], message: Optional[str] = None):
        super().__init__(message)
        self.choices = tuple(choices)

    def is_valid(self, value: Any) -> bool:
        return as_text(value) in self.choices


# Shop mail hosts on a private network live under .local, a special-use
# name email_validator rejects by default. Other special-use names stay
# rejected.
if "local" in email_validator.SPECIAL_USE_DOMAIN_NAMES:
    email_validator.SPECIAL_USE_DOMAIN_NAMES.remove("local")


class IsEmail(Rule):
    def is_valid(self, value: Any) -> bool:
        try:
            validate_email(as_text(value), check_deliverability=False)
        except EmailNotValidError:
            return False
        return True


class IsDate(Rule):
    def is_valid(self, value: Any) -> bool:
        return parse_date(value) is not None


class IsAlphanumeric(Rule):
    def is_valid(self, value: Any) -> bool:
        return _ALPHANUMERIC_RE.fullmatch(as_text(value)) is not None


class IsArray(Rule):
    def is_valid(self, value: Any) -> bool:
        return isinstance(value, list)


class Custom(Rule):
    """
    Arbitrary predicate over the raw (uncoerced) value.

    The predicate returns a bool, or raises ValueError whose text replaces
    the rule's message for this one violation.
    """

    def __init__(self, predicate: Callable[[Any], bool], message: Optional[str] = None):
        super().__init__(message)
        self.predicate = predicate

    def __call__(self, value: Any) -> Optional[str]:
        try:
            return None if self.predicate(value) else self.message
        except ValueError as e:
            return str(e) or self.message

    def is_valid(self, value: Any) -> bool:
        return self(value) is None


# ══════════════════════════════════════════════════════════════════════════
# Field and rule-set containers
# ══════════════════════════════════════════════════════════════════════════


class FieldRules:
    """Ordered rules for a single body field."""

    def __init__(self, field: str, *rules: Rule, optional: bool = False):
        self.field = field
        self.rules: Sequence[Rule] = rules
        self.optional = optional

    def collect(self, data: Mapping[str, Any]) -> List[Dict[str, str]]:
        if self.optional and self.field not in data:
            return []
        value = data.get(self.field)
        errors = []
        for rule in self.rules:
            message = rule(value)
            if message is not None:
                errors.append({"field": self.field, "message": message})
        return errors


class RuleSet:
    """All field rules for one endpoint's request body."""

    def __init__(self, *fields: FieldRules):
        self.fields: Sequence[FieldRules] = fields

    def collect(self, data: Mapping[str, Any]) -> List[Dict[str, str]]:
        errors: List[Dict[str, str]] = []
        for field_rules in self.fields:
            errors.extend(field_rules.collect(data))
        return errors

    def enforce(self, data: Mapping[str, Any]) -> None:
        """Raise ValidationError carrying every violation, if there are any."""
        errors = self.collect(data)
        if errors:
            raise ValidationError(errors=errors)
