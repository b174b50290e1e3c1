"""
Validation rules for caller input.

Pure functions with no I/O. The ``is_*`` predicates answer a single policy
question; the ``require_*``/``validate_*`` functions raise a ``ValidationError``
carrying the violated rule in ``reason``. Required-field checks always run
before content checks, and content checks run in a fixed order so the
reported message is deterministic.
"""

import math
import re
from enum import Enum
from typing import Any, List, Mapping, Tuple, Type, Union

from subtracker.handlers.utils.errors import ValidationError

PASSWORD_MIN_LENGTH = 8
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50

UPPERCASE_PATTERN = re.compile(r'[A-Z]')
LOWERCASE_PATTERN = re.compile(r'[a-z]')
DIGIT_PATTERN = re.compile(r'[0-9]')
SPECIAL_PATTERN = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

PASSWORD_TOO_SHORT = 'New password must be at least 8 characters long'
PASSWORD_CLASSES_MISSING = 'Password must contain uppercase, lowercase, number, and special character'
PASSWORD_UNCHANGED = 'New password must be different from current password'
INVALID_NAME = 'Name must be between 2 and 50 characters'
INVALID_AMOUNT = 'Amount must be a number'
INVALID_FIELD_TYPE = 'Invalid field type'

ExpectedType = Union[Type, Tuple[Type, ...]]


class Violation(str, Enum):
    """Reasons a validation rule can reject input."""
    MISSING_FIELD = "MISSING_FIELD"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    PASSWORD_UNCHANGED = "PASSWORD_UNCHANGED"
    INVALID_NAME = "INVALID_NAME"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_TYPE = "INVALID_TYPE"


def has_type(value: Any, expected: ExpectedType) -> bool:
    """Check ``value`` against ``expected``; booleans never satisfy a numeric type."""
    expected_types = expected if isinstance(expected, tuple) else (expected,)
    if isinstance(value, bool) and bool not in expected_types:
        return False
    return isinstance(value, expected_types)


def is_present(value: Any, expected: ExpectedType = str) -> bool:
    """
    Check that a required value was supplied with the expected type.

    ``None``, empty strings and values of another type are all treated as
    missing.
    """
    if value is None or not has_type(value, expected):
        return False
    return not (isinstance(value, str) and value == '')


def missing_fields(payload: Mapping[str, Any], required: Mapping[str, ExpectedType]) -> List[str]:
    return [name for name, expected in required.items() if not is_present(payload.get(name), expected)]


def require_fields(payload: Mapping[str, Any], required: Mapping[str, ExpectedType], message: str) -> None:
    """Raise ``ValidationError`` with ``message`` if any required field is missing."""
    missing = missing_fields(payload, required)
    if missing:
        raise ValidationError(error=message, reason=Violation.MISSING_FIELD.value, field=missing[0])


def require_field_types(payload: Mapping[str, Any], expected: Mapping[str, ExpectedType]) -> None:
    """
    Raise ``ValidationError`` if a supplied field has the wrong type.

    Absent and ``None`` fields are skipped.
    """
    for name, expected_type in expected.items():
        value = payload.get(name)
        if value is not None and not has_type(value, expected_type):
            raise ValidationError(
                error=INVALID_FIELD_TYPE,
                message=f'Field {name} has an invalid type',
                reason=Violation.INVALID_TYPE.value,
                field=name,
            )


def has_required_character_classes(password: str) -> bool:
    return all(pattern.search(password) for pattern in (
        UPPERCASE_PATTERN,
        LOWERCASE_PATTERN,
        DIGIT_PATTERN,
        SPECIAL_PATTERN,
    ))


def is_strong_password(password: str) -> bool:
    return len(password) >= PASSWORD_MIN_LENGTH and has_required_character_classes(password)


def is_valid_name(name: str) -> bool:
    return NAME_MIN_LENGTH <= len(name.strip()) <= NAME_MAX_LENGTH


def validate_password_change(old_password: Any, new_password: Any) -> None:
    """
    Validate a password change request.

    Order: both passwords present, new differs from old, minimum length,
    character classes. The unchanged check runs before the policy checks so
    reusing the current password is reported as such even when it is weak.
    """
    require_fields({'oldPassword': old_password}, {'oldPassword': str}, 'Current password is required')
    require_fields({'newPassword': new_password}, {'newPassword': str}, 'New password is required')

    if old_password == new_password:
        raise ValidationError(error=PASSWORD_UNCHANGED, reason=Violation.PASSWORD_UNCHANGED.value, field='newPassword')

    if len(new_password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(error=PASSWORD_TOO_SHORT, reason=Violation.WEAK_PASSWORD.value, field='newPassword')

    if not has_required_character_classes(new_password):
        raise ValidationError(error=PASSWORD_CLASSES_MISSING, reason=Violation.WEAK_PASSWORD.value, field='newPassword')


def validate_name(name: str) -> str:
    """Return the trimmed display name or raise if its length is out of range."""
    trimmed = name.strip()
    if not is_valid_name(trimmed):
        raise ValidationError(error=INVALID_NAME, reason=Violation.INVALID_NAME.value, field='name')
    return trimmed


def coerce_amount(value: Any) -> float:
    """
    Coerce a client supplied amount to float.

    Numbers and numeric strings are accepted as is, with no range check.
    """
    if isinstance(value, bool):
        raise ValidationError(error=INVALID_AMOUNT, reason=Violation.INVALID_AMOUNT.value, field='amount')
    try:
        amount = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(error=INVALID_AMOUNT, reason=Violation.INVALID_AMOUNT.value, field='amount') from e
    if not math.isfinite(amount):
        raise ValidationError(error=INVALID_AMOUNT, reason=Violation.INVALID_AMOUNT.value, field='amount')
    return amount
