"""
Unit tests for the validation rules.
"""

import pytest

from subtracker.handlers.utils.errors import ValidationError
from subtracker.logic.validation import (
    Violation,
    coerce_amount,
    is_present,
    is_strong_password,
    is_valid_name,
    missing_fields,
    require_field_types,
    require_fields,
    validate_name,
    validate_password_change,
)


class TestPasswordPolicy:
    """Tests for the password strength predicate."""

    @pytest.mark.parametrize("password", [
        "Abc12345!",
        "Zz9@aaaa",
        'Passw0rd"',
        "Longer|Password1",
    ])
    def test_strong_passwords(self, password):
        assert is_strong_password(password)

    @pytest.mark.parametrize("password", [
        "Ab1!",             # too short
        "abc12345!",        # no uppercase
        "ABC12345!",        # no lowercase
        "Abcdefgh!",        # no digit
        "Abc123456",        # no special character
        "Abc12345-",        # '-' is not in the special set
        "Abc12345_",
    ])
    def test_weak_passwords(self, password):
        assert not is_strong_password(password)

    def test_non_ascii_letters_do_not_count(self):
        assert not is_strong_password("ÀBC12345!")


class TestNamePolicy:
    """Tests for display name validation."""

    @pytest.mark.parametrize("name", ["Al", "  Al  ", "A" * 50])
    def test_valid_names(self, name):
        assert is_valid_name(name)

    @pytest.mark.parametrize("name", ["A", "  A ", "", "A" * 51])
    def test_invalid_names(self, name):
        assert not is_valid_name(name)

    def test_validate_name_returns_trimmed_value(self):
        assert validate_name("  Ann Lee ") == "Ann Lee"

    def test_validate_name_rejects_short_name(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_name(" x ")

        assert exc_info.value.error == "Name must be between 2 and 50 characters"
        assert exc_info.value.reason == Violation.INVALID_NAME.value


class TestRequiredFields:
    """Tests for required field checks."""

    def test_missing_none_and_empty_values(self):
        payload = {"email": "", "password": None}

        assert missing_fields(payload, {"email": str, "password": str, "name": str}) == [
            "email", "password", "name",
        ]

    def test_wrong_type_counts_as_missing(self):
        assert not is_present(12, str)
        assert not is_present(True, (int, float))

    def test_zero_amount_is_present(self):
        assert is_present(0, (int, float, str))

    def test_require_fields_raises_with_message(self):
        with pytest.raises(ValidationError) as exc_info:
            require_fields({"email": "a@x.com"}, {"email": str, "password": str}, "Email and password are required")

        error = exc_info.value
        assert error.status_code == 400
        assert error.error == "Email and password are required"
        assert error.reason == Violation.MISSING_FIELD.value
        assert error.field == "password"


class TestFieldTypes:
    """Tests for type checks on optional fields."""

    def test_absent_and_none_are_skipped(self):
        require_field_types({"name": None}, {"name": str, "is_active": bool})

    def test_empty_string_is_accepted(self):
        require_field_types({"description": ""}, {"description": str})

    def test_wrong_type_raises(self):
        with pytest.raises(ValidationError) as exc_info:
            require_field_types({"name": 123}, {"name": str})

        error = exc_info.value
        assert error.status_code == 400
        assert error.error == "Invalid field type"
        assert error.reason == Violation.INVALID_TYPE.value
        assert error.field == "name"

    def test_bool_is_not_a_number(self):
        with pytest.raises(ValidationError):
            require_field_types({"amount": False}, {"amount": (int, float, str)})


class TestPasswordChange:
    """Tests for the ordered password change checks."""

    def test_valid_change(self):
        validate_password_change("Abc12345!", "Xyz98765?")

    def test_missing_current_password(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_password_change(None, "Xyz98765?")
        assert exc_info.value.error == "Current password is required"

    def test_missing_new_password(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_password_change("Abc12345!", "")
        assert exc_info.value.error == "New password is required"

    @pytest.mark.parametrize("password", ["Abc12345!", "weak", "abc"])
    def test_unchanged_password_wins_over_policy(self, password):
        with pytest.raises(ValidationError) as exc_info:
            validate_password_change(password, password)

        assert exc_info.value.error == "New password must be different from current password"
        assert exc_info.value.reason == Violation.PASSWORD_UNCHANGED.value

    def test_comparison_is_case_sensitive(self):
        validate_password_change("abc12345!X", "ABC12345!x")

    def test_short_password(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_password_change("Abc12345!", "Ab1!")

        assert exc_info.value.error == "New password must be at least 8 characters long"
        assert exc_info.value.reason == Violation.WEAK_PASSWORD.value

    def test_missing_character_class(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_password_change("Abc12345!", "abcdefgh1!")

        assert exc_info.value.error == "Password must contain uppercase, lowercase, number, and special character"


class TestCoerceAmount:
    """Tests for amount coercion."""

    @pytest.mark.parametrize("value,expected", [
        (12.5, 12.5),
        (10, 10.0),
        ("15.49", 15.49),
        ("-3", -3.0),
        (0, 0.0),
    ])
    def test_numeric_values(self, value, expected):
        assert coerce_amount(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", None, True, [1], "nan", "inf"])
    def test_non_numeric_values(self, value):
        with pytest.raises(ValidationError) as exc_info:
            coerce_amount(value)

        assert exc_info.value.error == "Amount must be a number"
