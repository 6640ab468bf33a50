"""
Credential validator tests.

Pure functions: no fixtures needed.
"""

import pytest

from superhub.models.auth_models import LoginDraft, PasswordResetRequest, RegistrationDraft
from superhub.validators import (
    normalize_email,
    password_strength,
    validate_confirm_password,
    validate_email,
    validate_forgot_password,
    validate_login,
    validate_name,
    validate_password_reset,
    validate_registration,
)


class TestValidateName:
    def test_empty_is_invalid_without_message(self):
        result = validate_name("")
        assert not result.is_valid
        assert result.message == ""

    @pytest.mark.parametrize(
        "name, message",
        [
            ("J", "Name must be at least 2 characters"),
            ("A" * 51, "Name must be less than 50 characters"),
            ("Jane 2", "Name cannot contain numbers"),
            ("Jane_Doe", "Name can only contain letters, spaces, hyphens, and apostrophes"),
            ("-Jane", "Name must start with a letter"),
        ],
    )
    def test_first_failing_rule_wins(self, name, message):
        result = validate_name(name)
        assert not result.is_valid
        assert result.message == message

    def test_valid_names(self):
        for name in ("Jane Doe", "Mary-Jane O'Neil", "Al"):
            assert validate_name(name).is_valid

    def test_length_is_measured_after_trimming(self):
        assert validate_name("  J  ").message == "Name must be at least 2 characters"


class TestValidateEmail:
    def test_malformed_address(self):
        result = validate_email("not-an-email")
        assert not result.is_valid
        assert result.message == "Please enter a valid email address"

    def test_domain_typo_offers_suggestion(self):
        result = validate_email("jane@gmial.com")
        assert not result.is_valid
        assert result.message == "Did you mean @gmail.com?"
        assert result.suggestion == "jane@gmail.com"

    def test_disposable_domain_is_rejected(self):
        result = validate_email("jane@mailinator.com")
        assert not result.is_valid
        assert result.message == "Please use a permanent email address"

    def test_short_tld_is_rejected(self):
        assert validate_email("jane@example.c").message == "Please enter a valid email domain"

    def test_input_is_normalised_before_checks(self):
        result = validate_email("  Jane@Example.COM ")
        assert result.is_valid
        assert result.suggestion is None

    def test_normalize_email(self):
        assert normalize_email("  Jane@Example.COM ") == "jane@example.com"


class TestPasswordStrength:
    def test_empty_password_has_empty_report(self):
        strength = password_strength("")
        assert strength.score == 0
        assert strength.requirements == ()
        assert not strength.meets_required

    def test_required_checks_only(self):
        strength = password_strength("Abcdefg1")
        assert strength.score == 80
        assert strength.label == "Strong"
        assert strength.meets_required

    def test_all_checks_cap_at_100(self):
        strength = password_strength("Abcdefghijk1!")
        assert strength.score == 100
        assert all(req.met for req in strength.requirements)

    def test_bonus_checks_do_not_block(self):
        strength = password_strength("Abcdefg1")
        bonus = [req for req in strength.requirements if not req.required]
        assert len(bonus) == 2
        assert not any(req.met for req in bonus)
        assert strength.unmet_required == []

    @pytest.mark.parametrize(
        "password, label",
        [("abc", "Weak"), ("abcdefgh", "Fair"), ("Abcdefgh", "Good")],
    )
    def test_labels(self, password, label):
        assert password_strength(password).label == label


class TestConfirmPassword:
    def test_untouched_confirmation(self):
        result = validate_confirm_password("Secret123", "")
        assert not result.is_valid
        assert result.message == ""

    def test_mismatch_and_match(self):
        assert validate_confirm_password("Secret123", "Secret124").message == "Passwords do not match"
        assert validate_confirm_password("Secret123", "Secret123").message == "Passwords match"


class TestFormValidation:
    def test_registration_collects_every_field(self):
        errors = validate_registration(RegistrationDraft())
        assert errors == {
            "name": "Name is required",
            "email": "Email is required",
            "password": "Password is required",
            "confirm_password": "Please confirm your password",
        }

    def test_registration_reports_unmet_requirements(self):
        errors = validate_registration(RegistrationDraft(
            name="Jane Doe", email="jane@example.com",
            password="abcdefgh", confirm_password="abcdefgh",
        ))
        assert set(errors) == {"password"}
        assert "contains uppercase letter" in errors["password"]
        assert "contains a number" in errors["password"]

    def test_registration_mismatch(self):
        errors = validate_registration(RegistrationDraft(
            name="Jane Doe", email="jane@example.com",
            password="Secret123", confirm_password="Secret124",
        ))
        assert errors == {"confirm_password": "Passwords do not match"}

    def test_login_checks_presence_and_shape(self):
        assert validate_login(LoginDraft()) == {
            "email": "Email is required",
            "password": "Password is required",
        }
        assert validate_login(LoginDraft(email="jane", password="x")) == {
            "email": "Invalid email",
        }

    def test_forgot_password(self):
        assert validate_forgot_password("") == {"email": "Email is required"}
        assert validate_forgot_password("nope") == {"email": "Please enter a valid email address"}
        assert validate_forgot_password("jane@example.com") == {}

    def test_password_reset(self):
        weak = PasswordResetRequest(token="t", new_password="abc", confirm_password="abc")
        assert validate_password_reset(weak) == {"password": "Password does not meet requirements"}
        mismatch = PasswordResetRequest(
            token="t", new_password="Secret123", confirm_password="Secret12",
        )
        assert validate_password_reset(mismatch) == {"confirm_password": "Passwords do not match"}
        good = PasswordResetRequest(
            token="t", new_password="Secret123", confirm_password="Secret123",
        )
        assert validate_password_reset(good) == {}
