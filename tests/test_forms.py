"""
tests/test_forms.py -- Unit tests for auth/forms.py.

Covers:
  - Coercion: missing keys and None become "", non-strings go through str()
  - Sign-in rules: every failing check is reported, in order, per field
  - Email shape: plain ASCII dot-atom addresses with a 2+ letter TLD, including
    special-use domains like .local and .test
  - Password length is measured in UTF-16 code units
  - Sign-up rules: length, confirmation, and the cross-field match check
  - The match check only runs once every field passes on its own
  - Errors are keyed by the form's field names (confirmPassword, not confirm_password)
"""

from __future__ import annotations

import pytest

from auth.forms import SignInForm, SignUpForm, coerce_form, parse_form


class TestCoerceForm:
    def test_missing_and_none_become_empty_strings(self) -> None:
        assert coerce_form({"email": None}, ["email", "password"]) == {"email": "", "password": ""}

    def test_non_string_values_are_stringified(self) -> None:
        assert coerce_form({"password": 123456}, ["password"]) == {"password": "123456"}

    def test_none_form_is_treated_as_empty(self) -> None:
        assert coerce_form(None, ["email"]) == {"email": ""}

    def test_unexpected_keys_are_dropped(self) -> None:
        assert coerce_form({"email": "a@example.com", "admin": "yes"}, ["email"]) == {"email": "a@example.com"}


class TestSignInForm:
    def test_valid_input_parses(self) -> None:
        data, errors = parse_form(SignInForm, {"email": "ada@example.com", "password": "pw"})
        assert errors is None
        assert data.email == "ada@example.com"
        assert data.password == "pw"

    def test_empty_submission_reports_every_field(self) -> None:
        data, errors = parse_form(SignInForm, {})
        assert data is None
        assert errors == {
            "email": ["Email is required", "Invalid email format"],
            "password": ["Password is required"],
        }

    def test_malformed_email_only(self) -> None:
        _, errors = parse_form(SignInForm, {"email": "not-an-email", "password": "pw"})
        assert errors == {"email": ["Invalid email format"]}

    def test_domain_without_dot_is_rejected(self) -> None:
        _, errors = parse_form(SignInForm, {"email": "ada@localhost", "password": "pw"})
        assert errors == {"email": ["Invalid email format"]}

    @pytest.mark.parametrize(
        "email",
        [
            "dev@company.local",
            "qa@app.test",
            "x@sub.example.onion",
            "o'brien+tag@example.co.uk",
            "First.Last@Example.COM",
            "a-b_c@my-host.io",
        ],
    )
    def test_plausible_addresses_are_accepted(self, email) -> None:
        _, errors = parse_form(SignInForm, {"email": email, "password": "pw"})
        assert errors is None

    @pytest.mark.parametrize(
        "email",
        [
            "a!b@example.com",
            "üser@example.com",
            "a@b.c",
            ".ada@example.com",
            "ada..lovelace@example.com",
            "ada.@example.com",
            "ada@-example.com",
            "ada@example.c0m",
            "ada@example.com\n",
            "ada lovelace@example.com",
        ],
    )
    def test_implausible_addresses_are_rejected(self, email) -> None:
        _, errors = parse_form(SignInForm, {"email": email, "password": "pw"})
        assert errors == {"email": ["Invalid email format"]}

    def test_empty_password_only(self) -> None:
        _, errors = parse_form(SignInForm, {"email": "ada@example.com", "password": ""})
        assert errors == {"password": ["Password is required"]}

    def test_single_character_password_is_accepted(self) -> None:
        """Sign-in imposes no length rule beyond non-empty."""
        _, errors = parse_form(SignInForm, {"email": "ada@example.com", "password": "x"})
        assert errors is None


class TestSignUpForm:
    VALID = {"email": "new@example.com", "password": "secret1", "confirmPassword": "secret1"}

    def test_valid_input_parses(self) -> None:
        data, errors = parse_form(SignUpForm, self.VALID)
        assert errors is None
        assert data.confirm_password == "secret1"

    def test_short_password(self) -> None:
        _, errors = parse_form(SignUpForm, {**self.VALID, "password": "12345", "confirmPassword": "12345"})
        assert errors == {"password": ["Password must be at least 6 characters"]}

    def test_six_characters_is_enough(self) -> None:
        _, errors = parse_form(SignUpForm, {**self.VALID, "password": "123456", "confirmPassword": "123456"})
        assert errors is None

    def test_missing_confirmation(self) -> None:
        _, errors = parse_form(SignUpForm, {**self.VALID, "confirmPassword": ""})
        assert errors == {"confirmPassword": ["Please confirm your password"]}

    def test_mismatch_is_attached_to_confirm_password(self) -> None:
        _, errors = parse_form(SignUpForm, {**self.VALID, "confirmPassword": "secret2"})
        assert errors == {"confirmPassword": ["Passwords don't match"]}

    def test_mismatch_not_reported_while_other_fields_fail(self) -> None:
        """The match check runs only after every field validator passed."""
        _, errors = parse_form(SignUpForm, {"email": "bad", "password": "secret1", "confirmPassword": "other1"})
        assert errors == {"email": ["Invalid email format"]}

    def test_empty_submission(self) -> None:
        _, errors = parse_form(SignUpForm, {})
        assert errors == {
            "email": ["Email is required", "Invalid email format"],
            "password": ["Password must be at least 6 characters"],
            "confirmPassword": ["Please confirm your password"],
        }

    def test_snake_case_key_is_not_the_form_field(self) -> None:
        """Forms submit confirmPassword; confirm_password is ignored as an unknown key."""
        form = {"email": "new@example.com", "password": "secret1", "confirm_password": "secret1"}
        _, errors = parse_form(SignUpForm, form)
        assert errors == {"confirmPassword": ["Please confirm your password"]}

    def test_length_counts_utf16_code_units(self) -> None:
        """Each emoji is two UTF-16 code units, so three of them reach the minimum."""
        emoji = "\U0001f600" * 3
        _, errors = parse_form(SignUpForm, {**self.VALID, "password": emoji, "confirmPassword": emoji})
        assert errors is None

    def test_five_code_units_is_too_short(self) -> None:
        short = "abc\U0001f600"
        _, errors = parse_form(SignUpForm, {**self.VALID, "password": short, "confirmPassword": short})
        assert errors == {"password": ["Password must be at least 6 characters"]}
