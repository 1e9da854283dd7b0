"""Tests for validation helpers."""

from datetime import date

import pytest

from forgez.utils.validators import (
    calculate_age,
    clamp_limit,
    parse_csv,
    parse_iso_date,
    validate_email,
)


class TestValidateEmail:
    @pytest.mark.parametrize("email", ["ada@example.com", "a.b+c@mail.example.org"])
    def test_valid(self, email):
        """Well-formed addresses pass."""
        assert validate_email(email) is True

    @pytest.mark.parametrize("email", ["", "ada", "ada@", "@example.com", "a b@example.com"])
    def test_invalid(self, email):
        """Malformed addresses fail."""
        assert validate_email(email) is False


class TestDates:
    def test_parse_date_and_datetime(self):
        """Dates and datetimes parse to a date."""
        assert parse_iso_date("2010-05-17") == date(2010, 5, 17)
        assert parse_iso_date("2010-05-17T10:00:00Z") == date(2010, 5, 17)

    def test_parse_invalid(self):
        """Invalid dates raise."""
        with pytest.raises(ValueError):
            parse_iso_date("17/05/2010")

    def test_age_before_and_after_birthday(self):
        """Age counts completed years."""
        birthday = date(2010, 6, 15)
        assert calculate_age(birthday, today=date(2023, 6, 14)) == 12
        assert calculate_age(birthday, today=date(2023, 6, 15)) == 13


class TestQueryHelpers:
    def test_clamp_limit(self):
        """Limits fall back and cap."""
        assert clamp_limit(None, 20, 50) == 20
        assert clamp_limit(0, 20, 50) == 20
        assert clamp_limit(10, 20, 50) == 10
        assert clamp_limit(500, 20, 50) == 50

    def test_parse_csv(self):
        """Comma lists are split and trimmed."""
        assert parse_csv(None) == []
        assert parse_csv("FULL_TIME, ,INTERNSHIP") == ["FULL_TIME", "INTERNSHIP"]
