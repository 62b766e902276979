"""
Tests for onboarding field kinds.
"""

import pytest

from onboarding.fields import (
    ConstrainedDate,
    FieldResult,
    OptionalText,
    RequiredText,
    TerminalText,
)


class TestRequiredText:

    def test_trims_and_accepts(self):
        assert RequiredText().validate("  Alice \n") == FieldResult.accept("Alice")

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_rejects_blank(self, text):
        assert RequiredText().validate(text).accepted is False

    def test_does_not_complete(self):
        assert RequiredText.completes is False


class TestOptionalText:

    def test_keeps_text(self):
        assert OptionalText().validate(" Shiba Inu ").value == "Shiba Inu"

    def test_blank_is_unknown_marker(self):
        result = OptionalText().validate("  ")
        assert result.accepted is True
        assert result.value is None


class TestConstrainedDate:

    def test_iso_date_stored_raw(self):
        result = ConstrainedDate().validate(" 2020-05-01 ")
        assert result.accepted is True
        assert result.value == "2020-05-01"

    @pytest.mark.parametrize("text", ["unknown", "UNKNOWN", " Unknown "])
    def test_unknown_is_none(self, text):
        result = ConstrainedDate().validate(text)
        assert result.accepted is True
        assert result.value is None

    @pytest.mark.parametrize("text", [
        "may 1st",
        "2020/05/01",
        "20-05-01",
        "2020-5-1",
        "2023-02-30",  # matches the pattern, not a real date
        "",
    ])
    def test_rejects_non_dates(self, text):
        assert ConstrainedDate().validate(text).accepted is False


class TestTerminalText:

    def test_completes(self):
        assert TerminalText.completes is True

    def test_validates_like_required_text(self):
        assert TerminalText().validate("likes chicken").value == "likes chicken"
        assert TerminalText().validate(" ").accepted is False
