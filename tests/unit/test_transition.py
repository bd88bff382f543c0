"""Tests for the transition codec."""

from __future__ import annotations

from datetime import date

from s3_ilm_operator.lifecycle.models import TransitionDate, TransitionDays, TransitionInput
from s3_ilm_operator.lifecycle.transition import format_transition, parse_transition


class TestParseTransition:
    """Test cases for parse_transition."""

    def test_empty_list(self):
        """Test that no transitions yield the empty variant."""
        assert parse_transition([]) is None

    def test_days(self):
        """Test a day-based transition."""
        result = parse_transition([TransitionInput(days="30d", storage_class="GLACIER")])
        assert result == TransitionDays(30, "GLACIER")

    def test_date(self):
        """Test a date-based transition."""
        result = parse_transition([TransitionInput(date="2025-01-01", storage_class="STANDARD_IA")])
        assert result == TransitionDate(date(2025, 1, 1), "STANDARD_IA")

    def test_days_take_precedence_over_date(self):
        """Test that days win when both days and date are given."""
        result = parse_transition([TransitionInput(days="10d", date="2025-01-01", storage_class="GLACIER")])
        assert result == TransitionDays(10, "GLACIER")

    def test_invalid_days_falls_back_to_date(self):
        """Test that an unparseable day count falls back to the date."""
        result = parse_transition([TransitionInput(days="ten", date="2025-01-01", storage_class="GLACIER")])
        assert result == TransitionDate(date(2025, 1, 1), "GLACIER")

    def test_unparseable_collapses_to_none(self):
        """Test that a transition with neither days nor date collapses to no transition."""
        assert parse_transition([TransitionInput(days="soon", storage_class="GLACIER")]) is None
        assert parse_transition([TransitionInput(storage_class="GLACIER")]) is None


class TestFormatTransition:
    """Test cases for format_transition."""

    def test_none(self):
        """Test that the empty variant formats as an empty list."""
        assert format_transition(None) == []

    def test_days(self):
        """Test formatting a day-based transition."""
        result = format_transition(TransitionDays(90, "GLACIER"))
        assert result == [TransitionInput(days="90d", storage_class="GLACIER")]

    def test_date(self):
        """Test formatting a date-based transition."""
        result = format_transition(TransitionDate(date(2030, 6, 15), "DEEP_ARCHIVE"))
        assert result == [TransitionInput(date="2030-06-15", storage_class="DEEP_ARCHIVE")]

    def test_round_trip_is_stable(self):
        """Test encode/decode/encode stability."""
        transition = parse_transition([TransitionInput(days="45d", storage_class="COLD")])
        assert parse_transition(format_transition(transition)) == transition

    def test_to_dict_shape(self):
        """Test the wire shape of a decoded transition."""
        result = format_transition(TransitionDays(7, "GLACIER"))
        assert [t.to_dict() for t in result] == [{"days": "7d", "storage_class": "GLACIER"}]
