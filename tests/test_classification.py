#!/usr/bin/env python3
"""Tests for Classification enum."""

import pytest
from fueling import Classification


class TestClassification:
    """Tests for Classification enum."""

    def test_values(self):
        """Enum values are the tokens used in files."""
        assert Classification.FULL.value == "full"
        assert Classification.PARTIAL.value == "partial"
        assert Classification.MISSED.value == "missed"

    def test_is_partial(self):
        assert Classification.PARTIAL.is_partial
        assert not Classification.FULL.is_partial
        assert not Classification.MISSED.is_partial


class TestFromToken:
    """Tests for Classification.from_token parsing."""

    def test_enum_names(self):
        assert Classification.from_token("full") == Classification.FULL
        assert Classification.from_token("Partial") == Classification.PARTIAL
        assert Classification.from_token(" MISSED ") == Classification.MISSED

    def test_legacy_booleans(self):
        """isPartialFillUp=true means partial, false means full."""
        assert Classification.from_token("true") == Classification.PARTIAL
        assert Classification.from_token("TRUE") == Classification.PARTIAL
        assert Classification.from_token("false") == Classification.FULL

    def test_missing_means_full(self):
        assert Classification.from_token(None) == Classification.FULL
        assert Classification.from_token("") == Classification.FULL

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            Classification.from_token("half")

    def test_is_token(self):
        assert Classification.is_token("false")
        assert Classification.is_token("Missed")
        assert not Classification.is_token("12.5")
        assert not Classification.is_token("")
