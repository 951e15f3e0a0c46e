"""
Competitor name validation.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from config import messages
from models.exceptions import ValidationError
from agents.orchestrator import validate_request
from utils.validation import validate_competitor, validate_competitors, clean_competitors


class TestValidateCompetitor:
    @pytest.mark.parametrize("name", ["acme.com", "Globex Corp", "initech-2", "abc"])
    def test_accepts(self, name):
        assert validate_competitor(name) == ""

    def test_empty_slot_is_fine(self):
        assert validate_competitor("") == ""

    def test_too_short(self):
        assert validate_competitor("ab") == messages.NAME_TOO_SHORT

    @pytest.mark.parametrize("name", ["acme!", "ação", "a/b/c", "foo@bar"])
    def test_invalid_characters(self, name):
        assert validate_competitor(name) == messages.NAME_INVALID_CHARS

    def test_list(self):
        assert validate_competitors(["acme", "", "ab"]) == ["", "", messages.NAME_TOO_SHORT]


class TestCleanCompetitors:
    def test_trims_and_drops_blanks(self):
        assert clean_competitors(["  Acme ", "", "   ", "Globex"]) == ["Acme", "Globex"]


class TestValidateRequest:
    def test_returns_clean_names(self):
        assert validate_request(["Acme", "", " Globex "]) == ["Acme", "Globex"]

    def test_all_blank(self):
        with pytest.raises(ValidationError) as exc:
            validate_request(["", "  ", ""])
        assert str(exc.value) == messages.EMPTY_COMPETITORS

    def test_field_errors_line_up_with_slots(self):
        with pytest.raises(ValidationError) as exc:
            validate_request(["Acme", "ab", "x!y"])
        assert str(exc.value) == messages.FORM_HAS_ERRORS
        assert exc.value.field_errors == ["", messages.NAME_TOO_SHORT, messages.NAME_INVALID_CHARS]
