"""Tests for the description check that starts every gathering session."""

import pytest

from iterform.utils.validator import validate_input


class TestValidateInput:
    def test_stdin_trailing_newline_dropped(self):
        assert validate_input("Plan the Q4 offsite\n") == "Plan the Q4 offsite"

    def test_multi_line_description_kept_intact(self):
        text = "Conference talk.\n\nAudience: platform engineers."
        assert validate_input(f"  {text}  ") == text

    @pytest.mark.parametrize("blank", ["", "   ", "\n\t\n"])
    def test_blank_description_rejected(self, blank):
        with pytest.raises(ValueError, match="non-empty"):
            validate_input(blank)

    @pytest.mark.parametrize("value", [None, 42, ["talk"]])
    def test_non_text_rejected(self, value):
        with pytest.raises(ValueError):
            validate_input(value)
