"""Shared fixtures for the iterform test suite."""

import pytest
from unittest.mock import patch

from iterform.form.machine import IterativeForm
from iterform.form.model import FormConfig, Question, Submit, KeyInput


@pytest.fixture
def answer():
    """Type text into a form and submit it."""

    def _answer(form, text):
        if text:
            form.handle(KeyInput(text))
        form.handle(Submit())

    return _answer


@pytest.fixture
def make_form():
    """Factory for a form with round-0 questions already added."""

    def _make(questions=("A?", "B?"), max_rounds=2, **config_kwargs):
        config = FormConfig(max_rounds=max_rounds, **config_kwargs)
        form = IterativeForm("Test Form", config)
        form.add_questions([Question(q, "", 0) for q in questions])
        form.open_round()
        return form

    return _make


@pytest.fixture
def two_round_rounds():
    """Scripted source rounds: two questions, then one question."""
    return [
        {
            "questions": [
                {"question": "Who is the audience?", "help_text": "e.g. engineers"},
                {"question": "How long is the talk?"},
            ],
            "rationale": "Audience and length drive the outline.",
            "confidence_score": 0.3,
            "confidence_reasoning": "Little is known yet.",
            "needs_more_info": True,
        },
        {
            "questions": [{"question": "Any topics to avoid?"}],
            "rationale": "Scope check.",
            "confidence_score": 0.7,
            "confidence_reasoning": "Mostly clear.",
            "needs_more_info": True,
        },
    ]


@pytest.fixture
def mock_config(tmp_path):
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "max_rounds": 3,
        "form_title": "Test Gathering",
        "round_prompt": "Gathering context...",
        "continuation_prompt": "More?",
        "question_model": "claude-test",
        "llm_max_retries": 2,
        "output_path": str(tmp_path / "output" / "answers.md"),
    }
    with patch("iterform.config._config", test_config):
        yield test_config
