"""Scripted question source: rounds of questions read from a YAML file.

File format:

    - questions:
        - question: "Who is the audience?"
          help_text: "e.g. engineers, executives"
      rationale: "Audience drives tone."
      confidence_score: 0.3
      needs_more_info: true
    - questions:
        - question: "How long is the talk?"
      needs_more_info: false
"""

from pathlib import Path

import yaml

from iterform.sources.base import Preparation, preparation_from_dict


def _validate_rounds(rounds) -> list[dict]:
    if rounds is None:
        return []
    if not isinstance(rounds, list):
        raise ValueError("Question file must contain a list of rounds.")
    for r, round_data in enumerate(rounds):
        if not isinstance(round_data, dict):
            raise ValueError(f"Round {r} must be a mapping.")
        for i, question in enumerate(round_data.get("questions") or []):
            if not isinstance(question, dict) or not str(question.get("question", "")).strip():
                raise ValueError(f"Round {r}, question {i} missing required field 'question'.")
    return rounds


class ScriptedQuestionSource:
    """Replays a fixed list of rounds; ignores the description and history."""

    def __init__(self, rounds: list[dict]):
        self.rounds = _validate_rounds(rounds)

    @classmethod
    def from_file(cls, path: str | Path) -> "ScriptedQuestionSource":
        return cls(yaml.safe_load(Path(path).read_text(encoding="utf-8")))

    def prepare(self, description: str, round_index: int, qa_history: list[str]) -> Preparation:
        if round_index >= len(self.rounds):
            return Preparation()
        data = dict(self.rounds[round_index])
        data["questions"] = data.get("questions") or []
        return preparation_from_dict(data)
