"""Question source contract: what the decision service returns for each round."""

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class PreparedQuestion:
    question: str
    help_text: str = ""


@dataclass
class Preparation:
    questions: list[PreparedQuestion] = field(default_factory=list)
    rationale: str = ""
    confidence_score: float = 0.0
    confidence_reasoning: str = ""
    needs_more_info: bool = False


class QuestionSource(Protocol):
    def prepare(self, description: str, round_index: int, qa_history: list[str]) -> Preparation:
        """Return the questions for one round and whether more rounds are wanted."""
        ...


def preparation_from_dict(data: dict) -> Preparation:
    """Build a Preparation from an already validated dict."""
    return Preparation(
        questions=[
            PreparedQuestion(q["question"], q.get("help_text") or "")
            for q in data.get("questions", [])
        ],
        rationale=data.get("rationale") or "",
        confidence_score=float(data.get("confidence_score") or 0.0),
        confidence_reasoning=data.get("confidence_reasoning") or "",
        needs_more_info=bool(data.get("needs_more_info", False)),
    )
