"""LLM question source: asks a Claude model for the next round of questions.

Required reply schema:
{
  "questions": [{"question": "string", "help_text": "string"}],
  "rationale": "string",
  "confidence_score": "number in [0, 1]",
  "confidence_reasoning": "string",
  "needs_more_info": "boolean"
}
"""

import json
import sys

from langchain_anthropic import ChatAnthropic

from iterform.config import get_config
from iterform.sources.base import Preparation, preparation_from_dict
from iterform.utils.parsing import invoke_with_retry, strip_fences

MAX_QUESTIONS_PER_ROUND = 5

SYSTEM_PROMPT = """\
You collect the context needed to complete a task described by the user. Each round \
you may ask a few short, specific questions. Do not repeat questions that were already \
answered.

You MUST respond with valid JSON matching this exact schema:
{
  "questions": [{"question": "string", "help_text": "string (may be empty)"}],
  "rationale": "string: why these questions matter",
  "confidence_score": number between 0 and 1,
  "confidence_reasoning": "string",
  "needs_more_info": true or false
}

Rules:
- Ask at most 5 questions per round.
- Set needs_more_info to false and return an empty questions array once the answers \
so far are enough to do the task.
- Respond ONLY with the JSON object. No markdown fences, no commentary.
"""


def _build_user_prompt(description: str, round_index: int, qa_history: list[str]) -> str:
    parts = [f"## Task\n{description}", f"\n## Round\n{round_index + 1}"]
    if qa_history:
        parts.append("\n## Answers So Far")
        parts.extend(f"\n{qa}" for qa in qa_history)
    return "\n".join(parts)


def _validate_response(data: dict) -> None:
    """Validate and normalize a question-source reply."""
    if not isinstance(data, dict):
        raise ValueError("Question source reply must be a JSON object.")
    if "questions" not in data:
        raise ValueError("Question source reply missing 'questions' field.")
    if not isinstance(data["questions"], list):
        raise ValueError("'questions' must be a list.")

    for i, question in enumerate(data["questions"]):
        if not isinstance(question, dict) or not str(question.get("question", "")).strip():
            raise ValueError(f"Question {i} missing required field 'question'.")
        if "help_text" not in question or question["help_text"] is None:
            question["help_text"] = ""

    if len(data["questions"]) > MAX_QUESTIONS_PER_ROUND:
        print(
            f"[iterform] Warning: {len(data['questions'])} questions returned "
            f"(expected at most {MAX_QUESTIONS_PER_ROUND}). Keeping as-is.",
            file=sys.stderr,
        )

    score = data.get("confidence_score", 0.0)
    try:
        score = float(score)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid confidence_score {score!r}.")
    if not 0.0 <= score <= 1.0:
        print(
            f"[iterform] Warning: confidence_score {score} outside [0, 1]. Clamping.",
            file=sys.stderr,
        )
        score = min(max(score, 0.0), 1.0)
    data["confidence_score"] = score

    if "needs_more_info" not in data:
        data["needs_more_info"] = bool(data["questions"])
    if "rationale" not in data:
        data["rationale"] = ""
    if "confidence_reasoning" not in data:
        data["confidence_reasoning"] = ""


class LLMQuestionSource:
    """Question source backed by the configured Anthropic model."""

    def __init__(self, model_name: str | None = None, max_retries: int | None = None):
        config = get_config()
        self.model_name = model_name or config["question_model"]
        self.max_retries = max_retries if max_retries is not None else config.get("llm_max_retries", 3)

    def prepare(self, description: str, round_index: int, qa_history: list[str]) -> Preparation:
        llm = ChatAnthropic(model=self.model_name, temperature=0)
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": _build_user_prompt(description, round_index, qa_history)},
        ]

        response = invoke_with_retry(llm, messages, self.max_retries, label=self.model_name)
        try:
            data = json.loads(strip_fences(response.content))
            _validate_response(data)
        except (json.JSONDecodeError, ValueError):
            # Re-prompt once before raising
            messages.append({"role": "assistant", "content": response.content})
            messages.append({
                "role": "user",
                "content": (
                    "Your response did not match the required JSON schema. "
                    "Please try again with ONLY the raw JSON object."
                ),
            })
            response = invoke_with_retry(llm, messages, self.max_retries, label=self.model_name)
            data = json.loads(strip_fences(response.content))
            _validate_response(data)

        return preparation_from_dict(data)
