"""Gathering state passed through the workflow graph."""

from typing import Any, Literal, TypedDict


class GatherState(TypedDict):
    description: str  # What the user wants information gathered about. Immutable after init.
    round: int  # Current round. Starts at 0.
    qa_history: list[str]  # "Q: ...\nA: ..." pairs across all rounds, in order.
    status: Literal["in_progress", "complete", "max_rounds_reached", "cancelled"]
    form: Any  # IterativeForm shared by every round of the session.
    preparation: Any  # Preparation returned by the question source for this round.
