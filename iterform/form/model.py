"""Form model: questions, configuration, per-form state and input events."""

from dataclasses import dataclass
from enum import Enum


class FormContractError(ValueError):
    """Raised when the caller drives the form outside its contract."""


class Phase(Enum):
    ANSWERING = "answering"
    ASKING_CONTINUATION = "asking_continuation"
    COMPLETE = "complete"


class Outcome(Enum):
    MORE_REQUESTED = "more_requested"  # soft terminal: caller supplies another round
    COMPLETE = "complete"  # hard terminal: budget spent or user declined
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Question:
    text: str
    help_text: str = ""
    round_index: int = 0


@dataclass(frozen=True)
class FormConfig:
    """Round budget and the prompts shown between rounds."""

    max_rounds: int
    round_prompt: str = ""
    continuation_prompt: str = "Do you want to provide more information?"

    def __post_init__(self):
        if not isinstance(self.max_rounds, int) or self.max_rounds < 1:
            raise FormContractError(
                f"max_rounds must be a positive integer, got {self.max_rounds!r}."
            )


@dataclass
class FormState:
    cursor: int = 0  # index of the next unanswered question
    round: int = 0
    input: str = ""
    error: str | None = None
    done: bool = False
    needs_more: bool = False  # user asked for another round
    asking_more: bool = False  # continuation prompt is showing
    cancelled: bool = False


# --- Input events ---


@dataclass(frozen=True)
class KeyInput:
    text: str


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class Resize:
    width: int


FormEvent = KeyInput | Backspace | Submit | Cancel | Resize
