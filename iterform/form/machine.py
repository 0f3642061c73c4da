"""Iterative form state machine.

One question is shown at a time. Answers are appended to a response log that
stays positionally aligned with the question list (responses[k] answers
questions[k]). When a round runs out of questions the form either asks the
continuation question or, on the last allowed round, completes.

The caller owns the question list's growth: it appends a round's questions,
drives the form until it reaches a terminal state, then reads the outcome and
either calls advance_round() for another round or stops.
"""

from iterform.form.model import (
    Backspace,
    Cancel,
    FormConfig,
    FormContractError,
    FormEvent,
    FormState,
    KeyInput,
    Outcome,
    Phase,
    Question,
    Resize,
    Submit,
)

ANSWER_REQUIRED = "please provide an answer"
YES_OR_NO = "please answer 'yes' or 'no'"

YES_TOKENS = {"yes", "y"}
NO_TOKENS = {"no", "n"}

DEFAULT_WIDTH = 80


class IterativeForm:
    def __init__(self, title: str, config: FormConfig):
        self.title = title
        self.config = config
        self.questions: list[Question] = []
        self._responses: list[str] = []
        self.state = FormState()
        # Display width only; never part of FormState.
        self.width = DEFAULT_WIDTH

    # --- Caller operations ---

    def add_questions(self, questions: list[Question]) -> None:
        """Append a batch of questions for the current or the next round.

        Round indices must be non-decreasing across the list and may only
        address the current round or the one right after it.
        """
        last_round = self.questions[-1].round_index if self.questions else 0
        current = self.state.round
        for q in questions:
            if q.round_index < last_round:
                raise FormContractError(
                    f"Question round {q.round_index} is lower than the previous "
                    f"question's round {last_round}."
                )
            if not current <= q.round_index <= current + 1:
                raise FormContractError(
                    f"Question round {q.round_index} is not addressable from round "
                    f"{current} (expected {current} or {current + 1})."
                )
            if q.round_index == current and self.phase is not Phase.ANSWERING:
                raise FormContractError(
                    f"Round {current} is already finished; questions can only be "
                    f"added for round {current + 1}."
                )
            if q.round_index >= self.config.max_rounds:
                raise FormContractError(
                    f"Question round {q.round_index} is beyond the round budget of "
                    f"{self.config.max_rounds}."
                )
            last_round = q.round_index
        self.questions.extend(questions)

    def open_round(self) -> None:
        """Settle the current round if it has nothing left to answer.

        A round with no unanswered questions goes straight to the
        continuation prompt, or to completion when it is the last round.
        Safe to call repeatedly.
        """
        if self.state.done or self.state.asking_more:
            return
        if self.state.cursor >= self._round_end():
            self._finish_round()

    def advance_round(self) -> None:
        """Move to the next round after the user asked for more information."""
        if self.outcome is not Outcome.MORE_REQUESTED:
            raise FormContractError(
                f"advance_round() is only valid after the user asked for another "
                f"round (phase={self.phase.value}, outcome="
                f"{self.outcome.value if self.outcome else None})."
            )
        self.state.round += 1
        self.state.asking_more = False
        self.state.needs_more = False
        self.state.done = False
        self.state.input = ""
        self.state.error = None
        self.open_round()

    def handle(self, event: FormEvent) -> None:
        """Apply one input event."""
        if isinstance(event, Resize):
            self.width = max(1, event.width)
            return
        if self.state.done:
            return

        if isinstance(event, Cancel):
            self.state.done = True
            self.state.cancelled = True
            self.state.needs_more = False
            self.state.asking_more = False
            self.state.error = None
        elif isinstance(event, Submit):
            self._submit()
        elif isinstance(event, Backspace):
            self.state.input = self.state.input[:-1]
        elif isinstance(event, KeyInput):
            self.state.input += event.text
        else:
            raise FormContractError(f"Unknown form event: {event!r}")

    # --- Transitions ---

    def _submit(self) -> None:
        answer = self.state.input.strip()

        if self.state.asking_more:
            token = answer.lower()
            if token in YES_TOKENS:
                self._complete(needs_more=True)
            elif token in NO_TOKENS:
                self._complete(needs_more=False)
            else:
                self.state.error = YES_OR_NO
                self.state.input = ""
            return

        if self.state.cursor >= self._round_end():
            # Nothing pending in this round: settle it, record nothing.
            self.state.input = ""
            self.state.error = None
            self._finish_round()
            return

        if not answer:
            self.state.error = ANSWER_REQUIRED
            return

        self._responses.append(answer)
        self.state.cursor += 1
        self.state.input = ""
        self.state.error = None

        if self.state.cursor >= self._round_end():
            self._finish_round()

    def _finish_round(self) -> None:
        if self.state.round < self.config.max_rounds - 1:
            self.state.asking_more = True
        else:
            self._complete(needs_more=False)

    def _complete(self, needs_more: bool) -> None:
        self.state.needs_more = needs_more
        self.state.asking_more = False
        self.state.done = True
        self.state.input = ""
        self.state.error = None

    def _round_start(self) -> int:
        return sum(1 for q in self.questions if q.round_index < self.state.round)

    def _round_end(self) -> int:
        return sum(1 for q in self.questions if q.round_index <= self.state.round)

    # --- Queries ---

    @property
    def phase(self) -> Phase:
        if self.state.done:
            return Phase.COMPLETE
        if self.state.asking_more:
            return Phase.ASKING_CONTINUATION
        return Phase.ANSWERING

    @property
    def outcome(self) -> Outcome | None:
        """Three-way completion classification, None while still running."""
        if not self.state.done:
            return None
        if self.state.cancelled:
            return Outcome.CANCELLED
        if self.state.needs_more:
            return Outcome.MORE_REQUESTED
        return Outcome.COMPLETE

    @property
    def current_round(self) -> int:
        return self.state.round

    @property
    def current_question(self) -> Question | None:
        if self.phase is not Phase.ANSWERING:
            return None
        if self.state.cursor >= self._round_end():
            return None
        return self.questions[self.state.cursor]

    @property
    def responses(self) -> list[str]:
        return list(self._responses)

    @property
    def response_count(self) -> int:
        return len(self._responses)

    def responses_for_round(self, round_index: int) -> list[str]:
        """Answers given to the questions of one round, in question order."""
        if round_index < 0:
            raise FormContractError(f"Round index must be non-negative, got {round_index}.")
        return [
            self._responses[i]
            for i, q in enumerate(self.questions)
            if q.round_index == round_index and i < len(self._responses)
        ]

    def round_position(self) -> tuple[int, int]:
        """Return (1-based ordinal of the current question, questions in this round)."""
        start = self._round_start()
        total = self._round_end() - start
        return self.state.cursor - start + 1, total

    def round_answers(self) -> list[str]:
        """Answers already given in the current round."""
        return self._responses[self._round_start():self.state.cursor]

    def is_done(self) -> bool:
        """True once the form ended without a request for more information."""
        return self.state.done and not self.state.needs_more

    def needs_more_info(self) -> bool:
        return self.state.needs_more

    def is_cancelled(self) -> bool:
        return self.state.cancelled
