"""Rendering for the iterative form: pure functions from form state to rich Text."""

import textwrap
from dataclasses import dataclass

from rich.console import Console
from rich.text import Text

from iterform.form.machine import IterativeForm
from iterform.form.model import Outcome, Phase

CURSOR = "█"
INPUT_PREFIX = "> "
CONTINUATION_INDENT = "  "
RULE = "─" * 33
MIN_WRAP_WIDTH = 20

ROUND_SCROLLBACK_CHARS = 50
SESSION_SCROLLBACK_CHARS = 60


@dataclass(frozen=True)
class Theme:
    """Rich style strings for every part of the form."""

    title: str = "bold color(205)"
    question: str = "bold color(86)"
    help: str = "italic color(241)"
    input: str = "color(212)"
    error: str = "bold color(196)"
    success: str = "bold color(46)"
    cancelled: str = "bold color(214)"
    rule: str = "color(241)"


DEFAULT_THEME = Theme()


def truncate(text: str, limit: int) -> str:
    """Shorten text for display; the stored answer is never touched."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def wrap_input(
    buffer: str,
    width: int,
    prefix: str = INPUT_PREFIX,
    indent: str = CONTINUATION_INDENT,
    cursor: str = CURSOR,
) -> list[str]:
    """Word-wrap the input buffer for display.

    Line breaks typed by the user are kept as hard breaks, every line after
    the first is indented, and the cursor sits at the logical end of the
    buffer however the text wrapped.
    """
    width = max(width, MIN_WRAP_WIDTH)
    lines: list[str] = []

    for n, paragraph in enumerate(buffer.split("\n")):
        lead = prefix if n == 0 else indent
        wrapper = textwrap.TextWrapper(
            width=width,
            initial_indent=lead,
            subsequent_indent=indent,
            break_long_words=True,
            break_on_hyphens=False,
        )
        wrapped = wrapper.wrap(paragraph) or [lead]
        # textwrap drops trailing blanks; the cursor must still follow them
        trailing = paragraph[len(paragraph.rstrip(" ")):]
        if trailing:
            wrapped[-1] += trailing
        lines.extend(wrapped)

    lines[-1] += cursor
    return lines


def _input_block(form: IterativeForm, theme: Theme, width: int) -> Text:
    return Text("\n".join(wrap_input(form.state.input, width)), style=theme.input)


def _round_indicator(form: IterativeForm, theme: Theme, out: Text) -> None:
    if form.config.max_rounds > 1:
        out.append(f"Round {form.current_round + 1} of {form.config.max_rounds}", style=theme.help)
        out.append("\n\n")


def _error_line(form: IterativeForm, theme: Theme, out: Text) -> None:
    if form.state.error:
        out.append(f"⚠ {form.state.error}", style=theme.error)
        out.append("\n\n")


def _scrollback(heading: str, answers: list[str], limit: int, theme: Theme, out: Text) -> None:
    if not answers:
        return
    out.append(RULE + "\n", style=theme.rule)
    out.append(heading + "\n")
    for i, answer in enumerate(answers, 1):
        out.append(f"{i}. {truncate(answer, limit)}\n")


def render_complete(form: IterativeForm, theme: Theme = DEFAULT_THEME) -> Text:
    """Single-line summary; each outcome reads differently."""
    outcome = form.outcome
    if outcome is Outcome.CANCELLED:
        return Text("✗ Cancelled\n", style=theme.cancelled)
    if outcome is Outcome.MORE_REQUESTED:
        return Text("✓ Gathering more information...\n", style=theme.success)
    return Text("✓ Information gathering complete!\n", style=theme.success)


def render_form(form: IterativeForm, theme: Theme = DEFAULT_THEME, width: int | None = None) -> Text:
    """Render the current form state."""
    if form.phase is Phase.COMPLETE:
        return render_complete(form, theme)

    width = form.width if width is None else width
    out = Text()

    out.append(form.title, style=theme.title)
    out.append("\n\n")
    _round_indicator(form, theme, out)

    if form.phase is Phase.ASKING_CONTINUATION:
        out.append(form.config.continuation_prompt, style=theme.question)
        out.append("\n")
        out.append("(yes/no)", style=theme.help)
        out.append("\n\n")
        out.append_text(_input_block(form, theme, width))
        out.append("\n\n")
        _error_line(form, theme, out)
        _scrollback(
            "Information gathered:", form.responses, SESSION_SCROLLBACK_CHARS, theme, out
        )
    else:
        question = form.current_question
        if question is not None:
            if form.config.round_prompt:
                out.append(form.config.round_prompt, style=theme.help)
                out.append("\n\n")

            ordinal, total = form.round_position()
            out.append(f"Question {ordinal} of {total} (this round)\n\n")

            out.append(question.text, style=theme.question)
            out.append("\n")
            if question.help_text:
                out.append(question.help_text, style=theme.help)
                out.append("\n")
            out.append("\n")

            out.append_text(_input_block(form, theme, width))
            out.append("\n\n")
            _error_line(form, theme, out)
            _scrollback(
                "Previous answers (this round):",
                form.round_answers(),
                ROUND_SCROLLBACK_CHARS,
                theme,
                out,
            )

    out.append("\n")
    out.append("Press Esc to cancel", style=theme.help)
    return out


def to_ansi(renderable, width: int) -> str:
    """Render a rich renderable to an ANSI string of the given width."""
    console = Console(
        width=max(width, 1),
        force_terminal=True,
        color_system="256",
        highlight=False,
        emoji=False,
    )
    with console.capture() as capture:
        console.print(renderable, end="")
    return capture.get()
