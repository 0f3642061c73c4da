"""Entry point: validates input, runs the gathering graph, writes the transcript."""

import sys

from iterform.config import get_config
from iterform.form.machine import IterativeForm
from iterform.form.model import FormConfig
from iterform.graph import build_graph, initial_state
from iterform.sources.base import QuestionSource
from iterform.utils.formatter import write_transcript
from iterform.utils.validator import validate_input

USAGE = 'usage: iterform "description" [--rounds N] [--questions FILE.yaml] [--output PATH]'

# Each round walks prepare -> ask -> next_round.
_STEPS_PER_ROUND = 3


class GatheringCancelled(Exception):
    """The user cancelled the form; the whole session is discarded."""


def gather(description: str, source: QuestionSource, max_rounds: int | None = None, ask=None) -> dict:
    """Run a full gathering session and return the final graph state.

    Raises GatheringCancelled if the user cancels at any point.
    """
    config = get_config()
    validated = validate_input(description)
    form_config = FormConfig(
        max_rounds=max_rounds if max_rounds is not None else config.get("max_rounds", 3),
        round_prompt=config.get("round_prompt", ""),
        continuation_prompt=config.get(
            "continuation_prompt", "Do you want to provide more information?"
        ),
    )
    form = IterativeForm(config.get("form_title", "Information Gathering"), form_config)

    graph = build_graph(source, ask)
    final_state = graph.invoke(
        initial_state(validated, form),
        {"recursion_limit": _STEPS_PER_ROUND * form_config.max_rounds + 10},
    )

    if final_state["status"] == "cancelled":
        raise GatheringCancelled("Gathering cancelled.")
    return final_state


def _parse_args(args: list[str]) -> dict:
    """Parse CLI flags; exits with the usage line on bad input."""
    options = {"rounds": None, "questions": None, "output": None}
    positional = []

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("-h", "--help"):
            print(USAGE)
            sys.exit(0)
        if arg in ("--rounds", "--questions", "--output"):
            if i + 1 >= len(args):
                sys.exit(f"{arg} needs a value\n{USAGE}")
            options[arg[2:]] = args[i + 1]
            i += 2
            continue
        positional.append(arg)
        i += 1

    if options["rounds"] is not None:
        try:
            options["rounds"] = int(options["rounds"])
        except ValueError:
            sys.exit(f"--rounds must be an integer\n{USAGE}")
        if options["rounds"] < 1:
            sys.exit(f"--rounds must be at least 1\n{USAGE}")

    options["description"] = " ".join(positional)
    return options


def _make_source(questions_path: str | None) -> QuestionSource:
    if questions_path:
        from iterform.sources.scripted import ScriptedQuestionSource

        return ScriptedQuestionSource.from_file(questions_path)

    from iterform.sources.llm import LLMQuestionSource

    return LLMQuestionSource()


def main() -> None:
    """CLI entry point. Accepts the description as arguments or from stdin."""
    options = _parse_args(sys.argv[1:])

    description = options["description"]
    if not description:
        print("Describe what you need context for (Ctrl+D / Ctrl+Z to submit):")
        description = sys.stdin.read()

    try:
        validated = validate_input(description)
    except ValueError as exc:
        sys.exit(f"[iterform] {exc}")

    print(f"Gathering context for: {validated}\n")

    source = _make_source(options["questions"])
    try:
        final_state = gather(validated, source, max_rounds=options["rounds"])
    except GatheringCancelled:
        print("[iterform] Gathering cancelled.", file=sys.stderr)
        sys.exit(1)

    output_path = write_transcript(final_state, options["output"])
    print(f"[iterform] Status: {final_state['status']}")
    print(f"[iterform] Rounds: {final_state['round'] + 1}")
    print(f"[iterform] Answers: {len(final_state['qa_history'])}")
    print(f"[iterform] Transcript written to: {output_path}")


if __name__ == "__main__":
    main()
