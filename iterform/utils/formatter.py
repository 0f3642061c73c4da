"""Transcript formatter: writes the gathered Q/A pairs as Markdown."""

import re
from pathlib import Path

from iterform.config import get_config
from iterform.state import GatherState

MAX_SLUG_LENGTH = 60

_STATUS_LABELS = {
    "complete": "Information gathering complete",
    "max_rounds_reached": "Stopped at the round limit",
    "in_progress": "In progress",
}


def slugify(text: str) -> str:
    """Lower-case, hyphen-separated file stem made of [a-z0-9-] only."""
    slug = re.sub(r"[^a-z0-9-]", "", text.lower().replace(" ", "-"))
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


def _render_markdown(state: GatherState) -> str:
    lines = ["# Gathered Context", ""]

    lines.append("## Description")
    lines.append("")
    lines.append(state["description"])
    lines.append("")

    status = state.get("status", "in_progress")
    lines.append(f"**Status:** {_STATUS_LABELS.get(status, status)}")
    lines.append(f"**Rounds:** {state.get('round', 0) + 1}")
    lines.append("")

    qa_history = state.get("qa_history", [])
    if not qa_history:
        lines.append("*No questions were answered.*")
        lines.append("")
        return "\n".join(lines)

    lines.append("## Questions and Answers")
    lines.append("")
    for i, qa in enumerate(qa_history, 1):
        question, _, answer = qa.partition("\nA: ")
        question = question.removeprefix("Q: ")
        lines.append(f"### {i}. {question}")
        lines.append("")
        lines.append(answer)
        lines.append("")

    return "\n".join(lines)


def write_transcript(state: GatherState, path: str | Path | None = None) -> Path:
    """Write the session transcript and return the path written.

    Without an explicit path the file is named after the description and
    placed in the configured output directory; an existing file is never
    overwritten, a " (n)" suffix is added instead.
    """
    if path is not None:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        config = get_config()
        base_path = Path(config["output_path"])
        output_dir = base_path.parent
        output_dir.mkdir(parents=True, exist_ok=True)

        stem = slugify(state["description"]) or base_path.stem
        output_path = output_dir / f"{stem}.md"
        counter = 1
        while output_path.exists():
            counter += 1
            output_path = output_dir / f"{stem} ({counter}).md"

    output_path.write_text(_render_markdown(state), encoding="utf-8")
    return output_path
