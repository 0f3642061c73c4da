"""LangGraph StateGraph for a multi-round gathering session.

Each round the question source prepares questions, the form collects the
answers, and the routing decides whether another round is worth running.
"""

from collections.abc import Callable

from langgraph.graph import END, StateGraph

from iterform.form.machine import IterativeForm
from iterform.form.model import Question
from iterform.sources.base import QuestionSource
from iterform.state import GatherState

AskFn = Callable[[IterativeForm], IterativeForm]


def _default_ask(form: IterativeForm) -> IterativeForm:
    from iterform.terminal.app import run_form

    return run_form(form)


def initial_state(description: str, form: IterativeForm) -> GatherState:
    return {
        "description": description,
        "round": 0,
        "qa_history": [],
        "status": "in_progress",
        "form": form,
        "preparation": None,
    }


def make_nodes(source: QuestionSource, ask: AskFn | None = None) -> dict[str, Callable]:
    """Build the node functions for one question source and ask function."""
    ask = ask or _default_ask

    def _prepare(state: GatherState) -> dict:
        form = state["form"]
        round_index = state["round"]
        print(f"Preparing questions (round {round_index + 1}/{form.config.max_rounds})...")

        preparation = source.prepare(state["description"], round_index, state["qa_history"])
        if not preparation.questions:
            return {"preparation": preparation}

        if preparation.rationale:
            print(f"\n{preparation.rationale}")
        print(
            f"Confidence: {preparation.confidence_score:.2f}/1.0 - "
            f"{preparation.confidence_reasoning}\n"
        )

        form.add_questions([
            Question(q.question, q.help_text, round_index) for q in preparation.questions
        ])
        # Questions first, then advance: an advance settles an empty round at once.
        if form.current_round < round_index:
            form.advance_round()
        return {"preparation": preparation}

    def _ask(state: GatherState) -> dict:
        form = ask(state["form"])
        answers = form.responses_for_round(state["round"])
        pairs = [
            f"Q: {q.question}\nA: {answer}"
            for q, answer in zip(state["preparation"].questions, answers)
        ]
        return {"form": form, "qa_history": state["qa_history"] + pairs}

    return {
        "prepare": _prepare,
        "ask": _ask,
        "next_round": _next_round,
        "sufficient": _set_sufficient,
        "finish": _set_complete,
        "timeout": _set_timeout,
        "cancel": _set_cancelled,
    }


def _route_after_prepare(state: GatherState) -> str:
    """No questions means the source has nothing more to ask."""
    if not state["preparation"].questions:
        return "finish"
    return "ask"


def _route_after_ask(state: GatherState) -> str:
    """Conditional edge: decide what follows a finished form run.

    Priority order:
    1. user cancelled → cancel
    2. source has enough information → sufficient
    3. last round of the budget → timeout
    4. user declined another round → finish
    5. otherwise → next_round
    """
    form = state["form"]

    if form.is_cancelled():
        return "cancel"
    if not state["preparation"].needs_more_info:
        return "sufficient"
    if state["round"] >= form.config.max_rounds - 1:
        return "timeout"
    if not form.needs_more_info():
        return "finish"
    return "next_round"


def _next_round(state: GatherState) -> dict:
    """Bump the round counter before re-entering prepare."""
    return {"round": state["round"] + 1}


def _set_sufficient(state: GatherState) -> dict:
    print(
        f"\n✓ Sufficient information gathered "
        f"(confidence: {state['preparation'].confidence_score:.2f})"
    )
    return {"status": "complete"}


def _set_complete(state: GatherState) -> dict:
    return {"status": "complete"}


def _set_timeout(state: GatherState) -> dict:
    print("\n⚠ Reached maximum rounds. Proceeding with available information...")
    return {"status": "max_rounds_reached"}


def _set_cancelled(state: GatherState) -> dict:
    return {"status": "cancelled"}


def build_graph(source: QuestionSource, ask: AskFn | None = None):
    """Compile the gathering workflow for a question source."""
    nodes = make_nodes(source, ask)
    workflow = StateGraph(GatherState)

    for name, fn in nodes.items():
        workflow.add_node(name, fn)

    workflow.set_entry_point("prepare")

    workflow.add_conditional_edges(
        "prepare",
        _route_after_prepare,
        {"ask": "ask", "finish": "finish"},
    )
    workflow.add_conditional_edges(
        "ask",
        _route_after_ask,
        {
            "cancel": "cancel",
            "sufficient": "sufficient",
            "timeout": "timeout",
            "finish": "finish",
            "next_round": "next_round",
        },
    )
    workflow.add_edge("next_round", "prepare")
    for terminal in ("sufficient", "finish", "timeout", "cancel"):
        workflow.add_edge(terminal, END)

    return workflow.compile()


# --- Step-execution helpers ---


def run_single_step(state: GatherState, node_name: str, nodes: dict[str, Callable]) -> GatherState:
    """Run a single node and return the updated state."""
    node_fn = nodes[node_name]
    updates = node_fn(state)
    return {**state, **updates}


def route_after_ask(state: GatherState) -> str:
    """Public wrapper around _route_after_ask for manual loop usage."""
    return _route_after_ask(state)


def route_after_prepare(state: GatherState) -> str:
    """Public wrapper around _route_after_prepare for manual loop usage."""
    return _route_after_prepare(state)
