"""Tests for the terminal driver: key translation and scripted dispatch."""

import pytest
from prompt_toolkit.application.current import set_app
from prompt_toolkit.data_structures import Size
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.keys import Keys
from prompt_toolkit.output import DummyOutput

from iterform.form.machine import IterativeForm
from iterform.form.model import (
    Backspace,
    Cancel,
    FormConfig,
    KeyInput,
    Outcome,
    Phase,
    Question,
    Submit,
)
from iterform.terminal.app import build_application, dispatch_keys, key_to_event, run_form


class TestKeyToEvent:
    def test_enter_submits(self):
        assert key_to_event(Keys.Enter) == Submit()

    def test_backspace(self):
        assert key_to_event(Keys.Backspace) == Backspace()

    @pytest.mark.parametrize("key", [Keys.Escape, Keys.ControlC])
    def test_cancel_keys(self, key):
        assert key_to_event(key) == Cancel()

    def test_ctrl_j_inserts_line_break(self):
        assert key_to_event(Keys.ControlJ) == KeyInput("\n")

    def test_printable_character(self):
        assert key_to_event("a", "a") == KeyInput("a")

    def test_unicode_character(self):
        assert key_to_event("é", "é") == KeyInput("é")

    def test_paste_normalises_line_endings(self):
        assert key_to_event(Keys.BracketedPaste, "one\r\ntwo\rthree") == KeyInput(
            "one\ntwo\nthree"
        )

    def test_empty_paste_ignored(self):
        assert key_to_event(Keys.BracketedPaste, "") is None

    @pytest.mark.parametrize("key,data", [(Keys.Up, "\x1b[A"), (Keys.ControlA, "\x01"), (Keys.F1, "")])
    def test_unhandled_keys_ignored(self, key, data):
        assert key_to_event(key, data) is None


class TestDispatchKeys:
    def test_typing_and_submitting(self, make_form):
        form = dispatch_keys(make_form(), ["hello", "enter"])
        assert form.responses == ["hello"]

    def test_backspace_edits_buffer(self, make_form):
        form = dispatch_keys(make_form(), ["helo", "backspace", "lo", "enter"])
        assert form.responses == ["hello"]

    def test_line_break_kept_in_answer(self, make_form):
        form = dispatch_keys(make_form(), ["one", "ctrl+j", "two", "enter"])
        assert form.responses == ["one\ntwo"]

    def test_escape_cancels(self, make_form):
        form = dispatch_keys(make_form(), ["partial", "esc"])
        assert form.outcome is Outcome.CANCELLED

    def test_full_round_with_continuation(self, make_form):
        form = dispatch_keys(make_form(max_rounds=2), ["x", "enter", "y", "enter", "no", "enter"])
        assert form.outcome is Outcome.COMPLETE
        assert form.responses == ["x", "y"]


class TestRunForm:
    def test_already_complete_form_returns_without_app(self, capsys):
        form = IterativeForm("Empty", FormConfig(max_rounds=1))
        result = run_form(form)
        assert result is form
        assert form.outcome is Outcome.COMPLETE
        assert "Information gathering complete" in capsys.readouterr().out

    def test_runs_application_until_complete(self, make_form, monkeypatch):
        form = make_form(questions=["Only?"], max_rounds=1)

        class FakeApp:
            def run(self):
                dispatch_keys(form, ["answer", "enter"])

        monkeypatch.setattr("iterform.terminal.app.build_application", lambda f, theme: FakeApp())
        result = run_form(form)
        assert result.phase is Phase.COMPLETE
        assert result.responses == ["answer"]

    def test_settles_empty_round_before_running(self, monkeypatch):
        form = IterativeForm("Empty", FormConfig(max_rounds=2))
        seen = []

        class FakeApp:
            def run(self):
                seen.append(form.phase)
                form.handle(Cancel())

        monkeypatch.setattr("iterform.terminal.app.build_application", lambda f, theme: FakeApp())
        run_form(form)
        assert seen == [Phase.ASKING_CONTINUATION]

    def test_questions_from_later_round_untouched(self, make_form):
        form = make_form(questions=["A?"], max_rounds=2)
        form.add_questions([Question("B?", "", 1)])
        dispatch_keys(form, ["a", "enter"])
        assert form.phase is Phase.ASKING_CONTINUATION


class SizedOutput(DummyOutput):
    """Headless output whose reported terminal width can be changed."""

    def __init__(self, columns=80):
        super().__init__()
        self.columns = columns

    def get_size(self):
        return Size(rows=24, columns=self.columns)


class TestApplication:
    def _run(self, form, text, output=None):
        with create_pipe_input() as pipe:
            pipe.send_text(text)
            app = build_application(form, input=pipe, output=output or SizedOutput())
            return app.run()

    def test_enter_submits_and_exits_on_completion(self, make_form):
        form = make_form(questions=["Only?"], max_rounds=1)
        result = self._run(form, "answer\r")
        assert result is form
        assert form.phase is Phase.COMPLETE
        assert form.responses == ["answer"]

    def test_full_round_with_backspace_and_continuation(self, make_form):
        form = make_form(questions=["A?"], max_rounds=2)
        self._run(form, "helo\x7flo\ryes\r")
        assert form.responses == ["hello"]
        assert form.outcome is Outcome.MORE_REQUESTED

    def test_ctrl_c_cancels(self, make_form):
        form = make_form()
        self._run(form, "partial\x03")
        assert form.outcome is Outcome.CANCELLED
        assert form.responses == []

    def test_width_read_from_output(self, make_form):
        form = make_form(questions=["Only?"], max_rounds=1)
        self._run(form, "x\r", output=SizedOutput(columns=42))
        assert form.width == 42

    def test_resize_requeried_on_render(self, make_form):
        form = make_form()
        form.handle(KeyInput("alpha beta gamma delta epsilon zeta eta theta"))
        output = SizedOutput(columns=100)

        with create_pipe_input() as pipe:
            app = build_application(form, input=pipe, output=output)
            get_text = app.layout.container.content.text
            with set_app(app):
                get_text()
                assert form.width == 100
                output.columns = 30
                get_text()
                assert form.width == 30
        assert form.phase is Phase.ANSWERING
