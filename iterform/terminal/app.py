"""Terminal driver: runs an IterativeForm inside a prompt_toolkit application.

Raw key presses are translated into form events, the form is re-rendered
after every event, and the application exits once the form reaches a
terminal state. Terminal resizes only update the form's display width.
"""

from collections.abc import Iterable

from prompt_toolkit.application import Application, get_app
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from rich.console import Console

from iterform.form.machine import IterativeForm
from iterform.form.model import Backspace, Cancel, FormEvent, KeyInput, Phase, Resize, Submit
from iterform.form.view import DEFAULT_THEME, Theme, render_complete, render_form, to_ansi

# Friendly names accepted by dispatch_keys()
KEY_ALIASES = {
    "enter": Keys.Enter,
    "backspace": Keys.Backspace,
    "esc": Keys.Escape,
    "escape": Keys.Escape,
    "ctrl+c": Keys.ControlC,
    "ctrl+j": Keys.ControlJ,
}


def key_to_event(key: str, data: str = "") -> FormEvent | None:
    """Translate one key press into a form event.

    Returns None for keys the form does not react to (arrows, function
    keys, stray control characters).
    """
    if key == Keys.Enter:
        return Submit()
    if key == Keys.Backspace:
        return Backspace()
    if key in (Keys.Escape, Keys.ControlC):
        return Cancel()
    if key == Keys.ControlJ:
        return KeyInput("\n")
    if key == Keys.BracketedPaste:
        text = data.replace("\r\n", "\n").replace("\r", "\n")
        return KeyInput(text) if text else None
    if data and data.isprintable():
        return KeyInput(data)
    return None


def dispatch_keys(form: IterativeForm, keys: Iterable[str]) -> IterativeForm:
    """Feed a scripted sequence of key presses to the form.

    Each item is either a key name ("enter", "backspace", "esc", "ctrl+j")
    or literal text, which is typed one character at a time.
    """
    form.open_round()
    for item in keys:
        if item in KEY_ALIASES:
            events = [key_to_event(KEY_ALIASES[item])]
        else:
            events = [key_to_event(ch, ch) for ch in item]
        for event in events:
            if event is not None:
                form.handle(event)
    return form


def build_application(form: IterativeForm, theme: Theme = DEFAULT_THEME,
                      input=None, output=None) -> Application:
    """Build the prompt_toolkit application that drives one form run.

    input and output default to the current terminal; pass pipe or dummy
    ones to run the application headless.
    """
    kb = KeyBindings()

    def _dispatch(event) -> None:
        key_press = event.key_sequence[0]
        form_event = key_to_event(key_press.key, key_press.data)
        if form_event is None:
            return
        form.handle(form_event)
        if form.phase is Phase.COMPLETE and not event.app.is_done:
            event.app.exit(result=form)

    kb.add(Keys.Escape, eager=True)(_dispatch)
    for key in (Keys.Enter, Keys.Backspace, Keys.ControlC, Keys.ControlJ,
                Keys.BracketedPaste, Keys.Any):
        kb.add(key)(_dispatch)

    def _get_text():
        # Re-read on every render; prompt_toolkit redraws on SIGWINCH.
        columns = get_app().output.get_size().columns
        if columns != form.width:
            form.handle(Resize(columns))
        return ANSI(to_ansi(render_form(form, theme), form.width))

    layout = Layout(Window(FormattedTextControl(_get_text), wrap_lines=True))
    return Application(layout=layout, key_bindings=kb, full_screen=False,
                       input=input, output=output)


def run_form(form: IterativeForm, theme: Theme = DEFAULT_THEME) -> IterativeForm:
    """Run the form interactively until it reaches a terminal state."""
    form.open_round()
    if form.phase is Phase.COMPLETE:
        Console().print(render_complete(form, theme), end="")
        return form

    app = build_application(form, theme)
    app.run()
    return form
