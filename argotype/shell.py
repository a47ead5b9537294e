"""
argotype shell adapter: the only place that prints and exits.

main(unit, context, name, args) runs a built command or group against the process
arguments and turns every early exit into console output plus an exit status:

- help (built-in --help, or a group invoked with no arguments) → stdout, status 0
- version (built-in --version) → stdout, status 0
- parse failure → the rich-rendered failure and the contextual help on stderr, status 1

The handle_* helpers serve actions that declare their own --help/--version options
(enable_help/enable_version off) and want the same behavior from inside the action:

    @command("Copy").option("h", "help", "show help").build
    def copy(positionals, options, context):
        handle_help(options, context)
        ...

Styling
- Palette entries can be overridden with a __styles__ mapping in __main__ (same
  mechanism as fault rendering): usage-label, section-title, program-name, panel-title.
- colorful=False suppresses every style; fancy=True wraps help in a panel.
"""
import os.path
import sys
from collections import defaultdict

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .commands import run
from .faults import ParseFailure
from .utils import Unset, coalesce


def _styles():
    return defaultdict(str, {
        "program-name": "bold #FF4D94",  # magenta-pink brand pop
        "usage-label": "bold #00E6FF",  # cyan usage label
        "section-title": "bold #FFFFFF",  # white block titles
        "panel-title": "bold #00E6FF",
    } | getattr(__import__("__main__"), "__styles__", {}))


def render(text, /, *, colorful=True, fancy=False, title=Unset):
    """
    Turn plain help text into a rich renderable.

    Block titles (unindented lines ending with ':') and the 'Usage:' label are styled;
    the first line (program header) is highlighted.
    """
    styles = _styles()
    lines = []
    for number, line in enumerate(text.split("\n")):
        if not colorful:
            lines.append(Text(line))
        elif number == 0:
            lines.append(Text(line, styles["program-name"]))
        elif line.startswith("Usage: "):
            lines.append(Text.assemble(("Usage:", styles["usage-label"]), line[len("Usage:"):]))
        elif line and not line[0].isspace() and line.endswith(":"):
            lines.append(Text(line, styles["section-title"]))
        else:
            lines.append(Text(line))
    renderable = Text("\n").join(lines)
    if fancy:
        header = coalesce(title, "HELP")
        return Panel(
            renderable,
            title=Text.assemble("[ ", header, " ]", style=styles["panel-title"] if colorful else ""),
            title_align="left",
        )
    return renderable


def main(unit, context=None, /, name=Unset, args=Unset, *, colorful=True, fancy=False):
    """
    Run 'unit' as the program entry point and exit on every non-result outcome.

    Parameters
    - unit: built Command or Group.
    - context: external context value.
    - name: program name (defaults to the basename of sys.argv[0]).
    - args: argument vector (defaults to sys.argv[1:]).
    - colorful/fancy: rendering switches (keyword-only).

    Returns the result of the action when the run succeeds.
    """
    name = coalesce(name, os.path.basename(sys.argv[0]) or "main")
    args = coalesce(args, sys.argv[1:])
    stdout = Console()
    stderr = Console(stderr=True)

    def on_help(text):
        stdout.print(render(text, colorful=colorful, fancy=fancy, title=f"{name} HELP".upper()))
        sys.exit(0)

    def on_version(text):
        if text is not None:
            stdout.print(text, markup=False, highlight=False)
        sys.exit(0)

    return run(unit, args, context, name, _fail(stderr, colorful, fancy), on_help, on_version)


def _fail(console, colorful, fancy):
    """
    Error handler for run(): prints the rich-rendered failure, a blank line and the help.
    """
    def on_error(text):
        # called from within run()'s except clause
        failure = sys.exc_info()[1]
        if isinstance(failure, ParseFailure):
            console.print(failure.__replace__(colorful=colorful, fancy=fancy))
            console.print()
            console.print(render(failure.help(), colorful=colorful))
        else:
            console.print(text, markup=False, highlight=False)
        sys.exit(1)

    return on_error


def handle_help(options, context, /):
    """
    Print the help of the running unit and exit 0 when the 'help' option is present.
    """
    if "help" in options:
        Console().print(render(context.help()))
        sys.exit(0)


def handle_version(options, context, /):
    """
    Print the version of the running unit and exit 0 when the 'version' option is present.
    """
    if "version" in options:
        version = context.version()
        if version is not None:
            Console().print(version, markup=False, highlight=False)
        sys.exit(0)


def handle_help_and_version(options, context, /):
    """
    handle_version then handle_help (version wins when both are given).
    """
    handle_version(options, context)
    handle_help(options, context)


__all__ = (
    "main",
    "render",
    "handle_help",
    "handle_version",
    "handle_help_and_version",
)
