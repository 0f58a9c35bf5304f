"""
Strata help and version renderers (Rich-based, color-aware).

render_help(application)
- NAME, DESCRIPTION, USAGE, COMMANDS, GLOBAL FLAGS and VERSION sections.
- Commands and flags are listed in registration order (hidden ones skipped).
- The VERSION section is followed by one labeled section per diagnostics key.

render_version(application)
- "<name> — <version>" header, release tag and commit id, then the
  diagnostics sections. With json=True a single JSON document is printed.

Styling
- Palette keys are listed in _PALETTE; user overrides are read from
  __main__.__styles__. When application.colorful is False styles are dropped.
- When application.fancy is True, output is wrapped in a panel.

Both renderers call application.diagnostics() on every render, so the
sections always reflect the live process.
"""
from collections import defaultdict

from rich.console import Console, Group
from rich.padding import Padding
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .descriptors import GLOBAL
from .utils import Unset

_PALETTE = {
    # ==== Headers ====
    "section": "bold #FFD600",  # Amber section labels
    "program-name": "bold #FF4D94",  # Magenta-pink brand pop
    "program-version": "bold #00E6FF",  # Cyan version (clear contrast)

    # ==== Listings ====
    "command-name": "bold #36C5F0",
    "command-usage": "#E5E7EB",
    "flag-names": "bold #22C55E",
    "flag-default": "#9CA3AF",
    "flag-descr": "#E5E7EB",

    # ==== Free text ====
    "description": "#C8C8D0",
    "usage-line": "#E5E7EB",
    "diagnostics": "#9CA3AF",
    "label": "bold #FFFFFF",

    # ==== Panel ====
    "panel-title": "bold #FF4D94",
}


def _stylers(application):
    styles = defaultdict(str, _PALETTE | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if application.colorful else ""

    def text(fragment, style=""):
        # Normalize any input to Text and apply style conditionally (preserves existing Text)
        if not application.colorful:
            return Text(str(fragment or ""))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment or ""), style)

    return styler, text


def _section(label, body, styler, text, /):
    """
    A "LABEL:" line followed by an indented body renderable.
    """
    return Group(text(label.upper() + ":", styler("section")), Padding(body, (0, 0, 0, 2)))


def _diagnostics(application, styler, text, /):
    return [
        _section(key, text(value, styler("diagnostics")), styler, text)
        for key, value in application.diagnostics().items()
    ]


def _flags_table(flags, styler, text, /):
    table = Table.grid(padding=(0, 3, 0, 0))
    table.add_column(no_wrap=True)
    table.add_column()
    for flag in flags:
        if flag.hidden:
            continue
        names = text(", ".join(flag.names), styler("flag-names"))
        if not flag.switch and flag.default not in (None, ""):
            names.append(" ")
            names.append(text("%r" % (flag.default,), styler("flag-default")))
        table.add_row(names, text(flag.descr, styler("flag-descr")))
    table.add_row(
        text("--help, -h", styler("flag-names")), text("show this help message and exit", styler("flag-descr"))
    )
    return table


def _commands_table(commands, styler, text, /):
    table = Table.grid(padding=(0, 3, 0, 0))
    table.add_column(no_wrap=True)
    table.add_column()
    for command in commands:
        if command.hidden:
            continue
        table.add_row(text(command.name, styler("command-name")), text(command.usage, styler("command-usage")))
    return table


def _chrome(application, renderable, title, styler, /):
    if not application.fancy:
        return renderable
    return Panel(
        renderable,
        title=Text.assemble("[", " ", title.upper(), " ", "]", style=styler("panel-title")),
        title_align="left",
    )


def render_help(application, /, *, console=Unset):
    """
    Print the top-level help of application to console (stdout by default).
    """
    console = Console() if console is Unset else console
    styler, text = _stylers(application)
    flags = tuple(flag for flag in application.flags if flag.scope == GLOBAL)

    usage = "%s %scommand%s [arguments...]" % (
        application.name,
        "[global flags] " if flags else "",
        " [command flags]" if flags else "",
    )

    renders = [
        _section("name", Text.assemble(
            text(application.name, styler("program-name")), " - ", text(application.usage, styler("description"))
        ), styler, text),
    ]
    if application.descr:
        renders.append(_section("description", text(application.descr, styler("description")), styler, text))
    renders.append(_section("usage", text(usage, styler("usage-line")), styler, text))
    renders.append(_section("commands", _commands_table(application.commands, styler, text), styler, text))
    renders.append(_section("global flags", _flags_table(flags, styler, text), styler, text))
    renders.append(_section("version", text(application.version, styler("program-version")), styler, text))
    renders.extend(_diagnostics(application, styler, text))

    console.print(_chrome(application, Group(*renders), "%s help" % application.name, styler))


def render_version(application, /, *, json=False, console=Unset):
    """
    Print version, build identifiers and diagnostics of application.
    """
    console = Console() if console is Unset else console

    if json:
        console.print_json(data={
            "name": application.name,
            "version": application.version,
            "release": application.release,
            "commit": application.commit,
            **{key.lower(): value for key, value in application.diagnostics().items()},
        })
        return

    styler, text = _stylers(application)

    renders = [Text(" — ").join((
        text(application.name, styler("program-name")),
        text(application.version, styler("program-version")),
    ))]

    for label, value in (("release", application.release), ("commit", application.commit)):
        if value:
            line = Text()
            line.append(text(label, styler("label"))).append(": ")
            line.append(text(value, styler("diagnostics")))
            renders.append(line)

    renders.extend(_diagnostics(application, styler, text))

    console.print(_chrome(application, Group(*renders), "%s version" % application.name, styler))


__all__ = (
    "render_help",
    "render_version",
)
