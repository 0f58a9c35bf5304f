"""
Strata faults (fatal errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
  Codes are grouped by domain to keep copy consistent and logs searchable.
- StrataException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Families
- ConfigurationError: defects in how the binary was assembled (duplicate
  command/flag names, flags scoped to unknown commands, invalid flag values).
- PreconditionError: the environment is unusable (identity, privileges, runtime).
- UnknownCommandError: user-input error, carries ordered suggestions.

Integration
- Library code raises faults directly; the bootstrap surfaces them through
  trigger(fault, shell=...). In shell mode they are rendered via rich on the
  error stream and the process exits with status 1; otherwise they are raised.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the binary (stable identifiers).

    grouping (by high-level domain)
    - routing (111xx)
      • UNKNOWN_COMMAND
    - registration and configuration (112xx)
      • DUPLICATE_COMMAND, DUPLICATE_FLAG, UNKNOWN_SCOPE, INVALID_CONFIG
    - environment preconditions (113xx)
      • IDENTITY_UNRESOLVED, PRIVILEGED_USER, UNSUPPORTED_RUNTIME

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- routing errors (111xx) ---
    UNKNOWN_COMMAND             = 11101

    # --- registration/configuration errors (112xx) ---
    DUPLICATE_COMMAND           = 11201
    DUPLICATE_FLAG              = 11202
    UNKNOWN_SCOPE               = 11203
    INVALID_CONFIG              = 11211

    # --- environment precondition errors (113xx) ---
    IDENTITY_UNRESOLVED         = 11301
    PRIVILEGED_USER             = 11302
    UNSUPPORTED_RUNTIME         = 11303

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class StrataException(Exception):
    """
    Base fault: a one-line message plus rendering/runtime options.

    Options commonly carried
    - title, code, hint, docs: copy shown in the rendered header/body.
    - prog: program name shown in the header (defaults to __main__.__prog__ or "strata").
    - shell: when True, __trigger__ renders and exits; otherwise it raises.
    - fancy, colorful: rich chrome toggles.
    """
    __defaults__ = MappingProxyType({
        "shell": False,
        "fancy": False,
        "colorful": True,
        "hint": None,
        "prog": Unset,
    })

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(dict(self.__defaults__) | options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "suggestion-dot": "#FFD600 dim",
            "suggestion": "bold #FFD600",
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if self.options["colorful"] else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.options["colorful"]:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(
            self.options["prog"] or getattr(main, "__prog__", "strata"), styler("prog-name")
        )
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code else "", styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        renders = [text(self.message, styler("error-message"))]

        if suggestions := self.options.get("suggestions"):
            block = Text()
            block.append("\ndid you mean one of these?\n")
            for suggestion in suggestions:
                block.append(text("   • ", styler("suggestion-dot")))
                block.append(text(suggestion, styler("suggestion"))).append("\n")
            renders.append(block)

        if self.options["hint"]:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.options["hint"], styler("hint"))))

        if self.options["fancy"]:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options["shell"]:
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConfigurationError(StrataException): ...
class DuplicateCommandError(ConfigurationError): ...
class DuplicateFlagError(ConfigurationError): ...
class UnknownScopeError(ConfigurationError): ...
class InvalidConfigError(ConfigurationError): ...

class PreconditionError(StrataException): ...
class IdentityUnresolvedError(PreconditionError): ...
class PrivilegedUserError(PreconditionError): ...
class UnsupportedRuntimeError(PreconditionError): ...

class UnknownCommandError(StrataException):
    @property
    def suggestions(self):
        return tuple(self.options.get("suggestions", ()))


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see StrataException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console and the process exits;
      otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "StrataException",
    "ConfigurationError",
    "DuplicateCommandError",
    "DuplicateFlagError",
    "UnknownScopeError",
    "InvalidConfigError",
    "PreconditionError",
    "IdentityUnresolvedError",
    "PrivilegedUserError",
    "UnsupportedRuntimeError",
    "UnknownCommandError",
    "FaultCode",
    "trigger",
    "getdoc",
)
