"""
Strata command and flag descriptors.

Overview
- Command: a named sub-operation of the binary (name, usage summary, long
  description, action handler). The action is an opaque callable owned by
  the registry; it receives an Invocation when the command runs.
- Flag: a named configuration switch (name, aliases, default, description,
  scope). Scope is "global" or the name of the command it belongs to. A
  boolean default makes the flag presence-only.

Both descriptors are validated on construction and immutable afterwards:
every field is exposed through a read-only property (see DescriptorType).

Naming rules
- Command names, flag names and scopes must match r"[^\W\d_](-?[^\W_]+)*"
  (lowercase-friendly, hyphen separated, unicode letters allowed).
- Flag aliases are either such names or a single letter (short form).

Quick example:
    >>> from strata.descriptors import Command, Flag
    >>> server = Command("server", "start object storage server", action=print)
    >>> address = Flag("address", "a", default=":9000", descr="bind address")
    >>> address.names
    ('--address', '-a')
"""
import builtins
import functools
import operator
import re

from rich.text import Text

from .utils import *

GLOBAL = "global"

_NAME = re.compile(r"[^\W\d_](-?[^\W_]+)*")


class DescriptorType(type):
    """
    Metaclass that turns descriptor classes into introspectable, read-only records.

    Responsibilities
    - Expose every field listed in __introspectable__ as a read-only property
      mirroring the private "_<name>" backing attribute.
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in validation messages.
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - command(name='server', usage='start object storage server', ...)
            """
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())),
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, field, name, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    elif not _NAME.fullmatch(name):
        raise ValueError(f"{cls.__typename__} {field!r} must be a valid shell-style name (unicodes are allowed)")
    return name


def _sanitize_text(cls, field, text, /):
    """
    Optional human text: Unset becomes None, strings are trimmed and must not be empty.
    """
    if not isinstance(text, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif isinstance(text, str) and not (text := text.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    return coalesce(text)


class Command(metaclass=DescriptorType):
    """
    Named sub-operation of the binary.

    Fields
    - name: unique command name (e.g., "server").
    - usage: one-line summary shown next to the name in help.
    - descr: longer description (optional).
    - action: callable invoked with an Invocation; None makes the command a no-op.
    - hidden: suppress from help output (still dispatchable and suggestible).
    """

    __introspectable__ = (
        "name",
        "usage",
        "descr",
        "action",
        "hidden",
    )
    __displayable__ = (
        "name",
        "usage",
        "hidden",
    )

    def __init__(self, name, usage=Unset, /, *, descr=Unset, action=Unset, hidden=False):
        if action is not Unset and not callable(action):
            raise TypeError(f"{type(self).__typename__} 'action' must be callable")

        self._name = _sanitize_name(type(self), "name", name)
        self._usage = _sanitize_text(type(self), "usage", usage)
        self._descr = _sanitize_text(type(self), "descr", descr)
        self._action = coalesce(action)
        self._hidden = bool(hidden)

    def __eq__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash((Command, self.name))


class Flag(metaclass=DescriptorType):
    """
    Named configuration switch, global or scoped to a single command.

    Fields
    - name: long name without dashes (rendered as --name).
    - aliases: extra names; single letters render as -x, longer ones as --alias.
    - default: value used when the flag is absent. A bool default makes the flag
      presence-only (a switch).
    - descr: short description for help.
    - scope: GLOBAL ("global") or the name of the owning command.
    - type: converter for value-bearing flags (defaults to the type of default, or str).
    - envvar: environment variable that may supply the value.
    - hidden: suppress from help output.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "default",
        "descr",
        "scope",
        "type",
        "envvar",
        "hidden",
    )
    __displayable__ = (
        "name",
        "aliases",
        "default",
        "scope",
    )

    def __init__(
            self,
            name,
            /,
            *aliases,
            default=Unset,
            descr=Unset,
            scope=GLOBAL,
            type=Unset,
            envvar=Unset,
            hidden=False,
    ):
        cls = builtins.type(self)
        name = _sanitize_name(cls, "name", name)

        sanitized = []
        for alias in aliases:
            if isinstance(alias, str) and len(alias := alias.strip()) == 1 and alias.isalpha():
                pass
            else:
                alias = _sanitize_name(cls, "aliases", alias)
            if alias == name or alias in sanitized:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            sanitized.append(alias)

        default = coalesce(default)
        if type is Unset:
            type = str if default is None or isinstance(default, bool) else builtins.type(default)
        elif not callable(type):
            raise TypeError(f"{cls.__typename__} 'type' must be callable")

        if not isinstance(envvar, str | Unset):
            raise TypeError(f"{cls.__typename__} 'envvar' must be a string")
        elif isinstance(envvar, str) and not (envvar := envvar.strip()):
            raise ValueError(f"{cls.__typename__} 'envvar' cannot be empty")

        self._name = name
        self._aliases = tuple(sanitized)
        self._default = default
        self._descr = _sanitize_text(cls, "descr", descr)
        self._scope = GLOBAL if scope == GLOBAL else _sanitize_name(cls, "scope", scope)
        self._type = type
        self._envvar = coalesce(envvar)
        self._hidden = bool(hidden)

    @property
    def names(self):
        """
        Every spelling of the flag as typed on the command line, primary name first.
        """
        return tuple(("-" if len(name) == 1 else "--") + name for name in (self.name, *self.aliases))

    @property
    def switch(self):
        return isinstance(self.default, bool)

    @property
    def param(self):
        """
        Identifier under which the parsed value is delivered (hyphens become underscores).
        """
        return self.name.replace("-", "_")


__all__ = (
    "GLOBAL",
    "Command",
    "Flag",
)
