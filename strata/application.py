"""
Strata application bootstrap: the ordered startup sequence of the binary.

Sequence (each step is fatal on failure)
1. Resolve the invoking user (IdentityUnresolvedError).
2. Refuse to run with an effective uid of 0 (PrivilegedUserError).
3. Refuse interpreters older than MINIMUM_RUNTIME (UnsupportedRuntimeError).
4. Register every command, then every flag, into an explicitly constructed Registry.
5. Build the Application descriptor (identity, ordered commands/flags, renderers,
   diagnostics hook, not-found hook).
6. run(): hand the descriptor to click, which parses argv and executes.

Faults raised along the way are surfaced with trigger(): in shell mode they are
printed to the error stream and the process exits with status 1; otherwise they
propagate to the caller. Nothing is registered before the preconditions pass.

Collaborators
- Environment bundles the identity lookup, the effective-uid probe and the
  runtime version so they can be substituted (e.g., to simulate root).
- not_found(registry, ...) builds the `(token: str) -> None` hook handed to the
  dispatcher for unrecognized sub-commands: it looks up prefix candidates and
  always terminates, suggestions only change the message.
"""
import getpass
import logging
import os
import sys
from collections.abc import Callable
from types import MappingProxyType
from typing import NamedTuple

import click

from .descriptors import DescriptorType
from .diagnostics import collect
from .faults import *
from .registry import Registry
from .rendering import render_help, render_version
from .utils import *

logger = logging.getLogger(__name__)

MINIMUM_RUNTIME = (3, 11)


class Environment(NamedTuple):
    """
    Host facilities consulted before anything is registered.

    - username: returns the invoking user's name; may raise OSError/KeyError.
    - euid: returns the effective uid, or None where the platform has no uids.
    - version: interpreter version tuple (major, minor, ...).
    """
    username: Callable = getpass.getuser
    euid: Callable | None = getattr(os, "geteuid", None)
    version: tuple = tuple(sys.version_info)


class Invocation(NamedTuple):
    """
    What a command action receives when it runs.

    - application: the Application being executed.
    - command: the Command descriptor that was selected.
    - state: whatever the application's before hook returned (None without one).
    - options: read-only mapping of the command-scoped flag values.
    """
    application: object
    command: object
    state: object
    options: MappingProxyType


def check_environment(environment=Unset, /):
    """
    Enforce the startup preconditions and return the invoking user's name.

    Raises
    - IdentityUnresolvedError, PrivilegedUserError, UnsupportedRuntimeError.
    """
    environment = coalesce(environment, Environment())

    try:
        user = environment.username()
    except (OSError, KeyError, ImportError) as exception:
        raise IdentityUnresolvedError(
            "unable to determine the invoking user (%s)" % exception,
            title="identity unresolved",
            code=FaultCode.IDENTITY_UNRESOLVED,
            hint="make sure the current uid has a passwd entry or USER is set",
            docs=getdoc(FaultCode.IDENTITY_UNRESOLVED),
        ) from None
    if not user:
        raise IdentityUnresolvedError(
            "unable to determine the invoking user",
            title="identity unresolved",
            code=FaultCode.IDENTITY_UNRESOLVED,
            hint="make sure the current uid has a passwd entry or USER is set",
            docs=getdoc(FaultCode.IDENTITY_UNRESOLVED),
        )
    logger.debug("running as %r", user)

    if environment.euid is not None and environment.euid() == 0:
        raise PrivilegedUserError(
            "refusing to run with root privileges",
            title="privileged user",
            code=FaultCode.PRIVILEGED_USER,
            hint="please run as a non-root user",
            docs=getdoc(FaultCode.PRIVILEGED_USER),
        )

    if tuple(environment.version[:2]) < MINIMUM_RUNTIME:
        raise UnsupportedRuntimeError(
            "python %s is not supported, %s or newer is required" % (
                ".".join(map(str, environment.version[:3])), ".".join(map(str, MINIMUM_RUNTIME))
            ),
            title="unsupported runtime",
            code=FaultCode.UNSUPPORTED_RUNTIME,
            hint="upgrade the interpreter running this binary",
            docs=getdoc(FaultCode.UNSUPPORTED_RUNTIME),
        )
    return user


def not_found(registry, /, *, prog, **options):
    """
    Build the hook called with an unrecognized sub-command token.

    The hook queries the registry's trie for prefix candidates and triggers an
    UnknownCommandError carrying them; it never returns normally.
    """
    @rename("not_found")
    def hook(token: str) -> None:
        suggestions = registry.closest(token)
        logger.debug("unknown command %r, %d candidate(s)", token, len(suggestions))
        trigger(UnknownCommandError(
            "%r is not a %s sub-command" % (token, prog),
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            input=token,
            suggestions=tuple(suggestions),
            hint="run '%s --help' to see available commands" % prog,
            docs=getdoc(FaultCode.UNKNOWN_COMMAND),
        ), prog=prog, **options)

    return hook


class Application(metaclass=DescriptorType):
    """
    Top-level descriptor of the binary, produced by bootstrap().

    Identity: name, usage, descr, version, release, commit, user.
    Wiring: registry (ordered commands/flags), before (state factory run after
    global flags are parsed), diagnostics (snapshot hook), not_found (hook).
    Runtime: shell, fancy, colorful.
    """

    __introspectable__ = (
        "name",
        "usage",
        "descr",
        "version",
        "release",
        "commit",
        "user",
        "registry",
        "before",
        "diagnostics",
        "not_found",
        "shell",
        "fancy",
        "colorful",
    )
    __displayable__ = (
        "name",
        "version",
        "registry",
    )

    def __init__(self, **fields):
        for name in type(self).__introspectable__:
            setattr(self, "_" + name, fields[name])

    @property
    def commands(self):
        return tuple(self._registry.commands)

    @property
    def flags(self):
        return tuple(self._registry.flags)

    @property
    def options(self):
        """
        Runtime options forwarded to trigger() for faults raised while running.
        """
        return {"shell": self.shell, "fancy": self.fancy, "colorful": self.colorful, "prog": self.name}

    def help(self, /, *, console=Unset):
        render_help(self, console=console)

    def show_version(self, /, *, json=False, console=Unset):
        render_version(self, json=json, console=console)


def bootstrap(
        commands,
        flags,
        /,
        *,
        name,
        usage=Unset,
        descr=Unset,
        version="0.0.0",
        release=Unset,
        commit=Unset,
        before=Unset,
        registry=Unset,
        environment=Unset,
        diagnostics=collect,
        shell=True,
        fancy=False,
        colorful=True,
):
    """
    Run the startup sequence and return the assembled Application.

    Parameters
    - commands, flags: iterables of Command/Flag descriptors, registered in order.
    - name, usage, descr, version, release, commit: identity shown in help/version.
    - before: callable receiving the parsed global flag values (read-only mapping)
      and returning the state handed to actions; Unset keeps that mapping as state.
    - registry: Registry to populate (a fresh one by default).
    - environment: Environment to check (the real host by default).
    - diagnostics: zero-argument callable returning the diagnostics snapshot.
    - shell, fancy, colorful: fault/rendering options.
    """
    options = {"shell": shell, "fancy": fancy, "colorful": colorful, "prog": name}
    registry = Registry() if registry is Unset else registry

    try:
        user = check_environment(environment)
        for command in commands:
            registry.register_command(command)
        for flag in flags:
            registry.register_flag(flag)
    except StrataException as fault:
        logger.debug("bootstrap aborted: %s", fault)
        trigger(fault, **options)
        raise  # unreachable: trigger() either raises or exits

    logger.debug("bootstrap complete: %r", registry)
    return Application(
        name=name,
        usage=coalesce(usage),
        descr=coalesce(descr),
        version=version,
        release=coalesce(release),
        commit=coalesce(commit),
        user=user,
        registry=registry,
        before=coalesce(before),
        diagnostics=diagnostics,
        not_found=not_found(registry, shell=shell, fancy=fancy, colorful=colorful, prog=name),
        shell=shell,
        fancy=fancy,
        colorful=colorful,
    )


class Dispatcher(click.Group):
    """
    click group that lists commands in registration order and routes unknown
    sub-commands to a not-found hook instead of click's generic usage error.
    """

    def __init__(self, *args, not_found, **kwargs):
        super().__init__(*args, **kwargs)
        self.not_found = not_found

    def list_commands(self, ctx):
        return list(self.commands)

    def resolve_command(self, ctx, args):
        token = click.utils.make_str(args[0])
        if self.get_command(ctx, token) is None and not token.startswith("-") and not ctx.resilient_parsing:
            self.not_found(token)
        return super().resolve_command(ctx, args)


def _option(flag, /):
    declarations = [flag.param, *flag.names]
    if flag.switch:
        return click.Option(
            declarations, is_flag=True, default=flag.default, help=flag.descr, envvar=flag.envvar, hidden=flag.hidden,
        )
    return click.Option(
        declarations, type=flag.type, default=flag.default, help=flag.descr, envvar=flag.envvar, hidden=flag.hidden,
        show_default=flag.default is not None,
    )


def _helper(application, /):
    def callback(context, parameter, value):
        if not value or context.resilient_parsing:
            return
        application.help()
        context.exit(0)

    return click.Option(
        ["--help", "-h"], is_flag=True, expose_value=False, is_eager=True, callback=callback,
        help="show this help message and exit",
    )


def _before(application, /):
    @click.pass_context
    def callback(context, /, **options):
        if context.invoked_subcommand is None:
            application.help()
            context.exit(0)
        options = MappingProxyType(options)
        try:
            context.obj = options if application.before is None else application.before(options)
        except StrataException as fault:
            trigger(fault, **application.options)

    return callback


def _action(application, command, /):
    @click.pass_context
    def callback(context, /, **options):
        if command.action is None:
            return None
        logger.debug("running command %r", command.name)
        try:
            return command.action(Invocation(application, command, context.obj, MappingProxyType(options)))
        except StrataException as fault:
            trigger(fault, **application.options)

    return callback


def dispatcher(application, /):
    """
    Translate application into the click group that parses and executes argv.
    """
    registry = application.registry
    commands = [
        click.Command(
            name=command.name,
            callback=_action(application, command),
            params=[_option(flag) for flag in registry.flags.scoped(command.name)],
            help=command.descr or command.usage,
            short_help=command.usage,
            hidden=command.hidden,
            context_settings={"help_option_names": ["-h", "--help"]},
        )
        for command in registry.commands
    ]
    return Dispatcher(
        name=application.name,
        commands=commands,
        params=[*(_option(flag) for flag in registry.flags.scoped("global")), _helper(application)],
        callback=_before(application),
        help=application.usage,
        invoke_without_command=True,
        add_help_option=False,
        not_found=application.not_found,
    )


def run(application, args=Unset, /):
    """
    Delegate to click: parse args (sys.argv[1:] when Unset), execute, and exit.
    """
    return dispatcher(application).main(
        args=None if args is Unset else list(args),
        prog_name=application.name,
        standalone_mode=True,
    )


__all__ = (
    "MINIMUM_RUNTIME",
    "Environment",
    "Invocation",
    "Application",
    "Dispatcher",
    "check_environment",
    "not_found",
    "bootstrap",
    "dispatcher",
    "run",
)
