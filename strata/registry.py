"""
Strata command and flag registries.

Overview
- CommandRegistry: ordered collection of Command descriptors. Every registered
  name is also inserted into a PrefixTrie so unrecognized input can be matched
  against known commands (see closest()).
- FlagRegistry: ordered collection of Flag descriptors, unique per scope.
- Registry: the pair of registries plus the shared trie, constructed explicitly
  by the bootstrap and passed by reference to whoever needs it.

Contract
- Registration order is preserved; help output relies on it.
- A conflicting registration raises a ConfigurationError and leaves the
  registry exactly as it was (validation happens before any mutation).
- Registries are populated once at startup and only read afterwards, so
  concurrent readers need no locking.
"""
import logging

from .descriptors import GLOBAL, Command, Flag
from .faults import FaultCode, DuplicateCommandError, DuplicateFlagError, UnknownScopeError, getdoc
from .tries import PrefixTrie
from .utils import Unset

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Ordered, name-unique set of commands backed by a prefix trie.
    """

    def __init__(self, trie=Unset, /):
        self._trie = PrefixTrie() if trie is Unset else trie
        self._commands = {}

    @property
    def trie(self):
        return self._trie

    def register(self, command, /):
        """
        Append command and index its name in the trie.

        Raises
        - TypeError: command is not a Command.
        - DuplicateCommandError: a command with the same name already exists.
        """
        if not isinstance(command, Command):
            raise TypeError("register() argument must be a command")
        if command.name in self._commands:
            raise DuplicateCommandError(
                "command %r is already registered" % command.name,
                title="duplicate command",
                code=FaultCode.DUPLICATE_COMMAND,
                name=command.name,
                hint="give every command a unique name",
                docs=getdoc(FaultCode.DUPLICATE_COMMAND),
            )

        self._commands[command.name] = command
        self._trie.insert(command.name, command.name)
        logger.debug("registered command %r", command.name)
        return command

    def closest(self, token, /):
        """
        Candidate command names for an unrecognized token (prefix match, lexicographic).
        """
        return self._trie.prefix_match(token)

    def __getitem__(self, name):
        return self._commands[name]

    def __contains__(self, name):
        return name in self._commands

    def __iter__(self):
        return iter(tuple(self._commands.values()))

    def __len__(self):
        return len(self._commands)

    def __repr__(self):
        return "command-registry(%s)" % ", ".join(map(repr, self._commands))


class FlagRegistry:
    """
    Ordered set of flags; names and aliases are unique within a scope.
    """

    def __init__(self):
        self._flags = []

    def register(self, flag, /, *, commands=Unset):
        """
        Append flag.

        Parameters
        - commands: optional container of known command names; when given, a
          flag scoped to a command outside of it is rejected.

        Raises
        - TypeError: flag is not a Flag.
        - UnknownScopeError: the flag's scope names an unknown command.
        - DuplicateFlagError: one of the flag's names is taken at the same scope.
        """
        if not isinstance(flag, Flag):
            raise TypeError("register() argument must be a flag")

        if commands is not Unset and flag.scope != GLOBAL and flag.scope not in commands:
            raise UnknownScopeError(
                "flag %r is scoped to unknown command %r" % (flag.name, flag.scope),
                title="unknown scope",
                code=FaultCode.UNKNOWN_SCOPE,
                name=flag.name,
                scope=flag.scope,
                hint="register the command before its flags",
                docs=getdoc(FaultCode.UNKNOWN_SCOPE),
            )

        taken = {name for other in self.scoped(flag.scope) for name in other.names}
        if clashes := [name for name in flag.names if name in taken]:
            raise DuplicateFlagError(
                "flag %r is already registered in %s scope" % (clashes[0], flag.scope),
                title="duplicate flag",
                code=FaultCode.DUPLICATE_FLAG,
                name=flag.name,
                scope=flag.scope,
                hint="rename the flag or drop the conflicting alias",
                docs=getdoc(FaultCode.DUPLICATE_FLAG),
            )

        self._flags.append(flag)
        logger.debug("registered flag %r (%s scope)", flag.name, flag.scope)
        return flag

    def scoped(self, scope, /):
        """
        Flags of one scope, in registration order.
        """
        return tuple(flag for flag in self._flags if flag.scope == scope)

    def __iter__(self):
        return iter(tuple(self._flags))

    def __len__(self):
        return len(self._flags)

    def __repr__(self):
        return "flag-registry(%s)" % ", ".join(repr(flag.name) for flag in self._flags)


class Registry:
    """
    Commands, flags and the shared command-name trie of one process.
    """

    def __init__(self):
        self._trie = PrefixTrie()
        self._commands = CommandRegistry(self._trie)
        self._flags = FlagRegistry()

    @property
    def commands(self):
        return self._commands

    @property
    def flags(self):
        return self._flags

    @property
    def trie(self):
        return self._trie

    def register_command(self, command, /):
        return self._commands.register(command)

    def register_flag(self, flag, /):
        return self._flags.register(flag, commands=self._commands)

    def closest(self, token, /):
        return self._commands.closest(token)

    def __repr__(self):
        return "registry(commands=%d, flags=%d)" % (len(self._commands), len(self._flags))


__all__ = (
    "CommandRegistry",
    "FlagRegistry",
    "Registry",
)
