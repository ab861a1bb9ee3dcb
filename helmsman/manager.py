"""
Command manager: the process-wide entry point.

The manager owns every registry and execution provider, builds descriptors
into commands at registration time and routes raw token sequences to them.
Commands are grouped by parent name; the first token selects a sub-command by
name or alias, falling back to the parent's default sub-command. When nothing
matches, UNKNOWN_COMMAND is sent.

Lifecycle
- startup: register resolvers, requirements, message handlers, then commands;
- steady state: execute() from any number of threads;
- teardown: shutdown() closes the asynchronous worker pool it created.
"""
import logging

from . import messages
from .builder import build
from .commands import Command
from .execution import AsyncExecutionProvider, SyncExecutionProvider
from .faults import DuplicateCommandError
from .registries import RequirementRegistry, ResolverRegistry, SenderValidator
from .utils import Unset

logger = logging.getLogger(__name__)


class CommandManager:
    """
    Registers commands and dispatches invocations to them.

    Options
    - senders: the caller types commands may declare (defaults to object).
    - colorful / fancy / console: default message rendering.
    - max_workers / executor: asynchronous execution pool.
    """

    def __init__(self, *senders, colorful=True, fancy=False, console=Unset, max_workers=None, executor=Unset):
        self._resolvers = ResolverRegistry()
        self._requirements = RequirementRegistry()
        self._messages = messages.MessageRegistry(colorful=colorful, fancy=fancy, console=console)
        self._senders = SenderValidator(*senders)
        self._sync = SyncExecutionProvider()
        self._async = AsyncExecutionProvider(max_workers=max_workers, executor=executor)
        self._commands = {}
        self._defaults = {}

    @property
    def resolvers(self):
        return self._resolvers

    @property
    def requirements(self):
        return self._requirements

    @property
    def messages(self):
        return self._messages

    @property
    def senders(self):
        return self._senders

    def register_resolver(self, type, resolver, /):
        self._resolvers.register(type, resolver)

    def register_requirement(self, key, predicate, /):
        self._requirements.register(key, predicate)

    def register_message(self, key, handler, /):
        self._messages.register(key, handler)

    def register(self, descriptor, /):
        """
        Build and register one descriptor; returns the Command.

        Raises a RegistrationError when the descriptor cannot be built, or a
        DuplicateCommandError when a name, alias or default slot is taken.
        """
        definition = build(descriptor, self._resolvers, self._requirements, self._senders)
        command = Command(
            descriptor,
            definition,
            registry=self._messages,
            provider=self._async if descriptor.asynchronous else self._sync,
            senders=self._senders,
        )

        table = self._commands.get(command.parent, {})
        for label in (command.name, *command.aliases):
            if label in table:
                raise DuplicateCommandError(f"{label!r} is already registered under {command.parent!r}", command=command.qualname)
        if command.default and command.parent in self._defaults:
            raise DuplicateCommandError(
                f"{command.parent!r} already has a default command",
                command=command.qualname,
                hint=f"{self._defaults[command.parent].qualname!r} is the default command",
            )

        for label in (command.name, *command.aliases):
            table[label] = command
        self._commands[command.parent] = table
        if command.default:
            self._defaults[command.parent] = command

        logger.debug("Registered command '%s' (aliases=%s, default=%s)", command.qualname, command.aliases, command.default)
        return command

    def get_command(self, parent, name=Unset, /):
        """
        Return the command registered as parent/name (or parent's default when
        name is omitted), or None.
        """
        if name is Unset:
            return self._defaults.get(parent.lower())
        return self._commands.get(parent.lower(), {}).get(name.lower())

    def execute(self, caller, parent, tokens, /):
        """
        Route one invocation of parent with the given raw tokens.
        """
        parent = parent.lower()
        tokens = list(tokens)

        if tokens and (command := self.get_command(parent, tokens[0])) is not None:
            logger.debug("Routing '%s' to '%s'", parent, command.qualname)
            return command.execute(caller, tokens[1:])

        if (command := self.get_command(parent)) is not None:
            logger.debug("Routing '%s' to default '%s'", parent, command.qualname)
            return command.execute(caller, tokens)

        logger.debug("No command matches '%s' (tokens=%s)", parent, tokens)
        self._messages.send(messages.UNKNOWN_COMMAND, caller, messages.MessageContext(parent, tokens[0] if tokens else ""))

    def execute_named(self, caller, parent, name, arguments, /):
        """
        Dispatch a named-argument invocation to parent/name.
        """
        if (command := self.get_command(parent, name)) is None:
            self._messages.send(messages.UNKNOWN_COMMAND, caller, messages.MessageContext(parent.lower(), name.lower()))
            return None
        return command.execute_named(caller, arguments)

    def shutdown(self, wait=True):
        self._async.shutdown(wait=wait)


__all__ = (
    "CommandManager",
)
