"""
Helmsman dispatch engine.

A Command pairs a built Definition with the collaborators it needs at call
time (message registry, execution provider, sender validator) and turns raw
tokens into exactly one handler invocation, or exactly one message.

Dispatch steps (the first failure halts and sends one message)
1. sender validation: the caller must be an instance of the declared sender type;
2. requirements: the first unmet requirement sends its message;
3. argument resolution, in declaration order, with the caller at index 0:
   • limitless arguments take every remaining token as one unit and end the loop;
   • string arguments take one token; a missing or empty token resolves to
     None when optional and fails with NOT_ENOUGH_ARGUMENTS otherwise;
   • a rejected token fails with INVALID_ARGUMENT;
4. arity: without a limitless argument, len(tokens) >= len(values) (caller
   included) fails with TOO_MANY_ARGUMENTS;
5. the execution provider invokes the handler.

Named-argument mode feeds the same steps from a name → value mapping (see
execute_named and map_arguments).
"""
import logging
from collections import defaultdict

from rich.console import Group
from rich.table import Table
from rich.text import Text

from . import messages
from .arguments import Failure, FlagArgument, StringArgument
from .utils import *

logger = logging.getLogger(__name__)


class Command(metaclass=IntrospectableType):
    """
    One dispatchable sub-command.

    Properties
    - parent / name / aliases / description / default: the command identity.
    - sender: the declared caller type.
    - arguments: the ordered argument model (sender slot excluded).
    - requirements: the requirement set checked before resolution.
    - flags: the flag group (empty when no flags are declared).
    - named / asynchronous: the dispatch and execution modifiers.
    """
    __introspectable__ = (
        "parent",
        "name",
        "aliases",
        "description",
        "default",
        "sender",
        "arguments",
        "requirements",
        "flags",
        "named",
        "asynchronous",
    )
    __displayable__ = ("parent", "name", "aliases", "default", "arguments")

    def __init__(self, descriptor, definition, /, registry, provider, senders):
        self._parent = descriptor.parent
        self._name = descriptor.name
        self._aliases = descriptor.aliases
        self._description = descriptor.description
        self._default = descriptor.default
        self._handler = descriptor.handler
        self._sender = definition.sender
        self._arguments = tuple(definition.arguments)
        self._requirements = tuple(definition.requirements)
        self._flags = definition.flags
        self._limitless = definition.limitless
        self._named = definition.named
        self._asynchronous = descriptor.asynchronous
        self._messages = registry
        self._provider = provider
        self._senders = senders

    @property
    def qualname(self):
        return f"{self._parent} {self._name}"

    def get_argument(self, name, /):
        """
        Return the argument named name, or the only argument whose name starts
        with it (case-insensitive); None when missing or ambiguous.
        """
        name = name.lower()
        for argument in self._arguments:
            if argument.name == name:
                return argument
        matches = [argument for argument in self._arguments if argument.name.startswith(name)]
        return matches[0] if len(matches) == 1 else None

    def map_arguments(self, arguments, /):
        """
        Map supplied name → value pairs onto the declared arguments, in order.

        Names are looked up with get_argument; unknown names are dropped and
        declared arguments without a value map to the empty string.
        """
        supplied = {}
        for name, value in arguments.items():
            if (argument := self.get_argument(name)) is not None:
                supplied[argument.name] = value
        return {argument.name: supplied.get(argument.name, "") for argument in self._arguments}

    def execute_named(self, caller, arguments, /):
        """
        Dispatch from a name → value mapping instead of positional tokens.

        Values of limitless arguments are split on whitespace into tokens.
        """
        tokens = []
        for argument, value in zip(self._arguments, self.map_arguments(arguments).values()):
            if argument.limitless:
                tokens.extend(value.split())
            else:
                tokens.append(value)
        return self.execute(caller, tokens)

    def execute(self, caller, tokens, /):
        """
        Dispatch one invocation.

        Returns the execution provider's result (the handler's return value, or
        a Future for asynchronous commands), or None when dispatch halted after
        sending a message.
        """
        tokens = list(tokens)

        if not self._senders.validate(self._sender, caller):
            return self._halt(caller, messages.INVALID_SENDER, messages.InvalidSenderContext(
                self._parent,
                self._name,
                sender=type(caller),
                expected=self._sender,
            ))

        for requirement in self._requirements:
            if not requirement.is_met(caller):
                return self._halt(caller, *requirement.message(self._parent, self._name))

        values = self._collect(caller, tokens)
        if isinstance(values, Failure):
            return self._halt(caller, values.key, values.context(self._parent, self._name))

        if not self._limitless and len(tokens) >= len(values):
            return self._halt(caller, messages.TOO_MANY_ARGUMENTS, messages.MessageContext(self._parent, self._name))

        return self._provider.execute(self._parent, self._name, self._handler, values)

    def _collect(self, caller, tokens, /):
        values = [caller]
        for index, argument in enumerate(self._arguments):
            if argument.limitless:
                value = argument.resolve(caller, tokens[index:])
                if isinstance(value, Failure):
                    return value
                values.append(value)
                return values

            if not isinstance(argument, StringArgument):
                raise RuntimeError(f"found unsupported argument {argument!r} in {self.qualname!r}")

            token = tokens[index] if index < len(tokens) else None
            if not token:
                if argument.optional:
                    values.append(None)
                    continue
                return Failure(messages.NOT_ENOUGH_ARGUMENTS)

            value = argument.resolve(caller, token)
            if isinstance(value, Failure):
                return value
            values.append(value)
        return values

    def _halt(self, caller, key, context, /):
        logger.debug("Dispatch of '%s' halted (%s)", self.qualname, key.name)
        self._messages.send(key, caller, context)

    def usage(self):
        """
        Return the one-line usage of the command, e.g. "bank pay <target> [amount]".
        """
        parts = [self._parent, self._name]
        for argument in self._arguments:
            if isinstance(argument, FlagArgument):
                parts.append("[flags...]")
            elif argument.limitless:
                parts.append(f"[{argument.name}...]" if argument.optional else f"<{argument.name}...>")
            else:
                parts.append(f"[{argument.name}]" if argument.optional else f"<{argument.name}>")
        return " ".join(parts)

    def __rich__(self):
        """
        Render the command help: usage, description and the argument and flag tables.

        Palette keys (override with __styles__ in __main__)
        - usage-label, usage, description, argument-name, argument-type,
          argument-description, flag-name
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "usage": "bold #36C5F0",  # SKY-BLUE → softer than cyan
            "description": "italic #A3A3A3",  # Neutral gray
            "argument-name": "bold #FFD600",  # AMBER for parameters
            "argument-type": "#FF4D94",  # MAGENTA-PINK types
            "argument-description": "#9CA3AF",  # Muted gray
            "flag-name": "bold #22C55E",  # GREEN for flags
        } | getattr(__import__("__main__"), "__styles__", {}))

        renders = [
            Text.assemble(Text("usage", styles["usage-label"]), ": ", Text(self.usage(), styles["usage"])),
            Text(self._description, styles["description"]),
        ]

        if self._arguments:
            table = Table(box=None, show_header=False, pad_edge=False)
            for argument in self._arguments:
                table.add_row(
                    Text(argument.name, styles["argument-name"]),
                    Text(getattr(argument.type, "__name__", str(argument.type)), styles["argument-type"]),
                    Text(argument.description, styles["argument-description"]),
                )
            renders.append(table)

        if self._flags:
            table = Table(box=None, show_header=False, pad_edge=False)
            for options in self._flags:
                table.add_row(
                    Text(" | ".join(
                        ("-" if identifier == options.flag else "--") + identifier for identifier in options.identifiers
                    ), styles["flag-name"]),
                    Text("required" if options.required else "", styles["argument-description"]),
                )
            renders.append(table)

        return Group(*renders)


__all__ = (
    "Command",
)
