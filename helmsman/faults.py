"""
Helmsman faults (registration errors, execution errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the engine
  can surface, either at registration time (raised) or at dispatch time
  (delivered as messages, see helmsman.messages).
- RegistrationError and subclasses: configuration mistakes detected while a
  command is being built. They are fatal and prevent the command from ever
  becoming dispatchable; they surface to the integrator at startup, never to an
  end caller.
- CommandExecutionError: wraps any failure raised by a handler body, carrying
  the command's qualified name; the handler's exception is chained.
- compose(): shared rich layout used by registration errors and by the default
  message renderer.

Rendering
- Every fault reads as a header (command, code, title), one sentence and an
  optional hint; colors come from __styles__ in __main__ when present.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    groups
    - routing and preconditions (1110x)
      • UNKNOWN_COMMAND, INVALID_SENDER, REQUIREMENT_NOT_MET
    - positional arguments (1111x)
      • NOT_ENOUGH_ARGUMENTS, TOO_MANY_ARGUMENTS, INVALID_ARGUMENT
    - flags (1112x)
      • UNKNOWN_FLAG, MISSING_REQUIRED_FLAG, MISSING_REQUIRED_FLAG_ARGUMENT,
        INVALID_FLAG_ARGUMENT
    - execution (1113x)
      • COMMAND_EXECUTION
    - registration (131xx)
      • INVALID_SENDER_TYPE, UNREGISTERED_ARGUMENT_TYPE, UNSUPPORTED_COLLECTION_TYPE,
        MALFORMED_FLAG, EMPTY_FLAG_GROUP, UNKNOWN_REQUIREMENT, MISPLACED_ARGUMENT,
        DUPLICATE_COMMAND

    codes are stable so they can be grepped in logs; normalize() lets the host
    relabel them.
    """
    # --- routing and preconditions (11xxx) ---
    UNKNOWN_COMMAND                = 11101
    INVALID_SENDER                 = 11102
    REQUIREMENT_NOT_MET            = 11103

    # --- positional argument errors (11xxx) ---
    NOT_ENOUGH_ARGUMENTS           = 11111
    TOO_MANY_ARGUMENTS             = 11112
    INVALID_ARGUMENT               = 11113

    # --- flag errors (11xxx) ---
    UNKNOWN_FLAG                   = 11121
    MISSING_REQUIRED_FLAG          = 11122
    MISSING_REQUIRED_FLAG_ARGUMENT = 11123
    INVALID_FLAG_ARGUMENT          = 11124

    # --- execution errors (11xxx) ---
    COMMAND_EXECUTION              = 11131

    # --- registration errors (13xxx) ---
    INVALID_SENDER_TYPE            = 13101
    UNREGISTERED_ARGUMENT_TYPE     = 13102
    UNSUPPORTED_COLLECTION_TYPE    = 13103
    MALFORMED_FLAG                 = 13111
    EMPTY_FLAG_GROUP               = 13112
    UNKNOWN_REQUIREMENT            = 13121
    MISPLACED_ARGUMENT             = 13131
    DUPLICATE_COMMAND              = 13141

    def normalize(self):
        """
        the label of this code: __codes__[code] from __main__ if defined, else
        the numeric value.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def compose(code, title, message, hint=Unset, /, *, prog, colorful=True, fancy=False, palette=()):
    """
    build the rich renderable shared by every fault and message.

    layout
    - header: "[ prog — code | Title ]"
    - body: the one-sentence message, then an optional " → hint" line.
    - fancy mode wraps the body in a panel titled by the header.

    palette is merged over the defaults and then over __styles__ from __main__.
    """
    styles = defaultdict(str, {
        "prog-name": "bold #E6E6F0",  # near-white command name
        "code": "bold #00E5FF",  # neon cyan fault code
        "title": "bold #FF4DA6",  # friendly pinky title

        # body
        "message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",  # gentle green arrow
        "hint": "italic #9CE19C",  # gentle green hint text
    } | dict(palette) | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style):
        if not fragment:
            return Text("")
        return Text(str(fragment), styles[style] if colorful else "")

    header = Text.assemble(
        "[ ",
        text(getattr(__import__("__main__"), "__prog__", prog), "prog-name"),
        " — ",
        text(code.normalize(), "code"),
        " | ",
        text(title.title(), "title"),
        " ]",
    )
    body = [text(message, "message")]
    if hint:
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fancy:
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class RegistrationError(Exception):
    """
    base type for configuration mistakes detected while building a command.

    every subclass pins a FaultCode, a short title and a default hint; the
    instance carries the message and read-only options (at least "command", the
    qualified name of the offending command).
    """
    code = Unset
    title = "registration error"
    hint = Unset

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        try:
            return "%s: %s" % (self.options["command"], self.message)
        except KeyError:
            return self.message

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        if not isinstance(cls.code, FaultCode):
            raise TypeError(f"{cls.__name__} must declare a fault code")

    def __rich__(self):
        return compose(
            self.code,
            self.title,
            self.message,
            coalesce(self.options.get("hint", Unset), self.hint),
            prog=self.options.get("command", "helmsman"),
            colorful=self.options.get("colorful", True),
            fancy=self.options.get("fancy", False),
        )


class InvalidSenderTypeError(RegistrationError):
    code = FaultCode.INVALID_SENDER_TYPE
    title = "invalid sender type"
    hint = "declare one of the allowed sender types"


class UnregisteredArgumentTypeError(RegistrationError):
    code = FaultCode.UNREGISTERED_ARGUMENT_TYPE
    title = "unregistered argument type"
    hint = "register a resolver for the type before registering the command"


class UnsupportedCollectionTypeError(RegistrationError):
    code = FaultCode.UNSUPPORTED_COLLECTION_TYPE
    title = "unsupported collection type"
    hint = "use list[T], tuple[T, ...], set[T] or frozenset[T]"


class MalformedFlagError(RegistrationError):
    code = FaultCode.MALFORMED_FLAG
    title = "malformed flag"
    hint = "flag identifiers must be unique and must not contain spaces"


class EmptyFlagGroupError(RegistrationError):
    code = FaultCode.EMPTY_FLAG_GROUP
    title = "empty flag group"
    hint = "declare at least one flag or drop the flags parameter"


class UnknownRequirementError(RegistrationError):
    code = FaultCode.UNKNOWN_REQUIREMENT
    title = "unknown requirement"
    hint = "register the requirement key before registering the command"


class MisplacedArgumentError(RegistrationError):
    code = FaultCode.MISPLACED_ARGUMENT
    title = "misplaced argument"


class DuplicateCommandError(RegistrationError):
    code = FaultCode.DUPLICATE_COMMAND
    title = "duplicate command"
    hint = "pick another name or alias"


class CommandExecutionError(Exception):
    """
    raised (or stored on the future) when a handler body fails.

    the handler's exception is always chained as __cause__.
    """
    code = FaultCode.COMMAND_EXECUTION

    def __init__(self, parent, name, /):
        super().__init__(f"an error occurred while executing the command {parent!r} {name!r}")
        self.parent = parent
        self.name = name

    @property
    def qualname(self):
        return f"{self.parent} {self.name}"


__all__ = (
    "FaultCode",
    "RegistrationError",
    "InvalidSenderTypeError",
    "UnregisteredArgumentTypeError",
    "UnsupportedCollectionTypeError",
    "MalformedFlagError",
    "EmptyFlagGroupError",
    "UnknownRequirementError",
    "MisplacedArgumentError",
    "DuplicateCommandError",
    "CommandExecutionError",
    "compose",
)
