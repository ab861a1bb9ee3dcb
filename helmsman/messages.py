"""
Keyed message dispatch for dispatch-time failures.

Every user-facing failure the engine detects while dispatching (unknown
command, sender mismatch, unmet requirement, argument and flag problems) is
delivered as exactly one message: a MessageKey plus a structured context. The
embedder decides how it looks by registering a handler per key; keys without a
handler fall back to a rich rendering printed on the registry's console.

Contexts
- MessageContext: parent/command names; the base of every other context.
- InvalidArgumentContext: the offending token, argument name, expected type and position.
- InvalidSenderContext: the caller's type and the declared sender type.
- FlagContext: the flag identifier and, where relevant, the value and expected type.
"""
from .faults import FaultCode, compose, console as default_console
from .utils import IntrospectableType, Unset, coalesce, ordinal


class MessageContext(metaclass=IntrospectableType):
    """
    Context shared by every message: the parent command and the sub-command.
    """
    __introspectable__ = ("parent", "command")

    def __init__(self, parent, command, /):
        self._parent = parent
        self._command = command

    @property
    def qualname(self):
        return " ".join(filter(None, (self._parent, self._command)))

    def fields(self):
        """
        Return the mapping used to fill message templates.
        """
        return dict(self.__rich_repr__()) | {"qualname": self.qualname}

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return list(self.__rich_repr__()) == list(other.__rich_repr__())

    __hash__ = None


class InvalidArgumentContext(MessageContext):
    __introspectable__ = ("parent", "command", "value", "argument", "type", "position")

    def __init__(self, parent, command, /, *, value, argument, type, position):
        super().__init__(parent, command)
        self._value = value
        self._argument = argument
        self._type = type
        self._position = position

    def fields(self):
        return super().fields() | {
            "ordinal": ordinal(self._position + 1),
            "typename": getattr(self._type, "__name__", str(self._type)),
        }


class InvalidSenderContext(MessageContext):
    __introspectable__ = ("parent", "command", "sender", "expected")

    def __init__(self, parent, command, /, *, sender, expected):
        super().__init__(parent, command)
        self._sender = sender
        self._expected = expected

    def fields(self):
        return super().fields() | {
            "sender": self._sender.__name__,
            "expected": self._expected.__name__,
        }


class FlagContext(MessageContext):
    __introspectable__ = ("parent", "command", "flag", "value", "type")

    def __init__(self, parent, command, /, *, flag, value=None, type=None):
        super().__init__(parent, command)
        self._flag = flag
        self._value = value
        self._type = type

    def fields(self):
        return super().fields() | {
            "typename": "no value" if self._type is None else getattr(self._type, "__name__", str(self._type)),
        }


class MessageKey(metaclass=IntrospectableType):
    """
    Identifier of one kind of message, bound to the context type it carries.

    Custom keys (for requirements) default to the REQUIREMENT_NOT_MET fault
    code and a generic template; title, template and hint are str.format
    templates filled from the context's fields().
    """
    __introspectable__ = ("name", "context", "code")

    def __init__(self, name, /, context=MessageContext, *, code=FaultCode.REQUIREMENT_NOT_MET, title=Unset, template=Unset, hint=Unset):
        if not isinstance(name, str) or not name:
            raise TypeError("message key name must be a non-empty string")
        if not isinstance(context, type) or not issubclass(context, MessageContext):
            raise TypeError("message key context must be a message-context subclass")
        if not isinstance(code, FaultCode):
            raise TypeError("message key code must be a fault-code")
        self._name = name
        self._context = context
        self._code = code
        self._title = coalesce(title, name.replace("-", " ").replace("_", " ").lower())
        self._template = coalesce(template, "the command {qualname!r} cannot be executed right now")
        self._hint = hint

    def render(self, context, /, *, colorful=True, fancy=False):
        fields = context.fields()
        return compose(
            self._code,
            self._title.format_map(fields),
            self._template.format_map(fields),
            self._hint.format_map(fields) if self._hint else Unset,
            prog=context.qualname,
            colorful=colorful,
            fancy=fancy,
        )


UNKNOWN_COMMAND = MessageKey(
    "unknown-command",
    code=FaultCode.UNKNOWN_COMMAND,
    template="no command named {command!r} under {parent!r}",
    hint="check the command name for typos",
)
INVALID_SENDER = MessageKey(
    "invalid-sender",
    InvalidSenderContext,
    code=FaultCode.INVALID_SENDER,
    template="the command {qualname!r} cannot be used by a {sender}",
    hint="run it as a {expected}",
)
REQUIREMENT_NOT_MET = MessageKey(
    "requirement-not-met",
    code=FaultCode.REQUIREMENT_NOT_MET,
    hint="a precondition of the command is not met",
)
NOT_ENOUGH_ARGUMENTS = MessageKey(
    "not-enough-arguments",
    code=FaultCode.NOT_ENOUGH_ARGUMENTS,
    template="not enough arguments for {qualname!r}",
    hint="supply every required argument",
)
TOO_MANY_ARGUMENTS = MessageKey(
    "too-many-arguments",
    code=FaultCode.TOO_MANY_ARGUMENTS,
    template="too many arguments for {qualname!r}",
    hint="drop the trailing arguments",
)
INVALID_ARGUMENT = MessageKey(
    "invalid-argument",
    InvalidArgumentContext,
    code=FaultCode.INVALID_ARGUMENT,
    template="invalid {argument!r} from {ordinal} position: {value!r}",
    hint="expected a value of type {typename}",
)
UNKNOWN_FLAG = MessageKey(
    "unknown-flag",
    FlagContext,
    code=FaultCode.UNKNOWN_FLAG,
    template="unknown flag {flag!r} for {qualname!r}",
    hint="check the flag for typos",
)
MISSING_REQUIRED_FLAG = MessageKey(
    "missing-required-flag",
    FlagContext,
    code=FaultCode.MISSING_REQUIRED_FLAG,
    template="missing required flag {flag!r}",
    hint="the command {qualname!r} cannot run without it",
)
MISSING_REQUIRED_FLAG_ARGUMENT = MessageKey(
    "missing-required-flag-argument",
    FlagContext,
    code=FaultCode.MISSING_REQUIRED_FLAG_ARGUMENT,
    template="flag {flag!r} requires a value",
    hint="pass it inline ({flag}=value) or as the next token",
)
INVALID_FLAG_ARGUMENT = MessageKey(
    "invalid-flag-argument",
    FlagContext,
    code=FaultCode.INVALID_FLAG_ARGUMENT,
    template="invalid value {value!r} for flag {flag!r}",
    hint="expected {typename}",
)

DEFAULT_KEYS = (
    UNKNOWN_COMMAND,
    INVALID_SENDER,
    REQUIREMENT_NOT_MET,
    NOT_ENOUGH_ARGUMENTS,
    TOO_MANY_ARGUMENTS,
    INVALID_ARGUMENT,
    UNKNOWN_FLAG,
    MISSING_REQUIRED_FLAG,
    MISSING_REQUIRED_FLAG_ARGUMENT,
    INVALID_FLAG_ARGUMENT,
)


class MessageRegistry:
    """
    Process-wide message registry, created at startup and threaded explicitly
    through every command.

    Handlers are called as handler(caller, context). Keys with no handler are
    rendered with rich on the registry's console (stderr by default), honoring
    the colorful/fancy options.
    """

    def __init__(self, *, colorful=True, fancy=False, console=Unset):
        self._handlers = {}
        self._keys = set(DEFAULT_KEYS)
        self._colorful = colorful
        self._fancy = fancy
        self._console = coalesce(console, default_console)

    def register(self, key, handler, /):
        if not isinstance(key, MessageKey):
            raise TypeError("register() first argument must be a message-key")
        if not callable(handler):
            raise TypeError("register() second argument must be callable")
        self._keys.add(key)
        self._handlers[key] = handler

    def keys(self):
        return frozenset(self._keys)

    def __contains__(self, key):
        return key in self._handlers

    def send(self, key, caller, context, /):
        """
        Deliver one message for the given caller.
        """
        if not isinstance(context, key.context):
            raise TypeError(f"{key.name} expects a {key.context.__typename__} context")
        try:
            handler = self._handlers[key]
        except KeyError:
            return self.render(key, context)
        handler(caller, context)

    def render(self, key, context, /):
        self._console.print(key.render(context, colorful=self._colorful, fancy=self._fancy))


__all__ = (
    "MessageContext",
    "InvalidArgumentContext",
    "InvalidSenderContext",
    "FlagContext",
    "MessageKey",
    "MessageRegistry",
    "UNKNOWN_COMMAND",
    "INVALID_SENDER",
    "REQUIREMENT_NOT_MET",
    "NOT_ENOUGH_ARGUMENTS",
    "TOO_MANY_ARGUMENTS",
    "INVALID_ARGUMENT",
    "UNKNOWN_FLAG",
    "MISSING_REQUIRED_FLAG",
    "MISSING_REQUIRED_FLAG_ARGUMENT",
    "INVALID_FLAG_ARGUMENT",
    "DEFAULT_KEYS",
)
