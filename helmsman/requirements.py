"""
Requirements: named preconditions over the caller, checked before any argument
is resolved.
"""
from . import messages
from .utils import *


class Requirement(metaclass=IntrospectableType):
    """
    A predicate over the caller plus the message sent when it does not hold.

    The message key defaults to REQUIREMENT_NOT_MET; the context factory is
    called as factory(parent, command) and defaults to MessageContext. invert
    negates the predicate.
    """
    __introspectable__ = ("key", "resolver", "message_key", "invert")
    __displayable__ = ("key", "message_key", "invert")

    def __init__(self, key, resolver, /, message_key=None, context_factory=messages.MessageContext, *, invert=False):
        self._key = key
        self._resolver = resolver
        self._message_key = message_key
        self._context_factory = context_factory
        self._invert = invert

    def is_met(self, caller, /):
        return bool(self._resolver(caller)) is not self._invert

    def message(self, parent, command, /):
        """
        Return the (key, context) pair describing this requirement's failure.
        """
        key = messages.REQUIREMENT_NOT_MET if self._message_key is None else self._message_key
        return key, self._context_factory(parent, command)


__all__ = (
    "Requirement",
)
