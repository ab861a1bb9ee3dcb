"""
Helmsman argument model.

Every declared handler parameter (after the sender slot) is built into exactly
one argument. The variants form a closed hierarchy; the dispatch engine only
distinguishes the two families:

- StringArgument: consumes exactly one token.
  • ResolvedArgument: converts the token with a registered resolver.
  • EnumArgument: looks the token up among an enumeration's member names.
  • SplitStringArgument: splits the token with a regular expression and
    resolves every piece into a collection.
- LimitlessArgument: consumes every remaining token as one unit; only allowed last.
  • CollectionArgument: resolves every remaining token into a collection.
  • JoinedStringArgument: joins the remaining tokens with a separator.
  • FlagArgument: parses the remaining tokens through a flag group.

resolve() returns the converted value or a Failure describing the message to
send. Arguments are immutable once built and shared across invocations.
"""
from types import MappingProxyType

from . import messages
from .utils import *


class Failure(metaclass=IntrospectableType):
    """
    A rejected resolution: the message key to send plus the context details
    beyond the parent/command names.
    """
    __introspectable__ = ("key", "details")

    def __init__(self, key, /, **details):
        self._key = key
        self._details = MappingProxyType(details)

    def context(self, parent, command, /):
        return self._key.context(parent, command, **self._details)


class Argument(metaclass=IntrospectableType):
    """
    Base of every argument variant.

    Properties
    - name: canonical lower-hyphen name (used by named-argument dispatch).
    - description: human description.
    - type: the declared value type.
    - position: 0-based index among the declared arguments.
    - optional: whether a missing token resolves to None.
    """
    __introspectable__ = ("name", "description", "type", "position", "optional")

    limitless = False

    def __init__(self, name, description, type, position, optional, /):
        self._name = name
        self._description = description
        self._type = type
        self._position = position
        self._optional = optional

    def resolve(self, caller, value, /):
        raise NotImplementedError

    def reject(self, token, /):
        return Failure(messages.INVALID_ARGUMENT, value=token, argument=self._name, type=self._type, position=self._position)


class StringArgument(Argument):
    """
    An argument consuming exactly one raw token.
    """


class ResolvedArgument(StringArgument):
    __introspectable__ = ("name", "description", "type", "position", "optional", "resolver")
    __displayable__ = ("name", "type", "position", "optional")

    def __init__(self, name, description, type, position, optional, resolver, /):
        super().__init__(name, description, type, position, optional)
        self._resolver = resolver

    def resolve(self, caller, token, /):
        try:
            value = self._resolver(caller, token)
        except (ValueError, TypeError):
            value = None
        if value is None:
            return self.reject(token)
        return value


class EnumArgument(StringArgument):
    """
    Resolves a token to the enumeration member with the same name, ignoring case.
    """

    def __init__(self, name, description, type, position, optional, /):
        super().__init__(name, description, type, position, optional)
        self._members = MappingProxyType({member.lower(): value for member, value in type.__members__.items()})

    def resolve(self, caller, token, /):
        try:
            return self._members[token.lower()]
        except KeyError:
            return self.reject(token)


def _collect(argument, caller, tokens, /):
    """
    Internal: resolve every token with the element argument, stopping at the
    first failure. The failure names the collection argument, not the element.
    """
    values = []
    for token in tokens:
        value = argument._element.resolve(caller, token)
        if isinstance(value, Failure):
            return argument.reject(token)
        values.append(value)
    return argument._collection(values)


class SplitStringArgument(StringArgument):
    """
    Splits its single token with a regular expression (trailing empty pieces
    are dropped) and resolves each piece into the declared collection.
    """
    __introspectable__ = ("name", "description", "type", "position", "optional", "pattern", "element", "collection")
    __displayable__ = ("name", "type", "position", "optional", "pattern")

    def __init__(self, name, description, type, position, optional, pattern, element, collection, /):
        super().__init__(name, description, type, position, optional)
        self._pattern = pattern
        self._element = element
        self._collection = collection

    def resolve(self, caller, token, /):
        pieces = self._pattern.split(token)
        while pieces and not pieces[-1]:
            pieces.pop()
        return _collect(self, caller, pieces)


class LimitlessArgument(Argument):
    """
    An argument consuming every remaining token as a single unit.
    """
    limitless = True


class CollectionArgument(LimitlessArgument):
    __introspectable__ = ("name", "description", "type", "position", "optional", "element", "collection")
    __displayable__ = ("name", "type", "position", "optional")

    def __init__(self, name, description, type, position, optional, element, collection, /):
        super().__init__(name, description, type, position, optional)
        self._element = element
        self._collection = collection

    def resolve(self, caller, tokens, /):
        return _collect(self, caller, tokens)


class JoinedStringArgument(LimitlessArgument):
    __introspectable__ = ("name", "description", "type", "position", "optional", "separator")

    def __init__(self, name, description, type, position, optional, separator, /):
        super().__init__(name, description, type, position, optional)
        self._separator = separator

    def resolve(self, caller, tokens, /):
        return self._separator.join(tokens)


class FlagArgument(LimitlessArgument):
    __introspectable__ = ("name", "description", "type", "position", "optional", "group")
    __displayable__ = ("name", "position", "group")

    def __init__(self, name, description, type, position, optional, group, /):
        super().__init__(name, description, type, position, optional)
        self._group = group

    def resolve(self, caller, tokens, /):
        return self._group.parse(caller, tokens)


__all__ = (
    "Failure",
    "Argument",
    "StringArgument",
    "ResolvedArgument",
    "EnumArgument",
    "SplitStringArgument",
    "LimitlessArgument",
    "CollectionArgument",
    "JoinedStringArgument",
    "FlagArgument",
)
