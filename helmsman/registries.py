"""
Extension-point registries read by the builder and the dispatch engine.

- ResolverRegistry: value type → resolver(caller, token) converting one raw
  token into a typed value, or None when the token is rejected.
- RequirementRegistry: requirement key → predicate(caller) → bool.
- SenderValidator: the allow-list of caller types a command may declare.

Registries are populated at startup and read-only afterwards; registering
while commands are being dispatched must be serialized by the embedder.
"""
import builtins

from .utils import rename

_TRUTHY = frozenset({"true", "yes", "on", "1"})
_FALSY = frozenset({"false", "no", "off", "0"})


@rename("string")
def _string(caller, token):
    return token


@rename("integer")
def _integer(caller, token):
    return int(token)


@rename("decimal")
def _decimal(caller, token):
    return float(token)


@rename("boolean")
def _boolean(caller, token):
    token = token.lower()
    if token in _TRUTHY:
        return True
    if token in _FALSY:
        return False
    return None


class ResolverRegistry:
    """
    Maps value types to resolvers.

    A resolver is called as resolver(caller, token). Returning None, or raising
    ValueError or TypeError, rejects the token.
    """

    def __init__(self, *, defaults=True):
        self._resolvers = {}
        if defaults:
            self.register(str, _string)
            self.register(int, _integer)
            self.register(float, _decimal)
            self.register(bool, _boolean)

    def register(self, type, resolver, /):
        if not isinstance(type, builtins.type):
            raise TypeError("register() first argument must be a type")
        if not callable(resolver):
            raise TypeError("register() second argument must be callable")
        self._resolvers[type] = resolver

    def get(self, type, /):
        return self._resolvers.get(type)

    def __contains__(self, type):
        return type in self._resolvers


class RequirementRegistry:
    """
    Maps requirement keys to predicates over the caller.
    """

    def __init__(self):
        self._predicates = {}

    def register(self, key, predicate, /):
        if not isinstance(key, str) or not key:
            raise TypeError("register() first argument must be a non-empty string")
        if not callable(predicate):
            raise TypeError("register() second argument must be callable")
        self._predicates[key] = predicate

    def get(self, key, /):
        return self._predicates.get(key)

    def __contains__(self, key):
        return key in self._predicates


class SenderValidator:
    """
    Allow-list of caller types.

    A command may declare any subclass of an allowed type as its sender. At
    dispatch time the caller must be an instance of the declared type.
    """

    def __init__(self, *allowed):
        if not all(isinstance(type, builtins.type) for type in allowed):
            raise TypeError("SenderValidator() arguments must be types")
        self._allowed = tuple(allowed) or (object,)

    @property
    def allowed(self):
        return self._allowed

    def is_allowed(self, type, /):
        return isinstance(type, builtins.type) and issubclass(type, self._allowed)

    def validate(self, expected, caller, /):
        return isinstance(caller, expected)


__all__ = (
    "ResolverRegistry",
    "RequirementRegistry",
    "SenderValidator",
)
