"""
Helmsman utilities shared by the descriptor, argument and dispatch layers.

- Unset / coalesce: a "not given" marker distinct from None, and its resolution.
- rename: stable names for generated callables (readable tracebacks and reprs).
- mirror / IntrospectableType: read-only model objects with uniform reprs.
- hyphenate: canonical argument names ("targetPlayer" → "target-player").
- ordinal: position labels used by messages ("second", "12th").

    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> hyphenate("targetPlayer")
    'target-player'
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker: falsey, printable, sealed and single-instance.

    Descriptor options default to Unset so an explicit None can still be told
    apart from an omitted option.
    """

    def __or__(self, other, /):
        # lets "str | Unset" be used with isinstance
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return default when object is Unset, object otherwise (None and other
    falsey values are kept).
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    rename(callable, name) renames callable in place; rename(name) returns a
    decorator doing the same. Only __name__ and __qualname__ change.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("@rename() argument must be a string")
        return functools.partial(_rename_to, name)

    if len(parameters) != 2:
        raise TypeError(f"rename() takes 1 to 2 arguments but {len(parameters)} were given")

    callable, name = parameters
    if not builtins.callable(callable):
        raise TypeError("rename() first argument must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() second argument must be a string")
    try:
        callable.__name__ = callable.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError(f"cannot rename {callable!r}") from None
    return callable


def _rename_to(name, callable, /):
    return rename(callable, name)


def _copy(object):
    # containers are handed out as fresh copies, recursively
    if isinstance(object, Sequence) and not isinstance(object, str):
        return [_copy(item) for item in object]
    if isinstance(object, Mapping):
        return {key: _copy(value) for key, value in object.items()}
    if isinstance(object, Set):
        return {_copy(item) for item in object}
    return object


def mirror(name, /):
    """
    Build a read-only property returning a copy of self._<name>.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _copy(getattr(self, "_" + name))

    return property(rename(getter, name))


class IntrospectableType(type):
    """
    Metaclass of every model object (specs, arguments, contexts, commands).

    A class lists its public fields in __introspectable__; each one becomes a
    read-only mirror of the matching underscore attribute. __displayable__
    narrows the fields shown by repr() and rich. __typename__ is the
    hyphenated class name, used in validation errors.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        fields = {field: mirror(field) for field in namespace.get("__introspectable__", ())}
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | fields | {"__typename__": re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()},
        )

        @rename("__rich_repr__")
        def __rich_repr__(self):
            owner = type(self)
            for field in coalesce(owner.__displayable__, owner.__introspectable__):
                yield field, getattr(self, field)

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"

        self.__rich_repr__ = __rich_repr__
        self.__repr__ = __repr__
        return self


def hyphenate(identifier, /):
    """
    Lower-hyphen form of an identifier: camel humps, underscores and
    whitespace become single hyphens.

    - hyphenate("targetPlayer")  -> "target-player"
    - hyphenate("target_player") -> "target-player"
    - hyphenate("HTTPPort")      -> "http-port"
    """
    if not isinstance(identifier, str):
        raise TypeError("hyphenate() argument must be a string")
    identifier = re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "-", identifier.strip())
    return re.sub(r"[-_\s]+", "-", identifier).strip("-").lower()


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.cache
def ordinal(number, /):
    """
    Ordinal label of a 1-based position: words up to ten, then "11th", "22nd"...
    """
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if 10 < number % 100 < 20:
        return f"{number}th"
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "hyphenate",
    "ordinal",
    "UnsetType",
    "IntrospectableType",
    "Unset",
)
