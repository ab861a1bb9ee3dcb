r"""
Helmsman command handler descriptors.

Overview
- Specs
  • Param: one declared handler parameter (identifier, value type and modifiers).
  • FlagSpec: one flag declaration (short/long identifiers, optional value type).
  • Require: a reference to a registered requirement, with an optional message key.
  • Descriptor: everything the builder needs to know about one handler: its
    identity, sender type, parameters, flags and requirements.

- Decorator
  • @descriptor(parent, name, ...): build a Descriptor around the decorated handler.

Descriptors are explicit: the engine never inspects a handler's signature. The
sender occupies the first handler slot and is declared through `sender`; every
Param maps to the following slots, in order.

Metadata (sanitized on construction)
- Param
  • identifier: non-empty str, a valid Python identifier (used for the default name).
  • type: a class or a parameterized generic (list[int], tuple[str, ...], ...).
  • name / description: Unset | non-empty str.
  • optional: bool.
  • split: Unset | regular expression (compiled eagerly); collection types only.
  • join: Unset | str separator; str type only; split and join are mutually exclusive.
- FlagSpec
  • flag / long_flag: Unset | str (checked for shape by the builder).
  • type: Unset | class; optional_arg / required: bool.
- Descriptor
  • parent / name / aliases: lower-cased, whitespace-free, non-empty strings.
  • params / flags / requirements: tuples of the specs above (strings are
    accepted for requirements and wrapped into Require).

Quick example:
    >>> from helmsman.descriptors import descriptor, Param
    >>> @descriptor("bank", "pay", params=[Param("target", str), Param("amount", int, optional=True)])
    >>> def pay(sender, target, amount): ...
    ...
"""
import builtins
import re
import typing

from .messages import MessageKey
from .utils import *


def _sanitize_text(cls, metadata, name, /):
    """
    Internal: validate an Unset | non-empty string field in place (trimmed).
    """
    if not isinstance(text := metadata[name], str | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    elif isinstance(text, str) and not (text := text.strip()):
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    metadata[name] = text


def _sanitize_label(cls, label, field, /):
    """
    Internal: validate one command label (parent, name or alias) and return it lower-cased.
    """
    if not isinstance(label, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif not (label := label.strip().lower()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    elif re.search(r"\s", label):
        raise ValueError(f"{cls.__typename__} {field!r} cannot contain whitespaces")
    return label


def _sanitize_type(cls, metadata, /):
    """
    Internal: a value type is either a class or a parameterized generic.
    """
    type = metadata["type"]
    if not isinstance(type, builtins.type) and typing.get_origin(type) is None:
        raise TypeError(f"{cls.__typename__} 'type' must be a type")


class Param(metaclass=IntrospectableType):
    """
    One declared handler parameter, after the sender slot.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      on instances, mirroring the sanitized metadata values.
    """

    __introspectable__ = (
        "identifier",
        "type",
        "name",
        "description",
        "optional",
        "split",
        "join",
    )

    def __new__(
            cls,
            identifier,
            type=str,
            /,
            *,
            name=Unset,
            description=Unset,
            optional=False,
            split=Unset,
            join=Unset
    ):
        metadata = {
            "identifier": identifier,
            "type": type,
            "name": name,
            "description": description,
            "optional": bool(optional),
            "split": split,
            "join": join,
        }
        if not isinstance(identifier, str):
            raise TypeError(f"{cls.__typename__} 'identifier' must be a string")
        elif not identifier.isidentifier():
            raise ValueError(f"{cls.__typename__} 'identifier' must be a valid identifier")

        _sanitize_type(cls, metadata)
        _sanitize_text(cls, metadata, "name")
        _sanitize_text(cls, metadata, "description")

        if isinstance(metadata["name"], str) and re.search(r"\s", metadata["name"]):
            raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespaces")

        if not isinstance(split, str | Unset):
            raise TypeError(f"{cls.__typename__} 'split' must be a string")
        elif isinstance(split, str):
            if not split:
                raise ValueError(f"{cls.__typename__} 'split' cannot be empty")
            try:
                metadata["split"] = re.compile(split)
            except re.error as error:
                raise ValueError(f"{cls.__typename__} 'split' must be a valid regular expression") from error

        if not isinstance(join, str | Unset):
            raise TypeError(f"{cls.__typename__} 'join' must be a string")
        if split is not Unset and join is not Unset:
            raise TypeError(f"{cls.__typename__} cannot be both split and joined")
        if split is not Unset and (typing.get_origin(type) or type) not in (list, tuple, set, frozenset):
            raise TypeError(f"{cls.__typename__} 'split' requires a list, tuple, set or frozenset type")
        if join is not Unset and type is not str:
            raise TypeError(f"{cls.__typename__} 'join' requires the str type")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        return self


class FlagSpec(metaclass=IntrospectableType):
    """
    One flag declaration. Shape checks (identifiers present, unique and free of
    whitespace) belong to the builder, which reports them as registration errors.
    """

    __introspectable__ = (
        "flag",
        "long_flag",
        "type",
        "optional_arg",
        "required",
    )

    def __new__(cls, flag=Unset, long_flag=Unset, /, *, type=Unset, optional_arg=False, required=False):
        if not isinstance(flag, str | None | Unset):
            raise TypeError(f"{cls.__typename__} 'flag' must be a string")
        if not isinstance(long_flag, str | None | Unset):
            raise TypeError(f"{cls.__typename__} 'long_flag' must be a string")
        if not isinstance(type, builtins.type | Unset):
            raise TypeError(f"{cls.__typename__} 'type' must be a type")

        self = super().__new__(cls)
        self._flag = coalesce(flag or Unset)
        self._long_flag = coalesce(long_flag or Unset)
        self._type = coalesce(type)
        self._optional_arg = bool(optional_arg)
        self._required = bool(required)
        return self


class Require(metaclass=IntrospectableType):
    __introspectable__ = ("key", "message", "invert")

    def __new__(cls, key, message=Unset, /, *, invert=False):
        if not isinstance(key, str):
            raise TypeError(f"{cls.__typename__} 'key' must be a string")
        elif not (key := key.strip()):
            raise ValueError(f"{cls.__typename__} 'key' cannot be empty")
        if not isinstance(message, MessageKey | Unset):
            raise TypeError(f"{cls.__typename__} 'message' must be a message-key")

        self = super().__new__(cls)
        self._key = key
        self._message = coalesce(message)
        self._invert = bool(invert)
        return self


class Descriptor(metaclass=IntrospectableType):
    """
    Static metadata describing one command handler.

    Highlights
    - Identity: parent (the root command), name, aliases, description and the
      default marker (the sub-command run when no sub-command token matches).
    - Signature: sender type (first slot), then params in declaration order.
    - Modifiers: named (name → value dispatch), asynchronous (worker-pool
      execution) and strict_flags (unknown flags are reported instead of kept).

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes
      on instances, mirroring the sanitized metadata values.
    """

    __introspectable__ = (
        "handler",
        "parent",
        "name",
        "aliases",
        "description",
        "default",
        "sender",
        "params",
        "flags",
        "requirements",
        "arg_descriptions",
        "named",
        "asynchronous",
        "strict_flags",
    )
    __displayable__ = (
        "parent",
        "name",
        "aliases",
        "default",
        "sender",
        "params",
        "flags",
        "requirements",
    )

    def __new__(
            cls,
            handler,
            parent,
            name,
            /,
            *,
            sender=object,
            params=(),
            flags=(),
            requirements=(),
            aliases=(),
            description=Unset,
            arg_descriptions=(),
            default=False,
            named=False,
            asynchronous=False,
            strict_flags=False
    ):
        if not callable(handler):
            raise TypeError(f"{cls.__typename__} 'handler' must be callable")
        if not isinstance(sender, builtins.type):
            raise TypeError(f"{cls.__typename__} 'sender' must be a type")

        metadata = {
            "handler": handler,
            "parent": _sanitize_label(cls, parent, "parent"),
            "name": _sanitize_label(cls, name, "name"),
            "aliases": tuple(_sanitize_label(cls, alias, "aliases") for alias in aliases),
            "description": description,
            "default": bool(default),
            "sender": sender,
            "params": tuple(params),
            "flags": tuple(flags),
            "requirements": tuple(Require(requirement) if isinstance(requirement, str) else requirement for requirement in requirements),
            "arg_descriptions": tuple(arg_descriptions),
            "named": bool(named),
            "asynchronous": bool(asynchronous),
            "strict_flags": bool(strict_flags),
        }
        _sanitize_text(cls, metadata, "description")
        metadata["description"] = coalesce(metadata["description"], "No description provided.")

        if len(set(metadata["aliases"]) | {metadata["name"]}) != len(metadata["aliases"]) + 1:
            raise ValueError(f"{cls.__typename__} 'aliases' cannot contain duplicates or the name itself")

        identifiers = set()
        for param in metadata["params"]:
            if not isinstance(param, Param):
                raise TypeError(f"{cls.__typename__} 'params' must contain only params")
            elif param.identifier in identifiers:
                raise ValueError(f"{cls.__typename__} 'params' cannot contain duplicated identifiers")
            identifiers.add(param.identifier)

        if not all(isinstance(flag, FlagSpec) for flag in metadata["flags"]):
            raise TypeError(f"{cls.__typename__} 'flags' must contain only flag-specs")
        if not all(isinstance(requirement, Require) for requirement in metadata["requirements"]):
            raise TypeError(f"{cls.__typename__} 'requirements' must contain only requires or strings")
        if not all(isinstance(description, str) for description in metadata["arg_descriptions"]):
            raise TypeError(f"{cls.__typename__} 'arg_descriptions' must contain only strings")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def qualname(self):
        return f"{self._parent} {self._name}"


def descriptor(parent, name=Unset, /, **options):
    """
    Decorator/factory for describing a command handler.

    Usage
        @descriptor("bank", "pay", sender=Player, params=[Param("target", str)])
        def pay(sender, target): ...

    Behavior
    - Validates that it decorates a callable.
    - The command name defaults to the hyphenated handler name.
    - Returns the Descriptor; the handler stays reachable as descriptor.handler.
    """

    @rename("descriptor")
    def wrapper(handler, /):
        if not callable(handler):
            raise TypeError("@descriptor() must be applied to a callable")
        return Descriptor(handler, parent, coalesce(name, hyphenate(getattr(handler, "__name__", ""))), **options)

    return wrapper


__all__ = (
    "Param",
    "FlagSpec",
    "Require",
    "Descriptor",
    "descriptor",
)
