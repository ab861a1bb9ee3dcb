"""
Argument definition builder.

Turns a Descriptor into a Definition: the ordered, validated argument model,
the requirement set and the flag group of one command. Building runs once, at
registration time, and fails fast with a RegistrationError; a command whose
definition cannot be built never becomes dispatchable.

Order of extraction
1. flags (each declaration validated, then added to the group);
2. requirements (looked up by key);
3. the sender slot (checked against the sender allow-list);
4. arguments, in declaration order;
5. the ordering rules (an optional argument is only followed by optional
   arguments, and a limitless argument comes last).

Classification precedence for one parameter
1. list/tuple/set/frozenset → SplitStringArgument when a split pattern is
   declared, CollectionArgument otherwise (other collection generics are unsupported);
2. str with a join separator → JoinedStringArgument;
3. Flags → FlagArgument (requires at least one declared flag);
4. a type with a registered resolver → ResolvedArgument;
5. an enumeration → EnumArgument;
6. anything else is an unregistered argument type.
"""
import builtins
import enum
import logging
import re
import typing
from collections.abc import Collection

from .arguments import *
from .faults import *
from .flags import _FLAGLIKE, FlagGroup, FlagOptions, Flags
from .requirements import Requirement
from .utils import *

logger = logging.getLogger(__name__)

_COLLECTIONS = (list, tuple, set, frozenset)


class Definition(metaclass=IntrospectableType):
    """
    The immutable output of the builder, shared read-only by every dispatch.
    """
    __introspectable__ = ("sender", "arguments", "requirements", "flags", "limitless", "named")
    __displayable__ = ("sender", "arguments", "requirements", "limitless", "named")

    def __init__(self, sender, arguments, requirements, flags, named, /):
        self._sender = sender
        self._arguments = tuple(arguments)
        self._requirements = tuple(requirements)
        self._flags = flags
        self._limitless = any(argument.limitless for argument in self._arguments)
        self._named = named


class Builder:
    """
    Builds the Definition of one descriptor against the given registries.
    """

    def __init__(self, descriptor, /, resolvers, requirements, senders):
        self._descriptor = descriptor
        self._resolvers = resolvers
        self._requirements = requirements
        self._senders = senders

    def fail(self, error, message, /, **options):
        """
        Build a registration error bound to the command being built.
        """
        return error(message, command=self._descriptor.qualname, **options)

    def build(self):
        group = self.extract_flags()
        requirements = self.extract_requirements()
        sender = self.extract_sender()
        arguments = self.extract_arguments(group)
        self.validate_arguments(arguments)

        definition = Definition(sender, arguments, requirements, group, self._descriptor.named)
        logger.debug(
            "Built command '%s' (arguments=%s, requirements=%d, flags=%d)",
            self._descriptor.qualname,
            [type(argument).__typename__ for argument in definition.arguments],
            len(requirements),
            len(group),
        )
        return definition

    def extract_flags(self):
        group = FlagGroup(strict=self._descriptor.strict_flags)
        seen = set()

        for spec in self._descriptor.flags:
            if spec.flag is None and spec.long_flag is None:
                raise self.fail(MalformedFlagError, "flag declares neither a short nor a long identifier")

            for identifier in filter(None, (spec.flag, spec.long_flag)):
                if re.search(r"\s", identifier):
                    raise self.fail(MalformedFlagError, f"flag identifier {identifier!r} must not contain spaces", flag=identifier)
                if identifier.startswith("-") or "=" in identifier:
                    raise self.fail(MalformedFlagError, f"flag identifier {identifier!r} must not start with a dash or contain '='", flag=identifier)
                if not _FLAGLIKE.match("-" + identifier):
                    raise self.fail(
                        MalformedFlagError,
                        f"flag identifier {identifier!r} would be read as a plain argument",
                        flag=identifier,
                        hint="start flag identifiers with a letter",
                    )
                if identifier in seen:
                    raise self.fail(MalformedFlagError, f"flag identifier {identifier!r} is declared more than once", flag=identifier)
                seen.add(identifier)

            key = spec.flag if spec.flag is not None else spec.long_flag
            argument = None
            if spec.type is not None:
                argument = self.create_simple(hyphenate(key), "", spec.type, 0, spec.optional_arg, flag=key)

            group.add(FlagOptions(spec.flag, spec.long_flag, argument, spec.optional_arg, spec.required))

        return group

    def extract_requirements(self):
        requirements = []
        for require in self._descriptor.requirements:
            predicate = self._requirements.get(require.key)
            if predicate is None:
                raise self.fail(UnknownRequirementError, f"could not find requirement key {require.key!r}", requirement=require.key)
            requirements.append(Requirement(require.key, predicate, require.message, invert=require.invert))
        return requirements

    def extract_sender(self):
        sender = self._descriptor.sender
        if not self._senders.is_allowed(sender):
            raise self.fail(
                InvalidSenderTypeError,
                f"invalid sender type {sender.__name__!r}, allowed types are: "
                f"{', '.join(repr(allowed.__name__) for allowed in self._senders.allowed)}",
                sender=sender,
            )
        return sender

    def extract_arguments(self, group, /):
        return [self.create_argument(param, position, group) for position, param in enumerate(self._descriptor.params)]

    def create_argument(self, param, position, group, /):
        name = param.name or hyphenate(param.identifier)
        descriptions = self._descriptor.arg_descriptions
        description = param.description or (
            descriptions[position] if position < len(descriptions) else "No description provided."
        )
        optional = self._descriptor.named or param.optional
        type = param.type
        origin = typing.get_origin(type)

        if (origin or type) in _COLLECTIONS:
            collection = origin or type
            parameters = typing.get_args(type)
            if collection is tuple:
                if len(parameters) != 2 or parameters[1] is not Ellipsis:
                    raise self.fail(UnsupportedCollectionTypeError, f"unsupported collection type {type!r}", argument=name)
                parameters = parameters[:1]
            if len(parameters) != 1:
                raise self.fail(UnsupportedCollectionTypeError, f"unsupported collection type {type!r}", argument=name)

            element = self.create_simple(name, description, parameters[0], position, optional)
            if param.split is not None:
                return SplitStringArgument(name, description, type, position, optional, param.split, element, collection)
            return CollectionArgument(name, description, type, position, optional, element, collection)

        if origin is not None and isinstance(origin, builtins.type) and issubclass(origin, Collection):
            raise self.fail(UnsupportedCollectionTypeError, f"unsupported collection type {type!r}", argument=name)

        if type is str and param.join is not None:
            return JoinedStringArgument(name, description, type, position, optional, param.join)

        if type is Flags:
            if not group:
                raise self.fail(EmptyFlagGroupError, "flags argument detected but no flag declared", argument=name)
            return FlagArgument(name, description, type, position, optional, group)

        return self.create_simple(name, description, type, position, optional)

    def create_simple(self, name, description, type, position, optional, /, **options):
        resolver = self._resolvers.get(type)
        if resolver is not None:
            return ResolvedArgument(name, description, type, position, optional, resolver)
        if isinstance(type, builtins.type) and issubclass(type, enum.Enum):
            return EnumArgument(name, description, type, position, optional)
        raise self.fail(
            UnregisteredArgumentTypeError,
            f"no argument of type {getattr(type, '__name__', repr(type))!r} registered",
            argument=name,
            **options,
        )

    def validate_arguments(self, arguments, /):
        for index, argument in enumerate(arguments):
            following = arguments[index + 1:]
            if not following:
                continue
            if argument.limitless:
                raise self.fail(
                    MisplacedArgumentError,
                    "limitless argument is only allowed as the last argument",
                    argument=argument.name,
                    hint=f"move {argument.name!r} to the end of the parameters",
                )
            if argument.optional and not self._descriptor.named and not all(other.optional for other in following):
                raise self.fail(
                    MisplacedArgumentError,
                    "optional argument is only allowed before other optional arguments",
                    argument=argument.name,
                    hint=f"make {argument.name!r} required or move it after the required arguments",
                )


def build(descriptor, /, resolvers, requirements, senders):
    """
    Build the Definition of a descriptor; raises a RegistrationError on any
    configuration mistake.
    """
    return Builder(descriptor, resolvers, requirements, senders).build()


__all__ = (
    "Definition",
    "Builder",
    "build",
)
