"""
Helmsman flags: declarations, the flag group parser and the parsed result.

Token grammar (applied to the limitless remainder handed to a flags parameter)
- "--long" / "--long=value": long identifier, optionally with an inline value.
- "-s" / "-s=value": short identifier, optionally with an inline value.
- "--": ends flag parsing; every later token is a plain argument.
- Anything else (including negative numbers like "-5") is a plain argument.

Valued flags take their inline value or, failing that, the next token unless it
looks like a flag. Flags declared with optional_arg may omit the value.

Matching precedence
1. exact identifier (short or long, depending on the dash form);
2. case-insensitive exact identifier;
3. unique case-insensitive prefix of a long identifier ("--verb" for "--verbose").
Ambiguous prefixes match nothing and are treated like unknown flags.

Unknown flags are kept as plain arguments unless the group is strict, in which
case UNKNOWN_FLAG is reported.
"""
import re

from . import messages
from .arguments import Failure
from .utils import *

_FLAGLIKE = re.compile(r"-{1,2}(?![\d\s=-])\S")


class FlagOptions(metaclass=IntrospectableType):
    """
    One declared flag.

    Properties
    - flag: short identifier or None.
    - long_flag: long identifier or None.
    - argument: the string argument resolving the flag's value, or None for
      presence-only flags.
    - optional_arg: whether a valued flag may be given without its value.
    - required: whether the flag must be present.
    """
    __introspectable__ = ("flag", "long_flag", "argument", "optional_arg", "required")
    __displayable__ = ("flag", "long_flag", "optional_arg", "required")

    def __init__(self, flag, long_flag, argument, optional_arg, required, /):
        self._flag = flag
        self._long_flag = long_flag
        self._argument = argument
        self._optional_arg = optional_arg
        self._required = required

    @property
    def key(self):
        return self._flag if self._flag is not None else self._long_flag

    @property
    def identifiers(self):
        return tuple(identifier for identifier in (self._flag, self._long_flag) if identifier is not None)


class FlagGroup:
    """
    Ordered set of flag declarations for one command, plus the parser.
    """

    def __init__(self, *, strict=False):
        self._options = []
        self._strict = strict

    def add(self, options, /):
        self._options.append(options)

    def __iter__(self):
        return iter(self._options)

    def __len__(self):
        return len(self._options)

    def __bool__(self):
        return bool(self._options)

    @property
    def strict(self):
        return self._strict

    def match(self, identifier, /, *, long):
        """
        Return the declared flag matching identifier, or None.
        """
        def candidates(options):
            return [options.long_flag] if long else [options.flag]

        for options in self._options:
            if identifier in candidates(options):
                return options

        folded = identifier.casefold()
        matches = [
            options for options in self._options
            if any(candidate is not None and candidate.casefold() == folded for candidate in candidates(options))
        ]
        if len(matches) == 1:
            return matches[0]
        if matches or not long or not folded:
            return None

        matches = [
            options for options in self._options
            if options.long_flag is not None and options.long_flag.casefold().startswith(folded)
        ]
        return matches[0] if len(matches) == 1 else None

    def parse(self, caller, tokens, /):
        """
        Segment tokens into flag occurrences and plain arguments.

        Returns a Flags object, or a Failure for the first problem found.
        """
        values = {}
        args = []
        index = 0
        terminated = False

        while index < len(tokens):
            token = tokens[index]
            index += 1

            if terminated:
                args.append(token)
                continue
            if token == "--":
                terminated = True
                continue
            if not _FLAGLIKE.match(token):
                args.append(token)
                continue

            long = token.startswith("--")
            identifier, assigned, inline = token[2 if long else 1:].partition("=")
            options = self.match(identifier, long=long)

            if options is None:
                if self._strict:
                    return Failure(messages.UNKNOWN_FLAG, flag=token)
                args.append(token)
                continue

            if options.argument is None:
                if assigned:
                    return Failure(messages.INVALID_FLAG_ARGUMENT, flag=options.key, value=inline, type=None)
                values[options] = None
                continue

            if assigned:
                raw = inline
            elif index < len(tokens) and tokens[index] != "--" and not _FLAGLIKE.match(tokens[index]):
                raw = tokens[index]
                index += 1
            elif options.optional_arg:
                values[options] = None
                continue
            else:
                return Failure(messages.MISSING_REQUIRED_FLAG_ARGUMENT, flag=options.key)

            value = options.argument.resolve(caller, raw)
            if isinstance(value, Failure):
                return Failure(messages.INVALID_FLAG_ARGUMENT, flag=options.key, value=raw, type=options.argument.type)
            values[options] = value

        for options in self._options:
            if options.required and options not in values:
                return Failure(messages.MISSING_REQUIRED_FLAG, flag=options.key)

        return Flags(values, args)


class Flags(metaclass=IntrospectableType):
    """
    Parsed flags handed to the handler.

    Lookups accept either identifier of a flag (short or long, exactly as
    declared). Presence-only flags and optional-arg flags given without a value
    are present with a None value.
    """
    __introspectable__ = ("values", "args")

    def __init__(self, values=(), args=(), /):
        self._values = {}
        for options, value in dict(values).items():
            for identifier in options.identifiers:
                self._values[identifier] = value
        self._args = tuple(args)

    @property
    def text(self):
        """
        The plain (non-flag) arguments joined by single spaces.
        """
        return " ".join(self._args)

    def has_flag(self, flag, /):
        return flag in self._values

    def get_flag(self, flag, type=None, /):
        """
        Return the flag's value; KeyError if the flag is absent, TypeError if
        the value is not an instance of type.
        """
        value = self._values[flag]
        if type is not None and not isinstance(value, type):
            raise TypeError(f"flag {flag!r} does not hold a {type.__name__} value")
        return value

    def get_flag_or_none(self, flag, type=None, /):
        if self._values.get(flag) is None:
            return None
        return self.get_flag(flag, type)

    def get_flag_or_default(self, flag, default, type=None, /):
        value = self.get_flag_or_none(flag, type)
        return default if value is None else value

    def __contains__(self, flag):
        return self.has_flag(flag)


__all__ = (
    "FlagOptions",
    "FlagGroup",
    "Flags",
)
