r"""
makever option specifications.

Overview
- Specs
  • Flag: presence-only option (recorded as True), e.g. -q/--quiet.
  • Valued: value-bearing option, e.g. -c=<codename> or -c <codename>.
  • Specification: a validated option table plus its long-form alias table.

- Capabilities (optional callables on a spec)
  • accepted(arguments): run every time the option is recorded, with a read-only
    view of the arguments accumulated so far.
  • helper(identifier): Valued only, run when the option's value asks for help
    (a canonical help token or the option's own 'trigger').

Metadata (sanitized on construction)
- Shared
  • accepted: Unset | Callable.
  • descr: Unset | str | Text (short help), non-empty when provided.
- Flag only
  • combinable: bool, False means the flag is used alone and ends processing.
- Valued only
  • metavar: Unset | str (label in help).
  • default: Unset | str, used when no valid explicit value follows.
  • trigger: Unset | str, extra help-trigger value (non-empty).
  • helper: Unset | Callable.

Validation highlights
- Identifiers and long forms must match r"--?[^\W\d_](-?[^\W_]+)*".
- Every alias must point to a declared identifier and cannot shadow one.
- Entries of an option table must be Flag or Valued instances; the kind of an
  entry is its type, so an entry can never be both (or neither).

Quick example:
    >>> from makever.arguments import Flag, Valued, Specification
    >>> table = Specification(
    ...     {"-v": Valued(default="patch"), "-f": Flag()},
    ...     {"--version": "-v", "--force": "-f"},
    ... )
    >>> table.resolve("--version")
    '-v'
"""
import functools
import operator
import re
from collections.abc import Mapping
from types import MappingProxyType

from rich.text import Text

from .utils import *

HELP_TOKENS = ("--help", "help", "-h")

_NAME = re.compile(r"--?[^\W\d_](-?[^\W_]+)*")


def _repr(self):
    return "%s(%s)" % (
        type(self).__typename__,
        ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
    )


def _rich_repr(self):
    for name in type(self).__introspectable__:
        yield name, getattr(self, name)


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only descriptors.

    Responsibilities
    - Expose the names listed in __introspectable__ as read-only properties
      mirroring the sanitized "_<name>" backing fields.
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Derive __typename__ from the class name for messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        return super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
                "__repr__": _repr,
                "__rich_repr__": _rich_repr,
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize the fields shared by Flag and Valued ('accepted', 'descr').

    Mutates `metadata` in place; raises TypeError/ValueError on bad input.
    """
    if (accepted := metadata["accepted"]) is not Unset and not callable(accepted):
        raise TypeError(f"{cls.__typename__} 'accepted' must be callable")

    if not isinstance(descr := metadata["descr"], str | Text | UnsetType):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate the value-bearing fields of a Valued spec.

    - metavar: Unset or a non-empty string after trimming.
    - default: Unset or a string, kept verbatim (it is recorded as-is).
    - trigger: Unset or a non-empty string; it is compared to raw values, so
      it is not trimmed.
    - helper: Unset or callable.
    """
    if not isinstance(metavar := metadata["metavar"], str | UnsetType):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = coalesce(metavar)

    if not isinstance(metadata["default"], str | UnsetType):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")

    if not isinstance(trigger := metadata["trigger"], str | UnsetType):
        raise TypeError(f"{cls.__typename__} 'trigger' must be a string")
    elif isinstance(trigger, str) and not trigger:
        raise ValueError(f"{cls.__typename__} 'trigger' cannot be empty")

    if (helper := metadata["helper"]) is not Unset and not callable(helper):
        raise TypeError(f"{cls.__typename__} 'helper' must be callable")


class Flag(metaclass=ArgumentType):
    """
    Presence-only option specification.

    A Flag never carries a value: when it is read, its identifier is recorded
    as True. A non-combinable flag (combinable=False) is meant to be used alone:
    reading it always ends processing, and it is only recorded when it is the
    first argument.
    """

    __introspectable__ = (
        "combinable",
        "accepted",
        "descr",
    )

    def __new__(cls, *, combinable=True, accepted=Unset, descr=Unset):
        metadata = {
            "combinable": bool(combinable),
            "accepted": accepted,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        return self

    def accept(self, arguments, /):
        """
        Run the 'accepted' capability, if any, with a read-only view of `arguments`.
        """
        if self._accepted is not None:
            self._accepted(MappingProxyType(arguments))


class Valued(metaclass=ArgumentType):
    """
    Value-bearing option specification.

    A Valued option takes its value inline (-x=value), from the next argument
    (-x value), from everything after an append marker (-x -- some words), or
    from its default when none of those is usable.

    Values that look like options (leading '-') or are the bare '=' are never
    recorded; the default (if any) is used instead. When the value read (or the
    rejected one) is a help token ('--help', 'help', '-h') or equals the
    option's 'trigger', the 'helper' capability runs instead of recording.
    """

    __introspectable__ = (
        "metavar",
        "default",
        "trigger",
        "accepted",
        "helper",
        "descr",
    )

    def __new__(
            cls,
            metavar=Unset,
            /,
            default=Unset,
            trigger=Unset,
            accepted=Unset,
            helper=Unset,
            descr=Unset,
    ):
        metadata = {
            "metavar": metavar,
            "default": default,
            "trigger": trigger,
            "accepted": accepted,
            "helper": helper,
            "descr": descr,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        return self

    @property
    def triggers(self):
        """
        Every value that asks for this option's help instead of being recorded.
        """
        if self._trigger is None:
            return HELP_TOKENS
        return HELP_TOKENS + (self._trigger,)

    def accept(self, arguments, /):
        """
        Run the 'accepted' capability, if any, with a read-only view of `arguments`.
        """
        if self._accepted is not None:
            self._accepted(MappingProxyType(arguments))

    def help(self, identifier, /):
        """
        Run the 'helper' capability, if any, for the canonical `identifier`.
        """
        if self._helper is not None:
            self._helper(identifier)


class Specification:
    """
    A validated option table and its long-form alias table.

    Parameters
    - options: Mapping[str, Flag | Valued]
      canonical identifier -> spec.
    - aliases: Mapping[str, str]
      long-form spelling -> canonical identifier.

    Raises
    - TypeError: non-mapping tables, non-string names, entries that are not
      Flag or Valued.
    - ValueError: malformed names, aliases pointing to undeclared identifiers
      or shadowing declared ones.
    """

    def __init__(self, options, aliases=(), /):
        if not isinstance(options, Mapping):
            raise TypeError("specification options must be a mapping")
        aliases = dict(aliases)

        for identifier, argument in options.items():
            _check_name(identifier, "identifiers")
            if not isinstance(argument, Flag | Valued):
                raise TypeError("specification entry %r must be a flag or a valued option" % identifier)

        for spelling, identifier in aliases.items():
            _check_name(spelling, "aliases")
            if identifier not in options:
                raise ValueError("alias %r points to an undeclared identifier %r" % (spelling, identifier))
            if spelling in options:
                raise ValueError("alias %r cannot shadow a declared identifier" % spelling)

        self._options = MappingProxyType(dict(options))
        self._aliases = MappingProxyType(aliases)

    options = mirror("options")
    aliases = mirror("aliases")

    def resolve(self, head, /):
        """
        Rewrite a long-form spelling into its canonical identifier; unknown
        spellings pass through unchanged.
        """
        return self._aliases.get(head, head)

    def __contains__(self, identifier):
        return identifier in self._options

    def __getitem__(self, identifier):
        return self._options[identifier]

    def __repr__(self):
        return "specification(options=%r, aliases=%r)" % (dict(self._options), dict(self._aliases))


def _check_name(name, kind, /):
    if not isinstance(name, str):
        raise TypeError(f"specification {kind} must be strings")
    if not _NAME.fullmatch(name):
        raise ValueError(f"specification {kind} must be valid shell-style option names, got {name!r}")


__all__ = (
    "HELP_TOKENS",
    "Flag",
    "Valued",
    "Specification",
)

del ArgumentType
