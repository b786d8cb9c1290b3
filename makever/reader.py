"""
makever argument reader: scan and validate a raw argument vector.

What this module provides
- scan(options, aliases, argv, failed): read argv left to right against an
  option table and return one of three outcomes:
  • Accepted(arguments): every token was valid; `arguments` maps canonical
    identifiers to True (flags) or a string (valued options).
  • Failed(fault): a token was rejected; `fault` is a ReaderException with a
    stable code, the offending token and its index.
  • Exited(status): processing ended early on purpose (option help or a
    non-combinable flag); status is 0.
- read(options, aliases, argv, failed): same as scan(), but only returns the
  arguments and terminates the process on any other outcome.

Token shapes
- '-x' / '--long-form': a flag or a valued option (long forms are rewritten
  through the alias table first).
- '-x=value': inline value (split on the first '=').
- '-x value': value taken from the next token.
- '-x -- some raw words': everything after the first '--' becomes the value
  of the valued option, joined by single spaces; scanning stops there.

Indexing
- argv follows the executable/script convention: the first two entries are
  skipped and scanning starts at index 2. The result map is local to a call.

Quick example
    >>> from makever import Flag, Valued, scan
    >>> scan({"-v": Valued(default="patch"), "-f": Flag()}, {}, ["py", "cli", "-v", "-f"])
    Accepted(arguments={'-v': 'patch', '-f': True})
"""
import sys
from collections import namedtuple

from .arguments import Specification, Valued
from .faults import *
from .utils import *

APPEND = "--"
ASSIGN = "="
INDICATOR = "-"

START = 2


class Accepted(namedtuple("Accepted", ("arguments",))):
    """
    every token was read and validated; `arguments` is the resulting map.
    """
    __slots__ = ()
    status = 0


class Failed(namedtuple("Failed", ("fault",))):
    """
    a token was rejected; `fault` names it. the process should end with status 1.
    """
    __slots__ = ()
    status = 1

    @property
    def code(self):
        return self.fault.code

    @property
    def message(self):
        return self.fault.message


class Exited(namedtuple("Exited", ("status",))):
    """
    processing ended early on purpose (help or a non-combinable flag).
    """
    __slots__ = ()


def _explicit(argument, candidate):
    if candidate and not candidate.startswith(INDICATOR) and candidate != ASSIGN:
        return candidate
    return Unset


def _default(argument, candidate):
    return Unset if argument.default is None else argument.default


# Tried in order; the first resolver that does not answer Unset wins.
RESOLVERS = (_explicit, _default)


def resolve(argument, candidate, /):
    """
    resolve the value of a valued option from a raw candidate.

    the candidate is used when it is a valid value (non-empty, not starting
    with '-', not a bare '='), then the option's default. returns Unset when
    neither applies. `candidate` is None when no value was available at all.
    """
    for resolver in RESOLVERS:
        if (value := resolver(argument, candidate)) is not Unset:
            return value
    return Unset


def appendix(tokens, /):
    """
    return the raw payload captured by the append marker: every token after
    the first '--', joined by single spaces and trimmed ("" when absent).
    """
    try:
        marker = tokens.index(APPEND, START)
    except ValueError:
        return ""
    return " ".join(tokens[marker + 1:]).strip()


class _Scanner:
    """
    one left-to-right pass over a token vector.

    state
    - _index: position of the token being read (starts at START).
    - _arguments: the map being built; owned by this pass only.
    - _appendix: the append payload, computed once per pass.
    """

    def __init__(self, table, tokens, failed):
        self._table = table
        self._tokens = tokens
        self._failed = failed
        self._arguments = {}
        self._appendix = appendix(tokens)
        self._index = START

    def run(self):
        while self._index < len(self._tokens):
            token = self._tokens[self._index]
            head, assigned, tail = token.partition(ASSIGN)
            identifier = self._table.resolve(head)

            if identifier not in self._table:
                if token == APPEND:  # everything after it is payload, never options
                    return Accepted(self._arguments)
                return self._fail(UnknownArgumentError(
                    'invalid argument "%s"' % token,
                    token=token,
                    index=self._index,
                ))

            if identifier in self._arguments:
                return self._fail(RepeatedOptionError(
                    'repeated option "%s"' % identifier,
                    token=token,
                    index=self._index,
                ))

            argument = self._table[identifier]

            if isinstance(argument, Valued):
                if (outcome := self._read(argument, identifier, token, assigned, tail)) is not None:
                    return outcome
            elif argument.combinable:
                self._record(argument, identifier, True)
            else:
                # used alone: only recorded as the first token, always the last one read
                if self._index == START:
                    self._record(argument, identifier, True)
                return Exited(0)

            self._index += 1

        return Accepted(self._arguments)

    def _read(self, argument, identifier, token, assigned, tail):
        """
        read the value of a valued option; return an outcome to stop the pass,
        or None to keep going.
        """
        if self._appendix:
            if self._appendix in argument.triggers:
                return self._help(argument, identifier)
            self._record(argument, identifier, self._appendix)
            # the payload consumed every remaining token
            self._index = len(self._tokens)
            return None

        lookahead = False
        if tail:
            candidate = tail
        else:
            if assigned:
                trigger(EmptyInlineValueWarning(
                    'empty inline value for option "%s"' % token.partition(ASSIGN)[0],
                    token=token,
                    index=self._index,
                    hint="add a value after '=' or pass it after a space",
                ))
            if self._index + 1 < len(self._tokens):
                candidate = self._tokens[self._index + 1]
                lookahead = True
            else:
                candidate = None

        value = resolve(argument, candidate)

        if coalesce(value, candidate) in argument.triggers:
            return self._help(argument, identifier)

        if value is Unset:
            if candidate is None:
                return self._fail(MissingValueError(
                    'no valid value to read for option "%s"' % identifier,
                    token=token,
                    index=self._index,
                ))
            return self._fail(InvalidValueError(
                'invalid value "%s" for option "%s"' % (candidate, identifier),
                token=candidate,
                index=self._index + lookahead,
            ))

        # option-looking lookaheads are left for the next iteration
        if lookahead and not candidate.startswith(INDICATOR):
            self._index += 1

        self._record(argument, identifier, value)
        return None

    def _record(self, argument, identifier, value):
        self._arguments[identifier] = value
        argument.accept(self._arguments)

    def _help(self, argument, identifier):
        argument.help(identifier)
        return Exited(0)

    def _fail(self, fault):
        if self._failed is not None:
            self._failed(fault.message)
        return Failed(fault)


def scan(options, aliases=(), argv=None, failed=None):
    """
    read `argv` against an option table and return an outcome.

    parameters
    - options: Mapping[str, Flag | Valued] | Specification
      the option table keyed by canonical identifier.
    - aliases: Mapping[str, str]
      long-form spelling -> canonical identifier.
    - argv: Sequence[str] | None
      the raw vector; the first two entries (executable and script) are
      skipped. defaults to [sys.executable, *sys.argv].
    - failed: Callable[[str], Any] | None
      sink receiving the failure message before Failed is returned.

    returns
    - Accepted(arguments) | Failed(fault) | Exited(status)

    notes
    - scan() never exits the process; callbacks registered on the specs may.
    - a malformed table raises TypeError/ValueError (see Specification).
    """
    if not isinstance(options, Specification):
        options = Specification(options, aliases)
    elif aliases:
        raise TypeError("scan() cannot take aliases alongside a specification")
    if argv is None:
        argv = [sys.executable, *sys.argv]
    if failed is not None and not callable(failed):
        raise TypeError("scan() 'failed' must be callable")
    return _Scanner(options, list(argv), failed).run()


def read(options, aliases=(), argv=None, failed=None):
    """
    read `argv` like scan(), returning the arguments map on success.

    any other outcome terminates the process: status 1 after a failure (the
    `failed` sink has already received the message), status 0 after help or a
    non-combinable flag. callers must treat this call as potentially
    non-returning.
    """
    match scan(options, aliases, argv, failed):
        case Accepted(arguments):
            return arguments
        case Failed():
            sys.exit(1)
        case Exited(status):
            sys.exit(status)


__all__ = (
    "APPEND",
    "ASSIGN",
    "INDICATOR",
    "START",
    "Accepted",
    "Failed",
    "Exited",
    "RESOLVERS",
    "resolve",
    "appendix",
    "scan",
    "read",
)
