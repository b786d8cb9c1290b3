"""
makever faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues.
  Codes are grouped by domain (argument reading, version metadata, delegated
  subprocesses, warnings) to keep copy consistent and logs searchable.
- MakeverException / MakeverWarning: base types that carry a message plus
  options (hint, token, index, ...) and know how to render themselves.
- trigger(): central entry point to surface any fault.

UX goals
- Messages name the offending token or option exactly as typed.
- Short titles, one-sentence bodies, a single clear hint.
- Styling is configurable via __styles__ in __main__; the program name shown
  in headers via __prog__, and fault labels via __codes__.

Integration
- The argument reader builds faults and hands them back to its caller; it never
  renders nor exits by itself.
- In shell mode, trigger() renders faults with rich on stderr and exits with
  status 1 for errors (unless soft); otherwise errors are raised and warnings
  are emitted through warnings.warn.
"""
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across makever (stable identifiers).

    grouping
    - argument reading (1111x)
      • UNKNOWN_ARGUMENT, MISSING_VALUE, INVALID_VALUE, REPEATED_OPTION
    - version metadata (1120x)
      • INVALID_OUTPUT, INVALID_CODENAME, INVALID_MANIFEST, CONFLICTING_OPTIONS,
        EXISTING_VERSION_FILE, INVALID_BUMP
    - delegated subprocess errors (11131)
    - warnings (12xxx)
      • EMPTY_INLINE_VALUE
    """
    # --- argument reading errors (11xxx) ---
    UNKNOWN_ARGUMENT        = 11111
    MISSING_VALUE           = 11112
    INVALID_VALUE           = 11113
    REPEATED_OPTION         = 11114

    # --- version metadata errors (11xxx) ---
    INVALID_OUTPUT          = 11201
    INVALID_CODENAME        = 11202
    INVALID_MANIFEST        = 11203
    CONFLICTING_OPTIONS     = 11204
    EXISTING_VERSION_FILE   = 11205
    INVALID_BUMP            = 11206

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR         = 11131

    # --- warnings (12xxx) ---
    EMPTY_INLINE_VALUE      = 12111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, kind, defaults, *, colorful=True, fancy=False):
    main = __import__("__main__")
    styles = defaultdict(str, defaults | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    header = Text.assemble(
        "[ ",
        text(getattr(main, "__prog__", "makever"), "prog-name"),
        " — ",
        text(fault.code.normalize(), "code"),
        " | ",
        text(fault.title.title(), kind + "-title"),
        " ]"
    )
    message = text(fault.message, kind + "-message")

    if fault.hint:
        body = Group(message, Text.assemble(text(" → ", "hint-arrow"), text(fault.hint, "hint")))
    else:
        body = Group(message)

    if fancy:
        return Panel(body, title=header, title_align="left")
    return Group(header, body)


class MakeverException(Exception):
    """
    base error: a message plus free-form options.

    subclasses set the class-level `code`, `title` and `hint`; the options
    `title` and `hint` override them per instance, and any other option
    (token, index, ...) is kept as context for reporters.
    """
    code = FaultCode.DELEGATED_ERROR
    title = "error"
    hint = None

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)
        if "title" in options:
            self.title = options["title"]
        if "hint" in options:
            self.hint = options["hint"]

    def __rich__(self):
        return self.render()

    def render(self, *, colorful=True, fancy=False):
        return _render(self, "error", {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, colorful=colorful, fancy=fancy)

    def __trigger__(self, **options):
        if not options.get("shell"):
            raise self from None
        console.print(self.render(colorful=options.get("colorful", True), fancy=options.get("fancy", False)))
        if options.get("soft"):
            return
        sys.exit(1)


class ReaderException(MakeverException):
    """
    base error for the argument reader; carries the offending `token` and its
    argv `index` when known.
    """

    @property
    def token(self):
        return self.options.get("token")

    @property
    def index(self):
        return self.options.get("index")


class UnknownArgumentError(ReaderException):
    code = FaultCode.UNKNOWN_ARGUMENT
    title = "invalid argument"
    hint = 'see accepted arguments by: "makever -h"'


class MissingValueError(ReaderException):
    code = FaultCode.MISSING_VALUE
    title = "missing value"
    hint = "pass a value after the option or inline it with '='"


class InvalidValueError(ReaderException):
    code = FaultCode.INVALID_VALUE
    title = "invalid value"
    hint = "values cannot start with '-' nor be a bare '='"


class RepeatedOptionError(ReaderException):
    code = FaultCode.REPEATED_OPTION
    title = "repeated option"
    hint = "keep a single occurrence; each option can be specified only once"


class InvalidOutputError(MakeverException):
    code = FaultCode.INVALID_OUTPUT
    title = "invalid output"
    hint = "filename must be a valid word with a minimum of 3 chars"


class InvalidCodenameError(MakeverException):
    code = FaultCode.INVALID_CODENAME
    title = "invalid codename"
    hint = "codename may be similar to: 'baby-face', '123Super', 'Marine44', 'AQUA' (3-50 chars)"


class InvalidManifestError(MakeverException):
    code = FaultCode.INVALID_MANIFEST
    title = "invalid package manifest"
    hint = "see https://docs.npmjs.com/files/package.json for help"


class ConflictingOptionsError(MakeverException):
    code = FaultCode.CONFLICTING_OPTIONS
    title = "invalid operation"
    hint = "makever will not write to file and stdout at the same time"


class ExistingVersionFileError(MakeverException):
    code = FaultCode.EXISTING_VERSION_FILE
    title = "version file exists"
    hint = 'use "-f" to overwrite the existing version file or "-o" to write to a new file'


class InvalidBumpError(MakeverException):
    code = FaultCode.INVALID_BUMP
    title = "invalid npm version option"
    hint = "see https://docs.npmjs.com/cli/version"


class DelegatedCommandError(MakeverException):
    code = FaultCode.DELEGATED_ERROR
    title = "command failed"
    hint = 'see "makever -h"'


class MakeverWarning(Warning):
    """
    base warning: same shape as MakeverException, but never fatal.
    """
    code = FaultCode.EMPTY_INLINE_VALUE
    title = "warning"
    hint = None

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)
        if "hint" in options:
            self.hint = options["hint"]

    def __rich__(self):
        return self.render()

    def render(self, *, colorful=True, fancy=False):
        return _render(self, "warning", {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }, colorful=colorful, fancy=fancy)

    def __trigger__(self, **options):
        if not options.get("shell"):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self.render(colorful=options.get("colorful", True), fancy=options.get("fancy", False)))


class ReaderWarning(MakeverWarning):
    @property
    def token(self):
        return self.options.get("token")

    @property
    def index(self):
        return self.options.get("index")


class EmptyInlineValueWarning(ReaderWarning):
    code = FaultCode.EMPTY_INLINE_VALUE
    title = "empty inline value"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide a __trigger__ method (see base classes).
    - in shell mode, rendering happens via the rich stderr console; otherwise
      exceptions are raised and warnings go through warnings.warn.

    typical options
    - shell, colorful, fancy, soft.
    """
    if not hasattr(fault, "__trigger__") or not callable(fault.__trigger__):
        raise TypeError("trigger() argument must implement __trigger__ method")
    fault.__trigger__(**options)


__all__ = (
    "FaultCode",
    "MakeverException",
    "ReaderException",
    "UnknownArgumentError",
    "MissingValueError",
    "InvalidValueError",
    "RepeatedOptionError",
    "InvalidOutputError",
    "InvalidCodenameError",
    "InvalidManifestError",
    "ConflictingOptionsError",
    "ExistingVersionFileError",
    "InvalidBumpError",
    "DelegatedCommandError",
    "MakeverWarning",
    "ReaderWarning",
    "EmptyInlineValueWarning",
    "trigger",
)
