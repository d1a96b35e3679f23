"""
Vexillum faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- FlagException / FlagWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault.
- getdoc(): optional description lookup for a code from the host application.

Policy
- Every fault raised by the flag engine is non-fatal. Registries record faults
  and print them to their diagnostics console; the parser never raises.
- Callers that want strict behavior collect the recorded errors and raise a
  FlagExit group themselves (see ParseResult.raise_for_faults()).

UX goals
- Position-first messages: parse diagnostics include the ordinal position of the
  offending token (“at third position”).
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.
"""
import sys
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the flag engine (stable identifiers).

    grouping (by high-level domain)
    - declaration (211xx)
      • DUPLICATE_SHORT_NAME, DUPLICATE_LONG_NAME, ILLEGAL_SHORT_NAME, ILLEGAL_LONG_NAME
    - parsing (221xx)
      • UNKNOWN_OPTION, AMBIGUOUS_OPTION, MALFORMED_BOOLEAN, MALFORMED_INTEGER
    - structural (231xx)
      • MISSING_VALUE

    normalize() lets the host remap codes to friendlier labels while the numeric
    values stay stable.
    """
    # --- declaration warnings (21xxx) ---
    DUPLICATE_SHORT_NAME        = 21101
    DUPLICATE_LONG_NAME         = 21102
    ILLEGAL_SHORT_NAME          = 21111
    ILLEGAL_LONG_NAME           = 21112

    # --- parse errors (22xxx) ---
    UNKNOWN_OPTION              = 22101
    AMBIGUOUS_OPTION            = 22102
    MALFORMED_BOOLEAN           = 22111
    MALFORMED_INTEGER           = 22112

    # --- structural errors (23xxx) ---
    MISSING_VALUE               = 23101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(sys.modules["__main__"], "__codes__", {}).get(self, self.value))


def _render(fault, palette, title_style, message_style, /):
    main = sys.modules["__main__"]

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)
    fancy = fault.options.get("fancy", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = text(getattr(main, "__prog__", fault.options.get("prog") or "flags"), styler("prog-name"))
    code = fault.options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " | ",
        text(code.normalize() if code is not None else "", styler("code")),
        " | ",
        text(fault.options.get("title", "").title(), styler(title_style)),
        " ]"
    )
    message = text(fault.message, styler(message_style))
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(fault.options.get("hint"), styler("hint")))

    if fancy:
        width = fault.options.get("console", console).width - 4
        return Panel(Group(message, hint), title=header, title_align="left", width=width)

    return Group(header, message, hint)


class FlagException(Exception):
    """
    base type of every parse-time error reported by the flag engine.

    the exception is never raised by the engine itself; it is recorded and
    printed. strict callers may raise it (or a FlagExit group of them).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, "error-title", "error-message")

    def __trigger__(self) -> None:
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(FlagException): ...
class AmbiguousOptionError(FlagException): ...
class MalformedBooleanError(FlagException): ...
class MalformedIntegerError(FlagException): ...
class MissingValueError(FlagException): ...


class FlagWarning(ABC, Warning):
    """
    base type of every declaration-time warning (name collisions, illegal names).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",

            # body
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }, "warning-title", "warning-message")

    def __trigger__(self) -> None:
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicateShortNameWarning(FlagWarning): ...
class DuplicateLongNameWarning(FlagWarning): ...
class IllegalShortNameWarning(FlagWarning): ...
class IllegalLongNameWarning(FlagWarning): ...


class FlagExit(ExceptionGroup[FlagException]):
    """
    group of parse errors, raised by callers that opt into strict validation.
    """

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad flags", exceptions)

    def __init__(self, exceptions, **options):
        super().__init__("bad flags", tuple(exceptions))
        self.options = MappingProxyType(options)

    def derive(self, exceptions):
        return type(self)(exceptions, **self.options)

    def __rich__(self):
        colorful = self.options.get("colorful", False)
        prog = getattr(sys.modules["__main__"], "__prog__", self.options.get("prog") or "flags")
        header = Text.assemble("[ ", str(prog), " | ", Text(self.message.title(), "bold #FF4DA6" if colorful else ""), " ]")
        renders = [
            exception.__replace__(**{"prog": prog, **exception.options, "colorful": colorful})
            for exception in self.exceptions
        ]
        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")
        return Group(header, *renders)

    def __trigger__(self) -> None:
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - the merged fault is returned so callers can keep a record of it.

    typical options
    - prog, console, colorful, fancy, title, code, hint, docs, and any other
      context the reporter may want to show (e.g., input/index/flag).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault = fault.__replace__(**options)
    fault.__trigger__()
    return fault


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(sys.modules["__main__"], "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FlagException",
    "UnknownOptionError",
    "AmbiguousOptionError",
    "MalformedBooleanError",
    "MalformedIntegerError",
    "MissingValueError",
    "FlagWarning",
    "DuplicateShortNameWarning",
    "DuplicateLongNameWarning",
    "IllegalShortNameWarning",
    "IllegalLongNameWarning",
    "FlagExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
