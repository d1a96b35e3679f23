"""
Vexillum registry: the directory of every declared flag.

What this module provides
- Registry: maps short and long names to flags, keeps declaration order, builds
  the compact short option spec consumed by the parser, and tracks the widest
  long name for help alignment. It also owns the consoles diagnostics and help
  are printed to, and the record of every fault triggered through it.
- default_registry(): the process-wide registry, created on first use.
- define_bool/define_int/define_string/parse/show_help/namespace: module-level
  shortcuts operating on default_registry(), for programs that declare their
  flags at import time.

Collision policy
- Registering a name that is already bound reports a Duplicate*NameWarning naming
  both flags, then overwrites: the last registration answers to that name, while
  every flag stays in declaration order (and therefore in help output).
- Illegal names are reported and left out of lookup; the flag is still declared.
- Detection depends only on the mapping state at registration time, so the same
  set of declarations always produces the same faults for a given order.

Lifecycle
- A registry starts empty (apart from the reserved "help" flag), grows during
  start-up, and is treated as read-only once parse() is called. Registration is
  serialized with a lock; parsing is expected to happen on a single thread.
"""
import sys
import threading
from collections.abc import MutableSequence, Sequence
from types import MappingProxyType

from rich.console import Console

from .faults import (
    DuplicateLongNameWarning,
    DuplicateShortNameWarning,
    FaultCode,
    IllegalLongNameWarning,
    IllegalShortNameWarning,
    getdoc,
    trigger,
)
from .flags import Flag, bool_flag, int_flag, string_flag
from . import rendering
from .parser import Parser
from .utils import *


class Registry:
    """
    Process-scoped directory of declared flags.

    Parameters
    - prog: Unset | str (positional-only)
      Display name for help and fault headers. When Unset it is derived from
      argv[0] (base name) on every parse.
    - stdout / stderr: Unset | text stream
      Where help and diagnostics are printed. Default to the process streams.
    - colorful: bool
      Apply the palette to help and faults.
    - fancy: bool
      Wrap help and faults in panels.
    - quiet: bool
      Record faults without printing them.
    - help: bool
      Declare the reserved "help" flag (no short alias) first.

    Read-only views
    - by_short, by_long, declaration_order, faults: fresh copies on each access.
    """

    by_short = mirror("by_short")
    by_long = mirror("by_long")
    declaration_order = mirror("declaration_order")
    faults = mirror("faults")

    def __init__(
            self,
            prog=Unset,
            /,
            *,
            stdout=Unset,
            stderr=Unset,
            colorful=False,
            fancy=False,
            quiet=False,
            help=True
    ):
        if not isinstance(prog, str | Unset):
            raise TypeError("registry 'prog' must be a string")

        self._lock = threading.RLock()
        self._by_short = {}
        self._by_long = {}
        self._declaration_order = []
        self._short_option_spec = []
        self._longest_long_name = 0
        self._faults = []

        self._prog = prog
        self._program = Unset
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._quiet = bool(quiet)

        self._stdout = Console() if stdout is Unset else Console(file=stdout)
        self._stderr = Console(stderr=True) if stderr is Unset else Console(file=stderr)

        self._help_flag = None
        if help:
            self._help_flag = self.define_bool("help", None, False, "Display flags for this command.")

    @property
    def prog(self):
        return coalesce(self._prog, coalesce(self._program, rendering.program_name(sys.argv[0] if sys.argv else "")))

    @property
    def colorful(self):
        return self._colorful

    @property
    def fancy(self):
        return self._fancy

    @property
    def quiet(self):
        return self._quiet

    @property
    def stdout(self):
        return self._stdout

    @property
    def stderr(self):
        return self._stderr

    @property
    def help_flag(self):
        return self._help_flag

    def trigger(self, fault, /, **options):
        """
        Record a fault raised against this registry and print it (unless quiet).

        The fault is enriched with the registry's display options (prog,
        console, colorful, fancy) before being stored.
        """
        options = {
            "registry": self,
            "prog": self.prog,
            "console": self._stderr,
            "colorful": self._colorful,
            "fancy": self._fancy,
        } | options
        if self._quiet:
            fault = fault.__replace__(**options)
        else:
            fault = trigger(fault, **options)
        self._faults.append(fault)
        return fault

    def register(self, flag, /):
        """
        Add a flag under its short and long names.

        Returns the flag, so declarations can be written as one expression.

        Raises
        - TypeError when flag is not a Flag.
        - ValueError when the flag has already been registered (here or elsewhere).
        """
        if not isinstance(flag, Flag):
            raise TypeError("register() argument must be a flag")

        with self._lock:
            if flag.registry is not None:
                raise ValueError("flag %r is already registered" % ("--" + flag.long_name))

            flag._registry = self
            self._declaration_order.append(flag)

            if flag.short_name is not None:
                if flag.legal_short:
                    self._bind_short(flag)
                else:
                    self.trigger(IllegalShortNameWarning(
                        "short name %r of flag %r is not legal and will be ignored" % (
                            flag.short_name, "--" + flag.long_name
                        ),
                        title="illegal short name",
                        code=FaultCode.ILLEGAL_SHORT_NAME,
                        flag=flag,
                        hint="use a single printable character other than '-' and ':'",
                        docs=getdoc(FaultCode.ILLEGAL_SHORT_NAME),
                    ))

            if flag.legal_long:
                self._bind_long(flag)
            else:
                self.trigger(IllegalLongNameWarning(
                    "long name %r is not legal and will be ignored" % flag.long_name,
                    title="illegal long name",
                    code=FaultCode.ILLEGAL_LONG_NAME,
                    flag=flag,
                    hint="use printable characters only, without whitespace or '='",
                    docs=getdoc(FaultCode.ILLEGAL_LONG_NAME),
                ))

            self._longest_long_name = max(self._longest_long_name, len(flag.long_name))
        return flag

    def _bind_short(self, flag):
        key = flag.short_name
        if (existing := self._by_short.get(key)) is not None:
            self.trigger(DuplicateShortNameWarning(
                "ambiguous flags defined: short name %r is claimed by both %r and %r" % (
                    "-" + key, "--" + existing.long_name, "--" + flag.long_name
                ),
                title="duplicate short name",
                code=FaultCode.DUPLICATE_SHORT_NAME,
                key=key,
                existing=existing,
                incoming=flag,
                hint="%r now answers to %r; rename one of them" % ("--" + flag.long_name, "-" + key),
                docs=getdoc(FaultCode.DUPLICATE_SHORT_NAME),
            ))
        self._by_short[key] = flag
        self._short_option_spec.append(key + ":" * flag.takes_argument)

    def _bind_long(self, flag):
        key = flag.long_name
        if (existing := self._by_long.get(key)) is not None:
            self.trigger(DuplicateLongNameWarning(
                "ambiguous flags defined: long name %r is declared twice\n  %s\n  %s" % (
                    "--" + key,
                    existing.render(colorful=False).plain.strip(),
                    flag.render(colorful=False).plain.strip(),
                ),
                title="duplicate long name",
                code=FaultCode.DUPLICATE_LONG_NAME,
                key=key,
                existing=existing,
                incoming=flag,
                hint="the latest declaration of %r wins; rename one of them" % ("--" + key),
                docs=getdoc(FaultCode.DUPLICATE_LONG_NAME),
            ))
        self._by_long[key] = flag

    def define_bool(self, long_name, short_name=None, /, default=False, description="", *, takes_argument=False):
        """
        Declare and register a boolean flag in one call.
        """
        return self.register(bool_flag(long_name, short_name, default, description, takes_argument=takes_argument))

    def define_int(self, long_name, short_name=None, /, default=0, description=""):
        """
        Declare and register an integer flag in one call.
        """
        return self.register(int_flag(long_name, short_name, default, description))

    def define_string(self, long_name, short_name=None, /, default="", description=""):
        """
        Declare and register a string flag in one call.
        """
        return self.register(string_flag(long_name, short_name, default, description))

    def short_option_spec(self):
        """
        Compact short option table: each legal short name in registration order,
        followed by ':' when its flag takes an argument.
        """
        return "".join(self._short_option_spec)

    def longest_long_name_width(self):
        return self._longest_long_name

    def parse(self, argv=Unset, /, *, permute=False, remove=False):
        """
        Parse an argument vector against every flag declared so far.

        Parameters
        - argv: Unset | sequence of str
          The full vector including the program at index 0 (default: sys.argv).
        - permute: bool
          Keep scanning past non-option arguments (GNU style) instead of
          stopping at the first one.
        - remove: bool
          When argv is a mutable sequence, rewrite it in place to the program
          followed by the remaining (non-option) arguments.

        Returns
        - ParseResult (always completed; faults are recorded, never raised).

        Raises
        - TypeError when argv is not a sequence of strings.
        - ValueError when argv is empty (it must at least name the program).
        """
        argv = sys.argv if argv is Unset else argv
        if (
                isinstance(argv, str) or
                not isinstance(argv, Sequence) or
                not all(isinstance(token, str) for token in argv)
        ):
            raise TypeError("parse() argument must be a sequence of strings")
        if not argv:
            raise ValueError("parse() argument must at least contain the program name")

        self._program = rendering.program_name(argv[0])
        result = Parser(self, argv, permute=permute).run()

        if remove and isinstance(argv, MutableSequence):
            argv[:] = [result.argv[0], *result.remaining]
        return result

    def render_help(self, program=Unset, /):
        return rendering.render_help(self, program)

    def show_help(self, program=Unset, /):
        rendering.show_help(self, program)

    def namespace(self):
        """
        Read-only mapping of long name to bound value, in declaration order.

        Flags sharing a long name collapse to the last declared one.
        """
        return MappingProxyType({flag.long_name: flag.value for flag in self._declaration_order})

    def __getitem__(self, long_name, /):
        return self._by_long[long_name]

    def __contains__(self, long_name, /):
        return long_name in self._by_long

    def __iter__(self):
        return iter(tuple(self._declaration_order))

    def __len__(self):
        return len(self._declaration_order)

    def __repr__(self):
        return "registry(prog=%r, flags=%d)" % (self.prog, len(self))


_default_lock = threading.Lock()
_default = None


def default_registry():
    """
    Return the process-wide registry (created once, on first call, from any thread).
    """
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = Registry()
    return _default


def define_bool(long_name, short_name=None, /, default=False, description="", *, takes_argument=False):
    return default_registry().define_bool(long_name, short_name, default, description, takes_argument=takes_argument)


def define_int(long_name, short_name=None, /, default=0, description=""):
    return default_registry().define_int(long_name, short_name, default, description)


def define_string(long_name, short_name=None, /, default="", description=""):
    return default_registry().define_string(long_name, short_name, default, description)


def parse(argv=Unset, /, *, permute=False, remove=False):
    return default_registry().parse(argv, permute=permute, remove=remove)


def show_help(program=Unset, /):
    default_registry().show_help(program)


def namespace():
    return default_registry().namespace()


__all__ = (
    "Registry",
    "default_registry",
    "define_bool",
    "define_int",
    "define_string",
    "parse",
    "show_help",
    "namespace",
)
