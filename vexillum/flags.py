r"""
Vexillum flag specifications.

Overview
- Flag: one declared command-line option. Identity (long/short names), metadata
  (description, arity), a declared default, and exactly one bound value slot.
- Variant: the tag selecting the value behavior of a flag.
  • BOOL: optional "true"/"false" argument, presence alone means True.
  • INT: base-10 integer argument (strict: non-numeric text is rejected).
  • STRING: verbatim text argument; absence clears the value.
- Factories: bool_flag(...), int_flag(...), string_flag(...) build a Flag of the
  matching variant with variant-appropriate defaults.

Capabilities
- set(argument=None, /, **context): mutate the bound value from text. Never raises
  for textual input; malformed input is reported as a fault (through the owning
  registry, or the module-level trigger() for a flag that is not registered yet)
  and the previous value is kept.
- render(width=Unset, /, *, colorful=Unset): produce the aligned help line.

Flag is sealed: behavior differences live in the Variant tag, not in subclasses,
so registries store one homogeneous kind of object.

Name legality
- long names: every character printable and not whitespace, and no '=' (which
  would be read as the start of an inline value). Illegal long names are kept for
  help output but never looked up.
- short names: a single printable, non-whitespace character other than '-' and ':'.

Quick example:
    >>> verbose = bool_flag("verbose", "v", description="Chatty output.")
    >>> verbose.set()
    True
    >>> verbose.value
    True
"""
import functools
import operator
import re
from enum import Enum

from rich.text import Text

from .faults import (
    FaultCode,
    MalformedBooleanError,
    MalformedIntegerError,
    MissingValueError,
    getdoc,
    trigger,
)
from .rendering import palette
from .utils import *


class Variant(Enum):
    """
    Tag selecting how a flag converts text and which default hint it renders.
    """
    BOOL = "bool"
    INT = "int"
    STRING = "string"

    @property
    def type(self):
        return {Variant.BOOL: bool, Variant.INT: int, Variant.STRING: str}[self]

    @property
    def fallback(self):
        return self.type()


class FlagType(type):
    """
    Metaclass that exposes flag metadata as read-only properties.

    - every name listed in __introspectable__ becomes a mirror() property over
      the "_{name}" backing field.
    - __typename__ is derived from the class name and used in messages.
    - __repr__/__rich_repr__ list __displayable__ (or __introspectable__) pairs.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _graphic(character, /):
    return character.isprintable() and not character.isspace()


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the identity of a flag.

    - long_name: required non-empty string (programming error otherwise).
      Legality (printable, no whitespace, no '=') is not enforced here; the
      registry reports illegal names and disables their lookup.
    - short_name: None, "" (both meaning no alias) or a string. Legality is
      likewise reported by the registry.
    """
    if not isinstance(long_name := metadata["long_name"], str):
        raise TypeError(f"{cls.__typename__} 'long_name' must be a string")
    elif not long_name:
        raise ValueError(f"{cls.__typename__} 'long_name' cannot be empty")

    if (short_name := metadata["short_name"]) is None or short_name == "":
        metadata["short_name"] = None
    elif not isinstance(short_name, str):
        raise TypeError(f"{cls.__typename__} 'short_name' must be a string or None")

    if not isinstance(metadata["description"], str):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")


def _sanitize_value(cls, metadata, /):
    """
    Internal: validate arity and default against the variant.

    - INT and STRING always take an argument.
    - BOOL takes an argument only when asked to (default: False).
    - default must be an instance of the variant's type (bool is not an int here).
    """
    variant = metadata["variant"]

    if (takes_argument := metadata["takes_argument"]) is Unset:
        takes_argument = variant is not Variant.BOOL
    elif not isinstance(takes_argument, bool):
        raise TypeError(f"{cls.__typename__} 'takes_argument' must be a boolean")
    elif not takes_argument and variant is not Variant.BOOL:
        raise ValueError(f"{variant.value} {cls.__typename__} always takes an argument")
    metadata["takes_argument"] = takes_argument

    default = coalesce(metadata["default"], variant.fallback)
    if type(default) is not variant.type:
        raise TypeError(f"{variant.value} {cls.__typename__} 'default' must be of type {variant.type.__name__}")
    metadata["default"] = default


class Flag(metaclass=FlagType):
    """
    A declared, named, typed command-line option with a bound value.

    Properties
    - long_name, short_name, description, variant, default, takes_argument:
      read-only declaration metadata.
    - value: the bound value (starts at default; changed only by set()).
    - count: number of successful set() calls.
    - registry: the owning registry, None until registered.
    - legal_short / legal_long: whether each name may be used for lookup.
    """

    __introspectable__ = (
        "long_name",
        "short_name",
        "description",
        "variant",
        "default",
        "takes_argument",
    )

    __displayable__ = (
        "long_name",
        "short_name",
        "variant",
        "default",
        "value",
    )

    def __init__(self, variant, long_name, short_name=None, /, default=Unset, description="", *, takes_argument=Unset):
        if not isinstance(variant, Variant):
            raise TypeError(f"{type(self).__typename__} 'variant' must be a Variant")

        metadata = {
            "variant": variant,
            "long_name": long_name,
            "short_name": short_name,
            "description": description,
            "default": default,
            "takes_argument": takes_argument,
        }
        _sanitize_names(type(self), metadata)
        _sanitize_value(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._value = self._default
        self._count = 0
        self._registry = None  # Bound by Registry.register().

    def __init_subclass__(cls, **options):
        raise TypeError("type 'Flag' is not an acceptable base type")

    @property
    def value(self):
        return self._value

    @property
    def count(self):
        return self._count

    @property
    def registry(self):
        return self._registry

    @property
    def legal_short(self):
        return (
            self._short_name is not None and
            len(self._short_name) == 1 and
            _graphic(self._short_name) and
            self._short_name not in "-:"
        )

    @property
    def legal_long(self):
        return all(map(_graphic, self._long_name)) and "=" not in self._long_name

    @property
    def hint(self):
        """
        Default-value hint for help output, or None when nothing is shown.

        Booleans never show a default; integers only when non-zero; strings
        only when non-empty (quoted). The declared default is shown, never the
        current value.
        """
        match self._variant:
            case Variant.INT if self._default:
                return str(self._default)
            case Variant.STRING if self._default:
                return "'%s'" % self._default
        return None

    def _report(self, fault, /):
        if self._registry is not None:
            self._registry.trigger(fault)
        else:
            trigger(fault)
        return False

    def set(self, argument=None, /, **context):
        """
        Update the bound value from a textual argument (or its absence).

        Parameters
        - argument: str | None
          The raw text. None means the option was given without a value.
        - context: optional input=<token as typed> and index=<1-based argv position>,
          used to make diagnostics point at the offending token.

        Returns
        - True when the value was updated, False when the input was rejected (a
          fault has been reported and the previous value kept).

        Raises
        - TypeError when argument is neither a string nor None.
        """
        if argument is not None and not isinstance(argument, str):
            raise TypeError(f"{type(self).__typename__} argument must be a string or None")

        input = context.get("input", "--" + self._long_name)
        where = " at %s position" % ordinal(context["index"]) if context.get("index") else ""

        match self._variant:
            case Variant.BOOL:
                if argument is None:
                    value = True
                elif argument in ("true", "false"):
                    value = argument == "true"
                else:
                    return self._report(MalformedBooleanError(
                        "boolean flag %r%s must be either 'true' or 'false', got %r" % (input, where, argument),
                        title="malformed boolean",
                        code=FaultCode.MALFORMED_BOOLEAN,
                        hint="pass --%s=true or --%s=false" % (self._long_name, self._long_name),
                        docs=getdoc(FaultCode.MALFORMED_BOOLEAN),
                        flag=self,
                        argument=argument,
                        **context
                    ))
            case Variant.INT:
                if argument is None:
                    return self._report(MissingValueError(
                        "integer flag %r%s requires a value" % (input, where),
                        title="missing value",
                        code=FaultCode.MISSING_VALUE,
                        hint="pass a number (for example: --%s=42)" % self._long_name,
                        docs=getdoc(FaultCode.MISSING_VALUE),
                        flag=self,
                        **context
                    ))
                if not re.fullmatch(r"[+-]?[0-9]+", argument):
                    return self._report(MalformedIntegerError(
                        "integer flag %r%s expects a base-10 number, got %r" % (input, where, argument),
                        title="malformed integer",
                        code=FaultCode.MALFORMED_INTEGER,
                        hint="pass digits only, optionally signed (for example: --%s=42)" % self._long_name,
                        docs=getdoc(FaultCode.MALFORMED_INTEGER),
                        flag=self,
                        argument=argument,
                        **context
                    ))
                value = int(argument, 10)
            case Variant.STRING:
                value = "" if argument is None else argument

        self._value = value
        self._count += 1
        return True

    def render(self, width=Unset, /, *, colorful=Unset):
        """
        Render the help line of this flag.

        Layout: short column ("  -x" or four blanks), long column ("  --name")
        padded to width plus a two-space gutter, the description, then the
        optional "  Default: ..." suffix.

        Parameters
        - width: long-name column width; defaults to the owning registry's
          longest long name (or this flag's own when unregistered).
        - colorful: apply the palette; defaults to the owning registry's setting.

        Returns
        - rich.text.Text
        """
        registry = self._registry
        width = coalesce(width, registry.longest_long_name_width() if registry is not None else len(self._long_name))
        colorful = coalesce(colorful, registry.colorful if registry is not None else False)
        styler, text = palette(colorful)

        line = Text()
        if self.legal_short:
            line.append("  ").append(text("-" + self._short_name, styler("short-name")))
        else:
            line.append("    ")

        line.append("  ").append(text("--" + self._long_name, styler("long-name")))
        line.append(" " * max(2 + width - len(self._long_name), 2))

        if self._description:
            line.append(text(self._description, styler("description")))

        if (hint := self.hint) is not None:
            line.append("  ").append(text("Default:", styler("default-label"))).append(" ")
            line.append(text(hint, styler("default-value")))
        return line


def bool_flag(long_name, short_name=None, /, default=False, description="", *, takes_argument=False):
    """
    Build a boolean flag.

    With takes_argument=False the flag never consumes a following token; an
    inline value (--name=false) is still honored. With takes_argument=True the
    flag requires a value ("-v false", "--verbose=false").
    """
    return Flag(Variant.BOOL, long_name, short_name, default, description, takes_argument=takes_argument)


def int_flag(long_name, short_name=None, /, default=0, description=""):
    """
    Build an integer flag (always takes an argument).
    """
    return Flag(Variant.INT, long_name, short_name, default, description)


def string_flag(long_name, short_name=None, /, default="", description=""):
    """
    Build a string flag (always takes an argument).
    """
    return Flag(Variant.STRING, long_name, short_name, default, description)


__all__ = (
    # Classes
    "Flag",
    "Variant",

    # Factories
    "bool_flag",
    "int_flag",
    "string_flag",
)

# Internal metaclass; not part of the public API.
del FlagType
