"""
Vexillum argument parser: scan one argument vector against a registry.

Scanning rules (getopt_long compatible)
- argv[0] is the program; scanning starts at argv[1].
- "--" ends option scanning and is consumed.
- "--name" / "--name=value": long option. Exact names win; otherwise a unique
  prefix is accepted ("--verb" for "--verbose"). Several candidates make the
  token ambiguous, none make it unknown.
- "-abc": cluster of short options, one character at a time. A character whose
  flag takes an argument consumes the rest of the cluster ("-ofile") or, when
  nothing is attached, the next token ("-o file").
- A flag taking an argument that has none left at the end of input is a
  structural fault; the parser never reads past the end.
- A flag that takes no argument still receives an inline "--name=value" value,
  which lets boolean switches be turned off ("--verbose=false").
- "-" and any token not starting with "-" are non-options: scanning stops there
  unless permute=True, in which case they are set aside and scanning goes on.

Failure policy
- Every fault is recorded through the registry and scanning continues; the parser
  always completes and reports where the non-option arguments begin.
"""
import difflib
from collections import deque, namedtuple

from .faults import (
    AmbiguousOptionError,
    FaultCode,
    FlagException,
    FlagExit,
    FlagWarning,
    MissingValueError,
    UnknownOptionError,
    getdoc,
)
from .utils import ordinal


def decode_short_option_spec(spec, /):
    """
    Decode a compact short option spec ("vo:x") into {char: takes_argument}.

    Later occurrences of a character override earlier ones, matching the
    registry's last-registration-wins lookup.
    """
    table = {}
    index = 0
    while index < len(spec):
        character = spec[index]
        takes_argument = spec[index + 1:index + 2] == ":"
        table[character] = takes_argument
        index += 2 if takes_argument else 1
    return table


class ParseResult(namedtuple("ParseResult", ("completed", "index", "argv", "faults", "helped"))):
    """
    Outcome of one parse.

    Fields
    - completed: always True; the parser never aborts.
    - index: position in argv of the first non-option argument (like optind).
    - argv: the argument vector in scan order (program, options, non-options).
    - faults: faults triggered during this parse, in order.
    - helped: whether the reserved help flag was matched (help was rendered).
    """
    __slots__ = ()

    @property
    def consumed(self):
        return self.index - 1

    @property
    def remaining(self):
        return self.argv[self.index:]

    @property
    def errors(self):
        return tuple(fault for fault in self.faults if isinstance(fault, FlagException))

    @property
    def warnings(self):
        return tuple(fault for fault in self.faults if isinstance(fault, FlagWarning))

    def raise_for_faults(self):
        """
        Raise a FlagExit group holding every error of this parse (no-op when clean).
        """
        if errors := self.errors:
            raise FlagExit(errors)


class Parser:
    """
    Transient scanner bound to one registry and one argument vector.

    The short and long option tables are snapshotted at construction, so flags
    registered afterwards are not seen by this parser.
    """

    def __init__(self, registry, argv, /, *, permute=False):
        self._registry = registry
        self._argv = list(argv)
        self._permute = bool(permute)
        self._shorts = decode_short_option_spec(registry.short_option_spec())
        self._short_flags = registry.by_short
        self._long_flags = registry.by_long
        self._helped = False

    def _fault(self, fault):
        self._registry.trigger(fault)

    def _dispatch(self, flag, argument, input, index):
        flag.set(argument, input=input, index=index)
        if flag is self._registry.help_flag:
            self._helped = True
            self._registry.show_help()

    def _resolve_long(self, name, token, index):
        """
        Map a long option name (possibly abbreviated) to its flag, or fault.
        """
        if name and (flag := self._long_flags.get(name)) is not None:
            return flag

        candidates = {} if not name else {
            long: flag for long, flag in self._long_flags.items() if long.startswith(name)
        }
        if len(set(map(id, candidates.values()))) == 1:
            return next(iter(candidates.values()))

        if candidates:
            names = sorted("--" + long for long in candidates)
            self._fault(AmbiguousOptionError(
                "option %r at %s position is ambiguous" % (token, ordinal(index)),
                title="ambiguous option",
                code=FaultCode.AMBIGUOUS_OPTION,
                input=token,
                index=index,
                candidates=names,
                hint="spell it out: %s" % ", ".join(names),
                docs=getdoc(FaultCode.AMBIGUOUS_OPTION),
            ))
            return None

        self._unknown(token, index)
        return None

    def _unknown(self, input, index):
        known = ["--" + long for long in self._long_flags] + ["-" + short for short in self._shorts]
        suggestions = difflib.get_close_matches(input, known, 5)
        try:
            hint = "did you mean %r? run '%s --help' to see all flags" % (suggestions[0], self._registry.prog)
        except IndexError:
            hint = "run '%s --help' to see all flags" % self._registry.prog
        self._fault(UnknownOptionError(
            "unknown option %r at %s position" % (input, ordinal(index)),
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            input=input,
            index=index,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        ))

    def _missing(self, input, index):
        self._fault(MissingValueError(
            "option %r at %s position requires a value but the input ended" % (input, ordinal(index)),
            title="missing value",
            code=FaultCode.MISSING_VALUE,
            input=input,
            index=index,
            hint="add a value after it (for example: %s <value>)" % input,
            docs=getdoc(FaultCode.MISSING_VALUE),
        ))

    def _parse_long(self, token, tokens, taken, index):
        name, separator, inline = token[2:].partition("=")
        if (flag := self._resolve_long(name, token, index)) is None:
            return
        input = "--" + flag.long_name
        argument = inline if separator else None

        if flag.takes_argument and argument is None:
            if not tokens:
                return self._missing(input, index)
            taken.append(argument := tokens.popleft())

        self._dispatch(flag, argument, input, index)

    def _parse_short(self, token, tokens, taken, index):
        cluster = token[1:]
        position = 0
        while position < len(cluster):
            character = cluster[position]
            position += 1
            input = "-" + character

            if character not in self._shorts:
                self._unknown(input, index)
                continue

            flag = self._short_flags[character]
            argument = None
            if self._shorts[character]:
                if position < len(cluster):
                    argument, position = cluster[position:], len(cluster)
                elif tokens:
                    taken.append(argument := tokens.popleft())
                else:
                    return self._missing(input, index)

            self._dispatch(flag, argument, input, index)

    def run(self):
        """
        Scan the argument vector and return a ParseResult.
        """
        start = len(self._registry.faults)
        head, rest = self._argv[:1], deque(self._argv[1:])
        options, operands = [], []
        index = 1

        while rest:
            token = rest.popleft()
            taken = [token]

            if token == "--":
                options.append(token)
                break
            elif token.startswith("--"):
                self._parse_long(token, rest, taken, index)
            elif token.startswith("-") and token != "-":
                self._parse_short(token, rest, taken, index)
            elif self._permute:
                operands.append(token)
                index += 1
                continue
            else:
                rest.appendleft(token)
                break

            options.extend(taken)
            index += len(taken)

        argv = tuple(head + options + operands + list(rest))
        return ParseResult(
            completed=True,
            index=len(head) + len(options),
            argv=argv,
            faults=tuple(self._registry.faults[start:]),
            helped=self._helped,
        )


__all__ = (
    "Parser",
    "ParseResult",
    "decode_short_option_spec",
)
