r"""
clopt command-line parser: registration, parsing and help rendering.

What this module provides
- AddOptions: fluent registration builder returned by CommandLineOption.add_options().
  • o(name, descr) / o(name, Value(...), descr): short option -name.
  • l(name, descr) / l(name, Value(...), descr): long option --name.
    A trailing '=' pins a valued long option to the inline form (--name=a,b),
    a trailing ' ' pins it to the next-argument form (--name a); without either
    suffix both forms are accepted. A '--name=' valued option may coexist with
    a '--name' flag.
- CommandLineOption: owns the template OptionMap and
  • parse(argv) → a fresh OptionMap (the template is never mutated).
  • description(width, gap) → two-column help text.
  • print_description(console) → the same layout rendered with rich styles.

Parsing rules (single pass, left to right)
- '-x...'  (second char not '-')   → short option, matched on its full name.
- '--x...' (third char not '-')    → long option, matched on the part before '='.
- anything else ('-', '--', '---x', 'file') → leftover positional token.
- an option taking a value from the next argument fails when that argument is
  missing or itself looks like an option; '--name=' without a value fails.
- '--name=a,b,c' is the only way to pass several values in one token.
- there is no end-of-options marker and no '-abc' bundling.

Quick start
    from clopt import CommandLineOption, Value

    cli = CommandLineOption()
    (cli.add_options()
        .o("v", "verbose output")
        .l("count=", Value(5).with_limit(3), "how many times")
        .l("output ", Value(type=str).with_name("FILE"), "output file"))

    opts = cli.parse(["prog", "-v", "--count=1,2", "input.txt"])
    if opts["v"]:
        print(opts["count="].extract(list[int]), opts.leftovers)
"""
import os.path
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from .faults import *
from .options import *
from .registry import OptionMap
from .utils import *
from .values import Value


def _overlaps(first, second):
    """
    True when two same-named options compete for the same argument form.

    a flag or a NEXT_ARG option is matched on the bare token ("--name"), an
    EQUAL_SIGN option on the inline one ("--name=..."); a flag and an
    inline-only valued option can therefore share a name.
    """
    def spaced(capability):
        return capability == ArgPattern.NONE or check_pattern(capability, ArgPattern.NEXT_ARG)

    def inline(capability):
        return check_pattern(capability, ArgPattern.EQUAL_SIGN)

    return (spaced(first) and spaced(second)) or (inline(first) and inline(second))


class AddOptions:
    """
    Fluent registration builder over a CommandLineOption's template map.
    """

    __slots__ = ("_tool",)

    def __init__(self, tool, /):
        self._tool = tool

    def o(self, name, value="", descr=Unset, /):
        """
        register a short option: o(name, descr) for a flag, o(name, Value(...), descr)
        for a value-bearing option taking its value from the next argument.
        """
        if isinstance(value, Value):
            option = ValuedOption(name, value, coalesce(descr, ""), OptionPattern.SHORT, ArgPattern.NEXT_ARG)
        else:
            self._no_descr(descr, name)
            option = Flag(name, value, OptionPattern.SHORT)
        self._tool._register(option)
        return self

    def l(self, name, value="", descr=Unset, /):
        """
        register a long option: l(name, descr) for a flag, l(name, Value(...), descr)
        for a value-bearing one; a trailing '=' or ' ' in a valued name restricts
        how it receives its value.
        """
        if isinstance(value, Value):
            capability = ArgPattern.ALL_AVAILABLE
            if isinstance(name, str) and name.endswith("="):
                name, capability = name[:-1], ArgPattern.EQUAL_SIGN
            elif isinstance(name, str) and name.endswith(" "):
                name, capability = name[:-1], ArgPattern.NEXT_ARG
            option = ValuedOption(name, value, coalesce(descr, ""), OptionPattern.LONG, capability)
        else:
            self._no_descr(descr, name)
            option = Flag(name, value, OptionPattern.LONG)
        self._tool._register(option)
        return self

    @staticmethod
    def _no_descr(descr, name):
        if descr is not Unset:
            raise ConfigError(
                "flag %r takes a single description; wrap value shapes in Value(...)" % (name,),
                title="invalid registration",
                code=FaultCode.INVALID_DEFAULT,
                hint="use o(name, descr) for flags and o(name, Value(...), descr) for valued options",
                name=name,
            )


class CommandLineOption:
    """
    Command-line option parser.

    Runtime configuration
    - prog: program name shown in faults (defaults to basename of sys.argv[0]).
    - shell: when True, faults are printed on stderr (rich) and the process exits
      with status 1 instead of raising.
    - fancy: render faults inside a rich Panel.
    - colorful: apply the rich palette (faults and print_description).
    - width / gap: layout of the description columns (see description()).

    Host hooks (looked up in __main__, as plain module attributes)
    - __prog__, __styles__, __codes__, __docs__ (see clopt.faults).
    """

    def __init__(self, prog=Unset, /, *, shell=False, fancy=False, colorful=True, width=25, gap=2):
        if prog is Unset:
            prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "clopt"
        if not isinstance(prog, str) or not (prog := prog.strip()):
            raise ConfigError(
                "program name must be a non-empty string",
                title="invalid program name",
                code=FaultCode.INVALID_DISPLAY_NAME,
                hint="omit it to use the name of the running script",
            )
        for field, object in (("width", width), ("gap", gap)):
            if isinstance(object, bool) or not isinstance(object, int) or object < 0:
                raise ConfigError(
                    "description %s must be a non-negative integer" % field,
                    title="invalid layout",
                    code=FaultCode.INVALID_DISPLAY_NAME,
                    hint="the defaults are width=25 and gap=2",
                )
        self.prog = prog
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)
        self.width = width
        self.gap = gap
        self._map = OptionMap()

    @property
    def map(self):
        return self._map

    def add_options(self):
        return AddOptions(self)

    def trigger(self, fault, /, **options):
        """
        surface a fault with this parser's runtime options (shell/fancy/colorful).
        """
        return trigger(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def _register(self, option):
        for other in self._map.order:
            if other.full_name != option.full_name:
                continue
            if _overlaps(other.capability(), option.capability()):
                self.trigger(DuplicatedOptionWarning(
                    "option %s is already registered; the first registration takes precedence" % option.full_name,
                    title="duplicated option",
                    code=FaultCode.DUPLICATED_OPTION,
                    hint="register each option name once per argument form",
                    option=option.full_name,
                    docs=getdoc(FaultCode.DUPLICATED_OPTION),
                ))
                break
        self._map.register(option)

    def _tokens(self, argv):
        if argv is Unset:
            return sys.argv[1:]
        if isinstance(argv, str):
            return shlex.split(argv)
        if isinstance(argv, Iterable):
            tokens = list(argv)
            for token in tokens:
                if not isinstance(token, str):
                    raise TypeError("parse() argument must be a string or an iterable of strings")
            return tokens[1:]
        raise TypeError("parse() argument must be a string or an iterable of strings")

    def _consume_next(self, option, tokens, index):
        if index + 1 >= len(tokens) or is_short_option(following := tokens[index + 1]) or is_long_option(following):
            return self.trigger(MissingArgumentError(
                "option %s requires an argument" % option.full_name,
                title="option requires an argument",
                code=FaultCode.OPTION_VALUE_REQUIRED,
                hint="pass a value after %s (for example: %s <%s>)" % (option.full_name, option.full_name, option.value.name),
                option=option.full_name,
                index=index + 1,
                docs=getdoc(FaultCode.OPTION_VALUE_REQUIRED),
            ))
        self._feed(option, following, index)
        return index + 2

    def _feed(self, option, token, index):
        try:
            option.add_raw_value(token)
        except (ConversionError, ConstraintError) as fault:
            self.trigger(fault, index=index + 1, docs=getdoc(fault.options["code"]))

    def _unrecognized(self, token, index):
        return self.trigger(UnrecognizedOptionError(
            "unrecognized option %r" % token,
            title="unrecognized option",
            code=FaultCode.UNRECOGNIZED_OPTION,
            hint="check the spelling; the available options are listed by the description",
            token=token,
            index=index + 1,
            docs=getdoc(FaultCode.UNRECOGNIZED_OPTION),
        ))

    def _parse_short(self, result, tokens, index):
        token = tokens[index]
        for option in result.shorts:
            if option.full_name != token:
                continue
            if check_pattern(option.capability(), ArgPattern.NEXT_ARG):
                return self._consume_next(option, tokens, index)
            option.used = True
            return index + 1
        return self._unrecognized(token, index)

    def _parse_long(self, result, tokens, index):
        token = tokens[index]
        input, separator, payload = token.partition("=")
        for option in result.longs:
            if option.full_name != input:
                continue
            capability = option.capability()
            if separator and check_pattern(capability, ArgPattern.EQUAL_SIGN):
                if not payload:
                    return self.trigger(MissingInlineValueError(
                        "missing value after '=' in %r" % token,
                        title="missing value after =",
                        code=FaultCode.MISSING_INLINE_VALUE,
                        hint="add a value after '=' (for example: %s=<%s>)" % (input, option.value.name),
                        option=option.full_name,
                        token=token,
                        index=index + 1,
                        docs=getdoc(FaultCode.MISSING_INLINE_VALUE),
                    ))
                for piece in split_values(payload):
                    self._feed(option, piece, index)
                return index + 1
            if not separator and check_pattern(capability, ArgPattern.NEXT_ARG):
                return self._consume_next(option, tokens, index)
            if not separator and check_pattern(capability, ArgPattern.NONE):
                option.used = True
                return index + 1
        return self._unrecognized(token, index)

    def parse(self, argv=Unset, /):
        """
        parse an argument vector into a fresh OptionMap.

        parameters
        - argv:
          • Unset: sys.argv (the program name at index 0 is skipped).
          • Iterable[str]: argv-style vector; index 0 is the program name.
          • str: shell-like prompt split with shlex.split; every token is an argument.

        returns
        - an independent clone of the template with used flags, values and the
          leftover positional tokens filled in.

        raises
        - UsageError subclasses, ConversionError, ConstraintError (outside shell
          mode); no partial result is ever returned.
        """
        tokens = self._tokens(argv)
        result = self._map.clone()
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if is_short_option(token):
                index = self._parse_short(result, tokens, index)
            elif is_long_option(token):
                index = self._parse_long(result, tokens, index)
            else:
                result.leftovers.append(token)
                index += 1
        return result

    def _rows(self):
        for option in self._map.order:
            yield option, *option.describe()

    def _padding(self, signature, width, gap):
        if len(signature) > width - gap:
            return " " * gap
        return " " * (width - len(signature))

    def description(self, width=Unset, gap=Unset):
        """
        two-column help text in registration order.

        each line is two spaces, the signature, then `gap` spaces when the
        signature is longer than `width - gap` or padding up to `width`
        otherwise, then the description. "  None\\n" when nothing is registered.
        """
        width = coalesce(width, self.width)
        gap = coalesce(gap, self.gap)
        if not self._map.order:
            return "  None\n"
        return "".join(
            "  " + signature + self._padding(signature, width, gap) + descr + "\n"
            for _, signature, descr in self._rows()
        )

    def print_description(self, console=Unset, /, width=Unset, gap=Unset):
        """
        render description(width, gap) with rich styles.

        palette keys: short-option, long-option, operator, metavar, default,
        option-description; override them with a __styles__ mapping in __main__.
        colorful=False renders plain text.
        """
        console = coalesce(console, Console())
        width = coalesce(width, self.width)
        gap = coalesce(gap, self.gap)
        styles = defaultdict(str, {
            "short-option": "bold #00E6FF",
            "long-option": "bold #22C55E",
            "operator": "dim",
            "metavar": "bold #FFD600",
            "default": "italic #A3A3A3",
            "option-description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        if not self._map.order:
            return console.print(Text("  None"), highlight=False)

        for option, signature, descr in self._rows():
            line = Text("  ")
            name = option.full_name
            line.append(name, styler("short-option" if option.pattern is OptionPattern.SHORT else "long-option"))
            rest = signature[len(name):]
            if (start := rest.find("<")) >= 0:
                end = rest.find(">", start) + 1
                line.append(rest[:start], styler("operator"))
                line.append(rest[start:end], styler("metavar"))
                line.append(rest[end:], styler("default"))
            line.append(self._padding(signature, width, gap))
            line.append(descr, styler("option-description"))
            console.print(line, highlight=False)

    def __repr__(self):
        return "command-line-option(prog=%r, options=%d)" % (self.prog, len(self._map))


__all__ = (
    "AddOptions",
    "CommandLineOption",
)
