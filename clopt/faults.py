"""
clopt faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault the library
  can surface, grouped by domain so that logs and searches stay predictable.
- OptionException / OptionWarning: base types that carry a message plus a
  read-only options mapping (title, code, hint and context such as the option,
  the offending token or the target type) and know how to render themselves.
- trigger(): central entry point to surface a fault (raise, warn, or print and
  exit when running in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Taxonomy
- configuration (programmer) errors: ConfigError, OptionLookupError, ValueTypeError.
- user input errors: ConversionError, ConstraintError and the UsageError family
  (unrecognized option, missing argument, value given to a flag, missing value
  after '=', no value present, valueless option).

Every fault also derives from the closest builtin exception (ValueError,
LookupError, TypeError) so callers that do not know about clopt can still
catch them idiomatically.
"""
import copy
import inspect
import sys
import warnings
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
    canonical fault codes (stable identifiers).

    grouping
    - usage (11xxx): faults caused by the argument vector or by querying a value
      that cannot be produced.
    - warnings (12xxx): non-fatal registration notices.
    - configuration (13xxx): programmer errors at setup or lookup time.

    normalize() lets the host remap codes to custom labels through a __codes__
    mapping defined in __main__.
    """
    # --- usage errors (11xxx) ---
    UNRECOGNIZED_OPTION         = 11112
    FLAG_ASSIGNMENT             = 11113
    MISSING_INLINE_VALUE        = 11114
    OPTION_VALUE_REQUIRED       = 11117
    UNCONVERTIBLE_VALUE         = 11126
    CONSTRAINT_VIOLATION        = 11127
    NO_VALUE_PRESENT            = 11128
    VALUELESS_OPTION            = 11129

    # --- warnings (12xxx) ---
    DUPLICATED_OPTION           = 12115

    # --- configuration errors (13xxx) ---
    INVALID_OPTION_NAME         = 13101
    INVALID_LIMIT               = 13102
    INVALID_DEFAULT             = 13103
    INVALID_ARG_PATTERN         = 13104
    INVALID_DISPLAY_NAME        = 13105
    FROZEN_VALUE                = 13106
    UNKNOWN_OPTION              = 13111
    VALUE_TYPE_MISMATCH         = 13112

    def normalize(self):
        """
        return a host-normalized string for this code.

        when __main__ provides no __codes__ mapping (or the mapping lacks this
        code), the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog(options):
    main = __import__("__main__")
    if prog := getattr(main, "__prog__", None):
        return prog
    if (tool := options.get("tool")) is not None:
        return tool.prog
    return "clopt"


class _Renderable:
    """
    rich rendering shared by exceptions and warnings.

    palette keys ("prog-name", "code", "title", "message", "hint-arrow", "hint")
    can be overridden by a __styles__ mapping defined in __main__.
    """
    __palette__ = {}

    def __rich__(self):
        styles = defaultdict(str, self.__palette__ | getattr(__import__("__main__"), "__styles__", {}))
        colorful = self.options.get("colorful", False)
        fancy = self.options.get("fancy", False)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(_prog(self.options), "prog-name"),
            " — ",
            text(code.normalize() if code is not None else "?", "code"),
            " | ",
            text(str(self.options.get("title", "")).title(), "title"),
            " ]"
        )
        message = text(self.message, "message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options.get("hint"), "hint"))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")
        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class OptionException(_Renderable, Exception):
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)


class OptionWarning(_Renderable, UserWarning):
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)


# --- configuration (programmer) errors ---
class ConfigError(OptionException, ValueError): ...
class OptionLookupError(OptionException, LookupError): ...
class ValueTypeError(OptionException, TypeError): ...

# --- conversion / constraint errors ---
class ConversionError(OptionException, ValueError): ...
class ConstraintError(OptionException, ValueError): ...

# --- usage errors ---
class UsageError(OptionException): ...
class UnrecognizedOptionError(UsageError): ...
class MissingArgumentError(UsageError): ...
class FlagAssignmentError(UsageError): ...
class MissingInlineValueError(UsageError): ...
class NoValuePresentError(UsageError): ...
class ValuelessOptionError(UsageError): ...

# --- warnings ---
class DuplicatedOptionWarning(OptionWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - outside shell mode exceptions are raised and warnings are emitted through
      the warnings module; in shell mode both are printed on stderr and
      exceptions terminate the process with status 1.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    return copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation for a fault code, looked up in a __docs__ mapping
    defined in __main__. returns None when the host provides none.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "OptionException",
    "OptionWarning",
    "ConfigError",
    "OptionLookupError",
    "ValueTypeError",
    "ConversionError",
    "ConstraintError",
    "UsageError",
    "UnrecognizedOptionError",
    "MissingArgumentError",
    "FlagAssignmentError",
    "MissingInlineValueError",
    "NoValuePresentError",
    "ValuelessOptionError",
    "DuplicatedOptionWarning",
    "trigger",
    "getdoc",
)
