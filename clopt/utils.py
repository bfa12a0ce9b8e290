"""
clopt utilities (internal helpers)

Scope
- Small building blocks shared by the values, options and parser layers.

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided", distinct from None.
  • Falsey, printable as "Unset", usable in isinstance(x, str | Unset).

- coalesce(value, default=None)
  • Replace Unset with a concrete default; falsey values are preserved.

- type_name(converter) / convert(converter, token)
  • Display name of a converter and token conversion (bool spellings included),
    failures normalized to ValueError.

- split_values(text)
  • Pieces of an inline "a,b,c" payload.

- is_short_option(token) / is_long_option(token)
  • Token classification used by the parser ("-x..." and "--x...").
"""
import functools
import re
from typing import final


@final
class UnsetType:
    """
    internal singleton sentinel representing an "unset" value.

    intent
    - distinguishes "not provided" from a user-supplied value (including None,
      zero, or an empty string, which are all legitimate option defaults).

    behavior
    - truthiness: bool(Unset) is False.
    - identity: Unset is a process-wide singleton (see __new__).
    - display: repr(Unset) -> "Unset".
    - final: subclassing is forbidden (see __init_subclass__).
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    return `default` when `object` is Unset; otherwise return `object` unchanged.
    """
    return default if object is Unset else object


# Spellings accepted when converting a token to bool (case-insensitive).
_TRUTHY = frozenset({"1", "true", "yes", "on", "y"})
_FALSY = frozenset({"0", "false", "no", "off", "n"})


def type_name(type, /):
    """
    human-readable name of a converter, used in conversion messages and help.

    - classes and functions → their __name__ (e.g. "int", "Path").
    - anything else (partials, instances with __call__) → repr().
    """
    return getattr(type, "__name__", None) or repr(type)


def convert(type, token, /):
    """
    convert a raw command-line token with the given converter.

    rules
    - bool does not use bool(token) (every non-empty string is truthy); the
      spellings in _TRUTHY/_FALSY are recognized instead.
    - str passes the token through untouched.
    - any other callable is invoked with the token.

    raises
    - ValueError when the token cannot be converted; TypeError/ValueError raised
      by the converter itself are normalized to ValueError.
    """
    if type is str:
        return token
    if type is bool:
        if (folded := token.strip().lower()) in _TRUTHY:
            return True
        if folded in _FALSY:
            return False
        raise ValueError("invalid boolean literal %r" % token)
    try:
        return type(token)
    except (TypeError, ValueError, ArithmeticError) as exception:
        raise ValueError(str(exception)) from exception


def split_values(text, /):
    """
    split the payload of an inline '--name=a,b,c' token into its pieces.

    a single trailing empty piece is dropped so that 'a,b,' yields ['a', 'b'],
    while interior empty pieces ('a,,b') are kept and reach the converter.
    """
    pieces = text.split(",")
    if len(pieces) > 1 and not pieces[-1]:
        pieces.pop()
    return pieces


def is_short_option(token, /):
    """
    '-x...' where the second character exists and is not '-'.
    """
    return re.match(r"-[^-]", token) is not None


def is_long_option(token, /):
    """
    '--x...' where the third character exists and is not '-'.
    """
    return re.match(r"--[^-]", token) is not None


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "type_name",
    "convert",
    "split_values",
    "is_short_option",
    "is_long_option",
)
