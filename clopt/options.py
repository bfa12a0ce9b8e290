r"""
clopt option entities.

Overview
- OptionPattern: SHORT ("-x") or LONG ("--xyz"); decides the textual prefix.
- ArgPattern: how an option receives its argument(s), as a bitset:
  • NONE: the option carries no value (flag).
  • NEXT_ARG: the value is the following token ("--name value").
  • EQUAL_SIGN: the value is inline after '=' ("--name=a,b"); long options only.
  • ALL_AVAILABLE: NEXT_ARG | EQUAL_SIGN.
- Flag: presence-only option.
- ValuedOption[_T]: value-bearing option driven by a Value[_T] descriptor.

Lifecycle
- entities are created once at registration time, mutated only while a parse
  runs on a clone of the registry (used flag, stored values), and never shared
  between two parses (see OptionMap.clone).

Signatures (help column)
- flags:           "-v", "--verbose"
- valued options:  "<prefix><name><op><placeholder>[(=defaults)]"
  • op: " " (NEXT_ARG), "=" (EQUAL_SIGN), and for ALL_AVAILABLE " " on short
    options or "[ |=]" on long ones.
  • placeholder: "<arg>", "<arg...[1-3]>" or "<arg...>" (unlimited).
"""
from enum import Enum, IntFlag

from .faults import *
from .utils import *
from .values import Value


class OptionPattern(Enum):
    SHORT = "-"
    LONG = "--"

    @property
    def prefix(self):
        return self.value


class ArgPattern(IntFlag):
    NONE = 0
    NEXT_ARG = 1
    EQUAL_SIGN = 2
    ALL_AVAILABLE = NEXT_ARG | EQUAL_SIGN


def check_pattern(ref, pattern, /):
    """
    True when `ref` provides `pattern`.

    NONE is not a bit: it only matches a NONE reference (a flag). Any other
    pattern matches when all of its bits are present in `ref`.
    """
    if pattern == ArgPattern.NONE:
        return ref == ArgPattern.NONE
    return (ref & pattern) == pattern


def _sanitize_name(name, /):
    if not isinstance(name, str):
        raise ConfigError(
            "option name must be a string, got %r" % (name,),
            title="invalid option name",
            code=FaultCode.INVALID_OPTION_NAME,
            hint="register options by their bare name (for example: \"verbose\")",
        )
    if not name:
        reason = "cannot be empty"
    elif name.startswith("-"):
        reason = "cannot start with '-'"
    elif "=" in name:
        reason = "cannot contain '='"
    elif " " in name:
        reason = "cannot contain a space"
    else:
        return name
    raise ConfigError(
        "option name %r %s" % (name, reason),
        title="invalid option name",
        code=FaultCode.INVALID_OPTION_NAME,
        hint="register options by their bare name; the '-'/'--' prefix is added for you",
        name=name,
    )


class Flag:
    """
    Presence-only option (-x / --xyz).

    A flag never receives a value; encountering it on the command line only
    marks it as used.
    """

    __slots__ = ("_name", "_descr", "_pattern", "used")

    def __init__(self, name, descr="", pattern=OptionPattern.SHORT):
        self._name = _sanitize_name(name)
        self._descr = descr
        self._pattern = OptionPattern(pattern)
        self.used = False

    @property
    def name(self):
        return self._name

    @property
    def descr(self):
        return self._descr

    @property
    def pattern(self):
        return self._pattern

    @property
    def full_name(self):
        return self._pattern.prefix + self._name

    def capability(self):
        return ArgPattern.NONE

    def add_raw_value(self, token, /):
        raise FlagAssignmentError(
            "option %s cannot take a value (got %r)" % (self.full_name, token),
            title="flag cannot take a value",
            code=FaultCode.FLAG_ASSIGNMENT,
            hint="remove the value given to %s" % self.full_name,
            option=self.full_name,
            token=token,
        )

    def signature(self):
        return self.full_name

    def describe(self):
        return self.signature(), self._descr

    def clone(self):
        other = object.__new__(type(self))
        other._name = self._name
        other._descr = self._descr
        other._pattern = self._pattern
        other.used = self.used
        return other

    def __repr__(self):
        return "%s(%r, used=%r)" % (type(self).__name__.lower(), self.full_name, self.used)


class ValuedOption[_T](Flag):
    """
    Value-bearing option.

    The stored values start as a copy of the descriptor's defaults. The first
    value received from the command line discards them, later values are
    appended up to the limit and then keep overwriting the last slot.
    """

    __slots__ = ("_value", "_capability", "values")

    def __init__(self, name, value, descr="", pattern=OptionPattern.SHORT, capability=ArgPattern.ALL_AVAILABLE):
        super().__init__(name, descr, pattern)
        if not isinstance(value, Value):
            raise ConfigError(
                "option %s expects a Value descriptor, got %r" % (self.full_name, value),
                title="invalid value descriptor",
                code=FaultCode.INVALID_DEFAULT,
                hint="wrap the argument shape in Value(...) (for example: Value(type=int))",
            )
        capability = ArgPattern(capability)
        if capability == ArgPattern.NONE:
            raise ConfigError(
                "option %s carries a value and cannot use the NONE argument pattern" % self.full_name,
                title="invalid argument pattern",
                code=FaultCode.INVALID_ARG_PATTERN,
                hint="register it without a Value descriptor to make it a flag",
            )
        if self._pattern is OptionPattern.SHORT:
            # short options have no inline '=' form
            if not check_pattern(capability, ArgPattern.NEXT_ARG):
                raise ConfigError(
                    "short option %s can only receive its value as the next argument" % self.full_name,
                    title="invalid argument pattern",
                    code=FaultCode.INVALID_ARG_PATTERN,
                    hint="register it as a long option to accept '=' values",
                )
        self._value = value.frozen()
        self._capability = capability
        self.values = list(value.defaults)

    @property
    def value(self):
        return self._value

    @property
    def type(self):
        return self._value.type

    def capability(self):
        return self._capability

    def add_raw_value(self, token, /):
        try:
            value = convert(self._value.type, token)
        except ValueError as exception:
            typename = type_name(self._value.type)
            raise ConversionError(
                "option %s: argument %r cannot be converted to type %s" % (self.full_name, token, typename),
                title="invalid value",
                code=FaultCode.UNCONVERTIBLE_VALUE,
                hint="pass a valid %s for %s" % (typename, self.full_name),
                option=self.full_name,
                token=token,
                type=typename,
            ) from exception
        self.add_value(value)

    def add_value(self, value, /):
        if self._value.constraint is not None and not self._value.constraint(value):
            raise ConstraintError(
                "option %s: argument %r does not satisfy the constraint" % (self.full_name, value),
                title="constraint violation",
                code=FaultCode.CONSTRAINT_VIOLATION,
                hint="pass a value accepted by %s" % self.full_name,
                option=self.full_name,
                value=value,
            )
        if not self.used:
            self.values.clear()
        if self._value.unbounded or len(self.values) < self._value.limit:
            self.values.append(value)
        else:
            self.values[self._value.limit - 1] = value
        self.used = True

    def signature(self):
        match self._capability:
            case ArgPattern.NEXT_ARG:
                op = " "
            case ArgPattern.EQUAL_SIGN:
                op = "="
            case _:
                op = " " if self._pattern is OptionPattern.SHORT else "[ |=]"

        placeholder = "<" + self._value.name
        if self._value.unbounded:
            placeholder += "..."
        elif self._value.limit > 1:
            placeholder += "...[1-%d]" % self._value.limit
        placeholder += ">"

        if defaults := self._value.defaults:
            placeholder += "(=%s)" % ",".join(map(str, defaults))

        return self.full_name + op + placeholder

    def clone(self):
        other = super().clone()
        other._value = self._value
        other._capability = self._capability
        other.values = list(self.values)
        return other

    def __repr__(self):
        return "%s(%r, values=%r, used=%r)" % ("valued-option", self.full_name, self.values, self.used)


__all__ = (
    "OptionPattern",
    "ArgPattern",
    "check_pattern",
    "Flag",
    "ValuedOption",
)
