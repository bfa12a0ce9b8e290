r"""
clopt value descriptors.

Overview
- Value[_T] declares the shape of an option's argument(s):
  • defaults: seed values stored on the option at registration time.
  • type: converter applied to every raw token (inferred from the first
    default when omitted, otherwise str).
  • limit: maximum number of stored values (int >= 1) or Ellipsis for unlimited.
  • constraint: optional predicate every value (default or parsed) must satisfy.
  • name: display name used in help placeholders ("<name...[1-3]>").

Validation highlights
- len(defaults) never exceeds limit.
- defaults are instances of the converter class when the converter is a class.
- a constraint is checked eagerly against the existing defaults when attached.
- options register a frozen snapshot (see frozen()); later with_* calls on the
  caller's descriptor never reach an already registered option.

Every violation raises ConfigError: it is a programmer error surfaced at setup.

Quick example:
    >>> from clopt import Value
    >>> Value(5).with_limit(3).with_constraint(lambda x: x > 0).with_name("N")
    value(type=int, defaults=(5,), limit=3, name='N')
"""
import builtins
import copy

from .faults import *
from .utils import *


class Value[_T]:
    """
    Argument descriptor for a value-bearing option.

    Instances are configured fluently; every with_* method validates and returns
    the descriptor itself. Registering it stores a frozen snapshot (frozen()),
    shared between the registered option and its clones; with_* calls on a
    frozen descriptor raise ConfigError.
    """

    __slots__ = ("_defaults", "_type", "_limit", "_constraint", "_name", "_frozen")

    def __init__(self, *defaults, type=Unset, limit=1, constraint=Unset, name="arg"):
        if type is Unset:
            type = builtins.type(defaults[0]) if defaults else str
        if not callable(type):
            raise ConfigError(
                "value converter %r is not callable" % (type,),
                title="invalid converter",
                code=FaultCode.INVALID_DEFAULT,
                hint="pass a class or a function taking one string (for example: type=int)",
            )
        self._type = type
        self._defaults = []
        self._limit = 1
        self._constraint = None
        self._name = "arg"
        self._frozen = False

        self.with_name(name)
        if limit is Ellipsis:
            self.unlimited()
        else:
            self.with_limit(limit)
        self.with_default(*defaults)
        if constraint is not Unset:
            self.with_constraint(constraint)

    @property
    def defaults(self):
        return tuple(self._defaults)

    @property
    def type(self):
        return self._type

    @property
    def limit(self):
        return self._limit

    @property
    def constraint(self):
        return self._constraint

    @property
    def name(self):
        return self._name

    @property
    def unbounded(self):
        return self._limit is Ellipsis

    def _overflow(self, count, limit):
        raise ConfigError(
            "%d default value(s) exceed the limit of %d" % (count, limit),
            title="too many defaults",
            code=FaultCode.INVALID_LIMIT,
            hint="raise the limit before adding defaults (for example: .with_limit(%d))" % count,
        )

    def _check(self, value):
        if isinstance(self._type, builtins.type) and not isinstance(value, self._type):
            raise ConfigError(
                "default value %r is not of type %s" % (value, type_name(self._type)),
                title="invalid default",
                code=FaultCode.INVALID_DEFAULT,
                hint="use a %s default or pass a matching type=..." % type_name(self._type),
            )
        if self._constraint is not None and not self._constraint(value):
            raise ConfigError(
                "default value %r does not satisfy the constraint" % (value,),
                title="invalid default",
                code=FaultCode.INVALID_DEFAULT,
                hint="change the default or relax the constraint",
            )

    def _writable(self):
        if self._frozen:
            raise ConfigError(
                "value descriptor %r is registered on an option and can no longer change" % (self,),
                title="frozen value",
                code=FaultCode.FROZEN_VALUE,
                hint="configure the Value(...) completely before passing it to o()/l()",
            )

    def with_default(self, *values):
        """
        append seed value(s); the total must stay within the limit.

        with_default(1, 2) and with_default([1, 2]) are equivalent: a single list
        or tuple is unpacked unless the converter itself builds that class.
        """
        self._writable()
        if len(values) == 1 and isinstance(values[0], list | tuple):
            if not (isinstance(self._type, builtins.type) and isinstance(values[0], self._type)):
                values = tuple(values[0])
        if not self.unbounded and len(self._defaults) + len(values) > self._limit:
            self._overflow(len(self._defaults) + len(values), self._limit)
        for value in values:
            self._check(value)
        self._defaults.extend(values)
        return self

    def with_limit(self, limit, /):
        """
        set the maximum number of stored values (a positive integer).
        """
        self._writable()
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ConfigError(
                "value limit must be a positive integer, got %r" % (limit,),
                title="invalid limit",
                code=FaultCode.INVALID_LIMIT,
                hint="use .unlimited() to accept any number of values",
            )
        if limit < len(self._defaults):
            self._overflow(len(self._defaults), limit)
        self._limit = limit
        return self

    def unlimited(self):
        self._writable()
        self._limit = Ellipsis
        return self

    def with_constraint(self, constraint, /):
        """
        attach a predicate; existing defaults are checked immediately.
        """
        self._writable()
        if not callable(constraint):
            raise ConfigError(
                "constraint %r is not callable" % (constraint,),
                title="invalid constraint",
                code=FaultCode.INVALID_DEFAULT,
                hint="pass a predicate taking one converted value",
            )
        for value in self._defaults:
            if not constraint(value):
                raise ConfigError(
                    "default value %r does not satisfy the constraint" % (value,),
                    title="invalid default",
                    code=FaultCode.INVALID_DEFAULT,
                    hint="change the default or relax the constraint",
                )
        self._constraint = constraint
        return self

    def with_name(self, name, /):
        """
        set the display name used in help placeholders.
        """
        self._writable()
        if not isinstance(name, str) or not (name := name.strip()):
            raise ConfigError(
                "value display name must be a non-empty string",
                title="invalid display name",
                code=FaultCode.INVALID_DISPLAY_NAME,
                hint="for example: .with_name(\"FILE\")",
            )
        self._name = name
        return self

    def frozen(self):
        """
        a read-only snapshot of this descriptor (self when already frozen).

        options keep the snapshot, so the caller may go on configuring (or reuse)
        the original without affecting what was registered.
        """
        if self._frozen:
            return self
        other = copy.copy(self)
        other._frozen = True
        return other

    def __copy__(self):
        other = object.__new__(type(self))
        other._defaults = list(self._defaults)
        other._type = self._type
        other._limit = self._limit
        other._constraint = self._constraint
        other._name = self._name
        other._frozen = False
        return other

    def __repr__(self):
        limit ="..." if self.unbounded else self._limit
        return "value(type=%s, defaults=%r, limit=%s, name=%r)" % (
            type_name(self._type), self.defaults, limit, self._name
        )


__all__ = (
    "Value",
)
