r"""
clopt option registry and query facade.

OptionMap
- owns the registered entities in two partitions (short and long options),
  keeps their global registration order (used to render help) and collects the
  positional tokens left over by a parse.
- clone() produces an independent copy; the parser always works on a clone so
  the configured template can be parsed any number of times.

Lookups (programmer-facing; an unknown name raises OptionLookupError)
- lookup_short("v")  → the short option -v.
- lookup_long("out") → the first long option --out; "out=" selects an
  EQUAL_SIGN-capable --out and "out " a NEXT_ARG-capable --out.
- lookup("v")        → short options first, then long ones; "out=" selects an
  EQUAL_SIGN-capable --out and "out " a NEXT_ARG-capable --out.

OptionView
- returned by probe()/probe_short()/probe_long() and map[name]; truthy when the
  option was encountered, and extract(type) retrieves its value(s) with a
  checked element type:
      >>> opts = cli.parse(["prog", "--count=1,2,3"])
      >>> bool(opts["count="]), opts["count="].extract(list[int])
      (True, [1, 2, 3])
"""
import typing
from collections import deque

from .faults import *
from .options import *
from .utils import *

# Containers extract() knows how to build from the stored values.
_CONTAINERS = (list, tuple, set, frozenset, deque)


class OptionMap:
    """
    Registry of option entities plus the leftover positional tokens.
    """

    __slots__ = ("shorts", "longs", "order", "leftovers")

    def __init__(self):
        self.shorts = []
        self.longs = []
        self.order = []
        self.leftovers = []

    def register(self, option, /):
        """
        take ownership of an entity and remember its registration order.
        """
        match option.pattern:
            case OptionPattern.SHORT:
                self.shorts.append(option)
            case OptionPattern.LONG:
                self.longs.append(option)
        self.order.append(option)
        return option

    def clone(self):
        """
        deep-copy every entity (in registration order) and the leftovers.
        """
        result = OptionMap()
        for option in self.order:
            result.register(option.clone())
        result.leftovers.extend(self.leftovers)
        return result

    def lookup_short(self, name, /):
        for option in self.shorts:
            if option.name == name:
                return option
        raise self._missing("-" + name)

    def lookup_long(self, name, /):
        if name.endswith("="):
            return self._lookup_capable(name[:-1], ArgPattern.EQUAL_SIGN)
        if name.endswith(" "):
            return self._lookup_capable(name[:-1], ArgPattern.NEXT_ARG)
        for option in self.longs:
            if option.name == name:
                return option
        raise self._missing("--" + name)

    def lookup(self, name, /):
        if name.endswith("="):
            return self._lookup_capable(name[:-1], ArgPattern.EQUAL_SIGN)
        if name.endswith(" "):
            return self._lookup_capable(name[:-1], ArgPattern.NEXT_ARG)
        for option in self.shorts + self.longs:
            if option.name == name:
                return option
        raise self._missing(name)

    def _lookup_capable(self, name, pattern):
        for option in self.longs:
            if option.name == name and check_pattern(option.capability(), pattern):
                return option
        raise self._missing("--" + name + ("=" if pattern is ArgPattern.EQUAL_SIGN else " "))

    @staticmethod
    def _missing(name):
        return OptionLookupError(
            "no such option %r" % name,
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            hint="query options by the name they were registered with",
            name=name,
        )

    def probe_short(self, name, /):
        return OptionView(self.lookup_short(name))

    def probe_long(self, name, /):
        return OptionView(self.lookup_long(name))

    def probe(self, name, /):
        return OptionView(self.lookup(name))

    def __getitem__(self, name, /):
        return self.probe(name)

    def __contains__(self, name, /):
        try:
            self.lookup(name)
        except OptionLookupError:
            return False
        return True

    def __iter__(self):
        return iter(self.order)

    def __len__(self):
        return len(self.order)

    def __repr__(self):
        return "option-map(options=%r, leftovers=%r)" % (self.order, self.leftovers)


def _element_type(type, /):
    """
    split a requested type into (container, element type).

    - list[int] / set[int] / deque[int] / tuple[int, ...] → (origin, int)
    - int, str, Path, ...                                  → (None, type)
    """
    if (origin := typing.get_origin(type)) is not None:
        arguments = [argument for argument in typing.get_args(type) if argument is not Ellipsis]
        if origin in _CONTAINERS and len(arguments) == 1:
            return origin, arguments[0]
        raise TypeError("extract() cannot build %r; use one of list, tuple, set, frozenset or deque" % (type,))
    return None, type


class OptionView:
    """
    Borrowed, read-only handle over one option of a parsed OptionMap.

    - bool(view) → whether the option was encountered on the command line.
    - view.extract(T) → the first stored value, checked to be of element type T.
    - view.extract(list[T]) (or tuple/set/frozenset/deque) → all stored values.

    Configured defaults are returned even when the option was not used; test
    bool(view) to tell both situations apart.
    """

    __slots__ = ("_option",)

    def __init__(self, option, /):
        self._option = option

    @property
    def option(self):
        return self._option

    @property
    def name(self):
        return self._option.full_name

    def __bool__(self):
        return self._option.used

    def extract(self, type, /):
        option = self._option
        if check_pattern(option.capability(), ArgPattern.NONE):
            raise ValuelessOptionError(
                "option %s does not carry a value" % option.full_name,
                title="option without value",
                code=FaultCode.VALUELESS_OPTION,
                hint="test bool(...) on flags instead of extracting a value",
                option=option.full_name,
            )
        container, element = _element_type(type)
        if element is not option.type:
            raise ValueTypeError(
                "option %s stores values of type %s, not %s" % (
                    option.full_name, type_name(option.type), type_name(element)
                ),
                title="type mismatch",
                code=FaultCode.VALUE_TYPE_MISMATCH,
                hint="extract the value as %s" % type_name(option.type),
                option=option.full_name,
                type=type_name(element),
            )
        if not option.values:
            raise NoValuePresentError(
                "option %s has no value" % option.full_name,
                title="no value present",
                code=FaultCode.NO_VALUE_PRESENT,
                hint="give %s a default or check bool(...) before extracting" % option.full_name,
                option=option.full_name,
            )
        if container is None:
            return option.values[0]
        return container(option.values)

    def __repr__(self):
        return "option-view(%r, used=%r)" % (self._option.full_name, self._option.used)


__all__ = (
    "OptionMap",
    "OptionView",
)
