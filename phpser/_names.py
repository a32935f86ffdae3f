"""Class-name mapping between Python host types and PHP class names.

PHP lowercases class names on the wire, so a namespaced host type id such as
``Outer.InnerThing`` travels as ``outer__inner_thing``:

    "."  -> "__"                     (scope separator)
    aB   -> a_B, 9B -> 9_B           (word boundary before a capital)
    everything lowercased

The reverse direction camelizes each "__"-separated segment and looks the
resulting id up in an explicit TypeRegistry.  There is no global lookup:
a decoder only ever resolves the types it was handed.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional

from ._errors import NameResolutionError

logger = logging.getLogger("phpser.registry")

SCOPE_SEPARATOR = "."
WIRE_SCOPE_SEPARATOR = "__"

_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_CAMEL_PIECE = re.compile(r"(?:^|_)([a-z\d]*)", re.IGNORECASE)


def to_wire_name(type_id: str) -> str:
    """``TestModule.TestObject`` -> ``test_module__test_object``."""
    flat = type_id.replace(SCOPE_SEPARATOR, WIRE_SCOPE_SEPARATOR)
    return _WORD_BOUNDARY.sub(r"\1_\2", flat).lower()


def _camelize_segment(segment: str) -> str:
    return _CAMEL_PIECE.sub(lambda m: m.group(1).capitalize(), segment)


def camelize_wire_name(name: str) -> str:
    """``test_module__test_object`` -> ``TestModule.TestObject``.

    Pure string transform; it does not check that the type exists.
    """
    segments = name.split(WIRE_SCOPE_SEPARATOR)
    return SCOPE_SEPARATOR.join(_camelize_segment(s) for s in segments)


# ── Registry ──────────────────────────────────────────────────

def _declared_attributes(cls: type) -> FrozenSet[str]:
    """Attribute names a class declares as settable.

    Dataclass fields, __slots__, class-level annotations and properties with
    a setter, collected across the MRO.
    """
    names = set()
    if dataclasses.is_dataclass(cls):
        names.update(f.name for f in dataclasses.fields(cls))
    for klass in cls.__mro__:
        if klass is object:
            continue
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.update(s for s in slots if s not in ("__dict__", "__weakref__"))
        names.update(getattr(klass, "__annotations__", None) or {})
        for attr, member in klass.__dict__.items():
            if isinstance(member, property) and member.fset is not None:
                names.add(attr)
    return frozenset(n for n in names if not n.startswith("__"))


class Registration:
    """How to build and populate one host type."""

    __slots__ = ("cls", "type_id", "factory", "attributes")

    def __init__(self, cls: type, type_id: str, factory: Callable[[], Any],
                 attributes: FrozenSet[str]) -> None:
        self.cls = cls
        self.type_id = type_id
        self.factory = factory
        self.attributes = attributes

    def __repr__(self) -> str:
        return "Registration({}, type_id={!r})".format(self.cls.__name__, self.type_id)


class TypeRegistry:
    """Host types a decoder may instantiate, keyed by host type id.

    Registration is a setup-time operation.  Lookups never mutate the
    registry, so one instance can be shared by concurrent decoders.

        registry = TypeRegistry()

        @registry.register
        class Point:
            x: int
            y: int
    """

    def __init__(self, types: Iterable[type] = ()) -> None:
        self._by_id: Dict[str, Registration] = {}
        self._by_cls: Dict[type, Registration] = {}
        for cls in types:
            self.register(cls)

    def register(self, cls: Optional[type] = None, *, type_id: Optional[str] = None,
                 factory: Optional[Callable[[], Any]] = None,
                 attributes: Optional[Iterable[str]] = None) -> Any:
        """Register `cls`; works bare, called, or as a decorator.

        type_id     defaults to cls.__qualname__
        factory     zero-argument callable returning a fresh instance;
                    defaults to cls.__new__(cls), skipping __init__ the way
                    pickle does
        attributes  names field-by-field decoding may set; defaults to
                    what the class declares (dataclass fields, __slots__,
                    annotations, property setters).  Names only assigned
                    in __init__ are unknown to the default factory; list
                    them here, or pass a factory that runs __init__, whose
                    instance attributes are then accepted too
        """
        if cls is None:
            return lambda c: self.register(c, type_id=type_id, factory=factory,
                                           attributes=attributes)

        tid = type_id or cls.__qualname__
        if factory is None:
            def factory(cls: type = cls) -> Any:
                return cls.__new__(cls)
        attrs = frozenset(attributes) if attributes is not None else _declared_attributes(cls)

        reg = Registration(cls, tid, factory, attrs)
        self._by_id[tid] = reg
        self._by_cls[cls] = reg
        logger.debug("registered %s as %r (wire name %r)", cls.__name__, tid, to_wire_name(tid))
        return cls

    def resolve(self, type_id: str) -> Registration:
        """Return the registration for `type_id`, or raise KeyError."""
        return self._by_id[type_id]

    def type_id_for(self, cls: type) -> str:
        """Host type id used when encoding an instance of `cls`."""
        reg = self._by_cls.get(cls)
        return reg.type_id if reg is not None else cls.__qualname__

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self):
        return iter(self._by_id.values())


def from_wire_name(name: str, registry: Optional[TypeRegistry]) -> Registration:
    """Resolve a wire class name against `registry`.

    Raises NameResolutionError when nothing is registered under the
    camelized id.  That is an expected outcome for data written by other
    programs, and the decoder recovers from it.
    """
    type_id = camelize_wire_name(name)
    if registry is None:
        raise NameResolutionError(name, type_id)
    try:
        return registry.resolve(type_id)
    except KeyError:
        raise NameResolutionError(name, type_id) from None


def host_type_id(value: Any, registry: Optional[TypeRegistry]) -> str:
    cls = type(value)
    if registry is None:
        return cls.__qualname__
    return registry.type_id_for(cls)
