"""
Describes objects for the structural comparator: which kind of value something is, and for 'struct-like' values, which
fields it has.

A struct is any object whose equality should be decided field by field:
    - dataclasses that use their generated __eq__ (or have no __eq__ at all)
    - namedtuples
    - plain objects with a __dict__ and/or __slots__ that do not define their own __eq__

Anything defining its own __eq__ (datetime, Decimal, user classes, ...) is a leaf, and that __eq__ decides equality.

Dataclass fields declared with :func:`embedded` promote their own fields into the containing struct, so a field
`Leaf` of an embedded `Base` is addressed as `Leaf` rather than `Base.Leaf`.
"""

import dataclasses
import inspect
import types
import typing
from collections.abc import Mapping
from enum import Enum
import numpy as np
from .pytypes import BytesLikeTypes, ReferenceTypes, SequenceTypes, SetTypes
from typing import TYPE_CHECKING, NamedTuple


if TYPE_CHECKING:
    from typing import Any, Dict, List


EMBEDDED_METADATA_KEY = 'gstats_assert.embedded'

# Special object/class marking an attribute that one of the compared objects does not have at all
class _Missing:
    def __repr__(self):
        return '<missing>'
MISSING = _Missing()


class Kind(Enum):
    """The kinds of values the comparator knows how to walk"""
    NONE = 'none'
    REFERENCE = 'reference'
    BYTES = 'bytes'
    ARRAY = 'array'
    MAPPING = 'mapping'
    STRUCT = 'struct'
    SEQUENCE = 'sequence'
    SET = 'set'
    LEAF = 'leaf'


class FieldInfo(NamedTuple):
    """A single declared field of a struct"""
    name: str
    embedded: bool = False
    compare: bool = True
    annotation: 'Any' = None


def embedded(**kwargs: 'Any') -> 'Any':
    """Declares a dataclass field whose own fields are promoted into the containing dataclass for field paths.

    Accepts the same kwargs as :func:`dataclasses.field`.
    """
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[EMBEDDED_METADATA_KEY] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def is_namedtuple_type(cls: 'Any') -> 'bool':
    return isinstance(cls, type) and issubclass(cls, tuple) and hasattr(cls, '_fields')


def has_own_eq(cls: 'type') -> 'bool':
    """Returns True if instances of `cls` decide their own equality through __eq__

    Generated dataclass equality and namedtuple (tuple) equality do not count, those are structural.
    """
    if cls.__eq__ is object.__eq__ or is_namedtuple_type(cls):
        return False
    if dataclasses.is_dataclass(cls) and _is_generated(cls.__eq__):
        return False
    return True


def has_own_repr(cls: 'type') -> 'bool':
    """Returns True if instances of `cls` render themselves through a hand-written __repr__

    Reprs generated for dataclasses and namedtuples do not count.
    """
    if cls.__repr__ is object.__repr__:
        return False
    if is_namedtuple_type(cls) and cls.__repr__.__module__ == 'collections':
        return False
    return not (dataclasses.is_dataclass(cls) and _is_generated(cls.__repr__))


def _is_generated(method: 'Any') -> 'bool':
    # dataclasses builds its methods from source text, which leaves '<string>' as their file name
    code = getattr(inspect.unwrap(method), '__code__', None)
    return code is not None and code.co_filename == '<string>'


def is_struct(obj: 'Any') -> 'bool':
    """Returns True if `obj` should be compared field by field"""
    if isinstance(obj, (type, types.ModuleType, Enum, BaseException)) or callable(obj):
        return False

    cls = type(obj)
    if is_namedtuple_type(cls):
        return True
    if has_own_eq(cls):
        return False
    return dataclasses.is_dataclass(cls) or hasattr(obj, '__dict__') or bool(_slot_names(cls))


def is_struct_type(cls: 'Any') -> 'bool':
    """Returns True if `cls` is a class that declares its fields (dataclass or namedtuple)"""
    return isinstance(cls, type) and ((dataclasses.is_dataclass(cls) and not has_own_eq(cls)) or is_namedtuple_type(cls))


def kind_of(obj: 'Any') -> 'Kind':
    """Returns the :class:`Kind` of the given object. Order matters here: namedtuples are structs, not sequences"""
    if obj is None or obj is MISSING:
        return Kind.NONE
    elif isinstance(obj, ReferenceTypes):
        return Kind.REFERENCE
    elif isinstance(obj, BytesLikeTypes):
        return Kind.BYTES
    elif isinstance(obj, np.ndarray):
        return Kind.ARRAY
    elif isinstance(obj, Mapping):
        return Kind.MAPPING
    elif is_struct(obj):
        return Kind.STRUCT
    elif isinstance(obj, SequenceTypes):
        return Kind.SEQUENCE
    elif isinstance(obj, SetTypes):
        return Kind.SET
    return Kind.LEAF


def struct_fields(target: 'Any') -> 'List[FieldInfo]':
    """Returns the fields of a struct instance or struct class, in declaration order.

    Plain objects only have fields as instances (from their __slots__ and __dict__), so a plain class returns an empty
    list.
    """
    cls = target if isinstance(target, type) else type(target)

    if dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        return [FieldInfo(f.name, bool(f.metadata.get(EMBEDDED_METADATA_KEY, False)), f.compare, hints.get(f.name, f.type))
                for f in dataclasses.fields(cls)]

    if is_namedtuple_type(cls):
        hints = _type_hints(cls)
        return [FieldInfo(name, annotation=hints.get(name)) for name in cls._fields]

    if isinstance(target, type):
        return []

    names = [n for n in _slot_names(cls) if hasattr(target, n)]
    names += [n for n in getattr(target, '__dict__', {}) if n not in names]
    return [FieldInfo(name) for name in names]


def get_field(obj: 'Any', name: 'str') -> 'Any':
    """Returns the value of the field `name` on `obj`, or MISSING if it doesn't exist"""
    return getattr(obj, name, MISSING)


def deref(obj: 'Any') -> 'Any':
    """Follows references until a non-reference value is found. Dead references become None"""
    while isinstance(obj, ReferenceTypes):
        obj = obj()
    return obj


def _slot_names(cls: 'type') -> 'List[str]':
    names = []
    for klass in reversed(cls.__mro__):
        slots = klass.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        names += [s for s in slots if s not in ('__dict__', '__weakref__') and s not in names]
    return names


def _type_hints(cls: 'type') -> 'Dict[str, Any]':
    # Forward references that cannot be resolved leave the raw annotations in place
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return dict(getattr(cls, '__annotations__', {}))
