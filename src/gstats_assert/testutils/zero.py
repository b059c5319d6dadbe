"""
Predicates for 'zero', 'empty' and 'none' values.

Zero is the value a freshly initialized field would have: None, False, numeric zero, empty strings/bytes/containers,
all-zero numpy arrays, and structs whose fields are all zero. A value can override this with an `is_zero()` method.

Empty is zero length for strings, bytes, containers and mappings, zero size or all-zero elements for numpy arrays, and
None for references. Anything else falls back on :func:`is_zero`.
"""

import numpy as np
from .pytypes import NumericTypes
from .structs import MISSING, Kind, deref, get_field, kind_of, struct_fields
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Optional, Set


def is_none(obj: 'Any') -> 'bool':
    """Returns True if `obj` is None, or a reference whose referent no longer exists"""
    return deref(obj) is None


def is_empty(obj: 'Any') -> 'bool':
    """Returns True if `obj` is considered empty"""
    kind = kind_of(obj)

    if kind is Kind.NONE:
        return True
    elif kind is Kind.REFERENCE:
        return deref(obj) is None
    elif kind is Kind.ARRAY:
        return obj.size == 0 or not np.any(obj)
    elif kind in (Kind.BYTES, Kind.MAPPING, Kind.SEQUENCE, Kind.SET) or isinstance(obj, str):
        return len(obj) == 0
    return is_zero(obj)


def is_zero(obj: 'Any') -> 'bool':
    """Returns True if `obj` is a zero value. Prefers the object's own `is_zero()` method when it has one"""
    return _is_zero(obj, set())


def _is_zero(obj: 'Any', seen: 'Set[int]') -> 'bool':
    if obj is None or obj is MISSING:
        return True

    own = _own_is_zero(obj)
    if own is not None:
        return own

    # Bools first, they are numeric too
    if isinstance(obj, (bool, np.bool_)):
        return not obj
    elif isinstance(obj, NumericTypes):
        return bool(obj == 0)
    elif isinstance(obj, str):
        return obj == ''

    kind = kind_of(obj)
    if kind is Kind.REFERENCE:
        return deref(obj) is None
    elif kind is Kind.ARRAY:
        return obj.size == 0 or not np.any(obj)
    elif kind in (Kind.BYTES, Kind.MAPPING, Kind.SEQUENCE, Kind.SET):
        return len(obj) == 0
    elif kind is Kind.STRUCT:
        # Self-referencing structs are zero only if everything else is
        if id(obj) in seen:
            return True
        seen.add(id(obj))
        return all(_is_zero(get_field(obj, f.name), seen) for f in struct_fields(obj))
    return False


def _own_is_zero(obj: 'Any') -> 'Optional[bool]':
    """Calls the object's own `is_zero()` method if it has one, otherwise returns None"""
    # Classes have the method unbound, so only look at instances
    if isinstance(obj, type):
        return None

    method = getattr(obj, 'is_zero', None)
    if not callable(method):
        return None
    return bool(method())
