"""
Utils for determining equality of objects, optionally ignoring some of their fields

Handled types:
    - None
    - weakref.ref (dereferenced, two references to equal values are equal)
    - bool (bool's are NOT int's)
    - bytes, bytearray, memoryview (by content)
    - numpy ndarray (object arrays are compared as nested lists)
    - dict, and other mappings
    - structs: dataclasses, namedtuples, plain objects without their own __eq__
    - list, tuple
    - set, frozenset
    - falls back on built-in __eq__, which is how datetime, Decimal, and user classes define their own equality

Containers and structs must be of the exact same type to be equal. Self-referencing objects are fine: a pair of objects
already being compared is assumed equal when it is met again further down.
"""

import logging
from functools import cached_property
from itertools import chain
import numpy as np
from .diffing import CHANGE_CREATE, CHANGE_DELETE, CHANGE_UPDATE, Change, limit_str, render_diff
from .options import FieldStep, is_ignored, resolve_filters
from .structs import MISSING, Kind, deref, get_field, kind_of, struct_fields
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Iterable, List, Tuple
    from .options import FilterRule, Option


logger = logging.getLogger(__name__)

# Kinds that can contain themselves, and thus need cycle tracking
_CONTAINER_KINDS = (Kind.MAPPING, Kind.STRUCT, Kind.SEQUENCE)


def compare(got: 'Any', want: 'Any', *options: 'Option') -> 'ComparisonResult':
    """
    Compares `got` against `want`, returning a :class:`ComparisonResult` that is truthy when they are equal.

    The diff of the result is only rendered when it is first accessed, and uses the same filter rules as the equality
    check, so ignored fields never show up in it.

    Args:
        got (Any): the actual value
        want (Any): the expected value. Empty/zero field options look only at this side
        options (Option): options from :mod:`~gstats_assert.testutils.options`

    Returns:
        ComparisonResult: the result
    """
    rules = resolve_filters(*options, sample=want if want is not None else got) if options else ()
    result = ComparisonResult(got, want, rules, _Walker(rules).walk(got, want))
    logger.debug("Compared %s with %s: equal=%s", type(got).__name__, type(want).__name__, result.equal)
    return result


def equal(a: 'Any', b: 'Any', *options: 'Option', raise_err: 'bool' = False) -> 'bool':
    """
    Determines whether a == b, walking into containers and structs and honoring the given options.

    Args:
        a (Any): the actual value
        b (Any): the expected value
        options (Option): options from :mod:`~gstats_assert.testutils.options`
        raise_err (bool): if True, then an ``EqualityError`` will be raised whenever `a` and `b` are unequal, with the
            rendered diff as its message. Defaults to False.
    """
    result = compare(a, b, *options)
    if not result and raise_err:
        raise EqualityError(a, b, result.diff)
    return result.equal


class ComparisonResult:
    """The outcome of :func:`compare`. The diff is rendered lazily, and only for unequal values"""

    def __init__(self, got: 'Any', want: 'Any', rules: 'Tuple[FilterRule, ...]', equal: 'bool'):
        self.got = got
        self.want = want
        self.rules = rules
        self.equal = equal

    def __bool__(self) -> 'bool':
        return self.equal

    def __repr__(self) -> str:
        return "ComparisonResult(equal=%s)" % self.equal

    @cached_property
    def changes(self) -> 'List[Change]':
        if self.equal:
            return []
        walker = _Walker(self.rules, collect=True)
        walker.walk(self.got, self.want)
        return walker.changes

    @cached_property
    def diff(self) -> str:
        if self.equal:
            return ''
        return render_diff(self.got, self.want, self.changes)


class _Walker:
    """Walks two values in lock-step.

    With collect=False, the walk stops at the first difference. With collect=True, it keeps going and records every
    difference as a :class:`~gstats_assert.testutils.diffing.Change`.
    """

    def __init__(self, rules: 'Tuple[FilterRule, ...]', collect: 'bool' = False):
        self.rules = rules
        self.collect = collect
        self.changes = []
        self._visiting = set()
        self._walkers = {
            Kind.BYTES: self._walk_bytes,
            Kind.ARRAY: self._walk_array,
            Kind.MAPPING: self._walk_mapping,
            Kind.STRUCT: self._walk_struct,
            Kind.SEQUENCE: self._walk_sequence,
            Kind.SET: self._walk_set,
            Kind.LEAF: self._walk_leaf,
        }

    def walk(self, got: 'Any', want: 'Any', path: 'Tuple[str, ...]' = (), display: str = '') -> 'bool':
        """Returns True if got and want are equal. `path` holds field names for the rules, `display` is for diffs"""
        # Do a quick first check for 'is' as they should always be equal, no matter what
        if got is want:
            return True

        got, want = deref(got), deref(want)
        if got is want:
            return True

        # Attributes only one of the objects has
        if got is MISSING:
            return self._differ(CHANGE_CREATE, display, got, want)
        if want is MISSING:
            return self._differ(CHANGE_DELETE, display, got, want)
        if got is None or want is None:
            return self._differ(CHANGE_UPDATE, display, got, want)

        # Enforce that bools only equal bools
        if isinstance(got, (bool, np.bool_)) != isinstance(want, (bool, np.bool_)):
            return self._differ(CHANGE_UPDATE, display, got, want)

        kind = kind_of(got)
        if kind is not kind_of(want):
            return self._differ(CHANGE_UPDATE, display, got, want)
        if kind not in (Kind.LEAF, Kind.BYTES) and type(got) is not type(want):
            return self._differ(CHANGE_UPDATE, display, got, want)

        if kind not in _CONTAINER_KINDS:
            return self._walkers[kind](got, want, path, display)

        key = (id(got), id(want))
        if key in self._visiting:
            return True
        self._visiting.add(key)
        try:
            return self._walkers[kind](got, want, path, display)
        finally:
            self._visiting.discard(key)

    def _walk_leaf(self, got, want, path, display):
        try:
            checked = bool(got == want)
        except Exception:
            raise EqualityCheckingError("Could not determine equality between objects\na: %s\nb: %s" %
                (limit_str(got), limit_str(want)))
        return checked or self._differ(CHANGE_UPDATE, display, got, want)

    def _walk_bytes(self, got, want, path, display):
        return bytes(got) == bytes(want) or self._differ(CHANGE_UPDATE, display, got, want)

    def _walk_array(self, got, want, path, display):
        # Object arrays may hold structs, so compare them as lists to keep applying the rules
        if got.dtype == object or want.dtype == object:
            if got.shape != want.shape:
                return self._differ(CHANGE_UPDATE, display, got, want)
            return self.walk(got.tolist(), want.tolist(), path, display)

        # Otherwise, we can use the builtin numpy assert equal thing
        try:
            np.testing.assert_equal(got, want)
            return True
        except AssertionError:
            return self._differ(CHANGE_UPDATE, display, got, want)

    def _walk_mapping(self, got, want, path, display):
        def checks():
            for key in want:
                sub = '%s[%r]' % (display, key)
                if key not in got:
                    yield self._differ(CHANGE_CREATE, sub, MISSING, want[key])
                else:
                    yield self.walk(got[key], want[key], path, sub)
            for key in got:
                if key not in want:
                    yield self._differ(CHANGE_DELETE, '%s[%r]' % (display, key), got[key], MISSING)

        if not self.collect and len(got) != len(want):
            return False
        return self._all(checks())

    def _walk_struct(self, got, want, path, display):
        fields = struct_fields(want)
        names = set(f.name for f in fields)
        fields += [f for f in struct_fields(got) if f.name not in names]
        return self._all(self._walk_field(got, want, f, path, display) for f in fields)

    def _walk_field(self, got, want, f, path, display):
        if not f.compare:
            return True

        step = FieldStep(path + (f.name,), f.name, get_field(got, f.name), get_field(want, f.name), f.embedded)
        if is_ignored(self.rules, step):
            return True

        # Embedded fields promote their own fields, so they don't add to the path
        if f.embedded:
            return self.walk(step.got, step.want, path, display)
        return self.walk(step.got, step.want, step.path, '%s.%s' % (display, f.name) if display else f.name)

    def _walk_sequence(self, got, want, path, display):
        if not self.collect and len(got) != len(want):
            return False

        common = min(len(got), len(want))
        return self._all(chain(
            (self.walk(got[i], want[i], path, '%s[%d]' % (display, i)) for i in range(common)),
            (self._differ(CHANGE_CREATE, '%s[%d]' % (display, i), MISSING, want[i]) for i in range(common, len(want))),
            (self._differ(CHANGE_DELETE, '%s[%d]' % (display, i), got[i], MISSING) for i in range(common, len(got))),
        ))

    def _walk_set(self, got, want, path, display):
        if got == want:
            return True
        if self.collect:
            for elem in want - got:
                self._differ(CHANGE_CREATE, display, MISSING, elem)
            for elem in got - want:
                self._differ(CHANGE_DELETE, display, elem, MISSING)
        return False

    def _all(self, checks: 'Iterable[bool]') -> 'bool':
        """Consumes the lazily evaluated checks, stopping at the first failure unless collecting changes"""
        result = True
        for checked in checks:
            if not checked:
                result = False
                if not self.collect:
                    break
        return result

    def _differ(self, kind: str, display: str, got: 'Any', want: 'Any') -> 'bool':
        if self.collect:
            self.changes.append(Change(kind, display, got, want))
        return False


class EqualityError(Exception):
    """Error raised whenever an :func:`~gstats_assert.testutils.equality.equal` check returns false and `raise_err=True`"""

    def __init__(self, a, b, message=None):
        message = "Values are not equal" if message is None else message
        super().__init__("Object a (%s) is not equal to object b (%s)\na: %s\nb: %s\nMessage: %s" % \
            (repr(type(a).__name__), repr(type(b).__name__), limit_str(a), limit_str(b), message))


class EqualityCheckingError(Exception):
    """Error raised whenever there is an unexpected problem attempting to check equality between two objects"""
