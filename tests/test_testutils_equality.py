"""
Tests for the gstats_assert.testutils.equality file.

With regards to testing the `equal` function, I am guided by the following paradigm: test up to the recursive call.

Instead of testing all combinations of objects and sub-objects, I test equality of objects up to and including the
first recursive call. For containers and structs, I only test until I am reasonably certain their sub-elements are
checked for equality with the same rules, and assume those will be tested correctly.
"""

import copy
import weakref
from collections import namedtuple
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4
import numpy as np
import pytest
from gstats_assert.testutils.equality import EqualityCheckingError, EqualityError, compare, equal
from gstats_assert.testutils.options import ignore_unexported, skip_empty_fields, skip_zero_fields


class _TempEnum(Enum):
    A = 0
    B = 0
    C = 'thing'
    D = 'another_thing'
    E = ['a', 'list', 'of', 'thing']


class _TempHashableEQ:
    def __init__(self, int_val, str_val, list_val=None):
        self.int_val = int_val
        self.str_val = str_val
        self.list_val = list_val

    def __hash__(self):
        return hash(self.int_val) + hash(self.str_val)

    def __eq__(self, other):
        return isinstance(other, _TempHashableEQ) and self.int_val == other.int_val and self.str_val == other.str_val \
            and equal(self.list_val, other.list_val)

    def __repr__(self):
        return "_TempHashableEQ(%d, %s)" % (self.int_val, repr(self.str_val))


class _Instant:
    """Equal whenever the same instant is represented, whatever the offset"""
    def __init__(self, seconds, offset=0):
        self.seconds = seconds
        self.offset = offset

    def __eq__(self, other):
        return isinstance(other, _Instant) and self.seconds - self.offset == other.seconds - other.offset


class _Plain:
    def __init__(self, a, b):
        self.a = a
        self.b = b


class _Slotted:
    __slots__ = ('x', 'y')

    def __init__(self, x, y):
        self.x = x
        self.y = y


class _BadEQ:
    def __eq__(self, other):
        raise RuntimeError("cannot compare")


@dataclass
class _Point:
    x: int = 0
    y: int = 0


@dataclass
class _Node:
    value: int
    next: 'Optional[_Node]' = None


@dataclass
class _User:
    id: Optional[UUID] = None
    email: str = ''
    created_at: Optional[datetime] = None
    balance: Decimal = Decimal(0)
    _active: bool = False


@dataclass
class _Cached:
    value: int = 0
    cache: dict = field(default_factory=dict, compare=False)


@dataclass
class _Money:
    """Only the amount matters when comparing, the currency is for display"""
    amount: int
    currency: str = 'EUR'

    def __eq__(self, other):
        return isinstance(other, _Money) and self.amount == other.amount


_Pair = namedtuple('_Pair', ['left', 'right'])


def _object_array(*items):
    arr = np.empty(len(items), dtype=object)
    for i, item in enumerate(items):
        arr[i] = item
    return arr


_ARR_1 = _object_array(['a', 'b', 'c'], range(10), 10, 'apples')
_MONEY = _Money(5, 'USD')


def _check_equal(*args, expected_value=True, message=None):
    try:
        val = equal(*args, raise_err=True)
        if val is not False and val is not True:
            raise TypeError("Equality check returned a non-boolean result: %s" % val)
        if val != expected_value:
            raise ValueError("Equality check returned %s, expected %s" % (val, expected_value))
    except Exception as e:
        # Only re-raise if this is not an EqualityError, or if we were expecting a True value
        if not isinstance(e, EqualityError) or expected_value is not False:
            if message is not None:
                raise AssertionError(message)
            raise


def test_bool():
    """Tests booleans"""
    _check_equal(False, False)
    _check_equal(True, True)
    _check_equal(True, 1, expected_value=False)
    _check_equal(0, False, expected_value=False)
    _check_equal(np.bool_(True), True)


def test_numeric():
    """Tests singular numeric values"""
    _check_equal(1, 1)
    _check_equal(1, 1.0)
    _check_equal(1, complex(1, 0))
    _check_equal(1, np.array([1], dtype=np.int8)[0])
    _check_equal(1, np.array([1], dtype=np.uint32)[0])
    _check_equal(1, np.array([1], dtype=np.int64)[0])
    _check_equal(1, np.array([1], dtype=np.float32)[0])
    _check_equal(1, np.array([1], dtype=np.complex128)[0])
    _check_equal(np.array([-100], dtype=np.int32)[0], np.array([-100.0], dtype=np.float64)[0])

    _check_equal(1, 0, expected_value=False)
    _check_equal(np.array([1.0001], dtype=float)[0], np.array([1], dtype=int)[0], expected_value=False)
    _check_equal(np.array([1 + 2j], dtype=complex)[0], np.array([1], dtype=int)[0], expected_value=False)


def test_none():
    """Tests None on one or both sides"""
    _check_equal(None, None)
    _check_equal(None, 0, expected_value=False)
    _check_equal([], None, expected_value=False)
    _check_equal(_Point(), None, expected_value=False)


def test_is():
    """Tests objects that should only be comparible using `is`"""
    _check_equal(Ellipsis, Ellipsis)
    _check_equal(NotImplemented, NotImplemented)

    _check_equal(_TempEnum.A, _TempEnum.A)
    _check_equal(_TempEnum.E, _TempEnum.E)
    _check_equal(_TempEnum.A, _TempEnum.B)  # This is true because of how Enum's work


def test_bytes_like():
    """Tests bytes like objects, which are compared by content"""
    _check_equal(b'\x01\x02\x03', b'\x01\x02\x03')
    _check_equal(bytes([1, 2, 3]), bytearray([1, 2, 3]))
    _check_equal(memoryview(bytes('apples', 'ascii')), b'apples')
    _check_equal(b'hello', b'-', expected_value=False)
    _check_equal('apples', bytes('apples', 'utf-8'), expected_value=False)

    # Slices of one buffer against a separate buffer
    buf = bytearray(b'xx\x01\x02\x03')
    _check_equal(memoryview(buf)[2:], bytes([1, 2, 3]))


def test_references():
    """Tests that references are followed, and their identity never matters"""
    a, b = _Point(1, 2), _Point(1, 2)
    _check_equal(weakref.ref(a), weakref.ref(a))
    _check_equal(weakref.ref(a), weakref.ref(b))
    _check_equal([weakref.ref(a)], [weakref.ref(b)])
    _check_equal(weakref.ref(a), b)
    _check_equal(a, weakref.ref(b))
    _check_equal(weakref.ref(a), _Point(1, 3), expected_value=False)


def test_custom_eq():
    """Tests objects with their own equality"""
    _check_equal(_TempHashableEQ(2, ''), 2, expected_value=False)
    _check_equal(_TempHashableEQ(2, ''), _TempHashableEQ(2, ''))
    _check_equal(_TempHashableEQ(2, ''), _TempHashableEQ(2, 'a'), expected_value=False)
    _check_equal(_TempHashableEQ(16, 'aa', [1, 2, 3]), _TempHashableEQ(16, 'aa', [1, 2, np.array([3])[0]]))

    # Same instant, different representations
    _check_equal(_Instant(100, 0), _Instant(160, 60))
    _check_equal(_Instant(100, 0), _Instant(100, 60), expected_value=False)
    _check_equal(Decimal('1.0'), Decimal('1'))

    now = datetime.now(timezone.utc)
    _check_equal(now, now.astimezone(timezone(timedelta(hours=2))))
    _check_equal(now, now + timedelta(seconds=1), expected_value=False)

    # Dataclasses keep a hand-written __eq__, and it decides
    _check_equal(_Money(1, 'USD'), _Money(1, 'EUR'))
    _check_equal(_Money(1, 'USD'), _Money(2, 'USD'), expected_value=False)
    _check_equal([weakref.ref(_MONEY)], [_Money(5, 'GBP')])


def test_custom_eq_through_references():
    """Tests that a custom __eq__ decides, whichever side is given as a reference"""
    same, other = _Instant(100, 0), _Instant(160, 60)
    for got, want in [(weakref.ref(same), other), (same, weakref.ref(other)), (weakref.ref(same), weakref.ref(other))]:
        assert compare(got, want).equal == (same == other)

    different = _Instant(1, 0)
    assert compare(weakref.ref(same), different).equal == (same == different)


def test_custom_eq_errors():
    """Tests that a failing __eq__ is reported as an EqualityCheckingError"""
    with pytest.raises(EqualityCheckingError):
        equal(_BadEQ(), _BadEQ())


def test_sequences():
    """Tests lists and tuples"""
    vals = [
        [],
        [1, 2, 3],
        [1, 2, 3, (4, 3, 5), np.array([]), [1, 2, 3], _ARR_1, tuple(), [], _TempHashableEQ(87, '')],
    ]

    for t in (list, tuple):
        for v in vals:
            _check_equal(t(v), t(copy.deepcopy(v)))

    _check_equal([1, 2, 3], [1, 2], expected_value=False)
    _check_equal([1, 2, 3], [1, 2, 4], expected_value=False)
    _check_equal([1, 2, 3], (1, 2, 3), expected_value=False)


def test_numpy():
    """Tests numpy arrays"""
    _check_equal(np.array([1, 2, 3], dtype=np.int32), np.array([1, 2, 3], dtype=np.float64))
    _check_equal(np.array([1, 2, 3], dtype=np.complex128), np.array([1, 2, 3], dtype=np.float64))
    _check_equal(np.array([1.0, np.nan]), np.array([1.0, np.nan]))
    _check_equal(np.arange(16).reshape(2, 2, 4), np.arange(16).reshape(2, 2, 4))
    _check_equal(_ARR_1, copy.deepcopy(_ARR_1))
    _check_equal(_object_array(_Point(1, 2), 'a'), _object_array(_Point(1, 2), 'a'))

    _check_equal(np.arange(16).reshape(2, 2, 4), np.arange(16).reshape(4, 4), expected_value=False)
    _check_equal(np.array([1, 2, 3]), np.array([1, 2, 4]), expected_value=False)
    _check_equal(np.array([1, 2, 3]), [1, 2, 3], expected_value=False)
    _check_equal(_object_array(_Point(1, 2)), _object_array(_Point(1, 3)), expected_value=False)


def test_sets():
    "Whoopdiedoo, tests some sets"
    set_vals = [
        set(),
        set(range(10)),
        set([(1, 2, 3), (4, 5), 6, 7, 'apples']),
        set((_TempHashableEQ(10, 'aa'), _TempHashableEQ(1000, 'sddd'))),
    ]

    _check_equal(set(range(10)), set([0, 1, 2, 3, 4, 5, 6, 7, 8, 9]))

    for s in set_vals:
        for t in (set, frozenset):
            _check_equal(t(s), t(copy.deepcopy(s)))
        _check_equal(set(s), frozenset(s), expected_value=False)


def test_dictionaries():
    "Tests dictionaries"
    dict_vals = [
        {},
        {1: '1', '2': 2},
        {'x': [0, 3, 2], 'a': {(1, 2, 3): 'aaa', 'a': {}}},
        {'p': _Point(1, 2)},
    ]

    for d in dict_vals:
        _check_equal(d, copy.deepcopy(d))

    _check_equal({1: '1'}, {'1': '1'}, expected_value=False)
    _check_equal({'a': _Point(1, 2)}, {'a': _Point(1, 3)}, expected_value=False)
    _check_equal({'a': 1}, {'a': 1, 'b': 2}, expected_value=False)


def test_structs():
    """Tests dataclasses, namedtuples and plain objects, compared field by field"""
    _check_equal(_Point(1, 2), _Point(1, 2))
    _check_equal(_Point(1, 2), _Point(2, 1), expected_value=False)

    _check_equal(_Pair(1, [2]), _Pair(1, [2]))
    _check_equal(_Pair(1, [2]), _Pair(1, [3]), expected_value=False)
    _check_equal(_Pair(1, 2), (1, 2), expected_value=False)

    _check_equal(_Plain(1, [2, 3]), _Plain(1, [2, 3]))
    _check_equal(_Plain(1, [2, 3]), _Plain(1, [2, 4]), expected_value=False)

    extra = _Plain(1, 2)
    extra.c = 3
    _check_equal(extra, _Plain(1, 2), expected_value=False)
    _check_equal(_Plain(1, 2), extra, expected_value=False)

    _check_equal(_Slotted(1, 'a'), _Slotted(1, 'a'))
    _check_equal(_Slotted(1, 'a'), _Slotted(1, 'b'), expected_value=False)

    # Fields declared outside of equality are never compared
    _check_equal(_Cached(1, {'a': 1}), _Cached(1, {}))


def test_cycles():
    """Tests that self-referencing objects do not recurse forever"""
    a, b = _Node(1), _Node(1)
    a.next, b.next = a, b
    _check_equal(a, b)

    c = _Node(2)
    c.next = c
    _check_equal(a, c, expected_value=False)

    la, lb = [1], [1]
    la.append(la)
    lb.append(lb)
    _check_equal(la, lb)


def test_reflexivity():
    """Tests that every value is equal to itself, and to a deep copy of itself"""
    vals = [0, 'a', b'a', None, _Point(1, 2), [1, [2]], {'a': 1}, _ARR_1, np.arange(4), _TempHashableEQ(1, 'a'),
        _Instant(1, 2), datetime.now(timezone.utc), Decimal('1.5'), _Pair(1, 2), frozenset([1])]

    for v in vals:
        _check_equal(v, v)
        _check_equal(v, copy.deepcopy(v))


def test_options():
    """Tests the example of a user loaded from a database, where only some fields are known up front"""
    warsaw = timezone(timedelta(hours=2))
    created_at = datetime.now(timezone.utc)
    user = _User(id=uuid4(), email='test@example.com', created_at=created_at, balance=Decimal('1.0'), _active=True)
    want = _User(email='test@example.com', created_at=created_at.astimezone(warsaw), balance=Decimal('1'))

    _check_equal(user, want, ignore_unexported(), skip_empty_fields())
    _check_equal(user, want, expected_value=False)
    _check_equal(user, want, ignore_unexported(), expected_value=False)

    # Private fields that are set in the expected value are still compared without ignore_unexported()
    want._active = True
    _check_equal(user, want, skip_empty_fields())
    _check_equal(user, _User(email='test@example.com', _active=False), skip_zero_fields(), ignore_unexported())


def test_compare_result():
    """Tests the ComparisonResult returned by compare()"""
    result = compare([1, 2], [1, 2])
    assert result
    assert result.equal is True
    assert result.diff == ''

    result = compare([1, 2], [1, 3])
    assert not result
    assert '[1]' in result.diff


def test_raise_err():
    """Tests that raise_err puts the diff in the error message"""
    with pytest.raises(EqualityError, match='path x'):
        equal(_Point(1, 2), _Point(2, 2), raise_err=True)


def test_not_equal():
    """Tests that all of these objects are definitively not equal to eachother"""
    olists = [
        [None, False, Ellipsis, NotImplemented, 0, '', bytes('', 'utf-8'), 1.0, True, complex(1, 1.0),
        bytearray(b"apples"), 'a', 'bananas', 1.000001, _TempEnum.A, _TempEnum.E, _TempEnum.C, _TempEnum.D,
        memoryview(bytes('things', 'ascii')), list, tuple, dict, int, float, complex, type, _TempEnum, Enum,
        range(1, 2), range(-3, 2, 2), range(0), range(0, 1, 2), [], (1, 2, 3), _object_array(1.2, 3.7, [], tuple()),
        _ARR_1, np.arange(16).reshape(2, 2, 4), set(), set(range(100)), set([_TempHashableEQ(10, 'aa'), _TempHashableEQ(-3, '')]),
        frozenset([8, 7, 6]), {}, {1: '1', '2': 2}, {'1': '1', '2': 2}, {'a': [1, 2, 3], 'b': {}}, {'a': [1, 2, 4], 'b': {}},
        _TempHashableEQ(222, "apples"), _TempHashableEQ(221, "apples"), _TempHashableEQ(0, ''),
        _Point(), _Point(1, 0), _Pair(0, 0), _Plain(0, 0),
        ]
    ]

    for li, olist in enumerate(olists):
        for i in range(len(olist)):
            for j in range(len(olist)):
                if i == j:
                    continue

                _check_equal(olist[i], olist[j], expected_value=False,
                    message="Values were equal when they shouldn't be (list index=%d):\n(%d): %s\n(%d): %s"
                        % (li, i, repr(olist[i]), j, repr(olist[j])))
