"""
Assertions reporting their failures through a :class:`Reporter`.

Every assertion takes the reporter first. On failure it calls `tb.fatalf()` with a descriptive message and returns;
whether the test then stops is up to the reporter (the pytest `tb` fixture stops it with ``pytest.fail``).

Misusing the API (eg: handing an exception to `equal()`, which has dedicated error counterparts) raises
:class:`~gstats_assert.testutils.errors.UsageError` instead, as that is a mistake in the test, not in the code under
test.

Example:

    from gstats_assert.testutils import asserts, ignore_unexported, skip_empty_fields

    def test_create_user(tb):
        user = create_user("test@example.com")
        asserts.equal(tb, user, User(email="test@example.com"), ignore_unexported(), skip_empty_fields())
"""

from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable
from . import errorchain
from .equality import compare
from .errors import UsageError
from .zero import is_none, is_zero


if TYPE_CHECKING:
    from typing import Optional, Type, TypeVar
    from .options import Option

    T = TypeVar('T')


@runtime_checkable
class Reporter(Protocol):
    def helper(self) -> None:
        """Marks the calling function as a helper, so failures are attributed to its caller"""

    def fatalf(self, format: str, *args: Any) -> None:
        """Marks the current test as failed with the %-formatted message"""


def equal(tb: 'Reporter', got: 'Any', want: 'Any', *options: 'Option') -> None:
    """Checks that two values are equal.

    Following rules are used to determine if two values are equal:

        1. if both values are None, they are equal
        2. if one value is None and the other is not, they are not equal
        3. references are followed, and bytes-like values are compared by content
        4. containers and structs (dataclasses, namedtuples, plain objects) are compared element by element and field
           by field, skipping fields the options ignore
        5. everything else uses its own __eq__
    """
    __tracebackhide__ = True
    _reject_exception(got, "use asserts.error() for errors")
    tb.helper()

    result = compare(got, want, *options)
    if not result:
        tb.fatalf("expected equal\n%s", result.diff)


def not_equal(tb: 'Reporter', got: 'Any', want: 'Any', *options: 'Option') -> None:
    """Checks that two values are not equal. See :func:`equal` for the rules"""
    __tracebackhide__ = True
    _reject_exception(got, "use asserts.error() for errors")
    tb.helper()

    if compare(got, want, *options):
        tb.fatalf("expected not equal, but got equal")


def error(tb: 'Reporter', err: 'Optional[BaseException]') -> None:
    __tracebackhide__ = True
    tb.helper()
    if err is None:
        tb.fatalf("expected error, got None")


def no_error(tb: 'Reporter', err: 'Optional[BaseException]') -> None:
    __tracebackhide__ = True
    tb.helper()
    if err is not None:
        tb.fatalf("unexpected error: %s", err)


def error_contains(tb: 'Reporter', err: 'Optional[BaseException]', target: 'Any') -> 'Optional[BaseException]':
    """Checks that `err` is not None and matches `target` somewhere in its chain of causes.

    Target can be:

        1. str: checked as a substring of the error messages, then as a regular expression. A string that does not
           compile as a regular expression is only used as a substring.
        2. an exception: some exception in the chain must be that exception
        3. an exception class (or tuple of classes): some exception in the chain must be an instance of it

    Returns:
        Optional[BaseException]: the exception of the chain that matched, None for str targets or on failure
    """
    __tracebackhide__ = True
    tb.helper()
    if err is None:
        tb.fatalf("error is None")
        return None

    # Catch anything raised while matching (eg: by a custom __eq__), that is a failure too
    try:
        result = errorchain.match(err, target)
    except Exception as e:
        tb.fatalf("error matching raised %s: %s", type(e).__name__, e)
        return None

    if not result.ok:
        tb.fatalf("%s", result.message)
        return None
    return result.matched


def error_want(tb: 'Reporter', want: bool, err: 'Optional[BaseException]') -> None:
    """Checks that an error happened exactly when one was expected.

    A common usage in table-driven tests is:

        @pytest.mark.parametrize('value, want_err', [('1', False), ('x', True)])
        def test_parse(tb, value, want_err):
            err = parse(value)
            asserts.error_want(tb, want_err, err)
    """
    __tracebackhide__ = True
    tb.helper()
    if want and err is None:
        tb.fatalf("expected error: got None")
    elif not want and err is not None:
        tb.fatalf("unexpected error: %s", err)


def zero(tb: 'Reporter', got: 'Any') -> None:
    __tracebackhide__ = True
    _reject_exception(got, "use asserts.no_error() for errors")
    tb.helper()
    if not is_zero(got):
        tb.fatalf("expected zero, got %r", got)


def not_zero(tb: 'Reporter', got: 'Any') -> None:
    __tracebackhide__ = True
    _reject_exception(got, "use asserts.error() for errors")
    tb.helper()
    if is_zero(got):
        tb.fatalf("expected not zero, got %r", got)


def none(tb: 'Reporter', got: 'Any') -> None:
    __tracebackhide__ = True
    _reject_exception(got, "use asserts.no_error() for errors")
    tb.helper()
    if not is_none(got):
        tb.fatalf("expected None, got %r", got)


def not_none(tb: 'Reporter', got: 'Any') -> None:
    __tracebackhide__ = True
    _reject_exception(got, "use asserts.error() for errors")
    tb.helper()
    if is_none(got):
        tb.fatalf("expected not None, got None")


def length(tb: 'Reporter', got: 'Any', want: int) -> None:
    """Checks that len(got) == want"""
    __tracebackhide__ = True
    tb.helper()
    if len(got) != want:
        tb.fatalf("expected length %d, got %d", want, len(got))


def true(tb: 'Reporter', got: bool) -> None:
    __tracebackhide__ = True
    tb.helper()
    if not got:
        tb.fatalf("expected true, got false")


def false(tb: 'Reporter', got: bool) -> None:
    __tracebackhide__ = True
    tb.helper()
    if got:
        tb.fatalf("expected false, got true")


def raises(tb: 'Reporter', fn: 'Callable[[], Any]') -> None:
    """Checks that calling `fn` raises an exception"""
    __tracebackhide__ = True
    tb.helper()
    try:
        fn()
    except Exception:
        return
    tb.fatalf("expected exception, got nothing")


def not_raises(tb: 'Reporter', fn: 'Callable[[], Any]') -> None:
    __tracebackhide__ = True
    tb.helper()
    try:
        fn()
    except Exception as e:
        tb.fatalf("unexpected exception: %r", e)


def deferred(tb: 'Reporter', fn: 'Callable[[], Optional[BaseException]]') -> 'Callable[[], None]':
    """Returns a function calling `fn` and failing if it raises or returns an exception. Meant for cleanups:

        conn = connect()
        request.addfinalizer(asserts.deferred(tb, conn.close))
    """
    __tracebackhide__ = True
    tb.helper()

    def check() -> None:
        __tracebackhide__ = True
        try:
            err = fn()
        except Exception as e:
            err = e
        if isinstance(err, BaseException):
            tb.fatalf("unexpected deferred error: %s", err)
    return check


def type_assert(tb: 'Reporter', got: 'Any', cls: 'Type[T]') -> 'T':
    """Checks that `got` is an instance of `cls`, and returns it"""
    __tracebackhide__ = True
    tb.helper()
    if not isinstance(got, cls):
        tb.fatalf("assertion %s is %s failed", type(got).__name__, getattr(cls, '__name__', repr(cls)))
    return got


def _reject_exception(got: 'Any', message: str) -> None:
    if isinstance(got, BaseException):
        raise UsageError(message)
