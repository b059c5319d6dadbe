"""
Lightweight per-test setup and teardown.

:class:`Suite` has no-op `setup()` and `teardown()` methods, so a test suite only needs to override the ones it uses:

    class DatabaseSuite(Suite):
        def setup(self, tb):
            self.db = connect_test_db()

        def teardown(self, tb):
            self.db.close()

    def test_insert(tb):
        s = DatabaseSuite.start(tb)
        ...

Teardown is registered with the reporter's `cleanup()`, so it runs even when the test fails.
"""

from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable
from typing_extensions import Self


if TYPE_CHECKING:
    from typing import Type, TypeVar

    S = TypeVar('S', bound='Suiter')


@runtime_checkable
class CleanupReporter(Protocol):
    def helper(self) -> None:
        ...

    def fatalf(self, format: str, *args: Any) -> None:
        ...

    def cleanup(self, fn: Callable[[], None]) -> None:
        """Registers `fn` to be called once the current test is done"""


@runtime_checkable
class Suiter(Protocol):
    def setup(self, tb: 'CleanupReporter') -> None:
        """Initializes the suite before a test runs"""

    def teardown(self, tb: 'CleanupReporter') -> None:
        """Cleans up the suite after the test completes"""


class Suite:
    """A no-op test suite, to be subclassed"""

    def setup(self, tb: 'CleanupReporter') -> None:
        pass

    def teardown(self, tb: 'CleanupReporter') -> None:
        pass

    @classmethod
    def start(cls, tb: 'CleanupReporter') -> Self:
        """Shorthand for `setup(tb, cls)`"""
        __tracebackhide__ = True
        return setup(tb, cls)


def setup(tb: 'CleanupReporter', suite_cls: 'Type[S]') -> 'S':
    """Creates a suite of type `suite_cls`, calls its `setup()`, and registers its `teardown()` as a cleanup"""
    __tracebackhide__ = True
    tb.helper()

    suite = suite_cls()
    suite.setup(tb)
    tb.cleanup(lambda: suite.teardown(tb))
    return suite
