"""
pytest plugin providing the `tb` fixture, a reporter for the assertions and suites of this package.

Registered through the `pytest11` entry point, so installing the package is enough:

    def test_sum(tb):
        asserts.equal(tb, sum([1, 2]), 3)
"""

import pytest
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Callable


class PytestReporter:
    """Reports failures with ``pytest.fail`` and runs cleanups as finalizers of the requesting test"""

    def __init__(self, request: 'pytest.FixtureRequest'):
        self._request = request

    def helper(self) -> None:
        # pytest hides frames through `__tracebackhide__`, which the assertions set themselves
        pass

    def fatalf(self, format: str, *args: 'Any') -> None:
        __tracebackhide__ = True
        pytest.fail(format % args if args else format)

    def cleanup(self, fn: 'Callable[[], None]') -> None:
        self._request.addfinalizer(fn)


@pytest.fixture
def tb(request: 'pytest.FixtureRequest') -> 'PytestReporter':
    """Reporter for the assertions of :mod:`gstats_assert.testutils.asserts`"""
    return PytestReporter(request)
