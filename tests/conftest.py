"""
Fixtures shared by the tests.
"""

import pytest

# The plugin is registered on install, this keeps the fixture available when running from a checkout
from gstats_assert.testutils.pytest_plugin import tb  # noqa: F401


class RecordingTB:
    """A reporter that records failures instead of stopping the test, so the assertions themselves can be tested"""

    def __init__(self):
        self.helper_called = False
        self.failed = False
        self.message = ''
        self.cleanups = []

    def helper(self):
        self.helper_called = True

    def fatalf(self, format, *args):
        self.failed = True
        self.message = format % args if args else format

    def cleanup(self, fn):
        self.cleanups.append(fn)

    def run_cleanups(self):
        while self.cleanups:
            self.cleanups.pop()()

    def passed(self):
        assert self.helper_called, "helper() was not called"
        assert not self.failed, "expected pass, got failure: %s" % self.message

    def failed_with(self, message):
        assert self.helper_called, "helper() was not called"
        assert self.failed, "expected failure, got pass"
        assert message in self.message, "expected message containing %r, got %r" % (message, self.message)


@pytest.fixture
def make_tb():
    """Returns the RecordingTB class, call it for a fresh reporter"""
    return RecordingTB
