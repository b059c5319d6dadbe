"""
Errors that signal a mistake in the test code itself, rather than in the code under test.
"""


class UsageError(Exception):
    """Raised whenever the assertion API is misused (eg: passing an exception to `equal()`, or naming a field that
    does not exist in `skip_field_names()`). These are never caught by this package."""
