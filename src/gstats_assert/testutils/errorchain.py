"""
Matching of exceptions against targets, following their chain of causes.

The chain of an exception is the exception itself, then its __cause__, its __context__ (unless suppressed with
`raise ... from ...`) and the members of exception groups, depth first, each exception visited once.

Targets can be:
    - a str: matched as a substring of any message in the chain first, then as a regular expression. A string that is
      not a valid regular expression is only matched as a substring.
    - an exception instance: matched if any exception in the chain `is` (or `==`) the target
    - an exception class, or tuple of classes: matched by the first exception in the chain that is an instance of it
"""

import re
from typing import TYPE_CHECKING, NamedTuple


if TYPE_CHECKING:
    from typing import Any, Iterator, Optional


class ChainMatch(NamedTuple):
    """Result of :func:`match`. `matched` is the exception that matched a class target"""
    ok: bool
    message: str = ''
    matched: 'Optional[BaseException]' = None


def iter_chain(err: 'BaseException') -> 'Iterator[BaseException]':
    """Yields every exception in the chain of `err`, starting with `err` itself"""
    seen = set()
    stack = [err]
    while stack:
        e = stack.pop()
        if e is None or id(e) in seen:
            continue
        seen.add(id(e))
        yield e

        # Pushed in reverse, so the group members come out first, then the cause, then the context
        if not e.__suppress_context__:
            stack.append(e.__context__)
        stack.append(e.__cause__)
        if isinstance(e, BaseExceptionGroup):
            stack.extend(reversed(e.exceptions))


def match(err: 'BaseException', target: 'Any') -> 'ChainMatch':
    """Matches `err` against `target`. Never raises for a bad target, returns a failed :class:`ChainMatch` instead"""
    if isinstance(target, str):
        return _match_str(err, target)
    elif isinstance(target, BaseException):
        return _match_instance(err, target)
    elif _is_exception_class(target):
        return _match_class(err, target)
    return ChainMatch(False, "unsupported target of type %s, expected str, exception or exception class" %
        repr(type(target).__name__))


def _match_str(err: 'BaseException', target: str) -> 'ChainMatch':
    messages = [str(e) for e in iter_chain(err)]

    # First check the string itself
    if any(target in m for m in messages):
        return ChainMatch(True)

    try:
        pattern = re.compile(target)
    except re.error:
        return ChainMatch(False, "unexpected error: %r does not contain %r" % (str(err), target))

    if any(pattern.search(m) for m in messages):
        return ChainMatch(True)
    return ChainMatch(False, "unexpected error: %r does not match %r" % (str(err), target))


def _match_instance(err: 'BaseException', target: 'BaseException') -> 'ChainMatch':
    for e in iter_chain(err):
        if e is target or e == target:
            return ChainMatch(True, matched=e)
    return ChainMatch(False, "unexpected error: %r is not %r" % (err, target))


def _match_class(err: 'BaseException', target: 'Any') -> 'ChainMatch':
    for e in iter_chain(err):
        if isinstance(e, target):
            return ChainMatch(True, matched=e)

    names = target.__name__ if isinstance(target, type) else ', '.join(t.__name__ for t in target)
    return ChainMatch(False, "unexpected error: %r is not %s" % (err, names))


def _is_exception_class(target: 'Any') -> 'bool':
    if isinstance(target, tuple):
        return len(target) > 0 and all(_is_exception_class(t) for t in target)
    return isinstance(target, type) and issubclass(target, BaseException)
