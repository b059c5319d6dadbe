"""
Rendering of human-readable differences between two unequal values.

Three renderings are tried in order:

    1. Leaf values (anything the comparator does not walk into, like datetime or Decimal) and structs with a
       hand-written __repr__ are shown as a got/want pair of their (truncated) reprs
    2. The changes found by the comparator, one line each, with the path to the differing value
    3. A line diff of the pretty-printed values, or their (truncated) reprs if even those are identical
"""

import difflib
import pprint
from dataclasses import dataclass
from .config import DiffOptions, get_diff_options
from .structs import Kind, deref, has_own_repr, kind_of
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, List, Optional


CHANGE_UPDATE = 'update'
CHANGE_CREATE = 'create'
CHANGE_DELETE = 'delete'

# Kinds that are rendered with their own repr instead of being walked
_PAIR_KINDS = (Kind.NONE, Kind.BYTES, Kind.LEAF)


@dataclass(frozen=True)
class Change:
    """A single difference. `got` is the actual value and `want` the expected one; either may be MISSING for
    'create' (only in want) and 'delete' (only in got) changes"""
    kind: str
    path: str
    got: 'Any'
    want: 'Any'


def render_diff(got: 'Any', want: 'Any', changes: 'List[Change]', options: 'Optional[DiffOptions]' = None) -> str:
    """Renders the difference between `got` and `want`, given the changes the comparator found between them"""
    options = get_diff_options() if options is None else options

    got_value, want_value = deref(got), deref(want)
    if kind_of(got_value) is Kind.STRUCT and has_own_repr(type(got_value)):
        return render_pair(got, want, options)
    if kind_of(got_value) in _PAIR_KINDS and kind_of(want_value) in _PAIR_KINDS:
        return render_pair(got, want, options)
    if changes:
        return render_changes(got, changes, options)
    return render_text(got, want, options)


def render_pair(got: 'Any', want: 'Any', options: 'Optional[DiffOptions]' = None) -> str:
    options = get_diff_options() if options is None else options
    return " got: %s\nwant: %s" % (limit_str(got, options.max_repr_len), limit_str(want, options.max_repr_len))


def render_changes(root: 'Any', changes: 'List[Change]', options: 'DiffOptions') -> str:
    lines = []
    for change in changes[:options.max_changes]:
        lines.append("[%s] %s path %s: %s -> %s" % (change.kind, type(root).__name__, change.path or '<root>',
            limit_str(change.got, options.max_repr_len), limit_str(change.want, options.max_repr_len)))

    if len(changes) > options.max_changes:
        lines.append("... and %d more changes" % (len(changes) - options.max_changes))
    return '\n'.join(lines)


def render_text(got: 'Any', want: 'Any', options: 'DiffOptions') -> str:
    """Line diff of the pretty-printed values. Lines starting with '-' are expected, '+' are actual"""
    got_text = pprint.pformat(got, width=options.width, sort_dicts=options.sort_dicts)
    want_text = pprint.pformat(want, width=options.width, sort_dicts=options.sort_dicts)

    if got_text != want_text:
        return '\n'.join(difflib.ndiff(want_text.splitlines(), got_text.splitlines()))

    return " got: %s\nwant: %s" % (limit_str(got, options.max_repr_len), limit_str(want, options.max_repr_len))


def limit_str(a: 'Any', limit: 'Optional[int]' = None) -> str:
    limit = get_diff_options().max_repr_len if limit is None else limit
    a_str = repr(a)
    return a_str if len(a_str) <= limit else (a_str[:limit] + '...')
