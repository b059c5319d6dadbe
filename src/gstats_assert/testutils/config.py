"""Process-wide rendering configuration for diffs."""
from __future__ import annotations

from dataclasses import dataclass

from .errors import UsageError


@dataclass(frozen=True, slots=True)
class DiffOptions:
    max_repr_len: int = 1024  # characters of a single rendered value before truncating
    width: int = 80
    max_changes: int = 50
    sort_dicts: bool = False


_DIFF_OPTIONS = DiffOptions()
_DIFF_OPTIONS_SET = False


def get_diff_options() -> DiffOptions:
    return _DIFF_OPTIONS


def set_diff_options(options: DiffOptions) -> None:
    """Sets the diff rendering options. May only be called once per process, before any comparison runs."""
    global _DIFF_OPTIONS, _DIFF_OPTIONS_SET
    if _DIFF_OPTIONS_SET:
        raise UsageError("diff options were already set to %r" % (_DIFF_OPTIONS,))
    if not isinstance(options, DiffOptions):
        raise UsageError("`options` must be DiffOptions, not %s" % repr(type(options).__name__))
    _DIFF_OPTIONS = options
    _DIFF_OPTIONS_SET = True
