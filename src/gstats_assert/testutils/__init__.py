from . import asserts
from .config import DiffOptions, get_diff_options, set_diff_options
from .equality import ComparisonResult, EqualityCheckingError, EqualityError, compare, equal
from .errors import UsageError
from .options import ignore_unexported, skip_empty_fields, skip_field_names, skip_zero_fields
from .structs import embedded
from .suite import Suite, setup

__all__ = [
    'asserts', 'DiffOptions', 'get_diff_options', 'set_diff_options', 'ComparisonResult', 'EqualityCheckingError',
    'EqualityError', 'compare', 'equal', 'UsageError', 'ignore_unexported', 'skip_empty_fields', 'skip_field_names',
    'skip_zero_fields', 'embedded', 'Suite', 'setup',
]
__doc__ = """Test assertion utilities built on a configurable deep equality."""
