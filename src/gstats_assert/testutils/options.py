"""
Options for relaxing equality, and their resolution into filter rules.

Options are passed to :func:`~gstats_assert.testutils.equality.compare` (and everything built on it) as extra
positional args:

    - ignore_unexported(): private fields (names starting with '_') are not compared
    - skip_empty_fields(): fields whose expected value is empty are not compared
    - skip_zero_fields(): fields whose expected value is zero are not compared
    - skip_field_names(*names): fields at the given dotted paths are not compared

Each option is a callable that updates a policy accumulator. The accumulated :class:`Policy` is then turned into an
ordered tuple of :class:`FilterRule`, and a field is ignored whenever ANY rule matches it. Rules are looked up by kind in
a registry, so the comparator never needs to know which rules exist.
"""

import logging
import typing
from dataclasses import dataclass, field
from .errors import UsageError
from .structs import MISSING, deref, is_struct, is_struct_type, struct_fields, get_field
from .zero import is_empty, is_zero
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

    Option = Callable[[Dict[str, Any]], None]


logger = logging.getLogger(__name__)

RULE_UNEXPORTED = 'unexported'
RULE_EMPTY = 'empty'
RULE_ZERO = 'zero'
RULE_FIELD_NAMES = 'field_names'

# Maps rule kinds to their predicates: (rule, step) -> bool
_RULE_PREDICATES = {}


@dataclass(frozen=True)
class Policy:
    """The comparison relaxations used for a single comparison"""
    ignore_unexported: bool = False
    skip_empty_fields: bool = False
    skip_zero_fields: bool = False
    skip_field_names: 'Tuple[str, ...]' = ()


@dataclass(frozen=True)
class FieldStep:
    """A struct field being visited by the comparator.

    `path` holds the field names from the comparison root up to and including this field. Fields promoted from an
    embedded struct do not include the embedded field's name.
    """
    path: 'Tuple[str, ...]'
    name: str
    got: 'Any'
    want: 'Any'
    embedded: bool = False

    @property
    def dotted(self) -> str:
        return '.'.join(self.path)


@dataclass(frozen=True)
class FilterRule:
    """An 'ignore this field' rule. `paths` is only used by the field names rule"""
    kind: str
    paths: 'FrozenSet[str]' = field(default_factory=frozenset)

    def matches(self, step: 'FieldStep') -> bool:
        return _RULE_PREDICATES[self.kind](self, step)


def _rule_predicate(kind: str) -> 'Callable':
    def decorator(func):
        _RULE_PREDICATES[kind] = func
        return func
    return decorator


@_rule_predicate(RULE_UNEXPORTED)
def _match_unexported(rule: 'FilterRule', step: 'FieldStep') -> bool:
    return step.name.startswith('_')


@_rule_predicate(RULE_EMPTY)
def _match_empty(rule: 'FilterRule', step: 'FieldStep') -> bool:
    return is_empty(step.want)


@_rule_predicate(RULE_ZERO)
def _match_zero(rule: 'FilterRule', step: 'FieldStep') -> bool:
    return is_zero(step.want)


@_rule_predicate(RULE_FIELD_NAMES)
def _match_field_names(rule: 'FilterRule', step: 'FieldStep') -> bool:
    return step.dotted in rule.paths


def is_ignored(rules: 'Tuple[FilterRule, ...]', step: 'FieldStep') -> bool:
    """Returns True if any of the rules ignores the given field"""
    return any(rule.matches(step) for rule in rules)


##################
# Option helpers #
##################

def ignore_unexported() -> 'Option':
    """Private fields (names starting with an underscore) are not compared"""
    def option(acc: 'Dict[str, Any]') -> None:
        acc['ignore_unexported'] = True
    return option


def skip_empty_fields() -> 'Option':
    """Fields whose expected value is empty are not compared, whatever the actual value is"""
    def option(acc: 'Dict[str, Any]') -> None:
        acc['skip_empty_fields'] = True
    return option


def skip_zero_fields() -> 'Option':
    """Fields whose expected value is zero are not compared, whatever the actual value is"""
    def option(acc: 'Dict[str, Any]') -> None:
        acc['skip_zero_fields'] = True
    return option


def skip_field_names(*names: str) -> 'Option':
    """Fields at the given dotted paths (eg: 'Outer.Inner.Leaf') are not compared"""
    for name in names:
        if not isinstance(name, str):
            raise UsageError("field names must be str, not %s" % repr(type(name).__name__))

    def option(acc: 'Dict[str, Any]') -> None:
        acc['skip_field_names'].extend(names)
    return option


def resolve_policy(*options: 'Option') -> 'Policy':
    """Folds the given options into a :class:`Policy`"""
    acc = {'ignore_unexported': False, 'skip_empty_fields': False, 'skip_zero_fields': False, 'skip_field_names': []}
    for option in options:
        if not callable(option):
            raise UsageError("comparison options must be created by the option helpers, got %s" % repr(option))
        option(acc)

    acc['skip_field_names'] = tuple(acc['skip_field_names'])
    return Policy(**acc)


def resolve_filters(*options: 'Option', sample: 'Any' = None) -> 'Tuple[FilterRule, ...]':
    """Resolves the given options into filter rules.

    Args:
        options (Option): the options to resolve
        sample (Any): a value (or struct class) of the type being compared. Only needed with skip_field_names(), to
            check that the names exist. Defaults to None.

    Returns:
        Tuple[FilterRule, ...]: the rules, always in the same order for the same options
    """
    return policy_filters(resolve_policy(*options), sample=sample)


def policy_filters(policy: 'Policy', sample: 'Any' = None) -> 'Tuple[FilterRule, ...]':
    """Translates a resolved :class:`Policy` into filter rules"""
    rules = []
    if policy.ignore_unexported:
        rules.append(FilterRule(RULE_UNEXPORTED))
    if policy.skip_empty_fields:
        rules.append(FilterRule(RULE_EMPTY))
    if policy.skip_zero_fields:
        rules.append(FilterRule(RULE_ZERO))
    if policy.skip_field_names:
        paths = frozenset('.'.join(resolve_field_path(sample, name)) for name in policy.skip_field_names)
        rules.append(FilterRule(RULE_FIELD_NAMES, paths))

    if rules:
        logger.debug("Resolved filter rules: %s", ', '.join(r.kind for r in rules))
    return tuple(rules)


#########################
# Field path resolution #
#########################

def resolve_field_path(sample: 'Any', name: str) -> 'Tuple[str, ...]':
    """Resolves a dotted field name against `sample`, returning its field path.

    Raises:
        UsageError: if the name is malformed, does not exist, or goes through something that is not a struct
    """
    parts = name.split('.')
    if any(part == '' for part in parts):
        raise UsageError("malformed field name: %s" % repr(name))

    # Both the field value and its annotation are kept, as a None value or an empty list says nothing about the fields
    targets = (sample,)
    path = []
    for i, part in enumerate(parts):
        struct = next((s for s in map(_struct_target, targets) if s is not None), None)
        if struct is None:
            where = '.'.join(parts[:i]) or 'the compared value'
            raise UsageError("cannot resolve field %s: %s (%s) is not a struct" % (repr(name), where, _describe(targets[0])))

        found = _find_field(struct, part)
        if found is None:
            raise UsageError("cannot resolve field %s: %s has no field %s" % (repr(name), _describe(struct), repr(part)))

        value, annotation, is_embedded = found
        targets = (value, annotation)

        # Fields of an embedded struct are promoted, so the embedded name only counts when it is the last part
        if not is_embedded or i == len(parts) - 1:
            path.append(part)

    return tuple(path)


def _find_field(struct: 'Any', name: str) -> 'Optional[Tuple[Any, Any, bool]]':
    """Finds `name` on the struct (instance or class), looking through embedded fields for promoted ones.

    Returns a tuple of (value, annotation, embedded), value being MISSING for classes. Direct fields shadow promoted
    ones.
    """
    fields = struct_fields(struct)
    for f in fields:
        if f.name == name:
            return _field_value(struct, f.name), f.annotation, f.embedded

    for f in fields:
        if not f.embedded:
            continue
        value = _field_value(struct, f.name)
        inner = _struct_target(value)
        if inner is None:
            inner = _struct_target(f.annotation)
        if inner is not None:
            found = _find_field(inner, name)
            if found is not None:
                return found
    return None


def _field_value(struct: 'Any', name: str) -> 'Any':
    return MISSING if isinstance(struct, type) else get_field(struct, name)


def _struct_target(target: 'Any') -> 'Any':
    """Returns the struct instance/class to look up fields on, descending into containers and annotations, or None"""
    target = deref(target)
    if target is None or target is MISSING:
        return None

    if isinstance(target, type):
        return target if is_struct_type(target) else None
    if is_struct(target):
        return target

    # Container instances use their first element
    if isinstance(target, dict):
        return _struct_target(next(iter(target.values()))) if target else None
    if isinstance(target, (list, tuple, set, frozenset)):
        return _struct_target(next(iter(target))) if target else None

    # Annotations like Optional[X], List[X], Dict[str, X]
    for arg in reversed(typing.get_args(target)):
        struct = _struct_target(arg)
        if struct is not None:
            return struct
    return None


def _describe(target: 'Any') -> str:
    if isinstance(target, type):
        return repr(target.__name__)
    return 'value of type %s' % repr(type(target).__name__)
