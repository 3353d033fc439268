"""
Validation rules for formcheck.

A rule is a pure predicate over one field value. Rules bound to a field run
in declaration order and every failing rule yields one ValidationError; rules
flagged skip_empty (numeric, email_address) pass when the value is empty so
that an empty field only reports not_empty.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Tuple, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class RuleName(str, Enum):
    NOT_EMPTY = 'not_empty'
    NUMERIC = 'numeric'
    EMAIL_ADDRESS = 'email_address'
    MUST_ACCEPT = 'must_accept'


@dataclass(frozen=True)
class ValidationError:
    """One failed rule for one field."""
    field_name: str
    rule_name: str
    message: str


@dataclass(frozen=True)
class Rule:
    """
    A named predicate over a field value.

    Attributes:
        name: Rule identifier reported in ValidationError.rule_name
        message: Message shown next to the field when the rule fails
        test: Pure function returning True when the value passes
        skip_empty: Pass without calling test when the value is empty
    """
    name: str
    message: str
    test: Callable[[Any], bool]
    skip_empty: bool = False

    def check(self, value: Any) -> bool:
        if self.skip_empty and is_empty(value):
            return True
        return bool(self.test(value))


@dataclass(frozen=True)
class ValidationRule:
    """Binding of a rule to a field name."""
    field_name: str
    rule: Rule


# Same grammar as PHP's is_numeric: optional sign, decimal or exponent form
_NUMERIC_RE = re.compile(r'^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$')
_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
_ACCEPTED = {'1', 'on', 'yes', 'true'}


def is_empty(value: Any) -> bool:
    """Return True for None, False, an empty list or a blank string."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _each(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _not_empty(value: Any) -> bool:
    return not is_empty(value)


def _numeric(value: Any) -> bool:
    for item in _each(value):
        if isinstance(item, bool):
            return False
        if isinstance(item, (int, float)):
            continue
        if not isinstance(item, str) or not _NUMERIC_RE.match(item):
            return False
    return True


def _email_address(value: Any) -> bool:
    return all(isinstance(item, str) and _EMAIL_RE.match(item.strip())
               for item in _each(value))


def _must_accept(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _ACCEPTED
    return False


BUILTIN_RULES: Dict[str, Rule] = {
    RuleName.NOT_EMPTY.value: Rule(RuleName.NOT_EMPTY.value, 'Can not be empty.', _not_empty),
    RuleName.NUMERIC.value: Rule(RuleName.NUMERIC.value, 'Must be numeric.', _numeric,
                                 skip_empty=True),
    RuleName.EMAIL_ADDRESS.value: Rule(RuleName.EMAIL_ADDRESS.value, 'Must be an email address.',
                                       _email_address, skip_empty=True),
    RuleName.MUST_ACCEPT.value: Rule(RuleName.MUST_ACCEPT.value, 'You must accept this.',
                                     _must_accept),
}


def resolve_rule(rule: Union[str, RuleName, Rule]) -> Rule:
    """
    Turn a rule name or Rule into a Rule.

    Raises:
        ConfigurationError: If the name is not a built-in rule
    """
    if isinstance(rule, Rule):
        return rule
    name = rule.value if isinstance(rule, RuleName) else str(rule).strip()
    try:
        return BUILTIN_RULES[name]
    except KeyError:
        raise ConfigurationError(
            f'Unknown validation rule: {name} (must be one of {sorted(BUILTIN_RULES)})'
        ) from None


class ValidationRuleSet:
    """Ordered rules per field name."""

    def __init__(self, bindings: Iterable[ValidationRule] = ()):
        self._rules: Dict[str, Tuple[Rule, ...]] = {}
        for binding in bindings:
            current = self._rules.get(binding.field_name, ())
            self._rules[binding.field_name] = current + (binding.rule,)

    def __iter__(self) -> Iterator[ValidationRule]:
        for field_name, rules in self._rules.items():
            for rule in rules:
                yield ValidationRule(field_name, rule)

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._rules.values())

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(self._rules)

    def rules_for(self, field_name: str) -> Tuple[Rule, ...]:
        return self._rules.get(field_name, ())

    def evaluate(self, field_name: str, value: Any) -> List[ValidationError]:
        """
        Run every rule bound to field_name against value.

        Args:
            field_name: Field the rules are bound to
            value: Extracted field value (None when absent)

        Returns:
            One ValidationError per failing rule, in declaration order
        """
        errors = []
        for rule in self.rules_for(field_name):
            if not rule.check(value):
                errors.append(ValidationError(field_name, rule.name, rule.message))
        if errors:
            logger.debug('Field %s failed rules: %s', field_name,
                         ', '.join(error.rule_name for error in errors))
        return errors
