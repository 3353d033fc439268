"""
Form definition and submission handling for formcheck.

A FormDefinition is assembled once through FormBuilder and never changes
afterwards, so it can be shared. A FormController holds the outcome of one
check() call and must be created per request.
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .context import RenderContext
from .errors import ConfigurationError
from .fields import Field, SubmitField, field_from_dict
from .markup import build_tag
from .rules import Rule, RuleName, ValidationError, ValidationRule, ValidationRuleSet, resolve_rule

logger = logging.getLogger(__name__)

RuleRef = Union[str, RuleName, Rule]


class CheckResult(str, Enum):
    NOT_SUBMITTED = 'not_submitted'
    SUCCESS = 'success'
    FAILURE = 'failure'


class FormDefinition:
    """
    Ordered, immutable set of fields and the validation rules bound to them.

    Fields with the 'required' option get not_empty ahead of their own rules
    unless they already bind not_empty or must_accept.

    Raises:
        ConfigurationError: On duplicate field names or rules bound to a
            field that is not part of the definition
    """

    def __init__(self, fields: Iterable[Field], rules: ValidationRuleSet,
                 attrs: Mapping[str, Optional[str]]):
        self._fields = tuple(fields)
        self._by_name: Dict[str, Field] = {}
        for field in self._fields:
            if field.name in self._by_name:
                raise ConfigurationError(f'Duplicate field name: {field.name}')
            self._by_name[field.name] = field
        for field_name in rules.field_names:
            if field_name not in self._by_name:
                raise ConfigurationError(f'Validation rule references unknown field: {field_name}')
        self._rules = _with_required_rules(self._fields, rules)
        self._attrs = MappingProxyType(dict(attrs))

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def fields(self) -> Tuple[Field, ...]:
        return self._fields

    @property
    def rules(self) -> ValidationRuleSet:
        return self._rules

    @property
    def attrs(self) -> Mapping[str, Optional[str]]:
        return self._attrs

    def field(self, name: str) -> Field:
        return self._by_name[name]

    def submit_fields(self) -> List[SubmitField]:
        return [field for field in self._fields if isinstance(field, SubmitField)]


# Rules that already reject an empty value, so 'required' adds nothing
_EMPTY_REJECTING = {RuleName.NOT_EMPTY.value, RuleName.MUST_ACCEPT.value}


def _with_required_rules(fields: Tuple[Field, ...],
                         rules: ValidationRuleSet) -> ValidationRuleSet:
    implied = [ValidationRule(field.name, resolve_rule(RuleName.NOT_EMPTY))
               for field in fields
               if field.options.get('required')
               and not any(rule.name in _EMPTY_REJECTING for rule in rules.rules_for(field.name))]
    if not implied:
        return rules
    return ValidationRuleSet(implied + list(rules))


class FormBuilder:
    """
    Append-only builder for FormDefinition.

    Every mistake is reported as ConfigurationError when the offending call
    is made, so a definition that builds is always consistent.

    Example:
        form = (FormBuilder()
                .add_field(TextField('phone', 'Phone:'))
                .add_field(SubmitField('submit', 'Send', callback=save))
                .set_validation('phone', ['not_empty', 'numeric'])
                .build())
    """

    def __init__(self, action: Optional[str] = None, method: str = 'post',
                 form_id: Optional[str] = None):
        self._fields: List[Field] = []
        self._names = set()
        self._bindings: List[ValidationRule] = []
        self._attrs = {'id': form_id, 'action': action, 'method': method}

    def add_field(self, field: Union[Field, Mapping[str, Any]]) -> 'FormBuilder':
        """
        Append a field; rules declared in its 'validation' option are bound too.

        Raises:
            ConfigurationError: If a field with the same name exists
        """
        if not isinstance(field, Field):
            field = field_from_dict(field)
        if field.name in self._names:
            raise ConfigurationError(f'Duplicate field name: {field.name}')
        self._fields.append(field)
        self._names.add(field.name)
        if field.validation:
            self.set_validation(field.name, field.validation)
        return self

    def add_fields(self, fields: Iterable[Union[Field, Mapping[str, Any]]]) -> 'FormBuilder':
        for field in fields:
            self.add_field(field)
        return self

    def set_validation(self, field_name: str,
                       rules: Union[RuleRef, Iterable[RuleRef]]) -> 'FormBuilder':
        """
        Bind rules to an already added field, in the given order.

        Raises:
            ConfigurationError: If the field is unknown or a rule name is not built in
        """
        if field_name not in self._names:
            raise ConfigurationError(f'Validation rule references unknown field: {field_name}')
        if isinstance(rules, (str, Rule)):
            rules = [rules]
        for rule in rules:
            self._bindings.append(ValidationRule(field_name, resolve_rule(rule)))
        return self

    def build(self) -> FormDefinition:
        return FormDefinition(tuple(self._fields), ValidationRuleSet(self._bindings), self._attrs)


class FormController:
    """
    Detects submission, validates, dispatches the submit callback and renders.

    Not safe to share between concurrent requests: check() replaces the
    stored result, values and errors.
    """

    def __init__(self, definition: FormDefinition, context: Optional[RenderContext] = None):
        self.definition = definition
        self.context = context or RenderContext()
        self.result: Optional[CheckResult] = None
        self.trigger: Optional[SubmitField] = None
        self.values: Dict[str, Any] = {}
        self.errors: List[ValidationError] = []

    @property
    def submitted(self) -> bool:
        return self.result is not None and self.result is not CheckResult.NOT_SUBMITTED

    def find_trigger(self, payload: Mapping[str, Any]) -> Optional[SubmitField]:
        """Return the first submit field, in declaration order, present in payload."""
        for field in self.definition.submit_fields():
            if field.is_present(payload):
                return field
        return None

    def check(self, payload: Mapping[str, Any]) -> CheckResult:
        """
        Evaluate a submitted payload.

        Args:
            payload: Submitted form data (name -> string or list of strings)

        Returns:
            NOT_SUBMITTED when no submit field is in the payload, FAILURE when
            validation fails or the callback returns False, SUCCESS otherwise
        """
        self.trigger = None
        self.values = {}
        self.errors = []

        trigger = self.find_trigger(payload)
        if trigger is None:
            logger.debug('No submit field present in payload, form not submitted')
            self.result = CheckResult.NOT_SUBMITTED
            return self.result

        self.trigger = trigger
        for field in self.definition:
            value = field.extract_value(payload)
            self.values[field.name] = value
            self.errors.extend(self.definition.rules.evaluate(field.name, value))

        if self.errors:
            logger.debug('Form submitted by %s failed validation with %d error(s)',
                         trigger.name, len(self.errors))
            self.result = CheckResult.FAILURE
            return self.result

        accepted = bool(trigger.callback(self.submitted_values()))
        logger.debug('Callback of %s returned %s', trigger.name, accepted)
        self.result = CheckResult.SUCCESS if accepted else CheckResult.FAILURE
        return self.result

    def submitted_values(self) -> Dict[str, Any]:
        """Extracted values of every non-submit field from the last check."""
        return {name: value for name, value in self.values.items()
                if not isinstance(self.definition.field(name), SubmitField)}

    def errors_for(self, field_name: str) -> List[ValidationError]:
        return [error for error in self.errors if error.field_name == field_name]

    def value_for(self, field: Field) -> Any:
        if self.submitted:
            return self.values.get(field.name)
        return field.initial_value()

    def render(self) -> str:
        """
        Render the form with current values and errors.

        Safe to call in every state and does not modify the controller.
        """
        attrs = {key: value for key, value in self.definition.attrs.items() if value is not None}
        parts = [build_tag('form', attrs, self.context.escape)]
        for field in self.definition:
            parts.append(field.render(self.value_for(field), self.errors_for(field.name),
                                      self.context))
        parts.append('</form>')
        return '\n'.join(parts)
