"""
Form field kinds for formcheck.

Every kind knows how to pull its value out of a submitted payload and how to
render itself with that value and its validation errors.
"""

import urllib.parse
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from .context import RenderContext
from .errors import ConfigurationError
from .markup import build_tag
from .rules import Rule, ValidationError

Payload = Mapping[str, Any]

# Options given as bare flags or 'true'/'false' strings in field specs
BOOLEAN_OPTIONS = {'required', 'checked', 'disabled', 'readonly', 'autofocus'}


class FieldKind(str, Enum):
    TEXT = 'text'
    PASSWORD = 'password'
    HIDDEN = 'hidden'
    TEXTAREA = 'textarea'
    CHECKBOX = 'checkbox'
    SUBMIT = 'submit'


class Field:
    """
    Base form field: a single string value rendered as an <input>.

    Args:
        name: Field name, used as payload key and element id
        label: Label text (defaults to the name); markupsafe.Markup is trusted
        **options: Kind specific configuration (default, required,
            placeholder, checked, callback, validation, ...)
    """

    kind = FieldKind.TEXT

    def __init__(self, name: str, label: Optional[str] = None, **options: Any):
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError(f'Field name must be a non-empty string, got {name!r}')
        self.name = name
        self.label = label if label is not None else name
        self.options = MappingProxyType(dict(options))

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.name!r})'

    @property
    def validation(self) -> Tuple[Any, ...]:
        """Rules declared on the field itself (names or Rule objects)."""
        rules = self.options.get('validation') or ()
        if isinstance(rules, (str, Rule)):
            return (rules,)
        try:
            return tuple(rules)
        except TypeError:
            raise ConfigurationError(
                f'Field {self.name!r} has invalid validation option: {rules!r}'
            ) from None

    def is_present(self, payload: Payload) -> bool:
        return self.name in payload

    def extract_value(self, payload: Payload) -> Optional[Any]:
        """Return the submitted value, the last one for repeated keys, None if absent."""
        value = payload.get(self.name)
        if isinstance(value, (list, tuple)):
            return value[-1] if value else None
        return value

    def initial_value(self) -> Optional[Any]:
        return self.options.get('default')

    def render(self, value: Any, errors: Sequence[ValidationError],
               context: RenderContext) -> str:
        parts = [self._render_label(context), self._render_input(value, context)]
        if errors:
            parts.append(render_errors(errors, context))
        return '\n'.join(part for part in parts if part)

    def _render_label(self, context: RenderContext) -> str:
        label = context.escape(context.translate(self.label))
        return f'    <label for="{context.escape(self.name)}">{label}</label>'

    def _attrs(self, context: RenderContext) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {
            'type': self.kind.value,
            'name': self.name,
            'id': self.name,
        }
        if 'placeholder' in self.options:
            attrs['placeholder'] = context.translate(self.options['placeholder'])
        for flag in ('required', 'disabled', 'readonly', 'autofocus'):
            if self.options.get(flag):
                attrs[flag] = None
        return attrs

    def _render_input(self, value: Any, context: RenderContext) -> str:
        attrs = self._attrs(context)
        attrs['value'] = value if value is not None else False
        return '    ' + build_tag('input', attrs, context.escape)


class TextField(Field):
    kind = FieldKind.TEXT


class PasswordField(Field):
    """Password input; the submitted value is never written back into markup."""

    kind = FieldKind.PASSWORD

    def _render_input(self, value: Any, context: RenderContext) -> str:
        return '    ' + build_tag('input', self._attrs(context), context.escape)


class HiddenField(Field):
    kind = FieldKind.HIDDEN

    def _render_label(self, context: RenderContext) -> str:
        return ''


class TextareaField(Field):
    kind = FieldKind.TEXTAREA

    def _render_input(self, value: Any, context: RenderContext) -> str:
        attrs = self._attrs(context)
        del attrs['type']
        for key in ('rows', 'cols'):
            if key in self.options:
                attrs[key] = self.options[key]
        content = context.escape(value) if value is not None else ''
        return '    ' + build_tag('textarea', attrs, context.escape) + content + '</textarea>'


class CheckboxField(Field):
    """
    Checkbox input.

    Browsers omit unchecked checkboxes from the payload, so presence of the
    key means checked and absence means unchecked.
    """

    kind = FieldKind.CHECKBOX

    def extract_value(self, payload: Payload) -> bool:
        return self.name in payload

    def initial_value(self) -> bool:
        return bool(self.options.get('checked', False))

    def render(self, value: Any, errors: Sequence[ValidationError],
               context: RenderContext) -> str:
        attrs = self._attrs(context)
        attrs['value'] = self.options.get('value', 'on')
        attrs['checked'] = None if value else False
        label = context.escape(context.translate(self.label))
        html = ('    ' + build_tag('input', attrs, context.escape)
                + f' <label for="{context.escape(self.name)}">{label}</label>')
        if errors:
            html += '\n' + render_errors(errors, context)
        return html


class SubmitField(Field):
    """
    Submit button bound to a callback.

    The callback receives a dict of the submitted non-submit values and
    returns True (success) or False (failure).
    """

    kind = FieldKind.SUBMIT

    def __init__(self, name: str, label: Optional[str] = None, **options: Any):
        super().__init__(name, label, **options)
        callback = self.options.get('callback')
        if not callable(callback):
            raise ConfigurationError(f'Submit field {name!r} requires a callable callback')
        self.callback: Callable[[Dict[str, Any]], bool] = callback

    def initial_value(self) -> None:
        return None

    def render(self, value: Any, errors: Sequence[ValidationError],
               context: RenderContext) -> str:
        attrs = self._attrs(context)
        attrs['value'] = context.translate(self.label)
        html = '    ' + build_tag('input', attrs, context.escape)
        if errors:
            html += '\n' + render_errors(errors, context)
        return html


FIELD_CLASSES = {
    FieldKind.TEXT: TextField,
    FieldKind.PASSWORD: PasswordField,
    FieldKind.HIDDEN: HiddenField,
    FieldKind.TEXTAREA: TextareaField,
    FieldKind.CHECKBOX: CheckboxField,
    FieldKind.SUBMIT: SubmitField,
}


def render_errors(errors: Sequence[ValidationError], context: RenderContext) -> str:
    """Render validation errors as an inline list."""
    items = ''.join(f'<li>{context.escape(context.translate(error.message))}</li>'
                    for error in errors)
    return f'    <ul class="validation-failed">{items}</ul>'


def make_field(name: str, kind: str, label: Optional[str] = None, **options: Any) -> Field:
    """
    Create a field of the given kind.

    Raises:
        ConfigurationError: If the kind is unknown or the field is invalid
    """
    try:
        field_kind = FieldKind(kind)
    except ValueError:
        raise ConfigurationError(
            f'Invalid field type: {kind} (must be one of {sorted(k.value for k in FieldKind)})'
        ) from None
    return FIELD_CLASSES[field_kind](name, label, **options)


def split_field_spec(spec: str) -> Tuple[str, str, Optional[str], Dict[str, Any]]:
    """
    Split a field specification string into its parts.

    Format: name:type[:label][:options]
    Example: phone:text:Phone+number:required,rules=not_empty|numeric

    Returns:
        Tuple of (name, type, label, options)

    Raises:
        ConfigurationError: If specification is invalid
    """
    parts = spec.split(':', 3)
    if len(parts) < 2:
        raise ConfigurationError(f'Invalid field spec: {spec} (expected name:type[:label][:options])')

    name = parts[0].strip()
    kind = parts[1].strip()
    label = urllib.parse.unquote_plus(parts[2]) if len(parts) >= 3 and parts[2] else None
    options = _parse_options(parts[3], kind) if len(parts) >= 4 else {}
    return name, kind, label, options


def parse_field_spec(spec: str, **extra: Any) -> Field:
    """
    Parse a field specification string into a Field.

    Args:
        spec: Field specification (see split_field_spec)
        **extra: Options that cannot be expressed as text, e.g. callback

    Returns:
        Field instance
    """
    name, kind, label, options = split_field_spec(spec)
    options.update(extra)
    return make_field(name, kind, label, **options)


def _parse_options(options_str: str, kind: str = FieldKind.TEXT.value) -> Dict[str, Any]:
    """
    Parse options string into dictionary.

    'value' sets the initial value, except for checkboxes where it is the
    value submitted when checked.
    """
    options: Dict[str, Any] = {}
    for option in options_str.split(','):
        option = option.strip()
        if not option:
            continue

        if '=' in option:
            key, value = option.split('=', 1)
            key = key.strip()
            value = urllib.parse.unquote_plus(value.strip())
        else:
            # Boolean flag (e.g., "required")
            key, value = option, 'true'

        if key == 'rules':
            options['validation'] = [rule for rule in value.split('|') if rule.strip()]
        elif key == 'value' and kind != FieldKind.CHECKBOX.value:
            options['default'] = value
        elif key in BOOLEAN_OPTIONS:
            options[key] = value.lower() in ('true', '1', 'yes')
        else:
            options[key] = value

    return options


def field_from_dict(field_dict: Mapping[str, Any]) -> Field:
    """
    Convert a field dictionary to a Field.

    Args:
        field_dict: Dictionary with 'name', 'type', optional 'label' and any
            other options ('rules' is accepted as an alias of 'validation')

    Returns:
        Field instance
    """
    try:
        name = field_dict['name']
        kind = field_dict['type']
    except KeyError as e:
        raise ConfigurationError(f'Field dict is missing required key {e.args[0]!r}') from None

    options = {key: value for key, value in field_dict.items()
               if key not in ('name', 'type', 'label', 'rules')}
    if 'rules' in field_dict:
        options['validation'] = field_dict['rules']
    return make_field(name, kind, field_dict.get('label'), **options)
