"""
formcheck - Declarative web forms: definition, submission detection, validation and rendering.

Licensed under the MIT License.

Programmatic Usage:

    from formcheck import FormBuilder, FormController, CheckResult
    from formcheck import TextField, CheckboxField, SubmitField

    def save(values):
        # store values somewhere, return False to reject the submission
        return True

    definition = (FormBuilder()
                  .add_field(TextField('phone', 'Phone:', required=True))
                  .add_field(CheckboxField('accept_agreement', 'I accept the terms'))
                  .add_field(SubmitField('submit', 'Send', callback=save))
                  .set_validation('phone', ['not_empty', 'numeric'])
                  .set_validation('accept_agreement', 'must_accept')
                  .build())

    # One controller per request
    form = FormController(definition)
    status = form.check(request_post_data)
    if status is CheckResult.SUCCESS:
        redirect_somewhere()
    html = form.render()

    # Dicts also work
    FormBuilder().add_field({'name': 'age', 'type': 'text', 'rules': ['numeric']})
"""

__version__ = "0.1.0"

from formcheck.errors import FormCheckError, ConfigurationError
from formcheck.rules import Rule, RuleName, ValidationError, ValidationRule, ValidationRuleSet
from formcheck.fields import (
    Field,
    FieldKind,
    TextField,
    PasswordField,
    HiddenField,
    TextareaField,
    CheckboxField,
    SubmitField,
    field_from_dict,
    parse_field_spec,
)
from formcheck.context import RenderContext
from formcheck.form import CheckResult, FormBuilder, FormDefinition, FormController
from formcheck.i18n import Translator
from formcheck.markup import escape_html

__all__ = [
    # Errors
    'FormCheckError',
    'ConfigurationError',
    # Validation
    'Rule',
    'RuleName',
    'ValidationError',
    'ValidationRule',
    'ValidationRuleSet',
    # Fields
    'Field',
    'FieldKind',
    'TextField',
    'PasswordField',
    'HiddenField',
    'TextareaField',
    'CheckboxField',
    'SubmitField',
    'field_from_dict',
    'parse_field_spec',
    # Forms
    'RenderContext',
    'CheckResult',
    'FormBuilder',
    'FormDefinition',
    'FormController',
    'Translator',
    'escape_html',
]
