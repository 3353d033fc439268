"""
Tests for field kinds, field specifications and HTML escaping.
"""

import pytest
from markupsafe import Markup

from formcheck.context import RenderContext
from formcheck.errors import ConfigurationError
from formcheck.fields import (
    CheckboxField,
    FieldKind,
    HiddenField,
    PasswordField,
    SubmitField,
    TextareaField,
    TextField,
    field_from_dict,
    parse_field_spec,
)
from formcheck.markup import build_tag, escape_attr, escape_html
from formcheck.rules import Rule, ValidationError


def accept(values):
    return True


class TestParseFieldSpec:
    """Test field specification parsing."""

    def test_parse_basic(self):
        field = parse_field_spec('name:text')
        assert isinstance(field, TextField)
        assert field.name == 'name'
        assert field.kind is FieldKind.TEXT
        assert field.label == 'name'
        assert dict(field.options) == {}

    def test_parse_with_label_and_options(self):
        field = parse_field_spec('phone:text:Phone+number:required,placeholder=Your+phone')
        assert field.label == 'Phone number'
        assert field.options['required'] is True
        assert field.options['placeholder'] == 'Your phone'

    def test_parse_rules(self):
        field = parse_field_spec('phone:text:Phone:rules=not_empty|numeric')
        assert field.validation == ('not_empty', 'numeric')

    def test_parse_value_becomes_default(self):
        field = parse_field_spec('city:text:City:value=Oslo')
        assert field.initial_value() == 'Oslo'

    def test_parse_checkbox_value_is_submitted_value(self):
        field = parse_field_spec('news:checkbox:Newsletter:value=yes')
        assert field.options['value'] == 'yes'
        assert 'default' not in field.options
        html = field.render(True, [], RenderContext())
        assert 'value="yes" checked' in html

    def test_parse_checkbox_checked_flag(self):
        field = parse_field_spec('news:checkbox:Newsletter:checked')
        assert isinstance(field, CheckboxField)
        assert field.initial_value() is True

    def test_parse_submit_with_callback(self):
        field = parse_field_spec('submit:submit:Send', callback=accept)
        assert isinstance(field, SubmitField)
        assert field.callback is accept

    def test_parse_invalid_missing_type(self):
        with pytest.raises(ConfigurationError, match='Invalid field spec'):
            parse_field_spec('name')

    def test_parse_invalid_type(self):
        with pytest.raises(ConfigurationError, match='Invalid field type'):
            parse_field_spec('name:invalid')

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_field_spec('name:invalid')


class TestFieldConstruction:
    """Test fail-fast field construction."""

    def test_submit_requires_callback(self):
        with pytest.raises(ConfigurationError, match='requires a callable callback'):
            SubmitField('submit')

    def test_submit_rejects_non_callable_callback(self):
        with pytest.raises(ConfigurationError):
            SubmitField('submit', callback='DoSubmit')

    def test_empty_name_rejected(self):
        with pytest.raises(ConfigurationError, match='non-empty'):
            TextField('')

    def test_options_are_read_only(self):
        field = TextField('name', default='x')
        with pytest.raises(TypeError):
            field.options['default'] = 'y'

    def test_single_rule_as_validation(self):
        even = Rule('even', 'Must be even.', lambda value: int(value) % 2 == 0)
        field = TextField('n', validation=even)
        assert field.validation == (even,)

    def test_invalid_validation_option(self):
        field = TextField('n', validation=42)
        with pytest.raises(ConfigurationError, match="invalid validation option"):
            field.validation

    def test_from_dict(self):
        field = field_from_dict({'name': 'age', 'type': 'text', 'label': 'Age',
                                 'rules': ['numeric'], 'default': '42'})
        assert isinstance(field, TextField)
        assert field.label == 'Age'
        assert field.validation == ('numeric',)
        assert field.initial_value() == '42'

    def test_from_dict_missing_type(self):
        with pytest.raises(ConfigurationError, match="'type'"):
            field_from_dict({'name': 'age'})


class TestExtractValue:
    """Test extraction of submitted values."""

    def test_text_present(self):
        assert TextField('name').extract_value({'name': 'Ada'}) == 'Ada'

    def test_text_absent_is_none(self):
        assert TextField('name').extract_value({}) is None

    def test_text_repeated_key_takes_last(self):
        assert TextField('name').extract_value({'name': ['a', 'b']}) == 'b'

    def test_checkbox_present_is_checked(self):
        field = CheckboxField('accept')
        assert field.extract_value({'accept': 'on'}) is True
        assert field.extract_value({'accept': ''}) is True

    def test_checkbox_absent_is_unchecked(self):
        assert CheckboxField('accept').extract_value({}) is False

    def test_submit_presence(self):
        field = SubmitField('submit', callback=accept)
        assert field.is_present({'submit': 'Send'})
        assert not field.is_present({'submit-fail': 'Send'})


class TestRender:
    """Test field HTML generation."""

    def setup_method(self):
        self.context = RenderContext()

    def test_text_input(self):
        field = TextField('username', 'Username', required=True, placeholder='Enter username')
        html = field.render('ada', [], self.context)
        assert '<label for="username">Username</label>' in html
        assert ('<input type="text" name="username" id="username" '
                'placeholder="Enter username" required value="ada">') in html

    def test_text_without_value(self):
        html = TextField('name').render(None, [], self.context)
        assert '<input type="text" name="name" id="name">' in html

    def test_value_is_escaped(self):
        html = TextField('name').render('"><script>', [], self.context)
        assert '<script>' not in html
        assert 'value="&#34;&gt;&lt;script&gt;"' in html

    def test_label_is_escaped(self):
        html = TextField('name', '<b>Name</b>').render(None, [], self.context)
        assert '&lt;b&gt;Name&lt;/b&gt;' in html

    def test_markup_label_is_trusted(self):
        label = Markup('Accept the <a href="/terms">terms</a>')
        html = CheckboxField('accept', label).render(False, [], self.context)
        assert '<label for="accept">Accept the <a href="/terms">terms</a></label>' in html

    def test_checkbox_checked(self):
        html = CheckboxField('accept', 'Accept').render(True, [], self.context)
        assert '<input type="checkbox" name="accept" id="accept" value="on" checked>' in html

    def test_checkbox_unchecked(self):
        html = CheckboxField('accept', 'Accept').render(False, [], self.context)
        assert 'checked' not in html

    def test_password_never_renders_value(self):
        html = PasswordField('secret').render('hunter2', [], self.context)
        assert 'hunter2' not in html
        assert 'type="password"' in html

    def test_hidden_has_no_label(self):
        html = HiddenField('token').render('abc', [], self.context)
        assert '<label' not in html
        assert 'type="hidden"' in html
        assert 'value="abc"' in html

    def test_textarea(self):
        html = TextareaField('bio', 'Bio', rows='5').render('<hi>', [], self.context)
        assert '<textarea name="bio" id="bio" rows="5">&lt;hi&gt;</textarea>' in html

    def test_submit_button(self):
        html = SubmitField('submit', 'Send', callback=accept).render(None, [], self.context)
        assert html == '    <input type="submit" name="submit" id="submit" value="Send">'

    def test_errors_rendered_inline(self):
        errors = [ValidationError('phone', 'not_empty', 'Can not be empty.')]
        html = TextField('phone').render('', errors, self.context)
        assert '<ul class="validation-failed"><li>Can not be empty.</li></ul>' in html

    def test_translate_hook_applies_to_label_and_messages(self):
        context = RenderContext(translate=lambda text: text.upper())
        errors = [ValidationError('phone', 'numeric', 'Must be numeric.')]
        html = TextField('phone', 'Phone').render('x', errors, context)
        assert '>PHONE</label>' in html
        assert '<li>MUST BE NUMERIC.</li>' in html

    def test_custom_escape_is_used(self):
        context = RenderContext(escape=lambda value: f'[{value}]')
        html = TextField('name').render('v', [], context)
        assert 'value="[v]"' in html


class TestEscaping:
    """Test HTML escaping functions."""

    def test_escape_html(self):
        assert escape_html('<script>') == '&lt;script&gt;'
        assert escape_html('A & B') == 'A &amp; B'
        assert escape_html('"quoted"') == '&#34;quoted&#34;'

    def test_escape_attr(self):
        assert escape_attr("it's") == 'it&#39;s'
        assert escape_attr('<tag>') == '&lt;tag&gt;'

    def test_escape_empty(self):
        assert escape_html('') == ''
        assert escape_html(None) == ''
        assert escape_attr(None) == ''

    def test_escape_returns_plain_str(self):
        assert type(escape_html('<b>')) is str

    def test_build_tag_boolean_attributes(self):
        tag = build_tag('input', {'type': 'checkbox', 'required': None, 'checked': False})
        assert tag == '<input type="checkbox" required>'
