#!/usr/bin/env python3
"""
Example: a contact form with agreement checkbox and two submit buttons.

'submit' always succeeds, 'submit-fail' always fails processing, which shows
how the triggering button decides which callback runs.
"""

import sys

from markupsafe import Markup

from formcheck import CheckResult, CheckboxField, FormBuilder, FormController, SubmitField, TextField
from formcheck.server import FormServer


def do_submit(values):
    """Do stuff (save to database) and return True on success."""
    print(f'do_submit(): form was submitted with {values}', file=sys.stderr)
    return True


def do_submit_fail(values):
    print('do_submit_fail(): form was submitted but processing failed', file=sys.stderr)
    return False


def contact_form():
    """Build the contact form definition."""
    return (FormBuilder()
            .add_field(TextField('name', 'Name of contact person:', required=True))
            .add_field(TextField('phone', 'Phone:', required=True))
            .add_field(CheckboxField('accept_mail',
                                     'It is great if you send me product information by mail.',
                                     checked=False))
            .add_field(CheckboxField('accept_phone', 'You may call me to try and sell stuff.',
                                     checked=True))
            .add_field(CheckboxField('accept_agreement', Markup(
                'You must accept the '
                '<a href="http://opensource.org/licenses/GPL-3.0">license agreement</a>.'),
                required=True))
            .add_field(SubmitField('submit', 'Submit', callback=do_submit))
            .add_field(SubmitField('submit-fail', 'Submit (fails)', callback=do_submit_fail))
            .set_validation('name', 'not_empty')
            .set_validation('phone', ['not_empty', 'numeric'])
            .set_validation('accept_agreement', 'must_accept')
            .build())


def check_in_process():
    """Run the form against a hand made payload."""
    form = FormController(contact_form())
    status = form.check({'name': 'Ada', 'phone': 'abc', 'submit': 'Submit'})
    if status is CheckResult.FAILURE:
        for error in form.errors:
            print(f'{error.field_name}: {error.message}')
    print(form.render())


def serve():
    """Serve the form in a browser until it is submitted successfully."""
    server = FormServer(contact_form(), title='Example on using forms', timeout=120)
    success, values = server.serve()
    print(values if success else 'Timeout')


if __name__ == '__main__':
    if len(sys.argv) > 1 and sys.argv[1] == 'serve':
        serve()
    else:
        check_in_process()
