"""
Integration tests for the form server - full request/response cycle over loopback.
"""

import threading
import time
import urllib.error
import urllib.parse
import urllib.request

import pytest

from formcheck import CheckboxField, FormBuilder, SubmitField, TextField
from formcheck.server import FormServer


def contact_definition():
    return (FormBuilder()
            .add_field(TextField('phone', 'Phone:'))
            .add_field(CheckboxField('accept', 'I accept'))
            .add_field(SubmitField('submit', 'Send', callback=lambda values: True))
            .add_field(SubmitField('submit-fail', 'Fail', callback=lambda values: False))
            .set_validation('phone', ['not_empty', 'numeric'])
            .set_validation('accept', 'must_accept')
            .build())


def start_server(server):
    """Run server.serve() in a thread and wait until it is bound."""
    result = {}

    def run():
        result['outcome'] = server.serve()

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    url = server.get_url()
    deadline = time.time() + 5
    while not url and time.time() < deadline:
        time.sleep(0.01)
        url = server.get_url()
    return thread, url, result


def post(url, fields):
    data = urllib.parse.urlencode(fields).encode('utf-8')
    req = urllib.request.Request(url, data=data, method='POST')
    response = urllib.request.urlopen(req, timeout=2)
    return response.status, response.read().decode('utf-8')


class TestFormServer:
    """Test serving and checking forms."""

    def test_get_serves_rendered_form(self):
        server = FormServer(contact_definition(), port=0, timeout=5, title='Contact')
        thread, url, result = start_server(server)

        response = urllib.request.urlopen(url, timeout=2)
        content = response.read().decode('utf-8')
        assert response.status == 200
        assert '<title>Contact</title>' in content
        assert 'name="phone"' in content
        assert 'name="submit-fail"' in content

        post(url, {'phone': '1', 'accept': 'on', 'submit': 'Send'})
        thread.join(timeout=3)
        assert result['outcome'] == (True, {'phone': '1', 'accept': True})

    def test_failed_submission_rerenders_with_errors(self):
        server = FormServer(contact_definition(), port=0, timeout=5)
        thread, url, result = start_server(server)

        status, content = post(url, {'phone': 'abc', 'submit': 'Send'})
        assert status == 200
        assert 'value="abc"' in content
        assert '<li>Must be numeric.</li>' in content
        assert '<li>You must accept this.</li>' in content
        assert thread.is_alive()

        post(url, {'phone': '42', 'accept': 'on', 'submit': 'Send'})
        thread.join(timeout=3)
        assert result['outcome'] == (True, {'phone': '42', 'accept': True})

    def test_callback_failure_keeps_serving(self):
        server = FormServer(contact_definition(), port=0, timeout=5)
        thread, url, result = start_server(server)

        status, content = post(url, {'phone': '42', 'accept': 'on', 'submit-fail': 'Fail'})
        assert status == 200
        assert '<form' in content
        assert thread.is_alive()

        post(url, {'phone': '42', 'accept': 'on', 'submit': 'Send'})
        thread.join(timeout=3)
        assert result['outcome'][0] is True

    def test_unknown_path_is_404(self):
        server = FormServer(contact_definition(), port=0, timeout=5)
        thread, url, result = start_server(server)

        base = url.rsplit('/', 1)[0]
        with pytest.raises(urllib.error.HTTPError) as excinfo:
            urllib.request.urlopen(base + '/other', timeout=2)
        assert excinfo.value.code == 404

        post(url, {'phone': '1', 'accept': 'on', 'submit': 'Send'})
        thread.join(timeout=3)

    def test_timeout(self):
        server = FormServer(contact_definition(), port=0, timeout=1)
        thread, url, result = start_server(server)
        thread.join(timeout=5)
        assert not thread.is_alive()
        assert result['outcome'] == (False, None)
        assert server.timed_out
