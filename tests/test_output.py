"""
Tests for output formatting.
"""

import json

from formcheck.form import CheckResult
from formcheck.output import format_json_output
from formcheck.rules import ValidationError


class TestFormatJSONOutput:
    """Test JSON output formatting."""

    def test_format_success(self):
        output = format_json_output(CheckResult.SUCCESS, {'name': 'Ada', 'accept': True})
        data = json.loads(output)
        assert data['result'] == 'success'
        assert data['values'] == {'name': 'Ada', 'accept': True}
        assert data['errors'] == []
        assert data['error'] is None

    def test_format_failure_with_errors(self):
        errors = [ValidationError('phone', 'numeric', 'Must be numeric.')]
        data = json.loads(format_json_output(CheckResult.FAILURE, {'phone': 'abc'}, errors))
        assert data['result'] == 'failure'
        assert data['errors'] == [
            {'field': 'phone', 'rule': 'numeric', 'message': 'Must be numeric.'}
        ]

    def test_format_unicode(self):
        output = format_json_output(CheckResult.SUCCESS, {'name': 'José'})
        assert 'José' in output

    def test_format_timeout(self):
        data = json.loads(format_json_output(None, error='timeout'))
        assert data['result'] is None
        assert data['values'] == {}
        assert data['error'] == 'timeout'
