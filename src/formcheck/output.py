"""
Output formatting for formcheck check results.
"""

import json
from typing import Any, Dict, Iterable, Optional

from .form import CheckResult
from .rules import ValidationError


def format_json_output(
    result: Optional[CheckResult],
    values: Optional[Dict[str, Any]] = None,
    errors: Iterable[ValidationError] = (),
    error: Optional[str] = None
) -> str:
    """
    Format a check outcome as JSON with consistent envelope.

    Args:
        result: Outcome of FormController.check() (None if never checked)
        values: Dictionary of field names to extracted values
        errors: Validation errors of the check
        error: Error description when no check took place (e.g., 'timeout')

    Returns:
        JSON string with consistent schema:
        {
            "result": "not_submitted" | "success" | "failure" | null,
            "values": {...},
            "errors": [{"field": ..., "rule": ..., "message": ...}],
            "error": string | null
        }
    """
    output = {
        'result': result.value if result is not None else None,
        'values': values if values is not None else {},
        'errors': [
            {'field': e.field_name, 'rule': e.rule_name, 'message': e.message}
            for e in errors
        ],
        'error': error
    }
    return json.dumps(output, indent=2, ensure_ascii=False)
