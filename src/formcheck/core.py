"""
Command orchestration for formcheck.
"""

import logging
import sys
from typing import Any, Callable, Dict, List, Optional

from .context import RenderContext
from .errors import ConfigurationError
from .fields import FieldKind, make_field, split_field_spec
from .form import CheckResult, FormBuilder, FormController, FormDefinition
from .i18n import Translator
from .markup import wrap_html_fragment
from .output import format_json_output
from .payload import parse_urlencoded
from .server import FormServer

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_INTERNAL_ERROR = 1
EXIT_INVALID_FIELD = 2
EXIT_CHECK_FAILED = 3
EXIT_NOT_SUBMITTED = 4
EXIT_TIMEOUT = 5

RESULT_EXIT_CODES = {
    CheckResult.SUCCESS: EXIT_SUCCESS,
    CheckResult.FAILURE: EXIT_CHECK_FAILED,
    CheckResult.NOT_SUBMITTED: EXIT_NOT_SUBMITTED,
}


def run_formcheck(args) -> int:
    """
    Main execution function for formcheck.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    try:
        definition = build_definition(args.field, action=args.action)
    except ConfigurationError as e:
        print(f'Error: {e}', file=sys.stderr)
        return EXIT_INVALID_FIELD

    translator = Translator(enabled=args.i18n, localedir=args.localedir,
                            languages=args.language)
    context = RenderContext(translate=translator)

    try:
        if args.data is not None:
            return check_submission(definition, args.data, context)
        if args.serve:
            return serve_form(definition, args, context)

        html = FormController(definition, context).render()
        if args.page:
            html = wrap_html_fragment(html, args.title, args.text)
        print(html)
        return EXIT_SUCCESS

    except OSError as e:
        print(f'Error: {e}', file=sys.stderr)
        return EXIT_INTERNAL_ERROR
    except Exception as e:
        logger.exception('Internal error')
        print(f'Internal error: {e}', file=sys.stderr)
        return EXIT_INTERNAL_ERROR


def build_definition(field_specs: List[str], action: Optional[str] = None) -> FormDefinition:
    """
    Build a form definition from field specification strings.

    Submit fields are bound to a callback returning the boolean of their
    'result' option (default true), so a form can declare a button that
    always fails processing.

    Raises:
        ConfigurationError: If a specification is invalid
    """
    builder = FormBuilder(action=action)
    for spec in field_specs:
        name, kind, label, options = split_field_spec(spec)
        if kind == FieldKind.SUBMIT.value:
            outcome = str(options.pop('result', 'true')).lower() in ('true', '1', 'yes')
            options['callback'] = _constant_callback(outcome)
        builder.add_field(make_field(name, kind, label, **options))
    return builder.build()


def _constant_callback(outcome: bool) -> Callable[[Dict[str, Any]], bool]:
    def callback(values: Dict[str, Any]) -> bool:
        logger.debug('Submitted values: %s', values)
        return outcome
    return callback


def check_submission(definition: FormDefinition, data: str, context: RenderContext) -> int:
    """Run one check against url-encoded data and print the JSON result."""
    controller = FormController(definition, context)
    result = controller.check(parse_urlencoded(data.encode('utf-8')).fields)
    print(format_json_output(result, controller.submitted_values(), controller.errors))
    return RESULT_EXIT_CODES[result]


def serve_form(definition: FormDefinition, args, context: RenderContext) -> int:
    """Serve the form until a successful submission and print the JSON result."""
    server = FormServer(
        definition,
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        title=args.title,
        text=args.text,
        context=context
    )

    if args.host in ('0.0.0.0', '::'):
        print(
            'Warning: Binding to all interfaces. Form will be accessible from other machines.',
            file=sys.stderr
        )

    success, values = server.serve()
    if not success:
        print(format_json_output(None, error='timeout'))
        print('Error: Timeout waiting for submission', file=sys.stderr)
        return EXIT_TIMEOUT

    print(format_json_output(CheckResult.SUCCESS, values))
    return EXIT_SUCCESS
