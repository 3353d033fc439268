"""
Command-line interface for formcheck.
"""

import argparse
import sys


class FormCheckArgumentParser:
    """Custom argument parser for formcheck."""

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog='formcheck',
            description='Render, check or serve a declaratively defined web form',
            epilog='Without --data or --serve the rendered form HTML is printed to stdout.'
        )
        self._setup_arguments()

    def _setup_arguments(self):
        """Configure all command-line arguments."""

        form_group = self.parser.add_argument_group('form definition')
        form_group.add_argument(
            '--field',
            action='append',
            metavar='<spec>',
            help='Define a form field (format: name:type[:label][:options]). '
                 'Options: required, checked, placeholder=..., value=... (initial value, or the '
                 'submitted value of a checkbox), '
                 'rules=not_empty|numeric, result=false (submit fields). '
                 'May be specified multiple times.'
        )
        form_group.add_argument(
            '--action',
            metavar='<url>',
            help='Form action attribute'
        )

        mode_group = self.parser.add_argument_group('mode (mutually exclusive)')
        mode_group.add_argument(
            '--data',
            metavar='<urlencoded>',
            help='Check a url-encoded submission (e.g. "name=Ada&submit=1") and print JSON'
        )
        mode_group.add_argument(
            '--serve',
            action='store_true',
            help='Serve the form over HTTP until it is submitted successfully'
        )

        presentation_group = self.parser.add_argument_group('presentation options')
        presentation_group.add_argument(
            '--title',
            metavar='<string>',
            help='Page title shown above the form'
        )
        presentation_group.add_argument(
            '--text',
            metavar='<string>',
            help='Instructional text shown above the form'
        )
        presentation_group.add_argument(
            '--page',
            action='store_true',
            help='Wrap printed HTML in a complete document'
        )

        i18n_group = self.parser.add_argument_group('translation')
        i18n_group.add_argument(
            '--i18n',
            action='store_true',
            help='Translate labels and messages through gettext'
        )
        i18n_group.add_argument(
            '--localedir',
            metavar='<path>',
            help='Directory with <lang>/LC_MESSAGES/formcheck.mo catalogs'
        )
        i18n_group.add_argument(
            '--language',
            action='append',
            metavar='<lang>',
            help='Preferred language (may be specified multiple times)'
        )

        server_group = self.parser.add_argument_group('server configuration')
        server_group.add_argument(
            '--host',
            metavar='<ip>',
            default='127.0.0.1',
            help='Host/IP to bind to (default: 127.0.0.1)'
        )
        server_group.add_argument(
            '--port',
            type=int,
            metavar='<int>',
            help='TCP port (default: auto-select free port)'
        )
        server_group.add_argument(
            '--timeout',
            type=int,
            metavar='<seconds>',
            default=300,
            help='Max time to wait for a successful submission in seconds (default: 300)'
        )

        self.parser.add_argument(
            '-v', '--verbose',
            action='store_true',
            help='Log debug output to stderr'
        )

    def parse_args(self, args=None):
        """Parse command-line arguments and validate."""
        parsed = self.parser.parse_args(args)
        self._validate_args(parsed)
        return parsed

    def _validate_args(self, args):
        """Validate argument combinations."""
        if not args.field:
            self.parser.error('At least one --field is required')

        if args.data is not None and args.serve:
            self.parser.error('Only one mode allowed: --data or --serve')

        if args.timeout <= 0:
            self.parser.error('--timeout must be a positive integer')

        if args.port is not None and (args.port < 1 or args.port > 65535):
            self.parser.error('--port must be between 1 and 65535')


def main():
    """Main entry point for formcheck CLI."""
    parser = FormCheckArgumentParser()
    args = parser.parse_args()

    # Import here to avoid circular dependencies
    from .core import run_formcheck

    try:
        return run_formcheck(args)
    except KeyboardInterrupt:
        print('\n\nInterrupted by user', file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
