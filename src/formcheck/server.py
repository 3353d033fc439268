"""
Ephemeral web server for formcheck.

Serves one form definition until a submission succeeds or the timeout
expires. Each request gets its own FormController; failed submissions are
answered with the form re-rendered with values and errors.
"""

import html
import http.server
import logging
import secrets
import socketserver
import sys
import threading
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlparse

from .context import RenderContext
from .form import CheckResult, FormController, FormDefinition
from .markup import wrap_html_fragment
from .payload import parse_body

logger = logging.getLogger(__name__)

# Maximum request body size when no limit is configured (prevents memory exhaustion)
DEFAULT_MAX_BODY_SIZE = 1024 * 1024  # 1 MB


class FormRequestHandler(http.server.BaseHTTPRequestHandler):
    """HTTP request handler for form serving and submission."""

    # Class variables set by server
    definition: Optional[FormDefinition] = None
    context: Optional[RenderContext] = None
    endpoint: str = ''
    title: Optional[str] = None
    text: Optional[str] = None
    max_body_size: int = DEFAULT_MAX_BODY_SIZE
    on_success: Optional[Callable[[Dict[str, Any]], None]] = None
    on_failure: Optional[Callable[[], None]] = None

    def log_message(self, format, *args):
        """Route access logging to the module logger instead of stderr."""
        logger.debug('%s - %s', self.address_string(), format % args)

    def do_GET(self):
        """Handle GET requests - serve the empty form."""
        if urlparse(self.path).path != self.endpoint:
            self.send_error(404, 'Not Found')
            return
        self._send_form(FormController(self.definition, self.context))

    def do_POST(self):
        """Handle POST requests - check the submission."""
        if urlparse(self.path).path != self.endpoint:
            self.send_error(404, 'Not Found')
            return

        content_type = self.headers.get('Content-Type', '')
        try:
            content_length = int(self.headers.get('Content-Length', 0))
        except (ValueError, TypeError):
            self._send_error_page(400, 'Bad Request', 'Invalid Content-Length header')
            return

        if content_length > self.max_body_size:
            self._send_error_page(
                413,
                'Payload Too Large',
                f'Request size ({content_length} bytes) exceeds limit ({self.max_body_size} bytes)'
            )
            return

        try:
            form_data = parse_body(self.rfile.read(content_length), content_type,
                                   self.max_body_size)
        except ValueError as e:
            self._send_error_page(400, 'Bad Request', f'Failed to parse form data: {e}')
            return

        controller = FormController(self.definition, self.context)
        result = controller.check(form_data.fields)
        logger.info('Submission to %s: %s', self.endpoint, result.value)

        if result is CheckResult.SUCCESS:
            self._send_success_page()
            if self.on_success:
                self.on_success(controller.submitted_values())
            return

        if result is CheckResult.FAILURE and self.on_failure:
            self.on_failure()
        self._send_form(controller)

    def _send_form(self, controller: FormController):
        page = wrap_html_fragment(controller.render(), self.title, self.text,
                                  escape=controller.context.escape)
        self._send_html(200, page)

    def _send_html(self, code: int, body: str):
        data = body.encode('utf-8')
        self.send_response(code)
        self.send_header('Content-Type', 'text/html; charset=utf-8')
        self.send_header('Content-Length', str(len(data)))
        self.send_header('Cache-Control', 'no-store, no-cache, must-revalidate')
        self.end_headers()
        self.wfile.write(data)

    def _send_success_page(self):
        """Send success confirmation page."""
        self._send_html(200, wrap_html_fragment(
            '<p class="success">Form submitted successfully. You may now close this window.</p>',
            'Success'
        ))

    def _send_error_page(self, code: int, title: str, message: str):
        """Send error page to user."""
        body = (f'<p class="error">{html.escape(message)}</p>'
                f'<p><a href="{self.endpoint}">Go back</a></p>')
        self._send_html(code, wrap_html_fragment(body, title))


class FormServer:
    """Ephemeral form server with timeout management."""

    def __init__(
        self,
        definition: FormDefinition,
        host: str = '127.0.0.1',
        port: Optional[int] = None,
        timeout: int = 300,
        title: Optional[str] = None,
        text: Optional[str] = None,
        context: Optional[RenderContext] = None,
        max_body_size: Optional[int] = None,
        reset_timeout_on_error: bool = True
    ):
        """
        Initialize form server.

        Args:
            definition: Form to serve
            host: Host to bind to
            port: Port to bind to (None = auto-select)
            timeout: Seconds to wait for a successful submission
            title: Page title
            text: Instructional text shown above the form
            context: Render context (default: markupsafe escaping, no translation)
            max_body_size: Maximum request body size in bytes
            reset_timeout_on_error: Restart the timeout after a failed submission
        """
        self.definition = definition
        self.host = host
        self.port = port or 0  # 0 = auto-select free port
        self.timeout = timeout
        self.title = title
        self.text = text
        self.context = context or RenderContext()
        self.max_body_size = max_body_size or DEFAULT_MAX_BODY_SIZE
        self.reset_timeout_on_error = reset_timeout_on_error

        self.endpoint = '/form_' + secrets.token_hex(8)

        # State
        self.server: Optional[socketserver.TCPServer] = None
        self.values: Optional[Dict[str, Any]] = None
        self.success = False
        self.timed_out = False
        self.done_event = threading.Event()
        self.activity_event = threading.Event()

    def _on_success(self, values: Dict[str, Any]):
        self.values = values
        self.success = True
        self.done_event.set()

    def _on_failure(self):
        if self.reset_timeout_on_error:
            self.activity_event.set()

    def serve(self) -> Tuple[bool, Optional[Dict[str, Any]]]:
        """
        Start server and wait for a successful submission or timeout.

        Returns:
            Tuple of (success, submitted values)

        Raises:
            OSError: If the port is already in use or binding fails
        """
        class ReusableTCPServer(socketserver.TCPServer):
            allow_reuse_address = True

        class BoundHandler(FormRequestHandler):
            definition = self.definition
            context = self.context
            endpoint = self.endpoint
            title = self.title
            text = self.text
            max_body_size = self.max_body_size
            on_success = self._on_success
            on_failure = self._on_failure

        try:
            self.server = ReusableTCPServer((self.host, self.port), BoundHandler)
        except OSError as e:
            logger.error('Failed to bind to %s:%s: %s', self.host, self.port, e)
            raise

        print('\nOpen this URL in your browser:', file=sys.stderr)
        print(f'  {self.get_url()}\n', file=sys.stderr)

        server_thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        server_thread.start()
        try:
            while not self.done_event.is_set():
                self.activity_event.clear()
                if self.done_event.wait(self.timeout):
                    break
                if not self.activity_event.is_set():
                    self.timed_out = True
                    logger.info('No successful submission within %s seconds', self.timeout)
                    break
        finally:
            self.server.shutdown()
            self.server.server_close()
            server_thread.join(timeout=2.0)

        if self.timed_out:
            return False, None
        return self.success, self.values

    def get_url(self) -> str:
        """Get the server URL."""
        if self.server:
            actual_port = self.server.server_address[1]
            # IPv6 addresses need brackets
            url_host = f'[{self.host}]' if ':' in self.host else self.host
            return f'http://{url_host}:{actual_port}{self.endpoint}'
        return ''
