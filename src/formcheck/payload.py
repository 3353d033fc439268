"""
Submitted form data parsing for formcheck.

Turns url-encoded and multipart/form-data request bodies into the
name -> value mapping consumed by FormController.check(). File parts of
multipart bodies are skipped.
"""

import logging
import re
from email.parser import BytesParser
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qs

logger = logging.getLogger(__name__)


class FormData:
    """Represents parsed form data.

    Fields with the same name (e.g., multiple checkboxes or multi-select) are
    stored as lists. Single values are stored as strings.
    """

    def __init__(self):
        self.fields: Dict[str, Union[str, List[str]]] = {}

    def add_field(self, name: str, value: str) -> None:
        """Add a field value, converting to list if name already exists."""
        if name in self.fields:
            existing = self.fields[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                self.fields[name] = [existing, value]
        else:
            self.fields[name] = value


def parse_body(body: bytes, content_type: str, max_size: Optional[int] = None) -> FormData:
    """
    Parse a request body according to its Content-Type.

    Raises:
        ValueError: If the body exceeds max_size or a multipart body is malformed
    """
    if max_size and len(body) > max_size:
        raise ValueError(f'Request body size {len(body)} exceeds limit {max_size}')
    if 'multipart/form-data' in content_type.lower():
        return parse_multipart(body, content_type)
    return parse_urlencoded(body)


def parse_urlencoded(body: bytes) -> FormData:
    """
    Parse application/x-www-form-urlencoded request body.

    Args:
        body: Request body as bytes

    Returns:
        FormData instance (empty if the body is not valid UTF-8)
    """
    form_data = FormData()
    try:
        parsed = parse_qs(body.decode('utf-8'), keep_blank_values=True)
    except UnicodeDecodeError:
        logger.warning('Discarding url-encoded body that is not valid UTF-8')
        return form_data

    # parse_qs returns lists - preserve multiple values for repeated fields
    for key, values in parsed.items():
        if len(values) == 1:
            form_data.fields[key] = values[0]
        else:
            form_data.fields[key] = values
    return form_data


def parse_multipart(body: bytes, content_type: str) -> FormData:
    """
    Parse multipart/form-data request body, keeping only text fields.

    Args:
        body: Request body as bytes
        content_type: Content-Type header value

    Returns:
        FormData instance

    Raises:
        ValueError: If no boundary is present in content_type
    """
    boundary = extract_boundary(content_type)
    if not boundary:
        raise ValueError('No boundary found in Content-Type header')

    form_data = FormData()
    for part in split_multipart_body(body, boundary):
        headers, content = parse_part(part)
        disposition = headers.get('content-disposition', '')

        name = extract_value_from_header(disposition, 'name')
        if name is None:
            continue
        if extract_value_from_header(disposition, 'filename') is not None:
            logger.debug('Skipping file part %s', name)
            continue

        try:
            form_data.add_field(name, content.decode('utf-8'))
        except UnicodeDecodeError:
            form_data.add_field(name, '')

    return form_data


def extract_boundary(content_type: str) -> Optional[str]:
    """Extract boundary from Content-Type header."""
    match = re.search(r'boundary=([^;]+)', content_type, re.IGNORECASE)
    if match:
        boundary = match.group(1).strip()
        # Remove quotes if present
        if boundary.startswith('"') and boundary.endswith('"'):
            boundary = boundary[1:-1]
        return boundary
    return None


def split_multipart_body(body: bytes, boundary: str) -> List[bytes]:
    """Split multipart body into individual parts."""
    boundary_bytes = ('--' + boundary).encode('utf-8')

    # First chunk is the preamble
    parts = body.split(boundary_bytes)[1:]

    result = []
    for part in parts:
        if part.startswith(b'--'):  # End boundary
            break
        part = part.lstrip(b'\r\n')
        if part:
            result.append(part)
    return result


def parse_part(part: bytes) -> Tuple[Dict[str, str], bytes]:
    """Parse a single multipart part into lowercased headers and content."""
    if b'\r\n\r\n' in part:
        header_data, content = part.split(b'\r\n\r\n', 1)
    elif b'\n\n' in part:
        header_data, content = part.split(b'\n\n', 1)
    else:
        header_data, content = part, b''

    content = content.rstrip(b'\r\n')

    msg = BytesParser().parsebytes(header_data + b'\r\n\r\n', headersonly=True)
    headers = {key.lower(): str(value) for key, value in msg.items()}
    return headers, content


def extract_value_from_header(header: str, param: str) -> Optional[str]:
    """
    Extract parameter value from Content-Disposition header.

    Args:
        header: Header value (e.g., 'form-data; name="field1"; filename="test.txt"')
        param: Parameter name to extract (e.g., 'name', 'filename')

    Returns:
        Parameter value or None
    """
    pattern = rf'(?:^|[;\s]){param}=(?:"([^"]*)"|([^;\s]+))'
    match = re.search(pattern, header, re.IGNORECASE)
    if match:
        return match.group(1) if match.group(1) is not None else match.group(2)
    return None
