"""
HTML building and escaping helpers for formcheck.
"""

import re
from typing import Any, Callable, Dict, Optional

from markupsafe import escape


def escape_html(text: Any) -> str:
    """
    Escape HTML special characters.

    Values wrapped in markupsafe.Markup are trusted and returned unchanged.
    """
    if text is None:
        return ''
    return str(escape(text))


def escape_attr(text: Any) -> str:
    """Escape HTML attribute values."""
    # markupsafe escapes both quote styles, so text and attribute escaping agree
    return escape_html(text)


def build_tag(tag: str, attrs: Dict[str, Optional[Any]],
              escape: Callable[[Any], str] = escape_attr) -> str:
    """
    Build an HTML opening tag with attributes.

    Args:
        tag: Tag name
        attrs: Dictionary of attributes (value=None for boolean attributes,
            value=False to omit the attribute)
        escape: Function used to escape attribute values

    Returns:
        HTML tag string
    """
    attr_parts = []
    for key, value in attrs.items():
        if value is False:
            continue
        if value is None or value is True:
            # Boolean attribute
            attr_parts.append(key)
        else:
            attr_parts.append(f'{key}="{escape(value)}"')

    attr_str = ' ' + ' '.join(attr_parts) if attr_parts else ''
    return f'<{tag}{attr_str}>'


def wrap_html_fragment(html: str, title: Optional[str] = None, text: Optional[str] = None,
                       escape: Callable[[Any], str] = escape_html) -> str:
    """
    Wrap HTML fragment in a complete HTML document if needed.

    Args:
        html: HTML content (fragment or complete document)
        title: Optional page title
        text: Optional instructional text
        escape: Function used to escape title and text

    Returns:
        Complete HTML document
    """
    if re.search(r'<!DOCTYPE|<html', html, re.IGNORECASE):
        return html

    title_tag = f'<title>{escape(title)}</title>' if title else '<title>Form</title>'
    heading = f'<h1>{escape(title)}</h1>' if title else ''
    text_block = f'<p>{escape(text)}</p>' if text else ''

    return f'''<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    {title_tag}
    <style>
        body {{
            font-family: system-ui, -apple-system, sans-serif;
            max-width: 600px;
            margin: 40px auto;
            padding: 20px;
            line-height: 1.6;
        }}
        form {{
            background: #f5f5f5;
            padding: 20px;
            border-radius: 8px;
        }}
        label {{
            display: block;
            margin: 15px 0 5px;
            font-weight: 500;
        }}
        input[type="checkbox"] + label {{
            display: inline;
        }}
        ul.validation-failed {{
            color: #dc3545;
            margin: 4px 0;
        }}
        input[type="submit"] {{
            background: #007bff;
            color: white;
            padding: 10px 20px;
            border: none;
            border-radius: 4px;
            cursor: pointer;
            margin-top: 10px;
        }}
    </style>
</head>
<body>
    {heading}
    {text_block}
    {html}
</body>
</html>'''
