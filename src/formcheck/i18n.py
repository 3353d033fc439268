"""
Translation of labels and messages for formcheck.

Placeholder arguments follow two conventions:
  - @name: value is HTML escaped before insertion
  - !name (or any other key): value is inserted as is, use for text that is
    already sanitized
"""

import gettext
import re
from typing import Any, Callable, Mapping, Optional, Sequence

from markupsafe import Markup

from .markup import escape_html


class Translator:
    """Translate strings through gettext and substitute placeholder arguments."""

    def __init__(self, enabled: bool = False, domain: str = 'formcheck',
                 localedir: Optional[str] = None, languages: Optional[Sequence[str]] = None,
                 escape: Callable[[Any], str] = escape_html):
        """
        Initialize translator.

        Args:
            enabled: Look strings up in the gettext catalog (default: False)
            domain: gettext domain (catalog file name without .mo)
            localedir: Directory holding <lang>/LC_MESSAGES/<domain>.mo
            languages: Preferred languages (None = from environment)
            escape: Function used for @-arguments
        """
        self.enabled = enabled
        self.escape = escape
        if enabled:
            self._catalog = gettext.translation(domain, localedir, languages=languages,
                                                fallback=True)
        else:
            self._catalog = gettext.NullTranslations()

    def __call__(self, text: str, args: Optional[Mapping[str, Any]] = None) -> str:
        trusted = isinstance(text, Markup)
        if self.enabled:
            text = self._catalog.gettext(text)

        if args:
            text = substitute(text, {
                key: self.escape(value) if key.startswith('@') else str(value)
                for key, value in args.items()
            })

        if trusted and not isinstance(text, Markup):
            text = Markup(text)
        return text


def substitute(text: str, replacements: Mapping[str, str]) -> str:
    """
    Replace keys in text, longest key first, without rescanning replaced parts.

    Args:
        text: Source string
        replacements: Mapping of placeholder -> replacement

    Returns:
        String with placeholders replaced
    """
    keys = [key for key in replacements if key]
    if not keys:
        return text
    keys.sort(key=len, reverse=True)
    pattern = re.compile('|'.join(re.escape(key) for key in keys))
    return pattern.sub(lambda match: replacements[match.group(0)], text)
