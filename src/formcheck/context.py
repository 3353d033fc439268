"""
Render context passed to every field when a form is rendered.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

from .i18n import Translator
from .markup import escape_html


@dataclass(frozen=True)
class RenderContext:
    """
    Collaborators used while rendering.

    Attributes:
        escape: HTML-escaping function applied to labels, values and messages
        translate: Lookup applied to labels and messages before escaping
    """
    escape: Callable[[Any], str] = escape_html
    translate: Callable[[str], str] = field(default_factory=Translator)
