"""Description text rendering.

RAML descriptions are Markdown. Renderers take the raw text (or ``None``)
and return HTML (or ``None`` when there is nothing to render).
"""

from typing import Callable

import markdown

Renderer = Callable[[str | None], str | None]


def markdown_to_html(text: str | None) -> str | None:
    if not text:
        return None
    return markdown.markdown(text)


def plain_text(text: str | None) -> str | None:
    return text or None
