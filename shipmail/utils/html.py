"""
HTML to plain text conversion for email bodies.
"""

import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")


def html_to_text(html: str) -> str:
    """
    Strip markup from an HTML email body.

    Script, style and head elements are removed, entities are decoded by
    the parser and whitespace is collapsed. Nothing is executed.

    Args:
        html: Raw HTML body

    Returns:
        Plain text, or an empty string for empty input
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for tag in soup.find_all(["script", "style", "head"]):
        tag.decompose()

    text = soup.get_text(separator=" ")
    return _WHITESPACE.sub(" ", text).strip()
