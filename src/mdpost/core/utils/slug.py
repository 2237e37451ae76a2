"""Heading identifiers compatible with GitHub-style anchors"""

import re


_STRIP_RE = re.compile(r'[^\w\- ]', re.UNICODE)


def slugify(text: str) -> str:
    """Lowercase text, drop punctuation and turn each space into a hyphen.

    Runs of spaces are not collapsed, so `"a  b"` becomes `"a--b"`, matching
    the anchors GitHub generates for the same heading. Identical headings
    produce identical identifiers.
    """
    text = _STRIP_RE.sub('', text.strip().lower())
    return text.replace(' ', '-')
