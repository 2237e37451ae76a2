"""Table-of-contents extraction from raw post bodies"""

import re

from mdpost.core.models import Heading
from mdpost.core.utils.slug import slugify


HEADING_RE = re.compile(r'^#{1,4}\s')
MARKERS_RE = re.compile(r'^#+')


def heading_from_line(line: str) -> Heading | None:
    """Parse one source line as a level 1-4 ATX heading, or return None."""
    if not HEADING_RE.match(line):
        return None
    markers = MARKERS_RE.match(line).group(0)
    text = line[len(markers):].strip()
    return Heading(id=slugify(text), text=text, level=len(markers))


def extract_headings(content: str) -> tuple[Heading, ...]:
    """Return level 1-4 ATX headings in source order.

    Matching is line based and unaware of code fences: a `# comment` line
    inside a fenced block is reported as a heading.
    """
    return tuple(h for line in content.split('\n') if (h := heading_from_line(line)) is not None)
