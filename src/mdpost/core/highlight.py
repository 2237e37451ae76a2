"""Fenced code rendering: Pygments tokens -> themed line nodes -> HTML

Every source line becomes a `LineNode` with class `line`. Lines selected in
the fence meta (```` ```js {1,3-4} ````) go through `mark_highlighted`, which
returns a new node rather than editing the original.
"""

import re
from dataclasses import dataclass, replace
from html import escape

from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.style import Style
from pygments.util import ClassNotFound

from mdpost.core.theme import ThemeConfig


RANGES_RE = re.compile(r'\{([\d,\s-]+)\}')
TITLE_RE = re.compile(r'title=(?:"([^"]*)"|\'([^\']*)\')')

LINE_CLASS = 'line'
HIGHLIGHTED_CLASS = 'highlighted'


@dataclass(frozen=True)
class Span:
    text:  str
    style: str = ''


@dataclass(frozen=True)
class LineNode:
    children:    tuple[Span, ...]
    class_names: tuple[str, ...] = (LINE_CLASS,)
    attributes:  tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class FenceMeta:
    highlight_lines: frozenset = frozenset()
    title:           str | None = None


def parse_meta(meta: str) -> FenceMeta:
    """Read `{1,3-5}` line ranges and an optional title="..." from fence meta."""
    lines: set[int] = set()
    for group in RANGES_RE.findall(meta or ''):
        for part in group.split(','):
            part = part.strip()
            if not part:
                continue
            if '-' in part:
                start, _, end = part.partition('-')
                if start.strip().isdigit() and end.strip().isdigit():
                    lines.update(range(int(start), int(end) + 1))
            elif part.isdigit():
                lines.add(int(part))
    title = None
    if m := TITLE_RE.search(meta or ''):
        title = m.group(1) if m.group(1) is not None else m.group(2)
    return FenceMeta(highlight_lines=frozenset(lines), title=title)


def mark_highlighted(node: LineNode) -> LineNode:
    """Return a copy of node carrying the highlighted-line class and data attribute."""
    if HIGHLIGHTED_CLASS in node.class_names:
        return node
    return replace(
        node,
        class_names=node.class_names + (HIGHLIGHTED_CLASS,),
        attributes=node.attributes + (('data-highlighted-line', ''),),
    )


def _lexer(lang: str):
    if not lang:
        return TextLexer(stripnl=False)
    try:
        return get_lexer_by_name(lang, stripnl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False)


def _css(style_def: dict) -> str:
    rules = []
    if style_def.get('color'):
        rules.append(f"color:#{style_def['color']}")
    if style_def.get('bgcolor'):
        rules.append(f"background-color:#{style_def['bgcolor']}")
    if style_def.get('bold'):
        rules.append('font-weight:bold')
    if style_def.get('italic'):
        rules.append('font-style:italic')
    if style_def.get('underline'):
        rules.append('text-decoration:underline')
    return ';'.join(rules)


def tokenize_lines(code: str, lang: str, style: type[Style]) -> list[LineNode]:
    """Split highlighted tokens into one LineNode per source line."""
    lines: list[list[Span]] = [[]]
    for ttype, value in _lexer(lang).get_tokens(code):
        while not style.styles_token(ttype) and ttype.parent is not None:
            ttype = ttype.parent
        css = _css(style.style_for_token(ttype))
        for i, chunk in enumerate(value.split('\n')):
            if i:
                lines.append([])
            if chunk:
                lines[-1].append(Span(text=chunk, style=css))
    # Pygments always ends the stream with a newline
    if len(lines) > 1 and not lines[-1]:
        lines.pop()
    return [LineNode(children=tuple(spans)) for spans in lines]


def apply_highlights(lines: list[LineNode], meta: FenceMeta) -> list[LineNode]:
    """Mark 1-based line numbers listed in meta."""
    return [
        mark_highlighted(node) if i in meta.highlight_lines else node
        for i, node in enumerate(lines, start=1)
    ]


def render_line(node: LineNode) -> str:
    attrs = ''.join(f' {k}="{escape(v)}"' for k, v in node.attributes)
    spans = ''.join(
        f'<span style="{s.style}">{escape(s.text)}</span>' if s.style else escape(s.text)
        for s in node.children
    )
    return f'<span class="{" ".join(node.class_names)}"{attrs}>{spans}</span>'


def render_code_block(code: str, lang: str, meta: str, themes: ThemeConfig) -> str:
    """Render one fenced block once per theme inside a pretty-code fragment."""
    fence = parse_meta(meta)
    language = lang or 'plaintext'
    parts = ['<div data-rehype-pretty-code-fragment="">']
    for key, theme in themes.items():
        if fence.title:
            parts.append(
                f'<div data-rehype-pretty-code-title="" data-language="{escape(language)}" '
                f'data-theme="{key}">{escape(fence.title)}</div>'
            )
        lines = apply_highlights(tokenize_lines(code, lang, theme.pygments_style), fence)
        body = '\n'.join(render_line(node) for node in lines)
        parts.append(
            f'<pre style="background-color:{theme.background}" data-language="{escape(language)}" '
            f'data-theme="{key}"><code data-language="{escape(language)}" data-theme="{key}" '
            f'style="display:grid">{body}</code></pre>'
        )
    parts.append('</div>')
    return ''.join(parts)
