"""Colour themes for code highlighting, loaded once from TextMate-style JSON files.

A theme file follows the VS Code theme layout:

    {"name": "...", "type": "light", "colors": {"editor.background": "#fff"},
     "tokenColors": [{"scope": "comment", "settings": {"foreground": "#6e7781",
                                                        "fontStyle": "italic"}}]}

Scopes are mapped onto Pygments token types so the highlighter can reuse
Pygments' own style inheritance (`Style.style_for_token`).
"""

import json
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Any

from pygments.style import Style
from pygments.token import (
    Comment, Error, Generic, Keyword, Name, Number, Operator, Punctuation, String, Text, Token,
)

from mdpost.config import Settings


# Longest matching scope prefix wins.
SCOPE_TOKENS: dict[str, Any] = {
    'comment':                      Comment,
    'string':                       String,
    'string.regexp':                String.Regex,
    'constant':                     Name.Constant,
    'constant.numeric':             Number,
    'constant.language':            Keyword.Constant,
    'constant.character.escape':    String.Escape,
    'keyword':                      Keyword,
    'keyword.operator':             Operator,
    'storage':                      Keyword.Declaration,
    'storage.type':                 Keyword.Type,
    'storage.modifier':             Keyword.Declaration,
    'entity.name.function':         Name.Function,
    'entity.name.type':             Name.Class,
    'entity.name.class':            Name.Class,
    'entity.name.tag':              Name.Tag,
    'entity.name.namespace':        Name.Namespace,
    'entity.other.attribute-name':  Name.Attribute,
    'entity.other.inherited-class': Name.Class,
    'support.function':             Name.Builtin,
    'support.type':                 Name.Builtin,
    'support.class':                Name.Class,
    'support.constant':             Name.Constant,
    'variable':                     Name.Variable,
    'variable.language':            Name.Builtin.Pseudo,
    'variable.parameter':           Name.Variable,
    'meta.decorator':               Name.Decorator,
    'punctuation':                  Punctuation,
    'invalid':                      Error,
    'markup.heading':               Generic.Heading,
    'markup.bold':                  Generic.Strong,
    'markup.italic':                Generic.Emph,
    'markup.inserted':              Generic.Inserted,
    'markup.deleted':               Generic.Deleted,
}


def _color(value: str | None) -> str | None:
    """Normalise '#rrggbbaa' / '#rgb' to the '#rrggbb' form Pygments accepts."""
    if not value or not value.startswith('#'):
        return None
    hexpart = value[1:]
    if len(hexpart) in (3, 4):
        hexpart = ''.join(c * 2 for c in hexpart[:3])
    return f"#{hexpart[:6]}" if len(hexpart) >= 6 else None


def _token_for_scope(scope: str):
    parts = scope.strip().split('.')
    for n in range(len(parts), 0, -1):
        token = SCOPE_TOKENS.get('.'.join(parts[:n]))
        if token is not None:
            return token
    return None


def _style_string(settings: dict[str, Any]) -> str:
    bits = []
    if color := _color(settings.get('foreground')):
        bits.append(color)
    font = (settings.get('fontStyle') or '').split()
    for flag in ('bold', 'italic', 'underline'):
        if flag in font:
            bits.append(flag)
    return ' '.join(bits)


@dataclass(frozen=True)
class Theme:
    """One parsed colour theme."""
    name:       str
    kind:       str                 # 'light' | 'dark'
    background: str
    foreground: str
    styles:     tuple               # ((token_type, style_string), ...) in file order

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_name: str = '') -> 'Theme':
        colors = data.get('colors') or {}
        kind = data.get('type', 'light')
        styles = []
        for rule in data.get('tokenColors') or []:
            scopes = rule.get('scope') or []
            if isinstance(scopes, str):
                scopes = scopes.split(',')
            style = _style_string(rule.get('settings') or {})
            if not style:
                continue
            for scope in scopes:
                token = _token_for_scope(scope)
                if token is not None:
                    styles.append((token, style))
        return cls(
            name=data.get('name') or default_name,
            kind=kind,
            background=_color(colors.get('editor.background')) or ('#ffffff' if kind == 'light' else '#0d1117'),
            foreground=_color(colors.get('editor.foreground')) or ('#24292f' if kind == 'light' else '#c9d1d9'),
            styles=tuple(styles),
        )

    @cached_property
    def pygments_style(self) -> type[Style]:
        """Pygments Style class, built once per theme; later rules override earlier ones."""
        styles = {Token: self.foreground, Text: self.foreground}
        for token, style in self.styles:
            styles[token] = style
        return type(f"{self.name or self.kind}Style".replace(' ', ''), (Style,), {
            'background_color': self.background,
            'styles': styles,
        })


@dataclass(frozen=True)
class ThemeConfig:
    """The light and dark themes handed to the document compiler."""
    light: Theme
    dark:  Theme

    def items(self) -> tuple[tuple[str, Theme], ...]:
        return (('light', self.light), ('dark', self.dark))


def load_theme(path: Path) -> Theme:
    """Read one JSON theme file."""
    data = json.loads(path.read_text(encoding='utf-8'))
    return Theme.from_dict(data, default_name=path.stem)


def load_themes(settings: Settings) -> ThemeConfig:
    """Load the configured light and dark themes."""
    return ThemeConfig(
        light=load_theme(Path(settings.light_theme)),
        dark=load_theme(Path(settings.dark_theme)),
    )
