"""Document compiler: MDX-style post source -> CompiledDocument

Compilation runs in four steps:

1. front matter is split off the source;
2. top-level ESM blocks (paragraphs starting with `import` / `export`) are
   lifted out of the markdown;
3. every imported specifier is resolved and local modules are read and
   scanned recursively, each tagged with a loader chosen by extension;
4. the remaining markdown is rendered with markdown-it, fenced code going
   through the themed highlighter.
"""

import json
import os
import re
from pathlib import Path
from typing import Optional

import structlog
from markdown_it import MarkdownIt

from mdpost.config import Settings
from mdpost.core.exceptions import CompileError
from mdpost.core.headings import heading_from_line
from mdpost.core.highlight import render_code_block
from mdpost.core.models import BundledModule, CompiledDocument
from mdpost.core.parse import parse_frontmatter
from mdpost.core.theme import ThemeConfig
from mdpost.core.utils.slug import slugify

logger = structlog.get_logger(__name__)


DEFAULT_LOADERS: dict[str, str] = {
    '.js':   'js',
    '.mjs':  'js',
    '.cjs':  'js',
    '.jsx':  'jsx',
    '.ts':   'ts',
    '.tsx':  'tsx',
    '.mdx':  'mdx',
    '.md':   'mdx',
    '.json': 'json',
    '.css':  'css',
}
SCRIPT_LOADERS = {'js', 'jsx', 'ts', 'tsx'}
RESOLVE_EXTENSIONS = ('.tsx', '.ts', '.jsx', '.js', '.mdx', '.md', '.css', '.json')

FENCE_RE = re.compile(r'^ {0,3}(`{3,}|~{3,})')
ESM_START_RE = re.compile(r'^(?:import|export)\b')
STATEMENT_SPLIT_RE = re.compile(r'^(?=import\b|export\b)', re.MULTILINE)
IMPORT_RE = re.compile(r'''^import\s+(?:[\w$*{}\s,]+?\s+from\s+)?(['"])([^'"]+)\1\s*;?\s*$''')
SCRIPT_IMPORT_RE = re.compile(
    r'''(?:\bfrom\s*|\bimport\s*\(?\s*|\brequire\s*\(\s*)(['"])([^'"\n]+)\1'''
)


def split_esm(body: str, source: str = '') -> tuple[str, list[str], list[str]]:
    """Lift top-level ESM blocks out of body.

    Returns (markdown, import_specifiers, export_statements). Blocks inside
    code fences are left alone. A malformed import raises CompileError.
    """
    md_lines: list[str] = []
    blocks: list[list[str]] = []
    fence: Optional[str] = None
    in_esm = False

    for line in body.split('\n'):
        if in_esm:
            if line.strip():
                blocks[-1].append(line)
                continue
            in_esm = False
        if m := FENCE_RE.match(line):
            marker = m.group(1)[0]
            if fence is None:
                fence = marker
            elif marker == fence:
                fence = None
        elif fence is None and ESM_START_RE.match(line):
            blocks.append([line])
            in_esm = True
            continue
        md_lines.append(line)

    imports: list[str] = []
    exports: list[str] = []
    for block in blocks:
        for stmt in STATEMENT_SPLIT_RE.split('\n'.join(block)):
            stmt = stmt.strip()
            if not stmt:
                continue
            if stmt.startswith('export'):
                exports.append(stmt)
                continue
            m = IMPORT_RE.match(stmt)
            if m is None:
                raise CompileError(
                    f"Malformed import statement in {source}: {stmt.splitlines()[0]}",
                    {"path": source, "statement": stmt},
                )
            imports.append(m.group(2))
    return '\n'.join(md_lines), imports, exports


def _is_relative(specifier: str) -> bool:
    return specifier.startswith(('./', '../', '/')) or specifier in ('.', '..')


class TsconfigPaths:
    """`compilerOptions.baseUrl` + `paths` aliases from a tsconfig file."""

    def __init__(self, base_url: Path, paths: dict[str, list[str]]):
        self.base_url = base_url
        self.paths = paths

    @classmethod
    def load(cls, path: Path) -> 'TsconfigPaths':
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            raise CompileError(f"Cannot read tsconfig {path}: {e}", {"path": str(path)}) from e
        options = data.get('compilerOptions') or {}
        base_url = path.parent / options.get('baseUrl', '.')
        return cls(base_url, options.get('paths') or {})

    def candidates(self, specifier: str) -> list[Path]:
        """Return target paths for specifier; empty when no alias matches."""
        found = []
        for pattern, targets in self.paths.items():
            prefix, star, suffix = pattern.partition('*')
            if star:
                if not (specifier.startswith(prefix) and specifier.endswith(suffix)
                        and len(specifier) >= len(prefix) + len(suffix)):
                    continue
                matched = specifier[len(prefix):len(specifier) - len(suffix)]
                found.extend(self.base_url / t.replace('*', matched) for t in targets)
            elif specifier == pattern:
                found.extend(self.base_url / t for t in targets)
        return found


class DocumentCompiler:
    """Compile post sources with a fixed theme, loader map, and parser preset."""

    def __init__(
        self,
        themes: ThemeConfig,
        loaders: dict[str, str] | None = None,
        parser_config: str = 'gfm-like',
        tsconfig: Path | None = None,
        ):
        self.themes = themes
        self.loaders = {**DEFAULT_LOADERS, **(loaders or {})}
        self.parser_config = parser_config
        self.tsconfig = TsconfigPaths.load(tsconfig) if tsconfig else None

    # --- markdown ---

    def _make_parser(self) -> MarkdownIt:
        md = MarkdownIt(self.parser_config, options_update={"linkify": False, "html": True})
        themes = self.themes

        def render_fence(renderer, tokens, idx, options, env):
            info = tokens[idx].info.strip()
            lang, _, meta = info.partition(' ')
            return render_code_block(tokens[idx].content.rstrip('\n'), lang, meta, themes) + '\n'

        def render_heading_open(renderer, tokens, idx, options, env):
            # Anchor ids come from the source line so they match extract_headings
            heading = None
            if tokens[idx].map and tokens[idx].map[0] < len(env.get('lines', ())):
                heading = heading_from_line(env['lines'][tokens[idx].map[0]])
            tokens[idx].attrSet('id', heading.id if heading else slugify(tokens[idx + 1].content))
            return renderer.renderToken(tokens, idx, options, env)

        md.add_render_rule('fence', render_fence)
        md.add_render_rule('heading_open', render_heading_open)
        return md

    def render_markdown(self, markdown: str) -> str:
        return self._make_parser().render(markdown, {'lines': markdown.split('\n')})

    # --- bundling ---

    def _loader_for(self, path: Path, specifier: str, importer: str) -> str:
        loader = self.loaders.get(path.suffix.lower())
        if loader is None:
            raise CompileError(
                f"No loader is configured for \"{path.suffix}\" files: {specifier} (imported by {importer})",
                {"path": importer, "specifier": specifier},
            )
        return loader

    def _resolve_file(self, base: Path) -> Optional[Path]:
        if base.is_file():
            return base
        for ext in RESOLVE_EXTENSIONS:
            candidate = base.with_name(base.name + ext)
            if candidate.is_file():
                return candidate
        for ext in RESOLVE_EXTENSIONS:
            candidate = base / f"index{ext}"
            if candidate.is_file():
                return candidate
        return None

    def resolve(self, specifier: str, importer_dir: Path, importer: str) -> Optional[Path]:
        """Return the file for specifier, or None when it is a bare external."""
        if _is_relative(specifier):
            bases = [importer_dir / specifier]
        elif self.tsconfig and (aliased := self.tsconfig.candidates(specifier)):
            bases = aliased
        else:
            return None
        for base in bases:
            if (found := self._resolve_file(base)) is not None:
                return found.resolve()
        raise CompileError(
            f"Could not resolve \"{specifier}\" (imported by {importer})",
            {"path": importer, "specifier": specifier},
        )

    def _scan(self, source: str, loader: str, path: str) -> list[str]:
        if loader in SCRIPT_LOADERS:
            return [m.group(2) for m in SCRIPT_IMPORT_RE.finditer(source)]
        if loader == 'mdx':
            _, body = parse_frontmatter(source, path)
            return split_esm(body, path)[1]
        return []

    def bundle(self, imports: list[str], cwd: Path, entry: str) -> tuple[dict[str, BundledModule], tuple[str, ...]]:
        """Read every local module reachable from imports. Returns (modules, externals)."""
        modules: dict[str, BundledModule] = {}
        externals: list[str] = []
        seen: set[Path] = set()
        pending: list[tuple[str, Path, str]] = [(spec, cwd, entry) for spec in imports]

        while pending:
            specifier, importer_dir, importer = pending.pop(0)
            path = self.resolve(specifier, importer_dir, importer)
            if path is None:
                if specifier not in externals:
                    externals.append(specifier)
                continue
            if path in seen:
                continue
            seen.add(path)
            loader = self._loader_for(path, specifier, importer)
            try:
                source = path.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                raise CompileError(f"Cannot read {path}: {e}", {"path": str(path), "specifier": specifier}) from e
            key = Path(os.path.relpath(path, cwd.resolve())).as_posix()
            modules[key] = BundledModule(path=key, loader=loader, source=source)
            logger.debug("compiler.module_bundled", module=key, loader=loader)
            pending.extend((spec, path.parent, str(path)) for spec in self._scan(source, loader, str(path)))
        return modules, tuple(externals)

    # --- entry point ---

    def compile(self, source: str, cwd: Path, filename: str = 'index.mdx') -> CompiledDocument:
        """Compile raw post source; relative imports resolve against cwd."""
        entry = str(cwd / filename)
        frontmatter, body = parse_frontmatter(source, entry)
        markdown, imports, exports = split_esm(body, entry)
        modules, externals = self.bundle(imports, cwd, entry)
        html = self.render_markdown(markdown)
        logger.debug(
            "compiler.compiled", path=entry, modules=len(modules), externals=len(externals),
        )
        return CompiledDocument(
            html=html,
            frontmatter=frontmatter,
            modules=modules,
            externals=externals,
            exports=tuple(exports),
        )


def compiler_from_settings(settings: Settings, themes: ThemeConfig) -> DocumentCompiler:
    """Build a DocumentCompiler from Settings fields."""
    return DocumentCompiler(
        themes,
        loaders=settings.loaders,
        parser_config=settings.parser_config,
        tsconfig=Path(settings.tsconfig) if settings.tsconfig else None,
    )
