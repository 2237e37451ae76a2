"""Post discovery, frontmatter extraction, and slug derivation"""

import re
from pathlib import Path
from typing import Any

import yaml

from mdpost.core.exceptions import DiscoveryError, FrontmatterError


FRONTMATTER_RE = re.compile(r'^---[ \t\r]*\n(.*?)^---[ \t\r]*(?:\n|\Z)', re.DOTALL | re.MULTILINE)


def _strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def parse_frontmatter(text: str, source: str | Path | None = None) -> tuple[dict[str, Any], str]:
    """Split text into (frontmatter, body), raising FrontmatterError that names source."""
    try:
        return _strip_frontmatter(text)
    except ValueError as e:
        where = f" in {source}" if source is not None else ""
        raise FrontmatterError(f"{e}{where}", {"path": str(source) if source else None}) from e


def discover_post_paths(root: Path, entry_filename: str) -> list[Path]:
    """Return every root/<dir>/<entry_filename>, in file-system enumeration order."""
    if not root.is_dir():
        raise DiscoveryError(f"Content root is not a directory: {root}", {"path": str(root)})
    try:
        return [p for p in root.glob(f"*/{entry_filename}") if p.is_file()]
    except (OSError, ValueError) as e:
        raise DiscoveryError(f"Failed to enumerate posts under {root}: {e}", {"path": str(root)}) from e


def slug_from_path(path: Path, root: Path, entry_filename: str) -> str:
    """Strip the content root prefix and the /<entry_filename> suffix from path."""
    rel = path.relative_to(root).as_posix()
    suffix = f"/{entry_filename}"
    return rel[:-len(suffix)] if rel.endswith(suffix) else rel
