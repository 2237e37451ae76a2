"""Unit tests for core/parse.py"""

import pytest

from mdpost.core.exceptions import DiscoveryError, FrontmatterError
from mdpost.core.parse import (
    _strip_frontmatter,
    discover_post_paths,
    parse_frontmatter,
    slug_from_path,
)


def test_strip_frontmatter_with_yaml():
    """_strip_frontmatter extracts YAML header and returns body."""
    text = "---\ntitle: Hello\n---\n# Body\n"
    fm, body = _strip_frontmatter(text)
    assert fm == {"title": "Hello"}
    assert body == "# Body\n"


def test_strip_frontmatter_no_frontmatter():
    """_strip_frontmatter returns empty dict and full text when no header."""
    text = "# No frontmatter\n"
    fm, body = _strip_frontmatter(text)
    assert fm == {}
    assert body == text


def test_strip_frontmatter_header_only():
    """A file holding only front matter has an empty body."""
    fm, body = _strip_frontmatter("---\ntitle: Only\n---")
    assert fm == {"title": "Only"}
    assert body == ""


def test_strip_frontmatter_empty_block():
    """An empty header block is removed and yields no front matter."""
    fm, body = _strip_frontmatter("---\n---\n# Body\n")
    assert fm == {}
    assert body == "# Body\n"


def test_parse_frontmatter_keeps_arbitrary_values():
    """Front matter is schema-free: nested values pass through untouched."""
    fm, _ = parse_frontmatter("---\ntags:\n  - a\n  - b\nmeta:\n  draft: true\n---\nBody\n")
    assert fm == {"tags": ["a", "b"], "meta": {"draft": True}}


def test_parse_frontmatter_invalid_yaml_names_source():
    """Malformed YAML raises FrontmatterError carrying the path."""
    with pytest.raises(FrontmatterError, match="broken/index.mdx") as exc:
        parse_frontmatter("---\ntitle: [unclosed\n---\nBody\n", "content/broken/index.mdx")
    assert exc.value.details["path"] == "content/broken/index.mdx"


def test_parse_frontmatter_non_mapping():
    """A YAML list header is rejected."""
    with pytest.raises(FrontmatterError, match="expected a mapping"):
        parse_frontmatter("---\n- a\n- b\n---\nBody\n")


def test_discover_post_paths_two_levels(content_root, write_post):
    """Only root/<dir>/<entry> matches; deeper or shallower files are ignored."""
    a = write_post("alpha", "# A")
    b = write_post("beta", "# B")
    write_post("gamma/nested", "# too deep")
    (content_root / "index.mdx").write_text("# at root")
    write_post("delta", "# other name", filename="README.mdx")
    assert sorted(discover_post_paths(content_root, "index.mdx")) == sorted([a, b])


def test_discover_post_paths_empty_root(content_root):
    """An empty content root yields no paths."""
    assert discover_post_paths(content_root, "index.mdx") == []


def test_discover_post_paths_missing_root(tmp_path):
    """A missing content root raises DiscoveryError."""
    with pytest.raises(DiscoveryError, match="not a directory"):
        discover_post_paths(tmp_path / "nope", "index.mdx")


def test_slug_from_path(content_root):
    """The root prefix and /<entry> suffix are removed."""
    path = content_root / "hello-world" / "index.mdx"
    assert slug_from_path(path, content_root, "index.mdx") == "hello-world"
