"""Data models for loaded posts, catalog entries, and compiled documents"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Heading(BaseModel):
    """A markdown heading (levels 1-4) found in a post body."""
    model_config = ConfigDict(frozen=True)

    id:    str
    text:  str
    level: int = Field(ge=1, le=4)


class BundledModule(BaseModel):
    """A local module imported by a post body, read from disk at compile time."""
    model_config = ConfigDict(frozen=True)

    path:   str     # relative to the post directory, posix separators
    loader: str     # parse mode chosen from the file extension, e.g. 'jsx'
    source: str


class CompiledDocument(BaseModel):
    """Renderable output of the document compiler."""
    model_config = ConfigDict(frozen=True)

    html:        str
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    modules:     dict[str, BundledModule] = Field(default_factory=dict)
    externals:   tuple[str, ...] = ()      # bare specifiers provided by the host page
    exports:     tuple[str, ...] = ()      # raw `export` statements from the body


class Post(BaseModel):
    """A fully loaded post: compiled body plus metadata and table of contents."""
    model_config = ConfigDict(frozen=True)

    compiled_body: CompiledDocument
    frontmatter:   dict[str, Any] = Field(default_factory=dict)
    slug:          str
    headings:      tuple[Heading, ...] = ()


class PostMetadata(BaseModel):
    """Lightweight catalog entry; no compiled body or headings."""
    model_config = ConfigDict(frozen=True)

    frontmatter: dict[str, Any] = Field(default_factory=dict)
    slug:        str
