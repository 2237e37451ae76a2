"""Post and catalog loading over the read-only content tree"""

import asyncio
from pathlib import Path

import structlog

from mdpost.config import Settings
from mdpost.core.compiler import DocumentCompiler, compiler_from_settings
from mdpost.core.exceptions import FrontmatterError, PostNotFoundError, PostReadError
from mdpost.core.headings import extract_headings
from mdpost.core.models import Post, PostMetadata
from mdpost.core.parse import discover_post_paths, parse_frontmatter, slug_from_path
from mdpost.core.theme import ThemeConfig

logger = structlog.get_logger(__name__)


class PostLoader:
    """Load single posts (compiled) and the post catalog (front matter only).

    Holds only immutable configuration; every call re-reads the source tree.
    """

    def __init__(self, settings: Settings, themes: ThemeConfig, compiler: DocumentCompiler | None = None):
        self.root = Path(settings.content_root)
        self.entry_filename = settings.entry_filename
        self.compiler = compiler or compiler_from_settings(settings, themes)

    def post_dir(self, slug: str) -> Path:
        """Resolve slug to its directory under the content root."""
        if not slug or not slug.strip('/'):
            raise PostNotFoundError("Empty post slug", {"slug": slug})
        folder = self.root / slug
        # Only direct children of the root are posts, matching list_posts
        if folder.resolve().parent != self.root.resolve():
            raise PostNotFoundError(f"Not a post directory under the content root: {slug}", {"slug": slug})
        return folder

    async def load_post(self, slug: str) -> Post:
        """Read, compile and return the post stored under content_root/slug."""
        log = logger.bind(slug=slug)
        folder = self.post_dir(slug)
        path = folder / self.entry_filename
        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise PostNotFoundError(f"No post found for slug '{slug}' at {path}", {"slug": slug, "path": str(path)}) from e
        try:
            source = raw.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise PostReadError(f"{path} is not valid UTF-8: {e}", {"slug": slug, "path": str(path)}) from e

        headings = extract_headings(source)
        compiled = await asyncio.to_thread(self.compiler.compile, source, folder, self.entry_filename)
        log.debug("post.loaded", headings=len(headings), modules=len(compiled.modules))
        return Post(
            compiled_body=compiled,
            frontmatter=compiled.frontmatter,
            slug=slug,
            headings=headings,
        )

    async def _read_metadata(self, path: Path) -> PostMetadata:
        raw = await asyncio.to_thread(path.read_bytes)
        try:
            text = raw.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise FrontmatterError(f"{path} is not valid UTF-8: {e}", {"path": str(path)}) from e
        frontmatter, _ = parse_frontmatter(text, path)
        return PostMetadata(
            frontmatter=frontmatter,
            slug=slug_from_path(path, self.root, self.entry_filename),
        )

    async def list_posts(self) -> list[PostMetadata]:
        """Front matter for every discovered post, in enumeration order.

        Reads run concurrently and the first failure propagates: one malformed
        post fails the whole listing.
        """
        paths = await asyncio.to_thread(discover_post_paths, self.root, self.entry_filename)
        posts = await asyncio.gather(*(self._read_metadata(p) for p in paths))
        logger.debug("catalog.listed", root=str(self.root), posts=len(posts))
        return list(posts)
