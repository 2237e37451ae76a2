"""Exceptions raised while loading and compiling posts."""


class PostError(Exception):
    """Base exception for all mdpost errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PostNotFoundError(PostError):
    """Raised when a slug has no entry document."""

    pass


class FrontmatterError(PostError):
    """Raised when a front matter block is malformed."""

    pass


class CompileError(PostError):
    """Raised when the document compiler rejects a post body."""

    pass


class DiscoveryError(PostError):
    """Raised when post locations cannot be enumerated."""

    pass


class PostReadError(PostError):
    """Raised when a post file cannot be decoded as UTF-8."""

    pass
