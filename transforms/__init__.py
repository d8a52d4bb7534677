"""Copy-on-write document transforms."""
from transforms import convert, metadata, overlay, pages, security

__all__ = ["convert", "metadata", "overlay", "pages", "security"]
