"""
Naming strategies for IA items.

An item identifier names the bucket, the public page and the metadata
record at once, so it must be unique per upload and URL safe.
"""
import re
import time
from typing import Optional


DEFAULT_PREFIX = 'notebooklm-archive'
MAX_SLUG_LENGTH = 50
DEFAULT_EXTENSION = 'mp3'

_NON_SLUG = re.compile(r'[^a-z0-9]+')
_NON_FILENAME = re.compile(r'[^a-zA-Z0-9.-]')


def slugify(title: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """
    Reduce a title to lowercase letters, digits and single hyphens.

    Args:
        title: Human readable title
        max_length: Maximum slug length

    Returns:
        Slug without leading or trailing hyphens (may be empty)
    """
    slug = _NON_SLUG.sub('-', (title or '').lower()).strip('-')
    # Truncation can expose a hyphen at the cut
    return slug[:max_length].rstrip('-')


def generate_identifier(
    title: str,
    now_ms: Optional[int] = None,
    prefix: str = DEFAULT_PREFIX
) -> str:
    """
    Build a globally unique item identifier from a title.

    Format is ``<prefix>-<slug>-<unix millis>``; with an empty slug it is
    ``<prefix>-<unix millis>``.

    Args:
        title: Item title
        now_ms: Current Unix time in milliseconds (defaults to the clock)
        prefix: Namespace tag

    Returns:
        Identifier matching ``^[a-z0-9-]+$``

    Example:
        >>> generate_identifier("Deep Dive: Episode #1", now_ms=1700000000000)
        'notebooklm-archive-deep-dive-episode-1-1700000000000'
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    parts = [slugify(prefix), slugify(title), str(now_ms)]
    return '-'.join(part for part in parts if part)


def safe_filename(name: str, default_extension: str = DEFAULT_EXTENSION) -> str:
    """
    Make a file name safe for use as an S3 object key.

    Every character outside ``[A-Za-z0-9.-]`` becomes an underscore; the
    original extension is kept.

    Args:
        name: Original file name (directories are ignored)
        default_extension: Extension used when the name has none

    Returns:
        Sanitized file name

    Example:
        >>> safe_filename("My Podcast (final).wav")
        'My_Podcast__final_.wav'
    """
    base = (name or '').replace('\\', '/').rsplit('/', 1)[-1]
    stem, dot, ext = base.rpartition('.')
    if not dot or not stem:
        stem, ext = base, default_extension
    clean_stem = _NON_FILENAME.sub('_', stem) or 'file'
    clean_ext = _NON_FILENAME.sub('_', ext) or default_extension
    return f"{clean_stem}.{clean_ext}"
