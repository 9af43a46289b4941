"""
Item metadata generation.

The workflow asks a generator for a first draft of an item's title,
description and subjects as soon as a file is selected. Generators may be
slow (a remote model, for instance), so the protocol is async.
"""
import re
from enum import Enum
from pathlib import Path
from typing import List, Protocol, Tuple

from .logging import get_logger
from .upload.models import ArchiveMetadata


logger = get_logger('archiveflow.metadata')

_URL_PATTERN = re.compile(r'https?://[^\s]+')
_NOTEBOOK_HOSTS = ('notebooklm.google', 'docs.google.com')

DEFAULT_TAGS: Tuple[str, ...] = ('podcast', 'NotebookLM', 'AI audio overview')


class ContextLinkStatus(Enum):
    """Kind of links found in the free-form upload context."""
    NONE = 'none'
    VALID = 'valid'
    NOTEBOOK = 'notebook'


def find_links(context: str) -> List[str]:
    """Return every http(s) URL in the context, in order."""
    return _URL_PATTERN.findall(context or '')


def classify_context(context: str) -> ContextLinkStatus:
    """
    Classify the links in the upload context.

    Args:
        context: Free text the user supplied with the file

    Returns:
        NOTEBOOK when the text contains a URL and mentions a notebook
        host, VALID for any other URL, NONE otherwise
    """
    if not context or not find_links(context):
        return ContextLinkStatus.NONE
    if any(host in context for host in _NOTEBOOK_HOSTS):
        return ContextLinkStatus.NOTEBOOK
    return ContextLinkStatus.VALID


class MetadataGenerator(Protocol):
    """Produces draft metadata for a selected file."""

    async def generate(self, filename: str, context: str = '') -> ArchiveMetadata:
        """
        Generate metadata.

        Args:
            filename: Name of the selected file
            context: Free text supplied by the user (links, notes)

        Returns:
            Draft metadata
        """
        ...


class FilenameMetadataGenerator:
    """
    Derives metadata from the file name and the context links.

    Example:
        >>> gen = FilenameMetadataGenerator()
        >>> meta = await gen.generate("deep_dive-episode_3.mp3")
        >>> meta.title
        'Deep Dive Episode 3'
    """

    def __init__(self, creator: str = 'NotebookLM', tags: Tuple[str, ...] = DEFAULT_TAGS):
        self.creator = creator
        self.tags = tags

    @staticmethod
    def title_from_filename(filename: str) -> str:
        """Turn 'my_file-name.mp3' into 'My File Name'."""
        stem = Path(filename).stem if filename else ''
        words = re.split(r'[\s_\-.]+', stem)
        return ' '.join(w[:1].upper() + w[1:] for w in words if w)

    async def generate(self, filename: str, context: str = '') -> ArchiveMetadata:
        title = self.title_from_filename(filename) or 'Untitled audio'

        links = find_links(context)
        lines = [f"{title}, an audio overview published with ArchiveFlow."]
        if links:
            lines.append('')
            lines.append('Sources:')
            lines.extend(links)

        logger.debug(f"Generated metadata for {filename} ({len(links)} source links)")
        return ArchiveMetadata(
            title=title,
            description='\n'.join(lines),
            tags=self.tags,
            creator=self.creator
        )
