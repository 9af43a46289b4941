"""Naming and header strategies for IA-S3 uploads."""
from .naming import generate_identifier, safe_filename, slugify
from .headers import (
    ArchiveHeaderBuilder,
    sanitize_header_value,
    is_transmittable,
    clean_tags,
)

__all__ = [
    'generate_identifier',
    'safe_filename',
    'slugify',
    'ArchiveHeaderBuilder',
    'sanitize_header_value',
    'is_transmittable',
    'clean_tags',
]
