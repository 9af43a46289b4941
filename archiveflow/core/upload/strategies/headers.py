"""
Header strategies for IA-S3 uploads.

Item metadata travels as ``x-archive-meta-*`` request headers. Header
values must fit in a single line of ISO-8859-1, while titles and
descriptions often arrive multiply percent-encoded and full of emoji or
line breaks. The sanitizer normalizes such text; the builder assembles the
complete header set for one upload.
"""
import re
from typing import Dict, Iterable, List, Optional

from ...logging import get_logger
from ...api.auth import ArchiveKeys
from ...api.config import APIConfig
from ..models import ArchiveMetadata


logger = get_logger('archiveflow.upload.headers')

MAX_DECODE_PASSES = 5

_ESCAPE_RUN = re.compile(r'(?:%[0-9A-Fa-f]{2})+')
_LINE_BREAKS = re.compile(r'[\r\n]+')
_NON_LATIN1 = re.compile(r'[^\x00-\xff]')
_WHITESPACE = re.compile(r'\s+')
# CTL characters other than horizontal tab are illegal in field values
_ILLEGAL_HEADER_CHARS = re.compile(r'[\x00-\x08\x0a-\x1f\x7f]')


def _decode_run(run: str) -> str:
    """
    Decode one run of consecutive %XX escapes.

    A run forming valid UTF-8 is decoded as a whole. Otherwise only the
    ASCII escapes are decoded and the rest are kept literally.
    """
    raw = bytes(int(run[i + 1:i + 3], 16) for i in range(0, len(run), 3))
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError:
        pass
    return ''.join(
        chr(byte) if byte < 0x80 else run[i * 3:i * 3 + 3]
        for i, byte in enumerate(raw)
    )


def _decode_pass(text: str) -> str:
    return _ESCAPE_RUN.sub(lambda m: _decode_run(m.group(0)), text)


def _defuse_escapes(text: str) -> str:
    # Escapes still decodable after the last pass lose their percent sign,
    # otherwise a second sanitize() call would peel off another layer.
    def defuse(match) -> str:
        run = match.group(0)
        if _decode_run(run) == run:
            return run
        return run.replace('%', ' ')
    return _ESCAPE_RUN.sub(defuse, text)


def sanitize_header_value(value) -> str:
    """
    Normalize text so it can be sent as one ISO-8859-1 header value.

    Steps, in order:

    1. Percent-decode repeatedly (at most ``MAX_DECODE_PASSES`` passes,
       stopping as soon as a pass changes nothing), e.g. ``%2520`` -> `` ``.
    2. Replace CR/LF runs with a single space (no header injection).
    3. Replace code points above U+00FF with a space.
    4. Collapse whitespace runs to one space and trim.

    The function never raises and is idempotent on its own output.

    Args:
        value: Arbitrary text (None is treated as empty)

    Returns:
        Sanitized header value, possibly empty

    Example:
        >>> sanitize_header_value("a%2520b")
        'a b'
    """
    if not value:
        return ''

    clean = str(value)

    changed = False
    for _ in range(MAX_DECODE_PASSES):
        previous = clean
        clean = _decode_pass(clean)
        changed = clean != previous
        if not changed:
            break
    if changed:
        clean = _defuse_escapes(clean)

    clean = _LINE_BREAKS.sub(' ', clean)
    clean = _NON_LATIN1.sub(' ', clean)
    clean = _WHITESPACE.sub(' ', clean).strip()

    return clean


def is_transmittable(value: str) -> bool:
    """
    Check whether a value can legally be sent as an HTTP header value.

    Args:
        value: Header value

    Returns:
        True if the value is ISO-8859-1 encodable and has no control characters
    """
    try:
        value.encode('latin-1')
    except (UnicodeEncodeError, AttributeError):
        return False
    return _ILLEGAL_HEADER_CHARS.search(value) is None


def clean_tags(tags: Iterable[str]) -> List[str]:
    """Sanitize tags and drop the ones that end up empty."""
    cleaned = (sanitize_header_value(tag) for tag in tags or ())
    return [tag for tag in cleaned if tag]


class ArchiveHeaderBuilder:
    """
    Builds the IA-S3 header set for an upload.

    Responsibilities:
    - LOW authorization header
    - Bucket auto-creation and interactive priority directives
    - Item classification (mediatype, collection)
    - Sanitized title, creator, description and subject headers
    - Dropping any value that still cannot be transmitted
    """

    def __init__(self, config: Optional[APIConfig] = None):
        """
        Initialize header builder.

        Args:
            config: API configuration with mediatype and collection
        """
        self._config = config or APIConfig.default()

    def build(
        self,
        metadata: ArchiveMetadata,
        keys: ArchiveKeys,
        content_length: Optional[int] = None
    ) -> Dict[str, str]:
        """
        Build headers for one upload.

        Args:
            metadata: Item metadata
            keys: Credential pair
            content_length: Payload size when known

        Returns:
            Header mapping ready for the PUT request
        """
        headers = {
            'Authorization': keys.authorization_header,
            'x-archive-auto-make-bucket': '1',
            'x-archive-meta-mediatype': self._config.mediatype,
            'x-archive-meta-collection': self._config.collection,
            'x-archive-meta-title': sanitize_header_value(metadata.title),
            'x-archive-meta-creator': sanitize_header_value(metadata.creator),
            'x-archive-meta-description': sanitize_header_value(metadata.description),
            'x-archive-interactive-priority': '1',
        }

        tags = clean_tags(metadata.tags)
        if tags:
            headers['x-archive-meta-subject'] = ';'.join(tags)

        if content_length is not None:
            headers['Content-Length'] = str(content_length)

        return self.drop_invalid(headers)

    @staticmethod
    def drop_invalid(headers: Dict[str, str]) -> Dict[str, str]:
        """
        Remove headers whose values cannot be transmitted.

        The upload proceeds with best-effort metadata instead of failing.
        """
        valid = {}
        for name, value in headers.items():
            if is_transmittable(value):
                valid[name] = value
            elif name == 'Authorization':
                logger.warning("Dropping header Authorization: value is not transmittable")
            else:
                logger.warning(f"Dropping header {name}: value is not transmittable: {value!r}")
        return valid
