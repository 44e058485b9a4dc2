"""Parsing and formatting of dotted configuration key paths."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from govmocks.core.exceptions import InvalidKeyPathError

KeyPath = tuple[str, ...]

SEPARATOR = "."
_SEGMENT_RE = re.compile(r"[A-Za-z0-9_-]+")


def parse_key_path(raw: str | Sequence[str]) -> KeyPath:
    """Return the segments of a dotted key path or a sequence of segments.

    Raises:
        InvalidKeyPathError: If the path is empty or a segment is malformed.

    """
    segments = raw.strip().split(SEPARATOR) if isinstance(raw, str) else list(raw)
    if not segments or segments == [""]:
        msg = "Key path must not be empty"
        raise InvalidKeyPathError(msg)

    for segment in segments:
        if not isinstance(segment, str) or not _SEGMENT_RE.fullmatch(segment):
            msg = f"Invalid key path segment {segment!r} in {format_key_path(map(str, segments))!r}"
            raise InvalidKeyPathError(msg)
    return tuple(segments)


def format_key_path(path: Iterable[str]) -> str:
    return SEPARATOR.join(path)


def is_prefix(prefix: KeyPath, path: KeyPath) -> bool:
    return len(prefix) <= len(path) and path[: len(prefix)] == prefix
