"""Path normalisation and relative reference resolution."""

import re
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def normalize_slashes(value: Optional[str]) -> str:
    """Convert backslashes to forward slashes."""
    return (value or "").replace("\\", "/")


def normalize_directory_label(value: Optional[str]) -> str:
    return normalize_slashes(value).strip()


def is_absolute_url(value: Optional[str]) -> bool:
    return bool(value) and bool(_ABSOLUTE_URL.match(value.strip()))


def resolve_relative(base_directory: Optional[str], reference: Optional[str]) -> Optional[str]:
    """
    Resolve a relative reference (material library, texture) against a directory.

    Absolute URLs are returned unchanged. ``.`` and empty segments are
    ignored and ``..`` pops a segment; popping past the root is a no-op.

    Args:
        base_directory: Slash-separated dataset directory (may be empty)
        reference: Relative path or absolute URL

    Returns:
        Resolved dataset path, the URL itself, or None for a blank reference
    """
    if not reference:
        return None
    trimmed = reference.strip()
    if not trimmed:
        return None
    if _ABSOLUTE_URL.match(trimmed):
        return trimmed

    relative = normalize_slashes(trimmed)
    if relative.startswith("/"):
        relative = relative[1:]

    base = normalize_slashes(base_directory)
    stack = [segment for segment in base.split("/") if segment] if base else []
    for segment in relative.split("/"):
        if not segment or segment == ".":
            continue
        if segment == "..":
            if stack:
                stack.pop()
        else:
            stack.append(segment)
    return "/".join(stack)


def derive_directory(url: Optional[str]) -> str:
    """
    Return the directory URL hosting a resource, with a trailing slash.

    Query and fragment are discarded. Unparseable or relative input
    yields an empty string.
    """
    if not url:
        return ""
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return ""
    if not parts.scheme or not parts.netloc:
        return ""

    segments = parts.path.split("/")
    if len(segments) > 1:
        segments.pop()
    path = "/".join(segments)
    if not path.endswith("/"):
        path = f"{path}/"
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))
