"""Utility helpers for string normalization, URLs and path handling."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

from .errors import NotFoundError
from .models import ServerContext

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
EXTENSION_PATTERN = re.compile(r"\.(\w+)$")
SCRIPT_DIR_PATTERN = re.compile(r"/?(.+/)\w+\.\w+$")


def slugify(value: str, fallback: str = "page") -> str:
    """Generate a filesystem-friendly slug using ASCII characters only."""
    normalized = value.encode("ascii", "ignore").decode("ascii")
    normalized = normalized.lower()
    normalized = SLUG_PATTERN.sub("-", normalized).strip("-")
    return normalized or fallback


def get_domain(url: str) -> str:
    """Return the lower-cased host of ``url``, assuming http when no scheme is given."""
    try:
        if not urlparse(url).scheme:
            url = "http://" + url
        return (urlparse(url).hostname or "").lower()
    except ValueError as exc:
        raise NotFoundError(f"Malformed URL {url!r}: {exc}") from exc


def get_url_file_extension(url: str) -> str:
    """Return the lower-cased file extension of the URL path, or an empty string.

    Unparseable URLs have no extension.
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return ""
    match = EXTENSION_PATTERN.search(path)
    if match:
        return match.group(1).lower()
    return ""


def _strip_root(path: str, root: Optional[str]) -> str:
    if not root:
        return path
    prefix = root.rstrip("/") + "/"
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def generate_relative_url_from_path(server: ServerContext, path: str) -> str:
    """Turn an absolute local path into a URL relative to the serving root.

    Example::

        /var/www/html/site/assets/t.jpg  ->  site/assets/t.jpg

    The document root is stripped first (``CONTEXT_DOCUMENT_ROOT`` wins over
    ``DOCUMENT_ROOT``), then the directory of the invoking script.
    """
    if server.context_document_root is not None:
        path = _strip_root(path, server.context_document_root)
    elif server.document_root is not None:
        path = _strip_root(path, server.document_root)

    if server.script_name:
        match = SCRIPT_DIR_PATTERN.match(server.script_name)
        if match and path.startswith(match.group(1)):
            path = path[len(match.group(1)):]
    return path
