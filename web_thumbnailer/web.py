"""HTTP access helpers: redirect resolution and size-bounded downloads."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .config import DEFAULT_USER_AGENT
from .errors import DownloadFailedError, UnreachableThumbnailError
from .models import RedirectedHeaders, WebContent

logger = logging.getLogger("web_thumbnailer")

CHUNK_SIZE = 8192
MAX_REDIRECTS = 10


class WebAccess:
    """Thin wrapper around a requests session with a fixed timeout."""

    def __init__(
        self,
        timeout: float = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.session.max_redirects = MAX_REDIRECTS

    def get_redirected_headers(self, url: str) -> RedirectedHeaders:
        """Follow redirects for ``url`` and report the final status without reading the body."""
        try:
            with self.session.get(
                url, timeout=self.timeout, stream=True, allow_redirects=True
            ) as resp:
                logger.debug(
                    "Resolved %s -> %s (HTTP %s, %d redirect(s))",
                    url,
                    resp.url,
                    resp.status_code,
                    len(resp.history),
                )
                return RedirectedHeaders(
                    status_code=resp.status_code,
                    final_url=resp.url or url,
                    headers=dict(resp.headers),
                )
        except requests.RequestException as exc:
            raise UnreachableThumbnailError(url, url, reason=str(exc)) from exc

    def get_web_content(self, url: str, max_bytes: Optional[int] = None) -> WebContent:
        """Download ``url``, failing if the body would exceed ``max_bytes``."""
        try:
            with self.session.get(
                url, timeout=self.timeout, stream=True, allow_redirects=True
            ) as resp:
                resp.raise_for_status()
                declared = resp.headers.get("Content-Length", "")
                if max_bytes is not None and declared.isdigit() and int(declared) > max_bytes:
                    raise DownloadFailedError(
                        url, f"declared size {declared} exceeds limit of {max_bytes} bytes"
                    )
                buffer = bytearray()
                for chunk in resp.iter_content(CHUNK_SIZE):
                    if not chunk:
                        continue
                    buffer.extend(chunk)
                    if max_bytes is not None and len(buffer) > max_bytes:
                        raise DownloadFailedError(
                            url, f"body exceeds limit of {max_bytes} bytes"
                        )
                logger.debug("Downloaded %d bytes from %s", len(buffer), url)
                return WebContent(
                    data=bytes(buffer),
                    final_url=resp.url or url,
                    content_type=resp.headers.get("Content-Type"),
                )
        except requests.RequestException as exc:
            raise DownloadFailedError(url, str(exc)) from exc
