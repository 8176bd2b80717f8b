"""Exception types raised by the thumbnail pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class WebThumbnailerError(Exception):
    """Base class for failures the facade converts to ``False``."""


class ConfigurationError(WebThumbnailerError):
    """Caller options are contradictory or unusable."""


class NotFoundError(WebThumbnailerError):
    """The finder could not locate any thumbnail for the URL."""


class HotlinkNotSupportedError(WebThumbnailerError):
    """Strict hotlink mode was requested for a domain that forbids it."""


class UnreachableThumbnailError(WebThumbnailerError):
    """The thumbnail URL did not answer with HTTP 200 after redirects."""

    def __init__(
        self,
        url: str,
        final_url: str,
        status_code: Optional[int] = None,
        reason: str = "",
    ) -> None:
        self.url = url
        self.final_url = final_url
        self.status_code = status_code
        status = f"HTTP {status_code}" if status_code is not None else reason or "no response"
        super().__init__(
            f"Unreachable thumbnail URL ({status}).\n"
            f" - Original thumbnail URL: {url}\n"
            f" - Redirected thumbnail URL: {final_url}"
        )


class DownloadFailedError(WebThumbnailerError):
    """Transfer failed or exceeded the configured byte cap."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"Couldn't download the thumbnail at {url}: {reason}")


class NotAnImageError(WebThumbnailerError):
    """Downloaded content could not be decoded as an image."""


class GenerationFailedError(WebThumbnailerError):
    """Resizing reported success but no file exists at the cache path."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Thumbnail was not generated at {path}")


class RequirementMissingError(Exception):
    """The runtime lacks a capability the pipeline needs.

    Not a :class:`WebThumbnailerError`: the facade never swallows it.
    """
