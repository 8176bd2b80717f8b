"""Public entry point: one call, one thumbnail URL or ``False``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Optional, Union

from .config import ThumbnailConfig
from .errors import WebThumbnailerError
from .models import ServerContext
from .options import DEBUG, VERBOSE, ThumbnailerDefaults, resolve_options
from .thumbnailer import Thumbnailer
from .web import WebAccess

logger = logging.getLogger("web_thumbnailer")

ThumbnailResult = Union[str, Literal[False]]


@dataclass(frozen=True)
class FailurePolicy:
    """What the facade does with a caught pipeline failure."""

    debug: bool = False
    verbose: bool = False

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "FailurePolicy":
        return cls(debug=options.get(DEBUG) is True, verbose=options.get(VERBOSE) is True)

    def handle(self, error: WebThumbnailerError) -> Literal[False]:
        """Log and/or re-raise ``error``; otherwise return ``False``."""
        if self.verbose:
            logger.error("%s", error)
        if self.debug:
            raise error
        return False


class WebThumbnailer:
    """Find, and optionally download and resize, a thumbnail for any URL.

    ``defaults`` apply to every call and are overridden by per-call options.
    """

    def __init__(
        self,
        defaults: Optional[ThumbnailerDefaults] = None,
        config: Optional[ThumbnailConfig] = None,
        server: Optional[ServerContext] = None,
        web_access: Optional[WebAccess] = None,
    ) -> None:
        self.defaults = defaults or ThumbnailerDefaults()
        self.config = config or ThumbnailConfig.from_env()
        self.server = server or ServerContext()
        self.web_access = web_access

    def merge_options(self, options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        merged = self.defaults.as_options()
        merged.update(options or {})
        return merged

    def thumbnail(self, url: str, options: Optional[Mapping[str, Any]] = None) -> ThumbnailResult:
        """Return the thumbnail URL for ``url``, or ``False`` if none could be produced.

        Failures propagate only with ``DEBUG=True``; a missing runtime
        requirement always propagates.
        """
        url = (url or "").strip()
        if not url:
            return False

        merged = self.merge_options(options)
        policy = FailurePolicy.from_options(merged)
        try:
            resolved = resolve_options(merged, self.config, default_mode=self.defaults.download_mode)
            thumbnailer = Thumbnailer(
                url,
                resolved,
                self.config,
                server=self.server,
                web_access=self.web_access,
            )
            return thumbnailer.get_thumbnail()
        except WebThumbnailerError as exc:
            return policy.handle(exc)


def thumbnail(
    url: str,
    options: Optional[Mapping[str, Any]] = None,
    *,
    config: Optional[ThumbnailConfig] = None,
    server: Optional[ServerContext] = None,
) -> ThumbnailResult:
    """Shortcut for ``WebThumbnailer(config=config, server=server).thumbnail(url, options)``."""
    return WebThumbnailer(config=config, server=server).thumbnail(url, options)
