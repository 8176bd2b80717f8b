"""Mode-driven retrieval: hotlink the discovered image or download and cache it."""

from __future__ import annotations

import logging
from typing import Optional

from .cache import CacheManager
from .config import ThumbnailConfig
from .errors import (
    GenerationFailedError,
    HotlinkNotSupportedError,
    NotFoundError,
    UnreachableThumbnailError,
)
from .finders import Finder, get_finder
from .images import check_requirements, generate_thumbnail
from .models import CacheType, DownloadMode, ResolvedOptions, ServerContext
from .utils import generate_relative_url_from_path
from .web import WebAccess

logger = logging.getLogger("web_thumbnailer")


class Thumbnailer:
    """Resolve one URL into a thumbnail according to ``options.download_mode``.

    - ``HOTLINK_STRICT``: return the discovered URL, fail if hotlinking is forbidden.
    - ``HOTLINK``: return the discovered URL if allowed, download otherwise.
    - ``DOWNLOAD``: download, resize and cache; return the cached file's URL.
    """

    def __init__(
        self,
        url: str,
        options: ResolvedOptions,
        config: ThumbnailConfig,
        server: Optional[ServerContext] = None,
        web_access: Optional[WebAccess] = None,
        finder: Optional[Finder] = None,
    ) -> None:
        self.url = url
        self.options = options
        self.config = config
        self.server = server or ServerContext()
        self.web_access = web_access or WebAccess(
            timeout=options.download_timeout,
            user_agent=config.get("user_agent"),
        )
        self.finder = finder or get_finder(url, options, web_access=self.web_access)
        self.cache = CacheManager(config)

    def get_thumbnail(self) -> str:
        thumb_url = self.finder.find()
        if not thumb_url:
            raise NotFoundError(
                f"No thumbnail could be found for this URL using {self.finder.get_name()} finder."
            )

        mode = self.options.download_mode
        if mode is DownloadMode.HOTLINK_STRICT:
            return self.thumbnail_strict_hotlink(thumb_url)
        if mode is DownloadMode.HOTLINK:
            return self.thumbnail_hotlink(thumb_url)
        return self.thumbnail_download(thumb_url)

    def thumbnail_strict_hotlink(self, thumb_url: str) -> str:
        if not self.finder.is_hotlink_allowed():
            raise HotlinkNotSupportedError("Hotlink is not supported for this URL.")
        return thumb_url

    def thumbnail_hotlink(self, thumb_url: str) -> str:
        if not self.finder.is_hotlink_allowed():
            logger.debug("%s forbids hotlinking; downloading instead", self.finder.get_name())
            return self.thumbnail_download(thumb_url)
        return thumb_url

    def thumbnail_download(self, thumb_url: str) -> str:
        check_requirements(self.cache.root)
        domains = self.finder.get_domains()
        thumb_path = self.cache.get_cache_file_path(
            thumb_url,
            domains,
            CacheType.THUMB,
            self.options.max_width,
            self.options.max_height,
        )

        if not self.options.no_cache and self.cache.is_cache_valid(
            thumb_path, domains, CacheType.THUMB
        ):
            logger.debug("Cache hit for %s at %s", thumb_url, thumb_path)
            return generate_relative_url_from_path(self.server, str(thumb_path))

        redirected = self.web_access.get_redirected_headers(thumb_url)
        if redirected.status_code != 200:
            raise UnreachableThumbnailError(
                thumb_url, redirected.final_url, status_code=redirected.status_code
            )

        content = self.web_access.get_web_content(
            redirected.final_url, self.options.download_max_size
        )

        generate_thumbnail(
            content.data,
            thumb_path,
            self.options.max_width,
            self.options.max_height,
            crop=self.options.crop,
            quality=self.config.get("jpeg_quality", 85),
        )
        if not thumb_path.is_file():
            raise GenerationFailedError(thumb_path)

        logger.info("Cached thumbnail for %s at %s", thumb_url, thumb_path)
        return generate_relative_url_from_path(self.server, str(thumb_path))
