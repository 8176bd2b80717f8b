"""On-disk thumbnail cache: deterministic paths and freshness checks."""

from __future__ import annotations

import hashlib
import logging
import shutil
import time
from pathlib import Path
from typing import Iterable, Optional

from .config import ThumbnailConfig
from .models import CacheType
from .utils import slugify

logger = logging.getLogger("web_thumbnailer")


class CacheManager:
    """Maps thumbnail requests to files under ``config.cache_dir``.

    Layout: ``<cache_dir>/<type>/<domain-slug>/<sha1(url)><w>x<h>.jpg``.
    """

    def __init__(self, config: ThumbnailConfig) -> None:
        self.config = config

    @property
    def root(self) -> Path:
        return Path(self.config.cache_dir).resolve()

    def _domain_folder(self, domains: Iterable[str]) -> str:
        return slugify("-".join(sorted(domains)), fallback="default")

    def get_cache_file_path(
        self,
        url: str,
        domains: Iterable[str],
        cache_type: CacheType,
        width: int,
        height: int,
    ) -> Path:
        """Return the cache file for this request. Pure: no filesystem access."""
        digest = hashlib.sha1(url.encode("utf-8")).hexdigest()
        filename = f"{digest}{width}x{height}.jpg"
        return self.root / cache_type.value / self._domain_folder(domains) / filename

    def is_cache_valid(
        self,
        path: Path,
        domains: Iterable[str],
        cache_type: CacheType,
    ) -> bool:
        """Return True when ``path`` exists and has not outlived ``cache_duration``."""
        expected_dir = self.root / cache_type.value / self._domain_folder(domains)
        if path.parent != expected_dir or not path.is_file():
            return False
        duration = self.config.get("cache_duration", -1)
        if duration < 0:
            return True
        age = time.time() - path.stat().st_mtime
        return age < duration

    def purge(self, cache_type: Optional[CacheType] = None) -> int:
        """Delete cached files of one type, or all types; returns the number removed."""
        targets = [cache_type] if cache_type else list(CacheType)
        removed = 0
        for target in targets:
            folder = self.root / target.value
            if not folder.is_dir():
                continue
            removed += sum(1 for item in folder.rglob("*") if item.is_file())
            shutil.rmtree(folder)
            logger.info("Purged %s cache at %s", target.value, folder)
        return removed
