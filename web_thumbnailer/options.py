"""Resolution of caller options into a frozen per-request configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Set, Union

from .config import ThumbnailConfig
from .errors import ConfigurationError
from .models import DownloadMode, ResolvedOptions

logger = logging.getLogger("web_thumbnailer")

MAX_WIDTH = "MAX_WIDTH"
MAX_HEIGHT = "MAX_HEIGHT"
DOWNLOAD_MODE = "DOWNLOAD_MODE"
DOWNLOAD_TIMEOUT = "DOWNLOAD_TIMEOUT"
DOWNLOAD_MAX_SIZE = "DOWNLOAD_MAX_SIZE"
NOCACHE = "NOCACHE"
CROP = "CROP"
DEBUG = "DEBUG"
VERBOSE = "VERBOSE"

SIZE_SMALL = "small"
SIZE_MEDIUM = "medium"
SIZE_LARGE = "large"

SizeValue = Union[int, str, None]


@dataclass(frozen=True)
class ThumbnailerDefaults:
    """Instance-level defaults merged under every call's options."""

    max_width: SizeValue = None
    max_height: SizeValue = None
    download_mode: Optional[DownloadMode] = None
    download_timeout: Optional[int] = None
    download_max_size: Optional[int] = None
    no_cache: Optional[bool] = None
    crop: Optional[bool] = None
    debug: Optional[bool] = None
    verbose: Optional[bool] = None

    def as_options(self) -> Dict[str, Any]:
        """Return the set defaults keyed like caller options.

        The download mode is left out: only caller values take part in the
        mode conflict check.
        """
        pairs = {
            MAX_WIDTH: self.max_width,
            MAX_HEIGHT: self.max_height,
            DOWNLOAD_TIMEOUT: self.download_timeout,
            DOWNLOAD_MAX_SIZE: self.download_max_size,
            NOCACHE: self.no_cache,
            CROP: self.crop,
            DEBUG: self.debug,
            VERBOSE: self.verbose,
        }
        return {key: value for key, value in pairs.items() if value is not None}


def build_defaults(
    *,
    max_width: SizeValue = None,
    max_height: SizeValue = None,
    mode: Union[DownloadMode, str, None] = None,
    download_timeout: Optional[int] = None,
    download_max_size: Optional[int] = None,
    no_cache: Optional[bool] = None,
    crop: Optional[bool] = None,
    debug: Optional[bool] = None,
    verbose: Optional[bool] = None,
) -> ThumbnailerDefaults:
    """Build one immutable set of instance defaults."""
    download_mode = None
    if mode is not None:
        try:
            download_mode = DownloadMode(mode.upper() if isinstance(mode, str) else mode)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown download mode: {mode!r}") from exc
    return ThumbnailerDefaults(
        max_width=max_width,
        max_height=max_height,
        download_mode=download_mode,
        download_timeout=download_timeout,
        download_max_size=download_max_size,
        no_cache=no_cache,
        crop=crop,
        debug=debug,
        verbose=verbose,
    )


def _as_mode(value: Any) -> Optional[DownloadMode]:
    if isinstance(value, DownloadMode):
        return value
    if isinstance(value, str) and value in DownloadMode.__members__:
        return DownloadMode[value]
    return None


def collect_modes(options: Mapping[str, Any]) -> Set[DownloadMode]:
    """Return every distinct download mode found among the option values."""
    modes = set()
    for value in options.values():
        mode = _as_mode(value)
        if mode is not None:
            modes.add(mode)
    return modes


def check_options(options: Mapping[str, Any]) -> None:
    """Reject option sets naming more than one download mode."""
    modes = collect_modes(options)
    if len(modes) > 1:
        flags = " ".join(mode.value for mode in DownloadMode)
        raise ConfigurationError(f"Only one of these flags can be set between: {flags}")


def is_meta_size(value: Any, config: ThumbnailConfig) -> bool:
    """Return True when ``value`` names a symbolic size such as ``small``."""
    return isinstance(value, str) and value.lower() in config.sizes


def get_meta_size(value: str, config: ThumbnailConfig) -> int:
    """Resolve a symbolic size into pixels."""
    return int(config.sizes[value.lower()])


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_size(value: Any, config: ThumbnailConfig) -> int:
    """Resolve one dimension; anything that is not a size token or positive int gives 0."""
    if is_meta_size(value, config):
        return get_meta_size(value, config)
    if _is_int(value) and value > 0:
        return value
    return 0


def resolve_options(
    options: Mapping[str, Any],
    config: ThumbnailConfig,
    default_mode: Optional[DownloadMode] = None,
) -> ResolvedOptions:
    """Validate caller options and fill the gaps from configuration.

    ``default_mode`` is the instance-level mode, used only when the caller
    names none.
    """
    check_options(options)

    modes = collect_modes(options)
    if modes:
        download_mode = modes.pop()
    elif default_mode is not None:
        download_mode = default_mode
    else:
        download_mode = config.get("default_download_mode", DownloadMode.DOWNLOAD)

    max_width = resolve_size(options.get(MAX_WIDTH), config)
    max_height = resolve_size(options.get(MAX_HEIGHT), config)
    if max_width == 0 and max_height == 0:
        max_width = config.get("default_max_width", 160)
        max_height = config.get("default_max_height", 160)

    max_size = options.get(DOWNLOAD_MAX_SIZE)
    if not (_is_int(max_size) and max_size > 0):
        max_size = config.get("max_img_dl", 4194304)

    timeout = options.get(DOWNLOAD_TIMEOUT)
    if not (_is_int(timeout) and timeout > 0):
        timeout = config.get("download_timeout", 30)

    resolved = ResolvedOptions(
        download_mode=download_mode,
        max_width=max_width,
        max_height=max_height,
        crop=bool(options.get(CROP, False)),
        no_cache=bool(options.get(NOCACHE, False)),
        download_max_size=max_size,
        download_timeout=timeout,
        debug=options.get(DEBUG) is True,
        verbose=options.get(VERBOSE) is True,
    )
    logger.debug("Resolved options: %s", resolved)
    return resolved
