"""Data models used throughout the thumbnail pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional


class DownloadMode(str, Enum):
    """How a discovered thumbnail is served."""

    DOWNLOAD = "DOWNLOAD"
    HOTLINK = "HOTLINK"
    HOTLINK_STRICT = "HOTLINK_STRICT"


class CacheType(str, Enum):
    """Namespaces inside the cache directory."""

    THUMB = "thumb"


@dataclass(frozen=True)
class ResolvedOptions:
    """Validated per-request settings; never mutated once built."""

    download_mode: DownloadMode
    max_width: int
    max_height: int
    crop: bool
    no_cache: bool
    download_max_size: int
    download_timeout: int
    debug: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class ServerContext:
    """Serving-root information used to turn cache paths into URLs."""

    document_root: Optional[str] = None
    context_document_root: Optional[str] = None
    script_name: Optional[str] = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "ServerContext":
        """Build from a CGI/WSGI style environment mapping."""
        return cls(
            document_root=environ.get("DOCUMENT_ROOT"),
            context_document_root=environ.get("CONTEXT_DOCUMENT_ROOT"),
            script_name=environ.get("SCRIPT_NAME"),
        )


@dataclass
class RedirectedHeaders:
    """Final response metadata after following redirects."""

    status_code: int
    final_url: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class WebContent:
    """Body fetched from a URL, bounded by a byte cap."""

    data: bytes
    final_url: str
    content_type: Optional[str] = None
