# tests/conftest.py
import io
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

import pytest
from PIL import Image

from web_thumbnailer.config import ThumbnailConfig
from web_thumbnailer.errors import DownloadFailedError
from web_thumbnailer.models import DownloadMode, RedirectedHeaders, ResolvedOptions, WebContent


def make_image_bytes(width: int = 400, height: int = 200, fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


# --- Stubs for collaborators ---
class FakeWebAccess:
    """Offline stand-in for WebAccess; records every call."""

    def __init__(self) -> None:
        self.pages: Dict[str, Union[WebContent, Exception]] = {}
        self.redirects: Dict[str, RedirectedHeaders] = {}
        self.content_calls: List[Tuple[str, Optional[int]]] = []
        self.header_calls: List[str] = []

    def add_page(self, url: str, data: bytes, content_type: Optional[str] = None, final_url: Optional[str] = None) -> None:
        self.pages[url] = WebContent(data=data, final_url=final_url or url, content_type=content_type)

    def add_html(self, url: str, html: str) -> None:
        self.add_page(url, html.encode("utf-8"), "text/html; charset=utf-8")

    def add_image(self, url: str, width: int = 400, height: int = 200) -> None:
        self.add_page(url, make_image_bytes(width, height), "image/jpeg")

    def get_redirected_headers(self, url: str) -> RedirectedHeaders:
        self.header_calls.append(url)
        return self.redirects.get(url, RedirectedHeaders(status_code=200, final_url=url))

    def get_web_content(self, url: str, max_bytes: Optional[int] = None) -> WebContent:
        self.content_calls.append((url, max_bytes))
        page = self.pages.get(url)
        if page is None:
            raise DownloadFailedError(url, "no such page")
        if isinstance(page, Exception):
            raise page
        return page


class FakeFinder:
    def __init__(
        self,
        thumb_url: Optional[str] = "https://cdn.example.com/thumb.jpg",
        hotlink_allowed: bool = True,
        domains: FrozenSet[str] = frozenset({"example.com"}),
    ) -> None:
        self.thumb_url = thumb_url
        self.hotlink_allowed = hotlink_allowed
        self.domains = domains

    def find(self) -> Optional[str]:
        return self.thumb_url

    def is_hotlink_allowed(self) -> bool:
        return self.hotlink_allowed

    def get_domains(self) -> FrozenSet[str]:
        return self.domains

    def get_name(self) -> str:
        return "fake"


@pytest.fixture
def fake_web() -> FakeWebAccess:
    return FakeWebAccess()


@pytest.fixture
def config(tmp_path) -> ThumbnailConfig:
    return ThumbnailConfig(cache_dir=tmp_path / "cache")


@pytest.fixture
def make_options():
    def _make(**overrides) -> ResolvedOptions:
        values = dict(
            download_mode=DownloadMode.DOWNLOAD,
            max_width=160,
            max_height=160,
            crop=False,
            no_cache=False,
            download_max_size=4 * 1024 * 1024,
            download_timeout=30,
        )
        values.update(overrides)
        return ResolvedOptions(**values)

    return _make
