"""MCP server exposing the thumbnail lookup as a tool."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from .config import ThumbnailConfig
from .facade import WebThumbnailer
from .models import DownloadMode
from .options import CROP, DOWNLOAD_MODE, MAX_HEIGHT, MAX_WIDTH

logger = logging.getLogger("web_thumbnailer.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="web-thumbnailer")


def _tool_options(
    mode: str,
    width: Optional[int],
    height: Optional[int],
    crop: bool,
) -> Dict[str, Any]:
    options: Dict[str, Any] = {DOWNLOAD_MODE: DownloadMode(mode.upper()), CROP: crop}
    if width:
        options[MAX_WIDTH] = width
    if height:
        options[MAX_HEIGHT] = height
    return options


@mcp.tool()
def thumbnail(
    url: str,
    mode: str = "hotlink",
    width: Optional[int] = None,
    height: Optional[int] = None,
    crop: bool = False,
) -> str:
    """Find a representative thumbnail for a web page and return its URL."""

    thumbnailer = WebThumbnailer(config=ThumbnailConfig.from_env())
    result = thumbnailer.thumbnail(url, _tool_options(mode, width, height, crop))
    if result is False:
        raise RuntimeError(f"No thumbnail could be produced for {url}")
    return result


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
