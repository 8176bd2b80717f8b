"""Finders turn an arbitrary URL into the URL of a representative image."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Protocol
from urllib.parse import urljoin

from .errors import DownloadFailedError
from .images import is_image_extension, looks_like_image
from .models import ResolvedOptions
from .utils import get_domain, get_url_file_extension
from .web import WebAccess

logger = logging.getLogger("web_thumbnailer")

# OpenGraph image tag, matched without an HTML parser:
#   "<meta" [any attributes] "property=" [' or "] "og:image" (' or " or whitespace)
#   [anything but ">"] "content=" [' or "] URL
# URL ends at the first quote, whitespace or ">". Case-insensitive.
OG_IMAGE_PATTERN = re.compile(
    r"""<meta\b[^>]*?\bproperty=["']?og:image["'\s][^>]*?\bcontent=["']?([^"'\s>]+)""",
    re.IGNORECASE,
)


class Finder(Protocol):
    """Capability surface every finder variant exposes."""

    def find(self) -> Optional[str]:
        ...

    def is_hotlink_allowed(self) -> bool:
        ...

    def get_domains(self) -> FrozenSet[str]:
        ...

    def get_name(self) -> str:
        ...


FinderFactory = Callable[..., Finder]


def extract_og_image(content: str) -> Optional[str]:
    """Return the first OpenGraph image URL declared in ``content``."""
    match = OG_IMAGE_PATTERN.search(content)
    if match:
        return match.group(1)
    return None


class DefaultFinder:
    """Finder used when no domain has a dedicated one.

    Returns the URL itself when it is an image (by extension, then by
    content), otherwise the page's OpenGraph image.
    """

    def __init__(
        self,
        domain: str,
        url: str,
        rules: Optional[Mapping[str, Any]],
        options: ResolvedOptions,
        web_access: Optional[WebAccess] = None,
    ) -> None:
        self.domain = domain
        self.url = url
        self.options = options
        self.web_access = web_access or WebAccess(timeout=options.download_timeout)

    def find(self) -> Optional[str]:
        if is_image_extension(get_url_file_extension(self.url)):
            return self.url

        try:
            content = self.web_access.get_web_content(self.url, self.options.download_max_size)
        except DownloadFailedError as exc:
            logger.warning("Could not fetch %s: %s", self.url, exc)
            return None
        if looks_like_image(content.data):
            return self.url

        text = content.data.decode("utf-8", errors="replace")
        og_image = extract_og_image(text)
        if og_image:
            try:
                og_image = urljoin(content.final_url or self.url, og_image)
            except ValueError:
                logger.debug("Ignoring malformed og:image %s", og_image)
                return None
            # Extension check, e.g. to reject GIF.
            if is_image_extension(get_url_file_extension(og_image)):
                return og_image
            logger.debug("Ignoring og:image %s: unsupported extension", og_image)
        return None

    def is_hotlink_allowed(self) -> bool:
        return True

    def get_domains(self) -> FrozenSet[str]:
        return frozenset([self.domain])

    def get_name(self) -> str:
        return "default"


@dataclass(frozen=True)
class FinderRegistration:
    """A finder factory bound to the rules it is constructed with."""

    factory: FinderFactory
    rules: Optional[Mapping[str, Any]] = None


_REGISTRY: Dict[str, FinderRegistration] = {}


def register_finder(
    domains: Iterable[str],
    factory: FinderFactory,
    rules: Optional[Mapping[str, Any]] = None,
) -> None:
    """Route requests for ``domains`` (and their subdomains) to ``factory``."""
    registration = FinderRegistration(factory=factory, rules=rules)
    for domain in domains:
        _REGISTRY[domain.lower()] = registration


def unregister_finder(domains: Iterable[str]) -> None:
    for domain in domains:
        _REGISTRY.pop(domain.lower(), None)


def lookup_finder(domain: str) -> Optional[FinderRegistration]:
    """Return the registration for ``domain``, trying parent domains too."""
    parts = domain.split(".")
    for index in range(len(parts) - 1):
        candidate = ".".join(parts[index:])
        if candidate in _REGISTRY:
            return _REGISTRY[candidate]
    return _REGISTRY.get(domain)


def get_finder(
    url: str,
    options: ResolvedOptions,
    web_access: Optional[WebAccess] = None,
) -> Finder:
    """Build the finder responsible for ``url``."""
    domain = get_domain(url)
    registration = lookup_finder(domain)
    if registration is None:
        finder: Finder = DefaultFinder(domain, url, None, options, web_access=web_access)
    else:
        finder = registration.factory(domain, url, registration.rules, options, web_access=web_access)
    logger.debug("Using %s finder for %s", finder.get_name(), url)
    return finder
