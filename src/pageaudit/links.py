"""
Link extraction: resolve, deduplicate and categorize the anchors of a page.
"""
from __future__ import annotations

import logging
from typing import Optional, Set
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from pageaudit.errors import TargetURLError
from pageaudit.models import LinkSet, Target

logger = logging.getLogger(__name__)

# href prefixes that never point at another document
SKIP_PREFIXES = ("#", "javascript:")


def parse_target(url: str) -> Target:
    """
    Parse the target URL into the parts used for link resolution.

    Raises:
        TargetURLError: If the URL cannot be parsed or has no scheme or host.
    """
    try:
        parsed = urlparse(url)
        parsed.port  # raises ValueError for a malformed port
    except ValueError as exc:
        raise TargetURLError(f"Invalid target URL: {url}") from exc

    host = parsed.netloc.rpartition("@")[2]
    if not parsed.scheme or not host:
        raise TargetURLError(f"Invalid target URL: {url}")

    return Target(url=url, scheme=parsed.scheme, host=host, path=parsed.path)


def resolve_link(href: str, target: Target) -> str:
    """
    Resolve `href` against the target URL.

    Values already starting with "http" are returned unchanged. When
    resolution fails the literal value is kept.
    """
    if href.startswith("http"):
        return href
    try:
        return urljoin(target.url, href)
    except ValueError:
        logger.debug("Could not resolve %r against %s", href, target.url)
        return href


def is_internal(link: str, target: Target) -> bool:
    """A link is internal when it contains the target host anywhere."""
    return target.host in link


def _should_skip(href: Optional[str]) -> bool:
    return not href or href.startswith(SKIP_PREFIXES)


def extract_links(soup: BeautifulSoup, target: Target) -> LinkSet:
    """
    Collect every <a href> in document order.

    Links are deduplicated on their resolved form, keeping the first
    occurrence, and split into internal and external lists.
    """
    links = LinkSet()
    seen: Set[str] = set()

    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href")
        if _should_skip(href):
            continue

        resolved = resolve_link(href, target)
        if resolved in seen:
            continue
        seen.add(resolved)

        links.all.append(resolved)
        if is_internal(resolved, target):
            links.internal.append(resolved)
        else:
            links.external.append(resolved)

    logger.debug(
        "Extracted %d links from %s (%d internal, %d external)",
        len(links.all), target.url, len(links.internal), len(links.external),
    )
    return links
