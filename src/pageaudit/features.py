"""
Structural facts extracted from a parsed page: title, markup version,
heading counts and login-form presence.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from bs4 import BeautifulSoup, Doctype, NavigableString

from pageaudit.models import MarkupVersion

HEADING_LEVELS = range(1, 7)


@dataclass(slots=True)
class PageFeatures:
    """Everything the feature pass derives from one document tree."""
    title: str = ""
    markup_version: MarkupVersion = MarkupVersion.UNKNOWN
    headings: Dict[int, int] = field(default_factory=dict)
    has_login_form: bool = False


def extract_title(soup: BeautifulSoup) -> str:
    """Return the text of the first <title> element, or "" if there is none."""
    tag = soup.find("title")
    if tag is None or not tag.contents:
        return ""
    first = tag.contents[0]
    if isinstance(first, NavigableString):
        return str(first)
    return ""


def determine_markup_version(soup: BeautifulSoup) -> MarkupVersion:
    """
    Classify the document by its doctype declaration.

    Any doctype that mentions "html" counts as HTML5, including legacy
    HTML 4 public identifiers. No doctype means Unknown.
    """
    doctype = next((node for node in soup.descendants if isinstance(node, Doctype)), None)
    if doctype is not None and "html" in str(doctype).lower():
        return MarkupVersion.HTML5
    return MarkupVersion.UNKNOWN


def count_heading(soup: BeautifulSoup, tag: str) -> int:
    """Count elements whose tag name is exactly `tag`."""
    return len(soup.find_all(tag))


def count_headings(soup: BeautifulSoup) -> Dict[int, int]:
    """Return {level: count} for h1..h6."""
    return {level: count_heading(soup, f"h{level}") for level in HEADING_LEVELS}


def has_login_form(soup: BeautifulSoup) -> bool:
    """True if any <input> has type="password" (exact, case-sensitive)."""
    return any(tag.get("type") == "password" for tag in soup.find_all("input"))


def extract_features(soup: BeautifulSoup) -> PageFeatures:
    return PageFeatures(
        title=extract_title(soup),
        markup_version=determine_markup_version(soup),
        headings=count_headings(soup),
        has_login_form=has_login_form(soup),
    )
