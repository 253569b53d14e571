"""
Result records and run-scoped data structures.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple


class MarkupVersion(str, Enum):
    """Coarse markup version signal derived from the doctype."""
    HTML5 = "HTML5"
    UNKNOWN = "Unknown"


@dataclass(frozen=True, slots=True)
class BrokenLink:
    """A probed link that turned out to be unreachable or invalid."""
    url: str
    status_code: int
    error_message: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "url": self.url,
            "status_code": self.status_code,
            "error_message": self.error_message,
        }


@dataclass(frozen=True, slots=True)
class Target:
    """The page under analysis: its URL plus the parts used for resolution."""
    url: str
    scheme: str
    host: str
    path: str


@dataclass(slots=True)
class LinkSet:
    """Distinct absolute links in first-seen order, split by category."""
    internal: List[str] = field(default_factory=list)
    external: List[str] = field(default_factory=list)
    all: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Structural facts about one analyzed page."""
    title: str
    markup_version: MarkupVersion
    h1_count: int = 0
    h2_count: int = 0
    h3_count: int = 0
    h4_count: int = 0
    h5_count: int = 0
    h6_count: int = 0
    internal_link_count: int = 0
    external_link_count: int = 0
    has_login_form: bool = False
    broken_links: Tuple[BrokenLink, ...] = field(default=(), repr=False)

    @property
    def broken_link_count(self) -> int:
        return len(self.broken_links)

    def to_dict(self) -> Dict[str, object]:
        """Serialize to the flat JSON shape consumers store."""
        return {
            "title": self.title,
            "html_version": self.markup_version.value,
            "h1_count": self.h1_count,
            "h2_count": self.h2_count,
            "h3_count": self.h3_count,
            "h4_count": self.h4_count,
            "h5_count": self.h5_count,
            "h6_count": self.h6_count,
            "internal_links": self.internal_link_count,
            "external_links": self.external_link_count,
            "broken_links": self.broken_link_count,
            "has_login_form": self.has_login_form,
        }
