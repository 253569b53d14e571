"""
Tunable limits for a page analysis.
"""
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; PageAuditBot/1.0)"


@dataclass(slots=True)
class AnalyzerConfig:
    """
    Timeouts and caps used by the analyzer and the link prober.

    Attributes:
        fetch_timeout: Seconds allowed for fetching the target page.
        probe_timeout: Seconds allowed for each HEAD/GET link probe.
        max_checked_links: How many extracted links are probed per page.
        max_redirects: Redirect hops followed before giving up.
        probe_workers: Concurrent probes per analysis.
        user_agent: User-Agent header sent with every request.
    """
    fetch_timeout: float = 10.0
    probe_timeout: float = 5.0
    max_checked_links: int = 10
    max_redirects: int = 10
    probe_workers: int = 5
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.fetch_timeout <= 0 or self.probe_timeout <= 0:
            raise ValueError("Timeouts must be positive")
        if self.max_checked_links < 0:
            raise ValueError("max_checked_links cannot be negative")
        if self.max_redirects < 0:
            raise ValueError("max_redirects cannot be negative")
        if self.probe_workers < 1:
            raise ValueError("probe_workers must be at least 1")
