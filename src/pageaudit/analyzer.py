"""
Single-page analysis: fetch, parse, extract features and links, probe a
capped prefix of the links, and assemble the result.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from pageaudit.config import AnalyzerConfig
from pageaudit.errors import FetchError, ParseError
from pageaudit.features import extract_features
from pageaudit.links import extract_links, parse_target
from pageaudit.models import AnalysisResult, BrokenLink, Target
from pageaudit.prober import LinkProber
from pageaudit.transport import Deadline, read_body, run_within, send

logger = logging.getLogger(__name__)


def parse_html(body: bytes) -> BeautifulSoup:
    """Parse raw page bytes with lxml, raising ParseError on failure."""
    try:
        return BeautifulSoup(body, "lxml")
    except Exception as exc:
        raise ParseError(f"Failed to parse HTML: {exc}") from exc


class PageAnalyzer:
    """
    Runs the analysis pipeline for one target URL at a time.

    The analyzer holds only read-only configuration, so one instance may
    serve concurrent analyses of different URLs.
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        session: Optional[requests.Session] = None,
        prober: Optional[LinkProber] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self._session = session
        self.prober = prober or LinkProber(self.config)

    def analyze(self, url: str) -> Tuple[AnalysisResult, List[BrokenLink]]:
        """
        Analyze the page at `url`.

        Returns:
            Tuple of (analysis result, broken link records).

        Raises:
            TargetURLError: If `url` cannot serve as a resolution base.
            FetchError: If the page cannot be retrieved or read.
            ParseError: If the body cannot be parsed as HTML.
        """
        target = parse_target(url)
        body = self.fetch(target)
        soup = parse_html(body)

        features = extract_features(soup)
        links = extract_links(soup, target)

        to_check = links.all[:min(self.config.max_checked_links, len(links.all))]
        logger.info(
            "Checking %d of %d links found on %s", len(to_check), len(links.all), url
        )
        broken = self.prober.check_links(to_check)

        headings = features.headings
        result = AnalysisResult(
            title=features.title,
            markup_version=features.markup_version,
            h1_count=headings[1],
            h2_count=headings[2],
            h3_count=headings[3],
            h4_count=headings[4],
            h5_count=headings[5],
            h6_count=headings[6],
            internal_link_count=len(links.internal),
            external_link_count=len(links.external),
            has_login_form=features.has_login_form,
            broken_links=tuple(broken),
        )
        return result, broken

    def fetch(self, target: Target) -> bytes:
        """
        GET the target page and return its body. The status code is not checked.

        The whole download, redirects and body included, must finish within
        `fetch_timeout`.
        """
        session = self._session or self._build_session()
        deadline = Deadline(self.config.fetch_timeout)

        def download() -> Tuple[int, bytes]:
            resp = send(session, "GET", target.url, deadline, self.config.max_redirects)
            try:
                return resp.status_code, read_body(resp, deadline)
            finally:
                resp.close()

        try:
            status_code, body = run_within(deadline, download)
        except requests.RequestException as exc:
            raise FetchError(f"Failed to fetch URL: {exc}") from exc
        finally:
            if session is not self._session:
                session.close()

        logger.info("Fetched %s (%s, %d bytes)", target.url, status_code, len(body))
        return body

    def _build_session(self) -> requests.Session:
        session = requests.Session()
        session.headers["User-Agent"] = self.config.user_agent
        return session


def analyze(url: str, config: Optional[AnalyzerConfig] = None) -> Tuple[AnalysisResult, List[BrokenLink]]:
    """Analyze one page with a fresh analyzer."""
    return PageAnalyzer(config).analyze(url)
