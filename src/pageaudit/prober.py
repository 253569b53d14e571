"""
Broken-link prober: HEAD-then-GET reachability checks with status
classification and sanitized error messages.
"""
from __future__ import annotations

import logging
import re
import socket
import ssl
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests

from pageaudit.config import AnalyzerConfig
from pageaudit.models import BrokenLink
from pageaudit.transport import Deadline, run_within, send

logger = logging.getLogger(__name__)

INVALID_URL_MESSAGE = "Invalid URL format"

STATUS_MESSAGES: Dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    408: "Request Timeout",
    429: "Too Many Requests",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}

# Rate limiting and auth challenges mean the server is there
NOT_BROKEN_STATUSES: frozenset[int] = frozenset((401, 407, 429))

ACCEPT_HEADERS: Dict[str, str] = {
    "HEAD": "*/*",
    "GET": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# Checked in order against the lower-cased error text, hosts and URLs removed
ERROR_PATTERNS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("certificate", "x509"), "SSL/TLS certificate error"),
    (
        (
            "no such host",
            "name or service not known",
            "nodename nor servname",
            "getaddrinfo failed",
            "temporary failure in name resolution",
            "failed to resolve",
            "nameresolutionerror",
        ),
        "DNS resolution failed",
    ),
    (("timed out", "timeout"), "Request timeout"),
    (("connection refused", "actively refused"), "Connection refused"),
    (("too many redirects",), "Too many redirects"),
)


# Parts of a requests/urllib3 message that name the peer
PEER_TEXT = re.compile(r"host='[^']*'|resolve '[^']*'|url: \S+|\b[a-z][a-z0-9+.-]*://\S+", re.IGNORECASE)

METHOD_NOT_ALLOWED_TEXT = re.compile(r"\b405 Method Not Allowed\b", re.IGNORECASE)


def status_message(status_code: int) -> str:
    """Human-readable phrase for an HTTP status code."""
    return STATUS_MESSAGES.get(status_code, f"HTTP {status_code}")


def is_broken_status(status_code: int) -> bool:
    return status_code >= 400 and status_code not in NOT_BROKEN_STATUSES


def is_valid_url(link: str) -> bool:
    """A link is probeable only if it has both a scheme and a host."""
    try:
        parsed = urlparse(link)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc.rpartition("@")[2])


def _cause_chain(error: BaseException) -> List[BaseException]:
    """
    `error` followed by what it wraps: urllib3's `reason`, an exception
    passed as the first argument, then `__cause__`/`__context__`.
    """
    chain: List[BaseException] = []
    node: Optional[BaseException] = error
    while node is not None and all(node is not seen for seen in chain):
        chain.append(node)
        nested = getattr(node, "reason", None)
        if not isinstance(nested, BaseException) and node.args and isinstance(node.args[0], BaseException):
            nested = node.args[0]
        if not isinstance(nested, BaseException):
            nested = node.__cause__ or node.__context__
        node = nested
    return chain


def _classify(error: BaseException) -> Optional[str]:
    if isinstance(error, (requests.exceptions.SSLError, ssl.SSLError)):
        return "SSL/TLS certificate error"
    if isinstance(error, socket.gaierror):
        return "DNS resolution failed"
    if isinstance(error, (requests.exceptions.Timeout, TimeoutError)):
        return "Request timeout"
    if isinstance(error, ConnectionRefusedError):
        return "Connection refused"
    if isinstance(error, requests.exceptions.TooManyRedirects):
        return "Too many redirects"
    return None


def sanitize_error(error: BaseException) -> str:
    """
    Map a transport error to a short, generic message.

    Exception types anywhere in the cause chain are matched first. Then the
    text of the innermost cause is matched, with host names and URLs
    removed. Unrecognized errors keep their own message.
    """
    chain = _cause_chain(error)
    for node in chain:
        message = _classify(node)
        if message:
            return message

    lowered = PEER_TEXT.sub("", str(chain[-1])).lower()
    for needles, message in ERROR_PATTERNS:
        if any(needle in lowered for needle in needles):
            return message
    return str(error)


def _is_method_not_allowed(error: requests.RequestException) -> bool:
    """True when a failed request was rejected with 405."""
    response = getattr(error, "response", None)
    status_code = getattr(response, "status_code", None)
    if status_code is not None:
        return status_code == 405
    return bool(METHOD_NOT_ALLOWED_TEXT.search(str(error)))


class LinkProber:
    """
    Checks links for reachability.

    Each probe uses its own session built by `session_factory`, so probes
    share nothing but the read-only config and can run in parallel.
    """

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self._session_factory = session_factory or self._build_session

    def _build_session(self) -> requests.Session:
        session = requests.Session()
        session.headers["User-Agent"] = self.config.user_agent
        return session

    def check_links(self, links: Sequence[str]) -> List[BrokenLink]:
        """Probe every link and return records for the broken ones, in input order."""
        if not links:
            return []

        workers = min(self.config.probe_workers, len(links))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(self.check_link, links))

        broken = [record for record in results if record is not None]
        logger.info("Probed %d links, %d broken", len(links), len(broken))
        return broken

    def check_link(self, link: str) -> Optional[BrokenLink]:
        """Return a BrokenLink if `link` is unreachable or invalid, else None."""
        if not is_valid_url(link):
            return BrokenLink(url=link, status_code=0, error_message=INVALID_URL_MESSAGE)

        session = self._session_factory()
        try:
            status_code = self._probe(session, link)
        except (requests.RequestException, ValueError) as exc:
            logger.info("Probe failed for %s: %s", link, exc)
            return BrokenLink(url=link, status_code=0, error_message=sanitize_error(exc))
        finally:
            session.close()

        if not is_broken_status(status_code):
            return None

        logger.info("Broken link %s (%d)", link, status_code)
        return BrokenLink(url=link, status_code=status_code, error_message=status_message(status_code))

    def _probe(self, session: requests.Session, link: str) -> int:
        """HEAD the link, retrying once with GET when HEAD is not allowed."""
        try:
            status_code = self._request(session, "HEAD", link)
        except requests.RequestException as exc:
            if not _is_method_not_allowed(exc):
                raise
            status_code = 405

        if status_code == 405:
            logger.debug("HEAD not allowed for %s, retrying with GET", link)
            status_code = self._request(session, "GET", link)
        return status_code

    def _request(self, session: requests.Session, method: str, link: str) -> int:
        """One HEAD or GET, redirects included, bounded by `probe_timeout`."""
        deadline = Deadline(self.config.probe_timeout)

        def status() -> int:
            response = send(
                session,
                method,
                link,
                deadline,
                self.config.max_redirects,
                headers={"Accept": ACCEPT_HEADERS[method]},
            )
            try:
                return response.status_code
            finally:
                response.close()

        return run_within(deadline, status)
