"""
Deadline-bounded requests helpers.

requests' `timeout=` bounds each connect and each socket read. The helpers
here bound a whole request instead: every redirect hop and every body chunk
draws from one wall-clock budget.
"""
from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, Dict, Optional, TypeVar
from urllib.parse import urljoin

import requests

T = TypeVar("T")

CHUNK_SIZE = 1024


class Deadline:
    """Wall-clock budget shared by every step of one request."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self.expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        """Seconds left. Raises requests' Timeout once the budget is spent."""
        left = self.expires_at - time.monotonic()
        if left <= 0:
            raise requests.exceptions.Timeout(f"Request timed out after {self.seconds:g}s")
        return left


def send(
    session: requests.Session,
    method: str,
    url: str,
    deadline: Deadline,
    max_redirects: int,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """
    Send `method` to `url`, following redirects hop by hop.

    Each hop gets the time left on `deadline` as its timeout. The final
    response is streamed; the caller closes it.

    Raises:
        requests.exceptions.Timeout: If the deadline passes between hops.
        requests.exceptions.TooManyRedirects: After `max_redirects` hops.
    """
    hops = 0
    while True:
        response = session.request(
            method,
            url,
            headers=headers,
            timeout=deadline.remaining(),
            allow_redirects=False,
            stream=True,
        )
        location = response.headers.get("location") if response.is_redirect else None
        if not location:
            return response

        response.close()
        hops += 1
        if hops > max_redirects:
            raise requests.exceptions.TooManyRedirects(
                f"Exceeded {max_redirects} redirects.", response=response
            )
        url = urljoin(response.url, location)


def read_body(response: requests.Response, deadline: Deadline) -> bytes:
    """Read a streamed body, checking the deadline after every chunk."""
    chunks = []
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        chunks.append(chunk)
        deadline.remaining()
    return b"".join(chunks)


def run_within(deadline: Deadline, func: Callable[[], T]) -> T:
    """
    Run `func` on a worker thread and wait no longer than the deadline.

    A read blocked inside the transport cannot outlast the caller's budget.
    The worker is abandoned on timeout and stops at its next deadline check
    or socket timeout.
    """
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(func)
        try:
            return future.result(timeout=deadline.remaining())
        except FutureTimeout:
            raise requests.exceptions.Timeout(
                f"Request timed out after {deadline.seconds:g}s"
            ) from None
    finally:
        executor.shutdown(wait=False)
