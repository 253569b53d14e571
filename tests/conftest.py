"""Shared network stand-ins: no test talks to a real server."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from requests.structures import CaseInsensitiveDict

Outcome = Union[int, "FakeResponse", BaseException]

REDIRECT_STATUSES = (301, 302, 303, 307, 308)


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
        chunks: Optional[Sequence[bytes]] = None,
    ) -> None:
        self.status_code = status_code
        self.content = content
        self.headers = CaseInsensitiveDict(headers or {})
        self.chunks = list(chunks) if chunks is not None else None
        self.url = ""
        self.closed = False

    @property
    def is_redirect(self) -> bool:
        return "location" in self.headers and self.status_code in REDIRECT_STATUSES

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        if self.chunks is not None:
            yield from self.chunks
            return
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def close(self) -> None:
        self.closed = True


def redirect(location: str, status_code: int = 301) -> FakeResponse:
    return FakeResponse(status_code, headers={"Location": location})


class FakeClock:
    """Stand-in for ``time.monotonic`` that only moves when told to."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSession:
    """Answers requests from a ``{(method, url): outcome}`` table.

    An outcome is a status code, a :class:`FakeResponse`, or an exception to
    raise. Unknown requests get ``default``.
    """

    def __init__(
        self,
        routes: Optional[Dict[Tuple[str, str], Outcome]] = None,
        default: Outcome = 200,
    ) -> None:
        self.routes = dict(routes or {})
        self.default = default
        self.calls: List[Tuple[str, str, dict]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        outcome = self.routes.get((method, url), self.default)
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, int):
            outcome = FakeResponse(outcome)
        outcome.url = url
        return outcome

    def close(self) -> None:
        self.closed = True

    def methods_for(self, url: str) -> List[str]:
        return [method for method, called_url, _ in self.calls if called_url == url]
