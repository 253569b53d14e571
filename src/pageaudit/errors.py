"""
Stage-level failures. Any of these aborts an analysis; per-link problems
are reported as BrokenLink records instead.
"""


class AnalysisError(Exception):
    """Base class for failures that abort a whole page analysis."""


class TargetURLError(AnalysisError, ValueError):
    """The target URL cannot be used as a base for link resolution."""


class FetchError(AnalysisError):
    """The target page could not be retrieved or its body read."""


class ParseError(AnalysisError):
    """The fetched body could not be parsed as HTML."""
