"""
Single-page web analyzer: extracts title, HTML version, heading counts,
login-form presence and link counts, and probes outbound links for breakage.
"""
from pageaudit.analyzer import PageAnalyzer, analyze
from pageaudit.config import AnalyzerConfig
from pageaudit.errors import AnalysisError, FetchError, ParseError, TargetURLError
from pageaudit.models import AnalysisResult, BrokenLink, MarkupVersion

__version__ = "1.0.0"
__all__ = [
    "analyze",
    "PageAnalyzer",
    "AnalyzerConfig",
    "AnalysisResult",
    "BrokenLink",
    "MarkupVersion",
    "AnalysisError",
    "FetchError",
    "ParseError",
    "TargetURLError",
]
