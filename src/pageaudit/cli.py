"""
Command-line interface for the page analyzer.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse

from pageaudit.analyzer import PageAnalyzer
from pageaudit.config import DEFAULT_USER_AGENT, AnalyzerConfig
from pageaudit.errors import AnalysisError

logger = logging.getLogger(__name__)


def run_one(analyzer: PageAnalyzer, url: str) -> Dict[str, object]:
    """Analyze `url` and wrap the outcome in a JSON-ready record."""
    try:
        result, broken = analyzer.analyze(url)
    except AnalysisError as exc:
        logger.warning("Analysis of %s failed: %s", url, exc)
        return {"url": url, "status": "error", "analysis": None, "broken_links": [], "error": str(exc)}

    return {
        "url": url,
        "status": "done",
        "analysis": result.to_dict(),
        "broken_links": [b.to_dict() for b in broken],
        "error": None,
    }


def print_summary(records: Sequence[Dict[str, object]]) -> None:
    """Print analysis summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("ANALYSIS SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    for record in records:
        sys.stderr.write(f"{record['url']}\n")
        analysis = record["analysis"]
        if analysis is None:
            sys.stderr.write(f"  Error: {record['error']}\n\n")
            continue

        sys.stderr.write(f"  Title:          {analysis['title'] or '(none)'}\n")
        sys.stderr.write(f"  HTML version:   {analysis['html_version']}\n")
        headings = " ".join(f"h{level}={analysis[f'h{level}_count']}" for level in range(1, 7))
        sys.stderr.write(f"  Headings:       {headings}\n")
        sys.stderr.write(f"  Internal links: {analysis['internal_links']}\n")
        sys.stderr.write(f"  External links: {analysis['external_links']}\n")
        sys.stderr.write(f"  Login form:     {'yes' if analysis['has_login_form'] else 'no'}\n")
        sys.stderr.write(f"  Broken links:   {analysis['broken_links']}\n")
        for broken in record["broken_links"]:
            status = broken["status_code"] or "ERR"
            sys.stderr.write(f"    {status} {broken['url']} ({broken['error_message']})\n")
        sys.stderr.write("\n")


def generate_output_path(urls: Sequence[str]) -> Path:
    """Generate output path: reports/{hostname}_{datetime}.json"""
    hostname = (urlparse(urls[0]).hostname or "unknown") if len(urls) == 1 else "batch"
    hostname_safe = hostname.replace(".", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    reports_dir = Path("reports")
    reports_dir.mkdir(exist_ok=True)

    return reports_dir / f"{hostname_safe}_{timestamp}.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze web pages: title, HTML version, headings, links and broken links."
    )
    parser.add_argument("urls", nargs="+", metavar="url", help="Page URL(s) to analyze (e.g. https://example.com)")
    parser.add_argument("--timeout", type=float, default=10.0, help="Page fetch timeout in seconds (default: 10)")
    parser.add_argument("--probe-timeout", type=float, default=5.0, help="Per-link probe timeout in seconds (default: 5)")
    parser.add_argument("--max-checked-links", type=int, default=10, help="Links probed per page (default: 10)")
    parser.add_argument("--max-redirects", type=int, default=10, help="Redirects followed per request (default: 10)")
    parser.add_argument("--probe-workers", type=int, default=5, help="Concurrent link probes per page (default: 5)")
    parser.add_argument("--workers", type=int, default=4, help="Pages analyzed concurrently (default: 4)")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in reports/)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the analyzer CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = AnalyzerConfig(
            fetch_timeout=args.timeout,
            probe_timeout=args.probe_timeout,
            max_checked_links=args.max_checked_links,
            max_redirects=args.max_redirects,
            probe_workers=args.probe_workers,
            user_agent=args.user_agent,
        )
    except ValueError as exc:
        parser.error(str(exc))

    analyzer = PageAnalyzer(config)
    with ThreadPoolExecutor(max_workers=max(1, min(args.workers, len(args.urls)))) as executor:
        records = list(executor.map(lambda url: run_one(analyzer, url), args.urls))

    if args.verbose:
        print_summary(records)

    json_text = json.dumps(records, ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        output_path = Path(args.out) if args.out else generate_output_path(args.urls)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0 if all(r["status"] == "done" for r in records) else 1


if __name__ == "__main__":
    raise SystemExit(main())
