#!/usr/bin/env python3
"""
Command-line entry point for the design-system crawler.

All configuration flows through ``CrawlerRunConfig``: defaults, then
``DSCRAWLER_*`` environment variables (``.env`` is loaded first), then flags.

Run with: python -m dscrawler https://example.com/docs/
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import List
from urllib.parse import urlparse

from dotenv import load_dotenv

from .crawler import CancellationToken, DesignSystemCrawler, summarize
from .models import CrawlProgress, ExtractedPage
from .run_config import CrawlerRunConfig

logger = logging.getLogger(__name__)


def _base_name_from_url(url: str) -> str:
    """Derive a filesystem-safe base name from a URL."""
    parsed = urlparse(url)
    base = parsed.netloc.replace('.', '_').replace(':', '_')
    if parsed.path and parsed.path != '/':
        path_part = parsed.path.strip('/').replace('/', '_')[:30]
        base = f"{base}_{path_part}"
    return base


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dscrawler',
        description='Design-system documentation crawler (Playwright + BeautifulSoup)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m dscrawler https://example.com/docs/
  python -m dscrawler https://example.com/components/ --pages 20 --output-json out.json
  python -m dscrawler https://example.com/ --all-paths --deny-pattern '/blog/'
        """
    )
    parser.add_argument('url', help='Seed URL to crawl')
    parser.add_argument('--pages', type=int, default=None, help='Maximum pages to crawl (default: 50)')
    parser.add_argument('--timeout', type=float, default=None, help='Navigation timeout in seconds (default: 30)')
    parser.add_argument('--rate', type=float, default=None, help='Delay between pages in seconds (default: 1.0)')
    parser.add_argument('--retries', type=int, default=None, help='Attempts per page (default: 3)')
    parser.add_argument('--retry-delay', type=float, default=None,
                        help='Delay between attempts in seconds (default: same as --rate)')
    parser.add_argument('--settle-ms', type=int, default=None, help='Wait after network idle in ms (default: 1000)')
    parser.add_argument('--all-paths', action='store_true',
                        help='Follow every same-origin path, not just documentation paths')
    parser.add_argument('--allow-query', action='store_true', help='Follow URLs with query strings')
    parser.add_argument('--deny-pattern', action='append', default=[],
                        help='Regex of URLs to skip (repeatable)')
    parser.add_argument('--respect-robots', action='store_true', help='Honour robots.txt and crawl-delay')
    parser.add_argument('--headful', action='store_true', help='Show the browser window')
    parser.add_argument('--output-json', type=str, help='JSON output file path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def write_json(pages: List[ExtractedPage], path: str) -> str:
    """Write ``{"summary": ..., "pages": [...]}`` to *path*."""
    payload = {
        "summary": summarize(pages).to_dict(),
        "pages": [page.to_dict() for page in pages],
    }
    out = Path(path)
    if out.parent and not out.parent.exists():
        out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    logger.info(f"Exported {len(pages)} pages to {out}")
    return str(out)


def print_summary(pages: List[ExtractedPage], elapsed: float, cancelled: bool = False):
    """Print crawl summary."""
    summary = summarize(pages)
    print("\n" + "=" * 60)
    print("CRAWL CANCELLED" if cancelled else "CRAWL COMPLETE")
    print("=" * 60)
    print(f"  Pages:               {summary.total_pages}")
    print(f"  Failed pages:        {len(summary.errors)}")
    print(f"  Code samples:        {summary.total_code_samples}")
    if summary.languages_detected:
        print(f"  Languages:           {', '.join(summary.languages_detected)}")
    print(f"  Text characters:     {summary.total_text_content:,}")
    print(f"  Total time:          {elapsed:.1f}s")
    print("=" * 60)


async def _crawl_with_signals(crawler: DesignSystemCrawler, url: str,
                              token: CancellationToken, on_progress):
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except (NotImplementedError, RuntimeError, ValueError):
        # Windows event loops have no signal handlers; KeyboardInterrupt applies
        pass
    try:
        return await crawler.crawl(url, on_progress=on_progress, cancel_token=token)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError, ValueError):
            pass


def main(argv=None) -> int:
    """Parse argv, build CrawlerRunConfig, run."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    url = args.url
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    cfg = CrawlerRunConfig.from_cli_args(args, base=CrawlerRunConfig.from_env())
    if not cfg.output_json:
        cfg.output_json = f"{_base_name_from_url(url)}.json"
    cfg.log_summary(url)

    def progress_cb(progress: CrawlProgress):
        print(f"[Page {progress.pages_processed}/{progress.total_pages}] {progress.current_page[:70]}")

    crawler = DesignSystemCrawler(cfg)
    token = CancellationToken()
    loop = asyncio.new_event_loop()
    try:
        start = loop.time()
        pages = loop.run_until_complete(_crawl_with_signals(crawler, url, token, progress_cb))
        elapsed = loop.time() - start
    except ValueError as e:
        logger.error(str(e))
        return 2
    finally:
        loop.close()

    if pages:
        write_json(pages, cfg.output_json)
    else:
        logger.warning("No pages were crawled, skipping export")
    print_summary(pages, elapsed, cancelled=token.cancelled)
    return 0


if __name__ == '__main__':
    sys.exit(main())
