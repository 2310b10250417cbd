"""
Design System Crawler Package
Renders design-system documentation sites in headless Chromium and extracts
semantic content, page metadata and code samples for every page.

CLI Usage:
    python -m dscrawler <url> [options]

    Options:
        --pages         Maximum pages to crawl (default: 50)
        --timeout       Navigation timeout in seconds (default: 30)
        --rate          Delay between pages (default: 1.0)
        --retries       Attempts per page (default: 3)
        --all-paths     Follow every same-origin path
        --output-json   Export to JSON file
"""

from .crawler import DesignSystemCrawler, CancellationToken, crawl, summarize
from .models import (
    ExtractedPage,
    SemanticContent,
    PageMetadata,
    CodeSample,
    CrawlProgress,
    CrawlSummary,
    PageResult,
    PageError,
)
from .scraper import PageScraper
from .code_samples import CodeSampleDetector
from .languages import LanguageClassifier
from .frontier import Frontier, discover_links
from .scope_filter import LinkPolicy
from .fetcher import PageFetcher, RetryPolicy
from .browser import BrowserSession
from .robots import RobotsPolicy
from .run_config import CrawlerRunConfig
from .components import extract_component_info, chunk_text, to_content_chunks

__all__ = [
    'DesignSystemCrawler',
    'CancellationToken',
    'crawl',
    'summarize',
    # Records
    'ExtractedPage',
    'SemanticContent',
    'PageMetadata',
    'CodeSample',
    'CrawlProgress',
    'CrawlSummary',
    'PageResult',
    'PageError',
    # Extraction
    'PageScraper',
    'CodeSampleDetector',
    'LanguageClassifier',
    # Crawl plumbing
    'Frontier',
    'discover_links',
    'LinkPolicy',
    'PageFetcher',
    'RetryPolicy',
    'BrowserSession',
    'RobotsPolicy',
    'CrawlerRunConfig',
    # Legacy shapes
    'extract_component_info',
    'chunk_text',
    'to_content_chunks',
]

__version__ = '1.0.0'
