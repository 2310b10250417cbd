"""
Page Scraper
Parses rendered HTML once and runs every extractor over the same DOM.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup

from .code_samples import CodeSampleDetector
from .metadata import extract_metadata
from .models import CodeSample, PageMetadata, SemanticContent
from .semantic import extract_semantic_content, extract_text_content

logger = logging.getLogger(__name__)

# Choose the best available HTML parser; prefer lxml for speed,
# fall back to the stdlib html.parser so the crawler never crashes.
try:
    import lxml  # noqa: F401
    _BS_PARSER = "lxml"
except ImportError:
    _BS_PARSER = "html.parser"
    logger.info("lxml not installed — using html.parser (slower but functional)")


@dataclass
class ScrapedContent:
    """Everything extracted from one rendered page."""
    text_content: str = ""
    semantic_content: SemanticContent = field(default_factory=SemanticContent)
    metadata: PageMetadata = field(default_factory=PageMetadata)
    code_samples: List[CodeSample] = field(default_factory=list)
    links: List[str] = field(default_factory=list)


def parse_html(html: str) -> BeautifulSoup:
    """Parse HTML with the best available parser."""
    soup = BeautifulSoup(html or "", _BS_PARSER)

    # lxml occasionally produces an empty tree from valid HTML
    # (observed on Next.js SSR pages).  If the body has text but lxml
    # found zero <a> tags, retry with html.parser.
    if _BS_PARSER == "lxml":
        body = soup.find('body')
        body_len = len(body.get_text(strip=True)) if body else 0
        a_count = len(soup.find_all('a', href=True))
        if body_len > 200 and a_count == 0 and '<a ' in (html or ''):
            logger.info(
                f"[PARSER] lxml produced 0 links from {body_len} chars "
                f"of body text — retrying with html.parser"
            )
            soup = BeautifulSoup(html, 'html.parser')
    return soup


def extract_hrefs(soup: BeautifulSoup) -> List[str]:
    """Raw ``href`` values of every anchor, in document order."""
    return [a['href'] for a in soup.find_all('a', href=True)]


class PageScraper:
    """
    Composes the metadata, semantic-content and code-sample extractors.

    Args:
        code_detector: Detector used for code samples (default settings if None)
    """

    def __init__(self, code_detector: Optional[CodeSampleDetector] = None):
        self.code_detector = code_detector or CodeSampleDetector()

    def scrape(self, html: str, url: str) -> ScrapedContent:
        """
        Scrape content from rendered HTML.

        Exceptions propagate: the fetch controller treats them as a failed
        attempt.
        """
        soup = parse_html(html)

        content = ScrapedContent(
            text_content=extract_text_content(soup),
            semantic_content=extract_semantic_content(soup),
            metadata=extract_metadata(soup, url),
            code_samples=self.code_detector.extract(soup),
            links=extract_hrefs(soup),
        )

        logger.info(
            f"[SCRAPE] {url[:70]} — title='{(content.metadata.title or '')[:50]}', "
            f"headings={len(content.semantic_content.headings)}, "
            f"code={len(content.code_samples)}, links={len(content.links)}"
        )
        return content
