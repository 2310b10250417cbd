"""
Metadata Extractor
Pulls document-level metadata (title, description, Open Graph, JSON-LD...)
out of a rendered page.
"""

import json
import logging
from typing import Any, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .models import OpenGraph, PageMetadata
from .utils import clean_text

logger = logging.getLogger(__name__)

OPEN_GRAPH_FIELDS = ('title', 'description', 'image', 'url', 'type')


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    """Return the trimmed ``content`` of the first matching <meta>, if any."""
    tag = soup.find('meta', attrs=attrs)
    if tag is None or tag.get('content') is None:
        return None
    return clean_text(tag['content'])


def _extract_keywords(soup: BeautifulSoup) -> Optional[List[str]]:
    raw = _meta_content(soup, name='keywords')
    if raw is None:
        return None
    return [k.strip() for k in raw.split(',') if k.strip()]


def _extract_canonical(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    link = soup.find('link', rel='canonical', href=True)
    if link is None:
        return None
    try:
        return urljoin(page_url, link['href'].strip())
    except ValueError:
        return None


def _extract_open_graph(soup: BeautifulSoup) -> Optional[OpenGraph]:
    values = {
        name: _meta_content(soup, property=f'og:{name}')
        for name in OPEN_GRAPH_FIELDS
    }
    if all(v is None for v in values.values()):
        return None
    return OpenGraph(**values)


def _extract_json_ld(soup: BeautifulSoup) -> List[Any]:
    """Parse every JSON-LD block independently, dropping the broken ones."""
    blocks = []
    for script in soup.find_all('script', attrs={'type': 'application/ld+json'}):
        raw = script.string if script.string is not None else script.get_text()
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed JSON-LD block: {e}")
            continue
        if data is not None:
            blocks.append(data)
    return blocks


def extract_metadata(soup: BeautifulSoup, page_url: str = "") -> PageMetadata:
    """
    Extract page metadata.

    Args:
        soup: Parsed rendered DOM
        page_url: URL of the page, used to resolve a relative canonical link

    Returns:
        PageMetadata with every field that was present on the page
    """
    title = None
    if soup.title is not None:
        title = clean_text(soup.title.get_text())

    language = None
    html = soup.find('html')
    if html is not None and html.get('lang'):
        language = html['lang'].strip() or None

    return PageMetadata(
        title=title,
        description=_meta_content(soup, name='description'),
        keywords=_extract_keywords(soup),
        author=_meta_content(soup, name='author'),
        canonical_url=_extract_canonical(soup, page_url),
        language=language,
        open_graph=_extract_open_graph(soup),
        json_ld=_extract_json_ld(soup),
    )
