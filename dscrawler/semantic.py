"""
Semantic Content Extractor
Headings, paragraphs, lists, accessibility attributes, landmarks and tables.

Every text value goes through ``utils.clean_text`` so downstream search and
comparison see identical normalisation.
"""

import logging
from typing import List

from bs4 import BeautifulSoup, Comment

from .models import Heading, Landmark, ListBlock, ListType, SemanticContent, Table
from .utils import clean_text, truncate_text

logger = logging.getLogger(__name__)

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']

# Max characters kept from a landmark's text
LANDMARK_CONTENT_LIMIT = 200

# Tags whose text never counts as visible page content
NON_TEXT_TAGS = frozenset({'script', 'style', 'noscript', 'template'})


def _extract_headings(soup: BeautifulSoup) -> List[Heading]:
    return [
        Heading(
            level=int(tag.name[1]),
            text=clean_text(tag.get_text()),
            id=tag.get('id') or None,
        )
        for tag in soup.find_all(HEADING_TAGS)
    ]


def _extract_paragraphs(soup: BeautifulSoup) -> List[str]:
    paragraphs = (clean_text(p.get_text()) for p in soup.find_all('p'))
    return [text for text in paragraphs if text]


def _extract_lists(soup: BeautifulSoup) -> List[ListBlock]:
    lists = []
    for element in soup.find_all(['ul', 'ol']):
        items = (clean_text(li.get_text()) for li in element.find_all('li'))
        lists.append(ListBlock(
            type=ListType.ORDERED if element.name == 'ol' else ListType.UNORDERED,
            items=[item for item in items if item],
        ))
    return lists


def _extract_alt_texts(soup: BeautifulSoup) -> List[str]:
    alts = (clean_text(img.get('alt', '')) for img in soup.find_all('img', alt=True))
    return [alt for alt in alts if alt]


def _extract_aria_labels(soup: BeautifulSoup) -> List[str]:
    labels = (
        clean_text(el.get('aria-label', ''))
        for el in soup.find_all(attrs={'aria-label': True})
    )
    return [label for label in labels if label]


def _extract_landmarks(soup: BeautifulSoup) -> List[Landmark]:
    landmarks = []
    for el in soup.find_all(attrs={'role': True}):
        label = clean_text(el.get('aria-label', '')) or None
        landmarks.append(Landmark(
            role=clean_text(el.get('role', '')),
            label=label,
            content=truncate_text(el.get_text(), LANDMARK_CONTENT_LIMIT),
        ))
    return landmarks


def _extract_tables(soup: BeautifulSoup) -> List[Table]:
    tables = []
    for table in soup.find_all('table'):
        rows = []
        for tr in table.find_all('tr'):
            cells = [clean_text(c.get_text()) for c in tr.find_all(['th', 'td'])]
            if any(cells):
                rows.append(cells)
        if rows:
            tables.append(Table(rows=rows))
    return tables


def extract_semantic_content(soup: BeautifulSoup) -> SemanticContent:
    """Extract semantic content from a parsed page. Does not modify *soup*."""
    return SemanticContent(
        headings=_extract_headings(soup),
        paragraphs=_extract_paragraphs(soup),
        lists=_extract_lists(soup),
        alt_texts=_extract_alt_texts(soup),
        aria_labels=_extract_aria_labels(soup),
        landmarks=_extract_landmarks(soup),
        tables=_extract_tables(soup),
    )


def extract_text_content(soup: BeautifulSoup) -> str:
    """Full visible body text, normalised to single spaces."""
    root = soup.body or soup
    parts = []
    for text in root.find_all(string=True):
        if isinstance(text, Comment):
            continue
        if text.parent is not None and text.parent.name in NON_TEXT_TAGS:
            continue
        parts.append(text)
    return clean_text(' '.join(parts))
