"""
Component Info & Content Chunks
===============================
Helpers for consumers that still work with the older, coarser data shapes:

- ``extract_component_info(html)`` pulls a component's name, prop rows,
  description and code examples out of a single documentation page.
- ``chunk_text(content)`` splits text into line-merged chunks.
- ``to_content_chunks(pages)`` converts ``ExtractedPage`` records into
  ``ContentChunk`` objects, one per page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List

from .models import ExtractedPage
from .scraper import parse_html
from .utils import clean_text

MAX_CHUNK_CHARS = 1000

NAME_SELECTOR = 'h1, h2, [class*="title"], [class*="heading"]'
DESCRIPTION_SELECTOR = 'p, [class*="description"], [class*="intro"]'
EXAMPLE_SELECTOR = 'pre code, [class*="example"] code, [class*="preview"] code'

# Header words marking a table as a prop table
PROP_TABLE_HEADERS = ('prop', 'parameter')

# Paragraphs mentioning these are setup snippets, not descriptions
_SETUP_WORDS = ('import', 'require')


class ChunkType(str, Enum):
    """Markup flavour of a chunk's content."""
    HTML = "html"


@dataclass
class ComponentInfo:
    """What a single component page says about its component."""
    type: str = ""
    props: List[str] = field(default_factory=list)
    description: str = ""
    examples: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "props": list(self.props),
            "description": self.description,
            "examples": list(self.examples),
        }


@dataclass
class ContentChunk:
    """Legacy per-page content unit."""
    id: str
    content: str
    type: ChunkType = ChunkType.HTML
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "type": self.type.value,
            "metadata": dict(self.metadata),
        }


def _prop_rows(soup) -> List[str]:
    rows: List[str] = []
    for table in soup.find_all('table'):
        headers = [th.get_text().lower() for th in table.find_all('th')]
        if not any(word in h for h in headers for word in PROP_TABLE_HEADERS):
            continue
        for tr in table.find_all('tr'):
            cells = [clean_text(td.get_text()) for td in tr.find_all('td')]
            if cells:
                rows.append(" | ".join(cells))
    return rows


def _definition_rows(soup) -> List[str]:
    rows: List[str] = []
    for dl in soup.find_all('dl'):
        terms = dl.find_all('dt')
        definitions = dl.find_all('dd')
        for term, definition in zip(terms, definitions):
            rows.append(f"{clean_text(term.get_text())} | {clean_text(definition.get_text())}")
    return rows


def extract_component_info(html: str) -> ComponentInfo:
    """
    Read component details from a documentation page.

    The name is the first heading or title-like element; props come from
    tables whose headers mention "prop" or "parameter" and from definition
    lists; the description is the longest paragraph that does not look
    like setup code.
    """
    soup = parse_html(html)

    name_el = soup.select_one(NAME_SELECTOR)
    name = clean_text(name_el.get_text()) if name_el else ""

    description = ""
    for el in soup.select(DESCRIPTION_SELECTOR):
        text = clean_text(el.get_text())
        if len(text) > len(description) and not any(w in text for w in _SETUP_WORDS):
            description = text

    examples = [
        code.get_text().strip()
        for code in soup.select(EXAMPLE_SELECTOR)
        if code.get_text().strip()
    ]

    return ComponentInfo(
        type=name,
        props=_prop_rows(soup) + _definition_rows(soup),
        description=description,
        examples=examples,
    )


def chunk_text(content: str, max_chunk: int = MAX_CHUNK_CHARS) -> List[str]:
    """
    Split *content* into chunks of whole lines.

    Lines are trimmed, blank lines dropped, and consecutive lines joined
    with a space while the chunk stays within *max_chunk* characters. A
    single line longer than the limit becomes its own chunk.
    """
    chunks: List[str] = []
    for line in (content or "").split("\n"):
        line = line.strip()
        if not line:
            continue
        if not chunks or len(chunks[-1]) + len(line) > max_chunk:
            chunks.append(line)
        else:
            chunks[-1] = f"{chunks[-1]} {line}"
    return chunks


def to_content_chunks(pages: Iterable[ExtractedPage]) -> List[ContentChunk]:
    """Convert crawl output into one ``ContentChunk`` per page."""
    return [
        ContentChunk(
            id=page.id,
            content=page.text_content,
            type=ChunkType.HTML,
            metadata={
                "sourceUrl": page.url,
                "title": page.metadata.title,
                "description": page.metadata.description,
                "codeSamples": len(page.code_samples),
                "timestamp": page.timestamp,
            },
        )
        for page in pages
    ]
