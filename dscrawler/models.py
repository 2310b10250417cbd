"""
Extracted Page Data Model
=========================
The record produced for every crawled URL, plus the transient progress
snapshot and the per-URL fetch result.

``ExtractedPage.to_dict()`` is the external record shape consumed by
exporters, persistence and the UI (camelCase keys, unset optional fields
omitted).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def new_id(prefix: str) -> str:
    """Generate an opaque unique id such as ``page-3f2a9c...``."""
    return f"{prefix}-{uuid.uuid4().hex}"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Semantic content
# ---------------------------------------------------------------------------

class ListType(str, Enum):
    """Kind of HTML list."""
    UNORDERED = "ul"
    ORDERED = "ol"


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    id: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({'level': self.level, 'text': self.text, 'id': self.id})


@dataclass(frozen=True)
class ListBlock:
    type: ListType
    items: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {'type': self.type.value, 'items': list(self.items)}


@dataclass(frozen=True)
class Landmark:
    role: str
    label: Optional[str] = None
    content: str = ""

    def to_dict(self) -> dict:
        return _drop_none({'role': self.role, 'label': self.label, 'content': self.content})


@dataclass(frozen=True)
class Table:
    rows: List[List[str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {'rows': [list(row) for row in self.rows]}


@dataclass(frozen=True)
class SemanticContent:
    """Headings, paragraphs, lists and accessibility content of a page."""
    headings: List[Heading] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    lists: List[ListBlock] = field(default_factory=list)
    alt_texts: List[str] = field(default_factory=list)
    aria_labels: List[str] = field(default_factory=list)
    landmarks: List[Landmark] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'headings': [h.to_dict() for h in self.headings],
            'paragraphs': list(self.paragraphs),
            'lists': [lst.to_dict() for lst in self.lists],
            'altTexts': list(self.alt_texts),
            'ariaLabels': list(self.aria_labels),
            'landmarks': [lm.to_dict() for lm in self.landmarks],
            'tables': [t.to_dict() for t in self.tables],
        }


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OpenGraph:
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> dict:
        return _drop_none({
            'title': self.title,
            'description': self.description,
            'image': self.image,
            'url': self.url,
            'type': self.type,
        })


@dataclass(frozen=True)
class PageMetadata:
    """Document-level metadata. Every field is optional."""
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[List[str]] = None
    author: Optional[str] = None
    canonical_url: Optional[str] = None
    language: Optional[str] = None
    open_graph: Optional[OpenGraph] = None
    json_ld: List[Any] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = _drop_none({
            'title': self.title,
            'description': self.description,
            'keywords': list(self.keywords) if self.keywords is not None else None,
            'author': self.author,
            'canonicalUrl': self.canonical_url,
            'language': self.language,
            'openGraph': self.open_graph.to_dict() if self.open_graph else None,
        })
        if self.json_ld:
            data['jsonLd'] = list(self.json_ld)
        return data


# ---------------------------------------------------------------------------
# Code samples
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CodeSample:
    """A code block found on a page, with best-effort language info."""
    id: str
    code: str
    declared_language: Optional[str] = None
    detected_language: Optional[str] = None
    confidence: Optional[float] = None
    context: Optional[str] = None
    source_element: Optional[str] = None
    line_numbers_present: Optional[bool] = None

    @property
    def language(self) -> Optional[str]:
        """Declared language, else detected language."""
        return self.declared_language or self.detected_language

    def to_dict(self) -> dict:
        return _drop_none({
            'id': self.id,
            'code': self.code,
            'language': self.declared_language,
            'detectedLanguage': self.detected_language,
            'confidence': self.confidence,
            'context': self.context,
            'sourceElement': self.source_element,
            'lineNumbers': self.line_numbers_present,
        })


# ---------------------------------------------------------------------------
# Page record
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExtractedPage:
    """
    One record per crawled URL.

    Either a success record (content populated, ``errors`` empty) or an
    error record (empty content, ``errors`` non-empty). Never mutated after
    creation.
    """
    id: str
    url: str
    text_content: str = ""
    semantic_content: SemanticContent = field(default_factory=SemanticContent)
    metadata: PageMetadata = field(default_factory=PageMetadata)
    code_samples: List[CodeSample] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_timestamp)
    render_time: Optional[int] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @classmethod
    def error_record(cls, url: str, message: str) -> "ExtractedPage":
        """Build the record for a URL that failed every fetch attempt."""
        return cls(id=new_id("error"), url=url, errors=[message])

    def to_dict(self) -> dict:
        data = {
            'id': self.id,
            'url': self.url,
            'textContent': self.text_content,
            'semanticContent': self.semantic_content.to_dict(),
            'metadata': self.metadata.to_dict(),
            'codeSamples': [c.to_dict() for c in self.code_samples],
            'timestamp': self.timestamp,
        }
        if self.render_time is not None:
            data['renderTime'] = self.render_time
        if self.errors:
            data['errors'] = list(self.errors)
        return data


@dataclass(frozen=True)
class CrawlProgress:
    """Snapshot emitted once per processed page."""
    source_id: str
    pages_processed: int
    total_pages: int
    current_page: str
    components_found: Optional[int] = None

    def to_dict(self) -> dict:
        return _drop_none({
            'sourceId': self.source_id,
            'pagesProcessed': self.pages_processed,
            'totalPages': self.total_pages,
            'currentPage': self.current_page,
            'componentsFound': self.components_found,
        })


# ---------------------------------------------------------------------------
# Per-URL fetch result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageError:
    url: str
    message: str
    attempts: int = 0


@dataclass(frozen=True)
class PageResult:
    """
    Outcome of fetching one URL: a page, an error, or a cancellation.

    ``links`` holds the raw ``href`` values harvested from the rendered DOM
    of a successful fetch.
    """
    url: str
    page: Optional[ExtractedPage] = None
    error: Optional[PageError] = None
    links: List[str] = field(default_factory=list)
    attempts: int = 0
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.page is not None

    def to_record(self) -> ExtractedPage:
        """Unwrap into a record: the page itself or a synthesized error record."""
        if self.page is not None:
            return self.page
        message = self.error.message if self.error else "Fetch cancelled"
        return ExtractedPage.error_record(self.url, message)


@dataclass
class CrawlSummary:
    """Aggregate view over a finished crawl."""
    total_pages: int = 0
    total_code_samples: int = 0
    total_text_content: int = 0
    languages_detected: List[str] = field(default_factory=list)
    crawled_urls: List[str] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_pages(cls, pages: List[ExtractedPage]) -> "CrawlSummary":
        languages: List[str] = []
        for page in pages:
            for sample in page.code_samples:
                lang = sample.language
                if lang and lang not in languages:
                    languages.append(lang)
        return cls(
            total_pages=len(pages),
            total_code_samples=sum(len(p.code_samples) for p in pages),
            total_text_content=sum(len(p.text_content) for p in pages),
            languages_detected=languages,
            crawled_urls=[p.url for p in pages],
            errors=[{'url': p.url, 'errors': list(p.errors)} for p in pages if p.errors],
        )

    def to_dict(self) -> dict:
        return {
            'totalPages': self.total_pages,
            'totalCodeSamples': self.total_code_samples,
            'totalTextContent': self.total_text_content,
            'languagesDetected': list(self.languages_detected),
            'crawledUrls': list(self.crawled_urls),
            'errors': list(self.errors),
        }
