"""
Code Sample Detector
Finds code blocks on a rendered page and attaches best-effort language info.

Declared language (class names in the markup) always wins; the statistical
classifier only runs for undeclared samples long enough to judge.
"""

import logging
import uuid
from typing import Iterable, List, Optional, Set

from bs4 import BeautifulSoup, Tag

from .languages import LanguageClassifier
from .models import CodeSample
from .utils import truncate_text

logger = logging.getLogger(__name__)

# Applied in order; earlier selectors win for identical text
CODE_SELECTORS = [
    'pre code',
    'pre',
    '.highlight pre',
    '.code-block',
    '[class*="language-"]',
    '[class*="hljs"]',
    '.codehilite',
    '.highlight',
    '.code-sample',
]

# Bare class names accepted as a language declaration
LANGUAGE_CLASS_NAMES = frozenset({
    'javascript', 'typescript', 'jsx', 'tsx', 'css',
    'html', 'json', 'python', 'bash', 'shell',
})

LANGUAGE_CLASS_PREFIXES = ('language-', 'hljs-')

CONTEXT_TAGS = frozenset({'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'p'})
CONTEXT_LIMIT = 100

LINE_NUMBER_MARKERS = ('line-number', 'linenos', 'lineno')

MIN_DETECT_LENGTH = 20
MIN_RELEVANCE = 5.0


def _classes(element: Optional[Tag]) -> List[str]:
    if element is None:
        return []
    return list(element.get('class') or [])


def detect_declared_language(element: Tag) -> Optional[str]:
    """
    Read a language declaration from the element's classes, then its parent's.

    Recognises ``language-<x>``, ``hljs-<x>`` and bare names such as
    ``python``. First match wins.
    """
    for class_name in _classes(element) + _classes(element.parent):
        lowered = class_name.lower()
        for prefix in LANGUAGE_CLASS_PREFIXES:
            if lowered.startswith(prefix) and len(lowered) > len(prefix):
                return lowered[len(prefix):]
        if lowered in LANGUAGE_CLASS_NAMES:
            return lowered
    return None


def _context_for(element: Tag) -> Optional[str]:
    anchor = element
    # <pre><code> blocks: look beside the <pre>
    if (anchor.find_previous_sibling() is None
            and anchor.parent is not None and anchor.parent.name == 'pre'):
        anchor = anchor.parent
    previous = anchor.find_previous_sibling()
    if previous is None or previous.name not in CONTEXT_TAGS:
        return None
    return truncate_text(previous.get_text(), CONTEXT_LIMIT) or None


def _source_descriptor(element: Tag) -> str:
    classes = _classes(element)
    if not classes:
        return element.name
    return element.name + ''.join(f'.{c}' for c in classes)


def _has_marker(class_names: Iterable[str]) -> bool:
    return any(
        marker in class_name.lower()
        for class_name in class_names
        for marker in LINE_NUMBER_MARKERS
    )


def _has_line_numbers(element: Tag) -> bool:
    if _has_marker(_classes(element)):
        return True
    for ancestor in element.parents:
        if isinstance(ancestor, Tag) and _has_marker(_classes(ancestor)):
            return True
    return any(_has_marker(_classes(d)) for d in element.find_all(class_=True))


def _is_nested_in(element: Tag, accepted: Set[int]) -> bool:
    return any(id(parent) in accepted for parent in element.parents)


class CodeSampleDetector:
    """
    Extracts code samples from a parsed page.

    Args:
        classifier: Statistical classifier used when no language is declared
        min_detect_length: Code must be longer than this to be classified
        min_relevance: Classifier relevance must exceed this to be accepted
        selectors: Ordered CSS selectors for candidate blocks
    """

    def __init__(
        self,
        classifier: Optional[LanguageClassifier] = None,
        min_detect_length: int = MIN_DETECT_LENGTH,
        min_relevance: float = MIN_RELEVANCE,
        selectors: Optional[List[str]] = None,
    ):
        self.classifier = classifier or LanguageClassifier()
        self.min_detect_length = min_detect_length
        self.min_relevance = min_relevance
        self.selectors = list(selectors or CODE_SELECTORS)

    def extract(self, soup: BeautifulSoup) -> List[CodeSample]:
        """Return code samples in selector order, then document order."""
        samples: List[CodeSample] = []
        seen_code: Set[str] = set()
        accepted: Set[int] = set()
        batch = uuid.uuid4().hex[:12]

        for selector in self.selectors:
            for element in soup.select(selector):
                code = element.get_text().strip()
                if not code or code in seen_code:
                    continue
                if _is_nested_in(element, accepted):
                    continue
                seen_code.add(code)
                accepted.add(id(element))
                samples.append(self._build_sample(element, code, f"code-{batch}-{len(samples)}"))

        if samples:
            logger.debug(f"[CODE] {len(samples)} code samples found")
        return samples

    def _build_sample(self, element: Tag, code: str, sample_id: str) -> CodeSample:
        declared = detect_declared_language(element)
        detected = None
        confidence = None

        if declared is None and len(code) > self.min_detect_length:
            detected, confidence = self._detect(code)

        return CodeSample(
            id=sample_id,
            code=code,
            declared_language=declared,
            detected_language=detected,
            confidence=confidence,
            context=_context_for(element),
            source_element=_source_descriptor(element),
            line_numbers_present=_has_line_numbers(element),
        )

    def _detect(self, code: str):
        try:
            detection = self.classifier.classify(code)
        except Exception as e:
            logger.debug(f"[CODE] Language detection failed: {e}")
            return None, None
        if detection is None or detection.relevance <= self.min_relevance:
            return None, None
        return detection.language, min(detection.relevance / 100, 1.0)


def extract_code_samples(soup: BeautifulSoup, **kwargs) -> List[CodeSample]:
    """Convenience wrapper around :class:`CodeSampleDetector`."""
    return CodeSampleDetector(**kwargs).extract(soup)
