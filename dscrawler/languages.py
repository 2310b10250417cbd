"""
Language Classifier
===================
Statistical fallback for code samples whose markup declares no language.

The classifier is driven by an ordered rule table: every row pairs a
predicate (a compiled regex, or a callable returning a hit count) with a
language and a weight.  A language's relevance is the sum of
``weight * min(hits, max_hits)`` over its rows, plus a contribution from
Pygments' ``guess_lexer``.  A Pygments guess that agrees with a language
the rules already found earns a flat confirmation bonus on top of its
``analyse_text`` score; a guess the rules never saw only gets the score.
Ties go to the language whose first rule appears earliest in the table.

Relevance is on a 0-100 scale, so ``relevance / 100`` is the confidence
reported on a code sample.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from pygments.lexers import guess_lexer
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

# Multiplier for Pygments' analyse_text score (0.0-1.0)
PYGMENTS_WEIGHT = 4.0

# Added when the Pygments guess matches a language the rules scored
PYGMENTS_CONFIRM_BONUS = 3.0

# Pygments lexer alias -> language name used in code samples
PYGMENTS_ALIASES: Dict[str, str] = {
    'javascript': 'javascript', 'js': 'javascript',
    'typescript': 'typescript', 'ts': 'typescript',
    'jsx': 'jsx', 'react': 'jsx', 'tsx': 'tsx',
    'python': 'python', 'py': 'python', 'python3': 'python', 'py3': 'python',
    'bash': 'bash', 'sh': 'bash', 'shell': 'bash', 'zsh': 'bash', 'console': 'bash',
    'shell-session': 'bash',
    'html': 'html', 'xml': 'xml',
    'css': 'css', 'scss': 'scss',
    'json': 'json', 'json-object': 'json',
    'yaml': 'yaml',
}

# Pygments guesses that carry no information
_IGNORED_LEXERS = frozenset({'text', 'output'})


@dataclass(frozen=True)
class Detection:
    """Best-guess language with its relevance score."""
    language: str
    relevance: float


@dataclass(frozen=True)
class LanguageRule:
    """One row of the classifier table."""
    language: str
    predicate: Callable[[str], int]
    weight: float = 1.0
    max_hits: int = 3
    name: str = ""

    def hits(self, code: str) -> int:
        return min(self.predicate(code), self.max_hits)

    def score(self, code: str) -> float:
        return self.weight * self.hits(code)


def pattern(regex: str, flags: int = re.MULTILINE) -> Callable[[str], int]:
    """Predicate counting non-overlapping matches of *regex*."""
    compiled = re.compile(regex, flags)

    def _count(code: str) -> int:
        return sum(1 for _ in compiled.finditer(code))

    _count.__name__ = f"pattern({regex!r})"
    return _count


def parses_as_json(code: str) -> int:
    """1 if *code* is a JSON object or array, else 0."""
    stripped = code.strip()
    if not stripped or stripped[0] not in '{[':
        return 0
    try:
        json.loads(stripped)
    except ValueError:
        return 0
    return 1


def _rule(language, predicate, weight=1.0, max_hits=3, name=""):
    return LanguageRule(language, predicate, weight, max_hits, name)


LANGUAGE_RULES: Tuple[LanguageRule, ...] = (
    # Python
    _rule('python', pattern(r'^\s*def \w+\s*\(.*\)\s*(->\s*[^:]+)?:\s*$'), 4, name='def'),
    _rule('python', pattern(r'^\s*class \w+(\([\w., ]*\))?:\s*$'), 4, name='class'),
    _rule('python', pattern(r'^\s*from [\w.]+ import [\w*, ]+$'), 3, name='from-import'),
    _rule('python', pattern(r'^\s*import [\w.]+(\s+as \w+)?\s*$'), 2, name='import'),
    _rule('python', pattern(r'\bself\.\w+'), 1, name='self'),
    _rule('python', pattern(r'\b(elif|None|True|False|lambda)\b'), 1, name='keywords'),
    _rule('python', pattern(r'^\s*print\('), 1, name='print'),
    _rule('python', pattern(r'^\s*@\w+(\.\w+)*(\(.*\))?\s*$'), 1, name='decorator'),

    # JavaScript
    _rule('javascript', pattern(r'\b(const|let|var)\s+\w+\s*='), 2, name='declaration'),
    _rule('javascript', pattern(r'\bfunction\s*\w*\s*\('), 2, name='function'),
    _rule('javascript', pattern(r'=>'), 1, name='arrow'),
    _rule('javascript', pattern(r'\bconsole\.\w+\('), 2, name='console'),
    _rule('javascript', pattern(r'^\s*import\s+.+\s+from\s+[\'"]'), 2, name='es-import'),
    _rule('javascript', pattern(r'\brequire\([\'"]'), 2, name='require'),
    _rule('javascript', pattern(r'^\s*export\s+(default\s+)?(function|const|class)\b'), 2, name='export'),
    _rule('javascript', pattern(r'===|!=='), 1, name='strict-equality'),
    _rule('javascript', pattern(r'\b(document|window)\.\w+'), 1, name='dom-globals'),

    # TypeScript
    _rule('typescript', pattern(r'\binterface\s+\w+(\s+extends\s+[\w, <>]+)?\s*\{'), 4, name='interface'),
    _rule('typescript', pattern(r'\btype\s+\w+(<[^>]*>)?\s*='), 3, name='type-alias'),
    _rule('typescript', pattern(r'\w\??:\s*(string|number|boolean|any|void|unknown|never)\b'), 2, name='annotation'),
    _rule('typescript', pattern(r'\b(public|private|protected|readonly)\s+\w+'), 1, name='modifiers'),

    # JSX
    _rule('jsx', pattern(r'<[A-Z]\w*[\s/>]'), 3, name='component-tag'),
    _rule('jsx', pattern(r'\bclassName='), 3, name='className'),
    _rule('jsx', pattern(r'\breturn\s*\(\s*<'), 3, name='return-markup'),
    _rule('jsx', pattern(r'\w=\{[^}]*\}'), 1, name='expression-prop'),
    _rule('jsx', pattern(r'=>\s*\(?\s*<[A-Za-z]'), 4, max_hits=1, name='arrow-markup'),
    _rule('jsx', pattern(r'>\s*\{[^{}<>]+\}\s*<'), 2, name='expression-child'),

    # HTML
    _rule('html', pattern(r'<!DOCTYPE html', re.IGNORECASE), 5, max_hits=1, name='doctype'),
    _rule('html', pattern(
        r'</?(html|head|body|div|span|p|a|ul|ol|li|section|button|input|form|img|table|nav|header|footer)\b[^>]*>'
    ), 1.5, max_hits=6, name='tags'),
    _rule('html', pattern(r'\bclass="'), 1, name='class-attr'),
    _rule('html', pattern(r'<!--'), 1, max_hits=1, name='comment'),

    # CSS
    _rule('css', pattern(r'^\s*[.#][\w-]+[^{;()=]*\{'), 3, name='selector-block'),
    _rule('css', pattern(r'^\s*[\w-]+\s*:\s*[^;{}()]+;\s*$'), 1, max_hits=5, name='declaration'),
    _rule('css', pattern(r'@(media|import|keyframes|font-face|supports)\b'), 3, name='at-rule'),
    _rule('css', pattern(r'\b\d+(\.\d+)?(px|rem|em|vh|vw)\b'), 1, name='units'),
    _rule('css', pattern(r'#[0-9a-fA-F]{3,6}\b'), 1, name='hex-color'),

    # JSON
    _rule('json', parses_as_json, 8, max_hits=1, name='parses'),
    _rule('json', pattern(r'^\s*"[^"\n]+"\s*:\s*'), 1, name='quoted-key'),

    # Shell
    _rule('bash', pattern(r'^#!/(usr/)?bin/(env\s+)?(ba)?sh'), 5, max_hits=1, name='shebang'),
    _rule('bash', pattern(r'^\s*\$\s+\w+'), 3, name='prompt'),
    _rule('bash', pattern(
        r'^\s*(npm|npx|yarn|pnpm|pip|git|cd|echo|export|curl|sudo|brew|apt-get|mkdir|rm)\s'
    ), 3, name='commands'),
    _rule('bash', pattern(r'\s--?[a-z][\w-]*'), 1, name='flags'),

    # YAML
    _rule('yaml', pattern(r'^---\s*$'), 3, max_hits=1, name='document-start'),
    _rule('yaml', pattern(r'^\s*-\s+[\w-]+:\s'), 2, name='list-of-maps'),
    _rule('yaml', pattern(r'^[\w-]+:\s*$'), 1, name='block-key'),
)


class LanguageClassifier:
    """
    Rule-table classifier with a Pygments second opinion.

    Args:
        rules: Ordered rule table (defaults to ``LANGUAGE_RULES``)
        use_pygments: Whether to add the Pygments ``guess_lexer`` score
    """

    def __init__(
        self,
        rules: Iterable[LanguageRule] = LANGUAGE_RULES,
        use_pygments: bool = True,
    ):
        self.rules: List[LanguageRule] = list(rules)
        self.use_pygments = use_pygments

    def scores(self, code: str) -> Dict[str, float]:
        """Relevance per language, in rule-table order."""
        totals: Dict[str, float] = {}
        for rule in self.rules:
            totals.setdefault(rule.language, 0.0)
            totals[rule.language] += rule.score(code)

        if self.use_pygments:
            guess = self._pygments_guess(code)
            if guess is not None:
                language, score = guess
                bonus = score * PYGMENTS_WEIGHT
                if totals.get(language, 0.0) > 0:
                    bonus += PYGMENTS_CONFIRM_BONUS
                totals[language] = totals.get(language, 0.0) + bonus

        return totals

    def classify(self, code: str) -> Optional[Detection]:
        """Return the best-scoring language, or None when nothing scores."""
        if not code or not code.strip():
            return None
        totals = self.scores(code)
        best_language = None
        best_score = 0.0
        for language, score in totals.items():
            if score > best_score:
                best_language, best_score = language, score
        if best_language is None:
            return None
        return Detection(language=best_language, relevance=round(min(best_score, 100.0), 2))

    @staticmethod
    def _pygments_guess(code: str) -> Optional[Tuple[str, float]]:
        try:
            lexer = guess_lexer(code)
        except ClassNotFound:
            return None
        aliases = [a.lower() for a in (lexer.aliases or [])]
        if not aliases or aliases[0] in _IGNORED_LEXERS:
            return None
        score = lexer.analyse_text(code) or 0.0
        language = next(
            (PYGMENTS_ALIASES[a] for a in aliases if a in PYGMENTS_ALIASES),
            aliases[0],
        )
        return language, float(score)
