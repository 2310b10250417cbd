"""
Tests for code sample detection and declared-language parsing.
"""

from dscrawler.code_samples import (
    CodeSampleDetector,
    detect_declared_language,
    extract_code_samples,
)
from dscrawler.languages import Detection, LanguageClassifier
from dscrawler.scraper import parse_html

PYTHON_SNIPPET = (
    "def greet(name):\n"
    "    return name.upper()\n"
    "\n"
    "class Button:\n"
    "    pass\n"
)

JS_SNIPPET = (
    "const button = document.querySelector('.btn');\n"
    "button.addEventListener('click', () => {\n"
    "  console.log('clicked');\n"
    "});"
)


def _detector(**kwargs):
    kwargs.setdefault("classifier", LanguageClassifier(use_pygments=False))
    return CodeSampleDetector(**kwargs)


def _samples(html, **kwargs):
    return _detector(**kwargs).extract(parse_html(html))


class TestDeclaredLanguage:

    def test_language_prefix(self):
        soup = parse_html('<pre><code class="language-jsx">x</code></pre>')
        assert detect_declared_language(soup.code) == "jsx"

    def test_hljs_prefix(self):
        soup = parse_html('<pre><code class="hljs-TypeScript">x</code></pre>')
        assert detect_declared_language(soup.code) == "typescript"

    def test_bare_class_name(self):
        soup = parse_html('<pre class="css">x</pre>')
        assert detect_declared_language(soup.pre) == "css"

    def test_parent_classes_checked(self):
        soup = parse_html('<pre class="language-bash"><code>npm install</code></pre>')
        assert detect_declared_language(soup.code) == "bash"

    def test_element_wins_over_parent(self):
        soup = parse_html('<pre class="language-python"><code class="language-javascript">x</code></pre>')
        assert detect_declared_language(soup.code) == "javascript"

    def test_unrelated_classes(self):
        soup = parse_html('<pre class="code-block wide">x</pre>')
        assert detect_declared_language(soup.pre) is None


class TestExtraction:

    def test_declared_jsx_sample(self):
        samples = _samples('<pre><code class="language-jsx">&lt;Button variant="primary" /&gt;</code></pre>')
        assert len(samples) == 1
        sample = samples[0]
        assert sample.code == '<Button variant="primary" />'
        assert sample.declared_language == "jsx"
        assert sample.detected_language is None
        assert sample.confidence is None
        assert sample.source_element == "code.language-jsx"

    def test_declared_language_beats_statistics(self):
        samples = _samples(f'<pre><code class="language-python">{JS_SNIPPET}</code></pre>')
        assert samples[0].declared_language == "python"
        assert samples[0].detected_language is None
        assert samples[0].to_dict()["language"] == "python"

    def test_short_sample_not_classified(self):
        samples = _samples("<pre>x = 1 + 2</pre>")
        assert samples[0].code == "x = 1 + 2"
        assert samples[0].detected_language is None
        assert samples[0].confidence is None

    def test_python_detected(self):
        samples = _samples(f"<pre>{PYTHON_SNIPPET}</pre>")
        sample = samples[0]
        assert sample.declared_language is None
        assert sample.detected_language == "python"
        assert 0 < sample.confidence <= 1.0
        assert sample.language == "python"

    def test_javascript_detected(self):
        samples = _samples(f"<pre><code>{JS_SNIPPET}</code></pre>")
        assert samples[0].detected_language == "javascript"

    def test_low_relevance_rejected(self):
        prose = "Use the primary button for the main call to action on a page."
        samples = _samples(f"<pre>{prose}</pre>")
        assert samples[0].detected_language is None

    def test_classifier_failure_means_no_detection(self):
        class Exploding:
            def classify(self, code):
                raise RuntimeError("boom")

        samples = _samples(f"<pre>{PYTHON_SNIPPET}</pre>", classifier=Exploding())
        assert samples[0].detected_language is None
        assert samples[0].confidence is None

    def test_confidence_capped(self):
        class Certain:
            def classify(self, code):
                return Detection("python", 250.0)

        samples = _samples(f"<pre>{PYTHON_SNIPPET}</pre>", classifier=Certain())
        assert samples[0].confidence == 1.0

    def test_threshold_is_exclusive(self):
        class Borderline:
            def classify(self, code):
                return Detection("python", 5.0)

        samples = _samples(f"<pre>{PYTHON_SNIPPET}</pre>", classifier=Borderline())
        assert samples[0].detected_language is None

    def test_pre_code_yields_one_sample(self):
        html = '<div class="highlight"><pre><code class="language-css">.btn { color: red; }</code></pre></div>'
        samples = _samples(html)
        assert len(samples) == 1
        assert samples[0].source_element == "code.language-css"

    def test_highlighter_tokens_not_samples(self):
        html = (
            '<pre><code class="hljs language-python">'
            '<span class="hljs-keyword">def</span> <span class="hljs-title">run</span>():\n'
            '    <span class="hljs-keyword">return</span> 1'
            '</code></pre>'
        )
        samples = _samples(html)
        assert len(samples) == 1
        assert samples[0].declared_language == "python"

    def test_empty_blocks_skipped(self):
        assert _samples("<pre>   </pre><pre><code></code></pre>") == []

    def test_identical_code_deduplicated(self):
        assert len(_samples("<pre>npm install ui</pre><section><pre>npm install ui</pre></section>")) == 1

    def test_document_order_within_selector(self):
        samples = _samples("<pre>first()</pre><pre>second()</pre>")
        assert [s.code for s in samples] == ["first()", "second()"]

    def test_ids_unique_and_indexed(self):
        samples = _samples("<pre>a()</pre><pre>b()</pre>")
        assert samples[0].id != samples[1].id
        assert samples[0].id.startswith("code-") and samples[0].id.endswith("-0")
        assert samples[1].id.endswith("-1")

    def test_context_from_previous_heading(self):
        html = "<h2>Installation</h2><pre><code>npm install @acme/ui</code></pre>"
        assert _samples(html)[0].context == "Installation"

    def test_context_from_previous_paragraph_truncated(self):
        long_text = "word " * 50
        html = f"<p>{long_text}</p><pre>run()</pre>"
        context = _samples(html)[0].context
        assert len(context) == 100
        assert context.startswith("word word")

    def test_no_context_after_other_elements(self):
        html = "<div>Preview</div><pre>run()</pre>"
        assert _samples(html)[0].context is None

    def test_line_numbers_on_ancestor(self):
        html = '<div class="line-numbers"><pre>run()</pre></div>'
        assert _samples(html)[0].line_numbers_present is True

    def test_line_numbers_on_descendant(self):
        html = '<pre><span class="linenos">1</span>run()</pre>'
        assert _samples(html)[0].line_numbers_present is True

    def test_no_line_numbers(self):
        assert _samples("<pre>run()</pre>")[0].line_numbers_present is False

    def test_custom_selector_classes(self):
        html = '<div class="code-sample">npm run build</div><div class="codehilite">yarn add ui</div>'
        codes = {s.code for s in _samples(html)}
        assert codes == {"npm run build", "yarn add ui"}

    def test_convenience_wrapper(self):
        soup = parse_html("<pre>run()</pre>")
        samples = extract_code_samples(soup, classifier=LanguageClassifier(use_pygments=False))
        assert len(samples) == 1


class TestStatisticalFallback:
    """Undeclared snippets classified with the Pygments second opinion enabled."""

    def _detected(self, escaped_code):
        detector = CodeSampleDetector(classifier=LanguageClassifier(use_pygments=True))
        sample = detector.extract(parse_html(f"<pre>{escaped_code}</pre>"))[0]
        assert sample.declared_language is None
        return sample

    def test_html_block(self):
        sample = self._detected('&lt;div class="card"&gt;\n  &lt;p&gt;Hello&lt;/p&gt;\n&lt;/div&gt;')
        assert sample.detected_language == "html"
        assert sample.confidence > 0.05

    def test_jsx_block(self):
        sample = self._detected(
            'export const Button = ({ label }: { label: string }) =&gt; '
            '&lt;button className="btn"&gt;{label}&lt;/button&gt;;'
        )
        assert sample.detected_language == "jsx"
        assert sample.confidence > 0.05

    def test_css_block(self):
        sample = self._detected(".button {\n  color: #fff;\n  padding: 8px 16px;\n}")
        assert sample.detected_language == "css"
        assert sample.confidence > 0.05
