"""
Tests for semantic content and full-page text extraction.
"""

from dscrawler.models import ListType
from dscrawler.scraper import PageScraper, parse_html
from dscrawler.semantic import extract_semantic_content, extract_text_content

PAGE = """
<html><head><title>Card</title><style>.card { color: red; }</style></head>
<body>
  <nav role="navigation" aria-label="Main">  Home   Docs </nav>
  <main role="main">
    <h1 id="card">Card</h1>
    <p>  Cards   group
       related content. </p>
    <p>   </p>
    <h2>Props</h2>
    <table>
      <tr><th>Prop</th><th>Type</th></tr>
      <tr><td>elevation</td><td>number</td></tr>
      <tr><td> </td><td></td></tr>
    </table>
    <ul><li>Header</li><li>  </li><li>Body</li></ul>
    <ol><li>Install</li></ol>
    <img src="card.png" alt="A card example">
    <img src="spacer.gif" alt="">
    <button aria-label="Close dialog">x</button>
  </main>
  <script>window.track("card")</script>
  <noscript>Enable JavaScript</noscript>
</body></html>
"""


def _content():
    return extract_semantic_content(parse_html(PAGE))


class TestSemanticContent:

    def test_headings_in_order(self):
        headings = _content().headings
        assert [(h.level, h.text, h.id) for h in headings] == [(1, "Card", "card"), (2, "Props", None)]

    def test_paragraphs_normalized_and_non_empty(self):
        assert _content().paragraphs == ["Cards group related content."]

    def test_lists(self):
        lists = _content().lists
        assert lists[0].type is ListType.UNORDERED
        assert lists[0].items == ["Header", "Body"]
        assert lists[1].type is ListType.ORDERED
        assert lists[1].to_dict() == {"type": "ol", "items": ["Install"]}

    def test_alt_texts(self):
        assert _content().alt_texts == ["A card example"]

    def test_aria_labels(self):
        assert _content().aria_labels == ["Main", "Close dialog"]

    def test_landmarks(self):
        landmarks = _content().landmarks
        assert landmarks[0].role == "navigation"
        assert landmarks[0].label == "Main"
        assert landmarks[0].content == "Home Docs"
        assert landmarks[1].role == "main"
        assert landmarks[1].label is None
        assert len(landmarks[1].content) <= 200

    def test_long_landmark_content_truncated(self):
        body = "word " * 100
        soup = parse_html(f'<body><aside role="complementary">{body}</aside></body>')
        landmark = extract_semantic_content(soup).landmarks[0]
        assert len(landmark.content) == 200
        assert landmark.content == body.strip()[:200]

    def test_extraction_repeatable_on_same_soup(self):
        soup = parse_html(PAGE)
        assert extract_semantic_content(soup).to_dict() == extract_semantic_content(soup).to_dict()

    def test_tables_drop_empty_rows(self):
        tables = _content().tables
        assert tables[0].rows == [["Prop", "Type"], ["elevation", "number"]]

    def test_to_dict_keys(self):
        data = _content().to_dict()
        assert set(data) == {
            "headings", "paragraphs", "lists", "altTexts", "ariaLabels", "landmarks", "tables",
        }


class TestTextContent:

    def test_excludes_script_style_noscript(self):
        text = extract_text_content(parse_html(PAGE))
        assert "window.track" not in text
        assert "color: red" not in text
        assert "Enable JavaScript" not in text
        assert "Cards group related content." in text

    def test_whitespace_collapsed(self):
        text = extract_text_content(parse_html("<body><p>a\n\n  b</p>\t<p>c</p></body>"))
        assert text == "a b c"


class TestPageScraper:

    def test_scrape_composes_extractors(self):
        html = PAGE.replace("</main>", '<a href="/docs/modal">Modal</a><pre>npm i card</pre></main>')
        content = PageScraper().scrape(html, "https://acme.dev/docs/card")
        assert content.metadata.title == "Card"
        assert content.semantic_content.headings[0].text == "Card"
        assert content.links == ["/docs/modal"]
        assert [s.code for s in content.code_samples] == ["npm i card"]
        assert "Modal" in content.text_content

    def test_empty_html(self):
        content = PageScraper().scrape("", "https://acme.dev/docs/")
        assert content.text_content == ""
        assert content.code_samples == []
        assert content.links == []
