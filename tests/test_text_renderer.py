"""
Tests for section splitting, tokenizing and text rendering.
"""

import unittest

from daybook.parser import TextRenderer, split_sections, tokenize
from daybook.parser.cards import parse_card, parse_key_values, parse_number
from daybook.parser.tokenizer import (
    CodeSpan,
    ListSpan,
    ParagraphSpan,
    QuoteSpan,
    find_directive,
    text_segment,
)


class TestSections(unittest.TestCase):
    """Test splitting documents at time markers."""

    def test_split_sections(self):
        body = "intro\n## 08:00\na\n## 09:30 extra\nb"

        self.assertEqual(split_sections(body), [("08:00", "\na\n"), ("09:30", " extra\nb")])

    def test_markers_must_be_exact(self):
        """Test near-miss headings are not section markers."""
        self.assertEqual(split_sections("## 08:000\nx"), [])
        self.assertEqual(split_sections("### 08:00\nx"), [])
        self.assertEqual(split_sections("text ## 08:00\nx"), [])

    def test_find_directive_returns_first(self):
        content = "```imgs\nfirst\n```\n```imgs\nsecond\n```"

        self.assertEqual(find_directive(content, "imgs"), "\nfirst\n")
        self.assertIsNone(find_directive(content, "html"))

    def test_text_segment_stops_at_directive(self):
        self.assertEqual(text_segment("\n hello \n```card-tv\ntitle: x\n```"), "hello")
        self.assertEqual(text_segment("\nplain\n"), "plain")


class TestTokenizer(unittest.TestCase):
    """Test the span tokenizer."""

    def test_spans(self):
        text = "para\n- a\n- b\n1. one\n> quoted\n```python\nx = 1\n```\nend"

        spans = tokenize(text)

        self.assertEqual(spans, [
            ParagraphSpan(text="para"),
            ListSpan(ordered=False, items=["a", "b"]),
            ListSpan(ordered=True, items=["one"]),
            QuoteSpan(lines=["quoted"]),
            CodeSpan(lang="python", code="x = 1"),
            ParagraphSpan(text="end"),
        ])

    def test_blank_line_separates_lists(self):
        spans = tokenize("- a\n\n- b")

        self.assertEqual(spans, [ListSpan(ordered=False, items=["a"]), ListSpan(ordered=False, items=["b"])])

    def test_stray_directives_are_dropped(self):
        self.assertEqual(
            tokenize("a\n```imgs\n![x](y)\n```\nb"),
            [ParagraphSpan(text="a"), ParagraphSpan(text="b")]
        )

    def test_code_lines_are_not_list_items(self):
        spans = tokenize("```\n- not a list\n> not a quote\n```")

        self.assertEqual(spans, [CodeSpan(lang="text", code="- not a list\n> not a quote")])


class TestTextRenderer(unittest.TestCase):
    """Test HTML rendering of text segments."""

    def setUp(self):
        self.renderer = TextRenderer(lambda href, current_file_path=None: "/posts/x" if href.endswith(".md") else href)

    def test_empty_text(self):
        self.assertEqual(self.renderer.render(""), "")

    def test_paragraph_with_bold_and_mark(self):
        html = self.renderer.render("**bold** and __marked__")

        self.assertEqual(
            html,
            '<p class="mb-2"><strong>bold</strong> and '
            "<mark class='bg-accent/20 text-foreground px-0.5'>marked</mark></p>"
        )

    def test_lists(self):
        html = self.renderer.render("- a\n- b\n1. one\n2. two")

        self.assertEqual(
            html,
            '<ul class="mt-1 mb-2 pl-2"><li class="ml-4 list-disc">a</li><li class="ml-4 list-disc">b</li></ul>'
            '<ol class="mt-1 mb-2 pl-2"><li class="ml-4 list-decimal">one</li>'
            '<li class="ml-4 list-decimal">two</li></ol>'
        )

    def test_blockquote_is_a_standalone_block(self):
        """Test quotes are not wrapped in paragraphs and empty lines keep spacing."""
        html = self.renderer.render("> line\n> \nafter")

        self.assertTrue(html.startswith('<blockquote class="px-3 py-2 my-2 italic text-foreground/80 relative">'))
        self.assertIn('<p class="mb-1 last:mb-0">line</p><p class="mb-1 last:mb-0">&nbsp;</p>', html)
        self.assertTrue(html.endswith('</blockquote><p class="mb-2">after</p>'))
        self.assertNotIn('<p class="mb-2"><blockquote', html)

    def test_code_block_is_escaped(self):
        html = self.renderer.render("before\n```python\nx = '<a>' **no**\n```\nafter")

        self.assertIn('<pre class="mb-2" data-language="python"><code>', html)
        self.assertIn("&lt;a&gt;", html)
        self.assertIn("**no**", html)
        self.assertNotIn("<strong>", html)

    def test_code_block_default_language(self):
        self.assertIn('data-language="text"', self.renderer.render("```\nplain\n```"))

    def test_inline_code_is_protected(self):
        html = self.renderer.render("`**not bold** <b>` and **bold**")

        self.assertEqual(
            html,
            '<p class="mb-2"><code>**not bold** &lt;b&gt;</code> and <strong>bold</strong></p>'
        )

    def test_links(self):
        html = self.renderer.render("[post](other.md) and [site](https://example.com)")

        self.assertIn('<a href="/posts/x" target="_blank" rel="noopener noreferrer"', html)
        self.assertIn('<a href="https://example.com"', html)
        self.assertIn(">post</a>", html)

    def test_link_targets_skip_emphasis(self):
        """Test underscores and asterisks in hrefs stay literal."""
        html = self.renderer.render("see [a](https://x.com/__init__.py) and [b](https://x.com/**/x)")

        self.assertIn('href="https://x.com/__init__.py"', html)
        self.assertIn('href="https://x.com/**/x"', html)
        self.assertNotIn("<mark", html)
        self.assertNotIn("<strong>", html)

    def test_link_label_keeps_emphasis(self):
        html = self.renderer.render("[**bold** label](https://example.com) and __after__")

        self.assertIn('"><strong>bold</strong> label</a>', html)
        self.assertIn("<mark class='bg-accent/20 text-foreground px-0.5'>after</mark>", html)

    def test_current_file_reaches_rewriter(self):
        calls = []

        def recording(href, current_file_path=None):
            calls.append((href, current_file_path))
            return href

        TextRenderer(recording).render("- [post](../blog/a.md)", "/site/diary/2024-05-22.md")

        self.assertEqual(calls, [("../blog/a.md", "/site/diary/2024-05-22.md")])

    def test_failing_rewriter_keeps_href(self):
        def broken(href, current_file_path=None):
            raise OSError("boom")

        html = TextRenderer(broken).render("[post](other.md)")

        self.assertIn('href="other.md"', html)


class TestCards(unittest.TestCase):
    """Test card field parsing."""

    def test_parse_number(self):
        self.assertEqual(parse_number("8.5/10"), 8.5)
        self.assertEqual(parse_number("120 min"), 120)
        self.assertIsInstance(parse_number("120.0"), int)
        self.assertEqual(parse_number(".5"), 0.5)
        self.assertIsNone(parse_number("n/a"))
        self.assertIsNone(parse_number("1e999"))

    def test_parse_key_values(self):
        fields = parse_key_values("title: A: B\nrating:\nnot a pair\ntitle: other\n  genres : drama ")

        self.assertEqual(fields, {"title": "A: B", "genres": "drama"})

    def test_parse_card_limits_fields(self):
        card = parse_card("title: Song\nrating: 9\nduration: 3.5", "music")

        self.assertEqual(card, {"title": "Song", "duration": 3.5})

    def test_parse_card_requires_title(self):
        self.assertIsNone(parse_card("rating: 9", "movie"))


if __name__ == '__main__':
    unittest.main()
