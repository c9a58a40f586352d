"""
HTML rendering of diary text segments.
"""

import html
import logging
import re
from typing import Callable, List, Optional

from .tokenizer import CodeSpan, ListSpan, QuoteSpan, ParagraphSpan, Span, tokenize


INLINE_CODE_PATTERN = re.compile(r'`([^`]+)`')
BOLD_PATTERN = re.compile(r'\*\*([^*]+)\*\*')
MARK_PATTERN = re.compile(r'__([^_]+)__')
LINK_PATTERN = re.compile(r'\[([^\]]+)\]\(([^\)]+)\)')

LinkRewriteFn = Callable[[str, Optional[str]], str]

# Utility classes the site's stylesheet provides for diary fragments
CSS_CLASSES = {
    "paragraph": "mb-2",
    "mark": "bg-accent/20 text-foreground px-0.5",
    "link": (
        "text-skin-accent font-semibold underline decoration-2 underline-offset-2 "
        "hover:decoration-4 hover:text-skin-accent-2 transition-all duration-200"
    ),
    "list": "mt-1 mb-2 pl-2",
    "unordered_item": "ml-4 list-disc",
    "ordered_item": "ml-4 list-decimal",
    "quote": "px-3 py-2 my-2 italic text-foreground/80 relative",
    "quote_line": "mb-1 last:mb-0",
    "quote_open": "text-4xl text-foreground/30 absolute -left-1 -top-1",
    "quote_close": "text-4xl text-foreground/30 absolute -right-0 -bottom-2",
    "code": "mb-2",
}


class TextRenderer:
    """
    Renders a section's text segment to an HTML fragment.
    """

    def __init__(self, rewrite_link: Optional[LinkRewriteFn] = None):
        """
        Initialize the renderer.

        Args:
            rewrite_link: Callable ``(href, current_file_path)`` applied to every link target
        """
        self.rewrite_link = rewrite_link or (lambda href, current_file_path=None: href)

    def render(self, text: str, current_file_path: Optional[str] = None) -> str:
        """
        Render markdown-ish text to HTML.

        Args:
            text: The text segment of a section
            current_file_path: File the text comes from, for relative links

        Returns:
            Concatenated HTML blocks, empty string for empty text
        """
        return "".join(self.render_span(span, current_file_path) for span in tokenize(text))

    def render_span(self, span: Span, current_file_path: Optional[str] = None) -> str:
        if isinstance(span, CodeSpan):
            return (
                f'<pre class="{CSS_CLASSES["code"]}" data-language="{html.escape(span.lang)}">'
                f'<code>{html.escape(span.code)}</code></pre>'
            )

        if isinstance(span, ListSpan):
            tag = "ol" if span.ordered else "ul"
            item_class = CSS_CLASSES["ordered_item" if span.ordered else "unordered_item"]
            items = "".join(
                f'<li class="{item_class}">{self.render_inline(item, current_file_path)}</li>'
                for item in span.items
            )
            return f'<{tag} class="{CSS_CLASSES["list"]}">{items}</{tag}>'

        if isinstance(span, QuoteSpan):
            lines = "".join(
                f'<p class="{CSS_CLASSES["quote_line"]}">'
                f'{self.render_inline(line, current_file_path) if line else "&nbsp;"}</p>'
                for line in span.lines
            )
            return (
                f'<blockquote class="{CSS_CLASSES["quote"]}">'
                f'<span class="{CSS_CLASSES["quote_open"]}">“</span>{lines}'
                f'<span class="{CSS_CLASSES["quote_close"]}">”</span></blockquote>'
            )

        if isinstance(span, ParagraphSpan):
            return (
                f'<p class="{CSS_CLASSES["paragraph"]}">'
                f'{self.render_inline(span.text, current_file_path)}</p>'
            )

        raise TypeError(f"Unknown span type: {type(span).__name__}")

    def render_inline(self, text: str, current_file_path: Optional[str] = None) -> str:
        """
        Render inline markup; the content of backtick spans is left alone.
        """
        parts: List[str] = []
        position = 0
        for match in INLINE_CODE_PATTERN.finditer(text):
            parts.append(self._render_links(text[position:match.start()], current_file_path))
            parts.append(f"<code>{html.escape(match.group(1))}</code>")
            position = match.end()
        parts.append(self._render_links(text[position:], current_file_path))
        return "".join(parts)

    def _render_links(self, text: str, current_file_path: Optional[str]) -> str:
        # Link targets never go through the emphasis rules
        parts: List[str] = []
        position = 0
        for match in LINK_PATTERN.finditer(text):
            parts.append(self._render_emphasis(text[position:match.start()]))
            parts.append(self._render_link(match.group(1), match.group(2), current_file_path))
            position = match.end()
        parts.append(self._render_emphasis(text[position:]))
        return "".join(parts)

    def _render_emphasis(self, text: str) -> str:
        text = BOLD_PATTERN.sub(r'<strong>\1</strong>', text)
        return MARK_PATTERN.sub(lambda m: f"<mark class='{CSS_CLASSES['mark']}'>{m.group(1)}</mark>", text)

    def _render_link(self, label: str, href: str, current_file_path: Optional[str]) -> str:
        try:
            href = self.rewrite_link(href, current_file_path)
        except Exception as e:
            logging.warning(f"Link rewrite failed for {href}: {e}")
        return (
            f'<a href="{href}" target="_blank" rel="noopener noreferrer" '
            f'class="{CSS_CLASSES["link"]}">{self._render_emphasis(label)}</a>'
        )
