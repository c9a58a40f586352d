"""
Tokenizer for diary documents.

Splits a document into ``## HH:MM`` sections, locates fenced directive
blocks and turns a section's text segment into a sequence of tagged spans
that the renderer turns into HTML.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


SECTION_PATTERN = re.compile(r'^## (\d{2}:\d{2})(?!\d)', re.MULTILINE)

# Any fenced block; the tag decides whether it is code or a directive
FENCE_PATTERN = re.compile(r'```([\w-]+)?\n?(.*?)```', re.DOTALL)

DIRECTIVE_START_PATTERN = re.compile(r'```(?:imgs|html|card-)')

UNORDERED_ITEM_PATTERN = re.compile(r'^- (.+)$')
ORDERED_ITEM_PATTERN = re.compile(r'^\d+\. (.+)$')
QUOTE_LINE_PATTERN = re.compile(r'^> (.*)$')


@dataclass
class CodeSpan:
    """A protected fenced code block."""
    lang: str
    code: str


@dataclass
class ListSpan:
    """Contiguous list item lines."""
    ordered: bool
    items: List[str] = field(default_factory=list)


@dataclass
class QuoteSpan:
    """Contiguous ``> `` lines."""
    lines: List[str] = field(default_factory=list)


@dataclass
class ParagraphSpan:
    """A single non-empty line of text."""
    text: str


Span = Union[CodeSpan, ListSpan, QuoteSpan, ParagraphSpan]


def split_sections(body: str) -> List[Tuple[str, str]]:
    """
    Split a document into (time, content) pairs.

    Args:
        body: The markdown body of a diary document

    Returns:
        One pair per ``## HH:MM`` marker, in source order
    """
    markers = list(SECTION_PATTERN.finditer(body))
    sections = []
    for i, marker in enumerate(markers):
        end = markers[i + 1].start() if i + 1 < len(markers) else len(body)
        sections.append((marker.group(1), body[marker.end():end]))
    return sections


def is_directive(tag: Optional[str]) -> bool:
    """Whether a fence tag is handled outside the text (imgs, html, card-*)."""
    if not tag:
        return False
    return tag in ("imgs", "html") or tag.startswith("card-")


def text_segment(content: str) -> str:
    """The part of a section before its first directive fence, trimmed."""
    match = DIRECTIVE_START_PATTERN.search(content)
    segment = content[:match.start()] if match else content
    return segment.strip()


def find_directive(content: str, tag: str) -> Optional[str]:
    """
    Return the raw body of the first fence tagged ``tag`` in a section.

    Args:
        content: Section content
        tag: Fence tag such as ``imgs`` or ``card-movie``

    Returns:
        Text between the tag and the closing fence, or None
    """
    match = re.search(r'```' + re.escape(tag) + r'(.*?)```', content, re.DOTALL)
    return match.group(1) if match else None


def tokenize(text: str) -> List[Span]:
    """
    Turn a text segment into spans.

    Fenced code becomes ``CodeSpan`` and is never touched by line rules;
    stray directive fences are dropped; everything else is grouped line by
    line into lists, quotes and paragraphs.
    """
    spans: List[Span] = []
    position = 0
    for fence in FENCE_PATTERN.finditer(text):
        spans.extend(_tokenize_lines(text[position:fence.start()]))
        tag = fence.group(1)
        if not is_directive(tag):
            spans.append(CodeSpan(lang=tag or "text", code=fence.group(2).strip()))
        position = fence.end()
    spans.extend(_tokenize_lines(text[position:]))
    return spans


def _tokenize_lines(text: str) -> List[Span]:
    spans: List[Span] = []
    current: Optional[Union[ListSpan, QuoteSpan]] = None

    for line in text.split("\n"):
        unordered = UNORDERED_ITEM_PATTERN.match(line)
        ordered = ORDERED_ITEM_PATTERN.match(line)
        quote = QUOTE_LINE_PATTERN.match(line)

        if unordered or ordered:
            is_ordered = ordered is not None and unordered is None
            item = (unordered or ordered).group(1).strip()
            if not (isinstance(current, ListSpan) and current.ordered == is_ordered):
                current = ListSpan(ordered=is_ordered)
                spans.append(current)
            current.items.append(item)
        elif quote:
            if not isinstance(current, QuoteSpan):
                current = QuoteSpan()
                spans.append(current)
            current.lines.append(quote.group(1).strip())
        else:
            current = None
            if line.strip():
                spans.append(ParagraphSpan(text=line.strip()))

    return spans
