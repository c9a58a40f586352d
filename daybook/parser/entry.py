"""
Diary entry parser for Daybook.

This module converts one diary document into a DiaryEntry: a list of time
blocks carrying rendered text, optimized images, HTML passthrough and media
cards.
"""

import logging
import re
from typing import Awaitable, Callable, Dict, List, Optional

from ..models import (
    DiaryEntry,
    DiarySource,
    ImageInfo,
    ImageOptimizeOptions,
    MediaCardData,
    OptimizedImage,
    TimeBlock,
)
from ..models.diary import strip_markdown_extension
from ..media import ImageOptimizer, LinkRewriter, VideoPathResolver, is_media_file
from .cards import CARD_KINDS, parse_card
from .text import LinkRewriteFn, TextRenderer
from .tokenizer import find_directive, split_sections, text_segment


ImageOptimizeFn = Callable[[str, Optional[ImageOptimizeOptions]], Awaitable[OptimizedImage]]
VideoResolveFn = Callable[[str], str]

IMAGE_PATTERN = re.compile(r'!\[([^\]]*)\]\(([^\s)]+)(?:\s+"([^"]*)"|\s+\'([^\']*)\')?\)')

MEDIA_ATTRIBUTE_PATTERN = re.compile(
    r'(src|poster)="((?!http)[^"]*attachment/[^"]*?)"',
    re.IGNORECASE
)

IMAGE_FILE_PATTERN = re.compile(r'\.(jpg|jpeg|png|gif|bmp|webp|svg|ico|tiff|tif)$', re.IGNORECASE)

POSTER_OPTIONS = ImageOptimizeOptions(keep_original_size=True, quality=50)

# Dimensions reported when an image could not be optimized
FALLBACK_IMAGE_SIZE = (400, 300)


class EntryParser:
    """
    Parses diary documents into DiaryEntry records.

    The media collaborators are injected so parsing can run without touching
    the file system. Any collaborator failure degrades to the raw value.
    """

    def __init__(self, optimize_image: Optional[ImageOptimizeFn] = None,
                 resolve_video_path: Optional[VideoResolveFn] = None,
                 rewrite_link: Optional[LinkRewriteFn] = None):
        """
        Initialize the entry parser.

        Args:
            optimize_image: Async image optimizer (defaults to an ImageOptimizer)
            resolve_video_path: Video path resolver (defaults to a VideoPathResolver)
            rewrite_link: Link rewriter (defaults to a LinkRewriter)
        """
        if optimize_image is None:
            optimize_image = ImageOptimizer().optimize
        if resolve_video_path is None:
            resolve_video_path = VideoPathResolver().resolve
        if rewrite_link is None:
            rewrite_link = LinkRewriter().rewrite

        self.optimize_image = optimize_image
        self.resolve_video_path = resolve_video_path
        self.renderer = TextRenderer(rewrite_link)

    async def parse(self, body: str, entry_id: str,
                    source_path: Optional[str] = None) -> DiaryEntry:
        """
        Parse a diary document.

        Args:
            body: Markdown body without front matter
            entry_id: Source identifier, e.g. "2024-05-22.md"
            source_path: File the document was read from, for relative links

        Returns:
            DiaryEntry with time blocks sorted latest first
        """
        time_blocks: List[TimeBlock] = []

        for time, content in split_sections(body or ""):
            block = await self.parse_section(time, content, source_path)
            if block.has_content():
                time_blocks.append(block)
            else:
                logging.debug(f"Skipping empty section {time} in {entry_id}")

        # sorted() keeps equal times in source order even when reversed
        time_blocks = sorted(time_blocks, key=lambda b: b.sort_key, reverse=True)

        return DiaryEntry(date=strip_markdown_extension(entry_id), time_blocks=time_blocks)

    async def parse_source(self, source: DiarySource) -> DiaryEntry:
        """Parse a document handed over by an importer."""
        return await self.parse(source.body, source.entry_id, source.path)

    async def parse_section(self, time: str, content: str,
                            source_path: Optional[str] = None) -> TimeBlock:
        """
        Parse the content of one ``## HH:MM`` section.

        Args:
            time: The section's HH:MM marker
            content: Everything up to the next marker
            source_path: File the section belongs to, for relative links

        Returns:
            TimeBlock, possibly empty
        """
        cards: Dict[str, Optional[MediaCardData]] = {}
        for kind in CARD_KINDS:
            cards[kind] = await self.parse_card_block(content, kind)

        return TimeBlock(
            time=time,
            text=self.renderer.render(text_segment(content), source_path),
            images=await self.collect_images(content),
            html_content=await self.process_html(content),
            movie_data=cards["movie"],
            tv_data=cards["tv"],
            book_data=cards["book"],
            music_data=cards["music"]
        )

    async def collect_images(self, content: str) -> List[ImageInfo]:
        """
        Optimize the images listed in the section's ``imgs`` block.
        """
        block = find_directive(content, "imgs")
        if block is None:
            return []

        images = []
        for match in IMAGE_PATTERN.finditer(block):
            alt, src = match.group(1), match.group(2)
            title = match.group(3) or match.group(4) or ""

            try:
                optimized = await self.optimize_image(src, None)
                images.append(ImageInfo(
                    alt=alt,
                    src=optimized.thumbnail,
                    original=optimized.original,
                    title=title,
                    width=optimized.width,
                    height=optimized.height
                ))
            except Exception as e:
                logging.warning(f"Image optimization failed for {src}: {e}")
                width, height = FALLBACK_IMAGE_SIZE
                images.append(ImageInfo(
                    alt=alt, src=src, original=src, title=title, width=width, height=height
                ))

        return images

    async def process_html(self, content: str) -> str:
        """
        Return the section's ``html`` block with attachment media paths rewritten.
        """
        block = find_directive(content, "html")
        if block is None:
            return ""

        html_content = block.strip()
        parts: List[str] = []
        position = 0

        for match in MEDIA_ATTRIBUTE_PATTERN.finditer(html_content):
            attribute, path = match.group(1), match.group(2)
            rewritten = await self._rewrite_media_path(attribute, path)
            parts.append(html_content[position:match.start()])
            parts.append(f'{attribute}="{rewritten}"')
            position = match.end()

        parts.append(html_content[position:])
        return "".join(parts)

    async def _rewrite_media_path(self, attribute: str, path: str) -> str:
        if is_media_file(path):
            try:
                return self.resolve_video_path(path)
            except Exception as e:
                logging.warning(f"Video path resolution failed for {path}: {e}")
                return path

        if IMAGE_FILE_PATTERN.search(path):
            options = POSTER_OPTIONS if attribute.lower() == "poster" else None
            try:
                optimized = await self.optimize_image(path, options)
                return optimized.thumbnail
            except Exception as e:
                logging.warning(f"Image optimization failed for {path}: {e}")

        return path

    async def parse_card_block(self, content: str, kind: str) -> Optional[MediaCardData]:
        """
        Parse the section's first ``card-<kind>`` block.

        Args:
            content: Section content
            kind: Card kind (movie, tv, book, music)

        Returns:
            MediaCardData or None when absent or without title
        """
        block = find_directive(content, f"card-{kind}")
        if block is None:
            return None

        card = parse_card(block.strip(), kind)
        if card is None:
            return None

        if card.get("poster"):
            card["poster"] = await self._optimize_poster(card["poster"])

        return MediaCardData(**card)

    async def _optimize_poster(self, poster: str) -> str:
        try:
            optimized = await self.optimize_image(poster, None)
            return optimized.thumbnail
        except Exception as e:
            logging.warning(f"Poster optimization failed for {poster}: {e}")
            return poster
