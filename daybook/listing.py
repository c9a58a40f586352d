"""
Paginated diary listing for Daybook.

Orders diary documents newest first, parses one page at a time and writes
the JSON pages the site's timeline loads incrementally.
"""

import asyncio
import json
import logging
import math
from pathlib import Path
from typing import Iterator, List, Optional

from .config import config
from .models import DiaryPage, DiarySource, Pagination
from .parser import EntryParser


class DiaryFeed:
    """
    Serves the diary as fixed-size pages of parsed entries.
    """

    def __init__(self, sources: List[DiarySource], parser: Optional[EntryParser] = None,
                 items_per_page: Optional[int] = None):
        """
        Initialize the feed.

        Args:
            sources: Diary documents from an importer
            parser: Entry parser (defaults to one with configured collaborators)
            items_per_page: Page size (defaults to config value)
        """
        self.parser = parser or EntryParser()
        self.items_per_page = items_per_page if items_per_page is not None else config.items_per_page
        if self.items_per_page < 1:
            raise ValueError(f"items_per_page must be positive, got {self.items_per_page}")

        # Date ids compare lexicographically, newest first
        self.sources = sorted(sources, key=lambda s: s.date, reverse=True)

    @property
    def total_pages(self) -> int:
        """Number of pages needed for all entries."""
        return math.ceil(len(self.sources) / self.items_per_page)

    def page_numbers(self) -> Iterator[int]:
        """Yield every page number to pre-render, starting at 1."""
        return iter(range(1, self.total_pages + 1))

    async def render_page(self, page: int) -> DiaryPage:
        """
        Parse the entries of one page.

        Args:
            page: 1-indexed page number

        Returns:
            DiaryPage with entries and pagination info

        Raises:
            ValueError: If page is smaller than 1
        """
        if page < 1:
            raise ValueError(f"Page numbers start at 1, got {page}")

        start = (page - 1) * self.items_per_page
        page_sources = self.sources[start:start + self.items_per_page]

        entries = await asyncio.gather(*(self.parser.parse_source(s) for s in page_sources))

        total_pages = self.total_pages
        return DiaryPage(
            entries=list(entries),
            pagination=Pagination(
                current_page=page,
                total_pages=total_pages,
                has_more=page < total_pages,
                items_per_page=self.items_per_page
            )
        )

    async def write_pages(self, output_dir: Optional[str] = None) -> List[Path]:
        """
        Write ``api/diary/<page>.json`` for every page.

        Args:
            output_dir: Build output directory (defaults to config value)

        Returns:
            Paths of the written files
        """
        target_dir = Path(output_dir or config.output_directory) / "api" / "diary"
        target_dir.mkdir(parents=True, exist_ok=True)

        written = []
        for page in self.page_numbers():
            try:
                payload = (await self.render_page(page)).to_json_dict()
            except Exception as e:
                logging.error(f"Error fetching diary entries for page {page}: {e}")
                payload = {"error": "Failed to fetch diary entries"}

            file_path = target_dir / f"{page}.json"
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(payload, f, ensure_ascii=False)
            written.append(file_path)
            logging.info(f"Wrote diary page {page}/{self.total_pages}: {file_path}")

        return written
