"""
Mock importer for testing Daybook.

This module provides a mock data source with hardcoded diary documents for
exercising the pipeline without a content directory.
"""

from typing import List

from ..models import DiarySource
from .base import BaseImporter


class MockImporter(BaseImporter):
    """
    Mock importer that returns hardcoded diary documents.

    Used for testing the build pipeline without real content.
    """

    def __init__(self):
        """Initialize the mock importer with test data."""
        self._test_entries = self._create_test_entries()

    def get_all_entries(self) -> List[DiarySource]:
        """
        Return all hardcoded diary documents.

        Returns:
            List of test DiarySource objects
        """
        return self._test_entries

    def _create_test_entries(self) -> List[DiarySource]:
        """
        Create hardcoded documents covering the diary syntax.

        Returns:
            List of test documents
        """
        entries = []

        # Day 1: text, list and an image block
        entries.append(DiarySource(
            entry_id="2024-05-22.md",
            body=(
                "## 08:30\n"
                "Morning coffee with **Jane**.\n"
                "- buy film\n"
                "- call the lab\n"
                "```imgs\n"
                "![Coffee](https://images.example.com/coffee.jpg \"First cup\")\n"
                "```\n"
                "\n"
                "## 21:10\n"
                "> Not all those who wander are lost\n"
            )
        ))

        # Day 2: a movie card and a code snippet
        entries.append(DiarySource(
            entry_id="2024-05-23.md",
            body=(
                "## 20:00\n"
                "Watched a classic, notes in `notes.md`.\n"
                "```card-movie\n"
                "title: Spirited Away\n"
                "release_date: 2001-07-20\n"
                "rating: 9.3\n"
                "runtime: 125\n"
                "poster: https://images.example.com/spirited-away.jpg\n"
                "```\n"
                "\n"
                "## 11:45\n"
                "Fixed the build script:\n"
                "```bash\n"
                "make clean && make\n"
                "```\n"
            )
        ))

        # Day 3: HTML passthrough and music
        entries.append(DiarySource(
            entry_id="2024-05-24.md",
            body=(
                "## 18:20\n"
                "```html\n"
                "<video src=\"https://videos.example.com/walk.mp4\" controls></video>\n"
                "```\n"
                "```card-music\n"
                "title: Clair de Lune\n"
                "author: Claude Debussy\n"
                "duration: 300\n"
                "```\n"
            )
        ))

        return entries
