"""
Directory importer for Daybook.

Reads diary documents (one markdown file per day) from a content directory,
stripping their YAML front matter.
"""

import logging
from pathlib import Path
from typing import List, Optional

import frontmatter

from ..config import config
from ..models import DiarySource
from .base import BaseImporter


DIARY_EXTENSIONS = (".md", ".mdx")


class DiaryDirectoryImporter(BaseImporter):
    """
    Importer for a directory of diary markdown files.
    """

    def __init__(self, content_dir: Optional[str] = None):
        """
        Initialize the directory importer.

        Args:
            content_dir: Directory holding the diary files (defaults to config value)
        """
        self.content_dir = Path(content_dir or config.content_directory)

        if not self.content_dir.is_dir():
            logging.warning(f"Diary directory not found: {self.content_dir}")

        logging.info(f"Initialized diary directory importer for: {self.content_dir}")

    def get_all_entries(self) -> List[DiarySource]:
        """
        Read every diary file below the content directory.

        Returns:
            List of DiarySource objects ordered by identifier
        """
        if not self.content_dir.is_dir():
            return []

        entries = []
        for file_path in sorted(self.content_dir.rglob("*")):
            if not file_path.is_file() or file_path.suffix.lower() not in DIARY_EXTENSIONS:
                continue

            try:
                post = frontmatter.load(str(file_path))
            except Exception as e:
                logging.error(f"Failed to read diary file {file_path}: {e}")
                continue

            entries.append(DiarySource(
                entry_id=file_path.relative_to(self.content_dir).as_posix(),
                body=post.content,
                path=str(file_path)
            ))

        logging.info(f"Loaded {len(entries)} diary entries from {self.content_dir}")
        return entries
