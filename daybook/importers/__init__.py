"""Diary importers for various sources."""

from .base import BaseImporter
from .mock import MockImporter
from .directory import DiaryDirectoryImporter

__all__ = ["BaseImporter", "MockImporter", "DiaryDirectoryImporter"]
