"""
Daybook: diary parsing and reactions toolkit for a static blog.

Converts timestamped diary markdown into structured entries and coalesces
emoji reaction reads against a remote store.
"""

__version__ = "0.1.0"
__author__ = "Daybook Project"

# Import main components
from .models import DiaryEntry, TimeBlock, DiaryPage
from .parser import EntryParser
from .importers import BaseImporter, MockImporter, DiaryDirectoryImporter
from .listing import DiaryFeed
from .reactions import ReactionStore, ReactionsBatcher

__all__ = [
    "DiaryEntry",
    "TimeBlock",
    "DiaryPage",
    "EntryParser",
    "BaseImporter",
    "MockImporter",
    "DiaryDirectoryImporter",
    "DiaryFeed",
    "ReactionStore",
    "ReactionsBatcher"
]
