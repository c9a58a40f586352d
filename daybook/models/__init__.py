"""Data models for Daybook."""

from .diary import ImageInfo, MediaCardData, TimeBlock, DiaryEntry, Pagination, DiaryPage, DiarySource
from .media import ImageOptimizeOptions, OptimizedImage
from .reactions import ReactionRow, ToggleResult

__all__ = [
    "ImageInfo",
    "MediaCardData",
    "TimeBlock",
    "DiaryEntry",
    "Pagination",
    "DiaryPage",
    "DiarySource",
    "ImageOptimizeOptions",
    "OptimizedImage",
    "ReactionRow",
    "ToggleResult"
]
