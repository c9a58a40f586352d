"""
Base importer interface for Daybook.

This module defines the abstract interface that all diary sources must implement.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import DiarySource


class BaseImporter(ABC):
    """
    Abstract base class for all diary importers.

    Each importer hands over raw diary documents (markdown body plus an
    identifier) for the entry parser to process.
    """

    @abstractmethod
    def get_all_entries(self) -> List[DiarySource]:
        """
        Retrieve all diary documents from the source.

        Returns:
            List of DiarySource objects
        """
        pass
