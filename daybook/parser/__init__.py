"""Diary entry parsing."""

from .entry import EntryParser
from .text import TextRenderer
from .tokenizer import split_sections, tokenize

__all__ = ["EntryParser", "TextRenderer", "split_sections", "tokenize"]
