"""
Diary data models for Daybook.

This module defines the structured records the entry parser produces and the
paginated listing serves. Field aliases carry the camelCase names the site's
front end reads from the JSON pages.
"""

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class ImageInfo(BaseModel):
    """
    One image declared in an ``imgs`` block, after optimization.
    """

    alt: str = Field(
        default="",
        description="Alternative text from the markdown image syntax"
    )

    src: str = Field(
        ...,
        description="Thumbnail URL shown in the timeline"
    )

    original: str = Field(
        ...,
        description="Full-size URL shown when the image is opened"
    )

    title: str = Field(
        default="",
        description="Optional quoted title from the markdown image syntax"
    )

    width: int = Field(
        ...,
        description="Original image width in pixels"
    )

    height: int = Field(
        ...,
        description="Original image height in pixels"
    )


class MediaCardData(BaseModel):
    """
    A movie, TV show, book or music record embedded with a ``card-<kind>`` block.

    Only ``title`` is required. Which of the optional keys a card may carry
    depends on its kind (see ``daybook.parser.cards.CARD_FIELDS``).
    """

    id: Optional[Union[int, float, str]] = None
    title: str = Field(..., description="Display title, mandatory for every card")
    release_date: Optional[str] = None
    region: Optional[str] = None
    rating: Optional[Union[int, float]] = None
    runtime: Optional[Union[int, float]] = None
    duration: Optional[Union[int, float]] = None
    pages: Optional[Union[int, float]] = None
    genres: Optional[str] = None
    overview: Optional[str] = None
    poster: Optional[str] = Field(
        default=None,
        description="Poster URL, replaced by the optimized thumbnail when available"
    )
    source: Optional[str] = None
    external_url: Optional[str] = None
    author: Optional[str] = None
    publisher: Optional[str] = None
    isbn: Optional[str] = None
    album: Optional[str] = None
    url: Optional[str] = None


class TimeBlock(BaseModel):
    """
    One timestamped fragment of a diary entry.
    """

    model_config = ConfigDict(populate_by_name=True)

    time: str = Field(
        ...,
        description="Section time in HH:MM form"
    )

    text: str = Field(
        default="",
        description="Rendered HTML of the section's text segment"
    )

    images: List[ImageInfo] = Field(
        default_factory=list,
        description="Images from the section's imgs block, in source order"
    )

    html_content: str = Field(
        default="",
        alias="htmlContent",
        description="Raw HTML passthrough with attachment paths rewritten"
    )

    movie_data: Optional[MediaCardData] = Field(default=None, alias="movieData")
    tv_data: Optional[MediaCardData] = Field(default=None, alias="tvData")
    book_data: Optional[MediaCardData] = Field(default=None, alias="bookData")
    music_data: Optional[MediaCardData] = Field(default=None, alias="musicData")

    def has_content(self) -> bool:
        """Return True if the block carries anything worth rendering."""
        return bool(
            self.text
            or self.images
            or self.html_content
            or self.movie_data
            or self.tv_data
            or self.book_data
            or self.music_data
        )

    @property
    def sort_key(self) -> str:
        """Colon-stripped time, e.g. "14:05" -> "1405"."""
        return self.time.replace(":", "")


class DiaryEntry(BaseModel):
    """
    One parsed diary document.
    """

    model_config = ConfigDict(populate_by_name=True)

    date: str = Field(
        ...,
        description="Entry date taken from the source file name, not validated"
    )

    time_blocks: List[TimeBlock] = Field(
        default_factory=list,
        alias="timeBlocks",
        description="Time blocks, latest time first"
    )

    def to_json_dict(self) -> dict:
        """Serialize with the front end's field names, omitting absent cards."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Pagination(BaseModel):
    """Pagination block of a listing page."""

    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(..., alias="currentPage")
    total_pages: int = Field(..., alias="totalPages")
    has_more: bool = Field(..., alias="hasMore")
    items_per_page: int = Field(..., alias="itemsPerPage")


class DiaryPage(BaseModel):
    """
    One page of the paginated diary listing.
    """

    entries: List[DiaryEntry] = Field(default_factory=list)
    pagination: Pagination

    def to_json_dict(self) -> dict:
        """Serialize the page the way the listing endpoint returns it."""
        return self.model_dump(by_alias=True, exclude_none=True)


class DiarySource(BaseModel):
    """
    A raw diary document as handed over by an importer.
    """

    entry_id: str = Field(
        ...,
        description="Identifier of the document, its path relative to the content directory (e.g. '2024-05-22.md')"
    )

    body: str = Field(
        default="",
        description="Markdown body with front matter removed"
    )

    path: Optional[str] = Field(
        default=None,
        description="Source file path, used to resolve relative links"
    )

    @property
    def date(self) -> str:
        """The entry id without its markdown extension."""
        return strip_markdown_extension(self.entry_id)


def strip_markdown_extension(entry_id: str) -> str:
    """Drop a trailing .md or .mdx from an entry id."""
    for suffix in (".mdx", ".md"):
        if entry_id.endswith(suffix):
            return entry_id[: -len(suffix)]
    return entry_id
