"""
Media helper models for Daybook.

Options and results exchanged with the image optimizer.
"""

from pydantic import BaseModel, Field


class ImageOptimizeOptions(BaseModel):
    """
    Options controlling thumbnail generation.
    """

    thumbnail_size: int = Field(
        default=400,
        description="Maximum size of the thumbnail's long side in pixels"
    )

    keep_original_size: bool = Field(
        default=False,
        description="Keep the original dimensions instead of scaling down"
    )

    quality: int = Field(
        default=80,
        description="Encoder quality of the thumbnail (1-100)"
    )

    def cache_key(self, image_path: str) -> str:
        """Build the memoization key for an image path with these options."""
        return f"{image_path}_{self.thumbnail_size}_{self.keep_original_size}_{self.quality}"


class OptimizedImage(BaseModel):
    """
    Result of optimizing one image.
    """

    thumbnail: str = Field(..., description="Thumbnail URL")
    original: str = Field(..., description="Full-size URL")
    width: int = Field(..., description="Original width in pixels")
    height: int = Field(..., description="Original height in pixels")

    @classmethod
    def passthrough(cls, image_path: str, width: int = 400, height: int = 300) -> "OptimizedImage":
        """Use the raw path as both renditions."""
        return cls(thumbnail=image_path, original=image_path, width=width, height=height)
