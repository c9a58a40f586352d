"""
Image optimization for Daybook.

Locates attachment images referenced by diary entries, renders WebP
thumbnails and full-size copies with Pillow and memoizes the results.
"""

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image

from ..config import config
from ..models import ImageOptimizeOptions, OptimizedImage


IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg")

# Size reported for remote images, which are never downloaded
REMOTE_IMAGE_SIZE = (800, 600)


def attachment_file_name(image_path: str) -> str:
    """
    Return the part of a path after its ``attachment/`` segment.

    Args:
        image_path: Path as written in the markdown

    Returns:
        The attachment-relative name, or an empty string if there is none
    """
    normalized = image_path.replace("\\", "/")
    if "attachment/" not in normalized:
        return ""
    return normalized.split("attachment/", 1)[1]


def matches_attachment(relative: str, file_name: str) -> bool:
    """
    Whether an attachment-relative path is the file a link names.

    The name must equal the whole path or a trailing run of its components,
    so ``at.jpg`` never matches ``cat.jpg``.
    """
    return relative == file_name or relative.endswith("/" + file_name)


def fit_within(width: int, height: int, size: int) -> Tuple[int, int]:
    """
    Scale dimensions so the long side equals ``size``, keeping the aspect ratio.
    """
    aspect_ratio = width / height
    if aspect_ratio > 1:
        # Landscape
        return size, max(1, round(size / aspect_ratio))
    # Portrait or square
    return max(1, round(size * aspect_ratio)), size


class ImageOptimizer:
    """
    Produces thumbnails and full-size renditions for attachment images.

    Results are cached per path and options. Concurrent requests for the same
    key share a single in-flight computation.
    """

    def __init__(self, attachment_dir: Optional[str] = None, output_dir: Optional[str] = None,
                 public_prefix: Optional[str] = None, full_size_quality: Optional[int] = None):
        """
        Initialize the image optimizer.

        Args:
            attachment_dir: Directory holding source images (defaults to config value)
            output_dir: Directory optimized files are written to (defaults to config value)
            public_prefix: URL prefix of the output directory (defaults to config value)
            full_size_quality: Quality of the full-size rendition (defaults to config value)
        """
        self.attachment_dir = Path(attachment_dir or config.attachment_directory)
        self.output_dir = Path(output_dir or config.image_output_directory)
        self.public_prefix = (public_prefix or config.image_public_prefix).rstrip("/")
        self.full_size_quality = full_size_quality or config.full_size_quality
        self._cache: Dict[str, OptimizedImage] = {}
        self._in_flight: Dict[str, "asyncio.Future[OptimizedImage]"] = {}
        self._index: Optional[List[Path]] = None

    def default_options(self) -> ImageOptimizeOptions:
        """Options built from configuration."""
        return ImageOptimizeOptions(
            thumbnail_size=config.thumbnail_size,
            quality=config.image_quality
        )

    async def optimize(self, image_path: str,
                       options: Optional[ImageOptimizeOptions] = None) -> OptimizedImage:
        """
        Optimize an image and return thumbnail and original information.

        Args:
            image_path: Image path as written in the markdown
            options: Optimization options

        Returns:
            OptimizedImage with public URLs and original dimensions
        """
        if image_path.startswith("http"):
            width, height = REMOTE_IMAGE_SIZE
            return OptimizedImage.passthrough(image_path, width, height)

        options = options or self.default_options()
        cache_key = options.cache_key(image_path)

        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        pending = self._in_flight.get(cache_key)
        if pending is not None:
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                if not pending.cancelled():
                    raise
                # The task computing it was cancelled, not this one
                logging.debug(f"Shared optimization of {image_path} was cancelled, retrying")
                return await self.optimize(image_path, options)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[cache_key] = future
        try:
            result, cacheable = await self._optimize_uncached(image_path, options)
            if cacheable:
                self._cache[cache_key] = result
            future.set_result(result)
            return result
        except Exception as e:
            future.set_exception(e)
            # Nobody else may be waiting, mark the exception as retrieved
            future.exception()
            raise
        finally:
            if not future.done():
                future.cancel()
            del self._in_flight[cache_key]

    async def _optimize_uncached(self, image_path: str,
                                 options: ImageOptimizeOptions) -> Tuple[OptimizedImage, bool]:
        source = self.find_attachment(image_path)
        if source is None:
            logging.debug(f"Image not found among attachments: {image_path}")
            return OptimizedImage.passthrough(image_path), False

        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, self._render, source, options)
            return result, True
        except Exception as e:
            logging.warning(f"Failed to optimize image {image_path}: {e}")
            return OptimizedImage.passthrough(image_path), False

    def find_attachment(self, image_path: str) -> Optional[Path]:
        """
        Find the attachment file an image path refers to.

        Args:
            image_path: Image path as written in the markdown

        Returns:
            Path of the matching file, or None
        """
        file_name = attachment_file_name(image_path)
        if not file_name:
            return None

        for candidate in self._attachment_index():
            if matches_attachment(candidate.relative_to(self.attachment_dir).as_posix(), file_name):
                return candidate
        return None

    def _attachment_index(self) -> List[Path]:
        if self._index is None:
            if self.attachment_dir.is_dir():
                self._index = sorted(
                    p for p in self.attachment_dir.rglob("*")
                    if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
                )
            else:
                logging.warning(f"Attachment directory not found: {self.attachment_dir}")
                self._index = []
        return self._index

    def _render(self, source: Path, options: ImageOptimizeOptions) -> OptimizedImage:
        """Write the thumbnail and full-size WebP files for one source image."""
        with Image.open(source) as image:
            original_width, original_height = image.size

            if options.keep_original_size:
                thumb_size = (original_width, original_height)
            else:
                thumb_size = fit_within(original_width, original_height, options.thumbnail_size)

            digest = hashlib.sha256(source.read_bytes()).hexdigest()[:10]
            self.output_dir.mkdir(parents=True, exist_ok=True)

            thumb_name = f"{source.stem}_{digest}_{thumb_size[0]}x{thumb_size[1]}_q{options.quality}.webp"
            full_name = f"{source.stem}_{digest}_q{self.full_size_quality}.webp"

            rendition = image if image.mode in ("RGB", "RGBA") else image.convert("RGBA")
            thumb_path = self.output_dir / thumb_name
            if not thumb_path.exists():
                rendition.resize(thumb_size, Image.LANCZOS).save(
                    thumb_path, "WEBP", quality=options.quality
                )

            full_path = self.output_dir / full_name
            if not full_path.exists():
                rendition.save(full_path, "WEBP", quality=self.full_size_quality)

        logging.debug(f"Optimized {source} -> {thumb_name}")
        return OptimizedImage(
            thumbnail=f"{self.public_prefix}/{thumb_name}",
            original=f"{self.public_prefix}/{full_name}",
            width=original_width,
            height=original_height
        )

    async def optimize_many(self, image_paths: List[str]) -> List[OptimizedImage]:
        """Optimize several images concurrently with default options."""
        return list(await asyncio.gather(*(self.optimize(path) for path in image_paths)))

    async def optimize_thumbnail(self, image_path: str) -> str:
        """Return only the thumbnail URL of an image."""
        result = await self.optimize(image_path)
        return result.thumbnail

    def clear_cache(self) -> None:
        """Forget all memoized results and the attachment index."""
        self._cache.clear()
        self._index = None
