"""
Video and audio path resolution for Daybook.

Maps attachment-relative media paths used in diary HTML blocks to the
public URLs they are served from.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..config import config
from .images import attachment_file_name, matches_attachment


VIDEO_EXTENSIONS = (".mp4", ".webm", ".ogg", ".mov", ".avi", ".wmv", ".flv", ".mkv")
AUDIO_EXTENSIONS = (".mp3", ".wav", ".aac", ".flac", ".m4a")

MIME_TYPES = {
    ".webm": "video/webm",
    ".ogg": "video/ogg",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
}


def is_video_file(file_path: str) -> bool:
    """Check whether a path has a video extension."""
    return file_path.lower().endswith(VIDEO_EXTENSIONS)


def is_media_file(file_path: str) -> bool:
    """Check whether a path has a video or audio extension."""
    return file_path.lower().endswith(VIDEO_EXTENSIONS + AUDIO_EXTENSIONS)


class VideoPathResolver:
    """
    Resolves media paths against the attachment directory.

    Resolution never fails: when no attachment matches, the path is rewritten
    naively around its ``attachment`` segment or returned unchanged.
    """

    def __init__(self, attachment_dir: Optional[str] = None, public_prefix: Optional[str] = None):
        """
        Initialize the resolver.

        Args:
            attachment_dir: Directory holding media files (defaults to config value)
            public_prefix: URL prefix the attachment directory is served under
        """
        self.attachment_dir = Path(attachment_dir or config.attachment_directory)
        self.public_prefix = (public_prefix or config.video_public_prefix).rstrip("/")
        self._index: Optional[List[str]] = None

    def resolve(self, video_path: str) -> str:
        """
        Get the public path of a video or audio file.

        Args:
            video_path: Path as written in the HTML block

        Returns:
            The resolved path
        """
        if video_path.startswith("http"):
            return video_path

        file_name = attachment_file_name(video_path)
        if file_name:
            for relative in self._media_index():
                if matches_attachment(relative, file_name):
                    return f"{self.public_prefix}/{relative}"

        if video_path.startswith("../"):
            return video_path.replace("../", "/", 1)

        if "attachment" in video_path:
            return "/attachment" + video_path.split("attachment", 1)[1]

        return video_path

    def get_video_info(self, video_path: str) -> Dict[str, str]:
        """
        Get resolved source and MIME type of a video.

        Args:
            video_path: Path as written in the HTML block

        Returns:
            Dictionary with ``src`` and ``type``
        """
        processed = self.resolve(video_path)
        suffix = Path(processed).suffix.lower()
        return {"src": processed, "type": MIME_TYPES.get(suffix, "video/mp4")}

    def _media_index(self) -> List[str]:
        if self._index is None:
            if self.attachment_dir.is_dir():
                self._index = sorted(
                    p.relative_to(self.attachment_dir).as_posix()
                    for p in self.attachment_dir.rglob("*")
                    if p.is_file() and is_media_file(p.name)
                )
                logging.debug(f"Indexed {len(self._index)} media attachments")
            else:
                self._index = []
        return self._index
