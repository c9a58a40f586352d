"""Media collaborators: image optimization, video paths and link rewriting."""

from .images import ImageOptimizer
from .video import VideoPathResolver, is_video_file, is_media_file
from .links import LinkRewriter

__all__ = ["ImageOptimizer", "VideoPathResolver", "is_video_file", "is_media_file", "LinkRewriter"]
