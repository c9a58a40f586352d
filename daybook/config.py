"""
Configuration management for Daybook.

This module handles loading and accessing configuration values from config.yaml.
It provides a centralized way to manage content paths, image settings and the
reactions backend without changing code.
"""

import yaml
import os
from pathlib import Path
from typing import Any, Dict
import logging


class ConfigManager:
    """
    Manages configuration loading and access for Daybook.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}

            logging.info(f"Configuration loaded from {self.config_path}")

        except Exception as e:
            logging.error(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "paths": {
                "content_dir": "src/data/diary",
                "blog_dir": "src/data/blog",
                "attachment_dir": "src/data/attachment",
                "output_dir": "dist",
                "image_output_dir": "dist/_images",
                "state_dir": ".daybook",
                "log_file": "daybook.log"
            },
            "images": {
                "thumbnail_size": 400,
                "quality": 80,
                "full_size_quality": 90,
                "public_prefix": "/_images"
            },
            "videos": {
                "public_prefix": "/attachment"
            },
            "diary": {
                "items_per_page": 5
            },
            "reactions": {
                "supabase_url": "",
                "supabase_key": "",
                "timeout": 10.0,
                "batch_window_ms": 16,
                "user_hash_namespace": "astro-obsidian-blog"
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "images.quality")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("diary.items_per_page")  # Returns 5
            config.get("paths.attachment_dir")  # Returns "src/data/attachment"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def content_directory(self) -> str:
        """Get the diary content directory."""
        return self.get("paths.content_dir", "src/data/diary")

    @property
    def blog_directory(self) -> str:
        """Get the blog posts directory used for link slugs."""
        return self.get("paths.blog_dir", "src/data/blog")

    @property
    def attachment_directory(self) -> str:
        """Get the attachment (images, videos) directory."""
        return self.get("paths.attachment_dir", "src/data/attachment")

    @property
    def output_directory(self) -> str:
        """Get the build output directory."""
        return self.get("paths.output_dir", "dist")

    @property
    def image_output_directory(self) -> str:
        """Get the directory optimized images are written to."""
        return self.get("paths.image_output_dir", "dist/_images")

    @property
    def state_directory(self) -> str:
        """Get the local state directory (user hash etc.)."""
        return self.get("paths.state_dir", ".daybook")

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "daybook.log")

    @property
    def thumbnail_size(self) -> int:
        """Get default thumbnail size (long side, pixels)."""
        return self.get("images.thumbnail_size", 400)

    @property
    def image_quality(self) -> int:
        """Get default thumbnail quality."""
        return self.get("images.quality", 80)

    @property
    def full_size_quality(self) -> int:
        """Get quality of the full-size rendition."""
        return self.get("images.full_size_quality", 90)

    @property
    def image_public_prefix(self) -> str:
        """Get URL prefix for optimized images."""
        return self.get("images.public_prefix", "/_images")

    @property
    def video_public_prefix(self) -> str:
        """Get URL prefix for attachment videos."""
        return self.get("videos.public_prefix", "/attachment")

    @property
    def items_per_page(self) -> int:
        """Get number of diary entries per listing page."""
        return self.get("diary.items_per_page", 5)

    @property
    def supabase_url(self) -> str:
        """Get Supabase URL, the SUPABASE_URL environment variable wins."""
        return os.environ.get("SUPABASE_URL") or self.get("reactions.supabase_url", "") or ""

    @property
    def supabase_key(self) -> str:
        """Get Supabase anon key, the SUPABASE_KEY environment variable wins."""
        return os.environ.get("SUPABASE_KEY") or self.get("reactions.supabase_key", "") or ""

    @property
    def reactions_timeout(self) -> float:
        """Get reactions backend timeout."""
        return self.get("reactions.timeout", 10.0)

    @property
    def batch_window_ms(self) -> int:
        """Get the reaction batching window in milliseconds."""
        return self.get("reactions.batch_window_ms", 16)

    @property
    def user_hash_namespace(self) -> str:
        """Get namespace used to persist the viewer identity."""
        return self.get("reactions.user_hash_namespace", "astro-obsidian-blog")


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
