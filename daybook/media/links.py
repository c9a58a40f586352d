"""
Link rewriting for Daybook.

Turns relative links to blog markdown files into canonical ``/posts/<slug>``
URLs using the ``slug`` field of the target's front matter.
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

import frontmatter

from ..config import config


MARKDOWN_LINK_PATTERN = re.compile(r'\[([^\]]+)\]\(([^\)]+)\)')
PASSTHROUGH_PREFIXES = ("#", "mailto:", "tel:")


def extract_slug(file_path: Path) -> Optional[str]:
    """
    Read the ``slug`` front matter field of a markdown file.

    Args:
        file_path: Markdown file to inspect

    Returns:
        The slug, or None if the file has none or cannot be read
    """
    try:
        post = frontmatter.load(str(file_path))
    except Exception as e:
        logging.debug(f"Could not read front matter of {file_path}: {e}")
        return None

    slug = post.metadata.get("slug")
    if slug is None:
        return None
    slug = str(slug).strip()
    return slug or None


class LinkRewriter:
    """
    Rewrites hrefs found in diary text.
    """

    def __init__(self, blog_dir: Optional[str] = None, project_root: Optional[str] = None):
        """
        Initialize the link rewriter.

        Args:
            blog_dir: Directory searched by file name when a link does not resolve
            project_root: Base for links when no current file is known (defaults to cwd)
        """
        self.project_root = Path(project_root or os.getcwd())
        blog_path = Path(blog_dir or config.blog_directory)
        self.blog_dir = blog_path if blog_path.is_absolute() else self.project_root / blog_path

    def rewrite(self, href: str, current_file_path: Optional[str] = None) -> str:
        """
        Rewrite a link, resolving blog markdown files to their post URL.

        Args:
            href: The link target as written
            current_file_path: File containing the link, for relative resolution

        Returns:
            ``/posts/<slug>`` when resolvable, otherwise the unchanged href
        """
        if re.match(r'^https?://', href):
            return href

        if href.startswith(PASSTHROUGH_PREFIXES):
            return href

        if not re.search(r'\.(md|mdx)$', href, re.IGNORECASE):
            return href

        try:
            decoded = unquote(href)
            base_dir = Path(current_file_path).parent if current_file_path else self.project_root
            target = Path(decoded)
            if not target.is_absolute():
                target = (base_dir / target).resolve()

            if not target.exists():
                fallback = self.blog_dir / target.name
                if not fallback.exists():
                    return href
                target = fallback

            slug = extract_slug(target)
            return f"/posts/{slug}" if slug else href

        except Exception as e:
            logging.warning(f"Failed to rewrite link {href}: {e}")
            return href

    def rewrite_markdown_links(self, text: str, current_file_path: Optional[str] = None) -> str:
        """
        Rewrite the target of every ``[label](href)`` link in markdown text.
        """
        def replace(match: re.Match) -> str:
            return f"[{match.group(1)}]({self.rewrite(match.group(2), current_file_path)})"

        return MARKDOWN_LINK_PATTERN.sub(replace, text)
