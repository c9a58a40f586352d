"""
Tests for image optimization, video path resolution and link rewriting.
"""

import asyncio
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from PIL import Image

from daybook.media import ImageOptimizer, LinkRewriter, VideoPathResolver, is_media_file, is_video_file
from daybook.media.images import attachment_file_name, fit_within
from daybook.models import ImageOptimizeOptions, OptimizedImage


class TestImageHelpers(unittest.TestCase):
    """Test path and size helpers."""

    def test_attachment_file_name(self):
        self.assertEqual(attachment_file_name("../attachment/photos/cat.png"), "photos/cat.png")
        self.assertEqual(attachment_file_name("..\\attachment\\cat.png"), "cat.png")
        self.assertEqual(attachment_file_name("images/cat.png"), "")

    def test_fit_within(self):
        self.assertEqual(fit_within(1000, 500, 400), (400, 200))
        self.assertEqual(fit_within(300, 600, 400), (200, 400))
        self.assertEqual(fit_within(500, 500, 400), (400, 400))


class TestImageOptimizer(unittest.IsolatedAsyncioTestCase):
    """Test thumbnail generation with real image files."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.attachment_dir = self.temp_dir / "attachment"
        self.output_dir = self.temp_dir / "public" / "_img"
        (self.attachment_dir / "photos").mkdir(parents=True)

        Image.new("RGB", (1000, 500), (200, 40, 40)).save(self.attachment_dir / "photos" / "cat.png")
        Image.new("P", (300, 600)).save(self.attachment_dir / "tall.gif")
        (self.attachment_dir / "bad.png").write_bytes(b"not an image")

        self.optimizer = ImageOptimizer(
            attachment_dir=str(self.attachment_dir),
            output_dir=str(self.output_dir),
            public_prefix="/_img",
            full_size_quality=90
        )
        self.options = ImageOptimizeOptions(thumbnail_size=400, quality=80)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    async def test_optimize_writes_renditions(self):
        """Test thumbnail and full-size files are written and reported."""
        result = await self.optimizer.optimize("../attachment/photos/cat.png", self.options)

        self.assertEqual((result.width, result.height), (1000, 500))
        self.assertTrue(result.thumbnail.startswith("/_img/cat_"))
        self.assertTrue(result.thumbnail.endswith("_400x200_q80.webp"))
        self.assertTrue(result.original.endswith("_q90.webp"))

        thumb_file = self.output_dir / result.thumbnail.rsplit("/", 1)[1]
        self.assertTrue(thumb_file.exists())
        self.assertTrue((self.output_dir / result.original.rsplit("/", 1)[1]).exists())
        with Image.open(thumb_file) as thumb:
            self.assertEqual(thumb.size, (400, 200))

    async def test_portrait_palette_image(self):
        """Test portrait scaling and mode conversion of palette images."""
        result = await self.optimizer.optimize("attachment/tall.gif", self.options)

        self.assertTrue(result.thumbnail.endswith("_200x400_q80.webp"))
        self.assertEqual((result.width, result.height), (300, 600))

    async def test_keep_original_size(self):
        options = ImageOptimizeOptions(keep_original_size=True, quality=50)

        result = await self.optimizer.optimize("../attachment/photos/cat.png", options)

        self.assertTrue(result.thumbnail.endswith("_1000x500_q50.webp"))

    async def test_results_are_cached(self):
        first = await self.optimizer.optimize("../attachment/photos/cat.png", self.options)
        second = await self.optimizer.optimize("../attachment/photos/cat.png", self.options)

        self.assertIs(first, second)

    async def test_concurrent_requests_share_work(self):
        """Test simultaneous requests for one image render it once."""
        with patch.object(self.optimizer, "_render", wraps=self.optimizer._render) as render:
            results = await asyncio.gather(
                self.optimizer.optimize("../attachment/photos/cat.png", self.options),
                self.optimizer.optimize("../attachment/photos/cat.png", self.options),
            )

        self.assertEqual(render.call_count, 1)
        self.assertEqual(results[0], results[1])

    async def test_remote_images_pass_through(self):
        result = await self.optimizer.optimize("https://images.example.com/a.jpg", self.options)

        self.assertEqual(result.thumbnail, "https://images.example.com/a.jpg")
        self.assertEqual((result.width, result.height), (800, 600))

    async def test_missing_image_is_not_cached(self):
        result = await self.optimizer.optimize("../attachment/nothing.png", self.options)

        self.assertEqual(result.thumbnail, "../attachment/nothing.png")
        self.assertEqual((result.width, result.height), (400, 300))
        self.assertEqual(self.optimizer._cache, {})

    async def test_undecodable_image_falls_back(self):
        result = await self.optimizer.optimize("../attachment/bad.png", self.options)

        self.assertEqual(result.original, "../attachment/bad.png")
        self.assertEqual((result.width, result.height), (400, 300))

    async def test_optimize_many_and_thumbnail(self):
        results = await self.optimizer.optimize_many(["https://x.example/a.jpg", "https://x.example/b.jpg"])

        self.assertEqual([r.thumbnail for r in results], ["https://x.example/a.jpg", "https://x.example/b.jpg"])
        self.assertEqual(await self.optimizer.optimize_thumbnail("https://x.example/c.jpg"), "https://x.example/c.jpg")

    async def test_near_name_does_not_match(self):
        """Test a name is matched by whole path components only."""
        Image.new("RGB", (40, 40)).save(self.attachment_dir / "photos" / "scat.png")

        self.assertIsNone(self.optimizer.find_attachment("../attachment/at.png"))
        self.assertEqual(
            self.optimizer.find_attachment("../attachment/cat.png"),
            self.attachment_dir / "photos" / "cat.png"
        )

        result = await self.optimizer.optimize("../attachment/at.png", self.options)
        self.assertEqual(result.thumbnail, "../attachment/at.png")

    async def test_cancelled_owner_does_not_cancel_waiters(self):
        """Test a waiter computes the image itself if the shared work is cancelled."""
        calls = []

        async def slow_then_fast(image_path, options):
            calls.append(image_path)
            if len(calls) == 1:
                await asyncio.Event().wait()
            return OptimizedImage(thumbnail="/_img/t.webp", original="/_img/o.webp", width=10, height=10), True

        with patch.object(self.optimizer, "_optimize_uncached", side_effect=slow_then_fast):
            owner = asyncio.ensure_future(self.optimizer.optimize("../attachment/photos/cat.png", self.options))
            await asyncio.sleep(0)
            waiter = asyncio.ensure_future(self.optimizer.optimize("../attachment/photos/cat.png", self.options))
            await asyncio.sleep(0)

            owner.cancel()
            result = await waiter

        with self.assertRaises(asyncio.CancelledError):
            await owner
        self.assertEqual(result.thumbnail, "/_img/t.webp")
        self.assertEqual(len(calls), 2)

    async def test_clear_cache(self):
        await self.optimizer.optimize("../attachment/photos/cat.png", self.options)

        self.optimizer.clear_cache()

        self.assertEqual(self.optimizer._cache, {})
        self.assertIsNone(self.optimizer._index)


class TestVideoPathResolver(unittest.TestCase):
    """Test media path resolution."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        (self.temp_dir / "clips").mkdir()
        (self.temp_dir / "clips" / "walk.mp4").write_bytes(b"")
        self.resolver = VideoPathResolver(attachment_dir=str(self.temp_dir), public_prefix="/media")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_indexed_file(self):
        self.assertEqual(self.resolver.resolve("../attachment/clips/walk.mp4"), "/media/clips/walk.mp4")

    def test_fallbacks(self):
        self.assertEqual(self.resolver.resolve("https://videos.example.com/a.mp4"), "https://videos.example.com/a.mp4")
        self.assertEqual(self.resolver.resolve("../attachment/missing.mp4"), "/attachment/missing.mp4")
        self.assertEqual(self.resolver.resolve("media/attachment/missing.mp4"), "/attachment/missing.mp4")
        self.assertEqual(self.resolver.resolve("videos/other.mp4"), "videos/other.mp4")

    def test_near_name_does_not_match(self):
        """Test ``cat.mp4`` does not resolve to ``clip_cat.mp4``."""
        (self.temp_dir / "clip_cat.mp4").write_bytes(b"")

        self.assertEqual(self.resolver.resolve("../attachment/cat.mp4"), "/attachment/cat.mp4")
        self.assertEqual(self.resolver.resolve("../attachment/walk.mp4"), "/media/clips/walk.mp4")

    def test_video_info(self):
        self.assertEqual(
            self.resolver.get_video_info("../attachment/talk.webm"),
            {"src": "/attachment/talk.webm", "type": "video/webm"}
        )
        self.assertEqual(self.resolver.get_video_info("../attachment/clips/walk.mp4")["type"], "video/mp4")

    def test_media_extensions(self):
        self.assertTrue(is_video_file("a.MOV"))
        self.assertFalse(is_video_file("a.mp3"))
        self.assertTrue(is_media_file("a.mp3"))
        self.assertFalse(is_media_file("a.jpg"))


class TestLinkRewriter(unittest.TestCase):
    """Test rewriting links to blog posts."""

    def setUp(self):
        self.root = Path(tempfile.mkdtemp())
        blog = self.root / "blog"
        (self.root / "diary").mkdir()
        blog.mkdir()
        (blog / "post-one.md").write_text("---\nslug: hello-world\ntitle: One\n---\nbody\n", encoding="utf-8")
        (blog / "My Post.md").write_text("---\nslug: my-post\n---\nbody\n", encoding="utf-8")
        (blog / "no-slug.md").write_text("just text\n", encoding="utf-8")
        self.rewriter = LinkRewriter(blog_dir=str(blog), project_root=str(self.root))

    def tearDown(self):
        shutil.rmtree(self.root)

    def test_passthrough_links(self):
        for href in ("https://example.com/a.md", "#top", "mailto:a@example.com", "tel:123", "image.png"):
            self.assertEqual(self.rewriter.rewrite(href), href)

    def test_relative_to_project_root(self):
        self.assertEqual(self.rewriter.rewrite("blog/post-one.md"), "/posts/hello-world")

    def test_relative_to_current_file(self):
        current = str(self.root / "diary" / "2024-05-22.md")

        self.assertEqual(self.rewriter.rewrite("../blog/post-one.md", current), "/posts/hello-world")

    def test_falls_back_to_blog_directory(self):
        self.assertEqual(self.rewriter.rewrite("elsewhere/post-one.md"), "/posts/hello-world")

    def test_url_encoded_names(self):
        self.assertEqual(self.rewriter.rewrite("blog/My%20Post.md"), "/posts/my-post")

    def test_unresolvable_links_unchanged(self):
        self.assertEqual(self.rewriter.rewrite("blog/no-slug.md"), "blog/no-slug.md")
        self.assertEqual(self.rewriter.rewrite("missing.md"), "missing.md")

    def test_rewrite_markdown_links(self):
        text = "see [one](blog/post-one.md) and [ext](https://example.com)"

        self.assertEqual(
            self.rewriter.rewrite_markdown_links(text),
            "see [one](/posts/hello-world) and [ext](https://example.com)"
        )


if __name__ == '__main__':
    unittest.main()
