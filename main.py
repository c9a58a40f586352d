#!/usr/bin/env python3
"""
Daybook - diary parsing and reactions toolkit

Main entry point for Daybook. Builds the paginated diary JSON pages, parses
single documents for inspection and reads or toggles emoji reactions.
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path

import frontmatter

from daybook import __version__
from daybook.config import config
from daybook.importers import BaseImporter, DiaryDirectoryImporter, MockImporter
from daybook.listing import DiaryFeed
from daybook.media import ImageOptimizer, LinkRewriter, VideoPathResolver
from daybook.parser import EntryParser
from daybook.reactions import (
    LoopScheduler,
    ReactionsBatcher,
    ReactionStore,
    ReactionStoreError,
    generate_user_hash,
)


def setup_logging():
    """Configure logging for the application."""
    level = getattr(logging, config.get("logging.level", "INFO").upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file)
        ]
    )


def create_entry_parser() -> EntryParser:
    """Build an entry parser with collaborators from configuration."""
    return EntryParser(
        optimize_image=ImageOptimizer().optimize,
        resolve_video_path=VideoPathResolver().resolve,
        rewrite_link=LinkRewriter().rewrite
    )


def create_importer(importer_type: str, content_dir: str | None = None) -> BaseImporter:
    """
    Select the diary source.

    Args:
        importer_type: 'directory' or 'mock'
        content_dir: Diary directory for the directory importer

    Returns:
        The importer instance
    """
    if importer_type == "mock":
        return MockImporter()
    return DiaryDirectoryImporter(content_dir)


async def run_build(importer: BaseImporter, output_dir: str | None = None) -> int:
    """
    Parse every diary document and write the listing pages.

    Returns:
        Number of pages written
    """
    sources = importer.get_all_entries()
    logging.info(f"Retrieved {len(sources)} diary entries")

    feed = DiaryFeed(sources, parser=create_entry_parser())
    written = await feed.write_pages(output_dir)

    logging.info(f"Build completed. Wrote {len(written)} pages.")
    return len(written)


async def run_parse(file_path: str) -> dict:
    """Parse a single diary file and return its JSON form."""
    path = Path(file_path)
    post = frontmatter.load(str(path))
    entry = await create_entry_parser().parse(post.content, path.name, str(path))
    return entry.to_json_dict()


async def run_reactions_get(content_ids: list, user_hash: str | None) -> dict:
    """Read reactions of several contents through the batcher."""
    async with ReactionStore() as store:
        batcher = ReactionsBatcher(store, scheduler=LoopScheduler())
        futures = [batcher.load(content_id, user_hash) for content_id in content_ids]
        results = await asyncio.gather(*futures)
        await batcher.drain()

    return {
        content_id: [row.model_dump(by_alias=True, exclude_none=True) for row in rows]
        for content_id, rows in zip(content_ids, results)
    }


async def run_reactions_toggle(content_id: str, emoji: str, user_hash: str) -> dict | None:
    """Toggle one reaction."""
    async with ReactionStore() as store:
        result = await store.toggle_reaction(content_id, emoji, user_hash)
    return result.model_dump() if result else None


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Daybook - diary parsing and reactions toolkit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py build                                # Build listing pages from the diary directory
  python main.py --importer mock build                # Build from built-in sample entries
  python main.py parse src/data/diary/2024-05-22.md   # Print one parsed entry
  python main.py reactions get post-1 post-2          # Read reaction counts
  python main.py reactions toggle post-1 👍           # Toggle a reaction
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to a configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--importer",
        choices=["directory", "mock"],
        default="directory",
        help="Diary source to use (default: directory)"
    )

    parser.add_argument(
        "--content-dir",
        type=str,
        help="Diary directory (defaults to paths.content_dir)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Daybook {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Write paginated diary JSON pages")
    build_parser.add_argument("--output-dir", type=str, help="Output directory (defaults to paths.output_dir)")

    parse_parser = subparsers.add_parser("parse", help="Parse one diary file and print JSON")
    parse_parser.add_argument("file", type=str, help="Diary markdown file")

    reactions_parser = subparsers.add_parser("reactions", help="Read or toggle emoji reactions")
    reactions_sub = reactions_parser.add_subparsers(dest="action", required=True)

    get_parser = reactions_sub.add_parser("get", help="Read reaction counts")
    get_parser.add_argument("content_ids", nargs="+", help="Content identifiers")
    get_parser.add_argument("--user-hash", type=str, help="Viewer identity (defaults to the stored one)")

    toggle_parser = reactions_sub.add_parser("toggle", help="Toggle one reaction")
    toggle_parser.add_argument("content_id", help="Content identifier")
    toggle_parser.add_argument("emoji", help="Emoji to toggle")
    toggle_parser.add_argument("--user-hash", type=str, help="Viewer identity (defaults to the stored one)")

    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)

    if args.config:
        # Modules read the shared instance, so load the file into it
        config.config_path = Path(args.config)
        config.reload()

    setup_logging()

    try:
        if args.command == "build":
            importer = create_importer(args.importer, args.content_dir)
            pages = asyncio.run(run_build(importer, args.output_dir))
            print(f"Wrote {pages} diary pages.")

        elif args.command == "parse":
            entry = asyncio.run(run_parse(args.file))
            print(json.dumps(entry, ensure_ascii=False, indent=2))

        elif args.command == "reactions":
            user_hash = args.user_hash or generate_user_hash()
            if args.action == "get":
                result = asyncio.run(run_reactions_get(args.content_ids, user_hash))
            else:
                result = asyncio.run(run_reactions_toggle(args.content_id, args.emoji, user_hash))
            print(json.dumps(result, ensure_ascii=False, indent=2))

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print("\nInterrupted.")

    except ReactionStoreError as e:
        logging.error(f"Reactions request failed: {e}")
        print(f"\nReactions request failed: {e}")
        sys.exit(1)

    except Exception as e:
        logging.error(f"Command {args.command} failed: {e}")
        print(f"\nCommand failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
