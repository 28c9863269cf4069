"""Command-line interface for artwall."""

import argparse
import json
import logging
import os
import sys

from . import __version__
from .constants import (
    DEFAULT_DATA_FILE,
    DEFAULT_DB_PATH,
    DEFAULT_STORAGE,
    MAX_COMMENT_LEN,
    MAX_DESC_LEN,
    MAX_NAME_LEN,
    MAX_TITLE_LEN,
)
from .errors import ArtwallError
from .images import load_image
from .models import Direction
from .storage import BACKENDS, StorageBackend, get_storage

log = logging.getLogger(__name__)

EXIT_CODES = {
    "validation": 2,
    "not_found": 3,
    "storage": 4,
}


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler()],
    )


def clean(value: str | None, limit: int) -> str:
    """Trim surrounding whitespace and cap the length."""
    return (value or "").strip()[:limit]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="artwall",
        description="Image board storage: post artwork, like it, comment on it.",
    )
    parser.add_argument(
        "-V", "--version", action="version", version=f"artwall {__version__}",
    )

    sub = parser.add_subparsers(dest="command", help="Available commands")

    # ── list ──
    p_list = sub.add_parser("list", help="Print the feed, newest first, as JSON")
    p_list.add_argument(
        "--no-images", action="store_true", help="Leave out imageSrc data URIs",
    )

    # ── post ──
    p_post = sub.add_parser("post", help="Submit an image")
    p_post.add_argument("name", help=f"Author name (max {MAX_NAME_LEN} chars)")
    p_post.add_argument("title", help=f"Title (max {MAX_TITLE_LEN} chars)")
    p_post.add_argument("image", help="Image file path or http(s) URL")
    p_post.add_argument(
        "--desc", default="", help=f"Description (max {MAX_DESC_LEN} chars)",
    )
    p_post.add_argument(
        "--mime", help="MIME type (default: from download or file name)",
    )

    # ── like ──
    p_like = sub.add_parser("like", help="Like (or --unlike) a post")
    p_like.add_argument("post_id")
    p_like.add_argument(
        "--unlike", action="store_true", help="Take a like back (never below 0)",
    )

    # ── comment ──
    p_comment = sub.add_parser("comment", help="Comment on a post")
    p_comment.add_argument("post_id")
    p_comment.add_argument("name", help=f"Commenter name (max {MAX_NAME_LEN} chars)")
    p_comment.add_argument("text", help=f"Comment text (max {MAX_COMMENT_LEN} chars)")

    # ── delete ──
    p_delete = sub.add_parser("delete", help="Delete a post and its comments")
    p_delete.add_argument("post_id")

    # ── stats ──
    sub.add_parser("stats", help="Show post and comment counts")

    # ── migrate ──
    p_migrate = sub.add_parser(
        "migrate", help="Copy every post into the other storage backend",
    )
    p_migrate.add_argument(
        "--to", choices=BACKENDS, required=True, help="Target backend",
    )

    # ── Global options ──
    parser.add_argument(
        "--storage", choices=BACKENDS,
        default=os.environ.get("ARTWALL_STORAGE", DEFAULT_STORAGE),
        help=f"Storage backend (default: $ARTWALL_STORAGE or {DEFAULT_STORAGE})",
    )
    parser.add_argument(
        "--db", default=os.environ.get("ARTWALL_DB", DEFAULT_DB_PATH),
        help=f"SQLite database path (default: $ARTWALL_DB or {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "--data-file", default=os.environ.get("ARTWALL_DATA_FILE", DEFAULT_DATA_FILE),
        help=f"JSON data file (default: $ARTWALL_DATA_FILE or {DEFAULT_DATA_FILE})",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose logging",
    )
    return parser


def open_storage(backend: str, args: argparse.Namespace) -> StorageBackend:
    if backend == "sqlite":
        return get_storage("sqlite", db_path=args.db)
    return get_storage("json", data_file=args.data_file)


def _emit(obj):
    print(json.dumps(obj, ensure_ascii=False, indent=2))


def run(args: argparse.Namespace, storage: StorageBackend):
    """Execute one command against an open store."""
    if args.command == "list":
        _emit([p.to_dict(include_image=not args.no_images) for p in storage.list_posts()])

    elif args.command == "post":
        image, mime = load_image(args.image, args.mime)
        post = storage.create_post(
            name=clean(args.name, MAX_NAME_LEN),
            title=clean(args.title, MAX_TITLE_LEN),
            desc=clean(args.desc, MAX_DESC_LEN),
            image=image,
            mime_type=mime,
        )
        log.info(f"Created post {post.id} ({len(image):,} bytes, {mime})")
        _emit(post.to_dict(include_image=False))

    elif args.command == "like":
        direction = Direction.UNLIKE if args.unlike else Direction.LIKE
        _emit({"likeCount": storage.adjust_like(args.post_id, direction)})

    elif args.command == "comment":
        comment = storage.add_comment(
            args.post_id,
            name=clean(args.name, MAX_NAME_LEN),
            text=clean(args.text, MAX_COMMENT_LEN),
        )
        _emit(comment.to_dict())

    elif args.command == "delete":
        storage.delete_post(args.post_id)
        _emit({"deleted": args.post_id})

    elif args.command == "stats":
        _print_stats(storage)

    elif args.command == "migrate":
        posts = storage.list_posts()
        with open_storage(args.to, args) as target:
            added = target.import_posts(posts)
        log.info(f"Migrated {added} of {len(posts)} posts: {args.storage} -> {args.to}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "migrate" and args.to == args.storage:
        parser.error("--to must differ from --storage")

    setup_logging(args.verbose)

    try:
        with open_storage(args.storage, args) as storage:
            run(args, storage)
    except ArtwallError as e:
        print(f"error: {e.kind}: {e.message}", file=sys.stderr)
        return EXIT_CODES.get(e.kind, 1)
    return 0


def _print_stats(storage: StorageBackend):
    """Print storage statistics."""
    posts = storage.list_posts()
    comments = sum(len(p.comments) for p in posts)
    likes = sum(p.like_count for p in posts)

    print(f"\n  Posts:     {storage.get_post_count():,}")
    print(f"  Comments:  {comments:,}")
    print(f"  Likes:     {likes:,}")
    print()


if __name__ == "__main__":
    sys.exit(main())
