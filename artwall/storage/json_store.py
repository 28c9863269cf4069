"""JSON file storage backend — the whole gallery in one document."""

import copy
import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path

from ..constants import DEFAULT_DATA_FILE
from ..errors import NotFoundError, StorageError
from ..models import Comment, Direction, Post, oldest_first, sort_feed
from .base import StorageBackend

log = logging.getLogger(__name__)


class JSONStorage(StorageBackend):
    """Single-document storage, rewritten wholesale on every mutation.

    The document is loaded once and kept in memory. Mutations run one at a
    time under a lock against a copy of the document; the copy replaces the
    live document only after it has been written to disk, so readers always
    see the last committed state.
    """

    def __init__(self, data_file: str = DEFAULT_DATA_FILE):
        self.path = Path(data_file)
        self._lock = threading.RLock()
        self._doc = self._load()
        log.info(f"JSON storage: {self.path} ({len(self._doc['posts'])} posts)")

    def _load(self) -> dict:
        if not self.path.exists():
            doc = {"posts": []}
            self._write(doc)
            return doc
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            log.error(f"Cannot read {self.path}: {e}")
            raise StorageError(f"cannot read {self.path}: {e}") from e

        if not isinstance(doc, dict) or not isinstance(doc.get("posts"), list):
            raise StorageError(f"{self.path}: expected an object with a 'posts' list")
        try:
            for rec in doc["posts"]:
                Post.from_record(rec)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise StorageError(f"{self.path}: malformed post record: {e}") from e
        return doc

    def _write(self, doc: dict):
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(doc, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            log.error(f"Write to {self.path} failed: {e}")
            raise StorageError(f"cannot write {self.path}: {e}") from e

    @contextmanager
    def _mutate(self):
        """Yield a private copy of the document, then commit it.

        If the block raises, nothing is written and the live document is
        untouched.
        """
        with self._lock:
            doc = copy.deepcopy(self._doc)
            yield doc
            self._write(doc)
            self._doc = doc

    @staticmethod
    def _find(doc: dict, post_id: str) -> dict:
        for rec in doc["posts"]:
            if rec["id"] == post_id:
                return rec
        raise NotFoundError(post_id)

    # ── Reads ──

    def list_posts(self) -> list[Post]:
        # _doc is only ever swapped, never edited in place
        doc = self._doc
        return sort_feed([Post.from_record(rec) for rec in doc["posts"]])

    def get_post(self, post_id: str) -> Post:
        return Post.from_record(self._find(self._doc, post_id))

    def get_post_count(self) -> int:
        return len(self._doc["posts"])

    # ── Writes ──

    def _insert_post(self, post: Post) -> None:
        with self._mutate() as doc:
            doc["posts"].append(post.to_record())
        log.debug(f"Stored post {post.id}")

    def _adjust_like(self, post_id: str, direction: Direction) -> int:
        with self._mutate() as doc:
            rec = self._find(doc, post_id)
            current = max(0, int(rec.get("likeCount") or 0))
            rec["likeCount"] = direction.apply(current)
            count = rec["likeCount"]
        log.debug(f"{direction.value} {post_id} -> {count}")
        return count

    def _insert_comment(self, comment: Comment) -> None:
        with self._mutate() as doc:
            # Explicit parent check; no engine enforces it here
            rec = self._find(doc, comment.post_id)
            rec.setdefault("comments", []).append(comment.to_record())
        log.debug(f"Stored comment {comment.id} on {comment.post_id}")

    def delete_post(self, post_id: str) -> None:
        with self._mutate() as doc:
            rec = self._find(doc, post_id)
            # Comments live inside the post record and go with it
            doc["posts"].remove(rec)
        log.info(f"Deleted post {post_id}")

    def import_posts(self, posts: list[Post]) -> int:
        added = 0
        with self._mutate() as doc:
            existing = {rec["id"] for rec in doc["posts"]}
            for post in oldest_first(posts):
                if post.id in existing:
                    continue
                doc["posts"].append(post.to_record())
                existing.add(post.id)
                added += 1
        log.info(f"Imported {added}/{len(posts)} posts into {self.path}")
        return added
