"""SQLite storage backend — two tables, foreign keys enforced by the engine."""

import logging
import sqlite3
import threading
from pathlib import Path

from ..constants import DEFAULT_DB_PATH
from ..errors import NotFoundError, StorageError
from ..models import Comment, Direction, Post, oldest_first
from .base import StorageBackend

log = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS posts (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    image_b64 TEXT NOT NULL,
    mime_type TEXT NOT NULL,
    like_count INTEGER NOT NULL DEFAULT 0 CHECK (like_count >= 0),
    created_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS comments (
    id TEXT PRIMARY KEY,
    post_id TEXT NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    text TEXT NOT NULL,
    created_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_posts_created ON posts(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_comments_post ON comments(post_id, created_at);
"""

LIKE_SQL = {
    Direction.LIKE: "UPDATE posts SET like_count = like_count + 1 WHERE id = ?",
    Direction.UNLIKE: "UPDATE posts SET like_count = MAX(like_count - 1, 0) WHERE id = ?",
}


class SQLiteStorage(StorageBackend):
    """SQLite storage — posts and comments in two related tables.

    One connection is shared by all threads; a lock keeps each operation's
    statements together in one transaction.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        try:
            if str(db_path) != ":memory:":
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA foreign_keys = ON")
            self.conn.executescript(SCHEMA_SQL)
            self.conn.commit()
        except (OSError, sqlite3.Error) as e:
            log.error(f"Cannot open {self.db_path}: {e}")
            raise StorageError(f"cannot open {self.db_path}: {e}") from e
        log.info(f"SQLite storage: {self.db_path}")

    def _fail(self, what: str, e: Exception) -> StorageError:
        log.error(f"{what}: {e}")
        return StorageError(f"{what}: {e}")

    @staticmethod
    def _row_to_post(row: sqlite3.Row, comments: list[Comment]) -> Post:
        return Post(
            id=row["id"],
            name=row["name"],
            title=row["title"],
            desc=row["description"],
            image_b64=row["image_b64"],
            mime_type=row["mime_type"],
            created_at=row["created_at"],
            like_count=row["like_count"],
            comments=comments,
        )

    @staticmethod
    def _row_to_comment(row: sqlite3.Row) -> Comment:
        return Comment(
            id=row["id"],
            post_id=row["post_id"],
            name=row["name"],
            text=row["text"],
            created_at=row["created_at"],
        )

    # ── Reads ──

    def list_posts(self) -> list[Post]:
        try:
            # Writers hold the same lock, so both queries see one committed state
            with self._lock:
                post_rows = self.conn.execute(
                    "SELECT * FROM posts ORDER BY created_at DESC, rowid DESC"
                ).fetchall()
                comment_rows = self.conn.execute(
                    "SELECT * FROM comments ORDER BY created_at, rowid"
                ).fetchall()
        except sqlite3.Error as e:
            raise self._fail("list_posts", e) from e

        by_post: dict[str, list[Comment]] = {}
        for r in comment_rows:
            by_post.setdefault(r["post_id"], []).append(self._row_to_comment(r))
        return [self._row_to_post(r, by_post.get(r["id"], [])) for r in post_rows]

    def get_post(self, post_id: str) -> Post:
        try:
            with self._lock:
                row = self.conn.execute(
                    "SELECT * FROM posts WHERE id = ?", (post_id,)
                ).fetchone()
                comment_rows = self.conn.execute(
                    "SELECT * FROM comments WHERE post_id = ? ORDER BY created_at, rowid",
                    (post_id,),
                ).fetchall()
        except sqlite3.Error as e:
            raise self._fail(f"get_post {post_id}", e) from e
        if row is None:
            raise NotFoundError(post_id)
        return self._row_to_post(row, [self._row_to_comment(r) for r in comment_rows])

    def get_post_count(self) -> int:
        try:
            with self._lock:
                row = self.conn.execute("SELECT COUNT(*) as cnt FROM posts").fetchone()
        except sqlite3.Error as e:
            raise self._fail("get_post_count", e) from e
        return row["cnt"] if row else 0

    # ── Writes ──

    def _insert_post(self, post: Post) -> None:
        try:
            with self._lock, self.conn:
                self._insert_post_row(post)
        except sqlite3.Error as e:
            raise self._fail(f"insert post {post.id}", e) from e
        log.debug(f"Stored post {post.id}")

    def _insert_post_row(self, post: Post):
        self.conn.execute(
            """INSERT INTO posts
               (id, name, title, description, image_b64, mime_type, like_count, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                post.id,
                post.name,
                post.title,
                post.desc,
                post.image_b64,
                post.mime_type,
                post.like_count,
                post.created_at,
            ),
        )

    def _insert_comment_row(self, comment: Comment):
        self.conn.execute(
            """INSERT INTO comments (id, post_id, name, text, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (comment.id, comment.post_id, comment.name, comment.text, comment.created_at),
        )

    def _adjust_like(self, post_id: str, direction: Direction) -> int:
        try:
            with self._lock, self.conn:
                cur = self.conn.execute(LIKE_SQL[direction], (post_id,))
                if cur.rowcount == 0:
                    raise NotFoundError(post_id)
                row = self.conn.execute(
                    "SELECT like_count FROM posts WHERE id = ?", (post_id,)
                ).fetchone()
        except sqlite3.Error as e:
            raise self._fail(f"{direction.value} {post_id}", e) from e
        log.debug(f"{direction.value} {post_id} -> {row['like_count']}")
        return row["like_count"]

    def _insert_comment(self, comment: Comment) -> None:
        try:
            with self._lock, self.conn:
                self._insert_comment_row(comment)
        except sqlite3.IntegrityError as e:
            # FK failure: the post does not exist
            if "FOREIGN KEY" in str(e).upper():
                raise NotFoundError(comment.post_id) from None
            raise self._fail(f"insert comment {comment.id}", e) from e
        except sqlite3.Error as e:
            raise self._fail(f"insert comment {comment.id}", e) from e
        log.debug(f"Stored comment {comment.id} on {comment.post_id}")

    def delete_post(self, post_id: str) -> None:
        try:
            with self._lock, self.conn:
                # comments follow via ON DELETE CASCADE
                cur = self.conn.execute("DELETE FROM posts WHERE id = ?", (post_id,))
                if cur.rowcount == 0:
                    raise NotFoundError(post_id)
        except sqlite3.Error as e:
            raise self._fail(f"delete {post_id}", e) from e
        log.info(f"Deleted post {post_id}")

    def import_posts(self, posts: list[Post]) -> int:
        added = 0
        try:
            with self._lock, self.conn:
                for post in oldest_first(posts):
                    exists = self.conn.execute(
                        "SELECT 1 FROM posts WHERE id = ?", (post.id,)
                    ).fetchone()
                    if exists:
                        continue
                    self._insert_post_row(post)
                    for c in post.comments:
                        self._insert_comment_row(c)
                    added += 1
        except sqlite3.Error as e:
            raise self._fail("import_posts", e) from e
        log.info(f"Imported {added}/{len(posts)} posts into {self.db_path}")
        return added

    def close(self):
        with self._lock:
            self.conn.close()
