"""
Tests for SQLiteStorage

Checks the schema-level guarantees: foreign keys, cascading deletes and the
non-negative like counter.
"""

import sqlite3

import pytest

from artwall.errors import StorageError
from artwall.storage import SQLiteStorage


class TestSchema:
    """The engine itself enforces comment ownership."""

    def test_foreign_keys_enabled(self, sqlite_store):
        row = sqlite_store.conn.execute("PRAGMA foreign_keys").fetchone()

        assert row[0] == 1

    def test_orphan_insert_rejected_by_engine(self, sqlite_store):
        with pytest.raises(sqlite3.IntegrityError):
            sqlite_store.conn.execute(
                "INSERT INTO comments (id, post_id, name, text, created_at) "
                "VALUES ('c1', 'nope', 'Bo', 'hi', 1)"
            )

    def test_cascade_delete(self, sqlite_store):
        post = sqlite_store.create_post("Ana", "t", "", b"x", "image/png")
        sqlite_store.add_comment(post.id, "Bo", "hi")
        sqlite_store.add_comment(post.id, "Cy", "yo")

        sqlite_store.delete_post(post.id)

        left = sqlite_store.conn.execute("SELECT COUNT(*) FROM comments").fetchone()[0]
        assert left == 0

    def test_like_count_check_constraint(self, sqlite_store):
        post = sqlite_store.create_post("Ana", "t", "", b"x", "image/png")

        with pytest.raises(sqlite3.IntegrityError):
            sqlite_store.conn.execute(
                "UPDATE posts SET like_count = -1 WHERE id = ?", (post.id,)
            )

    def test_image_stored_as_base64_text(self, sqlite_store):
        post = sqlite_store.create_post("Ana", "t", "", b"\x00\x01\x02", "image/gif")

        row = sqlite_store.conn.execute(
            "SELECT image_b64, typeof(image_b64) AS t FROM posts WHERE id = ?", (post.id,)
        ).fetchone()

        assert row["t"] == "text"
        assert row["image_b64"] == "AAEC"


class TestFailures:
    """Storage errors surface as StorageError."""

    def test_closed_connection(self, db_path):
        store = SQLiteStorage(str(db_path))
        store.close()

        with pytest.raises(StorageError):
            store.list_posts()
        with pytest.raises(StorageError):
            store.create_post("Ana", "t", "", b"x", "image/png")

    def test_unopenable_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a dir")

        with pytest.raises(StorageError):
            SQLiteStorage(str(blocker / "artwall.db"))

    def test_in_memory(self):
        store = SQLiteStorage(":memory:")
        post = store.create_post("Ana", "t", "", b"x", "image/png")

        assert store.adjust_like(post.id, "like") == 1
        store.close()


class TestImport:
    """Tests for import_posts."""

    def test_keeps_ids_counts_and_comments(self, sqlite_store, json_store):
        a = json_store.create_post("Ana", "a", "", b"x", "image/png", created_at=1)
        b = json_store.create_post("Bo", "b", "", b"y", "image/png", created_at=1)
        json_store.adjust_like(a.id, "like")
        json_store.add_comment(b.id, "Cy", "hi", created_at=3)

        assert sqlite_store.import_posts(json_store.list_posts()) == 2
        assert sqlite_store.import_posts(json_store.list_posts()) == 0
        assert sqlite_store.list_posts() == json_store.list_posts()
