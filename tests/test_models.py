"""Tests for models, ids and data URIs."""

import re

import pytest

from artwall.errors import ValidationError
from artwall.ids import new_id, to_base36
from artwall.models import Comment, Direction, Post, parse_data_uri, sort_feed


class TestIds:
    """Tests for id generation."""

    def test_base36(self):
        assert to_base36(0) == "0"
        assert to_base36(35) == "z"
        assert to_base36(36) == "10"
        assert to_base36(1_700_000_000_000) == "loyw3v28"

    def test_base36_negative(self):
        with pytest.raises(ValueError):
            to_base36(-1)

    def test_shape(self):
        pid = new_id(1_700_000_000_000)

        assert pid.startswith("loyw3v28")
        assert len(pid) == len("loyw3v28") + 5
        assert re.fullmatch(r"[0-9a-z]+", pid)

    def test_default_timestamp(self):
        assert re.fullmatch(r"[0-9a-z]{13,}", new_id())


class TestDirection:
    """Tests for like/unlike tokens."""

    def test_parse(self):
        assert Direction.parse("like") is Direction.LIKE
        assert Direction.parse(Direction.UNLIKE) is Direction.UNLIKE

    def test_parse_invalid(self):
        with pytest.raises(ValidationError) as exc:
            Direction.parse("meh")

        assert exc.value.field == "direction"

    def test_apply(self):
        assert Direction.LIKE.apply(0) == 1
        assert Direction.UNLIKE.apply(2) == 1
        assert Direction.UNLIKE.apply(0) == 0


class TestDataUri:
    """Tests for parse_data_uri."""

    def test_parse(self):
        assert parse_data_uri("data:image/png;base64,AAEC") == ("image/png", b"\x00\x01\x02")

    @pytest.mark.parametrize("src", [
        "http://example.com/a.png",
        "data:image/png,AAEC",
        "data:image/png;base64",
        "data:image/png;base64,@@@",
    ])
    def test_rejects(self, src):
        with pytest.raises(ValueError):
            parse_data_uri(src)


class TestPost:
    """Tests for Post rendering."""

    def _post(self, **kw):
        defaults = dict(
            id="p1", name="Ana", title="T", desc="", image_b64="AAEC",
            mime_type="image/png", created_at=1,
        )
        defaults.update(kw)
        return Post(**defaults)

    def test_image_src_rendered_on_read(self):
        post = self._post()

        assert post.image_src == "data:image/png;base64,AAEC"
        assert post.image_bytes == b"\x00\x01\x02"
        assert "imageSrc" not in post.to_record()

    def test_to_dict_without_image(self):
        assert "imageSrc" not in self._post().to_dict(include_image=False)

    def test_record_round_trip(self):
        post = self._post(like_count=2, comments=[
            Comment(id="c1", post_id="p1", name="Bo", text="hi", created_at=5),
        ])

        assert Post.from_record(post.to_record()) == post

    def test_negative_like_count_clamped_on_load(self):
        rec = self._post().to_record()
        rec["likeCount"] = -4

        assert Post.from_record(rec).like_count == 0

    def test_sort_feed(self):
        a = self._post(id="a", created_at=1)
        b = self._post(id="b", created_at=3)
        c = self._post(id="c", created_at=3)

        assert [p.id for p in sort_feed([a, b, c])] == ["c", "b", "a"]


class TestDefaults:
    """Backends fall back to the shared default paths."""

    def test_backend_defaults(self, tmp_path, monkeypatch):
        from artwall.constants import DEFAULT_DATA_FILE, DEFAULT_DB_PATH, DEFAULT_STORAGE
        from artwall.storage import JSONStorage, SQLiteStorage, get_storage

        monkeypatch.chdir(tmp_path)

        with get_storage() as store:
            assert DEFAULT_STORAGE == "json"
            assert isinstance(store, JSONStorage)
            assert str(store.path) == DEFAULT_DATA_FILE
        with get_storage("sqlite") as store:
            assert isinstance(store, SQLiteStorage)
            assert str(store.db_path) == DEFAULT_DB_PATH
        assert (tmp_path / DEFAULT_DATA_FILE).exists()
        assert (tmp_path / DEFAULT_DB_PATH).exists()
