"""
Shared Test Fixtures for artwall

Stores are created under pytest's tmp_path so every test gets a fresh
dataset. The ``store`` fixture is parametrized over both backends so the
contract tests run against each of them.
"""

import pytest

from artwall.storage import JSONStorage, SQLiteStorage


# =============================================================================
# Image Fixtures
# =============================================================================

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def png_bytes():
    """A small PNG-looking payload, including bytes that are not valid UTF-8."""
    return PNG_HEADER + bytes(range(256)) + b"\x00\xff" * 8


@pytest.fixture
def make_image():
    """
    Factory for distinct image payloads.

    Usage:
        def test_something(make_image):
            a, b = make_image(1), make_image(2)
    """
    def _make(seed: int = 0) -> bytes:
        return PNG_HEADER + bytes((seed + i) % 256 for i in range(64))
    return _make


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def json_path(tmp_path):
    return tmp_path / "data" / "gallery.json"


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "artwall.db"


@pytest.fixture(params=["json", "sqlite"])
def open_store(request, json_path, db_path):
    """
    Factory that opens (or reopens) the same dataset for one backend.

    Every store it opens is closed at teardown.
    """
    opened = []

    def _open():
        if request.param == "json":
            s = JSONStorage(str(json_path))
        else:
            s = SQLiteStorage(str(db_path))
        opened.append(s)
        return s

    yield _open
    for s in opened:
        s.close()


@pytest.fixture
def store(open_store):
    return open_store()


@pytest.fixture
def json_store(json_path):
    s = JSONStorage(str(json_path))
    yield s
    s.close()


@pytest.fixture
def sqlite_store(db_path):
    s = SQLiteStorage(str(db_path))
    yield s
    s.close()
