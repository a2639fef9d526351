"""Tests for disk and in-memory upload storage."""

import itertools
import os
import re
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from eportfolio import upload_store
from eportfolio.upload_store import DiskUploadStore, MemoryUploadStore

pytestmark = pytest.mark.store


def fixed_clock(start=1_700_000_000_000):
    """Return a clock yielding increasing millisecond values."""
    counter = itertools.count(start)
    return lambda: next(counter)


def test_save_assignment_generates_timestamped_name(tmp_path):
    """Whitespace collapses to hyphens behind a millisecond prefix."""
    store = DiskUploadStore(tmp_path)
    store.ensure_dirs()

    name = store.save("assignment", "My File.txt", b"hello")

    assert re.match(r"^[0-9]+-My-File\.txt$", name)
    assert name in store.list("assignment")
    assert (tmp_path / "assignments" / name).read_bytes() == b"hello"


def test_ensure_dirs_creates_every_category(tmp_path):
    """ensure_dirs() creates the root and each category directory."""
    root = tmp_path / "uploads"
    DiskUploadStore(root).ensure_dirs()
    for subdir in ("assignments", "videos", "gallery"):
        assert (root / subdir).is_dir()


@pytest.mark.parametrize(
    "category, subdir",
    [("assignment", "assignments"), ("video", "videos"), ("image", "gallery"), ("other", "")],
)
def test_category_directories(tmp_path, category, subdir):
    """Each category writes into its own directory; unknown ones use the root."""
    store = DiskUploadStore(tmp_path)
    store.ensure_dirs()
    name = store.save(category, "clip.bin", b"x")
    assert (tmp_path / subdir / name).is_file()


def test_clean_original_name_strips_directories():
    """Client paths are reduced to their basename."""
    assert upload_store.clean_original_name("../../etc/passwd") == "passwd"
    assert upload_store.clean_original_name("C:\\Users\\me\\My  Essay.doc") == "My-Essay.doc"
    assert upload_store.clean_original_name("") == upload_store.DEFAULT_UPLOAD_NAME


def test_make_stored_name_collapses_whitespace_runs():
    """Tabs and repeated spaces become a single hyphen."""
    assert upload_store.make_stored_name("a \t b.png", 42) == "42-a-b.png"


def test_same_millisecond_uploads_do_not_overwrite(tmp_path):
    """A colliding name advances the timestamp instead of overwriting."""
    store = DiskUploadStore(tmp_path, clock=lambda: 1000)
    store.ensure_dirs()

    first = store.save("image", "pic.png", b"one")
    second = store.save("image", "pic.png", b"two")

    assert first == "1000-pic.png"
    assert second == "1001-pic.png"
    assert (tmp_path / "gallery" / first).read_bytes() == b"one"
    assert (tmp_path / "gallery" / second).read_bytes() == b"two"


def test_save_into_missing_directory_raises(tmp_path):
    """An unwritable destination surfaces as an OSError."""
    store = DiskUploadStore(tmp_path / "never-created")
    with pytest.raises(OSError):
        store.save("assignment", "a.txt", b"x")


def test_list_missing_category_is_empty(tmp_path):
    """Listing before directories exist returns []."""
    assert DiskUploadStore(tmp_path / "nothing").list("video") == []


def test_resolve_existing_and_missing(tmp_path):
    """resolve() reports path and modified time only for stored files."""
    store = DiskUploadStore(tmp_path)
    store.ensure_dirs()
    name = store.save("assignment", "report.pdf", b"pdf")

    found = store.resolve("assignment", name)
    assert found is not None
    assert found.name == name
    assert found.path == os.path.join(str(tmp_path), "assignments", name)
    assert found.modified.tzinfo is not None

    assert store.resolve("assignment", "missing.pdf") is None
    assert store.resolve("video", name) is None


@pytest.mark.parametrize("bad_name", ["", "..", "../profile.json", "a/b", "a\\b"])
def test_resolve_rejects_path_tricks(tmp_path, bad_name):
    """Names that could leave the category directory never resolve."""
    store = DiskUploadStore(tmp_path)
    store.ensure_dirs()
    (tmp_path / "profile.json").write_text("{}", encoding="utf-8")
    assert store.resolve("assignment", bad_name) is None


def test_latest_uses_modified_time_not_listing_order(tmp_path):
    """latest() picks the file with the newest modification time."""
    store = DiskUploadStore(tmp_path)
    store.ensure_dirs()
    older = store.save("video", "zzz.mp4", b"1")
    newer = store.save("video", "aaa.mp4", b"2")
    os.utime(tmp_path / "videos" / older, (1_000, 1_000))
    os.utime(tmp_path / "videos" / newer, (2_000, 2_000))

    assert store.latest("video").name == newer
    assert store.latest("image") is None


def test_memory_store_contract():
    """The in-memory store saves, lists, resolves and reads back bytes."""
    store = MemoryUploadStore(clock=fixed_clock(5000))
    store.ensure_dirs()
    assert store.dirs_ready is True

    first = store.save("assignment", "My File.txt", b"abc")
    second = store.save("video", "intro.mp4", b"vid")

    assert first == "5000-My-File.txt"
    assert store.list("assignment") == [first]
    assert store.count("video") == 1
    assert store.read_bytes("assignment", first) == b"abc"
    assert store.resolve("assignment", first).path == f"assignments/{first}"
    assert store.resolve("assignment", "nope") is None
    assert store.latest("video").name == second


def test_memory_store_collision_advances_timestamp():
    """Identical names at the same instant get distinct stored names."""
    store = MemoryUploadStore(clock=lambda: 7)
    assert store.save("image", "a.png", b"1") == "7-a.png"
    assert store.save("image", "a.png", b"2") == "8-a.png"
