"""
Category-based storage for uploaded files.

Uploads are written as-is under a category directory with a generated name of
the form ``<creation-timestamp-millis>-<original name>``, where whitespace runs
in the original name are collapsed to hyphens. The generated name is the
upload's identity; files are never modified or deleted once written.
"""

import logging
import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone


ASSIGNMENT = "assignment"
VIDEO = "video"
IMAGE = "image"
CATEGORY_DIRS = {
    ASSIGNMENT: "assignments",
    VIDEO: "videos",
    IMAGE: "gallery",
}
WHITESPACE_RE = re.compile(r"\s+")
DEFAULT_UPLOAD_NAME = "upload"
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredUpload:
    """A file that exists in upload storage."""

    category: str
    name: str
    path: str
    modified: datetime


def now_millis() -> int:
    """Return the current wall-clock time in milliseconds."""

    return time.time_ns() // 1_000_000


def category_subdir(category) -> str:
    """
    Map an upload category to its directory under the upload root.

    :param category: ``assignment``, ``video``, ``image`` or anything else.
    :returns: Relative directory name; ``""`` (the root) for unknown categories.
    """

    return CATEGORY_DIRS.get(category, "")


def clean_original_name(original_name) -> str:
    """
    Reduce a client-supplied filename to a bare, hyphenated basename.

    :param original_name: Filename as sent by the browser.
    :returns: Basename with whitespace runs collapsed to ``-``.
    """

    base = os.path.basename(str(original_name or "").replace("\\", "/"))
    base = WHITESPACE_RE.sub("-", base)
    if base in {"", ".", ".."}:
        return DEFAULT_UPLOAD_NAME
    return base


def make_stored_name(original_name, timestamp_ms: int) -> str:
    """Build the stored name ``<millis>-<clean original name>``."""

    return f"{int(timestamp_ms)}-{clean_original_name(original_name)}"


def is_safe_name(stored_name) -> bool:
    """Return True if ``stored_name`` names a file directly inside a category."""

    if not stored_name or stored_name in {".", ".."}:
        return False
    return "/" not in stored_name and "\\" not in stored_name and "\x00" not in stored_name


class UploadStore:
    """Interface shared by the upload store implementations."""

    def ensure_dirs(self):
        """Create the storage location for every category."""

        raise NotImplementedError

    def save(self, category, original_name, data: bytes) -> str:
        """
        Persist an uploaded file and return its generated name.

        :param category: Upload category.
        :param original_name: Client filename.
        :param data: File contents.
        :returns: Stored name.
        """

        raise NotImplementedError

    def list(self, category) -> list:
        raise NotImplementedError

    def read_bytes(self, category, stored_name) -> bytes:
        raise NotImplementedError

    def resolve(self, category, stored_name):
        """
        Look up a stored upload.

        :returns: :class:`StoredUpload` if it exists, else None.
        """

        raise NotImplementedError

    def latest(self, category):
        """
        Return the most recently written upload of a category.

        Recency is the recorded modification time, never listing order.

        :returns: :class:`StoredUpload` or None when the category is empty.
        """

        uploads = [self.resolve(category, name) for name in self.list(category)]
        uploads = [upload for upload in uploads if upload is not None]
        if not uploads:
            return None
        return max(uploads, key=lambda upload: (upload.modified, upload.name))

    def count(self, category) -> int:
        return len(self.list(category))


class DiskUploadStore(UploadStore):
    """Upload store writing files under a root directory on local disk."""

    def __init__(self, root, clock=None):
        self.root = os.path.abspath(root)
        self.clock = clock or now_millis

    def directory_for(self, category) -> str:
        subdir = category_subdir(category)
        return os.path.join(self.root, subdir) if subdir else self.root

    def ensure_dirs(self):
        for path in [self.root] + [self.directory_for(category) for category in CATEGORY_DIRS]:
            os.makedirs(path, exist_ok=True)

    def save(self, category, original_name, data: bytes) -> str:
        directory = self.directory_for(category)
        timestamp = self.clock()
        stored_name = make_stored_name(original_name, timestamp)
        # Advance the timestamp until the generated name is unused.
        while os.path.exists(os.path.join(directory, stored_name)):
            timestamp += 1
            stored_name = make_stored_name(original_name, timestamp)

        with open(os.path.join(directory, stored_name), "wb") as handle:
            handle.write(data)
        LOGGER.info("Stored %s upload %s (%d bytes)", category, stored_name, len(data))
        return stored_name

    def list(self, category) -> list:
        directory = self.directory_for(category)
        if not os.path.isdir(directory):
            return []
        return [
            name
            for name in os.listdir(directory)
            if os.path.isfile(os.path.join(directory, name))
        ]

    def read_bytes(self, category, stored_name) -> bytes:
        with open(os.path.join(self.directory_for(category), stored_name), "rb") as handle:
            return handle.read()

    def resolve(self, category, stored_name):
        if not is_safe_name(stored_name):
            return None
        path = os.path.join(self.directory_for(category), stored_name)
        if not os.path.isfile(path):
            return None
        modified = datetime.fromtimestamp(os.path.getmtime(path), tz=timezone.utc)
        return StoredUpload(category=category, name=stored_name, path=path, modified=modified)


class MemoryUploadStore(UploadStore):
    """In-memory upload store; ``modified`` comes from the injected clock."""

    def __init__(self, clock=None):
        self.clock = clock or now_millis
        self.files = {}
        self.dirs_ready = False

    def ensure_dirs(self):
        self.dirs_ready = True

    def save(self, category, original_name, data: bytes) -> str:
        bucket = self.files.setdefault(category_subdir(category), {})
        timestamp = self.clock()
        stored_name = make_stored_name(original_name, timestamp)
        while stored_name in bucket:
            timestamp += 1
            stored_name = make_stored_name(original_name, timestamp)
        bucket[stored_name] = (bytes(data), timestamp)
        return stored_name

    def list(self, category) -> list:
        return list(self.files.get(category_subdir(category), {}))

    def read_bytes(self, category, stored_name) -> bytes:
        return self.files[category_subdir(category)][stored_name][0]

    def resolve(self, category, stored_name):
        bucket = self.files.get(category_subdir(category), {})
        if not is_safe_name(stored_name) or stored_name not in bucket:
            return None
        _, timestamp = bucket[stored_name]
        subdir = category_subdir(category)
        return StoredUpload(
            category=category,
            name=stored_name,
            path=f"{subdir}/{stored_name}" if subdir else stored_name,
            modified=datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc),
        )
