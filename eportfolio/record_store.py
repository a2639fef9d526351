"""
Append-only storage for named collections of JSON records.

Each collection (``learningLog``, ``social``, ``contacts`` and the seeded lab
collections) is an ordered list of JSON objects. The file-backed store keeps
one ``<collection>.json`` array per collection and rewrites the whole file on
every append. The profile is a separate singleton object that is overwritten
on every save.

Two implementations share the same contract:

- :class:`JsonFileRecordStore` persists to a data directory.
- :class:`MemoryRecordStore` keeps everything in process memory for tests.
"""

import copy
import json
import logging
import os
from datetime import datetime, timezone


LEARNING_LOG = "learningLog"
SOCIAL = "social"
CONTACTS = "contacts"
PSE_LAB = "pseLab"
PESE_LAB = "peseLab"
PROFILE_FILE = "profile.json"
JSON_INDENT = 2
LOGGER = logging.getLogger(__name__)
STORE_READ_ERRORS = (
    OSError,
    json.JSONDecodeError,
    UnicodeDecodeError,
)


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string."""

    return datetime.now(timezone.utc).isoformat()


def empty_profile() -> dict:
    """Return the profile used before anything has been saved."""

    return {"name": "", "bio": ""}


def normalize_profile(raw) -> dict:
    """
    Coerce a loaded profile payload into ``{name, bio}``.

    :param raw: Parsed JSON value (may be any type if the file was edited).
    :returns: Dict with string ``name`` and ``bio`` keys.
    """

    if not isinstance(raw, dict):
        return empty_profile()
    return {
        "name": str(raw.get("name") or ""),
        "bio": str(raw.get("bio") or ""),
    }


def stamp_record(record: dict, timestamp=None) -> dict:
    """
    Copy a record and assign its ``date`` field.

    :param record: Caller-defined fields.
    :param timestamp: Optional ISO string; defaults to now.
    :returns: New dict with ``date`` set.
    """

    stamped = dict(record)
    stamped["date"] = timestamp or utc_timestamp()
    return stamped


class RecordStore:
    """Interface shared by the record store implementations."""

    def append(self, collection: str, record: dict) -> dict:
        """
        Append a record to a collection with a server-assigned ``date``.

        :param collection: Logical collection name.
        :param record: Caller-defined fields.
        :returns: The stored record.
        """

        raise NotImplementedError

    def read(self, collection: str) -> list:
        """
        Return every record of a collection in insertion order.

        Missing or unreadable collections read as an empty list.
        """

        raise NotImplementedError

    def exists(self, collection: str) -> bool:
        raise NotImplementedError

    def ensure_seed(self, collection: str, seed_records) -> list:
        """
        Write ``seed_records`` once if the collection does not exist yet.

        :param collection: Logical collection name.
        :param seed_records: Records to write on first access.
        :returns: Current contents of the collection.
        """

        raise NotImplementedError

    def read_profile(self) -> dict:
        raise NotImplementedError

    def save_profile(self, name: str, bio: str) -> dict:
        raise NotImplementedError


class JsonFileRecordStore(RecordStore):
    """Record store backed by one pretty-printed JSON array file per collection."""

    def __init__(self, data_dir):
        self.data_dir = os.path.abspath(data_dir)

    def path_for(self, collection: str) -> str:
        return os.path.join(self.data_dir, f"{collection}.json")

    @property
    def profile_path(self) -> str:
        return os.path.join(self.data_dir, PROFILE_FILE)

    def _load_json(self, path):
        """
        Load a JSON file, treating absent and corrupt files alike.

        :param path: File to load.
        :returns: Parsed value, or None when absent or unparseable.
        """

        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as handle:
                return json.load(handle)
        except STORE_READ_ERRORS as exc:
            LOGGER.warning("Ignoring unreadable JSON file %s: %s", path, exc)
            return None

    def _write_json(self, path, payload):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=JSON_INDENT, ensure_ascii=False)

    def read(self, collection: str) -> list:
        rows = self._load_json(self.path_for(collection))
        if not isinstance(rows, list):
            return []
        return rows

    def exists(self, collection: str) -> bool:
        return os.path.exists(self.path_for(collection))

    def append(self, collection: str, record: dict) -> dict:
        rows = self.read(collection)
        stored = stamp_record(record)
        rows.append(stored)
        self._write_json(self.path_for(collection), rows)
        LOGGER.info("Appended record to %s (%d total)", collection, len(rows))
        return stored

    def ensure_seed(self, collection: str, seed_records) -> list:
        if self.exists(collection):
            return self.read(collection)

        timestamp = utc_timestamp()
        rows = [
            record if record.get("date") else stamp_record(record, timestamp)
            for record in seed_records
        ]
        self._write_json(self.path_for(collection), rows)
        LOGGER.info("Seeded %s with %d records", collection, len(rows))
        return rows

    def read_profile(self) -> dict:
        return normalize_profile(self._load_json(self.profile_path))

    def save_profile(self, name: str, bio: str) -> dict:
        profile = {"name": name, "bio": bio}
        self._write_json(self.profile_path, profile)
        LOGGER.info("Saved profile")
        return profile


class MemoryRecordStore(RecordStore):
    """In-memory record store with the same semantics as the file store."""

    def __init__(self, collections=None, profile=None, clock=None):
        self.collections = {
            name: [dict(record) for record in records]
            for name, records in (collections or {}).items()
        }
        self.profile = normalize_profile(profile) if profile is not None else None
        self.clock = clock or utc_timestamp

    def read(self, collection: str) -> list:
        return copy.deepcopy(self.collections.get(collection, []))

    def exists(self, collection: str) -> bool:
        return collection in self.collections

    def append(self, collection: str, record: dict) -> dict:
        stored = stamp_record(record, self.clock())
        self.collections.setdefault(collection, []).append(stored)
        return dict(stored)

    def ensure_seed(self, collection: str, seed_records) -> list:
        if collection not in self.collections:
            timestamp = self.clock()
            self.collections[collection] = [
                dict(record) if record.get("date") else stamp_record(record, timestamp)
                for record in seed_records
            ]
        return self.read(collection)

    def read_profile(self) -> dict:
        if self.profile is None:
            return empty_profile()
        return dict(self.profile)

    def save_profile(self, name: str, bio: str) -> dict:
        self.profile = {"name": name, "bio": bio}
        return dict(self.profile)
