"""
Demo lab records shipped as fixture files.

The PSE and PESE lab pages show a fixed record of skill activities. The
content lives in ``seed_data/*.json`` and is written to the record store the
first time a lab collection is requested.
"""

import json
import os

from .record_store import PESE_LAB, PSE_LAB


BASE_DIR = os.path.dirname(os.path.abspath(__file__))
SEED_DIR = os.path.join(BASE_DIR, "seed_data")
SEED_FILES = {
    PSE_LAB: "pse_lab.json",
    PESE_LAB: "pese_lab.json",
}


def load_seed(name: str) -> list:
    """
    Load the fixture records for a seeded collection.

    :param name: Collection name (``pseLab`` or ``peseLab``).
    :raises KeyError: If ``name`` has no fixture.
    :returns: List of ``{title, content}`` dicts.
    """

    file_name = SEED_FILES[name]
    with open(os.path.join(SEED_DIR, file_name), "r", encoding="utf-8") as handle:
        return json.load(handle)


def ensure_seed_collection(store, name: str) -> list:
    """
    Populate a seeded collection on first access and return its records.

    :param store: Record store to seed.
    :param name: Collection name with a fixture in ``SEED_FILES``.
    :returns: The collection's records in stored order.
    """

    if store.exists(name):
        return store.read(name)
    return store.ensure_seed(name, load_seed(name))
