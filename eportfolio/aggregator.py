"""
Read models for each portfolio page.

Every function here composes results from a record store and an upload store
into one dict for a template. Nothing is cached and nothing touches the
filesystem directly: each call reflects the stores at call time.
"""

from . import seeds
from .record_store import CONTACTS, LEARNING_LOG, PSE_LAB, SOCIAL
from .upload_store import ASSIGNMENT, IMAGE, VIDEO


PREVIEW_LIMIT = 5
DEFAULT_PORTFOLIO_NAME = "Student Portfolio"
GETTING_STARTED_MAX = 5
DASHBOARD_KEYS = ("assignments", "videos", "gallery", "learningLog", "social", "contacts")


def newest_first(records: list) -> list:
    """Return records in reverse insertion order."""

    return list(reversed(records))


def preview(records: list, limit=PREVIEW_LIMIT):
    """
    Cap a newest-first list for a preview section.

    :param records: Records in display order.
    :param limit: Maximum entries to keep.
    :returns: Tuple of (capped list, whether more entries exist).
    """

    return records[:limit], len(records) > limit


def portfolio_status(total: int) -> str:
    """Describe how far along the portfolio is from its total activity count."""

    if total == 0:
        return "empty"
    if total <= GETTING_STARTED_MAX:
        return "getting started"
    return "active"


def share_profile(records) -> dict:
    """Profile for public pages, with a fallback display name."""

    profile = records.read_profile()
    profile["display_name"] = profile["name"] or DEFAULT_PORTFOLIO_NAME
    return profile


def home_view(records, uploads) -> dict:
    latest_video = uploads.latest(VIDEO)
    return {
        "assignments_count": uploads.count(ASSIGNMENT),
        "gallery_count": uploads.count(IMAGE),
        "learning_log_count": len(records.read(LEARNING_LOG)),
        "has_intro_video": latest_video is not None,
        "latest_video": latest_video,
    }


def dashboard_view(records, uploads) -> dict:
    """
    Count every collection and upload category.

    :returns: Dict with ``counts`` (one int per key in ``DASHBOARD_KEYS``),
        their ``total`` and a ``status`` label.
    """

    counts = {
        "assignments": uploads.count(ASSIGNMENT),
        "videos": uploads.count(VIDEO),
        "gallery": uploads.count(IMAGE),
        "learningLog": len(records.read(LEARNING_LOG)),
        "social": len(records.read(SOCIAL)),
        "contacts": len(records.read(CONTACTS)),
    }
    total = sum(counts[key] for key in DASHBOARD_KEYS)
    return {"counts": counts, "total": total, "status": portfolio_status(total)}


def introduction_view(uploads) -> dict:
    return {"videos": uploads.list(VIDEO), "latest_video": uploads.latest(VIDEO)}


def assignments_view(uploads) -> dict:
    return {"assignments": uploads.list(ASSIGNMENT)}


def gallery_view(uploads) -> dict:
    return {"images": uploads.list(IMAGE)}


def learning_log_view(records) -> dict:
    """
    Custom learning-log entries (newest first) followed by the PSE lab record.

    :returns: Dict with ``entries`` plus separate and combined counts.
    """

    logs = newest_first(records.read(LEARNING_LOG))
    labs = seeds.ensure_seed_collection(records, PSE_LAB)
    return {
        "entries": logs + labs,
        "custom_count": len(logs),
        "lab_count": len(labs),
        "total": len(logs) + len(labs),
    }


def lab_view(records, name: str) -> dict:
    labs = seeds.ensure_seed_collection(records, name)
    return {"labs": labs, "count": len(labs)}


def social_view(records) -> dict:
    return {"posts": newest_first(records.read(SOCIAL))}


def contact_view(records) -> dict:
    return {"contacts": newest_first(records.read(CONTACTS))}


def profile_view(records) -> dict:
    return {"profile": records.read_profile()}


def share_portfolio_view(records, uploads) -> dict:
    """
    Build the public share page model.

    Learning-log entries and social posts are shown newest first and capped
    to ``PREVIEW_LIMIT``; the ``*_more`` flags tell the page that older
    entries were left out.
    """

    learning_log = newest_first(records.read(LEARNING_LOG))
    social_posts = newest_first(records.read(SOCIAL))
    log_preview, log_more = preview(learning_log)
    social_preview, social_more = preview(social_posts)
    return {
        "profile": share_profile(records),
        "assignments": uploads.list(ASSIGNMENT),
        "videos": uploads.list(VIDEO),
        "gallery": uploads.list(IMAGE),
        "learning_log": log_preview,
        "social_posts": social_preview,
        "learning_log_total": len(learning_log),
        "social_total": len(social_posts),
        "learning_log_more": log_more,
        "social_more": social_more,
    }


def share_assignment_view(records, uploads, stored_name):
    """
    Build the share page model for one assignment.

    :returns: Dict with ``profile`` and ``upload``, or None if no such file.
    """

    upload = uploads.resolve(ASSIGNMENT, stored_name)
    if upload is None:
        return None
    return {"profile": share_profile(records), "upload": upload}
