"""
Flask application for the e-portfolio.

This module exposes a Flask app factory and the page handlers. Storage is
injected through the factory (a record store and an upload store) so pages
can be exercised in tests without touching the filesystem.
"""

import io
import logging
import os
from datetime import datetime

from flask import (
    Flask,
    abort,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    send_file,
    url_for,
)

from . import aggregator, config
from .record_store import CONTACTS, LEARNING_LOG, PESE_LAB, PSE_LAB, SOCIAL, JsonFileRecordStore
from .upload_store import ASSIGNMENT, CATEGORY_DIRS, IMAGE, VIDEO, DiskUploadStore


BASE_DIR = os.path.dirname(os.path.abspath(__file__))
TEMPLATE_DIR = os.path.abspath(os.path.join(BASE_DIR, "templates"))
STATIC_DIR = os.path.abspath(os.path.join(BASE_DIR, "static"))
LOGGER = logging.getLogger(__name__)

# Form field carrying the file for each upload page
UPLOAD_FIELDS = {
    ASSIGNMENT: "assignment",
    VIDEO: "introVideo",
    IMAGE: "image",
}
SUBDIR_CATEGORIES = {subdir: category for category, subdir in CATEGORY_DIRS.items()}
LEARNING_LOG_FIELDS = ("title", "content")
SOCIAL_FIELDS = ("name", "message")
CONTACT_FIELDS = ("name", "email", "message")
PROFILE_FIELDS = ("name", "bio")
MISSING_FIELDS_MESSAGE = "Please fill in every field before submitting."
MISSING_FILE_MESSAGE = "Please choose a file to upload."
LAB_PAGES = {
    PSE_LAB: {
        "title": "PSE Lab – Personality & Skill Enhancement",
        "subtitle": "Confidence Building & Public Speaking Development Record",
    },
    PESE_LAB: {
        "title": "PESE Lab – Personality & Public Speaking Enhancement",
        "subtitle": "Skill Development Activities Record",
    },
}


def get_stores():
    """
    Return the injected stores for the current app.

    :returns: Tuple of (record store, upload store).
    """

    return current_app.config["RECORD_STORE"], current_app.config["UPLOAD_STORE"]


def format_date(value):
    """
    Format an ISO timestamp for display.

    :param value: ISO-8601 string or datetime.
    :returns: ``YYYY-MM-DD`` string, or the raw value if it cannot be parsed.
    """

    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return str(value or "")


def upload_url(category, stored_name, external=False):
    """Build the public URL of an uploaded file."""

    subdir = CATEGORY_DIRS.get(category, "")
    filename = f"{subdir}/{stored_name}" if subdir else stored_name
    return url_for("uploaded_file", filename=filename, _external=external)


def read_form(fields):
    """
    Collect required text fields from the submitted form.

    :param fields: Field names that must be present and non-blank.
    :returns: Dict of stripped values, or None if any field is missing.
    """

    values = {field: (request.form.get(field) or "").strip() for field in fields}
    if not all(values.values()):
        return None
    return values


def bad_request(message):
    return render_template("error.html", title="Missing Information", message=message), 400


def see_other(endpoint):
    return redirect(url_for(endpoint), code=303)


def handle_upload(category, endpoint):
    """
    Store the file posted for ``category`` and redirect back to the page.

    :param category: Upload category.
    :param endpoint: Page to return to.
    :returns: 303 redirect, or a 400 page when no file was sent.
    """

    uploaded = request.files.get(UPLOAD_FIELDS[category])
    if uploaded is None or not uploaded.filename:
        return bad_request(MISSING_FILE_MESSAGE)

    _, uploads = get_stores()
    stored_name = uploads.save(category, uploaded.filename, uploaded.read())
    current_app.logger.info("Uploaded %s as %s", category, stored_name)
    return see_other(endpoint)


def index():
    records, uploads = get_stores()
    return render_template("index.html", **aggregator.home_view(records, uploads))


def introduction():
    if request.method == "POST":
        return handle_upload(VIDEO, "introduction")
    _, uploads = get_stores()
    return render_template("introduction.html", **aggregator.introduction_view(uploads))


def assignments():
    if request.method == "POST":
        return handle_upload(ASSIGNMENT, "assignments")
    _, uploads = get_stores()
    return render_template("assignments.html", **aggregator.assignments_view(uploads))


def share_assignment(filename):
    """
    Render the public share page for one assignment.

    Unknown files get a not-found page with status 404.
    """

    records, uploads = get_stores()
    view = aggregator.share_assignment_view(records, uploads, filename)
    if view is None:
        return render_template("not_found.html", what="Assignment"), 404
    return render_template("share_assignment.html", **view)


def learning_log():
    records, _ = get_stores()
    if request.method == "POST":
        values = read_form(LEARNING_LOG_FIELDS)
        if values is None:
            return bad_request(MISSING_FIELDS_MESSAGE)
        records.append(LEARNING_LOG, values)
        return see_other("learning_log")
    return render_template("learning_log.html", **aggregator.learning_log_view(records))


def lab_page(name):
    records, _ = get_stores()
    return render_template("lab.html", **LAB_PAGES[name], **aggregator.lab_view(records, name))


def pse_lab():
    return lab_page(PSE_LAB)


def pese_lab():
    return lab_page(PESE_LAB)


def gallery():
    if request.method == "POST":
        return handle_upload(IMAGE, "gallery")
    _, uploads = get_stores()
    return render_template("gallery.html", **aggregator.gallery_view(uploads))


def social():
    records, _ = get_stores()
    if request.method == "POST":
        values = read_form(SOCIAL_FIELDS)
        if values is None:
            return bad_request(MISSING_FIELDS_MESSAGE)
        records.append(SOCIAL, values)
        return see_other("social")
    return render_template("social.html", **aggregator.social_view(records))


def dashboard():
    records, uploads = get_stores()
    return render_template("dashboard.html", **aggregator.dashboard_view(records, uploads))


def profile():
    records, _ = get_stores()
    if request.method == "POST":
        values = read_form(PROFILE_FIELDS)
        if values is None:
            return bad_request(MISSING_FIELDS_MESSAGE)
        records.save_profile(values["name"], values["bio"])
        return see_other("profile")
    return render_template("profile.html", **aggregator.profile_view(records))


def contact():
    records, _ = get_stores()
    if request.method == "POST":
        values = read_form(CONTACT_FIELDS)
        if values is None:
            return bad_request(MISSING_FIELDS_MESSAGE)
        records.append(CONTACTS, values)
        return see_other("contact")
    return render_template("contact.html", **aggregator.contact_view(records))


def share_portfolio():
    records, uploads = get_stores()
    return render_template("share_portfolio.html", **aggregator.share_portfolio_view(records, uploads))


def uploaded_file(filename):
    """
    Serve an uploaded file verbatim.

    :param filename: ``<category dir>/<stored name>`` or a bare stored name
        for files in the upload root.
    """

    subdir, _, stored_name = filename.rpartition("/")
    if subdir and subdir not in SUBDIR_CATEGORIES:
        abort(404)
    category = SUBDIR_CATEGORIES.get(subdir)

    _, uploads = get_stores()
    upload = uploads.resolve(category, stored_name)
    if upload is None:
        abort(404)
    if os.path.isabs(upload.path):
        return send_file(upload.path, conditional=True)
    return send_file(io.BytesIO(uploads.read_bytes(category, stored_name)), download_name=stored_name)


def health():
    return jsonify({"status": "healthy"}), 200


def page_not_found(_error):
    return render_template("not_found.html", what="Page"), 404


def create_app(*, record_store=None, upload_store=None, data_dir=None, upload_dir=None):
    """
    Create and configure the Flask application.

    Storage is injected for testability; when omitted, file-backed stores
    are built from :mod:`eportfolio.config`.

    :param record_store: Optional record store (e.g. ``MemoryRecordStore``).
    :param upload_store: Optional upload store (e.g. ``MemoryUploadStore``).
    :param data_dir: Optional override for the JSON data directory.
    :param upload_dir: Optional override for the upload root.
    :returns: Configured Flask app instance.
    """

    app = Flask(__name__, template_folder=TEMPLATE_DIR, static_folder=STATIC_DIR)

    if record_store is None or upload_store is None:
        data_dir = data_dir or config.get_data_dir()
    if record_store is None:
        record_store = JsonFileRecordStore(data_dir)
    if upload_store is None:
        upload_store = DiskUploadStore(upload_dir or config.get_upload_dir(data_dir))

    # Upload directories must exist before any route is reachable
    upload_store.ensure_dirs()
    app.config["RECORD_STORE"] = record_store
    app.config["UPLOAD_STORE"] = upload_store

    app.add_template_filter(format_date, "format_date")
    app.add_template_global(upload_url, "upload_url")
    app.register_error_handler(404, page_not_found)

    app.add_url_rule("/", "index", index)
    app.add_url_rule("/introduction", "introduction", introduction, methods=["GET", "POST"])
    app.add_url_rule("/assignments", "assignments", assignments, methods=["GET", "POST"])
    app.add_url_rule("/share/assignment/<filename>", "share_assignment", share_assignment)
    app.add_url_rule("/learning-log", "learning_log", learning_log, methods=["GET", "POST"])
    app.add_url_rule("/pse-lab", "pse_lab", pse_lab)
    app.add_url_rule("/pese-lab", "pese_lab", pese_lab)
    app.add_url_rule("/gallery", "gallery", gallery, methods=["GET", "POST"])
    app.add_url_rule("/social", "social", social, methods=["GET", "POST"])
    app.add_url_rule("/dashboard", "dashboard", dashboard)
    app.add_url_rule("/profile", "profile", profile, methods=["GET", "POST"])
    app.add_url_rule("/contact", "contact", contact, methods=["GET", "POST"])
    app.add_url_rule("/share/portfolio", "share_portfolio", share_portfolio)
    app.add_url_rule("/uploads/<path:filename>", "uploaded_file", uploaded_file)
    app.add_url_rule("/health", "health", health, methods=["GET"])
    return app


def main():
    """Run the development server on the configured port."""

    app = create_app()
    port = config.get_port()
    LOGGER.info("Portfolio running at http://localhost:%d", port)
    app.run(host="0.0.0.0", port=port, debug=True)
