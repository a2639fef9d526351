"""Package entrypoint for the e-portfolio Flask app.

Exposes the app factory for ``flask --app eportfolio`` and WSGI servers;
``python -m eportfolio`` runs the development server.
"""

from .website import create_app, main

# Re-export public symbols for importers.
__all__ = ["create_app", "main"]
