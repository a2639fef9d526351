"""Allow ``python -m eportfolio`` to start the development server."""

from .website import main

main()
