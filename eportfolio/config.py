"""
Runtime configuration helpers.

This module centralizes the filesystem locations and listening port so that
application code never hard-codes where portfolio data lives.
"""

import os


DATA_DIR_ENV_VAR = "PORTFOLIO_DATA_DIR"
UPLOAD_DIR_ENV_VAR = "PORTFOLIO_UPLOAD_DIR"
PORT_ENV_VAR = "PORTFOLIO_PORT"
DEFAULT_PORT = 3000
UPLOAD_DIR_NAME = "uploads"
MIN_PORT = 1
MAX_PORT = 65535


def get_data_dir() -> str:
    """
    Resolve the directory holding the JSON collection files.

    Resolution order:
    1) ``PORTFOLIO_DATA_DIR`` if provided.
    2) The current working directory.

    :returns: Absolute path to the data directory.
    """

    data_dir = os.environ.get(DATA_DIR_ENV_VAR)
    if data_dir:
        return os.path.abspath(data_dir)
    return os.path.abspath(os.getcwd())


def get_upload_dir(data_dir=None) -> str:
    """
    Resolve the root directory for uploaded files.

    :param data_dir: Optional data directory used for the default location.
    :returns: ``PORTFOLIO_UPLOAD_DIR`` if set, else ``<data_dir>/uploads``.
    """

    upload_dir = os.environ.get(UPLOAD_DIR_ENV_VAR)
    if upload_dir:
        return os.path.abspath(upload_dir)
    return os.path.join(data_dir or get_data_dir(), UPLOAD_DIR_NAME)


def get_port() -> int:
    """
    Resolve the listening port.

    :raises RuntimeError: If ``PORTFOLIO_PORT`` is not a valid port number.
    :returns: Port from ``PORTFOLIO_PORT`` or ``DEFAULT_PORT``.
    """

    raw_port = os.environ.get(PORT_ENV_VAR)
    if not raw_port:
        return DEFAULT_PORT

    try:
        port = int(raw_port)
    except ValueError as exc:
        raise RuntimeError(
            f"Invalid {PORT_ENV_VAR} value {raw_port!r}: expected an integer."
        ) from exc

    if not MIN_PORT <= port <= MAX_PORT:
        raise RuntimeError(
            f"Invalid {PORT_ENV_VAR} value {port}: "
            f"expected a port between {MIN_PORT} and {MAX_PORT}."
        )
    return port
