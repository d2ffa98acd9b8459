import os
import logging
from typing import Optional

import requests
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Ensure environment variables from .env are loaded when this module is imported.
load_dotenv()


def open_session(api_key: Optional[str] = None) -> requests.Session:
    """Open a requests session to the randomness oracle and check it is reachable.

    Parameters
    ----------
    api_key : Optional[str]
        Oracle API key. Falls back to ``RANDOMNESS_API_KEY``.

    Returns
    -------
    requests.Session
        Session carrying the API key header.

    Raises
    ------
    RuntimeError
        If ``RANDOMNESS_BASE_FQDN`` or the API key is not set, or if the
        health check fails. Any underlying exception is re-raised as a
        ``RuntimeError`` with context.
    """
    fqdn = os.environ.get("RANDOMNESS_BASE_FQDN")
    if not fqdn:
        raise RuntimeError("Environment variable 'RANDOMNESS_BASE_FQDN' is not set")
    key = api_key or os.environ.get("RANDOMNESS_API_KEY")
    if not key:
        raise RuntimeError("Environment variable 'RANDOMNESS_API_KEY' is not set")
    url = "https://" + fqdn + "/api/v1/health"

    session = requests.Session()
    # Never log the key value
    session.headers.update({"Accept": "application/json", "X-API-KEY": key})
    try:
        response = session.get(url)
        response.raise_for_status()
        logger.debug("Randomness oracle health check passed")
        return session
    except Exception as e:
        logger.critical(f"Error occurred while starting oracle session: {e}")
        raise RuntimeError(f"Failed to establish oracle session: {e}") from e
