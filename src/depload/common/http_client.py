"""Shared HTTP helpers used by the feed repository.

Encapsulates common request/timeout error handling so callers avoid
duplicating try/except blocks. Transport failures surface as InstallIOError;
HTTP status handling is left to the caller.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Tuple

import requests

from depload.constants import Constants
from depload.exceptions import InstallIOError
from depload.common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Accept": "application/json"}


def safe_get(url: str, *, context: str, **kwargs: Any) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Source tag for logs (usually the feed URL).
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object.

    Raises:
        InstallIOError: On timeouts and connection failures.
    """
    safe_target = safe_url(url)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    source=context,
                ),
            )
        try:
            res = requests.get(url, timeout=Constants.REQUEST_TIMEOUT, **kwargs)
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                Constants.REQUEST_TIMEOUT,
            )
            raise InstallIOError(f"Request to {safe_target} timed out", source=context) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise InstallIOError(f"Request to {safe_target} failed: {exc}", source=context) from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success" if res.ok else "error",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    source=context,
                ),
            )
        return res


def get_json(url: str, *, context: str) -> Tuple[int, Optional[Any]]:
    """GET a JSON document.

    Returns:
        Tuple of (status_code, parsed body or None when not 200 or not JSON)
    """
    res = safe_get(url, context=context, headers=HEADERS_JSON)
    if res.status_code != 200:
        return res.status_code, None
    try:
        return res.status_code, res.json()
    except ValueError:
        logger.warning("%s returned invalid JSON for %s", context, safe_url(url))
        return res.status_code, None


def download_file(url: str, destination: Path, *, context: str) -> Path:
    """Stream a URL to disk, removing the partial file on failure."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        with requests.get(url, timeout=Constants.REQUEST_TIMEOUT, stream=True) as res:
            res.raise_for_status()
            with open(destination, "wb") as fh:
                for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
    except (requests.RequestException, OSError) as exc:
        destination.unlink(missing_ok=True)
        raise InstallIOError(f"Download of {safe_url(url)} failed: {exc}", source=context) from exc
    return destination
