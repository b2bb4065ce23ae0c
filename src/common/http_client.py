"""Shared HTTP helpers used by the release catalog and the fetcher.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. Transport failures surface as
``FetchFailed``; callers that need a different error kind (downloads)
catch and re-raise.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from errors import FetchFailed, ParseFailed

logger = logging.getLogger(__name__)


def _default_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = {"User-Agent": Constants.USER_AGENT}
    if headers:
        merged.update(headers)
    return merged


def safe_get(
    url: str,
    *,
    context: str,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "releases").
        headers: Optional extra request headers.
        **kwargs: Passed through to requests.get (e.g. ``stream=True``).

    Returns:
        requests.Response: The HTTP response object, whatever its status.

    Raises:
        FetchFailed: On timeout or connection errors.
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
                    context=context
                )
            )
        try:
            res = requests.get(
                url,
                timeout=Constants.REQUEST_TIMEOUT,
                headers=_default_headers(headers),
                **kwargs
            )
        except requests.Timeout as exc:
            logger.error(
                "%s request timed out after %s seconds",
                context,
                Constants.REQUEST_TIMEOUT,
            )
            raise FetchFailed(f"{context}: request to {safe_target} timed out") from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise FetchFailed(f"{context}: request to {safe_target} failed: {exc}") from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res


def get_json(url: str, *, context: str, expects: int = 200) -> Any:
    """GET ``url`` and decode its JSON body.

    Raises:
        FetchFailed: On transport errors or a status other than ``expects``.
        ParseFailed: If the body is not valid JSON.
    """
    res = safe_get(url, context=context, headers={"Accept": "application/json"})
    if res.status_code != expects:
        raise FetchFailed(
            f"{context}: {safe_url(url)} answered {res.status_code}, expected {expects}"
        )
    try:
        return json.loads(res.text)
    except (json.JSONDecodeError, TypeError) as exc:
        if is_debug_enabled(logger):
            logger.debug(
                "JSON decode error",
                extra=extra_context(
                    event="parse",
                    component="http_client",
                    action="get_json",
                    outcome="json_decode_error",
                    target=safe_url(url)
                )
            )
        raise ParseFailed(f"{context}: response from {safe_url(url)} is not JSON: {exc}") from exc
