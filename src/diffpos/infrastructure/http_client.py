"""Shared HTTP client utilities (requests + retry/backoff)."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

from diffpos.infrastructure.retry import (
    RetryConfig,
    create_retry_decorator,
    retry_config_from_dict,
    should_retry_request,
)

logger = logging.getLogger(__name__)

__all__ = ["RetryConfig", "get_text_with_retries", "retry_config_from_dict"]


def get_text_with_retries(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: float,
    retry: RetryConfig,
) -> str:
    """GET a text resource with retry on network errors, 429 and 5xx."""

    @create_retry_decorator(retry, should_retry_request)
    def _request_with_retry() -> requests.Response:
        logger.debug(f"HTTP GET {url}")
        resp = requests.get(url, headers=headers or {}, timeout=timeout)
        resp.raise_for_status()
        return resp

    try:
        response = _request_with_retry()
    except requests.exceptions.HTTPError:
        raise
    except Exception as e:
        raise RuntimeError(f"HTTP request failed: {e}") from e
    return response.text
