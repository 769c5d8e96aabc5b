"""Review host that downloads pull request diffs over HTTP"""

import logging
from typing import Any, Dict, Optional

from diffpos.infrastructure.hosting.base import ReviewHost
from diffpos.infrastructure.http_client import (
    RetryConfig,
    get_text_with_retries,
    retry_config_from_dict,
)

logger = logging.getLogger(__name__)


class UrlReviewHost(ReviewHost):
    """Fetches ``diff_url_template.format(pull_request_id=...)`` with retries"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.diff_url_template: str = self.config["diff_url_template"]
        self.timeout = float(self.config.get("timeout", 30.0))
        self.headers: Dict[str, str] = dict(self.config.get("headers") or {})
        self.headers.setdefault("Accept", "text/x-diff, text/plain")
        retry = self.config.get("retry")
        self.retry_config = retry if isinstance(retry, RetryConfig) else retry_config_from_dict(retry or {})

    def _validate_config(self, config: Dict[str, Any]) -> None:
        template = config.get("diff_url_template")
        if not template:
            raise ValueError("diff_url_template is required for the url host")
        if "{pull_request_id}" not in template:
            raise ValueError("diff_url_template must contain '{pull_request_id}'")

    def fetch_diff(self, pull_request_id: str) -> str:
        url = self.diff_url_template.format(pull_request_id=pull_request_id)
        logger.info(f"Fetching diff from {url}")
        return get_text_with_retries(
            url,
            headers=self.headers,
            timeout=self.timeout,
            retry=self.retry_config,
        )
