"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from diffpos.domain.config.host import HostConfig
from diffpos.domain.config.resolver import ResolverConfig
from diffpos.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        resolver: Diff position resolution settings
        host: Review host settings
        retry: Retry logic configuration
    """

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    host: HostConfig = Field(default_factory=HostConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",  # Reject unknown sections
        json_schema_extra={
            "example": {
                "resolver": {
                    "numbering": "cumulative",
                    "pattern_mode": "literal",
                    "file_match": "path",
                    "ignore_case": False,
                },
                "host": {
                    "type": "url",
                    "diff_url_template": "https://example.test/pulls/{pull_request_id}.diff",
                    "timeout": 30,
                    "outbox": "comments.jsonl",
                },
                "retry": {
                    "max_attempts": 3,
                    "initial_delay": 1.0,
                    "backoff_multiplier": 2.0,
                    "jitter": 0.1,
                },
            }
        },
    )
