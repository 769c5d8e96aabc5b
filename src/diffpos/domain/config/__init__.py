"""Configuration models with Pydantic validation."""

from diffpos.domain.config.app import AppConfig
from diffpos.domain.config.host import HostConfig
from diffpos.domain.config.resolver import ResolverConfig
from diffpos.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "HostConfig",
    "ResolverConfig",
    "RetryConfig",
]
