"""Factory for creating review hosts"""

import logging
from typing import Any, Dict

from diffpos.infrastructure.hosting.base import ReviewHost
from diffpos.infrastructure.hosting.local import LocalReviewHost
from diffpos.infrastructure.hosting.url import UrlReviewHost

logger = logging.getLogger(__name__)


class ReviewHostFactory:
    """Factory for creating review host instances"""

    HOSTS = {
        "local": LocalReviewHost,
        "url": UrlReviewHost,
    }

    @classmethod
    def create(cls, host_type: str, config: Dict[str, Any] = None) -> ReviewHost:
        """Create review host instance
        
        Args:
            host_type: Type of host (local, url)
            config: Host configuration
            
        Returns:
            ReviewHost instance
            
        Raises:
            ValueError: If host type is not supported
        """
        if config is None:
            config = {}

        host_type_lower = host_type.lower()

        if host_type_lower not in cls.HOSTS:
            available = ", ".join(cls.HOSTS.keys())
            raise ValueError(
                f"Unknown review host: {host_type}. "
                f"Available hosts: {available}"
            )

        host_class = cls.HOSTS[host_type_lower]
        logger.info(f"Creating {host_type_lower} review host")
        return host_class(config)
