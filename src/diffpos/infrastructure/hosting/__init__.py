"""Review hosts"""

from diffpos.infrastructure.hosting.base import ReviewHost
from diffpos.infrastructure.hosting.factory import ReviewHostFactory
from diffpos.infrastructure.hosting.local import LocalReviewHost
from diffpos.infrastructure.hosting.url import UrlReviewHost

__all__ = ["ReviewHost", "ReviewHostFactory", "LocalReviewHost", "UrlReviewHost"]
