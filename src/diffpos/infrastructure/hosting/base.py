"""Base review host interface"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from diffpos.domain.models.comment import ReviewComment

logger = logging.getLogger(__name__)


class ReviewHost(ABC):
    """Abstract base class for review hosts

    A review host supplies the diff of a pull request and accepts inline
    review comments anchored at a diff position. Submitted comments are kept
    in ``submitted`` and, when ``outbox`` is configured, appended to that
    file as JSON lines.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize host with configuration

        Args:
            config: Host configuration dictionary

        Raises:
            ValueError: If configuration is invalid
        """
        self.config = config or {}
        self._validate_config(self.config)
        outbox = self.config.get("outbox")
        self.outbox: Optional[Path] = Path(outbox) if outbox else None
        self.submitted: List[ReviewComment] = []

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate host configuration

        Raises:
            ValueError: If configuration is invalid
        """
        # Override in subclasses for specific validation
        pass

    @abstractmethod
    def fetch_diff(self, pull_request_id: str) -> str:
        """Return the unified diff text of a pull request

        Raises:
            RuntimeError: If the diff cannot be obtained
        """

    def submit_comment(self, file_path: str, commit_id: str, position: int, body: str) -> bool:
        """Submit an inline review comment

        Args:
            file_path: File the comment is attached to
            commit_id: Commit the diff was computed against
            position: 1-based diff position
            body: Comment text

        Returns:
            True if the comment was accepted
        """
        comment = ReviewComment(file_path=file_path, commit_id=commit_id, position=position, body=body)
        if self.outbox is not None:
            self.outbox.parent.mkdir(parents=True, exist_ok=True)
            with open(self.outbox, "a", encoding="utf-8") as f:
                f.write(json.dumps(comment.to_dict(), ensure_ascii=False) + "\n")
        self.submitted.append(comment)
        logger.debug(f"Recorded comment for {file_path} at position {position}")
        return True
