"""Service for placing review suggestions on a pull request diff"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from diffpos.domain.models.comment import ReviewComment, Suggestion
from diffpos.domain.models.resolution import Resolution
from diffpos.domain.resolvers.position_resolver import DiffPositionResolver
from diffpos.infrastructure.hosting.base import ReviewHost

logger = logging.getLogger(__name__)


@dataclass
class PlacementReport:
    """Outcome of placing a batch of suggestions"""

    pull_request_id: str
    commit_id: str
    placed: List[Tuple[Suggestion, ReviewComment]] = field(default_factory=list)
    skipped: List[Tuple[Suggestion, Resolution]] = field(default_factory=list)
    failed: List[Tuple[Suggestion, ReviewComment]] = field(default_factory=list)
    submitted: bool = True

    @property
    def total(self) -> int:
        return len(self.placed) + len(self.skipped) + len(self.failed)

    def stats(self) -> dict:
        """Summary counters for display and logging"""
        return {
            "total_suggestions": self.total,
            "placed": len(self.placed),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
            "comments_posted": len(self.placed) if self.submitted else 0,
        }


class SuggestionPlacementService:
    """Resolve suggestions to diff positions and submit inline comments

    A suggestion whose line cannot be located is skipped with its reason; it
    is never submitted at a guessed position.
    """

    def __init__(self, host: ReviewHost, resolver: Optional[DiffPositionResolver] = None):
        """Initialize placement service

        Args:
            host: Review host supplying the diff and accepting comments
            resolver: Position resolver (uses defaults if None)
        """
        self.host = host
        self.resolver = resolver or DiffPositionResolver()

    def place(
        self,
        pull_request_id: str,
        suggestions: Iterable[Suggestion],
        commit_id: str,
        submit: bool = True,
    ) -> PlacementReport:
        """Place suggestions on a pull request

        Args:
            pull_request_id: Pull request identifier understood by the host
            suggestions: Suggestions to place
            commit_id: Commit the diff belongs to
            submit: Whether to submit comments to the host (False = dry run)

        Returns:
            PlacementReport with placed, skipped and failed suggestions
        """
        logger.info(f"Placing suggestions on pull request {pull_request_id}")

        # Positions are only valid for this exact diff; fetch it once per batch
        diff = self.host.fetch_diff(pull_request_id)
        report = PlacementReport(pull_request_id=pull_request_id, commit_id=commit_id, submitted=submit)

        for suggestion in suggestions:
            resolution = self.resolver.resolve(
                diff, suggestion.file_path, suggestion.pattern, regex=suggestion.regex
            )
            if not resolution.is_found:
                logger.warning(f"{suggestion.file_path}: {resolution.reason} (pattern: {suggestion.pattern!r})")
                report.skipped.append((suggestion, resolution))
                continue

            comment = ReviewComment(
                file_path=suggestion.file_path,
                commit_id=commit_id,
                position=resolution.position,
                body=suggestion.to_markdown(),
            )

            if not submit:
                report.placed.append((suggestion, comment))
                continue

            if self._submit(comment):
                report.placed.append((suggestion, comment))
            else:
                report.failed.append((suggestion, comment))

        logger.info(f"Placement completed. Stats: {report.stats()}")
        return report

    def _submit(self, comment: ReviewComment) -> bool:
        try:
            return self.host.submit_comment(
                file_path=comment.file_path,
                commit_id=comment.commit_id,
                position=comment.position,
                body=comment.body,
            )
        except Exception as e:
            logger.error(f"Failed to submit comment for {comment.file_path}: {e}")
            return False
