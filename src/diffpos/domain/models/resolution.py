"""Resolution model - outcome of locating a pattern in a diff"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from diffpos.domain.models.diff import LineKind


class ResolutionStatus(str, Enum):
    """Outcome of a diff position lookup"""

    FOUND = "found"
    FILE_NOT_IN_DIFF = "file_not_in_diff"
    PATTERN_NOT_MATCHED = "pattern_not_matched"


REASONS = {
    ResolutionStatus.FILE_NOT_IN_DIFF: "could not place suggestion: file not changed in this diff",
    ResolutionStatus.PATTERN_NOT_MATCHED: "pattern not present in diff, suggestion skipped",
}


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a (file, pattern) pair against a diff"""

    status: ResolutionStatus
    target_file: str
    position: Optional[int] = None  # 1-based diff position when found
    content: Optional[str] = None  # Matched line without its marker
    kind: Optional[LineKind] = None  # Context or addition
    new_line: Optional[int] = None  # Line number in the new file, if known

    def __post_init__(self):
        if self.status == ResolutionStatus.FOUND:
            if self.position is None or self.position < 1:
                raise ValueError("A found resolution needs a position >= 1")
        elif self.position is not None:
            raise ValueError("Only a found resolution carries a position")

    @property
    def is_found(self) -> bool:
        return self.status == ResolutionStatus.FOUND

    @property
    def reason(self) -> Optional[str]:
        """User-facing reason for a failed resolution"""
        return REASONS.get(self.status)

    @classmethod
    def found(
        cls,
        target_file: str,
        position: int,
        content: str,
        kind: LineKind,
        new_line: Optional[int] = None,
    ) -> "Resolution":
        return cls(
            status=ResolutionStatus.FOUND,
            target_file=target_file,
            position=position,
            content=content,
            kind=kind,
            new_line=new_line,
        )

    @classmethod
    def not_found(cls, target_file: str, file_seen: bool) -> "Resolution":
        status = ResolutionStatus.PATTERN_NOT_MATCHED if file_seen else ResolutionStatus.FILE_NOT_IN_DIFF
        return cls(status=status, target_file=target_file)
