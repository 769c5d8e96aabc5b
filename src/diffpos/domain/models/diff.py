"""Diff models - lines, hunks and per-file sections of a unified diff"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class LineKind(str, Enum):
    """Kind of a single unified diff line"""

    FILE_HEADER = "file_header"
    HUNK_HEADER = "hunk_header"
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"
    OTHER = "other"


@dataclass(frozen=True)
class DiffLine:
    """One classified line of a unified diff"""

    kind: LineKind
    raw: str  # Line as it appears in the diff
    content: str = ""  # Line text without the +/-/space marker
    old_path: Optional[str] = None  # Set on file headers
    new_path: Optional[str] = None  # Set on file headers
    old_line: Optional[int] = None  # Line number in old file (context/deletion)
    new_line: Optional[int] = None  # Line number in new file (context/addition)

    @property
    def is_counted(self) -> bool:
        """Whether this line advances the diff position counter"""
        return self.kind in (LineKind.CONTEXT, LineKind.ADDITION)

    @property
    def paths(self) -> List[str]:
        """Paths referenced by a file header (empty for other kinds)"""
        return [p for p in (self.old_path, self.new_path) if p]


@dataclass
class Hunk:
    """Represents a hunk (block of changes) in a file"""

    old_start: Optional[int]  # Starting line number in old file
    old_count: Optional[int]  # Number of lines in old file
    new_start: Optional[int]  # Starting line number in new file
    new_count: Optional[int]  # Number of lines in new file
    header: str = ""
    lines: List[DiffLine] = field(default_factory=list)

    @property
    def additions(self) -> int:
        return sum(1 for line in self.lines if line.kind == LineKind.ADDITION)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.kind == LineKind.DELETION)


@dataclass
class FileDiff:
    """Represents the diff section of a single file"""

    path: str  # File path (new side, or old side for deleted files)
    old_path: Optional[str] = None  # Old path (None when unchanged)
    status: str = "modified"  # modified, added, deleted, renamed
    hunks: List[Hunk] = field(default_factory=list)

    @property
    def total_lines_changed(self) -> int:
        """Calculate total number of added and deleted lines"""
        return sum(hunk.additions + hunk.deletions for hunk in self.hunks)

    def matches(self, target_file: str) -> bool:
        """Check whether this section belongs to target_file"""
        return path_matches(target_file, [self.path, self.old_path])


def path_matches(target_file: str, paths: List[Optional[str]]) -> bool:
    """Check a target path against header paths

    A header path matches when it equals the target or ends with it on a
    directory boundary (``src/app/f.cs`` matches ``app/f.cs`` but not
    ``pp/f.cs``).
    """
    target = target_file.replace("\\", "/").lstrip("/")
    for path in paths:
        if not path:
            continue
        if path == target or path.endswith("/" + target):
            return True
    return False
