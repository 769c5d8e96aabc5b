"""Suggestion and review comment models"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Severity(str, Enum):
    """Severity level of a suggestion"""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Suggestion:
    """A note to attach to the first line of a file matching a pattern"""

    file_path: str  # File the suggestion refers to
    pattern: str  # Text (or regex) identifying the line
    body: str  # Comment text (markdown supported)
    severity: Severity = Severity.INFO
    regex: Optional[bool] = None  # None = use configured pattern mode

    def __post_init__(self):
        """Validate suggestion data"""
        if not self.file_path:
            raise ValueError("Suggestion file_path must not be empty")
        if not self.pattern:
            raise ValueError("Suggestion pattern must not be empty")
        if self.regex is not None and not isinstance(self.regex, bool):
            raise ValueError(f"Suggestion regex must be true or false, got {self.regex!r}")
        if not isinstance(self.severity, Severity):
            self.severity = Severity(str(self.severity).lower())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Suggestion":
        """Build a suggestion from a YAML/JSON mapping

        Accepts ``file`` as an alias for ``file_path``.
        """
        return cls(
            file_path=data.get("file_path") or data.get("file") or "",
            pattern=str(data.get("pattern") or ""),
            body=str(data.get("body") or ""),
            severity=data.get("severity") or Severity.INFO,
            regex=data.get("regex"),
        )

    def to_markdown(self) -> str:
        """Format suggestion body as markdown"""
        severity_prefix = f"**[{self.severity.value.upper()}]** " if self.severity != Severity.INFO else ""
        return f"{severity_prefix}{self.body}"


@dataclass(frozen=True)
class ReviewComment:
    """An inline review comment ready for submission"""

    file_path: str
    commit_id: str
    position: int
    body: str

    def __post_init__(self):
        if self.position < 1:
            raise ValueError("Position must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        """Payload shape used by review comment APIs"""
        return {
            "path": self.file_path,
            "commit_id": self.commit_id,
            "position": self.position,
            "body": self.body,
        }
