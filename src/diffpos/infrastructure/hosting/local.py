"""Review host backed by diff files on disk"""

from pathlib import Path
from typing import Any, Dict, Optional

from diffpos.infrastructure.hosting.base import ReviewHost


class LocalReviewHost(ReviewHost):
    """Review host that reads pull request diffs from local files"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize local host
        
        Args:
            config: Optional configuration with:
                - diffs: Dict mapping pull request ids to diff text
                - diff_path: Diff file used for every pull request
                - diff_dir: Directory with ``<pull_request_id>.diff`` files
                - outbox: JSON-lines file receiving submitted comments
        """
        super().__init__(config)
        self.diffs: Dict[str, str] = {str(k): v for k, v in (self.config.get("diffs") or {}).items()}
        self.diff_path = Path(self.config["diff_path"]) if self.config.get("diff_path") else None
        self.diff_dir = Path(self.config["diff_dir"]) if self.config.get("diff_dir") else None

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate local host configuration"""
        diffs = config.get("diffs")
        if diffs is not None and not isinstance(diffs, dict):
            raise ValueError("diffs must be a mapping of pull request id to diff text")

    def fetch_diff(self, pull_request_id: str) -> str:
        """Read the diff for a pull request
        
        Lookup order: in-memory ``diffs``, ``diff_dir/<id>.diff``, ``diff_path``.

        Raises:
            ValueError: If the id would leave ``diff_dir``
            RuntimeError: If no diff is available
        """
        key = str(pull_request_id)
        if key in self.diffs:
            return self.diffs[key]

        if self.diff_dir is not None:
            if "/" in key or "\\" in key or key in ("", ".", ".."):
                raise ValueError(f"Invalid pull request id for diff_dir lookup: {key!r}")
            candidate = self.diff_dir / f"{key}.diff"
            if candidate.exists():
                return candidate.read_text(encoding="utf-8")

        if self.diff_path is not None:
            if not self.diff_path.exists():
                raise RuntimeError(f"Diff file not found: {self.diff_path}")
            return self.diff_path.read_text(encoding="utf-8")

        raise RuntimeError(f"No diff available for pull request {key}")
