"""Review host configuration model."""

from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class HostConfig(BaseModel):
    """Configuration for the review host that supplies diffs and takes comments.

    Attributes:
        type: Host implementation (local files or diffs over HTTP)
        diff_path: Single diff file used for every pull request (local)
        diff_dir: Directory holding ``<pull_request_id>.diff`` files (local)
        diff_url_template: URL with a ``{pull_request_id}`` placeholder (url)
        timeout: HTTP timeout in seconds
        outbox: JSON-lines file receiving submitted comments
    """

    type: Literal["local", "url"] = "local"
    diff_path: Optional[str] = None
    diff_dir: Optional[str] = None
    diff_url_template: Optional[str] = None
    timeout: float = Field(30.0, gt=0.0, le=600.0)
    outbox: Optional[str] = None

    @model_validator(mode="after")
    def _check_url_template(self) -> "HostConfig":
        if self.diff_url_template and "{pull_request_id}" not in self.diff_url_template:
            raise ValueError("diff_url_template must contain '{pull_request_id}'")
        return self
