"""Resolver configuration model."""

from typing import Literal

from pydantic import BaseModel


class ResolverConfig(BaseModel):
    """Configuration for diff position resolution.

    Attributes:
        numbering: ``cumulative`` keeps counting across hunks of a file,
            ``per_hunk`` restarts at every hunk header
        pattern_mode: Treat patterns as literal text or regular expressions
        file_match: Match target files by path or by substring of the header
        ignore_case: Case-insensitive pattern matching
    """

    numbering: Literal["cumulative", "per_hunk"] = "cumulative"
    pattern_mode: Literal["literal", "regex"] = "literal"
    file_match: Literal["path", "substring"] = "path"
    ignore_case: bool = False
