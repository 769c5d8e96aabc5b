"""Diff position resolver

Maps a (file, pattern) pair to the 1-based position used by pull request
review APIs to anchor an inline comment. The position counts the context and
addition lines of the file's section of the diff; deletion lines do not count.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Callable, Dict, Iterator, Optional, Tuple, Union

from diffpos.domain.config.resolver import ResolverConfig
from diffpos.domain.models.diff import DiffLine, LineKind, path_matches
from diffpos.domain.models.resolution import Resolution
from diffpos.infrastructure.diff_parser import DiffInput, iter_diff_lines

logger = logging.getLogger(__name__)

NUMBERING_MODES = ("cumulative", "per_hunk")
FILE_MATCH_MODES = ("path", "substring")


class _State(Enum):
    SEARCHING_FILE = "searching_file"
    IN_FILE = "in_file"


class _Scan:
    """State of a single pass over a diff for one target file"""

    def __init__(self, target_file: str, file_match: str, per_hunk: bool):
        self.target_file = target_file
        self.file_match = file_match
        self.per_hunk = per_hunk
        self.state = _State.SEARCHING_FILE
        self.position = 0
        self.file_seen = False

    def references_target(self, header: DiffLine) -> bool:
        if self.file_match == "substring":
            return self.target_file in header.raw or any(self.target_file in p for p in header.paths)
        return path_matches(self.target_file, header.paths)

    def counted_lines(self, diff: Optional[DiffInput]) -> Iterator[Tuple[int, DiffLine]]:
        """Yield (position, line) for each context/addition line of the target file"""
        for line in iter_diff_lines(diff):
            if line.kind == LineKind.FILE_HEADER:
                if self.references_target(line):
                    self.state = _State.IN_FILE
                    self.position = 0
                    self.file_seen = True
                elif self.state == _State.IN_FILE:
                    self.state = _State.SEARCHING_FILE
                continue

            if self.state != _State.IN_FILE:
                continue

            if line.kind == LineKind.HUNK_HEADER:
                if self.per_hunk:
                    self.position = 0
                continue

            if line.is_counted:
                self.position += 1
                yield self.position, line


class DiffPositionResolver:
    """Locate the first line matching a pattern in one file of a diff"""

    def __init__(
        self,
        numbering: str = "cumulative",
        pattern_mode: str = "literal",
        file_match: str = "path",
        ignore_case: bool = False,
    ):
        """Initialize resolver

        Args:
            numbering: "cumulative" (count across all hunks of the file) or
                "per_hunk" (restart the count at every hunk header)
            pattern_mode: "literal" substring match or "regex" search
            file_match: "path" (exact path or directory-boundary suffix) or
                "substring" (target appears anywhere in the file header)
            ignore_case: Match patterns case-insensitively

        Raises:
            ValueError: If an option value is not supported
        """
        if numbering not in NUMBERING_MODES:
            raise ValueError(f"Unknown numbering mode: {numbering}. Available: {', '.join(NUMBERING_MODES)}")
        if pattern_mode not in ("literal", "regex"):
            raise ValueError(f"Unknown pattern mode: {pattern_mode}. Available: literal, regex")
        if file_match not in FILE_MATCH_MODES:
            raise ValueError(f"Unknown file match mode: {file_match}. Available: {', '.join(FILE_MATCH_MODES)}")
        self.numbering = numbering
        self.pattern_mode = pattern_mode
        self.file_match = file_match
        self.ignore_case = ignore_case

    @classmethod
    def from_config(cls, config: ResolverConfig) -> "DiffPositionResolver":
        return cls(
            numbering=config.numbering,
            pattern_mode=config.pattern_mode,
            file_match=config.file_match,
            ignore_case=config.ignore_case,
        )

    def resolve(
        self,
        diff: Optional[DiffInput],
        target_file: str,
        pattern: Union[str, re.Pattern[str]],
        regex: Optional[bool] = None,
    ) -> Resolution:
        """Resolve the diff position of the first line matching pattern

        Args:
            diff: Unified diff text (or its lines) for the pull request
            target_file: Path of the file to search
            pattern: Text or regular expression matched against the line
                content without its +/space marker; compiled patterns are
                used as-is
            regex: Override the configured pattern mode for this call

        Returns:
            Resolution with status FOUND and the position, or FILE_NOT_IN_DIFF /
            PATTERN_NOT_MATCHED

        Raises:
            ValueError: If target_file or pattern is empty, or pattern is not a
                valid regular expression
        """
        if not target_file:
            raise ValueError("target_file must not be empty")
        matcher = self._compile_matcher(pattern, regex)

        scan = self._new_scan(target_file)
        for position, line in scan.counted_lines(diff):
            if matcher(line.content):
                logger.debug(f"Matched {target_file} at position {position}: {line.raw!r}")
                return Resolution.found(
                    target_file=target_file,
                    position=position,
                    content=line.content,
                    kind=line.kind,
                    new_line=line.new_line,
                )

        resolution = Resolution.not_found(target_file, file_seen=scan.file_seen)
        logger.debug(f"No position for {target_file}: {resolution.status.value}")
        return resolution

    def map_positions(self, diff: Optional[DiffInput], target_file: str) -> Dict[int, int]:
        """Return map: new-file line number -> diff position

        Only lines present in the diff (context or additions) are mapped, and
        only when their hunk header carries line numbers. If the file appears
        in several sections, the last section wins.
        """
        if not target_file:
            raise ValueError("target_file must not be empty")
        mapping: Dict[int, int] = {}
        for position, line in self._new_scan(target_file).counted_lines(diff):
            if line.new_line is not None:
                mapping[line.new_line] = position
        return mapping

    def _new_scan(self, target_file: str) -> _Scan:
        return _Scan(target_file, self.file_match, per_hunk=self.numbering == "per_hunk")

    def _compile_matcher(
        self, pattern: Union[str, re.Pattern[str]], regex: Optional[bool]
    ) -> Callable[[str], bool]:
        if isinstance(pattern, re.Pattern):
            return lambda text: pattern.search(text) is not None

        if not pattern:
            raise ValueError("pattern must not be empty")

        use_regex = self.pattern_mode == "regex" if regex is None else regex
        if use_regex:
            flags = re.IGNORECASE if self.ignore_case else 0
            try:
                compiled = re.compile(pattern, flags)
            except re.error as e:
                raise ValueError(f"Invalid regular expression {pattern!r}: {e}") from e
            return lambda text: compiled.search(text) is not None

        if self.ignore_case:
            needle = pattern.casefold()
            return lambda text: needle in text.casefold()
        return lambda text: pattern in text
