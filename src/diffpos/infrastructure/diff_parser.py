"""Unified diff scanner and parser

Supports git diffs and plain unified diffs:
diff --git a/file.py b/file.py
--- a/file.py
+++ b/file.py
@@ -start,count +start,count @@
 context line
-old line
+new line
"""

import re
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from diffpos.domain.models.diff import DiffLine, FileDiff, Hunk, LineKind

_HUNK_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? \+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@"
)
_GIT_HEADER_RE = re.compile(r"^diff --git a/(?P<old>.+?) b/(?P<new>.+)$")

# git's C-style quoting for paths with special or non-ASCII bytes
_C_ESCAPES = {"a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92}
_OCTAL_DIGITS = "01234567"

DiffInput = Union[str, Iterable[str]]


def _split_lines(diff: Optional[DiffInput]) -> List[str]:
    if not diff:
        return []
    if isinstance(diff, str):
        # Only "\n" ends a diff line; str.splitlines() would also break on
        # form feeds and unicode separators inside changed lines.
        lines = diff.split("\n")
        if lines[-1] == "":
            lines.pop()
        return [line[:-1] if line.endswith("\r") else line for line in lines]
    return [line.rstrip("\r\n") for line in diff]


def unquote_path(path: str) -> str:
    """Decode a git C-quoted path (``"caf\\303\\251.cs"``); other paths are returned as-is"""
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    body = path[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            octal = body[i + 1:i + 4]
            if len(octal) == 3 and all(c in _OCTAL_DIGITS for c in octal):
                out.append(int(octal, 8) & 0xFF)
                i += 4
                continue
            if body[i + 1] in _C_ESCAPES:
                out.append(_C_ESCAPES[body[i + 1]])
                i += 2
                continue
        out.extend(ch.encode("utf-8"))
        i += 1
    return out.decode("utf-8", errors="replace")


def _clean_path(raw: str) -> Optional[str]:
    """Unquote and strip timestamps and a/ b/ prefixes from a header path"""
    path = unquote_path(raw.split("\t", 1)[0].strip())
    if not path or path == "/dev/null":
        return None
    if path.startswith(("a/", "b/")):
        path = path[2:]
    return path


def _split_quoted_pair(rest: str) -> Optional[Tuple[str, str]]:
    """Split ``"a/x" "b/y"`` (either side may be unquoted) into its two paths"""
    if rest.startswith('"'):
        i = 1
        while i < len(rest):
            if rest[i] == "\\":
                i += 2
                continue
            if rest[i] == '"':
                return rest[:i + 1], rest[i + 1:].strip()
            i += 1
        return None
    idx = rest.rfind(' "')
    if idx == -1:
        return None
    return rest[:idx], rest[idx + 1:]


def parse_git_header(line: str) -> Tuple[Optional[str], Optional[str]]:
    """Extract (old_path, new_path) from a ``diff --git`` line"""
    rest = line[len("diff --git "):]
    if rest.startswith('"') or rest.endswith('"'):
        pair = _split_quoted_pair(rest)
        if pair:
            return _clean_path(pair[0]), _clean_path(pair[1])
    match = _GIT_HEADER_RE.match(line)
    if match:
        return match.group("old"), match.group("new")
    # diff.noprefix style: "diff --git old new"
    parts = rest.split()
    if len(parts) >= 2:
        return _clean_path(parts[0]), _clean_path(parts[-1])
    if parts:
        path = _clean_path(parts[0])
        return path, path
    return None, None


def parse_hunk_header(line: str) -> Optional[Tuple[int, int, int, int]]:
    """Parse ``@@ -a,b +c,d @@`` into (old_start, old_count, new_start, new_count)

    An omitted count means 1. Returns None for a malformed header.
    """
    match = _HUNK_RE.match(line)
    if not match:
        return None
    old_count = match.group("old_count")
    new_count = match.group("new_count")
    return (
        int(match.group("old_start")),
        int(old_count) if old_count is not None else 1,
        int(match.group("new_start")),
        int(new_count) if new_count is not None else 1,
    )


def iter_diff_lines(diff: Optional[DiffInput]) -> Iterator[DiffLine]:
    """Classify every line of a unified diff

    Never raises on malformed input: anything that cannot be placed is
    reported as ``LineKind.OTHER``.
    """
    lines = _split_lines(diff)

    git_header_open = False  # between "diff --git" and its first hunk
    hunk_open = False
    old_remaining: Optional[int] = None
    new_remaining: Optional[int] = None
    old_line: Optional[int] = None
    new_line: Optional[int] = None

    def counts_exhausted() -> bool:
        if old_remaining is None or new_remaining is None:
            return False
        return old_remaining <= 0 and new_remaining <= 0

    def owes_context() -> bool:
        if old_remaining is None or new_remaining is None:
            return False
        return old_remaining > 0 and new_remaining > 0

    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1

        if line.startswith("diff --git "):
            old_path, new_path = parse_git_header(line)
            git_header_open = True
            hunk_open = False
            yield DiffLine(LineKind.FILE_HEADER, line, old_path=old_path, new_path=new_path)
            continue

        if line.startswith("@@"):
            git_header_open = False
            hunk_open = True
            header = parse_hunk_header(line)
            if header:
                old_line, old_remaining, new_line, new_remaining = header
            else:
                old_line = old_remaining = new_line = new_remaining = None
            yield DiffLine(LineKind.HUNK_HEADER, line)
            continue

        # Plain unified diff: a "---" / "+++" pair outside a hunk opens a file
        if (
            not git_header_open
            and (not hunk_open or counts_exhausted())
            and line.startswith("--- ")
            and i < len(lines)
            and lines[i].startswith("+++ ")
        ):
            plus_line = lines[i]
            i += 1
            hunk_open = False
            yield DiffLine(LineKind.OTHER, line)
            yield DiffLine(
                LineKind.FILE_HEADER,
                plus_line,
                old_path=_clean_path(line[4:]),
                new_path=_clean_path(plus_line[4:]),
            )
            continue

        if not hunk_open:
            yield DiffLine(LineKind.OTHER, line)
            continue

        if line.startswith("+"):
            yield DiffLine(LineKind.ADDITION, line, content=line[1:], new_line=new_line)
            if new_line is not None:
                new_line += 1
                new_remaining -= 1
        elif line.startswith("-"):
            yield DiffLine(LineKind.DELETION, line, content=line[1:], old_line=old_line)
            if old_line is not None:
                old_line += 1
                old_remaining -= 1
        elif line.startswith(" ") or (line == "" and owes_context()):
            # An empty line with lines still owed is a context line whose
            # leading space was stripped in transit.
            yield DiffLine(LineKind.CONTEXT, line, content=line[1:], old_line=old_line, new_line=new_line)
            if new_line is not None:
                old_line += 1
                new_line += 1
                old_remaining -= 1
                new_remaining -= 1
        else:
            # "\ No newline at end of file" and stray text
            yield DiffLine(LineKind.OTHER, line)


def parse_unified_diff(diff: Optional[DiffInput]) -> List[FileDiff]:
    """Parse unified diff text into per-file sections

    Args:
        diff: Diff content as string or iterable of lines

    Returns:
        List of FileDiff objects in diff order
    """
    files: List[FileDiff] = []
    current: Optional[FileDiff] = None
    current_hunk: Optional[Hunk] = None

    for line in iter_diff_lines(diff):
        if line.kind == LineKind.FILE_HEADER:
            # git diffs repeat the paths in ---/+++ lines; those are OTHER here
            current = _file_diff_from_header(line)
            current_hunk = None
            files.append(current)
        elif line.kind == LineKind.HUNK_HEADER:
            if current is None:
                # Bare hunks without any file header
                current = FileDiff(path="unknown")
                files.append(current)
            header = parse_hunk_header(line.raw)
            old_start, old_count, new_start, new_count = header or (None, None, None, None)
            current_hunk = Hunk(
                old_start=old_start,
                old_count=old_count,
                new_start=new_start,
                new_count=new_count,
                header=line.raw,
            )
            current.hunks.append(current_hunk)
        elif current_hunk is not None and line.kind in (
            LineKind.CONTEXT,
            LineKind.ADDITION,
            LineKind.DELETION,
        ):
            current_hunk.lines.append(line)
        elif current is not None and not current.hunks:
            _apply_extended_header(current, line.raw)

    return files


def _apply_extended_header(file_diff: FileDiff, raw: str) -> None:
    """Refine status from git extended header lines"""
    if raw.startswith("new file mode"):
        file_diff.status = "added"
        file_diff.old_path = None
    elif raw.startswith("deleted file mode"):
        file_diff.status = "deleted"
    elif raw.startswith("rename from "):
        file_diff.status = "renamed"
        file_diff.old_path = unquote_path(raw[len("rename from "):])


def _file_diff_from_header(line: DiffLine) -> FileDiff:
    old_path, new_path = line.old_path, line.new_path
    path = new_path or old_path or "unknown"

    status = "modified"
    if old_path and not new_path:
        status = "deleted"
    elif new_path and not old_path:
        status = "added"
    elif old_path != new_path:
        status = "renamed"

    return FileDiff(
        path=path,
        old_path=old_path if old_path != new_path else None,
        status=status,
    )
