"""Tests for diff position resolution"""

import re

import pytest

from diffpos.domain.config.resolver import ResolverConfig
from diffpos.domain.models.diff import LineKind
from diffpos.domain.models.resolution import ResolutionStatus
from diffpos.domain.resolvers.position_resolver import DiffPositionResolver

SINGLE_HUNK = "\n".join(
    [
        "diff --git a/f.cs b/f.cs",
        "@@ -0,0 +1,3 @@",
        "+line1",
        "+line2",
        "+line3",
    ]
)

TWO_HUNKS = "\n".join(
    [
        "diff --git a/f.cs b/f.cs",
        "@@ -0,0 +1,2 @@",
        "+first",
        "+second",
        "@@ -10,1 +12,2 @@",
        " context",
        "+target",
    ]
)

TWO_FILES = "\n".join(
    [
        "diff --git a/a.cs b/a.cs",
        "index 1111111..2222222 100644",
        "--- a/a.cs",
        "+++ b/a.cs",
        "@@ -1,1 +1,2 @@",
        " a1",
        "+needle in a",
        "diff --git a/b.cs b/b.cs",
        "index 3333333..4444444 100644",
        "--- a/b.cs",
        "+++ b/b.cs",
        "@@ -1,1 +1,2 @@",
        " b1",
        "+b2",
    ]
)


@pytest.fixture
def resolver():
    return DiffPositionResolver()


@pytest.fixture
def per_hunk_resolver():
    return DiffPositionResolver(numbering="per_hunk")


def _synthetic_diff(position: int) -> str:
    """Diff where MARKER sits at the given position, with deletions mixed in"""
    body = []
    old = new = 0
    for i in range(1, position):
        if i % 3 == 0:
            body.append(f" context {i}")
            old += 1
            new += 1
        else:
            body.append(f"+added {i}")
            new += 1
        if i % 4 == 0:
            body.append(f"-removed {i}")
            old += 1
    body.append("+MARKER")
    body.append(" trailing")
    new += 2
    old += 1
    return "\n".join(["diff --git a/f.cs b/f.cs", f"@@ -1,{old} +1,{new} @@"] + body)


class TestReferenceScenarios:
    """Scenarios taken from the documented review workflow"""

    def test_added_line_in_single_hunk(self, resolver):
        """Scenario A: second added line is position 2"""
        result = resolver.resolve(SINGLE_HUNK, "f.cs", "line2")

        assert result.status == ResolutionStatus.FOUND
        assert result.position == 2
        assert result.content == "line2"
        assert result.kind == LineKind.ADDITION
        assert result.new_line == 2

    def test_pattern_absent(self, resolver):
        """Scenario B: pattern not in the file's hunks"""
        result = resolver.resolve(SINGLE_HUNK, "f.cs", "line4")

        assert result.status == ResolutionStatus.PATTERN_NOT_MATCHED
        assert result.position is None
        assert not result.is_found

    def test_second_hunk_per_hunk_numbering(self, per_hunk_resolver):
        """Scenario C (per_hunk): counter restarts at the second hunk header"""
        result = per_hunk_resolver.resolve(TWO_HUNKS, "f.cs", "target")
        assert result.position == 2

    def test_second_hunk_cumulative_numbering(self, resolver):
        """Scenario C (cumulative): counter keeps running across hunks"""
        result = resolver.resolve(TWO_HUNKS, "f.cs", "target")
        assert result.position == 4
        assert result.new_line == 13

    def test_file_absent(self, resolver):
        """Scenario D: target file never appears"""
        result = resolver.resolve(SINGLE_HUNK, "g.cs", "line2")

        assert result.status == ResolutionStatus.FILE_NOT_IN_DIFF
        assert result.reason == "could not place suggestion: file not changed in this diff"


class TestCounting:
    """Tests for the position counter"""

    @pytest.mark.parametrize("n", [1, 2, 3])
    def test_nth_added_line_is_position_n(self, resolver, n):
        """Only additions: Nth added line has position N"""
        assert resolver.resolve(SINGLE_HUNK, "f.cs", f"line{n}").position == n

    def test_deletions_do_not_advance_position(self, resolver):
        """Deleted lines are skipped by the counter"""
        diff = "\n".join(
            [
                "diff --git a/f.cs b/f.cs",
                "--- a/f.cs",
                "+++ b/f.cs",
                "@@ -1,3 +1,2 @@",
                "-gone1",
                "-gone2",
                " keep",
                "+added",
            ]
        )
        assert resolver.resolve(diff, "f.cs", "keep").position == 1
        assert resolver.resolve(diff, "f.cs", "added").position == 2

    def test_deleted_lines_never_match(self, resolver):
        """A pattern present only on a deleted line is not found"""
        diff = "diff --git a/f.cs b/f.cs\n@@ -1,2 +1,1 @@\n-old value\n new value\n"
        result = resolver.resolve(diff, "f.cs", "old value")
        assert result.status == ResolutionStatus.PATTERN_NOT_MATCHED

    def test_context_lines_can_match(self, resolver):
        """Context lines are counted and matchable"""
        diff = "diff --git a/f.cs b/f.cs\n@@ -1,2 +1,3 @@\n a\n+b\n c\n"
        result = resolver.resolve(diff, "f.cs", "c")
        assert result.position == 3
        assert result.kind == LineKind.CONTEXT

    def test_first_match_wins(self, resolver):
        """Several matching lines: the earliest in file order is returned"""
        diff = "diff --git a/f.cs b/f.cs\n@@ -0,0 +1,3 @@\n+foo()\n+bar()\n+foo()\n"
        assert resolver.resolve(diff, "f.cs", "foo").position == 1

    def test_git_header_lines_are_not_counted(self, resolver):
        """index / mode / ---/+++ lines before the first hunk never count"""
        diff = "\n".join(
            [
                "diff --git a/f.cs b/f.cs",
                "new file mode 100644",
                "index 0000000..e69de29",
                "--- /dev/null",
                "+++ b/f.cs",
                "@@ -0,0 +1,1 @@",
                "+hello",
            ]
        )
        assert resolver.resolve(diff, "f.cs", "hello").position == 1
        assert resolver.resolve(diff, "f.cs", "b/f.cs").status == ResolutionStatus.PATTERN_NOT_MATCHED

    def test_no_newline_marker_is_ignored(self, resolver):
        """The backslash marker line does not advance the position"""
        diff = "\n".join(
            [
                "diff --git a/f.cs b/f.cs",
                "@@ -1,1 +1,2 @@",
                " keep",
                "\\ No newline at end of file",
                "+new",
            ]
        )
        assert resolver.resolve(diff, "f.cs", "new").position == 2

    def test_stripped_empty_context_line_counts(self, resolver):
        """An empty line inside a hunk with lines still owed is context"""
        diff = "diff --git a/f.py b/f.py\n@@ -1,3 +1,3 @@\n a\n\n-b\n+c\n"
        assert resolver.resolve(diff, "f.py", "c").position == 3

    def test_header_lookalikes_inside_hunk_are_content(self, resolver):
        """'--- x' / '+++ y' inside an open hunk are a deletion and an addition"""
        diff = "\n".join(
            [
                "diff --git a/f.sql b/f.sql",
                "@@ -1,1 +1,1 @@",
                "--- comment",
                "+++ counter",
            ]
        )
        result = resolver.resolve(diff, "f.sql", "++ counter")
        assert result.position == 1
        assert result.kind == LineKind.ADDITION

    @pytest.mark.parametrize("position", range(1, 51))
    def test_synthetic_marker_position(self, resolver, position):
        """Marker placed at position P resolves to P"""
        assert resolver.resolve(_synthetic_diff(position), "f.cs", "MARKER").position == position


class TestFileScoping:
    """Tests for per-file tracking"""

    def test_target_in_second_file(self, resolver):
        """Counter starts at zero in the target file's own section"""
        assert resolver.resolve(TWO_FILES, "b.cs", "b2").position == 2

    def test_pattern_only_in_other_file(self, resolver):
        """Lines of another file never produce a position"""
        assert resolver.resolve(TWO_FILES, "b.cs", "needle").status == ResolutionStatus.PATTERN_NOT_MATCHED
        assert resolver.resolve(TWO_FILES, "c.cs", "needle").status == ResolutionStatus.FILE_NOT_IN_DIFF

    def test_tracking_stops_at_next_file(self, resolver):
        """Leaving the target section stops the scan for that file"""
        assert resolver.resolve(TWO_FILES, "a.cs", "b2").status == ResolutionStatus.PATTERN_NOT_MATCHED

    def test_path_suffix_matches_on_directory_boundary(self, resolver):
        """app/f.cs matches src/app/f.cs but pp/f.cs does not"""
        diff = "diff --git a/src/app/f.cs b/src/app/f.cs\n@@ -0,0 +1,1 @@\n+x = 1\n"
        assert resolver.resolve(diff, "app/f.cs", "x = 1").position == 1
        assert resolver.resolve(diff, "src/app/f.cs", "x = 1").position == 1
        assert resolver.resolve(diff, "pp/f.cs", "x = 1").status == ResolutionStatus.FILE_NOT_IN_DIFF

    def test_substring_file_match(self):
        """Substring mode matches any part of the file header"""
        diff = "diff --git a/src/app/f.cs b/src/app/f.cs\n@@ -0,0 +1,1 @@\n+x = 1\n"
        resolver = DiffPositionResolver(file_match="substring")
        assert resolver.resolve(diff, "pp/f", "x = 1").position == 1

    def test_renamed_file_matches_old_and_new_path(self, resolver):
        """Either side of a rename identifies the section"""
        diff = "diff --git a/old.py b/new.py\nrename from old.py\nrename to new.py\n@@ -1,1 +1,1 @@\n-x\n+y\n"
        assert resolver.resolve(diff, "new.py", "y").position == 1
        assert resolver.resolve(diff, "old.py", "y").position == 1

    def test_plain_unified_diff_headers(self, resolver):
        """---/+++ pairs open file sections when there is no git header"""
        diff = "\n".join(
            [
                "--- a/a.cs",
                "+++ b/a.cs",
                "@@ -1 +1 @@",
                "-x",
                "+y",
                "--- a/b.cs",
                "+++ b/b.cs",
                "@@ -1 +1,2 @@",
                " z",
                "+w",
            ]
        )
        assert resolver.resolve(diff, "a.cs", "y").position == 1
        assert resolver.resolve(diff, "b.cs", "w").position == 2
        assert resolver.resolve(diff, "a.cs", "w").status == ResolutionStatus.PATTERN_NOT_MATCHED


class TestPatterns:
    """Tests for pattern matching options"""

    def test_regex_override(self, resolver):
        """regex=True treats the pattern as a regular expression"""
        assert resolver.resolve(SINGLE_HUNK, "f.cs", r"line[3-9]", regex=True).position == 3

    def test_literal_mode_does_not_interpret_regex(self, resolver):
        """Literal patterns with regex metacharacters match verbatim"""
        diff = "diff --git a/f.cs b/f.cs\n@@ -0,0 +1,2 @@\n+a.b\n+a(b)\n"
        assert resolver.resolve(diff, "f.cs", "a(b)").position == 2

    def test_regex_mode_from_config(self):
        """pattern_mode=regex applies to every call"""
        resolver = DiffPositionResolver.from_config(ResolverConfig(pattern_mode="regex"))
        assert resolver.resolve(SINGLE_HUNK, "f.cs", r"^line2$").position == 2

    def test_compiled_pattern(self, resolver):
        """Compiled patterns are used as-is"""
        assert resolver.resolve(SINGLE_HUNK, "f.cs", re.compile(r"\d$")).position == 1

    def test_ignore_case(self):
        """Case-insensitive literal matching"""
        resolver = DiffPositionResolver(ignore_case=True)
        assert resolver.resolve(SINGLE_HUNK, "f.cs", "LINE3").position == 3

    def test_empty_pattern_rejected(self, resolver):
        """An empty pattern is a caller error"""
        with pytest.raises(ValueError, match="pattern"):
            resolver.resolve(SINGLE_HUNK, "f.cs", "")

    def test_empty_target_rejected(self, resolver):
        """An empty target file is a caller error"""
        with pytest.raises(ValueError, match="target_file"):
            resolver.resolve(SINGLE_HUNK, "", "line1")

    def test_invalid_regex_rejected(self, resolver):
        """Invalid regular expressions raise ValueError"""
        with pytest.raises(ValueError, match="Invalid regular expression"):
            resolver.resolve(SINGLE_HUNK, "f.cs", "(", regex=True)


class TestRobustness:
    """Malformed input degrades to not-found results"""

    @pytest.mark.parametrize("diff", [None, "", "garbage\nmore garbage", "+line2\n line2"])
    def test_malformed_diff_is_file_not_in_diff(self, resolver, diff):
        """No file header at all: file not in diff"""
        assert resolver.resolve(diff, "f.cs", "line2").status == ResolutionStatus.FILE_NOT_IN_DIFF

    def test_truncated_diff_is_pattern_not_matched(self, resolver):
        """Header without hunks: pattern not matched"""
        assert resolver.resolve("diff --git a/f.cs b/f.cs\n", "f.cs", "x").status == ResolutionStatus.PATTERN_NOT_MATCHED

    def test_malformed_hunk_header_still_counts(self, resolver):
        """Unparseable hunk headers still open a hunk"""
        diff = "diff --git a/f.cs b/f.cs\n@@ bad header @@\n+one\n+two\n"
        result = resolver.resolve(diff, "f.cs", "two")
        assert result.position == 2
        assert result.new_line is None

    def test_accepts_iterable_of_lines(self, resolver):
        """Diff may be given as lines with trailing newlines"""
        lines = [line + "\n" for line in SINGLE_HUNK.split("\n")]
        assert resolver.resolve(lines, "f.cs", "line3").position == 3

    @pytest.mark.parametrize("separator", ["\x0c", "\x0b", "\x1c", "\x85", "\u2028", "\u2029"])
    def test_line_separators_inside_content_do_not_split_lines(self, resolver, separator):
        """Only newlines end a diff line; form feeds and unicode separators are content"""
        diff = f"diff --git a/f.cs b/f.cs\n@@ -0,0 +1,2 @@\n+a = 1{separator} +b\n+target\n"
        result = resolver.resolve(diff, "f.cs", "target")
        assert result.position == 2
        assert result.new_line == 2

    def test_unicode_separator_line_is_matched_whole(self, resolver):
        """A unicode line separator stays part of the matched line"""
        diff = "diff --git a/f.py b/f.py\n@@ -0,0 +1,1 @@\n+s = 'x\u2028 y'\n"
        result = resolver.resolve(diff, "f.py", "y'")
        assert result.position == 1
        assert result.content == "s = 'x\u2028 y'"

    def test_crlf_line_endings(self, resolver):
        """Windows line endings are stripped"""
        diff = "diff --git a/f.cs b/f.cs\r\n@@ -0,0 +1,2 @@\r\n+one\r\n+two\r\n"
        result = resolver.resolve(diff, "f.cs", "two")
        assert result.position == 2
        assert result.content == "two"

    def test_git_quoted_non_ascii_path(self, resolver):
        """Octal-escaped paths from git match the decoded file name"""
        diff = "\n".join(
            [
                'diff --git "a/caf\\303\\251.cs" "b/caf\\303\\251.cs"',
                "index 1111111..2222222 100644",
                '--- "a/caf\\303\\251.cs"',
                '+++ "b/caf\\303\\251.cs"',
                "@@ -0,0 +1,1 @@",
                "+bonjour",
            ]
        )
        result = resolver.resolve(diff, "café.cs", "bonjour")
        assert result.status == ResolutionStatus.FOUND
        assert result.position == 1

    def test_quoted_plain_diff_path(self, resolver):
        """Quoted ---/+++ paths are decoded in plain diffs too"""
        diff = '--- "a/caf\\303\\251.cs"\n+++ "b/caf\\303\\251.cs"\n@@ -1,1 +1,1 @@\n-old\n+new\n'
        assert resolver.resolve(diff, "café.cs", "new").position == 1

    def test_idempotent(self, resolver):
        """Resolving twice gives the same result"""
        assert resolver.resolve(TWO_HUNKS, "f.cs", "target") == resolver.resolve(TWO_HUNKS, "f.cs", "target")

    def test_unknown_numbering_rejected(self):
        """Unknown option values fail at construction"""
        with pytest.raises(ValueError, match="numbering"):
            DiffPositionResolver(numbering="github")


class TestMapPositions:
    """Tests for new-line to position mapping"""

    def test_single_hunk_maps_context_and_additions(self, resolver):
        """Context and added lines are mapped, deletions are not"""
        diff = "\n".join(
            [
                "diff --git a/x b/x",
                "@@ -1,3 +1,4 @@",
                " line1",
                "-line2",
                "+line2b",
                " line3",
                "+line4",
            ]
        )
        assert resolver.map_positions(diff, "x") == {1: 1, 2: 2, 3: 3, 4: 4}

    def test_multiple_hunks(self, resolver, per_hunk_resolver):
        """Second hunk follows the numbering mode"""
        diff = "diff --git a/x b/x\n@@ -1,1 +1,2 @@\n a\n+b\n@@ -10,1 +20,1 @@\n c\n"
        assert resolver.map_positions(diff, "x") == {1: 1, 2: 2, 20: 3}
        assert per_hunk_resolver.map_positions(diff, "x") == {1: 1, 2: 2, 20: 1}

    def test_file_not_in_diff_maps_nothing(self, resolver):
        """Unknown file yields an empty mapping"""
        assert resolver.map_positions(SINGLE_HUNK, "g.cs") == {}
