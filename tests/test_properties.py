"""Property-based tests for the lint pipeline."""

from typing import List

from hypothesis import given
from hypothesis import strategies as st

from wincmdlint import (
    DIRECTORY_CHANGE_COMMANDS,
    FILTER_COMMANDS,
    POWERSHELL_EXECUTABLES,
    Dialect,
    RuleSeverity,
    SegmentKind,
    lint,
    tokenize,
    top_level_segments,
)

_RESERVED_WORDS = (
    FILTER_COMMANDS[Dialect.BASH]
    | FILTER_COMMANDS[Dialect.POWERSHELL]
    | POWERSHELL_EXECUTABLES
    | DIRECTORY_CHANGE_COMMANDS
)

windows_paths = st.from_regex(
    r"[A-Z]:\\[A-Za-z0-9_.-]{1,12}(\\[A-Za-z0-9_.-]{1,12}){0,3}", fullmatch=True
)
windows_paths_with_spaces = st.from_regex(
    r"[A-Z]:\\[A-Za-z0-9_. -]{1,12}(\\[A-Za-z0-9_. -]{1,12}){0,3}", fullmatch=True
)
command_words = st.from_regex(r"[a-z][a-z0-9]{0,8}", fullmatch=True).filter(
    lambda word: word not in _RESERVED_WORDS
)
arguments = st.lists(st.from_regex(r"[a-z0-9][a-z0-9=.-]{0,8}", fullmatch=True), max_size=3)


@st.composite
def stages(draw: st.DrawFn) -> str:
    """A simple command stage: a command word and a few arguments."""
    return " ".join([draw(command_words)] + draw(arguments))


@st.composite
def warning_only_commands(draw: st.DrawFn) -> str:
    """Commands whose only findings are auto-fixable warnings."""
    path = draw(windows_paths)
    stage = draw(stages())
    redirect = draw(st.sampled_from([" >/dev/null", " 2>/dev/null", " >/dev/null 2>&1", ""]))
    return f"cd {path} && {stage}{redirect}"


class TestLintProperties:
    """Invariants that hold for generated command lines."""

    @given(path=windows_paths_with_spaces, stage=stages())
    def test_quoted_path_never_warns(self, path: str, stage: str) -> None:
        """A properly double-quoted path never triggers the quoting warning."""
        result = lint(f'cd "{path}" && {stage}')
        assert all(d.rule.code != "W001" for d in result.diagnostics)

    @given(
        path=windows_paths_with_spaces,
        pipeline=st.lists(stages(), min_size=1, max_size=3),
        pattern=st.from_regex(r"[A-Za-z0-9]{1,6}", fullmatch=True),
    )
    def test_pipe_to_findstr_after_cd(self, path: str, pipeline: List[str], pattern: str) -> None:
        """Exactly one error, on the findstr stage."""
        command = f'cd "{path}" && {" | ".join(pipeline)} | findstr "{pattern}"'
        result = lint(command)
        errors = [d for d in result.diagnostics if d.severity == RuleSeverity.ERROR]
        assert len(errors) == 1
        pipe_segment = top_level_segments(result.segments)[-1]
        assert errors[0].segment is pipe_segment
        assert pipe_segment.kind == SegmentKind.PIPED_STAGE

    @given(stage=stages(), stderr=st.booleans())
    def test_dev_null_replaced(self, stage: str, stderr: bool) -> None:
        """>/dev/null becomes >nul and re-linting finds no redirection warning."""
        command = f"{stage} >/dev/null" + (" 2>&1" if stderr else "")
        result = lint(command)
        assert result.rewritten is not None
        assert ">nul" in result.rewritten
        assert "/dev/null" not in result.rewritten
        relinted = lint(result.rewritten)
        assert all(d.rule.code != "W002" for d in relinted.diagnostics)

    @given(command=warning_only_commands())
    def test_rewrite_is_idempotent(self, command: str) -> None:
        """Re-linting a rewrite finds none of the warnings that were fixed."""
        result = lint(command)
        assert not result.has_errors
        fixed_rules = {d.rule.code for d in result.diagnostics if d.fix is not None}
        assert fixed_rules
        assert result.rewritten is not None
        relinted = lint(result.rewritten)
        assert not {d.rule.code for d in relinted.diagnostics} & fixed_rules

    @given(command=warning_only_commands())
    def test_rewrite_keeps_segment_structure(self, command: str) -> None:
        """Fixes never add or remove compound operators."""
        result = lint(command)
        assert result.rewritten is not None
        original = top_level_segments(tokenize(command))
        rewritten = top_level_segments(tokenize(result.rewritten))
        assert len(original) == len(rewritten)
        assert [s.operator for s in original] == [s.operator for s in rewritten]
