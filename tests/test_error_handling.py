"""Tests for error types and edge-case inputs."""

from unittest.mock import patch

import pytest

from wincmdlint import (
    ConflictingFixError,
    Fix,
    MalformedInputError,
    WinCmdLintError,
    lint,
    tokenize,
)


class TestErrorTypes:
    """Test the exception hierarchy."""

    def test_common_base_class(self) -> None:
        """Both pipeline errors derive from WinCmdLintError."""
        assert issubclass(MalformedInputError, WinCmdLintError)
        assert issubclass(ConflictingFixError, WinCmdLintError)

    def test_malformed_input_error(self) -> None:
        """The offset is kept and shown in the message."""
        error = MalformedInputError("Unterminated double quote", 3)
        assert error.offset == 3
        assert str(error) == "Unterminated double quote (offset 3)"

    def test_conflicting_fix_error(self) -> None:
        """Both fixes and the original command are kept."""
        first = Fix(0, 4, "a")
        second = Fix(2, 6, "b")
        error = ConflictingFixError("abcdefg", first, second)
        assert error.original == "abcdefg"
        assert error.first is first
        assert error.second is second
        assert "0-4" in str(error)
        assert "2-6" in str(error)


class TestMalformedInput:
    """Malformed input aborts the whole pass."""

    @pytest.mark.parametrize(
        "command,offset",
        [
            (r'cd "C:\Repo && git status', 3),
            ("echo 'abc", 5),
            ("git status &&", 13),
            ("| findstr x", 0),
            ("make >", 5),
        ],
    )
    def test_offsets(self, command: str, offset: int) -> None:
        """The error points at the offending character."""
        with pytest.raises(MalformedInputError) as error_info:
            lint(command)
        assert error_info.value.offset == offset

    def test_no_rules_run_on_malformed_input(self) -> None:
        """Rules never see a partial segment list."""
        with patch("wincmdlint.evaluate") as mock_evaluate:
            with pytest.raises(MalformedInputError):
                lint('cd C:\\Repo && echo "unterminated')
        mock_evaluate.assert_not_called()


class TestEdgeCaseInputs:
    """Inputs that are unusual but well-formed."""

    def test_unicode_command(self) -> None:
        """Non-ASCII text is tokenized by character offsets."""
        command = r'cd "C:\Users\Zoë\Документы" && echo ✓ >/dev/null'
        result = lint(command)
        assert [d.rule.code for d in result.diagnostics] == ["W002"]
        assert result.rewritten == r'cd "C:\Users\Zoë\Документы" && echo ✓ >nul'

    def test_very_long_command(self) -> None:
        """Long pipelines are handled in one pass."""
        command = " | ".join(["sort"] * 500)
        segments = tokenize(command)
        assert len(segments) == 500
        assert lint(command).diagnostics == []

    def test_whitespace_only(self) -> None:
        """A blank command has no segments and no diagnostics."""
        result = lint("   ")
        assert result.segments == []
        assert result.diagnostics == []
        assert result.rewritten is None

    def test_trailing_semicolon(self) -> None:
        """A trailing ';' is not a missing command."""
        assert len(tokenize("git status;")) == 1
