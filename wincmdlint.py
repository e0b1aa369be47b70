"""wincmdlint - A command safety linter and rewriter for Windows-hosted shells.

This module analyses shell command lines that will be executed on Windows, either
through a bash-like shell (Git Bash, MSYS) or through PowerShell, and reports
command shapes that are known to break there. Where a safe correction exists the
linter also produces a rewritten command.

Features:
- Quote-aware tokenizer that splits a command line into pipeline stages,
  compound joins, directory changes and redirections
- Read-only catalog of rules, each with a dialect predicate
- Deterministic diagnostic ordering (source order, errors before warnings)
- Span-based rewriter that refuses to guess when fixes overlap
- Thread-safe operations: no state survives a lint pass
- The linter never executes the command it analyses

Usage:
    import wincmdlint
    result = wincmdlint.lint(r"cd C:\\Repo && git status")
    print(result.rewritten)

Version: 1.0.0
License: CRL
"""

# pylint: disable=too-many-lines

from collections import defaultdict
import configparser
from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations
import logging
from pathlib import Path
import re
import sys
from types import MappingProxyType
from typing import (
    Callable,
    DefaultDict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    Union,
)
import warnings

import chardet

__version__ = "1.0.0"
__license__ = "CRL"

# Configure module-level logging
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

DEFAULT_CONFIG_FILE = "wincmdlint.ini"


class WinCmdLintError(Exception):
    """Base class for errors raised by wincmdlint."""


class MalformedInputError(WinCmdLintError):
    """Raised when a command line cannot be tokenized (unbalanced quotes, dangling escapes)."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (offset {offset})")
        self.offset = offset


class ConflictingFixError(WinCmdLintError):
    """Raised when two fixes would rewrite overlapping text.

    The unpatched command is kept on the exception so callers can still show
    the raw diagnostics.
    """

    def __init__(self, original: str, first: "Fix", second: "Fix") -> None:
        super().__init__(
            f"Fix at {first.start}-{first.end} ({first.replacement!r}) overlaps "
            f"fix at {second.start}-{second.end} ({second.replacement!r})"
        )
        self.original = original
        self.first = first
        self.second = second


class RuleSeverity(Enum):
    """Rule severity levels."""

    ERROR = "Error"
    WARNING = "Warning"


# Higher values are more severe
SEVERITY_RANK: Mapping[RuleSeverity, int] = MappingProxyType(
    {
        RuleSeverity.WARNING: 1,
        RuleSeverity.ERROR: 2,
    }
)


class Dialect(Enum):
    """Shell grammar a command is interpreted under."""

    BASH = "bash"
    POWERSHELL = "powershell"


class SegmentKind(Enum):
    """Structural role of a segment within a command line."""

    COMMAND = "command"
    DIRECTORY_CHANGE = "directory-change"
    PIPED_STAGE = "piped-stage"
    COMPOUND_JOIN = "compound-operator-join"
    REDIRECTION = "redirection"


@dataclass(frozen=True)
class Token:
    """A single shell word with its position in the original command line."""

    text: str
    start: int
    end: int
    value: str
    quoted: bool = False
    quote: Optional[str] = None  # Set when the whole word is one quoted string


@dataclass(frozen=True)
class Segment:
    """A structurally distinct unit of a command line."""

    index: int
    kind: SegmentKind
    start: int
    end: int
    text: str
    dialect: Dialect
    words: Tuple[Token, ...] = ()
    operator: str = ""
    directory_segment: Optional[int] = None
    parent: Optional[int] = None

    @property
    def follows_directory_change(self) -> bool:
        """True when an earlier segment changed the working directory."""
        return self.directory_segment is not None

    @property
    def command_name(self) -> str:
        """Lowercase command word without directory or .exe suffix."""
        if self.kind == SegmentKind.REDIRECTION or not self.words:
            return ""
        name = re.split(r"[\\/]", self.words[0].value)[-1].lower()
        if name.endswith(".exe"):
            name = name[:-4]
        return name

    @property
    def is_top_level(self) -> bool:
        """Redirections belong to a command segment; everything else is top level."""
        return self.parent is None


@dataclass(frozen=True)
class Fix:
    """A replacement of the text between two offsets of a command line."""

    start: int
    end: int
    replacement: str

    def __post_init__(self) -> None:
        """Validate fix span after initialization."""
        if not isinstance(self.start, int) or not isinstance(self.end, int):
            raise ValueError("Fix offsets must be integers")
        if self.start < 0:
            raise ValueError("Fix start must not be negative")
        if self.end < self.start:
            raise ValueError("Fix end must not precede fix start")
        if not isinstance(self.replacement, str):
            raise ValueError("Fix replacement must be a string")

    def overlaps(self, other: "Fix") -> bool:
        """Check whether two fixes touch the same text."""
        if self.start == other.start and (self.start == self.end or other.start == other.end):
            # Two insertions (or an insertion and a replacement) at one offset have no order
            return True
        return self.start < other.end and other.start < self.end


Matcher = Callable[["Rule", Segment, Sequence[Segment]], List["Diagnostic"]]


@dataclass(frozen=True)
class Rule:
    """Represents a linting rule with code, explanation, dialect predicate and matcher."""

    code: str
    name: str
    severity: RuleSeverity
    explanation: str
    recommendation: str
    dialects: FrozenSet[Dialect]
    matcher: Matcher

    def __post_init__(self) -> None:
        """Validate rule after initialization."""
        if not self.code or not isinstance(self.code, str):
            raise ValueError("Rule code must be a non-empty string")
        if not self.name or not isinstance(self.name, str):
            raise ValueError("Rule name must be a non-empty string")
        if not isinstance(self.severity, RuleSeverity):
            raise ValueError("Rule severity must be a RuleSeverity enum")
        if not self.explanation or not isinstance(self.explanation, str):
            raise ValueError("Rule explanation must be a non-empty string")
        if not self.recommendation or not isinstance(self.recommendation, str):
            raise ValueError("Rule recommendation must be a non-empty string")
        if not self.dialects or not all(isinstance(d, Dialect) for d in self.dialects):
            raise ValueError("Rule dialects must be a non-empty set of Dialect values")
        if not callable(self.matcher):
            raise ValueError("Rule matcher must be callable")

    def applies_to(self, dialect: Dialect) -> bool:
        """Check the rule's dialect predicate."""
        return dialect in self.dialects


@dataclass
class Diagnostic:
    """Represents a problem found in one segment of a command line."""

    rule: Rule
    segment: Segment
    message: str = ""  # Additional context about the issue
    suggestion: Optional[str] = None
    fix: Optional[Fix] = None

    def __post_init__(self) -> None:
        """Validate diagnostic after initialization."""
        if not isinstance(self.rule, Rule):
            raise ValueError("Rule must be a Rule instance")
        if not isinstance(self.segment, Segment):
            raise ValueError("Segment must be a Segment instance")
        if self.fix is not None and not (
            self.segment.start <= self.fix.start <= self.fix.end <= self.segment.end
        ):
            raise ValueError("Fix span must lie within the diagnostic's segment")

    @property
    def severity(self) -> RuleSeverity:
        """Severity of the rule that produced this diagnostic."""
        return self.rule.severity

    @property
    def offset(self) -> int:
        """Offset of the offending text within the command line."""
        return self.fix.start if self.fix is not None else self.segment.start


@dataclass
class LintResult:
    """Outcome of a single lint pass."""

    command: str
    dialect: Dialect
    segments: List[Segment]
    diagnostics: List[Diagnostic]
    rewritten: Optional[str] = None
    fix_error: Optional[ConflictingFixError] = None

    @property
    def error_count(self) -> int:
        """Number of error-severity diagnostics."""
        return sum(1 for d in self.diagnostics if d.severity == RuleSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        """Number of warning-severity diagnostics."""
        return sum(1 for d in self.diagnostics if d.severity == RuleSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        """True when any diagnostic has error severity."""
        return self.error_count > 0


@dataclass
class LinterConfig:
    """Configuration settings for wincmdlint."""

    # General settings
    show_summary: bool = False
    apply_fixes: bool = True
    dialect: Optional[Dialect] = None

    # Rule enablement - all rules enabled by default
    enabled_rules: Optional[Set[str]] = None
    disabled_rules: Optional[Set[str]] = None

    # Severity filtering
    min_severity: Optional[RuleSeverity] = None

    def __post_init__(self) -> None:
        """Initialize default values after creation."""
        if self.enabled_rules is None:
            self.enabled_rules = set()
        if self.disabled_rules is None:
            self.disabled_rules = set()

    def is_rule_enabled(self, rule_code: str) -> bool:
        """Check if a rule is enabled based on configuration."""
        if self.disabled_rules and rule_code in self.disabled_rules:
            return False

        # If enabled_rules has items, only those rules are enabled
        if self.enabled_rules:
            return rule_code in self.enabled_rules

        return True

    def should_include_severity(self, severity: RuleSeverity) -> bool:
        """Check if diagnostics of this severity should be included."""
        if self.min_severity is None:
            return True
        return SEVERITY_RANK.get(severity, 0) >= SEVERITY_RANK.get(self.min_severity, 0)


# Pattern definitions used by the tokenizer and the rules
DIRECTORY_CHANGE_COMMANDS = frozenset({"cd", "chdir", "pushd", "set-location", "sl"})

# Windows text filters per dialect. In bash 'find' is GNU find and 'where' is where.exe
FILTER_COMMANDS: Mapping[Dialect, FrozenSet[str]] = MappingProxyType(
    {
        Dialect.BASH: frozenset({"findstr"}),
        Dialect.POWERSHELL: frozenset(
            {"findstr", "find", "where-object", "where", "?", "select-string", "sls"}
        ),
    }
)

POWERSHELL_EXECUTABLES = frozenset({"powershell", "pwsh"})

# Tools that can run against another directory without a preceding cd
DIRECTORY_FLAG_TOOLS: Mapping[str, str] = MappingProxyType(
    {"git": "-C", "make": "-C", "tar": "-C"}
)

POWERSHELL_VERBS = frozenset(
    {
        "add",
        "clear",
        "compress",
        "convertfrom",
        "convertto",
        "copy",
        "disable",
        "enable",
        "expand",
        "export",
        "foreach",
        "format",
        "get",
        "import",
        "install",
        "invoke",
        "join",
        "measure",
        "move",
        "new",
        "out",
        "pop",
        "push",
        "read",
        "register",
        "remove",
        "rename",
        "resolve",
        "restart",
        "select",
        "set",
        "sort",
        "split",
        "start",
        "stop",
        "test",
        "uninstall",
        "update",
        "wait",
        "where",
        "write",
    }
)

_CMDLET_PATTERN = re.compile(r"^([A-Za-z]+)-[A-Za-z][A-Za-z0-9]*$")
_REDIRECT_PATTERN = re.compile(r"(?:[0-9]|&|\*)?(?:<<<|<<-?|<>|>>|>\||<|>)(?:&[0-9-])?")
_OPERATORS = ("&&", "||", "|", ";")
_GROUP_CLOSERS = {"(": ")", "{": "}"}
# Text before a backslash that can only be a Windows path (C:, .\src, dir\sub)
_PATH_PREFIX_PATTERN = re.compile(
    r"^(?:(?:[A-Za-z]:|\.{1,2}|~)(?:\\[\w.-]+)*|[\w.-]+(?:\\[\w.-]+)+)$"
)
_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:$")
_WINDOWS_PATH_PATTERN = re.compile(
    r"^(?:[A-Za-z]:\\|\\\\|\.{1,2}\\|~\\|[\w.-]+(?:\\[\w .-]+)+\\?$)"
)
_INLINE_VARIABLE_PATTERN = re.compile(r"(?<!\\)\$(?:\{[^}]*\}|\(|[A-Za-z_][\w:]*)")
_COMMAND_OPTIONS = ("-c", "-command")


def _is_cmdlet(word: str) -> bool:
    """Check whether a word looks like a PowerShell cmdlet (Verb-Noun)."""
    match = _CMDLET_PATTERN.match(word)
    return bool(match) and match.group(1).lower() in POWERSHELL_VERBS


def infer_dialect(command: str) -> Dialect:
    """
    Guess the dialect of a command line from its first word.

    Only the text is inspected; the host environment is never queried.

    Args:
        command: Raw command line

    Returns:
        Dialect.POWERSHELL when the command starts with a cmdlet or a
        PowerShell variable, Dialect.BASH otherwise
    """
    match = re.match(r"\s*([^\s;|&<>]+)", command)
    if not match:
        return Dialect.BASH
    first_word = match.group(1)
    if _is_cmdlet(first_word) or first_word.startswith("$"):
        return Dialect.POWERSHELL
    return Dialect.BASH


@dataclass
class _Redirect:
    """A redirection operator and its (optional) target while scanning."""

    operator: str
    start: int
    end: int
    target: Optional[Token] = None
    needs_target: bool = True


@dataclass
class _Chunk:
    """Words and redirections between two top-level operators."""

    operator: str = ""
    words: List[Token] = field(default_factory=list)
    redirects: List[_Redirect] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Check whether the chunk holds nothing."""
        return not self.words and not self.redirects


def _unterminated_quote(quote: str, offset: int) -> MalformedInputError:
    quote_name = "double" if quote == '"' else "single"
    return MalformedInputError(f"Unterminated {quote_name} quote", offset)


class _Scanner:  # pylint: disable=too-many-instance-attributes
    """Single-pass, quote-aware scanner that groups words into chunks."""

    def __init__(self, command: str, dialect: Dialect) -> None:
        self.command = command
        self.escape = "`" if dialect == Dialect.POWERSHELL else "\\"
        self.dialect = dialect
        self.chunks: List[_Chunk] = []
        self.chunk = _Chunk()
        self.pos = 0
        # Current word state
        self.word_start: Optional[int] = None
        self.value: List[str] = []
        self.quote_runs = 0
        self.first_quote: Optional[str] = None
        self.bare = False

    def scan(self) -> List[_Chunk]:
        """Scan the whole command line."""
        command = self.command
        length = len(command)
        while self.pos < length:
            char = command[self.pos]
            if char == self.escape:
                self._scan_escape()
            elif char in "'\"":
                self._scan_quoted(char)
            elif char in _GROUP_CLOSERS:
                self._scan_group()
            elif char == ")" or (char == "}" and self.dialect == Dialect.POWERSHELL):
                raise MalformedInputError(f"Unbalanced '{char}'", self.pos)
            elif char.isspace():
                self._finish_word()
                self.pos += 1
            elif self._scan_operator() or self._scan_redirect():
                continue
            else:
                self._start_word()
                self.bare = True
                self.value.append(char)
                self.pos += 1
        self._finish_word()
        self._finish_chunk(None)
        return self.chunks

    def _start_word(self) -> None:
        if self.word_start is None:
            self.word_start = self.pos
            self.value = []
            self.quote_runs = 0
            self.first_quote = None
            self.bare = False

    def _ends_windows_path(self) -> bool:
        """Check whether a backslash closes a path like C:\\ instead of escaping."""
        if self.dialect != Dialect.BASH or self.word_start is None or self.quote_runs:
            return False
        prefix = self.command[self.word_start : self.pos]
        if not _PATH_PREFIX_PATTERN.match(prefix):
            return False
        rest = self.command[self.pos + 1 :]
        if not rest:
            return True
        if not rest[0].isspace():
            return False
        following = rest.lstrip()
        # 'C:\ x' names the drive root; elsewhere '\ ' is an escaped space unless nothing follows
        return bool(_DRIVE_PATTERN.match(prefix)) or not following or following[0] in "&|;<>"

    def _scan_escape(self) -> None:
        if self._ends_windows_path():
            self.value.append(self.escape)
            self.pos += 1
            return
        if self.pos + 1 >= len(self.command):
            raise MalformedInputError("Unterminated escape character", self.pos)
        self._start_word()
        self.bare = True
        self.value.append(self.command[self.pos + 1])
        self.pos += 2

    def _scan_quoted(self, quote: str) -> None:
        """Consume a quoted run; its content is never split or reinterpreted."""
        command = self.command
        self._start_word()
        opening = self.pos
        self.quote_runs += 1
        if self.first_quote is None:
            self.first_quote = quote
        self.pos += 1
        while self.pos < len(command):
            char = command[self.pos]
            nxt = command[self.pos + 1] if self.pos + 1 < len(command) else ""
            if char == quote:
                if self.dialect == Dialect.POWERSHELL and nxt == quote:
                    self.value.append(quote)
                    self.pos += 2
                    continue
                self.pos += 1
                return
            if quote == '"' and char == self.escape and nxt:
                if self.dialect == Dialect.POWERSHELL or nxt in '"\\$`':
                    self.value.append(nxt)
                else:
                    self.value.append(char + nxt)
                self.pos += 2
                continue
            self.value.append(char)
            self.pos += 1
        raise _unterminated_quote(quote, opening)

    def _skip_quoted(self, position: int) -> int:
        """Return the position just past the quoted run opening at position."""
        command = self.command
        quote = command[position]
        current = position + 1
        while current < len(command):
            char = command[current]
            if char == quote:
                doubled = command[current + 1 : current + 2] == quote
                if self.dialect == Dialect.POWERSHELL and doubled:
                    current += 2
                    continue
                return current + 1
            current += 2 if quote == '"' and char == self.escape else 1
        raise _unterminated_quote(quote, position)

    def _scan_group(self) -> None:
        """Consume $(...), (...) or {...} as part of the current word.

        Operators and redirections inside a group belong to a subshell or
        script block, not to the top-level command line.
        """
        command = self.command
        self._start_word()
        self.bare = True
        opening = self.pos
        closers: List[str] = []
        while self.pos < len(command):
            char = command[self.pos]
            if char == self.escape:
                self.pos += 2
                continue
            if char in "'\"":
                self.pos = self._skip_quoted(self.pos)
                continue
            if char in _GROUP_CLOSERS:
                closers.append(_GROUP_CLOSERS[char])
            elif char == closers[-1]:
                closers.pop()
                if not closers:
                    self.pos += 1
                    self.value.append(command[opening : self.pos])
                    return
            elif char == ")":
                raise MalformedInputError("Unbalanced ')'", self.pos)
            self.pos += 1
        raise MalformedInputError(f"Unterminated '{command[opening]}' group", opening)

    def _scan_operator(self) -> bool:
        for operator in _OPERATORS:
            if self.command.startswith(operator, self.pos):
                self._finish_word()
                self._finish_chunk(operator)
                self.chunk = _Chunk(operator=operator)
                self.pos += len(operator)
                return True
        return False

    def _scan_redirect(self) -> bool:
        char = self.command[self.pos]
        if char not in "<>" and not (char in "0123456789&*" and self.word_start is None):
            return False
        match = _REDIRECT_PATTERN.match(self.command, self.pos)
        if not match or not any(c in match.group() for c in "<>"):
            return False
        self._finish_word()
        self._check_pending_redirect()
        operator = match.group()
        self.chunk.redirects.append(
            _Redirect(
                operator=operator,
                start=match.start(),
                end=match.end(),
                needs_target=not re.search(r"&[0-9-]$", operator),
            )
        )
        self.pos = match.end()
        return True

    def _pending_redirect(self) -> Optional[_Redirect]:
        if self.chunk.redirects:
            last = self.chunk.redirects[-1]
            if last.needs_target and last.target is None:
                return last
        return None

    def _check_pending_redirect(self) -> None:
        pending = self._pending_redirect()
        if pending is not None:
            raise MalformedInputError(
                f"Redirection '{pending.operator}' has no target", pending.start
            )

    def _finish_word(self) -> None:
        if self.word_start is None:
            return
        token = Token(
            text=self.command[self.word_start : self.pos],
            start=self.word_start,
            end=self.pos,
            value="".join(self.value),
            quoted=self.quote_runs > 0,
            quote=self.first_quote if self.quote_runs == 1 and not self.bare else None,
        )
        self.word_start = None
        pending = self._pending_redirect()
        if pending is not None:
            pending.target = token
            pending.end = token.end
        else:
            self.chunk.words.append(token)

    def _finish_chunk(self, next_operator: Optional[str]) -> None:
        self._check_pending_redirect()
        if self.chunk.is_empty():
            if next_operator is None and self.chunk.operator in ("", ";"):
                # Empty input or a trailing semicolon
                return
            operator = next_operator or self.chunk.operator
            raise MalformedInputError(f"Operator '{operator}' is missing a command", self.pos)
        self.chunks.append(self.chunk)


def _segment_kind(chunk: _Chunk) -> SegmentKind:
    if chunk.words and chunk.words[0].value.lower() in DIRECTORY_CHANGE_COMMANDS:
        return SegmentKind.DIRECTORY_CHANGE
    if chunk.operator == "|":
        return SegmentKind.PIPED_STAGE
    if chunk.operator:
        return SegmentKind.COMPOUND_JOIN
    return SegmentKind.COMMAND


def tokenize(command: str, dialect: Dialect = Dialect.BASH) -> List[Segment]:
    """
    Split a command line into segments.

    Top-level compound operators (&&, ||, |, ;) separate command segments.
    Quoted substrings are atomic. Redirections become their own segments,
    placed right after the command segment that owns them.

    Thread-safe: Yes - uses only local state

    Args:
        command: Raw command line
        dialect: Grammar used for quoting and escaping rules

    Returns:
        Segments in source order

    Raises:
        MalformedInputError: On unbalanced quotes, a dangling escape character,
            an operator without a command or a redirection without a target
    """
    chunks = _Scanner(command, dialect).scan()
    segments: List[Segment] = []
    directory_segment: Optional[int] = None

    for chunk in chunks:
        spans = [(word.start, word.end) for word in chunk.words]
        spans.extend((redirect.start, redirect.end) for redirect in chunk.redirects)
        start = min(span[0] for span in spans)
        end = max(span[1] for span in spans)
        kind = _segment_kind(chunk)
        segment_dialect = dialect
        if chunk.words and _is_cmdlet(chunk.words[0].value):
            segment_dialect = Dialect.POWERSHELL

        parent = Segment(
            index=len(segments),
            kind=kind,
            start=start,
            end=end,
            text=command[start:end],
            dialect=segment_dialect,
            words=tuple(chunk.words),
            operator=chunk.operator,
            directory_segment=directory_segment,
        )
        segments.append(parent)

        for redirect in chunk.redirects:
            segments.append(
                Segment(
                    index=len(segments),
                    kind=SegmentKind.REDIRECTION,
                    start=redirect.start,
                    end=redirect.end,
                    text=command[redirect.start : redirect.end],
                    dialect=segment_dialect,
                    words=(redirect.target,) if redirect.target else (),
                    operator=redirect.operator,
                    directory_segment=directory_segment,
                    parent=parent.index,
                )
            )

        if kind == SegmentKind.DIRECTORY_CHANGE:
            directory_segment = parent.index

    logger.debug("Tokenized %d segment(s) from %r", len(segments), command)
    return segments


def top_level_segments(segments: Iterable[Segment]) -> List[Segment]:
    """Return the segments joined by compound operators, without redirections."""
    return [segment for segment in segments if segment.is_top_level]


def _quote_path(token: Token) -> str:
    """Render a path token so it survives the shell unchanged."""
    if token.quoted:
        return token.text
    if "\\" not in token.text and " " not in token.value:
        return token.text
    path = token.text.replace("\\ ", " ")
    if (len(path) - len(path.rstrip("\\"))) % 2:
        # A lone trailing backslash would escape the closing quote
        path += "\\"
    return f'"{path}"'


def _directory_target(segment: Segment) -> Optional[Token]:
    """Find the path argument of a cd/Set-Location segment."""
    for word in segment.words[1:]:
        if word.value.startswith("-") or word.value.lower() == "/d":
            continue
        return word
    return None


def _unquoted_text(token: Token) -> str:
    return token.text[1:-1] if token.quote else token.text


def _is_powershell_invocation(segment: Segment) -> bool:
    return segment.is_top_level and segment.command_name in POWERSHELL_EXECUTABLES


def _inline_command(segment: Segment) -> Optional[Token]:
    """Find the argument passed to powershell -Command (or -c)."""
    words = segment.words
    for position, word in enumerate(words[1:-1], start=1):
        option = word.value.lower()
        if option in _COMMAND_OPTIONS or (len(option) >= 4 and "-command".startswith(option)):
            return words[position + 1]
    return None


def _shell_visible_inline(segment: Segment) -> Optional[Token]:
    """Inline PowerShell text the calling shell still interprets (double-quoted or bare)."""
    if not _is_powershell_invocation(segment):
        return None
    inline = _inline_command(segment)
    if inline is None:
        return None
    if inline.quoted and inline.quote != '"':
        return None
    return inline


def _match_unquoted_path(
    rule: Rule, segment: Segment, segments: Sequence[Segment]  # pylint: disable=unused-argument
) -> List[Diagnostic]:
    """Check for unquoted Windows paths (W001)."""
    diagnostics: List[Diagnostic] = []
    for word in segment.words:
        if word.quoted or not _WINDOWS_PATH_PATTERN.match(word.text):
            continue
        diagnostics.append(
            Diagnostic(
                rule=rule,
                segment=segment,
                message=f"Unquoted path '{word.text}'",
                fix=Fix(word.start, word.end, _quote_path(word)),
            )
        )
    return diagnostics


def _suggest_directory_flag(directory: Segment, segments: Sequence[Segment]) -> Optional[str]:
    """Build '<tool> -C <path> ...' for the command that follows a directory change."""
    target = _directory_target(directory)
    if target is None:
        return None
    following = [s for s in segments[directory.index + 1 :] if s.is_top_level]
    if not following:
        return None
    tool = following[0]
    flag = DIRECTORY_FLAG_TOOLS.get(tool.command_name)
    if flag is None:
        return None
    parts = [tool.words[0].text, flag, _quote_path(target)]
    parts.extend(word.text for word in tool.words[1:])
    return " ".join(parts)


def _match_pipe_after_directory_change(
    rule: Rule, segment: Segment, segments: Sequence[Segment]
) -> List[Diagnostic]:
    """Check for output piped into a Windows filter after a cd (E001)."""
    if segment.kind != SegmentKind.PIPED_STAGE or segment.directory_segment is None:
        return []
    if segment.command_name not in FILTER_COMMANDS[segment.dialect]:
        return []

    directory = segments[segment.directory_segment]
    suggestion = _suggest_directory_flag(directory, segments)
    if suggestion is None:
        suggestion = "Remove the pipe and filter the output in a separate step"
    return [
        Diagnostic(
            rule=rule,
            segment=segment,
            message=f"Output piped to '{segment.words[0].text}' after '{directory.text}'",
            suggestion=suggestion,
        )
    ]


def _match_powershell_context_loss(
    rule: Rule, segment: Segment, segments: Sequence[Segment]
) -> List[Diagnostic]:
    """Check for powershell -Command after a bash-style directory change (E002)."""
    if segment.directory_segment is None or not _is_powershell_invocation(segment):
        return []
    inline = _inline_command(segment)
    if inline is None:
        return []
    directory = segments[segment.directory_segment]
    if directory.dialect != Dialect.BASH:
        return []

    suggestion = None
    target = _directory_target(directory)
    if target is not None:
        prefix = segment.text[: inline.start - segment.start]
        path = _unquoted_text(target).replace("'", "''")
        suggestion = f"{prefix}\"Set-Location '{path}'; {_unquoted_text(inline)}\""
    return [
        Diagnostic(
            rule=rule,
            segment=segment,
            message=f"PowerShell started after '{directory.text}' runs in a new context",
            suggestion=suggestion,
        )
    ]


def _match_dev_null_redirection(
    rule: Rule, segment: Segment, segments: Sequence[Segment]  # pylint: disable=unused-argument
) -> List[Diagnostic]:
    """Check for redirections into /dev/null (W002)."""
    if segment.kind != SegmentKind.REDIRECTION or not segment.words:
        return []
    target = segment.words[0]
    if target.value != "/dev/null":
        return []
    replacement = "$null" if segment.dialect == Dialect.POWERSHELL else "nul"
    return [
        Diagnostic(
            rule=rule,
            segment=segment,
            message=f"Redirection '{segment.text}' targets /dev/null",
            fix=Fix(target.start, target.end, replacement),
        )
    ]


def _match_inline_exclamation(
    rule: Rule, segment: Segment, segments: Sequence[Segment]  # pylint: disable=unused-argument
) -> List[Diagnostic]:
    """Check for unescaped '!' in an inline PowerShell command (W003)."""
    inline = _shell_visible_inline(segment)
    if inline is None:
        return []

    diagnostics: List[Diagnostic] = []
    text = inline.text
    for index, char in enumerate(text):
        if char != "!":
            continue
        previous = text[index - 1] if index > 0 else ""
        following = text[index + 1] if index + 1 < len(text) else ""
        if previous == "\\" or following == "=":
            continue
        replacement = "-not" if following.isspace() else "-not "
        offset = inline.start + index
        diagnostics.append(
            Diagnostic(
                rule=rule,
                segment=segment,
                message=f"'!' at offset {offset} inside the inline PowerShell command",
                fix=Fix(offset, offset + 1, replacement),
            )
        )
    return diagnostics


def _match_inline_variable(
    rule: Rule, segment: Segment, segments: Sequence[Segment]  # pylint: disable=unused-argument
) -> List[Diagnostic]:
    """Check for $variables in an inline PowerShell command (W004)."""
    inline = _shell_visible_inline(segment)
    if inline is None:
        return []

    found: List[str] = []
    for match in _INLINE_VARIABLE_PATTERN.finditer(inline.text):
        if match.group() not in found:
            found.append(match.group())
    if not found:
        return []
    return [
        Diagnostic(
            rule=rule,
            segment=segment,
            message=f"Expanded by the calling shell: {', '.join(found)}",
            suggestion="Save the PowerShell code to a .ps1 file and run it with "
            "'powershell -File <script>.ps1'",
        )
    ]


_BOTH_DIALECTS = frozenset({Dialect.BASH, Dialect.POWERSHELL})
_BASH_ONLY = frozenset({Dialect.BASH})

# Pattern catalog (read-only)
RULES: Mapping[str, Rule] = MappingProxyType(
    {
        "E001": Rule(
            code="E001",
            name="Pipe after directory change",
            severity=RuleSeverity.ERROR,
            explanation="Piping output into a Windows filter such as findstr or "
            "Where-Object after changing directory is unreliable on Windows hosts "
            "and often produces no output at all",
            recommendation="Point the tool at the directory instead (for example "
            "'git -C <path> ...') or remove the pipe",
            dialects=_BOTH_DIALECTS,
            matcher=_match_pipe_after_directory_change,
        ),
        "E002": Rule(
            code="E002",
            name="PowerShell context loss",
            severity=RuleSeverity.ERROR,
            explanation="A PowerShell process started after a bash-style 'cd ... &&' "
            "does not reliably inherit the working directory",
            recommendation="Move the directory change inside the PowerShell command "
            "string with Set-Location, or use a self-contained command",
            dialects=_BASH_ONLY,
            matcher=_match_powershell_context_loss,
        ),
        "W001": Rule(
            code="W001",
            name="Unquoted Windows path",
            severity=RuleSeverity.WARNING,
            explanation="Backslashes and spaces in unquoted paths are consumed by "
            "bash-like shells, so 'C:\\Repo' arrives as 'C:Repo'",
            recommendation='Wrap Windows paths in double quotes: cd "C:\\Repo"',
            dialects=_BASH_ONLY,
            matcher=_match_unquoted_path,
        ),
        "W002": Rule(
            code="W002",
            name="Redirection to /dev/null",
            severity=RuleSeverity.WARNING,
            explanation="/dev/null does not exist for native Windows programs",
            recommendation="Redirect to 'nul' (or '$null' in PowerShell)",
            dialects=_BOTH_DIALECTS,
            matcher=_match_dev_null_redirection,
        ),
        "W003": Rule(
            code="W003",
            name="Exclamation mark in inline PowerShell",
            severity=RuleSeverity.WARNING,
            explanation="'!' inside a double-quoted string is subject to history "
            "expansion and escaping by bash-like shells before PowerShell sees it",
            recommendation="Use the -not operator instead of '!'",
            dialects=_BASH_ONLY,
            matcher=_match_inline_exclamation,
        ),
        "W004": Rule(
            code="W004",
            name="Variable in inline PowerShell",
            severity=RuleSeverity.WARNING,
            explanation="$variables inside a double-quoted PowerShell command are "
            "interpolated by the calling shell, not by PowerShell",
            recommendation="Move the PowerShell code into a script file and run it "
            "with -File",
            dialects=_BASH_ONLY,
            matcher=_match_inline_variable,
        ),
    }
)


def _diagnostic_sort_key(diagnostic: Diagnostic) -> Tuple[int, int, int, str, int]:
    return (
        diagnostic.segment.start,
        diagnostic.segment.index,
        -SEVERITY_RANK[diagnostic.severity],
        diagnostic.rule.code,
        diagnostic.offset,
    )


def evaluate(
    segments: Sequence[Segment],
    rules: Mapping[str, Rule] = RULES,
    config: Optional[LinterConfig] = None,
) -> List[Diagnostic]:
    """
    Run every applicable rule against every segment.

    Diagnostics are returned in source order, errors before warnings on the
    same segment. Overlapping findings from different rules are all kept.

    Args:
        segments: Output of tokenize()
        rules: Pattern catalog to evaluate
        config: Optional configuration for rule and severity filtering

    Returns:
        Ordered list of diagnostics
    """
    if config is None:
        config = LinterConfig()

    active = [
        rule
        for rule in rules.values()
        if config.is_rule_enabled(rule.code) and config.should_include_severity(rule.severity)
    ]

    diagnostics: List[Diagnostic] = []
    for segment in segments:
        for rule in active:
            if not rule.applies_to(segment.dialect):
                continue
            found = rule.matcher(rule, segment, segments)
            if found:
                logger.debug(
                    "Rule %s matched segment %d (%r)", rule.code, segment.index, segment.text
                )
            diagnostics.extend(found)

    diagnostics.sort(key=_diagnostic_sort_key)
    return diagnostics


def apply_fixes(command: str, fixes: Iterable[Fix]) -> str:
    """
    Apply non-overlapping fixes to a command line.

    Identical fixes are applied once. Fixes are applied from the end of the
    command towards the start so earlier offsets stay valid.

    Args:
        command: Original command line
        fixes: Fixes to apply

    Returns:
        The rewritten command line

    Raises:
        ConflictingFixError: If any two fixes overlap
        ValueError: If a fix lies outside the command line
    """
    unique = sorted(set(fixes), key=lambda fix: (fix.start, fix.end, fix.replacement))
    for fix in unique:
        if fix.end > len(command):
            raise ValueError(f"Fix {fix.start}-{fix.end} lies outside the command line")
    for first, second in combinations(unique, 2):
        if first.overlaps(second):
            raise ConflictingFixError(command, first, second)

    rewritten = command
    for fix in reversed(unique):
        rewritten = rewritten[: fix.start] + fix.replacement + rewritten[fix.end :]
    return rewritten


def rewrite(command: str, diagnostics: Iterable[Diagnostic]) -> Optional[str]:
    """
    Produce the rewritten command from the fixes carried by diagnostics.

    Diagnostics without a fix are informational and are skipped.

    Returns:
        The rewritten command, or None when no diagnostic carries a fix

    Raises:
        ConflictingFixError: If two fixes overlap
    """
    fixes = [diagnostic.fix for diagnostic in diagnostics if diagnostic.fix is not None]
    if not fixes:
        return None
    return apply_fixes(command, fixes)


def lint(
    command: str,
    dialect: Optional[Dialect] = None,
    config: Optional[LinterConfig] = None,
) -> LintResult:
    """
    Lint a command line and return diagnostics plus the rewritten command.

    This is the main entry point. The pipeline is a single linear pass:
    tokenize, evaluate, rewrite. The command is analysed as text and is never
    executed.

    Thread-safe: Yes - uses only local variables and the read-only rule catalog

    Args:
        command: Raw command line
        dialect: Shell dialect. If None, the configured dialect is used, and
            failing that the dialect is inferred from the command text.
        config: LinterConfig object with configuration settings. If None, uses defaults.

    Returns:
        LintResult with ordered diagnostics and, when fixes apply cleanly,
        the rewritten command. On conflicting fixes, rewritten is None and
        fix_error holds the ConflictingFixError.

    Raises:
        MalformedInputError: If the command cannot be tokenized. No partial
            diagnostics are returned.
        ValueError: If command is not a string

    Example:
        >>> result = lint(r"cd C:\\Repo && git status")
        >>> result.rewritten
        'cd "C:\\\\Repo" && git status'
    """
    if not isinstance(command, str):
        raise ValueError("command must be a string")

    if config is None:
        config = LinterConfig()

    resolved = dialect or config.dialect or infer_dialect(command)
    logger.info("Starting lint analysis (%s dialect)", resolved.value)

    segments = tokenize(command, resolved)
    diagnostics = evaluate(segments, config=config)

    rewritten: Optional[str] = None
    fix_error: Optional[ConflictingFixError] = None
    if config.apply_fixes:
        try:
            rewritten = rewrite(command, diagnostics)
        except ConflictingFixError as error:
            logger.warning("Fixes not applied: %s", error)
            fix_error = error

    result = LintResult(
        command=command,
        dialect=resolved,
        segments=segments,
        diagnostics=diagnostics,
        rewritten=rewritten,
        fix_error=fix_error,
    )
    logger.info(
        "Lint analysis completed. Found %d error(s) and %d warning(s) across %d segment(s)",
        result.error_count,
        result.warning_count,
        len(segments),
    )
    return result


def read_file_with_encoding(file_path: str) -> Tuple[List[str], str]:
    """
    Reads a file with encoding detection and fallback mechanisms.

    Uses chardet for detection first, then falls back to a prioritized list
    of common encodings.

    Args:
        file_path: Path to the file to read. Can be absolute or relative.

    Returns:
        Tuple containing:
            - lines: List of strings, each representing a line in the file
            - encoding_used: String indicating the encoding that was successful

    Raises:
        FileNotFoundError: If the specified file doesn't exist
        PermissionError: If insufficient permissions to read the file
        OSError: If file operation fails or no encoding can decode the file
    """
    encodings_to_try = [
        "utf-8",
        "utf-8-sig",
        "cp1252",  # Windows-1252 (common Windows encoding)
        "utf-16",
        "latin1",  # Can decode any byte sequence
    ]

    with open(file_path, "rb") as file_handle:
        raw_data = file_handle.read()

    detected = chardet.detect(raw_data)
    if detected and detected["encoding"] and detected["confidence"] > 0.7:
        detected_encoding = detected["encoding"].lower()
        logger.debug(
            "Chardet detected encoding: %s (confidence: %.2f)",
            detected_encoding,
            detected["confidence"],
        )
        if detected_encoding in encodings_to_try:
            encodings_to_try.remove(detected_encoding)
        encodings_to_try.insert(0, detected_encoding)

    last_exception: Optional[Exception] = None
    for encoding in encodings_to_try:
        try:
            text = raw_data.decode(encoding)
        except UnicodeDecodeError as decode_error:
            logger.debug("UnicodeDecodeError with %s: %s", encoding, decode_error)
            last_exception = decode_error
            continue
        except LookupError as encoding_error:
            logger.debug("Encoding error with %s: %s", encoding, encoding_error)
            last_exception = encoding_error
            continue
        logger.debug("Successfully decoded %s using %s encoding", file_path, encoding)
        return text.splitlines(), encoding

    raise OSError(
        f"All encoding attempts failed for file '{file_path}'. Last error: {last_exception}"
    )


CommandFileEntry = Tuple[int, str, Union[LintResult, MalformedInputError]]


def lint_command_file(
    file_path: str,
    dialect: Optional[Dialect] = None,
    config: Optional[LinterConfig] = None,
) -> List[CommandFileEntry]:
    """
    Lint every command in a text file, one command per line.

    Blank lines and lines starting with '#' are skipped. A malformed line
    does not stop the remaining lines from being linted.

    Args:
        file_path: Path to the command file
        dialect: Optional dialect for every line
        config: Optional configuration

    Returns:
        List of (line_number, command, LintResult or MalformedInputError)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If file_path is empty or not a file
        OSError: If the file cannot be read
    """
    if not file_path or not isinstance(file_path, str):
        raise ValueError("file_path must be a non-empty string")

    file_obj = Path(file_path)
    if not file_obj.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not file_obj.is_file():
        raise ValueError(f"Path is not a file: {file_path}")

    lines, encoding_used = read_file_with_encoding(file_path)
    if encoding_used.lower() not in ["utf-8", "utf-8-sig", "ascii"]:
        warnings.warn(
            f"File '{file_path}' was read using '{encoding_used}' encoding instead of UTF-8. "
            f"Consider converting the file to UTF-8 for better compatibility.",
            UserWarning,
            stacklevel=2,
        )

    entries: List[CommandFileEntry] = []
    for line_number, line in enumerate(lines, start=1):
        command = line.strip()
        if not command or command.startswith("#"):
            continue
        try:
            entries.append((line_number, command, lint(command, dialect=dialect, config=config)))
        except MalformedInputError as error:
            logger.debug("Line %d is malformed: %s", line_number, error)
            entries.append((line_number, command, error))
    return entries


def _load_general_settings(config: LinterConfig, parser: configparser.ConfigParser) -> None:
    """Load general settings from config parser."""
    if not parser.has_section("general"):
        return

    general = parser["general"]

    config.show_summary = general.getboolean("show_summary", fallback=False)
    config.apply_fixes = general.getboolean("apply_fixes", fallback=True)

    dialect_str = general.get("dialect", "").strip()
    if dialect_str:
        dialect = parse_dialect(dialect_str)
        if dialect is None:
            logger.warning("Invalid dialect value: %s", dialect_str)
        else:
            config.dialect = dialect

    severity_str = general.get("min_severity", "").strip()
    if severity_str:
        _set_min_severity(config, severity_str)


def _set_min_severity(config: LinterConfig, severity_str: str) -> None:
    """Set minimum severity from string value."""
    severity_map = {
        "ERROR": RuleSeverity.ERROR,
        "WARNING": RuleSeverity.WARNING,
    }
    severity_upper = severity_str.upper()
    if severity_upper in severity_map:
        config.min_severity = severity_map[severity_upper]
    else:
        logger.warning("Invalid min_severity value: %s", severity_str)


def _load_rule_settings(config: LinterConfig, parser: configparser.ConfigParser) -> None:
    """Load rule settings from config parser."""
    if not parser.has_section("rules"):
        return

    rules = parser["rules"]

    enabled_str = rules.get("enabled_rules", "").strip()
    if enabled_str:
        config.enabled_rules = set(rule.strip() for rule in enabled_str.split(",") if rule.strip())

    disabled_str = rules.get("disabled_rules", "").strip()
    if disabled_str:
        config.disabled_rules = set(
            rule.strip() for rule in disabled_str.split(",") if rule.strip()
        )


def parse_dialect(value: str) -> Optional[Dialect]:
    """Map 'bash'/'powershell' (and common aliases) to a Dialect."""
    aliases = {
        "bash": Dialect.BASH,
        "sh": Dialect.BASH,
        "gitbash": Dialect.BASH,
        "powershell": Dialect.POWERSHELL,
        "pwsh": Dialect.POWERSHELL,
        "ps": Dialect.POWERSHELL,
    }
    return aliases.get(value.strip().lower())


def load_config(config_path: Optional[str] = None, use_config: bool = True) -> LinterConfig:
    """
    Load configuration from wincmdlint.ini file.

    Args:
        config_path: Optional path to config file. If None, looks for wincmdlint.ini in
            current directory
        use_config: Whether to use config file at all

    Returns:
        LinterConfig object with loaded settings
    """
    config = LinterConfig()

    if not use_config:
        return config

    config_file = Path(config_path or DEFAULT_CONFIG_FILE)

    if not config_file.exists():
        logger.info("No configuration file found at %s, using defaults", config_file)
        return config

    try:
        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")

        _load_general_settings(config, parser)
        _load_rule_settings(config, parser)

        logger.info("Configuration loaded from %s", config_file)

    except (configparser.Error, OSError, ValueError) as error:
        logger.warning(
            "Error loading configuration from %s: %s. Using defaults.", config_file, error
        )
        config = LinterConfig()

    return config


def create_default_config_file(config_path: str = DEFAULT_CONFIG_FILE) -> None:
    """
    Create a default configuration file with all available options documented.

    Args:
        config_path: Path where to create the config file
    """
    config_content = """# wincmdlint Configuration File
# All settings are optional - if not specified, defaults will be used.

[general]
# Whether to show summary statistics at the end (default: false)
show_summary = false

# Whether to print a rewritten command when fixes are available (default: true)
apply_fixes = true

# Shell dialect commands are written for: bash or powershell
# (default: inferred from the first word of each command)
# dialect = bash

# Minimum severity level to report (default: none - show all)
# Valid values: ERROR, WARNING
# min_severity = ERROR

[rules]
# Comma-separated list of specific rules to enable (default: all rules enabled)
# If specified, ONLY these rules will be checked
# enabled_rules = E001,E002

# Comma-separated list of rules to disable (default: none disabled)
# disabled_rules = W004
"""

    try:
        with open(config_path, "w", encoding="utf-8") as config_file:
            config_file.write(config_content)
        print(f"Default configuration file created: {config_path}")
    except OSError as error:
        print(f"Error creating configuration file: {error}")


def print_help() -> None:
    """Print help information for the wincmdlint command."""
    help_text = """
wincmdlint - Help Menu

Usage:
  wincmdlint [options] [--] <command>
  echo "<command>" | wincmdlint [options]
  wincmdlint --file <commands.txt> [options]

Arguments:
  <command>           Command line to check. Quote it so your own shell passes it
                     through unchanged. Read from standard input when omitted.
                     Options must come before the command; later words are part
                     of the command.

Options:
  --dialect <name>    Shell dialect: bash or powershell (default: inferred).
  --file <path>       Lint a file containing one command per line. Blank lines and
                     lines starting with '#' are skipped.
  --no-fix            Report diagnostics only; don't print a rewritten command.
  --summary           Show a summary with totals and the most common issue.
  --config <path>     Read settings from <path> instead of wincmdlint.ini.
  --no-config         Don't use a configuration file even if it exists.
  --create-config     Create a default wincmdlint.ini configuration file and exit.
  --help              Display this help menu and exit.

Output:
  Diagnostics are written to standard error. The rewritten command is written to
  standard output. With --file, every linted command is written to standard output,
  rewritten where a fix applies.

Exit codes:
  0   No error-level diagnostics
  1   At least one error-level diagnostic
  2   Malformed input (for example an unterminated quote), unreadable file
      or invalid option value

Rule Categories:
  E001-E999   Error Level    - Commands that will misbehave on Windows
  W001-W999   Warning Level  - Commands that are fragile and can be auto-fixed or reworked

Examples:
  wincmdlint 'cd C:\\Repo && git status'
      Suggests quoting the path and prints: cd "C:\\Repo" && git status

  wincmdlint --dialect powershell 'Get-Content log.txt > /dev/null'
      Suggests redirecting to $null instead.
"""
    print(help_text.strip())


def group_diagnostics(
    diagnostics: Iterable[Diagnostic],
) -> DefaultDict[RuleSeverity, List[Diagnostic]]:
    """Group diagnostics by severity level.

    Args:
        diagnostics: Diagnostic objects

    Returns:
        Dictionary mapping severity levels to lists of diagnostics
    """
    grouped: DefaultDict[RuleSeverity, List[Diagnostic]] = defaultdict(list)
    for diagnostic in diagnostics:
        grouped[diagnostic.severity].append(diagnostic)
    return grouped


def print_diagnostics(result: LintResult) -> None:
    """Print diagnostics in source order to standard error.

    Args:
        result: Outcome of lint()
    """
    if not result.diagnostics:
        print("No issues found!", file=sys.stderr)
        return

    for diagnostic in result.diagnostics:
        rule = diagnostic.rule
        segment = diagnostic.segment
        print(
            f"[{rule.severity.value}] {rule.name} ({rule.code}) in segment {segment.index} "
            f"at offset {segment.start}: {segment.text}",
            file=sys.stderr,
        )
        if diagnostic.message:
            print(f"- Context: {diagnostic.message}", file=sys.stderr)
        print(f"- Explanation: {rule.explanation}", file=sys.stderr)
        print(f"- Recommendation: {rule.recommendation}", file=sys.stderr)
        if diagnostic.suggestion:
            print(f"- Suggestion: {diagnostic.suggestion}", file=sys.stderr)
        if diagnostic.fix is not None:
            original = result.command[diagnostic.fix.start : diagnostic.fix.end]
            print(
                f"- Fix: replace '{original}' with '{diagnostic.fix.replacement}'",
                file=sys.stderr,
            )

    if result.fix_error is not None:
        print(
            f"\nNOTE: No rewrite produced because fixes conflict: {result.fix_error}",
            file=sys.stderr,
        )


def print_summary(results: Sequence[LintResult]) -> None:
    """Print summary statistics of linting diagnostics to standard error.

    Args:
        results: LintResult objects from one run
    """
    diagnostics = [diagnostic for result in results for diagnostic in result.diagnostics]

    rule_counts: DefaultDict[str, int] = defaultdict(int)
    for diagnostic in diagnostics:
        rule_counts[diagnostic.rule.code] += 1

    print("\nSUMMARY:", file=sys.stderr)
    print(f"Commands linted: {len(results)}", file=sys.stderr)
    print(f"Total issues: {len(diagnostics)}", file=sys.stderr)
    if rule_counts:
        code, count = max(sorted(rule_counts.items()), key=lambda item: item[1])
        print(
            f"Most common issue: '{RULES[code].name}' ({code}) - {count} occurrences",
            file=sys.stderr,
        )
    else:
        print("No issues found", file=sys.stderr)

    grouped = group_diagnostics(diagnostics)
    print("\nIssues by severity:", file=sys.stderr)
    for severity in (RuleSeverity.ERROR, RuleSeverity.WARNING):
        count = len(grouped.get(severity, []))
        if count > 0:
            print(f"  {severity.value}: {count}", file=sys.stderr)


@dataclass
class CliArguments:  # pylint: disable=too-many-instance-attributes
    """Parsed CLI arguments."""

    command: Optional[str]
    file_path: Optional[str]
    use_config: bool
    config_path: Optional[str]
    dialect: Optional[Dialect]
    cli_show_summary: Optional[bool]
    cli_apply_fixes: Optional[bool]


def _parse_cli_arguments() -> Optional[CliArguments]:  # pylint: disable=too-many-branches
    """Parse command line arguments.

    Options are only read up to the first word of the command (or '--');
    everything after that is part of the command, even words starting with '--'.
    Usage errors print the help menu and exit with status 2.
    """
    args = sys.argv[1:]
    positional: List[str] = []
    file_path: Optional[str] = None
    config_path: Optional[str] = None
    dialect: Optional[Dialect] = None
    use_config = True
    cli_show_summary = None  # None means use config default
    cli_apply_fixes = None

    position = 0
    while position < len(args):
        arg = args[position]
        position += 1
        if positional or not arg.startswith("--"):
            positional.append(arg)
            continue
        if arg == "--":
            positional.extend(args[position:])
            break
        if arg == "--help":
            print_help()
            return None
        if arg == "--create-config":
            create_default_config_file()
            return None

        name, _, inline_value = arg.partition("=")
        if name in ("--dialect", "--file", "--config"):
            value = inline_value
            if not value:
                if position >= len(args):
                    print(f"Error: {name} requires a value.\n", file=sys.stderr)
                    print_help()
                    sys.exit(2)
                value = args[position]
                position += 1
            if name == "--dialect":
                dialect = parse_dialect(value)
                if dialect is None:
                    print(f"Error: Unknown dialect '{value}'.\n", file=sys.stderr)
                    print_help()
                    sys.exit(2)
            elif name == "--file":
                file_path = value
            else:
                config_path = value
        elif arg == "--summary":
            cli_show_summary = True
        elif arg == "--no-fix":
            cli_apply_fixes = False
        elif arg == "--no-config":
            use_config = False
        else:
            print(f"Warning: Ignoring unknown option '{arg}'", file=sys.stderr)

    command = " ".join(positional) if positional else None
    return CliArguments(
        command=command,
        file_path=file_path,
        use_config=use_config,
        config_path=config_path,
        dialect=dialect,
        cli_show_summary=cli_show_summary,
        cli_apply_fixes=cli_apply_fixes,
    )


def _read_stdin_command() -> Optional[str]:
    """Read a command from standard input unless it is an interactive terminal."""
    if sys.stdin is None or sys.stdin.isatty():
        return None
    return sys.stdin.read().rstrip("\r\n")


def _run_command(command: str, config: LinterConfig) -> int:
    """Lint one command, print the outcome and return the exit code."""
    try:
        result = lint(command, config=config)
    except MalformedInputError as error:
        print(f"Error: Malformed command: {error}", file=sys.stderr)
        return 2

    print_diagnostics(result)
    if result.rewritten is not None:
        print(result.rewritten)
    if config.show_summary:
        print_summary([result])
    return 1 if result.has_errors else 0


def _run_file(file_path: str, config: LinterConfig) -> int:
    """Lint a command file, print the outcome and return the exit code."""
    try:
        entries = lint_command_file(file_path, config=config)
    except FileNotFoundError:
        print(f"Error: File '{file_path}' not found.", file=sys.stderr)
        return 2
    except (OSError, ValueError) as file_error:
        print(f"Error: Could not read '{file_path}': {file_error}", file=sys.stderr)
        return 2

    exit_code = 0
    results: List[LintResult] = []
    for line_number, command, outcome in entries:
        print(f"\nLine {line_number}: {command}", file=sys.stderr)
        if isinstance(outcome, MalformedInputError):
            print(f"Error: Malformed command: {outcome}", file=sys.stderr)
            print(command)
            exit_code = 2
            continue
        results.append(outcome)
        print_diagnostics(outcome)
        print(outcome.rewritten if outcome.rewritten is not None else command)
        if outcome.has_errors:
            exit_code = max(exit_code, 1)

    if config.show_summary:
        print_summary(results)
    return exit_code


def main() -> None:
    """Main entry point for the wincmdlint application."""
    cli_args = _parse_cli_arguments()
    if cli_args is None:
        return

    config = load_config(cli_args.config_path, use_config=cli_args.use_config)

    # Override config with CLI arguments
    if cli_args.cli_show_summary is not None:
        config.show_summary = cli_args.cli_show_summary
    if cli_args.cli_apply_fixes is not None:
        config.apply_fixes = cli_args.cli_apply_fixes
    if cli_args.dialect is not None:
        config.dialect = cli_args.dialect

    if cli_args.file_path:
        sys.exit(_run_file(cli_args.file_path, config))

    command = cli_args.command
    if command is None:
        command = _read_stdin_command()
    if not command or not command.strip():
        print("Error: No command provided.\n", file=sys.stderr)
        print_help()
        return

    sys.exit(_run_command(command, config))


if __name__ == "__main__":
    main()
