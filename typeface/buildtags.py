"""Build context and file selection rules for Go package directories."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional

from .config import LoaderConfig
from .logging import get_logger

logger = get_logger("buildtags")

KNOWN_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "js",
        "linux",
        "nacl",
        "netbsd",
        "openbsd",
        "plan9",
        "solaris",
        "wasip1",
        "windows",
        "zos",
    }
)

UNIX_OS = frozenset(
    {
        "aix",
        "android",
        "darwin",
        "dragonfly",
        "freebsd",
        "hurd",
        "illumos",
        "ios",
        "linux",
        "netbsd",
        "openbsd",
        "solaris",
    }
)

KNOWN_ARCH = frozenset(
    {
        "386",
        "amd64",
        "amd64p32",
        "arm",
        "armbe",
        "arm64",
        "arm64be",
        "loong64",
        "mips",
        "mipsle",
        "mips64",
        "mips64le",
        "mips64p32",
        "mips64p32le",
        "ppc",
        "ppc64",
        "ppc64le",
        "riscv",
        "riscv64",
        "s390",
        "s390x",
        "sparc",
        "sparc64",
        "wasm",
    }
)

# GOOS values that also satisfy another GOOS tag.
_IMPLIED_OS = {"android": "linux", "illumos": "solaris", "ios": "darwin"}

_RELEASE_TAG = re.compile(r"^go1\.\d+$")
_TOKEN = re.compile(r"\s*(\(|\)|!|&&|\|\||[A-Za-z0-9_.]+)")


class ConstraintSyntaxError(ValueError):
    """Raised when a build constraint expression is malformed."""


@dataclass(frozen=True)
class BuildContext:
    """Target platform and tags that decide which files belong to a package."""

    goos: str
    goarch: str
    cgo_enabled: bool = True
    tags: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_config(cls, config: LoaderConfig) -> "BuildContext":
        return cls(
            goos=config.goos,
            goarch=config.goarch,
            cgo_enabled=config.cgo_enabled,
            tags=frozenset(config.build_tags),
        )

    def matches_tag(self, tag: str) -> bool:
        if tag in self.tags:
            return True
        if tag == self.goos or tag == self.goarch:
            return True
        if _IMPLIED_OS.get(self.goos) == tag:
            return True
        if tag == "unix":
            return self.goos in UNIX_OS
        if tag == "cgo":
            return self.cgo_enabled
        if tag == "gc":
            return True
        return bool(_RELEASE_TAG.match(tag))

    def matches_file_name(self, name: str) -> bool:
        """Apply the _GOOS / _GOARCH / _test naming rules of go/build."""
        if not name.endswith(".go") or name.startswith(("_", ".")):
            return False
        stem = name[: -len(".go")]
        if stem.endswith("_test"):
            return False
        index = stem.find("_")
        if index < 0:
            return True
        parts = stem[index:].split("_")
        if len(parts) >= 2 and parts[-2] in KNOWN_OS and parts[-1] in KNOWN_ARCH:
            return self.matches_tag(parts[-2]) and self.matches_tag(parts[-1])
        if parts[-1] in KNOWN_OS:
            return self.matches_tag(parts[-1])
        if parts[-1] in KNOWN_ARCH:
            return self.matches_tag(parts[-1])
        return True

    def matches_source(self, source: str, filename: str = "") -> bool:
        """Evaluate //go:build (or legacy // +build) lines in the file header."""
        go_build, plus_build = constraint_lines(source)
        try:
            if go_build is not None:
                return evaluate(go_build, self.matches_tag)
            return all(_evaluate_plus_build(line, self.matches_tag) for line in plus_build)
        except ConstraintSyntaxError as exc:
            logger.debug("Ignoring malformed build constraint in %s: %s", filename or "<source>", exc)
            return True


def constraint_lines(source: str) -> tuple[Optional[str], List[str]]:
    """Return the //go:build expression and // +build lines preceding the package clause."""
    go_build: Optional[str] = None
    plus_build: List[str] = []
    in_block = False
    for raw in source.splitlines():
        line = raw.strip()
        if in_block:
            if "*/" in line:
                in_block = False
            continue
        if not line:
            continue
        if line.startswith("/*"):
            in_block = "*/" not in line
            continue
        if not line.startswith("//"):
            break
        if line.startswith("//go:build"):
            rest = line[len("//go:build"):]
            if go_build is None and (not rest or rest[0].isspace()):
                go_build = rest.strip()
        elif line.startswith("// +build"):
            plus_build.append(line[len("// +build"):].strip())
    return go_build, plus_build


def evaluate(expression: str, matches) -> bool:  # type: ignore[no-untyped-def]
    """Evaluate a //go:build expression with the given tag predicate."""
    tokens = _tokenize(expression)
    parser = _ExpressionParser(tokens, matches)
    result = parser.parse_or()
    if parser.position != len(tokens):
        raise ConstraintSyntaxError(f"unexpected token {tokens[parser.position]!r}")
    return result


def _tokenize(expression: str) -> List[str]:
    tokens: List[str] = []
    position = 0
    stripped = expression.rstrip()
    while position < len(stripped):
        match = _TOKEN.match(stripped, position)
        if not match:
            raise ConstraintSyntaxError(f"invalid character in {expression!r}")
        tokens.append(match.group(1))
        position = match.end()
    if not tokens:
        raise ConstraintSyntaxError("empty expression")
    return tokens


class _ExpressionParser:
    def __init__(self, tokens: List[str], matches) -> None:  # type: ignore[no-untyped-def]
        self.tokens = tokens
        self.position = 0
        self.matches = matches

    def _peek(self) -> Optional[str]:
        return self.tokens[self.position] if self.position < len(self.tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise ConstraintSyntaxError("unexpected end of expression")
        self.position += 1
        return token

    def parse_or(self) -> bool:
        result = self.parse_and()
        while self._peek() == "||":
            self._take()
            right = self.parse_and()
            result = result or right
        return result

    def parse_and(self) -> bool:
        result = self.parse_not()
        while self._peek() == "&&":
            self._take()
            right = self.parse_not()
            result = result and right
        return result

    def parse_not(self) -> bool:
        if self._peek() == "!":
            self._take()
            return not self.parse_not()
        return self.parse_atom()

    def parse_atom(self) -> bool:
        token = self._take()
        if token == "(":
            result = self.parse_or()
            if self._take() != ")":
                raise ConstraintSyntaxError("missing closing parenthesis")
            return result
        if token in {")", "&&", "||"}:
            raise ConstraintSyntaxError(f"unexpected token {token!r}")
        return bool(self.matches(token))


def _evaluate_plus_build(line: str, matches) -> bool:  # type: ignore[no-untyped-def]
    options = line.split()
    if not options:
        return True
    for option in options:
        terms = option.split(",")
        if all(_plus_term(term, matches) for term in terms):
            return True
    return False


def _plus_term(term: str, matches) -> bool:  # type: ignore[no-untyped-def]
    if term.startswith("!!") or not term.lstrip("!"):
        raise ConstraintSyntaxError(f"invalid +build term {term!r}")
    if term.startswith("!"):
        return not matches(term[1:])
    return bool(matches(term))


def select_files(names: Iterable[str], context: BuildContext) -> List[str]:
    """Return the sorted subset of names that pass the file-name rules."""
    return sorted(name for name in names if context.matches_file_name(name))


__all__ = [
    "BuildContext",
    "ConstraintSyntaxError",
    "KNOWN_ARCH",
    "KNOWN_OS",
    "constraint_lines",
    "evaluate",
    "select_files",
]
