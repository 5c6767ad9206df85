"""Go module handling: go.mod parsing, import path <-> directory mapping."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import PackageNotFound
from .logging import get_logger

logger = get_logger("gomod")

GO_MOD = "go.mod"

_DIRECTIVE = re.compile(r"^(module|require|replace)\b\s*(.*)$")


@dataclass
class GoMod:
    """The parts of a go.mod file relevant to locating packages."""

    root: Path
    module: str
    requires: Dict[str, str] = field(default_factory=dict)
    replaces: Dict[str, str] = field(default_factory=dict)


def parse_go_mod(path: Path) -> GoMod:
    text = path.read_text(encoding="utf-8")
    module = ""
    requires: Dict[str, str] = {}
    replaces: Dict[str, str] = {}
    block: Optional[str] = None

    for raw in text.splitlines():
        line = _strip_comment(raw).strip()
        if not line:
            continue
        if block is not None:
            if line == ")":
                block = None
                continue
            _apply_directive(block, line, requires, replaces)
            continue
        match = _DIRECTIVE.match(line)
        if not match:
            continue
        verb, rest = match.group(1), match.group(2).strip()
        if verb == "module":
            module = _unquote(rest)
        elif rest == "(":
            block = verb
        else:
            _apply_directive(verb, rest, requires, replaces)

    return GoMod(root=path.parent.resolve(), module=module, requires=requires, replaces=replaces)


def _apply_directive(verb: str, line: str, requires: Dict[str, str], replaces: Dict[str, str]) -> None:
    if verb == "require":
        parts = line.split()
        if len(parts) >= 2:
            requires[_unquote(parts[0])] = parts[1]
    elif verb == "replace" and "=>" in line:
        old, new = line.split("=>", 1)
        old_parts, new_parts = old.split(), new.split()
        if old_parts and new_parts:
            # Only filesystem replacements can be followed without a module download.
            target = _unquote(new_parts[0])
            if target.startswith(("./", "../", "/")) or len(new_parts) == 1:
                replaces[_unquote(old_parts[0])] = target
            else:
                replaces[_unquote(old_parts[0])] = f"{target}@{new_parts[1]}"


def _strip_comment(line: str) -> str:
    index = line.find("//")
    return line if index < 0 else line[:index]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "`"}:
        return value[1:-1]
    return value


def find_go_mod(start: Path) -> Optional[GoMod]:
    """Find the go.mod governing start, walking up from its nearest existing directory."""
    current = start.expanduser().resolve()
    while not current.exists() and current != current.parent:
        current = current.parent
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / GO_MOD
        if candidate.is_file():
            mod = parse_go_mod(candidate)
            if mod.module:
                return mod
            logger.debug("Ignoring %s without a module directive", candidate)
    return None


def gopath() -> Path:
    value = os.environ.get("GOPATH", "")
    first = value.split(os.pathsep)[0] if value else ""
    return Path(first) if first else Path.home() / "go"


def gomodcache() -> Path:
    value = os.environ.get("GOMODCACHE")
    return Path(value) if value else gopath() / "pkg" / "mod"


def goroot() -> Optional[Path]:
    value = os.environ.get("GOROOT")
    return Path(value) if value else None


def package_of(path: Path) -> str:
    """Translate a file or directory path into the Go import path of its package."""
    resolved = path.expanduser().resolve()
    directory = resolved.parent if resolved.suffix == ".go" or resolved.is_file() else resolved

    mod = find_go_mod(directory)
    if mod is not None:
        return _join_import(mod.module, _relative_parts(directory, mod.root))

    src = (gopath() / "src").resolve()
    if _is_within(directory, src):
        return "/".join(_relative_parts(directory, src))

    raise PackageNotFound(str(path), "not inside a Go module or GOPATH")


def _relative_parts(directory: Path, root: Path) -> Tuple[str, ...]:
    return directory.relative_to(root).parts


def _join_import(module: str, parts: Tuple[str, ...]) -> str:
    return "/".join((module, *parts)) if parts else module


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def escape_module_path(path: str) -> str:
    """Apply the module cache case-encoding (upper-case letters become !lower)."""
    return "".join(f"!{char.lower()}" if char.isupper() else char for char in path)


def assumed_package_name(import_path: str) -> str:
    """Guess a package's name from its import path the way goimports does."""
    elements = [element for element in import_path.split("/") if element]
    if not elements:
        return ""
    base = elements[-1]
    if base.startswith("v") and base[1:].isdigit() and len(elements) > 1:
        base = elements[-2]
    if base.startswith("go-"):
        base = base[len("go-"):]
    for index, char in enumerate(base):
        if not (char.isalnum() or char == "_"):
            return base[:index]
    return base


class Workspace:
    """Maps import paths to package directories for one run."""

    def __init__(self, anchor: Path) -> None:
        self.main = find_go_mod(anchor)
        self._known: Dict[str, Path] = {}

    def register(self, import_path: str, directory: Path) -> None:
        self._known[import_path] = directory.resolve()

    def locate(self, import_path: str) -> Optional[Path]:
        """Return the directory of import_path, or None when it cannot be found."""
        if import_path in self._known:
            return self._known[import_path]
        for candidate in self._candidates(import_path):
            if candidate.is_dir():
                logger.debug("Located %s at %s", import_path, candidate)
                self._known[import_path] = candidate
                return candidate
        return None

    def _candidates(self, import_path: str) -> List[Path]:
        candidates: List[Path] = []
        mod = self.main
        if mod is not None:
            rest = _strip_prefix(import_path, mod.module)
            if rest is not None:
                candidates.append(mod.root / rest)
            for old, new in sorted(mod.replaces.items(), key=lambda item: -len(item[0])):
                rest = _strip_prefix(import_path, old)
                if rest is None:
                    continue
                if "@" in new:
                    target, version = new.split("@", 1)
                    candidates.append(gomodcache() / f"{escape_module_path(target)}@{version}" / rest)
                else:
                    candidates.append((mod.root / new / rest).resolve())
                break
            candidates.append(mod.root / "vendor" / import_path)
            for module, version in sorted(mod.requires.items(), key=lambda item: -len(item[0])):
                rest = _strip_prefix(import_path, module)
                if rest is not None:
                    candidates.append(gomodcache() / f"{escape_module_path(module)}@{version}" / rest)
                    break
        root = goroot()
        if root is not None:
            candidates.append(root / "src" / import_path)
        candidates.append(gopath() / "src" / import_path)
        return candidates


def _strip_prefix(import_path: str, prefix: str) -> Optional[str]:
    if import_path == prefix:
        return ""
    if import_path.startswith(prefix + "/"):
        return import_path[len(prefix) + 1:]
    return None


__all__ = [
    "GoMod",
    "Workspace",
    "assumed_package_name",
    "escape_module_path",
    "find_go_mod",
    "package_of",
    "parse_go_mod",
]
