"""Core data models shared across typeface components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from .gotypes import Signature


@dataclass(frozen=True)
class TargetSpec:
    """What to extract and where the generated interface goes."""

    source_location: str
    type_name: str
    interface_name: str
    destination_package: str
    output_path: Path


@dataclass(frozen=True)
class Diagnostic:
    """Syntax problem reported while parsing a source file."""

    path: str
    line: int
    column: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: {self.message}"


@dataclass(frozen=True)
class MethodRecord:
    """Exported method bound to the target type."""

    name: str
    signature: Signature
    doc: Tuple[str, ...] = ()
    file: str = ""
    line: int = 0

    @property
    def position(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class ImportSpec:
    """Import line of the generated file."""

    path: str
    alias: str = ""

    def render(self) -> str:
        if self.alias:
            return f'{self.alias} "{self.path}"'
        return f'"{self.path}"'


@dataclass
class RenderedInterface:
    """Interface declaration ready to be written to disk."""

    header: str
    name: str
    body: List[str]
    doc: str = ""
    type_params: str = ""
    imports: List[ImportSpec] = field(default_factory=list)

    def declaration(self) -> str:
        lines: List[str] = []
        if self.doc:
            lines.append(self.doc)
        lines.append(f"type {self.name}{self.type_params} interface {{")
        for entry in self.body:
            # Block comments span several lines; each one is indented.
            lines.extend(f"\t{line}" if line else "" for line in entry.split("\n"))
        lines.append("}")
        return "\n".join(lines)

    def source(self, package_name: str) -> str:
        """Return the complete Go file for this interface."""
        parts = [self.header.rstrip("\n"), "", f"package {package_name}", ""]
        if len(self.imports) == 1:
            parts.extend([f"import {self.imports[0].render()}", ""])
        elif self.imports:
            parts.append("import (")
            parts.extend(f"\t{spec.render()}" for spec in self.imports)
            parts.extend([")", ""])
        parts.append(self.declaration())
        return "\n".join(parts) + "\n"
