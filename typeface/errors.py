"""Error taxonomy for interface generation failures."""

from __future__ import annotations

from typing import Sequence

from .models import Diagnostic


class TypefaceError(RuntimeError):
    """Base class for every fatal condition reported by the CLI."""


class PackageNotFound(TypefaceError):
    """Raised when a Go package cannot be located or has no buildable files."""

    def __init__(self, import_path: str, reason: str | None = None) -> None:
        message = f"unable to load package: {import_path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.import_path = import_path


class TypeResolutionFailure(TypefaceError):
    """Raised when a receiver or method type cannot be resolved."""


class DuplicateMethodError(TypeResolutionFailure):
    """Raised when the target type declares the same exported method twice."""

    def __init__(self, type_name: str, method: str, first: str, second: str) -> None:
        super().__init__(
            f"method {type_name}.{method} is declared twice: {first} and {second}"
        )
        self.type_name = type_name
        self.method = method


class NoMethodsFound(TypefaceError):
    """Raised when the target type is missing or has no exported methods."""

    def __init__(self, type_name: str, import_path: str) -> None:
        super().__init__(
            f"type {type_name} was not found in {import_path} or doesn't have any exported methods"
        )
        self.type_name = type_name
        self.import_path = import_path


class OutputWriteFailure(TypefaceError):
    """Raised when the output file cannot be removed or written."""


class DiagnosticsError(TypefaceError):
    """Raised for syntax diagnostics when diagnostic suppression is disabled."""

    def __init__(self, import_path: str, diagnostics: Sequence[Diagnostic]) -> None:
        lines = [f"package {import_path} has {len(diagnostics)} syntax error(s):"]
        lines.extend(f"  {diagnostic}" for diagnostic in diagnostics)
        super().__init__("\n".join(lines))
        self.diagnostics = list(diagnostics)


__all__ = [
    "DiagnosticsError",
    "DuplicateMethodError",
    "NoMethodsFound",
    "OutputWriteFailure",
    "PackageNotFound",
    "TypeResolutionFailure",
    "TypefaceError",
]
