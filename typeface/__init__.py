"""Generate Go interfaces from the exported methods of concrete types."""

from .emitter import InterfaceEmitter
from .errors import (
    DiagnosticsError,
    DuplicateMethodError,
    NoMethodsFound,
    OutputWriteFailure,
    PackageNotFound,
    TypeResolutionFailure,
    TypefaceError,
)
from .extractor import MethodExtractor
from .generator import Generator
from .loader import Package, Program, ProgramLoader
from .models import MethodRecord, RenderedInterface, TargetSpec
from .renderer import SignatureRenderer

__version__ = "0.1.0"

__all__ = [
    "DiagnosticsError",
    "DuplicateMethodError",
    "Generator",
    "InterfaceEmitter",
    "MethodExtractor",
    "MethodRecord",
    "NoMethodsFound",
    "OutputWriteFailure",
    "Package",
    "PackageNotFound",
    "Program",
    "ProgramLoader",
    "RenderedInterface",
    "SignatureRenderer",
    "TargetSpec",
    "TypeResolutionFailure",
    "TypefaceError",
]
