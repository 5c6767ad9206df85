"""Wires loading, extraction and emission into one generation run."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

from .config import LoaderConfig
from .emitter import InterfaceEmitter
from .errors import OutputWriteFailure
from .extractor import MethodExtractor
from .loader import ProgramLoader
from .logging import get_logger
from .models import RenderedInterface, TargetSpec
from .renderer import SignatureRenderer

logger = get_logger("generator")


class Generator:
    """Runs load -> extract -> emit -> write for a single target."""

    def __init__(self, config: Optional[LoaderConfig] = None) -> None:
        self.loader = ProgramLoader(config)

    def generate(self, target: TargetSpec) -> RenderedInterface:
        """Build the interface without touching the output file."""
        output_dir = target.output_path.expanduser().resolve().parent
        source, destination = self.loader.load(target.source_location, output_dir)
        logger.debug("Source package %s, destination package %s", source.path, destination.path)

        methods = MethodExtractor(source).extract(target.type_name)
        emitter = InterfaceEmitter(SignatureRenderer(destination.path))
        return emitter.emit(
            methods,
            target.interface_name,
            source.path,
            target.type_name,
            source.type_params(target.type_name),
        )

    def run(self, target: TargetSpec) -> Path:
        """Regenerate the output file, replacing any previous version."""
        output = target.output_path.expanduser()
        remove_output(output)
        rendered = self.generate(target)
        write_output(output, rendered.source(target.destination_package))
        logger.info("Interface %s written to %s", target.interface_name, output)
        return output


def remove_output(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        raise OutputWriteFailure(f"failed to remove {path}: {exc}") from exc
    logger.debug("Removed previous output %s", path)


def write_output(path: Path, content: str) -> None:
    """Write content via a temporary sibling so readers never see a partial file."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    except OSError as exc:
        raise OutputWriteFailure(f"failed to write {path}: {exc}") from exc
    try:
        with os.fdopen(handle, "w", encoding="utf-8", newline="\n") as stream:
            stream.write(content)
        os.replace(temp_name, path)
    except OSError as exc:
        Path(temp_name).unlink(missing_ok=True)
        raise OutputWriteFailure(f"failed to write {path}: {exc}") from exc


__all__ = ["Generator", "remove_output", "write_output"]
