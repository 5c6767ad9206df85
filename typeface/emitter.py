"""Builds the generated interface declaration from extracted methods."""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from .gomod import assumed_package_name
from .logging import get_logger
from .gotypes import PackageRef, TypeParamDecl
from .models import ImportSpec, MethodRecord, RenderedInterface
from .renderer import SignatureRenderer

logger = get_logger("emitter")

TOOL_NAME = "typeface"
MOCK_TOOL = "github.com/gojuno/minimock"


class InterfaceEmitter:
    """Renders a sorted method set into a single interface construct."""

    def __init__(self, renderer: SignatureRenderer) -> None:
        self.renderer = renderer

    def emit(
        self,
        methods: Mapping[str, MethodRecord],
        interface_name: str,
        source_location: str,
        type_name: str,
        type_params: Sequence[TypeParamDecl] = (),
    ) -> RenderedInterface:
        body: List[str] = []
        for name in sorted(methods):
            record = methods[name]
            if record.doc and body:
                body.append("")
            body.extend(record.doc)
            body.append(f"{name}{self.renderer.render(record.signature)}")

        rendered_params = self.renderer.type_params(type_params)
        imports = _imports(self.renderer.used_packages)
        return RenderedInterface(
            header=provenance_header(type_name, source_location, self.renderer.destination_path, interface_name),
            name=interface_name,
            body=body,
            doc=f"// {interface_name} contains exportable methods signatures of the {source_location}.{type_name}",
            type_params=rendered_params,
            imports=imports,
        )


def provenance_header(type_name: str, source_location: str, destination_path: str, interface_name: str) -> str:
    lines = [
        f"Code generated by {TOOL_NAME}. DO NOT EDIT.",
        "",
        f'The original type "{type_name}" can be found in {source_location} package.',
        f"You can generate mock for this interface using {MOCK_TOOL}:",
        "",
        f"minimock -i {destination_path}.{interface_name} -o ./",
    ]
    return "\n".join(f"// {line}" if line else "//" for line in lines) + "\n"


def _imports(packages: Dict[str, PackageRef]) -> List[ImportSpec]:
    specs: List[ImportSpec] = []
    seen: Dict[str, str] = {}
    for path in sorted(packages):
        ref = packages[path]
        if ref.name in seen:
            logger.warning(
                "Packages %s and %s are both referenced as %s; the generated file will not compile",
                seen[ref.name],
                path,
                ref.name,
            )
        seen[ref.name] = path
        alias = ref.name if ref.name != assumed_package_name(path) else ""
        specs.append(ImportSpec(path=path, alias=alias))
    return specs


__all__ = ["InterfaceEmitter", "MOCK_TOOL", "TOOL_NAME", "provenance_header"]
