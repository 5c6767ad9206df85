"""Collects the exported methods bound to a named type."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from tree_sitter import Node

from .errors import DuplicateMethodError, NoMethodsFound, TypeResolutionFailure
from .gotypes import Named, Type, TypeParam
from .loader import Package, SourceFile
from .logging import get_logger
from .models import MethodRecord
from .parsing import leading_comments, named_children

logger = get_logger("extractor")


def is_exported(name: str) -> bool:
    return name[:1].isupper()


class MethodExtractor:
    """Walks a package and records exported methods of one receiver type."""

    def __init__(self, package: Package) -> None:
        self.package = package

    def extract(self, type_name: str) -> Dict[str, MethodRecord]:
        methods: Dict[str, MethodRecord] = {}
        declared_params = [param.name for param in self.package.type_params(type_name)]
        for file, node in self.package.iter_declarations():
            if node.type == "method_declaration":
                self._method(file, node, type_name, declared_params, methods)

        if self.package.diagnostics:
            self._report_unparsed(type_name, methods)
        if not methods:
            raise NoMethodsFound(type_name, self.package.path)
        logger.debug("Found %d exported method(s) on %s.%s", len(methods), self.package.path, type_name)
        return methods

    def _report_unparsed(self, type_name: str, methods: Dict[str, MethodRecord]) -> None:
        """Warn about methods of type_name lost to error recovery in files with syntax errors."""
        pattern = re.compile(
            rf"^func\s*\(\s*(?:\w+\s+)?\*?\s*{re.escape(type_name)}\b[^)]*\)\s*(\w+)", re.MULTILINE
        )
        for file in self.package.files:
            if not file.root.has_error:
                continue
            text = file.source.decode("utf-8", errors="replace")
            for match in pattern.finditer(text):
                name = match.group(1)
                if not is_exported(name) or name in methods:
                    continue
                logger.warning(
                    "Method %s.%s at %s:%d is inside a syntax error and was left out",
                    type_name,
                    name,
                    file.path,
                    text.count("\n", 0, match.start()) + 1,
                )

    def _method(
        self,
        file: SourceFile,
        node: Node,
        type_name: str,
        declared_params: List[str],
        methods: Dict[str, MethodRecord],
    ) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = file.text(name_node)
        if not is_exported(name):
            return

        receiver, receiver_params = self.receiver_type(file, node)
        if receiver.name != type_name:
            return

        type_params: Dict[str, Type] = {}
        if len(receiver_params) == len(declared_params):
            for written, declared in zip(receiver_params, declared_params):
                if written != "_":
                    type_params[written] = TypeParam(declared)
        else:
            type_params = {param: TypeParam(param) for param in receiver_params if param != "_"}

        if node.child_by_field_name("parameters") is None:
            raise TypeResolutionFailure(
                f"failed to resolve signature of {type_name}.{name} at {file.position(node)}"
            )
        signature = self.package.method_signature(node, file, type_params)

        record = MethodRecord(
            name=name,
            signature=signature,
            doc=tuple(leading_comments(node, file.source)),
            file=str(file.path),
            line=node.start_point[0] + 1,
        )
        previous = methods.get(name)
        if previous is not None:
            raise DuplicateMethodError(type_name, name, previous.position, record.position)
        methods[name] = record

    def receiver_type(self, file: SourceFile, node: Node) -> Tuple[Named, List[str]]:
        """Resolve a method's receiver, through local aliases, to its named type and written type parameter names."""
        receiver_list = node.child_by_field_name("receiver")
        parameters = named_children(receiver_list) if receiver_list is not None else []
        type_node: Optional[Node] = parameters[0].child_by_field_name("type") if parameters else None
        if type_node is None:
            raise TypeResolutionFailure(f"failed to get receiver type of method at {file.position(node)}")

        base = _strip_indirection(type_node)
        params: List[str] = []
        if base.type == "generic_type":
            arguments = base.child_by_field_name("type_arguments")
            params = [file.text(argument) for argument in named_children(arguments)] if arguments else []
            base = base.child_by_field_name("type") or base

        if base.type not in {"type_identifier", "identifier"}:
            raise TypeResolutionFailure(
                f"failed to get expression for receiver {file.text(type_node)!r} at {file.position(node)}"
            )
        resolved = self.package.expression_type(base, file)
        if not isinstance(resolved, Named):
            raise TypeResolutionFailure(
                f"receiver {file.text(type_node)!r} at {file.position(node)} is not a named type"
            )
        return self.package.underlying_named(resolved), params


def _strip_indirection(node: Node) -> Node:
    current = node
    stripped_pointer = False
    while current.type in {"parenthesized_type", "pointer_type"}:
        if current.type == "pointer_type":
            if stripped_pointer:
                break
            stripped_pointer = True
        children = named_children(current)
        if not children:
            break
        current = children[0]
    return current


__all__ = ["MethodExtractor", "is_exported"]
