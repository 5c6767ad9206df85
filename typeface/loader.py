"""Tolerant loading of Go packages into a shared program."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Set, Tuple

from tree_sitter import Node, Tree

from .buildtags import BuildContext, select_files
from .config import LoaderConfig
from .errors import DiagnosticsError, PackageNotFound
from .gomod import Workspace, assumed_package_name, package_of
from .gotypes import Named, PackageRef, Signature, Type, TypeParamDecl
from .logging import get_logger
from .models import Diagnostic
from .parsing import iter_error_nodes, named_children, node_text, parse, string_value
from .resolver import TypeResolver

logger = get_logger("loader")

# cgo pseudo-package; never resolvable on disk.
_CGO_IMPORT = "C"


@dataclass(frozen=True)
class ImportRecord:
    path: str
    alias: str = ""


@dataclass
class SourceFile:
    """One parsed file of a package."""

    path: Path
    source: bytes
    tree: Tree
    package_name: Optional[str]
    imports: List[ImportRecord] = field(default_factory=list)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return node_text(node, self.source)

    def position(self, node: Node) -> str:
        return f"{self.path}:{node.start_point[0] + 1}"


class Package:
    """A fully or partially parsed Go package."""

    def __init__(
        self,
        program: "Program",
        path: str,
        name: str,
        directory: Path,
        files: List[SourceFile],
        diagnostics: List[Diagnostic],
    ) -> None:
        self.program = program
        self.path = path
        self.name = name
        self.directory = directory
        self.files = files
        self.diagnostics = diagnostics
        self.ref = PackageRef(path=path, name=name)
        self._type_specs: Dict[str, Tuple[SourceFile, Node]] = {}
        for file in files:
            for spec in _type_specs(file.root):
                name_node = spec.child_by_field_name("name")
                if name_node is not None:
                    self._type_specs.setdefault(file.text(name_node), (file, spec))

    @property
    def type_names(self) -> Set[str]:
        return set(self._type_specs)

    def iter_declarations(self) -> Iterator[Tuple[SourceFile, Node]]:
        """Yield every top-level declaration with the file it belongs to.

        Declarations that error recovery wrapped in an ERROR node are
        yielded as well.
        """
        for file in self.files:
            for node in _declarations(file.root):
                yield file, node

    def underlying_named(self, named: Named) -> Named:
        """Follow local type aliases until a defined type is reached."""
        seen: Set[str] = set()
        current = named
        while current.package == self.ref and current.name not in seen:
            seen.add(current.name)
            found = self._type_specs.get(current.name)
            if found is None or found[1].type != "type_alias":
                break
            alias_file, spec = found
            target = self.expression_type(spec.child_by_field_name("type"), alias_file)
            if not isinstance(target, Named):
                break
            logger.debug("Alias %s resolves to %s", current.name, target.name)
            current = target
        return current

    def resolver(self, file: SourceFile, type_params: Optional[Mapping[str, Type]] = None) -> TypeResolver:
        return TypeResolver(self, file, type_params)

    def expression_type(
        self, node: Node, file: SourceFile, type_params: Optional[Mapping[str, Type]] = None
    ) -> Type:
        return self.resolver(file, type_params).resolve(node)

    def method_signature(
        self, declaration: Node, file: SourceFile, type_params: Optional[Mapping[str, Type]] = None
    ) -> Signature:
        return self.resolver(file, type_params).signature(
            declaration.child_by_field_name("parameters"),
            declaration.child_by_field_name("result"),
        )

    def type_params(self, type_name: str) -> List[TypeParamDecl]:
        """Type parameters of a declared type, empty for non-generic types."""
        found = self._type_specs.get(type_name)
        if found is None:
            return []
        file, spec = found
        return self.resolver(file).type_parameters(spec.child_by_field_name("type_parameters"))


class Program:
    """Type universe shared by every package loaded in one run."""

    def __init__(self, workspace: Workspace, context: BuildContext) -> None:
        self.workspace = workspace
        self.context = context
        self.packages: Dict[str, Package] = {}
        self._names: Dict[str, PackageRef] = {}
        self._type_names: Dict[str, Set[str]] = {}

    def package(self, import_path: str) -> Optional[Package]:
        return self.packages.get(import_path)

    def package_ref(self, import_path: str) -> PackageRef:
        """Identity of an imported package, loading only its package clause."""
        loaded = self.packages.get(import_path)
        if loaded is not None:
            return loaded.ref
        cached = self._names.get(import_path)
        if cached is not None:
            return cached
        name: Optional[str] = None
        directory = self.workspace.locate(import_path)
        if directory is not None:
            name = _package_clause_name(directory, self.context)
        if name is None:
            ref = PackageRef(path=import_path, name=assumed_package_name(import_path), resolved=False)
        else:
            ref = PackageRef(path=import_path, name=name)
        self._names[import_path] = ref
        return ref

    def type_names(self, import_path: str) -> Set[str]:
        """Names of the types declared by an imported package, empty when it cannot be located."""
        loaded = self.packages.get(import_path)
        if loaded is not None:
            return loaded.type_names
        cached = self._type_names.get(import_path)
        if cached is not None:
            return cached
        names: Set[str] = set()
        directory = self.workspace.locate(import_path)
        if directory is not None:
            for file in _buildable_files(directory, self.context):
                for spec in _type_specs(file.root):
                    name_node = spec.child_by_field_name("name")
                    if name_node is not None:
                        names.add(file.text(name_node))
        self._type_names[import_path] = names
        return names


class ProgramLoader:
    """Loads the source and destination packages according to a LoaderConfig."""

    def __init__(self, config: Optional[LoaderConfig] = None) -> None:
        self.config = config or LoaderConfig()
        self.context = BuildContext.from_config(self.config)

    def load(self, source_location: str, destination: Path) -> Tuple[Package, Package]:
        source_dir: Optional[Path] = None
        candidate = Path(source_location).expanduser()
        if candidate.exists():
            source_path = package_of(candidate)
            source_dir = candidate.resolve() if candidate.is_dir() else candidate.resolve().parent
        else:
            source_path = source_location

        destination_dir = destination.expanduser().resolve()
        destination_path = package_of(destination_dir)

        workspace = Workspace(source_dir or destination_dir)
        if source_dir is not None:
            workspace.register(source_path, source_dir)
        workspace.register(destination_path, destination_dir)
        program = Program(workspace, self.context)

        source = self._load_package(program, source_path, required=True)
        if destination_path != source_path:
            destination_package = self._load_package(program, destination_path, required=False)
        else:
            destination_package = source

        if not self.config.allow_unresolved_imports:
            self._check_imports(program, source)
        return source, destination_package

    def _load_package(self, program: Program, import_path: str, *, required: bool) -> Package:
        directory = program.workspace.locate(import_path)
        if directory is None or not directory.is_dir():
            if required:
                raise PackageNotFound(import_path, "cannot find package directory")
            logger.debug("Package %s has no directory yet", import_path)
            return self._register(program, _empty_package(program, import_path, directory))

        files = self._parse_directory(directory)
        if not files:
            if required:
                raise PackageNotFound(import_path, f"no buildable Go source files in {directory}")
            logger.debug("Package %s has no Go files in %s", import_path, directory)
            return self._register(program, _empty_package(program, import_path, directory))

        name = next((file.package_name for file in files if file.package_name), None)
        kept: List[SourceFile] = []
        for file in files:
            if file.package_name is not None and file.package_name != name:
                logger.debug("Skipping %s: package %s, expected %s", file.path, file.package_name, name)
                continue
            kept.append(file)

        diagnostics = [diagnostic for file in kept for diagnostic in self._diagnostics(file)]
        if diagnostics:
            if not self.config.suppress_diagnostics:
                raise DiagnosticsError(import_path, diagnostics)
            for diagnostic in diagnostics:
                logger.debug("Ignoring diagnostic %s", diagnostic)

        package = Package(
            program, import_path, name or assumed_package_name(import_path), directory, kept, diagnostics
        )
        logger.debug("Loaded package %s (%s) with %d file(s)", import_path, package.name, len(kept))
        return self._register(program, package)

    @staticmethod
    def _register(program: Program, package: Package) -> Package:
        program.packages[package.path] = package
        return package

    def _parse_directory(self, directory: Path) -> List[SourceFile]:
        files: List[SourceFile] = []
        names = [entry.name for entry in directory.iterdir() if entry.is_file()]
        for name in select_files(names, self.context):
            path = directory / name
            try:
                raw = path.read_bytes()
            except OSError as exc:
                logger.debug("Skipping unreadable file %s: %s", path, exc)
                continue
            text = raw.decode("utf-8", errors="replace")
            if not self.context.matches_source(text, str(path)):
                logger.debug("Skipping %s: build constraints not satisfied", path)
                continue
            files.append(_parse_file(path, raw))
        return files

    def _diagnostics(self, file: SourceFile) -> List[Diagnostic]:
        found: List[Diagnostic] = []
        for node in iter_error_nodes(file.root, skip_bodies=self.config.skip_function_bodies):
            row, column = node.start_point[0] + 1, node.start_point[1] + 1
            if node.is_missing:
                message = f"missing {node.type}"
            else:
                message = f"syntax error near {file.text(node)[:40]!r}"
            found.append(Diagnostic(str(file.path), row, column, message))
        return found

    def _check_imports(self, program: Program, package: Package) -> None:
        for file in package.files:
            for spec in file.imports:
                if spec.path == _CGO_IMPORT:
                    continue
                if program.package(spec.path) is None and not program.package_ref(spec.path).resolved:
                    raise PackageNotFound(spec.path, f"imported by {file.path}")


def _empty_package(program: Program, import_path: str, directory: Optional[Path]) -> Package:
    return Package(program, import_path, assumed_package_name(import_path), directory or Path(), [], [])


def _parse_file(path: Path, raw: bytes) -> SourceFile:
    tree = parse(raw)
    root = tree.root_node
    package_name: Optional[str] = None
    imports: List[ImportRecord] = []
    for node in named_children(root):
        if node.type == "package_clause":
            identifier = named_children(node)
            if identifier:
                package_name = node_text(identifier[0], raw)
        elif node.type == "import_declaration":
            imports.extend(_import_records(node, raw))
    return SourceFile(path=path, source=raw, tree=tree, package_name=package_name, imports=imports)


def _import_records(node: Node, source: bytes) -> Iterator[ImportRecord]:
    for child in named_children(node):
        if child.type == "import_spec_list":
            yield from _import_records(child, source)
        elif child.type == "import_spec":
            path = child.child_by_field_name("path")
            if path is None:
                continue
            alias = child.child_by_field_name("name")
            yield ImportRecord(
                path=string_value(path, source),
                alias=node_text(alias, source) if alias is not None else "",
            )


def _type_specs(root: Node) -> Iterator[Node]:
    for node in named_children(root):
        if node.type != "type_declaration":
            continue
        for spec in named_children(node):
            if spec.type in {"type_spec", "type_alias"}:
                yield spec


def _declarations(node: Node) -> Iterator[Node]:
    for child in named_children(node):
        if child.type == "ERROR":
            yield from _declarations(child)
        else:
            yield child


def _buildable_files(directory: Path, context: BuildContext) -> Iterator[SourceFile]:
    try:
        names = [entry.name for entry in directory.iterdir() if entry.is_file()]
    except OSError:
        return
    for name in select_files(names, context):
        try:
            raw = (directory / name).read_bytes()
        except OSError:
            continue
        if not context.matches_source(raw.decode("utf-8", errors="replace"), name):
            continue
        yield _parse_file(directory / name, raw)


def _package_clause_name(directory: Path, context: BuildContext) -> Optional[str]:
    for file in _buildable_files(directory, context):
        if file.package_name:
            return file.package_name
    return None


__all__ = ["ImportRecord", "Package", "Program", "ProgramLoader", "SourceFile"]
