"""Resolution of Go type expressions to declaration-level types."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple

from tree_sitter import Node

from .gotypes import (
    PREDECLARED_TYPES,
    Array,
    Basic,
    Chan,
    ChanDir,
    Field,
    Interface,
    InterfaceMethod,
    Invalid,
    Map,
    Named,
    PackageRef,
    Pointer,
    Signature,
    Slice,
    Struct,
    Term,
    Type,
    TypeParam,
    TypeParamDecl,
    Union,
    Var,
)
from .logging import get_logger
from .parsing import field_children, named_children, node_text

if TYPE_CHECKING:  # pragma: no cover
    from .loader import Package, SourceFile

logger = get_logger("resolver")

_UNION_NODES = {"type_elem", "type_constraint", "constraint_elem", "constraint_term"}


class TypeResolver:
    """Resolves type expressions of one file in the scope of its package.

    ``type_params`` maps type parameter names visible in the current
    declaration to the type they stand for, which lets a generic receiver's
    parameter names be renamed to the type declaration's names.
    """

    def __init__(
        self,
        package: "Package",
        file: "SourceFile",
        type_params: Optional[Mapping[str, Type]] = None,
    ) -> None:
        self.package = package
        self.file = file
        self.type_params: Dict[str, Type] = dict(type_params or {})

    def text(self, node: Node) -> str:
        return node_text(node, self.file.source)

    def resolve(self, node: Optional[Node]) -> Type:
        if node is None:
            return Invalid("")
        kind = node.type
        if kind in {"type_identifier", "identifier"}:
            return self.lookup(self.text(node))
        if kind == "qualified_type":
            return self._qualified(node)
        if kind == "generic_type":
            return self._generic(node)
        if kind == "pointer_type":
            return Pointer(self.resolve(_first(node)))
        if kind == "parenthesized_type":
            return self.resolve(_first(node))
        if kind == "slice_type":
            return Slice(self.resolve(node.child_by_field_name("element")))
        if kind == "array_type":
            length = node.child_by_field_name("length")
            return Array(self.text(length) if length else "", self.resolve(node.child_by_field_name("element")))
        if kind == "implicit_length_array_type":
            return Array("...", self.resolve(node.child_by_field_name("element")))
        if kind == "map_type":
            return Map(
                self.resolve(node.child_by_field_name("key")),
                self.resolve(node.child_by_field_name("value")),
            )
        if kind == "channel_type":
            return Chan(_channel_direction(node), self.resolve(node.child_by_field_name("value")))
        if kind == "function_type":
            return self.signature(
                node.child_by_field_name("parameters"), node.child_by_field_name("result")
            )
        if kind == "struct_type":
            return self._struct(node)
        if kind == "interface_type":
            return self._interface(node)
        if kind in _UNION_NODES or kind == "negated_type":
            return self._union(node)
        logger.debug("Unresolved type expression %r (%s)", self.text(node), kind)
        return Invalid(self.text(node))

    def lookup(self, name: str) -> Type:
        """Resolve an unqualified type name: type parameters, package scope, universe, then dot imports."""
        if name in self.type_params:
            return self.type_params[name]
        if name in self.package.type_names:
            return Named(self.package.ref, name)
        if name in PREDECLARED_TYPES:
            return Basic(name)
        program = self.package.program
        for spec in self.file.imports:
            if spec.alias == "." and name in program.type_names(spec.path):
                return Named(program.package_ref(spec.path), name)
        # Declared in a file excluded by build constraints or in a dot import that cannot be located.
        logger.debug("Type %s is not declared in %s; assuming package scope", name, self.package.path)
        return Named(self.package.ref, name)

    def package_for(self, identifier: str) -> PackageRef:
        for spec in self.file.imports:
            if spec.alias in {"_", "."}:
                continue
            if spec.alias == identifier:
                return self.package.program.package_ref(spec.path)
        for spec in self.file.imports:
            if spec.alias:
                continue
            ref = self.package.program.package_ref(spec.path)
            if ref.name == identifier:
                return ref
        logger.debug("No import in %s provides package %s", self.file.path, identifier)
        return PackageRef(path="", name=identifier, resolved=False)

    def _qualified(self, node: Node) -> Type:
        package = node.child_by_field_name("package")
        name = node.child_by_field_name("name")
        if package is None or name is None:
            return Invalid(self.text(node))
        return Named(self.package_for(self.text(package)), self.text(name))

    def _generic(self, node: Node) -> Type:
        base = self.resolve(node.child_by_field_name("type"))
        arguments = node.child_by_field_name("type_arguments")
        args = tuple(self.resolve(child) for child in named_children(arguments)) if arguments else ()
        if isinstance(base, Named):
            return Named(base.package, base.name, args)
        return Invalid(self.text(node))

    def signature(self, parameters: Optional[Node], result: Optional[Node]) -> Signature:
        params, variadic = self._tuple(parameters)
        results: Tuple[Var, ...] = ()
        if result is not None:
            if result.type == "parameter_list":
                results, _ = self._tuple(result)
            else:
                results = (Var("", self.resolve(result)),)
        return Signature(params=params, results=results, variadic=variadic)

    def _tuple(self, node: Optional[Node]) -> Tuple[Tuple[Var, ...], bool]:
        if node is None:
            return (), False
        variables: List[Var] = []
        variadic = False
        for child in named_children(node):
            type_node = child.child_by_field_name("type")
            if child.type == "variadic_parameter_declaration":
                variadic = True
                name = child.child_by_field_name("name")
                variables.append(Var(self.text(name) if name else "", self.resolve(type_node)))
            elif child.type == "parameter_declaration":
                resolved = self.resolve(type_node)
                names = field_children(child, "name")
                if not names:
                    variables.append(Var("", resolved))
                variables.extend(Var(self.text(name), resolved) for name in names)
            else:
                variables.append(Var("", Invalid(self.text(child))))
        return tuple(variables), variadic

    def _struct(self, node: Node) -> Struct:
        fields: List[Field] = []
        for body in named_children(node):
            for declaration in named_children(body):
                if declaration.type != "field_declaration":
                    continue
                resolved = self.resolve(declaration.child_by_field_name("type"))
                tag_node = declaration.child_by_field_name("tag")
                tag = self.text(tag_node) if tag_node else ""
                names = field_children(declaration, "name")
                if not names:
                    if any(child.type == "*" for child in declaration.children):
                        resolved = Pointer(resolved)
                    fields.append(Field("", resolved, embedded=True, tag=tag))
                fields.extend(Field(self.text(name), resolved, tag=tag) for name in names)
        return Struct(tuple(fields))

    def _interface(self, node: Node) -> Interface:
        methods: List[InterfaceMethod] = []
        embeddeds: List[Type] = []
        for child in named_children(node):
            if child.type in {"method_elem", "method_spec"}:
                name = child.child_by_field_name("name")
                methods.append(
                    InterfaceMethod(
                        self.text(name) if name else "",
                        self.signature(
                            child.child_by_field_name("parameters"),
                            child.child_by_field_name("result"),
                        ),
                    )
                )
            elif child.type == "method_spec_list":
                nested = self._interface(child)
                methods.extend(nested.methods)
                embeddeds.extend(nested.embeddeds)
            else:
                embeddeds.append(self.resolve(child))
        return Interface(tuple(methods), tuple(embeddeds))

    def _union(self, node: Node) -> Type:
        if node.type == "negated_type":
            return Union((Term(True, self.resolve(_first(node))),))
        terms: List[Term] = []
        for child in named_children(node):
            if child.type == "negated_type":
                terms.append(Term(True, self.resolve(_first(child))))
            else:
                resolved = self.resolve(child)
                if isinstance(resolved, Union):
                    terms.extend(resolved.terms)
                else:
                    terms.append(Term(False, resolved))
        if len(terms) == 1 and not terms[0].tilde:
            return terms[0].type
        return Union(tuple(terms))

    def type_parameters(self, node: Optional[Node]) -> List[TypeParamDecl]:
        """Resolve a type_parameter_list; parameter names are in scope for constraints."""
        if node is None:
            return []
        declarations = named_children(node)
        names: List[Tuple[str, Optional[Node]]] = []
        for declaration in declarations:
            constraint = declaration.child_by_field_name("type")
            for name in field_children(declaration, "name"):
                names.append((self.text(name), constraint))
        scoped = TypeResolver(
            self.package,
            self.file,
            {**self.type_params, **{name: TypeParam(name) for name, _ in names}},
        )
        return [
            TypeParamDecl(name, scoped.resolve(constraint) if constraint is not None else Basic("any"))
            for name, constraint in names
        ]


def _first(node: Node) -> Optional[Node]:
    children = named_children(node)
    return children[0] if children else None


def _channel_direction(node: Node) -> ChanDir:
    tokens = [child.type for child in node.children if not child.is_named]
    if tokens and tokens[0] == "<-":
        return ChanDir.RECV
    if "<-" in tokens:
        return ChanDir.SEND
    return ChanDir.BOTH


__all__ = ["TypeResolver"]
