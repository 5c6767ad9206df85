"""Rendering of resolved signatures as Go source text."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from .gotypes import (
    Array,
    Basic,
    Chan,
    ChanDir,
    Interface,
    Invalid,
    Map,
    Named,
    PackageRef,
    Pointer,
    Signature,
    Slice,
    Struct,
    Type,
    TypeParam,
    TypeParamDecl,
    Union,
    Var,
)


class SignatureRenderer:
    """Prints types relative to a destination package.

    Named types of the destination package are printed bare, every other
    package's types are qualified with that package's name. Packages used
    for qualification are collected in ``used_packages``.
    """

    def __init__(self, destination_path: str) -> None:
        self.destination_path = destination_path
        self.used_packages: Dict[str, PackageRef] = {}

    def render(self, signature: Signature) -> str:
        """Render ``(params) results`` for a method line."""
        text = self._tuple(signature.params, signature.variadic)
        results = signature.results
        if not results:
            return text
        if len(results) == 1 and not results[0].name:
            return f"{text} {self.type_string(results[0].type)}"
        return f"{text} {self._tuple(results, False)}"

    def type_params(self, params: Sequence[TypeParamDecl]) -> str:
        if not params:
            return ""
        rendered = [f"{param.name} {self.type_string(param.constraint)}" for param in params]
        return f"[{', '.join(rendered)}]"

    def qualifier(self, package: PackageRef) -> str:
        if package.path == self.destination_path:
            return ""
        if package.path:
            self.used_packages[package.path] = package
        return package.name

    def type_string(self, value: Type) -> str:
        if isinstance(value, (Basic, TypeParam)):
            return value.name
        if isinstance(value, Named):
            prefix = self.qualifier(value.package) if value.package is not None else ""
            name = f"{prefix}.{value.name}" if prefix else value.name
            if value.args:
                name += f"[{self._join(value.args)}]"
            return name
        if isinstance(value, Pointer):
            return f"*{self.type_string(value.elem)}"
        if isinstance(value, Slice):
            return f"[]{self.type_string(value.elem)}"
        if isinstance(value, Array):
            return f"[{value.length}]{self.type_string(value.elem)}"
        if isinstance(value, Map):
            return f"map[{self.type_string(value.key)}]{self.type_string(value.value)}"
        if isinstance(value, Chan):
            return self._chan(value)
        if isinstance(value, Signature):
            return f"func{self.render(value)}"
        if isinstance(value, Struct):
            fields: List[str] = []
            for field in value.fields:
                text = self.type_string(field.type) if field.embedded else f"{field.name} {self.type_string(field.type)}"
                if field.tag:
                    text += f" {field.tag}"
                fields.append(text)
            return f"struct{{{'; '.join(fields)}}}"
        if isinstance(value, Interface):
            elements = [f"{method.name}{self.render(method.signature)}" for method in value.methods]
            elements.extend(self.type_string(embedded) for embedded in value.embeddeds)
            return f"interface{{{'; '.join(elements)}}}"
        if isinstance(value, Union):
            return " | ".join(("~" if term.tilde else "") + self.type_string(term.type) for term in value.terms)
        if isinstance(value, Invalid):
            return value.text or "invalid type"
        raise TypeError(f"cannot render {value!r}")

    def _chan(self, value: Chan) -> str:
        elem = self.type_string(value.elem)
        if value.direction is ChanDir.RECV:
            return f"<-chan {elem}"
        if value.direction is ChanDir.SEND:
            return f"chan<- {elem}"
        if isinstance(value.elem, Chan) and value.elem.direction is ChanDir.RECV:
            return f"chan ({elem})"
        return f"chan {elem}"

    def _tuple(self, variables: Sequence[Var], variadic: bool) -> str:
        parts: List[str] = []
        last = len(variables) - 1
        for index, variable in enumerate(variables):
            text = self.type_string(variable.type)
            if variadic and index == last:
                text = f"...{text}"
            parts.append(f"{variable.name} {text}" if variable.name else text)
        return f"({', '.join(parts)})"

    def _join(self, values: Iterable[Type]) -> str:
        return ", ".join(self.type_string(value) for value in values)


__all__ = ["SignatureRenderer"]
