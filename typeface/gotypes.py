"""Declaration-level model of Go types.

Only the shapes needed to print method signatures are modelled. Types are
immutable values; identity of named types is the pair (package path, name).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

PREDECLARED_TYPES = frozenset(
    {
        "any",
        "bool",
        "byte",
        "comparable",
        "complex64",
        "complex128",
        "error",
        "float32",
        "float64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "rune",
        "string",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
    }
)


@dataclass(frozen=True)
class PackageRef:
    """A package as known to the program: import path plus package name.

    An empty path marks a qualifier that matched none of the file's imports.
    """

    path: str
    name: str
    resolved: bool = True


class Type:
    """Base class of every type value."""


@dataclass(frozen=True)
class Basic(Type):
    name: str


@dataclass(frozen=True)
class Named(Type):
    package: Optional[PackageRef]
    name: str
    args: Tuple[Type, ...] = ()


@dataclass(frozen=True)
class TypeParam(Type):
    name: str


@dataclass(frozen=True)
class Pointer(Type):
    elem: Type


@dataclass(frozen=True)
class Slice(Type):
    elem: Type


@dataclass(frozen=True)
class Array(Type):
    length: str
    elem: Type


@dataclass(frozen=True)
class Map(Type):
    key: Type
    value: Type


class ChanDir(enum.Enum):
    BOTH = "both"
    SEND = "send"
    RECV = "recv"


@dataclass(frozen=True)
class Chan(Type):
    direction: ChanDir
    elem: Type


@dataclass(frozen=True)
class Var:
    """Parameter or result; name is empty when unnamed."""

    name: str
    type: Type


@dataclass(frozen=True)
class Signature(Type):
    params: Tuple[Var, ...] = ()
    results: Tuple[Var, ...] = ()
    variadic: bool = False


@dataclass(frozen=True)
class Field:
    name: str
    type: Type
    embedded: bool = False
    tag: str = ""


@dataclass(frozen=True)
class Struct(Type):
    fields: Tuple[Field, ...] = ()


@dataclass(frozen=True)
class InterfaceMethod:
    name: str
    signature: Signature


@dataclass(frozen=True)
class Interface(Type):
    methods: Tuple[InterfaceMethod, ...] = ()
    embeddeds: Tuple[Type, ...] = ()


@dataclass(frozen=True)
class Term:
    tilde: bool
    type: Type


@dataclass(frozen=True)
class Union(Type):
    terms: Tuple[Term, ...]


@dataclass(frozen=True)
class Invalid(Type):
    """Expression that could not be resolved; printed as written."""

    text: str


@dataclass(frozen=True)
class TypeParamDecl:
    """One type parameter of a generic declaration."""

    name: str
    constraint: Type


__all__ = [
    "Array",
    "Basic",
    "Chan",
    "ChanDir",
    "Field",
    "Interface",
    "InterfaceMethod",
    "Invalid",
    "Map",
    "Named",
    "PREDECLARED_TYPES",
    "PackageRef",
    "Pointer",
    "Signature",
    "Slice",
    "Struct",
    "Term",
    "Type",
    "TypeParam",
    "TypeParamDecl",
    "Union",
    "Var",
]
