"""Tests for resolving Go type expressions from parsed source."""

from __future__ import annotations

import pytest

from tests._fixtures.module_builder import ModuleBuilder
from typeface.extractor import MethodExtractor
from typeface.loader import Package, ProgramLoader
from typeface.renderer import SignatureRenderer

SHAPES = """
package shapes

import (
	"io"
	"net/http"

	yml "gopkg.in/yaml.v3"
)

type Shape struct{}

type Pair[K comparable, V any] struct{}

func (s *Shape) Handle(w http.ResponseWriter, r *http.Request) {}

func (s *Shape) Stream(in <-chan []byte, out chan<- error, both chan int) {}

func (s *Shape) Lookup(m map[string]*Pair[string, int]) (v Pair[int, Shape], ok bool) { return }

func (s *Shape) Visit(fn func(int, string) error) func() { return nil }

func (s *Shape) Options(opts struct{ Name string; Size int }) interface{ Len() int; io.Closer } { return nil }

func (s *Shape) Raw(buf [16]byte) yml.Node { return yml.Node{} }

func (s *Shape) Any(values ...interface{}) {}

func (s *Shape) Pairs(a, b Pair[string, string]) {}

func (s *Shape) Undeclared() Missing { return Missing{} }
"""

FOREIGN = {
    "Handle": "(w http.ResponseWriter, r *http.Request)",
    "Stream": "(in <-chan []byte, out chan<- error, both chan int)",
    "Lookup": "(m map[string]*shapes.Pair[string, int]) (v shapes.Pair[int, shapes.Shape], ok bool)",
    "Visit": "(fn func(int, string) error) func()",
    "Options": "(opts struct{Name string; Size int}) interface{Len() int; io.Closer}",
    "Raw": "(buf [16]byte) yaml.Node",
    "Any": "(values ...interface{})",
    "Pairs": "(a shapes.Pair[string, string], b shapes.Pair[string, string])",
    "Undeclared": "() shapes.Missing",
}


@pytest.fixture
def shapes(module_builder: ModuleBuilder) -> Package:
    module_builder.write({"shapes/shapes.go": SHAPES})
    source, _ = ProgramLoader().load(str(module_builder.path("shapes")), module_builder.path("mocks"))
    return source


@pytest.mark.parametrize("method", sorted(FOREIGN))
def test_signatures_render_qualified_for_other_packages(shapes: Package, method: str) -> None:
    methods = MethodExtractor(shapes).extract("Shape")

    assert SignatureRenderer("example.com/demo/mocks").render(methods[method].signature) == FOREIGN[method]


def test_signatures_render_unqualified_inside_source_package(shapes: Package) -> None:
    methods = MethodExtractor(shapes).extract("Shape")
    renderer = SignatureRenderer(shapes.path)

    assert renderer.render(methods["Lookup"].signature) == (
        "(m map[string]*Pair[string, int]) (v Pair[int, Shape], ok bool)"
    )
    assert sorted(renderer.used_packages) == []


def test_type_parameters_of_declarations(shapes: Package) -> None:
    renderer = SignatureRenderer(shapes.path)

    assert renderer.type_params(shapes.type_params("Pair")) == "[K comparable, V any]"
    assert shapes.type_params("Shape") == []
    assert shapes.type_params("Nothing") == []


def test_expression_type_resolves_imports(shapes: Package) -> None:
    methods = MethodExtractor(shapes).extract("Shape")
    renderer = SignatureRenderer("example.com/demo/mocks")

    for record in methods.values():
        renderer.render(record.signature)

    assert sorted(renderer.used_packages) == ["example.com/demo/shapes", "gopkg.in/yaml.v3", "io", "net/http"]


def test_dot_imported_types_are_qualified_with_their_package(module_builder: ModuleBuilder) -> None:
    module_builder.write(
        {
            "models/item.go": "package models\n\ntype Item struct{}\n",
            "widgets/widget.go": """
                package widgets

                import . "example.com/demo/models"

                type Widget struct{}

                func (w Widget) Get() Item { return Item{} }

                func (w Widget) Missing() Unknown { return Unknown{} }
            """,
        }
    )
    source, _ = ProgramLoader().load(str(module_builder.path("widgets")), module_builder.path("mocks"))
    methods = MethodExtractor(source).extract("Widget")
    renderer = SignatureRenderer("example.com/demo/mocks")

    assert renderer.render(methods["Get"].signature) == "() models.Item"
    assert sorted(renderer.used_packages) == ["example.com/demo/models"]
    assert renderer.render(methods["Missing"].signature) == "() widgets.Unknown"
