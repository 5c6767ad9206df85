"""Tests for method extraction."""

from __future__ import annotations

import logging

import pytest

from tests._fixtures.module_builder import ModuleBuilder
from typeface.errors import DuplicateMethodError, NoMethodsFound, TypeResolutionFailure
from typeface.extractor import MethodExtractor, is_exported
from typeface.gotypes import Basic, Named, Pointer, Signature, Slice, TypeParam, Var
from typeface.loader import Package, ProgramLoader

WIDGETS = """
package widgets

import (
	"context"
	"io"
)

// Widget is a thing.
type Widget struct{}

type Other struct{}

// Name returns the widget name.
func (w *Widget) Name() string { return "" }

func (w *Widget) id() int { return 0 }

func (o Other) Name() string { return "" }

// Read implements io.Reader.
// It never fails.
func (w Widget) Read(p []byte) (n int, err error) { return 0, nil }

func (w *Widget) Fetch(ctx context.Context, ids ...int) ([]*Other, error) { return nil, nil }

func helper() {}

/* Close releases resources. */
func (w *Widget) Close() error { return nil }

func (w *Widget) Copy(dst io.Writer, src io.Reader) error { return nil } // trailing note
func (w *Widget) Reset() {}
"""


def _load(module_builder: ModuleBuilder, files: dict[str, str], package: str = "widgets") -> Package:
    module_builder.write(files)
    source, _ = ProgramLoader().load(str(module_builder.path(package)), module_builder.path("mocks"))
    return source


def test_is_exported() -> None:
    assert is_exported("Name")
    assert not is_exported("name")
    assert not is_exported("_Name")
    assert is_exported("Ärger")


def test_extracts_exported_methods_of_pointer_and_value_receivers(module_builder: ModuleBuilder) -> None:
    package = _load(module_builder, {"widgets/widget.go": WIDGETS})

    methods = MethodExtractor(package).extract("Widget")

    assert sorted(methods) == ["Close", "Copy", "Fetch", "Name", "Read", "Reset"]
    assert methods["Name"].signature == Signature(results=(Var("", Basic("string")),))


def test_excludes_unexported_methods_and_other_types(module_builder: ModuleBuilder) -> None:
    package = _load(module_builder, {"widgets/widget.go": WIDGETS})

    methods = MethodExtractor(package).extract("Other")

    assert list(methods) == ["Name"]


def test_records_documentation_verbatim(module_builder: ModuleBuilder) -> None:
    package = _load(module_builder, {"widgets/widget.go": WIDGETS})

    methods = MethodExtractor(package).extract("Widget")

    assert methods["Name"].doc == ("// Name returns the widget name.",)
    assert methods["Read"].doc == ("// Read implements io.Reader.", "// It never fails.")
    assert methods["Close"].doc == ("/* Close releases resources. */",)
    assert methods["Fetch"].doc == ()
    assert methods["Reset"].doc == ()


def test_records_full_signatures(module_builder: ModuleBuilder) -> None:
    package = _load(module_builder, {"widgets/widget.go": WIDGETS})
    widgets = package.ref

    methods = MethodExtractor(package).extract("Widget")

    read = methods["Read"].signature
    assert read.params == (Var("p", Slice(Basic("byte"))),)
    assert read.results == (Var("n", Basic("int")), Var("err", Basic("error")))

    fetch = methods["Fetch"].signature
    assert fetch.variadic is True
    assert fetch.params[1] == Var("ids", Basic("int"))
    assert fetch.results[0] == Var("", Slice(Pointer(Named(widgets, "Other"))))
    context = fetch.params[0].type
    assert isinstance(context, Named)
    assert (context.package.path, context.package.name, context.name) == ("context", "context", "Context")


def test_records_positions(module_builder: ModuleBuilder) -> None:
    package = _load(module_builder, {"widgets/widget.go": WIDGETS})

    record = MethodExtractor(package).extract("Widget")["Name"]

    assert record.file.endswith("widget.go")
    assert record.line == 14


def test_collects_methods_across_files(module_builder: ModuleBuilder) -> None:
    package = _load(
        module_builder,
        {
            "widgets/widget.go": "package widgets\n\ntype Widget struct{}\n",
            "widgets/size.go": "package widgets\n\nfunc (w Widget) Size() int { return 0 }\n",
            "widgets/color.go": "package widgets\n\nfunc (w *Widget) Color() string { return \"\" }\n",
        },
    )

    assert sorted(MethodExtractor(package).extract("Widget")) == ["Color", "Size"]


def test_missing_type_raises_no_methods_found(module_builder: ModuleBuilder) -> None:
    package = _load(module_builder, {"widgets/widget.go": WIDGETS})

    with pytest.raises(NoMethodsFound) as excinfo:
        MethodExtractor(package).extract("Gadget")

    assert "Gadget" in str(excinfo.value)
    assert "example.com/demo/widgets" in str(excinfo.value)


def test_type_with_only_unexported_methods_raises(module_builder: ModuleBuilder) -> None:
    package = _load(
        module_builder,
        {"widgets/widget.go": "package widgets\n\ntype quiet struct{}\n\nfunc (q quiet) hush() {}\n"},
    )

    with pytest.raises(NoMethodsFound):
        MethodExtractor(package).extract("quiet")


def test_duplicate_method_names_fail_fast(module_builder: ModuleBuilder) -> None:
    package = _load(
        module_builder,
        {
            "widgets/a.go": "package widgets\n\ntype Widget struct{}\n\nfunc (w Widget) Size() int { return 0 }\n",
            "widgets/b.go": "package widgets\n\nfunc (w *Widget) Size() int { return 1 }\n",
        },
    )

    with pytest.raises(DuplicateMethodError) as excinfo:
        MethodExtractor(package).extract("Widget")

    message = str(excinfo.value)
    assert "Widget.Size" in message
    assert "a.go:5" in message and "b.go:3" in message


def test_platform_specific_duplicates_are_not_reported(module_builder: ModuleBuilder) -> None:
    package = _load(
        module_builder,
        {
            "widgets/widget.go": "package widgets\n\ntype Widget struct{}\n",
            "widgets/widget_linux.go": "package widgets\n\nfunc (w Widget) Path() string { return \"/\" }\n",
            "widgets/widget_windows.go": "package widgets\n\nfunc (w Widget) Path() string { return \"C:\\\\\" }\n",
        },
    )

    assert list(MethodExtractor(package).extract("Widget")) == ["Path"]


def test_generic_receiver_names_follow_type_declaration(module_builder: ModuleBuilder) -> None:
    package = _load(
        module_builder,
        {
            "list/list.go": """
                package list

                type List[E any] struct{}

                func (l *List[T]) Push(v T) {}

                func (l List[T]) Len() int { return 0 }

                func (l *List[T]) All() []T { return nil }
            """,
        },
        package="list",
    )

    methods = MethodExtractor(package).extract("List")

    assert methods["Push"].signature.params == (Var("v", TypeParam("E")),)
    assert methods["All"].signature.results == (Var("", Slice(TypeParam("E"))),)
    assert methods["Len"].signature.results == (Var("", Basic("int")),)
    assert [param.name for param in package.type_params("List")] == ["E"]


def test_unresolvable_receiver_is_fatal(module_builder: ModuleBuilder) -> None:
    package = _load(
        module_builder,
        {"widgets/widget.go": "package widgets\n\ntype Widget struct{}\n\nfunc (w []Widget) Bad() {}\n"},
    )

    with pytest.raises(TypeResolutionFailure):
        MethodExtractor(package).extract("Widget")


def test_alias_receivers_bind_to_the_aliased_type(module_builder: ModuleBuilder) -> None:
    package = _load(
        module_builder,
        {
            "widgets/widget.go": """
                package widgets

                type Widget struct{}

                type W = Widget

                type V = W

                func (w Widget) A() {}

                func (w *W) B() {}

                func (v V) C() int { return 0 }
            """
        },
    )

    methods = MethodExtractor(package).extract("Widget")

    assert sorted(methods) == ["A", "B", "C"]
    assert methods["C"].signature == Signature(results=(Var("", Basic("int")),))


def test_methods_lost_to_syntax_errors_are_reported(
    module_builder: ModuleBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    package = _load(
        module_builder,
        {
            "widgets/widget.go": """
                package widgets

                type Widget struct{}

                func (w Widget) A() {}

                var x = (

                func (w *Widget) B() int { return 1 }
            """
        },
    )

    with caplog.at_level(logging.WARNING, logger="typeface.extractor"):
        methods = MethodExtractor(package).extract("Widget")

    assert "B" not in methods
    assert any("Widget.B" in record.getMessage() for record in caplog.records)
