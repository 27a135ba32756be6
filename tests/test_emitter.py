"""Tests for vtgen.emitter."""

from __future__ import annotations

from pathlib import Path

import pytest

from vtgen.emitter import Emitter, TemplateRenderer, module_name, snake_case
from vtgen.models import (
    CapabilityRecord,
    Declaration,
    OperatorVisibility,
    RepresentationKind,
    SourceLocation,
)


def _declaration(
    name: str = "OrderId",
    namespace: str = "shop",
    kind: RepresentationKind = RepresentationKind.INTEGER32,
    visibility: OperatorVisibility = OperatorVisibility.EXPLICIT,
) -> Declaration:
    return Declaration(
        name=name,
        namespace=namespace,
        kind=kind,
        visibility=visibility,
        location=SourceLocation(path="shop/ids.py", line=1, column=1),
        is_well_formed=True,
    )


@pytest.mark.parametrize(
    ("name", "expected"),
    [("OrderId", "order_id"), ("HTTPRequestId", "http_request_id"), ("A", "a"), ("Id2Go", "id2_go")],
)
def test_snake_case(name: str, expected: str) -> None:
    assert snake_case(name) == expected


def test_module_name_appends_suffix() -> None:
    assert module_name("OrderId", "valueConverter") == "order_id_value_converter"
    assert module_name("OrderId", "core") == "order_id_core"


@pytest.mark.parametrize(
    ("capabilities", "expected"),
    [
        (CapabilityRecord(), ["OrderId.core"]),
        (CapabilityRecord(has_serialization_integration=True), ["OrderId.core", "OrderId.jsonConverter"]),
        (
            CapabilityRecord(has_persistence_integration=True),
            ["OrderId.core", "OrderId.valueConverter", "OrderId.valueComparer"],
        ),
        (
            CapabilityRecord(has_serialization_integration=True, has_persistence_integration=True),
            ["OrderId.core", "OrderId.jsonConverter", "OrderId.valueConverter", "OrderId.valueComparer"],
        ),
    ],
)
def test_artifact_set_follows_capabilities(capabilities: CapabilityRecord, expected: list[str]) -> None:
    artifacts = Emitter().emit(_declaration(), capabilities)

    assert [artifact.name for artifact in artifacts] == expected


@pytest.mark.parametrize("kind", list(RepresentationKind))
def test_comparer_is_emitted_for_every_kind(kind: RepresentationKind) -> None:
    artifacts = Emitter().emit(_declaration(kind=kind), CapabilityRecord(has_persistence_integration=True))

    assert "OrderId.valueComparer" in [artifact.name for artifact in artifacts]


def test_artifact_paths_follow_namespace() -> None:
    artifacts = Emitter().emit(_declaration(namespace="acme.shop"), CapabilityRecord(has_persistence_integration=True))

    assert [artifact.path for artifact in artifacts] == [
        "acme/shop/order_id_core.py",
        "acme/shop/order_id_value_converter.py",
        "acme/shop/order_id_value_comparer.py",
    ]


def test_global_namespace_artifacts() -> None:
    core = Emitter().emit(_declaration(namespace=""), CapabilityRecord())[0]

    assert core.path == "order_id_core.py"
    assert "# global namespace" in core.text


def test_emission_is_deterministic() -> None:
    capabilities = CapabilityRecord(has_serialization_integration=True, has_persistence_integration=True)
    first = Emitter().emit(_declaration(), capabilities)
    second = Emitter().emit(_declaration(), capabilities)

    assert [artifact.text for artifact in first] == [artifact.text for artifact in second]


def test_generated_modules_compile() -> None:
    capabilities = CapabilityRecord(has_serialization_integration=True, has_persistence_integration=True)
    for kind in RepresentationKind:
        for visibility in OperatorVisibility:
            for artifact in Emitter().emit(_declaration(kind=kind, visibility=visibility), capabilities):
                compile(artifact.text, artifact.path, "exec")


def test_visibility_changes_core_only_where_relevant() -> None:
    explicit = Emitter().emit(_declaration(visibility=OperatorVisibility.EXPLICIT), CapabilityRecord())[0]
    implicit = Emitter().emit(_declaration(visibility=OperatorVisibility.IMPLICIT), CapabilityRecord())[0]

    assert "__index__" not in explicit.text
    assert "__index__" in implicit.text


def test_templates_dir_overrides_builtin(tmp_path: Path) -> None:
    override = tmp_path / "templates" / "integer"
    override.mkdir(parents=True)
    (override / "core.py.j2").write_text("# custom {{ name }}\n", encoding="utf-8")

    emitter = Emitter(TemplateRenderer(tmp_path / "templates"))
    core = emitter.emit(_declaration(), CapabilityRecord())[0]

    assert core.text == "# custom OrderId\n"


@pytest.mark.parametrize("kind", list(RepresentationKind))
def test_core_delegates_pydantic_schema_only_with_serialization(kind: RepresentationKind) -> None:
    plain = Emitter().emit(_declaration(kind=kind), CapabilityRecord())[0]
    serializable = Emitter().emit(_declaration(kind=kind), CapabilityRecord(has_serialization_integration=True))[0]

    assert "__get_pydantic_core_schema__" not in plain.text
    assert "from shop.order_id_json_converter import OrderIdJsonConverter" in serializable.text
    assert "from typing import Any, ClassVar" in serializable.text
