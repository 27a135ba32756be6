"""Tests for vtgen.capabilities."""

from __future__ import annotations

from tests._fixtures.project_builder import ProjectBuilder
from vtgen.capabilities import (
    detect,
    detect_project_capabilities,
    load_python_dependencies,
    normalize_name,
    to_namespace,
)


def test_detect_flags_each_integration_independently() -> None:
    record = detect(["SQLAlchemy>=2.0", "requests"], "shop")

    assert record.has_persistence_integration is True
    assert record.has_serialization_integration is False
    assert record.project_root_name == "shop"


def test_detect_without_references() -> None:
    record = detect([])

    assert record.has_persistence_integration is False
    assert record.has_serialization_integration is False


def test_normalize_name_strips_extras_and_pins() -> None:
    assert normalize_name("pydantic[email]==2.6") == "pydantic"
    assert normalize_name("  Zope.Interface ; python_version>'3'") == "zope-interface"
    assert normalize_name("-e .") == ""


def test_to_namespace() -> None:
    assert to_namespace("My-Shop") == "my_shop"
    assert to_namespace("acme.billing") == "acme.billing"
    assert to_namespace("123") == ""


def test_load_dependencies_from_requirements_and_pyproject(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "requirements.txt": """
            # runtime
            pydantic>=2
            -r other.txt
            """,
            "pyproject.toml": """
            [project]
            name = "shop"
            dependencies = ["sqlalchemy>=2.0"]

            [project.optional-dependencies]
            web = ["fastapi"]
            """,
        }
    )

    deps = load_python_dependencies(project_builder.path())

    assert {"pydantic", "sqlalchemy", "fastapi"} <= set(deps)


def test_detect_project_capabilities_reads_project_name(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "pyproject.toml": """
            [tool.poetry]
            name = "order-service"

            [tool.poetry.dependencies]
            python = "^3.11"
            SQLAlchemy = "^2.0"
            """,
        }
    )

    record = detect_project_capabilities(project_builder.path())

    assert record.has_persistence_integration is True
    assert record.has_serialization_integration is False
    assert record.project_root_name == "order_service"


def test_overrides_take_precedence(project_builder: ProjectBuilder) -> None:
    project_builder.write({"requirements.txt": "sqlalchemy\npydantic\n"})

    record = detect_project_capabilities(
        project_builder.path(),
        project_root="Acme.Core",
        serialization=False,
    )

    assert record.has_serialization_integration is False
    assert record.has_persistence_integration is True
    assert record.project_root_name == "acme.core"


def test_project_name_falls_back_to_directory(project_builder: ProjectBuilder) -> None:
    record = detect_project_capabilities(project_builder.path())

    assert record.project_root_name == "project"
