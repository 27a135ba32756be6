"""Tests for vtgen.pipeline."""

from __future__ import annotations

from vtgen.models import CapabilityRecord, DeclarationShape, RawCandidate, SourceLocation
from vtgen.pipeline import Generator, generate

PERSISTENCE_ONLY = CapabilityRecord(has_persistence_integration=True, project_root_name="shop")


def _candidate(name: str, namespace: str = "shop", **attributes: object) -> RawCandidate:
    return RawCandidate(
        name=name,
        namespace=namespace,
        attributes=attributes,
        location=SourceLocation(path=f"{namespace}/ids.py", line=3, column=1),
    )


def test_order_id_with_persistence_only() -> None:
    result = generate([_candidate("OrderId", Type=2, CastOperator=2)], PERSISTENCE_ONLY)

    assert result.diagnostics == ()
    assert result.names == (
        "OrderId.core",
        "OrderId.valueConverter",
        "OrderId.valueComparer",
        "ValueTypeRegistration.registration",
    )
    assert result.artifact("OrderId.jsonConverter") is None
    registration = result.artifact("ValueTypeRegistration.registration")
    assert registration is not None
    assert registration.text.count("OrderIdValueConverter,") == 1


def test_malformed_declaration_blocks_registration_only() -> None:
    broken = RawCandidate(
        name="B",
        namespace="shop",
        location=SourceLocation(path="shop/ids.py", line=9, column=1),
        shape=DeclarationShape(is_nested=True),
    )

    result = generate([_candidate("A"), broken], PERSISTENCE_ONLY)

    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].location.line == 9
    assert "'B'" in result.diagnostics[0].message
    assert result.has_errors is True
    assert result.names == ("A.core", "A.valueConverter", "A.valueComparer")


def test_no_artifacts_for_malformed_declaration() -> None:
    broken = RawCandidate(name="B", namespace="shop", shape=DeclarationShape(is_readonly=False))

    result = generate([broken], CapabilityRecord(has_serialization_integration=True))

    assert result.artifacts == ()
    assert len(result.diagnostics) == 1


def test_reruns_are_byte_identical() -> None:
    candidates = [_candidate("OrderId", Type=3), _candidate("UserId")]
    capabilities = CapabilityRecord(True, True, "shop")

    first = generate(candidates, capabilities)
    second = generate(candidates, capabilities)

    assert [item.text for item in first.artifacts] == [item.text for item in second.artifacts]


def test_parallel_emission_matches_serial() -> None:
    candidates = [_candidate(f"Id{index}", Type=(index % 3) + 1) for index in range(12)]
    capabilities = CapabilityRecord(True, True, "shop")

    serial = Generator(workers=1).run(candidates, capabilities)
    parallel = Generator(workers=4).run(candidates, capabilities)

    assert serial.names == parallel.names
    assert [item.text for item in serial.artifacts] == [item.text for item in parallel.artifacts]


def test_generator_memoizes_emission() -> None:
    generator = Generator()
    calls: list[str] = []
    original = generator.emitter.emit

    def counting_emit(declaration, capabilities):  # type: ignore[no-untyped-def]
        calls.append(declaration.name)
        return original(declaration, capabilities)

    generator.emitter.emit = counting_emit  # type: ignore[method-assign]

    generator.run([_candidate("OrderId")], PERSISTENCE_ONLY)
    generator.run([_candidate("OrderId")], PERSISTENCE_ONLY)
    generator.run([_candidate("OrderId", Type=2)], PERSISTENCE_ONLY)

    assert calls == ["OrderId", "OrderId"]

    generator.clear()
    generator.run([_candidate("OrderId")], PERSISTENCE_ONLY)
    assert calls == ["OrderId", "OrderId", "OrderId"]


def test_names_differing_only_in_case_are_both_rejected() -> None:
    result = generate([_candidate("OrderID"), _candidate("OrderId"), _candidate("UserId")], PERSISTENCE_ONLY)

    assert [item.id for item in result.diagnostics] == ["VT0002", "VT0002"]
    assert "'shop.OrderID'" in result.diagnostics[0].message
    assert "'shop.OrderId'" in result.diagnostics[0].message
    assert "shop.order_id_core" in result.diagnostics[0].message
    assert result.names == ("UserId.core", "UserId.valueConverter", "UserId.valueComparer")
    assert len(result.by_path()) == len(result.artifacts)


def test_same_name_declared_in_two_modules_of_a_package_is_rejected() -> None:
    first = RawCandidate(name="OrderId", namespace="shop", location=SourceLocation(path="shop/a.py", line=4))
    second = RawCandidate(name="OrderId", namespace="shop", location=SourceLocation(path="shop/b.py", line=6))

    result = generate([first, second], PERSISTENCE_ONLY)

    assert result.artifacts == ()
    assert result.has_errors is True
    assert [item.location.path for item in result.diagnostics] == ["shop/a.py", "shop/b.py"]
    assert "shop/b.py:6" in result.diagnostics[0].message


def test_same_name_in_different_packages_does_not_conflict() -> None:
    result = generate([_candidate("OrderId", "shop"), _candidate("OrderId", "billing")], PERSISTENCE_ONLY)

    assert result.diagnostics == ()
    assert "shop/order_id_core.py" in result.by_path()
    assert "billing/order_id_core.py" in result.by_path()
