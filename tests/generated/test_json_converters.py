"""Generated pydantic converters match the raw type's own codec."""

import uuid
from typing import Optional

import pytest
from pydantic import BaseModel, ValidationError

from tests._fixtures.project_builder import GeneratedModules
from vtgen.models import CapabilityRecord, RawCandidate
from vtgen.pipeline import generate

SERIALIZATION = CapabilityRecord(has_serialization_integration=True)


@pytest.fixture
def modules(generated_modules: GeneratedModules) -> dict:
    result = generate(
        [
            RawCandidate(name="UserId", namespace="json_ids"),
            RawCandidate(name="OrderId", namespace="json_ids", attributes={"Type": 2}),
            RawCandidate(name="LedgerId", namespace="json_ids", attributes={"Type": 3}),
        ],
        SERIALIZATION,
    )
    return generated_modules.load(result)


class _RawUuid(BaseModel):
    value: uuid.UUID


class _RawInt(BaseModel):
    value: int


def test_uuid_json_matches_raw_uuid_encoding(modules: dict) -> None:
    user_id = modules["UserId.core"].UserId
    user_id_json = modules["UserId.jsonConverter"].UserIdJson

    class Model(BaseModel):
        value: user_id_json

    raw = uuid.UUID("00112233-4455-6677-8899-aabbccddeeff")
    model = Model(value=user_id(raw))

    assert model.model_dump_json() == _RawUuid(value=raw).model_dump_json()
    assert Model.model_validate_json(model.model_dump_json()).value == user_id(raw)
    assert Model.model_validate({"value": str(raw)}).value == user_id(raw)
    assert model.model_dump()["value"] == raw


def test_uuid_json_rejects_garbage(modules: dict) -> None:
    user_id_json = modules["UserId.jsonConverter"].UserIdJson

    class Model(BaseModel):
        value: user_id_json

    with pytest.raises(ValidationError):
        Model.model_validate_json('{"value": "nope"}')


def test_integer_json_matches_raw_int_encoding(modules: dict) -> None:
    order_id = modules["OrderId.core"].OrderId
    order_id_json = modules["OrderId.jsonConverter"].OrderIdJson

    class Model(BaseModel):
        value: order_id_json
        other: Optional[order_id_json] = None

    model = Model(value=order_id(-17))

    assert model.model_dump_json() == '{"value":-17,"other":null}'
    assert _RawInt(value=-17).model_dump_json() == '{"value":-17}'
    assert Model.model_validate_json('{"value": 2147483647}').value == order_id(2147483647)


@pytest.mark.parametrize("payload", ['{"value": 2147483648}', '{"value": "12"}', '{"value": 1.5}'])
def test_integer_json_rejects_out_of_range_and_non_integers(modules: dict, payload: str) -> None:
    order_id_json = modules["OrderId.jsonConverter"].OrderIdJson

    class Model(BaseModel):
        value: order_id_json

    with pytest.raises(ValidationError):
        Model.model_validate_json(payload)


def test_int64_json_range(modules: dict) -> None:
    ledger_id = modules["LedgerId.core"].LedgerId
    ledger_json = modules["LedgerId.jsonConverter"].LedgerIdJson

    class Model(BaseModel):
        value: ledger_json

    payload = '{"value":9223372036854775807}'
    assert Model.model_validate_json(payload).value == ledger_id(2**63 - 1)
    assert Model(value=ledger_id(2**63 - 1)).model_dump_json() == payload


def test_converter_read_write(modules: dict) -> None:
    converter_cls = modules["OrderId.jsonConverter"].OrderIdJsonConverter
    order_id = modules["OrderId.core"].OrderId

    assert converter_cls.DEFAULT.read(5) == order_id(5)
    assert converter_cls.DEFAULT.write(order_id(5)) == 5


def test_plain_core_types_work_as_model_fields(modules: dict) -> None:
    order_id = modules["OrderId.core"].OrderId
    user_id = modules["UserId.core"].UserId

    class Model(BaseModel):
        order: order_id
        user: user_id

    raw = uuid.UUID("00112233-4455-6677-8899-aabbccddeeff")
    model = Model(order=order_id(-17), user=user_id(raw))
    payload = model.model_dump_json()

    assert payload == '{"order":-17,"user":"00112233-4455-6677-8899-aabbccddeeff"}'
    assert Model.model_validate_json(payload) == model
    assert Model.model_validate({"order": 3, "user": str(raw)}).order == order_id(3)
    with pytest.raises(ValidationError):
        Model.model_validate_json('{"order": 2147483648, "user": "nope"}')
