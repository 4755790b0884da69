import math

import pytest

from modelbridge.coercion import coerce_leaf, read_field, read_field_by_descriptor
from modelbridge.core.diagnostics import MemoryDiagnosticSink
from modelbridge.core.json_value import (
    NULL,
    JSONArray,
    JSONBool,
    JSONNumber,
    JSONObject,
    JSONString,
)
from modelbridge.models.model_schema import FieldDescriptor, ModelSchema, ScalarType
from modelbridge.serialized_model import SerializedModel
from modelbridge.temporal import TemporalValue


def _schema() -> ModelSchema:
    return ModelSchema.model_validate(
        {
            "name": "Event",
            "fields": [
                {"name": "id", "type": {"kind": "scalar", "primitive": "id"}},
                {"name": "title", "type": {"kind": "scalar", "primitive": "string"}},
                {"name": "count", "type": {"kind": "scalar", "primitive": "int"}},
                {"name": "big", "type": {"kind": "scalar", "primitive": "int64"}},
                {"name": "score", "type": {"kind": "scalar", "primitive": "double"}},
                {"name": "startsAt", "type": {"kind": "dateTime"}},
                {"name": "day", "type": {"kind": "date"}},
                {"name": "at", "type": {"kind": "time"}},
                {"name": "createdOn", "type": {"kind": "timestamp"}},
            ],
        }
    )


def test_timestamp_number_becomes_int():
    record = SerializedModel.from_dict({"createdOn": 1700000000}, id="e1")

    value = read_field(record, "createdOn", _schema())

    assert value == 1700000000
    assert isinstance(value, int)


def test_timestamp_is_truncated():
    record = SerializedModel.from_dict({"createdOn": 1700000000.9}, id="e1")

    assert read_field(record, "createdOn", _schema()) == 1700000000


def test_datetime_string_becomes_temporal_wrapper():
    record = SerializedModel.from_dict({"startsAt": "2024-01-01T00:00:00Z"}, id="e1")

    value = read_field(record, "startsAt", _schema())

    assert value == TemporalValue("2024-01-01T00:00:00Z", kind="dateTime")
    assert value.iso8601_string == "2024-01-01T00:00:00Z"


@pytest.mark.parametrize(("key", "kind", "raw"), [("day", "date", "2024-02-29"), ("at", "time", "12:30:00")])
def test_date_and_time_strings_become_temporal_wrappers(key, kind, raw):
    record = SerializedModel.from_dict({key: raw}, id="e1")

    assert read_field(record, key, _schema()) == TemporalValue(raw, kind=kind)


def test_int_field_number_is_truncated_to_int():
    record = SerializedModel.from_dict({"count": 7.0, "big": -3.7}, id="e1")

    assert read_field(record, "count", _schema()) == 7
    assert isinstance(read_field(record, "count", _schema()), int)
    assert read_field(record, "big", _schema()) == -3


def test_double_field_stays_float():
    record = SerializedModel.from_dict({"score": 2.5}, id="e1")

    assert read_field(record, "score", _schema()) == 2.5


def test_int_field_holding_string_falls_back_to_untyped_value():
    record = SerializedModel.from_dict({"count": "abc"}, id="e1")

    assert read_field(record, "count", _schema()) == "abc"
    assert read_field(record, "count", _schema()) == read_field(record, "count")


def test_mismatch_is_reported_to_diagnostic_sink():
    sink = MemoryDiagnosticSink()
    record = SerializedModel.from_dict({"count": "abc", "startsAt": 5}, id="e1")

    read_field(record, "count", _schema(), sink=sink)
    read_field(record, "startsAt", _schema(), sink=sink)

    fallbacks = sink.by_status("fallback")
    assert [(e.field_name, e.details) for e in fallbacks] == [
        ("count", {"declared": "scalar", "stored": "string"}),
        ("startsAt", {"declared": "dateTime", "stored": "number"}),
    ]
    assert all(e.model_name == "Event" for e in fallbacks)


def test_timestamp_holding_string_falls_back():
    record = SerializedModel.from_dict({"createdOn": "yesterday"}, id="e1")

    assert read_field(record, "createdOn", _schema()) == "yesterday"


def test_non_finite_number_does_not_raise():
    record = SerializedModel.from_dict({"createdOn": float("inf")}, id="e1")

    assert math.isinf(read_field(record, "createdOn", _schema()))


def test_unknown_field_uses_untyped_read():
    record = SerializedModel.from_dict({"extra": [1, 2]}, id="e1")

    assert read_field(record, "extra", _schema()) == [1.0, 2.0]


def test_id_is_returned_even_when_declared():
    record = SerializedModel.from_dict({"id": "e1"})

    assert read_field(record, "id", _schema()) == "e1"


def test_null_and_absent_read_as_none_with_schema():
    sink = MemoryDiagnosticSink()
    record = SerializedModel.from_dict({"startsAt": None}, id="e1")

    assert read_field(record, "startsAt", _schema(), sink=sink) is None
    assert read_field(record, "createdOn", _schema(), sink=sink) is None
    assert sink.events == []


def test_read_field_without_schema_matches_record_read():
    record = SerializedModel.from_dict({"createdOn": 1.5}, id="e1")

    assert read_field(record, "createdOn") == 1.5


def test_coerce_leaf_truncates_integer_kinds():
    assert coerce_leaf(JSONNumber(4.9), "int") == 4
    assert coerce_leaf(JSONNumber(-4.9), "int64") == -4


def test_coerce_leaf_passes_temporal_strings_through():
    assert coerce_leaf(JSONString("2024-01-01"), "date") == "2024-01-01"
    assert coerce_leaf(JSONString("10:00:00"), "time") == "10:00:00"


def test_coerce_leaf_falls_back_on_mismatch():
    assert coerce_leaf(JSONString("x"), "int") == "x"
    assert coerce_leaf(JSONNumber(1.5), "dateTime") == 1.5
    assert coerce_leaf(JSONBool(True), "string") is True
    assert coerce_leaf(JSONNumber(1.5), "double") == 1.5
    assert math.isnan(coerce_leaf(JSONNumber(float("nan")), "int"))


def test_coerce_leaf_unwraps_objects_and_drops_null_and_arrays():
    assert coerce_leaf(JSONObject({"a": JSONNumber(1.0)}), "string") == {"a": 1.0}
    assert coerce_leaf(NULL, "int") is None
    assert coerce_leaf(None, "int") is None
    assert coerce_leaf(JSONArray((JSONNumber(1.0),)), "int") is None


def test_read_field_by_descriptor_coerces_like_a_schema_read():
    record = SerializedModel.from_dict({"id": "e1", "count": 4.7, "label": "x"})
    sink = MemoryDiagnosticSink()
    count = FieldDescriptor(name="count", type=ScalarType(primitive="int"))
    label = FieldDescriptor(name="label", type=ScalarType(primitive="int"))

    assert read_field_by_descriptor(record, "count", count) == 4
    assert read_field_by_descriptor(record, "label", label, model_name="Event", sink=sink) == "x"
    assert read_field_by_descriptor(record, "count", None) == 4.7
    assert [(e.model_name, e.field_name, e.status) for e in sink.events] == [("Event", "label", "fallback")]
