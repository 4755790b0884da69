"""Schema-aware coercion between generic JSON values and typed field values.

Two directions are served:

* ``read_field`` returns one field coerced to what the dynamic side expects
  (temporal wrapper, integer, or the plain unwrapped value).
* ``expand`` walks a whole record against its model schema and produces the
  ``{id, modelName, serializedData}`` transport shape, recursing into
  belongs-to / has-one references.

Mismatches between a declared type and the stored value never raise. They
fall back to the untyped value and are reported to the diagnostic sink. The
only hard failure is an unregistered model name during expansion.

There is no cycle detection: recursion follows the nesting of the data.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional, assert_never

from modelbridge.core.diagnostics import NULL_SINK, DiagnosticEvent, DiagnosticSink
from modelbridge.core.json_value import (
    JSONArray,
    JSONBool,
    JSONNull,
    JSONNumber,
    JSONObject,
    JSONString,
    JSONValue,
    to_python,
)
from modelbridge.core.logger import get_logger, push_model_name, reset_model_name
from modelbridge.models.bridge_config import DEFAULT_CONFIG, BridgeConfig
from modelbridge.models.model_schema import (
    CollectionType,
    DateTimeType,
    DateType,
    ElementKind,
    EmbeddedCollectionType,
    FieldDescriptor,
    FieldType,
    ModelRefType,
    ModelSchema,
    ScalarType,
    TemporalFieldType,
    TimestampType,
    TimeType,
)
from modelbridge.schema.registry import SchemaResolver
from modelbridge.serialized_model import SerializedModel
from modelbridge.temporal import TemporalValue

logger = get_logger(__name__)

_UNCOERCED = object()

_INTEGER_KINDS = ("int", "int64")
_TEMPORAL_ELEMENT_KINDS = ("dateTime", "date", "time")


def _truncate(number: float) -> Any:
    if not math.isfinite(number):
        return _UNCOERCED
    return int(number)


def _coerce_declared(value: Optional[JSONValue], field_type: FieldType) -> Any:
    if isinstance(field_type, TemporalFieldType) and isinstance(value, JSONString):
        return TemporalValue(value.value, kind=field_type.kind)
    if isinstance(field_type, TimestampType) and isinstance(value, JSONNumber):
        return _truncate(value.value)
    if (
        isinstance(field_type, ScalarType)
        and field_type.primitive in _INTEGER_KINDS
        and isinstance(value, JSONNumber)
    ):
        return _truncate(value.value)
    return _UNCOERCED


def _expects_coercion(field_type: FieldType) -> bool:
    if isinstance(field_type, ScalarType):
        return field_type.primitive in _INTEGER_KINDS
    return isinstance(field_type, (DateTimeType, DateType, TimeType, TimestampType))


def _read_with_descriptor(
    record: SerializedModel,
    key: str,
    descriptor: Optional[FieldDescriptor],
    *,
    model_name: Optional[str],
    config: BridgeConfig,
    sink: DiagnosticSink,
) -> Any:
    if descriptor is None or key == config.id_key:
        return record.read_field(key, id_key=config.id_key)

    value = record.fields.get(key)
    coerced = _coerce_declared(value, descriptor.type)
    if coerced is not _UNCOERCED:
        return coerced

    if value is not None and not isinstance(value, JSONNull) and _expects_coercion(descriptor.type):
        logger.debug("Field %s declared %s but stored %s; passing through", key, descriptor.type.kind, value.tag)
        sink.emit(
            DiagnosticEvent(
                stage="read_field",
                status="fallback",
                model_name=model_name,
                field_name=key,
                details={"declared": descriptor.type.kind, "stored": value.tag},
            )
        )
    return record.read_field(key, id_key=config.id_key)


def read_field(
    record: SerializedModel,
    key: str,
    schema: Optional[ModelSchema] = None,
    *,
    config: BridgeConfig = DEFAULT_CONFIG,
    sink: DiagnosticSink = NULL_SINK,
) -> Any:
    """Read one field, coerced by its declared type when ``schema`` is given.

    * ``dateTime`` / ``date`` / ``time`` stored as a string -> ``TemporalValue``
    * ``timestamp`` or integer scalar stored as a number -> ``int`` (truncated)
    * anything else, including mismatches -> the untyped value
    """
    if schema is None:
        return record.read_field(key, id_key=config.id_key)
    return _read_with_descriptor(
        record, key, schema.field(key), model_name=schema.name, config=config, sink=sink
    )


def read_field_by_descriptor(
    record: SerializedModel,
    key: str,
    descriptor: Optional[FieldDescriptor],
    *,
    model_name: Optional[str] = None,
    config: BridgeConfig = DEFAULT_CONFIG,
    sink: DiagnosticSink = NULL_SINK,
) -> Any:
    """Same as ``read_field`` for a descriptor already resolved by a ``SchemaResolver``."""
    return _read_with_descriptor(record, key, descriptor, model_name=model_name, config=config, sink=sink)


def coerce_leaf(value: Optional[JSONValue], element_type: ElementKind) -> Any:
    """Deserialize one embedded-collection element by its declared kind. Never raises."""
    if element_type in _INTEGER_KINDS and isinstance(value, JSONNumber):
        truncated = _truncate(value.value)
        if truncated is not _UNCOERCED:
            return truncated
    elif element_type in _TEMPORAL_ELEMENT_KINDS and isinstance(value, JSONString):
        # Temporal parsing is the consumer's concern
        return value.value

    if isinstance(value, (JSONBool, JSONNumber, JSONString)):
        return value.value
    if isinstance(value, JSONObject):
        return to_python(value)
    return None


def _is_placeholder(value: JSONObject, config: BridgeConfig) -> bool:
    return all(key in value for key in config.placeholder_keys)


def _expand_reference(
    value: Optional[JSONValue],
    field_type: ModelRefType,
    *,
    key: str,
    model_name: str,
    resolver: SchemaResolver,
    config: BridgeConfig,
    sink: DiagnosticSink,
) -> Any:
    if isinstance(value, JSONObject):
        if _is_placeholder(value, config):
            # Has-many relations are resolved separately by the typed layer
            sink.emit(
                DiagnosticEvent(stage="expand", status="placeholder", model_name=model_name, field_name=key)
            )
            return []
        if isinstance(value.get(config.id_key), JSONString):
            nested = SerializedModel.from_payload(value, config=config)
            return _to_transport(nested, field_type.model_name, resolver, config=config, sink=sink)

    logger.debug("Field %s references %s but holds no nested record; omitting", key, field_type.model_name)
    sink.emit(
        DiagnosticEvent(
            stage="expand",
            status="omitted",
            model_name=model_name,
            field_name=key,
            details={"declared": field_type.kind, "stored": value.tag if value is not None else "absent"},
        )
    )
    return _UNCOERCED


def _expand_fields(
    record: SerializedModel,
    model_name: str,
    resolver: SchemaResolver,
    *,
    config: BridgeConfig,
    sink: DiagnosticSink,
) -> Dict[str, Any]:
    descriptors = {descriptor.name: descriptor for descriptor in resolver.get_all_fields(model_name)}
    result: Dict[str, Any] = {}

    for key, value in record.fields.items():
        if isinstance(value, JSONNull):
            continue

        descriptor = descriptors.get(key)
        field_type = descriptor.type if descriptor is not None else None

        if field_type is None or isinstance(field_type, ScalarType):
            result[key] = _read_with_descriptor(
                record, key, descriptor, model_name=model_name, config=config, sink=sink
            )
        elif isinstance(field_type, ModelRefType):
            expanded = _expand_reference(
                value, field_type, key=key, model_name=model_name, resolver=resolver, config=config, sink=sink
            )
            if expanded is not _UNCOERCED:
                result[key] = expanded
        elif isinstance(field_type, CollectionType):
            continue
        elif isinstance(field_type, EmbeddedCollectionType):
            if isinstance(value, JSONArray):
                result[key] = [coerce_leaf(item, field_type.element_type) for item in value]
            else:
                sink.emit(
                    DiagnosticEvent(
                        stage="expand",
                        status="omitted",
                        model_name=model_name,
                        field_name=key,
                        details={"declared": field_type.kind, "stored": value.tag},
                    )
                )
        elif isinstance(field_type, (DateTimeType, DateType, TimeType)):
            if isinstance(value, JSONString):
                result[key] = value.value
            else:
                result[key] = _read_with_descriptor(
                    record, key, descriptor, model_name=model_name, config=config, sink=sink
                )
        elif isinstance(field_type, TimestampType):
            truncated = _truncate(value.value) if isinstance(value, JSONNumber) else _UNCOERCED
            if truncated is not _UNCOERCED:
                result[key] = truncated
            else:
                result[key] = _read_with_descriptor(
                    record, key, descriptor, model_name=model_name, config=config, sink=sink
                )
        else:
            assert_never(field_type)

    return result


def _to_transport(
    record: SerializedModel,
    model_name: str,
    resolver: SchemaResolver,
    *,
    config: BridgeConfig,
    sink: DiagnosticSink,
) -> Dict[str, Any]:
    token = push_model_name(model_name)
    try:
        serialized = _expand_fields(record, model_name, resolver, config=config, sink=sink)
    finally:
        reset_model_name(token)
    return {"id": record.id, "modelName": model_name, "serializedData": serialized}


def expand(
    record: SerializedModel,
    model_name: str,
    resolver: SchemaResolver,
    *,
    config: BridgeConfig = DEFAULT_CONFIG,
    sink: DiagnosticSink = NULL_SINK,
) -> Dict[str, Any]:
    """Expand ``record`` into the transport shape ``{id, modelName, serializedData}``.

    Per declared field type:

    * model reference: nested record expanded recursively; a has-many
      placeholder (``associatedField`` + ``associatedId``) becomes ``[]``
    * collection: omitted
    * embedded collection: each element through ``coerce_leaf``
    * dateTime / date / time: raw string
    * timestamp: ``int``
    * anything else: schema-aware ``read_field``

    Explicit nulls are omitted.

    Raises:
        ModelNotRegisteredError: If ``model_name`` or any referenced model is
            unknown to ``resolver``. No partial result is returned.
    """
    return _to_transport(record, model_name, resolver, config=config, sink=sink)
