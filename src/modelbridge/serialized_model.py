"""Typed record: an identifier paired with a map of field name to JSON value node."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from modelbridge.core.exceptions import SchemaViolationError
from modelbridge.core.json_value import (
    JSONNull,
    JSONObject,
    JSONString,
    JSONValue,
    decode_payload,
    encode_payload,
    from_python,
    strip_reserved_key,
    to_python,
)
from modelbridge.models.bridge_config import DEFAULT_CONFIG, BridgeConfig


@dataclass(frozen=True)
class SerializedModel:
    """Immutable model instance as received from the dynamic side.

    ``id`` is a first-class attribute and is never duplicated in ``fields``.
    The type discriminator (``__typename`` by default) survives only at the
    top level of ``fields``; nested objects have it stripped.
    """

    id: str
    fields: Mapping[str, JSONValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SerializedModel):
            return NotImplemented
        return self.id == other.id and dict(self.fields) == dict(other.fields)

    def __hash__(self) -> int:
        return hash((self.id, tuple(sorted(self.fields.items()))))

    @classmethod
    def from_payload(
        cls,
        payload: JSONValue,
        *,
        id: Optional[str] = None,
        config: BridgeConfig = DEFAULT_CONFIG,
    ) -> "SerializedModel":
        """Build a record from a decoded payload.

        The identifier comes from the payload's ``id`` key when present,
        then from ``id``, else a fresh UUID4 string.

        Raises:
            SchemaViolationError: If the payload's ``id`` is not a string.
        """
        record_id = id
        type_name: Optional[JSONValue] = None
        if isinstance(payload, JSONObject):
            raw_id = payload.get(config.id_key)
            if raw_id is not None:
                if not isinstance(raw_id, JSONString):
                    raise SchemaViolationError(
                        reason="Reserved identifier must be a string",
                        details={"key": config.id_key, "tag": raw_id.tag},
                    )
                record_id = raw_id.value
            type_name = payload.get(config.reserved_type_key)

        stripped = strip_reserved_key(payload, config.reserved_type_key)
        if isinstance(stripped, JSONObject):
            values = {k: v for k, v in stripped.items() if k != config.id_key}
            if type_name is not None:
                values[config.reserved_type_key] = type_name
        else:
            values = {}

        if record_id is None:
            record_id = str(uuid.uuid4())
        return cls(id=record_id, fields=values)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        id: Optional[str] = None,
        config: BridgeConfig = DEFAULT_CONFIG,
    ) -> "SerializedModel":
        return cls.from_payload(from_python(data), id=id, config=config)

    @classmethod
    def from_json(
        cls,
        raw: Union[bytes, str],
        *,
        id: Optional[str] = None,
        config: BridgeConfig = DEFAULT_CONFIG,
    ) -> "SerializedModel":
        return cls.from_payload(decode_payload(raw), id=id, config=config)

    def to_payload(self, *, id_key: str = DEFAULT_CONFIG.id_key) -> JSONObject:
        """Flat object of the field map with the identifier re-attached.

        ``from_payload(record.to_payload())`` reproduces the record.
        """
        members = dict(self.fields)
        members[id_key] = JSONString(self.id)
        return JSONObject(members)

    def to_json(self, *, id_key: str = DEFAULT_CONFIG.id_key) -> str:
        return encode_payload(self.to_payload(id_key=id_key))

    def has_field(self, key: str) -> bool:
        return key in self.fields

    def is_null(self, key: str) -> bool:
        """True only when the key is present with an explicit null."""
        return isinstance(self.fields.get(key), JSONNull)

    def read_field(self, key: str, *, id_key: str = DEFAULT_CONFIG.id_key) -> Any:
        """Untyped read: the stored node unwrapped to plain Python.

        Absent and explicit-null fields both read as None.
        """
        if key == id_key:
            return self.id
        return to_python(self.fields.get(key))
