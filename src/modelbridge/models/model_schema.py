from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

PrimitiveKind = Literal["string", "int", "int64", "double", "bool", "enum", "id"]
TemporalElementKind = Literal["dateTime", "date", "time", "timestamp"]
ElementKind = Union[PrimitiveKind, TemporalElementKind]


class _FieldTypeBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class ScalarType(_FieldTypeBase):
    kind: Literal["scalar"] = "scalar"
    primitive: PrimitiveKind = "string"


class DateTimeType(_FieldTypeBase):
    kind: Literal["dateTime"] = "dateTime"


class DateType(_FieldTypeBase):
    kind: Literal["date"] = "date"


class TimeType(_FieldTypeBase):
    kind: Literal["time"] = "time"


class TimestampType(_FieldTypeBase):
    kind: Literal["timestamp"] = "timestamp"


class ModelRefType(_FieldTypeBase):
    """Belongs-to / has-one reference to another registered model."""

    kind: Literal["model"] = "model"
    model_name: str


class CollectionType(_FieldTypeBase):
    """Has-many relation. Never embedded in transport output."""

    kind: Literal["collection"] = "collection"
    model_name: Optional[str] = None


class EmbeddedCollectionType(_FieldTypeBase):
    kind: Literal["embeddedCollection"] = "embeddedCollection"
    element_type: ElementKind = "string"


FieldType = Annotated[
    Union[
        ScalarType,
        DateTimeType,
        DateType,
        TimeType,
        TimestampType,
        ModelRefType,
        CollectionType,
        EmbeddedCollectionType,
    ],
    Field(discriminator="kind"),
]

TemporalFieldType = (DateTimeType, DateType, TimeType)


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType


class ModelSchema(BaseModel):
    """Named model with its field descriptors, keyed by field name."""

    name: str
    fields: Dict[str, FieldDescriptor] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _accept_field_list(cls, data):
        # Schema documents may list fields; index them by name
        if isinstance(data, dict) and isinstance(data.get("fields"), list):
            indexed = {}
            for entry in data["fields"]:
                if not isinstance(entry, dict) or "name" not in entry:
                    raise ValueError("each field entry requires a 'name'")
                if entry["name"] in indexed:
                    raise ValueError(f"duplicate field name {entry['name']!r}")
                indexed[entry["name"]] = entry
            data = {**data, "fields": indexed}
        return data

    @model_validator(mode="after")
    def _validate_field_names(self) -> "ModelSchema":
        for key, descriptor in self.fields.items():
            if key != descriptor.name:
                raise ValueError(f"field key {key!r} does not match descriptor name {descriptor.name!r}")
        return self

    def field(self, name: str) -> Optional[FieldDescriptor]:
        return self.fields.get(name)

    def all_fields(self) -> List[FieldDescriptor]:
        return list(self.fields.values())
