from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Union

import yaml
from pydantic import ValidationError

from modelbridge.core.exceptions import ModelNotRegisteredError, SchemaRegistryError
from modelbridge.core.logger import get_logger
from modelbridge.models.model_schema import FieldDescriptor, ModelSchema

logger = get_logger(__name__)


class SchemaResolver(Protocol):
    def get_field_descriptor(self, model_name: str, field_name: str) -> Optional[FieldDescriptor]:
        ...

    def get_all_fields(self, model_name: str) -> List[FieldDescriptor]:
        ...


class SchemaRegistry:
    """In-process model catalog: model name -> ModelSchema.

    Populate once at startup, then share; lookups never mutate state.
    """

    def __init__(self, schemas: Optional[Iterable[ModelSchema]] = None) -> None:
        self._schemas: Dict[str, ModelSchema] = {}
        for schema in schemas or ():
            self.register(schema)

    def register(self, schema: ModelSchema, *, overwrite: bool = False) -> None:
        if not overwrite and schema.name in self._schemas:
            raise SchemaRegistryError(f"Model already registered: {schema.name!r}")
        self._schemas[schema.name] = schema
        logger.debug("Registered model %s with %d fields", schema.name, len(schema.fields))

    def get(self, model_name: str) -> ModelSchema:
        try:
            return self._schemas[model_name]
        except KeyError as exc:
            raise ModelNotRegisteredError(model_name) from exc

    def try_get(self, model_name: str) -> Optional[ModelSchema]:
        return self._schemas.get(model_name)

    def model_names(self) -> List[str]:
        return sorted(self._schemas)

    def clear(self) -> None:
        self._schemas.clear()

    def __contains__(self, model_name: object) -> bool:
        return model_name in self._schemas

    def get_field_descriptor(self, model_name: str, field_name: str) -> Optional[FieldDescriptor]:
        return self.get(model_name).field(field_name)

    def get_all_fields(self, model_name: str) -> List[FieldDescriptor]:
        return self.get(model_name).all_fields()

    def load_documents(self, documents: Iterable[Mapping[str, Any]], *, overwrite: bool = False) -> List[str]:
        """Validate and register raw schema documents; return the registered names.

        Raises:
            SchemaRegistryError: If a document does not describe a valid model.
        """
        parsed: List[ModelSchema] = []
        for doc in documents:
            try:
                parsed.append(ModelSchema.model_validate(doc))
            except ValidationError as exc:
                name = doc.get("name", "<unnamed>") if isinstance(doc, Mapping) else "<invalid>"
                raise SchemaRegistryError(f"Invalid schema for model {name!r}: {exc}") from exc
        # Validate everything before registering anything
        names = [schema.name for schema in parsed]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise SchemaRegistryError(f"Duplicate model names in schema documents: {duplicates}")
        if not overwrite:
            clashes = [name for name in names if name in self._schemas]
            if clashes:
                raise SchemaRegistryError(f"Model already registered: {clashes[0]!r}")
        for schema in parsed:
            self.register(schema, overwrite=overwrite)
        logger.info("Loaded %d model schemas", len(parsed))
        return [schema.name for schema in parsed]


def load_schema_file(path: Union[str, Path], registry: Optional[SchemaRegistry] = None) -> SchemaRegistry:
    """Load model schemas from a JSON or YAML file into ``registry`` (or a new one).

    The file holds either a list of model documents or a mapping with a
    ``models`` list.

    Raises:
        FileNotFoundError: If the file does not exist.
        SchemaRegistryError: On an unsupported suffix or invalid content.
    """
    schema_file = Path(path)
    if not schema_file.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")

    if schema_file.suffix not in (".json", ".yaml", ".yml"):
        raise SchemaRegistryError(f"Unsupported schema file format: {schema_file.suffix}")

    with open(schema_file, "r", encoding="utf-8") as f:
        try:
            if schema_file.suffix == ".json":
                content = json.load(f)
            else:
                content = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as exc:
            raise SchemaRegistryError(f"Schema file {path} is not valid {schema_file.suffix[1:].upper()}: {exc}") from exc

    if isinstance(content, Mapping):
        content = content.get("models", [])
    if not isinstance(content, list):
        raise SchemaRegistryError(f"Schema file {path} must contain a list of models")

    registry = registry if registry is not None else SchemaRegistry()
    registry.load_documents(content)
    return registry
