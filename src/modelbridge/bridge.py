from __future__ import annotations

from typing import Any, Dict, Optional, Union

from modelbridge.coercion import expand, read_field, read_field_by_descriptor
from modelbridge.core.diagnostics import NULL_SINK, DiagnosticSink
from modelbridge.core.logger import configure_root_logger, get_logger
from modelbridge.models.bridge_config import DEFAULT_CONFIG, BridgeConfig
from modelbridge.schema.registry import SchemaResolver
from modelbridge.serialized_model import SerializedModel


class ModelBridge:
    """
    High-level entry point binding a schema resolver, config and diagnostic sink.

    Example:
        >>> registry = load_schema_file("schema.yaml")
        >>> bridge = ModelBridge(registry)
        >>> record = bridge.decode(b'{"id": "p1", "title": "Hello"}')
        >>> bridge.expand(record, "Post")
        {'id': 'p1', 'modelName': 'Post', 'serializedData': {'title': 'Hello'}}
    """

    def __init__(
        self,
        resolver: SchemaResolver,
        *,
        config: Optional[BridgeConfig] = None,
        sink: Optional[DiagnosticSink] = None,
    ):
        self.resolver = resolver
        self.config = config or DEFAULT_CONFIG
        self.sink = sink or NULL_SINK
        configure_root_logger(self.config.log_level)
        self.log = get_logger(__name__)

    def decode(self, raw: Union[bytes, str], *, id: Optional[str] = None) -> SerializedModel:
        """Decode a raw JSON payload into a record.

        Raises:
            PayloadDecodeError: If ``raw`` is not valid JSON.
            SchemaViolationError: If the payload's ``id`` is not a string.
        """
        record = SerializedModel.from_json(raw, id=id, config=self.config)
        self.log.debug("Decoded record %s with %d fields", record.id, len(record.fields))
        return record

    def read_field(self, record: SerializedModel, key: str, model_name: Optional[str] = None) -> Any:
        """Read one field; coerced by the model's schema when ``model_name`` is given.

        Raises:
            ModelNotRegisteredError: If ``model_name`` is unknown.
        """
        if model_name is None:
            return read_field(record, key, config=self.config)
        descriptor = self.resolver.get_field_descriptor(model_name, key)
        return read_field_by_descriptor(
            record, key, descriptor, model_name=model_name, config=self.config, sink=self.sink
        )

    def expand(self, record: SerializedModel, model_name: str) -> Dict[str, Any]:
        return expand(record, model_name, self.resolver, config=self.config, sink=self.sink)

    def expand_payload(
        self, raw: Union[bytes, str], model_name: str, *, id: Optional[str] = None
    ) -> Dict[str, Any]:
        return self.expand(self.decode(raw, id=id), model_name)
