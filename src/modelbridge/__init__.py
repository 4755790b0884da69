"""modelbridge.

Schema-driven bridge between untyped JSON records and a typed persistence layer.

Decodes payloads into immutable records, reads fields coerced by their
declared types, and expands records into the ``{id, modelName,
serializedData}`` transport shape with nested model references resolved.

Public API for clients of this package.
"""

from modelbridge.bridge import ModelBridge
from modelbridge.coercion import coerce_leaf, expand, read_field
from modelbridge.serialized_model import SerializedModel
from modelbridge.schema.registry import SchemaRegistry, load_schema_file

__version__ = "0.1.0"

__all__ = [
    "ModelBridge",
    "SchemaRegistry",
    "SerializedModel",
    "coerce_leaf",
    "expand",
    "load_schema_file",
    "read_field",
]
