"""
Custom exception classes for modelbridge.

Provides structured error handling with domain-specific exceptions
for record construction, schema resolution and payload decoding.

Declared-type vs stored-value mismatches are NOT errors; they degrade to
pass-through values and are reported to the diagnostic sink instead.
"""

from typing import Any, Dict, Optional


class ModelBridgeException(Exception):
    """Base exception class for all modelbridge exceptions."""

    pass


class SchemaViolationError(ModelBridgeException):
    """
    Raised when a reserved field is present but has the wrong shape.

    The only reserved field checked during construction is the identifier:
    a payload carrying ``"id": 42`` cannot be turned into a record.

    Example:
        >>> raise SchemaViolationError(
        ...     reason="Reserved identifier must be a string",
        ...     details={"key": "id", "tag": "number"}
        ... )
    """

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        self.reason = reason
        self.details = details or {}
        message = f"{reason}"
        if self.details:
            message += f" - {self.details}"
        super().__init__(message)


class SchemaRegistryError(ModelBridgeException):
    """Raised when a schema cannot be registered or loaded."""

    pass


class ModelNotRegisteredError(SchemaRegistryError):
    """Raised when a model name has no registered schema.

    Schema registration is static process state, so callers should not retry.
    """

    def __init__(self, model_name: str):
        self.model_name = model_name
        super().__init__(f"Model {model_name!r} is not registered")


class PayloadDecodeError(ModelBridgeException):
    """Raised when a raw transport payload is not valid JSON."""

    pass
