"""Generic JSON value tree: the canonical untyped representation of a payload.

Every node is an immutable dataclass tagged by its class. Structural
operations (``strip_reserved_key``, ``to_python``) build new nodes and never
mutate their input.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Tuple, Union

from modelbridge.core.exceptions import PayloadDecodeError


@dataclass(frozen=True)
class JSONNull:
    tag = "null"


@dataclass(frozen=True)
class JSONBool:
    value: bool
    tag = "boolean"


@dataclass(frozen=True)
class JSONNumber:
    value: float
    tag = "number"


@dataclass(frozen=True)
class JSONString:
    value: str
    tag = "string"


@dataclass(frozen=True)
class JSONArray:
    items: Tuple["JSONValue", ...] = ()
    tag = "array"

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator["JSONValue"]:
        return iter(self.items)


@dataclass(frozen=True)
class JSONObject:
    """Ordered string-keyed mapping of child nodes.

    ``get`` returns ``None`` for an absent key and ``JSONNull`` for a key that
    is present with an explicit null, so the two stay distinguishable.
    """

    members: Mapping[str, "JSONValue"] = field(default_factory=dict)
    tag = "object"

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", MappingProxyType(dict(self.members)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JSONObject):
            return NotImplemented
        return dict(self.members) == dict(other.members)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.members.items())))

    def __contains__(self, key: object) -> bool:
        return key in self.members

    def __len__(self) -> int:
        return len(self.members)

    def get(self, key: str) -> Optional["JSONValue"]:
        return self.members.get(key)

    def keys(self):
        return self.members.keys()

    def items(self):
        return self.members.items()


JSONValue = Union[JSONNull, JSONBool, JSONNumber, JSONString, JSONArray, JSONObject]

NULL = JSONNull()


def from_python(value: Any) -> JSONValue:
    """Build a tree from plain Python JSON values.

    Raises:
        TypeError: On non-string object keys or unsupported value types.
    """
    if value is None:
        return NULL
    # bool is a subclass of int; check it first
    if isinstance(value, bool):
        return JSONBool(value)
    if isinstance(value, float):
        return JSONNumber(value)
    if isinstance(value, int):
        try:
            return JSONNumber(float(value))
        except OverflowError:
            # Beyond float64 range
            return JSONNumber(math.inf if value > 0 else -math.inf)
    if isinstance(value, str):
        return JSONString(value)
    if isinstance(value, (JSONNull, JSONBool, JSONNumber, JSONString, JSONArray, JSONObject)):
        return value
    if isinstance(value, Mapping):
        members = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Object keys must be strings, got {type(key).__name__}")
            members[key] = from_python(item)
        return JSONObject(members)
    if isinstance(value, (list, tuple)):
        return JSONArray(tuple(from_python(item) for item in value))
    raise TypeError(f"Unsupported type for JSON value: {type(value).__name__}")


def decode_payload(raw: Union[bytes, bytearray, str]) -> JSONValue:
    """Decode a raw transport payload into a value tree.

    Raises:
        PayloadDecodeError: If ``raw`` is not valid UTF-8 JSON or nests too deeply.
    """
    try:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        # Every number is float64; integers beyond range become inf
        data = json.loads(raw, parse_int=float)
        return from_python(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PayloadDecodeError(f"Invalid JSON payload: {exc}") from exc
    except RecursionError as exc:
        raise PayloadDecodeError("Invalid JSON payload: nesting too deep") from exc


def strip_reserved_key(node: JSONValue, key: str) -> JSONValue:
    """Remove ``key`` from every object at every level of nesting.

    Total and non-mutating: leaves are returned unchanged, containers are
    rebuilt. Applying it twice gives the same tree as applying it once.
    """
    if isinstance(node, JSONObject):
        return JSONObject(
            {name: strip_reserved_key(child, key) for name, child in node.items() if name != key}
        )
    if isinstance(node, JSONArray):
        return JSONArray(tuple(strip_reserved_key(item, key) for item in node))
    return node


def to_python(node: Optional[JSONValue]) -> Any:
    """Unwrap a tree to plain Python values. Absent and null both become None."""
    if node is None or isinstance(node, JSONNull):
        return None
    if isinstance(node, (JSONBool, JSONNumber, JSONString)):
        return node.value
    if isinstance(node, JSONArray):
        return [to_python(item) for item in node]
    if isinstance(node, JSONObject):
        return {name: to_python(child) for name, child in node.items()}
    raise TypeError(f"Not a JSON value node: {type(node).__name__}")


def encode_payload(node: JSONValue) -> str:
    return json.dumps(to_python(node), ensure_ascii=False)
