"""
Example: decoding a client payload and expanding it for the typed layer.

Run from the repository root:
    python examples/expand_usage.py
"""

import json

from modelbridge import ModelBridge, load_schema_file
from modelbridge.core.diagnostics import MemoryDiagnosticSink

registry = load_schema_file("examples/blog_models.yaml")
sink = MemoryDiagnosticSink()
bridge = ModelBridge(registry, sink=sink)

payload = json.dumps(
    {
        "id": "post-1",
        "__typename": "Post",
        "title": "Hello",
        "rating": 4,
        "tags": ["intro", "news"],
        "publishedAt": "2026-01-18T14:05:30Z",
        "createdOn": 1768745130,
        "author": {"id": "author-7", "__typename": "Author", "name": "Jane"},
        # Has-many side of a relation arrives as a placeholder
        "blog": {"associatedField": "posts", "associatedId": "blog-3"},
    }
)

record = bridge.decode(payload)

# Single-field reads
print("publishedAt:", bridge.read_field(record, "publishedAt", "Post").to_datetime())
print("createdOn:", bridge.read_field(record, "createdOn", "Post"))

# Full transport shape
print(json.dumps(bridge.expand(record, "Post"), indent=2))

for event in sink.events:
    print(f"{event.stage} {event.status}: {event.field_name}")
