import io
import json

import pytest

from modelbridge.cli import main


SCHEMA = """
models:
  - name: Post
    fields:
      - name: title
        type: {kind: scalar}
      - name: createdOn
        type: {kind: timestamp}
      - name: publishedAt
        type: {kind: dateTime}
      - name: comments
        type: {kind: collection, model_name: Comment}
"""


@pytest.fixture
def schema_path(tmp_path):
    path = tmp_path / "models.yaml"
    path.write_text(SCHEMA)
    return str(path)


def _payload(tmp_path, data) -> str:
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_expand_prints_transport_shape(tmp_path, schema_path):
    out = io.StringIO()
    payload = _payload(tmp_path, {"id": "p1", "title": "Hi", "createdOn": 12.0, "comments": ["c1"]})

    code = main(["expand", "--schema", schema_path, "--model", "Post", payload], out=out)

    assert code == 0
    assert json.loads(out.getvalue()) == {
        "id": "p1",
        "modelName": "Post",
        "serializedData": {"title": "Hi", "createdOn": 12},
    }


def test_read_prints_coerced_field(tmp_path, schema_path):
    out = io.StringIO()
    payload = _payload(tmp_path, {"id": "p1", "publishedAt": "2024-01-01T00:00:00Z"})

    code = main(
        ["read", "--schema", schema_path, "--model", "Post", "--field", "publishedAt", payload], out=out
    )

    assert code == 0
    assert json.loads(out.getvalue()) == "2024-01-01T00:00:00Z"


def test_expand_reads_stdin(monkeypatch, schema_path):
    out = io.StringIO()
    monkeypatch.setattr("sys.stdin", io.StringIO('{"title": "From stdin"}'))

    code = main(["expand", "--schema", schema_path, "--model", "Post", "--id", "s1"], out=out)

    assert code == 0
    assert json.loads(out.getvalue())["id"] == "s1"


def test_unknown_model_exits_with_error(tmp_path, schema_path):
    out = io.StringIO()
    payload = _payload(tmp_path, {"id": "p1"})

    code = main(["expand", "--schema", schema_path, "--model", "Ghost", payload], out=out)

    assert code == 1
    assert out.getvalue() == ""


def test_missing_payload_file_exits_with_error(tmp_path, schema_path):
    code = main(["expand", "--schema", schema_path, "--model", "Post", str(tmp_path / "none.json")], out=io.StringIO())

    assert code == 1


def test_validate_lists_models(schema_path):
    out = io.StringIO()

    assert main(["validate", schema_path], out=out) == 0
    assert json.loads(out.getvalue()) == {"status": "valid", "models": ["Post"]}


def test_validate_rejects_bad_schema(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([{"name": "X", "fields": [{"name": "y", "type": {"kind": "nope"}}]}]))

    assert main(["validate", str(path)], out=io.StringIO()) == 1


def test_no_command_prints_help():
    out = io.StringIO()

    assert main([], out=out) == 0
    assert "usage: modelbridge" in out.getvalue()


def test_validate_malformed_json_exits_with_error(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json")

    assert main(["validate", str(path)], out=io.StringIO()) == 1


def test_expand_with_malformed_yaml_schema_exits_with_error(tmp_path):
    schema = tmp_path / "bad.yaml"
    schema.write_text("models: [unclosed\n")
    payload = _payload(tmp_path, {"id": "p1"})

    assert main(["expand", "--schema", str(schema), "--model", "Post", payload], out=io.StringIO()) == 1


def test_expand_with_huge_integer_payload(tmp_path, schema_path):
    out = io.StringIO()
    payload = tmp_path / "big.json"
    payload.write_text('{"id": "p1", "createdOn": 1' + "0" * 400 + "}")

    code = main(["expand", "--schema", schema_path, "--model", "Post", str(payload)], out=out)

    assert code == 0
    assert json.loads(out.getvalue())["serializedData"]["createdOn"] == float("inf")
