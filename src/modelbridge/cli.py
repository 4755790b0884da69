"""
Command-line interface for modelbridge.

Reads a JSON payload (file path or ``-`` for stdin), loads model schemas from
a JSON/YAML file and prints either the full transport shape or a single
coerced field as JSON.

Usage:
    modelbridge expand --schema models.yaml --model Post payload.json
    modelbridge read --schema models.yaml --model Post --field createdAt payload.json
    modelbridge validate models.yaml
"""

import argparse
import json
import sys
from pathlib import Path
from typing import IO, List, Optional

from modelbridge.bridge import ModelBridge
from modelbridge.core.diagnostics import LoggingDiagnosticSink
from modelbridge.core.exceptions import ModelBridgeException
from modelbridge.core.logger import get_logger
from modelbridge.models.bridge_config import BridgeConfig
from modelbridge.schema.registry import load_schema_file

logger = get_logger(__name__)


def _read_payload(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    payload_file = Path(source)
    if not payload_file.exists():
        raise FileNotFoundError(f"Payload file not found: {source}")
    return payload_file.read_text(encoding="utf-8")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modelbridge",
        description="Schema-driven coercion of untyped JSON records",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    expand_parser = subparsers.add_parser("expand", help="Print the transport shape of a payload")
    read_parser = subparsers.add_parser("read", help="Print one field coerced by its declared type")
    for sub in (expand_parser, read_parser):
        sub.add_argument("--schema", required=True, help="Path to schema file (JSON or YAML)")
        sub.add_argument("--model", required=True, help="Model name of the payload")
        sub.add_argument("--id", default=None, help="Identifier to use when the payload has none")
        sub.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
        sub.add_argument("payload", nargs="?", default="-", help="Payload file, or - for stdin")
    read_parser.add_argument("--field", required=True, help="Field name to read")

    validate_parser = subparsers.add_parser("validate", help="Validate a schema file")
    validate_parser.add_argument("schema", help="Path to schema file (JSON or YAML)")

    return parser


def main(argv: Optional[List[str]] = None, out: Optional[IO[str]] = None) -> int:
    """
    Run one CLI command and return its exit code.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.
        out: Stream for JSON results; defaults to stdout.

    Returns:
        0 on success, 1 when the schema, payload or model is invalid.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    out = out or sys.stdout

    if args.command is None:
        parser.print_help(out)
        return 0

    try:
        if args.command == "validate":
            registry = load_schema_file(args.schema)
            out.write(json.dumps({"status": "valid", "models": registry.model_names()}) + "\n")
            return 0

        config = BridgeConfig.from_env()
        if args.verbose:
            config = config.model_copy(update={"log_level": "DEBUG"})
        registry = load_schema_file(args.schema)
        bridge = ModelBridge(registry, config=config, sink=LoggingDiagnosticSink(logger))
        record = bridge.decode(_read_payload(args.payload), id=args.id)

        if args.command == "expand":
            result = bridge.expand(record, args.model)
        else:
            result = bridge.read_field(record, args.field, args.model)

        out.write(json.dumps(result, default=str, ensure_ascii=False) + "\n")
        return 0

    except (ModelBridgeException, FileNotFoundError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
