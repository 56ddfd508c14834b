"""
Command-line interface for the telephone RPC layer.

Useful for checking how a declared type compiles, whether a registry manifest
loads, and for dispatching a single call against a manifest without a web
server in front of it.
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from telephone.bootstrap import load_manifest
from telephone.core.exceptions import TelephoneError
from telephone.core.logger import configure_root_logger, get_logger
from telephone.dispatcher import RequestDispatcher
from telephone.models.dispatcher_config import DispatcherConfig
from telephone.models.response import error_response, success_response
from telephone.schema.parser import parse_type_annotation

logger = get_logger(__name__)


def parse(type_text: str) -> str:
    """Return the compiled schema of ``type_text`` as JSON."""
    return json.dumps(parse_type_annotation(type_text), indent=2)


def validate_manifest(manifest_path: str) -> Dict[str, List[str]]:
    """
    Load a manifest and return the registered functions per namespace.

    Raises:
        FileNotFoundError: If the manifest file doesn't exist
        RegistryError: If a module or function cannot be resolved
    """
    registry = load_manifest(manifest_path)
    summary = {ns: sorted(functions) for ns, functions in registry.items()}
    logger.info(f"Manifest is valid: {sum(len(v) for v in summary.values())} function(s)")
    return summary


def call(
    manifest_path: str,
    namespace: str,
    function_name: str,
    args: Optional[List[Any]] = None,
    *,
    config: Optional[DispatcherConfig] = None,
) -> Dict[str, Any]:
    """Dispatch one call and return ``{"status": ..., "body": ...}``."""
    dispatcher = RequestDispatcher(load_manifest(manifest_path), config)
    request = {"filePath": namespace, "functionName": function_name, "args": args or []}
    try:
        status, body = success_response(dispatcher.handle_sync(request))
    except TelephoneError as e:
        status, body = error_response(e)
    return {"status": status, "body": body}


def cli(argv: Optional[List[str]] = None) -> None:
    """
    Supports subcommands:
    - parse: Compile a type annotation and print its schema
    - validate: Load a registry manifest
    - call: Dispatch one RPC call against a manifest

    Usage:
        telephone parse "{ name: string; tags: string[] }"
        telephone validate rpc.yaml
        telephone call rpc.yaml src/lib/math.ts add '[5, 7]'
    """
    parser = argparse.ArgumentParser(
        prog="telephone",
        description="Typed RPC contract layer: type compiler and dispatcher"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    parse_parser = subparsers.add_parser("parse", help="Print the schema of a type annotation")
    parse_parser.add_argument("type_text", help="Declared type text, e.g. '{ name: string }'")

    validate_parser = subparsers.add_parser("validate", help="Load a registry manifest")
    validate_parser.add_argument("manifest", help="Path to manifest file (JSON or YAML)")

    call_parser = subparsers.add_parser("call", help="Dispatch one RPC call")
    call_parser.add_argument("manifest", help="Path to manifest file (JSON or YAML)")
    call_parser.add_argument("namespace", help="Namespace of the function")
    call_parser.add_argument("function", help="Function name")
    call_parser.add_argument("args", nargs="?", default="[]", help="JSON array of arguments")
    call_parser.add_argument(
        "--strict-null",
        action="store_true",
        help="Reject null/undefined for declared types"
    )

    args = parser.parse_args(argv)
    configure_root_logger("DEBUG" if args.verbose else "WARNING")

    if args.command == "parse":
        print(parse(args.type_text))
        sys.exit(0)

    elif args.command == "validate":
        try:
            print(json.dumps(validate_manifest(args.manifest), indent=2))
            sys.exit(0)
        except Exception as e:
            logger.error(f"Validation failed: {e}")
            sys.exit(1)

    elif args.command == "call":
        try:
            call_args = json.loads(args.args)
            if not isinstance(call_args, list):
                raise ValueError("args must be a JSON array")
            outcome = call(
                args.manifest,
                args.namespace,
                args.function,
                call_args,
                config=DispatcherConfig(allow_null=not args.strict_null),
            )
        except Exception as e:
            logger.error(f"Call failed: {e}")
            sys.exit(1)
        print(json.dumps(outcome["body"], indent=2, default=str))
        sys.exit(0 if outcome["status"] == 200 else 1)

    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    cli()
