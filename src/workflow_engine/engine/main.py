"""CLI entrypoint for the workflow engine."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from workflow_engine import __version__
from workflow_engine.engine.config import EngineSettings
from workflow_engine.engine.loader import load_definition
from workflow_engine.engine.logging import configure_logging
from workflow_engine.engine.registry import WorkflowRegistry
from workflow_engine.engine.workflow import Rejected, WorkflowDefinition, validate_definition

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-engine",
        description="Define finite-state workflows and drive instances through them",
    )
    parser.add_argument("--version", action="version", version=f"workflow-engine {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate a workflow definition file")
    validate.add_argument("file", type=Path, help="Path to a definition JSON file")

    simulate = subparsers.add_parser(
        "simulate",
        help="Start one instance of a definition and apply actions to it in order",
    )
    simulate.add_argument("file", type=Path, help="Path to a definition JSON file")
    simulate.add_argument(
        "--action",
        dest="actions",
        action="append",
        default=[],
        help="Action id to apply (repeat for several, applied in order)",
    )

    serve = subparsers.add_parser("serve", help="Run the REST API")
    serve.add_argument("--host", default=None, help="Bind address (default: WORKFLOW_ENGINE_HOST)")
    serve.add_argument(
        "--port", type=int, default=None, help="Bind port (default: WORKFLOW_ENGINE_PORT)"
    )

    return parser


def _read_definition(path: Path) -> WorkflowDefinition | None:
    try:
        return load_definition(path)
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
    except ValidationError as e:
        print(f"Not a workflow definition: {path}", file=sys.stderr)
        print(e, file=sys.stderr)
    return None


def _print_rejection(rejection: Rejected) -> None:
    for defect in rejection.defects:
        print(f"{defect.kind.value}: {defect.message}")


def _validate(path: Path) -> int:
    definition = _read_definition(path)
    if definition is None:
        return 2

    result = validate_definition(definition)
    if isinstance(result, Rejected):
        _print_rejection(result)
        return 1
    print(f"OK {definition.id}")
    return 0


def _simulate(path: Path, actions: list[str]) -> int:
    definition = _read_definition(path)
    if definition is None:
        return 2

    registry = WorkflowRegistry()
    created = registry.create_definition(definition)
    if isinstance(created, Rejected):
        _print_rejection(created)
        return 1

    started = registry.create_instance(definition.id)
    if isinstance(started, Rejected):
        _print_rejection(started)
        return 1
    instance = started.value
    print(f"start -> {instance.current_state_id}")

    for action_id in actions:
        applied = registry.apply_action(instance.id, action_id)
        if isinstance(applied, Rejected):
            _print_rejection(applied)
            return 1
        instance = applied.value
        print(f"{action_id} -> {instance.current_state_id}")

    print(json.dumps(instance.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False))
    return 0


def _serve(host: str | None, port: int | None) -> int:
    import uvicorn

    from workflow_engine.server.app import create_app
    from workflow_engine.server.config import ServerSettings

    server_settings = ServerSettings()
    host = host if host is not None else server_settings.host
    port = port if port is not None else server_settings.port
    logger.info("Starting server", extra={"host": host, "port": port})
    uvicorn.run(create_app(server_settings), host=host, port=port, log_config=None)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = EngineSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if args.command == "validate":
        return _validate(args.file)
    if args.command == "simulate":
        return _simulate(args.file, args.actions)
    if args.command == "serve":
        return _serve(args.host, args.port)

    parser.error(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
