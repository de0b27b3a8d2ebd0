"""Read workflow definitions from JSON files."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from .registry import WorkflowRegistry
from .workflow import Rejected, WorkflowDefinition

logger = logging.getLogger(__name__)


def load_definition(path: Path) -> WorkflowDefinition:
    """Parse one definition file.

    Raises:
        OSError: the file cannot be read.
        pydantic.ValidationError: the content is not a definition object.
    """

    return WorkflowDefinition.model_validate_json(path.read_text(encoding="utf-8"))


def register_directory(registry: WorkflowRegistry, directory: Path) -> list[str]:
    """Register every ``*.json`` definition under ``directory``, in name order.

    Returns the ids that were accepted. Unreadable, malformed and rejected files
    are logged and skipped, so one bad file never blocks the others.
    """

    accepted: list[str] = []
    for path in sorted(directory.glob("*.json")):
        try:
            definition = load_definition(path)
        except (OSError, ValidationError) as e:
            logger.warning(
                "Skipping unreadable definition file",
                extra={"path": str(path), "error": str(e)},
            )
            continue
        result = registry.create_definition(definition)
        if isinstance(result, Rejected):
            logger.warning(
                "Skipping definition file",
                extra={"path": str(path), "kind": result.kind.value, "reason": result.reason},
            )
            continue
        accepted.append(result.value.id)

    logger.info(
        "Definitions loaded", extra={"path": str(directory), "count": len(accepted)}
    )
    return accepted
