"""Workflow registry: the single entry point callers use to drive the core.

The registry validates definitions before storing them, seeds new instances at
the initial state, and applies actions under the instance's lock so concurrent
actions on one instance are serialized.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from .repository import DefinitionIds, InMemoryWorkflowRepository, WorkflowRepository
from .workflow import (
    Accepted,
    DefinitionIndex,
    Rejected,
    RejectionKind,
    WorkflowDefinition,
    WorkflowInstance,
    apply_action,
    available_actions,
    start_instance,
    validate_definition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActionChoices:
    """An instance together with the actions it accepts, read at the same moment."""

    instance: WorkflowInstance
    actions: list[str]


def _new_instance_id() -> str:
    return str(uuid.uuid4())


class WorkflowRegistry:
    def __init__(
        self,
        repository: WorkflowRepository | None = None,
        *,
        id_factory: Callable[[], str] = _new_instance_id,
    ) -> None:
        self._repository = repository if repository is not None else InMemoryWorkflowRepository()
        self._new_id = id_factory

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------
    def create_definition(
        self, definition: WorkflowDefinition
    ) -> Accepted[WorkflowDefinition] | Rejected:
        result = validate_definition(definition, existing_ids=DefinitionIds(self._repository))
        if isinstance(result, Rejected):
            logger.warning(
                "Workflow definition rejected",
                extra={
                    "definition_id": definition.id,
                    "kind": result.kind.value,
                    "defects": [d.message for d in result.defects],
                },
            )
            return result

        # The id may have been taken between validation and insertion.
        if not self._repository.add_definition(DefinitionIndex.build(definition)):
            logger.warning(
                "Workflow definition rejected",
                extra={"definition_id": definition.id, "kind": "DuplicateOrMissingDefinitionId"},
            )
            return Rejected.single(
                RejectionKind.DUPLICATE_OR_MISSING_DEFINITION_ID,
                f"Duplicate workflow id: {definition.id!r}.",
            )

        logger.info(
            "Workflow definition created",
            extra={
                "definition_id": definition.id,
                "states": len(definition.states),
                "actions": len(definition.actions),
            },
        )
        return Accepted(definition)

    def get_definition(self, definition_id: str) -> Accepted[WorkflowDefinition] | Rejected:
        index = self._repository.get_definition(definition_id)
        if index is None:
            return self._definition_not_found(definition_id)
        return Accepted(index.definition)

    def list_definitions(self) -> list[WorkflowDefinition]:
        return [index.definition for index in self._repository.list_definitions()]

    # ------------------------------------------------------------------
    # Instances
    # ------------------------------------------------------------------
    def create_instance(self, definition_id: str) -> Accepted[WorkflowInstance] | Rejected:
        index = self._repository.get_definition(definition_id)
        if index is None:
            return self._definition_not_found(definition_id)

        while True:
            result = start_instance(index, self._new_id())
            if isinstance(result, Rejected):
                return result
            if self._repository.add_instance(result.value):
                break

        logger.info(
            "Workflow instance started",
            extra={
                "instance_id": result.value.id,
                "definition_id": definition_id,
                "state_id": result.value.current_state_id,
            },
        )
        return result

    def get_instance(self, instance_id: str) -> Accepted[WorkflowInstance] | Rejected:
        instance = self._repository.get_instance(instance_id)
        if instance is None:
            return self._instance_not_found(instance_id)
        return Accepted(instance)

    def list_instances(self) -> list[WorkflowInstance]:
        return self._repository.list_instances()

    def available_actions(self, instance_id: str) -> Accepted[ActionChoices] | Rejected:
        instance = self._repository.get_instance(instance_id)
        if instance is None:
            return self._instance_not_found(instance_id)
        index = self._repository.get_definition(instance.definition_id)
        if index is None:
            return self._definition_not_found(instance.definition_id)
        # One read of a frozen instance, so state and actions always agree.
        actions = available_actions(index, instance)
        return Accepted(ActionChoices(instance=instance, actions=actions))

    def apply_action(
        self, instance_id: str, action_id: str
    ) -> Accepted[WorkflowInstance] | Rejected:
        if self._repository.get_instance(instance_id) is None:
            return self._instance_not_found(instance_id)

        with self._repository.lock_instance(instance_id):
            # Re-read under the lock; a concurrent action may have moved it.
            instance = self._repository.get_instance(instance_id)
            if instance is None:
                return self._instance_not_found(instance_id)
            index = self._repository.get_definition(instance.definition_id)
            if index is None:
                return self._definition_not_found(instance.definition_id)

            result = apply_action(index, instance, action_id)
            if isinstance(result, Rejected):
                log = logger.error if result.kind.is_invariant_violation else logger.warning
                log(
                    "Action rejected",
                    extra={
                        "instance_id": instance_id,
                        "action_id": action_id,
                        "state_id": instance.current_state_id,
                        "kind": result.kind.value,
                    },
                )
                return result

            outcome = result.value
            self._repository.save_instance(outcome.instance)

        logger.info(
            "Action applied",
            extra={
                "instance_id": instance_id,
                "action_id": action_id,
                "from_state_id": outcome.from_state_id,
                "to_state_id": outcome.to_state_id,
            },
        )
        return Accepted(outcome.instance)

    # ------------------------------------------------------------------
    def _definition_not_found(self, definition_id: str) -> Rejected:
        return Rejected.single(
            RejectionKind.DEFINITION_NOT_FOUND,
            f"Workflow not found: {definition_id!r}. Check the id.",
        )

    def _instance_not_found(self, instance_id: str) -> Rejected:
        return Rejected.single(
            RejectionKind.INSTANCE_NOT_FOUND,
            f"Workflow instance not found: {instance_id!r}. Check the id.",
        )
