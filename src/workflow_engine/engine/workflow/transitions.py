"""Transition engine.

Checks run in a fixed order and the first failure decides the rejection, so
the same bad request always yields the same answer. Nothing is mutated: on
success a new instance value is returned and the input is left untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from .index import DefinitionIndex
from .models import ActionHistory, WorkflowDefinition, WorkflowInstance
from .results import Accepted, Rejected, RejectionKind


@dataclass(frozen=True, slots=True)
class TransitionOutcome:
    instance: WorkflowInstance
    entry: ActionHistory
    from_state_id: str

    @property
    def to_state_id(self) -> str:
        return self.instance.current_state_id


def _index(definition: WorkflowDefinition | DefinitionIndex) -> DefinitionIndex:
    if isinstance(definition, DefinitionIndex):
        return definition
    return DefinitionIndex.build(definition)


def _timestamp(instance: WorkflowInstance, now: datetime | None) -> datetime:
    ts = now if now is not None else datetime.now(tz=UTC)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    else:
        ts = ts.astimezone(UTC)
    # Keep history non-decreasing even if the wall clock steps backwards.
    if instance.history and instance.history[-1].timestamp > ts:
        return instance.history[-1].timestamp
    return ts


def apply_action(
    definition: WorkflowDefinition | DefinitionIndex,
    instance: WorkflowInstance,
    action_id: str,
    *,
    now: datetime | None = None,
) -> Accepted[TransitionOutcome] | Rejected:
    index = _index(definition)
    current_id = instance.current_state_id

    action = index.actions.get(action_id)
    if action is None:
        return Rejected.single(
            RejectionKind.ACTION_NOT_FOUND, f"No such action in the workflow: {action_id!r}."
        )

    if not action.enabled:
        return Rejected.single(
            RejectionKind.ACTION_DISABLED, f"Action {action_id!r} is currently disabled."
        )

    current = index.states.get(current_id)
    if current is None:
        return Rejected.single(
            RejectionKind.BROKEN_DEFINITION,
            f"Current state {current_id!r} is not defined. Definition might be broken.",
        )
    if current.is_final:
        return Rejected.single(
            RejectionKind.CURRENT_STATE_IS_FINAL,
            f"Current state {current_id!r} is final. Can't move forward.",
        )

    if not index.can_start_from(action_id, current_id):
        return Rejected.single(
            RejectionKind.TRANSITION_NOT_ALLOWED_FROM_CURRENT_STATE,
            f"Action {action_id!r} is not valid from current state {current_id!r}.",
        )

    target = index.states.get(action.to_state)
    if target is None:
        return Rejected.single(
            RejectionKind.BROKEN_DEFINITION,
            f"Next state {action.to_state!r} not found. Definition might be broken.",
        )

    entry = ActionHistory(action_id=action.id, timestamp=_timestamp(instance, now))
    updated = instance.model_copy(
        update={"current_state_id": target.id, "history": (*instance.history, entry)}
    )
    return Accepted(TransitionOutcome(instance=updated, entry=entry, from_state_id=current_id))


def available_actions(
    definition: WorkflowDefinition | DefinitionIndex, instance: WorkflowInstance
) -> list[str]:
    """Ids of the actions that would currently be accepted for ``instance``."""

    index = _index(definition)
    current = index.states.get(instance.current_state_id)
    if current is None or current.is_final:
        return []
    return [
        action_id
        for action_id in index.outgoing_actions(current.id)
        if index.actions[action_id].enabled and index.actions[action_id].to_state in index.states
    ]


def start_instance(
    definition: WorkflowDefinition | DefinitionIndex, instance_id: str
) -> Accepted[WorkflowInstance] | Rejected:
    index = _index(definition)
    initial = index.initial_state()
    if initial is None:
        return Rejected.single(
            RejectionKind.BROKEN_DEFINITION,
            f"Workflow {index.id!r} has no initial state. Check the workflow definition.",
        )
    return Accepted(
        WorkflowInstance(
            id=instance_id,
            definition_id=index.id,
            current_state_id=initial.id,
            history=(),
        )
    )
