"""Adjacency view over a workflow definition.

Built once per definition so the engine can answer "which actions leave this
state" and "may this action start here" without rescanning the definition.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .models import ActionTransition, State, WorkflowDefinition


@dataclass(frozen=True, slots=True)
class DefinitionIndex:
    definition: WorkflowDefinition
    states: Mapping[str, State]
    actions: Mapping[str, ActionTransition]
    sources: Mapping[str, frozenset[str]]
    outgoing: Mapping[str, tuple[str, ...]]

    @classmethod
    def build(cls, definition: WorkflowDefinition) -> DefinitionIndex:
        # First occurrence wins so an unvalidated definition with duplicate ids
        # still resolves deterministically.
        states: dict[str, State] = {}
        for state in definition.states:
            states.setdefault(state.id, state)

        actions: dict[str, ActionTransition] = {}
        for action in definition.actions:
            actions.setdefault(action.id, action)

        sources: dict[str, frozenset[str]] = {}
        outgoing: dict[str, list[str]] = {}
        for action_id, action in actions.items():
            sources[action_id] = frozenset(action.from_states)
            for state_id in action.from_states:
                ids = outgoing.setdefault(state_id, [])
                if action_id not in ids:
                    ids.append(action_id)

        return cls(
            definition=definition,
            states=MappingProxyType(states),
            actions=MappingProxyType(actions),
            sources=MappingProxyType(sources),
            outgoing=MappingProxyType({k: tuple(v) for k, v in outgoing.items()}),
        )

    @property
    def id(self) -> str:
        return self.definition.id

    def initial_state(self) -> State | None:
        for state in self.definition.states:
            if state.is_initial:
                return state
        return None

    def can_start_from(self, action_id: str, state_id: str) -> bool:
        return state_id in self.sources.get(action_id, frozenset())

    def outgoing_actions(self, state_id: str) -> tuple[str, ...]:
        return self.outgoing.get(state_id, ())
