"""Workflow definition and instance models.

Definitions (and the states/actions inside them) are frozen once built.
Instances are frozen too: the transition engine returns an updated copy and
the registry swaps it in.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    # camelCase on the wire, snake_case in Python; either is accepted on input.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class State(_WireModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = ""
    is_initial: bool = False
    is_final: bool = False
    enabled: bool = True


class ActionTransition(_WireModel):
    """A named rule moving an instance from any of ``from_states`` to ``to_state``."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    enabled: bool = True
    from_states: tuple[str, ...] = ()
    to_state: str = ""


class WorkflowDefinition(_WireModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    name: str = ""
    states: tuple[State, ...] = ()
    actions: tuple[ActionTransition, ...] = ()

    def initial_states(self) -> list[State]:
        return [s for s in self.states if s.is_initial]


class ActionHistory(_WireModel):
    model_config = ConfigDict(frozen=True)

    action_id: str
    timestamp: datetime


class WorkflowInstance(_WireModel):
    """Runtime record of one machine: where it is and how it got there.

    Frozen like the definition: a transition yields a new value, and only the
    registry swaps it into storage.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    definition_id: str
    current_state_id: str
    history: tuple[ActionHistory, ...] = ()
