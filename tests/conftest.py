"""Test configuration and fixtures."""

from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest

from workflow_engine.engine.registry import WorkflowRegistry
from workflow_engine.engine.workflow import ActionTransition, State, WorkflowDefinition


@pytest.fixture
def leave_approval() -> WorkflowDefinition:
    """Provide the leave-approval workflow: draft -> approved | rejected."""
    return WorkflowDefinition(
        id="leave-approval",
        name="Leave approval",
        states=(
            State(id="draft", name="Draft", is_initial=True),
            State(id="approved", name="Approved", is_final=True),
            State(id="rejected", name="Rejected", is_final=True),
        ),
        actions=(
            ActionTransition(id="approve", name="Approve", from_states=("draft",), to_state="approved"),
            ActionTransition(id="reject", name="Reject", from_states=("draft",), to_state="rejected"),
        ),
    )


@pytest.fixture
def ticket_workflow() -> WorkflowDefinition:
    """Provide a looping workflow with a disabled action and a self-transition."""
    return WorkflowDefinition(
        id="ticket",
        name="Support ticket",
        states=(
            State(id="open", is_initial=True),
            State(id="in_progress"),
            State(id="closed", is_final=True),
        ),
        actions=(
            ActionTransition(id="start", from_states=("open",), to_state="in_progress"),
            ActionTransition(id="comment", from_states=("open", "in_progress"), to_state="in_progress"),
            ActionTransition(id="escalate", enabled=False, from_states=("in_progress",), to_state="open"),
            ActionTransition(id="close", from_states=("in_progress", "closed"), to_state="closed"),
            ActionTransition(id="orphan", from_states=(), to_state="open"),
        ),
    )


@pytest.fixture
def sequential_ids() -> Callable[[], str]:
    """Provide a deterministic instance id factory."""
    counter = itertools.count(1)
    return lambda: f"inst-{next(counter)}"


@pytest.fixture
def registry(sequential_ids: Callable[[], str]) -> WorkflowRegistry:
    """Provide an empty in-memory registry with predictable instance ids."""
    return WorkflowRegistry(id_factory=sequential_ids)
