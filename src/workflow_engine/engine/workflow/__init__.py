"""Workflow domain core.

This package holds:
- the definition and instance models
- the definition validator
- the transition engine and its precomputed definition index
- the typed results shared by all of them

Everything here is pure and in-memory. Storage, locking and transports live
outside this package.
"""

from .index import DefinitionIndex
from .models import ActionHistory, ActionTransition, State, WorkflowDefinition, WorkflowInstance
from .results import Accepted, Defect, Rejected, RejectionKind
from .transitions import TransitionOutcome, apply_action, available_actions, start_instance
from .validator import find_defects, validate_definition

__all__: list[str] = [
    "Accepted",
    "ActionHistory",
    "ActionTransition",
    "Defect",
    "DefinitionIndex",
    "Rejected",
    "RejectionKind",
    "State",
    "TransitionOutcome",
    "WorkflowDefinition",
    "WorkflowInstance",
    "apply_action",
    "available_actions",
    "find_defects",
    "start_instance",
    "validate_definition",
]
