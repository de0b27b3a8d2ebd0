"""Definition validation.

Every check runs and every defect is reported, in check order. The first
defect decides the rejection kind. Only ``to_state`` is checked on actions;
``from_states`` entries are accepted as given.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Container, Iterable

from .models import WorkflowDefinition
from .results import Accepted, Defect, Rejected, RejectionKind


def _duplicates(ids: Iterable[str]) -> list[str]:
    counts = Counter(ids)
    return [value for value, n in counts.items() if n > 1]


def find_defects(
    definition: WorkflowDefinition, *, existing_ids: Container[str] = ()
) -> list[Defect]:
    defects: list[Defect] = []

    if not definition.id.strip():
        defects.append(
            Defect(RejectionKind.DUPLICATE_OR_MISSING_DEFINITION_ID, "Missing workflow id.")
        )
    elif definition.id in existing_ids:
        defects.append(
            Defect(
                RejectionKind.DUPLICATE_OR_MISSING_DEFINITION_ID,
                f"Duplicate workflow id: {definition.id!r}.",
            )
        )

    initial_count = len(definition.initial_states())
    if initial_count != 1:
        defects.append(
            Defect(
                RejectionKind.INVALID_INITIAL_STATE_COUNT,
                f"Workflow should have exactly one initial state (found {initial_count}).",
            )
        )

    duplicate_states = _duplicates(s.id for s in definition.states)
    if duplicate_states:
        defects.append(
            Defect(
                RejectionKind.DUPLICATE_STATE_ID,
                f"Duplicate state ids found: {', '.join(duplicate_states)}.",
            )
        )

    duplicate_actions = _duplicates(a.id for a in definition.actions)
    if duplicate_actions:
        defects.append(
            Defect(
                RejectionKind.DUPLICATE_ACTION_ID,
                f"Duplicate action ids found: {', '.join(duplicate_actions)}.",
            )
        )

    state_ids = {s.id for s in definition.states}
    for action in definition.actions:
        if not action.to_state.strip() or action.to_state not in state_ids:
            defects.append(
                Defect(
                    RejectionKind.INVALID_ACTION_TARGET,
                    f"Invalid target state {action.to_state!r} for action: {action.id}.",
                )
            )

    return defects


def validate_definition(
    definition: WorkflowDefinition, *, existing_ids: Container[str] = ()
) -> Accepted[WorkflowDefinition] | Rejected:
    """Check a proposed definition without touching any store.

    ``existing_ids`` is whatever the caller uses to know which definition ids
    are already taken (a set, or a repository supporting ``in``).
    """

    defects = find_defects(definition, existing_ids=existing_ids)
    if defects:
        return Rejected.from_defects(defects)
    return Accepted(definition)
